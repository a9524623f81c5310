"""
Kinematic chain facade over a kinematics solver.

The chain is the single owner of the arm's pose: the joint-angle vector, the
base-frame offset, and the position buffer recomputed from both.  It is
paired one-to-one with a solver whose lifetime it controls.

Coordinate convention: the solver works in its local frame, anchored at the
base position it was created with.  The chain's base-frame offset is a
world-space displacement of that whole frame.  Positions reported by the
chain are ``local + offset`` and ``solve`` receives world targets, which are
shifted by ``-offset`` before reaching the solver.  Anything that captures a
point from the chain and later solves for it therefore stays in one frame.

Classes:
    KinematicChain: Joint-angle state and solver facade.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

import numpy as np

from arm_stabilizer_sim.robots.errors import (
    ChainClosedError,
    ContractViolation,
    CreationError,
)
from arm_stabilizer_sim.robots.solvers import KinematicsSolver, SolveOutcome
from arm_stabilizer_sim.utils.helpers import as_point, radians_to_degrees

logger = logging.getLogger(__name__)

SolverFactory = Callable[[np.ndarray], Optional[KinematicsSolver]]


class KinematicChain:
    """Joint-angle state of one arm plus the solver that animates it.

    Construct with ``KinematicChain.create``.  Every mutation forward-solves
    synchronously, so ``joint_positions`` always reflects the latest
    ``set_angles`` / ``set_base_offset`` call.

    Attributes:
        last_solve_reached: Status of the most recent ``solve`` call.
    """

    def __init__(self, solver: KinematicsSolver) -> None:
        """Wrap an already-constructed solver.

        Prefer ``create``, which also handles construction failures.

        Args:
            solver: The solver this chain takes ownership of.
        """
        self._solver = solver
        self._dof = int(solver.joint_count)
        limits = solver.joint_limits
        self._limits = None if limits is None else np.asarray(limits, dtype=np.float64)
        self._angles = np.zeros(self._dof)
        self._base_offset = np.zeros(3)
        self._positions = np.zeros((self._dof + 1, 3))
        self._closed = False
        self.last_solve_reached = True
        self._apply_pose()

    @classmethod
    def create(
        cls,
        solver_factory: SolverFactory,
        base_position: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> "KinematicChain":
        """Create a solver and pair it with a new chain.

        Args:
            solver_factory: Callable building a solver from a base position.
            base_position: Base position handed to the solver.

        Returns:
            A ready-to-use ``KinematicChain`` at the zero pose.

        Raises:
            CreationError: If the solver could not be built or reports an
                invalid joint count.  No solver is left open in that case.
        """
        base = as_point(base_position)
        try:
            solver = solver_factory(base)
        except Exception as exc:
            logger.error("Kinematics solver creation failed: %s", exc)
            raise CreationError(f"Could not create kinematics solver: {exc}") from exc
        if solver is None:
            logger.error("Kinematics solver factory returned no solver")
            raise CreationError("Kinematics solver factory returned no solver")
        if solver.joint_count < 0:
            logger.error(
                "Kinematics solver reported invalid joint count %d", solver.joint_count
            )
            solver.close()
            raise CreationError(f"Invalid joint count {solver.joint_count}")
        try:
            chain = cls(solver)
        except Exception as exc:
            solver.close()
            raise CreationError(f"Initial forward solve failed: {exc}") from exc
        logger.info("Kinematic chain created with %d joints at base %s", chain.dof, base)
        return chain

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        """Whether the solver has been released."""
        return self._closed

    def close(self) -> None:
        """Release the solver.  Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._solver.close()
        logger.info("Kinematic chain closed")

    def __enter__(self) -> "KinematicChain":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _ensure_open(self) -> None:
        """Raise if the chain has been closed.

        Raises:
            ChainClosedError: After ``close``.
        """
        if self._closed:
            raise ChainClosedError("Kinematic chain is closed")

    # ------------------------------------------------------------------
    # Pose
    # ------------------------------------------------------------------

    @property
    def dof(self) -> int:
        """Degree of freedom N, fixed for the chain's lifetime."""
        return self._dof

    @property
    def max_reach(self) -> float:
        """Farthest distance from the base the end-effector can reach."""
        self._ensure_open()
        return float(self._solver.max_reach)

    def degree_of_freedom(self) -> int:
        """Return the degree of freedom N."""
        self._ensure_open()
        return self._dof

    @property
    def angles(self) -> np.ndarray:
        """Copy of the current joint angles (radians)."""
        self._ensure_open()
        return self._angles.copy()

    def angles_deg(self) -> np.ndarray:
        """Return the current joint angles in degrees."""
        self._ensure_open()
        return radians_to_degrees(self._angles)

    def set_angles(self, angles: Sequence[float] | np.ndarray) -> None:
        """Store a new pose and forward-solve it.

        Angles outside the solver's joint limits are clipped so the stored
        vector always matches the solved positions.

        Args:
            angles: Exactly N joint angles in radians.

        Raises:
            ContractViolation: If *angles* is not a 1-D vector of length N.
            ChainClosedError: If the chain has been closed.
        """
        self._ensure_open()
        vector = np.asarray(angles, dtype=np.float64)
        if vector.ndim != 1:
            raise ContractViolation(
                f"Joint angles must be a 1-D vector, got shape {vector.shape}"
            )
        if vector.shape[0] != self._dof:
            raise ContractViolation(
                f"Expected {self._dof} joint angles, got {vector.shape[0]}"
            )
        if self._limits is not None:
            vector = np.clip(vector, self._limits[:, 0], self._limits[:, 1])
        self._angles = vector.copy()
        self._apply_pose()

    @property
    def base_offset(self) -> np.ndarray:
        """Copy of the base-frame offset (world space)."""
        self._ensure_open()
        return self._base_offset.copy()

    def set_base_offset(self, offset: Sequence[float] | np.ndarray) -> None:
        """Move the base frame and recompute positions.

        Args:
            offset: World-space displacement of the base frame.
        """
        self._ensure_open()
        self._base_offset = as_point(offset)
        self._refresh_positions()

    def joint_positions(self) -> np.ndarray:
        """Return the ``(N + 1, 3)`` world positions, base first, effector last."""
        self._ensure_open()
        return self._positions.copy()

    def end_effector(self) -> np.ndarray:
        """Return the end-effector world position."""
        self._ensure_open()
        return self._positions[-1].copy()

    # ------------------------------------------------------------------
    # Inverse solve
    # ------------------------------------------------------------------

    def solve(self, target: Sequence[float] | np.ndarray) -> SolveOutcome:
        """Ask the solver for angles reaching a world-space *target*.

        The stored angles are left untouched; the caller decides whether to
        apply the result.  Only ``last_solve_reached`` is updated.

        Args:
            target: World-space target point.

        Returns:
            The solver's ``SolveOutcome``.
        """
        self._ensure_open()
        local = as_point(target) - self._base_offset
        outcome = self._solver.solve(local)
        self.last_solve_reached = outcome.reached
        if not outcome.reached:
            logger.debug("Target %s unreachable", np.round(local, 4))
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply_pose(self) -> None:
        """Push the stored angles into the solver and refresh positions."""
        self._solver.set_angles(self._angles.copy())
        self._refresh_positions()

    def _refresh_positions(self) -> None:
        """Rebuild the world-space position buffer from the solver."""
        local = np.asarray(self._solver.joint_positions(), dtype=np.float64)
        self._positions = local.reshape(self._dof + 1, 3) + self._base_offset
