"""
Kinematics solvers behind the ``KinematicChain`` facade.

A solver owns a pose (joint angles), reports joint positions in its own
local frame, and answers inverse queries without touching that pose.  Two
implementations are provided:

* ``SerialArmSolver`` models a 4-joint serial arm (axes Z, Y, X, Y) and
  inverts it with damped least squares on a finite-difference Jacobian.
* ``PlanarTwoLinkSolver`` is a closed-form two-link arm in the XY plane.
  Its unique elbow-branch solution makes it a deterministic stand-in for
  controller tests.

Classes:
    SolveOutcome: Tagged result of an inverse solve.
    KinematicsSolver: Abstract solver interface.
    SerialArmConfig: Geometry and tuning of the serial arm.
    SerialArmSolver: Numeric inverse kinematics for the serial arm.
    PlanarTwoLinkSolver: Analytic inverse kinematics for a planar arm.

Functions:
    build_solver: Create a solver by registry name.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from arm_stabilizer_sim.utils.constants import (
    IK_DAMPING,
    IK_DAMPING_MAX_MULTIPLIER,
    IK_DAMPING_SCALING,
    IK_FD_STEP,
    IK_MAX_ITERATIONS,
    IK_MAX_STEP,
    IK_TOLERANCE,
    PLANAR_LINK_LENGTHS,
    SERIAL_JOINT_AXES,
    SERIAL_JOINT_LOWER,
    SERIAL_JOINT_UPPER,
    SERIAL_LINK_LENGTHS,
)
from arm_stabilizer_sim.utils.helpers import as_point

logger = logging.getLogger(__name__)


# ======================================================================
# Solve outcome
# ======================================================================


@dataclass(frozen=True)
class SolveOutcome:
    """Result of an inverse solve: either reached with angles, or unreachable.

    A partial or best-effort solution is never returned; an unreachable
    outcome carries no angles at all.

    Attributes:
        reached: Whether the target was reached within tolerance.
        angles: Joint angles (radians) reaching the target, or *None*.
    """

    reached: bool
    angles: Optional[np.ndarray] = None

    @classmethod
    def success(cls, angles: np.ndarray) -> "SolveOutcome":
        """Build a reached outcome holding a copy of *angles*."""
        return cls(reached=True, angles=np.array(angles, dtype=np.float64))

    @classmethod
    def unreachable(cls) -> "SolveOutcome":
        """Build an unreachable outcome."""
        return cls(reached=False, angles=None)


# ======================================================================
# Solver interface
# ======================================================================


class KinematicsSolver(abc.ABC):
    """Abstract interface for the kinematics engine driven by the chain.

    Positions are expressed in the solver's local frame, whose origin is the
    base position given at construction.  The chain adds its base-frame
    offset on top.

    Attributes:
        base_position: Local-frame position of joint 0.
    """

    def __init__(self, base_position: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        """Initialise the solver base.

        Args:
            base_position: Position of the arm's base joint.
        """
        self.base_position = as_point(base_position)

    @property
    @abc.abstractmethod
    def joint_count(self) -> int:
        """Number of independently controllable joints (fixed)."""
        raise NotImplementedError

    @property
    def joint_limits(self) -> Optional[np.ndarray]:
        """Per-joint ``(lower, upper)`` limits in radians, or *None* if unlimited."""
        return None

    @property
    @abc.abstractmethod
    def max_reach(self) -> float:
        """Farthest distance from the base the end-effector can reach."""
        raise NotImplementedError

    @abc.abstractmethod
    def set_angles(self, angles: np.ndarray) -> None:
        """Store a pose and forward-solve it.

        Args:
            angles: Joint angles in radians, one per joint.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def joint_positions(self) -> np.ndarray:
        """Return the ``(joint_count + 1, 3)`` positions of the stored pose."""
        raise NotImplementedError

    @abc.abstractmethod
    def solve(self, target: np.ndarray) -> SolveOutcome:
        """Compute angles that put the end-effector at *target*.

        Must not modify the stored pose.

        Args:
            target: Local-frame target point.

        Returns:
            The ``SolveOutcome`` of the query.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release solver resources.  Pure-Python solvers hold none."""


# ======================================================================
# Serial arm (numeric inverse)
# ======================================================================


def _rotation_matrix(axis: str, angle: float) -> np.ndarray:
    """Return the 3x3 rotation about a principal *axis* by *angle* radians.

    Args:
        axis: One of ``'x'``, ``'y'``, ``'z'``.
        angle: Rotation angle in radians.

    Returns:
        A ``(3, 3)`` rotation matrix.

    Raises:
        ValueError: If *axis* is not a principal axis name.
    """
    c, s = np.cos(angle), np.sin(angle)
    if axis == "x":
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])
    if axis == "y":
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])
    if axis == "z":
        return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    raise ValueError(f"Unknown joint axis '{axis}'. Choose from ['x', 'y', 'z']")


@dataclass
class SerialArmConfig:
    """Geometry and inverse-solve tuning of the serial arm.

    Every link rests along +Y.  The direction of link *i* is rotated by
    joints ``0..i`` in order, then scaled by the link length.

    Attributes:
        joint_axes: Rotation axis of each joint.
        link_lengths: Length of the link following each joint.
        joint_lower: Per-joint lower limits (radians).
        joint_upper: Per-joint upper limits (radians).
        tolerance: Distance at which a target counts as reached.
        max_iterations: Solver iterations before giving up.
        fd_step: Finite-difference step used to estimate the Jacobian.
        damping: Base damping of the least-squares step.
        damping_scaling: Growth of the damping with log(1 + condition number).
        damping_max_multiplier: Cap on the damping, as a multiple of ``damping``.
        max_step: Largest per-joint change in one iteration (radians).
    """

    joint_axes: Tuple[str, ...] = SERIAL_JOINT_AXES
    link_lengths: Tuple[float, ...] = SERIAL_LINK_LENGTHS
    joint_lower: Tuple[float, ...] = SERIAL_JOINT_LOWER
    joint_upper: Tuple[float, ...] = SERIAL_JOINT_UPPER
    tolerance: float = IK_TOLERANCE
    max_iterations: int = IK_MAX_ITERATIONS
    fd_step: float = IK_FD_STEP
    damping: float = IK_DAMPING
    damping_scaling: float = IK_DAMPING_SCALING
    damping_max_multiplier: float = IK_DAMPING_MAX_MULTIPLIER
    max_step: float = IK_MAX_STEP

    def __post_init__(self) -> None:
        """Check that all per-joint tuples describe the same number of joints."""
        n = len(self.joint_axes)
        sizes = {len(self.link_lengths), len(self.joint_lower), len(self.joint_upper)}
        if sizes != {n}:
            raise ValueError(
                "joint_axes, link_lengths, joint_lower and joint_upper "
                "must all have the same length"
            )


class SerialArmSolver(KinematicsSolver):
    """Serial revolute arm inverted by damped least squares.

    The inverse solve starts from the stored pose and repeats
    ``dq = J^T (J J^T + lambda^2 I)^-1 e`` with a damping that grows near
    singular poses, clipping to the joint limits after every step.  It works on a private copy of the angles, so the
    stored pose is never disturbed.

    Attributes:
        config: Geometry and tuning parameters.
    """

    def __init__(
        self,
        base_position: Sequence[float] = (0.0, 0.0, 0.0),
        config: SerialArmConfig | None = None,
    ) -> None:
        """Initialise the solver at the zero pose.

        Args:
            base_position: Position of the base joint.
            config: Optional ``SerialArmConfig``; defaults are used when *None*.
        """
        super().__init__(base_position)
        self.config = config or SerialArmConfig()
        self._lengths = np.array(self.config.link_lengths, dtype=np.float64)
        self._limits = np.column_stack(
            [self.config.joint_lower, self.config.joint_upper]
        ).astype(np.float64)
        self._angles = np.zeros(self.joint_count)
        self._positions = self._forward(self._angles)

    # ------------------------------------------------------------------
    # KinematicsSolver API
    # ------------------------------------------------------------------

    @property
    def joint_count(self) -> int:
        return len(self.config.joint_axes)

    @property
    def joint_limits(self) -> np.ndarray:
        return self._limits.copy()

    @property
    def max_reach(self) -> float:
        return float(np.sum(self._lengths))

    def set_angles(self, angles: np.ndarray) -> None:
        self._angles = self._clip(np.asarray(angles, dtype=np.float64))
        self._positions = self._forward(self._angles)

    def joint_positions(self) -> np.ndarray:
        return self._positions.copy()

    def solve(self, target: np.ndarray) -> SolveOutcome:
        target = as_point(target)
        if np.linalg.norm(target - self.base_position) > self.max_reach + self.config.tolerance:
            return SolveOutcome.unreachable()
        angles = self._angles.copy()
        for _ in range(self.config.max_iterations):
            error = target - self._forward(angles)[-1]
            if np.linalg.norm(error) < self.config.tolerance:
                return SolveOutcome.success(angles)
            jacobian = self._jacobian(angles)
            angles = self._clip(angles + self._dls_step(jacobian, error))
        if np.linalg.norm(target - self._forward(angles)[-1]) < self.config.tolerance:
            return SolveOutcome.success(angles)
        return SolveOutcome.unreachable()

    # ------------------------------------------------------------------
    # Forward / inverse helpers
    # ------------------------------------------------------------------

    def _clip(self, angles: np.ndarray) -> np.ndarray:
        """Clip *angles* to the joint limits."""
        return np.clip(angles, self._limits[:, 0], self._limits[:, 1])

    def _forward(self, angles: np.ndarray) -> np.ndarray:
        """Compute base, joint, and end-effector positions for *angles*.

        Args:
            angles: Joint angles in radians.

        Returns:
            ``(joint_count + 1, 3)`` array starting at the base.
        """
        rotations = [
            _rotation_matrix(axis, angle)
            for axis, angle in zip(self.config.joint_axes, angles)
        ]
        points = np.empty((self.joint_count + 1, 3), dtype=np.float64)
        points[0] = self.base_position
        pos = self.base_position.copy()
        for i, length in enumerate(self._lengths):
            direction = np.array([0.0, 1.0, 0.0])
            for rotation in rotations[: i + 1]:
                direction = rotation @ direction
            pos = pos + direction * length
            points[i + 1] = pos
        return points

    def _jacobian(self, angles: np.ndarray) -> np.ndarray:
        """Central-difference positional Jacobian of the end-effector.

        Args:
            angles: Current working angles.

        Returns:
            ``(3, joint_count)`` array; column *i* is d(effector)/d(angle i).
        """
        h = self.config.fd_step
        jacobian = np.empty((3, angles.shape[0]))
        for i in range(angles.shape[0]):
            plus = angles.copy()
            minus = angles.copy()
            plus[i] += h
            minus[i] -= h
            jacobian[:, i] = (
                self._forward(plus)[-1] - self._forward(minus)[-1]
            ) / (2.0 * h)
        return jacobian

    def _damping(self, jacobian: np.ndarray) -> float:
        """Damping factor raised with the Jacobian's condition number.

        Near a singular pose (e.g. the arm held straight) the smallest
        singular value vanishes and the damping saturates at
        ``damping * damping_max_multiplier``.
        """
        singular = np.linalg.svd(jacobian, compute_uv=False)
        cond = singular[0] / (singular[-1] + 1e-12)
        base = self.config.damping
        scaled = base * (1.0 + self.config.damping_scaling * np.log(1.0 + cond))
        return float(np.clip(scaled, base, base * self.config.damping_max_multiplier))

    def _dls_step(self, jacobian: np.ndarray, error: np.ndarray) -> np.ndarray:
        """Damped least-squares joint update ``J^T (J J^T + lambda^2 I)^-1 e``.

        The step is scaled down so no joint moves more than ``max_step``.
        """
        lam = self._damping(jacobian)
        system = jacobian @ jacobian.T + (lam**2) * np.eye(jacobian.shape[0])
        step = jacobian.T @ np.linalg.solve(system, error)
        largest = float(np.max(np.abs(step)))
        if largest > self.config.max_step:
            step *= self.config.max_step / largest
        return step


# ======================================================================
# Planar two-link arm (closed form)
# ======================================================================


class PlanarTwoLinkSolver(KinematicsSolver):
    """Two revolute joints about Z, moving in the XY plane.

    Zero angles point both links along +X.  The inverse solve is analytic
    and always picks the same elbow branch, so the same target yields the
    same angles every time.

    Attributes:
        link_lengths: Lengths ``(l1, l2)`` of the two links.
        elbow: ``+1`` for the positive-elbow branch, ``-1`` for the other.
        tolerance: Allowed out-of-plane distance for a reachable target.
    """

    def __init__(
        self,
        base_position: Sequence[float] = (0.0, 0.0, 0.0),
        link_lengths: Tuple[float, float] = PLANAR_LINK_LENGTHS,
        elbow: int = 1,
        tolerance: float = 1e-6,
    ) -> None:
        """Initialise the planar arm at the zero pose.

        Args:
            base_position: Position of the base joint.
            link_lengths: Lengths of the upper and lower link.
            elbow: Elbow branch selector (``+1`` or ``-1``).
            tolerance: Out-of-plane tolerance for reachability.
        """
        super().__init__(base_position)
        if elbow not in (1, -1):
            raise ValueError("`elbow` must be +1 or -1")
        self.link_lengths = (float(link_lengths[0]), float(link_lengths[1]))
        self.elbow = elbow
        self.tolerance = tolerance
        self._angles = np.zeros(2)

    @property
    def joint_count(self) -> int:
        return 2

    @property
    def max_reach(self) -> float:
        return self.link_lengths[0] + self.link_lengths[1]

    def set_angles(self, angles: np.ndarray) -> None:
        self._angles = np.asarray(angles, dtype=np.float64).copy()

    def joint_positions(self) -> np.ndarray:
        l1, l2 = self.link_lengths
        q1, q2 = self._angles
        elbow = self.base_position + l1 * np.array([np.cos(q1), np.sin(q1), 0.0])
        tip = elbow + l2 * np.array([np.cos(q1 + q2), np.sin(q1 + q2), 0.0])
        return np.stack([self.base_position, elbow, tip])

    def solve(self, target: np.ndarray) -> SolveOutcome:
        local = as_point(target) - self.base_position
        if abs(local[2]) > self.tolerance:
            return SolveOutcome.unreachable()
        l1, l2 = self.link_lengths
        dist = float(np.hypot(local[0], local[1]))
        if dist > l1 + l2 + self.tolerance or dist < abs(l1 - l2) - self.tolerance:
            return SolveOutcome.unreachable()
        cos_q2 = np.clip((dist**2 - l1**2 - l2**2) / (2.0 * l1 * l2), -1.0, 1.0)
        q2 = self.elbow * float(np.arccos(cos_q2))
        q1 = float(
            np.arctan2(local[1], local[0])
            - np.arctan2(l2 * np.sin(q2), l1 + l2 * np.cos(q2))
        )
        return SolveOutcome.success(np.array([q1, q2]))


# ======================================================================
# Registry
# ======================================================================

_SOLVER_REGISTRY: Dict[str, type] = {
    "serial": SerialArmSolver,
    "planar": PlanarTwoLinkSolver,
}


def build_solver(
    name: str, base_position: Sequence[float] = (0.0, 0.0, 0.0)
) -> KinematicsSolver:
    """Create a solver by registry name.

    Args:
        name: ``'serial'`` or ``'planar'``.
        base_position: Position of the base joint.

    Returns:
        A freshly constructed ``KinematicsSolver``.

    Raises:
        ValueError: If the name is not in the registry.
    """
    if name not in _SOLVER_REGISTRY:
        raise ValueError(f"Unknown solver '{name}'. Choose from {list(_SOLVER_REGISTRY)}")
    logger.debug("Building %s solver at base %s", name, tuple(base_position))
    return _SOLVER_REGISTRY[name](base_position)
