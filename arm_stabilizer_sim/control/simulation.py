"""
Fixed-order tick loop tying the arm, disturbance, and controllers together.

One ``step`` is one frame: pending manual input is flushed, the disturbance
moves the base frame, the stabilizer re-solves against it, and a readout
snapshot is produced for the render layer.  Every component writes the chain
in that order and never concurrently, so no locking is involved.

Classes:
    ArmReadout: Snapshot of everything the render/UI layer displays.
    ArmStabilizationSim: Owner of the components and of simulated time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from arm_stabilizer_sim.control.disturbance import DisturbanceConfig, DisturbanceGenerator
from arm_stabilizer_sim.control.session import SessionState, TestSession
from arm_stabilizer_sim.control.stabilizer import StabilizationController, StabilizerConfig
from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain
from arm_stabilizer_sim.robots.solvers import build_solver
from arm_stabilizer_sim.teleop.parameter_controller import (
    STATUS_OK,
    STATUS_UNREACHABLE,
    InteractiveConfig,
    InteractiveParameterController,
)
from arm_stabilizer_sim.utils.helpers import degrees_to_radians

if TYPE_CHECKING:
    from arm_stabilizer_sim.envs.configs import StabilizationSimConfig

logger = logging.getLogger(__name__)


@dataclass
class ArmReadout:
    """Per-frame snapshot consumed by renderers and HUDs.

    Attributes:
        time: Simulated time (s).
        joint_positions: ``(N + 1, 3)`` world positions, base first.
        angles_deg: Joint angles in degrees.
        solve_reached: Whether the last solve succeeded.
        session_state: Current ``SessionState``.
        anchor_point: Anchor held by the stabilizer, or *None*.
        base_offset: Current base-frame offset.
        angle_labels: Joint label strings.
        position_labels: Target label strings.
        status_text: Solve status string.
    """

    time: float
    joint_positions: np.ndarray
    angles_deg: np.ndarray
    solve_reached: bool
    session_state: SessionState
    anchor_point: Optional[np.ndarray]
    base_offset: np.ndarray
    angle_labels: List[str] = field(default_factory=list)
    position_labels: List[str] = field(default_factory=list)
    status_text: str = ""

    @property
    def end_effector(self) -> np.ndarray:
        """World position of the end-effector."""
        return self.joint_positions[-1]

    @property
    def anchor_error(self) -> Optional[float]:
        """Distance from effector to anchor, or *None* when released."""
        if self.anchor_point is None:
            return None
        return float(np.linalg.norm(self.end_effector - self.anchor_point))


class ArmStabilizationSim:
    """Owns the chain and every component that acts on it.

    Components are constructed here and handed their collaborators
    explicitly; nothing is looked up globally.

    Attributes:
        time: Simulated time (s), advanced by ``step``.
        chain: The arm being simulated.
        disturbance: Base-frame shaker.
        stabilizer: Anchor/compensate controller.
        session: Start/stop orchestration.
        controls: Rate-limited manual control surface.
    """

    def __init__(
        self,
        chain: KinematicChain,
        disturbance_config: DisturbanceConfig | None = None,
        stabilizer_config: StabilizerConfig | None = None,
        interactive_config: InteractiveConfig | None = None,
    ) -> None:
        """Wire all components around *chain*.

        Args:
            chain: An open ``KinematicChain``; the simulation closes it.
            disturbance_config: Optional disturbance parameters.
            stabilizer_config: Optional smoothing parameters.
            interactive_config: Optional slider ranges and rate limits.
        """
        self.time = 0.0
        self.chain = chain
        self.disturbance = DisturbanceGenerator(
            chain, disturbance_config, clock=self._now
        )
        self.stabilizer = StabilizationController(chain, stabilizer_config)
        self.session = TestSession(self.stabilizer, self.disturbance)
        self.controls = InteractiveParameterController(
            chain, interactive_config, clock=self._now, session=self.session
        )

    @classmethod
    def from_config(cls, cfg: "StabilizationSimConfig") -> "ArmStabilizationSim":
        """Build a simulation from an environment configuration.

        Args:
            cfg: Configuration naming the solver, base, initial pose, and
                component parameters.

        Returns:
            A simulation at time zero with the initial pose applied.
        """
        chain = KinematicChain.create(
            lambda base: build_solver(cfg.solver, base), cfg.base_position
        )
        sim = cls(chain, cfg.disturbance, cfg.stabilizer, cfg.interactive)
        logger.info("Simulation built for %s with %s solver", cfg.task, cfg.solver)
        if cfg.initial_angles_deg:
            sim.set_pose_deg(cfg.initial_angles_deg)
        return sim

    def _now(self) -> float:
        """Clock shared by the disturbance and the rate limiters."""
        return self.time

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def step(self, dt: float) -> ArmReadout:
        """Advance simulated time by *dt* and run one frame.

        Args:
            dt: Frame duration (s).

        Returns:
            The post-frame ``ArmReadout``.
        """
        if dt < 0.0:
            raise ValueError("`dt` must be non-negative")
        self.time += dt
        self.controls.flush()
        self.disturbance.tick(self.time)
        self.stabilizer.tick(dt)
        return self.readout()

    def readout(self) -> ArmReadout:
        """Return a snapshot of the current state without advancing time."""
        solve_reached = self.chain.last_solve_reached
        if not self.session.running:
            solve_reached = self.controls.solve_reached
        status = STATUS_OK if solve_reached else STATUS_UNREACHABLE
        return ArmReadout(
            time=self.time,
            joint_positions=self.chain.joint_positions(),
            angles_deg=self.chain.angles_deg(),
            solve_reached=solve_reached,
            session_state=self.session.state,
            anchor_point=self.stabilizer.anchor_point,
            base_offset=self.chain.base_offset,
            angle_labels=list(self.controls.angle_labels),
            position_labels=list(self.controls.position_labels),
            status_text=status,
        )

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Start a disturbance-and-compensate test."""
        self.session.start()

    def stop_session(self) -> None:
        """Stop the running test and re-sync the manual controls."""
        if not self.session.running:
            return
        self.session.stop()
        self.controls.sync_from_chain()

    def set_pose_deg(self, angles_deg: Sequence[float]) -> None:
        """Set every joint at once, bypassing slider rate limits.

        Args:
            angles_deg: One angle per joint, in degrees.
        """
        self.chain.set_angles(degrees_to_radians(angles_deg))
        self.controls.sync_from_chain()

    def nudge_joints(self, delta: Sequence[float] | np.ndarray) -> bool:
        """Add *delta* radians to the joints while no session is running.

        Args:
            delta: Per-joint increments in radians.

        Returns:
            *True* if the increment was applied.
        """
        if self.session.running:
            return False
        self.chain.set_angles(self.chain.angles + np.asarray(delta, dtype=np.float64))
        self.controls.sync_from_chain()
        return True

    def close(self) -> None:
        """Stop any running test and release the chain's solver."""
        if self.chain.closed:
            return
        self.stop_session()
        self.chain.close()
