"""
Rate-limited manual control of joint angles and target position.

Slider-style inputs can fire far faster than the solver should run.  Every
event updates its label immediately, while the expensive apply/solve is
coalesced to at most one call per interval.  Values that arrive while the
gate is closed are kept as pending work and applied by ``flush`` once the
interval has elapsed, so the final position of a drag is never lost.

Classes:
    RateLimiter: Opens at most once per interval.
    InteractiveConfig: Slider ranges, intervals, and default target.
    InteractiveParameterController: The manual control surface.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain
from arm_stabilizer_sim.utils.constants import (
    AXIS_NAMES,
    DEFAULT_TARGET,
    IK_UPDATE_INTERVAL,
    JOINT_SLIDER_RANGES_DEG,
    SLIDER_UPDATE_INTERVAL,
    TARGET_SLIDER_RANGES,
)
from arm_stabilizer_sim.utils.helpers import clamp, degrees_to_radians

if TYPE_CHECKING:
    from arm_stabilizer_sim.control.session import TestSession

logger = logging.getLogger(__name__)

STATUS_OK: str = "IK: OK"
STATUS_UNREACHABLE: str = "IK: Unreachable"


class RateLimiter:
    """Gate that opens at most once per *interval* seconds.

    Attributes:
        interval: Minimum time between two openings.
    """

    def __init__(self, interval: float, clock: Callable[[], float]) -> None:
        """Initialise an open gate.

        Args:
            interval: Minimum time between two openings (s).
            clock: Monotonic time source.
        """
        if interval < 0.0:
            raise ValueError("`interval` must be non-negative")
        self.interval = interval
        self._clock = clock
        self._next_time: Optional[float] = None

    def ready(self) -> bool:
        """Return *True* and close the gate for one interval, if it is open."""
        now = self._clock()
        if self._next_time is not None and now < self._next_time:
            return False
        self._next_time = now + self.interval
        return True

    def reset(self) -> None:
        """Open the gate immediately."""
        self._next_time = None


@dataclass
class InteractiveConfig:
    """Slider ranges and rate limits of the manual control surface.

    Attributes:
        angle_interval: Minimum time between two angle applies (s).
        target_interval: Minimum time between two target solves (s).
        angle_ranges_deg: ``(min, max)`` per joint, in degrees.  Joints past
            the end of this tuple reuse its first range.
        target_ranges: ``(min, max)`` per axis for the target position.
        default_target: Target restored by ``reset``.
    """

    angle_interval: float = SLIDER_UPDATE_INTERVAL
    target_interval: float = IK_UPDATE_INTERVAL
    angle_ranges_deg: Tuple[Tuple[float, float], ...] = JOINT_SLIDER_RANGES_DEG
    target_ranges: Tuple[Tuple[float, float], ...] = TARGET_SLIDER_RANGES
    default_target: Tuple[float, float, float] = DEFAULT_TARGET

    def angle_range(self, index: int) -> Tuple[float, float]:
        """Return the slider range of joint *index*."""
        if index < len(self.angle_ranges_deg):
            return self.angle_ranges_deg[index]
        return self.angle_ranges_deg[0]


class InteractiveParameterController:
    """Manual override surface writing straight into a ``KinematicChain``.

    Attributes:
        config: Slider ranges and rate limits.
        target: Requested target position shown on the position sliders.
        angle_labels: One ``"Joint i: x.x°"`` string per joint.
        position_labels: One ``"X: x.x"`` string per axis.
        solve_reached: Status of the last apply or solve.
    """

    def __init__(
        self,
        chain: KinematicChain,
        config: InteractiveConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        session: Optional["TestSession"] = None,
    ) -> None:
        """Bind the controller to a chain and sync labels from it.

        Args:
            chain: The chain being driven.
            config: Optional ``InteractiveConfig``; defaults are used when *None*.
            clock: Time source for rate limiting.
            session: When given, inputs only update labels while it runs.
        """
        self.config = config or InteractiveConfig()
        self._chain = chain
        self._session = session
        self._angle_gate = RateLimiter(self.config.angle_interval, clock)
        self._target_gate = RateLimiter(self.config.target_interval, clock)
        self._pending_angles: Dict[int, float] = {}
        self._target_pending = False
        self.target = np.asarray(self.config.default_target, dtype=np.float64)
        self.angle_labels: List[str] = [""] * chain.dof
        self.position_labels: List[str] = [""] * 3
        self.solve_reached = True
        self.sync_from_chain()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        """Whether a running test session owns the chain."""
        return self._session is not None and self._session.running

    @property
    def status_text(self) -> str:
        """Human-readable solve status."""
        return STATUS_OK if self.solve_reached else STATUS_UNREACHABLE

    def requested_angle(self, index: int) -> float:
        """Return the latest requested angle of joint *index*, in degrees.

        Pending slider values take precedence over the applied pose.
        """
        if index in self._pending_angles:
            return self._pending_angles[index]
        return float(self._chain.angles_deg()[index])

    def set_angle(self, index: int, degrees: float) -> None:
        """Handle a joint-slider change.

        Args:
            index: Joint index; out-of-range indices are ignored.
            degrees: Requested joint angle in degrees.
        """
        if not 0 <= index < self._chain.dof:
            return
        lo, hi = self.config.angle_range(index)
        value = clamp(float(degrees), lo, hi)
        self._update_angle_label(index, value)
        self._pending_angles[index] = value
        self._apply_pending_angles()

    def set_target(self, axis: int, value: float) -> None:
        """Handle a single position-slider change.

        Args:
            axis: 0, 1, or 2 for X, Y, Z.
            value: Requested coordinate.
        """
        if not 0 <= axis < 3:
            return
        lo, hi = self.config.target_ranges[axis]
        self.target[axis] = clamp(float(value), lo, hi)
        self._update_position_labels()
        self._target_pending = True
        self._solve_pending_target()

    def set_target_point(self, point: Sequence[float]) -> None:
        """Handle a change of all three position sliders at once.

        Args:
            point: Requested ``(x, y, z)`` target.
        """
        for axis, value in enumerate(point):
            lo, hi = self.config.target_ranges[axis]
            self.target[axis] = clamp(float(value), lo, hi)
        self._update_position_labels()
        self._target_pending = True
        self._solve_pending_target()

    def flush(self) -> None:
        """Apply pending slider work whose interval has elapsed."""
        if self._pending_angles:
            self._apply_pending_angles()
        if self._target_pending:
            self._solve_pending_target()

    def reset(self) -> None:
        """Zero every joint, restore the default target, and re-solve."""
        if self.locked:
            logger.info("Session running; reset ignored")
            return
        self._pending_angles.clear()
        self._target_pending = False
        self._chain.set_angles(np.zeros(self._chain.dof))
        for index in range(self._chain.dof):
            self._update_angle_label(index, 0.0)
        self.target = np.asarray(self.config.default_target, dtype=np.float64)
        self._update_position_labels()
        outcome = self._chain.solve(self._chain.end_effector())
        if outcome.reached:
            self._chain.set_angles(outcome.angles)
        self.solve_reached = outcome.reached
        self._angle_gate.reset()
        self._target_gate.reset()
        logger.info("Manual controls reset (%s)", self.status_text)

    def sync_from_chain(self) -> None:
        """Refresh labels and target from the chain's actual pose."""
        for index, degrees in enumerate(self._chain.angles_deg()):
            self._update_angle_label(index, float(degrees))
        self.target = self._chain.end_effector()
        self._update_position_labels()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply_pending_angles(self) -> None:
        """Write queued joint values into the chain if the gate allows."""
        if self.locked:
            logger.debug("Session running; angle change shown but not applied")
            self._pending_angles.clear()
            return
        if not self._angle_gate.ready():
            return
        degrees = self._chain.angles_deg()
        for index, value in self._pending_angles.items():
            degrees[index] = value
        self._pending_angles.clear()
        self._chain.set_angles(degrees_to_radians(degrees))
        self.solve_reached = True

    def _solve_pending_target(self) -> None:
        """Solve for the requested target if the gate allows."""
        if self.locked:
            logger.debug("Session running; target change shown but not solved")
            self._target_pending = False
            return
        if not self._target_gate.ready():
            return
        self._target_pending = False
        outcome = self._chain.solve(self.target)
        self.solve_reached = outcome.reached
        if outcome.reached:
            self._chain.set_angles(outcome.angles)
            self.sync_from_chain()
        else:
            logger.debug("Requested target %s unreachable", self.target)

    def _update_angle_label(self, index: int, degrees: float) -> None:
        """Format the label of joint *index*."""
        self.angle_labels[index] = f"Joint {index}: {degrees:.1f}°"

    def _update_position_labels(self) -> None:
        """Format the three position labels from ``target``."""
        self.position_labels = [
            f"{name}: {value:.1f}" for name, value in zip(AXIS_NAMES, self.target)
        ]
