"""
Closed-loop end-effector stabilization.

While anchored, every tick re-solves the chain against the anchor point.
When the base frame moves, the old pose no longer puts the effector on the
anchor, so the fresh solution differs from the live angles; the difference
is low-pass filtered before being applied.

Classes:
    StabilizerConfig: Smoothing switch and rate.
    StabilizationController: Anchor/release state machine and tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain
from arm_stabilizer_sim.utils.constants import DEFAULT_LERP_SPEED
from arm_stabilizer_sim.utils.helpers import exponential_smoothing

logger = logging.getLogger(__name__)


@dataclass
class StabilizerConfig:
    """Smoothing parameters of the stabilization loop.

    Attributes:
        smooth: Filter the correction when *True*; apply it directly otherwise.
        lerp_speed: Inverse time-constant of the filter (1/s).
    """

    smooth: bool = True
    lerp_speed: float = DEFAULT_LERP_SPEED

    def __post_init__(self) -> None:
        """Reject negative smoothing rates."""
        if self.lerp_speed < 0.0:
            raise ValueError("`lerp_speed` must be non-negative")


class StabilizationController:
    """Holds the end-effector on an anchor point by re-solving each tick.

    Attributes:
        config: Smoothing parameters.
        baseline: Joint angles at anchor time, updated with every applied tick.
    """

    def __init__(
        self, chain: KinematicChain, config: StabilizerConfig | None = None
    ) -> None:
        """Initialise a released controller.

        Args:
            chain: The chain to stabilize.
            config: Optional ``StabilizerConfig``; defaults are used when *None*.
        """
        self.config = config or StabilizerConfig()
        self._chain = chain
        self._anchor: Optional[np.ndarray] = None
        self.baseline: Optional[np.ndarray] = None

    @property
    def anchored(self) -> bool:
        """Whether an anchor point is currently held."""
        return self._anchor is not None

    @property
    def anchor_point(self) -> Optional[np.ndarray]:
        """Copy of the anchor point, or *None* when released."""
        return None if self._anchor is None else self._anchor.copy()

    def anchor_now(self) -> None:
        """Anchor at the current effector position.

        Calling this while already anchored re-bases onto the current pose.
        """
        self._anchor = self._chain.end_effector()
        self.baseline = self._chain.angles
        logger.info("Anchored end-effector at %s", np.round(self._anchor, 4))

    def release(self) -> None:
        """Drop the anchor.  The arm keeps its last solved pose."""
        if self._anchor is None:
            return
        self._anchor = None
        logger.info("Anchor released")

    def tick(self, dt: float) -> bool:
        """Run one stabilization step.

        Args:
            dt: Time since the previous tick (s).

        Returns:
            *True* if new angles were applied, *False* when released or when
            the anchor was unreachable this tick.

        Raises:
            ValueError: If *dt* is negative.
        """
        if dt < 0.0:
            raise ValueError("`dt` must be non-negative")
        if self._anchor is None:
            return False
        before = self._chain.angles
        outcome = self._chain.solve(self._anchor)
        if not outcome.reached:
            # retried next tick
            logger.debug("Anchor unreachable this tick; holding pose")
            return False
        if self.config.smooth:
            applied = exponential_smoothing(
                before, outcome.angles, self.config.lerp_speed, dt
            )
        else:
            applied = outcome.angles
        self._chain.set_angles(applied)
        self.baseline = self._chain.angles
        return True
