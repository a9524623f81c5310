"""
Start/stop orchestration of a disturbance-and-compensate test.

Classes:
    SessionState: Idle or running.
    TestSession: Couples the stabilizer and the disturbance in a fixed order.
"""

from __future__ import annotations

import logging
from enum import Enum

from arm_stabilizer_sim.control.disturbance import DisturbanceGenerator
from arm_stabilizer_sim.control.stabilizer import StabilizationController

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle state of a test session."""

    IDLE = "idle"
    RUNNING = "running"


class TestSession:
    """Runs the stabilizer against the disturbance.

    ``start`` anchors before the disturbance plays, so the anchor is the
    undisturbed effector position.  ``stop`` releases before the base frame
    is restored.  Both triggers are idempotent.

    Attributes:
        state: Current ``SessionState``.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        stabilizer: StabilizationController,
        disturbance: DisturbanceGenerator,
    ) -> None:
        """Initialise an idle session.

        Args:
            stabilizer: Controller anchored for the duration of the test.
            disturbance: Generator played for the duration of the test.
        """
        self._stabilizer = stabilizer
        self._disturbance = disturbance
        self.state = SessionState.IDLE

    @property
    def running(self) -> bool:
        """Whether a test is in progress."""
        return self.state is SessionState.RUNNING

    def start(self) -> None:
        """Anchor, then start the disturbance."""
        if self.running:
            return
        self._stabilizer.anchor_now()
        self._disturbance.play()
        self.state = SessionState.RUNNING
        logger.info("Test session started")

    def stop(self) -> None:
        """Release, then stop the disturbance and restore the base frame."""
        if not self.running:
            return
        self._stabilizer.release()
        self._disturbance.stop()
        self.state = SessionState.IDLE
        logger.info("Test session stopped")
