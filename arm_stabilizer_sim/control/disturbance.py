"""
Sinusoidal disturbance of the arm's base frame.

Shakes the mount of a ``KinematicChain`` with an independent sine wave per
axis.  The offset is a pure function of the origin captured at ``play`` and
the elapsed time, so replaying the same timestamps reproduces the same
motion exactly.

Classes:
    DisturbanceConfig: Amplitude and frequency per axis.
    DisturbanceGenerator: Play/stop state machine writing the base frame.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain
from arm_stabilizer_sim.utils.constants import (
    DISTURBANCE_AMPLITUDE,
    DISTURBANCE_FREQUENCY,
)

logger = logging.getLogger(__name__)


@dataclass
class DisturbanceConfig:
    """Per-axis sine parameters.

    Attributes:
        amplitude: Peak offset per axis (scene units).
        frequency: Oscillation frequency per axis (Hz).
    """

    amplitude: Tuple[float, float, float] = DISTURBANCE_AMPLITUDE
    frequency: Tuple[float, float, float] = DISTURBANCE_FREQUENCY


class DisturbanceGenerator:
    """Moves a chain's base frame along uncoupled per-axis sine waves.

    Attributes:
        config: Amplitude and frequency settings.
    """

    def __init__(
        self,
        chain: KinematicChain,
        config: DisturbanceConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise a stopped generator.

        Args:
            chain: Chain whose base frame is disturbed.
            config: Optional ``DisturbanceConfig``; defaults are used when *None*.
            clock: Time source read once at ``play``.
        """
        self.config = config or DisturbanceConfig()
        self._chain = chain
        self._clock = clock
        self._amplitude = np.asarray(self.config.amplitude, dtype=np.float64)
        self._frequency = np.asarray(self.config.frequency, dtype=np.float64)
        self._origin: Optional[np.ndarray] = None
        self._start_time = 0.0
        self._playing = False

    @property
    def playing(self) -> bool:
        """Whether the disturbance is currently active."""
        return self._playing

    @property
    def origin(self) -> Optional[np.ndarray]:
        """Base offset captured at ``play``, or *None* before the first play."""
        return None if self._origin is None else self._origin.copy()

    def play(self) -> None:
        """Capture the current base frame as origin and start shaking."""
        if self._playing:
            return
        self._origin = self._chain.base_offset
        self._start_time = self._clock()
        self._playing = True
        logger.info("Disturbance playing from origin %s", self._origin)

    def stop(self) -> None:
        """Stop shaking and put the base frame back at the captured origin."""
        if not self._playing:
            return
        self._playing = False
        self._chain.set_base_offset(self._origin)
        logger.info("Disturbance stopped, base restored to %s", self._origin)

    def offset_at(self, elapsed: float) -> np.ndarray:
        """Return the disturbance offset *elapsed* seconds after ``play``.

        Args:
            elapsed: Time since the disturbance started (s).

        Returns:
            ``amplitude * sin(2π * frequency * elapsed)`` per axis.
        """
        return self._amplitude * np.sin(2.0 * np.pi * self._frequency * elapsed)

    def tick(self, current_time: float) -> None:
        """Write ``origin + offset`` into the chain's base frame.

        Args:
            current_time: Timestamp on the same clock that ``play`` used.
        """
        if not self._playing:
            return
        self._chain.set_base_offset(
            self._origin + self.offset_at(current_time - self._start_time)
        )
