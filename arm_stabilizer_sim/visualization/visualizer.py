"""
Real-time visualizer for the stabilization simulator.

Opens a Pygame window, shows the env's rasterised front view scaled to the
window, and prints a HUD on top: simulated time, session state, solve status,
and one label per joint.  Pygame is imported lazily so the rest of the
package works without it.

Classes:
    SimVisualizer: Live window with status HUD.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np

from arm_stabilizer_sim.control.simulation import ArmReadout
from arm_stabilizer_sim.utils.constants import COLOR_FAILURE, COLOR_SUCCESS, COLOR_TEXT

logger = logging.getLogger(__name__)

HUD_LINE_HEIGHT: int = 16
HUD_MARGIN: int = 8


def _require_pygame() -> Any:
    """Import and return the ``pygame`` module.

    Raises:
        ImportError: With an install hint when Pygame is missing.
    """
    try:
        import pygame
    except ImportError as exc:
        raise ImportError(
            "The live window needs Pygame: pip install 'arm-stabilizer-sim[viz]'"
        ) from exc
    return pygame


@dataclass
class SimVisualizer:
    """Window that mirrors the simulation frame by frame.

    The window opens on the first ``render_frame`` call if ``init_display``
    was not called before.  Input events stay in Pygame's queue for
    ``KeyboardTeleop`` to consume.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        fps: Frame-rate cap applied after every flip.
        window_title: Title bar text.
    """

    width: int = 384
    height: int = 384
    fps: int = 30
    window_title: str = "Arm Stabilizer"
    _screen: Optional[Any] = None
    _clock: Optional[Any] = None
    _font: Optional[Any] = None

    @property
    def is_open(self) -> bool:
        """Whether the window currently exists."""
        return self._screen is not None

    def init_display(self) -> None:
        """Open the window, clock, and HUD font.

        Raises:
            ImportError: If Pygame is not installed.
        """
        pygame = _require_pygame()
        pygame.init()
        self._screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(self.window_title)
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 14)
        logger.info("Opened %dx%d visualizer window", self.width, self.height)

    def close(self) -> None:
        """Close the window.  Safe to call when it was never opened."""
        if not self.is_open:
            return
        _require_pygame().quit()
        self._screen = None
        self._clock = None
        self._font = None

    def render_frame(self, image: np.ndarray, readout: ArmReadout) -> None:
        """Show *image* scaled to the window, with the HUD drawn over it.

        Args:
            image: (H, W, 3) uint8 RGB frame.
            readout: Snapshot described by the HUD.
        """
        if not self.is_open:
            self.init_display()
        pygame = _require_pygame()
        # surfarray expects (W, H, 3)
        surface = pygame.surfarray.make_surface(np.transpose(image, (1, 0, 2)))
        if surface.get_size() != (self.width, self.height):
            surface = pygame.transform.scale(surface, (self.width, self.height))
        self._screen.blit(surface, (0, 0))
        for row, (text, colour) in enumerate(self._hud_lines(readout)):
            rendered = self._font.render(text, True, colour)
            self._screen.blit(rendered, (HUD_MARGIN, 4 + row * HUD_LINE_HEIGHT))
        pygame.display.flip()
        self._clock.tick(self.fps)

    def _hud_lines(self, readout: ArmReadout) -> List[Tuple[str, Tuple[int, int, int]]]:
        """Return the HUD text lines and their colours, top to bottom."""
        status_colour = COLOR_SUCCESS if readout.solve_reached else COLOR_FAILURE
        lines = [
            (f"t = {readout.time:6.2f} s", COLOR_TEXT),
            (f"Session: {readout.session_state.value}", COLOR_TEXT),
            (readout.status_text, status_colour),
        ]
        error = readout.anchor_error
        if error is not None:
            lines.append((f"Anchor error: {error:.3f}", COLOR_TEXT))
        lines.extend((label, COLOR_TEXT) for label in readout.angle_labels)
        return lines
