"""
Keyboard hot-keys for the stabilization simulator.

Translates key presses into discrete triggers: start/stop a test session,
reset the manual controls, select a joint, and nudge the selected joint
through the rate-limited slider surface.  Works with Pygame events in a
window or with single characters read from a terminal.

Classes:
    KeyboardTeleop: Maps keys to simulator triggers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from arm_stabilizer_sim.control.simulation import ArmStabilizationSim


@dataclass
class KeyboardTeleop:
    """Maps keyboard input to session triggers and joint nudges.

    Terminal commands: ``b`` start test, ``e`` stop test, ``r`` reset,
    ``a`` / ``d`` previous / next joint, ``w`` / ``s`` raise / lower the
    selected joint, ``q`` quit.  In a Pygame window the arrow keys replace
    ``w`` / ``a`` / ``s`` / ``d`` and Escape quits.

    Attributes:
        sim: The simulation receiving the triggers.
        step_deg: Joint increment per nudge, in degrees.
        selected_joint: Index of the joint that nudges apply to.
    """

    sim: "ArmStabilizationSim"
    step_deg: float = 5.0
    selected_joint: int = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handle_command(self, command: str) -> bool:
        """Apply one named command.

        Args:
            command: One of ``start``, ``stop``, ``reset``, ``prev``,
                ``next``, ``up``, ``down``, ``quit``.  Unknown commands are
                ignored.

        Returns:
            *False* if the command was ``quit``; *True* otherwise.
        """
        if command == "quit":
            return False
        if command == "start":
            self.sim.start_session()
        elif command == "stop":
            self.sim.stop_session()
        elif command == "reset":
            self.sim.controls.reset()
        elif command in ("prev", "next"):
            self._select(1 if command == "next" else -1)
        elif command in ("up", "down"):
            self._nudge(self.step_deg if command == "up" else -self.step_deg)
        return True

    def process_terminal_input(self, char: str) -> bool:
        """Handle a single-character terminal command.

        Args:
            char: Character read from stdin.

        Returns:
            *False* if the quit character was received; *True* otherwise.
        """
        mapping = {
            "b": "start",
            "e": "stop",
            "r": "reset",
            "a": "prev",
            "d": "next",
            "w": "up",
            "s": "down",
            "q": "quit",
        }
        return self.handle_command(mapping.get(char.strip().lower(), ""))

    def process_pygame_events(self) -> bool:
        """Pump Pygame events and apply any recognised key presses.

        Returns:
            *False* if the window was closed or Escape was pressed.

        Raises:
            ImportError: If Pygame is not installed.
        """
        try:
            import pygame
        except ImportError as exc:
            raise ImportError(
                "Pygame required for real-time teleop: pip install pygame"
            ) from exc
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                command = self._pygame_key_map(pygame).get(event.key, "")
                if not self.handle_command(command):
                    return False
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _pygame_key_map(self, pg: object) -> Dict[int, str]:
        """Build the Pygame key-code to command table.

        Args:
            pg: The ``pygame`` module (passed to avoid re-import).
        """
        return {
            pg.K_b: "start",
            pg.K_e: "stop",
            pg.K_r: "reset",
            pg.K_LEFT: "prev",
            pg.K_RIGHT: "next",
            pg.K_UP: "up",
            pg.K_DOWN: "down",
            pg.K_ESCAPE: "quit",
        }

    def _select(self, direction: int) -> None:
        """Move the joint selection, wrapping around the chain."""
        self.selected_joint = (self.selected_joint + direction) % self.sim.chain.dof

    def _nudge(self, delta_deg: float) -> None:
        """Request the selected joint to move by *delta_deg* degrees."""
        current = self.sim.controls.requested_angle(self.selected_joint)
        self.sim.controls.set_angle(self.selected_joint, current + delta_deg)
