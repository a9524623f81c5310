"""
Arm stabilization simulation environment (Gymnasium-compatible).

Wraps ``ArmStabilizationSim`` so the anchor-and-compensate loop can be
stepped, observed, and rendered through the standard Gymnasium API.  While
no test session runs, actions drive the joints directly; once a session is
started the stabilizer owns the arm and actions are ignored.

Classes:
    StabilizationSimEnv: Gymnasium environment for the stabilization task.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from arm_stabilizer_sim.control.simulation import ArmReadout, ArmStabilizationSim
from arm_stabilizer_sim.envs.configs import StabilizationSimConfig
from arm_stabilizer_sim.utils.constants import (
    COLOR_ANCHOR,
    COLOR_BACKGROUND,
    COLOR_FAILURE,
    COLOR_GRID,
    COLOR_JOINT,
    COLOR_LINK,
    COLOR_SUCCESS,
)


class StabilizationSimEnv(gym.Env):
    """Gymnasium environment around the stabilization control loop.

    Observations hold the joint angles, the end-effector position, and the
    base-frame offset.  The reward is the negative distance between the
    effector and the anchor while a test session runs, and zero otherwise.

    Attributes:
        metadata: Gymnasium metadata with supported render modes.
        cfg: ``StabilizationSimConfig`` controlling solver, timing, rendering.
    """

    metadata: Dict[str, Any] = {"render_modes": ["rgb_array"]}

    def __init__(self, cfg: StabilizationSimConfig | None = None) -> None:
        """Initialise the environment and build its simulation.

        Args:
            cfg: Optional configuration; a default ``StabilizationSimConfig``
                is used when *None*.
        """
        super().__init__()
        self.cfg = cfg or StabilizationSimConfig()
        self.render_mode = "rgb_array"
        self._sim = ArmStabilizationSim.from_config(self.cfg)
        self._step_count = 0
        self._init_spaces()

    @property
    def sim(self) -> ArmStabilizationSim:
        """The simulation currently driven by the environment."""
        return self._sim

    # ------------------------------------------------------------------
    # Initialisation helpers
    # ------------------------------------------------------------------

    def _init_spaces(self) -> None:
        """Define action and observation Gymnasium spaces."""
        dof = self._sim.chain.dof
        self.action_space = spaces.Box(
            low=-1.0, high=1.0, shape=(dof,), dtype=np.float32
        )
        bound = float(self._sim.chain.max_reach) * 2.0 + 2.0 * np.pi
        obs_dict: Dict[str, spaces.Space] = {}
        obs_dict["agent_pos"] = spaces.Box(
            low=-bound, high=bound, shape=(dof + 6,), dtype=np.float32
        )
        if self.cfg.uses_pixels:
            h, w = self.cfg.observation_height, self.cfg.observation_width
            obs_dict["pixels"] = spaces.Box(
                low=0, high=255, shape=(h, w, 3), dtype=np.uint8
            )
        self.observation_space = spaces.Dict(obs_dict)

    # ------------------------------------------------------------------
    # Gymnasium API
    # ------------------------------------------------------------------

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """Rebuild the simulation and return the initial observation.

        Args:
            seed: Optional RNG seed (the simulation itself is deterministic).
            options: ``{"start_session": bool}`` overrides
                ``cfg.auto_start_session``.

        Returns:
            Tuple of (observation dict, info dict).
        """
        super().reset(seed=seed)
        self._sim.close()
        self._sim = ArmStabilizationSim.from_config(self.cfg)
        self._step_count = 0
        start = (options or {}).get("start_session", self.cfg.auto_start_session)
        if start:
            self._sim.start_session()
        readout = self._sim.readout()
        return self._build_observation(readout), self._build_info(readout)

    def step(
        self, action: np.ndarray
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """Advance the simulation by one frame.

        Args:
            action: Per-joint velocity commands in [-1, 1].

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        dt = 1.0 / self.cfg.fps
        command = np.clip(np.asarray(action, dtype=np.float64).reshape(-1), -1.0, 1.0)
        if not self._sim.session.running:
            self._sim.nudge_joints(command[: self._sim.chain.dof] * self.cfg.max_joint_speed * dt)
        readout = self._sim.step(dt)
        self._step_count += 1
        reward, _ = self._compute_reward(readout)
        truncated = self._step_count >= self.cfg.episode_length
        return (
            self._build_observation(readout),
            reward,
            False,
            truncated,
            self._build_info(readout),
        )

    def close(self) -> None:
        """Release the simulation's solver."""
        self._sim.close()

    # ------------------------------------------------------------------
    # Observation builder
    # ------------------------------------------------------------------

    def _compute_reward(self, readout: ArmReadout) -> Tuple[float, bool]:
        """Compute the holding reward and success flag.

        Returns:
            Tuple of (scalar reward, success boolean).
        """
        error = readout.anchor_error
        if error is None:
            return 0.0, False
        return -error, error < self.cfg.success_tolerance

    def _build_state_vector(self, readout: ArmReadout) -> np.ndarray:
        """Concatenate angles, effector position, and base offset.

        Returns:
            1-D float32 array of length ``dof + 6``.
        """
        return np.concatenate(
            [np.radians(readout.angles_deg), readout.end_effector, readout.base_offset]
        ).astype(np.float32)

    def _build_observation(self, readout: ArmReadout) -> Dict[str, np.ndarray]:
        """Assemble the observation dictionary.

        Returns:
            Dictionary with ``'agent_pos'`` and optionally ``'pixels'``.
        """
        obs: Dict[str, np.ndarray] = {"agent_pos": self._build_state_vector(readout)}
        if self.cfg.uses_pixels:
            obs["pixels"] = self._render_readout(readout)
        return obs

    def _build_info(self, readout: ArmReadout) -> Dict[str, Any]:
        """Assemble the info dictionary.

        Returns:
            Success flag, solve status, session flag, and anchor error
            (``nan`` while released).
        """
        _, success = self._compute_reward(readout)
        error = readout.anchor_error
        return {
            "is_success": success,
            "solve_reached": readout.solve_reached,
            "session_running": self._sim.session.running,
            "anchor_error": float("nan") if error is None else error,
        }

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _view_extent(self) -> float:
        """Half-width of the rendered square of world space."""
        amplitude = float(np.max(np.abs(self.cfg.disturbance.amplitude)))
        return self._sim.chain.max_reach * 1.1 + amplitude

    def _world_to_pixel(
        self, pos: np.ndarray, centre: np.ndarray, h: int, w: int
    ) -> Tuple[int, int]:
        """Map a world position to pixel coordinates of the front (XY) view.

        Args:
            pos: World-space [x, y, z].
            centre: World point shown at the middle of the canvas.
            h: Canvas height.
            w: Canvas width.

        Returns:
            Tuple of (pixel_x, pixel_y).
        """
        extent = self._view_extent()
        px = int((pos[0] - centre[0] + extent) / (2.0 * extent) * w)
        py = int((1.0 - (pos[1] - centre[1] + extent) / (2.0 * extent)) * h)
        return int(np.clip(px, 0, w - 1)), int(np.clip(py, 0, h - 1))

    def _draw_circle(
        self,
        canvas: np.ndarray,
        pixel: Tuple[int, int],
        colour: Tuple[int, int, int],
        radius_frac: float,
    ) -> None:
        """Draw a filled circle centred on *pixel*.

        Args:
            canvas: Mutable (H, W, 3) uint8 array.
            pixel: Pixel coordinates of the centre.
            colour: RGB colour tuple.
            radius_frac: Circle radius as a fraction of canvas width.
        """
        h, w = canvas.shape[:2]
        cx, cy = pixel
        rr, cc = np.ogrid[:h, :w]
        mask = (rr - cy) ** 2 + (cc - cx) ** 2 < (radius_frac * w) ** 2
        canvas[mask] = colour

    def _draw_segment(
        self,
        canvas: np.ndarray,
        start: Tuple[int, int],
        end: Tuple[int, int],
        colour: Tuple[int, int, int],
        thickness: int = 2,
    ) -> None:
        """Draw a thick straight line between two pixels.

        Args:
            canvas: Mutable (H, W, 3) uint8 array.
            start: First pixel.
            end: Second pixel.
            colour: RGB colour tuple.
            thickness: Half-width of the line in pixels.
        """
        h, w = canvas.shape[:2]
        n = max(abs(end[0] - start[0]), abs(end[1] - start[1]), 1) + 1
        xs = np.linspace(start[0], end[0], n).round().astype(int)
        ys = np.linspace(start[1], end[1], n).round().astype(int)
        for dx in range(-thickness, thickness + 1):
            for dy in range(-thickness, thickness + 1):
                canvas[np.clip(ys + dy, 0, h - 1), np.clip(xs + dx, 0, w - 1)] = colour

    def _render_readout(self, readout: ArmReadout) -> np.ndarray:
        """Rasterise one readout as a front-view RGB image.

        Args:
            readout: Snapshot to draw.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        h, w = self.cfg.observation_height, self.cfg.observation_width
        canvas = np.zeros((h, w, 3), dtype=np.uint8)
        canvas[:] = COLOR_BACKGROUND
        centre = readout.joint_positions[0] - readout.base_offset
        ground = self._world_to_pixel(centre, centre, h, w)
        canvas[ground[1], :] = COLOR_GRID
        canvas[:, ground[0]] = COLOR_GRID
        pixels = [self._world_to_pixel(p, centre, h, w) for p in readout.joint_positions]
        for a, b in zip(pixels[:-1], pixels[1:]):
            self._draw_segment(canvas, a, b, COLOR_LINK)
        for pixel in pixels[:-1]:
            self._draw_circle(canvas, pixel, COLOR_JOINT, 0.015)
        if readout.anchor_point is not None:
            anchor = self._world_to_pixel(readout.anchor_point, centre, h, w)
            self._draw_circle(canvas, anchor, COLOR_ANCHOR, 0.025)
        effector_colour = COLOR_SUCCESS if readout.solve_reached else COLOR_FAILURE
        self._draw_circle(canvas, pixels[-1], effector_colour, 0.018)
        return canvas

    def render(self) -> np.ndarray:
        """Render the current state as an RGB image.

        Returns:
            (H, W, 3) uint8 NumPy array.
        """
        return self._render_readout(self._sim.readout())
