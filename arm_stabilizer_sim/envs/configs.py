"""
Dataclass configurations for the stabilization simulation environments.

A config names the kinematics solver, the starting pose, and the parameters
of every control component.  Its ``features`` describe the action and
observation tensors the environment produces, keyed by the names used in
its observation dict.

Classes:
    SimEnvConfig: Timing and rendering fields shared by every task.
    StabilizationSimConfig: 4-DOF serial arm under a sinusoidal disturbance.
    PlanarStabilizationSimConfig: Two-link planar arm under an in-plane disturbance.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Dict, Tuple

from arm_stabilizer_sim.control.disturbance import DisturbanceConfig
from arm_stabilizer_sim.control.stabilizer import StabilizerConfig
from arm_stabilizer_sim.teleop.parameter_controller import InteractiveConfig
from arm_stabilizer_sim.utils.constants import (
    ACTION,
    DEFAULT_FPS,
    DEFAULT_RENDER_HEIGHT,
    DEFAULT_RENDER_WIDTH,
    PLANAR_NUM_JOINTS,
    SERIAL_NUM_JOINTS,
    FeatureType,
    PolicyFeature,
)


@dataclass
class SimEnvConfig(abc.ABC):
    """Fields common to all arm_stabilizer_sim tasks.

    Attributes:
        task: Task identifier, also used as the vector-env suite key.
        fps: Frames per second; one control tick per frame.
        episode_length: Steps before an episode is truncated.
        obs_type: ``'state'`` or ``'pixels_state'``.
        observation_height: Height of rendered frames in pixels.
        observation_width: Width of rendered frames in pixels.
    """

    task: str = "base"
    fps: int = DEFAULT_FPS
    episode_length: int = 600
    obs_type: str = "state"
    observation_height: int = DEFAULT_RENDER_HEIGHT
    observation_width: int = DEFAULT_RENDER_WIDTH

    @property
    def env_type(self) -> str:
        """Suite name used by ``make_sim_env``."""
        return self.task

    @property
    def uses_pixels(self) -> bool:
        """Whether observations include a rendered frame."""
        return "pixels" in self.obs_type

    @property
    @abc.abstractmethod
    def features(self) -> Dict[str, PolicyFeature]:
        """Action and observation metadata keyed by raw env key."""
        raise NotImplementedError


@dataclass
class StabilizationSimConfig(SimEnvConfig):
    """Configuration for the serial-arm stabilization environment.

    Actions are per-joint velocity commands in [-1, 1] scaled by
    ``max_joint_speed``; they only move the arm while no test session runs.
    The state vector is joint angles, end-effector xyz, and base offset xyz.

    Attributes:
        solver: Registry name of the kinematics solver.
        base_position: Base position handed to the solver.
        initial_angles_deg: Pose applied after creation, in degrees.
        action_dim: Number of joint-velocity commands.
        state_dim: Joint angles plus effector and base offset (N + 6).
        max_joint_speed: Joint speed at full action (rad/s).
        success_tolerance: Effector-to-anchor distance counted as held.
        auto_start_session: Start a test session on every reset.
        disturbance: Sinusoidal base-frame disturbance parameters.
        stabilizer: Smoothing parameters of the stabilization loop.
        interactive: Slider ranges and rate limits.
    """

    task: str = "ArmStabilization-Sim-v0"
    solver: str = "serial"
    base_position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    initial_angles_deg: Tuple[float, ...] = (0.0, 20.0, 45.0, 30.0)
    action_dim: int = SERIAL_NUM_JOINTS
    state_dim: int = SERIAL_NUM_JOINTS + 6
    max_joint_speed: float = 1.0
    success_tolerance: float = 0.05
    auto_start_session: bool = False
    disturbance: DisturbanceConfig = field(default_factory=DisturbanceConfig)
    stabilizer: StabilizerConfig = field(default_factory=StabilizerConfig)
    interactive: InteractiveConfig = field(default_factory=InteractiveConfig)

    @property
    def features(self) -> Dict[str, PolicyFeature]:
        features = {
            ACTION: PolicyFeature(type=FeatureType.ACTION, shape=(self.action_dim,)),
            "agent_pos": PolicyFeature(type=FeatureType.STATE, shape=(self.state_dim,)),
        }
        if self.uses_pixels:
            features["pixels"] = PolicyFeature(
                type=FeatureType.VISUAL,
                shape=(self.observation_height, self.observation_width, 3),
            )
        return features


@dataclass
class PlanarStabilizationSimConfig(StabilizationSimConfig):
    """Configuration for the planar two-link stabilization environment.

    The disturbance is confined to the XY plane so the anchor stays
    reachable by the planar solver.
    """

    task: str = "PlanarStabilization-Sim-v0"
    solver: str = "planar"
    initial_angles_deg: Tuple[float, ...] = (20.0, 60.0)
    action_dim: int = PLANAR_NUM_JOINTS
    state_dim: int = PLANAR_NUM_JOINTS + 6
    disturbance: DisturbanceConfig = field(
        default_factory=lambda: DisturbanceConfig(
            amplitude=(0.15, 0.1, 0.0), frequency=(0.5, 0.7, 0.0)
        )
    )
