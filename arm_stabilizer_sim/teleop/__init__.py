"""
Manual control of the simulated arm.

Provides the rate-limited slider surface for joint angles and target
position, and keyboard hot-keys that trigger test sessions.
"""

from arm_stabilizer_sim.teleop.keyboard_teleop import KeyboardTeleop
from arm_stabilizer_sim.teleop.parameter_controller import (
    InteractiveConfig,
    InteractiveParameterController,
    RateLimiter,
)

__all__ = [
    "InteractiveConfig",
    "InteractiveParameterController",
    "KeyboardTeleop",
    "RateLimiter",
]
