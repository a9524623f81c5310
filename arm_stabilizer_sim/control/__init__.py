"""
Feedback control of the simulated arm.

Provides the sinusoidal base-frame disturbance, the anchor-and-compensate
stabilization loop, the test session that couples them, and the fixed-order
tick loop that drives everything frame by frame.
"""

from arm_stabilizer_sim.control.disturbance import DisturbanceConfig, DisturbanceGenerator
from arm_stabilizer_sim.control.session import SessionState, TestSession
from arm_stabilizer_sim.control.simulation import ArmReadout, ArmStabilizationSim
from arm_stabilizer_sim.control.stabilizer import StabilizationController, StabilizerConfig

__all__ = [
    "ArmReadout",
    "ArmStabilizationSim",
    "DisturbanceConfig",
    "DisturbanceGenerator",
    "SessionState",
    "StabilizationController",
    "StabilizerConfig",
    "TestSession",
]
