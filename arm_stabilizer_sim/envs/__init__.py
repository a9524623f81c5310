"""
Gymnasium-compatible environments for the stabilization simulator.

Provides the serial-arm and planar-arm stabilization tasks, their
configurations, and a vector-env factory.
"""

from arm_stabilizer_sim.envs.configs import (
    PlanarStabilizationSimConfig,
    SimEnvConfig,
    StabilizationSimConfig,
)
from arm_stabilizer_sim.envs.factory import available_tasks, make_env, make_sim_env
from arm_stabilizer_sim.envs.stabilization import StabilizationSimEnv

__all__ = [
    "PlanarStabilizationSimConfig",
    "SimEnvConfig",
    "StabilizationSimConfig",
    "StabilizationSimEnv",
    "available_tasks",
    "make_env",
    "make_sim_env",
]
