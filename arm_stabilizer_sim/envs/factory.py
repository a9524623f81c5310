"""
Builders for stabilization environments.

Tasks are registered by short name together with their default config and
env class.  ``make_env`` returns one environment; ``make_sim_env`` returns a
Gymnasium ``VectorEnv`` nested as ``{task: {0: vec_env}}``.

Functions:
    available_tasks: Names accepted by the builders.
    make_env: Build a single stabilization environment.
    make_sim_env: Build a vector of identical stabilization environments.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple

import gymnasium as gym

from arm_stabilizer_sim.envs.configs import (
    PlanarStabilizationSimConfig,
    SimEnvConfig,
    StabilizationSimConfig,
)
from arm_stabilizer_sim.envs.stabilization import StabilizationSimEnv

# ---------------------------------------------------------------------------
# Task table: short name -> (default config factory, env class)
# ---------------------------------------------------------------------------
_TASKS: Dict[str, Tuple[Callable[[], SimEnvConfig], type]] = {
    "stabilization": (StabilizationSimConfig, StabilizationSimEnv),
    "planar": (PlanarStabilizationSimConfig, StabilizationSimEnv),
}


def available_tasks() -> List[str]:
    """Return the registered task names."""
    return list(_TASKS)


def _lookup(cfg: SimEnvConfig | str) -> Tuple[SimEnvConfig, type]:
    """Return the config and env class for a task name or config object.

    Args:
        cfg: A config instance, or one of ``available_tasks()``.

    Returns:
        Tuple of (config, env class).

    Raises:
        ValueError: For unknown names or unsupported config types.
    """
    if isinstance(cfg, str):
        if cfg not in _TASKS:
            raise ValueError(f"Unknown task '{cfg}'. Choose from {available_tasks()}")
        config_factory, env_cls = _TASKS[cfg]
        return config_factory(), env_cls
    if isinstance(cfg, StabilizationSimConfig):
        return cfg, StabilizationSimEnv
    raise ValueError(f"Unsupported config type {type(cfg).__name__}")


def make_env(cfg: SimEnvConfig | str) -> gym.Env:
    """Build one environment.

    Args:
        cfg: A config instance or a task name.

    Returns:
        The constructed ``gym.Env``.
    """
    config, env_cls = _lookup(cfg)
    return env_cls(config)


def make_sim_env(
    cfg: SimEnvConfig | str,
    n_envs: int = 1,
    use_async_envs: bool = False,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Build *n_envs* copies of one task behind a Gymnasium vector env.

    Args:
        cfg: A config instance or a task name.
        n_envs: Number of copies; must be at least one.
        use_async_envs: Run the copies in subprocesses (``AsyncVectorEnv``)
            instead of in-process (``SyncVectorEnv``).

    Returns:
        ``{task: {0: vec_env}}`` keyed by the config's ``env_type``.

    Raises:
        ValueError: For an unknown task or a non-positive ``n_envs``.
    """
    if n_envs < 1:
        raise ValueError("`n_envs` must be at least 1")
    config, env_cls = _lookup(cfg)
    thunks = [lambda c=config, k=env_cls: k(c) for _ in range(n_envs)]
    vector_cls = gym.vector.AsyncVectorEnv if use_async_envs else gym.vector.SyncVectorEnv
    return {config.env_type: {0: vector_cls(thunks)}}
