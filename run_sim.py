#!/usr/bin/env python3
"""
Main entry point for the Arm Stabilization Simulator.

Runs a disturbance-and-compensate test on a simulated arm: the end-effector
is anchored, the arm's mount is shaken by a sinusoidal disturbance, and the
stabilizer re-solves and smooths the joint angles every frame.

Usage examples::

    # Headless test run, printing the anchor error once per second
    python run_sim.py --task stabilization --mode demo --duration 10

    # Terminal hot-keys (b start, e stop, r reset, a/d joint, w/s nudge, q quit)
    python run_sim.py --task planar --mode teleop

    # Live Pygame window with the same hot-keys on the keyboard
    python run_sim.py --mode visualize --lerp-speed 8
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

import numpy as np

from arm_stabilizer_sim.control.simulation import ArmReadout, ArmStabilizationSim
from arm_stabilizer_sim.control.stabilizer import StabilizerConfig
from arm_stabilizer_sim.control.disturbance import DisturbanceConfig
from arm_stabilizer_sim.envs.configs import (
    PlanarStabilizationSimConfig,
    StabilizationSimConfig,
)
from arm_stabilizer_sim.envs.stabilization import StabilizationSimEnv
from arm_stabilizer_sim.teleop.keyboard_teleop import KeyboardTeleop
from arm_stabilizer_sim.visualization.visualizer import SimVisualizer

# ======================================================================
# Configuration builders
# ======================================================================


def _build_env_config(args: argparse.Namespace) -> StabilizationSimConfig:
    """Return the environment configuration for the parsed CLI arguments.

    Args:
        args: Namespace from ``argparse``.

    Returns:
        A ``StabilizationSimConfig`` with CLI overrides applied.

    Raises:
        ValueError: If the task name is not recognised.
    """
    registry = {
        "stabilization": StabilizationSimConfig,
        "planar": PlanarStabilizationSimConfig,
    }
    if args.task not in registry:
        raise ValueError(f"Unknown task '{args.task}'. Choose from {list(registry)}")
    cfg = registry[args.task](fps=args.fps, obs_type="pixels_state")
    cfg.stabilizer = StabilizerConfig(
        smooth=not args.no_smooth, lerp_speed=args.lerp_speed
    )
    if args.amplitude is not None or args.frequency is not None:
        cfg.disturbance = DisturbanceConfig(
            amplitude=tuple(args.amplitude or cfg.disturbance.amplitude),
            frequency=tuple(args.frequency or cfg.disturbance.frequency),
        )
    return cfg


def _format_readout(readout: ArmReadout) -> str:
    """Summarise a readout on one line.

    Args:
        readout: Snapshot to describe.

    Returns:
        A human-readable status line.
    """
    error = readout.anchor_error
    error_text = "   n/a" if error is None else f"{error:6.3f}"
    offset = np.array2string(readout.base_offset, precision=3, suppress_small=True)
    return (
        f"t={readout.time:6.2f}s | {readout.session_state.value:7s} | "
        f"{readout.status_text:15s} | anchor err={error_text} | base={offset}"
    )


# ======================================================================
# Mode runners
# ======================================================================


def _run_demo(cfg: StabilizationSimConfig, args: argparse.Namespace) -> None:
    """Run one headless test session and report how well the anchor held.

    Args:
        cfg: Simulation configuration.
        args: Parsed CLI arguments.
    """
    sim = ArmStabilizationSim.from_config(cfg)
    dt = 1.0 / cfg.fps
    base_before = sim.chain.base_offset
    sim.start_session()
    print(f"Anchor: {sim.stabilizer.anchor_point}")
    steps = int(round(args.duration * cfg.fps))
    errors = []
    for step in range(1, steps + 1):
        readout = sim.step(dt)
        if readout.anchor_error is not None:
            errors.append(readout.anchor_error)
        if step % cfg.fps == 0:
            print(_format_readout(readout))
    sim.stop_session()
    print("-" * 60)
    if errors:
        print(f"Mean anchor error: {np.mean(errors):.4f} | max: {np.max(errors):.4f}")
    restored = np.array_equal(sim.chain.base_offset, base_before)
    print(f"Base frame restored: {restored}")
    sim.close()


def _run_teleop(cfg: StabilizationSimConfig, args: argparse.Namespace) -> None:
    """Drive the simulator from terminal hot-keys.

    Each input line is processed character by character, then the
    simulation advances by ``--step-time`` seconds and prints its state.

    Args:
        cfg: Simulation configuration.
        args: Parsed CLI arguments.
    """
    sim = ArmStabilizationSim.from_config(cfg)
    teleop = KeyboardTeleop(sim=sim)
    dt = 1.0 / cfg.fps
    frames = max(1, int(round(args.step_time * cfg.fps)))
    print("Keys: b start | e stop | r reset | a/d joint | w/s nudge | q quit")
    alive = True
    while alive:
        try:
            line = input(f"[joint {teleop.selected_joint}] > ")
        except EOFError:
            break
        alive = all(teleop.process_terminal_input(char) for char in line)
        if not alive:
            break
        for _ in range(frames):
            readout = sim.step(dt)
        print(_format_readout(readout))
        print("  " + " | ".join(readout.angle_labels))
    sim.close()


def _run_visualize(cfg: StabilizationSimConfig, args: argparse.Namespace) -> None:
    """Show the simulator in a Pygame window driven by keyboard hot-keys.

    Args:
        cfg: Simulation configuration.
        args: Parsed CLI arguments.
    """
    env = StabilizationSimEnv(cfg)
    teleop = KeyboardTeleop(sim=env.sim)
    viz = SimVisualizer(
        width=cfg.observation_width,
        height=cfg.observation_height,
        fps=cfg.fps,
    )
    viz.init_display()
    idle = np.zeros(env.action_space.shape, dtype=np.float32)
    print("Keys: B start | E stop | R reset | arrows joint/nudge | Esc quit")
    while teleop.process_pygame_events():
        obs, _, _, _, _ = env.step(idle)
        viz.render_frame(obs["pixels"], env.sim.readout())
    viz.close()
    env.close()


# ======================================================================
# CLI
# ======================================================================


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    parser = argparse.ArgumentParser(description="Arm Stabilization Simulator")
    parser.add_argument("--task", choices=["stabilization", "planar"], default="stabilization")
    parser.add_argument("--mode", choices=["demo", "teleop", "visualize"], default="demo")
    parser.add_argument("--fps", type=int, default=30)
    parser.add_argument("--duration", type=float, default=10.0)
    parser.add_argument("--step-time", type=float, default=0.2)
    parser.add_argument("--lerp-speed", type=float, default=5.0)
    parser.add_argument("--no-smooth", action="store_true")
    parser.add_argument("--amplitude", type=float, nargs=3, default=None)
    parser.add_argument("--frequency", type=float, nargs=3, default=None)
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING"
    )
    return parser.parse_args()


# ======================================================================
# Dispatch
# ======================================================================


# Mapping from mode name to runner function
_MODE_DISPATCH = {
    "demo": _run_demo,
    "teleop": _run_teleop,
    "visualize": _run_visualize,
}


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------
if __name__ == "__main__":
    args = _parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    env_cfg = _build_env_config(args)
    print(f"Task: {args.task} | Mode: {args.mode} | Solver: {env_cfg.solver}")
    print(f"Disturbance: {dataclasses.asdict(env_cfg.disturbance)}")
    print(f"Stabilizer: {dataclasses.asdict(env_cfg.stabilizer)}")
    print("-" * 60)

    runner = _MODE_DISPATCH[args.mode]
    try:
        runner(env_cfg, args)
    except KeyboardInterrupt:
        sys.exit(130)
