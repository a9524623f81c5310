"""Tests for keyboard hot-keys."""

import numpy as np
import pytest

from arm_stabilizer_sim.control.simulation import ArmStabilizationSim
from arm_stabilizer_sim.envs.configs import PlanarStabilizationSimConfig
from arm_stabilizer_sim.teleop.keyboard_teleop import KeyboardTeleop


@pytest.fixture
def teleop():
    cfg = PlanarStabilizationSimConfig(initial_angles_deg=())
    sim = ArmStabilizationSim.from_config(cfg)
    yield KeyboardTeleop(sim=sim)
    sim.close()


def test_start_and_stop_session(teleop):
    assert teleop.process_terminal_input("b")
    assert teleop.sim.session.running
    for _ in range(10):
        teleop.sim.step(1.0 / 30.0)
    assert teleop.process_terminal_input("e")
    assert not teleop.sim.session.running
    np.testing.assert_array_equal(teleop.sim.chain.base_offset, [0.0, 0.0, 0.0])


def test_quit(teleop):
    assert not teleop.process_terminal_input("q")
    assert not teleop.handle_command("quit")


def test_joint_selection_wraps(teleop):
    teleop.process_terminal_input("a")
    assert teleop.selected_joint == 1
    teleop.process_terminal_input("d")
    assert teleop.selected_joint == 0


def test_nudges_accumulate_through_rate_limit(teleop):
    teleop.process_terminal_input("w")
    assert teleop.sim.chain.angles_deg()[0] == pytest.approx(5.0)
    teleop.process_terminal_input("w")
    assert teleop.sim.controls.angle_labels[0] == "Joint 0: 10.0°"
    assert teleop.sim.chain.angles_deg()[0] == pytest.approx(5.0)
    teleop.sim.step(0.1)
    assert teleop.sim.chain.angles_deg()[0] == pytest.approx(10.0)


def test_reset_and_unknown_keys(teleop):
    teleop.sim.set_pose_deg([30.0, 40.0])
    assert teleop.process_terminal_input("x")
    assert teleop.process_terminal_input("r")
    np.testing.assert_allclose(teleop.sim.chain.angles, [0.0, 0.0], atol=1e-9)
