"""Tests for the rate-limited manual control surface."""

import numpy as np
import pytest

from arm_stabilizer_sim.control.disturbance import DisturbanceGenerator
from arm_stabilizer_sim.control.session import TestSession
from arm_stabilizer_sim.control.stabilizer import StabilizationController
from arm_stabilizer_sim.teleop.parameter_controller import (
    STATUS_OK,
    STATUS_UNREACHABLE,
    InteractiveConfig,
    InteractiveParameterController,
    RateLimiter,
)


class TestRateLimiter:
    def test_opens_once_per_interval(self, clock):
        gate = RateLimiter(0.1, clock)
        assert gate.ready()
        clock.now = 0.05
        assert not gate.ready()
        clock.now = 0.1
        assert gate.ready()

    def test_reset_reopens(self, clock):
        gate = RateLimiter(0.1, clock)
        gate.ready()
        gate.reset()
        assert gate.ready()

    def test_negative_interval_rejected(self, clock):
        with pytest.raises(ValueError):
            RateLimiter(-1.0, clock)


def test_config_range_fallback():
    cfg = InteractiveConfig(angle_ranges_deg=((-10.0, 10.0),))
    assert cfg.angle_range(3) == (-10.0, 10.0)


def test_initial_labels_follow_chain(bent_planar_chain, clock):
    controls = InteractiveParameterController(bent_planar_chain, clock=clock)
    assert controls.angle_labels[0] == f"Joint 0: {np.degrees(0.3):.1f}°"
    x, y, _ = bent_planar_chain.end_effector()
    assert controls.position_labels == [f"X: {x:.1f}", f"Y: {y:.1f}", "Z: 0.0"]


def test_burst_applies_once_and_labels_every_event(planar_chain, clock):
    controls = InteractiveParameterController(planar_chain, clock=clock)
    for t, value in [(0.0, 10.0), (0.03, 20.0), (0.06, 30.0), (0.09, 40.0)]:
        clock.now = t
        controls.set_angle(0, value)
        assert controls.angle_labels[0] == f"Joint 0: {value:.1f}°"
    assert planar_chain.angles_deg()[0] == pytest.approx(10.0)
    assert controls.requested_angle(0) == 40.0
    clock.now = 0.1
    controls.set_angle(0, 50.0)
    assert planar_chain.angles_deg()[0] == pytest.approx(50.0)


def test_flush_applies_trailing_value(planar_chain, clock):
    controls = InteractiveParameterController(planar_chain, clock=clock)
    controls.set_angle(0, 10.0)
    clock.now = 0.05
    controls.set_angle(1, 45.0)
    controls.flush()
    assert planar_chain.angles_deg()[1] == pytest.approx(0.0)
    clock.now = 0.15
    controls.flush()
    np.testing.assert_allclose(planar_chain.angles_deg(), [10.0, 45.0])


def test_angle_clamped_to_slider_range(serial_chain, clock):
    controls = InteractiveParameterController(serial_chain, clock=clock)
    controls.set_angle(2, -30.0)
    assert controls.angle_labels[2] == "Joint 2: 0.0°"
    assert serial_chain.angles[2] == 0.0


def test_out_of_range_joint_ignored(planar_chain, clock):
    controls = InteractiveParameterController(planar_chain, clock=clock)
    controls.set_angle(5, 10.0)
    np.testing.assert_array_equal(planar_chain.angles, [0.0, 0.0])


def test_reachable_target_moves_effector(planar_chain, clock):
    controls = InteractiveParameterController(planar_chain, clock=clock)
    controls.set_target_point((0.5, 1.2, 0.0))
    assert controls.solve_reached
    assert controls.status_text == STATUS_OK
    np.testing.assert_allclose(planar_chain.end_effector(), [0.5, 1.2, 0.0], atol=1e-9)


def test_unreachable_target_reports_status(bent_planar_chain, clock):
    controls = InteractiveParameterController(bent_planar_chain, clock=clock)
    before = bent_planar_chain.angles
    controls.set_target_point((4.0, 5.0, 0.0))
    assert not controls.solve_reached
    assert controls.status_text == STATUS_UNREACHABLE
    assert controls.position_labels == ["X: 4.0", "Y: 5.0", "Z: 0.0"]
    np.testing.assert_array_equal(bent_planar_chain.angles, before)


def test_target_axis_is_rate_limited(planar_chain, clock):
    controls = InteractiveParameterController(planar_chain, clock=clock)
    controls.set_target(0, 1.0)
    solved = planar_chain.angles
    clock.now = 0.02
    controls.set_target(1, 1.0)
    np.testing.assert_array_equal(planar_chain.angles, solved)
    clock.now = 0.2
    controls.flush()
    np.testing.assert_allclose(planar_chain.end_effector(), [1.0, 1.0, 0.0], atol=1e-9)


def test_reset_zeroes_pose_and_restores_target(bent_planar_chain, clock):
    controls = InteractiveParameterController(bent_planar_chain, clock=clock)
    controls.set_target_point((4.0, 5.0, 0.0))
    controls.reset()
    np.testing.assert_allclose(bent_planar_chain.angles, [0.0, 0.0], atol=1e-9)
    np.testing.assert_array_equal(controls.target, [0.0, 2.0, 0.0])
    assert controls.angle_labels == ["Joint 0: 0.0°", "Joint 1: 0.0°"]
    assert controls.solve_reached


def test_locked_while_session_runs(bent_planar_chain, clock):
    session = TestSession(
        StabilizationController(bent_planar_chain),
        DisturbanceGenerator(bent_planar_chain, clock=clock),
    )
    controls = InteractiveParameterController(bent_planar_chain, clock=clock, session=session)
    session.start()
    assert controls.locked
    before = bent_planar_chain.angles
    controls.set_angle(0, 90.0)
    controls.reset()
    clock.now = 1.0
    controls.flush()
    assert controls.angle_labels[0] == "Joint 0: 90.0°"
    np.testing.assert_array_equal(bent_planar_chain.angles, before)
    session.stop()
    clock.now = 2.0
    controls.flush()
    np.testing.assert_array_equal(bent_planar_chain.angles, before)
