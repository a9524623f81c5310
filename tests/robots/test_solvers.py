"""Tests for the serial and planar kinematics solvers."""

import numpy as np
import pytest

from arm_stabilizer_sim.robots.solvers import (
    PlanarTwoLinkSolver,
    SerialArmConfig,
    SerialArmSolver,
    SolveOutcome,
    build_solver,
)
from arm_stabilizer_sim.utils.constants import IK_TOLERANCE


class TestSolveOutcome:
    def test_success_copies_angles(self):
        angles = np.array([0.1, 0.2])
        outcome = SolveOutcome.success(angles)
        angles[0] = 5.0
        assert outcome.reached
        np.testing.assert_array_equal(outcome.angles, [0.1, 0.2])

    def test_unreachable_has_no_angles(self):
        outcome = SolveOutcome.unreachable()
        assert not outcome.reached
        assert outcome.angles is None


class TestSerialArmSolver:
    def test_zero_pose_is_straight_up(self):
        solver = SerialArmSolver()
        positions = solver.joint_positions()
        assert positions.shape == (5, 3)
        np.testing.assert_allclose(positions[-1], [0.0, 8.5, 0.0])
        assert solver.max_reach == pytest.approx(8.5)

    def test_base_joint_rotates_about_z(self):
        solver = SerialArmSolver()
        solver.set_angles(np.array([np.pi / 2, 0.0, 0.0, 0.0]))
        np.testing.assert_allclose(solver.joint_positions()[-1], [-8.5, 0.0, 0.0], atol=1e-9)

    def test_base_position_shifts_everything(self):
        solver = SerialArmSolver(base_position=(1.0, 2.0, 3.0))
        np.testing.assert_allclose(solver.joint_positions()[0], [1.0, 2.0, 3.0])
        np.testing.assert_allclose(solver.joint_positions()[-1], [1.0, 10.5, 3.0])

    def test_set_angles_clips_to_limits(self):
        solver = SerialArmSolver()
        solver.set_angles(np.array([0.0, 0.0, -1.0, 0.0]))
        straight = SerialArmSolver().joint_positions()
        np.testing.assert_allclose(solver.joint_positions(), straight)

    def test_target_beyond_reach_is_rejected(self):
        solver = SerialArmSolver()
        outcome = solver.solve(np.array([0.0, 20.0, 0.0]))
        assert not outcome.reached

    def test_current_effector_is_reached_immediately(self):
        solver = SerialArmSolver()
        pose = np.array([0.2, 0.1, 0.5, 0.5])
        solver.set_angles(pose)
        outcome = solver.solve(solver.joint_positions()[-1])
        assert outcome.reached
        np.testing.assert_allclose(outcome.angles, pose)

    def test_solve_leaves_pose_untouched(self):
        solver = SerialArmSolver()
        solver.set_angles(np.array([0.0, 0.0, 0.5, 0.5]))
        before = solver.joint_positions()
        solver.solve(before[-1] + np.array([0.05, 0.0, 0.0]))
        np.testing.assert_array_equal(solver.joint_positions(), before)

    def test_small_displacement_converges(self):
        solver = SerialArmSolver()
        solver.set_angles(np.array([0.0, 0.0, 0.5, 0.5]))
        target = solver.joint_positions()[-1] + np.array([0.05, 0.0, 0.0])
        outcome = solver.solve(target)
        assert outcome.reached
        solver.set_angles(outcome.angles)
        assert np.linalg.norm(solver.joint_positions()[-1] - target) < IK_TOLERANCE

    @pytest.mark.parametrize("dz", [0.02, 0.05, 0.1, 0.3])
    def test_offsets_from_default_pose_converge(self, dz):
        solver = SerialArmSolver()
        solver.set_angles(np.radians([0.0, 20.0, 45.0, 30.0]))
        target = solver.joint_positions()[-1] + np.array([0.0, 0.0, dz])
        outcome = solver.solve(target)
        assert outcome.reached
        solver.set_angles(outcome.angles)
        assert np.linalg.norm(solver.joint_positions()[-1] - target) < IK_TOLERANCE

    def test_config_rejects_mismatched_lengths(self):
        with pytest.raises(ValueError):
            SerialArmConfig(joint_axes=("z", "y"), link_lengths=(1.0,))


class TestPlanarTwoLinkSolver:
    def test_zero_pose_points_along_x(self):
        solver = PlanarTwoLinkSolver()
        np.testing.assert_allclose(solver.joint_positions()[-1], [2.0, 0.0, 0.0])

    def test_analytic_solve_round_trip(self):
        solver = PlanarTwoLinkSolver()
        solver.set_angles(np.array([0.3, 1.0]))
        outcome = solver.solve(solver.joint_positions()[-1])
        assert outcome.reached
        np.testing.assert_allclose(outcome.angles, [0.3, 1.0], atol=1e-9)

    def test_out_of_plane_and_out_of_reach(self):
        solver = PlanarTwoLinkSolver()
        assert not solver.solve(np.array([1.0, 0.0, 0.5])).reached
        assert not solver.solve(np.array([3.0, 0.0, 0.0])).reached

    def test_rejects_bad_elbow(self):
        with pytest.raises(ValueError):
            PlanarTwoLinkSolver(elbow=0)


def test_build_solver_by_name():
    assert isinstance(build_solver("serial"), SerialArmSolver)
    assert isinstance(build_solver("planar", (1.0, 0.0, 0.0)), PlanarTwoLinkSolver)
    with pytest.raises(ValueError):
        build_solver("hexapod")
