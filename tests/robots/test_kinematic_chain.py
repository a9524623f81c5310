"""Tests for the KinematicChain facade."""

import logging

import numpy as np
import pytest

from arm_stabilizer_sim.robots.errors import (
    ArmError,
    ChainClosedError,
    ContractViolation,
    CreationError,
)
from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain


class TestCreate:
    def test_starts_at_zero_pose(self, serial_chain):
        assert serial_chain.dof == 4
        assert serial_chain.degree_of_freedom() == 4
        np.testing.assert_array_equal(serial_chain.angles, np.zeros(4))
        np.testing.assert_allclose(serial_chain.end_effector(), [0.0, 8.5, 0.0])

    def test_factory_exception_becomes_creation_error(self):
        def factory(base):
            raise OSError("solver library missing")

        with pytest.raises(CreationError):
            KinematicChain.create(factory)

    def test_factory_returning_none(self):
        with pytest.raises(CreationError):
            KinematicChain.create(lambda base: None)

    def test_negative_joint_count_closes_solver(self, negative_joint_solver_cls):
        solvers = []

        def factory(base):
            solvers.append(negative_joint_solver_cls(base))
            return solvers[-1]

        with pytest.raises(CreationError):
            KinematicChain.create(factory)
        assert solvers[0].close_calls == 1

    def test_negative_joint_count_is_logged(self, negative_joint_solver_cls, caplog):
        with caplog.at_level(logging.ERROR, logger="arm_stabilizer_sim.robots"):
            with pytest.raises(CreationError):
                KinematicChain.create(negative_joint_solver_cls)
        assert "invalid joint count" in caplog.text

    def test_failed_forward_solve_closes_solver(self, broken_solver_cls):
        solvers = []

        def factory(base):
            solvers.append(broken_solver_cls(base))
            return solvers[-1]

        with pytest.raises(CreationError):
            KinematicChain.create(factory)
        assert solvers[0].close_calls == 1

    def test_creation_error_is_arm_error(self):
        assert issubclass(CreationError, ArmError)
        assert issubclass(ContractViolation, ValueError)
        assert issubclass(ChainClosedError, RuntimeError)


class TestPose:
    def test_positions_have_n_plus_one_rows(self, serial_chain):
        assert serial_chain.joint_positions().shape == (5, 3)

    def test_positions_are_idempotent(self, serial_chain):
        serial_chain.set_angles(np.array([0.2, 0.1, 0.4, 0.3]))
        first = serial_chain.joint_positions()
        second = serial_chain.joint_positions()
        np.testing.assert_array_equal(first, second)

    def test_positions_are_copies(self, serial_chain):
        positions = serial_chain.joint_positions()
        positions[-1] = 100.0
        np.testing.assert_allclose(serial_chain.end_effector(), [0.0, 8.5, 0.0])

    def test_base_joint_quarter_turn(self, serial_chain):
        serial_chain.set_angles(np.array([np.pi / 2, 0.0, 0.0, 0.0]))
        np.testing.assert_allclose(serial_chain.end_effector(), [-8.5, 0.0, 0.0], atol=1e-9)
        np.testing.assert_allclose(serial_chain.angles_deg(), [90.0, 0.0, 0.0, 0.0])

    def test_wrong_length_is_contract_violation(self, serial_chain):
        with pytest.raises(ContractViolation):
            serial_chain.set_angles(np.zeros(3))
        np.testing.assert_array_equal(serial_chain.angles, np.zeros(4))

    def test_matrix_input_is_contract_violation(self, planar_chain):
        with pytest.raises(ContractViolation):
            planar_chain.set_angles(np.zeros((2, 2)))
        # N values, but not a vector
        with pytest.raises(ContractViolation):
            planar_chain.set_angles(np.zeros((1, 2)))
        np.testing.assert_array_equal(planar_chain.angles, np.zeros(2))

    def test_angles_clipped_to_solver_limits(self, serial_chain):
        serial_chain.set_angles(np.array([0.0, 3.0, 0.0, 0.0]))
        assert serial_chain.angles[1] == pytest.approx(np.pi / 2)

    def test_base_offset_shifts_all_positions(self, serial_chain):
        before = serial_chain.joint_positions()
        serial_chain.set_base_offset([1.0, -2.0, 0.5])
        np.testing.assert_allclose(
            serial_chain.joint_positions(), before + np.array([1.0, -2.0, 0.5])
        )


class TestSolve:
    def test_unreachable_leaves_angles(self, serial_chain):
        serial_chain.set_angles(np.array([0.1, 0.2, 0.3, 0.4]))
        before = serial_chain.angles
        outcome = serial_chain.solve([0.0, 20.0, 0.0])
        assert not outcome.reached
        assert not serial_chain.last_solve_reached
        np.testing.assert_array_equal(serial_chain.angles, before)

    def test_solve_does_not_move_the_arm(self, serial_chain):
        serial_chain.set_angles(np.array([0.0, 0.0, 0.5, 0.5]))
        before = serial_chain.joint_positions()
        outcome = serial_chain.solve(before[-1] + np.array([0.05, 0.0, 0.0]))
        assert outcome.reached
        assert serial_chain.last_solve_reached
        np.testing.assert_array_equal(serial_chain.joint_positions(), before)

    def test_current_effector_is_reached(self, serial_chain):
        serial_chain.set_angles(np.array([0.3, 0.2, 0.6, 0.1]))
        assert serial_chain.solve(serial_chain.end_effector()).reached

    def test_targets_are_world_space(self, bent_planar_chain):
        """A target captured before a base move is solved in the same frame."""
        anchor = bent_planar_chain.end_effector()
        bent_planar_chain.set_base_offset([0.1, 0.05, 0.0])
        outcome = bent_planar_chain.solve(anchor)
        assert outcome.reached
        bent_planar_chain.set_angles(outcome.angles)
        np.testing.assert_allclose(bent_planar_chain.end_effector(), anchor, atol=1e-9)


class TestLifecycle:
    def test_close_is_idempotent_and_releases_once(self, counting_solver_cls):
        solvers = []

        def factory(base):
            solvers.append(counting_solver_cls(base))
            return solvers[-1]

        chain = KinematicChain.create(factory)
        chain.close()
        chain.close()
        assert chain.closed
        assert solvers[0].close_calls == 1

    def test_operations_after_close_raise(self, counting_solver_cls):
        chain = KinematicChain.create(counting_solver_cls)
        chain.close()
        with pytest.raises(ChainClosedError):
            chain.set_angles(np.zeros(2))
        with pytest.raises(ChainClosedError):
            chain.joint_positions()
        with pytest.raises(ChainClosedError):
            chain.solve([1.0, 0.0, 0.0])
        with pytest.raises(ChainClosedError):
            chain.angles
        with pytest.raises(ChainClosedError):
            chain.angles_deg()
        with pytest.raises(ChainClosedError):
            chain.base_offset
        with pytest.raises(ChainClosedError):
            chain.max_reach

    def test_context_manager_closes(self, counting_solver_cls):
        with KinematicChain.create(counting_solver_cls) as chain:
            assert not chain.closed
        assert chain.closed
