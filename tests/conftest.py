"""Shared fixtures: chains on both solvers, a controllable clock, and spy solvers."""

import numpy as np
import pytest

from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain
from arm_stabilizer_sim.robots.solvers import (
    PlanarTwoLinkSolver,
    SerialArmSolver,
    SolveOutcome,
)


class ManualClock:
    """Clock whose time only moves when a test advances it."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, dt):
        self.now += dt


class CountingPlanarSolver(PlanarTwoLinkSolver):
    """Planar solver that records how often it is closed and solved."""

    def __init__(self, base_position=(0.0, 0.0, 0.0)):
        super().__init__(base_position)
        self.close_calls = 0
        self.solve_calls = 0

    def solve(self, target):
        self.solve_calls += 1
        return super().solve(target)

    def close(self):
        self.close_calls += 1


class BrokenPlanarSolver(CountingPlanarSolver):
    """Planar solver whose forward solve always fails."""

    def joint_positions(self):
        raise RuntimeError("forward solve failed")


class NegativeJointSolver(CountingPlanarSolver):
    """Planar solver reporting an impossible joint count."""

    @property
    def joint_count(self):
        return -1


class NeverReachesSolver(CountingPlanarSolver):
    """Planar solver that reports every target as unreachable."""

    def solve(self, target):
        self.solve_calls += 1
        return SolveOutcome.unreachable()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def serial_chain():
    chain = KinematicChain.create(lambda base: SerialArmSolver(base))
    yield chain
    chain.close()


@pytest.fixture
def planar_chain():
    chain = KinematicChain.create(lambda base: PlanarTwoLinkSolver(base))
    yield chain
    chain.close()


@pytest.fixture
def bent_planar_chain(planar_chain):
    """Planar chain in a reachable, non-singular pose."""
    planar_chain.set_angles(np.array([0.3, 1.0]))
    return planar_chain


@pytest.fixture
def counting_solver_cls():
    return CountingPlanarSolver


@pytest.fixture
def broken_solver_cls():
    return BrokenPlanarSolver


@pytest.fixture
def negative_joint_solver_cls():
    return NegativeJointSolver


@pytest.fixture
def never_reaches_solver_cls():
    return NeverReachesSolver
