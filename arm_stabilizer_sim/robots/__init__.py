"""
Simulated arm kinematics.

Provides the ``KinematicsSolver`` interface with a numeric serial-arm solver
and a closed-form planar solver, plus the ``KinematicChain`` facade that owns
the joint angles, the base frame, and the solver's lifetime.
"""

from arm_stabilizer_sim.robots.errors import (
    ArmError,
    ChainClosedError,
    ContractViolation,
    CreationError,
)
from arm_stabilizer_sim.robots.kinematic_chain import KinematicChain
from arm_stabilizer_sim.robots.solvers import (
    KinematicsSolver,
    PlanarTwoLinkSolver,
    SerialArmSolver,
    SolveOutcome,
    build_solver,
)

__all__ = [
    "ArmError",
    "ChainClosedError",
    "ContractViolation",
    "CreationError",
    "KinematicChain",
    "KinematicsSolver",
    "PlanarTwoLinkSolver",
    "SerialArmSolver",
    "SolveOutcome",
    "build_solver",
]
