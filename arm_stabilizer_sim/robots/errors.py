"""
Error taxonomy for the simulated arm.

Unreachable targets are deliberately absent: they are a normal outcome and
are reported through ``SolveOutcome`` values rather than exceptions.
"""

from __future__ import annotations


class ArmError(Exception):
    """Base class for all arm_stabilizer_sim errors."""


class CreationError(ArmError):
    """The kinematics solver could not be created; the chain is unusable."""


class ContractViolation(ArmError, ValueError):
    """A caller passed data that breaks the chain's interface contract.

    Raised for angle vectors whose length differs from the chain's degree of
    freedom.  This is a programming error, not a runtime condition.
    """


class ChainClosedError(ArmError, RuntimeError):
    """An operation was attempted on a chain whose solver was released."""
