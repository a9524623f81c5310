"""
Small stateless helpers used across the arm_stabilizer_sim package.

Provides numerical clamping, degree/radian conversion of joint vectors, and
the framerate-independent exponential smoothing used by the stabilizer.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* clamped to the closed interval [*lo*, *hi*].

    Args:
        value: The scalar to clamp.
        lo: Lower bound (inclusive).
        hi: Upper bound (inclusive).

    Returns:
        The clamped scalar.
    """
    return max(lo, min(hi, value))


def as_point(value: Sequence[float] | np.ndarray) -> np.ndarray:
    """Convert *value* to a float64 3-vector.

    Args:
        value: Any length-3 sequence.

    Returns:
        NumPy array of shape ``(3,)``.

    Raises:
        ValueError: When *value* does not hold exactly three numbers.
    """
    point = np.asarray(value, dtype=np.float64).reshape(-1)
    if point.shape != (3,):
        raise ValueError(f"Expected a 3-D point, got shape {point.shape}")
    return point


def degrees_to_radians(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Convert a joint vector from degrees to radians."""
    return np.radians(np.asarray(values, dtype=np.float64))


def radians_to_degrees(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Convert a joint vector from radians to degrees."""
    return np.degrees(np.asarray(values, dtype=np.float64))


def smoothing_factor(rate: float, dt: float) -> float:
    """Return the blend weight ``1 - exp(-rate * dt)`` of a first-order filter.

    The weight depends on elapsed time rather than on the number of ticks,
    so the same real-time convergence happens at any tick rate.

    Args:
        rate: Inverse time-constant (1/s); zero freezes the output.
        dt: Elapsed time since the previous sample (s).

    Returns:
        Blend weight in ``[0, 1)``.
    """
    return 1.0 - float(np.exp(-rate * dt))


def exponential_smoothing(
    before: np.ndarray, target: np.ndarray, rate: float, dt: float
) -> np.ndarray:
    """Blend *before* toward *target* with a first-order low-pass filter.

    Args:
        before: Current per-joint values.
        target: Per-joint values the filter is converging to.
        rate: Inverse time-constant (1/s).
        dt: Elapsed time since the previous sample (s).

    Returns:
        ``before + (target - before) * (1 - exp(-rate * dt))``.  With
        ``dt == 0`` the result equals *before* exactly.
    """
    before = np.asarray(before, dtype=np.float64)
    target = np.asarray(target, dtype=np.float64)
    return before + (target - before) * smoothing_factor(rate, dt)
