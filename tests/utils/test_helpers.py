"""Tests for the numeric helpers."""

import numpy as np
import pytest

from arm_stabilizer_sim.utils.helpers import (
    as_point,
    clamp,
    degrees_to_radians,
    exponential_smoothing,
    radians_to_degrees,
    smoothing_factor,
)


def test_clamp():
    assert clamp(5.0, 0.0, 1.0) == 1.0
    assert clamp(-5.0, 0.0, 1.0) == 0.0
    assert clamp(0.25, 0.0, 1.0) == 0.25


def test_as_point_rejects_wrong_shape():
    np.testing.assert_array_equal(as_point([1, 2, 3]), [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        as_point([1.0, 2.0])


def test_degree_conversion():
    np.testing.assert_allclose(degrees_to_radians([180.0, 90.0]), [np.pi, np.pi / 2])
    np.testing.assert_allclose(radians_to_degrees([np.pi]), [180.0])


def test_smoothing_one_second_at_rate_five():
    result = exponential_smoothing(np.array([0.0]), np.array([100.0]), 5.0, 1.0)
    assert abs(result[0] - 99.326) < 1e-3


def test_smoothing_zero_dt_returns_before():
    before = np.array([0.1, -0.7, 2.0])
    result = exponential_smoothing(before, np.array([1.0, 1.0, 1.0]), 5.0, 0.0)
    np.testing.assert_array_equal(result, before)


def test_smoothing_is_framerate_independent():
    """Two half steps land where one full step does."""
    before = np.array([0.0])
    target = np.array([1.0])
    once = exponential_smoothing(before, target, 3.0, 0.2)
    half = exponential_smoothing(before, target, 3.0, 0.1)
    twice = exponential_smoothing(half, target, 3.0, 0.1)
    np.testing.assert_allclose(once, twice, atol=1e-12)


def test_smoothing_factor_bounds():
    assert smoothing_factor(0.0, 1.0) == 0.0
    assert 0.0 < smoothing_factor(5.0, 0.01) < 1.0
