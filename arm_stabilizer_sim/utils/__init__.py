"""
Shared constants and small stateless helpers.

Centralizes joint limits, slider ranges, colour palette, and the numeric
helpers (clamping, unit conversion, exponential smoothing) used across the
arm_stabilizer_sim package.
"""
