"""
Shared constants and type aliases for the arm_stabilizer_sim package.

Collects the serial-arm geometry, per-joint slider ranges, disturbance and
smoothing defaults, and the colour palette used by the renderers so that
every component agrees on the same numbers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

# ---------------------------------------------------------------------------
# Observation / action key names
# ---------------------------------------------------------------------------
ACTION: str = "action"

# ---------------------------------------------------------------------------
# Default rendering dimensions
# ---------------------------------------------------------------------------
DEFAULT_RENDER_WIDTH: int = 384
DEFAULT_RENDER_HEIGHT: int = 384
DEFAULT_FPS: int = 30

# ---------------------------------------------------------------------------
# Serial 4-DOF arm geometry (radians / scene units)
# ---------------------------------------------------------------------------
SERIAL_NUM_JOINTS: int = 4
SERIAL_JOINT_AXES: Tuple[str, ...] = ("z", "y", "x", "y")
SERIAL_LINK_LENGTHS: Tuple[float, ...] = (2.0, 3.0, 2.5, 1.0)
SERIAL_JOINT_LOWER: Tuple[float, ...] = (-math.pi, -math.pi / 2, 0.0, -math.pi)
SERIAL_JOINT_UPPER: Tuple[float, ...] = (
    math.pi,
    math.pi / 2,
    math.radians(150.0),
    math.pi,
)

# Inverse-solve tuning for the serial arm
IK_TOLERANCE: float = 0.01
IK_MAX_ITERATIONS: int = 100
IK_FD_STEP: float = 1e-4
IK_DAMPING: float = 0.01
IK_DAMPING_SCALING: float = 0.5
IK_DAMPING_MAX_MULTIPLIER: float = 10.0
IK_MAX_STEP: float = 0.5

# ---------------------------------------------------------------------------
# Planar two-link arm geometry
# ---------------------------------------------------------------------------
PLANAR_NUM_JOINTS: int = 2
PLANAR_LINK_LENGTHS: Tuple[float, float] = (1.0, 1.0)

# ---------------------------------------------------------------------------
# Interactive slider ranges and rate limits
# ---------------------------------------------------------------------------
JOINT_SLIDER_RANGES_DEG: Tuple[Tuple[float, float], ...] = (
    (-180.0, 180.0),
    (-90.0, 90.0),
    (0.0, 150.0),
    (-180.0, 180.0),
)
TARGET_SLIDER_RANGES: Tuple[Tuple[float, float], ...] = (
    (-5.0, 5.0),
    (0.0, 8.0),
    (-5.0, 5.0),
)
DEFAULT_TARGET: Tuple[float, float, float] = (0.0, 2.0, 0.0)
SLIDER_UPDATE_INTERVAL: float = 0.10
IK_UPDATE_INTERVAL: float = 0.10
AXIS_NAMES: Tuple[str, str, str] = ("X", "Y", "Z")

# ---------------------------------------------------------------------------
# Disturbance and stabilization defaults
# ---------------------------------------------------------------------------
DISTURBANCE_AMPLITUDE: Tuple[float, float, float] = (0.3, 0.0, 0.3)
DISTURBANCE_FREQUENCY: Tuple[float, float, float] = (0.5, 0.7, 0.4)
DEFAULT_LERP_SPEED: float = 5.0

# ---------------------------------------------------------------------------
# Color palette (RGB 0-255) used by the 2-D renderers
# ---------------------------------------------------------------------------
COLOR_BACKGROUND: Tuple[int, int, int] = (240, 240, 240)
COLOR_JOINT: Tuple[int, int, int] = (66, 133, 244)
COLOR_LINK: Tuple[int, int, int] = (120, 120, 120)
COLOR_ANCHOR: Tuple[int, int, int] = (244, 180, 0)
COLOR_SUCCESS: Tuple[int, int, int] = (15, 157, 88)
COLOR_FAILURE: Tuple[int, int, int] = (219, 68, 55)
COLOR_GRID: Tuple[int, int, int] = (200, 200, 200)
COLOR_TEXT: Tuple[int, int, int] = (50, 50, 50)


class FeatureType(Enum):
    """Enumeration of observation feature types."""

    ACTION = "action"
    STATE = "state"
    VISUAL = "visual"


@dataclass(frozen=True)
class PolicyFeature:
    """Describes a single feature produced or consumed by the environment.

    Attributes:
        type: The semantic category of the feature.
        shape: Tuple of integers describing the array shape (excluding batch).
    """

    type: FeatureType
    shape: Tuple[int, ...]
