"""
===============================================================================
ORIENTATION - Device Attitude Quaternions
===============================================================================
Single-precision unit quaternions for composing and comparing device
orientations reported by an IMU orientation sensor.

Modules:
    constants   -- float32 tolerances, angle conversion and hash constants
    quaternion  -- Quaternion value type and tolerant scalar comparison
===============================================================================
"""

from orientation.quaternion import (
    Quaternion,
    add,
    almost_equal_relative_and_abs,
    axis_angle,
    dot,
    equals,
    identity,
    multiply,
)

__all__ = [
    "Quaternion",
    "add",
    "almost_equal_relative_and_abs",
    "axis_angle",
    "dot",
    "equals",
    "identity",
    "multiply",
]
