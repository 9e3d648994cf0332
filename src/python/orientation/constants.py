"""
===============================================================================
ORIENTATION - Numerical Constants
===============================================================================
Central repository for the numerical constants used by the quaternion type.
All component storage and comparison happens in IEEE-754 single precision
(float32), matching the resolution of the orientation sensor stream.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# FLOATING-POINT TOLERANCES
# =============================================================================
# Smallest relative gap between adjacent float32 values (~1.1920929e-07)
FLT_EPSILON = np.finfo(np.float32).eps

# Absolute tolerance used when comparing values close to zero
MAX_DELTA = np.float32(1.0e-10)

# =============================================================================
# HASHING
# =============================================================================
HASH_SEED = 1
HASH_PRIME = 31

# Canonical bit pattern for NaN (all NaNs hash alike)
FLOAT_NAN_BITS = 0x7FC00000

# 32-bit signed wraparound for the hash accumulator
INT32_MASK = 0xFFFFFFFF
INT32_SIGN_BIT = 0x80000000
