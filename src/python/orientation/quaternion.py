"""
===============================================================================
ORIENTATION - Quaternion Value Type
===============================================================================

Single-precision quaternion for device attitude as reported by the orientation
sensor of a head-worn display. Values are composed with the Hamilton product
and compared with a tolerant dot-product test, so that orientations computed
along different paths still compare equal despite float32 round-off.

Convention
----------
We use the scalar-last convention with the right-hand rule:

    q = [q_x, q_y, q_z, q_w] = q_w + q_x*i + q_y*j + q_z*k

All four components are stored as float32. Arithmetic on components happens
in float32; only the square root in normalization and the trigonometry in
axis-angle construction are evaluated in float64 and then narrowed.

Unit quaternion constraint
--------------------------
Every construction and every call to set() normalizes the value. A quaternion
whose squared norm is indistinguishable from zero cannot be normalized and is
reset to the identity [0, 0, 0, 1] instead. scaled() and add() are the only
operations that return non-unit values; renormalize them before treating the
result as a rotation.

Equality
--------
Two quaternions are equal when their dot product is within tolerance of 1.0.
q and -q describe the same rotation but have dot product -1 and therefore do
NOT compare equal.

The hash is built from the exact float32 bit patterns, so it only agrees with
equality for bit-identical values. Two quaternions that compare equal within
tolerance may hash differently (e.g. 0.0 and -0.0 components).

References
----------
    [1] Dawson, "Comparing Floating Point Numbers, 2012 Edition".
    [2] Kuipers, "Quaternions and Rotation Sequences", Princeton, 1999.

===============================================================================
"""

import logging
from typing import Union

import numpy as np

from orientation.constants import (
    DEG2RAD,
    FLOAT_NAN_BITS,
    FLT_EPSILON,
    HASH_PRIME,
    HASH_SEED,
    INT32_MASK,
    INT32_SIGN_BIT,
    MAX_DELTA,
)

logger = logging.getLogger(__name__)

Scalar = Union[int, float, np.floating, np.integer]


def almost_equal_relative_and_abs(a: float, b: float) -> bool:
    """
    Compare two floats with an absolute and a relative tolerance.

    Values within MAX_DELTA of each other are equal (this handles values near
    zero, where a relative test is meaningless). Otherwise the difference must
    be within FLT_EPSILON of the larger magnitude.

    Parameters
    ----------
    a, b : float
        Values to compare. Both are narrowed to float32 first.

    Returns
    -------
    bool
        True if a and b are equal within tolerance.
    """
    a = np.float32(a)
    b = np.float32(b)

    diff = abs(a - b)
    if diff <= MAX_DELTA:
        return True

    largest = max(abs(a), abs(b))
    return bool(diff <= largest * FLT_EPSILON)


def _float_bits(value: np.float32) -> int:
    """Raw IEEE-754 bit pattern of a float32 as a signed int, NaN canonical."""
    if np.isnan(value):
        return FLOAT_NAN_BITS
    return int(np.array(value, dtype=np.float32).view(np.int32))


class Quaternion:
    """
    Single-precision rotation quaternion (x, y, z, w).

    Attributes
    ----------
    x : float
        First imaginary component (i-axis).
    y : float
        Second imaginary component (j-axis).
    z : float
        Third imaginary component (k-axis).
    w : float
        Scalar (real) component.

    Examples
    --------
    >>> yaw = Quaternion.axis_angle(0.0, 0.0, 1.0, 90.0)
    >>> pitch = Quaternion.axis_angle(1.0, 0.0, 0.0, 30.0)
    >>> attitude = yaw * pitch  # pitch first, then yaw
    """

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0,
                 w: float = 1.0, normalize: bool = True) -> None:
        """
        Initialize a quaternion and normalize it.

        Parameters
        ----------
        x, y, z : float
            Vector part. Defaults give the identity rotation.
        w : float
            Scalar part.
        normalize : bool, optional
            If True (default), normalize to unit length exactly as set() does.
            False is reserved for operations whose result is deliberately
            non-unit (scaled, add) or already known to be unit (identity).
        """
        if normalize:
            self.set(x, y, z, w)
        else:
            self._q = np.array([x, y, z, w], dtype=np.float32)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def x(self) -> float:
        """First imaginary component (i-axis)."""
        return float(self._q[0])

    @property
    def y(self) -> float:
        """Second imaginary component (j-axis)."""
        return float(self._q[1])

    @property
    def z(self) -> float:
        """Third imaginary component (k-axis)."""
        return float(self._q[2])

    @property
    def w(self) -> float:
        """Scalar (real) component."""
        return float(self._q[3])

    @property
    def components(self) -> np.ndarray:
        """Copy of the float32 array [x, y, z, w]."""
        return self._q.copy()

    @property
    def norm(self) -> float:
        """Euclidean length sqrt(x^2 + y^2 + z^2 + w^2)."""
        return float(np.sqrt(np.float64(Quaternion._dot32(self, self))))

    # =========================================================================
    # FACTORIES
    # =========================================================================

    @staticmethod
    def identity() -> 'Quaternion':
        """Return the identity quaternion [0, 0, 0, 1] (zero rotation)."""
        return Quaternion(0.0, 0.0, 0.0, 1.0, normalize=False)

    @classmethod
    def from_components(cls, x: float, y: float, z: float,
                        w: float) -> 'Quaternion':
        """Build a quaternion from its four components and normalize it."""
        return cls(x, y, z, w)

    @classmethod
    def from_quaternion(cls, other: 'Quaternion') -> 'Quaternion':
        """Copy another quaternion's components and normalize the copy."""
        result = cls(normalize=False)
        result.set(other)
        return result

    @staticmethod
    def axis_angle(axis_x: float, axis_y: float, axis_z: float,
                   degrees: float) -> 'Quaternion':
        """
        Create a rotation of `degrees` about the axis (axis_x, axis_y, axis_z).

        The half-angle sine and cosine are evaluated in float64:

            q = [sin(theta/2) * axis, cos(theta/2)]

        and each component is narrowed to float32 before the result is
        normalized. The axis need not be unit length; the final normalization
        absorbs its magnitude. A zero axis leaves only the scalar part, so the
        result is the identity (or degenerates to it at 180 degrees).

        Parameters
        ----------
        axis_x, axis_y, axis_z : float
            Rotation axis direction.
        degrees : float
            Rotation angle in degrees, right-hand rule about the axis.

        Returns
        -------
        Quaternion
            Unit quaternion for the rotation.
        """
        angle = np.float64(np.float32(degrees)) * DEG2RAD
        half_angle = angle / 2.0
        factor = np.sin(half_angle)

        axis = np.array([axis_x, axis_y, axis_z], dtype=np.float32)
        vec = (axis.astype(np.float64) * factor).astype(np.float32)

        result = Quaternion(vec[0], vec[1], vec[2], np.cos(half_angle),
                            normalize=False)
        result.normalize()
        return result

    # =========================================================================
    # IN-PLACE RECONSTRUCTION
    # =========================================================================

    def set(self, *args: Union['Quaternion', float]) -> bool:
        """
        Overwrite all four components and normalize.

        Accepts either another Quaternion or four values (x, y, z, w).

        Returns
        -------
        bool
            The result of normalize(): False if the new value was degenerate
            and has been replaced by the identity.

        Raises
        ------
        TypeError
            If called with anything other than one Quaternion or four values.
        """
        if len(args) == 1 and isinstance(args[0], Quaternion):
            self._q = args[0]._q.copy()
        elif len(args) == 4:
            self._q = np.array(args, dtype=np.float32)
        else:
            raise TypeError(
                "set() expects a Quaternion or four components (x, y, z, w), "
                f"got {len(args)} argument(s)"
            )
        return self.normalize()

    def set_identity(self) -> None:
        """Reset to the identity quaternion [0, 0, 0, 1] in place."""
        self._q = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)

    def normalize(self) -> bool:
        """
        Rescale to unit length in place.

        A quaternion whose squared norm is almost zero cannot be rescaled; it
        is reset to the identity and False is returned. An exactly unit
        quaternion is left untouched, skipping the square root.

        Returns
        -------
        bool
            True if the quaternion was non-zero.
        """
        norm_squared = Quaternion._dot32(self, self)

        if almost_equal_relative_and_abs(norm_squared, 0.0):
            logger.debug("Degenerate quaternion %s (norm^2 = %.3e) reset to "
                         "identity", self, float(norm_squared))
            self.set_identity()
            return False

        if norm_squared != 1.0:
            scale = np.float32(1.0 / np.sqrt(np.float64(norm_squared)))
            self._q *= scale

        return True

    # =========================================================================
    # PURE TRANSFORMATIONS
    # =========================================================================

    def copy(self) -> 'Quaternion':
        """Return a normalized copy of this quaternion."""
        return Quaternion.from_quaternion(self)

    def normalized(self) -> 'Quaternion':
        """Return a unit-length copy; this quaternion is not modified."""
        result = self.copy()
        result.normalize()
        return result

    def inverted(self) -> 'Quaternion':
        """
        Return the opposite rotation [-x, -y, -z, w].

        This is the conjugate, which equals the inverse because the value is
        unit length.
        """
        x, y, z, w = self._q
        return Quaternion(-x, -y, -z, w)

    def negated(self) -> 'Quaternion':
        """
        Return [-x, -y, -z, -w].

        The result describes the same rotation but does not compare equal to
        this quaternion (their dot product is -1).
        """
        x, y, z, w = self._q
        return Quaternion(-x, -y, -z, -w)

    def scaled(self, a: Scalar) -> 'Quaternion':
        """Multiply every component by `a` WITHOUT normalizing."""
        q = self._q * np.float32(a)
        return Quaternion(q[0], q[1], q[2], q[3], normalize=False)

    def is_unit(self, tolerance: float = 1e-6) -> bool:
        """True if the norm is within `tolerance` of 1.0."""
        return abs(self.norm - 1.0) < tolerance

    # =========================================================================
    # BINARY OPERATIONS
    # =========================================================================

    @staticmethod
    def _dot32(lhs: 'Quaternion', rhs: 'Quaternion') -> np.float32:
        lx, ly, lz, lw = lhs._q
        rx, ry, rz, rw = rhs._q
        return lx * rx + ly * ry + lz * rz + lw * rw

    @staticmethod
    def dot(lhs: 'Quaternion', rhs: 'Quaternion') -> float:
        """Four-component dot product lx*rx + ly*ry + lz*rz + lw*rw."""
        return float(Quaternion._dot32(lhs, rhs))

    @staticmethod
    def multiply(lhs: 'Quaternion', rhs: 'Quaternion') -> 'Quaternion':
        """
        Hamilton product lhs * rhs.

        The result rotates by `rhs` first and then by `lhs`. Multiplication
        is not commutative, so the order matters:

            x = lw*rx + lx*rw + ly*rz - lz*ry
            y = lw*ry - lx*rz + ly*rw + lz*rx
            z = lw*rz + lx*ry - ly*rx + lz*rw
            w = lw*rw - lx*rx - ly*ry - lz*rz

        Parameters
        ----------
        lhs : Quaternion
            Rotation applied second.
        rhs : Quaternion
            Rotation applied first.

        Returns
        -------
        Quaternion
            The composed rotation, normalized on construction.
        """
        lx, ly, lz, lw = lhs._q
        rx, ry, rz, rw = rhs._q

        x = lw * rx + lx * rw + ly * rz - lz * ry
        y = lw * ry - lx * rz + ly * rw + lz * rx
        z = lw * rz + lx * ry - ly * rx + lz * rw
        w = lw * rw - lx * rx - ly * ry - lz * rz

        return Quaternion(x, y, z, w)

    @staticmethod
    def add(lhs: 'Quaternion', rhs: 'Quaternion') -> 'Quaternion':
        """Component-wise sum WITHOUT normalizing."""
        q = lhs._q + rhs._q
        return Quaternion(q[0], q[1], q[2], q[3], normalize=False)

    @staticmethod
    def equals(lhs: 'Quaternion', rhs: 'Quaternion') -> bool:
        """
        Tolerant rotation equality: dot(lhs, rhs) is almost 1.0.

        lhs and -lhs are not equal under this test.
        """
        return almost_equal_relative_and_abs(Quaternion._dot32(lhs, rhs), 1.0)

    # =========================================================================
    # OPERATOR OVERLOADS
    # =========================================================================

    def __mul__(self, other: Union['Quaternion', Scalar]) -> 'Quaternion':
        """
        Multiplication operator.

        - Quaternion * Quaternion -> Hamilton product (rotation composition)
        - Quaternion * scalar -> scaled(), not normalized
        """
        if isinstance(other, Quaternion):
            return Quaternion.multiply(self, other)
        elif isinstance(other, (int, float, np.floating, np.integer)):
            return self.scaled(other)
        return NotImplemented

    def __rmul__(self, other: Scalar) -> 'Quaternion':
        """Right-multiplication by a scalar: scalar * Quaternion."""
        if isinstance(other, (int, float, np.floating, np.integer)):
            return self.scaled(other)
        return NotImplemented

    def __add__(self, other: 'Quaternion') -> 'Quaternion':
        """Component-wise addition, not normalized."""
        if isinstance(other, Quaternion):
            return Quaternion.add(self, other)
        return NotImplemented

    def __neg__(self) -> 'Quaternion':
        return self.negated()

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion.equals(self, other)

    def fingerprint(self) -> int:
        """
        32-bit polynomial hash of the w, x, y, z bit patterns.

        Consistent with == only for bit-identical quaternions.
        """
        x, y, z, w = self._q
        result = HASH_SEED
        for value in (w, x, y, z):
            result = (HASH_PRIME * result + _float_bits(value)) & INT32_MASK

        if result & INT32_SIGN_BIT:
            result -= INT32_MASK + 1
        return result

    def __hash__(self) -> int:
        return self.fingerprint()

    def __repr__(self) -> str:
        return (f"Quaternion(x={self.x:+.8f}, y={self.y:+.8f}, "
                f"z={self.z:+.8f}, w={self.w:+.8f})")

    def __str__(self) -> str:
        x, y, z, w = self._q
        return f"[x={x!s}, y={y!s}, z={z!s}, w={w!s}]"


# =============================================================================
# Free-function forms of the static operations
# =============================================================================
identity = Quaternion.identity
multiply = Quaternion.multiply
add = Quaternion.add
dot = Quaternion.dot
axis_angle = Quaternion.axis_angle
equals = Quaternion.equals
