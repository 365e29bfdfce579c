"""
IEEE 754 binary64 — bit-level helpers

Primitives for reasoning about the double-precision format exactly as the
hardware stores it:
- Classification (zero / subnormal / normal / infinite / NaN)
- Ordered-integer mapping of bit patterns for ULP distances
- IEEE division and power where CPython raises instead of returning Inf/NaN

CRITICAL INVARIANTS:
1. No helper routes a value through extended precision
2. Division by zero never raises: the IEEE result (±Inf or NaN) is returned
3. +0.0 and -0.0 map to the same ordinal (zero ULPs apart)
4. NaN has no ordinal; asking for one raises ValueError
"""

import math
import struct
import sys
from enum import Enum
from typing import Final

# =============================================================================
# FORMAT PARAMETERS (binary64)
# =============================================================================

# Significand precision including the implicit leading bit
PRECISION_BITS: Final[int] = 53

# Exponent of the largest finite value: MAX = (2 - 2**-52) * 2**EXPONENT_MAX
EXPONENT_MAX: Final[int] = 1023

# Exponent of the smallest normal value
EXPONENT_MIN: Final[int] = -1022

# Exponent of the least significant bit of a subnormal
SUBNORMAL_LSB_EXPONENT: Final[int] = EXPONENT_MIN - (PRECISION_BITS - 1)

SMALLEST_NORMAL: Final[float] = sys.float_info.min
LARGEST_FINITE: Final[float] = sys.float_info.max

_SIGN_MASK: Final[int] = 0x8000000000000000
_MAGNITUDE_MASK: Final[int] = 0x7FFFFFFFFFFFFFFF


class FloatClass(str, Enum):
    """IEEE 754 class of a binary64 value"""

    ZERO = "zero"
    SUBNORMAL = "subnormal"
    NORMAL = "normal"
    INFINITE = "infinite"
    NAN = "nan"


# =============================================================================
# CLASSIFICATION
# =============================================================================


def classify(value: float) -> FloatClass:
    """
    IEEE 754 class of a value.

    Examples:
        >>> classify(0.0)
        <FloatClass.ZERO: 'zero'>
        >>> classify(5e-324)
        <FloatClass.SUBNORMAL: 'subnormal'>
        >>> classify(float('-inf'))
        <FloatClass.INFINITE: 'infinite'>
    """
    if math.isnan(value):
        return FloatClass.NAN
    if math.isinf(value):
        return FloatClass.INFINITE
    if value == 0.0:
        return FloatClass.ZERO
    if abs(value) < SMALLEST_NORMAL:
        return FloatClass.SUBNORMAL
    return FloatClass.NORMAL


def sign_bit(value: float) -> int:
    """Sign bit of a value (1 for -0.0 and negative NaNs too)."""
    return 1 if math.copysign(1.0, value) < 0 else 0


def to_bits(value: float) -> int:
    """Raw 64-bit pattern of a float as an unsigned integer."""
    return struct.unpack("<Q", struct.pack("<d", value))[0]


# =============================================================================
# ULP ARITHMETIC
# =============================================================================


def to_ordinal(value: float) -> int:
    """
    Map a float onto the integers so that adjacent floats differ by one.

    Negative values map to negative ordinals, both zeros map to 0 and
    +Inf maps to one past the largest finite value.

    Raises:
        ValueError: If value is NaN

    Examples:
        >>> to_ordinal(0.0), to_ordinal(-0.0)
        (0, 0)
        >>> to_ordinal(5e-324)
        1
        >>> to_ordinal(-5e-324)
        -1
    """
    if math.isnan(value):
        raise ValueError("NaN has no position on the float number line")

    bits = to_bits(value)
    magnitude = bits & _MAGNITUDE_MASK
    if bits & _SIGN_MASK:
        return -magnitude
    return magnitude


def ulp_distance(a: float, b: float) -> int:
    """
    Number of representable steps between two floats.

    Examples:
        >>> ulp_distance(1.0, 1.0)
        0
        >>> ulp_distance(0.1 + 0.2, 0.3)
        1
        >>> ulp_distance(-0.0, 0.0)
        0
    """
    return abs(to_ordinal(a) - to_ordinal(b))


def ulp(value: float) -> float:
    """
    Gap between ``|value|`` and the next larger float.

    Returns Inf for infinities and NaN for NaN, like ``math.ulp``.
    """
    return math.ulp(value)


# =============================================================================
# IEEE OPERATIONS CPython DOES NOT EXPOSE
# =============================================================================


def ieee_divide(numerator: float, denominator: float) -> float:
    """
    Binary64 division with IEEE semantics for a zero divisor.

    CPython raises ZeroDivisionError for ``x / 0.0``; the hardware returns
    a signed infinity (sign = XOR of operand signs) or NaN for ``0/0``,
    ``NaN/0``.

    Examples:
        >>> ieee_divide(1.0, 0.0)
        inf
        >>> ieee_divide(1.0, -0.0)
        -inf
        >>> ieee_divide(0.0, 0.0)
        nan
    """
    if denominator != 0.0:
        return numerator / denominator

    if math.isnan(numerator) or numerator == 0.0:
        return math.nan

    negative = sign_bit(numerator) ^ sign_bit(denominator)
    return -math.inf if negative else math.inf


def ieee_pow(base: float, exponent: float) -> float:
    """
    C ``pow`` with IEEE results where CPython raises.

    - Overflow returns a signed infinity instead of OverflowError
    - ``pow(±0, negative)`` returns ±Inf (sign kept only for odd integer
      exponents) instead of raising

    Examples:
        >>> ieee_pow(2.0, 3.0)
        8.0
        >>> ieee_pow(-0.0, -3.0)
        -inf
        >>> ieee_pow(10.0, 400.0)
        inf
    """
    odd_integer = (
        math.isfinite(exponent)
        and exponent == math.floor(exponent)
        and math.fmod(exponent, 2.0) != 0.0
    )

    if base == 0.0 and exponent < 0:
        if odd_integer and sign_bit(base):
            return -math.inf
        return math.inf

    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and odd_integer:
            return -math.inf
        return math.inf
    except ValueError:
        # negative finite base with a non-integer exponent
        return math.nan
