"""
Core math modules

Exact rational arithmetic, the binary64 shadow, and exact decimal expansion.
"""

# IEEE 754 binary64 helpers
from src.core.math.ieee754 import (
    LARGEST_FINITE,
    PRECISION_BITS,
    SMALLEST_NORMAL,
    FloatClass,
    classify,
    ieee_divide,
    ieee_pow,
    to_bits,
    ulp,
    ulp_distance,
)

# Exact rationals
from src.core.math.rational import (
    ONE,
    ZERO,
    LiteralParts,
    Rational,
    int_to_text,
    split_literal,
    text_to_int,
)

# Binary64 shadow
from src.core.math.float_shadow import FloatShadow, RoundingEvent, RoundingFlag

# Decimal expansion
from src.core.math.decimal_expansion import DEFAULT_MAX_DIGITS, DecimalExpansion

__all__ = [
    # IEEE 754: Constants
    "LARGEST_FINITE",
    "PRECISION_BITS",
    "SMALLEST_NORMAL",
    # IEEE 754: Types
    "FloatClass",
    # IEEE 754: Functions
    "classify",
    "ieee_divide",
    "ieee_pow",
    "to_bits",
    "ulp",
    "ulp_distance",
    # Rational
    "ONE",
    "ZERO",
    "LiteralParts",
    "Rational",
    "int_to_text",
    "split_literal",
    "text_to_int",
    # Float shadow
    "FloatShadow",
    "RoundingEvent",
    "RoundingFlag",
    # Decimal expansion
    "DEFAULT_MAX_DIGITS",
    "DecimalExpansion",
]
