"""
Rational — exact unbounded-precision fractions

Value object for the exact side of every evaluation:
- Arithmetic (add/sub/mul/div/neg/reciprocal/pow) over Python ints
- Reduction to lowest terms after every construction
- Exact conversion from binary64 and correctly rounded conversion back
- Parsing of literal text (integer, decimal, scientific, repeating decimal,
  ``a/b``)

CRITICAL INVARIANTS:
1. gcd(|numerator|, denominator) == 1 and denominator > 0, always
2. Zero is stored as 0/1
3. Division by zero raises DivisionByZero, never returns a sentinel
4. to_float() is correctly rounded (nearest, ties-to-even) without any
   intermediate float arithmetic
"""

import math
import re
from typing import Final, NamedTuple

from src.core.domain.errors import DivisionByZero, DomainError, ResourceExhausted
from src.core.math.ieee754 import (
    EXPONENT_MAX,
    PRECISION_BITS,
    SUBNORMAL_LSB_EXPONENT,
)

# =============================================================================
# LITERAL GRAMMAR
# =============================================================================

# 12, 1.5, 1., .5, 0.(3), 1.2(34...), 2.5e-3, 0.(6)E2
DECIMAL_LITERAL_PATTERN: Final[str] = r"""
    (?P<sign>[+-])?
    (?:
        (?P<int>[0-9]+)(?:(?P<point>\.)(?P<frac>[0-9]*))?
      | (?P<lead_point>\.)(?P<lead_frac>[0-9]+)
    )
    (?:\((?P<rep>[0-9]+)(?:\.\.\.)?\))?
    (?:[eE](?P<exp>[+-]?[0-9]+))?
"""

_DECIMAL_RE: Final = re.compile(rf"^{DECIMAL_LITERAL_PATTERN}$", re.VERBOSE)
_FRACTION_RE: Final = re.compile(
    r"^(?P<sign>[+-])?(?P<num>[0-9]+)\s*/\s*(?P<den>[0-9]+)$"
)


class LiteralParts(NamedTuple):
    """Decomposed decimal literal: sign, digit groups and power-of-ten exponent"""

    negative: bool
    integer: str
    fixed: str
    repeating: str
    exponent: int


def split_literal(text: str) -> LiteralParts:
    """
    Split decimal literal text into its digit groups.

    Args:
        text: Literal such as ``"1.2(3)e-4"``

    Returns:
        LiteralParts

    Raises:
        ValueError: If text is not a decimal literal, or a repeating group
            follows a number with no decimal point
    """
    match = _DECIMAL_RE.match(text.strip())
    if match is None:
        raise ValueError(f"not a decimal literal: {text!r}")

    has_point = match["point"] is not None or match["lead_point"] is not None
    if match["rep"] is not None and not has_point:
        raise ValueError(f"repeating digits need a decimal point: {text!r}")

    return LiteralParts(
        negative=match["sign"] == "-",
        integer=match["int"] or "0",
        fixed=match["frac"] or match["lead_frac"] or "",
        repeating=match["rep"] or "",
        exponent=text_to_int(match["exp"]) if match["exp"] is not None else 0,
    )


# =============================================================================
# HELPERS
# =============================================================================

# CPython refuses str(int) and int(str) beyond sys.get_int_max_str_digits()
# digits (4300 by default); longer numbers are converted in pieces.
SAFE_DIGITS: Final[int] = 1000


def int_to_text(value: int) -> str:
    """
    Decimal text of an int of any size.

    Examples:
        >>> int_to_text(-120)
        '-120'
        >>> len(int_to_text(10**5000))
        5001
    """
    if value < 0:
        return "-" + int_to_text(-value)
    # value.bit_length() * log10(2) never exceeds the digit count
    estimate = value.bit_length() * 30103 // 100000
    if estimate <= SAFE_DIGITS:
        return str(value)
    split = estimate // 2
    high, low = divmod(value, 10**split)
    return int_to_text(high) + int_to_text(low).zfill(split)


def text_to_int(text: str) -> int:
    """
    Int value of a string of decimal digits (optionally signed) of any length.

    Raises:
        ValueError: If text is not a decimal integer
    """
    text = text.strip()
    if len(text) <= SAFE_DIGITS:
        return int(text)
    if text[0] in "+-":
        magnitude = text_to_int(text[1:])
        return -magnitude if text[0] == "-" else magnitude
    if not text.isdigit():
        raise ValueError(f"invalid decimal integer of {len(text)} characters")
    split = len(text) // 2
    return text_to_int(text[:-split]) * 10**split + text_to_int(text[-split:])


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _coerce(value) -> "Rational | None":
    if isinstance(value, Rational):
        return value
    if _is_integer(value):
        return Rational(value)
    return None


def _scaled_less(a: int, d: int, e: int) -> bool:
    """a / d < 2**e, decided in integers."""
    if e >= 0:
        return a < d << e
    return a << -e < d


# =============================================================================
# RATIONAL
# =============================================================================


class Rational:
    """
    Immutable exact fraction in lowest terms.

    Examples:
        >>> Rational(6, -4)
        Rational(-3, 2)
        >>> Rational(1, 3) + Rational(1, 6)
        Rational(1, 2)
        >>> str(Rational.parse("0.(3)"))
        '1/3'
    """

    __slots__ = ("_numerator", "_denominator")

    def __init__(self, numerator: int = 0, denominator: int = 1):
        if not _is_integer(numerator) or not _is_integer(denominator):
            raise TypeError(
                f"numerator and denominator must be int, "
                f"got {type(numerator).__name__} and {type(denominator).__name__}"
            )
        if denominator == 0:
            raise DivisionByZero("rational with zero denominator")

        if denominator < 0:
            numerator, denominator = -numerator, -denominator

        divisor = math.gcd(numerator, denominator)
        # gcd(0, d) == d, so zero always lands on 0/1
        object.__setattr__(self, "_numerator", numerator // divisor)
        object.__setattr__(self, "_denominator", denominator // divisor)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_int(cls, value: int) -> "Rational":
        return cls(value, 1)

    @classmethod
    def from_float(cls, value: float) -> "Rational":
        """
        Exact value of a finite float (every binary64 value is a dyadic rational).

        Raises:
            ValueError: If value is NaN or Inf
        """
        if not math.isfinite(value):
            raise ValueError(f"{value!r} has no rational value")
        numerator, denominator = float(value).as_integer_ratio()
        return cls(numerator, denominator)

    @classmethod
    def parse(cls, text: str, max_exponent: int | None = None) -> "Rational":
        """
        Parse literal text into an exact rational.

        Accepted forms: ``12``, ``-1.25``, ``.5``, ``3e-2``, ``0.(3)``,
        ``1.2(34...)``, ``-3/4``.

        Args:
            text: Literal text
            max_exponent: Largest accepted ``|e|`` in scientific notation
                (None for no limit)

        Raises:
            ValueError: If text is not a literal
            DivisionByZero: For ``a/0``
            ResourceExhausted: If the exponent exceeds max_exponent
        """
        fraction = _FRACTION_RE.match(text.strip())
        if fraction is not None:
            sign = -1 if fraction["sign"] == "-" else 1
            return cls(sign * text_to_int(fraction["num"]), text_to_int(fraction["den"]))

        parts = split_literal(text)
        if max_exponent is not None and abs(parts.exponent) > max_exponent:
            raise ResourceExhausted(
                f"literal exponent {parts.exponent} exceeds the limit of ±{max_exponent}"
            )
        return cls.from_parts(parts)

    @classmethod
    def from_parts(cls, parts: LiteralParts) -> "Rational":
        """
        Exact value of decomposed literal digits.

        value = int + fixed / 10**f + repeating / (10**f * (10**r - 1)),
        scaled by 10**exponent.
        """
        f, r = len(parts.fixed), len(parts.repeating)
        numerator = text_to_int(parts.integer + parts.fixed)
        denominator = 10**f

        if r:
            cycle = 10**r - 1
            numerator = numerator * cycle + text_to_int(parts.repeating)
            denominator *= cycle

        if parts.exponent >= 0:
            numerator *= 10**parts.exponent
        else:
            denominator *= 10 ** (-parts.exponent)

        if parts.negative:
            numerator = -numerator
        return cls(numerator, denominator)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def sign(self) -> int:
        """-1, 0 or +1"""
        return (self._numerator > 0) - (self._numerator < 0)

    def is_zero(self) -> bool:
        return self._numerator == 0

    def is_integer(self) -> bool:
        return self._denominator == 1

    def bit_length(self) -> int:
        """Size of the larger of numerator and denominator, in bits."""
        return max(abs(self._numerator).bit_length(), self._denominator.bit_length())

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, other: "Rational") -> "Rational":
        return Rational(
            self._numerator * other._denominator + other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def sub(self, other: "Rational") -> "Rational":
        return Rational(
            self._numerator * other._denominator - other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    def mul(self, other: "Rational") -> "Rational":
        return Rational(
            self._numerator * other._numerator,
            self._denominator * other._denominator,
        )

    def div(self, other: "Rational") -> "Rational":
        """
        Exact quotient.

        Raises:
            DivisionByZero: If other is zero
        """
        if other.is_zero():
            raise DivisionByZero("division by zero")
        return Rational(
            self._numerator * other._denominator,
            self._denominator * other._numerator,
        )

    def neg(self) -> "Rational":
        return Rational(-self._numerator, self._denominator)

    def abs(self) -> "Rational":
        return Rational(abs(self._numerator), self._denominator)

    def reciprocal(self) -> "Rational":
        """
        Raises:
            DivisionByZero: If self is zero
        """
        if self.is_zero():
            raise DivisionByZero("reciprocal of zero")
        return Rational(self._denominator, self._numerator)

    def pow(self, exponent: "Rational") -> "Rational":
        """
        Integer power.

        Raises:
            DomainError: If exponent is not an integer (the result would
                generally be irrational)
            DivisionByZero: For a zero base with a negative exponent
        """
        if not exponent.is_integer():
            raise DomainError("exponent is not an integer")

        n = exponent._numerator
        if n >= 0:
            return Rational(self._numerator**n, self._denominator**n)
        if self.is_zero():
            raise DivisionByZero("zero raised to a negative power")
        return Rational(self._denominator ** (-n), self._numerator ** (-n))

    def compare(self, other: "Rational") -> int:
        """-1, 0 or +1 as self is less than, equal to, or greater than other."""
        left = self._numerator * other._denominator
        right = other._numerator * self._denominator
        return (left > right) - (left < right)

    # -------------------------------------------------------------------------
    # Conversion to binary64
    # -------------------------------------------------------------------------

    def to_float(self) -> float:
        """
        Correctly rounded binary64 value (round-to-nearest, ties-to-even).

        Works on the integer pair directly: find the binary exponent of the
        quotient, pick the weight of the last significand bit (53 bits for
        normal results, fixed 2**-1074 for subnormals), divide with remainder
        and round on the remainder. Results past the largest finite value
        become signed infinity; negative values that round to zero give -0.0.
        """
        if self._numerator == 0:
            return 0.0

        negative = self._numerator < 0
        a, d = abs(self._numerator), self._denominator

        # 2**e <= a/d < 2**(e + 1)
        e = a.bit_length() - d.bit_length()
        if _scaled_less(a, d, e):
            e -= 1

        if e > EXPONENT_MAX:
            return -math.inf if negative else math.inf

        lsb_exponent = max(e - (PRECISION_BITS - 1), SUBNORMAL_LSB_EXPONENT)
        if lsb_exponent >= 0:
            quotient, remainder = divmod(a, d << lsb_exponent)
            divisor = d << lsb_exponent
        else:
            quotient, remainder = divmod(a << -lsb_exponent, d)
            divisor = d

        twice = remainder * 2
        if twice > divisor or (twice == divisor and quotient & 1):
            quotient += 1

        try:
            magnitude = math.ldexp(quotient, lsb_exponent)
        except OverflowError:
            # rounding carried the significand past the largest finite value
            magnitude = math.inf
        return -magnitude if negative else magnitude

    # -------------------------------------------------------------------------
    # Python protocol
    # -------------------------------------------------------------------------

    def __add__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.add(other)

    def __radd__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.add(self)

    def __sub__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.sub(other)

    def __rsub__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.sub(self)

    def __mul__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.mul(other)

    def __rmul__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.mul(self)

    def __truediv__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else self.div(other)

    def __rtruediv__(self, other):
        other = _coerce(other)
        return NotImplemented if other is None else other.div(self)

    def __neg__(self) -> "Rational":
        return self.neg()

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        return self.abs()

    def __eq__(self, other) -> bool:
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return (
            self._numerator == other._numerator
            and self._denominator == other._denominator
        )

    def __lt__(self, other) -> bool:
        other = _coerce(other)
        return NotImplemented if other is None else self.compare(other) < 0

    def __le__(self, other) -> bool:
        other = _coerce(other)
        return NotImplemented if other is None else self.compare(other) <= 0

    def __gt__(self, other) -> bool:
        other = _coerce(other)
        return NotImplemented if other is None else self.compare(other) > 0

    def __ge__(self, other) -> bool:
        other = _coerce(other)
        return NotImplemented if other is None else self.compare(other) >= 0

    def __hash__(self) -> int:
        return hash((self._numerator, self._denominator))

    def __bool__(self) -> bool:
        return self._numerator != 0

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        if self._denominator == 1:
            return int_to_text(self._numerator)
        return f"{int_to_text(self._numerator)}/{int_to_text(self._denominator)}"

    def __repr__(self) -> str:
        return f"Rational({int_to_text(self._numerator)}, {int_to_text(self._denominator)})"

    def __reduce__(self):
        return (Rational, (self._numerator, self._denominator))


ZERO: Final[Rational] = Rational(0)
ONE: Final[Rational] = Rational(1)
