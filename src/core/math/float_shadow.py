"""
FloatShadow — binary64 value that rounds exactly like the hardware

The shadow side of every evaluation. Each operation is ONE native binary64
operation on a Python float (never Rational arithmetic rounded afterwards),
so the error it accumulates is the error a real floating-point program
accumulates.

Besides the value, a shadow carries the trail of rounding events that
produced it. An event is recorded whenever an operation (or the conversion
of a literal) was not exact; its flag follows the IEEE 754 exception flags.

CRITICAL INVARIANTS:
1. No operation uses more than binary64 precision
2. Division by zero yields ±Inf or NaN, never raises
3. Rounding-event detection never feeds back into the value
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Final

from src.core.math.ieee754 import (
    SMALLEST_NORMAL,
    FloatClass,
    classify,
    ieee_divide,
    ieee_pow,
    to_bits,
)
from src.core.math.rational import Rational


class RoundingFlag(str, Enum):
    """IEEE 754 exception flag raised by an operation"""

    INEXACT = "inexact"
    UNDERFLOW = "underflow"
    OVERFLOW = "overflow"
    DIVIDE_BY_ZERO = "divide-by-zero"
    INVALID = "invalid"


@dataclass(frozen=True, eq=False)
class RoundingEvent:
    """One non-exact step of a shadow computation.

    Compared by bit pattern so that events holding NaN are reproducible.
    """

    operation: str
    operands: tuple[float, ...]
    result: float
    flag: RoundingFlag

    def _key(self) -> tuple:
        return (
            self.operation,
            tuple(to_bits(x) for x in self.operands),
            to_bits(self.result),
            self.flag,
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, RoundingEvent):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def describe(self) -> str:
        args = ", ".join(repr(x) for x in self.operands)
        return f"{self.operation}({args}) -> {self.result!r} [{self.flag.value}]"


class FloatShadow:
    """
    Immutable binary64 value with its rounding-event trail.

    Equality is identity of bit pattern and trail (NaN == NaN here, -0.0 !=
    0.0); use :meth:`compare` for IEEE ordering.

    Examples:
        >>> (FloatShadow(0.1) + FloatShadow(0.2)).value
        0.30000000000000004
        >>> FloatShadow(1.0).div(FloatShadow(0.0)).value
        inf
    """

    __slots__ = ("_value", "_events")

    def __init__(self, value: float, events: tuple[RoundingEvent, ...] = ()):
        if not isinstance(value, float):
            raise TypeError(f"value must be float, got {type(value).__name__}")
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_events", tuple(events))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_rational(cls, exact: Rational, source: str | None = None) -> "FloatShadow":
        """
        Nearest binary64 value of an exact rational (how a literal enters).

        Args:
            exact: Exact value of the literal
            source: Literal text, used to label the rounding event
        """
        value = exact.to_float()
        label = f"literal {source}" if source is not None else "literal"

        flag = None
        if math.isinf(value):
            flag = RoundingFlag.OVERFLOW
        elif Rational.from_float(value) != exact:
            flag = RoundingFlag.UNDERFLOW if abs(value) < SMALLEST_NORMAL else RoundingFlag.INEXACT

        if flag is None:
            return cls(value)
        return cls(value, (RoundingEvent(label, (), value, flag),))

    # -------------------------------------------------------------------------
    # Accessors and classification
    # -------------------------------------------------------------------------

    @property
    def value(self) -> float:
        return self._value

    @property
    def events(self) -> tuple[RoundingEvent, ...]:
        return self._events

    def is_nan(self) -> bool:
        return math.isnan(self._value)

    def is_infinite(self) -> bool:
        return math.isinf(self._value)

    def is_finite(self) -> bool:
        return math.isfinite(self._value)

    def is_zero(self) -> bool:
        return self._value == 0.0

    def classify(self) -> FloatClass:
        return classify(self._value)

    def compare(self, other: "FloatShadow") -> int | None:
        """IEEE ordering: -1, 0, +1, or None when unordered (a NaN is involved)."""
        a, b = self._value, other._value
        if math.isnan(a) or math.isnan(b):
            return None
        return (a > b) - (a < b)

    def to_rational(self) -> Rational:
        """
        Exact value of the shadow.

        Raises:
            ValueError: If the shadow is NaN or Inf
        """
        return Rational.from_float(self._value)

    # -------------------------------------------------------------------------
    # Arithmetic (one native operation each)
    # -------------------------------------------------------------------------

    def add(self, other: "FloatShadow") -> "FloatShadow":
        return self._combine("add", other, self._value + other._value)

    def sub(self, other: "FloatShadow") -> "FloatShadow":
        return self._combine("sub", other, self._value - other._value)

    def mul(self, other: "FloatShadow") -> "FloatShadow":
        return self._combine("mul", other, self._value * other._value)

    def div(self, other: "FloatShadow") -> "FloatShadow":
        return self._combine("div", other, ieee_divide(self._value, other._value))

    def pow(self, other: "FloatShadow") -> "FloatShadow":
        return self._combine("pow", other, ieee_pow(self._value, other._value))

    def neg(self) -> "FloatShadow":
        # sign flip is exact
        return FloatShadow(-self._value, self._events)

    def abs(self) -> "FloatShadow":
        return FloatShadow(math.fabs(self._value), self._events)

    def minimum(self, other: "FloatShadow") -> "FloatShadow":
        """IEEE 754-2019 minimum: NaN propagates, -0.0 < +0.0."""
        return FloatShadow(_min_max(self._value, other._value, True), self._events + other._events)

    def maximum(self, other: "FloatShadow") -> "FloatShadow":
        """IEEE 754-2019 maximum: NaN propagates, +0.0 > -0.0."""
        return FloatShadow(_min_max(self._value, other._value, False), self._events + other._events)

    def _combine(self, operation: str, other: "FloatShadow", result: float) -> "FloatShadow":
        events = self._events + other._events
        flag = _detect_flag(operation, self._value, other._value, result)
        if flag is not None:
            events += (RoundingEvent(operation, (self._value, other._value), result, flag),)
        return FloatShadow(result, events)

    # -------------------------------------------------------------------------
    # Python protocol
    # -------------------------------------------------------------------------

    def __add__(self, other: "FloatShadow") -> "FloatShadow":
        return self.add(other)

    def __sub__(self, other: "FloatShadow") -> "FloatShadow":
        return self.sub(other)

    def __mul__(self, other: "FloatShadow") -> "FloatShadow":
        return self.mul(other)

    def __truediv__(self, other: "FloatShadow") -> "FloatShadow":
        return self.div(other)

    def __neg__(self) -> "FloatShadow":
        return self.neg()

    def __eq__(self, other) -> bool:
        if not isinstance(other, FloatShadow):
            return NotImplemented
        return to_bits(self._value) == to_bits(other._value) and self._events == other._events

    def __hash__(self) -> int:
        return hash((to_bits(self._value), self._events))

    def __float__(self) -> float:
        return self._value

    def __repr__(self) -> str:
        return f"FloatShadow({self._value!r}, events={len(self._events)})"


# =============================================================================
# HELPERS
# =============================================================================


# beyond this |exponent| a finite, non-trivial power cannot be representable
_EXACT_POW_LIMIT: Final[int] = 4096

_EXACT_OPERATIONS = {
    "add": Rational.add,
    "sub": Rational.sub,
    "mul": Rational.mul,
    "div": Rational.div,
    "pow": Rational.pow,
}


def _detect_flag(operation: str, a: float, b: float, result: float) -> RoundingFlag | None:
    """
    IEEE exception flag of ``operation(a, b) == result``, or None if exact.

    Exactness is decided by redoing the operation on the operands' exact
    rational values. This runs after the native operation and only labels it.
    """
    operands_finite = math.isfinite(a) and math.isfinite(b)

    if math.isnan(result):
        if math.isnan(a) or math.isnan(b):
            return None
        return RoundingFlag.INVALID

    if math.isinf(result):
        if not operands_finite:
            return None
        if operation == "div" and b == 0.0:
            return RoundingFlag.DIVIDE_BY_ZERO
        if operation == "pow" and a == 0.0:
            return RoundingFlag.DIVIDE_BY_ZERO
        return RoundingFlag.OVERFLOW

    if not operands_finite:
        return None

    if operation == "pow":
        if not b.is_integer():
            # no exact rational result to compare against
            return RoundingFlag.INEXACT
        if abs(b) > _EXACT_POW_LIMIT:
            # a finite result this far out is exact only for a base of ±1
            if abs(a) == 1.0:
                return None
            return RoundingFlag.UNDERFLOW if abs(result) < SMALLEST_NORMAL else RoundingFlag.INEXACT

    exact = _EXACT_OPERATIONS[operation](Rational.from_float(a), Rational.from_float(b))
    if Rational.from_float(result) == exact:
        return None
    if abs(result) < SMALLEST_NORMAL:
        return RoundingFlag.UNDERFLOW
    return RoundingFlag.INEXACT


def _min_max(a: float, b: float, want_min: bool) -> float:
    if math.isnan(a) or math.isnan(b):
        return math.nan
    if a == b:
        # distinguishes the zeros; identical otherwise
        if want_min:
            return a if math.copysign(1.0, a) < 0 else b
        return b if math.copysign(1.0, a) < 0 else a
    if want_min:
        return a if a < b else b
    return a if a > b else b
