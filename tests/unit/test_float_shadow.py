"""
Tests for FloatShadow

Checks:
1. One native binary64 operation per step (values match plain float code)
2. IEEE results instead of exceptions (Inf, NaN, signed zero)
3. Rounding-event trail and its flags
4. Bit-pattern equality (NaN reproducible, -0.0 distinct)
"""

import math

import pytest

from src.core.math.float_shadow import FloatShadow, RoundingEvent, RoundingFlag
from src.core.math.ieee754 import FloatClass
from src.core.math.rational import Rational


def literal(text: str) -> FloatShadow:
    return FloatShadow.from_rational(Rational.parse(text), text)


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestFromRational:
    """Tests for literal conversion"""

    def test_exact_literal_has_no_events(self) -> None:
        shadow = literal("0.75")
        assert shadow.value == 0.75
        assert shadow.events == ()

    def test_inexact_literal(self) -> None:
        """0.1 is not representable"""
        shadow = literal("0.1")
        assert shadow.value == 0.1
        assert [e.flag for e in shadow.events] == [RoundingFlag.INEXACT]
        assert shadow.events[0].operation == "literal 0.1"

    def test_overflowing_literal(self) -> None:
        shadow = literal("1e400")
        assert shadow.value == math.inf
        assert shadow.events[0].flag is RoundingFlag.OVERFLOW

    def test_underflowing_literal(self) -> None:
        shadow = literal("1e-400")
        assert shadow.value == 0.0
        assert shadow.events[0].flag is RoundingFlag.UNDERFLOW

    def test_rejects_non_float(self) -> None:
        with pytest.raises(TypeError):
            FloatShadow(1)

    def test_immutable(self) -> None:
        shadow = FloatShadow(1.0)
        with pytest.raises(AttributeError):
            shadow._value = 2.0


# =============================================================================
# ARITHMETIC
# =============================================================================


class TestArithmetic:
    """Tests for native operations and their flags"""

    def test_point_one_plus_point_two(self) -> None:
        """The classic: two inexact literals and an inexact sum"""
        total = literal("0.1") + literal("0.2")
        assert total.value == 0.1 + 0.2 == 0.30000000000000004
        assert len(total.events) == 3
        assert total.events[-1].operation == "add"
        assert total.events[-1].flag is RoundingFlag.INEXACT
        assert total.events[-1].describe() == "add(0.1, 0.2) -> 0.30000000000000004 [inexact]"

    def test_exact_operations_record_nothing(self) -> None:
        a, b = FloatShadow(1.5), FloatShadow(0.25)
        for result in (a + b, a - b, a * b, a / b, a.pow(FloatShadow(2.0))):
            assert result.events == ()

    def test_division_by_zero(self) -> None:
        result = FloatShadow(1.0).div(FloatShadow(0.0))
        assert result.value == math.inf
        assert result.events[-1].flag is RoundingFlag.DIVIDE_BY_ZERO

    def test_division_by_negative_zero(self) -> None:
        assert FloatShadow(1.0).div(FloatShadow(-0.0)).value == -math.inf

    def test_zero_over_zero_is_invalid(self) -> None:
        result = FloatShadow(0.0) / FloatShadow(0.0)
        assert result.is_nan()
        assert result.events[-1].flag is RoundingFlag.INVALID

    def test_nan_propagates_quietly(self) -> None:
        """An operation on NaN input raises no new flag"""
        nan = FloatShadow(0.0) / FloatShadow(0.0)
        result = nan + FloatShadow(1.0)
        assert result.is_nan()
        assert result.events == nan.events

    def test_overflow(self) -> None:
        result = FloatShadow(1e308) * FloatShadow(10.0)
        assert result.is_infinite()
        assert result.events[-1].flag is RoundingFlag.OVERFLOW

    def test_underflow(self) -> None:
        """Halving the smallest subnormal ties to zero"""
        result = FloatShadow(5e-324).div(FloatShadow(2.0))
        assert result.value == 0.0
        assert result.events[-1].flag is RoundingFlag.UNDERFLOW

    def test_power(self) -> None:
        assert FloatShadow(2.0).pow(FloatShadow(-1.0)).value == 0.5
        assert FloatShadow(0.0).pow(FloatShadow(-1.0)).events[-1].flag is RoundingFlag.DIVIDE_BY_ZERO
        assert FloatShadow(10.0).pow(FloatShadow(400.0)).events[-1].flag is RoundingFlag.OVERFLOW
        assert FloatShadow(2.0).pow(FloatShadow(0.5)).events[-1].flag is RoundingFlag.INEXACT

    def test_large_power_of_one_is_exact(self) -> None:
        assert FloatShadow(-1.0).pow(FloatShadow(100001.0)).events == ()

    def test_neg_flips_sign_of_zero(self) -> None:
        result = FloatShadow(0.0).neg()
        assert result.value == 0.0
        assert math.copysign(1.0, result.value) == -1.0

    def test_abs(self) -> None:
        assert FloatShadow(-2.5).abs().value == 2.5

    def test_events_accumulate_left_to_right(self) -> None:
        """Operand trails come first, then the operation's own event"""
        a, b = literal("0.1"), literal("0.3")
        result = a.mul(b)
        assert result.events[: len(a.events)] == a.events
        assert result.events[len(a.events) : len(a.events) + len(b.events)] == b.events


class TestMinMax:
    """Tests for IEEE 754-2019 minimum / maximum"""

    def test_ordinary(self) -> None:
        assert FloatShadow(1.0).minimum(FloatShadow(2.0)).value == 1.0
        assert FloatShadow(1.0).maximum(FloatShadow(2.0)).value == 2.0

    def test_signed_zeros(self) -> None:
        """-0.0 is below +0.0"""
        low = FloatShadow(0.0).minimum(FloatShadow(-0.0)).value
        high = FloatShadow(-0.0).maximum(FloatShadow(0.0)).value
        assert math.copysign(1.0, low) == -1.0
        assert math.copysign(1.0, high) == 1.0

    def test_nan_propagates(self) -> None:
        assert FloatShadow(math.nan).minimum(FloatShadow(1.0)).is_nan()
        assert FloatShadow(1.0).maximum(FloatShadow(math.nan)).is_nan()


# =============================================================================
# QUERIES AND EQUALITY
# =============================================================================


class TestQueries:
    """Tests for classification, comparison and conversion"""

    def test_classify(self) -> None:
        assert FloatShadow(5e-324).classify() is FloatClass.SUBNORMAL
        assert FloatShadow(math.inf).classify() is FloatClass.INFINITE

    def test_compare(self) -> None:
        assert FloatShadow(1.0).compare(FloatShadow(2.0)) == -1
        assert FloatShadow(-0.0).compare(FloatShadow(0.0)) == 0
        assert FloatShadow(math.nan).compare(FloatShadow(0.0)) is None

    def test_to_rational(self) -> None:
        assert FloatShadow(0.5).to_rational() == Rational(1, 2)
        with pytest.raises(ValueError):
            FloatShadow(math.inf).to_rational()

    def test_equality_is_bitwise(self) -> None:
        """NaN equals NaN, -0.0 differs from +0.0"""
        assert FloatShadow(math.nan) == FloatShadow(math.nan)
        assert FloatShadow(0.0) != FloatShadow(-0.0)
        assert hash(FloatShadow(math.nan)) == hash(FloatShadow(math.nan))

    def test_equality_includes_trail(self) -> None:
        assert literal("0.1") != FloatShadow(0.1)

    def test_repeated_invalid_operations_are_equal(self) -> None:
        """Events holding NaN still compare equal"""
        first = FloatShadow(0.0) / FloatShadow(0.0)
        second = FloatShadow(0.0) / FloatShadow(0.0)
        assert first == second
        event = RoundingEvent("div", (0.0, 0.0), math.nan, RoundingFlag.INVALID)
        assert event == first.events[0]
