"""
Tests for the DualEvaluator

Checks:
1. Both sides evaluate the same tree with the same operations
2. Exact division by zero: DivisionByZero carrying the shadow outcome
3. Named constants and functions (lookup, arity, approximation flag)
4. Power domain and size limits
"""

import math

import pytest

from src.core.domain.errors import (
    DivisionByZero,
    DomainError,
    ResourceExhausted,
    UnknownIdentifier,
)
from src.core.domain.outcome import EvalResult
from src.core.math.float_shadow import RoundingFlag
from src.core.math.rational import Rational
from src.evaluator.config import EvaluatorConfig
from src.evaluator.dual_evaluator import BINARY_METHODS, DualEvaluator
from src.evaluator.lexer import tokenize
from src.evaluator.parser import parse
from src.evaluator.symbols import DEFAULT_SYMBOLS, exact_constant


def evaluate(text: str, config: EvaluatorConfig | None = None) -> EvalResult:
    config = config or EvaluatorConfig()
    return DualEvaluator(config).evaluate(parse(tokenize(text), config))


# =============================================================================
# ARITHMETIC
# =============================================================================


class TestArithmetic:
    """Tests for paired evaluation"""

    def test_exact_and_shadow(self) -> None:
        result = evaluate("0.1 + 0.2")
        assert result.exact == Rational(3, 10)
        assert result.shadow.value == 0.1 + 0.2

    def test_shadow_rounds_every_step(self) -> None:
        """The shadow is the float program, not the rounded exact value"""
        result = evaluate("(0.1 + 0.2) - 0.3")
        assert result.exact == Rational(0)
        assert result.shadow.value == (0.1 + 0.2) - 0.3
        assert result.shadow.value != 0.0

    def test_unary_minus_and_power(self) -> None:
        result = evaluate("-2^2")
        assert result.exact == Rational(-4)
        assert result.shadow.value == -4.0

    def test_negative_exponent(self) -> None:
        result = evaluate("2^-3")
        assert result.exact == Rational(1, 8)
        assert result.shadow.value == 0.125

    def test_repeating_literal(self) -> None:
        result = evaluate("0.(3) * 3")
        assert result.exact == Rational(1)
        assert result.shadow.value == 1.0

    def test_method_table(self) -> None:
        """Each operator names a method both number types have"""
        for method in BINARY_METHODS.values():
            assert hasattr(Rational, method)
            assert hasattr(type(evaluate("1").shadow), method)

    def test_long_chain_is_iterative(self) -> None:
        result = evaluate("+".join(["1"] * 500))
        assert result.exact == Rational(500)
        assert result.shadow.value == 500.0

    def test_stateless(self) -> None:
        evaluator = DualEvaluator(EvaluatorConfig())
        tree = parse(tokenize("1/3 + 1/7"))
        assert evaluator.evaluate(tree) == evaluator.evaluate(tree)


# =============================================================================
# DIVISION BY ZERO
# =============================================================================


class TestDivisionByZero:
    """Tests for exact faults with a completed shadow"""

    def test_one_over_zero(self) -> None:
        with pytest.raises(DivisionByZero) as info:
            evaluate("1/0")
        assert info.value.position == 1
        assert info.value.shadow.value == math.inf
        assert info.value.shadow.events[-1].flag is RoundingFlag.DIVIDE_BY_ZERO

    def test_zero_over_zero(self) -> None:
        with pytest.raises(DivisionByZero) as info:
            evaluate("0/0")
        assert info.value.shadow.is_nan()

    def test_shadow_continues_after_fault(self) -> None:
        """-1/0 + 1 still reports the float outcome of the whole line"""
        with pytest.raises(DivisionByZero) as info:
            evaluate("-1/0 + 1")
        assert info.value.shadow.value == -math.inf

    def test_first_fault_position_is_kept(self) -> None:
        with pytest.raises(DivisionByZero) as info:
            evaluate("1/0 + 2/0")
        assert info.value.position == 1

    def test_cancelled_shadow_fault(self) -> None:
        """1/(1-1) faults even though nothing is written as a literal 0"""
        with pytest.raises(DivisionByZero) as info:
            evaluate("1/(1-1)")
        assert info.value.shadow.value == math.inf

    def test_zero_to_negative_power(self) -> None:
        with pytest.raises(DivisionByZero) as info:
            evaluate("0^-1")
        assert info.value.shadow.value == math.inf


# =============================================================================
# SYMBOLS
# =============================================================================


class TestSymbols:
    """Tests for constants and functions"""

    def test_approximate_constant(self) -> None:
        result = evaluate("2 * pi")
        assert result.approximations == ("pi",)
        assert result.shadow.value == 2 * math.pi

    def test_approximations_merge_once(self) -> None:
        result = evaluate("pi + e + pi")
        assert result.approximations == ("pi", "e")

    def test_functions(self) -> None:
        assert evaluate("abs(-3/4)").exact == Rational(3, 4)
        assert evaluate("min(1/3, 0.3)").exact == Rational(3, 10)
        assert evaluate("max(1/3, 0.3)").exact == Rational(1, 3)

    def test_unknown_identifier(self) -> None:
        with pytest.raises(UnknownIdentifier) as info:
            evaluate("1 + foo")
        assert info.value.position == 4
        assert info.value.name == "foo"

    def test_unknown_function(self) -> None:
        with pytest.raises(UnknownIdentifier):
            evaluate("sqrt(2)")

    def test_function_used_as_constant(self) -> None:
        with pytest.raises(DomainError):
            evaluate("abs + 1")

    def test_constant_called_as_function(self) -> None:
        with pytest.raises(DomainError):
            evaluate("pi(2)")

    def test_wrong_arity(self) -> None:
        with pytest.raises(DomainError) as info:
            evaluate("max(1)")
        assert "takes 2 argument(s)" in info.value.message

    def test_custom_exact_constant(self) -> None:
        symbols = DEFAULT_SYMBOLS.with_constants(exact_constant("tenth", "0.1"))
        result = evaluate("tenth * 10", EvaluatorConfig(symbols=symbols))
        assert result.exact == Rational(1)
        assert result.approximations == ()
        assert result.shadow.value == 1.0


# =============================================================================
# LIMITS AND DOMAIN
# =============================================================================


class TestLimits:
    """Tests for power domain and size limits"""

    def test_fractional_exponent(self) -> None:
        with pytest.raises(DomainError) as info:
            evaluate("2^(1/2)")
        assert info.value.position == 1

    def test_exponent_too_large(self) -> None:
        with pytest.raises(ResourceExhausted):
            evaluate("2^100000")

    def test_result_too_large(self) -> None:
        config = EvaluatorConfig(max_rational_bits=64)
        with pytest.raises(ResourceExhausted):
            evaluate("3^100", config)

    def test_literal_exponent_limit(self) -> None:
        with pytest.raises(ResourceExhausted) as info:
            evaluate("1 + 1e999999")
        assert info.value.position == 4

    def test_power_of_one_is_cheap(self) -> None:
        result = evaluate("1^4096")
        assert result.exact == Rational(1)
