"""
Symbol table — named constants and functions

The table is built once and only read afterwards, so it is safe to share
between evaluations (and threads). A constant pairs an exact Rational with
its canonical binary64 value; for irrational constants the Rational is itself
a truncated decimal approximation, and the constant is flagged as such so
results can say so.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from src.core.math.float_shadow import FloatShadow
from src.core.math.rational import Rational


# =============================================================================
# ENTRIES
# =============================================================================


@dataclass(frozen=True)
class NamedConstant:
    """Constant with both of its values."""

    name: str
    exact: Rational
    shadow: FloatShadow
    approximate: bool
    description: str = ""


@dataclass(frozen=True)
class FunctionRule:
    """
    Function applied to both sides.

    ``exact`` receives Rationals and ``shadow`` receives FloatShadows, in the
    same argument order.
    """

    name: str
    arity: int
    exact: Callable[..., Rational]
    shadow: Callable[..., FloatShadow]
    description: str = ""


def approximate_constant(name: str, digits: str, description: str = "") -> NamedConstant:
    """
    Irrational constant: exact side is the truncated decimal, shadow side is
    that decimal correctly rounded to binary64.
    """
    exact = Rational.parse(digits)
    return NamedConstant(name, exact, FloatShadow(exact.to_float()), True, description)


def exact_constant(name: str, literal: str, description: str = "") -> NamedConstant:
    """Rational constant: the shadow rounds it like any literal."""
    exact = Rational.parse(literal)
    return NamedConstant(name, exact, FloatShadow.from_rational(exact, name), False, description)


# =============================================================================
# TABLE
# =============================================================================


class SymbolTable:
    """Read-only mapping of names to constants and functions."""

    def __init__(
        self,
        constants: Iterable[NamedConstant] = (),
        functions: Iterable[FunctionRule] = (),
    ):
        constant_map = {constant.name: constant for constant in constants}
        function_map = {function.name: function for function in functions}

        clashes = constant_map.keys() & function_map.keys()
        if clashes:
            raise ValueError(f"names used for both a constant and a function: {sorted(clashes)}")

        self._constants = MappingProxyType(constant_map)
        self._functions = MappingProxyType(function_map)

    @property
    def constants(self) -> Mapping[str, NamedConstant]:
        return self._constants

    @property
    def functions(self) -> Mapping[str, FunctionRule]:
        return self._functions

    def lookup_constant(self, name: str) -> NamedConstant | None:
        return self._constants.get(name)

    def lookup_function(self, name: str) -> FunctionRule | None:
        return self._functions.get(name)

    def with_constants(self, *constants: NamedConstant) -> "SymbolTable":
        """New table with extra (or replaced) constants."""
        merged = {**self._constants, **{constant.name: constant for constant in constants}}
        return SymbolTable(merged.values(), self._functions.values())

    def __contains__(self, name: str) -> bool:
        return name in self._constants or name in self._functions


# =============================================================================
# DEFAULTS
# =============================================================================


def _exact_min(a: Rational, b: Rational) -> Rational:
    return a if a.compare(b) <= 0 else b


def _exact_max(a: Rational, b: Rational) -> Rational:
    return a if a.compare(b) >= 0 else b


DEFAULT_SYMBOLS: Final[SymbolTable] = SymbolTable(
    constants=(
        approximate_constant(
            "pi", "3.14159265358979323846264338327950288419716939937510", "circle constant"
        ),
        approximate_constant(
            "tau", "6.28318530717958647692528676655900576839433879875021", "2 * pi"
        ),
        approximate_constant(
            "e", "2.71828182845904523536028747135266249775724709369995", "Euler's number"
        ),
        approximate_constant(
            "phi", "1.61803398874989484820458683436563811772030917980576", "golden ratio"
        ),
        approximate_constant(
            "sqrt2", "1.41421356237309504880168872420969807856967187537694", "square root of 2"
        ),
        approximate_constant(
            "ln2", "0.69314718055994530941723212145817656807550013436025", "natural log of 2"
        ),
    ),
    functions=(
        FunctionRule("abs", 1, Rational.abs, FloatShadow.abs, "absolute value"),
        FunctionRule("min", 2, _exact_min, FloatShadow.minimum, "smaller argument"),
        FunctionRule("max", 2, _exact_max, FloatShadow.maximum, "larger argument"),
    ),
)
