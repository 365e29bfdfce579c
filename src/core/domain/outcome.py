"""
Evaluation outcome — result of one evaluated line

Success carries the paired exact/shadow values and their error metrics;
Failure carries the error kind, message and position. The front end decides
how to render either.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from src.core.domain.errors import ErrorKind
from src.core.math.float_shadow import FloatShadow
from src.core.math.rational import Rational


# =============================================================================
# ENUMS
# =============================================================================


class ErrorClass(str, Enum):
    """Qualitative classification of the shadow result"""

    EXACT = "EXACT"  # shadow equals the exact value
    INEXACT = "INEXACT"  # finite, with a nonzero error
    INFINITE = "INFINITE"  # shadow overflowed or divided by zero
    NAN = "NAN"  # shadow is Not-a-Number


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class EvalResult:
    """Exact and shadow values of the same expression tree."""

    exact: Rational
    shadow: FloatShadow

    # Named constants whose "exact" value is a rational approximation
    approximations: tuple[str, ...] = ()


@dataclass(frozen=True)
class ErrorMetrics:
    """
    Discrepancy between the exact value and the shadow.

    None means undefined: relative error and ULP distance when the exact
    value is zero, every numeric field when the shadow is not finite.
    """

    classification: ErrorClass
    absolute_error: Rational | None
    relative_error: Rational | None
    ulp_distance: int | None

    # absolute_error in units of ulp(exact rounded to binary64)
    ulp_error: Rational | None

    # shadow == exact rounded to binary64
    correctly_rounded: bool | None


@dataclass(frozen=True)
class Success:
    """Line evaluated on both sides."""

    result: EvalResult
    metrics: ErrorMetrics

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    Line failed to evaluate.

    For DivisionByZero the shadow side still ran to completion and its value
    is kept in ``shadow``.
    """

    kind: ErrorKind
    message: str
    position: int | None = None
    expected: str | None = None
    found: str | None = None
    shadow: FloatShadow | None = None

    @property
    def ok(self) -> bool:
        return False


EvalOutcome = Union[Success, Failure]
