"""
ErrorReport — discrepancy between the exact value and the shadow

All error arithmetic is exact: the shadow is re-expressed as the rational it
denotes and subtracted from the exact value as Rationals, so the metric
itself never adds rounding error.

METRICS:
    absolute_error   = |exact - shadow|
    relative_error   = absolute_error / |exact|          (exact != 0)
    ulp_distance     = #binary64 steps between round(exact) and shadow
                                                         (exact != 0)
    ulp_error        = absolute_error / ulp(round(exact))
    correctly_rounded = shadow == round(exact)

where round() is the correctly rounded binary64 conversion. A NaN or
infinite shadow has no numeric error: it is classified instead.
"""

import math

from src.core.domain.outcome import ErrorClass, ErrorMetrics, EvalResult
from src.core.math.float_shadow import FloatShadow
from src.core.math.ieee754 import ulp, ulp_distance
from src.core.math.rational import Rational


def absolute_error(exact: Rational, shadow: FloatShadow) -> Rational:
    """
    Exact ``|exact - shadow|``.

    Raises:
        ValueError: If the shadow is not finite
    """
    return exact.sub(shadow.to_rational()).abs()


def relative_error(exact: Rational, shadow: FloatShadow) -> Rational | None:
    """``|exact - shadow| / |exact|``, or None (undefined) when exact is zero."""
    if exact.is_zero():
        return None
    return absolute_error(exact, shadow).div(exact.abs())


def ulp_distance_to_exact(exact: Rational, shadow: FloatShadow) -> int | None:
    """
    Binary64 steps between the correctly rounded exact value and the shadow.

    None when exact is zero or the shadow is not finite. An exact value past
    the binary64 range rounds to Inf, which sits one step beyond the largest
    finite value.
    """
    if exact.is_zero() or not shadow.is_finite():
        return None
    return ulp_distance(exact.to_float(), shadow.value)


def ulp_error(exact: Rational, shadow: FloatShadow) -> Rational | None:
    """Absolute error in units of ulp(round(exact)); None where that ULP is not finite."""
    if not shadow.is_finite():
        return None
    unit = ulp(exact.to_float())
    if not math.isfinite(unit):
        return None
    return absolute_error(exact, shadow).div(Rational.from_float(unit))


def classify_result(exact: Rational, shadow: FloatShadow) -> ErrorClass:
    if shadow.is_nan():
        return ErrorClass.NAN
    if shadow.is_infinite():
        return ErrorClass.INFINITE
    if shadow.to_rational() == exact:
        return ErrorClass.EXACT
    return ErrorClass.INEXACT


def compute_error_metrics(result: EvalResult) -> ErrorMetrics:
    """
    All metrics for one evaluation result.

    Args:
        result: Paired exact/shadow values

    Returns:
        ErrorMetrics; numeric fields are None where undefined
    """
    exact, shadow = result.exact, result.shadow
    classification = classify_result(exact, shadow)

    if classification in (ErrorClass.NAN, ErrorClass.INFINITE):
        return ErrorMetrics(
            classification=classification,
            absolute_error=None,
            relative_error=None,
            ulp_distance=None,
            ulp_error=None,
            correctly_rounded=None,
        )

    rounded = exact.to_float()
    return ErrorMetrics(
        classification=classification,
        absolute_error=absolute_error(exact, shadow),
        relative_error=relative_error(exact, shadow),
        ulp_distance=ulp_distance_to_exact(exact, shadow),
        ulp_error=ulp_error(exact, shadow),
        correctly_rounded=math.isfinite(rounded) and rounded == shadow.value,
    )
