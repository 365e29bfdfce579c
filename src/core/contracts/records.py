"""
Outcome records — JSON form of an evaluation outcome

Immutable pydantic models mirroring contracts/schema/eval_outcome.json.
Rationals are written as decimal strings (``"n"`` or ``"n/d"``) because
their numerators and denominators are unbounded; floats are written both
as ``repr`` text and as ``float.hex()`` so the exact bit pattern survives.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from src.core.domain.errors import ErrorKind
from src.core.domain.outcome import ErrorClass, ErrorMetrics, EvalOutcome, Success
from src.core.math.decimal_expansion import DecimalExpansion
from src.core.math.float_shadow import FloatShadow, RoundingEvent, RoundingFlag
from src.core.math.ieee754 import FloatClass, classify
from src.core.math.rational import Rational, int_to_text

# Fractional digits written into the "decimal" field before truncating
RECORD_DECIMAL_DIGITS = 64


# =============================================================================
# VALUE RECORDS
# =============================================================================


class RationalRecord(BaseModel):
    """Exact value."""

    numerator: str = Field(..., pattern=r"^-?[0-9]+$", description="Reduced numerator")
    denominator: str = Field(..., pattern=r"^[1-9][0-9]*$", description="Positive denominator")
    text: str = Field(..., description="n or n/d")
    decimal: str = Field(..., min_length=1, description="Decimal expansion, period in parentheses")

    model_config = {"frozen": True}

    @classmethod
    def from_rational(cls, value: Rational) -> "RationalRecord":
        return cls(
            numerator=int_to_text(value.numerator),
            denominator=int_to_text(value.denominator),
            text=str(value),
            decimal=str(DecimalExpansion.from_rational(value, RECORD_DECIMAL_DIGITS)),
        )


class FloatRecord(BaseModel):
    """Binary64 value."""

    text: str = Field(..., min_length=1, description="Shortest round-tripping repr")
    hex: str = Field(..., min_length=1, description="float.hex() form")
    float_class: FloatClass = Field(..., description="zero/subnormal/normal/infinite/nan")

    model_config = {"frozen": True}

    @classmethod
    def from_float(cls, value: float) -> "FloatRecord":
        return cls(text=repr(value), hex=value.hex(), float_class=classify(value))


class RoundingEventRecord(BaseModel):
    """One non-exact step of the shadow computation."""

    operation: str = Field(..., min_length=1)
    operands: list[str] = Field(default_factory=list, description="Operand repr texts")
    result: str = Field(..., description="Result repr text")
    flag: RoundingFlag

    model_config = {"frozen": True}

    @classmethod
    def from_event(cls, event: RoundingEvent) -> "RoundingEventRecord":
        return cls(
            operation=event.operation,
            operands=[repr(x) for x in event.operands],
            result=repr(event.result),
            flag=event.flag,
        )


class MetricsRecord(BaseModel):
    """Error metrics; null where undefined."""

    classification: ErrorClass
    absolute_error: Optional[str] = None
    relative_error: Optional[str] = None
    ulp_distance: Optional[int] = Field(None, ge=0)
    ulp_error: Optional[str] = None
    correctly_rounded: Optional[bool] = None

    model_config = {"frozen": True}

    @classmethod
    def from_metrics(cls, metrics: ErrorMetrics) -> "MetricsRecord":
        return cls(
            classification=metrics.classification,
            absolute_error=_text(metrics.absolute_error),
            relative_error=_text(metrics.relative_error),
            ulp_distance=metrics.ulp_distance,
            ulp_error=_text(metrics.ulp_error),
            correctly_rounded=metrics.correctly_rounded,
        )


# =============================================================================
# OUTCOME RECORDS
# =============================================================================


class SuccessRecord(BaseModel):
    """Successful evaluation."""

    status: Literal["success"] = "success"
    float_format: Literal["binary64"] = "binary64"
    exact: RationalRecord
    shadow: FloatRecord
    approximations: list[str] = Field(default_factory=list)
    rounding_events: list[RoundingEventRecord] = Field(default_factory=list)
    metrics: MetricsRecord

    model_config = {"frozen": True}


class FailureRecord(BaseModel):
    """Failed evaluation."""

    status: Literal["failure"] = "failure"
    kind: ErrorKind
    message: str = Field(..., min_length=1)
    position: Optional[int] = Field(None, ge=0)
    expected: Optional[str] = None
    found: Optional[str] = None
    shadow: Optional[FloatRecord] = None

    model_config = {"frozen": True}


OutcomeRecord = Union[SuccessRecord, FailureRecord]


def to_record(outcome: EvalOutcome) -> OutcomeRecord:
    """
    Convert an outcome to its record model.

    Args:
        outcome: Success or Failure from the line evaluator

    Returns:
        SuccessRecord or FailureRecord
    """
    if isinstance(outcome, Success):
        result = outcome.result
        return SuccessRecord(
            exact=RationalRecord.from_rational(result.exact),
            shadow=FloatRecord.from_float(result.shadow.value),
            approximations=list(result.approximations),
            rounding_events=[RoundingEventRecord.from_event(e) for e in result.shadow.events],
            metrics=MetricsRecord.from_metrics(outcome.metrics),
        )

    return FailureRecord(
        kind=outcome.kind,
        message=outcome.message,
        position=outcome.position,
        expected=outcome.expected,
        found=outcome.found,
        shadow=_shadow_record(outcome.shadow),
    )


def outcome_to_dict(outcome: EvalOutcome) -> dict:
    """JSON-compatible dict of an outcome (enums as their values)."""
    return to_record(outcome).model_dump(mode="json")


def _text(value: Rational | None) -> str | None:
    return None if value is None else str(value)


def _shadow_record(shadow: FloatShadow | None) -> FloatRecord | None:
    return None if shadow is None else FloatRecord.from_float(shadow.value)
