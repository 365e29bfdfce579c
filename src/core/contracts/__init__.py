"""
Contract Validation Module

JSON records of evaluation outcomes and their JSON Schema validation.
"""

from .records import (
    FailureRecord,
    FloatRecord,
    MetricsRecord,
    OutcomeRecord,
    RationalRecord,
    RoundingEventRecord,
    SuccessRecord,
    outcome_to_dict,
    to_record,
)
from .validators import (
    ContractValidator,
    EvalOutcomeValidator,
    SchemaLoader,
    validate_eval_outcome,
)

__all__ = [
    # Records
    "RationalRecord",
    "FloatRecord",
    "RoundingEventRecord",
    "MetricsRecord",
    "SuccessRecord",
    "FailureRecord",
    "OutcomeRecord",
    "to_record",
    "outcome_to_dict",
    # Validators
    "SchemaLoader",
    "ContractValidator",
    "EvalOutcomeValidator",
    "validate_eval_outcome",
]
