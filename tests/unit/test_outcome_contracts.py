"""
Tests for outcome records and the eval_outcome JSON Schema

Checks:
- The schema itself is a valid Draft 2020-12 schema
- Records of real outcomes (success, failure, NaN, Inf) validate
- Violations of required fields, enums, patterns and nullability are caught
- Record models are immutable
"""

import json

import pytest
from jsonschema import ValidationError
from pydantic import ValidationError as PydanticValidationError

from src.core.contracts import (
    EvalOutcomeValidator,
    FailureRecord,
    SchemaLoader,
    SuccessRecord,
    outcome_to_dict,
    to_record,
    validate_eval_outcome,
)
from src.evaluator.pipeline import evaluate_line


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def success_dict():
    return outcome_to_dict(evaluate_line("0.1 + 0.2"))


@pytest.fixture
def failure_dict():
    return outcome_to_dict(evaluate_line("1/0"))


# =============================================================================
# SCHEMA
# =============================================================================


class TestSchemaLoader:
    """Tests for loading the schema"""

    def test_schema_loads(self) -> None:
        schema = SchemaLoader().load_schema("eval_outcome")
        assert schema["title"] == "eval_outcome"

    def test_schema_is_cached(self) -> None:
        loader = SchemaLoader()
        assert loader.load_schema("eval_outcome") is loader.load_schema("eval_outcome")

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("no_such_schema")

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(RuntimeError):
            SchemaLoader(tmp_path / "absent")

    def test_invalid_schema_file(self, tmp_path) -> None:
        (tmp_path / "broken.json").write_text(json.dumps({"type": 12}), encoding="utf-8")
        with pytest.raises(ValueError):
            SchemaLoader(tmp_path).load_schema("broken")


# =============================================================================
# VALID RECORDS
# =============================================================================


class TestValidRecords:
    """Tests that real outcomes produce schema-valid records"""

    @pytest.mark.parametrize(
        "line",
        ["1/2 + 1/4", "0.1 + 0.2", "1 - 1", "1e200 * 1e200", "pi", "1/0", "0/0", "(1 + ", "1 & 2",
         "5e-324 / 2", "2 ^ 0.5"],
    )
    def test_outcome_validates(self, line: str) -> None:
        validate_eval_outcome(outcome_to_dict(evaluate_line(line)))

    def test_success_fields(self, success_dict) -> None:
        assert success_dict["status"] == "success"
        assert success_dict["exact"]["text"] == "3/10"
        assert success_dict["exact"]["decimal"] == "0.3"
        assert success_dict["shadow"]["text"] == "0.30000000000000004"
        assert success_dict["shadow"]["hex"] == (0.1 + 0.2).hex()
        assert success_dict["metrics"]["ulp_distance"] == 1
        assert [e["flag"] for e in success_dict["rounding_events"]] == ["inexact"] * 3

    def test_failure_fields(self, failure_dict) -> None:
        assert failure_dict["status"] == "failure"
        assert failure_dict["kind"] == "DivisionByZero"
        assert failure_dict["position"] == 1
        assert failure_dict["shadow"]["text"] == "inf"
        assert failure_dict["shadow"]["float_class"] == "infinite"

    def test_record_is_json_serializable(self, success_dict) -> None:
        assert json.loads(json.dumps(success_dict)) == success_dict

    def test_record_types(self) -> None:
        assert isinstance(to_record(evaluate_line("1")), SuccessRecord)
        assert isinstance(to_record(evaluate_line("1 +")), FailureRecord)


# =============================================================================
# VIOLATIONS
# =============================================================================


class TestViolations:
    """Tests that the schema rejects malformed records"""

    def test_missing_required_field(self, success_dict) -> None:
        del success_dict["metrics"]
        with pytest.raises(ValidationError):
            validate_eval_outcome(success_dict)

    def test_unknown_error_kind(self, failure_dict) -> None:
        failure_dict["kind"] = "Oops"
        with pytest.raises(ValidationError):
            validate_eval_outcome(failure_dict)

    def test_bad_rational_text(self, success_dict) -> None:
        success_dict["metrics"]["absolute_error"] = "0.5"
        with pytest.raises(ValidationError):
            validate_eval_outcome(success_dict)

    def test_zero_denominator(self, success_dict) -> None:
        success_dict["exact"]["denominator"] = "0"
        with pytest.raises(ValidationError):
            validate_eval_outcome(success_dict)

    def test_extra_field(self, failure_dict) -> None:
        failure_dict["note"] = "extra"
        with pytest.raises(ValidationError):
            validate_eval_outcome(failure_dict)

    def test_iter_errors_reports_all(self, success_dict) -> None:
        del success_dict["metrics"]["classification"]
        success_dict["shadow"]["float_class"] = "weird"
        validator = EvalOutcomeValidator()
        assert not validator.is_valid(success_dict)
        assert list(validator.iter_errors(success_dict))


# =============================================================================
# MODELS
# =============================================================================


class TestRecordModels:
    """Tests for the pydantic record models"""

    def test_frozen(self) -> None:
        record = to_record(evaluate_line("1/4"))
        with pytest.raises(PydanticValidationError):
            record.status = "failure"

    def test_negative_position_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            FailureRecord(kind="LexError", message="bad", position=-1)
