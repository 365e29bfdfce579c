"""
JSON Schema Contract Validators

Validates outcome records against the formal JSON Schema contracts kept in
contracts/schema/ at the project root, using the jsonschema library.

Schemas:
- eval_outcome.json (one evaluated line: success or failure)
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Loads JSON Schema files.

    Finds the schemas in contracts/schema/ relative to the project root.
    """

    def __init__(self, schema_dir: Path | None = None):
        # project root is 4 levels up from this file
        self._schema_dir = schema_dir or (
            Path(__file__).parent.parent.parent.parent / "contracts" / "schema"
        )
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Load a JSON Schema file.

        Args:
            schema_name: Schema name without extension (e.g. 'eval_outcome')

        Returns:
            The schema as a dict

        Raises:
            FileNotFoundError: If the schema file does not exist
            json.JSONDecodeError: If the file is not valid JSON
            ValueError: If the file is not a valid Draft 2020-12 schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Validates data against one named JSON Schema."""

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: If the data does not match the schema
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Yields a ValidationError for every violation found."""
        return self.validator.iter_errors(data)


class EvalOutcomeValidator(ContractValidator):
    """Validator for the eval_outcome contract."""

    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__("eval_outcome", loader)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_eval_outcome(data: Dict[str, Any]) -> None:
    """
    Validate one eval_outcome record.

    Raises:
        ValidationError: If the data does not match the schema
    """
    EvalOutcomeValidator().validate(data)
