"""
JSON Schema validation for pipeline definitions.

Validates definitions against schemas/pipeline.schema.json before they are
turned into Step lists.

In dev mode, validation failures raise exceptions (fail-fast).
Otherwise, validation failures log warnings and are returned to the caller.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from stepline.config import config
from stepline.errors import PipelineDefinitionError

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).parent / "schemas"
PIPELINE_SCHEMA = SCHEMAS_DIR / "pipeline.schema.json"


@dataclass
class ValidationResult:
    """Result of schema validation."""

    valid: bool
    errors: list[str]

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(valid=True, errors=[])

    @classmethod
    def failure(cls, errors: list[str]) -> ValidationResult:
        return cls(valid=False, errors=errors)


class SchemaValidator:
    """
    Validates JSON data against schemas.

    Schemas and compiled validators are cached per path.
    """

    # Schema cache
    _schemas: dict[str, dict] = {}
    _validators: dict[str, Any] = {}

    _dev_mode: bool = config.DEV_MODE

    @classmethod
    def set_dev_mode(cls, enabled: bool) -> None:
        """Enable or disable dev mode (fail-fast on validation errors)."""
        cls._dev_mode = enabled

    @classmethod
    def load_schema(cls, schema_path: Path | str) -> dict:
        """
        Load a JSON schema from file.

        Raises:
            PipelineDefinitionError: if the schema is missing or unreadable
        """
        schema_path = Path(schema_path)
        cache_key = str(schema_path)

        if cache_key in cls._schemas:
            return cls._schemas[cache_key]

        try:
            with open(schema_path, encoding="utf-8") as f:
                schema = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise PipelineDefinitionError(f"Failed to load schema {schema_path}: {e}") from e

        cls._schemas[cache_key] = schema
        return schema

    @classmethod
    def _get_validator(cls, schema_path: Path | str) -> Draft202012Validator:
        """Get or create a validator for a schema."""
        cache_key = str(Path(schema_path))

        if cache_key not in cls._validators:
            cls._validators[cache_key] = Draft202012Validator(cls.load_schema(schema_path))
        return cls._validators[cache_key]

    @classmethod
    def validate(
        cls,
        data: Any,
        schema_path: Path | str,
        context: str = "",
    ) -> ValidationResult:
        """
        Validate data against a JSON schema.

        Args:
            data: The data to validate
            schema_path: Path to the JSON schema file
            context: Optional context string for error messages (e.g., file name)

        Returns:
            ValidationResult with valid=True if valid, or valid=False with error messages

        Raises:
            PipelineDefinitionError: In dev mode, if validation fails
        """
        validator = cls._get_validator(schema_path)

        errors: list[str] = []
        for error in validator.iter_errors(data):
            path = ".".join(str(p) for p in error.path) or "(root)"
            prefix = f"{context}: " if context else ""
            errors.append(f"{prefix}{path}: {error.message}")

        if errors:
            if cls._dev_mode:
                error_msg = "\n".join(errors)
                raise PipelineDefinitionError(f"Schema validation failed:\n{error_msg}")
            for error in errors:
                logger.warning(f"Schema validation error: {error}")
            return ValidationResult.failure(errors)

        return ValidationResult.success()


def validate_definition(definition: Any, source: Path | str | None = None) -> ValidationResult:
    """Convenience function to validate a pipeline definition."""
    context = Path(source).name if source else ""
    return SchemaValidator.validate(definition, PIPELINE_SCHEMA, context)
