"""
Loading of pipeline definition files.

A definition is a JSON or YAML document with a `steps` list:

    steps:
      - type: decode-base64
      - type: decompress-gzip
      - type: extract-xml
        xmlTag: message
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from stepline.errors import PipelineDefinitionError
from stepline.models import Step
from stepline.schema_validator import validate_definition

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def parse_definition(text: str, fmt: str = "json") -> Any:
    """
    Parse definition text.

    Args:
        text: Raw file content
        fmt: "json" or "yaml"
    """
    try:
        if fmt == "yaml":
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise PipelineDefinitionError(f"Failed to parse pipeline definition: {e}") from e


def build_steps(definition: Any, source: Path | str | None = None, strict: bool = True) -> list[Step]:
    """
    Validate a parsed definition and build its steps.

    With strict=False, schema errors are only logged; steps naming unknown
    operations are kept and fail when the pipeline runs.
    """
    result = validate_definition(definition, source)
    if not result.valid:
        if strict:
            raise PipelineDefinitionError(
                "Invalid pipeline definition:\n" + "\n".join(result.errors)
            )
        if not isinstance(definition, dict) or not isinstance(definition.get("steps"), list):
            raise PipelineDefinitionError("Pipeline definition has no 'steps' list")

    try:
        steps = [Step.from_dict(item) for item in definition["steps"] if isinstance(item, dict)]
    except (TypeError, ValueError) as e:
        raise PipelineDefinitionError(f"Invalid step in pipeline definition: {e}") from e
    logger.debug(f"Loaded {len(steps)} steps from {source or 'definition'}")
    return steps


def load_definition(path: Path | str, strict: bool = True) -> list[Step]:
    """
    Load the steps of a pipeline definition file.

    The format is picked from the suffix: .yaml/.yml is YAML, anything
    else JSON.

    Raises:
        PipelineDefinitionError: unreadable file, bad syntax, or (strict)
            schema violations
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PipelineDefinitionError(f"Cannot read pipeline definition {path}: {e}") from e

    fmt = "yaml" if path.suffix.lower() in YAML_SUFFIXES else "json"
    return build_steps(parse_definition(text, fmt), path, strict=strict)


def dump_definition(steps: list[Step], name: str | None = None) -> dict:
    """Serialize steps back into a definition dict."""
    definition: dict[str, Any] = {}
    if name:
        definition["name"] = name
    definition["steps"] = [step.to_dict() for step in steps]
    return definition
