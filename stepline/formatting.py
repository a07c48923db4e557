"""
Display helpers for steps and step results.

describe_step renders the short label used in pipeline overviews and result
headers; prettify_content re-indents JSON or XML for reading. Neither ever
raises on odd content.
"""

from __future__ import annotations

import json
import logging

from stepline.errors import MalformedStructuredData
from stepline.models import OperationKind
from stepline.models import Step
from stepline.pipeline.operations.extract import format_xml
from stepline.pipeline.operations.extract import parse_xml

logger = logging.getLogger(__name__)


def describe_step(step: Step) -> str:
    """
    Label a step with its kind and key parameters.

    Examples:
        extract-xml (message)
        extract-json (data.user.name)
        encrypt-aes (CBC, PKCS5Padding, 128 bits)
    """
    kind = step.kind
    if kind is OperationKind.EXTRACT_XML:
        return f"{step.type} ({step.effective_xml_tag})"
    if kind is OperationKind.EXTRACT_JSON and step.json_path:
        return f"{step.type} ({step.json_path})"
    if kind is not None and kind.is_aes:
        return (
            f"{step.type} ({step.effective_cipher_mode}, "
            f"{step.effective_padding}, {step.effective_key_size} bits)"
        )
    return step.type


def describe_pipeline(steps: list[Step]) -> str:
    return " -> ".join(describe_step(step) for step in steps)


def prettify_content(content: str) -> str:
    """Pretty-print JSON or XML content; anything else comes back unchanged."""
    try:
        return json.dumps(json.loads(content), indent=2, ensure_ascii=False)
    except (ValueError, RecursionError):
        pass

    try:
        parse_xml(content)
        return format_xml(content)
    except MalformedStructuredData:
        pass
    except Exception as e:
        logger.debug(f"Could not format content as XML: {e}")

    return content
