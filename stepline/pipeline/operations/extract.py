"""
Extraction operations for the pipeline.

Pulls a single value out of structured text:
- extract-xml: text content of the first element with a given tag
- extract-json: value at a dot-separated property path
"""

from __future__ import annotations

import json
import logging
import math
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import Any
from typing import TYPE_CHECKING
from xml.parsers.expat import ExpatError

import xmltodict

from stepline.errors import MalformedStructuredData
from stepline.errors import MissingExtractionTarget

if TYPE_CHECKING:
    from stepline.models import Step
    from stepline.pipeline.context import PipelineRun

logger = logging.getLogger(__name__)


def extract_xml_op(run: PipelineRun, step: Step) -> PipelineRun:
    """
    Extract the text of the first element named `step.xml_tag`.

    A document without that element is not an error: the step passes the
    pretty-printed document on and records a warning instead.
    """
    content, warning = extract_xml(run.current, step.effective_xml_tag)
    if warning:
        logger.warning(f"extract-xml: {warning}")
    run.record(step, content, warning)
    return run


def extract_json_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, extract_json(run.current, step.json_path or ""))
    return run


# =============================================================================
# XML
# =============================================================================


def _local_name(name: str) -> str:
    """Strip an ElementTree `{namespace}` or a `prefix:` from a tag name."""
    if name.startswith("{"):
        name = name.split("}", 1)[1]
    return name.rsplit(":", 1)[-1]


def parse_xml(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedStructuredData(f"Invalid XML format: {e}") from e


def format_xml(text: str) -> str:
    """Pretty-print an XML document with one element per line."""
    try:
        parsed = xmltodict.parse(text)
    except ExpatError as e:
        raise MalformedStructuredData(f"Invalid XML format: {e}") from e
    return xmltodict.unparse(parsed, pretty=True, indent="  ", full_document=False).strip()


def extract_xml(text: str, tag: str) -> tuple[str, str | None]:
    """
    Find the first element (document order) named `tag`.

    Returns:
        (content, warning): the element's text content and None, or the
        formatted document and a warning when no such element exists.
    """
    root = parse_xml(text)
    wanted = _local_name(tag)

    element = next((el for el in root.iter() if _local_name(el.tag) == wanted), None)
    if element is None:
        warning = f"No {tag} tag found in XML. Displaying the XML content instead."
        return format_xml(text), warning

    content = "".join(element.itertext())
    if not content:
        raise MissingExtractionTarget(f"Empty {tag} content")
    return content, None


# =============================================================================
# JSON
# =============================================================================


def _lookup(value: Any, segment: str) -> Any:
    """Property lookup on one parsed JSON value; None when absent."""
    if isinstance(value, dict):
        return value.get(segment)
    if isinstance(value, (list, str)):
        if segment == "length":
            return len(value)
        if segment.isdigit():
            index = int(segment)
            return value[index] if index < len(value) else None
    return None


def _reject_constant(name: str) -> Any:
    raise MalformedStructuredData(f"Invalid JSON format: {name} is not a JSON value")


def _number_string(value: float) -> str:
    """
    Spell a number the way JavaScript's String() does.

    Plain decimals between 1e-7 and 1e21, exponent form (`1e-7`, `1e+21`)
    outside that range.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))

    mantissa, _, exponent = repr(value).partition("e")
    if not exponent:
        return mantissa
    power = int(exponent)
    if -7 < power < 21:
        return format(Decimal(repr(value)), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def to_display_string(value: Any) -> str:
    """
    Render a resolved JSON value as text.

    Objects and arrays are re-serialized as compact JSON; scalars use the
    spelling JavaScript's String() gives them (`true`, `1`, `1.5`, `1e-7`).
    """
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int) and abs(value) > 2**53:
        try:
            return _number_string(float(value))
        except OverflowError:
            return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, float):
        return _number_string(value)
    return str(value)


def extract_json(text: str, path: str) -> str:
    """Resolve a dot-separated `path` inside a JSON document."""
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise MalformedStructuredData(f"Invalid JSON format: {e}") from e

    if not path:
        raise MissingExtractionTarget("JSON path is empty")

    current = data
    for segment in path.split("."):
        if current is None:
            raise MissingExtractionTarget(
                f"Cannot read '{segment}' of a missing value in path '{path}'"
            )
        current = _lookup(current, segment)

    if current is None:
        raise MissingExtractionTarget(f"No value found at path '{path}'")

    return to_display_string(current)
