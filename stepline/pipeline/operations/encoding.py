"""
Encoding operations for the pipeline.

Handles text encodings that need no parameters:
- decode-base64, encode-base64: standard Base64
- encode-url, decode-url: URI component percent-encoding
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote
from urllib.parse import unquote_to_bytes

from stepline.errors import InvalidInputEncoding

if TYPE_CHECKING:
    from stepline.models import Step
    from stepline.pipeline.context import PipelineRun

logger = logging.getLogger(__name__)

# Characters quote() leaves alone but the extra-strict URL encoding escapes
_EXTRA_URL_ESCAPES = {"~": "%7E"}

# A "%" not followed by two hex digits
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")

# Control characters that mark decoded bytes as binary rather than text
_BINARY_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def decode_base64_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, decode_base64_text(run.current))
    return run


def encode_base64_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, encode_base64_text(run.current))
    return run


def encode_url_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, encode_url(run.current))
    return run


def decode_url_op(run: PipelineRun, step: Step) -> PipelineRun:
    run.record(step, decode_url(run.current))
    return run


# =============================================================================
# Base64
# =============================================================================


def b64decode_strict(text: str) -> bytes:
    """
    Decode standard Base64, rejecting anything that does not round-trip.

    Whitespace, missing padding and non-canonical trailing bits are all
    rejected: re-encoding the result must give back exactly `text`.
    """
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputEncoding(f"Invalid base64 string provided: {e}") from e

    if base64.b64encode(data).decode("ascii") != text:
        raise InvalidInputEncoding("Invalid base64 string provided")
    return data


def b64encode_text(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def bytes_to_text(data: bytes) -> str | None:
    """Return `data` as UTF-8 text, or None if it looks like binary."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if _BINARY_CONTROL.search(text):
        return None
    return text


def decode_base64_text(text: str) -> str:
    """
    Decode Base64 content.

    Text payloads come back as text. Binary payloads (archives, compressed
    streams, ciphertext) cannot travel between steps as text, so they stay
    in their canonical Base64 form for the next step to consume.
    """
    data = b64decode_strict(text)
    decoded = bytes_to_text(data)
    if decoded is None:
        logger.debug(f"decode-base64: {len(data)} bytes of binary data, keeping base64 form")
        return text
    return decoded


def encode_base64_text(text: str) -> str:
    try:
        return b64encode_text(text.encode("utf-8"))
    except UnicodeEncodeError as e:
        raise InvalidInputEncoding(f"Cannot encode input as UTF-8: {e}") from e


# =============================================================================
# URL
# =============================================================================


def encode_url(text: str) -> str:
    """
    Percent-encode text as a URI component.

    Only ASCII letters, digits and `-_.` are left as-is; `! ' ( ) * ~` are
    escaped too.
    """
    try:
        encoded = quote(text, safe="", encoding="utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise InvalidInputEncoding(f"Cannot URL-encode input: {e}") from e

    for char, escape in _EXTRA_URL_ESCAPES.items():
        encoded = encoded.replace(char, escape)
    return encoded


def decode_url(text: str) -> str:
    """
    Decode a percent-encoded URI component.

    Text with neither `%` nor `+` is taken as already decoded. `+` is not
    turned into a space.
    """
    if "%" not in text and "+" not in text:
        return text

    match = _BAD_PERCENT.search(text)
    if match:
        raise InvalidInputEncoding(
            f"Malformed percent-escape at position {match.start()}"
        )

    try:
        return unquote_to_bytes(text).decode("utf-8")
    except UnicodeError as e:
        raise InvalidInputEncoding(f"Percent-escapes do not form valid UTF-8: {e}") from e
