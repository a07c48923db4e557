"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
import gzip
import io
import zipfile

import pytest

from stepline.models import Step
from stepline.models import new_step
from stepline.schema_validator import SchemaValidator

AES_KEY = "0123456789abcdef"
AES_IV = "abcdef9876543210"

SAMPLE_FILE_TEXT = "Hello! This is a sample file that was compressed using gzip and zip."


@pytest.fixture(autouse=True)
def no_dev_mode():
    """Keep schema validation lenient unless a test enables dev mode itself."""
    SchemaValidator.set_dev_mode(False)
    yield
    SchemaValidator.set_dev_mode(False)


def make_zip_b64(files: dict[str, bytes]) -> str:
    """Build a Base64 ZIP archive holding `files` in insertion order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def sample_payload() -> str:
    """
    Base64 of a gzipped XML document whose <message> holds a Base64 ZIP
    archive containing SAMPLE_FILE_TEXT.
    """
    zip_b64 = make_zip_b64({"test.txt": SAMPLE_FILE_TEXT.encode("utf-8")})
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<root>\n"
        f"    <message>{zip_b64}</message>\n"
        "</root>"
    )
    return base64.b64encode(gzip.compress(xml.encode("utf-8"))).decode("ascii")


@pytest.fixture
def sample_steps() -> list[Step]:
    return [
        new_step("decode-base64"),
        new_step("decompress-gzip"),
        new_step("extract-xml"),
        new_step("decode-base64"),
        new_step("decompress-zip"),
    ]


def aes_step(kind: str = "encrypt-aes", **fields) -> Step:
    """An AES step with a working key and IV unless overridden."""
    params = {"secret_key": AES_KEY, "iv": AES_IV}
    params.update(fields)
    return new_step(kind, **params)
