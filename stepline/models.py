"""
Core type definitions for stepline.

A pipeline is a plain list of Step records. Each Step is tagged with an
OperationKind and carries the optional parameters used by that kind.
Steps are pure data: defaults are filled in lazily by the effective_*
accessors and nothing is validated until the executor runs them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from dataclasses import replace
from enum import Enum
from typing import Any


# =============================================================================
# Operation vocabulary
# =============================================================================


class OperationKind(str, Enum):
    """The closed set of operations a step can perform."""

    DECODE_BASE64 = "decode-base64"
    ENCODE_BASE64 = "encode-base64"
    DECOMPRESS_GZIP = "decompress-gzip"
    COMPRESS_GZIP = "compress-gzip"
    DECOMPRESS_ZIP = "decompress-zip"
    COMPRESS_ZIP = "compress-zip"
    EXTRACT_XML = "extract-xml"
    EXTRACT_JSON = "extract-json"
    ENCODE_URL = "encode-url"
    DECODE_URL = "decode-url"
    ENCRYPT_AES = "encrypt-aes"
    DECRYPT_AES = "decrypt-aes"

    @property
    def is_aes(self) -> bool:
        return self in (OperationKind.ENCRYPT_AES, OperationKind.DECRYPT_AES)


class CipherMode(str, Enum):
    CBC = "CBC"
    ECB = "ECB"
    CFB = "CFB"
    OFB = "OFB"
    CTR = "CTR"

    @property
    def requires_iv(self) -> bool:
        return self is not CipherMode.ECB


class Padding(str, Enum):
    PKCS5 = "PKCS5Padding"
    NONE = "NoPadding"
    ZERO = "ZeroPadding"


class OutputFormat(str, Enum):
    BASE64 = "Base64"
    HEX = "Hex"
    PLAIN_TEXT = "Plain-Text"


KEY_SIZES = (128, 192, 256)

DEFAULT_KIND = OperationKind.DECODE_BASE64
DEFAULT_XML_TAG = "message"
DEFAULT_CIPHER_MODE = CipherMode.CBC
DEFAULT_PADDING = Padding.PKCS5
DEFAULT_KEY_SIZE = 128
DEFAULT_OUTPUT_FORMAT = OutputFormat.BASE64

# Serialized field name -> Step attribute name
_FIELD_NAMES: dict[str, str] = {
    "xmlTag": "xml_tag",
    "jsonPath": "json_path",
    "cipherMode": "cipher_mode",
    "padding": "padding",
    "iv": "iv",
    "keySize": "key_size",
    "secretKey": "secret_key",
    "outputFormat": "output_format",
}


def new_step_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Step
# =============================================================================


@dataclass(frozen=True)
class Step:
    """
    One configured pipeline stage.

    Required: id, type
    Every other field is optional and only meaningful for some kinds:
    - xml_tag: extract-xml
    - json_path: extract-json
    - cipher_mode, padding, iv, key_size, secret_key, output_format: AES

    `type` is kept as a plain string so that a definition naming an unknown
    operation can still be represented and reported at execution time.
    """

    id: str
    type: str
    xml_tag: str | None = None
    json_path: str | None = None
    cipher_mode: str | None = None
    padding: str | None = None
    iv: str | None = None
    key_size: int | None = None
    secret_key: str | None = None
    output_format: str | None = None

    @property
    def kind(self) -> OperationKind | None:
        """The operation kind, or None if `type` is not a known operation."""
        try:
            return OperationKind(self.type)
        except ValueError:
            return None

    # Effective values with defaults applied (resolved at execution time)

    @property
    def effective_xml_tag(self) -> str:
        return self.xml_tag or DEFAULT_XML_TAG

    @property
    def effective_cipher_mode(self) -> str:
        return self.cipher_mode or DEFAULT_CIPHER_MODE.value

    @property
    def effective_padding(self) -> str:
        return self.padding or DEFAULT_PADDING.value

    @property
    def effective_key_size(self) -> int:
        return self.key_size or DEFAULT_KEY_SIZE

    @property
    def effective_output_format(self) -> str:
        return self.output_format or DEFAULT_OUTPUT_FORMAT.value

    def with_updates(self, **fields: Any) -> Step:
        """Return a copy with the given fields changed. The id never changes."""
        fields.pop("id", None)
        if isinstance(fields.get("type"), OperationKind):
            fields["type"] = fields["type"].value
        return replace(self, **fields)

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"id": self.id, "type": self.type}
        for key, attr in _FIELD_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: dict) -> Step:
        """
        Build a Step from its serialized form.

        Accepts both the camelCase keys used in definition files and the
        snake_case attribute names. A missing id gets a fresh one.
        """
        kwargs: dict[str, Any] = {}
        for key, attr in _FIELD_NAMES.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]

        if kwargs.get("key_size") is not None:
            kwargs["key_size"] = int(kwargs["key_size"])

        return cls(
            id=str(data.get("id") or new_step_id()),
            type=str(data.get("type", DEFAULT_KIND.value)),
            **kwargs,
        )


def new_step(kind: OperationKind | str = DEFAULT_KIND, **fields: Any) -> Step:
    """
    Create a step of the given kind with the defaults for that kind.

    Extraction and AES steps get their default parameters spelled out so
    that an editor shows them; everything else stays unset.
    """
    kind = OperationKind(kind)
    defaults: dict[str, Any] = {}

    if kind is OperationKind.EXTRACT_XML:
        defaults["xml_tag"] = DEFAULT_XML_TAG
    elif kind is OperationKind.EXTRACT_JSON:
        defaults["json_path"] = ""
    elif kind.is_aes:
        defaults.update(
            cipher_mode=DEFAULT_CIPHER_MODE.value,
            padding=DEFAULT_PADDING.value,
            key_size=DEFAULT_KEY_SIZE,
            output_format=DEFAULT_OUTPUT_FORMAT.value,
        )

    defaults.update(fields)
    step_id = defaults.pop("id", None) or new_step_id()
    return Step(id=step_id, type=kind.value, **defaults)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class StepResult:
    """Content produced by one executed step."""

    step: Step
    content: str
    warning: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "step": self.step.to_dict(),
            "content": self.content,
        }
        if self.warning:
            result["warning"] = self.warning
        return result
