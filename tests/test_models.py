"""Tests for the step model: defaults, serialization and identity."""

from __future__ import annotations

import pytest

from stepline.models import OperationKind
from stepline.models import Step
from stepline.models import StepResult
from stepline.models import new_step


def test_new_step_defaults_to_decode_base64() -> None:
    step = new_step()
    assert step.type == "decode-base64"
    assert step.kind is OperationKind.DECODE_BASE64
    assert step.id


def test_new_step_ids_are_unique() -> None:
    assert new_step().id != new_step().id


def test_new_step_fills_kind_defaults() -> None:
    xml = new_step("extract-xml")
    assert xml.xml_tag == "message"

    aes = new_step(OperationKind.ENCRYPT_AES)
    assert aes.cipher_mode == "CBC"
    assert aes.padding == "PKCS5Padding"
    assert aes.key_size == 128
    assert aes.output_format == "Base64"
    # Required fields are never filled in for the user.
    assert aes.secret_key is None
    assert aes.iv is None


def test_new_step_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        new_step("rot13")


def test_effective_values_apply_defaults() -> None:
    step = Step(id="s1", type="encrypt-aes")
    assert step.effective_cipher_mode == "CBC"
    assert step.effective_padding == "PKCS5Padding"
    assert step.effective_key_size == 128
    assert step.effective_output_format == "Base64"
    assert Step(id="s2", type="extract-xml").effective_xml_tag == "message"


def test_unknown_type_has_no_kind() -> None:
    assert Step(id="x", type="rot13").kind is None


def test_with_updates_keeps_id() -> None:
    step = new_step("extract-xml")
    updated = step.with_updates(id="other", type=OperationKind.EXTRACT_JSON, json_path="a.b")
    assert updated.id == step.id
    assert updated.type == "extract-json"
    assert updated.json_path == "a.b"
    # The original is untouched.
    assert step.type == "extract-xml"


def test_to_dict_uses_camel_case_and_skips_unset() -> None:
    step = Step(id="s1", type="decrypt-aes", secret_key="k", key_size=256, output_format="Hex")
    assert step.to_dict() == {
        "id": "s1",
        "type": "decrypt-aes",
        "keySize": 256,
        "secretKey": "k",
        "outputFormat": "Hex",
    }


def test_from_dict_round_trips_to_dict() -> None:
    data = {
        "id": "abc",
        "type": "encrypt-aes",
        "cipherMode": "CTR",
        "padding": "NoPadding",
        "iv": "0000000000000000",
        "keySize": "192",
        "secretKey": "secret",
        "outputFormat": "Hex",
    }
    step = Step.from_dict(data)
    assert step.key_size == 192
    assert step.cipher_mode == "CTR"
    assert step.to_dict() == {**data, "keySize": 192}


def test_from_dict_accepts_snake_case_and_generates_id() -> None:
    step = Step.from_dict({"type": "extract-json", "json_path": "a.b"})
    assert step.json_path == "a.b"
    assert step.id


def test_step_result_to_dict() -> None:
    step = Step(id="s1", type="extract-xml")
    assert StepResult(step, "x").to_dict() == {"step": {"id": "s1", "type": "extract-xml"}, "content": "x"}
    assert StepResult(step, "x", "careful").to_dict()["warning"] == "careful"
