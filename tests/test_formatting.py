"""Tests for step labels and result pretty-printing."""

from __future__ import annotations

from stepline.formatting import describe_pipeline
from stepline.formatting import describe_step
from stepline.formatting import prettify_content
from stepline.models import Step
from stepline.models import new_step


def test_describe_step_labels() -> None:
    assert describe_step(new_step("decode-base64")) == "decode-base64"
    assert describe_step(new_step("extract-xml", xml_tag="payload")) == "extract-xml (payload)"
    assert describe_step(new_step("extract-json", json_path="a.b")) == "extract-json (a.b)"
    assert describe_step(new_step("extract-json")) == "extract-json"
    assert describe_step(new_step("encrypt-aes")) == "encrypt-aes (CBC, PKCS5Padding, 128 bits)"
    assert (
        describe_step(Step(id="x", type="decrypt-aes", cipher_mode="CTR", padding="NoPadding", key_size=256))
        == "decrypt-aes (CTR, NoPadding, 256 bits)"
    )
    assert describe_step(Step(id="x", type="rot13")) == "rot13"


def test_describe_pipeline() -> None:
    steps = [new_step("decode-base64"), new_step("extract-xml")]
    assert describe_pipeline(steps) == "decode-base64 -> extract-xml (message)"


def test_prettify_json() -> None:
    assert prettify_content('{"a":{"b":[1,2]}}') == '{\n  "a": {\n    "b": [\n      1,\n      2\n    ]\n  }\n}'


def test_prettify_xml() -> None:
    pretty = prettify_content("<root><a>1</a><b>2</b></root>")
    assert pretty.splitlines() == ["<root>", "  <a>1</a>", "  <b>2</b>", "</root>"]


def test_prettify_leaves_other_content_alone() -> None:
    for content in ["plain text", "{broken", "<unclosed>", ""]:
        assert prettify_content(content) == content


def test_prettify_deeply_nested_json_is_left_alone() -> None:
    content = "[" * 100000 + "]" * 100000
    assert prettify_content(content) == content
