"""Tests for the stepline command line."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from stepline.cli import EXIT_BAD_DEFINITION
from stepline.cli import EXIT_FAILED
from stepline.cli import EXIT_OK
from stepline.cli import main
from tests.conftest import SAMPLE_FILE_TEXT


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def sample_pipeline(tmp_path: Path) -> Path:
    return _write(
        tmp_path,
        "sample.yaml",
        "steps:\n"
        "  - type: decode-base64\n"
        "  - type: decompress-gzip\n"
        "  - type: extract-xml\n"
        "    xmlTag: message\n"
        "  - type: decode-base64\n"
        "  - type: decompress-zip\n",
    )


def test_runs_sample_pipeline(
    tmp_path: Path, sample_pipeline: Path, sample_payload: str, capsys: pytest.CaptureFixture[str]
) -> None:
    input_path = _write(tmp_path, "input.txt", sample_payload)

    assert main([str(sample_pipeline), str(input_path)]) == EXIT_OK

    out = capsys.readouterr().out
    assert "Step 1 Result: decode-base64" in out
    assert "Step 3 Result: extract-xml (message)" in out
    assert out.rstrip().endswith(SAMPLE_FILE_TEXT)


def test_reads_stdin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "encode-url"}]}))
    monkeypatch.setattr("sys.stdin", io.StringIO("a b"))

    assert main([str(pipeline)]) == EXIT_OK
    assert capsys.readouterr().out.rstrip().endswith("a%20b")


def test_failed_run_reports_step(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(
        tmp_path, "p.json", json.dumps({"steps": [{"type": "encode-url"}, {"type": "decode-base64"}]})
    )
    input_path = _write(tmp_path, "in.txt", "hello world")

    assert main([str(pipeline), str(input_path)]) == EXIT_FAILED

    out = capsys.readouterr().out
    assert "Step 1 Result: encode-url" in out
    assert "hello%20world" in out
    assert "Error in step 2 (decode-base64)" in out
    assert "Step 2 Result" not in out


def test_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"id": "s", "type": "extract-json", "jsonPath": "a"}]}))
    input_path = _write(tmp_path, "in.json", '{"a": {"b": 1}}')

    assert main([str(pipeline), str(input_path), "--json"]) == EXIT_OK

    report = json.loads(capsys.readouterr().out)
    assert report["ok"] is True
    assert report["output"] == '{"b":1}'
    assert report["results"][0]["step"]["id"] == "s"


def test_pretty_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "extract-json", "jsonPath": "a"}]}))
    input_path = _write(tmp_path, "in.json", '{"a": {"b": 1}}')

    assert main([str(pipeline), str(input_path), "--pretty"]) == EXIT_OK
    assert '{\n  "b": 1\n}' in capsys.readouterr().out


def test_xml_warning_is_printed(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "extract-xml"}]}))
    input_path = _write(tmp_path, "in.xml", "<root><data>x</data></root>")

    assert main([str(pipeline), str(input_path), "-q"]) == EXIT_OK
    assert "Warning: No message tag found" in capsys.readouterr().out


def test_invalid_definition(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "rot13"}]}))
    input_path = _write(tmp_path, "in.txt", "x")

    assert main([str(pipeline), str(input_path)]) == EXIT_BAD_DEFINITION
    assert "Invalid pipeline definition" in capsys.readouterr().err


def test_lenient_definition_fails_at_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "rot13"}]}))
    input_path = _write(tmp_path, "in.txt", "x")

    assert main([str(pipeline), str(input_path), "--lenient"]) == EXIT_FAILED
    assert "Unknown processing step type: rot13" in capsys.readouterr().out


def test_empty_pipeline(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": []}))
    input_path = _write(tmp_path, "in.txt", "x")

    assert main([str(pipeline), str(input_path)]) == EXIT_BAD_DEFINITION
    assert "at least one processing step" in capsys.readouterr().err


def test_missing_input_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "encode-url"}]}))

    assert main([str(pipeline), str(tmp_path / "missing.txt")]) == EXIT_FAILED
    assert "cannot read input" in capsys.readouterr().err


@pytest.mark.parametrize("line_ending", ["\n", "\r\n"])
def test_input_file_trailing_newline_is_dropped(
    tmp_path: Path, line_ending: str, capsys: pytest.CaptureFixture[str]
) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "decode-base64"}]}))
    input_path = tmp_path / "in.txt"
    input_path.write_bytes(b"aGk=" + line_ending.encode("ascii"))

    assert main([str(pipeline), str(input_path)]) == EXIT_OK
    assert capsys.readouterr().out.rstrip().endswith("hi")


def test_stdin_trailing_newline_is_dropped(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "decode-base64"}]}))
    monkeypatch.setattr("sys.stdin", io.StringIO("aGk=\n"))

    assert main([str(pipeline)]) == EXIT_OK
    assert capsys.readouterr().out.rstrip().endswith("hi")


def test_only_one_trailing_newline_is_dropped(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    pipeline = _write(tmp_path, "p.json", json.dumps({"steps": [{"type": "encode-url"}]}))
    monkeypatch.setattr("sys.stdin", io.StringIO("a\n\n"))

    assert main([str(pipeline), "--json"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["results"][0]["content"] == "a%0A"


@pytest.mark.parametrize("key_size", ["abc", [128]])
def test_lenient_bad_key_size_is_a_definition_error(
    tmp_path: Path, key_size: object, capsys: pytest.CaptureFixture[str]
) -> None:
    pipeline = _write(
        tmp_path, "p.json", json.dumps({"steps": [{"type": "encrypt-aes", "keySize": key_size}]})
    )
    input_path = _write(tmp_path, "in.txt", "x")

    assert main([str(pipeline), str(input_path), "--lenient"]) == EXIT_BAD_DEFINITION
    assert "Invalid step in pipeline definition" in capsys.readouterr().err
