"""Tests for the command-line front end."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.cli import main


@pytest.fixture(autouse=True)
def _no_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)


def test_validate_valid_query(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate", "c:red t:creature"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["is_valid"] is True
    assert payload["errors"] == []
    assert payload["confidence"] == 1.0


def test_validate_invalid_query(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate", "colour:red"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["errors"][0]["code"] == "UNKNOWN_OPERATOR"
    assert payload["suggestions"][0]["suggested_query"] == "color:red"


def test_validate_with_result_count(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate", "c:r", "--result-count", "1000"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["suggestions"][0]["impact"] == "narrows_results"


def test_build(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["build", "red creatures", "--optimize-for", "budget"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["query"] == "c:r t:creature usd<=5"
    assert payload["validation"]["is_valid"] is True
    assert [m["operator"] for m in payload["mappings"]] == ["c", "t"]


def test_build_with_unknown_format(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["build", "red creatures", "--format", "casual"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "casual" in json.loads(captured.err.strip().splitlines()[-1])["error"]
