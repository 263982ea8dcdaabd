from __future__ import annotations

import json
from pathlib import Path

import pytest
from context_toolkit.cli import main


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_generate_prints_json_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(tmp_path / "context.yaml", "documents:\n  - outputPath: a.md\n    description: A\n")

    exit_code = main(["generate", "--work-dir", str(tmp_path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["status"] == "success"
    assert payload["result"][0]["output_path"] == "a.md"
    assert (tmp_path / "a.md").exists()


@pytest.mark.parametrize("command", ["build", "compile"])
def test_command_aliases(
    command: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(tmp_path / "ctx" / "custom.json", '{"documents": [{"outputPath": "b.md"}]}')

    exit_code = main([command, "-w", str(tmp_path), "-c", "ctx/custom.json"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Documents compiled successfully" in out
    assert "SUCCESS  b.md" in out


def test_missing_config_exits_non_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--work-dir", str(tmp_path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["message"] == "Failed to load configuration"


def test_inline_configuration(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["-w", str(tmp_path), "--inline", "documents: []", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["message"] == "No documents found in configuration."


def test_env_file_feeds_import_paths(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(tmp_path / ".env.ctx", "SHARED=shared\n")
    _write(tmp_path / "shared" / "base.yaml", "documents:\n  - outputPath: base.md\n")
    _write(tmp_path / "context.yaml", "import:\n  - path: ${SHARED}/base.yaml\n")

    exit_code = main(["-w", str(tmp_path), "--env", ".env.ctx", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["imports"] == [{"path": "shared/base.yaml", "type": "local"}]


def test_invalid_jobs_is_rejected(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-w", str(tmp_path), "--jobs", "0"]) == 1
    assert "--jobs" in capsys.readouterr().err


def test_invalid_settings_are_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("CONTEXT_MAX_WORKERS", "many")

    assert main(["-w", str(tmp_path)]) == 1
    assert "CONTEXT_MAX_WORKERS" in capsys.readouterr().err
