from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _set_required_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "CONTEXT_WORK_DIR",
        "CONTEXT_MAX_WORKERS",
        "CONTEXT_HTTP_TIMEOUT",
        "CONTEXT_GIT_TIMEOUT",
        "CONTEXT_LOG_LEVEL",
        "GITHUB_TOKEN",
        "GITLAB_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
