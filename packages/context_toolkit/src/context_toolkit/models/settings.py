"""Pydantic models for application settings."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_MAX_WORKERS = min(4, os.cpu_count() or 1)


class Settings(BaseModel, frozen=True):
    """Runtime configuration loaded from environment variables."""

    work_dir: str = "."
    max_workers: int = DEFAULT_MAX_WORKERS
    http_timeout: float = 30.0
    git_timeout: float = 60.0
    log_level: str = "WARNING"
    github_token: str | None = None
    gitlab_token: str | None = None


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ValueError(msg) from None
    if value < 1:
        msg = f"{name} must be at least 1, got {value}"
        raise ValueError(msg)
    return value


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValueError(msg) from None
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        raise ValueError(msg)
    return value


def load_settings() -> Settings:
    """Load settings from environment variables with defaults."""
    load_dotenv()

    return Settings(
        work_dir=os.getenv("CONTEXT_WORK_DIR", "."),
        max_workers=_read_int("CONTEXT_MAX_WORKERS", DEFAULT_MAX_WORKERS),
        http_timeout=_read_float("CONTEXT_HTTP_TIMEOUT", 30.0),
        git_timeout=_read_float("CONTEXT_GIT_TIMEOUT", 60.0),
        log_level=os.getenv("CONTEXT_LOG_LEVEL", "WARNING").upper(),
        github_token=os.getenv("GITHUB_TOKEN") or None,
        gitlab_token=os.getenv("GITLAB_TOKEN") or None,
    )
