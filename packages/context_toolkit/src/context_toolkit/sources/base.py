"""Source fetcher protocol, fetch context, and shared path filtering."""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, Protocol

from context_toolkit.http_client import HttpClient

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterable


@dataclass(frozen=True)
class FetchContext:
    """Shared collaborators handed to every fetcher."""

    root_dir: Path
    http: HttpClient = field(default_factory=HttpClient)
    git_timeout: float = 60.0
    github_token: str | None = None
    gitlab_token: str | None = None

    @property
    def cancel_event(self) -> threading.Event:
        return self.http.cancel_event

    def relative(self, path: Path) -> str:
        """Display ``path`` relative to the root directory when possible."""
        try:
            return path.resolve().relative_to(self.root_dir.resolve()).as_posix()
        except ValueError:
            return str(path)


class SourceFetcher(Protocol):
    """Capability interface: turn one source into raw text."""

    def fetch(self, source: Any, context: FetchContext) -> str:
        """Return the rendered content or raise ``SourceFetchError``."""
        ...


def matches_pattern(path: str, patterns: Iterable[str]) -> bool:
    """Match the file name (or the full relative path) against glob patterns."""
    name = PurePosixPath(path).name
    for pattern in patterns:
        if pattern in ("*", "*.*", "**"):
            return True
        if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(path, pattern):
            return True
    return False


def is_excluded(path: str, not_paths: Iterable[str]) -> bool:
    """Exclude by glob match or by plain substring of the relative path."""
    for excluded in not_paths:
        stripped = excluded.strip("/")
        if not stripped:
            continue
        if fnmatch.fnmatch(path, excluded) or stripped in path:
            return True
    return False


def under_any(path: str, prefixes: Iterable[str]) -> bool:
    """True when ``path`` equals or lies below one of ``prefixes`` (empty means all)."""
    normalized = [prefix.strip("/") for prefix in prefixes]
    if not normalized or any(prefix in ("", ".") for prefix in normalized):
        return True
    return any(path == prefix or path.startswith(f"{prefix}/") for prefix in normalized)
