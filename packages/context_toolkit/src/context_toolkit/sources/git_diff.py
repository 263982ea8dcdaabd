"""Render git diffs for the working tree, the index, or a commit range."""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from context_toolkit.errors import SourceFetchError
from context_toolkit.markdown_utils import code_block
from context_toolkit.sources.base import matches_pattern

if TYPE_CHECKING:
    from context_toolkit.models.config import GitDiffSource
    from context_toolkit.sources.base import FetchContext

logger = logging.getLogger(__name__)

_LAST_N = re.compile(r"^last-(\d+)$")

COMMIT_ALIASES: dict[str, list[str]] = {
    "unstaged": [],
    "staged": ["--cached"],
    "last": ["HEAD~1", "HEAD"],
}


def diff_arguments(commit: str) -> list[str]:
    """Translate a commit alias or revision range into ``git diff`` arguments."""
    value = commit.strip()
    if value in COMMIT_ALIASES:
        return list(COMMIT_ALIASES[value])
    match = _LAST_N.match(value)
    if match:
        return [f"HEAD~{int(match.group(1))}", "HEAD"]
    if value.startswith("-"):
        msg = f"Invalid commit reference: {commit}"
        raise SourceFetchError(msg)
    return [value]


class GitDiffSourceFetcher:
    """Run ``git diff`` in the configured repository."""

    def _git(self, repository: Path, args: list[str], context: FetchContext) -> str:
        if context.cancel_event.is_set():
            msg = "git diff cancelled"
            raise SourceFetchError(msg)
        command = ["git", "-C", str(repository), *args]
        try:
            completed = subprocess.run(  # noqa: S603 - fixed executable, no shell
                command,
                capture_output=True,
                text=True,
                timeout=context.git_timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            msg = "git executable not found"
            raise SourceFetchError(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"git {' '.join(args)} timed out after {context.git_timeout}s"
            raise SourceFetchError(msg) from exc
        if completed.returncode != 0:
            msg = f"git {' '.join(args)} failed: {completed.stderr.strip()}"
            raise SourceFetchError(msg)
        return completed.stdout

    def fetch(self, source: GitDiffSource, context: FetchContext) -> str:
        repository = Path(source.repository).expanduser()
        if not repository.is_absolute():
            repository = context.root_dir / repository
        if not repository.is_dir():
            msg = f"Repository not found: {source.repository}"
            raise SourceFetchError(msg)

        args = diff_arguments(source.commit)
        changed = [
            line.strip()
            for line in self._git(repository, ["diff", "--name-only", *args], context).splitlines()
            if line.strip() and matches_pattern(line.strip(), source.file_pattern)
        ]
        logger.info("git diff %s: %d changed files", source.commit, len(changed))
        if not changed:
            return ""

        blocks: list[str] = []
        if source.show_stats:
            stats = self._git(repository, ["diff", "--stat", *args, "--", *changed], context)
            blocks.append(code_block(stats))
        for path in changed:
            diff = self._git(repository, ["diff", *args, "--", path], context)
            if diff.strip():
                blocks.append(code_block(diff, "diff", path))
        return "\n\n".join(blocks)
