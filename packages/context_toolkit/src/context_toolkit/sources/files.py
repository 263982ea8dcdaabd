"""Local file and directory tree sources."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from context_toolkit.errors import SourceFetchError
from context_toolkit.markdown_utils import code_block, language_for, render_tree
from context_toolkit.sources.base import is_excluded, matches_pattern

if TYPE_CHECKING:
    from context_toolkit.models.config import FileSource, PathFilteredSource, TreeSource
    from context_toolkit.sources.base import FetchContext

logger = logging.getLogger(__name__)


def collect_local_files(
    source: PathFilteredSource, context: FetchContext, *, max_depth: int = 0
) -> list[Path]:
    """Find files selected by ``sourcePaths``, ``filePattern`` and ``notPath``."""
    if not source.source_paths:
        msg = "Source requires at least one entry in 'sourcePaths'"
        raise SourceFetchError(msg)

    found: dict[str, Path] = {}
    for declared in source.source_paths:
        base = Path(declared).expanduser()
        if not base.is_absolute():
            base = context.root_dir / base
        if not base.exists():
            msg = f"Source path not found: {declared}"
            raise SourceFetchError(msg)

        if base.is_file():
            found[str(base.resolve())] = base
            continue

        for candidate in base.rglob("*"):
            if context.cancel_event.is_set():
                msg = "File collection cancelled"
                raise SourceFetchError(msg)
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(base).as_posix()
            if max_depth and relative.count("/") >= max_depth:
                continue
            display = context.relative(candidate)
            if is_excluded(display, source.not_path) or is_excluded(relative, source.not_path):
                continue
            if not matches_pattern(relative, source.file_pattern):
                continue
            found[str(candidate.resolve())] = candidate

    return sorted(found.values(), key=lambda path: context.relative(path))


class FileSourceFetcher:
    """Render matching local files as fenced code blocks."""

    def fetch(self, source: FileSource, context: FetchContext) -> str:
        files = collect_local_files(source, context)
        blocks: list[str] = []
        if source.show_tree_view and files:
            blocks.append(code_block(render_tree([context.relative(path) for path in files])))

        for path in files:
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                logger.debug("Skipping binary file %s", path)
                continue
            except OSError as exc:
                msg = f"Unable to read {context.relative(path)}: {exc.strerror or exc}"
                raise SourceFetchError(msg) from exc
            if source.contains and not any(needle in content for needle in source.contains):
                continue
            if any(needle in content for needle in source.not_contains):
                continue
            display = context.relative(path)
            blocks.append(code_block(content, language_for(display), display))

        logger.info("File source matched %d files", len(files))
        return "\n\n".join(blocks)


class TreeSourceFetcher:
    """Render the selected files as an ASCII directory tree."""

    def fetch(self, source: TreeSource, context: FetchContext) -> str:
        files = collect_local_files(source, context, max_depth=source.max_depth)
        if not files:
            return ""
        return code_block(render_tree([context.relative(path) for path in files]))
