"""Compile one document from its sources into Markdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from context_toolkit.errors import ContextToolkitError, ErrorCollector
from context_toolkit.markdown_utils import tagged, title
from context_toolkit.telemetry.logging_utils import document_context
from context_toolkit.variables import VariableScope, substitute, unresolved_tokens

if TYPE_CHECKING:
    from context_toolkit.models.config import Document, Source
    from context_toolkit.modifiers.registry import ContentModifierChain
    from context_toolkit.sources.registry import SourceFetcherRegistry

logger = logging.getLogger(__name__)

DocumentStatus = Literal["success", "error", "skipped"]


@dataclass(frozen=True)
class CompiledDocument:
    """Rendered document content and the errors collected while building it."""

    output_path: str
    target: Path
    content: str
    errors: ErrorCollector
    overwrite: bool = True
    status: DocumentStatus = "success"


class DocumentCompiler:
    """Render documents with a source fetcher registry and modifier chain.

    ``build`` performs no file IO beyond what the fetchers need; ``write``
    stores a built document; ``compile`` does both.
    """

    def __init__(
        self,
        root_dir: str | Path,
        *,
        fetchers: SourceFetcherRegistry,
        modifiers: ContentModifierChain,
        variables: VariableScope | None = None,
    ) -> None:
        self.root_dir = Path(root_dir)
        self._fetchers = fetchers
        self._modifiers = modifiers
        self._variables = variables or VariableScope()

    def target_for(self, document: Document) -> tuple[str, Path]:
        output_path = substitute(document.output_path, self._variables)
        return output_path, self.root_dir / output_path

    def inside_root(self, target: Path) -> bool:
        return target.resolve().is_relative_to(self.root_dir.resolve())

    def build(self, document: Document) -> CompiledDocument:
        """Render ``document``; source failures are collected, never raised."""
        output_path, target = self.target_for(document)
        errors = ErrorCollector()

        with document_context(output_path):
            if not self.inside_root(target):
                msg = f"Output path '{output_path}' resolves outside the work dir"
                logger.error("Output path %s resolves outside the work dir", output_path)
                errors.add(output_path, msg)
                return CompiledDocument(
                    output_path=output_path,
                    target=target,
                    content="",
                    errors=errors,
                    overwrite=document.overwrite,
                    status="error",
                )

            if not document.overwrite and target.exists():
                logger.info("Document %s exists and overwrite is disabled", output_path)
                return CompiledDocument(
                    output_path=output_path,
                    target=target,
                    content="",
                    errors=errors,
                    overwrite=False,
                    status="skipped",
                )

            logger.info("Compiling %s from %d sources", output_path, len(document.sources))
            parts: list[str] = []
            if document.description:
                parts.append(title(document.description))
            if document.tags:
                parts.append(tagged(", ".join(document.tags), "DOCUMENT_TAGS"))

            for index, source in enumerate(document.sources):
                block = self._render_source(document, index, source, output_path, errors)
                if block:
                    parts.append(block)

            content = substitute("\n\n".join(parts), self._variables)
            unresolved = unresolved_tokens(content)
            if unresolved:
                logger.debug("Unresolved variables in %s: %s", output_path, sorted(set(unresolved)))
            if content:
                content += "\n"
            if errors.has_errors():
                logger.warning("Document %s built with %d errors", output_path, len(errors))

        return CompiledDocument(
            output_path=output_path,
            target=target,
            content=content,
            errors=errors,
            overwrite=document.overwrite,
            status="error" if errors.has_errors() else "success",
        )

    def _render_source(
        self,
        document: Document,
        index: int,
        source: Source,
        output_path: str,
        errors: ErrorCollector,
    ) -> str:
        scope = f"{output_path} source #{index + 1} ({source.type})"
        header = f"SOURCE: {source.description}" if source.description else ""
        try:
            text = self._fetchers.fetch_for(source.type, source)
            modified = self._modifiers.apply(
                text, [*document.modifiers, *source.modifiers], origin=scope
            )
        except ContextToolkitError as exc:
            logger.warning("%s failed: %s", scope, exc)
            errors.add(scope, str(exc))
            return "\n\n".join(part for part in (header, f"Error: {exc}") if part)
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly", scope)
            errors.add(scope, str(exc) or type(exc).__name__)
            return "\n\n".join(part for part in (header, f"Error: {exc}") if part)

        if modified is None or not modified.strip():
            return ""
        body = tagged(modified, source.tag)
        return f"{header}\n\n{body}" if header else body

    def write(self, compiled: CompiledDocument) -> CompiledDocument:
        """Store ``compiled`` inside the work dir unless overwrite is disabled and it exists."""
        if compiled.status == "skipped" or not self.inside_root(compiled.target):
            return compiled
        if not compiled.overwrite and compiled.target.exists():
            logger.info("Skipping %s: exists and overwrite is disabled", compiled.output_path)
            return replace(compiled, status="skipped")
        compiled.target.parent.mkdir(parents=True, exist_ok=True)
        compiled.target.write_text(compiled.content, encoding="utf-8")
        logger.info("Wrote %s (%d bytes)", compiled.output_path, len(compiled.content))
        return compiled

    def compile(self, document: Document) -> CompiledDocument:
        """Build and write ``document``."""
        return self.write(self.build(document))
