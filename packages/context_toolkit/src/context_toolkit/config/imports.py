"""Import graph resolution.

The resolver walks import directives depth first. Each branch carries the
identities of its in-progress ancestors so a cycle is reported and skipped
instead of recursing forever, while a separate cache of fully resolved
sub-registries lets diamond imports reuse earlier work without re-parsing.
"""

from __future__ import annotations

import logging
import posixpath
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from context_toolkit.config.parser import ConfigParser, detect_format
from context_toolkit.config.registry import AppliedImport, ConfigDiagnostics, ResolvedRegistry
from context_toolkit.errors import ConfigLoadError, ImportSourceError
from context_toolkit.http_client import HttpClient, HttpFetchError
from context_toolkit.models.config import (
    FileSource,
    GitDiffSource,
    ImportDirective,
    RawConfig,
    TreeSource,
)
from context_toolkit.variables import VariableScope, substitute_env

if TYPE_CHECKING:
    from context_toolkit.config.parser import ConfigFormat
    from context_toolkit.models.config import Document

logger = logging.getLogger(__name__)

INLINE_ORIGIN = "<inline>"

_CONTENT_TYPE_FORMATS: dict[str, ConfigFormat] = {
    "application/json": "json",
    "application/yaml": "yaml",
    "application/x-yaml": "yaml",
    "text/yaml": "yaml",
    "text/x-yaml": "yaml",
}


@dataclass(frozen=True)
class ImportTarget:
    """One concrete config file or URL an import directive points at."""

    identity: str
    display: str
    path: Path | None = None
    url: str | None = None


def _expand_glob(pattern: Path) -> list[Path]:
    anchor = Path(pattern.anchor)
    relative = pattern.relative_to(anchor)
    return sorted(path for path in anchor.glob(str(relative)) if path.is_file())


def _display_path(path: Path, root_dir: Path) -> str:
    try:
        return path.relative_to(root_dir).as_posix()
    except ValueError:
        return str(path)


def _rebase(value: str, base_dir: Path, root_dir: Path) -> str:
    if not value or Path(value).is_absolute():
        return value
    rebased = (base_dir / value).resolve()
    try:
        relative = rebased.relative_to(root_dir)
    except ValueError:
        return str(rebased)
    return relative.as_posix() or "."


def _rebase_sources(document: Document, base_dir: Path, root_dir: Path) -> Document:
    sources = []
    for source in document.sources:
        if isinstance(source, (FileSource, TreeSource)):
            source = source.model_copy(
                update={
                    "source_paths": [
                        _rebase(path, base_dir, root_dir) for path in source.source_paths
                    ]
                }
            )
        elif isinstance(source, GitDiffSource):
            source = source.model_copy(
                update={"repository": _rebase(source.repository, base_dir, root_dir)}
            )
        sources.append(source)
    return document.model_copy(update={"sources": sources})


def _prefix_output(document: Document, prefix: str) -> Document:
    prefixed = posixpath.join(prefix.strip("/"), document.output_path.lstrip("/"))
    return document.model_copy(update={"output_path": prefixed})


class ImportResolver:
    """Resolve a root configuration and its imports into one registry."""

    def __init__(
        self,
        root_dir: str | Path,
        *,
        parser: ConfigParser | None = None,
        env: VariableScope | None = None,
        base_variables: VariableScope | None = None,
        http: HttpClient | None = None,
    ) -> None:
        self.root_dir = Path(root_dir).resolve()
        self._parser = parser or ConfigParser()
        self._env = env or VariableScope()
        self._base_variables = base_variables or VariableScope()
        self._http = http
        self._cache: dict[str, ResolvedRegistry] = {}
        self._cache_lock = threading.Lock()

    def resolve(self, config_file: str | Path) -> tuple[ResolvedRegistry, list[str]]:
        """Resolve a root config file; raise ``ConfigLoadError`` if it is unusable."""
        path = Path(config_file)
        if not path.is_absolute():
            path = self.root_dir / path
        path = path.resolve()
        diagnostics = ConfigDiagnostics()
        raw = self._parser.parse_file(path, diagnostics)
        identity = str(path)
        registry = self._resolve_config(
            raw,
            origin=identity,
            base_dir=path.parent,
            ancestors=(identity,),
            diagnostics=diagnostics,
        )
        return registry.with_variables_base(self._base_variables), diagnostics.warnings

    def resolve_inline(
        self, text: str, fmt: ConfigFormat | None = None
    ) -> tuple[ResolvedRegistry, list[str]]:
        """Resolve configuration given as a string; relative paths use the root dir."""
        diagnostics = ConfigDiagnostics()
        raw = self._parser.parse(text, origin=INLINE_ORIGIN, fmt=fmt, diagnostics=diagnostics)
        registry = self._resolve_config(
            raw,
            origin=INLINE_ORIGIN,
            base_dir=self.root_dir,
            ancestors=(INLINE_ORIGIN,),
            diagnostics=diagnostics,
        )
        return registry.with_variables_base(self._base_variables), diagnostics.warnings

    def _resolve_config(
        self,
        raw: RawConfig,
        *,
        origin: str,
        base_dir: Path,
        ancestors: tuple[str, ...],
        diagnostics: ConfigDiagnostics,
    ) -> ResolvedRegistry:
        accumulated = ResolvedRegistry()
        for directive in raw.imports:
            directive = self._expand_env(directive)
            for target in self._targets(directive, base_dir, diagnostics):
                sub_registry = self._resolve_target(directive, target, ancestors, diagnostics)
                if sub_registry is not None:
                    accumulated = accumulated.fold(sub_registry)

        own = ResolvedRegistry.from_raw(raw, origin).map_documents(
            lambda document: _rebase_sources(document, base_dir, self.root_dir)
        )
        return accumulated.fold(own)

    def _expand_env(self, directive: ImportDirective) -> ImportDirective:
        return directive.model_copy(
            update={
                "path": substitute_env(directive.path, self._env) if directive.path else None,
                "url": substitute_env(directive.url, self._env) if directive.url else None,
                "headers": {
                    key: substitute_env(value, self._env)
                    for key, value in directive.headers.items()
                },
            }
        )

    def _targets(
        self, directive: ImportDirective, base_dir: Path, diagnostics: ConfigDiagnostics
    ) -> list[ImportTarget]:
        if directive.type == "url":
            url = directive.target
            return [ImportTarget(identity=url, display=url, url=url)]

        declared = directive.target
        path = Path(declared).expanduser()
        if not path.is_absolute():
            path = base_dir / path

        if directive.has_wildcard():
            matches = _expand_glob(path)
            if not matches:
                diagnostics.warn(f"No files match the import pattern '{declared}'")
                return []
            logger.debug("Import pattern %s matched %d files", declared, len(matches))
            return [
                ImportTarget(
                    identity=str(match.resolve()),
                    display=_display_path(match.resolve(), self.root_dir),
                    path=match.resolve(),
                )
                for match in matches
            ]

        resolved = path.resolve()
        return [ImportTarget(identity=str(resolved), display=declared, path=resolved)]

    def _resolve_target(
        self,
        directive: ImportDirective,
        target: ImportTarget,
        ancestors: tuple[str, ...],
        diagnostics: ConfigDiagnostics,
    ) -> ResolvedRegistry | None:
        if target.identity in ancestors:
            chain = " -> ".join((*ancestors, target.identity))
            diagnostics.warn(f"Circular import detected, skipping '{target.display}': {chain}")
            return None

        with self._cache_lock:
            cached = self._cache.get(target.identity)

        if cached is None:
            try:
                raw, base_dir = self._load(target, directive, diagnostics)
            except (ConfigLoadError, ImportSourceError) as exc:
                diagnostics.warn(f"Failed to import '{target.display}': {exc}")
                logger.warning("Failed to import %s: %s", target.display, exc)
                return None
            cached = self._resolve_config(
                raw,
                origin=target.identity,
                base_dir=base_dir,
                ancestors=(*ancestors, target.identity),
                diagnostics=diagnostics,
            )
            with self._cache_lock:
                self._cache.setdefault(target.identity, cached)
        else:
            logger.debug("Reusing resolved import %s", target.identity)

        applied = self._apply_directive(cached, directive)
        return applied.with_import(
            AppliedImport(path=target.display, type=directive.type, identity=target.identity)
        )

    def _load(
        self, target: ImportTarget, directive: ImportDirective, diagnostics: ConfigDiagnostics
    ) -> tuple[RawConfig, Path]:
        if target.path is not None:
            if not target.path.is_file():
                msg = f"Import file not found: {target.path}"
                raise ImportSourceError(msg)
            return self._parser.parse_file(target.path, diagnostics), target.path.parent

        if self._http is None:
            self._http = HttpClient()
        url = target.url or ""
        try:
            response = self._http.get(url, directive.headers)
        except HttpFetchError as exc:
            raise ImportSourceError(str(exc)) from exc
        fmt = _CONTENT_TYPE_FORMATS.get(response.content_type) or detect_format(url)
        raw = self._parser.parse(response.text, origin=url, fmt=fmt, diagnostics=diagnostics)
        return raw, self.root_dir

    @staticmethod
    def _apply_directive(
        registry: ResolvedRegistry, directive: ImportDirective
    ) -> ResolvedRegistry:
        if directive.path_prefix:
            prefix = directive.path_prefix
            registry = registry.map_documents(lambda document: _prefix_output(document, prefix))

        if directive.docs is not None:
            allowed = set(directive.docs)
            registry = registry.select(documents=lambda document: document.output_path in allowed)

        if directive.filter is not None:
            import_filter = directive.filter
            registry = registry.select(
                prompts=lambda prompt: import_filter.accepts(prompt.id, prompt.tags),
                tools=lambda tool: import_filter.accepts(tool.id, tool.tags),
            )
        return registry
