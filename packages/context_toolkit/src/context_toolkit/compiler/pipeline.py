"""End-to-end generation: resolve configuration, compile and write documents."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from context_toolkit.compiler.document import CompiledDocument, DocumentCompiler
from context_toolkit.compiler.report import (
    MESSAGE_LOAD_FAILED,
    MESSAGE_NO_DOCUMENTS,
    MESSAGE_SUCCESS,
    DocumentResult,
    GenerationReport,
)
from context_toolkit.config.imports import INLINE_ORIGIN, ImportResolver
from context_toolkit.config.paths import find_config_file, get_work_dir, resolve_config_path
from context_toolkit.config.prompts import flatten_prompts
from context_toolkit.errors import ContextToolkitError, ErrorCollector
from context_toolkit.http_client import HttpClient
from context_toolkit.models.settings import Settings
from context_toolkit.modifiers import ContentModifierChain, build_default_modifiers
from context_toolkit.sources.base import FetchContext
from context_toolkit.sources.registry import build_default_registry
from context_toolkit.variables import load_env_variables, predefined_variables

if TYPE_CHECKING:
    from context_toolkit.config.registry import DocumentEntry, ResolvedRegistry
    from context_toolkit.modifiers.registry import ModifierRegistry
    from context_toolkit.sources.registry import SourceFetcherRegistry

logger = logging.getLogger(__name__)


class ContextGenerator:
    """Run one generation over a configuration file or inline configuration."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        work_dir: str | Path | None = None,
        env_file: str | Path | None = None,
        max_workers: int | None = None,
        http: HttpClient | None = None,
        modifiers: ModifierRegistry | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.root_dir = get_work_dir(work_dir or self.settings.work_dir)
        self.max_workers = max(1, max_workers or self.settings.max_workers)
        self._env_file = env_file
        self._http = http or HttpClient(timeout=self.settings.http_timeout)
        self._modifiers = modifiers or build_default_modifiers()

    def close(self) -> None:
        self._http.close()

    def cancel(self) -> None:
        """Abort in-flight downloads and git calls."""
        self._http.cancel_event.set()

    def generate(
        self, config_file: str | Path | None = None, inline: str | None = None
    ) -> GenerationReport:
        """Resolve, compile and write every document; never raises for document errors."""
        resolver = ImportResolver(
            self.root_dir,
            env=load_env_variables(self._resolve_env_file()),
            base_variables=predefined_variables(self.root_dir),
            http=self._http,
        )
        errors = ErrorCollector()
        try:
            if inline is not None:
                context_path = INLINE_ORIGIN
                registry, warnings = resolver.resolve_inline(inline)
            else:
                path = (
                    resolve_config_path(config_file, self.root_dir)
                    if config_file
                    else find_config_file(self.root_dir)
                )
                context_path = self._display(path)
                registry, warnings = resolver.resolve(path)
        except ContextToolkitError as exc:
            logger.error("Failed to load configuration: %s", exc)
            errors.add("config", str(exc))
            return GenerationReport.failed(MESSAGE_LOAD_FAILED, errors)

        prompts, prompt_warnings = flatten_prompts(registry)
        report = GenerationReport(
            imports=list(registry.imports),
            prompts=prompts,
            tools=list(registry.tools),
            warnings=list(dict.fromkeys([*warnings, *prompt_warnings])),
            errors=errors,
        )
        if not registry.entries:
            logger.info("No documents found in configuration")
            report.message = MESSAGE_NO_DOCUMENTS
            return report

        compiled = self._compile_all(registry)
        for entry, document in zip(registry.entries, compiled, strict=True):
            errors.extend(document.errors)
            report.results.append(
                DocumentResult.from_compiled(document, self._origin_path(entry, context_path))
            )
        report.message = MESSAGE_SUCCESS
        logger.info("Compiled %d documents with %d errors", len(report.results), len(errors))
        return report

    def _compile_all(self, registry: ResolvedRegistry) -> list[CompiledDocument]:
        compiler = DocumentCompiler(
            self.root_dir,
            fetchers=self._fetchers(),
            modifiers=ContentModifierChain(self._modifiers),
            variables=registry.variables,
        )
        documents = registry.documents
        workers = min(len(documents), self.max_workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            try:
                built = list(executor.map(compiler.build, documents))
            except KeyboardInterrupt:
                # set before the executor joins the running builds
                self.cancel()
                raise

        # writes follow declaration order so duplicate output paths resolve deterministically
        return [self._write(compiler, item) for item in built]

    @staticmethod
    def _write(compiler: DocumentCompiler, compiled: CompiledDocument) -> CompiledDocument:
        try:
            return compiler.write(compiled)
        except OSError as exc:
            logger.error("Unable to write %s: %s", compiled.output_path, exc)
            compiled.errors.add(compiled.output_path, f"Unable to write document: {exc}")
            return replace(compiled, status="error")

    def _fetchers(self) -> SourceFetcherRegistry:
        return build_default_registry(
            FetchContext(
                root_dir=self.root_dir,
                http=self._http,
                git_timeout=self.settings.git_timeout,
                github_token=self.settings.github_token,
                gitlab_token=self.settings.gitlab_token,
            )
        )

    def _resolve_env_file(self) -> Path | None:
        if self._env_file is None:
            return None
        path = Path(self._env_file).expanduser()
        return path if path.is_absolute() else self.root_dir / path

    def _display(self, path: Path) -> str:
        try:
            return path.relative_to(self.root_dir).as_posix()
        except ValueError:
            return str(path)

    def _origin_path(self, entry: DocumentEntry, context_path: str) -> str:
        if entry.origin == INLINE_ORIGIN:
            return context_path
        if entry.origin.startswith(("http://", "https://")):
            return entry.origin
        return self._display(Path(entry.origin))
