"""Resolved registry accumulated while walking the import graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from context_toolkit.variables import VariableScope

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from context_toolkit.models.config import Document, ImportDirective, Prompt, RawConfig, Tool


@dataclass
class ConfigDiagnostics:
    """Warnings collected during parsing and import resolution."""

    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        """Record a warning message."""
        self.warnings.append(message)


@dataclass(frozen=True)
class DocumentEntry:
    """A document together with the config and position that declared it."""

    origin: str
    index: int
    document: Document

    @property
    def key(self) -> tuple[str, int, str]:
        return (self.origin, self.index, self.document.output_path)


@dataclass(frozen=True)
class AppliedImport:
    """An import directive that was successfully folded, for reporting."""

    path: str
    type: str
    identity: str


T = TypeVar("T", "Prompt", "Tool")


def _merge_by_id(current: tuple[T, ...], incoming: Iterable[T]) -> tuple[T, ...]:
    merged: dict[str, T] = {item.id: item for item in current}
    for item in incoming:
        merged.pop(item.id, None)
        merged[item.id] = item
    return tuple(merged.values())


@dataclass(frozen=True)
class ResolvedRegistry:
    """Immutable, fully merged configuration ready for compilation.

    Folding never mutates either operand. Documents from the same declaration
    (same origin, index and final output path) are kept once, so diamond
    imports do not duplicate them, while distinct declarations sharing an
    output path are all retained. Prompts and tools are keyed by ``id`` with
    last-write-wins.
    """

    variables: VariableScope = field(default_factory=VariableScope)
    entries: tuple[DocumentEntry, ...] = ()
    prompts: tuple[Prompt, ...] = ()
    tools: tuple[Tool, ...] = ()
    imports: tuple[AppliedImport, ...] = ()

    @property
    def documents(self) -> list[Document]:
        return [entry.document for entry in self.entries]

    @classmethod
    def from_raw(cls, raw: RawConfig, origin: str) -> ResolvedRegistry:
        """Build a registry from one file's direct declarations."""
        return cls(
            variables=VariableScope(raw.variables),
            entries=tuple(
                DocumentEntry(origin=origin, index=index, document=document)
                for index, document in enumerate(raw.documents)
            ),
            prompts=_merge_by_id((), raw.prompts),
            tools=_merge_by_id((), raw.tools),
        )

    def fold(self, other: ResolvedRegistry) -> ResolvedRegistry:
        """Return a new registry with ``other`` layered on top of this one."""
        seen = {entry.key for entry in self.entries}
        entries = list(self.entries)
        for entry in other.entries:
            if entry.key in seen:
                continue
            seen.add(entry.key)
            entries.append(entry)

        known_imports = {item.identity for item in self.imports}
        imports = list(self.imports)
        imports.extend(item for item in other.imports if item.identity not in known_imports)

        return ResolvedRegistry(
            variables=self.variables.merged_with(other.variables),
            entries=tuple(entries),
            prompts=_merge_by_id(self.prompts, other.prompts),
            tools=_merge_by_id(self.tools, other.tools),
            imports=tuple(imports),
        )

    def with_variables_base(self, base: VariableScope) -> ResolvedRegistry:
        """Place ``base`` underneath the registry's own variables."""
        return ResolvedRegistry(
            variables=base.merged_with(self.variables),
            entries=self.entries,
            prompts=self.prompts,
            tools=self.tools,
            imports=self.imports,
        )

    def with_import(self, applied: AppliedImport) -> ResolvedRegistry:
        return ResolvedRegistry(
            variables=self.variables,
            entries=self.entries,
            prompts=self.prompts,
            tools=self.tools,
            imports=(*self.imports, applied),
        )

    def map_documents(self, transform: Callable[[Document], Document]) -> ResolvedRegistry:
        return ResolvedRegistry(
            variables=self.variables,
            entries=tuple(
                DocumentEntry(entry.origin, entry.index, transform(entry.document))
                for entry in self.entries
            ),
            prompts=self.prompts,
            tools=self.tools,
            imports=self.imports,
        )

    def select(
        self,
        *,
        documents: Callable[[Document], bool] | None = None,
        prompts: Callable[[Prompt], bool] | None = None,
        tools: Callable[[Tool], bool] | None = None,
    ) -> ResolvedRegistry:
        """Return a registry keeping only the items accepted by the predicates."""
        return ResolvedRegistry(
            variables=self.variables,
            entries=tuple(
                entry for entry in self.entries if documents is None or documents(entry.document)
            ),
            prompts=tuple(item for item in self.prompts if prompts is None or prompts(item)),
            tools=tuple(item for item in self.tools if tools is None or tools(item)),
            imports=self.imports,
        )
