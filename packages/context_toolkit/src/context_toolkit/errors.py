"""Exception types and non-fatal error collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class ContextToolkitError(Exception):
    """Base error for the toolkit."""


class ConfigLoadError(ContextToolkitError):
    """Raised when a configuration file cannot be located or read."""


class ConfigParseError(ConfigLoadError):
    """Raised when configuration content is malformed."""


class ImportSourceError(ContextToolkitError):
    """Raised when an imported configuration cannot be loaded."""


class SourceFetchError(ContextToolkitError):
    """Raised by source fetchers when content cannot be produced."""


class ModifierError(ContextToolkitError):
    """Raised when a content modifier fails or is unknown."""


@dataclass(frozen=True)
class CollectedError:
    """Single error entry recorded during compilation."""

    scope: str
    message: str

    def __str__(self) -> str:
        return f"{self.scope}: {self.message}" if self.scope else self.message


@dataclass
class ErrorCollector:
    """Append-only error sink that never raises."""

    errors: list[CollectedError] = field(default_factory=list)

    def add(self, scope: str, message: str) -> None:
        """Record an error for the given scope."""
        self.errors.append(CollectedError(scope=scope, message=message))

    def extend(self, other: ErrorCollector) -> None:
        """Append every error of another collector."""
        self.errors.extend(other.errors)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def all(self) -> list[CollectedError]:
        """Return a copy of the recorded errors."""
        return list(self.errors)

    def messages(self) -> list[str]:
        return [str(error) for error in self.errors]

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[CollectedError]:
        return iter(list(self.errors))
