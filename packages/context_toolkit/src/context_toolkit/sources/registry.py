"""Registry mapping source type names to fetchers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from context_toolkit.errors import SourceFetchError
from context_toolkit.sources.files import FileSourceFetcher, TreeSourceFetcher
from context_toolkit.sources.git_diff import GitDiffSourceFetcher
from context_toolkit.sources.remote import (
    GithubSourceFetcher,
    GitlabSourceFetcher,
    UrlSourceFetcher,
)

if TYPE_CHECKING:
    from context_toolkit.sources.base import FetchContext, SourceFetcher


class TextSourceFetcher:
    """Inline text is returned as declared."""

    def fetch(self, source: Any, context: FetchContext) -> str:
        return source.content


class SourceFetcherRegistry:
    """Dispatch ``fetch_for(type, source)`` to the registered fetcher."""

    def __init__(self, context: FetchContext) -> None:
        self.context = context
        self._fetchers: dict[str, SourceFetcher] = {}

    def register(self, source_type: str, fetcher: SourceFetcher) -> None:
        """Register (or replace) the fetcher for a source type."""
        self._fetchers[source_type] = fetcher

    def fetch_for(self, source_type: str, source: Any) -> str:
        """Fetch raw text for ``source``; raise ``SourceFetchError`` on failure."""
        fetcher = self._fetchers.get(source_type)
        if fetcher is None:
            msg = f"No fetcher registered for source type '{source_type}'"
            raise SourceFetchError(msg)
        return fetcher.fetch(source, self.context)


def build_default_registry(context: FetchContext) -> SourceFetcherRegistry:
    """Create a registry with every built-in source type."""
    registry = SourceFetcherRegistry(context)
    registry.register("text", TextSourceFetcher())
    registry.register("file", FileSourceFetcher())
    registry.register("tree", TreeSourceFetcher())
    registry.register("url", UrlSourceFetcher())
    registry.register("github", GithubSourceFetcher())
    registry.register("gitlab", GitlabSourceFetcher())
    registry.register("git_diff", GitDiffSourceFetcher())
    return registry
