from context_toolkit.sources.base import FetchContext, SourceFetcher
from context_toolkit.sources.files import FileSourceFetcher, TreeSourceFetcher
from context_toolkit.sources.git_diff import GitDiffSourceFetcher
from context_toolkit.sources.registry import (
    SourceFetcherRegistry,
    TextSourceFetcher,
    build_default_registry,
)
from context_toolkit.sources.remote import (
    GithubSourceFetcher,
    GitlabSourceFetcher,
    UrlSourceFetcher,
)

__all__ = [
    "FetchContext",
    "FileSourceFetcher",
    "GitDiffSourceFetcher",
    "GithubSourceFetcher",
    "GitlabSourceFetcher",
    "SourceFetcher",
    "SourceFetcherRegistry",
    "TextSourceFetcher",
    "TreeSourceFetcher",
    "UrlSourceFetcher",
    "build_default_registry",
]
