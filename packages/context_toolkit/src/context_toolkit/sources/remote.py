"""Network-backed sources: plain URLs and GitHub/GitLab repository trees."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from context_toolkit.errors import SourceFetchError
from context_toolkit.http_client import HttpFetchError
from context_toolkit.markdown_utils import code_block, language_for
from context_toolkit.sources.base import is_excluded, matches_pattern, under_any

if TYPE_CHECKING:
    from context_toolkit.models.config import (
        GithubSource,
        GitlabSource,
        PathFilteredSource,
        UrlSource,
    )
    from context_toolkit.sources.base import FetchContext

logger = logging.getLogger(__name__)

_DROP_BLOCKS = re.compile(r"<(script|style|noscript)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAGS = re.compile(r"<[^>]+>")
_BLANK_RUNS = re.compile(r"\n\s*\n+")

GITLAB_PAGE_SIZE = 100
GITLAB_MAX_PAGES = 50


def html_to_text(html: str) -> str:
    """Strip markup from an HTML page, keeping readable text."""
    text = _DROP_BLOCKS.sub("", html)
    text = _TAGS.sub("", text)
    text = "\n".join(line.strip() for line in text.splitlines())
    return _BLANK_RUNS.sub("\n\n", text).strip()


def _get(context: FetchContext, url: str, headers: dict[str, str]) -> str:
    try:
        return context.http.get(url, headers).text
    except HttpFetchError as exc:
        raise SourceFetchError(str(exc)) from exc


def _get_json(context: FetchContext, url: str, headers: dict[str, str]) -> Any:
    body = _get(context, url, headers)
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON returned by {url}"
        raise SourceFetchError(msg) from exc


class UrlSourceFetcher:
    """Download each URL and render its text content."""

    def fetch(self, source: UrlSource, context: FetchContext) -> str:
        if not source.urls:
            msg = "URL source requires at least one entry in 'urls'"
            raise SourceFetchError(msg)
        blocks: list[str] = []
        for url in source.urls:
            try:
                response = context.http.get(url, source.headers)
            except HttpFetchError as exc:
                raise SourceFetchError(str(exc)) from exc
            text = response.text
            if response.content_type == "text/html":
                text = html_to_text(text)
            blocks.append(f"// URL: {url}\n{text.strip()}")
        return "\n\n".join(blocks)


class RepositoryFetcher(ABC):
    """Shared listing, filtering and rendering for hosted git repositories."""

    def fetch(self, source: PathFilteredSource, context: FetchContext) -> str:
        paths = [
            path
            for path in self.list_files(source, context)
            if under_any(path, source.source_paths)
            and matches_pattern(path, source.file_pattern)
            and not is_excluded(path, source.not_path)
        ]
        logger.info("%s matched %d files", type(self).__name__, len(paths))
        blocks = []
        for path in sorted(paths):
            if context.cancel_event.is_set():
                msg = "Repository fetch cancelled"
                raise SourceFetchError(msg)
            content = self.read_file(source, path, context)
            blocks.append(code_block(content, language_for(path), path))
        return "\n\n".join(blocks)

    @abstractmethod
    def list_files(self, source: Any, context: FetchContext) -> list[str]:
        """Return every blob path of the repository at the source's branch."""

    @abstractmethod
    def read_file(self, source: Any, path: str, context: FetchContext) -> str:
        """Return the raw content of one file."""


class GithubSourceFetcher(RepositoryFetcher):
    api_url = "https://api.github.com"
    raw_url = "https://raw.githubusercontent.com"

    def _headers(self, source: GithubSource, context: FetchContext) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        token = source.github_token or context.github_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def list_files(self, source: GithubSource, context: FetchContext) -> list[str]:
        tree = f"{source.repository}/git/trees/{quote(source.branch)}"
        url = f"{self.api_url}/repos/{tree}?recursive=1"
        payload = _get_json(context, url, self._headers(source, context))
        if not isinstance(payload, dict) or not isinstance(payload.get("tree"), list):
            msg = f"Unexpected tree response for {source.repository}"
            raise SourceFetchError(msg)
        if payload.get("truncated"):
            logger.warning("GitHub tree listing for %s was truncated", source.repository)
        return [item["path"] for item in payload["tree"] if item.get("type") == "blob"]

    def read_file(self, source: GithubSource, path: str, context: FetchContext) -> str:
        url = f"{self.raw_url}/{source.repository}/{quote(source.branch)}/{quote(path)}"
        headers = self._headers(source, context)
        headers.pop("Accept", None)
        return _get(context, url, headers)


class GitlabSourceFetcher(RepositoryFetcher):
    def _base(self, source: GitlabSource) -> str:
        project = quote(source.repository, safe="")
        return f"{source.server.url.rstrip('/')}/api/v4/projects/{project}/repository"

    def _headers(self, source: GitlabSource, context: FetchContext) -> dict[str, str]:
        headers = dict(source.server.headers)
        token = source.server.token or context.gitlab_token
        if token:
            headers["PRIVATE-TOKEN"] = token
        return headers

    def list_files(self, source: GitlabSource, context: FetchContext) -> list[str]:
        paths: list[str] = []
        ref = quote(source.branch, safe="")
        for page in range(1, GITLAB_MAX_PAGES + 1):
            url = (
                f"{self._base(source)}/tree?ref={ref}&recursive=true"
                f"&per_page={GITLAB_PAGE_SIZE}&page={page}"
            )
            items = _get_json(context, url, self._headers(source, context))
            if not isinstance(items, list):
                msg = f"Unexpected tree response for {source.repository}"
                raise SourceFetchError(msg)
            paths.extend(item["path"] for item in items if item.get("type") == "blob")
            if len(items) < GITLAB_PAGE_SIZE:
                break
        return paths

    def read_file(self, source: GitlabSource, path: str, context: FetchContext) -> str:
        ref = quote(source.branch, safe="")
        url = f"{self._base(source)}/files/{quote(path, safe='')}/raw?ref={ref}"
        return _get(context, url, self._headers(source, context))
