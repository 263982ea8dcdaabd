"""Small synchronous HTTP helper shared by URL imports and network sources.

Every request carries an explicit timeout, and downloads are streamed so a
shared cancellation event can stop them between chunks.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

import httpx

from context_toolkit.errors import ContextToolkitError

DEFAULT_TIMEOUT = 30.0


class HttpFetchError(ContextToolkitError):
    """Raised when a request fails, times out, or is cancelled."""


@dataclass(frozen=True)
class HttpResponse:
    url: str
    status_code: int
    content_type: str
    text: str


class HttpClient:
    """Minimal GET client with timeout and cooperative cancellation."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        cancel: threading.Event | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._timeout = timeout
        self._cancel = cancel or threading.Event()
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def get(self, url: str, headers: dict[str, str] | None = None) -> HttpResponse:
        """Fetch ``url`` and return its decoded body; raise on non-2xx."""
        if self._cancel.is_set():
            msg = f"Request to {url} cancelled"
            raise HttpFetchError(msg)
        try:
            with self._client.stream(
                "GET", url, headers=headers or {}, timeout=self._timeout
            ) as response:
                if response.status_code >= 400:
                    msg = f"Failed to fetch {url} (status code: {response.status_code})"
                    raise HttpFetchError(msg)
                chunks: list[str] = []
                for chunk in response.iter_text():
                    if self._cancel.is_set():
                        msg = f"Request to {url} cancelled"
                        raise HttpFetchError(msg)
                    chunks.append(chunk)
                content_type = response.headers.get("content-type", "")
                return HttpResponse(
                    url=str(response.url),
                    status_code=response.status_code,
                    content_type=content_type.split(";", 1)[0].strip().lower(),
                    text="".join(chunks),
                )
        except httpx.TimeoutException as exc:
            msg = f"Request to {url} timed out after {self._timeout}s"
            raise HttpFetchError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Request to {url} failed: {exc}"
            raise HttpFetchError(msg) from exc
