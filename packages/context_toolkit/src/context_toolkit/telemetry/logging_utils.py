"""Logging helpers for per-document correlation."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_current_document: ContextVar[str | None] = ContextVar("current_document", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(document)s] %(message)s"


def get_current_document() -> str | None:
    return _current_document.get()


@contextmanager
def document_context(output_path: str) -> Iterator[None]:
    """Mark log records emitted inside the block with ``output_path``."""
    token = _current_document.set(output_path)
    try:
        yield
    finally:
        _current_document.reset(token)


class DocumentContextFilter(logging.Filter):
    """Attach the document being compiled to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject document into the log record."""
        record.document = get_current_document() or "-"
        return True


def install_document_log_filter(handlers: Iterable[logging.Handler] | None = None) -> None:
    """Install document context filters.

    Args:
        handlers: Optional iterable of handlers to attach the filter to. Defaults to the
            root logger's handlers.
    """
    targets = list(handlers) if handlers is not None else list(logging.getLogger().handlers)
    for handler in targets:
        if any(isinstance(flt, DocumentContextFilter) for flt in handler.filters):
            continue
        handler.addFilter(DocumentContextFilter())


def configure_logging(level: str | int = "WARNING") -> None:
    """Configure root logging with the document-aware format.

    Existing root handlers are kept; the filter is added to them so the
    ``document`` attribute is always present.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level)
    install_document_log_filter()
