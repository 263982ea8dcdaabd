from __future__ import annotations

import logging

from context_toolkit.telemetry import (
    DocumentContextFilter,
    document_context,
    get_current_document,
    install_document_log_filter,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "message", None, None)


def test_filter_injects_current_document() -> None:
    record = _record()

    with document_context("docs/readme.md"):
        assert DocumentContextFilter().filter(record)

    assert record.document == "docs/readme.md"
    assert get_current_document() is None


def test_filter_defaults_to_dash() -> None:
    record = _record()

    DocumentContextFilter().filter(record)

    assert record.document == "-"


def test_install_is_idempotent() -> None:
    handler = logging.StreamHandler()

    install_document_log_filter([handler])
    install_document_log_filter([handler])

    assert sum(isinstance(flt, DocumentContextFilter) for flt in handler.filters) == 1
