from context_toolkit.telemetry.logging_utils import (
    DocumentContextFilter,
    configure_logging,
    document_context,
    get_current_document,
    install_document_log_filter,
)

__all__ = [
    "DocumentContextFilter",
    "configure_logging",
    "document_context",
    "get_current_document",
    "install_document_log_filter",
]
