"""Observability helpers: structured logging and operation timing."""

from gridslice.observability.logging import (
    StructuredFormatter,
    configure_structured_logging,
    configure_text_logging,
    log_event,
    timed_operation,
)

__all__ = [
    "StructuredFormatter",
    "configure_structured_logging",
    "configure_text_logging",
    "log_event",
    "timed_operation",
]
