"""Structured logging and timing utilities.

Provides:
- StructuredFormatter: JSON log formatter for structured log output
- timed_operation: Context manager that logs operation timing
- log_event: Helper for structured event logging with metrics
- configure_structured_logging / configure_text_logging: root logger setup

Uses stdlib logging only.

Usage:
    from gridslice.observability.logging import log_event, timed_operation

    with timed_operation(logger, "slice.compute", level=logging.DEBUG) as ctx:
        result = engine.compute_slice(viewport)
        ctx["row_count"] = result.window.row_count

    log_event(logger, "websocket.connect", remote="127.0.0.1:53122")
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs log records as single-line JSON with standard fields:
    timestamp, level, logger, message, plus any extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "event_type", None):
            entry["event"] = record.event_type  # type: ignore[attr-defined]
        if getattr(record, "metrics", None):
            entry["metrics"] = record.metrics  # type: ignore[attr-defined]
        if getattr(record, "metadata", None):
            entry["metadata"] = record.metadata  # type: ignore[attr-defined]

        if record.exc_info and record.exc_info[1]:
            entry["error"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


def _split_fields(fields: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Numeric values are metrics, everything else is metadata."""
    metrics = {
        k: v for k, v in fields.items() if isinstance(v, (int, float)) and not isinstance(v, bool)
    }
    metadata = {k: v for k, v in fields.items() if k not in metrics}
    return metrics, metadata


@contextmanager
def timed_operation(
    log: logging.Logger,
    operation: str,
    level: int = logging.INFO,
    **extra: Any,
) -> Iterator[dict[str, Any]]:
    """Context manager that logs operation completion with timing.

    Args:
        log: Logger instance.
        operation: Operation name (e.g., "slice.compute").
        level: Log level for the completion message.
        **extra: Additional key-value pairs included in the log.

    Yields:
        dict that can be updated with additional fields during the operation.
    """
    ctx: dict[str, Any] = {}
    start = time.perf_counter()
    try:
        yield ctx
    except Exception:
        elapsed_ms = (time.perf_counter() - start) * 1000
        log.error(
            "%s failed after %.1fms",
            operation,
            elapsed_ms,
            exc_info=True,
            extra={
                "event_type": f"{operation}.failed",
                "metrics": {"latency_ms": round(elapsed_ms, 1)},
                "metadata": extra,
            },
        )
        raise
    elapsed_ms = (time.perf_counter() - start) * 1000
    metrics, metadata = _split_fields({**extra, **ctx})
    log.log(
        level,
        "%s completed in %.1fms",
        operation,
        elapsed_ms,
        extra={
            "event_type": f"{operation}.complete",
            "metrics": {"latency_ms": round(elapsed_ms, 1), **metrics},
            "metadata": metadata,
        },
    )


def log_event(
    log: logging.Logger,
    event_type: str,
    level: int = logging.INFO,
    message: str | None = None,
    **fields: Any,
) -> None:
    """Log a structured event with typed fields.

    Args:
        log: Logger instance.
        event_type: Event type string (e.g., "websocket.disconnect").
        level: Log level.
        message: Optional human-readable message. Defaults to event_type
            followed by the fields.
        **fields: Arbitrary key-value fields. Numeric values go to metrics,
                  others go to metadata.
    """
    metrics, metadata = _split_fields(fields)
    if message is None:
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        message = f"{event_type} {rendered}" if rendered else event_type

    log.log(
        level,
        message,
        extra={
            "event_type": event_type,
            "metrics": metrics or None,
            "metadata": metadata or None,
        },
    )


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logger with structured JSON output.

    Args:
        level: Root log level.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger()
    root.setLevel(level)
    # Replace existing handlers to avoid duplicate output
    root.handlers = [handler]


def configure_text_logging(level: int = logging.INFO) -> None:
    """Configure root logger with plain text lines."""
    logging.basicConfig(
        level=level,
        format=TEXT_FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )
