"""Unified exception hierarchy for gridslice.

All gridslice-specific exceptions inherit from GridSliceError. Per-message
failures raised while handling a WebSocket frame are converted into an
``{"type": "error", ...}`` reply by the dispatcher, so none of them ever
unwinds a connection loop.

Exception Hierarchy:
    GridSliceError (base)
    ├── ProtocolError - Frame could not be mapped to a message
    │   ├── InvalidJsonError - Text frame is not valid JSON
    │   └── UnknownMessageTypeError - Missing or unrecognized "type"
    └── ValidationError - Message fields failed schema validation (bad request)

Usage:
    from gridslice.errors import ValidationError

    try:
        result = engine.compute_slice(viewport)
    except ValidationError as e:
        logger.warning("Rejected slice request: %s (code: %s)", e.message, e.code)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pydantic


class ErrorCode(str, Enum):
    """Standard error codes for gridslice errors.

    Codes are stable identifiers for logs and for the ``code`` field of
    :meth:`GridSliceError.to_dict`.
    """

    # Protocol errors (PROTO_*)
    PROTO_INVALID_JSON = "PROTO_INVALID_JSON"
    PROTO_UNKNOWN_TYPE = "PROTO_UNKNOWN_TYPE"

    # Validation errors (VAL_*)
    VAL_INVALID_INPUT = "VAL_INVALID_INPUT"
    VAL_MISSING_REQUIRED = "VAL_MISSING_REQUIRED"
    VAL_TYPE_ERROR = "VAL_TYPE_ERROR"
    VAL_OUT_OF_RANGE = "VAL_OUT_OF_RANGE"

    # Generic errors
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


class GridSliceError(Exception):
    """Base exception for all gridslice errors.

    Attributes:
        message: Human-readable error message, sent to the client as-is.
        code: Machine-readable error code from ErrorCode enum.
        details: Optional additional context about the error.
        cause: Optional original exception that caused this error.
    """

    default_message: str = "An error occurred"
    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize a gridslice error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        self.cause = cause

        super().__init__(self.message)

        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return human-readable representation."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        parts = [f"{self.__class__.__name__}({self.message!r}"]
        if self.code != self.default_code:
            parts.append(f", code={self.code.value!r}")
        if self.details:
            parts.append(f", details={self.details!r}")
        if self.cause:
            parts.append(f", cause={self.cause!r}")
        parts.append(")")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for logging.

        Returns:
            Dictionary with error, code, and detail fields.
        """
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "detail": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Protocol Errors


class ProtocolError(GridSliceError):
    """Raised when an inbound text frame cannot be mapped to a known message."""

    default_message = "protocol error"
    default_code = ErrorCode.UNKNOWN


class InvalidJsonError(ProtocolError):
    """Raised when a text frame does not contain valid JSON."""

    default_message = "invalid json"
    default_code = ErrorCode.PROTO_INVALID_JSON


class UnknownMessageTypeError(ProtocolError):
    """Raised when the ``type`` field is missing or not recognized."""

    default_message = "unknown message type"
    default_code = ErrorCode.PROTO_UNKNOWN_TYPE

    def __init__(
        self,
        message: str | None = None,
        *,
        message_type: Any = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = details or {}
        if message_type is not None:
            details["message_type"] = message_type
        super().__init__(message, code=code, details=details, cause=cause)


# Validation Errors


class ValidationError(GridSliceError):
    """Raised when message fields fail validation (a bad request).

    Attributes:
        field_errors: One entry per offending field, each with ``field``,
            ``message`` and ``kind`` keys. Sent to the client alongside the
            summary message.
    """

    default_message = "bad request"
    default_code = ErrorCode.VAL_INVALID_INPUT

    def __init__(
        self,
        message: str | None = None,
        *,
        field_errors: list[dict[str, str]] | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.field_errors = field_errors or []
        details = details or {}
        if self.field_errors:
            details["fields"] = [entry["field"] for entry in self.field_errors]
        super().__init__(message, code=code, details=details, cause=cause)


# Convenience functions for creating common errors

# pydantic error types mapped onto the closest validation code
_PYDANTIC_KIND_CODES: dict[str, ErrorCode] = {
    "missing": ErrorCode.VAL_MISSING_REQUIRED,
    "int_type": ErrorCode.VAL_TYPE_ERROR,
    "int_parsing": ErrorCode.VAL_TYPE_ERROR,
    "literal_error": ErrorCode.VAL_TYPE_ERROR,
    "greater_than": ErrorCode.VAL_OUT_OF_RANGE,
    "greater_than_equal": ErrorCode.VAL_OUT_OF_RANGE,
    "less_than_equal": ErrorCode.VAL_OUT_OF_RANGE,
}


def bad_request_from_validation(
    exc: pydantic.ValidationError,
    loc_offset: int = 0,
) -> ValidationError:
    """Build a bad-request error carrying the field-level causes.

    Args:
        exc: The pydantic validation failure raised by a message schema.
        loc_offset: Leading location parts to drop, e.g. 1 for the tag that a
            discriminated union puts in front of each field path.

    Returns:
        ValidationError whose message summarizes every failing field.
    """
    field_errors = [
        {
            "field": ".".join(str(part) for part in err["loc"][loc_offset:]) or "message",
            "message": err["msg"],
            "kind": err["type"],
        }
        for err in exc.errors(include_url=False)
    ]
    summary = "; ".join(f"{entry['field']}: {entry['message']}" for entry in field_errors)

    kinds = {entry["kind"] for entry in field_errors}
    code = ErrorCode.VAL_INVALID_INPUT
    if len(kinds) == 1:
        code = _PYDANTIC_KIND_CODES.get(kinds.pop(), ErrorCode.VAL_INVALID_INPUT)

    return ValidationError(
        f"bad request: {summary}",
        field_errors=field_errors,
        code=code,
        cause=exc,
    )


def zero_cell_size(field: str) -> ValidationError:
    """Create an error for a zero row height or column width.

    Args:
        field: Wire name of the offending field.

    Returns:
        ValidationError with a field-level cause.
    """
    message = "Input should be greater than 0"
    return ValidationError(
        f"bad request: {field}: {message}",
        field_errors=[{"field": field, "message": message, "kind": "greater_than"}],
        code=ErrorCode.VAL_OUT_OF_RANGE,
    )


__all__ = [
    "ErrorCode",
    "GridSliceError",
    "InvalidJsonError",
    "ProtocolError",
    "UnknownMessageTypeError",
    "ValidationError",
    "bad_request_from_validation",
    "zero_cell_size",
]
