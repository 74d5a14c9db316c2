"""Message dispatch: one inbound text frame in, one reply frame out.

The dispatcher knows nothing about the transport. It decodes a frame,
routes it to the slice engine, and always returns a serialized reply;
per-message failures become ``error`` replies instead of exceptions so the
connection loop never unwinds because of a bad message.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic
import pydantic_core

from gridslice.engine import SliceEngine
from gridslice.errors import (
    ErrorCode,
    GridSliceError,
    InvalidJsonError,
    UnknownMessageTypeError,
    bad_request_from_validation,
)
from gridslice.observability.logging import log_event, timed_operation
from gridslice.protocol import (
    CLIENT_MESSAGE_ADAPTER,
    ClientMessage,
    ErrorResponse,
    MetadataRequest,
    MetadataResponse,
    ServerMessage,
    SliceRequest,
    SliceResponse,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal error"

_UNKNOWN_TAG_ERRORS = frozenset({"union_tag_invalid", "union_tag_not_found"})


class MessageDispatcher:
    """Decodes client messages and produces server replies.

    Args:
        engine: Slice engine used for slice and metadata requests.
    """

    def __init__(self, engine: SliceEngine | None = None) -> None:
        self.engine = engine or SliceEngine()

    def decode(self, text: str) -> ClientMessage:
        """Decode a text frame into a typed client message.

        Parsing is strict JSON: ``NaN`` and ``Infinity`` are rejected, integers
        have no digit limit, and nesting depth is capped by the parser rather
        than the interpreter stack. The parsed object is then validated once
        against the discriminated request union.

        Raises:
            InvalidJsonError: If the frame is not valid JSON.
            UnknownMessageTypeError: If the frame is not a JSON object or its
                ``type`` is missing or not a request type.
            ValidationError: If the message fields fail schema validation.
        """
        try:
            payload: Any = pydantic_core.from_json(text, allow_inf_nan=False)
        except ValueError as e:
            raise InvalidJsonError(cause=e) from e

        if not isinstance(payload, dict):
            raise UnknownMessageTypeError()

        try:
            return CLIENT_MESSAGE_ADAPTER.validate_python(payload)
        except pydantic.ValidationError as e:
            if any(err["type"] in _UNKNOWN_TAG_ERRORS for err in e.errors()):
                tag = payload.get("type")
                raise UnknownMessageTypeError(
                    message_type=tag if isinstance(tag, str) else None, cause=e
                ) from e
            # Field paths from a tagged union start with the tag itself
            raise bad_request_from_validation(e, loc_offset=1) from e

    def handle(self, message: ClientMessage) -> ServerMessage:
        """Produce the reply for a decoded message.

        Raises:
            ValidationError: If the engine rejects the viewport.
        """
        if isinstance(message, MetadataRequest):
            return MetadataResponse.from_bounds(self.engine.compute_metadata())

        if isinstance(message, SliceRequest):
            with timed_operation(logger, "slice.compute", level=logging.DEBUG) as ctx:
                result = self.engine.compute_slice(message.to_viewport())
                ctx["start_row"] = result.window.start_row
                ctx["row_count"] = result.window.row_count
                ctx["start_col"] = result.window.start_col
                ctx["col_count"] = result.window.col_count
            return SliceResponse.from_result(result)

        raise UnknownMessageTypeError(message_type=getattr(message, "type", None))

    def handle_text(self, text: str) -> str:
        """Decode, handle and encode one frame. Never raises for a bad message."""
        reply: ServerMessage
        try:
            reply = self.handle(self.decode(text))
        except GridSliceError as e:
            log_event(
                logger,
                "protocol.rejected",
                level=logging.WARNING,
                **e.to_dict(),
            )
            reply = ErrorResponse.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error handling message: %s", e)
            reply = ErrorResponse.from_error(
                GridSliceError(INTERNAL_ERROR_MESSAGE, code=ErrorCode.INTERNAL, cause=e)
            )
        return reply.to_json()
