"""WebSocket router serving grid slices.

One ConnectionHandler runs per connection. It processes one frame fully,
including sending the reply, before receiving the next, so replies leave in
the order their requests arrived.

Connection states:
    Open   - initial state; every text frame is handled here
    Closed - terminal; reached on a close frame or a receive failure

Frame handling:
    text frame   -> MessageDispatcher.handle_text -> one reply frame
    binary frame -> ignored
    close frame  -> loop ends (ping/pong never reach the application)
    receive error-> loop ends, connection closed if still open, no reply
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, WebSocket
from starlette.websockets import WebSocketState

from api.dependencies import get_dispatcher
from gridslice.config import WEBSOCKET_PATH
from gridslice.dispatch import MessageDispatcher
from gridslice.observability.logging import log_event

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


class ConnectionHandler:
    """Owns one WebSocket connection from accept to close.

    Attributes:
        connection_id: Identifier used in log events.
        requests_handled: Text frames answered so far.
        ignored_frames: Non-text frames skipped so far.
        failed_sends: Replies that could not be delivered.
        close_reason: "closed" after a close frame, "receive_error" after a
            transport failure, None while open.
    """

    def __init__(self, websocket: WebSocket, dispatcher: MessageDispatcher) -> None:
        self.websocket = websocket
        self.dispatcher = dispatcher
        self.connection_id = str(uuid.uuid4())
        self.requests_handled = 0
        self.ignored_frames = 0
        self.failed_sends = 0
        self.close_reason: str | None = None

    @property
    def remote(self) -> str:
        client = self.websocket.client
        return f"{client.host}:{client.port}" if client else "unknown"

    async def run(self) -> None:
        """Accept the connection and serve frames until it closes."""
        await self.websocket.accept()
        log_event(
            logger,
            "websocket.connect",
            connection_id=self.connection_id,
            remote=self.remote,
        )

        try:
            while self.close_reason is None:
                await self._serve_next_frame()
        finally:
            log_event(
                logger,
                "websocket.disconnect",
                connection_id=self.connection_id,
                reason=self.close_reason or "cancelled",
                requests=self.requests_handled,
                ignored_frames=self.ignored_frames,
                failed_sends=self.failed_sends,
            )

    async def _serve_next_frame(self) -> None:
        try:
            message = await self.websocket.receive()
        except Exception as e:
            log_event(
                logger,
                "websocket.receive_failed",
                level=logging.WARNING,
                connection_id=self.connection_id,
                error=f"{type(e).__name__}: {e}",
            )
            self.close_reason = "receive_error"
            await self._close_quietly()
            return

        if message["type"] == "websocket.disconnect":
            self.close_reason = "closed"
            return

        text = message.get("text")
        if text is None:
            self.ignored_frames += 1
            return

        reply = self.dispatcher.handle_text(text)
        self.requests_handled += 1
        await self.send_best_effort(reply)

    async def send_best_effort(self, payload: str) -> bool:
        """Send a reply under the log-and-continue send policy.

        A failed send is logged and counted but never raised: the peer may
        already be gone, and the next receive is what detects a dead
        connection and ends the loop.

        Returns:
            True if the frame was handed to the transport, False otherwise.
        """
        try:
            await self.websocket.send_text(payload)
            return True
        except Exception as e:
            self.failed_sends += 1
            log_event(
                logger,
                "websocket.send_failed",
                level=logging.WARNING,
                connection_id=self.connection_id,
                error=f"{type(e).__name__}: {e}",
            )
            return False

    async def _close_quietly(self) -> None:
        if self.websocket.application_state != WebSocketState.CONNECTED:
            return
        try:
            await self.websocket.close()
        except Exception as e:
            logger.debug("Error closing connection %s: %s", self.connection_id, e)


@router.websocket(WEBSOCKET_PATH)
async def websocket_endpoint(
    websocket: WebSocket,
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
) -> None:
    """WebSocket endpoint for metadata and slice requests.

    Message format (JSON text frames, lowerCamelCase fields):
        {"type": "metadata_request"}
        {"type": "slice_request", "screenWidth": ..., "scrollTop": ...}

    Server -> client message types:
        - metadata_response: grid bounds
        - slice_response: window, column letters and cells
        - error: invalid json, unknown message type, or bad request
    """
    await ConnectionHandler(websocket, dispatcher).run()
