"""Shared dependencies for API endpoints.

Provides the process-wide message dispatcher. The dispatcher and its slice
engine are stateless, so a single instance is shared by every connection.
"""

from __future__ import annotations

import threading

from gridslice.config import get_config
from gridslice.dispatch import MessageDispatcher
from gridslice.engine import SliceEngine

_dispatcher: MessageDispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> MessageDispatcher:
    """Get the shared dispatcher, built from the process configuration.

    Returns:
        MessageDispatcher backed by a SliceEngine with the configured
        grid bounds and safety caps.
    """
    global _dispatcher
    if _dispatcher is None:
        with _dispatcher_lock:
            if _dispatcher is None:
                config = get_config()
                engine = SliceEngine(bounds=config.bounds, limits=config.limits)
                _dispatcher = MessageDispatcher(engine)
    return _dispatcher


def reset_dispatcher() -> None:
    """Reset the shared dispatcher (for testing)."""
    global _dispatcher
    with _dispatcher_lock:
        _dispatcher = None
