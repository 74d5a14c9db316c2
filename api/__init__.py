"""FastAPI application serving the gridslice WebSocket endpoint.

Usage:
    # Development server
    uvicorn api.main:app --port 4001 --ws websockets --ws-max-size 16777216

    # Or via the CLI, which applies the fixed address and limits
    gridslice serve
"""

from .main import app

__all__ = ["app"]
