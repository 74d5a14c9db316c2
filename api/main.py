"""FastAPI application serving grid slices over a single WebSocket route.

The application exposes only ``/ws``; interactive docs and the OpenAPI schema
are disabled because there is no HTTP surface to document.

Usage:
    gridslice serve
    uvicorn api.main:app --host 127.0.0.1 --port 4001 --ws websockets
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.routers.websocket import router as websocket_router
from gridslice import __version__
from gridslice.config import get_config
from gridslice.observability.logging import log_event

logger = logging.getLogger(__name__)

API_TITLE = "gridslice"


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncIterator[None]:
    """Lifecycle event handler for the FastAPI application."""
    config = get_config()
    log_event(
        logger,
        "server.start",
        host=config.server.host,
        port=config.server.port,
        path=config.server.path,
        max_rows=config.bounds.max_rows,
        max_cols=config.bounds.max_cols,
    )

    yield

    log_event(logger, "server.stop")


def create_app() -> FastAPI:
    """Application factory for creating configured FastAPI instances."""
    app_instance = FastAPI(
        title=API_TITLE,
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app_instance.include_router(websocket_router)
    return app_instance


app = create_app()
