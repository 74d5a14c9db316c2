"""gridslice configuration.

Grid bounds, safety caps and the listen address are fixed for the process
lifetime. The only runtime override is logging verbosity, read from the
environment at startup:

    GRIDSLICE_LOG         Log level name (debug, info, warning, error). Default: info.
    GRIDSLICE_LOG_FORMAT  "text" or "json". Default: text.

Usage:
    from gridslice.config import get_config

    config = get_config()
    print(config.bounds.max_rows)
    print(config.server.port)
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "GRIDSLICE_LOG"
LOG_FORMAT_ENV = "GRIDSLICE_LOG_FORMAT"

DEFAULT_MAX_ROWS = 10_000_000
DEFAULT_MAX_COLS = 1_000
DEFAULT_MAX_ROW_COUNT = 1_000
DEFAULT_MAX_COL_COUNT = 200
MAX_MESSAGE_SIZE = 16 * 1024 * 1024  # 16 MiB, large slices run to a few MiB of JSON
WEBSOCKET_HOST = "127.0.0.1"
WEBSOCKET_PORT = 4001
WEBSOCKET_PATH = "/ws"


class GridBounds(BaseModel):
    """Declared size of the conceptual grid.

    Attributes:
        max_rows: Number of rows in the grid.
        max_cols: Number of columns in the grid.
    """

    model_config = ConfigDict(frozen=True)

    max_rows: int = Field(default=DEFAULT_MAX_ROWS, ge=0)
    max_cols: int = Field(default=DEFAULT_MAX_COLS, ge=0)


class SliceLimits(BaseModel):
    """Hard caps on a single slice, independent of client-supplied values.

    Attributes:
        max_row_count: Largest number of rows returned in one slice.
        max_col_count: Largest number of columns returned in one slice.
    """

    model_config = ConfigDict(frozen=True)

    max_row_count: int = Field(default=DEFAULT_MAX_ROW_COUNT, ge=0)
    max_col_count: int = Field(default=DEFAULT_MAX_COL_COUNT, ge=0)


class ServerConfig(BaseModel):
    """WebSocket server configuration.

    Attributes:
        host: Listen address.
        port: Listen port.
        path: Route of the WebSocket endpoint.
        max_message_size: Largest accepted WebSocket message in bytes.
    """

    model_config = ConfigDict(frozen=True)

    host: str = WEBSOCKET_HOST
    port: int = Field(default=WEBSOCKET_PORT, ge=1, le=65535)
    path: str = WEBSOCKET_PATH
    max_message_size: int = Field(default=MAX_MESSAGE_SIZE, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Root log level name.
        format: "text" for human-readable lines, "json" for structured output.
    """

    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["text", "json"] = "text"

    @field_validator("level", "format", mode="before")
    @classmethod
    def _normalize(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def level_number(self) -> int:
        """Numeric logging level for the configured level name."""
        return logging.getLevelName(self.level.upper())  # type: ignore[no-any-return]


class GridSliceConfig(BaseModel):
    """Top-level configuration schema.

    Attributes:
        bounds: Grid bounds reported by metadata and used for clamping.
        limits: Per-slice safety caps.
        server: WebSocket server settings.
        logging: Logging settings.
    """

    bounds: GridBounds = Field(default_factory=GridBounds)
    limits: SliceLimits = Field(default_factory=SliceLimits)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Module-level singleton with thread safety
_config: GridSliceConfig | None = None
_config_lock = threading.Lock()


def _load_logging_config(environ: Mapping[str, str]) -> LoggingConfig:
    """Build the logging section from the environment, falling back per field."""
    values: dict[str, str] = {}
    for key, env_name in (("level", LOG_LEVEL_ENV), ("format", LOG_FORMAT_ENV)):
        raw = environ.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            LoggingConfig.model_validate({key: raw})
        except ValidationError:
            logger.warning("Ignoring invalid %s=%r, using default", env_name, raw)
            continue
        values[key] = raw
    return LoggingConfig.model_validate(values)


def load_config(environ: Mapping[str, str] | None = None) -> GridSliceConfig:
    """Load configuration, applying environment overrides.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        GridSliceConfig with defaults and any valid overrides.
    """
    env = os.environ if environ is None else environ
    return GridSliceConfig(logging=_load_logging_config(env))


def get_config() -> GridSliceConfig:
    """Get singleton configuration instance.

    Uses double-check locking for thread safety.

    Returns:
        Shared GridSliceConfig instance.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_config()
    return _config


def reset_config() -> None:
    """Reset singleton configuration for testing."""
    global _config
    with _config_lock:
        _config = None
