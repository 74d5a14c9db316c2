"""Unit tests for gridslice configuration."""

import logging
import threading

import pydantic
import pytest

from gridslice.config import (
    LOG_FORMAT_ENV,
    LOG_LEVEL_ENV,
    MAX_MESSAGE_SIZE,
    GridBounds,
    GridSliceConfig,
    LoggingConfig,
    ServerConfig,
    get_config,
    load_config,
    reset_config,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_grid_bounds(self):
        """The grid is ten million rows by one thousand columns."""
        bounds = GridSliceConfig().bounds
        assert (bounds.max_rows, bounds.max_cols) == (10_000_000, 1_000)

    def test_slice_limits(self):
        """Slices are capped at 1000 rows and 200 columns."""
        limits = GridSliceConfig().limits
        assert (limits.max_row_count, limits.max_col_count) == (1_000, 200)

    def test_server(self):
        """The server listens on loopback port 4001 at /ws."""
        server = ServerConfig()
        assert server.host == "127.0.0.1"
        assert server.port == 4001
        assert server.path == "/ws"
        assert server.max_message_size == MAX_MESSAGE_SIZE == 16 * 1024 * 1024

    def test_logging(self):
        """Logging defaults to info level text output."""
        config = LoggingConfig()
        assert config.level == "info"
        assert config.format == "text"
        assert config.level_number == logging.INFO

    def test_bounds_are_frozen(self):
        """Grid bounds cannot be mutated after construction."""
        bounds = GridBounds()
        with pytest.raises(pydantic.ValidationError):
            bounds.max_rows = 5


class TestLoadConfig:
    """Tests for load_config environment overrides."""

    def test_empty_environment(self):
        """Without overrides the defaults apply."""
        assert load_config({}) == GridSliceConfig()

    def test_level_override(self):
        """The level variable selects the root log level."""
        config = load_config({LOG_LEVEL_ENV: "DEBUG"})
        assert config.logging.level == "debug"
        assert config.logging.level_number == logging.DEBUG

    def test_format_override(self):
        """The format variable selects JSON output."""
        config = load_config({LOG_FORMAT_ENV: " json "})
        assert config.logging.format == "json"

    def test_invalid_level_falls_back(self, caplog):
        """An unknown level is ignored with a warning."""
        with caplog.at_level(logging.WARNING, logger="gridslice.config"):
            config = load_config({LOG_LEVEL_ENV: "chatty", LOG_FORMAT_ENV: "json"})

        assert config.logging.level == "info"
        assert config.logging.format == "json"
        assert LOG_LEVEL_ENV in caplog.text

    def test_blank_value_ignored(self):
        """Blank values are treated as unset."""
        assert load_config({LOG_LEVEL_ENV: "  "}).logging.level == "info"

    def test_reads_os_environ(self, monkeypatch):
        """With no mapping given the process environment is used."""
        monkeypatch.setenv(LOG_LEVEL_ENV, "warning")
        assert load_config().logging.level == "warning"


class TestSingleton:
    """Tests for get_config and reset_config."""

    def test_same_instance(self):
        """Repeated calls return the same object."""
        assert get_config() is get_config()

    def test_reset_reloads(self, monkeypatch):
        """Reset picks up a changed environment."""
        first = get_config()
        monkeypatch.setenv(LOG_LEVEL_ENV, "error")
        reset_config()

        second = get_config()
        assert second is not first
        assert second.logging.level == "error"

    def test_thread_safe(self):
        """Concurrent first calls share one instance."""
        results = []

        def load():
            results.append(get_config())

        threads = [threading.Thread(target=load) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(config is results[0] for config in results)
