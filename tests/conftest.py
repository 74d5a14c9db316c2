"""Pytest configuration for gridslice tests."""

import pytest

from api.dependencies import reset_dispatcher
from gridslice.config import LOG_FORMAT_ENV, LOG_LEVEL_ENV, reset_config
from gridslice.engine import Viewport


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Start every test from default configuration and a fresh dispatcher."""
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    monkeypatch.delenv(LOG_FORMAT_ENV, raising=False)
    reset_config()
    reset_dispatcher()
    yield
    reset_config()
    reset_dispatcher()


@pytest.fixture
def viewport_fields():
    """Viewport fields for a 1200x800 screen at the top-left of the grid."""
    return {
        "screen_width": 1200,
        "screen_height": 800,
        "horizontal_buffer": 2,
        "vertical_buffer": 5,
        "default_column_width": 100,
        "default_row_height": 20,
        "scroll_left": 0,
        "scroll_top": 0,
    }


@pytest.fixture
def viewport(viewport_fields):
    """Default viewport."""
    return Viewport(**viewport_fields)


@pytest.fixture
def slice_request():
    """Wire form of the default viewport."""
    return {
        "type": "slice_request",
        "screenWidth": 1200,
        "screenHeight": 800,
        "horizontalBuffer": 2,
        "verticalBuffer": 5,
        "defaultColumnWidth": 100,
        "defaultRowHeight": 20,
        "scrollLeft": 0,
        "scrollTop": 0,
    }
