"""gridslice - viewport-driven slices of a huge virtual grid over WebSocket.

A client reports its viewport (screen size, scroll offsets, cell sizing) and
the server replies with the visible window of the grid, plus a buffer margin,
and the text of every cell in it.
"""

from gridslice.columns import column_index_to_letters, letters_to_column_index
from gridslice.config import GridBounds, GridSliceConfig, SliceLimits, get_config
from gridslice.dispatch import MessageDispatcher
from gridslice.engine import SliceEngine, SliceResult, SliceWindow, Viewport

__version__ = "0.1.0"

__all__ = [
    "GridBounds",
    "GridSliceConfig",
    "MessageDispatcher",
    "SliceEngine",
    "SliceLimits",
    "SliceResult",
    "SliceWindow",
    "Viewport",
    "column_index_to_letters",
    "get_config",
    "letters_to_column_index",
]
