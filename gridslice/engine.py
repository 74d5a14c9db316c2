"""Slice engine: maps a client viewport onto a window of the grid.

Given the client's screen size, scroll offsets and default cell size, the
engine works out which rows and columns are visible, widens that range by a
buffer margin on both ends, and clamps the result to the grid bounds and to
fixed per-slice safety caps. The engine is stateless: one instance can be
shared by every connection.

Usage:
    from gridslice.engine import SliceEngine, Viewport

    engine = SliceEngine()
    result = engine.compute_slice(
        Viewport(
            screen_width=1200,
            screen_height=800,
            horizontal_buffer=2,
            vertical_buffer=5,
            default_column_width=100,
            default_row_height=20,
            scroll_left=0,
            scroll_top=4000,
        )
    )
    print(result.window.start_row, result.window.row_count)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic.alias_generators import to_camel

from gridslice.columns import column_letters
from gridslice.config import GridBounds, SliceLimits
from gridslice.errors import ValidationError, zero_cell_size
from gridslice.sources import CellSource, PlaceholderCellSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewport:
    """The client's visible region, in pixel-like units."""

    screen_width: int
    screen_height: int
    horizontal_buffer: int
    vertical_buffer: int
    default_column_width: int
    default_row_height: int
    scroll_left: int
    scroll_top: int


@dataclass(frozen=True)
class SliceWindow:
    """Rectangular range of the grid, 0-based, clamped to bounds and caps."""

    start_row: int
    row_count: int
    start_col: int
    col_count: int

    @property
    def end_row(self) -> int:
        """Exclusive end row index."""
        return self.start_row + self.row_count

    @property
    def end_col(self) -> int:
        """Exclusive end column index."""
        return self.start_col + self.col_count


@dataclass(frozen=True)
class SliceResult:
    """A window together with its column labels and cell text."""

    window: SliceWindow
    col_letters: list[str] = field(default_factory=list)
    cells_by_row: list[list[str]] = field(default_factory=list)


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def axis_window(
    scroll: int,
    screen: int,
    buffer: int,
    cell_size: int,
    grid_size: int,
    cap: int,
) -> tuple[int, int]:
    """Compute ``(start, count)`` along one axis.

    Args:
        scroll: Scroll offset along the axis.
        screen: Visible extent along the axis.
        buffer: Extra cells added before and after the visible range.
        cell_size: Size of one cell, must be positive.
        grid_size: Number of cells in the grid along the axis.
        cap: Hard upper bound on the returned count.

    Returns:
        Start index and cell count. ``start`` never exceeds ``grid_size``
        and ``start + count`` never exceeds ``grid_size``.
    """
    start = min(scroll // cell_size, grid_size)
    visible = _ceil_div(screen, cell_size)
    requested = visible + 2 * buffer
    remaining = max(0, grid_size - start)
    return start, min(requested, remaining, cap)


class SliceEngine:
    """Computes slice windows and their cell contents.

    Args:
        bounds: Grid size used for clamping and reported by metadata.
        limits: Per-slice safety caps.
        source: Provider of cell text. Defaults to placeholder labels.
    """

    def __init__(
        self,
        bounds: GridBounds | None = None,
        limits: SliceLimits | None = None,
        source: CellSource | None = None,
    ) -> None:
        self.bounds = bounds or GridBounds()
        self.limits = limits or SliceLimits()
        self.source: CellSource = source or PlaceholderCellSource()

    def compute_metadata(self) -> GridBounds:
        """Return the grid bounds. Never fails."""
        return self.bounds

    def compute_window(self, viewport: Viewport) -> SliceWindow:
        """Compute the clamped window for a viewport.

        Raises:
            ValidationError: If the default row height or column width is zero,
                or any field is negative.
        """
        self._validate(viewport)

        start_row, row_count = axis_window(
            viewport.scroll_top,
            viewport.screen_height,
            viewport.vertical_buffer,
            viewport.default_row_height,
            self.bounds.max_rows,
            self.limits.max_row_count,
        )
        start_col, col_count = axis_window(
            viewport.scroll_left,
            viewport.screen_width,
            viewport.horizontal_buffer,
            viewport.default_column_width,
            self.bounds.max_cols,
            self.limits.max_col_count,
        )
        return SliceWindow(
            start_row=start_row,
            row_count=row_count,
            start_col=start_col,
            col_count=col_count,
        )

    def compute_slice(self, viewport: Viewport) -> SliceResult:
        """Compute the window for a viewport and fill in every cell.

        Raises:
            ValidationError: See :meth:`compute_window`.
        """
        window = self.compute_window(viewport)
        letters = column_letters(window.start_col, window.col_count)
        cells = self.source.fetch_rows(window, letters)
        logger.debug(
            "Slice rows %d-%d cols %d-%d",
            window.start_row,
            window.end_row,
            window.start_col,
            window.end_col,
        )
        return SliceResult(window=window, col_letters=letters, cells_by_row=cells)

    @staticmethod
    def _validate(viewport: Viewport) -> None:
        if viewport.default_row_height == 0:
            raise zero_cell_size("defaultRowHeight")
        if viewport.default_column_width == 0:
            raise zero_cell_size("defaultColumnWidth")

        negative = [
            (name, value)
            for name, value in vars(viewport).items()
            if not isinstance(value, int) or isinstance(value, bool) or value < 0
        ]
        if negative:
            names = ", ".join(to_camel(name) for name, _ in negative)
            raise ValidationError(
                f"bad request: non-negative integers required: {names}",
                field_errors=[
                    {
                        "field": to_camel(name),
                        "message": "Input should be a non-negative integer",
                        "kind": "greater_than_equal",
                    }
                    for name, _ in negative
                ],
            )
