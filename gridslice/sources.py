"""Cell sources for slice responses.

The engine decides *which* cells are visible; a cell source decides *what*
each visible cell contains. The only source shipped today synthesizes a
placeholder label from the cell's coordinates. A real backing store (a file
index, a database) plugs in by implementing :class:`CellSource`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gridslice.engine import SliceWindow


@runtime_checkable
class CellSource(Protocol):
    """Produces the text of every cell in a slice window."""

    def fetch_rows(self, window: SliceWindow, col_letters: Sequence[str]) -> list[list[str]]:
        """Return ``window.row_count`` rows of ``window.col_count`` cells each.

        Args:
            window: The clamped window to fill.
            col_letters: Labels of the window's columns, in order.
        """
        ...


class PlaceholderCellSource:
    """Synthesizes ``"R{row}C {column}"`` labels, with 1-based row numbers."""

    template = "R{row}C {column}"

    def label(self, row_index: int, column_label: str) -> str:
        """Label for the cell at a 0-based row index and a column label."""
        return self.template.format(row=row_index + 1, column=column_label)

    def fetch_rows(self, window: SliceWindow, col_letters: Sequence[str]) -> list[list[str]]:
        rows: list[list[str]] = []
        for row_index in range(window.start_row, window.start_row + window.row_count):
            rows.append([self.label(row_index, letters) for letters in col_letters])
        return rows
