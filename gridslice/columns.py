"""Spreadsheet-style column labels.

Columns are named with a bijective base-26 numbering: ``A``..``Z`` for the
first 26 columns, then ``AA``..``AZ``, ``BA``.. and so on. Unlike positional
base-26 there is no zero digit, so after each division the running index is
decremented by one before the next letter is taken.
"""

from __future__ import annotations

import string

ALPHABET = string.ascii_uppercase
BASE = len(ALPHABET)


def column_index_to_letters(index: int) -> str:
    """Return the label for a 0-based column index.

    Args:
        index: Column index, ``0`` for the first column.

    Returns:
        Label such as ``"A"``, ``"Z"``, ``"AA"`` or ``"AAA"``.

    Raises:
        ValueError: If ``index`` is negative.
    """
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")

    letters: list[str] = []
    while True:
        index, remainder = divmod(index, BASE)
        letters.append(ALPHABET[remainder])
        if index == 0:
            break
        index -= 1
    return "".join(reversed(letters))


def letters_to_column_index(label: str) -> int:
    """Return the 0-based column index for a label.

    Inverse of :func:`column_index_to_letters`. Lowercase input is accepted.

    Raises:
        ValueError: If ``label`` is empty or contains non A-Z characters.
    """
    if not label:
        raise ValueError("Column label must not be empty")

    index = 0
    for char in label.upper():
        position = ALPHABET.find(char)
        if position < 0:
            raise ValueError(f"Invalid column label: {label!r}")
        index = index * BASE + position + 1
    return index - 1


def column_letters(start: int, count: int) -> list[str]:
    """Labels for ``count`` consecutive columns starting at ``start``."""
    return [column_index_to_letters(index) for index in range(start, start + count)]
