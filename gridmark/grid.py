"""Rectangular grid of string cells."""

from typing import Iterable, Optional, Sequence

from .errors import CellOutOfRangeError


def _clamp(index: int, low: int, high: int) -> int:
    return max(low, min(index, high))


class Grid:
    """An ordered, mutable matrix of string cells.

    The grid is rectangular after every public operation and never smaller
    than one row of one cell. Row and column deletion refuse to go below
    that minimum instead of raising.
    """

    def __init__(self, rows: Optional[Iterable[Sequence[str]]] = None):
        copied = [list(row) for row in rows] if rows is not None else []
        copied = [row for row in copied if row] or [[""]]
        width = max(len(row) for row in copied)
        self._rows: list[list[str]] = [row + [""] * (width - len(row)) for row in copied]

    def __len__(self):
        return len(self._rows)

    def __repr__(self):
        return f"Grid({self._rows!r})"

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return self._rows == other._rows

    @property
    def height(self) -> int:
        return len(self._rows)

    @property
    def width(self) -> int:
        return len(self._rows[0]) if self._rows else 0

    def insert_row(self, index: int) -> int:
        """Insert an empty row at index (clamped); return the index used."""
        index = _clamp(index, 0, self.height)
        width = len(self._rows[0]) if self._rows else 1
        self._rows.insert(index, [""] * width)
        return index

    def delete_row(self, index: int) -> bool:
        """Delete the row at index (clamped).

        Returns:
            False without touching the grid when only one row remains.
        """
        if self.height <= 1:
            return False
        del self._rows[_clamp(index, 0, self.height - 1)]
        return True

    def insert_column(self, index: int) -> int:
        """Insert an empty cell at index (clamped) in every row."""
        index = _clamp(index, 0, self.width)
        for row in self._rows:
            row.insert(index, "")
        return index

    def delete_column(self, index: int) -> bool:
        """Delete the cell at index (clamped) from every row.

        Returns:
            False without touching the grid when only one column remains.
        """
        if self.width <= 1:
            return False
        index = _clamp(index, 0, self.width - 1)
        for row in self._rows:
            del row[index]
        return True

    def _check_address(self, row: int, col: int):
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise CellOutOfRangeError(row, col, self.height, self.width)

    def get_cell(self, row: int, col: int) -> str:
        self._check_address(row, col)
        return self._rows[row][col]

    def set_cell(self, row: int, col: int, value: str):
        self._check_address(row, col)
        if not isinstance(value, str):
            raise TypeError(f"Cell values must be str, got {type(value).__name__}")
        self._rows[row][col] = value

    def clear(self):
        """Reset to a single empty cell."""
        self._rows = [[""]]

    def to_rows(self) -> list[list[str]]:
        """Return a snapshot of the cells; later edits do not affect it."""
        return [list(row) for row in self._rows]
