"""Text rendering of a grid for the terminal editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .constants import GridConstants

# Control characters are shown as single visible glyphs so that caret
# offsets map one to one onto screen columns.
_DISPLAY_TRANSLATION = str.maketrans({"\n": "↵", "\r": "␍", "\t": "→"})

HEADER_LINES = 2


@dataclass
class CellCursor:
    """Focused cell and the caret offset inside its text."""
    row: int = 0
    col: int = 0
    caret: int = 0


def display_text(text: str) -> str:
    return text.translate(_DISPLAY_TRANSLATION)


def column_label(index: int) -> str:
    """Spreadsheet-style column label: 0 -> A, 25 -> Z, 26 -> AA."""
    label = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        label = chr(ord('A') + rem) + label
    return label


class GridView:
    """Lays out a window of the grid as fixed-width text lines.

    After ``render`` the view exposes ``lines``, ``highlights`` (one
    ``(start, end)`` span or None per line, marking the focused cell) and the
    visual cursor position. ``start_row`` and ``start_col`` scroll so that the
    focused cell stays visible.
    """

    def __init__(self):
        self.num_rows = 24
        self.num_columns = 80
        self.start_row = 0
        self.start_col = 0
        self.lines: list[str] = []
        self.highlights: list[Optional[tuple[int, int]]] = []
        self.visual_cursor_x = 0
        self.visual_cursor_y = 0

    @staticmethod
    def column_widths(rows: Sequence[Sequence[str]]) -> list[int]:
        if not rows:
            return []
        widths = []
        for col in range(len(rows[0])):
            longest = max(len(row[col]) for row in rows)
            widths.append(max(GridConstants.MIN_COLUMN_WIDTH,
                              min(longest + 1, GridConstants.MAX_COLUMN_WIDTH)))
        return widths

    def _gutter_width(self, height: int) -> int:
        return len(str(height)) + 1

    def _scroll_rows(self, cursor: CellCursor, height: int):
        visible = max(1, self.num_rows - HEADER_LINES)
        if cursor.row < self.start_row:
            self.start_row = cursor.row
        elif cursor.row >= self.start_row + visible:
            self.start_row = cursor.row - visible + 1
        self.start_row = max(0, min(self.start_row, max(0, height - 1)))

    def _visible_columns(self, widths: list[int], gutter: int) -> list[int]:
        sep = len(GridConstants.COLUMN_SEPARATOR)
        used = gutter
        cols = []
        for col in range(self.start_col, len(widths)):
            needed = sep + widths[col]
            if cols and used + needed > self.num_columns:
                break
            cols.append(col)
            used += needed
        return cols

    def _scroll_columns(self, cursor: CellCursor, widths: list[int], gutter: int) -> list[int]:
        if cursor.col < self.start_col:
            self.start_col = cursor.col
        self.start_col = max(0, min(self.start_col, len(widths) - 1))
        cols = self._visible_columns(widths, gutter)
        while cursor.col not in cols and self.start_col < cursor.col:
            self.start_col += 1
            cols = self._visible_columns(widths, gutter)
        return cols

    @staticmethod
    def _cell_window(text: str, width: int, caret: Optional[int]) -> tuple[str, int]:
        """Return the visible slice of text and the offset it starts at."""
        offset = 0
        if caret is not None and caret >= width:
            offset = caret - width + 1
        return text[offset:offset + width], offset

    def render(self, rows: Sequence[Sequence[str]], cursor: CellCursor):
        """Render rows into ``lines`` around the cursor."""
        height = len(rows)
        widths = self.column_widths(rows)
        gutter = self._gutter_width(height)
        sep = GridConstants.COLUMN_SEPARATOR
        self._scroll_rows(cursor, height)
        cols = self._scroll_columns(cursor, widths, gutter)

        header = " " * gutter
        rule = GridConstants.HEADER_SEPARATOR_CHAR * gutter
        for col in cols:
            header += " " * len(sep) + column_label(col).center(widths[col])
            rule += GridConstants.HEADER_SEPARATOR_CHAR * (len(sep) + widths[col])
        self.lines = [header[:self.num_columns], rule[:self.num_columns]]
        self.highlights = [None, None]

        visible = max(1, self.num_rows - HEADER_LINES)
        for row in range(self.start_row, min(height, self.start_row + visible)):
            line = str(row + 1).rjust(gutter - 1) + " "
            highlight = None
            for col in cols:
                line += sep
                focused = row == cursor.row and col == cursor.col
                text = display_text(rows[row][col])
                window, offset = self._cell_window(text, widths[col], cursor.caret if focused else None)
                if focused:
                    highlight = (len(line), len(line) + widths[col])
                    self.visual_cursor_x = len(line) + cursor.caret - offset
                    self.visual_cursor_y = HEADER_LINES + row - self.start_row
                line += window.ljust(widths[col])
            self.lines.append(line[:self.num_columns])
            self.highlights.append(highlight)
