"""Keyboard cursor navigation over logical (row, column) addresses.

Nothing here looks at pixels or widgets: callers pass in the grid, the
current cell, and where the text caret sits inside that cell, and get back
the cell (and caret offset) that should receive focus.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import Optional

from .grid import Grid


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class CursorPlacement(Flag):
    """Where the caret sits inside a cell's text.

    An empty cell is both at its start and its end, so it classifies as
    ``START | END``; test with ``CursorPlacement.START in placement``.
    """
    START = auto()
    MIDDLE = auto()
    END = auto()


@dataclass(frozen=True)
class CellAddress:
    row: int
    col: int


@dataclass(frozen=True)
class NavigationTarget:
    address: CellAddress
    caret: Optional[int] = 0  # Caret offset in the target cell; None leaves it alone


@dataclass(frozen=True)
class SelectionState:
    """Text selection inside a cell, as character offsets.

    ``anchor`` is where the selection started and ``focus`` where the caret
    is now; they are equal for a plain caret.
    """
    anchor: int
    focus: int

    @classmethod
    def caret(cls, offset: int) -> "SelectionState":
        return cls(offset, offset)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus


def classify_cursor_position(text: str, selection: SelectionState) -> CursorPlacement:
    """Classify the caret as being at the start, middle or end of text.

    A selection spanning one or more characters counts as MIDDLE: the
    native editing behaviour collapses it before any cell change.
    """
    if not selection.collapsed:
        return CursorPlacement.MIDDLE
    offset = max(0, min(selection.focus, len(text)))
    placement = CursorPlacement(0)
    if offset == 0:
        placement |= CursorPlacement.START
    if offset == len(text):
        placement |= CursorPlacement.END
    return placement or CursorPlacement.MIDDLE


def resolve_vertical_target(grid: Grid, row: int, col: int,
                            direction: Direction) -> NavigationTarget:
    """Return the cell above or below, with the caret at the end of its text.

    At the first or last row the current cell is returned with caret None,
    meaning the cursor stays where it is.
    """
    if direction not in (Direction.UP, Direction.DOWN):
        raise ValueError(f"Not a vertical direction: {direction}")
    grid.get_cell(row, col)  # raises for an address outside the grid
    target_row = row - 1 if direction is Direction.UP else row + 1
    if not 0 <= target_row < grid.height:
        return NavigationTarget(CellAddress(row, col), None)
    text = grid.get_cell(target_row, col)
    return NavigationTarget(CellAddress(target_row, col), len(text))


def resolve_horizontal_target(grid: Grid, row: int, col: int, direction: Direction,
                              placement: CursorPlacement) -> Optional[NavigationTarget]:
    """Return the neighbouring cell when the caret is at the matching boundary.

    Returns:
        None when the caret should move within the current cell (or when
        there is no neighbouring cell); otherwise the target with the caret
        at the end of the left cell or the start of the right cell.
    """
    grid.get_cell(row, col)  # raises for an address outside the grid
    if direction is Direction.LEFT:
        if CursorPlacement.START not in placement or col <= 0:
            return None
        return NavigationTarget(CellAddress(row, col - 1), len(grid.get_cell(row, col - 1)))
    if direction is Direction.RIGHT:
        if CursorPlacement.END not in placement or col >= grid.width - 1:
            return None
        return NavigationTarget(CellAddress(row, col + 1), 0)
    raise ValueError(f"Not a horizontal direction: {direction}")
