"""Tests for cursor navigation between cells."""

import pytest

from gridmark import initialize
from gridmark.errors import CellOutOfRangeError
from gridmark.grid import Grid
from gridmark.navigation import (
    CellAddress,
    CursorPlacement,
    Direction,
    NavigationTarget,
    SelectionState,
    classify_cursor_position,
    resolve_horizontal_target,
    resolve_vertical_target,
)


@pytest.fixture
def grid():
    return Grid([["a", "bb", "ccc"], ["dddd", "", "f"], ["g", "h", "i"]])


def test_classify_start_middle_end():
    assert classify_cursor_position("abc", SelectionState.caret(0)) == CursorPlacement.START
    assert classify_cursor_position("abc", SelectionState.caret(1)) == CursorPlacement.MIDDLE
    assert classify_cursor_position("abc", SelectionState.caret(3)) == CursorPlacement.END


def test_classify_empty_cell_is_start_and_end():
    placement = classify_cursor_position("", SelectionState.caret(0))
    assert CursorPlacement.START in placement
    assert CursorPlacement.END in placement
    assert CursorPlacement.MIDDLE not in placement


def test_classify_selection_is_middle():
    assert classify_cursor_position("abc", SelectionState(0, 3)) == CursorPlacement.MIDDLE
    assert classify_cursor_position("abc", SelectionState(3, 3)) == CursorPlacement.END


def test_classify_clamps_offsets_past_the_end():
    assert classify_cursor_position("ab", SelectionState.caret(10)) == CursorPlacement.END


def test_vertical_moves_to_end_of_target_cell(grid):
    target = resolve_vertical_target(grid, 0, 0, Direction.DOWN)
    assert target == NavigationTarget(CellAddress(1, 0), 4)
    target = resolve_vertical_target(grid, 2, 2, Direction.UP)
    assert target == NavigationTarget(CellAddress(1, 2), 1)


def test_vertical_at_edge_stays_in_place(grid):
    assert resolve_vertical_target(grid, 0, 1, Direction.UP) == NavigationTarget(CellAddress(0, 1), None)
    assert resolve_vertical_target(grid, 2, 1, Direction.DOWN) == NavigationTarget(CellAddress(2, 1), None)


def test_vertical_rejects_horizontal_direction(grid):
    with pytest.raises(ValueError):
        resolve_vertical_target(grid, 0, 0, Direction.LEFT)


def test_horizontal_crosses_only_at_boundary(grid):
    assert resolve_horizontal_target(grid, 0, 1, Direction.LEFT, CursorPlacement.MIDDLE) is None
    assert resolve_horizontal_target(grid, 0, 1, Direction.LEFT, CursorPlacement.END) is None
    assert resolve_horizontal_target(grid, 0, 1, Direction.RIGHT, CursorPlacement.START) is None

    left = resolve_horizontal_target(grid, 0, 1, Direction.LEFT, CursorPlacement.START)
    assert left == NavigationTarget(CellAddress(0, 0), 1)
    right = resolve_horizontal_target(grid, 0, 1, Direction.RIGHT, CursorPlacement.END)
    assert right == NavigationTarget(CellAddress(0, 2), 0)


def test_horizontal_from_empty_cell_goes_both_ways(grid):
    placement = classify_cursor_position("", SelectionState.caret(0))
    assert resolve_horizontal_target(grid, 1, 1, Direction.LEFT, placement).address == CellAddress(1, 0)
    assert resolve_horizontal_target(grid, 1, 1, Direction.RIGHT, placement).address == CellAddress(1, 2)


def test_horizontal_does_not_wrap(grid):
    assert resolve_horizontal_target(grid, 1, 0, Direction.LEFT, CursorPlacement.START) is None
    assert resolve_horizontal_target(grid, 1, 2, Direction.RIGHT, CursorPlacement.END) is None


def test_navigation_rejects_addresses_outside_grid(grid):
    with pytest.raises(CellOutOfRangeError):
        resolve_vertical_target(grid, 5, 0, Direction.UP)
    with pytest.raises(CellOutOfRangeError):
        resolve_horizontal_target(grid, 0, 9, Direction.LEFT, CursorPlacement.START)


def test_document_navigation_queries():
    doc = initialize("ab,cd\nef,gh")
    placement = doc.classify_cursor_position(doc.get_cell(0, 0), SelectionState.caret(2))
    assert placement == CursorPlacement.END
    assert doc.resolve_horizontal_target(0, 0, Direction.RIGHT, placement).address == CellAddress(0, 1)
    assert doc.resolve_vertical_target(0, 0, Direction.DOWN).address == CellAddress(1, 0)
    # Queries are read-only
    assert doc.get_text() == "ab,cd\nef,gh"
