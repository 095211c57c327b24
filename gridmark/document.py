"""Grid document: the grid, its serialization metadata, and edit operations.

A ``GridDocument`` is what a front end holds on to. It parses the initial
text, applies structural edits and cell writes to its ``Grid``, and after
every completed mutation calls ``on_change`` once with the freshly
serialized text.

``on_change`` must not call back into a mutating method of the same
document; operations are not re-entrant.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Union

from .codec import DelimitedTextCodec, ParseDiagnostic, SerializationMetadata
from .config import GridConfig
from .errors import ConfigurationError
from .grid import Grid
from .navigation import (
    CellAddress,
    CursorPlacement,
    Direction,
    NavigationTarget,
    SelectionState,
    classify_cursor_position,
    resolve_horizontal_target,
    resolve_vertical_target,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class GridDocument:
    """Editable grid kept in sync with its delimited-text form."""

    def __init__(self, source_text: str = "",
                 config: Union[GridConfig, Mapping[str, Any], None] = None,
                 on_change: Optional[ChangeCallback] = None,
                 codec: Optional[DelimitedTextCodec] = None):
        if not isinstance(source_text, str):
            raise ConfigurationError(
                f"source text must be a str, got {type(source_text).__name__}"
            )
        if on_change is not None and not callable(on_change):
            raise ConfigurationError("on_change must be callable or None")
        self.config = GridConfig.coerce(config)
        self.codec = codec or DelimitedTextCodec()
        self.on_change = on_change
        self.grid = Grid()
        self.metadata = SerializationMetadata()
        self.diagnostics: list[ParseDiagnostic] = []
        self._load(source_text)

    def _load(self, text: str):
        result = self.codec.parse(text, self.config)
        # Swap everything in at once so a failure leaves the old state intact
        self.grid, self.metadata, self.diagnostics = (
            Grid(result.rows), result.metadata, list(result.diagnostics)
        )

    def _notify(self):
        if self.on_change is None:
            return
        self.on_change(self.get_text())

    # --- Reading ---

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def rows(self) -> list[list[str]]:
        return self.grid.to_rows()

    def get_cell(self, row: int, col: int) -> str:
        return self.grid.get_cell(row, col)

    def get_text(self) -> str:
        return self.codec.serialize(self.grid.to_rows(), self.metadata)

    # --- Whole-document replacement ---

    def set_text(self, text: str):
        """Replace grid and metadata by parsing text."""
        if not isinstance(text, str):
            raise TypeError(f"text must be a str, got {type(text).__name__}")
        self._load(text)
        self._notify()

    replace_all = set_text

    def clear_all(self, confirmed: bool = True) -> bool:
        """Reset to a single empty cell, as if the empty string was parsed."""
        if not confirmed:
            return False
        self._load("")
        self._notify()
        return True

    # --- Structural edits ---

    def add_row_before(self, row_index: int) -> int:
        index = self.grid.insert_row(row_index)
        self._notify()
        return index

    def add_row_after(self, row_index: int) -> int:
        index = self.grid.insert_row(row_index + 1)
        self._notify()
        return index

    def add_column_before(self, col_index: int) -> int:
        index = self.grid.insert_column(col_index)
        self._notify()
        return index

    def add_column_after(self, col_index: int) -> int:
        index = self.grid.insert_column(col_index + 1)
        self._notify()
        return index

    def delete_row(self, row_index: int, confirmed: bool = True) -> bool:
        """Delete a row unless unconfirmed or it is the last one left."""
        if not confirmed or not self.grid.delete_row(row_index):
            return False
        self._notify()
        return True

    def delete_column(self, col_index: int, confirmed: bool = True) -> bool:
        """Delete a column unless unconfirmed or it is the last one left."""
        if not confirmed or not self.grid.delete_column(col_index):
            return False
        self._notify()
        return True

    def set_cell(self, row: int, col: int, value: str):
        self.grid.set_cell(row, col, value)
        self._notify()

    def insert_row_on_enter(self, row: int, col: int, shift_held: bool = False) -> CellAddress:
        """Insert a row below (above with the modifier) and return the cell to focus."""
        self.grid.get_cell(row, col)
        new_row = self.add_row_before(row) if shift_held else self.add_row_after(row)
        return CellAddress(new_row, col)

    # --- Navigation queries ---

    def resolve_vertical_target(self, row: int, col: int,
                                direction: Direction) -> NavigationTarget:
        return resolve_vertical_target(self.grid, row, col, direction)

    def resolve_horizontal_target(self, row: int, col: int, direction: Direction,
                                  placement: CursorPlacement) -> Optional[NavigationTarget]:
        return resolve_horizontal_target(self.grid, row, col, direction, placement)

    @staticmethod
    def classify_cursor_position(text: str, selection: SelectionState) -> CursorPlacement:
        return classify_cursor_position(text, selection)


def initialize(source_text: str = "",
               config: Union[GridConfig, Mapping[str, Any], None] = None,
               on_change: Optional[ChangeCallback] = None,
               codec: Optional[DelimitedTextCodec] = None) -> GridDocument:
    """Create a document from text.

    Raises:
        ConfigurationError: if config is malformed; nothing is constructed.
    """
    document = GridDocument(source_text, config, on_change=on_change, codec=codec)
    if document.diagnostics:
        logger.info("Parsed with %d diagnostic(s)", len(document.diagnostics))
    return document
