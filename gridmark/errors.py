"""Exception types raised by the grid engine."""


class GridError(Exception):
    """Base class for gridmark errors."""


class ConfigurationError(GridError, ValueError):
    """Raised when a document or editor cannot be set up from its config."""


class CellOutOfRangeError(GridError, IndexError):
    """Raised when a cell address lies outside the grid."""

    def __init__(self, row: int, col: int, height: int, width: int):
        self.row = row
        self.col = col
        self.height = height
        self.width = width
        super().__init__(
            f"Cell ({row}, {col}) is outside the {height}x{width} grid"
        )
