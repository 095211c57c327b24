"""Constants and configuration for the grid editor."""

class GridConstants:
    """Central configuration constants for the engine and the terminal editor."""

    # Delimited text
    DEFAULT_DELIMITER = ","
    DEFAULT_QUOTE_CHAR = '"'
    DEFAULT_LINE_BREAK = "\n"
    AUTO_DELIMITER = "auto"
    CANDIDATE_DELIMITERS = (",", ";", "\t", "|")
    DELIMITER_PREVIEW_RECORDS = 10  # Records inspected when guessing the delimiter
    MIN_DETECTED_FIELDS = 2  # Average field count a candidate delimiter must reach

    # Grid display
    MIN_COLUMN_WIDTH = 3
    MAX_COLUMN_WIDTH = 30
    COLUMN_SEPARATOR = " │ "
    HEADER_SEPARATOR_CHAR = "─"

    # Terminal requirements
    MIN_TERMINAL_WIDTH = 20

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Status messages
    TERMINAL_TOO_NARROW_MESSAGE = "Terminal too narrow! Need at least {} columns."
    CURRENT_WIDTH_MESSAGE = "Current width: {} columns."
    DELETE_ROW_WARNING = "Delete this row? (y, n) "
    DELETE_COLUMN_WARNING = "Delete this column? (y, n) "
    DELETE_ALL_WARNING = "Delete all data? (y, n) "
    PARSE_WARNINGS_MESSAGE = "{} parse warning(s), see log"
