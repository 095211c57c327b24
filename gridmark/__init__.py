"""Gridmark - an editable grid kept in sync with delimited text."""

import logging

from .codec import DelimitedTextCodec, ParseDiagnostic, ParseResult, SerializationMetadata
from .config import GridConfig
from .document import GridDocument, initialize
from .errors import CellOutOfRangeError, ConfigurationError, GridError
from .grid import Grid
from .navigation import (
    CellAddress,
    CursorPlacement,
    Direction,
    NavigationTarget,
    SelectionState,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'CellAddress',
    'CellOutOfRangeError',
    'ConfigurationError',
    'CursorPlacement',
    'DelimitedTextCodec',
    'Direction',
    'Grid',
    'GridConfig',
    'GridDocument',
    'GridError',
    'NavigationTarget',
    'ParseDiagnostic',
    'ParseResult',
    'SelectionState',
    'SerializationMetadata',
    'initialize',
]
