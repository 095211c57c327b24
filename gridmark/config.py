"""Parsing configuration for grid documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .constants import GridConstants
from .errors import ConfigurationError

# Accepted spellings for each option; the camelCase names match what
# browser-side callers pass around.
_KEY_ALIASES = {
    "delimiter": "delimiter",
    "quote_char": "quote_char",
    "quoteChar": "quote_char",
    "skip_empty_lines": "skip_empty_lines",
    "skipEmptyLines": "skip_empty_lines",
}


@dataclass(frozen=True)
class GridConfig:
    """Options controlling how text is parsed into a grid.

    Attributes:
        delimiter: Field separator, or None / "auto" to detect it.
        quote_char: Character used to quote fields.
        skip_empty_lines: Drop blank lines while parsing.
    """

    delimiter: Optional[str] = None
    quote_char: str = GridConstants.DEFAULT_QUOTE_CHAR
    skip_empty_lines: bool = True

    def __post_init__(self):
        if not isinstance(self.quote_char, str) or len(self.quote_char) != 1:
            raise ConfigurationError(
                f"quote_char must be a single character, got {self.quote_char!r}"
            )
        if self.quote_char in "\r\n":
            raise ConfigurationError("quote_char cannot be a line break")
        if not isinstance(self.skip_empty_lines, bool):
            raise ConfigurationError(
                f"skip_empty_lines must be a bool, got {self.skip_empty_lines!r}"
            )
        if self.auto_detect:
            return
        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise ConfigurationError(
                f"delimiter must be a single character or 'auto', got {self.delimiter!r}"
            )
        if self.delimiter in "\r\n":
            raise ConfigurationError("delimiter cannot be a line break")
        if self.delimiter == self.quote_char:
            raise ConfigurationError("delimiter and quote_char must differ")

    @property
    def auto_detect(self) -> bool:
        """True when the delimiter should be guessed from the text."""
        return self.delimiter is None or self.delimiter == GridConstants.AUTO_DELIMITER

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "GridConfig":
        """Build a config from a plain mapping of options.

        Raises:
            ConfigurationError: on unknown keys or invalid values.
        """
        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"config must be a mapping, got {type(options).__name__}")
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = _KEY_ALIASES.get(key)
            if name is None:
                raise ConfigurationError(f"Unknown config option: {key!r}")
            if name in kwargs:
                raise ConfigurationError(f"Config option given twice: {name}")
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, config: "GridConfig | Mapping[str, Any] | None") -> "GridConfig":
        if isinstance(config, GridConfig):
            return config
        return cls.from_mapping(config)
