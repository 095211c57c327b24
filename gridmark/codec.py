"""Delimited-text codec: CSV-like text to rows of strings and back.

The codec remembers how the source text was written (delimiter, line break,
trailing line break, quote character) so that writing unmodified rows back
reproduces the original text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, Optional, Sequence

from .config import GridConfig
from .constants import GridConstants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerializationMetadata:
    delimiter: str = GridConstants.DEFAULT_DELIMITER
    line_break: str = GridConstants.DEFAULT_LINE_BREAK
    trailing_line_break: bool = False
    quote_char: str = GridConstants.DEFAULT_QUOTE_CHAR


@dataclass(frozen=True)
class ParseDiagnostic:
    """A non-fatal problem found while parsing.

    ``type`` and ``code`` follow the usual CSV parser vocabulary
    ("Delimiter"/"UndetectableDelimiter", "Quotes"/"MissingQuotes",
    "Quotes"/"InvalidQuotes").
    """
    type: str
    code: str
    message: str
    row: Optional[int] = None

    def __str__(self):
        where = f" (row {self.row})" if self.row is not None else ""
        return f"{self.type}/{self.code}: {self.message}{where}"


@dataclass
class ParseResult:
    rows: list[list[str]]
    metadata: SerializationMetadata
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)


def detect_line_break(text: str, quote_char: str = GridConstants.DEFAULT_QUOTE_CHAR) -> str:
    """Return the first line-break sequence used in text ("\\n" if none).

    Line breaks inside quoted fields are skipped. If every line break sits
    inside quotes (an unterminated quote, say) the first one is used.
    """
    first = text.find("\n")
    index = first
    in_quotes = False
    start = 0
    while index != -1:
        if text.count(quote_char, start, index) % 2:
            in_quotes = not in_quotes
        if not in_quotes:
            break
        start = index + 1
        index = text.find("\n", start)
    if index == -1:
        index = first
    if index > 0 and text[index - 1] == "\r":
        return "\r\n"
    return GridConstants.DEFAULT_LINE_BREAK


def _is_blank_record(record: Sequence[str]) -> bool:
    return len(record) == 1 and record[0] == ""


@lru_cache(maxsize=32)
def _field_end_pattern(delimiter: str, line_break: str) -> re.Pattern:
    return re.compile(f"{re.escape(delimiter)}|{re.escape(line_break)}")


class DelimitedTextCodec:
    """Parses delimited text into rows and serializes rows back to text."""

    def parse(self, text: str, config: Optional[GridConfig] = None) -> ParseResult:
        """Parse text into a rectangular list of rows.

        Malformed input never raises: rows are padded to a common width and
        quoting problems are reported as diagnostics.

        Args:
            text: Raw delimited text, possibly empty.
            config: Parsing options; defaults to auto-detection.

        Returns:
            ParseResult with at least one row of at least one cell.
        """
        config = config or GridConfig()
        diagnostics: list[ParseDiagnostic] = []

        line_break = detect_line_break(text, config.quote_char)
        trailing = text.endswith(line_break)
        body = text[: -len(line_break)] if trailing else text

        if config.auto_detect:
            delimiter = self.guess_delimiter(body, config.quote_char, line_break)
            if delimiter is None:
                delimiter = GridConstants.DEFAULT_DELIMITER
                diagnostics.append(ParseDiagnostic(
                    "Delimiter", "UndetectableDelimiter",
                    f"Unable to auto-detect delimiting character; defaulted to {delimiter!r}",
                ))
        else:
            delimiter = config.delimiter

        records, quote_problems = self._tokenize(body, delimiter, config.quote_char, line_break)
        diagnostics.extend(quote_problems)

        if config.skip_empty_lines:
            records = [r for r in records if not _is_blank_record(r)]
        rows = self._normalize_width(records)

        for diagnostic in diagnostics:
            if diagnostic.code == "UndetectableDelimiter":
                # Expected for single-column data
                logger.debug("%s", diagnostic)
            else:
                logger.warning("%s", diagnostic)

        metadata = SerializationMetadata(
            delimiter=delimiter,
            line_break=line_break,
            trailing_line_break=trailing,
            quote_char=config.quote_char,
        )
        return ParseResult(rows=rows, metadata=metadata, diagnostics=diagnostics)

    def serialize(self, rows: Iterable[Sequence[str]], metadata: SerializationMetadata) -> str:
        """Serialize rows using the delimiter, line break and quoting in metadata."""
        lines = [
            metadata.delimiter.join(self._quote(cell, metadata) for cell in row)
            for row in rows
        ]
        text = metadata.line_break.join(lines)
        if metadata.trailing_line_break:
            text += metadata.line_break
        return text

    def guess_delimiter(self, text: str, quote_char: str, line_break: str) -> Optional[str]:
        """Pick the candidate delimiter with the most consistent field count.

        Only the first few records are inspected. Returns None when no
        candidate splits the preview into at least two fields on average.
        """
        best: Optional[str] = None
        best_key: Optional[tuple[int, float]] = None
        for candidate in GridConstants.CANDIDATE_DELIMITERS:
            if candidate == quote_char:
                continue
            records, _ = self._tokenize(
                text, candidate, quote_char, line_break,
                limit=GridConstants.DELIMITER_PREVIEW_RECORDS,
            )
            counts = [len(r) for r in records if not _is_blank_record(r)]
            if not counts:
                continue
            average = sum(counts) / len(counts)
            if average < GridConstants.MIN_DETECTED_FIELDS:
                continue
            delta = sum(abs(b - a) for a, b in zip(counts, counts[1:]))
            key = (delta, -average)
            if best_key is None or key < best_key:
                best, best_key = candidate, key
        return best

    @staticmethod
    def _quote(cell: str, metadata: SerializationMetadata) -> str:
        quote = metadata.quote_char
        if (metadata.delimiter in cell or quote in cell
                or "\n" in cell or "\r" in cell):
            return quote + cell.replace(quote, quote + quote) + quote
        return cell

    @staticmethod
    def _normalize_width(records: list[list[str]]) -> list[list[str]]:
        if not records:
            return [[""]]
        width = max(len(r) for r in records)
        return [r + [""] * (width - len(r)) for r in records]

    def _tokenize(self, text: str, delimiter: str, quote_char: str, line_break: str,
                  limit: Optional[int] = None) -> tuple[list[list[str]], list[ParseDiagnostic]]:
        records: list[list[str]] = []
        diagnostics: list[ParseDiagnostic] = []
        record: list[str] = []
        n = len(text)
        i = 0
        while True:
            if i < n and text[i] == quote_char:
                value, i = self._read_quoted(
                    text, i + 1, delimiter, quote_char, line_break, len(records), diagnostics
                )
            else:
                value, i = self._read_unquoted(text, i, delimiter, line_break)
            record.append(value)
            if i >= n:
                records.append(record)
                break
            if text.startswith(delimiter, i):
                i += len(delimiter)
                continue
            # Anything else that stops a field is a line break
            i += len(line_break)
            records.append(record)
            record = []
            if limit is not None and len(records) >= limit:
                break
        return records, diagnostics

    @staticmethod
    def _read_unquoted(text: str, start: int, delimiter: str, line_break: str) -> tuple[str, int]:
        # Stops at whichever of delimiter and line break comes first
        match = _field_end_pattern(delimiter, line_break).search(text, start)
        end = match.start() if match else len(text)
        return text[start:end], end

    def _read_quoted(self, text: str, start: int, delimiter: str, quote_char: str,
                     line_break: str, row: int,
                     diagnostics: list[ParseDiagnostic]) -> tuple[str, int]:
        n = len(text)
        chunks = []
        i = start
        while True:
            close = text.find(quote_char, i)
            if close == -1:
                diagnostics.append(ParseDiagnostic(
                    "Quotes", "MissingQuotes", "Quoted field unterminated", row
                ))
                chunks.append(text[i:])
                return "".join(chunks), n
            if text.startswith(quote_char, close + 1):
                chunks.append(text[i:close] + quote_char)
                i = close + 2
                continue
            chunks.append(text[i:close])
            after = close + 1
            if after >= n or text.startswith(delimiter, after) or text.startswith(line_break, after):
                return "".join(chunks), after
            diagnostics.append(ParseDiagnostic(
                "Quotes", "InvalidQuotes", "Trailing quote on quoted field is malformed", row
            ))
            rest, end = self._read_unquoted(text, after, delimiter, line_break)
            chunks.append(rest)
            return "".join(chunks), end


_default_codec = DelimitedTextCodec()


def parse(text: str, config: Optional[GridConfig] = None) -> ParseResult:
    return _default_codec.parse(text, config)


def serialize(rows: Iterable[Sequence[str]], metadata: SerializationMetadata) -> str:
    return _default_codec.serialize(rows, metadata)
