"""Format detection, parser dispatch and post-processing."""

from __future__ import annotations

import logging
import time

from gameloc.core.constants import SUPPORTED_FORMATS, FormatInfo, GameFormat
from gameloc.core.detect import detect_format
from gameloc.core.entries import ColumnMapping, ExtractedEntry, ParseResult, ParseStats
from gameloc.core.errors import UnsupportedFormatError
from gameloc.parsers.base import FormatParser
from gameloc.parsers.json_parser import JsonParser
from gameloc.parsers.renpy import RenpyParser
from gameloc.parsers.tabular import TabularParser

logger = logging.getLogger(__name__)


def default_registry() -> dict[GameFormat, FormatParser]:
    """Build the standard format → parser table.

    RPG Maker data is JSON, so both formats share the JSON walker.
    XML is a recognised format with no parser.
    """
    json_parser = JsonParser()
    return {
        GameFormat.JSON: json_parser,
        GameFormat.RPGMAKER: json_parser,
        GameFormat.CSV: TabularParser(GameFormat.CSV),
        GameFormat.TSV: TabularParser(GameFormat.TSV),
        GameFormat.RENPY: RenpyParser(),
    }


def _coerce_format(fmt: GameFormat | str) -> GameFormat:
    try:
        return GameFormat(fmt)
    except ValueError:
        raise UnsupportedFormatError(str(fmt)) from None


def filter_empty(entries: list[ExtractedEntry]) -> list[ExtractedEntry]:
    """Drop entries whose text is empty after trimming."""
    return [e for e in entries if e.original_text and e.original_text.strip()]


def deduplicate(entries: list[ExtractedEntry]) -> list[ExtractedEntry]:
    """Keep the first entry for each case-insensitive, trimmed text."""
    seen: set[str] = set()
    result: list[ExtractedEntry] = []
    for entry in entries:
        key = entry.normalized_text
        if key in seen:
            continue
        seen.add(key)
        result.append(entry)
    return result


class ParserManager:
    """Dispatches files to parsers by format.

    Holds nothing but its registry, and every registered parser is
    stateless, so one instance can be shared freely.
    """

    def __init__(self, registry: dict[GameFormat, FormatParser] | None = None) -> None:
        self._registry = registry if registry is not None else default_registry()

    def get_parser(self, fmt: GameFormat | str) -> FormatParser:
        """Return the parser registered for *fmt*.

        Raises:
            UnsupportedFormatError: if nothing is registered for *fmt*.
        """
        resolved = _coerce_format(fmt)
        parser = self._registry.get(resolved)
        if parser is None:
            raise UnsupportedFormatError(resolved.value)
        return parser

    def get_tabular_parser(self, fmt: GameFormat | str) -> TabularParser:
        parser = self.get_parser(fmt)
        if not isinstance(parser, TabularParser):
            raise UnsupportedFormatError(f"{GameFormat(fmt).value} (not a tabular format)")
        return parser

    def detect_format(self, filename: str, content: str) -> GameFormat:
        return detect_format(filename, content)

    def parse(
        self,
        content: str,
        filename: str,
        fmt: GameFormat | str | None = None,
        mapping: list[ColumnMapping] | None = None,
    ) -> ParseResult:
        """Parse *content* and return de-duplicated entries with statistics.

        With a *mapping*, entries are returned one per row, without
        filtering or de-duplication.

        Args:
            content: Decoded file text.
            filename: Original file name, used for detection and recorded
                on every entry.
            fmt: Explicit format, skipping detection.
            mapping: Confirmed column mapping, tabular formats only.

        Raises:
            UnsupportedFormatError: no parser for the requested/detected format.
            ParseError: content is malformed for that format.
            ColumnMappingError: *mapping* has no originalText column.
        """
        started = time.perf_counter()
        resolved = _coerce_format(fmt) if fmt is not None else self.detect_format(filename, content)
        parser = self.get_parser(resolved)

        if mapping is not None:
            entries = self.get_tabular_parser(resolved).parse_with_mapping(content, filename, mapping)
        elif isinstance(parser, JsonParser):
            entries = parser.parse(content, filename, resolved)
        else:
            entries = parser.parse(content, filename)

        extracted = len(entries)
        if mapping is None:
            # Mapped imports keep one entry per row
            entries = deduplicate(filter_empty(entries))
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.debug(
            "Parsed %s as %s: %d strings, %d kept after de-duplication (%.1f ms)",
            filename, resolved.value, extracted, len(entries), elapsed_ms,
        )
        return ParseResult(
            entries=entries,
            format=resolved,
            stats=ParseStats(
                total_entries=len(entries),
                file_size_bytes=len(content.encode("utf-8")),
                parse_time_ms=elapsed_ms,
            ),
        )

    def export(
        self,
        entries: list[ExtractedEntry],
        fmt: GameFormat | str,
        original_content: str | None = None,
    ) -> str:
        """Render *entries* in *fmt*; Ren'Py also needs *original_content*.

        Raises:
            UnsupportedFormatError: no parser for *fmt*.
            ValueError: Ren'Py export without the original script.
        """
        return self.get_parser(fmt).export(entries, original_content)

    def get_supported_formats(self) -> list[FormatInfo]:
        return [info for info in SUPPORTED_FORMATS if info.format in self._registry]
