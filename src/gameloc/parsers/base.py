"""Abstract base class for format parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from gameloc.core.constants import GameFormat
from gameloc.core.entries import ExtractedEntry


class FormatParser(ABC):
    """Interface for a stateless, format-specific parser/exporter.

    Implementations must not keep state between calls: a single instance is
    shared by every caller of the owning ParserManager.
    """

    formats: tuple[GameFormat, ...] = ()

    @abstractmethod
    def parse(self, content: str, filename: str) -> list[ExtractedEntry]:
        """Extract translatable entries from decoded file content.

        Raises:
            ParseError: if the content is malformed for this format.
        """
        ...

    @abstractmethod
    def export(
        self,
        entries: list[ExtractedEntry],
        original_content: str | None = None,
    ) -> str:
        """Render translated entries back into this parser's format.

        Args:
            entries: Entries carrying the metadata this parser produced.
            original_content: Source file text, for formats that substitute
                translations in place.
        """
        ...
