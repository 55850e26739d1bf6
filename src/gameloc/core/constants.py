"""Constants for the supported game-text formats."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class GameFormat(str, Enum):
    """Closed set of game-text file conventions."""
    JSON = "json"
    CSV = "csv"
    TSV = "tsv"
    RENPY = "renpy"
    RPGMAKER = "rpgmaker"  # RPG Maker MV/MZ data is plain JSON
    XML = "xml"  # Reserved: detected, but no parser yet


# Extension → format, checked before any content sniffing
EXTENSION_FORMATS: dict[str, GameFormat] = {
    ".json": GameFormat.JSON,
    ".csv": GameFormat.CSV,
    ".tsv": GameFormat.TSV,
    ".rpy": GameFormat.RENPY,
    ".xml": GameFormat.XML,
}

_EXPORT_EXTENSIONS: dict[GameFormat, str] = {
    GameFormat.JSON: "json",
    GameFormat.RPGMAKER: "json",
    GameFormat.CSV: "csv",
    GameFormat.TSV: "tsv",
    GameFormat.RENPY: "rpy",
}

_CONTENT_TYPES: dict[GameFormat, str] = {
    GameFormat.JSON: "application/json",
    GameFormat.RPGMAKER: "application/json",
    GameFormat.CSV: "text/csv",
    GameFormat.TSV: "text/tab-separated-values",
}

# JSON tree walk stops descending below this depth
MAX_JSON_DEPTH = 10

# Stand-in text for tabular rows whose source cell is blank
EMPTY_PLACEHOLDER = "Empty"

# Prefix suggested for speaker/character columns mapped to context
CHARACTER_PREFIX = "Character: "


@dataclass(frozen=True)
class FormatInfo:
    """User-facing description of a supported format."""

    format: GameFormat
    name: str
    extensions: tuple[str, ...]
    description: str

    def to_dict(self) -> dict:
        return {
            "format": self.format.value,
            "name": self.name,
            "extensions": list(self.extensions),
            "description": self.description,
        }


SUPPORTED_FORMATS: tuple[FormatInfo, ...] = (
    FormatInfo(GameFormat.JSON, "JSON", (".json",), "Generic JSON game files"),
    FormatInfo(GameFormat.CSV, "CSV", (".csv",), "Comma-separated values"),
    FormatInfo(GameFormat.TSV, "TSV", (".tsv",), "Tab-separated values"),
    FormatInfo(GameFormat.RENPY, "Ren'Py", (".rpy",), "Visual Novel script files"),
    FormatInfo(GameFormat.RPGMAKER, "RPG Maker", (".json",), "RPG Maker game data"),
)


def export_extension(fmt: GameFormat | str) -> str:
    """File extension (without dot) used when exporting *fmt*."""
    try:
        return _EXPORT_EXTENSIONS.get(GameFormat(fmt), "txt")
    except ValueError:
        return "txt"


def content_type(fmt: GameFormat | str) -> str:
    """MIME type used when exporting *fmt*."""
    try:
        return _CONTENT_TYPES.get(GameFormat(fmt), "text/plain")
    except ValueError:
        return "text/plain"


def export_filename(project_name: str, fmt: GameFormat | str, timestamp: int) -> str:
    """Download name for an export: ``<project>_<format>_<timestamp>.<ext>``."""
    fmt_name = fmt.value if isinstance(fmt, GameFormat) else str(fmt)
    return f"{project_name}_{fmt_name}_{timestamp}.{export_extension(fmt)}"
