"""Exceptions raised by the parsing core."""

from __future__ import annotations


class GameLocError(Exception):
    """Base class for gameloc errors."""


class UnsupportedFormatError(GameLocError, ValueError):
    """The requested or detected format has no registered parser."""

    def __init__(self, fmt: str) -> None:
        self.format = fmt
        super().__init__(f"Unsupported format: {fmt}")


class ParseError(GameLocError, ValueError):
    """Content is malformed for the chosen format."""

    def __init__(self, filename: str, cause: str | BaseException) -> None:
        self.filename = filename
        self.cause = cause
        super().__init__(f"Failed to parse {filename or '<input>'}: {cause}")


class ColumnMappingError(GameLocError, ValueError):
    """A column mapping cannot be used for import (no source-text column)."""
