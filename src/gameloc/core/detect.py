"""Classify a file as one of the supported game-text formats."""

from __future__ import annotations

from pathlib import PurePath

from gameloc.core.constants import EXTENSION_FORMATS, GameFormat


def detect_format(filename: str, content: str) -> GameFormat:
    """Detect the format of *content*, using *filename* first.

    Order, first match wins:
      1. known extension (.json/.csv/.tsv/.rpy/.xml), regardless of content
      2. content sniffing: JSON brackets, tab or comma in the first line,
         Ren'Py ``label`` + ``menu:`` keywords
      3. JSON

    Never raises: ambiguous content falls through to JSON and the parser
    reports the real problem.
    """
    suffix = PurePath(filename).suffix.lower()
    if suffix in EXTENSION_FORMATS:
        return EXTENSION_FORMATS[suffix]

    text = content.lstrip("\ufeff")
    stripped = text.strip()
    if stripped.startswith(("{", "[")):
        return GameFormat.JSON

    first_line = text.split("\n", 1)[0]
    if "\t" in first_line:
        return GameFormat.TSV
    if "," in first_line:
        return GameFormat.CSV

    if "label " in text and "menu:" in text:
        return GameFormat.RENPY

    return GameFormat.JSON
