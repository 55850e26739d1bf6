"""Guess the meaning of spreadsheet columns from their header names.

Rules are checked in order, case-insensitive, first match wins; headers
matching nothing are skipped. The patterns follow the English-named
exports most translation sheets use (``Original``, ``text_en``,
``string_vi``, ``Speaker`` ...).
"""

from __future__ import annotations

import re

from gameloc.core.constants import CHARACTER_PREFIX
from gameloc.core.entries import ColumnMapping, TargetField
from gameloc.core.errors import ColumnMappingError

# (pattern, field, prefix). Specific source/target names and the context
# names come before the bare "text" rule, so "text_vi" and "target_text"
# reach TRANSLATION and "Context" is not source text.
_RULES: list[tuple[re.Pattern[str], TargetField, str]] = [
    (re.compile(r"original|source|text_en|string_en|string_?1"), TargetField.ORIGINAL_TEXT, ""),
    (re.compile(r"translation|target|text_vi|string_vi|string_?2"), TargetField.TRANSLATION, ""),
    (re.compile(r"context|type|category"), TargetField.CONTEXT, ""),
    (re.compile(r"text"), TargetField.ORIGINAL_TEXT, ""),
    (re.compile(r"character|speaker|char"), TargetField.CONTEXT, CHARACTER_PREFIX),
    (re.compile(r"^(id|line|num|game|index)"), TargetField.SKIP, ""),
]


def classify_column(name: str) -> ColumnMapping:
    """Map a single header name to an entry field."""
    lowered = name.strip().lower()
    for pattern, target, prefix in _RULES:
        if pattern.search(lowered):
            return ColumnMapping(file_column=name, target_field=target, prefix=prefix)
    return ColumnMapping(file_column=name, target_field=TargetField.SKIP)


def auto_detect_mapping(columns: list[str]) -> list[ColumnMapping]:
    """Suggest a mapping for every column, in header order."""
    return [classify_column(column) for column in columns]


def validate_mapping(mapping: list[ColumnMapping]) -> None:
    """Reject mappings that cannot produce source text.

    Raises:
        ColumnMappingError: if no column maps to ``originalText``.
    """
    if not any(m.target_field == TargetField.ORIGINAL_TEXT for m in mapping):
        raise ColumnMappingError(
            "Column mapping has no originalText column; map the source-text column before importing"
        )
