"""JSON tree walker: every non-empty string leaf becomes an entry."""

from __future__ import annotations

import json
import re
from typing import Any

from gameloc.core.constants import MAX_JSON_DEPTH, GameFormat
from gameloc.core.entries import ExtractedEntry, JsonMetadata
from gameloc.core.errors import ParseError
from gameloc.parsers.base import FormatParser

_RE_PATH_SPLIT = re.compile(r"[.\[\]]+")


def split_path(path: str) -> list[str]:
    """Split ``dialogue[2].text`` into ``["dialogue", "2", "text"]``."""
    return [part for part in _RE_PATH_SPLIT.split(path) if part]


def _extract_strings(
    node: Any,
    entries: list[ExtractedEntry],
    path: str,
    filename: str,
    fmt: GameFormat,
    depth: int = 0,
) -> None:
    if depth > MAX_JSON_DEPTH:
        return

    if isinstance(node, str):
        if node.strip():
            entries.append(
                ExtractedEntry(
                    original_text=node,
                    context=path or "text",
                    source_file=filename,
                    metadata=JsonMetadata(path=path, format=fmt),
                )
            )
    elif isinstance(node, list):
        for index, item in enumerate(node):
            _extract_strings(item, entries, f"{path}[{index}]", filename, fmt, depth + 1)
    elif isinstance(node, dict):
        for key, value in node.items():
            child_path = f"{path}.{key}" if path else key
            _extract_strings(value, entries, child_path, filename, fmt, depth + 1)
    # numbers, booleans and null are never translatable


def _set_by_path(root: dict | list, path: str, value: str) -> None:
    """Create intermediate containers along *path* and set the leaf.

    A container is a list when the segment that indexes into it is an
    integer, otherwise a dict.
    """
    parts = split_path(path)
    current: Any = root

    for part, next_part in zip(parts, parts[1:]):
        child = _get_child(current, part)
        if child is None:
            child = [] if next_part.isdigit() else {}
            _put_child(current, part, child)
        current = child

    _put_child(current, parts[-1], value)


def _get_child(container: dict | list, key: str) -> Any:
    if isinstance(container, list):
        index = int(key)
        return container[index] if index < len(container) else None
    return container.get(key)


def _put_child(container: dict | list, key: str, value: Any) -> None:
    if isinstance(container, list):
        index = int(key)
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    else:
        container[key] = value


class JsonParser(FormatParser):
    """Generic JSON game files, including RPG Maker MV/MZ data files."""

    formats = (GameFormat.JSON, GameFormat.RPGMAKER)

    def parse(
        self,
        content: str,
        filename: str,
        fmt: GameFormat = GameFormat.JSON,
    ) -> list[ExtractedEntry]:
        try:
            data = json.loads(content.lstrip("\ufeff"))
        except (json.JSONDecodeError, RecursionError) as e:
            raise ParseError(filename, e) from e

        entries: list[ExtractedEntry] = []
        _extract_strings(data, entries, "", filename, fmt)
        return entries

    def export(
        self,
        entries: list[ExtractedEntry],
        original_content: str | None = None,
    ) -> str:
        """Rebuild a JSON document holding only the translated leaves.

        Untranslated entries are omitted. The root is an array when the
        translated paths index into one (``[0].name``), otherwise an object.
        """
        placed = [
            (entry.metadata.path, entry.translation)
            for entry in entries
            if isinstance(entry.metadata, JsonMetadata)
            and entry.metadata.path
            and entry.translation
        ]
        root: dict | list = [] if placed and placed[0][0].startswith("[") else {}
        for path, translation in placed:
            _set_by_path(root, path, translation)

        return json.dumps(root, indent=2, ensure_ascii=False)


def get_by_path(data: Any, path: str) -> Any:
    """Resolve *path* (as recorded in JsonMetadata) inside parsed JSON."""
    current = data
    for part in split_path(path):
        current = current[int(part)] if isinstance(current, list) else current[part]
    return current
