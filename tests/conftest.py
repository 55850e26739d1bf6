"""Shared test fixtures for gameloc tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from gameloc.core.entries import ExtractedEntry

SAMPLE_JSON = """{
  "title": "Dungeon Quest",
  "dialogue": [
    {"speaker": "Guard", "text": "Halt! Who goes there?"},
    {"speaker": "Hero", "text": "A friend."}
  ],
  "gold": 100,
  "unlocked": true
}
"""

SAMPLE_CSV = """ID,Context,Original,Translation
1,menu,Start Game,Bắt đầu
2,menu,Options,
3,dialogue,Hello there,
"""

SAMPLE_RENPY = """# The opening scene
define e = Character("Eileen")

label start:
    scene bg room
    "It was a dark and stormy night."
    e "Hello, I'm Eileen."
    e happy "Nice to meet you!"

    menu:
        "Say hi":
            e "Hi!"
        "Leave":
            jump ending

init python:
    config.name = "Not dialogue"

label ending:
    "The end."
"""


def make_entry(
    text: str,
    translation: str | None = None,
    context: str | None = None,
    line_number: int | None = None,
) -> ExtractedEntry:
    """Create an ExtractedEntry without format metadata."""
    return ExtractedEntry(
        original_text=text,
        translation=translation,
        context=context,
        line_number=line_number,
    )


@pytest.fixture
def sample_json() -> str:
    return SAMPLE_JSON


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def sample_renpy() -> str:
    return SAMPLE_RENPY


@pytest.fixture
def write_file(tmp_path: Path):
    """Write UTF-8 content to a file under tmp_path and return its path."""
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def tmp_cache(tmp_path: Path):
    """Create a temporary translation cache."""
    from gameloc.translation.cache import TranslationCache
    cache = TranslationCache(db_path=tmp_path / "test_cache.db")
    yield cache
    cache.close()
