"""Ren'Py ``.rpy`` scripts: dialogue, narration, menu choices and screen text.

Only the contents of double-quoted strings are ever touched. Export re-scans
the original script and substitutes translated strings in place, so labels,
control flow, comments and whitespace come out byte-identical.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from gameloc.core.constants import GameFormat
from gameloc.core.entries import ExtractedEntry, ScriptMetadata
from gameloc.parsers.base import FormatParser

logger = logging.getLogger(__name__)

_STRING = r'"(?P<text>(?:[^"\\]|\\.)*)"'

RE_COMMENT = re.compile(r"^\s*#")
RE_LABEL = re.compile(r"^\s*label\s+(?P<name>[\w.]+)\s*(?:\(.*\))?\s*:")
RE_PYTHON_BLOCK = re.compile(r"^(?P<indent>\s*)(?:init\s+(?:-?\d+\s+)?)?python\b[^:]*:\s*$")
RE_MENU_CHOICE = re.compile(r"^\s*" + _STRING + r"\s*(?:if\s+.+?)?:\s*$")
RE_NARRATION = re.compile(r"^\s*" + _STRING + r"(?:\s+with\s+\S+)?\s*(?:#.*)?$")
RE_SCREEN_TEXT = re.compile(r"^\s*(?:text|textbutton|label|tooltip)\s+" + _STRING)
RE_DIALOGUE = re.compile(
    r"^\s*(?P<speaker>[A-Za-z_]\w*)(?:\s+[A-Za-z_]\w*)*\s+" + _STRING + r"(?P<rest>.*)$"
)
RE_STRING_SPEAKER = re.compile(
    r'^\s*"(?P<speaker>(?:[^"\\]|\\.)+)"\s+' + _STRING + r"(?P<rest>.*)$"
)

# First words that start a statement rather than a line of dialogue
_STATEMENT_KEYWORDS = frozenset({
    "add", "as", "at", "behind", "call", "camera", "default", "define", "elif",
    "else", "for", "frame", "hbox", "hide", "if", "image", "imagebutton",
    "init", "input", "jump", "key", "label", "menu", "new", "nvl", "old",
    "onlayer", "pause", "play", "python", "queue", "return", "scene",
    "screen", "show", "stop", "style", "text", "textbutton", "timer",
    "tooltip", "transform", "translate", "use", "vbox", "voice", "while",
    "window", "with", "zorder",
})


@dataclass
class ScriptString:
    """A quoted string found on one script line."""

    line_number: int  # 1-based
    start: int  # span of the string contents, quotes excluded
    end: int
    raw: str  # contents as written, escapes intact
    kind: str
    speaker: str | None = None
    label: str | None = None

    @property
    def text(self) -> str:
        return unescape(self.raw)


def unescape(raw: str) -> str:
    """Turn ``\\"`` back into ``"``; other escapes are kept as written."""
    return raw.replace('\\"', '"')


def escape(text: str) -> str:
    """Make *text* safe inside a double-quoted Ren'Py string on one line."""
    text = text.replace("\r\n", "\\n").replace("\n", "\\n")
    return re.sub(r'(?<!\\)"', r'\\"', text)


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _match_line(line: str) -> tuple[re.Match[str], str, str | None] | None:
    """Return (match, kind, speaker) for the first translatable string on *line*."""
    m = RE_MENU_CHOICE.match(line)
    if m:
        return m, "menu", None
    m = RE_NARRATION.match(line)
    if m:
        return m, "narration", None
    m = RE_STRING_SPEAKER.match(line)
    if m:
        return m, "dialogue", unescape(m.group("speaker"))
    m = RE_SCREEN_TEXT.match(line)
    if m:
        return m, "screen", None
    m = RE_DIALOGUE.match(line)
    if m and m.group("speaker") not in _STATEMENT_KEYWORDS:
        return m, "dialogue", m.group("speaker")
    return None


def scan_script(content: str) -> Iterator[ScriptString]:
    """Yield every translatable string in *content*, in file order.

    Lines inside ``python:``/``init python:`` blocks and comments are
    skipped.
    """
    label: str | None = None
    python_indent: int | None = None

    for index, line in enumerate(content.split("\n")):
        if not line.strip():
            continue

        if python_indent is not None:
            if _indent_of(line) > python_indent:
                continue
            python_indent = None

        if RE_COMMENT.match(line):
            continue

        block = RE_PYTHON_BLOCK.match(line)
        if block:
            python_indent = len(block.group("indent"))
            continue

        label_match = RE_LABEL.match(line)
        if label_match:
            label = label_match.group("name")
            continue

        found = _match_line(line)
        if found is None:
            continue
        match, kind, speaker = found
        raw = match.group("text")
        if not unescape(raw).strip():
            continue
        start, end = match.span("text")
        yield ScriptString(
            line_number=index + 1,
            start=start,
            end=end,
            raw=raw,
            kind=kind,
            speaker=speaker,
            label=label,
        )


class RenpyParser(FormatParser):
    """Visual-novel scripts for the Ren'Py engine."""

    formats = (GameFormat.RENPY,)

    def parse(self, content: str, filename: str) -> list[ExtractedEntry]:
        entries: list[ExtractedEntry] = []
        for found in scan_script(content):
            entries.append(
                ExtractedEntry(
                    original_text=found.text,
                    context=found.speaker or found.kind,
                    line_number=found.line_number,
                    source_file=filename,
                    metadata=ScriptMetadata(
                        line_number=found.line_number,
                        kind=found.kind,
                        speaker=found.speaker,
                        label=found.label,
                    ),
                )
            )
        return entries

    def export(
        self,
        entries: list[ExtractedEntry],
        original_content: str | None = None,
    ) -> str:
        """Substitute translations into *original_content*.

        A string is replaced by the entry recorded at its line when that
        entry's text still matches, otherwise by any translated entry with
        the same normalized text (repeated lines were de-duplicated on
        import). Strings without a translation are left as they are.

        Raises:
            ValueError: if *original_content* is not given.
        """
        if original_content is None:
            raise ValueError("Ren'Py export needs the original script content")

        by_line: dict[int, tuple[str, str]] = {}
        by_text: dict[str, str] = {}
        for entry in entries:
            if not entry.translation:
                continue
            by_text.setdefault(entry.normalized_text, entry.translation)
            if isinstance(entry.metadata, ScriptMetadata):
                by_line[entry.metadata.line_number] = (entry.normalized_text, entry.translation)

        lines = original_content.split("\n")
        replaced = 0
        for found in scan_script(original_content):
            key = found.text.lower().strip()
            translation = None

            recorded = by_line.get(found.line_number)
            if recorded is not None:
                if recorded[0] == key:
                    translation = recorded[1]
                else:
                    logger.warning(
                        "Line %d no longer matches its entry, matching by text instead",
                        found.line_number,
                    )
            if translation is None:
                translation = by_text.get(key)
            if translation is None:
                continue

            line = lines[found.line_number - 1]
            lines[found.line_number - 1] = line[: found.start] + escape(translation) + line[found.end :]
            replaced += 1

        logger.debug("Substituted %d strings in Ren'Py script", replaced)
        return "\n".join(lines)
