"""Project documents: the entries of one imported file, saved as JSON.

This is the on-disk hand-off between ``scan``, ``translate``, ``terms`` and
``export``. Entry records mirror ExtractedEntry plus a workflow status.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from gameloc.core.constants import GameFormat
from gameloc.core.entries import ExtractedEntry, TranslationStatus

DOCUMENT_VERSION = 1


@dataclass
class EntryRecord:
    """A stored entry with its translation status."""

    entry: ExtractedEntry
    status: TranslationStatus = TranslationStatus.UNTRANSLATED

    def set_translation(self, translation: str) -> None:
        self.entry.translation = translation
        self.status = TranslationStatus.TRANSLATED

    def to_dict(self) -> dict:
        data = self.entry.to_dict()
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> EntryRecord:
        entry = ExtractedEntry.from_dict(data)
        default = TranslationStatus.TRANSLATED if entry.translation else TranslationStatus.UNTRANSLATED
        status = data.get("status")
        return cls(entry=entry, status=TranslationStatus(status) if status else default)


@dataclass
class ProjectDocument:
    """Entries parsed from one source file."""

    source_file: str
    format: GameFormat
    source_path: str | None = None  # needed to re-export Ren'Py scripts
    records: list[EntryRecord] = field(default_factory=list)

    @property
    def entries(self) -> list[ExtractedEntry]:
        return [r.entry for r in self.records]

    def add(self, entry: ExtractedEntry) -> None:
        status = TranslationStatus.TRANSLATED if entry.translation else TranslationStatus.UNTRANSLATED
        self.records.append(EntryRecord(entry=entry, status=status))

    def progress(self) -> dict[str, int]:
        """Number of records per status."""
        counts = {status.value: 0 for status in TranslationStatus}
        for record in self.records:
            counts[record.status.value] += 1
        return counts

    def to_dict(self) -> dict:
        return {
            "version": DOCUMENT_VERSION,
            "source_file": self.source_file,
            "source_path": self.source_path,
            "format": self.format.value,
            "entries": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProjectDocument:
        version = data.get("version", DOCUMENT_VERSION)
        if version != DOCUMENT_VERSION:
            raise ValueError(f"Unsupported project document version: {version}")
        return cls(
            source_file=data["source_file"],
            format=GameFormat(data["format"]),
            source_path=data.get("source_path"),
            records=[EntryRecord.from_dict(e) for e in data.get("entries", [])],
        )


def save_project(document: ProjectDocument, path: str | Path) -> None:
    Path(path).write_text(
        json.dumps(document.to_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


def load_project(path: str | Path) -> ProjectDocument:
    """Read a project document.

    Raises:
        ValueError: if the file is not a valid project document.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise TypeError("expected a JSON object")
        return ProjectDocument.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise ValueError(f"Invalid project document {path}: {e}") from e
