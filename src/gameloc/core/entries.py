"""Data classes for extracted game text and format-specific reconstruction data."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from gameloc.core.constants import GameFormat


class TargetField(str, Enum):
    """Semantic entry field a tabular column can be mapped to."""
    SKIP = "skip"
    ORIGINAL_TEXT = "originalText"
    TRANSLATION = "translation"
    CONTEXT = "context"


class TranslationStatus(str, Enum):
    """Workflow state of a stored entry."""
    UNTRANSLATED = "UNTRANSLATED"
    IN_PROGRESS = "IN_PROGRESS"
    TRANSLATED = "TRANSLATED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"


# ── Reconstruction metadata ──
#
# Each parser owns one payload type. The ``format`` tag is what export
# dispatch and (de)serialization key on; payload shapes are never sniffed.


@dataclass(frozen=True)
class JsonMetadata:
    """Location of a string inside a JSON tree, e.g. ``dialogue[2].text``."""

    path: str
    format: GameFormat = GameFormat.JSON

    def to_dict(self) -> dict:
        return {"format": self.format.value, "path": self.path}


@dataclass(frozen=True)
class TabularMetadata:
    """The raw (trimmed) record a tabular entry came from."""

    record: dict[str, str]
    row: int  # 1-based data row, header excluded
    format: GameFormat = GameFormat.CSV

    def to_dict(self) -> dict:
        return {"format": self.format.value, "record": dict(self.record), "row": self.row}


@dataclass(frozen=True)
class ScriptMetadata:
    """Position of a quoted string in a Ren'Py script."""

    line_number: int
    kind: str  # dialogue | narration | menu | screen
    speaker: str | None = None
    label: str | None = None
    format: GameFormat = GameFormat.RENPY

    def to_dict(self) -> dict:
        return {
            "format": self.format.value,
            "line_number": self.line_number,
            "kind": self.kind,
            "speaker": self.speaker,
            "label": self.label,
        }


EntryMetadata = Union[JsonMetadata, TabularMetadata, ScriptMetadata]


def metadata_from_dict(data: dict | None) -> EntryMetadata | None:
    """Rebuild a metadata payload from its serialized, format-tagged form."""
    if not data:
        return None
    fmt = GameFormat(data["format"])
    if fmt in (GameFormat.JSON, GameFormat.RPGMAKER):
        return JsonMetadata(path=data["path"], format=fmt)
    if fmt in (GameFormat.CSV, GameFormat.TSV):
        return TabularMetadata(record=dict(data["record"]), row=int(data["row"]), format=fmt)
    if fmt == GameFormat.RENPY:
        return ScriptMetadata(
            line_number=int(data["line_number"]),
            kind=data["kind"],
            speaker=data.get("speaker"),
            label=data.get("label"),
        )
    raise ValueError(f"No metadata type for format {fmt.value!r}")


@dataclass
class ExtractedEntry:
    """One translatable unit found in a source file.

    ``translation`` is only set when the source already carries one (a
    mapped tabular column) or after the entry has been translated.
    """

    original_text: str
    source_file: str = ""
    context: str | None = None
    line_number: int | None = None  # 1-based
    metadata: EntryMetadata | None = None
    translation: str | None = None

    @property
    def normalized_text(self) -> str:
        """Key used for de-duplication: case-folded, trimmed."""
        return self.original_text.lower().strip()

    def to_dict(self) -> dict:
        return {
            "original_text": self.original_text,
            "translation": self.translation,
            "context": self.context,
            "line_number": self.line_number,
            "source_file": self.source_file,
            "metadata": self.metadata.to_dict() if self.metadata is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ExtractedEntry:
        return cls(
            original_text=data["original_text"],
            source_file=data.get("source_file") or "",
            context=data.get("context"),
            line_number=data.get("line_number"),
            metadata=metadata_from_dict(data.get("metadata")),
            translation=data.get("translation"),
        )


@dataclass(frozen=True)
class ColumnMapping:
    """Rule converting one tabular column into an entry field."""

    file_column: str
    target_field: TargetField = TargetField.SKIP
    prefix: str = ""

    @classmethod
    def parse(cls, spec: str) -> ColumnMapping:
        """Parse ``COLUMN=field[:prefix]`` (CLI syntax).

        ``field`` accepts the enum value or name, case-insensitive
        (``original``/``originalText``/``ORIGINAL_TEXT``).
        """
        column, sep, rest = spec.partition("=")
        if not sep or not column.strip():
            raise ValueError(f"Invalid column mapping {spec!r}, expected COLUMN=field[:prefix]")
        field_name, _, prefix = rest.partition(":")
        key = field_name.strip().lower().replace("_", "")
        aliases = {
            "skip": TargetField.SKIP,
            "original": TargetField.ORIGINAL_TEXT,
            "originaltext": TargetField.ORIGINAL_TEXT,
            "source": TargetField.ORIGINAL_TEXT,
            "translation": TargetField.TRANSLATION,
            "target": TargetField.TRANSLATION,
            "context": TargetField.CONTEXT,
        }
        if key not in aliases:
            raise ValueError(f"Unknown target field {field_name!r} in mapping {spec!r}")
        return cls(file_column=column.strip(), target_field=aliases[key], prefix=prefix)


@dataclass
class ParseStats:
    total_entries: int = 0
    file_size_bytes: int = 0
    parse_time_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_entries": self.total_entries,
            "file_size_bytes": self.file_size_bytes,
            "parse_time_ms": self.parse_time_ms,
        }


@dataclass
class ParseResult:
    """Entries extracted from one file plus the format they were parsed as."""

    entries: list[ExtractedEntry]
    format: GameFormat
    stats: ParseStats = field(default_factory=ParseStats)
