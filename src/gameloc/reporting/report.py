"""Import and translation report data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ImportReport:
    """Outcome of a best-effort bulk import.

    Success is reported as the (imported, failed) pair, never a single flag.
    """

    source_file: str = ""
    format: str = ""
    total_parsed: int = 0
    imported: int = 0
    failed: int = 0
    file_size_bytes: int = 0
    parse_time_ms: float = 0.0

    glossary_file: str | None = None
    glossary_matches: int = 0

    started_at: datetime = field(default_factory=datetime.now)
    errors: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "success"
        return "partial" if self.imported else "failed"

    def to_dict(self) -> dict:
        return {
            "source_file": self.source_file,
            "format": self.format,
            "status": self.status,
            "total_parsed": self.total_parsed,
            "imported": self.imported,
            "failed": self.failed,
            "file_size_bytes": self.file_size_bytes,
            "parse_time_ms": round(self.parse_time_ms, 3),
            "glossary_file": self.glossary_file,
            "glossary_matches": self.glossary_matches,
            "errors": self.errors,
        }


@dataclass
class TranslationReport:
    """Collects statistics about a translation run."""

    source_file: str = ""
    target_lang: str = ""
    backend: str = ""

    total_entries: int = 0
    already_translated: int = 0
    strings_from_cache: int = 0
    strings_translated: int = 0
    strings_failed: int = 0

    glossary_file: str | None = None
    glossary_terms: int = 0

    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    errors: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def finish(self) -> None:
        self.finished_at = datetime.now()

    def to_dict(self) -> dict:
        return {
            "source_file": self.source_file,
            "target_lang": self.target_lang,
            "backend": self.backend,
            "total_entries": self.total_entries,
            "already_translated": self.already_translated,
            "strings_from_cache": self.strings_from_cache,
            "strings_translated": self.strings_translated,
            "strings_failed": self.strings_failed,
            "glossary_file": self.glossary_file,
            "glossary_terms": self.glossary_terms,
            "duration_seconds": self.duration_seconds,
            "errors": self.errors,
        }
