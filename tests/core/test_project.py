"""Tests for project documents."""

import json

import pytest

from gameloc.core.constants import GameFormat
from gameloc.core.entries import ExtractedEntry, ScriptMetadata, TranslationStatus
from gameloc.core.project import EntryRecord, ProjectDocument, load_project, save_project


def _document() -> ProjectDocument:
    doc = ProjectDocument(source_file="script.rpy", format=GameFormat.RENPY, source_path="/tmp/script.rpy")
    doc.add(ExtractedEntry(
        original_text="Hello",
        line_number=3,
        metadata=ScriptMetadata(line_number=3, kind="dialogue", speaker="e"),
    ))
    doc.add(ExtractedEntry(original_text="Bye", translation="Tạm biệt"))
    return doc


class TestProjectDocument:
    def test_add_sets_status(self):
        doc = _document()
        assert doc.records[0].status == TranslationStatus.UNTRANSLATED
        assert doc.records[1].status == TranslationStatus.TRANSLATED

    def test_set_translation(self):
        record = EntryRecord(entry=ExtractedEntry(original_text="Hi"))
        record.set_translation("Chào")
        assert record.entry.translation == "Chào"
        assert record.status == TranslationStatus.TRANSLATED

    def test_progress(self):
        progress = _document().progress()
        assert progress["UNTRANSLATED"] == 1
        assert progress["TRANSLATED"] == 1
        assert progress["APPROVED"] == 0

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "project.json"
        doc = _document()
        doc.records[1].status = TranslationStatus.APPROVED
        save_project(doc, path)

        loaded = load_project(path)
        assert loaded.source_file == "script.rpy"
        assert loaded.format == GameFormat.RENPY
        assert loaded.source_path == "/tmp/script.rpy"
        assert loaded.entries == doc.entries
        assert loaded.records[1].status == TranslationStatus.APPROVED

    def test_missing_status_inferred(self):
        record = EntryRecord.from_dict({"original_text": "A", "translation": "B"})
        assert record.status == TranslationStatus.TRANSLATED


class TestLoadErrors:
    def test_not_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_project(path)

    def test_missing_fields(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"entries": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_project(path)

    def test_future_version(self, tmp_path):
        path = tmp_path / "v2.json"
        path.write_text(
            json.dumps({"version": 2, "source_file": "a", "format": "json"}),
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="version"):
            load_project(path)
