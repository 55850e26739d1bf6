"""Tests for report models and formatters."""

import json

from gameloc.reporting.formatters import save_report, to_csv, to_json, to_markdown
from gameloc.reporting.report import ImportReport, TranslationReport


class TestImportReport:
    def test_status(self):
        assert ImportReport(imported=3).status == "success"
        assert ImportReport(imported=2, failed=1).status == "partial"
        assert ImportReport(imported=0, failed=2).status == "failed"

    def test_markdown(self):
        report = ImportReport(
            source_file="npc.json", format="json", total_parsed=3, imported=2, failed=1,
            glossary_file="g.toml", glossary_matches=2, errors=["line 2: boom"],
        )
        md = to_markdown(report)
        assert md.startswith("# Import Report")
        assert "| Status | partial |" in md
        assert "Entries matching a term: 2" in md
        assert "- line 2: boom" in md


class TestTranslationReport:
    def test_duration(self):
        report = TranslationReport()
        assert report.duration_seconds == 0.0
        report.finish()
        assert report.duration_seconds >= 0.0

    def test_json(self):
        report = TranslationReport(source_file="s.rpy", target_lang="VI", strings_translated=4)
        data = json.loads(to_json(report))
        assert data["strings_translated"] == 4
        assert data["target_lang"] == "VI"

    def test_csv_single_row(self):
        report = TranslationReport(errors=["a", "b"])
        lines = to_csv(report).strip().splitlines()
        assert len(lines) == 2
        assert "a; b" in lines[1]


class TestSaveReport:
    def test_format_from_extension(self, tmp_path):
        report = TranslationReport(backend="dummy")
        for name in ("r.json", "r.md", "r.csv", "r.txt"):
            save_report(report, tmp_path / name)

        assert json.loads((tmp_path / "r.json").read_text(encoding="utf-8"))["backend"] == "dummy"
        assert (tmp_path / "r.md").read_text(encoding="utf-8").startswith("# Translation Report")
        assert (tmp_path / "r.csv").read_text(encoding="utf-8").startswith("source_file,")
        assert json.loads((tmp_path / "r.txt").read_text(encoding="utf-8"))["backend"] == "dummy"
