"""Output formatters for import and translation reports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Union

from gameloc.reporting.report import ImportReport, TranslationReport

Report = Union[ImportReport, TranslationReport]


def to_json(report: Report, indent: int = 2) -> str:
    """Format report as JSON string."""
    return json.dumps(report.to_dict(), indent=indent, default=str, ensure_ascii=False)


def _import_rows(report: ImportReport) -> list[str]:
    return [
        "# Import Report",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| Source | `{report.source_file}` |",
        f"| Format | {report.format} |",
        f"| Status | {report.status} |",
        "",
        "## Statistics",
        "",
        "| Metric | Count |",
        "|--------|-------|",
        f"| Parsed | {report.total_parsed} |",
        f"| Imported | {report.imported} |",
        f"| Failed | {report.failed} |",
        f"| File size | {report.file_size_bytes} bytes |",
        f"| Parse time | {report.parse_time_ms:.1f} ms |",
    ]


def _translation_rows(report: TranslationReport) -> list[str]:
    return [
        "# Translation Report",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| Source | `{report.source_file}` |",
        f"| Target language | {report.target_lang} |",
        f"| Backend | {report.backend} |",
        "",
        "## Statistics",
        "",
        "| Metric | Count |",
        "|--------|-------|",
        f"| Entries | {report.total_entries} |",
        f"| Already translated | {report.already_translated} |",
        f"| From cache | {report.strings_from_cache} |",
        f"| Translated | {report.strings_translated} |",
        f"| Failed | {report.strings_failed} |",
        f"| Duration | {report.duration_seconds:.1f}s |",
    ]


def to_markdown(report: Report) -> str:
    """Format report as Markdown."""
    if isinstance(report, ImportReport):
        lines = _import_rows(report)
        glossary_line = f"- Entries matching a term: {report.glossary_matches}"
    else:
        lines = _translation_rows(report)
        glossary_line = f"- Terms: {report.glossary_terms}"

    if report.glossary_file:
        lines.extend([
            "",
            "## Glossary",
            "",
            f"- File: `{report.glossary_file}`",
            glossary_line,
        ])

    if report.errors:
        lines.extend(["", "## Errors", ""])
        for err in report.errors:
            lines.append(f"- {err}")

    return "\n".join(lines) + "\n"


def to_csv(report: Report) -> str:
    """Format report as a single-row CSV."""
    output = io.StringIO()
    data = report.to_dict()
    data["errors"] = "; ".join(data["errors"])
    writer = csv.DictWriter(output, fieldnames=data.keys())
    writer.writeheader()
    writer.writerow(data)
    return output.getvalue()


def save_report(report: Report, path: str | Path) -> None:
    """Save report to file, picking the format from the extension (default JSON)."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".md", ".markdown"):
        content = to_markdown(report)
    elif suffix == ".csv":
        content = to_csv(report)
    else:
        content = to_json(report)

    path.write_text(content, encoding="utf-8")
