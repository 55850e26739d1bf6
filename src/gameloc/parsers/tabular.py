"""CSV/TSV translation sheets.

The first row is the header. Cells are trimmed, a UTF-8 byte-order mark is
ignored and lines with no content are skipped.
"""

from __future__ import annotations

import csv
import io

from gameloc.core.constants import EMPTY_PLACEHOLDER, GameFormat
from gameloc.core.entries import ColumnMapping, ExtractedEntry, TabularMetadata, TargetField
from gameloc.core.errors import ParseError
from gameloc.parsers.base import FormatParser
from gameloc.parsers.columns import auto_detect_mapping, validate_mapping

# Header names tried, in order, by the mapping-less parse
_ORIGINAL_KEYS = ("original", "Original", "text", "Text", "source", "Source")
_CONTEXT_KEYS = ("context", "Context", "type", "Type")

_EXPORT_COLUMNS = ("ID", "Context", "Original", "Translation")

_CONTEXT_SEPARATOR = " | "


def _first_value(record: dict[str, str], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return ""


class TabularParser(FormatParser):
    """Delimited tables: comma for CSV, tab for TSV."""

    def __init__(self, fmt: GameFormat = GameFormat.CSV) -> None:
        if fmt not in (GameFormat.CSV, GameFormat.TSV):
            raise ValueError(f"TabularParser handles csv/tsv, not {fmt.value}")
        self.format = fmt
        self.formats = (fmt,)
        self.delimiter = "\t" if fmt == GameFormat.TSV else ","

    # ── Reading ──

    def _read_rows(self, content: str, filename: str) -> list[list[str]]:
        text = content.lstrip("\ufeff")
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter)
        try:
            rows = [[cell.strip() for cell in row] for row in reader]
        except csv.Error as e:
            raise ParseError(filename, e) from e
        return [row for row in rows if row]

    def _read_records(self, content: str, filename: str) -> tuple[list[str], list[dict[str, str]]]:
        rows = self._read_rows(content, filename)
        if not rows:
            return [], []
        header, data = rows[0], rows[1:]
        records = [
            {column: (row[i] if i < len(row) else "") for i, column in enumerate(header)}
            for row in data
        ]
        return header, records

    def get_columns(self, content: str, filename: str = "") -> list[str]:
        """Header names in file order."""
        header, _ = self._read_records(content, filename)
        return header

    def auto_detect_mapping(self, columns: list[str]) -> list[ColumnMapping]:
        return auto_detect_mapping(columns)

    def parse(self, content: str, filename: str) -> list[ExtractedEntry]:
        """Heuristic import without a confirmed mapping.

        Source text comes from the first non-empty of the usual header names
        (``original``/``text``/``source`` in either case), context from
        ``context``/``type``. Rows without text are kept here and dropped by
        the manager's post-processing. Rows whose cells are all blank are
        skipped.
        """
        _, records = self._read_records(content, filename)
        entries: list[ExtractedEntry] = []
        for index, record in enumerate(records):
            if not any(record.values()):
                continue
            context = _first_value(record, _CONTEXT_KEYS)
            entries.append(
                ExtractedEntry(
                    original_text=_first_value(record, _ORIGINAL_KEYS),
                    context=context or None,
                    line_number=index + 1,
                    source_file=filename,
                    metadata=TabularMetadata(record=record, row=index + 1, format=self.format),
                )
            )
        return entries

    def parse_with_mapping(
        self,
        content: str,
        filename: str,
        mapping: list[ColumnMapping],
    ) -> list[ExtractedEntry]:
        """Import using a confirmed column mapping.

        Every data row yields exactly one entry so rows stay aligned with the
        sheet; a blank source cell becomes the ``"Empty"`` placeholder.
        When several columns map to the same field, source text and
        translation take the first non-empty value and context values are
        joined with `` | ``.

        Raises:
            ColumnMappingError: if no column maps to ``originalText``.
        """
        validate_mapping(mapping)
        rules = [m for m in mapping if m.target_field != TargetField.SKIP]
        _, records = self._read_records(content, filename)

        entries: list[ExtractedEntry] = []
        for index, record in enumerate(records):
            values: dict[TargetField, list[str]] = {}
            for rule in rules:
                cell = record.get(rule.file_column, "")
                if not cell:
                    continue
                value = f"{rule.prefix}{cell}".strip() if rule.prefix else cell.strip()
                values.setdefault(rule.target_field, []).append(value)

            originals = values.get(TargetField.ORIGINAL_TEXT, [])
            translations = values.get(TargetField.TRANSLATION, [])
            contexts = values.get(TargetField.CONTEXT, [])

            entries.append(
                ExtractedEntry(
                    original_text=originals[0] if originals else EMPTY_PLACEHOLDER,
                    translation=translations[0] if translations else None,
                    context=_CONTEXT_SEPARATOR.join(contexts) if contexts else None,
                    line_number=index + 1,
                    source_file=filename,
                    metadata=TabularMetadata(record=record, row=index + 1, format=self.format),
                )
            )
        return entries

    # ── Writing ──

    def _render(self, entries: list[ExtractedEntry], delimiter: str, with_status: bool) -> str:
        output = io.StringIO()
        writer = csv.writer(output, delimiter=delimiter, lineterminator="\n")
        columns = [*_EXPORT_COLUMNS, "Status"] if with_status else list(_EXPORT_COLUMNS)
        writer.writerow(columns)
        for index, entry in enumerate(entries):
            row = [
                str(index + 1).zfill(3),
                entry.context or "",
                entry.original_text,
                entry.translation or "",
            ]
            if with_status:
                row.append("Translated" if entry.translation else "Pending")
            writer.writerow(row)
        return output.getvalue()

    def export(
        self,
        entries: list[ExtractedEntry],
        original_content: str | None = None,
    ) -> str:
        """Fixed layout in this parser's delimiter; CSV adds a Status column."""
        if self.format == GameFormat.TSV:
            return self.export_tsv(entries)
        return self._render(entries, ",", with_status=True)

    def export_csv(self, entries: list[ExtractedEntry]) -> str:
        """``ID,Context,Original,Translation,Status``."""
        return self._render(entries, ",", with_status=True)

    def export_tsv(self, entries: list[ExtractedEntry]) -> str:
        """``ID\\tContext\\tOriginal\\tTranslation`` (no Status column)."""
        return self._render(entries, "\t", with_status=False)
