"""Import → translate → export steps shared by the CLI.

Each step works on in-memory entries and reports counts; persistence is
delegated to a ``store`` callable or a ProjectDocument.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from gameloc.backends.base import TranslationBackend
from gameloc.core.constants import GameFormat
from gameloc.core.entries import ColumnMapping, ExtractedEntry, ParseResult
from gameloc.core.project import ProjectDocument
from gameloc.parsers.manager import ParserManager
from gameloc.reporting.report import ImportReport, TranslationReport
from gameloc.translation.cache import TranslationCache, text_key
from gameloc.translation.glossary import Glossary
from gameloc.translation.term_extractor import ExtractedTerm, TermExtractor, TermSource

logger = logging.getLogger(__name__)

# (phase, current, total, message)
ProgressCallback = Callable[[str, int, int, str], None]


def read_text(path: Path) -> str:
    """Decode an uploaded file as UTF-8 (a leading BOM is kept for the parsers)."""
    return path.read_bytes().decode("utf-8")


# ── Import ──


def import_entries(
    result: ParseResult,
    store: Callable[[ExtractedEntry], None],
    source_file: str = "",
    glossary: Glossary | None = None,
    glossary_file: str | None = None,
) -> ImportReport:
    """Hand every parsed entry to *store*, counting successes and failures.

    A failing entry is recorded in the report and the import continues.
    With a *glossary*, the report also counts entries mentioning a term.
    """
    report = ImportReport(
        source_file=source_file,
        format=result.format.value,
        total_parsed=len(result.entries),
        file_size_bytes=result.stats.file_size_bytes,
        parse_time_ms=result.stats.parse_time_ms,
        glossary_file=glossary_file,
    )

    for entry in result.entries:
        try:
            store(entry)
        except Exception as e:  # noqa: BLE001 - one bad row must not abort a bulk import
            report.failed += 1
            report.errors.append(f"line {entry.line_number or '?'}: {e}")
            logger.warning("Failed to import entry %r: %s", entry.original_text[:40], e)
        else:
            report.imported += 1

    if glossary is not None and len(glossary):
        matches = glossary.find_matches(e.original_text for e in result.entries)
        report.glossary_matches = len({i for indices in matches.values() for i in indices})

    return report


def import_file(
    path: Path,
    manager: ParserManager,
    fmt: GameFormat | str | None = None,
    mapping: list[ColumnMapping] | None = None,
    glossary: Glossary | None = None,
    glossary_file: str | None = None,
) -> tuple[ProjectDocument, ImportReport]:
    """Parse *path* into a new ProjectDocument.

    Raises:
        UnsupportedFormatError, ParseError, ColumnMappingError: from the parser.
    """
    content = read_text(path)
    result = manager.parse(content, path.name, fmt, mapping=mapping)
    document = ProjectDocument(
        source_file=path.name,
        format=result.format,
        source_path=str(path.resolve()),
    )
    report = import_entries(
        result, document.add, source_file=path.name,
        glossary=glossary, glossary_file=glossary_file,
    )
    return document, report


# ── Translate ──


def translate_document(
    document: ProjectDocument,
    backend: TranslationBackend,
    target_lang: str,
    source_lang: str | None = None,
    glossary: Glossary | None = None,
    cache: TranslationCache | None = None,
    overwrite: bool = False,
    progress: ProgressCallback | None = None,
) -> TranslationReport:
    """Fill in missing translations, in place.

    Identical source texts are sent once. Glossary terms are swapped for
    placeholders before the backend call and restored afterwards; results
    are written to *cache* when one is given.
    """
    report = TranslationReport(
        source_file=document.source_file,
        target_lang=target_lang,
        backend=backend.name,
        total_entries=len(document.records),
        glossary_terms=len(glossary) if glossary is not None else 0,
    )

    pending = [r for r in document.records if overwrite or not r.entry.translation]
    report.already_translated = len(document.records) - len(pending)

    # unique source text → records sharing it
    by_text: dict[str, list] = {}
    for record in pending:
        by_text.setdefault(record.entry.original_text, []).append(record)
    texts = list(by_text)

    translations: dict[str, str] = {}
    if cache is not None and texts:
        keys = {text_key(t): t for t in texts}
        for key, translated in cache.get_batch(list(keys), target_lang).items():
            translations[keys[key]] = translated
        report.strings_from_cache = sum(len(by_text[t]) for t in translations)

    to_send = [t for t in texts if t not in translations]
    if to_send:
        if progress:
            progress("translate", 0, len(to_send), f"Translating {len(to_send)} strings")
        contexts = [by_text[t][0].entry.context for t in to_send]
        if glossary is not None and len(glossary):
            protected, mappings = glossary.protect_batch(to_send)
        else:
            protected, mappings = to_send, None

        try:
            results = backend.translate_batch(protected, target_lang, source_lang, contexts)
        except Exception as e:
            # Translate step failed as a whole; entries stay untranslated
            report.strings_failed = sum(len(by_text[t]) for t in to_send)
            report.errors.append(str(e))
            logger.error("Translation backend %s failed: %s", backend.name, e)
            results = None

        if results is not None:
            if mappings is not None:
                results = glossary.restore_batch(results, mappings)
            fresh = dict(zip(to_send, results, strict=True))
            translations.update(fresh)
            report.strings_translated = sum(len(by_text[t]) for t in fresh)
            if cache is not None:
                cache.put_batch(
                    [(text_key(t), target_lang, t, tr) for t, tr in fresh.items()],
                    backend=backend.name,
                )
        if progress:
            progress("translate", len(to_send), len(to_send), "Done")

    for text, translated in translations.items():
        for record in by_text[text]:
            record.set_translation(translated)

    report.finish()
    return report


# ── Terms / export ──


def extract_terms(
    document: ProjectDocument,
    min_occurrences: int = 2,
) -> list[ExtractedTerm]:
    sources = [
        TermSource(
            original_text=e.original_text,
            translation=e.translation,
            context=e.context,
        )
        for e in document.entries
    ]
    return TermExtractor().extract(sources, min_occurrences)


def export_document(
    document: ProjectDocument,
    manager: ParserManager,
    fmt: GameFormat | str | None = None,
    original_content: str | None = None,
) -> str:
    """Render *document* in *fmt* (default: the format it was imported as).

    Ren'Py export reads the script from ``document.source_path`` unless
    *original_content* is given.
    """
    target = fmt if fmt is not None else document.format
    if target == GameFormat.RENPY and original_content is None and document.source_path:
        original_content = read_text(Path(document.source_path))
    return manager.export(document.entries, target, original_content)
