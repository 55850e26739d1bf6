"""CLI interface for gameloc using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from gameloc import __version__
from gameloc.backends.base import TranslationBackend
from gameloc.core.constants import GameFormat
from gameloc.core.errors import GameLocError

app = typer.Typer(
    name="gameloc",
    help="Import, translate and export video-game text files.",
    add_completion=False,
)
console = Console()

_verbose = False
_quiet = False


def _print(msg: str, *, verbose_only: bool = False) -> None:
    """Print respecting --verbose/--quiet flags. Errors bypass --quiet."""
    if _quiet:
        return
    if verbose_only and not _verbose:
        return
    console.print(msg)


def _fail(msg: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(msg)}")
    return typer.Exit(1)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


def _require_file(path: Path) -> None:
    if not path.exists():
        raise _fail(f"File not found: {path}")


def _load_glossary(glossary: Path | None):
    from gameloc.translation.glossary import Glossary

    if glossary is None:
        return None
    _require_file(glossary)
    try:
        return Glossary.from_toml(glossary)
    except ValueError as e:  # tomllib.TOMLDecodeError is a ValueError
        raise _fail(f"Invalid glossary {glossary}: {e}") from e


def _load_document(project: Path):
    from gameloc.core.project import load_project

    _require_file(project)
    try:
        return load_project(project)
    except ValueError as e:
        raise _fail(str(e)) from e


def _create_backend(
    backend_name: str,
    *,
    api_key: str | None = None,
    model: str | None = None,
    batch_size: int = 5,
    delay: float = 1.0,
) -> TranslationBackend:
    from gameloc.backends.dummy import DummyBackend

    if backend_name == "dummy":
        return DummyBackend()
    if backend_name == "openrouter":
        from gameloc.backends.openrouter import OpenRouterBackend

        if not api_key:
            raise _fail("OpenRouter API key required. Use --api-key or set OPENROUTER_API_KEY.")
        return OpenRouterBackend(api_key, model=model, batch_size=batch_size, batch_delay=delay)
    raise _fail(f"Unknown backend {backend_name!r}. Choose: openrouter, dummy.")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"gameloc {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show extra info and debug logging.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show errors.",
    ),
) -> None:
    """gameloc: localization toolkit for game text files."""
    global _verbose, _quiet
    _verbose = verbose
    _quiet = quiet
    _configure_logging(verbose, quiet)


@app.command()
def formats() -> None:
    """List supported file formats."""
    from gameloc.parsers.manager import ParserManager

    table = Table(title="Supported formats")
    table.add_column("Format", style="cyan")
    table.add_column("Name")
    table.add_column("Extensions")
    table.add_column("Description")
    for info in ParserManager().get_supported_formats():
        table.add_row(info.format.value, info.name, ", ".join(info.extensions), info.description)
    console.print(table)


@app.command()
def columns(
    file: Path = typer.Argument(..., help="CSV or TSV file."),
    fmt: GameFormat | None = typer.Option(
        None, "--format", "-f", help="Force csv or tsv instead of detecting.",
    ),
) -> None:
    """Show a sheet's columns and the suggested column mapping."""
    from gameloc.parsers.manager import ParserManager
    from gameloc.pipeline import read_text

    _require_file(file)
    manager = ParserManager()
    content = read_text(file)
    resolved = fmt or manager.detect_format(file.name, content)
    try:
        parser = manager.get_tabular_parser(resolved)
        names = parser.get_columns(content, file.name)
    except GameLocError as e:
        raise _fail(str(e)) from e

    table = Table(title=f"Columns in {file.name}")
    table.add_column("Column")
    table.add_column("Field", style="cyan")
    table.add_column("Prefix", style="dim")
    for rule in parser.auto_detect_mapping(names):
        table.add_row(escape(rule.file_column), rule.target_field.value, rule.prefix)
    console.print(table)


@app.command()
def scan(
    file: Path = typer.Argument(..., help="Game text file to import."),
    fmt: GameFormat | None = typer.Option(
        None, "--format", "-f", help="Force a format instead of detecting it.",
    ),
    mapping: list[str] | None = typer.Option(
        None, "--map", "-m",
        help="Column mapping COLUMN=field[:prefix] (csv/tsv). Repeatable.",
    ),
    auto_map: bool = typer.Option(
        False, "--auto-map", help="Use the suggested column mapping (csv/tsv).",
    ),
    glossary: Path | None = typer.Option(
        None, "--glossary", "-g", help="Glossary TOML to match entries against.",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Save the entries as a project document.",
    ),
    report: Path | None = typer.Option(
        None, "--report", "-r", help="Save import report (json/md/csv).",
    ),
    limit: int = typer.Option(50, "--limit", help="Rows to show in the table (0 = all)."),
) -> None:
    """Parse a file and list its translatable strings."""
    from gameloc.core.entries import ColumnMapping
    from gameloc.core.project import save_project
    from gameloc.parsers.manager import ParserManager
    from gameloc.pipeline import import_file, read_text
    from gameloc.reporting.formatters import save_report

    _require_file(file)
    gloss = _load_glossary(glossary)
    manager = ParserManager()

    rules = None
    try:
        if mapping:
            rules = [ColumnMapping.parse(spec) for spec in mapping]
        elif auto_map:
            content = read_text(file)
            resolved = fmt or manager.detect_format(file.name, content)
            parser = manager.get_tabular_parser(resolved)
            rules = parser.auto_detect_mapping(parser.get_columns(content, file.name))

        with console.status("Parsing..."):
            document, result = import_file(
                file, manager, fmt, mapping=rules,
                glossary=gloss, glossary_file=str(glossary) if glossary else None,
            )
    except (GameLocError, ValueError) as e:  # UnicodeDecodeError included
        raise _fail(str(e)) from e

    _print(f"Format: [cyan]{document.format.value}[/cyan]")
    _print(
        f"Found [green]{result.total_parsed}[/green] translatable strings "
        f"([green]{result.imported}[/green] imported, [red]{result.failed}[/red] failed)\n"
    )
    _print(f"Parse time: {result.parse_time_ms:.1f} ms", verbose_only=True)
    if gloss is not None:
        _print(f"Entries matching a glossary term: [cyan]{result.glossary_matches}[/cyan]")

    if not _quiet:
        table = Table(title=f"Translatable strings in {file.name}")
        table.add_column("#", style="dim")
        table.add_column("Context")
        table.add_column("Text")
        table.add_column("Translation", style="green")
        shown = document.entries if limit <= 0 else document.entries[:limit]
        for entry in shown:
            table.add_row(
                str(entry.line_number or ""),
                escape((entry.context or "")[:30]),
                escape(entry.original_text[:60]),
                escape((entry.translation or "")[:60]),
            )
        console.print(table)

    if output:
        save_project(document, output)
        _print(f"Project saved: [cyan]{output}[/cyan]")
    if report:
        save_report(result, report)
        _print(f"Report saved: [cyan]{report}[/cyan]")


@app.command()
def translate(
    project: Path = typer.Argument(..., help="Project document from 'gameloc scan -o'."),
    lang: str = typer.Option(
        "VI", "--lang", "-l", help="Target language code (e.g. VI, EN, ES).",
    ),
    source_lang: str | None = typer.Option(
        None, "--source-lang", help="Source language code (default: let the model decide).",
    ),
    backend_name: str = typer.Option(
        "openrouter", "--backend", "-b", help="Backend: openrouter, dummy.",
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", "-k", envvar="OPENROUTER_API_KEY", help="OpenRouter API key.",
    ),
    model: str | None = typer.Option(
        None, "--model", envvar="OPENROUTER_MODEL", help="OpenRouter model id.",
    ),
    glossary: Path | None = typer.Option(
        None, "--glossary", "-g", help="Glossary TOML whose terms must be kept.",
    ),
    batch_size: int = typer.Option(5, "--batch-size", min=1, help="Requests per batch."),
    delay: float = typer.Option(1.0, "--delay", min=0.0, help="Seconds between batches."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the result here instead of updating PROJECT.",
    ),
    report: Path | None = typer.Option(
        None, "--report", "-r", help="Save translation report (json/md/csv).",
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable translation cache."),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Re-translate entries that already have a translation.",
    ),
    use_dummy: bool = typer.Option(
        False, "--dummy", help="Use dummy backend (shortcut for --backend dummy).",
    ),
) -> None:
    """Machine-translate the untranslated entries of a project."""
    from gameloc.core.project import save_project
    from gameloc.pipeline import translate_document
    from gameloc.reporting.formatters import save_report
    from gameloc.translation.cache import TranslationCache

    document = _load_document(project)
    gloss = _load_glossary(glossary)
    backend = _create_backend(
        "dummy" if use_dummy else backend_name,
        api_key=api_key, model=model, batch_size=batch_size, delay=delay,
    )
    _print(f"Backend: [cyan]{backend.name}[/cyan]", verbose_only=True)

    cache = None if no_cache else TranslationCache()
    try:
        with console.status("Translating..."):
            result = translate_document(
                document, backend, lang.upper(), source_lang,
                glossary=gloss, cache=cache, overwrite=overwrite,
            )
    finally:
        if cache is not None:
            cache.close()
    result.glossary_file = str(glossary) if glossary else None

    _print(
        f"Translated [green]{result.strings_translated}[/green], "
        f"from cache [green]{result.strings_from_cache}[/green], "
        f"already done [dim]{result.already_translated}[/dim], "
        f"failed [red]{result.strings_failed}[/red]"
    )
    for err in result.errors:
        console.print(f"[red]Error:[/red] {escape(err)}")

    save_project(document, output or project)
    _print(f"Project saved: [cyan]{output or project}[/cyan]")
    if report:
        save_report(result, report)
        _print(f"Report saved: [cyan]{report}[/cyan]")

    if result.strings_failed:
        raise typer.Exit(1)


@app.command()
def export(
    project: Path = typer.Argument(..., help="Project document from 'gameloc scan -o'."),
    fmt: GameFormat | None = typer.Option(
        None, "--format", "-f", help="Output format (default: the imported format).",
    ),
    original: Path | None = typer.Option(
        None, "--original", help="Original Ren'Py script (default: the scanned path).",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file. Defaults to <name>_translated.<ext>.",
    ),
) -> None:
    """Write translated entries back into a game file."""
    from gameloc.core.constants import export_extension
    from gameloc.parsers.manager import ParserManager
    from gameloc.pipeline import export_document, read_text

    document = _load_document(project)
    target = fmt or document.format
    original_content = None
    if original is not None:
        _require_file(original)
        original_content = read_text(original)

    try:
        content = export_document(document, ParserManager(), target, original_content)
    except (GameLocError, ValueError, OSError) as e:
        raise _fail(str(e)) from e

    if output is None:
        stem = Path(document.source_file).stem or project.stem
        output = project.parent / f"{stem}_translated.{export_extension(target)}"
    output.write_text(content, encoding="utf-8")

    translated = sum(1 for e in document.entries if e.translation)
    _print(
        f"Exported [green]{translated}[/green]/{len(document.entries)} translated entries "
        f"as {target.value}: [cyan]{output}[/cyan]"
    )


@app.command()
def terms(
    project: Path = typer.Argument(..., help="Project document with translations."),
    min_occurrences: int = typer.Option(
        2, "--min-occurrences", "-n", min=1, help="Minimum times a term must appear.",
    ),
    min_confidence: float = typer.Option(
        0.0, "--min-confidence", min=0.0, max=1.0,
        help="Only keep candidates at or above this confidence when saving.",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Save candidates as glossary TOML (.toml) or JSON.",
    ),
) -> None:
    """Suggest glossary terms mined from translated entries."""
    from gameloc.pipeline import extract_terms
    from gameloc.translation.glossary import Glossary
    from gameloc.translation.term_extractor import get_stats

    document = _load_document(project)
    candidates = extract_terms(document, min_occurrences)
    stats = get_stats(candidates)

    _print(
        f"Found [green]{stats['total_terms']}[/green] candidate terms "
        f"([green]{stats['high_confidence']}[/green] high confidence)\n"
    )
    if not _quiet and candidates:
        table = Table(title="Glossary candidates")
        table.add_column("Source")
        table.add_column("Target", style="green")
        table.add_column("Seen", justify="right")
        table.add_column("Confidence", justify="right")
        table.add_column("Category", style="cyan")
        for term in candidates:
            table.add_row(
                escape(term.source_term[:40]),
                escape(term.target_term[:40]),
                str(term.occurrences),
                f"{term.confidence:.2f}",
                term.category,
            )
        console.print(table)

    if output:
        if output.suffix.lower() == ".toml":
            Glossary.from_extracted(candidates, min_confidence).save(output)
        else:
            kept = [t.to_dict() for t in candidates if t.confidence >= min_confidence]
            output.write_text(json.dumps(kept, indent=2, ensure_ascii=False), encoding="utf-8")
        _print(f"Candidates saved: [cyan]{output}[/cyan]")
