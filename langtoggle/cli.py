"""
Command-line interface for langtoggle.

Provides commands for:
- Translating a file into a target language and back
- Inspecting the term/compound mapping kept between the two
- Managing dictionaries
- Trying out the tokenizer and the compound segmenter

Usage:
    langtoggle to de --input notes.txt
    langtoggle back --input notes.txt
    langtoggle show
    langtoggle dict list
    langtoggle segment --text camelCaseWord
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from langtoggle import __version__
from langtoggle.config import DEFAULT_STATE_FILE, DICTIONARY_DIR, PYTHON_KEYWORDS, TranslatorConfig
from langtoggle.dictionary import DictionaryError, DictionaryRepository
from langtoggle.segment import segment as segment_token
from langtoggle.session import MissingLanguageError, TranslationSession
from langtoggle.store import JsonFileKeyValueStore
from langtoggle.tokens import iter_tokens

app = typer.Typer(
    name="langtoggle",
    help="langtoggle: reversible dictionary translation of documents",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"langtoggle v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log every token decision",
    ),
):
    """langtoggle: translate a document, edit it, translate it back."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )


def _open_session(state_file: Path, dictionaries: Path, python_keywords: bool) -> TranslationSession:
    config = TranslatorConfig(protected_keywords=PYTHON_KEYWORDS if python_keywords else frozenset())
    return TranslationSession(
        DictionaryRepository(dictionaries),
        JsonFileKeyValueStore(state_file),
        config,
    )


def _run_with_progress(description: str, func, *args) -> str:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)

        def update(done: int, total: int) -> None:
            progress.update(task, completed=done, total=total)

        return func(*args, progress=update)


def _write_result(text: str, input_file: Path, output_file: Optional[Path]) -> None:
    target = output_file or input_file
    target.write_text(text, encoding="utf-8")
    console.print(f"[green]✓[/] Wrote {target}")


@app.command("to")
def to_target(
    language: str = typer.Argument(..., help="Target language (dictionary name)"),
    input_file: Path = typer.Option(..., "--input", "-i", help="File to translate"),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: overwrite input)"),
    state_file: Path = typer.Option(DEFAULT_STATE_FILE, "--state", help="Mapping state file"),
    dictionaries: Path = typer.Option(DICTIONARY_DIR, "--dictionaries", "-d", help="Directory of <language>.json dictionaries"),
    python_keywords: bool = typer.Option(False, "--python-keywords", help="Never translate Python keywords"),
):
    """Translate a file into the target language."""
    if not input_file.exists():
        console.print(f"[red]Error:[/] File not found: {input_file}")
        raise typer.Exit(1)

    session = _open_session(state_file, dictionaries, python_keywords)
    if session.is_target:
        console.print("[red]Error:[/] Document is already translated; run [cyan]langtoggle back[/] first")
        raise typer.Exit(1)

    text = input_file.read_text(encoding="utf-8")
    try:
        translated = _run_with_progress(f"Translating to {language}", session.to_target, text, language)
    except (DictionaryError, MissingLanguageError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    _write_result(translated, input_file, output_file)
    console.print(f"[dim]{len(session.store)} terms, {len(session.store.compounds())} compounds mapped[/]")


@app.command("back")
def to_original(
    input_file: Path = typer.Option(..., "--input", "-i", help="Translated (possibly edited) file"),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: overwrite input)"),
    state_file: Path = typer.Option(DEFAULT_STATE_FILE, "--state", help="Mapping state file"),
    dictionaries: Path = typer.Option(DICTIONARY_DIR, "--dictionaries", "-d", help="Directory of <language>.json dictionaries"),
    python_keywords: bool = typer.Option(False, "--python-keywords", help="Never translate Python keywords"),
):
    """Translate a file back to the original language."""
    if not input_file.exists():
        console.print(f"[red]Error:[/] File not found: {input_file}")
        raise typer.Exit(1)

    session = _open_session(state_file, dictionaries, python_keywords)
    if not session.is_target:
        console.print("[yellow]⚠[/] No translation recorded; only dictionary lookups will be used")

    text = input_file.read_text(encoding="utf-8")
    try:
        restored = _run_with_progress("Translating back", session.to_original, text)
    except DictionaryError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    result = session.last_reconcile
    if result is not None and result.changed:
        console.print(
            f"[dim]Reconciled edits: pruned {len(result.pruned_terms)} terms, "
            f"{len(result.pruned_compounds)} compounds[/]"
        )
    _write_result(restored, input_file, output_file)


@app.command()
def toggle(
    input_file: Path = typer.Option(..., "--input", "-i", help="File to toggle in place"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Target language (default: last used)"),
    state_file: Path = typer.Option(DEFAULT_STATE_FILE, "--state", help="Mapping state file"),
    dictionaries: Path = typer.Option(DICTIONARY_DIR, "--dictionaries", "-d", help="Directory of <language>.json dictionaries"),
    python_keywords: bool = typer.Option(False, "--python-keywords", help="Never translate Python keywords"),
):
    """Switch a file to the other language."""
    if not input_file.exists():
        console.print(f"[red]Error:[/] File not found: {input_file}")
        raise typer.Exit(1)

    session = _open_session(state_file, dictionaries, python_keywords)
    text = input_file.read_text(encoding="utf-8")
    try:
        new_text = session.toggle(text, language)
    except (DictionaryError, MissingLanguageError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    _write_result(new_text, input_file, None)
    mode = f"target ({session.language})" if session.is_target else "original"
    console.print(f"Now in [bold]{mode}[/] language")


@app.command()
def show(
    state_file: Path = typer.Option(DEFAULT_STATE_FILE, "--state", help="Mapping state file"),
):
    """Show the recorded term and compound mappings."""
    session = _open_session(state_file, DICTIONARY_DIR, False)
    terms = session.store.terms()
    compounds = session.store.compounds()

    if not terms and not compounds:
        console.print("[yellow]No mappings recorded.[/]")
        return

    table = Table(title=f"Terms ({len(terms)})")
    table.add_column("Identifier", style="cyan")
    table.add_column("Translated", style="green")
    table.add_column("Original", style="yellow")
    table.add_column("Position", justify="right")
    table.add_column("Compounds", style="dim")
    for identifier, record in sorted(terms.items(), key=lambda item: item[1].position):
        table.add_row(
            identifier,
            record.translated,
            record.original,
            str(record.position),
            ", ".join(record.compound_ids) or "-",
        )
    console.print(table)

    if compounds:
        ctable = Table(title=f"Compounds ({len(compounds)})")
        ctable.add_column("Id", style="cyan")
        ctable.add_column("Translated", style="green")
        ctable.add_column("Original", style="yellow")
        ctable.add_column("Position", justify="right")
        ctable.add_column("Parts", style="dim")
        for compound_id, record in compounds.items():
            ctable.add_row(compound_id, record.translated, record.original, str(record.position), ", ".join(record.part_ids))
        console.print(ctable)


@app.command("dict")
def dictionary(
    action: str = typer.Argument(..., help="Action: list, show, add, remove"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Dictionary language"),
    term: Optional[str] = typer.Option(None, "--term", "-t", help="Target-language term"),
    meaning: Optional[str] = typer.Option(None, "--meaning", "-m", help="Original-language meaning"),
    dictionaries: Path = typer.Option(DICTIONARY_DIR, "--dictionaries", "-d", help="Directory of <language>.json dictionaries"),
):
    """Manage dictionaries.

    Examples:
        langtoggle dict list
        langtoggle dict show -l de
        langtoggle dict add -l de -t Welt -m World
        langtoggle dict remove -l de -t Welt -m World
    """
    repo = DictionaryRepository(dictionaries)

    if action == "list":
        languages = repo.available()
        if not languages:
            console.print(f"[yellow]No dictionaries in {dictionaries}[/]")
            return
        for name in languages:
            console.print(f"  • {name}")
        return

    if not language:
        console.print("[red]Error:[/] --language is required")
        raise typer.Exit(1)

    try:
        if action == "show":
            dct = repo.load(language)
            table = Table(title=f"{language} ({len(dct)} terms)")
            table.add_column("Term", style="cyan")
            table.add_column("Meanings", style="green")
            for target in dct:
                table.add_row(target, ", ".join(dct.synonyms(target)))
            console.print(table)

        elif action in ("add", "remove"):
            if not term or not meaning:
                console.print("[red]Error:[/] --term and --meaning are required")
                raise typer.Exit(1)
            if action == "add":
                dct = repo.load_or_create(language)
                dct.add_entry(term, meaning)
                dct.save()
                console.print(f"[green]✓[/] Added \"{term}\" -> \"{meaning}\" to {language}")
            else:
                dct = repo.load(language)
                if not dct.remove_meaning(term, meaning):
                    console.print(f"[red]Error:[/] \"{meaning}\" is not a meaning of \"{term}\"")
                    raise typer.Exit(1)
                dct.save()
                console.print(f"[green]✓[/] Removed \"{meaning}\" from \"{term}\" in {language}")

        else:
            console.print(f"[red]Error:[/] Unknown action '{action}'")
            console.print("Available actions: list, show, add, remove")
            raise typer.Exit(1)
    except DictionaryError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


@app.command()
def tokenize(
    text: str = typer.Option(..., "--text", "-t", help="Text to tokenize"),
):
    """Show how text is split into tokens."""
    table = Table()
    table.add_column("Start", justify="right")
    table.add_column("Kind", style="dim")
    table.add_column("Token", style="cyan")
    for token in iter_tokens(text):
        table.add_row(str(token.start), token.kind.value, repr(token.text))
    console.print(table)


@app.command()
def segment(
    text: str = typer.Option(..., "--text", "-t", help="Word to segment"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Dictionary used as vocabulary"),
    dictionaries: Path = typer.Option(DICTIONARY_DIR, "--dictionaries", "-d", help="Directory of <language>.json dictionaries"),
):
    """Show the compound parts of a word."""
    vocabulary = None
    if language:
        try:
            dct = DictionaryRepository(dictionaries).load(language)
        except DictionaryError as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(1)
        vocabulary = dct.has_target
    parts = segment_token(text, vocabulary)
    console.print(" | ".join(parts))
    if len(parts) < 2:
        console.print("[dim](not a compound)[/]")


if __name__ == "__main__":
    app()
