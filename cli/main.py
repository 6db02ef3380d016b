"""
GRAPHE - Main CLI Application

Command-line interface for building and querying scripture from tokenizer
output (usfm-js style JSON).
"""
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import LoggingConfig
from core.errors import GrapheError
from data.loaders import load_document_file
from data.schemas import Scripture
from observability.logging import setup_logging
from pipeline.builder import ScriptureBuilder
from pipeline.navigation import SectionNavigator
from pipeline.references import ReferenceResolver, format_verses

# Initialize app
app = typer.Typer(
    name="graphe",
    help="GRAPHE - Scripture structuring engine",
    add_completion=False
)

console = Console()
logger = logging.getLogger("graphe.cli")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Configure logging before any command runs."""
    setup_logging(LoggingConfig(level="DEBUG") if verbose else None)


def _fail(error: GrapheError) -> NoReturn:
    """Report an engine error and exit with status 1."""
    logger.debug("Command failed: %s", error.to_dict())
    console.print(f"[red]Error: {escape(error.message)}[/red]")
    for suggestion in error.suggestions:
        console.print(f"  - {suggestion}", markup=False)
    raise typer.Exit(1)


def _load_scripture(input_file: Path, book_code: str, book_name: Optional[str] = None) -> Scripture:
    """Read tokenizer output and build one book, exiting with a message on failure."""
    try:
        document = load_document_file(input_file)
        return ScriptureBuilder().build(document, book_code, book_name=book_name)
    except GrapheError as e:
        _fail(e)


@app.command()
def build(
    input_file: Path = typer.Argument(..., help="Tokenizer output JSON file"),
    book_code: str = typer.Option(..., "--book-code", "-b", help="Book code (e.g., JON)"),
    book_name: Optional[str] = typer.Option(None, "--book-name", "-n", help="Book display name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to file"),
):
    """Build the scripture model for a book and emit it as JSON."""
    scripture = _load_scripture(input_file, book_code, book_name)
    payload = scripture.to_json()

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        console.print(
            f"[green]Wrote {scripture.book} ({scripture.metadata.total_chapters} chapters, "
            f"{scripture.metadata.total_verses} verses, {len(scripture.sections)} sections) "
            f"to {output}[/green]"
        )
    else:
        console.print_json(payload)


@app.command()
def show(
    input_file: Path = typer.Argument(..., help="Tokenizer output JSON file"),
    reference: str = typer.Argument(..., help="Reference (e.g., 'JON 1:3-5' or 'JON 1:17-2:1')"),
    book_code: str = typer.Option(..., "--book-code", "-b", help="Book code (e.g., JON)"),
    numbers: bool = typer.Option(True, "--numbers/--no-numbers", help="Prefix verse numbers"),
    paragraphs: bool = typer.Option(False, "--paragraphs", "-p", help="Group output by paragraph"),
):
    """Print the verses a reference names."""
    resolver = ReferenceResolver()
    try:
        parsed = resolver.require(reference)
    except GrapheError as e:
        _fail(e)

    scripture = _load_scripture(input_file, book_code)
    verses = resolver.resolve_string(scripture, reference)
    if not verses:
        console.print(f"[yellow]No content for {parsed.display_reference}[/yellow]")
        return

    console.print(f"[bold]{parsed.display_reference}[/bold]")
    if not paragraphs:
        console.print(format_verses(verses, show_numbers=numbers), markup=False)
        return

    for paragraph in resolver.resolve_paragraphs(scripture, parsed):
        indent = "  " * paragraph.indent_level
        console.print(f"{indent}{format_verses(paragraph.verses, show_numbers=numbers)}", markup=False)


@app.command()
def sections(
    input_file: Path = typer.Argument(..., help="Tokenizer output JSON file"),
    book_code: str = typer.Option(..., "--book-code", "-b", help="Book code (e.g., JON)"),
):
    """List a book's translation sections."""
    scripture = _load_scripture(input_file, book_code)
    navigator = SectionNavigator(scripture)

    table = Table(title=f"Translation Sections - {scripture.book}")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Start", style="green")
    table.add_column("End", style="green")
    table.add_column("Verses", justify="right")

    for section in navigator.sections:
        end = section.end_reference or "[dim](end of book)[/dim]"
        table.add_row(
            section.id,
            section.title,
            section.start_reference,
            end,
            str(len(navigator.verses_in_section(section.id))),
        )

    console.print(table)
    console.print(f"\nFound {len(navigator.sections)} sections")


@app.command()
def section(
    input_file: Path = typer.Argument(..., help="Tokenizer output JSON file"),
    section_ref: str = typer.Argument(..., help="Section id or title (e.g., section-2 or 'Section 2')"),
    book_code: str = typer.Option(..., "--book-code", "-b", help="Book code (e.g., JON)"),
):
    """Print one translation section with its neighbours."""
    scripture = _load_scripture(input_file, book_code)
    navigator = SectionNavigator(scripture)

    found = navigator.parse_section_reference(section_ref)
    if found is None:
        console.print(f"[red]Error: Section not found: {escape(section_ref)}[/red]")
        raise typer.Exit(1)

    verses = navigator.verses_in_section(found.section_id)
    console.print(Panel.fit(
        Text(format_verses(verses)) if verses else "[dim](no verses)[/dim]",
        title=found.display_reference,
        border_style="blue"
    ))

    previous_section = navigator.previous(found.section_id)
    next_section = navigator.next(found.section_id)
    console.print(f"Previous: {previous_section.id if previous_section else '-'}")
    console.print(f"Next: {next_section.id if next_section else '-'}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
