"""
CLI Interface
=============
Command-line interface for the question extractor.

Usage:
    exam-extractor extract <pdf_path> [options]
    exam-extractor parse-text <text_path> [options]
    exam-extractor validate <json_path>
    exam-extractor info <pdf_path>
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from . import __version__
from .downloader import DownloadError
from .engine import ExtractionEngine, ParserConfig
from .extractor import PageTextExtractor
from .state_machine import parse_text
from .storage import DEFAULT_OUTPUT_PATH, OutputError, load_questions
from .validator import ValidationEngine

console = Console()

LOG_LEVELS = click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"])


@click.group()
@click.version_option(version=__version__, prog_name="exam-extractor")
def cli():
    """Exam Extractor: multiple-choice question extraction from PDF text."""
    pass


@cli.command()
@click.argument("pdf_path", type=click.Path(dir_okay=False))
@click.option(
    "--url", "-u",
    default=None,
    help="Download the PDF from this URL when PDF_PATH does not exist",
)
@click.option(
    "--output", "-o",
    default=DEFAULT_OUTPUT_PATH,
    show_default=True,
    help="Output JSON file for extracted questions",
)
@click.option(
    "--page-start",
    default=None,
    type=click.IntRange(min=1),
    help="Start page (1-indexed)",
)
@click.option(
    "--page-end",
    default=None,
    type=click.IntRange(min=1),
    help="End page (1-indexed, inclusive)",
)
@click.option(
    "--continuous-numbering",
    is_flag=True,
    default=False,
    help="Number questions across pages instead of restarting at 1 per page",
)
@click.option(
    "--keep-marker-text",
    is_flag=True,
    default=False,
    help="Start the question text with the text after the question number",
)
@click.option(
    "--no-report",
    is_flag=True,
    default=False,
    help="Skip saving the validation report next to the output",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=LOG_LEVELS,
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Print the questions as JSON to stdout (for programmatic use)",
)
def extract(
    pdf_path: str,
    url: str,
    output: str,
    page_start: int,
    page_end: int,
    continuous_numbering: bool,
    keep_marker_text: bool,
    no_report: bool,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Extract questions from a PDF file."""

    if json_output:
        log_level = "ERROR"

    page_range = None
    if page_start is not None or page_end is not None:
        page_range = (page_start or 1, page_end or 99999)

    config = ParserConfig(
        output_path=output,
        save_report=not no_report,
        source_url=url,
        page_range=page_range,
        continuous_numbering=continuous_numbering,
        include_marker_text=keep_marker_text,
        log_level=log_level,
        log_file=log_file,
    )

    _run(
        lambda engine, cb: engine.run(pdf_path, progress_callback=cb),
        config,
        os.path.basename(pdf_path),
        json_output,
    )


@cli.command("parse-text")
@click.argument("text_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    default=DEFAULT_OUTPUT_PATH,
    show_default=True,
    help="Output JSON file for extracted questions",
)
@click.option(
    "--continuous-numbering",
    is_flag=True,
    default=False,
    help="Number questions across pages instead of restarting at 1 per page",
)
@click.option(
    "--keep-marker-text",
    is_flag=True,
    default=False,
    help="Start the question text with the text after the question number",
)
@click.option(
    "--no-report",
    is_flag=True,
    default=False,
    help="Skip saving the validation report next to the output",
)
@click.option("--log-level", default="WARNING", type=LOG_LEVELS, help="Logging level")
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Print the questions as JSON to stdout (for programmatic use)",
)
def parse_text_command(
    text_path: str,
    output: str,
    continuous_numbering: bool,
    keep_marker_text: bool,
    no_report: bool,
    log_level: str,
    json_output: bool,
):
    """Extract questions from a text file (pages separated by form feeds)."""

    if json_output:
        log_level = "ERROR"

    text = Path(text_path).read_text(encoding="utf-8")
    config = ParserConfig(
        output_path=output,
        save_report=not no_report,
        continuous_numbering=continuous_numbering,
        include_marker_text=keep_marker_text,
        log_level=log_level,
    )

    _run(
        lambda engine, cb: engine.run_text(
            text, name=Path(text_path).stem, progress_callback=cb
        ),
        config,
        os.path.basename(text_path),
        json_output,
    )


@cli.command()
@click.argument("json_path", type=click.Path(exists=True, dir_okay=False))
def validate(json_path: str):
    """Validate a previously saved questions JSON file."""

    try:
        questions = load_questions(json_path)
    except OutputError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Validation Report[/]\n"
            f"[dim]File: {json_path}[/]",
            border_style="cyan",
        )
    )

    report = ValidationEngine().validate(questions)
    _display_validation_table(report.model_dump())


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False))
def info(pdf_path: str):
    """Show how many questions and choices each PDF page holds."""

    extractor = PageTextExtractor()
    page_count = extractor.get_page_count(pdf_path)
    pages = extractor.extract_pages(pdf_path)

    table = Table(
        title=f"{os.path.basename(pdf_path)} ({page_count} pages)",
        border_style="cyan",
    )
    table.add_column("Page", style="bold", justify="right")
    table.add_column("Questions", justify="right")
    table.add_column("Choices", justify="right")

    total_questions = 0
    total_choices = 0
    for page_number, page_text in enumerate(pages, start=1):
        questions = parse_text(page_text)
        choices = sum(len(q.choices) for q in questions)
        total_questions += len(questions)
        total_choices += choices
        table.add_row(str(page_number), str(len(questions)), str(choices))

    table.add_row(
        "Total", str(total_questions), str(total_choices), style="cyan"
    )

    console.print()
    console.print(table)
    console.print()


# ─── Runner ───────────────────────────────────────────────────────────────────


def _run(pipeline, config: ParserConfig, source_name: str, json_output: bool):
    """Run a pipeline with progress display and map errors to exit codes."""

    if not json_output:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]Exam Extractor v{__version__}[/]\n"
                f"[dim]Parsing: {source_name}[/]",
                border_style="cyan",
            )
        )
        console.print()

    try:
        engine = ExtractionEngine(config)

        if json_output:
            result = pipeline(engine, None)
            click.echo(json.dumps(
                [q.model_dump() for q in result.questions],
                indent=2,
                ensure_ascii=False,
            ))
            return

        with Progress(
            SpinnerColumn(style="green"),
            TimeElapsedColumn(),
            TextColumn("{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=None)

            def on_status(message: str):
                progress.update(task, description=message)

            result = pipeline(engine, on_status)

        _display_results(result, config.output_path)

    except (FileNotFoundError, DownloadError, OutputError) as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except RuntimeError as e:
        console.print(f"[red]Error:[/] {e}")
        if config.log_level == "DEBUG":
            console.print_exception()
        sys.exit(1)


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_results(result, output_path):
    """Display extraction results."""
    console.print()

    exam = result.exam
    table = Table(title="Source Information", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")
    table.add_row("Name", exam.name or "(auto)")
    if exam.source_pdf:
        table.add_row("Source PDF", exam.source_pdf)
    if exam.source_url:
        table.add_row("Source URL", exam.source_url)
    table.add_row("Total Pages", str(exam.total_pages))
    if exam.file_hash:
        table.add_row("File Hash", exam.file_hash[:16] + "...")
    if output_path:
        table.add_row("Output", str(output_path))
    console.print(table)
    console.print()

    _display_validation_table(result.validation.model_dump())

    pv = result.parse_version
    numbering = "continuous" if pv.continuous_numbering else "per page"
    console.print(
        f"[dim]Extractor v{pv.parser_version} | "
        f"Pages: {pv.page_count} | "
        f"Questions: {pv.question_count} | "
        f"Numbering: {numbering} | "
        f"Timestamp: {pv.parse_timestamp}[/]"
    )
    console.print()


def _display_validation_table(validation: dict):
    """Display validation report as a rich table."""
    table = Table(title="Validation Report", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    total = validation.get("total_questions", 0)
    success = validation.get("structured_successfully", 0)
    rate = validation.get("success_rate", 0)

    def status_icon(count, threshold=0):
        if count <= threshold:
            return "[green]✓[/]"
        return "[red]✗[/]"

    table.add_row(
        "Total Questions",
        str(total),
        "[green]✓[/]" if total > 0 else "[red]✗[/]",
    )
    table.add_row(
        "Structured Successfully",
        f"{success} ({rate}%)",
        "[green]✓[/]" if rate >= 90 else "[yellow]⚠[/]",
    )

    for label, key in [
        ("Duplicate Question Numbers", "duplicate_question_numbers"),
        ("Questions Without Text", "questions_without_text"),
        ("Questions Without Choices", "questions_without_choices"),
        ("Questions With Partial Choices", "questions_with_partial_choices"),
    ]:
        count = len(validation.get(key, []))
        table.add_row(label, str(count), status_icon(count))

    console.print(table)
    console.print()

    breakdown = validation.get("choice_count_breakdown", {})
    if breakdown:
        breakdown_table = Table(
            title="Choice Count Breakdown",
            border_style="yellow",
        )
        breakdown_table.add_column("Choices", style="bold")
        breakdown_table.add_column("Questions", justify="right")

        for count, n in sorted(breakdown.items(), key=lambda kv: int(kv[0])):
            breakdown_table.add_row(str(count), str(n))

        console.print(breakdown_table)
        console.print()


# ─── Entry point (for python -m exam_extractor.cli) ───────────────────────────


if __name__ == "__main__":
    cli()
