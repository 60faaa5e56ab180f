"""
Exam Grader CLI Application.

Provides a command-line interface for grading exam attempts, validating
exam files and exporting question banks.
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from exam_grader.attempt import AttemptParseError, AttemptParser, AttemptValidationError, AttemptValidator
from exam_grader.config import Settings, get_settings
from exam_grader.grading import GradingEngine, shuffle
from exam_grader.loaders import JsonLoader, LoaderError, load_exam
from exam_grader.models import GradingResult, SubmissionOutcome
from exam_grader.output import ExportError, QuestionExporter, ReportFormat, ReportGenerator
from exam_grader.submission import SubmissionError, submit_attempt

# Create Typer app
app = typer.Typer(
    name="exam-grader",
    help="Deterministic grading of exam attempts",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
) -> None:
    """Configure logging for every command."""
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def grade(
    exam_file: Annotated[Path, typer.Argument(help="Path to the exam file (.json, .csv, .xlsx, .xls)")],
    output: Annotated[
        Optional[str],
        typer.Option(
            "--output",
            "-o",
            help="Output file path for the report; a bare file name is saved in the output directory",
        ),
    ] = None,
    format: Annotated[
        ReportFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = ReportFormat.JSON,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show per-question results"),
    ] = False,
) -> None:
    """
    Grade a student's attempt.

    When the exam file carries attempt metadata (attempt_id, status and
    started_at) the attempt is also submitted, yielding its final status
    and time taken.
    """
    try:
        settings = get_settings()

        if not exam_file.exists():
            console.print(f"[red]Error:[/red] Exam file not found: {exam_file}")
            raise typer.Exit(1)

        document = load_exam(exam_file)
        attempt = AttemptParser().parse_document(document)
        AttemptValidator().validate_or_raise(attempt)

        result = GradingEngine(settings).grade_attempt(attempt)

        outcome: SubmissionOutcome | None = None
        if document.attempt_id and document.status and document.started_at:
            outcome = submit_attempt(
                attempt_id=document.attempt_id,
                status=document.status,
                started_at=document.started_at,
                result=result,
            )

        _display_results(result, outcome, verbose)

        generator = ReportGenerator()
        if output:
            saved_path = generator.save(result, _report_path(output, settings), format, outcome)
            console.print(f"\n[green]Report saved to:[/green] {saved_path}")
        else:
            console.print("\n" + generator.generate(result, format, outcome), markup=False, highlight=False)

    except LoaderError as e:
        console.print(f"[red]Load Error:[/red] {e}")
        raise typer.Exit(1)
    except AttemptParseError as e:
        console.print(f"[red]Parse Error:[/red] {e}")
        raise typer.Exit(1)
    except AttemptValidationError as e:
        console.print(f"[red]Validation Error:[/red] {e}")
        raise typer.Exit(1)
    except SubmissionError as e:
        console.print(f"[red]Submission Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def validate(
    exam_file: Annotated[Path, typer.Argument(help="Path to the exam file")],
) -> None:
    """
    Validate an exam file without grading it.

    Checks that every question is well-formed and can be graded.
    """
    try:
        if not exam_file.exists():
            console.print(f"[red]Error:[/red] File not found: {exam_file}")
            raise typer.Exit(1)

        document = load_exam(exam_file)
        attempt = AttemptParser().parse_document(document)
        is_valid, issues = AttemptValidator().validate(attempt)

        table = Table(title="Questions")
        table.add_column("ID", style="cyan")
        table.add_column("Type")
        table.add_column("Points", justify="right")
        table.add_column("Answered", justify="center")

        for item in attempt.answers:
            type_label = item.question_type if item.known_type else f"{item.question_type} (manual)"
            answered = "✓" if item.student_answer is not None else "-"
            table.add_row(item.question_id, type_label, str(item.points), answered)

        console.print(table)
        total = sum(item.points for item in attempt.answers)
        console.print(f"\n[bold]Total Points:[/bold] {total}")

        if is_valid:
            console.print("\n[green]✓ Exam file is valid[/green]")
        else:
            console.print("\n[yellow]⚠ Validation issues found:[/yellow]")
            for issue in issues:
                console.print(f"  • {issue}")
            raise typer.Exit(1)

    except LoaderError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except AttemptParseError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command("export-questions")
def export_questions(
    bank_file: Annotated[Path, typer.Argument(help="Path to a JSON question bank")],
    output: Annotated[Path, typer.Argument(help="Output .docx file or directory")],
    title: Annotated[
        str,
        typer.Option("--title", "-t", help="Document title"),
    ] = "Question Export",
    answers: Annotated[
        bool,
        typer.Option("--answers", help="Append an answer key"),
    ] = False,
) -> None:
    """Export a question bank to a Word document."""
    try:
        questions = JsonLoader().load_question_bank(bank_file)
        saved_path = QuestionExporter().export(questions, output, title=title, include_answers=answers)
        console.print(f"[green]Exported {len(questions)} questions to:[/green] {saved_path}")

    except LoaderError as e:
        console.print(f"[red]Load Error:[/red] {e}")
        raise typer.Exit(1)
    except ExportError as e:
        console.print(f"[red]Export Error:[/red] {e}")
        raise typer.Exit(1)


@app.command("shuffle")
def shuffle_questions(
    exam_file: Annotated[Path, typer.Argument(help="Path to the exam file")],
    seed: Annotated[int, typer.Option("--seed", "-s", help="Seed for a reproducible order")],
) -> None:
    """Show the question order a seed produces for an exam."""
    try:
        document = load_exam(exam_file)
        attempt = AttemptParser().parse_document(document)

        table = Table(title=f"Question order (seed {seed})")
        table.add_column("#", justify="right")
        table.add_column("ID", style="cyan")
        table.add_column("Type")

        for position, item in enumerate(shuffle(attempt.answers, seed), start=1):
            table.add_row(str(position), item.question_id, item.question_type)

        console.print(table)

    except LoaderError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except AttemptParseError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _report_path(output: str, settings: Settings) -> Path:
    """Resolve --output; only a bare file name goes to the output directory."""
    separators = [sep for sep in (os.sep, os.altsep, "/") if sep]
    if any(sep in output for sep in separators):
        return Path(output)
    return settings.output_directory / output


def _display_results(
    result: GradingResult, outcome: SubmissionOutcome | None = None, verbose: bool = False
) -> None:
    """Display grading results in a formatted table."""

    # Score summary
    score_color = "green" if result.percentage_score >= 70 else "yellow" if result.percentage_score >= 50 else "red"
    console.print(
        Panel(
            f"[{score_color}][bold]{result.total_score} / {result.max_score}[/bold] "
            f"({result.percentage_score:.1f}%)[/{score_color}]",
            title="Score",
        )
    )

    if result.has_manual_grading:
        console.print("[yellow]⚠ Some questions require manual grading; the score is provisional[/yellow]")

    if outcome is not None:
        console.print(
            f"Attempt [cyan]{outcome.attempt_id}[/cyan]: {outcome.status.value}, "
            f"{outcome.time_taken_seconds}s"
        )

    if verbose:
        table = Table(title="Questions")
        table.add_column("Question", style="cyan")
        table.add_column("Points", justify="right")
        table.add_column("Status")

        for answer in result.graded_answers:
            if answer.needs_manual_grading:
                status = "✍️"
            else:
                status = "✅" if answer.is_correct else "❌"
            table.add_row(
                answer.question_id,
                f"{answer.points_awarded}/{answer.max_points}",
                status,
            )

        console.print(table)


if __name__ == "__main__":
    app()
