"""
Command-line entry point for the written exam grader.

Usage:
    python src/main.py grade questions.pdf page1.jpg page2.jpg
    python src/main.py grade questions.pdf page1.jpg --multipass --runs 5 --concurrency 3
    python src/main.py grade questions.pdf page1.jpg --json
    python src/main.py validate page1.jpg page2.jpg

API keys come from AI_GRADER_GEMINI_API_KEY (comma-separated for a pool)
or from --api-key.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from ai.image_validator import ImageValidator
from ai.provider_factory import create_byok_backend, create_backend_pool, create_grader
from config.constants import CONFIDENCE_THRESHOLD_HIGH, CONFIDENCE_THRESHOLD_LOW
from config.logging_config import setup_structured_logging
from config.settings import get_settings
from core.exceptions import GraderError, MissingAPIKeyError
from core.models import GradingProgress, GradingRequest, GradingResult, UsageMetadata

console = Console()


def read_files(paths: List[str]) -> List[bytes]:
    """Read input files, failing early on missing ones."""
    contents = []
    for path_str in paths:
        path = Path(path_str)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path_str}")
        contents.append(path.read_bytes())
    return contents


def confidence_style(confidence: float) -> str:
    if confidence >= CONFIDENCE_THRESHOLD_HIGH:
        return "green"
    if confidence >= CONFIDENCE_THRESHOLD_LOW:
        return "yellow"
    return "red"


def render_result(
    result: GradingResult,
    usage: UsageMetadata,
    confidences: Optional[List[float]] = None
) -> None:
    """Print the per-question table, totals and usage."""
    table = Table(title="Grading result")
    table.add_column("Q", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Student answer")
    table.add_column("Correct answer")
    table.add_column("Explanation")
    if confidences is not None:
        table.add_column("Confidence", justify="right")

    for i, question in enumerate(result.results):
        score_style = "green" if question.is_correct else "red"
        row = [
            str(question.question_number),
            f"[{score_style}]{question.earned_score:g}/{question.max_score:g}[/{score_style}]",
            question.student_answer,
            question.correct_answer,
            question.explanation,
        ]
        if confidences is not None:
            confidence = confidences[i]
            style = confidence_style(confidence)
            row.append(f"[{style}]{confidence:.0%}[/{style}]")
        table.add_row(*row)

    console.print(table)
    console.print(
        f"[bold]Total:[/bold] {result.total_score:g}/{result.max_possible_score:g}"
    )
    if result.comments:
        console.print(f"[bold]Comments:[/bold] {result.comments}")
    console.print(
        f"[dim]Tokens: prompt={usage.prompt_token_count} "
        f"candidates={usage.candidates_token_count} "
        f"thoughts={usage.thoughts_token_count} "
        f"total={usage.total_token_count}[/dim]"
    )


async def command_grade(args) -> int:
    """Grade one answer sheet, once or in multipass mode."""
    settings = get_settings()

    question_document = read_files([args.question_sheet])[0]
    request = GradingRequest(
        question_document=question_document,
        answer_images=tuple(read_files(args.images)),
        model=args.model or settings.model
    )

    grader = create_grader(api_key=args.api_key, settings=settings)

    if not args.multipass:
        response = await grader.grade(request)
        if args.json:
            console.print_json(response.model_dump_json(by_alias=True))
        else:
            render_result(response.result, response.usage)
        return 0

    num_runs = args.runs if args.runs is not None else settings.pro_runs
    concurrency = args.concurrency if args.concurrency is not None else settings.pro_concurrency

    with Progress(console=console, transient=True) as progress:
        task_id = progress.add_task("Grading runs", total=num_runs)

        def on_progress(event: GradingProgress) -> None:
            progress.update(task_id, completed=event.current)

        multipass = await grader.grade_multipass(
            request,
            num_runs=num_runs,
            concurrency=concurrency,
            on_progress=on_progress
        )

    if args.json:
        console.print_json(multipass.model_dump_json(by_alias=True))
    else:
        render_result(multipass.result, multipass.usage, multipass.confidences)
    return 0


async def command_validate(args) -> int:
    """Check that images look like answer sheets."""
    settings = get_settings()

    if args.api_key:
        backend = create_byok_backend(args.api_key, settings)
    else:
        backend = create_backend_pool(settings)
        if backend.size == 0:
            raise MissingAPIKeyError("No API key configured. Set AI_GRADER_GEMINI_API_KEY.")

    validator = ImageValidator(backend)
    result = await validator.validate(
        read_files(args.images),
        model=args.model or settings.validation_model
    )

    if args.json:
        console.print_json(result.model_dump_json(by_alias=True))
    else:
        verdict = "[green]valid[/green]" if result.is_valid else "[red]invalid[/red]"
        console.print(f"Answer sheets: {verdict} ({result.confidence:.0%})")
        console.print(result.reason)
    return 0 if result.is_valid else 2


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Grade handwritten exam answer sheets with Gemini"
    )
    parser.add_argument("--log-level", help="Log level (default: from settings)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Grade command
    grade_parser = subparsers.add_parser("grade", help="Grade an answer sheet")
    grade_parser.add_argument("question_sheet", help="Question sheet PDF (with answers)")
    grade_parser.add_argument("images", nargs="+", help="Answer sheet photos")
    grade_parser.add_argument("--model", help="Grading model")
    grade_parser.add_argument("--api-key", help="Use this API key instead of the server pool")
    grade_parser.add_argument(
        "--multipass",
        action="store_true",
        help="Grade several times and reconcile by majority vote"
    )
    grade_parser.add_argument("--runs", type=positive_int, help="Number of runs in multipass mode")
    grade_parser.add_argument(
        "--concurrency",
        type=positive_int,
        help="Maximum runs in flight in multipass mode"
    )
    grade_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check that images look like answer sheets"
    )
    validate_parser.add_argument("images", nargs="+", help="Answer sheet photos")
    validate_parser.add_argument("--model", help="Validation model")
    validate_parser.add_argument("--api-key", help="Use this API key instead of the server pool")
    validate_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    setup_structured_logging(
        level=(args.log_level or settings.log_level).upper(),
        log_file=settings.log_file
    )

    try:
        if args.command == "grade":
            return asyncio.run(command_grade(args))
        elif args.command == "validate":
            return asyncio.run(command_validate(args))
    except (GraderError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
