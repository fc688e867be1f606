"""Reader simulation command."""

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console

from storybook.analyzers import ReaderSimulator
from storybook.cli.formatters.table_formatter import TableFormatter
from storybook.cli.utils.cli_handler import CLIHandler
from storybook.exceptions import ValidationError
from storybook.models import ReaderSimulationResult


def render_simulation(console: Console, result: ReaderSimulationResult) -> None:
    summary = result.engagement_summary
    console.print("[bold cyan]Reading Simulation[/bold cyan]")
    console.print(f"  Overall engagement: {summary.overall_engagement_score:.2f}")
    console.print(f"  Completion rate: {summary.reading_completion_rate:.2f}")
    console.print(f"  Average comprehension: {summary.average_comprehension:.2f}")
    rows = [
        {
            "paragraph": b.paragraph_number,
            "attention": b.attention_level,
            "comprehension": b.comprehension_level,
            "skimming": "yes" if b.is_skimming else "",
            "markers": [m.type for m in b.engagement_markers],
        }
        for b in result.reading_timeline
    ]
    if rows:
        console.print(TableFormatter(console, title="Timeline").format(rows))
    for suggestion in result.suggestions:
        console.print(
            f"  • [{suggestion.priority}] {suggestion.type}: {suggestion.description}"
        )


def _load_profile(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(
            f"Cannot read reader profile {path}",
            hint="Provide a YAML or JSON mapping",
            details={"error": str(e)},
        ) from e
    if not isinstance(data, dict):
        raise ValidationError(f"Reader profile {path} must be a mapping")
    return data


def simulate_command(
    manuscript: Annotated[
        Path | None,
        typer.Argument(help="Manuscript file; reads stdin when omitted", show_default=False),
    ] = None,
    profile: Annotated[
        Path | None,
        typer.Option("--profile", "-p", help="Reader profile file (YAML or JSON)"),
    ] = None,
    age: Annotated[int, typer.Option("--age", help="Reader age")] = 30,
    education: Annotated[
        str, typer.Option("--education", help="primary ... professional")
    ] = "undergraduate",
    speed: Annotated[str, typer.Option("--speed", help="slow, average or fast")] = "average",
    attention: Annotated[
        str, typer.Option("--attention", help="short, medium or long")
    ] = "medium",
    proficiency: Annotated[
        str, typer.Option("--proficiency", help="basic ... native")
    ] = "native",
    interest: Annotated[
        list[str] | None, typer.Option("--interest", help="Reader interest (repeatable)")
    ] = None,
    genre: Annotated[
        list[str] | None, typer.Option("--genre", help="Preferred genre (repeatable)")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Simulate how a reader with the given profile reads the manuscript.

    Example:
        storybook simulate chapter1.txt --age 16 --education secondary --speed fast
        storybook simulate chapter1.txt --profile reader.yaml --json
    """
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        if profile is not None:
            demographics = _load_profile(profile)
        else:
            demographics = {
                "age": age,
                "educationLevel": education,
                "readingSpeed": speed,
                "attentionSpan": attention,
                "interests": interest or [],
                "genre_preferences": genre or [],
                "language_proficiency": proficiency,
            }
        result = ReaderSimulator(demographics).simulate_reading(text)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_simulation)
