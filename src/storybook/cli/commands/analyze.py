"""Manuscript analysis commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from storybook.analyzers import (
    analyze_characters,
    analyze_dialogue,
    analyze_emotions,
    analyze_events,
    analyze_manuscript,
    analyze_repetitions,
)
from storybook.cli.formatters.table_formatter import TableFormatter
from storybook.cli.utils.cli_handler import CLIHandler
from storybook.config import get_logger
from storybook.models import (
    EMOTION_AXES,
    CharacterAnalysis,
    ContinuityError,
    DialogueAnalysis,
    EmotionAnalysis,
    EventAnalysis,
    ManuscriptAnalysis,
    RepetitionAnalysis,
)

logger = get_logger(__name__)

ManuscriptArg = Annotated[
    Path | None,
    typer.Argument(help="Manuscript file; reads stdin when omitted", show_default=False),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]
DelimiterOption = Annotated[
    str | None,
    typer.Option("--delimiter", "-d", help="Scene delimiter line (default: ***)"),
]
CharacterOption = Annotated[
    list[str] | None,
    typer.Option("--character", "-C", help="Only track this character (repeatable)"),
]


def _table(console: Console, rows: list[dict[str, Any]], title: str) -> None:
    if rows:
        console.print(TableFormatter(console, title=title).format(rows))


def _suggestions(
    console: Console, suggestions: list[str], title: str = "Suggestions"
) -> None:
    if suggestions:
        console.print(f"\n[bold cyan]{title}[/bold cyan]")
        for suggestion in suggestions:
            console.print(f"  • {suggestion}")


def _errors(console: Console, errors: list[ContinuityError]) -> None:
    _table(
        console,
        [
            {
                "paragraph": e.paragraph,
                "type": e.type,
                "severity": e.severity,
                "description": e.description,
            }
            for e in errors
        ],
        "Continuity Errors",
    )


def render_characters(console: Console, result: CharacterAnalysis) -> None:
    _table(
        console,
        [
            {
                "name": c.name,
                "location": c.current_location,
                "appearances": len(c.appearances),
                "last_mention": c.last_mention,
            }
            for c in result.characters
        ],
        "Characters",
    )
    if not result.characters:
        console.print("[yellow]No characters found[/yellow]")
    _errors(console, result.continuity_errors)
    _suggestions(console, result.suggestions)


def render_events(console: Console, result: EventAnalysis) -> None:
    _table(
        console,
        [
            {
                "paragraph": e.paragraph,
                "event": e.name,
                "characters": e.characters,
                "location": e.location,
                "time": e.timestamp,
            }
            for e in result.events
        ],
        "Events",
    )
    if not result.events:
        console.print("[yellow]No events found[/yellow]")
    _errors(console, result.continuity_errors)
    _table(
        console,
        [
            {
                "paragraph": h.paragraph,
                "precondition": h.precondition,
                "description": h.description,
            }
            for h in result.event_chain.possible_plot_holes
        ],
        "Possible Plot Holes",
    )
    _suggestions(console, result.suggestions)


def render_emotions(console: Console, result: EmotionAnalysis) -> None:
    _table(
        console,
        [
            {
                "scene": index,
                "paragraphs": f"{s.start_paragraph}-{s.end_paragraph}",
                **{axis: getattr(s.emotional_score, axis) for axis in EMOTION_AXES},
            }
            for index, s in enumerate(result.scenes, start=1)
        ],
        "Scenes",
    )
    arc = result.emotional_arc
    console.print(
        f"\nOverall trend: [bold]{arc.overall_trend}[/bold]"
        + (f" ({arc.dominant_trend})" if arc.dominant_trend else "")
    )
    _table(
        console,
        [
            {
                "paragraph": p.paragraph,
                "emotion": p.emotion,
                "intensity": p.intensity,
                "context": p.context,
            }
            for p in result.emotional_high_points
        ],
        "High Points",
    )
    _suggestions(console, result.pacing_suggestions, "Pacing")


def render_dialogue(console: Console, result: DialogueAnalysis) -> None:
    _table(
        console,
        [
            {
                "paragraph": s.paragraph,
                "speaker": s.speaker or "?",
                "tone": s.emotional_tone,
                "text": s.text if len(s.text) <= 60 else s.text[:57] + "...",
            }
            for s in result.dialogue_segments
        ],
        "Dialogue",
    )
    stats = result.statistics
    console.print(
        f"\nSegments: {stats.total_segments}  Unattributed: "
        f"{stats.unattributed_segments}  Average length: {stats.average_length}"
    )
    _suggestions(console, result.general_suggestions)


def render_repetitions(console: Console, result: RepetitionAnalysis) -> None:
    for title, instances in (
        ("Repeated Words", result.repeated_words),
        ("Repeated Phrases", result.repeated_phrases),
    ):
        _table(
            console,
            [
                {
                    "term": r.term,
                    "count": r.count,
                    "first_position": r.contexts[0].position if r.contexts else None,
                }
                for r in instances
            ],
            title,
        )
    if not result.statistics.total_repetitions:
        console.print("[green]No close repetitions found[/green]")


def render_manuscript(console: Console, result: ManuscriptAnalysis) -> None:
    summary = result.summary
    console.print("[bold cyan]Manuscript Summary[/bold cyan]")
    console.print(f"  Scenes: {summary.scene_count}")
    console.print(f"  Characters: {summary.character_count}")
    console.print(f"  Events: {summary.event_count}")
    console.print(f"  Dialogue segments: {summary.dialogue_count}")
    console.print(f"  Continuity errors: {summary.continuity_errors}")
    _errors(
        console, [*result.characters.continuity_errors, *result.events.continuity_errors]
    )
    _suggestions(console, result.suggestions)


def characters_command(
    manuscript: ManuscriptArg = None,
    character: CharacterOption = None,
    json_output: JsonOption = False,
) -> None:
    """Track characters and report continuity errors."""
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        result = analyze_characters(text, main_characters=character)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_characters)


def events_command(
    manuscript: ManuscriptArg = None,
    json_output: JsonOption = False,
) -> None:
    """Extract events, the timeline and possible plot holes."""
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        result = analyze_events(text)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_events)


def emotions_command(
    manuscript: ManuscriptArg = None,
    delimiter: DelimiterOption = None,
    json_output: JsonOption = False,
) -> None:
    """Score scenes emotionally and review pacing."""
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        result = analyze_emotions(text, scene_delimiter=delimiter)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_emotions)


def dialogue_command(
    manuscript: ManuscriptArg = None,
    focus: Annotated[
        str | None, typer.Option("--focus", "-f", help="Only this speaker's lines")
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Attribute dialogue to speakers and review it."""
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        result = analyze_dialogue(text, focus_character=focus)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_dialogue)


def repetitions_command(
    manuscript: ManuscriptArg = None,
    json_output: JsonOption = False,
) -> None:
    """Find words and phrases repeated close together."""
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        result = analyze_repetitions(text)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_repetitions)


def analyze_command(
    manuscript: ManuscriptArg = None,
    delimiter: DelimiterOption = None,
    character: CharacterOption = None,
    json_output: JsonOption = False,
) -> None:
    """Run the full manuscript analysis.

    Characters, events, emotions and dialogue are analyzed concurrently and
    merged into one report.

    Example:
        storybook analyze chapter1.txt
        cat draft.txt | storybook analyze --json
    """
    handler = CLIHandler()
    text = handler.read_manuscript(manuscript)
    try:
        result = asyncio.run(
            analyze_manuscript(text, scene_delimiter=delimiter, main_characters=character)
        )
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(result, json_output, render_manuscript)
