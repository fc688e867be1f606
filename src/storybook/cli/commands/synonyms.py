"""Contextual synonym lookup command."""

from typing import Annotated

import typer
from rich.console import Console

from storybook.analyzers import find_synonyms
from storybook.cli.formatters.table_formatter import TableFormatter
from storybook.cli.utils.cli_handler import CLIHandler
from storybook.models import ThesaurusSuggestion


def render_synonyms(console: Console, suggestions: list[ThesaurusSuggestion]) -> None:
    if not suggestions:
        console.print("[yellow]No synonyms known for this term[/yellow]")
        return
    context = suggestions[0].context
    console.print(
        f"Context: tone={context.tone}, formality={context.formality}, "
        f"register={context.text_register}, role={context.grammatical_role}"
    )
    rows = [{"word": s.word, "score": s.score} for s in suggestions]
    console.print(TableFormatter(console, title="Suggestions").format(rows))


def synonyms_command(
    term: Annotated[str, typer.Argument(help="Word or phrase to replace")],
    context: Annotated[
        str, typer.Option("--context", "-x", help="Sentence the term is used in")
    ] = "",
    scene: Annotated[
        str | None, typer.Option("--scene", help="Surrounding scene text")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Suggest synonyms ranked by fit with their context.

    Example:
        storybook synonyms walked --context "She walked slowly to the door."
    """
    handler = CLIHandler()
    try:
        suggestions = find_synonyms(term, context or term, scene_context=scene)
    except Exception as e:
        handler.handle_error(e, json_output)
        return
    handler.output(suggestions, json_output, render_synonyms)
