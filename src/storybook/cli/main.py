"""Main CLI entry point."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from storybook import __version__
from storybook.analyzers import BUILTIN_ANALYZERS
from storybook.cli.commands import (
    analyze_command,
    characters_command,
    dialogue_command,
    emotions_command,
    events_command,
    mcp_command,
    repetitions_command,
    simulate_command,
    synonyms_command,
)
from storybook.cli.formatters.json_formatter import JsonFormatter
from storybook.config import (
    clear_settings_cache,
    configure_logging,
    get_logger,
    get_settings,
    get_settings_for_cli,
    set_settings,
)

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="storybook",
    help="Narrative analysis for fiction manuscripts",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="analyze")(analyze_command)
app.command(name="characters")(characters_command)
app.command(name="events")(events_command)
app.command(name="emotions")(emotions_command)
app.command(name="dialogue")(dialogue_command)
app.command(name="repetitions")(repetitions_command)
app.command(name="synonyms")(synonyms_command)
app.command(name="simulate")(simulate_command)
app.command(name="mcp")(mcp_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show Storybook version."""
    version_info = {
        "name": "Storybook",
        "version": __version__,
        "analyzers": sorted(BUILTIN_ANALYZERS),
    }

    if json_output:
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"Storybook v{version_info['version']}")


def _reconfigure_logging(level: str) -> None:
    os.environ["STORYBOOK_LOG_LEVEL"] = level
    clear_settings_cache()
    configure_logging(get_settings())


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            envvar="STORYBOOK_CONFIG",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging", envvar="STORYBOOK_DEBUG"),
    ] = False,
) -> None:
    """Configure global options."""
    if debug:
        _reconfigure_logging("DEBUG")
        logger.debug("Debug mode enabled")
    elif verbose:
        _reconfigure_logging("INFO")
        logger.info("Verbose mode enabled")

    if config:
        try:
            settings = get_settings_for_cli(config_file=config)
        except Exception as e:
            console.print(f"[red]Error: Failed to load configuration: {e}[/red]")
            raise typer.Exit(1) from e
        set_settings(settings)
        configure_logging(settings)
        logger.debug("Configuration loaded", path=str(config))


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
