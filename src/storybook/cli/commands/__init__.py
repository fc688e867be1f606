"""CLI command implementations."""

from storybook.cli.commands.analyze import (
    analyze_command,
    characters_command,
    dialogue_command,
    emotions_command,
    events_command,
    repetitions_command,
)
from storybook.cli.commands.mcp import mcp_command
from storybook.cli.commands.simulate import simulate_command
from storybook.cli.commands.synonyms import synonyms_command

__all__ = [
    "analyze_command",
    "characters_command",
    "dialogue_command",
    "emotions_command",
    "events_command",
    "mcp_command",
    "repetitions_command",
    "simulate_command",
    "synonyms_command",
]
