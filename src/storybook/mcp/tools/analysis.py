"""Manuscript analysis tools for the MCP server."""

import asyncio
from typing import Any

from mcp.server import FastMCP

from storybook import __version__
from storybook.analyzers import (
    BUILTIN_ANALYZERS,
    CharacterTracker,
    DialogueAnalyzer,
    EmotionalScorer,
    EventAnalyzer,
    ReaderSimulator,
    RepetitionAnalyzer,
    analyze_manuscript,
    suggest_repetition_alternatives,
)
from storybook.config import get_logger, get_settings
from storybook.mcp.utils import format_error, format_success

logger = get_logger(__name__)


def register_analysis_tools(mcp: FastMCP) -> None:
    """Register the analyzer tools with the MCP server.

    Args:
        mcp: FastMCP server instance
    """

    @mcp.tool(name="analyze-characters")
    async def analyze_characters_tool(
        text: str, main_characters: list[str] | None = None
    ) -> dict[str, Any]:
        """Track characters, their locations and continuity errors.

        Args:
            text: Manuscript text
            main_characters: Only track these names when given

        Returns:
            Characters, continuity errors, statistics and suggestions
        """
        try:
            result = await CharacterTracker().run_async(
                text, main_characters=main_characters
            )
            return result.to_dict()
        except Exception as e:
            logger.error("Character analysis tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="analyze-events")
    async def analyze_events_tool(text: str) -> dict[str, Any]:
        """Extract events, the timeline and possible plot holes.

        Args:
            text: Manuscript text

        Returns:
            Events, continuity errors, event chain and suggestions
        """
        try:
            result = await EventAnalyzer().run_async(text)
            return result.to_dict()
        except Exception as e:
            logger.error("Event analysis tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="analyze-emotions")
    async def analyze_emotions_tool(
        text: str, scene_delimiter: str | None = None
    ) -> dict[str, Any]:
        """Score scenes emotionally and suggest pacing changes.

        Args:
            text: Manuscript text
            scene_delimiter: Scene break marker; the configured one when omitted

        Returns:
            Scenes, emotional arc, pacing suggestions and high points
        """
        try:
            result = await EmotionalScorer().run_async(
                text, scene_delimiter=_delimiter(scene_delimiter)
            )
            return result.to_dict()
        except Exception as e:
            logger.error("Emotion analysis tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="analyze-dialogue")
    async def analyze_dialogue_tool(
        text: str, focus_character: str | None = None
    ) -> dict[str, Any]:
        """Attribute dialogue to speakers and review it.

        Args:
            text: Manuscript text
            focus_character: Limit the analysis to this speaker

        Returns:
            Dialogue segments, statistics and general suggestions
        """
        try:
            result = await DialogueAnalyzer().run_async(
                text, focus_character=focus_character
            )
            return result.to_dict()
        except Exception as e:
            logger.error("Dialogue analysis tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="analyze-manuscript")
    async def analyze_manuscript_tool(
        text: str,
        scene_delimiter: str | None = None,
        main_characters: list[str] | None = None,
    ) -> dict[str, Any]:
        """Run character, event, emotion and dialogue analysis together.

        Args:
            text: Manuscript text
            scene_delimiter: Scene break marker; the configured one when omitted
            main_characters: Only track these names when given

        Returns:
            All four analyses, a summary and merged suggestions
        """
        try:
            result = await analyze_manuscript(
                text,
                scene_delimiter=_delimiter(scene_delimiter),
                main_characters=main_characters,
            )
            return result.to_dict()
        except Exception as e:
            logger.error("Manuscript analysis tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="analyze-repetitions")
    async def analyze_repetitions_tool(text: str) -> dict[str, Any]:
        """Find words and phrases repeated close together.

        Args:
            text: Manuscript text

        Returns:
            Repeated words, repeated phrases and statistics
        """
        try:
            result = await RepetitionAnalyzer().run_async(text)
            return result.to_dict()
        except Exception as e:
            logger.error("Repetition analysis tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="suggest-alternatives")
    async def suggest_alternatives_tool(text: str) -> dict[str, Any]:
        """Suggest synonyms for repeated words and phrases.

        Args:
            text: Manuscript text

        Returns:
            Alternatives keyed by repeated term
        """
        try:
            alternatives = await asyncio.to_thread(suggest_repetition_alternatives, text)
            return format_success(
                {
                    term: [s.to_dict() for s in suggestions]
                    for term, suggestions in alternatives.items()
                },
                terms=len(alternatives),
            )
        except Exception as e:
            logger.error("Alternative suggestion tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="simulate-reader")
    async def simulate_reader_tool(
        text: str, demographics: dict[str, Any]
    ) -> dict[str, Any]:
        """Simulate how a reader with the given profile experiences the text.

        Args:
            text: Manuscript text
            demographics: Reader profile with age, educationLevel,
                readingSpeed, attentionSpan, interests, genre_preferences
                and language_proficiency

        Returns:
            Reading timeline, engagement summary and suggestions
        """
        try:
            result = await ReaderSimulator(demographics).run_async(text)
            return result.to_dict()
        except Exception as e:
            logger.error("Reader simulation tool failed", error=str(e))
            return format_error(e)

    @mcp.tool(name="health-check")
    async def health_check_tool() -> dict[str, Any]:
        """Report that the server is up and which analyzers it offers.

        Returns:
            Server status information
        """
        return {
            "status": "ok",
            "version": __version__,
            "analyzers": sorted([*BUILTIN_ANALYZERS, "reader", "thesaurus"]),
        }


def _delimiter(scene_delimiter: str | None) -> str:
    """The requested scene delimiter, or the configured one when omitted."""
    if scene_delimiter is None:
        return get_settings().scene_delimiter
    return scene_delimiter
