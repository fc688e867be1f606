"""Tests for combined manuscript analysis."""

import pytest

from storybook.analyzers import (
    EventAnalyzer,
    analyze_manuscript,
    suggest_repetition_alternatives,
)
from storybook.exceptions import AnalyzerExecutionError

WALKING_STORY = (
    "She walked to the gate. She walked to the well. She walked to the house."
)


class TestAnalyzeManuscript:
    """Test the concurrent run of the four core analyzers."""

    async def test_summary_counts(self, kitchen_story):
        result = await analyze_manuscript(kitchen_story)
        summary = result.summary
        assert summary.character_count == 2
        assert summary.scene_count == 1
        assert summary.dialogue_count == 0
        assert summary.event_count == len(result.events.events)
        assert summary.continuity_errors == len(
            result.characters.continuity_errors
        ) + len(result.events.continuity_errors)

    async def test_dialogue_is_counted(self, dialogue_story):
        result = await analyze_manuscript(dialogue_story)
        assert result.summary.dialogue_count == 3

    async def test_scene_delimiter_is_forwarded(self, three_scene_story):
        result = await analyze_manuscript(three_scene_story, scene_delimiter="***")
        assert result.summary.scene_count == 3

    async def test_main_characters_are_forwarded(self, kitchen_story):
        result = await analyze_manuscript(kitchen_story, main_characters=["Alice"])
        assert [c.name for c in result.characters.characters] == ["Alice"]

    async def test_suggestions_are_unique(self, missing_return_story):
        result = await analyze_manuscript(missing_return_story)
        assert len(result.suggestions) == len(set(result.suggestions))
        for suggestion in result.characters.suggestions:
            assert suggestion in result.suggestions

    async def test_analyzer_failure_is_reported(self, kitchen_story, monkeypatch):
        def explode(self, text, **options):
            raise RuntimeError("boom")

        monkeypatch.setattr(EventAnalyzer, "analyze", explode)
        with pytest.raises(AnalyzerExecutionError) as exc_info:
            await analyze_manuscript(kitchen_story)
        assert exc_info.value.analyzer == "events"
        assert isinstance(exc_info.value.cause, RuntimeError)

    async def test_unexpected_failure_is_wrapped(self, kitchen_story, monkeypatch):
        async def explode(self, text, **options):
            raise RuntimeError("worker lost")

        monkeypatch.setattr(EventAnalyzer, "run_async", explode)
        with pytest.raises(AnalyzerExecutionError) as exc_info:
            await analyze_manuscript(kitchen_story)
        assert exc_info.value.analyzer == "manuscript"

    async def test_serializes_with_camel_case(self, kitchen_story):
        data = (await analyze_manuscript(kitchen_story)).to_dict()
        assert set(data) == {
            "characters",
            "events",
            "emotions",
            "dialogue",
            "summary",
            "suggestions",
        }
        assert "characterCount" in data["summary"]


class TestRepetitionAlternatives:
    """Test synonym lookup for repeated terms."""

    def test_alternatives_for_repeated_word(self):
        alternatives = suggest_repetition_alternatives(WALKING_STORY)
        assert list(alternatives) == ["walked"]
        suggestions = alternatives["walked"]
        assert 0 < len(suggestions) <= 5
        assert all(s.synonyms[0] == "walked" for s in suggestions)

    def test_no_repetition_no_alternatives(self):
        assert suggest_repetition_alternatives("She walked to the gate.") == {}
