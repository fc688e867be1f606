"""Comprehensive manuscript analysis and analyzer chaining."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from storybook.analyzers.characters import CharacterTracker
from storybook.analyzers.dialogue import DialogueAnalyzer
from storybook.analyzers.emotions import EmotionalScorer
from storybook.analyzers.events import EventAnalyzer
from storybook.analyzers.repetition import RepetitionAnalyzer
from storybook.analyzers.thesaurus import ContextualThesaurus
from storybook.config import StorybookSettings, get_logger, get_settings
from storybook.exceptions import AnalyzerExecutionError
from storybook.models import (
    CharacterAnalysis,
    DialogueAnalysis,
    EmotionAnalysis,
    EventAnalysis,
    ManuscriptAnalysis,
    ManuscriptSummary,
    ThesaurusSuggestion,
)

logger = get_logger(__name__)

_MAX_ALTERNATIVES = 5


async def analyze_manuscript(
    text: str,
    scene_delimiter: str | None = None,
    main_characters: Sequence[str] | None = None,
    settings: StorybookSettings | None = None,
) -> ManuscriptAnalysis:
    """Run the character, event, emotion and dialogue analyzers concurrently.

    Args:
        text: Manuscript text
        scene_delimiter: Scene break marker for the emotional scorer
        main_characters: Optional allow-list for the character tracker
        settings: Thresholds shared by every analyzer

    Returns:
        Merged results with a summary and cross-analyzer suggestions

    Raises:
        AnalyzerExecutionError: If any analyzer fails; no partial result is
            returned
    """
    settings = settings or get_settings()
    characters_task = CharacterTracker(settings).run_async(
        text, main_characters=main_characters
    )
    events_task = EventAnalyzer(settings).run_async(text)
    emotions_task = EmotionalScorer(settings).run_async(
        text, scene_delimiter=scene_delimiter
    )
    dialogue_task = DialogueAnalyzer(settings).run_async(text)

    logger.info("Starting manuscript analysis", characters=len(text))
    try:
        characters, events, emotions, dialogue = await asyncio.gather(
            characters_task, events_task, emotions_task, dialogue_task
        )
    except AnalyzerExecutionError:
        raise
    except Exception as e:
        logger.error("Manuscript analysis failed", error=str(e))
        raise AnalyzerExecutionError(
            f"Manuscript analysis failed: {e}",
            analyzer="manuscript",
            cause=e,
        ) from e

    summary = ManuscriptSummary(
        dialogue_count=dialogue.statistics.total_segments,
        scene_count=len(emotions.scenes),
        character_count=len(characters.characters),
        event_count=len(events.events),
        continuity_errors=len(characters.continuity_errors)
        + len(events.continuity_errors),
    )
    logger.info(
        "Manuscript analysis complete",
        scenes=summary.scene_count,
        characters=summary.character_count,
        errors=summary.continuity_errors,
    )
    return ManuscriptAnalysis(
        characters=characters,
        events=events,
        emotions=emotions,
        dialogue=dialogue,
        summary=summary,
        suggestions=_merge_suggestions(characters, events, emotions, dialogue),
    )


def _merge_suggestions(
    characters: CharacterAnalysis,
    events: EventAnalysis,
    emotions: EmotionAnalysis,
    dialogue: DialogueAnalysis,
) -> list[str]:
    suggestions = [
        *characters.suggestions,
        *events.suggestions,
        *emotions.pacing_suggestions,
        *dialogue.general_suggestions,
    ]

    spoken = set(dialogue.statistics.segments_per_character)
    for character in characters.characters:
        if len(character.appearances) >= 3 and character.name not in spoken:
            suggestions.append(
                f"{character.name} appears often but never speaks; consider giving "
                "them dialogue"
            )

    if characters.characters and not events.events:
        suggestions.append(
            "Characters are present but little happens; add plot events to drive "
            "the story"
        )

    high_points = {p.paragraph for p in emotions.emotional_high_points}
    if high_points and not any(
        min(high_points) <= e.paragraph for e in events.events
    ):
        suggestions.append(
            "Emotional peaks are not tied to plot events; anchor strong feelings "
            "to things that happen"
        )
    return list(dict.fromkeys(suggestions))


def suggest_repetition_alternatives(
    text: str, settings: StorybookSettings | None = None
) -> dict[str, list[ThesaurusSuggestion]]:
    """Look up alternatives for each repeated word or phrase.

    The first recorded context of each repetition is used as the passage the
    replacement has to fit, and the whole text as the scene.
    """
    settings = settings or get_settings()
    repetitions = RepetitionAnalyzer(settings).run(text)
    thesaurus = ContextualThesaurus(settings)

    alternatives: dict[str, list[ThesaurusSuggestion]] = {}
    for instance in [*repetitions.repeated_phrases, *repetitions.repeated_words]:
        if not instance.contexts:
            continue
        sample = instance.contexts[0]
        context = f"{sample.before} {sample.term} {sample.after}"
        found = thesaurus.find_synonyms(instance.term, context, scene_context=text)
        if found:
            alternatives[instance.term] = found[:_MAX_ALTERNATIVES]
    logger.info(
        "Repetition alternatives found",
        repetitions=repetitions.statistics.total_repetitions,
        with_alternatives=len(alternatives),
    )
    return alternatives
