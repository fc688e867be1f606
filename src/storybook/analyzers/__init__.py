"""Narrative analyzers."""

from storybook.analyzers.base import BaseNarrativeAnalyzer, ParagraphView
from storybook.analyzers.characters import CharacterTracker, analyze_characters
from storybook.analyzers.dialogue import DialogueAnalyzer, analyze_dialogue
from storybook.analyzers.emotions import EmotionalScorer, analyze_emotions
from storybook.analyzers.events import EventAnalyzer, analyze_events
from storybook.analyzers.manuscript import (
    analyze_manuscript,
    suggest_repetition_alternatives,
)
from storybook.analyzers.reader import ReaderSimulator, simulate_reading
from storybook.analyzers.repetition import RepetitionAnalyzer, analyze_repetitions
from storybook.analyzers.thesaurus import ContextualThesaurus, find_synonyms

# Text-only analyzers by name
BUILTIN_ANALYZERS: dict[str, type[BaseNarrativeAnalyzer]] = {
    "characters": CharacterTracker,
    "events": EventAnalyzer,
    "emotions": EmotionalScorer,
    "dialogue": DialogueAnalyzer,
    "repetitions": RepetitionAnalyzer,
}

__all__ = [
    "BUILTIN_ANALYZERS",
    "BaseNarrativeAnalyzer",
    "CharacterTracker",
    "ContextualThesaurus",
    "DialogueAnalyzer",
    "EmotionalScorer",
    "EventAnalyzer",
    "ParagraphView",
    "ReaderSimulator",
    "RepetitionAnalyzer",
    "analyze_characters",
    "analyze_dialogue",
    "analyze_emotions",
    "analyze_events",
    "analyze_manuscript",
    "analyze_repetitions",
    "find_synonyms",
    "simulate_reading",
    "suggest_repetition_alternatives",
]
