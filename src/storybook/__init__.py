"""Storybook: continuity, pacing and readability analysis for manuscripts."""

__version__ = "0.1.0"
__author__ = "Storybook Contributors"

from storybook.analyzers import (
    analyze_characters,
    analyze_dialogue,
    analyze_emotions,
    analyze_events,
    analyze_manuscript,
    analyze_repetitions,
    find_synonyms,
    simulate_reading,
    suggest_repetition_alternatives,
)

__all__ = [
    "__version__",
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
