"""Simulated reading session for a demographic reader profile.

The simulation walks the manuscript one paragraph at a time, carrying the
reader's attention forward. Attention decays with time spent since the last
interesting moment, recovers when a paragraph matches the reader's interests
or carries emotional weight, and suffers when the prose is harder than the
reader can comfortably handle. Sustained low attention tips the reader into
skimming, which speeds them up and costs comprehension.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import pydantic

from storybook.analyzers.base import BaseNarrativeAnalyzer
from storybook.config import StorybookSettings, get_logger
from storybook.exceptions import ValidationError
from storybook.models import (
    EngagementMarker,
    EngagementSummary,
    ReaderDemographics,
    ReaderSimulationResult,
    ReaderSuggestion,
    ReadingBehavior,
    SectionSpan,
)
from storybook.text import lexicon
from storybook.text.segmenter import Paragraph, split_paragraphs, split_sentences, words
from storybook.text.tagger import Tagger

logger = get_logger(__name__)

BASE_WPM = {"slow": 150, "average": 250, "fast": 400}
ATTENTION_SPAN_MINUTES = {"short": 10, "medium": 25, "long": 45}
PROFICIENCY = {"basic": 0.3, "intermediate": 0.6, "advanced": 0.8, "native": 1.0}
EDUCATION = {
    "primary": 0.5,
    "secondary": 0.65,
    "undergraduate": 0.8,
    "postgraduate": 0.9,
    "professional": 0.95,
}

_MIN_WPM = 50
_MAX_WPM = 1000
_SKIM_SPEEDUP = 2.5
_SKIM_COMPREHENSION = 0.4
_SKIM_COMPLETION = 0.3
_PEAK_THRESHOLD = 0.5
_DROP_THRESHOLD = 0.15
_CONFUSION_GAP = 0.2
_SECTION_BREAK = 0.3
_ENGAGING = 0.7
_DISENGAGING = 0.4
_LOW_OVERALL = 0.5
_LONG_PARAGRAPH_WORDS = 200
_MAX_STRUCTURE_HINTS = 5
_SUBORDINATORS = frozenset(
    {"which", "who", "whom", "whose", "that", "because", "although", "though",
     "whereas", "since", "unless", "whenever", "wherever", "if", "while"}
)


@dataclass(frozen=True)
class _ParagraphFeatures:
    paragraph: Paragraph
    word_count: int
    complexity: float
    relevance: float
    impact: float


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class ReaderSimulator(BaseNarrativeAnalyzer[ReaderSimulationResult]):
    """Simulate how one kind of reader moves through a manuscript."""

    def __init__(
        self,
        demographics: ReaderDemographics | Mapping[str, Any],
        settings: StorybookSettings | None = None,
        tagger: Tagger | None = None,
    ) -> None:
        """Initialize the simulator for a reader profile.

        Args:
            demographics: Profile, or a mapping validated into one
            settings: Thresholds to use; the global settings when omitted
            tagger: Tagger implementation; spaCy with ``nlp_model`` when omitted

        Raises:
            ValidationError: If the profile is malformed
        """
        super().__init__(settings=settings, tagger=tagger)
        self.demographics = self._validate(demographics)

    @staticmethod
    def _validate(
        demographics: ReaderDemographics | Mapping[str, Any],
    ) -> ReaderDemographics:
        if isinstance(demographics, ReaderDemographics):
            return demographics
        if not isinstance(demographics, Mapping):
            raise ValidationError(
                "Reader demographics must be a mapping",
                details={"received": type(demographics).__name__},
            )
        try:
            return ReaderDemographics.model_validate(dict(demographics))
        except pydantic.ValidationError as e:
            problems = {
                ".".join(str(part) for part in err["loc"]) or "profile": err["msg"]
                for err in e.errors()
            }
            raise ValidationError(
                "Invalid reader demographics",
                hint="Check age (5-100) and the allowed values for each level",
                details=problems,
            ) from e

    @property
    def name(self) -> str:
        return "reader"

    @property
    def capacity(self) -> float:
        """How much textual complexity this reader absorbs comfortably."""
        profile = self.demographics
        return (
            PROFICIENCY[profile.language_proficiency] + EDUCATION[profile.education_level]
        ) / 2

    def simulate_reading(self, text: str) -> ReaderSimulationResult:
        return self.run(text)

    def analyze(self, text: str, **_: object) -> ReaderSimulationResult:
        paragraphs = split_paragraphs(text)
        if not paragraphs:
            return ReaderSimulationResult(reader_profile=self.demographics)

        features = [self._features(p) for p in paragraphs]
        timeline = self._simulate(features)
        summary = self._summarize(timeline)
        suggestions = self._suggestions(timeline, features, summary)
        logger.info(
            "Reader simulation complete",
            paragraphs=len(timeline),
            engagement=summary.overall_engagement_score,
            completion=summary.reading_completion_rate,
        )
        return ReaderSimulationResult(
            reader_profile=self.demographics,
            reading_timeline=timeline,
            engagement_summary=summary,
            suggestions=suggestions,
        )

    def _features(self, paragraph: Paragraph) -> _ParagraphFeatures:
        paragraph_words = words(paragraph.text)
        count = len(paragraph_words)
        sentences = max(1, len(split_sentences(paragraph.text)))

        if count:
            sentence_length = _clamp(count / sentences / 35)
            long_words = _clamp(
                sum(1 for w in paragraph_words if len(w) >= 8) / count * 3
            )
            clauses = _clamp(
                sum(1 for w in paragraph_words if w in _SUBORDINATORS) / sentences / 2
            )
            complexity = (sentence_length + long_words + clauses) / 3
            emotion = sum(lexicon.tally(lexicon.emotion_hits(paragraph_words)).values())
            impact = _clamp(emotion / count * 10)
        else:
            complexity = impact = 0.0

        return _ParagraphFeatures(
            paragraph=paragraph,
            word_count=count,
            complexity=round(complexity, 4),
            relevance=self._relevance(paragraph_words),
            impact=round(impact, 4),
        )

    def _relevance(self, paragraph_words: Sequence[str]) -> float:
        profile = self.demographics
        interests = [i.lower().strip() for i in profile.interests if i.strip()]
        hits = sum(
            1
            for w in paragraph_words
            for interest in interests
            if w == interest or (len(interest) > 3 and w.startswith(interest))
        )
        genre_scores = lexicon.genre_scores(paragraph_words)
        for genre in profile.genre_preferences:
            hits += genre_scores.get(genre.lower().strip(), 0)
        return round(_clamp(hits * 0.25), 4)

    def _simulate(self, features: Sequence[_ParagraphFeatures]) -> list[ReadingBehavior]:
        settings = self.settings
        profile = self.demographics
        capacity = self.capacity
        span_seconds = ATTENTION_SPAN_MINUTES[profile.attention_span] * 60
        base_wpm = BASE_WPM[profile.reading_speed]

        attention = 1.0
        elapsed = 0.0
        since_peak = 0.0
        low_run = 0
        skimming = False
        timeline: list[ReadingBehavior] = []

        for feature in features:
            overshoot = max(0.0, feature.complexity - capacity)
            wpm = base_wpm * (0.8 + 0.4 * capacity) * (1 - 0.5 * overshoot)
            if skimming:
                wpm *= _SKIM_SPEEDUP
            wpm = _clamp(wpm, _MIN_WPM, _MAX_WPM)
            seconds = feature.word_count / wpm * 60
            elapsed += seconds
            since_peak += seconds

            markers: list[EngagementMarker] = []
            decay = 0.5 * seconds / span_seconds * (1 + since_peak / span_seconds)
            boost = 0.3 * feature.relevance + 0.25 * feature.impact
            previous = attention
            attention = _clamp(attention - decay + boost - 0.15 * overshoot)

            peak = max(feature.relevance, feature.impact)
            if peak >= _PEAK_THRESHOLD:
                since_peak = 0.0
                markers.append(
                    EngagementMarker(
                        type="interest_peak",
                        description="Content matches the reader's interests"
                        if feature.relevance >= feature.impact
                        else "Emotionally charged passage holds attention",
                        intensity=round(_clamp(peak), 4),
                    )
                )
            if previous - attention > _DROP_THRESHOLD:
                markers.append(
                    EngagementMarker(
                        type="attention_drop",
                        description="Attention falls noticeably",
                        intensity=round(_clamp(previous - attention), 4),
                    )
                )
            if overshoot > _CONFUSION_GAP:
                markers.append(
                    EngagementMarker(
                        type="confusion",
                        description="Prose is harder than this reader handles comfortably",
                        intensity=round(_clamp(overshoot * 2), 4),
                    )
                )

            low_run = low_run + 1 if attention < settings.skim_attention_threshold else 0
            if not skimming and low_run >= settings.skim_sustain_paragraphs:
                skimming = True
                markers.append(
                    EngagementMarker(
                        type="skimming_start",
                        description="Reader starts skimming",
                        intensity=round(1 - attention, 4),
                    )
                )
            elif skimming and attention >= (
                settings.skim_attention_threshold + settings.skim_recovery_margin
            ):
                skimming = False
                markers.append(
                    EngagementMarker(
                        type="skimming_end",
                        description="Reader re-engages and stops skimming",
                        intensity=round(attention, 4),
                    )
                )

            comprehension = _clamp(1 - 1.5 * overshoot) * (0.5 + 0.5 * attention)
            if skimming:
                comprehension *= _SKIM_COMPREHENSION

            timeline.append(
                ReadingBehavior(
                    elapsed_time=round(elapsed, 2),
                    paragraph_number=feature.paragraph.number,
                    attention_level=round(attention, 4),
                    comprehension_level=round(_clamp(comprehension), 4),
                    is_skimming=skimming,
                    reading_speed_wpm=round(wpm, 1),
                    engagement_markers=markers,
                )
            )
        return timeline

    @staticmethod
    def _summarize(timeline: Sequence[ReadingBehavior]) -> EngagementSummary:
        sections = _sections(timeline)
        skimmed = [
            _span(run) for run in _runs(timeline, lambda b: b.is_skimming)
        ]
        count = len(timeline)
        skim_count = sum(1 for b in timeline if b.is_skimming)
        return EngagementSummary(
            most_engaging_sections=sorted(
                (s for s in sections if s.score > _ENGAGING),
                key=lambda s: s.score,
                reverse=True,
            ),
            least_engaging_sections=sorted(
                (s for s in sections if s.score < _DISENGAGING), key=lambda s: s.score
            ),
            skimmed_sections=skimmed,
            overall_engagement_score=round(
                sum(b.attention_level for b in timeline) / count, 4
            ),
            reading_completion_rate=round(
                (count - skim_count + _SKIM_COMPLETION * skim_count) / count, 4
            ),
            average_comprehension=round(
                sum(b.comprehension_level for b in timeline) / count, 4
            ),
        )

    def _suggestions(
        self,
        timeline: Sequence[ReadingBehavior],
        features: Sequence[_ParagraphFeatures],
        summary: EngagementSummary,
    ) -> list[ReaderSuggestion]:
        settings = self.settings
        suggestions: list[ReaderSuggestion] = []

        for run in _runs(timeline, lambda b: b.is_skimming):
            if len(run) >= settings.long_skim_paragraphs:
                first, last = run[0].paragraph_number, run[-1].paragraph_number
                suggestions.append(
                    ReaderSuggestion(
                        type="pacing",
                        description=(
                            f"This reader skims paragraphs {first}-{last}; tighten "
                            "the pacing or add a hook to hold attention"
                        ),
                        paragraph_range=(first, last),
                        priority=(
                            "high" if len(run) >= 2 * settings.long_skim_paragraphs else "medium"
                        ),
                    )
                )

        low = settings.low_comprehension_threshold
        for run in _runs(timeline, lambda b: b.comprehension_level < low):
            if len(run) >= settings.low_comprehension_paragraphs:
                first, last = run[0].paragraph_number, run[-1].paragraph_number
                suggestions.append(
                    ReaderSuggestion(
                        type="complexity",
                        description=(
                            f"Comprehension stays low across paragraphs {first}-{last}; "
                            "simplify sentences or vocabulary for this audience"
                        ),
                        paragraph_range=(first, last),
                        priority="high",
                    )
                )

        if summary.overall_engagement_score < _LOW_OVERALL:
            suggestions.append(
                ReaderSuggestion(
                    type="engagement",
                    description=(
                        "Overall engagement is low for this reader; consider more "
                        "content that matches their interests or raises the stakes"
                    ),
                    priority="medium",
                )
            )

        long_paragraphs = [
            f for f in features if f.word_count > _LONG_PARAGRAPH_WORDS
        ][:_MAX_STRUCTURE_HINTS]
        for feature in long_paragraphs:
            number = feature.paragraph.number
            suggestions.append(
                ReaderSuggestion(
                    type="structure",
                    description=(
                        f"Paragraph {number} runs {feature.word_count} words; "
                        "consider splitting it"
                    ),
                    paragraph_range=(number, number),
                    priority="low",
                )
            )
        return suggestions


def _runs(
    timeline: Sequence[ReadingBehavior], predicate: Callable[[ReadingBehavior], bool]
) -> list[list[ReadingBehavior]]:
    """Maximal runs of consecutive samples satisfying ``predicate``."""
    runs: list[list[ReadingBehavior]] = []
    current: list[ReadingBehavior] = []
    for behavior in timeline:
        if predicate(behavior):
            current.append(behavior)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


def _sections(timeline: Sequence[ReadingBehavior]) -> list[SectionSpan]:
    sections: list[SectionSpan] = []
    current: list[ReadingBehavior] = []
    for behavior in timeline:
        if current and (
            abs(behavior.attention_level - current[-1].attention_level) > _SECTION_BREAK
            or behavior.is_skimming != current[-1].is_skimming
        ):
            sections.append(_span(current))
            current = []
        current.append(behavior)
    if current:
        sections.append(_span(current))
    return sections


def _span(run: Sequence[ReadingBehavior]) -> SectionSpan:
    return SectionSpan(
        start_paragraph=run[0].paragraph_number,
        end_paragraph=run[-1].paragraph_number,
        score=round(sum(b.attention_level for b in run) / len(run), 4),
    )


def simulate_reading(
    text: str, demographics: ReaderDemographics | Mapping[str, Any]
) -> ReaderSimulationResult:
    """Simulate a reading session for the given reader profile."""
    return ReaderSimulator(demographics).simulate_reading(text)
