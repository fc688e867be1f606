"""Scene-level emotional scoring, arc and pacing."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from storybook.analyzers.base import BaseNarrativeAnalyzer, ParagraphView
from storybook.config import get_logger
from storybook.models import (
    EMOTION_AXES,
    ArcPoint,
    EmotionalArc,
    EmotionalHighPoint,
    EmotionalScore,
    EmotionAnalysis,
    Scene,
)
from storybook.text.lexicon import EmotionHit, emotion_hits, tally
from storybook.text.segmenter import SceneSpan, scene_text, split_scenes, split_sentences, words

logger = get_logger(__name__)

_EXCERPT_LENGTH = 120
_TREND_TOLERANCE = 0.05
_MAX_UNIFORM_RUN = 3


@dataclass
class _SceneReading:
    span: SceneSpan
    score: EmotionalScore
    # (hit, paragraph number, sentence text) for every lexicon hit
    hits: list[tuple[EmotionHit, int, str]] = field(default_factory=list)

    @property
    def magnitude(self) -> float:
        return round(self.score.total, 4)


class EmotionalScorer(BaseNarrativeAnalyzer[EmotionAnalysis]):
    """Score each scene on five emotion axes and judge the pacing."""

    @property
    def name(self) -> str:
        return "emotions"

    def analyze(
        self, text: str, scene_delimiter: str | None = None, **_: object
    ) -> EmotionAnalysis:
        delimiter = (
            self.settings.scene_delimiter if scene_delimiter is None else scene_delimiter
        )
        views = self.read_paragraphs(text)
        spans = split_scenes(
            [v.paragraph for v in views],
            delimiter,
            max_length=self.settings.max_scene_paragraphs,
            min_length=self.settings.min_scene_paragraphs,
        )
        readings = [self._read_scene(span, views, delimiter) for span in spans]
        scenes = [self._to_scene(r, views) for r in readings]
        arc = self._arc(readings)

        logger.info(
            "Emotion analysis complete",
            scenes=len(scenes),
            trend=arc.overall_trend,
        )
        return EmotionAnalysis(
            scenes=scenes,
            emotional_arc=arc,
            pacing_suggestions=self._pacing(readings),
            emotional_high_points=self._high_points(readings),
        )

    @staticmethod
    def _read_scene(
        span: SceneSpan, views: Sequence[ParagraphView], delimiter: str | None
    ) -> _SceneReading:
        reading = _SceneReading(span=span, score=EmotionalScore())
        word_count = 0
        for view in views:
            if not span.start_paragraph <= view.number <= span.end_paragraph:
                continue
            for _, sentence in split_sentences(scene_text(view.paragraph, delimiter)):
                sentence_words = words(sentence)
                word_count += len(sentence_words)
                reading.hits.extend(
                    (hit, view.number, sentence) for hit in emotion_hits(sentence_words)
                )
        if word_count:
            totals = tally(hit for hit, _, _ in reading.hits)
            reading.score = EmotionalScore(
                **{axis: round(totals[axis] / word_count * 100, 4) for axis in EMOTION_AXES}
            )
        return reading

    @staticmethod
    def _to_scene(reading: _SceneReading, views: Sequence[ParagraphView]) -> Scene:
        span = reading.span
        inside = [
            v for v in views if span.start_paragraph <= v.number <= span.end_paragraph
        ]
        characters: list[str] = []
        for view in inside:
            characters.extend(n for n in view.unique_names() if n not in characters)
        locations = Counter(v.location for v in inside if v.location)
        location = max(locations, key=locations.__getitem__) if locations else None
        return Scene(
            start_paragraph=span.start_paragraph,
            end_paragraph=span.end_paragraph,
            characters=characters,
            location=location,
            emotional_score=reading.score,
        )

    @staticmethod
    def _arc(readings: Sequence[_SceneReading]) -> EmotionalArc:
        points = [
            ArcPoint(
                scene=index,
                paragraph=r.span.start_paragraph,
                emotions=r.score,
                magnitude=r.magnitude,
            )
            for index, r in enumerate(readings, start=1)
        ]
        if len(readings) < 2:
            return EmotionalArc(points=points)

        magnitudes = [r.magnitude for r in readings]
        mean = sum(magnitudes) / len(magnitudes)
        tolerance = _TREND_TOLERANCE * mean
        slope = _slope(magnitudes)
        if mean == 0 or abs(slope) <= tolerance:
            trend = "flat"
        else:
            trend = "rising" if slope > 0 else "falling"

        dominant_trend = None
        slopes = {
            axis: _slope([getattr(r.score, axis) for r in readings])
            for axis in EMOTION_AXES
        }
        axis = max(EMOTION_AXES, key=lambda a: abs(slopes[a]))
        if mean > 0 and abs(slopes[axis]) > tolerance:
            direction = "increasing" if slopes[axis] > 0 else "decreasing"
            dominant_trend = f"{axis} {direction}"

        return EmotionalArc(
            points=points, overall_trend=trend, dominant_trend=dominant_trend
        )

    def _high_points(
        self, readings: Sequence[_SceneReading]
    ) -> list[EmotionalHighPoint]:
        threshold = self.settings.emotion_highpoint_threshold
        high_points = []
        for reading in readings:
            axis, intensity = reading.score.dominant()
            if intensity < threshold or intensity == 0:
                continue
            strongest = max(
                (h for h in reading.hits if h[0].axis == axis),
                key=lambda h: h[0].weight,
            )
            _, paragraph, sentence = strongest
            high_points.append(
                EmotionalHighPoint(
                    paragraph=paragraph,
                    emotion=axis,
                    intensity=intensity,
                    context=_excerpt(sentence),
                )
            )
        high_points.sort(key=lambda p: p.intensity, reverse=True)
        return high_points

    def _pacing(self, readings: Sequence[_SceneReading]) -> list[str]:
        if len(readings) < 2:
            return []
        settings = self.settings
        magnitudes = [r.magnitude for r in readings]
        suggestions: list[str] = []

        for index, reading in enumerate(readings):
            label = _scene_label(index, reading.span)
            neighbours = [
                magnitudes[i] for i in (index - 1, index + 1) if 0 <= i < len(readings)
            ]
            neighbour_average = sum(neighbours) / len(neighbours)
            if (
                neighbour_average > 0
                and magnitudes[index] < settings.pacing_flat_ratio * neighbour_average
            ):
                suggestions.append(
                    f"{label} is emotionally flat compared to the scenes around it; "
                    "consider raising the stakes or adding internal reaction"
                )
            if index == 0:
                continue
            previous = magnitudes[index - 1]
            _, dominant = reading.score.dominant()
            spikes = (
                previous > 0 and magnitudes[index] > settings.pacing_spike_ratio * previous
            ) or (previous == 0 and dominant >= settings.emotion_highpoint_threshold)
            if spikes:
                suggestions.append(
                    f"{label} spikes in intensity without setup; consider "
                    "foreshadowing or building tension in the preceding scene"
                )

        suggestions.extend(self._uniform_runs(readings))

        dominant_axes = {
            r.score.dominant()[0] for r in readings if r.score.total > 0
        }
        if len(readings) >= 3 and len(dominant_axes) == 1:
            suggestions.append(
                f"Every scene is dominated by {dominant_axes.pop()}; vary the "
                "emotional palette to keep readers engaged"
            )
        return suggestions

    def _uniform_runs(self, readings: Sequence[_SceneReading]) -> list[str]:
        threshold = self.settings.emotion_highpoint_threshold
        levels = []
        for reading in readings:
            _, dominant = reading.score.dominant()
            if dominant >= threshold:
                levels.append("high")
            elif reading.magnitude < threshold / 3:
                levels.append("low")
            else:
                levels.append(None)

        suggestions = []
        start = 0
        for index in range(1, len(levels) + 1):
            if index < len(levels) and levels[index] == levels[start]:
                continue
            length = index - start
            if levels[start] is not None and length > _MAX_UNIFORM_RUN:
                first = readings[start].span.start_paragraph
                last = readings[index - 1].span.end_paragraph
                if levels[start] == "high":
                    suggestions.append(
                        f"Paragraphs {first}-{last} sustain high intensity for "
                        f"{length} scenes; give readers a moment to breathe"
                    )
                else:
                    suggestions.append(
                        f"Paragraphs {first}-{last} stay emotionally quiet for "
                        f"{length} scenes; consider adding tension or conflict"
                    )
            start = index
        return suggestions


def _slope(values: Sequence[float]) -> float:
    """Least-squares slope of values against their index."""
    n = len(values)
    if n < 2:
        return 0.0
    mean_x = (n - 1) / 2
    mean_y = sum(values) / n
    numerator = sum((i - mean_x) * (y - mean_y) for i, y in enumerate(values))
    denominator = sum((i - mean_x) ** 2 for i in range(n))
    return numerator / denominator


def _scene_label(index: int, span: SceneSpan) -> str:
    return (
        f"Scene {index + 1} (paragraphs {span.start_paragraph}-{span.end_paragraph})"
    )


def _excerpt(sentence: str) -> str:
    sentence = " ".join(sentence.split())
    if len(sentence) <= _EXCERPT_LENGTH:
        return sentence
    return sentence[: _EXCERPT_LENGTH - 3].rstrip() + "..."


def analyze_emotions(text: str, scene_delimiter: str | None = None) -> EmotionAnalysis:
    """Score scenes and build the emotional arc.

    Args:
        text: Manuscript text
        scene_delimiter: Scene break marker; the configured default when omitted
    """
    return EmotionalScorer().run(text, scene_delimiter=scene_delimiter)
