"""Dialogue extraction, speaker attribution and dialogue craft hints."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from storybook.analyzers.base import BaseNarrativeAnalyzer, ParagraphView
from storybook.config import get_logger
from storybook.models import DialogueAnalysis, DialogueSegment, DialogueStatistics
from storybook.text import lexicon
from storybook.text.entities import subject_groups
from storybook.text.segmenter import words
from storybook.text.tagger import TokenRole

logger = get_logger(__name__)

_QUOTE = re.compile(
    r'"([^"]*)"'
    r"|“([^”]*)”"
    # Single quotes, where an apostrophe inside a word is not a closing mark
    r"|‘((?:[^’]|’(?=\w))*)’(?!\w)"
    r"|(?<!\w)'(?=\S)((?:[^']|'(?=\w))*)'(?!\w)"
)
_OVERUSE_COUNT = 3
_OVERUSE_MIN_LENGTH = 4
_MIN_TONES = 3
_TONE_SAMPLE = 5
# Words that may sit outside quotes without counting as a narrative beat
_TAG_WORDS = lexicon.SPEECH_VERBS | {"and", "then", "back"}


@dataclass(frozen=True)
class _Quote:
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class _Candidate:
    name: str
    start: int
    end: int
    tagged: bool
    group: int


class DialogueAnalyzer(BaseNarrativeAnalyzer[DialogueAnalysis]):
    """Extract quoted speech and attribute it to speakers."""

    @property
    def name(self) -> str:
        return "dialogue"

    def analyze(
        self, text: str, focus_character: str | None = None, **_: object
    ) -> DialogueAnalysis:
        views = self.read_paragraphs(text)
        segments: list[DialogueSegment] = []
        dialogue_only: list[int] = []

        for view in views:
            quotes = _quotes(view.paragraph.text)
            if not quotes:
                continue
            candidates = self._candidates(view, quotes)
            for index, quote in enumerate(quotes):
                speaker = self._attribute(quotes, index, candidates)
                segments.append(self._segment(quote, speaker, view.number))
            if _is_dialogue_only(view, quotes):
                dialogue_only.append(view.number)

        focus = focus_character.strip() if focus_character else None
        if focus:
            segments = [
                s for s in segments if s.speaker and s.speaker.lower() == focus.lower()
            ]

        statistics = _statistics(segments)
        logger.info(
            "Dialogue analysis complete",
            segments=statistics.total_segments,
            unattributed=statistics.unattributed_segments,
            focus=focus,
        )
        return DialogueAnalysis(
            dialogue_segments=segments,
            statistics=statistics,
            general_suggestions=self._general_suggestions(
                statistics, dialogue_only, focused=bool(focus)
            ),
        )

    @staticmethod
    def _candidates(view: ParagraphView, quotes: Sequence[_Quote]) -> list[_Candidate]:
        """Names outside quoted speech, marked when next to a speech verb.

        Names joined by "and" or commas form one group and share a tag, so
        "Alice and Bob said" tags both of them.
        """
        tokens = view.tokens

        def quoted(position: int) -> bool:
            return any(q.start <= position < q.end for q in quotes)

        def speech_verb(index: int) -> bool:
            return (
                0 <= index < len(tokens)
                and tokens[index].lower in lexicon.SPEECH_VERBS
                and not quoted(tokens[index].start)
            )

        candidates = []
        for group_index, group in enumerate(subject_groups(tokens, view.names)):
            after = group[-1].last_token + 1
            if after < len(tokens) and tokens[after].role is TokenRole.ADVERB:
                after += 1
            tagged = speech_verb(after) or speech_verb(group[0].first_token - 1)
            for span in group:
                start = tokens[span.first_token].start
                if quoted(start):
                    continue
                end = tokens[span.last_token].end
                candidates.append(_Candidate(span.name, start, end, tagged, group_index))
        return candidates

    def _attribute(
        self, quotes: Sequence[_Quote], index: int, candidates: Sequence[_Candidate]
    ) -> str | None:
        """Pick the speaker of one quote, or None when it is ambiguous."""
        quote = quotes[index]
        before_limit = quotes[index - 1].end if index > 0 else 0
        after_limit = quotes[index + 1].start if index + 1 < len(quotes) else None

        following = [
            c
            for c in candidates
            if c.start >= quote.end and (after_limit is None or c.end <= after_limit)
        ]
        preceding = [
            c for c in candidates if before_limit <= c.start and c.end <= quote.start
        ]
        tagged_after = [c for c in following if c.tagged]
        if tagged_after:
            return _sole_name(following, tagged_after[0].group)
        tagged_before = [c for c in preceding if c.tagged]
        if tagged_before:
            return _sole_name(preceding, tagged_before[-1].group)
        if len({c.name for c in preceding}) > 1:
            return None

        limit = self.settings.dialogue_attribution_distance
        distances: dict[str, int] = {}
        for candidate in candidates:
            if candidate.end <= quote.start:
                distance = quote.start - candidate.end
            elif candidate.start >= quote.end:
                distance = candidate.start - quote.end
            else:
                continue
            if distance <= limit:
                distances[candidate.name] = min(
                    distance, distances.get(candidate.name, distance)
                )
        if not distances:
            return None
        best = min(distances.values())
        nearest = [name for name, d in distances.items() if d == best]
        return nearest[0] if len(nearest) == 1 else None

    def _segment(self, quote: _Quote, speaker: str | None, paragraph: int) -> DialogueSegment:
        spoken = words(quote.text)
        suggestions = []
        if len(quote.text) > self.settings.dialogue_long_segment:
            suggestions.append(
                f"This line runs {len(quote.text)} characters; consider breaking it "
                "up with an action beat"
            )
        if speaker is None:
            suggestions.append(
                "Add a dialogue tag or action beat so readers know who is speaking"
            )
        counts = Counter(
            w
            for w in spoken
            if len(w) >= _OVERUSE_MIN_LENGTH and w not in lexicon.STOPWORDS
        )
        for word, count in counts.items():
            if count > _OVERUSE_COUNT:
                suggestions.append(
                    f"'{word}' is used {count} times in this line; consider varying it"
                )
        return DialogueSegment(
            speaker=speaker,
            text=quote.text,
            paragraph=paragraph,
            emotional_tone=lexicon.dominant_tone(spoken),
            suggestions=suggestions,
        )

    def _general_suggestions(
        self,
        statistics: DialogueStatistics,
        dialogue_only: Sequence[int],
        focused: bool,
    ) -> list[str]:
        settings = self.settings
        suggestions = []
        if statistics.unattributed_segments:
            count = statistics.unattributed_segments
            suggestions.append(
                f"{count} dialogue segment{'s' if count != 1 else ''} "
                f"{'have' if count != 1 else 'has'} no clear speaker; add tags or "
                "action beats"
            )
        if not focused:
            for first, last in _runs(dialogue_only):
                if last - first + 1 >= settings.dialogue_run_length:
                    suggestions.append(
                        f"Paragraphs {first}-{last} are dialogue without narrative "
                        "beats; add action or description to ground the exchange"
                    )

            per_character = statistics.segments_per_character
            attributed = sum(per_character.values())
            if len(per_character) >= 2:
                name, count = max(per_character.items(), key=lambda item: item[1])
                share = count / attributed
                if share > settings.dialogue_dominance_share:
                    suggestions.append(
                        f"{name} speaks {share:.0%} of the attributed lines; give "
                        "other characters more of a voice"
                    )
            elif len(per_character) == 1 and statistics.total_segments >= 3:
                name = next(iter(per_character))
                suggestions.append(
                    f"Only {name} has attributed dialogue; consider adding exchanges "
                    "with other characters"
                )

        tones = statistics.emotional_tone_distribution
        if statistics.total_segments >= _TONE_SAMPLE and len(tones) < _MIN_TONES:
            suggestions.append(
                "Dialogue stays in a narrow emotional range; vary the tone to reveal "
                "more of the characters"
            )
        return suggestions


def _quotes(text: str) -> list[_Quote]:
    quotes = []
    for match in _QUOTE.finditer(text):
        inner = next(g for g in match.groups() if g is not None).strip()
        if inner:
            quotes.append(_Quote(inner, match.start(), match.end()))
    return quotes


def _sole_name(candidates: Sequence[_Candidate], group: int) -> str | None:
    """The group's speaker, or None when several names share the tag."""
    names = {c.name for c in candidates if c.group == group}
    return names.pop() if len(names) == 1 else None


def _is_dialogue_only(view: ParagraphView, quotes: Sequence[_Quote]) -> bool:
    """True when everything outside the quotes is tags and names."""
    names = {part.lower() for n in view.unique_names() for part in n.split()}
    for token in view.tokens:
        if not token.is_word or any(q.start <= token.start < q.end for q in quotes):
            continue
        if token.role is TokenRole.PRONOUN:
            continue
        if token.lower not in _TAG_WORDS and token.lower not in names:
            return False
    return True


def _runs(numbers: Sequence[int]) -> list[tuple[int, int]]:
    """Group consecutive paragraph numbers into (first, last) runs."""
    runs: list[tuple[int, int]] = []
    for number in numbers:
        if runs and runs[-1][1] == number - 1:
            runs[-1] = (runs[-1][0], number)
        else:
            runs.append((number, number))
    return runs


def _statistics(segments: Sequence[DialogueSegment]) -> DialogueStatistics:
    per_character: Counter[str] = Counter(s.speaker for s in segments if s.speaker)
    tones: Counter[str] = Counter(s.emotional_tone for s in segments)
    average = (
        round(sum(len(s.text) for s in segments) / len(segments), 2) if segments else 0.0
    )
    return DialogueStatistics(
        total_segments=len(segments),
        segments_per_character=dict(per_character),
        average_length=average,
        emotional_tone_distribution=dict(tones),
        unattributed_segments=sum(1 for s in segments if s.speaker is None),
    )


def analyze_dialogue(
    text: str, focus_character: str | None = None
) -> DialogueAnalysis:
    """Extract and attribute dialogue, optionally for one character only."""
    return DialogueAnalyzer().run(text, focus_character=focus_character)
