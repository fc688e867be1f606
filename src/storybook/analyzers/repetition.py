"""Word and phrase repetition within a proximity window."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

from storybook.analyzers.base import BaseNarrativeAnalyzer
from storybook.config import get_logger
from storybook.models import (
    PhraseContext,
    RepetitionAnalysis,
    RepetitionInstance,
    RepetitionStatistics,
    TermCount,
)
from storybook.text.lexicon import STOPWORDS
from storybook.text.segmenter import split_sentences, word_spans

logger = get_logger(__name__)

_MIN_WORD_LENGTH = 3
_MIN_PHRASE_WORDS = 2
_MAX_PHRASE_WORDS = 5


@dataclass(frozen=True)
class _Word:
    index: int
    sentence: int
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class _Occurrence:
    index: int
    start: int
    end: int


class RepetitionAnalyzer(BaseNarrativeAnalyzer[RepetitionAnalysis]):
    """Find words and phrases repeated close together."""

    @property
    def name(self) -> str:
        return "repetitions"

    def analyze(self, text: str, **_: object) -> RepetitionAnalysis:
        tokens = _tokenize(text)

        word_occurrences: dict[str, list[_Occurrence]] = defaultdict(list)
        for token in tokens:
            if len(token.text) >= _MIN_WORD_LENGTH and token.text not in STOPWORDS:
                word_occurrences[token.text].append(
                    _Occurrence(token.index, token.start, token.end)
                )

        phrase_occurrences: dict[str, list[_Occurrence]] = defaultdict(list)
        for size in range(_MIN_PHRASE_WORDS, _MAX_PHRASE_WORDS + 1):
            for i in range(len(tokens) - size + 1):
                gram = tokens[i : i + size]
                if gram[0].sentence != gram[-1].sentence:
                    continue
                if all(t.text in STOPWORDS for t in gram):
                    continue
                phrase = " ".join(t.text for t in gram)
                phrase_occurrences[phrase].append(
                    _Occurrence(gram[0].index, gram[0].start, gram[-1].end)
                )

        repeated_words = self._instances(text, word_occurrences, is_phrase=False)
        repeated_phrases = _drop_contained(
            self._instances(text, phrase_occurrences, is_phrase=True)
        )

        statistics = RepetitionStatistics(
            total_repetitions=len(repeated_words) + len(repeated_phrases),
            most_frequent_word=_top(repeated_words),
            most_frequent_phrase=_top(repeated_phrases),
        )
        logger.info(
            "Repetition analysis complete",
            words=len(repeated_words),
            phrases=len(repeated_phrases),
        )
        return RepetitionAnalysis(
            repeated_words=repeated_words,
            repeated_phrases=repeated_phrases,
            statistics=statistics,
        )

    def _instances(
        self,
        text: str,
        occurrences: dict[str, list[_Occurrence]],
        is_phrase: bool,
    ) -> list[RepetitionInstance]:
        settings = self.settings
        found: list[tuple[int, RepetitionInstance]] = []
        for term, spots in occurrences.items():
            if len(spots) < settings.repetition_min_count:
                continue
            flagged = _within_window(
                spots, settings.repetition_min_count, settings.repetition_window
            )
            if not flagged:
                continue
            contexts = [
                _context(text, spot, settings.repetition_context_width)
                for spot in flagged[: settings.repetition_max_contexts]
            ]
            found.append(
                (
                    flagged[0].start,
                    RepetitionInstance(
                        term=term,
                        count=len(flagged),
                        contexts=contexts,
                        is_phrase=is_phrase,
                    ),
                )
            )
        found.sort(key=lambda item: (-item[1].count, item[0]))
        return [instance for _, instance in found]


def _tokenize(text: str) -> list[_Word]:
    tokens: list[_Word] = []
    for sentence_number, (offset, sentence) in enumerate(split_sentences(text)):
        for start, word in word_spans(sentence):
            begin = offset + start
            tokens.append(
                _Word(len(tokens), sentence_number, begin, begin + len(word), word)
            )
    return tokens


def _within_window(
    spots: Sequence[_Occurrence], min_count: int, window: int
) -> list[_Occurrence]:
    """Occurrences that share a window of ``window`` words with enough others."""
    flagged = [False] * len(spots)
    for first in range(len(spots) - min_count + 1):
        last = first + min_count - 1
        if spots[last].index - spots[first].index < window:
            for k in range(first, last + 1):
                flagged[k] = True
    return [spot for spot, hit in zip(spots, flagged) if hit]


def _context(text: str, spot: _Occurrence, width: int) -> PhraseContext:
    before = text[max(0, spot.start - width) : spot.start]
    after = text[spot.end : spot.end + width]
    return PhraseContext(
        before=" ".join(before.split()),
        term=text[spot.start : spot.end],
        after=" ".join(after.split()),
        position=spot.start,
    )


def _drop_contained(phrases: list[RepetitionInstance]) -> list[RepetitionInstance]:
    """Drop phrases that only ever occur inside a longer repeated phrase."""
    kept = []
    for phrase in phrases:
        padded = f" {phrase.term} "
        covered = any(
            other.count == phrase.count
            and len(other.term) > len(phrase.term)
            and padded in f" {other.term} "
            for other in phrases
        )
        if not covered:
            kept.append(phrase)
    return kept


def _top(instances: Sequence[RepetitionInstance]) -> TermCount | None:
    if not instances:
        return None
    return TermCount(term=instances[0].term, count=instances[0].count)


def analyze_repetitions(text: str) -> RepetitionAnalysis:
    """Report words and phrases repeated within the proximity window."""
    return RepetitionAnalyzer().run(text)
