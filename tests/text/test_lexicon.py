"""Tests for the emotion lexicon and genre keywords."""

import pytest

from storybook.models import EMOTION_AXES
from storybook.text.lexicon import (
    dominant_tone,
    emotion_hits,
    genre_scores,
    lookup_emotion,
    tally,
)


class TestEmotionLexicon:
    """Test lexicon lookups and hit scanning."""

    @pytest.mark.parametrize(
        ("word", "axis"),
        [
            ("happy", "joy"),
            ("smiled", "joy"),
            ("terrified", "fear"),
            ("screaming", "fear"),
            ("tears", "sadness"),
            ("FURIOUS", "anger"),
        ],
    )
    def test_lookup_inflections(self, word, axis):
        assert lookup_emotion(word)[0] == axis

    def test_unknown_word(self):
        assert lookup_emotion("table") is None

    def test_negation_drops_hit(self):
        assert emotion_hits(["she", "was", "not", "happy"]) == []
        assert emotion_hits(["she", "wasn't", "afraid"]) == []

    def test_intensifier_boosts_hit(self):
        plain = emotion_hits(["she", "was", "happy"])[0].weight
        boosted = emotion_hits(["she", "was", "very", "happy"])[0].weight
        assert boosted == pytest.approx(plain * 1.5)

    def test_tally_has_every_axis(self):
        totals = tally(emotion_hits(["happy", "afraid"]))
        assert set(totals) == set(EMOTION_AXES)
        assert totals["joy"] == 1.0
        assert totals["fear"] == 1.0
        assert totals["anger"] == 0.0

    def test_dominant_tone(self):
        assert dominant_tone(["rage", "and", "fury"]) == "anger"
        assert dominant_tone(["the", "table"]) == "neutral"


class TestGenreScores:
    """Test genre keyword counting."""

    def test_counts_keywords(self):
        scores = genre_scores(["the", "detective", "found", "a", "clue", "dragon"])
        assert scores["mystery"] == 2
        assert scores["fantasy"] == 1
        assert scores["romance"] == 0
