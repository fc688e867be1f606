"""Property-based tests for segmentation and the analyzers."""

from hypothesis import given, settings
from hypothesis import strategies as st

from storybook.analyzers import (
    analyze_characters,
    analyze_dialogue,
    analyze_emotions,
    analyze_events,
    analyze_repetitions,
    simulate_reading,
)
from storybook.text.segmenter import split_paragraphs, split_scenes

STORY_TOKENS = [
    "Alice", "Bob", "Dr. Reyes", "she", "he", "the", "kitchen", "house",
    "entered", "left", "walked", "into", "smiled", "said", "asked", "fear",
    "joy", "terror", "knife", "key", "lost", "found", "died", "later",
    "at 9:00", "the next morning", "very", "quietly", '"', "“", "”", ",",
    ".", "!", "?", "\n", "\n\n", "\n\n***\n\n",
]

story_text = st.lists(st.sampled_from(STORY_TOKENS), max_size=120).map(" ".join)
plain_text = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\r"),
    max_size=300,
)

READER = {
    "age": 30,
    "educationLevel": "secondary",
    "readingSpeed": "average",
    "attentionSpan": "short",
    "language_proficiency": "intermediate",
}


class TestSegmentationProperties:
    """Invariants of paragraph and scene splitting."""

    @given(plain_text)
    def test_paragraphs_are_numbered_and_anchored(self, text):
        paragraphs = split_paragraphs(text)
        assert [p.number for p in paragraphs] == list(range(1, len(paragraphs) + 1))
        for paragraph in paragraphs:
            assert paragraph.text
            assert paragraph.text == paragraph.text.strip()
            assert text[paragraph.start : paragraph.start + len(paragraph.text)] == (
                paragraph.text
            )

    @given(
        story_text,
        st.sampled_from([None, "***", "#"]),
        st.integers(min_value=1, max_value=6),
        st.integers(min_value=1, max_value=4),
    )
    def test_scenes_cover_every_paragraph_once(
        self, text, delimiter, max_length, min_length
    ):
        paragraphs = split_paragraphs(text)
        scenes = split_scenes(paragraphs, delimiter, max_length, min_length)
        covered = [
            number
            for scene in scenes
            for number in range(scene.start_paragraph, scene.end_paragraph + 1)
        ]
        assert covered == [p.number for p in paragraphs]


class TestAnalyzerProperties:
    """The analyzers accept any story-like text."""

    @settings(max_examples=40, deadline=None)
    @given(story_text)
    def test_characters_and_events(self, text):
        characters = analyze_characters(text)
        paragraphs = len(split_paragraphs(text))
        for error in characters.continuity_errors:
            assert 1 <= error.paragraph <= paragraphs
        events = analyze_events(text)
        assert len(events.event_chain.timeline) == len(events.events)

    @settings(max_examples=40, deadline=None)
    @given(story_text)
    def test_emotion_scenes_cover_text(self, text):
        result = analyze_emotions(text)
        covered = sum(
            scene.end_paragraph - scene.start_paragraph + 1 for scene in result.scenes
        )
        assert covered == len(split_paragraphs(text))

    @settings(max_examples=40, deadline=None)
    @given(story_text)
    def test_dialogue_statistics(self, text):
        result = analyze_dialogue(text)
        stats = result.statistics
        assert stats.total_segments == len(result.dialogue_segments)
        assert 0 <= stats.unattributed_segments <= stats.total_segments

    @settings(max_examples=40, deadline=None)
    @given(story_text)
    def test_repetitions_meet_minimum(self, text):
        result = analyze_repetitions(text)
        for instance in [*result.repeated_words, *result.repeated_phrases]:
            assert instance.count >= 3
            assert 1 <= len(instance.contexts) <= min(instance.count, 10)

    @settings(max_examples=25, deadline=None)
    @given(story_text)
    def test_reader_levels_stay_in_range(self, text):
        result = simulate_reading(text, READER)
        assert len(result.reading_timeline) == len(split_paragraphs(text))
        for behavior in result.reading_timeline:
            assert 0.0 <= behavior.attention_level <= 1.0
            assert 0.0 <= behavior.comprehension_level <= 1.0

    @settings(max_examples=40, deadline=None)
    @given(story_text)
    def test_character_ledger_is_monotonic(self, text):
        for character in analyze_characters(text).characters:
            paragraphs = [a.paragraph for a in character.appearances]
            assert paragraphs == sorted(paragraphs)
            assert character.last_mention == paragraphs[-1]

    @settings(max_examples=25, deadline=None)
    @given(story_text)
    def test_analysis_is_idempotent(self, text):
        assert analyze_characters(text) == analyze_characters(text)
        assert analyze_emotions(text) == analyze_emotions(text)
        assert analyze_dialogue(text) == analyze_dialogue(text)
