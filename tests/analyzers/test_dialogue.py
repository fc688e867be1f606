"""Tests for dialogue extraction and attribution."""

from storybook.analyzers import DialogueAnalyzer, analyze_dialogue
from storybook.config import StorybookSettings


class TestDialogueAttribution:
    """Test speaker attribution."""

    def test_empty_text(self):
        result = analyze_dialogue("")
        assert result.dialogue_segments == []
        assert result.statistics.total_segments == 0
        assert result.statistics.average_length == 0.0
        assert result.general_suggestions == []

    def test_tag_after_quote(self):
        segment = analyze_dialogue('"I will not go," Alice said.').dialogue_segments[0]
        assert segment.speaker == "Alice"
        assert segment.text == "I will not go,"
        assert segment.paragraph == 1

    def test_tag_before_quote(self):
        segment = analyze_dialogue('Bob said, "Come inside."').dialogue_segments[0]
        assert segment.speaker == "Bob"

    def test_adverb_between_name_and_verb(self):
        segment = analyze_dialogue('"Hush," Clara quietly whispered.').dialogue_segments[0]
        assert segment.speaker == "Clara"

    def test_curly_quotes(self):
        segment = analyze_dialogue("“Run,” Mira shouted.").dialogue_segments[0]
        assert segment.speaker == "Mira"
        assert segment.text == "Run,"

    def test_unattributed_line(self, dialogue_story):
        segments = analyze_dialogue(dialogue_story).dialogue_segments
        assert [s.speaker for s in segments] == ["Bob", "Alice", None]
        assert any("who is speaking" in s for s in segments[2].suggestions)

    def test_tie_is_left_unattributed(self):
        # Ann and Bob sit equally far from the quote
        result = analyze_dialogue('Ann, "Yes", Bob.')
        assert result.dialogue_segments[0].speaker is None

    def test_single_quotes(self):
        segments = analyze_dialogue("Alice said, 'Run now.'").dialogue_segments
        assert len(segments) == 1
        assert segments[0].speaker == "Alice"
        assert segments[0].text == "Run now."

    def test_curly_single_quotes_keep_apostrophes(self):
        segments = analyze_dialogue("‘I don’t know,’ Mira said.").dialogue_segments
        assert [s.text for s in segments] == ["I don’t know,"]
        assert segments[0].speaker == "Mira"

    def test_apostrophes_are_not_quotes(self):
        text = "Alice's coat hung by the door. Bob didn't touch it."
        assert analyze_dialogue(text).dialogue_segments == []

    def test_joint_tag_is_unattributed(self):
        segment = analyze_dialogue('"We must go," Alice and Bob said.').dialogue_segments[0]
        assert segment.speaker is None

    def test_several_untagged_names_before_quote(self):
        text = 'Alice turned to Bob and Carol. "Who took it?"'
        segment = analyze_dialogue(text).dialogue_segments[0]
        assert segment.speaker is None


class TestDialogueStatistics:
    """Test statistics and suggestions."""

    def test_statistics(self, dialogue_story):
        statistics = analyze_dialogue(dialogue_story).statistics
        assert statistics.total_segments == 3
        assert statistics.unattributed_segments == 1
        assert statistics.segments_per_character == {"Bob": 1, "Alice": 1}
        assert statistics.average_length == round(
            (len("Where were you?") + len("Out,") + len("Somewhere.")) / 3, 2
        )

    def test_unattributed_suggestion(self, dialogue_story):
        suggestions = analyze_dialogue(dialogue_story).general_suggestions
        assert any("1 dialogue segment has no clear speaker" in s for s in suggestions)

    def test_focus_character(self, dialogue_story):
        result = analyze_dialogue(dialogue_story, focus_character="alice")
        assert [s.speaker for s in result.dialogue_segments] == ["Alice"]
        assert result.statistics.total_segments == 1

    def test_long_line(self):
        line = "word " * 60
        text = f'"{line.strip()}," Alice said.'
        segment = analyze_dialogue(text).dialogue_segments[0]
        assert any("consider breaking it up" in s for s in segment.suggestions)

    def test_overused_word_in_line(self):
        text = '"Faster, faster, faster, faster, or we lose them," Alice said.'
        segment = analyze_dialogue(text).dialogue_segments[0]
        assert any("'faster' is used 4 times" in s for s in segment.suggestions)

    def test_dialogue_without_beats(self):
        lines = [
            '"Ready?" Alice asked.',
            '"Yes," Bob said.',
            '"Now?" Alice asked.',
            '"Now," Bob said.',
        ]
        suggestions = analyze_dialogue("\n\n".join(lines)).general_suggestions
        assert any("Paragraphs 1-4 are dialogue without narrative beats" in s for s in suggestions)

    def test_dominant_speaker(self):
        lines = ['"Line," Alice said.'] * 4 + ['"Reply," Bob said.']
        suggestions = analyze_dialogue("\n\nAlice paced.\n\n".join(lines)).general_suggestions
        assert any("Alice speaks 80%" in s for s in suggestions)

    def test_tone(self):
        segment = analyze_dialogue('"I am so happy!" Alice said.').dialogue_segments[0]
        assert segment.emotional_tone == "joy"

    def test_attribution_distance_from_settings(self):
        text = 'Alice stood by the window for a long while. "Hello."'
        near = DialogueAnalyzer(StorybookSettings(dialogue_attribution_distance=80))
        far = DialogueAnalyzer(StorybookSettings(dialogue_attribution_distance=5))
        assert near.run(text).dialogue_segments[0].speaker == "Alice"
        assert far.run(text).dialogue_segments[0].speaker is None

    def test_serializes_with_camel_case(self, dialogue_story):
        data = analyze_dialogue(dialogue_story).to_dict()
        assert set(data) == {"dialogueSegments", "statistics", "generalSuggestions"}
        assert data["dialogueSegments"][2]["speaker"] is None
        assert "unattributedSegments" in data["statistics"]
