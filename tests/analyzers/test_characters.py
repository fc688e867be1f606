"""Tests for the character tracker."""

from storybook.analyzers import CharacterTracker, analyze_characters
from storybook.config import StorybookSettings


def _by_name(result):
    return {c.name: c for c in result.characters}


class TestCharacterTracker:
    """Test character ledger building and continuity checks."""

    def test_empty_text(self):
        result = analyze_characters("")
        assert result.characters == []
        assert result.continuity_errors == []
        assert result.statistics.total_characters == 0

    def test_enter_and_exit(self, kitchen_story):
        result = analyze_characters(kitchen_story)
        characters = _by_name(result)

        alice = characters["Alice"]
        assert [(a.action, a.paragraph) for a in alice.appearances] == [
            ("enter", 1),
            ("mention", 2),
        ]
        bob = characters["Bob"]
        assert [(a.action, a.paragraph) for a in bob.appearances] == [("exit", 2)]
        assert result.continuity_errors == []

    def test_location_tracking(self, kitchen_story):
        alice = _by_name(analyze_characters(kitchen_story))["Alice"]
        assert alice.current_location == "kitchen"
        assert alice.last_mention == 2

    def test_acting_after_exit_is_flagged(self, missing_return_story):
        result = analyze_characters(missing_return_story)
        errors = [e for e in result.continuity_errors if e.type == "character"]
        assert len(errors) == 1
        assert errors[0].severity == "high"
        assert errors[0].paragraph == 5
        assert "Alice" in errors[0].description

    def test_return_clears_exit(self):
        text = "\n\n".join(
            [
                "Alice left the house.",
                "Alice returned to the house.",
                "Alice picked up the knife.",
            ]
        )
        assert analyze_characters(text).continuity_errors == []

    def test_teleport_between_locations(self):
        text = "\n\n".join(
            [
                "Alice entered the kitchen.",
                "Alice stirred the soup in the garden.",
            ]
        )
        errors = analyze_characters(text).continuity_errors
        assert len(errors) == 1
        assert errors[0].severity == "medium"
        assert "garden" in errors[0].description

    def test_main_characters_filter(self, kitchen_story):
        result = analyze_characters(kitchen_story, main_characters=["Alice"])
        assert [c.name for c in result.characters] == ["Alice"]

    def test_attributes_recorded(self):
        result = analyze_characters("Marcus looked tired.")
        assert _by_name(result)["Marcus"].attributes == {"appearance": "tired"}

    def test_statistics(self, kitchen_story):
        statistics = analyze_characters(kitchen_story).statistics
        assert statistics.total_characters == 2
        assert statistics.appearances_per_character == {"Alice": 2, "Bob": 1}
        assert statistics.location_frequency["kitchen"] == 3
        assert statistics.most_frequent_locations[0] == "kitchen"
        assert statistics.character_interactions["Bob"] == ["Alice"]

    def test_serializes_with_camel_case(self, kitchen_story):
        data = analyze_characters(kitchen_story).to_dict()
        assert set(data) == {"characters", "continuityErrors", "statistics", "suggestions"}
        assert "currentLocation" in data["characters"][0]
        assert data["characters"][0]["appearances"][0]["action"] == "enter"

    def test_analyzer_identity(self):
        tracker = CharacterTracker(StorybookSettings())
        assert tracker.name == "characters"
        assert "characters" in repr(tracker)

    def test_repeat_runs_are_independent(self, kitchen_story):
        tracker = CharacterTracker()
        first = tracker.run(kitchen_story)
        second = tracker.run(kitchen_story)
        assert first == second
