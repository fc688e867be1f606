"""Tests for event extraction and event continuity."""

from storybook.analyzers import EventAnalyzer, analyze_events


class TestEventExtraction:
    """Test event detection and the event chain."""

    def test_empty_text(self):
        result = analyze_events("")
        assert result.events == []
        assert result.event_chain.timeline == []
        assert result.suggestions == []

    def test_detects_event_verbs(self):
        result = analyze_events("Marcus opened the door.\n\nThe wind was cold.")
        assert len(result.events) == 1
        event = result.events[0]
        assert event.name == "Marcus opened the door"
        assert event.paragraph == 1
        assert event.characters == ["Marcus"]
        assert event.description == "Marcus opened the door."

    def test_time_connective_with_verb(self):
        result = analyze_events("Later, Nadia walked home.")
        assert len(result.events) == 1
        assert result.events[0].name == "Nadia walked home"
        assert result.events[0].timestamp is None

    def test_timeline_orders_by_story_time(self):
        text = "At noon Anna met Ben at the cafe.\n\nAt 9:00 Anna called Ben."
        result = analyze_events(text)
        timeline = result.event_chain.timeline
        assert [entry.paragraph for entry in timeline] == [2, 1]
        assert [entry.relative_position for entry in timeline] == [0, 1]
        assert timeline[0].timestamp == "9:00"

    def test_going_back_in_time_is_flagged(self):
        text = "At noon Anna met Ben at the cafe.\n\nAt 9:00 Anna called Ben."
        errors = analyze_events(text).continuity_errors
        timeline_errors = [e for e in errors if e.type == "timeline"]
        assert len(timeline_errors) == 1
        assert timeline_errors[0].paragraph == 2
        assert timeline_errors[0].severity == "medium"

    def test_untimed_events_are_unspecified(self):
        result = analyze_events("Marcus opened the door.")
        assert result.event_chain.timeline[0].timestamp == "unspecified"

    def test_sequences_group_adjacent_events(self):
        text = "\n\n".join(
            [
                "Marcus opened the door.",
                "Marcus grabbed the lamp.",
                "The house was silent.",
                "The house was silent.",
                "The house was silent.",
                "Clara called the police.",
            ]
        )
        sequences = analyze_events(text).event_chain.sequences
        assert len(sequences) == 2
        assert sequences[0].start_paragraph == 1
        assert sequences[0].end_paragraph == 2
        assert sequences[0].characters == ["Marcus"]
        assert sequences[1].events == ["Clara called the police"]


class TestEventContinuity:
    """Test event preconditions and plot holes."""

    def test_acting_after_death(self):
        text = "Marcus died in the war.\n\nMarcus opened the door."
        errors = analyze_events(text).continuity_errors
        assert len(errors) == 1
        assert errors[0].type == "event"
        assert errors[0].severity == "high"
        assert errors[0].paragraph == 2

    def test_flashback_after_death_is_allowed(self):
        text = "Marcus died in the war.\n\nYears ago, Marcus opened the door."
        assert analyze_events(text).continuity_errors == []

    def test_using_lost_object(self):
        text = "Sarah lost the key in the river.\n\nSarah unlocked the gate with the key."
        result = analyze_events(text)
        errors = [e for e in result.continuity_errors if e.type == "event"]
        assert len(errors) == 1
        assert errors[0].severity == "medium"
        holes = result.event_chain.possible_plot_holes
        assert holes[0].precondition == "recovery of the key"
        assert holes[0].paragraph == 2

    def test_using_lost_object_with_possessive(self):
        text = "Bob lost his sword.\n\nBob fought the troll with his sword."
        result = analyze_events(text)
        errors = [e for e in result.continuity_errors if e.type == "event"]
        assert len(errors) == 1
        assert errors[0].paragraph == 2
        assert [e.name for e in result.events] == ["Bob lost his sword", "Bob fought the troll"]
        assert result.event_chain.possible_plot_holes[0].events == [
            "Bob lost his sword.",
            "Bob fought the troll",
        ]

    def test_possessive_with_clause_alone_is_not_a_hole(self):
        result = analyze_events("Bob fought the troll with his sword.")
        assert result.event_chain.possible_plot_holes == []

    def test_recovered_object_is_fine(self):
        text = "\n\n".join(
            [
                "Sarah lost the key in the river.",
                "Sarah found the key on the bank.",
                "Sarah unlocked the gate with the key.",
            ]
        )
        result = analyze_events(text)
        assert result.continuity_errors == []
        assert result.event_chain.possible_plot_holes == []

    def test_object_never_introduced(self):
        result = analyze_events("Tom fired the pistol.")
        holes = result.event_chain.possible_plot_holes
        assert len(holes) == 1
        assert holes[0].precondition == "possession of the pistol"
        assert any("possession of the pistol" in s for s in result.suggestions)

    def test_introduced_object_is_not_a_hole(self):
        text = "A pistol lay on the table.\n\nTom fired the pistol."
        assert analyze_events(text).event_chain.possible_plot_holes == []

    def test_serializes_with_camel_case(self):
        data = analyze_events("Tom fired the pistol.").to_dict()
        assert set(data) == {"events", "continuityErrors", "eventChain", "suggestions"}
        assert "possiblePlotHoles" in data["eventChain"]
        assert "relativePosition" in data["eventChain"]["timeline"][0]

    def test_analyzer_name(self):
        assert EventAnalyzer().name == "events"
