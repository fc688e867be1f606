"""Tests for time expression parsing and the story clock."""

from storybook.text.timeparse import TimeCursor, TimeMarker, extract_time_marker


class TestExtractTimeMarker:
    """Test time marker extraction."""

    def test_no_time(self):
        assert extract_time_marker("Nothing happened.") is None

    def test_clock_time_with_suffix(self):
        marker = extract_time_marker("At 9:30 p.m. the lights went out.")
        assert marker.minute == 21 * 60 + 30
        assert marker.label == "9:30 p.m."

    def test_twenty_four_hour_clock(self):
        assert extract_time_marker("By 14:05 it was over.").minute == 14 * 60 + 5

    def test_day_part(self):
        marker = extract_time_marker("That evening they ate.")
        assert marker.minute == 19 * 60
        assert marker.day_shift == 0

    def test_next_day(self):
        marker = extract_time_marker("The next morning, they left.")
        assert marker.day_shift == 1
        assert marker.minute == 9 * 60
        assert marker.label == "The next morning"

    def test_days_later(self):
        assert extract_time_marker("Three days later she returned.").day_shift == 3
        assert extract_time_marker("A week later it rained.").day_shift == 7

    def test_flashback(self):
        marker = extract_time_marker("Years ago, she had lived here.")
        assert marker.flashback

    def test_weekday(self):
        assert extract_time_marker("On Friday they met.").weekday == 4


class TestTimeCursor:
    """Test the running story clock."""

    def test_no_marker_keeps_position(self):
        cursor = TimeCursor()
        point = cursor.advance(None)
        assert (point.day, point.minute, point.reversed) == (0, None, False)

    def test_forward_in_day(self):
        cursor = TimeCursor()
        cursor.advance(TimeMarker("morning", minute=540))
        point = cursor.advance(TimeMarker("evening", minute=1140))
        assert (point.day, point.minute, point.reversed) == (0, 1140, False)

    def test_overnight_rollover(self):
        cursor = TimeCursor()
        cursor.advance(TimeMarker("night", minute=22 * 60))
        point = cursor.advance(TimeMarker("morning", minute=540))
        assert point.day == 1
        assert not point.reversed

    def test_going_back_in_time(self):
        cursor = TimeCursor()
        cursor.advance(TimeMarker("noon", minute=720))
        assert cursor.advance(TimeMarker("9:00", minute=540)).reversed

    def test_day_shift_resets_minute(self):
        cursor = TimeCursor()
        cursor.advance(TimeMarker("noon", minute=720))
        point = cursor.advance(TimeMarker("the next day", day_shift=1))
        assert (point.day, point.minute) == (1, None)

    def test_flashback_does_not_move_clock(self):
        cursor = TimeCursor()
        cursor.advance(TimeMarker("noon", minute=720))
        point = cursor.advance(TimeMarker("years ago", flashback=True))
        assert point.day == -1
        assert cursor.day == 0
