"""Explicit and relative time expressions in narrative text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from storybook.text.lexicon import DAY_PARTS, WEEKDAYS

_NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "several": 3, "few": 2, "a few": 2, "many": 5,
}
_UNIT_DAYS = {"day": 1, "week": 7, "month": 30, "year": 365}

_CLOCK = re.compile(
    r"\b(\d{1,2})(?::(\d{2}))?\s*(a\.?m\.?|p\.?m\.?|o'clock)(?!\w)|\b(\d{1,2}):(\d{2})\b",
    re.IGNORECASE,
)
_DAY_PART = re.compile(r"\b(" + "|".join(DAY_PARTS) + r")\b", re.IGNORECASE)
_WEEKDAY = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE)
_NEXT_DAY = re.compile(
    r"\b(?:the\s+(?:next|following)\s+(day|morning|afternoon|evening|night|week|month|year)"
    r"|tomorrow|the\s+day\s+after)\b",
    re.IGNORECASE,
)
_LATER = re.compile(
    r"\b(a few|an?|one|two|three|four|five|six|seven|several|few|many)\s+"
    r"(day|week|month|year)s?\s+later\b",
    re.IGNORECASE,
)
_FLASHBACK = re.compile(
    r"\b(?:years\s+ago|yesterday|the\s+(?:day|night)\s+before"
    r"|the\s+previous\s+(?:day|night|morning|evening)|earlier\s+that"
    r"|remembered|recalled|long\s+ago)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class TimeMarker:
    """Time information carried by one span of text."""

    label: str
    minute: int | None = None
    day_shift: int = 0
    weekday: int | None = None
    flashback: bool = False


@dataclass(frozen=True)
class TimePoint:
    """A position on the story clock: story day and minute of day."""

    day: int
    minute: int | None
    reversed: bool = False


def _clock_minute(match: re.Match[str]) -> int:
    if match.group(4) is not None:
        return int(match.group(4)) % 24 * 60 + int(match.group(5))
    hour = int(match.group(1)) % 12
    minutes = int(match.group(2) or 0)
    suffix = match.group(3).lower()
    if suffix.startswith("p"):
        hour += 12
    return hour * 60 + minutes


def extract_time_marker(text: str) -> TimeMarker | None:
    """Find the time expression in a sentence or paragraph.

    Returns None when the text carries no time information.
    """
    shift_match = _NEXT_DAY.search(text)
    later_match = _LATER.search(text)
    clock = _CLOCK.search(text)
    day_part = _DAY_PART.search(text)
    weekday = _WEEKDAY.search(text)
    flashback = _FLASHBACK.search(text)

    day_shift = 0
    if shift_match:
        unit = (shift_match.group(1) or "day").lower()
        day_shift = _UNIT_DAYS.get(unit, 1)
    elif later_match:
        amount = _NUMBER_WORDS.get(later_match.group(1).lower(), 1)
        day_shift = amount * _UNIT_DAYS[later_match.group(2).lower()]

    minute = None
    if clock:
        minute = _clock_minute(clock)
    elif day_part:
        minute = DAY_PARTS[day_part.group(1).lower()]

    for match in (shift_match, later_match, clock, day_part, weekday, flashback):
        if match:
            label = match.group(0).strip()
            break
    else:
        return None

    return TimeMarker(
        label=label,
        minute=minute,
        day_shift=day_shift,
        weekday=WEEKDAYS.index(weekday.group(1).lower()) if weekday else None,
        flashback=flashback is not None and not day_shift,
    )


class TimeCursor:
    """Running story clock advanced by successive time markers."""

    # Going from late evening to early morning reads as the next day
    _ROLLOVER_FROM = 19 * 60
    _ROLLOVER_TO = 10 * 60

    def __init__(self) -> None:
        self.day = 0
        self.minute: int | None = None
        self.weekday: int | None = None

    def advance(self, marker: TimeMarker | None) -> TimePoint:
        """Move the clock to the marker and report where it landed."""
        if marker is None:
            return TimePoint(self.day, self.minute)
        if marker.flashback:
            return TimePoint(self.day - 1, marker.minute)

        if marker.day_shift:
            self.day += marker.day_shift
            self.minute = None
        if marker.weekday is not None:
            if self.weekday is not None and marker.weekday != self.weekday:
                if not marker.day_shift:
                    self.day += (marker.weekday - self.weekday) % 7
                    self.minute = None
            self.weekday = marker.weekday

        went_back = False
        if marker.minute is not None:
            if self.minute is not None and marker.minute < self.minute:
                if (
                    self.minute >= self._ROLLOVER_FROM
                    and marker.minute <= self._ROLLOVER_TO
                ):
                    self.day += 1
                else:
                    went_back = True
            self.minute = marker.minute
        return TimePoint(self.day, self.minute, went_back)
