"""Character ledger and character continuity checks."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from storybook.analyzers.base import BaseNarrativeAnalyzer, ParagraphView
from storybook.analyzers.presence import gather_evidence
from storybook.config import get_logger
from storybook.models import (
    Character,
    CharacterAction,
    CharacterAnalysis,
    CharacterAppearance,
    CharacterStatistics,
    ContinuityError,
    ContinuityErrorType,
    Severity,
)
from storybook.text.timeparse import TimeCursor, TimePoint, extract_time_marker

logger = get_logger(__name__)

_SEVERITY_RANK = {Severity.HIGH.value: 0, Severity.MEDIUM.value: 1, Severity.LOW.value: 2}


@dataclass
class _Observation:
    paragraph: int
    action: CharacterAction
    location: str | None
    acting: bool
    movement: str | None


@dataclass
class _Ledger:
    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    observations: list[_Observation] = field(default_factory=list)
    current_location: str | None = None


class CharacterTracker(BaseNarrativeAnalyzer[CharacterAnalysis]):
    """Track who is where across the manuscript and flag contradictions."""

    @property
    def name(self) -> str:
        return "characters"

    def analyze(
        self, text: str, main_characters: Sequence[str] | None = None, **_: object
    ) -> CharacterAnalysis:
        allowed = [n for n in (main_characters or []) if n.strip()] or None
        views = self.read_paragraphs(text, allowed)

        ledgers: dict[str, _Ledger] = {
            name.strip(): _Ledger(name.strip()) for name in allowed or []
        }
        times: dict[int, TimePoint] = {}
        cursor = TimeCursor()

        for view in views:
            marker = extract_time_marker(view.paragraph.text)
            point = cursor.advance(marker)
            if marker is not None and not marker.flashback:
                times[view.number] = point
            self._record(view, ledgers)

        errors = self._movement_errors(ledgers.values())
        errors.extend(self._location_errors(ledgers.values()))
        errors.extend(self._timeline_errors(views, ledgers, times))
        errors.sort(key=lambda e: (e.paragraph, _SEVERITY_RANK[e.severity]))

        characters = [self._to_character(ledger) for ledger in ledgers.values()]
        statistics = self._statistics(characters)
        logger.info(
            "Character analysis complete",
            characters=len(characters),
            errors=len(errors),
        )
        return CharacterAnalysis(
            characters=characters,
            continuity_errors=errors,
            statistics=statistics,
            suggestions=self._suggestions(errors, statistics),
        )

    def _record(self, view: ParagraphView, ledgers: dict[str, _Ledger]) -> None:
        for evidence in gather_evidence(view):
            ledger = ledgers.setdefault(evidence.name, _Ledger(evidence.name))
            first = not ledger.observations
            exited = bool(ledger.observations) and self._is_away(ledger)

            if evidence.movement == "exit":
                action = CharacterAction.EXIT
            elif evidence.movement == "enter" or (
                evidence.movement == "move" and view.location
            ):
                action = CharacterAction.ENTER
            elif first or (exited and evidence.acting):
                # Acting again after leaving reads as an unannounced return
                action = CharacterAction.ENTER
            else:
                action = CharacterAction.MENTION

            ledger.observations.append(
                _Observation(
                    paragraph=view.number,
                    action=action,
                    location=view.location,
                    acting=evidence.acting,
                    movement=evidence.movement,
                )
            )
            if evidence.attribute:
                key, value = evidence.attribute
                ledger.attributes[key] = value
            if view.location and (
                evidence.movement in {"enter", "move"} or ledger.current_location is None
            ):
                ledger.current_location = view.location

    @staticmethod
    def _is_away(ledger: _Ledger) -> bool:
        """True if the character's last movement was leaving."""
        for observation in reversed(ledger.observations):
            if observation.action is CharacterAction.EXIT:
                return True
            if observation.action is CharacterAction.ENTER:
                return False
        return False

    @staticmethod
    def _movement_errors(ledgers: Iterable[_Ledger]) -> list[ContinuityError]:
        errors: list[ContinuityError] = []
        for ledger in ledgers:
            away_since: int | None = None
            for obs in ledger.observations:
                if obs.action is CharacterAction.EXIT:
                    away_since = obs.paragraph
                    continue
                if away_since is None:
                    continue
                if obs.movement in {"enter", "move"}:
                    away_since = None
                elif obs.acting:
                    errors.append(
                        ContinuityError(
                            type=ContinuityErrorType.CHARACTER,
                            description=(
                                f"{ledger.name} left in paragraph {away_since} but acts "
                                f"in paragraph {obs.paragraph} without re-entering"
                            ),
                            paragraph=obs.paragraph,
                            severity=Severity.HIGH,
                            suggestion=(
                                f"Show {ledger.name} returning before they act again"
                            ),
                        )
                    )
                    away_since = None
        return errors

    @staticmethod
    def _location_errors(ledgers: Iterable[_Ledger]) -> list[ContinuityError]:
        errors: list[ContinuityError] = []
        for ledger in ledgers:
            known: str | None = None
            in_transit = False
            for obs in ledger.observations:
                if obs.movement in {"enter", "move"}:
                    if obs.location:
                        known = obs.location
                    in_transit = obs.location is None
                    continue
                if obs.movement == "exit":
                    known = obs.location or known
                    in_transit = True
                    continue
                if obs.location is None:
                    continue
                if known and obs.acting and obs.location != known and not in_transit:
                    errors.append(
                        ContinuityError(
                            type=ContinuityErrorType.CHARACTER,
                            description=(
                                f"{ledger.name} is in the {obs.location} in paragraph "
                                f"{obs.paragraph} but was last in the {known}"
                            ),
                            paragraph=obs.paragraph,
                            severity=Severity.MEDIUM,
                            suggestion=(
                                f"Add a transition showing {ledger.name} travelling "
                                f"to the {obs.location}"
                            ),
                        )
                    )
                known = obs.location
                in_transit = False
        return errors

    @staticmethod
    def _timeline_errors(
        views: Sequence[ParagraphView],
        ledgers: dict[str, _Ledger],
        times: dict[int, TimePoint],
    ) -> list[ContinuityError]:
        present: dict[int, list[str]] = {}
        for ledger in ledgers.values():
            for obs in ledger.observations:
                if obs.location and obs.action is not CharacterAction.EXIT:
                    present.setdefault(obs.paragraph, []).append(ledger.name)

        errors: list[ContinuityError] = []
        last_at: dict[str, tuple[int, TimePoint]] = {}
        for view in views:
            point = times.get(view.number)
            location = view.location
            if point is None or location is None or point.minute is None:
                continue
            names = sorted(present.get(view.number, []))
            if len(names) >= 2 and location in last_at:
                earlier_paragraph, earlier = last_at[location]
                if (
                    earlier.day == point.day
                    and earlier.minute is not None
                    and point.minute < earlier.minute
                ):
                    errors.append(
                        ContinuityError(
                            type=ContinuityErrorType.TIMELINE,
                            description=(
                                f"{' and '.join(names)} are together in the {location} "
                                f"at an earlier time than paragraph {earlier_paragraph}"
                            ),
                            paragraph=view.number,
                            severity=Severity.LOW,
                            suggestion=(
                                "Clarify the time of day or mark this scene as a flashback"
                            ),
                        )
                    )
            last_at[location] = (view.number, point)
        return errors

    @staticmethod
    def _to_character(ledger: _Ledger) -> Character:
        appearances = [
            CharacterAppearance(
                paragraph=obs.paragraph, action=obs.action, location=obs.location
            )
            for obs in ledger.observations
        ]
        return Character(
            name=ledger.name,
            current_location=ledger.current_location,
            last_mention=appearances[-1].paragraph if appearances else None,
            attributes=dict(ledger.attributes),
            appearances=appearances,
        )

    @staticmethod
    def _statistics(characters: Sequence[Character]) -> CharacterStatistics:
        locations: Counter[str] = Counter()
        for character in characters:
            for appearance in character.appearances:
                if appearance.location:
                    locations[appearance.location] += 1

        interactions: dict[str, set[str]] = {c.name: set() for c in characters}
        by_paragraph: dict[int, list[str]] = {}
        for character in characters:
            for appearance in character.appearances:
                by_paragraph.setdefault(appearance.paragraph, []).append(character.name)
        for names in by_paragraph.values():
            for name in names:
                interactions[name].update(n for n in names if n != name)

        return CharacterStatistics(
            total_characters=len(characters),
            appearances_per_character={c.name: len(c.appearances) for c in characters},
            location_frequency=dict(locations),
            most_frequent_locations=[loc for loc, _ in locations.most_common(5)],
            character_interactions={
                name: sorted(partners) for name, partners in interactions.items()
            },
        )

    @staticmethod
    def _suggestions(
        errors: Sequence[ContinuityError], statistics: CharacterStatistics
    ) -> list[str]:
        suggestions = [e.suggestion for e in errors if e.suggestion]

        counts = {n: c for n, c in statistics.appearances_per_character.items() if c}
        if len(counts) >= 2:
            average = sum(counts.values()) / len(counts)
            for name, count in counts.items():
                if count < average / 2:
                    suggestions.append(
                        f"Consider developing {name} further; they appear in only "
                        f"{count} paragraph{'s' if count != 1 else ''}"
                    )
            for name in counts:
                if not statistics.character_interactions.get(name):
                    suggestions.append(
                        f"{name} never shares a paragraph with another character; "
                        "consider giving them more interactions"
                    )
        return list(dict.fromkeys(suggestions))


def analyze_characters(
    text: str, main_characters: Sequence[str] | None = None
) -> CharacterAnalysis:
    """Build the character ledger for a manuscript."""
    return CharacterTracker().run(text, main_characters=main_characters)
