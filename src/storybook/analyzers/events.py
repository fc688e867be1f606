"""Event extraction, timeline ordering and event continuity checks."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from storybook.analyzers.base import BaseNarrativeAnalyzer, ParagraphView
from storybook.analyzers.presence import gather_evidence
from storybook.config import get_logger
from storybook.models import (
    ContinuityError,
    ContinuityErrorType,
    Event,
    EventAnalysis,
    EventChain,
    EventSequence,
    PlotHole,
    Severity,
    TimelineEntry,
)
from storybook.text import lexicon
from storybook.text.entities import document_vocabulary, find_location, find_names
from storybook.text.segmenter import Paragraph, split_sentences
from storybook.text.tagger import Token, TokenRole
from storybook.text.timeparse import TimeCursor, TimePoint, extract_time_marker

logger = get_logger(__name__)

_NAME_WORDS = 6
_DESCRIPTION_LIMIT = 300
_SEQUENCE_GAP = 2
_TRAILING_FILLER = (
    TokenRole.DETERMINER,
    TokenRole.PREPOSITION,
    TokenRole.CONJUNCTION,
    TokenRole.AUXILIARY,
    TokenRole.PRONOUN,
)
_DEATH = r"(?:had\s+)?(?:died|perished|passed\s+away|(?:was|were)\s+(?:killed|murdered|dead))"


@dataclass
class _Sentence:
    view: ParagraphView
    point: TimePoint
    timestamp: str | None
    flashback: bool


@dataclass
class _StoryState:
    """Facts established so far while reading in order."""

    away_since: dict[str, int] = field(default_factory=dict)
    died_at: dict[str, int] = field(default_factory=dict)
    lost_at: dict[str, tuple[int, str]] = field(default_factory=dict)
    seen_words: set[str] = field(default_factory=set)


class EventAnalyzer(BaseNarrativeAnalyzer[EventAnalysis]):
    """Find narrative events and check that they hang together."""

    @property
    def name(self) -> str:
        return "events"

    def analyze(self, text: str, **_: object) -> EventAnalysis:
        paragraphs = self.read_paragraphs(text)
        vocabulary = document_vocabulary(text)

        events: list[Event] = []
        points: list[TimePoint] = []
        errors: list[ContinuityError] = []
        plot_holes: list[PlotHole] = []
        state = _StoryState()
        cursor = TimeCursor()

        for paragraph_view in paragraphs:
            for sentence in self._sentences(paragraph_view, vocabulary, cursor):
                event = self._detect_event(sentence, paragraph_view)
                if event is not None:
                    errors.extend(self._check_event(event, sentence, state))
                    events.append(event)
                    points.append(sentence.point)
                plot_holes.extend(self._check_objects(sentence, event, state, errors))
                self._update_state(sentence, state)

        chain = EventChain(
            sequences=self._sequences(events),
            timeline=self._timeline(events, points),
            possible_plot_holes=plot_holes,
        )
        errors.sort(key=lambda e: e.paragraph)
        logger.info(
            "Event analysis complete",
            events=len(events),
            errors=len(errors),
            plot_holes=len(plot_holes),
        )
        return EventAnalysis(
            events=events,
            continuity_errors=errors,
            event_chain=chain,
            suggestions=self._suggestions(events, errors, plot_holes, len(paragraphs)),
        )

    def _sentences(
        self, view: ParagraphView, vocabulary: frozenset[str], cursor: TimeCursor
    ) -> list[_Sentence]:
        sentences = []
        for offset, sentence_text in split_sentences(view.paragraph.text):
            tokens = self.tagger.tag(sentence_text)
            marker = extract_time_marker(sentence_text)
            sentence_view = ParagraphView(
                paragraph=Paragraph(view.number, sentence_text, view.paragraph.start + offset),
                tokens=tokens,
                names=find_names(tokens, vocabulary),
                location=find_location(tokens) or view.location,
            )
            sentences.append(
                _Sentence(
                    view=sentence_view,
                    point=cursor.advance(marker),
                    timestamp=marker.label if marker else None,
                    flashback=bool(marker and marker.flashback),
                )
            )
        return sentences

    @staticmethod
    def _detect_event(sentence: _Sentence, paragraph: ParagraphView) -> Event | None:
        tokens = sentence.view.tokens
        words = {t.lower for t in tokens}
        trigger = next(
            (i for i, t in enumerate(tokens) if t.lower in lexicon.EVENT_VERBS), None
        )
        if trigger is None and words & lexicon.TIME_CONNECTIVES:
            trigger = next(
                (i for i, t in enumerate(tokens) if t.role is TokenRole.VERB), None
            )
        if trigger is None:
            return None

        characters = sentence.view.unique_names() or paragraph.unique_names()
        description = sentence.view.paragraph.text
        if len(description) > _DESCRIPTION_LIMIT:
            description = description[: _DESCRIPTION_LIMIT - 3].rstrip() + "..."
        return Event(
            name=_event_name(tokens, trigger),
            paragraph=sentence.view.number,
            characters=characters,
            location=sentence.view.location,
            description=description,
            timestamp=sentence.timestamp,
        )

    @staticmethod
    def _check_event(
        event: Event, sentence: _Sentence, state: _StoryState
    ) -> list[ContinuityError]:
        errors: list[ContinuityError] = []
        if sentence.point.reversed:
            errors.append(
                ContinuityError(
                    type=ContinuityErrorType.TIMELINE,
                    description=(
                        f"'{event.name}' happens {event.timestamp or 'earlier'}, "
                        "before the time already reached in the story"
                    ),
                    paragraph=event.paragraph,
                    severity=Severity.MEDIUM,
                    suggestion="Mark the jump back in time or reorder the events",
                )
            )
        if sentence.flashback:
            return errors

        returning = {
            e.name for e in gather_evidence(sentence.view) if e.movement in {"enter", "move"}
        }
        for name in event.characters:
            if name in state.died_at:
                errors.append(
                    ContinuityError(
                        type=ContinuityErrorType.EVENT,
                        description=(
                            f"{name} takes part in '{event.name}' after dying in "
                            f"paragraph {state.died_at[name]}"
                        ),
                        paragraph=event.paragraph,
                        severity=Severity.HIGH,
                        suggestion=(
                            f"Resolve whether {name} is alive, or frame this as a "
                            "memory"
                        ),
                    )
                )
            elif name in state.away_since and name not in returning:
                errors.append(
                    ContinuityError(
                        type=ContinuityErrorType.EVENT,
                        description=(
                            f"{name} takes part in '{event.name}' but left the scene "
                            f"in paragraph {state.away_since[name]}"
                        ),
                        paragraph=event.paragraph,
                        severity=Severity.MEDIUM,
                        suggestion=f"Bring {name} back into the scene first",
                    )
                )
        return errors

    @staticmethod
    def _check_objects(
        sentence: _Sentence,
        event: Event | None,
        state: _StoryState,
        errors: list[ContinuityError],
    ) -> list[PlotHole]:
        tokens = sentence.view.tokens
        label = event.name if event else sentence.view.paragraph.text[:60]
        paragraph = sentence.view.number
        holes: list[PlotHole] = []
        used = _used_objects(tokens)
        for noun in dict.fromkeys([*used, *_wielded_objects(tokens)]):
            if noun in state.lost_at and noun not in _acquired_objects(tokens):
                lost_paragraph, lost_event = state.lost_at[noun]
                errors.append(
                    ContinuityError(
                        type=ContinuityErrorType.EVENT,
                        description=(
                            f"The {noun} is used in paragraph {paragraph} after it was "
                            f"lost in paragraph {lost_paragraph}"
                        ),
                        paragraph=paragraph,
                        severity=Severity.MEDIUM,
                        suggestion=f"Show how the {noun} was recovered",
                    )
                )
                holes.append(
                    PlotHole(
                        description=f"'{label}' uses the {noun} after '{lost_event}'",
                        paragraph=paragraph,
                        precondition=f"recovery of the {noun}",
                        events=[lost_event, label],
                    )
                )
            elif noun in used and noun not in state.seen_words:
                holes.append(
                    PlotHole(
                        description=(
                            f"'{label}' relies on the {noun}, which is never "
                            "introduced earlier"
                        ),
                        paragraph=paragraph,
                        precondition=f"possession of the {noun}",
                        events=[label],
                    )
                )
        return holes

    @staticmethod
    def _update_state(sentence: _Sentence, state: _StoryState) -> None:
        view = sentence.view
        paragraph = view.number
        for evidence in gather_evidence(view):
            if evidence.movement == "exit":
                state.away_since[evidence.name] = paragraph
            elif evidence.movement in {"enter", "move"}:
                state.away_since.pop(evidence.name, None)
        if not sentence.flashback:
            for name in view.unique_names():
                if re.search(rf"\b{re.escape(name)}\s+{_DEATH}\b", view.paragraph.text):
                    state.died_at.setdefault(name, paragraph)

        tokens = view.tokens
        acquired = _acquired_objects(tokens)
        for noun in acquired:
            state.lost_at.pop(noun, None)
        for noun in _lost_objects(tokens):
            if noun not in acquired:
                state.lost_at[noun] = (paragraph, view.paragraph.text[:60])
        state.seen_words.update(t.lower for t in tokens if t.is_word)

    @staticmethod
    def _sequences(events: Sequence[Event]) -> list[EventSequence]:
        sequences: list[EventSequence] = []
        current: list[Event] = []
        characters: list[str] = []
        location: str | None = None

        def close() -> None:
            if current:
                sequences.append(
                    EventSequence(
                        events=[e.name for e in current],
                        characters=list(characters),
                        location=location,
                        start_paragraph=current[0].paragraph,
                        end_paragraph=current[-1].paragraph,
                    )
                )

        for event in events:
            if current:
                close_in_time = event.paragraph - current[-1].paragraph <= _SEQUENCE_GAP
                shares_cast = bool(set(event.characters) & set(characters)) or not (
                    event.characters or characters
                )
                same_place = (
                    event.location is None
                    or location is None
                    or event.location == location
                )
                if not (close_in_time and shares_cast and same_place):
                    close()
                    current, characters, location = [], [], None
            current.append(event)
            characters.extend(c for c in event.characters if c not in characters)
            location = location or event.location
        close()
        return sequences

    @staticmethod
    def _timeline(
        events: Sequence[Event], points: Sequence[TimePoint]
    ) -> list[TimelineEntry]:
        order = sorted(
            range(len(events)),
            key=lambda i: (
                points[i].day,
                -1 if points[i].minute is None else points[i].minute,
                i,
            ),
        )
        return [
            TimelineEntry(
                event=events[i].name,
                timestamp=events[i].timestamp or "unspecified",
                relative_position=position,
                paragraph=events[i].paragraph,
            )
            for position, i in enumerate(order)
        ]

    @staticmethod
    def _suggestions(
        events: Sequence[Event],
        errors: Sequence[ContinuityError],
        plot_holes: Sequence[PlotHole],
        paragraph_count: int,
    ) -> list[str]:
        suggestions = [e.suggestion for e in errors if e.suggestion]
        if paragraph_count:
            density = len(events) / paragraph_count
            if not events and paragraph_count >= 3:
                suggestions.append(
                    "No clear events were detected; consider adding concrete plot "
                    "developments"
                )
            elif events and density < 0.1:
                suggestions.append(
                    "Events are sparse; consider adding developments to keep momentum"
                )
            elif density > 2.0:
                suggestions.append(
                    "Events are densely packed; give key moments more room to breathe"
                )
        if len(events) >= 3:
            timed = sum(1 for e in events if e.timestamp)
            if timed / len(events) < 0.3:
                suggestions.append(
                    "Add time markers such as 'that evening' or 'the next morning' "
                    "to clarify the timeline"
                )
        for hole in plot_holes:
            suggestions.append(
                f"Establish the {hole.precondition} before paragraph {hole.paragraph}"
            )
        return list(dict.fromkeys(suggestions))


def _event_name(tokens: Sequence[Token], trigger: int) -> str:
    start = trigger
    if trigger > 0 and tokens[trigger - 1].role in (
        TokenRole.PROPER_NOUN,
        TokenRole.PRONOUN,
        TokenRole.NOUN,
        TokenRole.WORD,
    ):
        start = trigger - 1
    words: list[Token] = []
    for token in tokens[start:]:
        if not token.is_word:
            if words and token.text in {",", ".", ";", "!", "?", ":"}:
                break
            continue
        words.append(token)
        if len(words) == _NAME_WORDS:
            break
    while len(words) > 1 and words[-1].role in _TRAILING_FILLER:
        words.pop()
    return " ".join(t.text for t in words)


def _object_after(tokens: Sequence[Token], index: int) -> str | None:
    """The head noun of the object phrase starting at ``index``."""
    cursor = index
    if cursor < len(tokens) and tokens[cursor].lower == "up":
        cursor += 1
    if cursor < len(tokens) and (
        tokens[cursor].role is TokenRole.DETERMINER
        or tokens[cursor].lower in lexicon.POSSESSIVE_DETERMINERS
    ):
        cursor += 1
    skipped = 0
    while (
        cursor < len(tokens)
        and tokens[cursor].role is TokenRole.ADJECTIVE
        and skipped < 2
    ):
        cursor += 1
        skipped += 1
    if cursor >= len(tokens):
        return None
    token = tokens[cursor]
    if not token.is_word or token.role in (
        TokenRole.PRONOUN,
        TokenRole.PROPER_NOUN,
        TokenRole.DETERMINER,
        TokenRole.PREPOSITION,
        TokenRole.CONJUNCTION,
        TokenRole.AUXILIARY,
    ):
        return None
    noun = token.lower
    if noun in lexicon.INCIDENTAL_NOUNS or noun in lexicon.STOPWORDS:
        return None
    return noun


def _objects_of(tokens: Sequence[Token], verbs: frozenset[str]) -> list[str]:
    found = []
    for index, token in enumerate(tokens):
        if token.lower in verbs:
            noun = _object_after(tokens, index + 1)
            if noun:
                found.append(noun)
    return found


def _acquired_objects(tokens: Sequence[Token]) -> list[str]:
    return _objects_of(tokens, lexicon.ACQUIRE_VERBS)


def _lost_objects(tokens: Sequence[Token]) -> list[str]:
    return _objects_of(tokens, lexicon.LOSE_VERBS)


def _used_objects(tokens: Sequence[Token]) -> list[str]:
    used = _objects_of(tokens, lexicon.USE_VERBS)
    for index, token in enumerate(tokens):
        if token.lower not in lexicon.INSTRUMENT_VERBS:
            continue
        for offset, following in enumerate(tokens[index + 1 :], start=index + 1):
            if following.text in {".", "!", "?", ";"}:
                break
            if following.lower == "with":
                noun = _object_after(tokens, offset + 1)
                if noun:
                    used.append(noun)
                break
    return list(dict.fromkeys(used))


def _wielded_objects(tokens: Sequence[Token]) -> list[str]:
    """Objects an action is carried out with: "fought the troll with his sword"."""
    found = []
    for index, token in enumerate(tokens):
        if token.role is not TokenRole.VERB:
            continue
        for offset, following in enumerate(tokens[index + 1 :], start=index + 1):
            if following.text in {".", "!", "?", ";"} or following.role is TokenRole.VERB:
                break
            if following.lower == "with":
                owner = tokens[offset + 1] if offset + 1 < len(tokens) else None
                if owner is not None and owner.lower in lexicon.POSSESSIVE_DETERMINERS:
                    noun = _object_after(tokens, offset + 1)
                    if noun:
                        found.append(noun)
                break
    return found


def analyze_events(text: str) -> EventAnalysis:
    """Extract events, timeline and event continuity errors."""
    return EventAnalyzer().run(text)
