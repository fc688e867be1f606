"""Per-paragraph evidence about what each named character does."""

from __future__ import annotations

from dataclasses import dataclass

from storybook.analyzers.base import ParagraphView
from storybook.text.entities import classify_movement, subject_groups, verb_phrase_after

_APPEARANCE_VERBS = frozenset({"looked", "seemed", "appeared", "sounded"})


@dataclass(frozen=True)
class NameEvidence:
    """How one character takes part in one paragraph.

    ``movement`` is the last movement verb the character is subject of
    (``enter``, ``exit`` or ``move``); ``acting`` is True when the name is
    the subject of any predicate rather than a passive mention.
    """

    name: str
    movement: str | None = None
    acting: bool = False
    attribute: tuple[str, str] | None = None


def gather_evidence(view: ParagraphView) -> list[NameEvidence]:
    """Collect one evidence record per character, in order of first mention."""
    movement: dict[str, str | None] = {}
    acting: dict[str, bool] = {}
    attribute: dict[str, tuple[str, str]] = {}

    for group in subject_groups(view.tokens, view.names):
        last = group[-1]
        phrase = None if last.possessive else verb_phrase_after(view.tokens, last.last_token)
        kind = classify_movement(phrase)
        for span in group:
            movement.setdefault(span.name, None)
            acting.setdefault(span.name, False)
            if phrase is None:
                continue
            acting[span.name] = True
            if kind is not None:
                movement[span.name] = kind
            if phrase.complement:
                key = "appearance" if phrase.verb in _APPEARANCE_VERBS else "state"
                attribute[span.name] = (key, phrase.complement)

    return [
        NameEvidence(name, movement[name], acting[name], attribute.get(name))
        for name in movement
    ]
