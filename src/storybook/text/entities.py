"""Character names, places and subject verb phrases found on tagged tokens."""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from storybook.text import lexicon
from storybook.text.tagger import Token, TokenRole

_LOWER_WORD = re.compile(r"(?<![\w'’])[a-z][a-z'’-]*")
_STRONG_PLACE_PREPOSITIONS = frozenset(
    {"in", "into", "inside", "within", "outside", "near", "across", "through",
     "toward", "towards"}
)
_WEAK_PLACE_PREPOSITIONS = frozenset({"at", "to", "from"})
_LOCATION_VERBS = frozenset({"entered", "reached", "left", "exited"})
_TRAVEL_VERBS = lexicon.MOTION_VERBS | lexicon.ENTER_VERBS | lexicon.EXIT_VERBS
_LINKING_VERBS = frozenset({"looked", "seemed", "appeared", "became", "felt", "grew", "sounded"})
_BE_FORMS = frozenset({"is", "was", "are", "were", "am", "be", "been"})
_NEGATIONS = frozenset({"not", "never", "n't", "n’t"})
_NON_PERSON = frozenset(lexicon.MONTHS) | frozenset(lexicon.WEEKDAYS)
_NOT_VERBS = (
    TokenRole.DETERMINER,
    TokenRole.PREPOSITION,
    TokenRole.CONJUNCTION,
    TokenRole.PRONOUN,
    TokenRole.PROPER_NOUN,
    TokenRole.AUXILIARY,
)


@dataclass(frozen=True)
class NameSpan:
    """A character name located on the token stream."""

    name: str
    first_token: int
    last_token: int
    possessive: bool = False


@dataclass(frozen=True)
class VerbPhrase:
    """What follows a subject: main verb, particle and linking complement."""

    verb: str
    particle: str | None = None
    auxiliary: str | None = None
    complement: str | None = None


def document_vocabulary(text: str) -> frozenset[str]:
    """Words that occur in lowercase somewhere in the text."""
    return frozenset(match.group() for match in _LOWER_WORD.finditer(text))


def _bare(token: Token) -> str:
    if token.lower.endswith(("'s", "’s")):
        return token.text[:-2]
    return token.text


def _is_possessive(token: Token) -> bool:
    return token.lower.endswith(("'s", "’s"))


def _adjacent(left: Token, right: Token) -> bool:
    return 0 < right.start - left.end <= 1


def find_names(
    tokens: Sequence[Token], vocabulary: Iterable[str] = ()
) -> list[NameSpan]:
    """Detect person names: honorific titles and runs of proper nouns.

    A token counts as a proper noun when the tagger marks it as one, which
    for the spaCy tagger includes PERSON entities.

    Capitalized runs that read as places ("in Paris", "Baker Street"),
    follow "the", or are sentence-initial words also used in lowercase
    elsewhere in the document are skipped.
    """
    vocabulary = frozenset(vocabulary)
    spans: list[NameSpan] = []
    count = len(tokens)
    index = 0
    while index < count:
        token = tokens[index]
        first = index
        name_start = index
        if token.lower.rstrip(".") in lexicon.HONORIFICS and token.text[0].isupper():
            cursor = index + 1
            if cursor < count and tokens[cursor].text == ".":
                cursor += 1
            if cursor >= count or tokens[cursor].role is not TokenRole.PROPER_NOUN:
                index += 1
                continue
            name_start = cursor
        elif token.role is not TokenRole.PROPER_NOUN:
            index += 1
            continue

        last = name_start
        while (
            last + 1 < count
            and not _is_possessive(tokens[last])
            and tokens[last + 1].role is TokenRole.PROPER_NOUN
            and _adjacent(tokens[last], tokens[last + 1])
        ):
            last += 1
        index = last + 1

        words = [tokens[i].text for i in range(name_start, last)]
        words.append(_bare(tokens[last]))
        if any(w.lower() in _NON_PERSON for w in words):
            continue
        if _reads_as_place(tokens, first, last):
            continue
        lone = first == last
        if lone and tokens[first].sentence_start and words[0].lower() in vocabulary:
            continue

        if name_start != first:
            title = tokens[first].text
            if tokens[first + 1].text == ".":
                title += "."
            words.insert(0, title)
        spans.append(
            NameSpan(" ".join(words), first, last, _is_possessive(tokens[last]))
        )
    return spans


def _reads_as_place(tokens: Sequence[Token], first: int, last: int) -> bool:
    if last > first and any(
        _bare(tokens[i]).lower() in lexicon.PLACE_SUFFIXES
        for i in range(first, last + 1)
    ):
        return True
    before = first - 1
    had_determiner = False
    if before >= 0 and tokens[before].lower == "the":
        had_determiner = True
        before -= 1
    if had_determiner:
        return True
    if before < 0:
        return False
    preceding = tokens[before].lower
    if preceding in _STRONG_PLACE_PREPOSITIONS:
        return True
    if preceding in _WEAK_PLACE_PREPOSITIONS and before > 0:
        return tokens[before - 1].lower in _TRAVEL_VERBS
    return False


def find_allowed_names(
    text: str, tokens: Sequence[Token], allowed: Sequence[str]
) -> list[NameSpan]:
    """Locate only the given names, longest first, without overlaps."""
    starts = [token.start for token in tokens]
    claimed: list[tuple[int, int]] = []
    spans: list[NameSpan] = []
    for name in sorted({n.strip() for n in allowed if n.strip()}, key=len, reverse=True):
        pattern = re.compile(rf"(?<!\w){re.escape(name)}(?!\w)")
        for match in pattern.finditer(text):
            begin, end = match.span()
            if any(begin < c_end and c_start < end for c_start, c_end in claimed):
                continue
            first = bisect.bisect_left(starts, begin)
            last = bisect.bisect_left(starts, end) - 1
            if first >= len(tokens) or last < first:
                continue
            claimed.append((begin, end))
            spans.append(
                NameSpan(name, first, last, text[end : end + 2] in ("'s", "’s"))
            )
    spans.sort(key=lambda span: span.first_token)
    return spans


def subject_groups(
    tokens: Sequence[Token], spans: Sequence[NameSpan]
) -> list[list[NameSpan]]:
    """Group names joined by commas or "and" ("Alice and Bob left")."""
    groups: list[list[NameSpan]] = []
    for span in spans:
        if groups:
            previous = groups[-1][-1]
            between = tokens[previous.last_token + 1 : span.first_token]
            if (
                between
                and not previous.possessive
                and all(t.lower in {",", "and"} for t in between)
            ):
                groups[-1].append(span)
                continue
        groups.append([span])
    return groups


def verb_phrase_after(tokens: Sequence[Token], index: int) -> VerbPhrase | None:
    """Read the predicate that follows the token at ``index``."""
    count = len(tokens)
    cursor = index + 1
    skipped = 0
    while cursor < count and tokens[cursor].role is TokenRole.ADVERB and skipped < 2:
        cursor += 1
        skipped += 1
    if cursor >= count:
        return None

    token = tokens[cursor]
    if token.role is TokenRole.AUXILIARY:
        auxiliary = token.lower
        cursor += 1
        while cursor < count and (
            tokens[cursor].lower in _NEGATIONS
            or tokens[cursor].role is TokenRole.ADVERB
        ):
            cursor += 1
        if cursor >= count or not tokens[cursor].is_word:
            return VerbPhrase(auxiliary, auxiliary=auxiliary)
        main = tokens[cursor]
        if main.role in _NOT_VERBS:
            return VerbPhrase(auxiliary, auxiliary=auxiliary)
        if main.role is TokenRole.ADJECTIVE or (
            auxiliary in _BE_FORMS and main.lower.endswith("ed")
        ):
            return VerbPhrase(auxiliary, auxiliary=auxiliary, complement=main.lower)
        return VerbPhrase(
            main.lower, _particle(tokens, cursor + 1), auxiliary=auxiliary
        )

    if not token.is_word or token.role in _NOT_VERBS or not token.text[0].islower():
        return None
    complement = None
    if token.lower in _LINKING_VERBS and cursor + 1 < count:
        following = tokens[cursor + 1]
        if following.role is TokenRole.ADJECTIVE:
            complement = following.lower
    return VerbPhrase(token.lower, _particle(tokens, cursor + 1), complement=complement)


def _particle(tokens: Sequence[Token], index: int) -> str | None:
    if index < len(tokens) and tokens[index].lower in lexicon.VERB_PARTICLES:
        return tokens[index].lower
    return None


def classify_movement(phrase: VerbPhrase | None) -> str | None:
    """Return ``exit``, ``enter``, ``move`` or None for a predicate."""
    if phrase is None or phrase.complement:
        return None
    verb, particle = phrase.verb, phrase.particle
    if verb in lexicon.EXIT_VERBS or (
        verb in lexicon.MOTION_VERBS and particle in lexicon.EXIT_PARTICLES
    ):
        return "exit"
    if verb in lexicon.ENTER_VERBS or (
        verb in lexicon.MOTION_VERBS and particle in lexicon.ENTER_PARTICLES
    ):
        return "enter"
    if verb in lexicon.MOTION_VERBS:
        return "move"
    return None


def find_location(tokens: Sequence[Token]) -> str | None:
    """Return the first place phrase in the tokens, if any.

    Common nouns are returned lowercase ("kitchen", "living room"); proper
    place names keep their capitalization ("Grand Hotel").
    """
    count = len(tokens)
    for index, trigger in enumerate(tokens):
        if trigger.lower not in lexicon.LOCATION_TRIGGERS:
            continue
        cursor = index + 1
        had_determiner = False
        if cursor < count and (
            tokens[cursor].role is TokenRole.DETERMINER
            or tokens[cursor].lower in lexicon.POSSESSIVE_DETERMINERS
            or _is_possessive(tokens[cursor])
        ):
            had_determiner = True
            cursor += 1
        if cursor >= count:
            continue

        candidate = tokens[cursor]
        if candidate.role is TokenRole.PROPER_NOUN:
            last = cursor
            while (
                last + 1 < count
                and tokens[last + 1].role is TokenRole.PROPER_NOUN
                and _adjacent(tokens[last], tokens[last + 1])
            ):
                last += 1
            words = [_bare(tokens[i]) for i in range(cursor, last + 1)]
            if any(w.lower() in _NON_PERSON for w in words):
                continue
            strong = (
                trigger.lower in _STRONG_PLACE_PREPOSITIONS
                or trigger.lower in _LOCATION_VERBS
                or had_determiner
                or any(w.lower() in lexicon.PLACE_SUFFIXES for w in words)
                or (index > 0 and tokens[index - 1].lower in _TRAVEL_VERBS)
            )
            if strong:
                return " ".join(words)
            continue

        following = tokens[cursor + 1] if cursor + 1 < count else None
        if candidate.lower in lexicon.PLACE_NOUNS:
            if following is not None and following.lower in lexicon.PLACE_NOUNS:
                return f"{candidate.lower} {following.lower}"
            return candidate.lower
        if (
            following is not None
            and following.lower in lexicon.PLACE_NOUNS
            and candidate.is_word
            and candidate.role not in _NOT_VERBS
        ):
            return f"{candidate.lower} {following.lower}"
    return None


def names_in(
    text: str,
    tokens: Sequence[Token],
    vocabulary: Iterable[str] = (),
    allowed: Sequence[str] | None = None,
) -> list[NameSpan]:
    """Dispatch to allow-list matching or open name detection."""
    if allowed:
        return find_allowed_names(text, tokens, allowed)
    return find_names(tokens, vocabulary)
