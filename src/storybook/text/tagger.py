"""Part-of-speech tagging behind a swappable interface.

Analyzers only depend on the ``Tagger`` protocol. ``SpacyTagger`` is the
default implementation and maps spaCy's universal part-of-speech tags and
person entities onto the coarse ``TokenRole`` set.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol, runtime_checkable

from spacy.tokens import Token as SpacyToken

from storybook.text.nlp import DEFAULT_MODEL, parse

_QUOTES = frozenset({'"', "“", "”", "'", "‘", "’", "``", "''"})


class TokenRole(str, Enum):
    """Coarse grammatical role assigned to a token."""

    PROPER_NOUN = "proper_noun"
    PRONOUN = "pronoun"
    VERB = "verb"
    AUXILIARY = "auxiliary"
    ADVERB = "adverb"
    ADJECTIVE = "adjective"
    NOUN = "noun"
    DETERMINER = "determiner"
    PREPOSITION = "preposition"
    CONJUNCTION = "conjunction"
    NUMBER = "number"
    PUNCTUATION = "punctuation"
    QUOTE = "quote"
    WORD = "word"


_POS_ROLES = {
    "PROPN": TokenRole.PROPER_NOUN,
    "PRON": TokenRole.PRONOUN,
    "VERB": TokenRole.VERB,
    "AUX": TokenRole.AUXILIARY,
    "ADV": TokenRole.ADVERB,
    "ADJ": TokenRole.ADJECTIVE,
    "NOUN": TokenRole.NOUN,
    "DET": TokenRole.DETERMINER,
    "ADP": TokenRole.PREPOSITION,
    "CCONJ": TokenRole.CONJUNCTION,
    "SCONJ": TokenRole.CONJUNCTION,
    "NUM": TokenRole.NUMBER,
    "PUNCT": TokenRole.PUNCTUATION,
    "SYM": TokenRole.PUNCTUATION,
}


@dataclass(frozen=True)
class Token:
    """A token with its character span in the tagged text."""

    text: str
    start: int
    end: int
    role: TokenRole
    sentence_start: bool = False

    @property
    def lower(self) -> str:
        return self.text.lower()

    @property
    def is_word(self) -> bool:
        return self.role not in (
            TokenRole.PUNCTUATION,
            TokenRole.QUOTE,
            TokenRole.NUMBER,
        )


@runtime_checkable
class Tagger(Protocol):
    """Anything that can split text into role-tagged tokens."""

    def tag(self, text: str) -> list[Token]:
        """Tag the text, returning tokens in document order."""
        ...


class SpacyTagger:
    """Tagger backed by a trained spaCy pipeline.

    Whitespace tokens are dropped and possessive endings stay attached to
    their word, so "Anna's" is one token.
    """

    def __init__(self, model: str = DEFAULT_MODEL) -> None:
        self.model = model

    def tag(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        for word in parse(text, self.model):
            if word.is_space:
                continue
            end = word.idx + len(word.text)
            if word.tag_ == "POS" and tokens and tokens[-1].end == word.idx:
                tokens[-1] = replace(tokens[-1], text=tokens[-1].text + word.text, end=end)
                continue
            tokens.append(
                Token(word.text, word.idx, end, _role(word), bool(word.is_sent_start))
            )
        return tokens

    def __repr__(self) -> str:
        return f"SpacyTagger(model='{self.model}')"


def _role(word: SpacyToken) -> TokenRole:
    if word.text in _QUOTES and word.pos_ == "PUNCT":
        return TokenRole.QUOTE
    if word.ent_type_ == "PERSON" and word.text[:1].isupper():
        return TokenRole.PROPER_NOUN
    return _POS_ROLES.get(word.pos_, TokenRole.WORD)
