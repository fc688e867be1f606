"""Context-aware synonym suggestions.

Candidates come from a fixed table. Each candidate carries its part of
speech, tone, formality and intensity, and is ranked by how well those
match the passage the term is used in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from storybook.config import StorybookSettings, get_logger, get_settings
from storybook.models import NarrativeContext, SynonymContext, ThesaurusSuggestion
from storybook.text import lexicon
from storybook.text.segmenter import split_sentences, words
from storybook.text.tagger import SpacyTagger, Tagger, TokenRole

logger = get_logger(__name__)

_QUOTED = re.compile(r'"[^"]*"|“[^”]*”')
_TAGGED_ROLES = {
    TokenRole.VERB: "verb",
    TokenRole.ADJECTIVE: "adjective",
    TokenRole.NOUN: "noun",
    TokenRole.ADVERB: "adverb",
}
_FIRST_PERSON = frozenset({"i", "me", "my", "mine", "we", "us", "our", "myself"})
_SECOND_PERSON = frozenset({"you", "your", "yours", "yourself"})
_THIRD_PERSON = frozenset({"he", "she", "him", "her", "his", "they", "them", "their"})
_FUTURE_MARKERS = frozenset(
    {"will", "tomorrow", "future", "soon", "spaceship", "starship", "android", "2100"}
)
_HISTORICAL_MARKERS = frozenset(
    {"ancient", "century", "medieval", "ago", "yesterday", "historical", "king",
     "queen", "empire", "carriage", "castle"}
)
_ACTION_VERBS = (
    lexicon.MOTION_VERBS | lexicon.ENTER_VERBS | lexicon.EXIT_VERBS | lexicon.EVENT_VERBS
)
_POSITIVE_AXES = frozenset({"joy"})
_NEGATIVE_AXES = frozenset({"sadness", "anger", "fear"})


@dataclass(frozen=True)
class Candidate:
    """One synonym with the features used to rank it."""

    word: str
    pos: str
    tone: str = "neutral"
    formality: str = "neutral"
    intensity: float = 0.5


def _family(pos: str, *entries: tuple[str, str, str, float]) -> list[Candidate]:
    return [
        Candidate(word, pos, tone, formality, intensity)
        for word, tone, formality, intensity in entries
    ]


SYNONYMS: dict[str, list[Candidate]] = {
    "walked": _family(
        "verb",
        ("strode", "positive", "neutral", 0.7),
        ("ambled", "positive", "informal", 0.2),
        ("strolled", "positive", "neutral", 0.2),
        ("meandered", "neutral", "formal", 0.2),
        ("paced", "negative", "neutral", 0.6),
        ("trudged", "negative", "neutral", 0.6),
        ("marched", "neutral", "neutral", 0.8),
    ),
    "looked": _family(
        "verb",
        ("gazed", "positive", "neutral", 0.4),
        ("stared", "negative", "neutral", 0.7),
        ("glanced", "neutral", "neutral", 0.2),
        ("peered", "neutral", "neutral", 0.5),
        ("observed", "neutral", "formal", 0.3),
        ("glared", "negative", "neutral", 0.9),
    ),
    "said": _family(
        "verb",
        ("stated", "neutral", "formal", 0.3),
        ("remarked", "neutral", "formal", 0.3),
        ("mumbled", "negative", "informal", 0.3),
        ("whispered", "neutral", "neutral", 0.4),
        ("declared", "positive", "formal", 0.7),
        ("uttered", "neutral", "formal", 0.4),
        ("snapped", "negative", "informal", 0.8),
        ("exclaimed", "positive", "neutral", 0.8),
    ),
    "asked": _family(
        "verb",
        ("inquired", "neutral", "formal", 0.3),
        ("queried", "neutral", "formal", 0.3),
        ("wondered", "neutral", "neutral", 0.2),
        ("demanded", "negative", "neutral", 0.9),
        ("pleaded", "negative", "neutral", 0.8),
    ),
    "ran": _family(
        "verb",
        ("sprinted", "neutral", "neutral", 0.9),
        ("dashed", "neutral", "neutral", 0.8),
        ("raced", "neutral", "neutral", 0.8),
        ("jogged", "positive", "informal", 0.4),
        ("fled", "negative", "neutral", 0.9),
        ("bolted", "negative", "informal", 0.9),
    ),
    "went": _family(
        "verb",
        ("headed", "neutral", "neutral", 0.4),
        ("proceeded", "neutral", "formal", 0.3),
        ("travelled", "neutral", "neutral", 0.4),
        ("ventured", "positive", "formal", 0.6),
        ("wandered", "neutral", "informal", 0.2),
    ),
    "smiled": _family(
        "verb",
        ("grinned", "positive", "informal", 0.7),
        ("beamed", "positive", "neutral", 0.9),
        ("smirked", "negative", "informal", 0.5),
        ("simpered", "negative", "formal", 0.4),
    ),
    "thought": _family(
        "verb",
        ("pondered", "neutral", "formal", 0.4),
        ("considered", "neutral", "formal", 0.3),
        ("reflected", "neutral", "formal", 0.3),
        ("mused", "positive", "neutral", 0.3),
        ("brooded", "negative", "neutral", 0.7),
        ("reckoned", "neutral", "informal", 0.3),
    ),
    "turned": _family(
        "verb",
        ("spun", "neutral", "neutral", 0.8),
        ("pivoted", "neutral", "neutral", 0.6),
        ("swiveled", "neutral", "informal", 0.6),
        ("rotated", "neutral", "formal", 0.3),
        ("wheeled", "neutral", "neutral", 0.7),
    ),
    "happy": _family(
        "adjective",
        ("joyful", "positive", "neutral", 0.8),
        ("elated", "positive", "neutral", 0.9),
        ("delighted", "positive", "neutral", 0.7),
        ("pleased", "positive", "formal", 0.4),
        ("content", "positive", "neutral", 0.3),
        ("chuffed", "positive", "informal", 0.6),
    ),
    "sad": _family(
        "adjective",
        ("melancholy", "negative", "formal", 0.5),
        ("dejected", "negative", "neutral", 0.6),
        ("gloomy", "negative", "neutral", 0.5),
        ("downcast", "negative", "neutral", 0.5),
        ("sorrowful", "negative", "formal", 0.7),
        ("heartbroken", "negative", "neutral", 0.9),
        ("bummed", "negative", "informal", 0.4),
    ),
    "angry": _family(
        "adjective",
        ("furious", "negative", "neutral", 0.9),
        ("enraged", "negative", "neutral", 0.9),
        ("irate", "negative", "formal", 0.7),
        ("livid", "negative", "neutral", 0.9),
        ("indignant", "negative", "formal", 0.6),
        ("annoyed", "negative", "neutral", 0.3),
        ("cross", "negative", "informal", 0.4),
    ),
    "scared": _family(
        "adjective",
        ("afraid", "negative", "neutral", 0.5),
        ("terrified", "negative", "neutral", 0.9),
        ("frightened", "negative", "neutral", 0.7),
        ("apprehensive", "negative", "formal", 0.4),
        ("spooked", "negative", "informal", 0.6),
    ),
    "big": _family(
        "adjective",
        ("large", "neutral", "neutral", 0.4),
        ("enormous", "neutral", "neutral", 0.8),
        ("massive", "neutral", "neutral", 0.8),
        ("vast", "positive", "formal", 0.7),
        ("huge", "neutral", "informal", 0.7),
        ("substantial", "neutral", "formal", 0.5),
    ),
    "small": _family(
        "adjective",
        ("little", "neutral", "informal", 0.3),
        ("tiny", "neutral", "neutral", 0.7),
        ("minute", "neutral", "formal", 0.8),
        ("compact", "positive", "formal", 0.3),
        ("slight", "neutral", "neutral", 0.4),
    ),
    "good": _family(
        "adjective",
        ("excellent", "positive", "formal", 0.8),
        ("fine", "positive", "neutral", 0.3),
        ("great", "positive", "informal", 0.7),
        ("splendid", "positive", "formal", 0.8),
        ("decent", "positive", "neutral", 0.3),
    ),
    "bad": _family(
        "adjective",
        ("terrible", "negative", "neutral", 0.8),
        ("awful", "negative", "informal", 0.7),
        ("dreadful", "negative", "formal", 0.8),
        ("poor", "negative", "neutral", 0.4),
        ("wicked", "negative", "neutral", 0.8),
    ),
    "dark": _family(
        "adjective",
        ("dim", "neutral", "neutral", 0.3),
        ("gloomy", "negative", "neutral", 0.5),
        ("shadowy", "negative", "neutral", 0.5),
        ("murky", "negative", "neutral", 0.6),
        ("pitch-black", "negative", "informal", 0.9),
        ("tenebrous", "negative", "formal", 0.6),
    ),
    "beautiful": _family(
        "adjective",
        ("lovely", "positive", "neutral", 0.5),
        ("gorgeous", "positive", "informal", 0.8),
        ("stunning", "positive", "neutral", 0.9),
        ("exquisite", "positive", "formal", 0.8),
        ("pretty", "positive", "informal", 0.4),
        ("radiant", "positive", "neutral", 0.7),
    ),
    "quickly": _family(
        "adverb",
        ("rapidly", "neutral", "formal", 0.6),
        ("swiftly", "neutral", "formal", 0.6),
        ("hastily", "negative", "neutral", 0.7),
        ("briskly", "positive", "neutral", 0.5),
        ("hurriedly", "negative", "neutral", 0.7),
    ),
    "looked at": _family(
        "phrase",
        ("gazed at", "positive", "neutral", 0.4),
        ("stared at", "negative", "neutral", 0.7),
        ("observed", "neutral", "formal", 0.3),
        ("examined", "neutral", "formal", 0.4),
        ("studied", "neutral", "neutral", 0.4),
    ),
    "walked to": _family(
        "phrase",
        ("headed to", "neutral", "neutral", 0.4),
        ("moved to", "neutral", "neutral", 0.3),
        ("approached", "neutral", "formal", 0.4),
        ("made her way to", "neutral", "neutral", 0.3),
        ("strode to", "positive", "neutral", 0.7),
    ),
    "thought about": _family(
        "phrase",
        ("pondered", "neutral", "formal", 0.4),
        ("considered", "neutral", "formal", 0.3),
        ("contemplated", "neutral", "formal", 0.4),
        ("reflected on", "neutral", "formal", 0.3),
        ("mulled over", "neutral", "informal", 0.4),
    ),
}


class ContextualThesaurus:
    """Rank synonym candidates by fit with the surrounding passage."""

    def __init__(
        self,
        settings: StorybookSettings | None = None,
        tagger: Tagger | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.tagger = tagger or SpacyTagger(self.settings.nlp_model)

    def find_synonyms(
        self, term: str, context: str, scene_context: str | None = None
    ) -> list[ThesaurusSuggestion]:
        """Return ranked suggestions for ``term``; empty when none are known."""
        key = " ".join(term.lower().split())
        candidates = SYNONYMS.get(key, [])
        if not candidates:
            logger.debug("No synonym candidates", term=key)
            return []

        term_context = self.term_context(key, context, default_role=candidates[0].pos)
        narrative = self.narrative_context(scene_context or context)
        ranked = []
        for order, candidate in enumerate(candidates):
            others = [c.word for c in candidates if c.word != candidate.word]
            score = _score(candidate, term_context)
            ranked.append(
                (
                    -score,
                    order,
                    ThesaurusSuggestion(
                        word=candidate.word,
                        synonyms=[key, *others],
                        context=term_context,
                        narrative_context=narrative,
                        score=score,
                    ),
                )
            )
        ranked.sort(key=lambda item: (item[0], item[1]))
        logger.debug("Synonyms ranked", term=key, candidates=len(ranked))
        return [suggestion for _, _, suggestion in ranked]

    def term_context(
        self, term: str, context: str, default_role: str = "unknown"
    ) -> SynonymContext:
        """Describe the passage around a term."""
        context_words = words(context)
        hits = lexicon.emotion_hits(context_words)
        totals = lexicon.tally(hits)
        positive = sum(totals[a] for a in _POSITIVE_AXES)
        negative = sum(totals[a] for a in _NEGATIVE_AXES)
        if positive > negative:
            tone = "positive"
        elif negative > positive:
            tone = "negative"
        else:
            tone = "neutral"
        intensity = 0.0
        if context_words:
            intensity = min(1.0, sum(totals.values()) / len(context_words) * 5)

        formal = sum(1 for w in context_words if w in lexicon.FORMAL_MARKERS)
        informal = sum(
            1
            for w in context_words
            if w in lexicon.INFORMAL_MARKERS or "'" in w or "’" in w
        )
        if formal > informal:
            formality = "formal"
        elif informal > formal:
            formality = "informal"
        else:
            formality = "neutral"

        return SynonymContext(
            tone=tone,
            intensity=round(intensity, 3),
            formality=formality,
            text_register=self._register(term, context),
            grammatical_role=self._role(term, context, default_role),
        )

    def narrative_context(self, text: str) -> NarrativeContext:
        """Infer genre, point of view, period and style from a scene."""
        all_words = words(text)
        narration = words(_QUOTED.sub(" ", text))
        scores = lexicon.genre_scores(all_words)
        genre, best = max(scores.items(), key=lambda item: item[1])

        first = sum(1 for w in narration if w in _FIRST_PERSON)
        second = sum(1 for w in narration if w in _SECOND_PERSON)
        third = sum(1 for w in narration if w in _THIRD_PERSON)
        if first and first >= third:
            perspective = "first-person"
        elif second > third:
            perspective = "second-person"
        else:
            perspective = "third-person"

        word_set = set(all_words)
        if word_set & _FUTURE_MARKERS:
            timeframe = "future"
        elif word_set & _HISTORICAL_MARKERS:
            timeframe = "historical"
        else:
            timeframe = "contemporary"

        tone = lexicon.dominant_tone(all_words)
        return NarrativeContext(
            genre=genre if best >= 2 else "general",
            perspective=perspective,
            timeframe=timeframe,
            style=_style(text),
            dominant_emotion=None if tone == "neutral" else tone,
        )

    def _register(self, term: str, context: str) -> str:
        for match in _QUOTED.finditer(context):
            if term in match.group().lower():
                return "dialogue"
        tokens = self.tagger.tag(_QUOTED.sub(" ", context))
        action = sum(1 for t in tokens if t.lower in _ACTION_VERBS)
        descriptive = sum(1 for t in tokens if t.role is TokenRole.ADJECTIVE)
        return "action" if action > descriptive else "description"

    def _role(self, term: str, context: str, default_role: str) -> str:
        if " " in term:
            return default_role
        tokens = self.tagger.tag(context)
        for index, token in enumerate(tokens):
            if token.lower != term:
                continue
            if token.role in _TAGGED_ROLES:
                return _TAGGED_ROLES[token.role]
            previous = tokens[index - 1] if index else None
            if previous is None:
                break
            if previous.role in (TokenRole.PROPER_NOUN, TokenRole.PRONOUN):
                return "verb"
            if previous.role is TokenRole.AUXILIARY or previous.lower in {
                "very", "so", "too", "quite", "rather",
            }:
                return "adjective"
            if previous.role is TokenRole.DETERMINER:
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                if following is not None and following.role in (
                    TokenRole.NOUN, TokenRole.WORD,
                ):
                    return "adjective"
                return "noun"
            break
        return default_role


def _score(candidate: Candidate, context: SynonymContext) -> float:
    score = 0.5
    if context.grammatical_role in (candidate.pos, "unknown"):
        score += 0.2
    else:
        score -= 0.2

    if candidate.tone == context.tone:
        score += 0.15
    elif "neutral" in (candidate.tone, context.tone):
        score += 0.05
    else:
        score -= 0.1

    if candidate.formality == context.formality:
        score += 0.1
    elif "neutral" in (candidate.formality, context.formality):
        score += 0.05
    else:
        score -= 0.05

    score += 0.1 * (1 - abs(candidate.intensity - context.intensity))

    register = context.text_register
    if register == "dialogue" and candidate.formality == "informal":
        score += 0.05
    elif register == "action" and candidate.intensity >= 0.6:
        score += 0.05
    elif register == "description" and candidate.pos == "adjective":
        score += 0.05
    return round(max(0.0, min(1.0, score)), 3)


def _style(text: str) -> str:
    sentences = split_sentences(text)
    if not sentences:
        return "neutral"
    quoted = sum(len(m.group()) for m in _QUOTED.finditer(text))
    if quoted > len(text) / 2:
        return "dialogue-driven"
    average = sum(len(words(s)) for _, s in sentences) / len(sentences)
    if average > 25:
        return "elaborate"
    if average < 8:
        return "terse"
    return "neutral"


def find_synonyms(
    term: str, context: str, scene_context: str | None = None
) -> list[ThesaurusSuggestion]:
    """Suggest synonyms for a term ranked by fit with its context."""
    return ContextualThesaurus().find_synonyms(term, context, scene_context)
