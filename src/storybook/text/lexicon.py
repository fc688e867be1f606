"""Word lists and the emotion lexicon shared by the analyzers.

Weights are tuned by hand and only meaningful relative to each other.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from spacy.lang.en.stop_words import STOP_WORDS

from storybook.models import EMOTION_AXES

EMOTION_LEXICON: dict[str, dict[str, float]] = {
    "joy": {
        "happy": 1.0, "happiness": 1.0, "joy": 1.5, "joyful": 1.5, "laugh": 1.0,
        "laughter": 1.0, "smile": 0.75, "grin": 0.75, "delight": 1.25,
        "delighted": 1.25, "pleasure": 1.0, "excited": 1.0, "excitement": 1.0,
        "cheerful": 1.0, "glad": 0.75, "elated": 1.5, "thrilled": 1.25,
        "celebrate": 1.0, "celebration": 1.0, "love": 1.0, "wonderful": 1.0,
        "hope": 0.5, "relief": 0.75, "ecstatic": 1.5, "bliss": 1.5,
        "giggle": 0.75, "grateful": 0.75, "proud": 0.75,
    },
    "sadness": {
        "sad": 1.0, "sadness": 1.0, "cry": 1.0, "tears": 1.0, "grief": 1.5,
        "sorrow": 1.5, "depressed": 1.25, "miserable": 1.25, "weep": 1.25,
        "mourn": 1.25, "lonely": 1.0, "heartbroken": 1.5, "despair": 1.5,
        "gloom": 1.0, "melancholy": 1.0, "regret": 0.75, "loss": 0.75,
        "sob": 1.25, "somber": 0.75, "unhappy": 1.0, "hopeless": 1.25,
        "sigh": 0.5, "cried": 1.0, "grieve": 1.5,
    },
    "anger": {
        "angry": 1.0, "anger": 1.0, "rage": 1.5, "fury": 1.5, "furious": 1.5,
        "hostile": 1.0, "irritated": 0.75, "mad": 1.0, "annoyed": 0.75,
        "resent": 1.0, "hate": 1.25, "hatred": 1.25, "outraged": 1.5,
        "shout": 0.5, "yell": 0.5, "snarl": 1.0, "glare": 0.75, "seethe": 1.25,
        "livid": 1.5, "demand": 0.5, "slam": 0.75, "bitter": 0.75,
    },
    "fear": {
        "afraid": 1.0, "fear": 1.0, "terror": 1.5, "terrified": 1.5,
        "panic": 1.25, "dread": 1.25, "horror": 1.5, "horrified": 1.5,
        "scared": 1.0, "frightened": 1.25, "anxious": 0.75, "anxiety": 0.75,
        "nervous": 0.75, "tremble": 0.75, "worry": 0.75, "worried": 0.75,
        "alarm": 0.75, "scream": 1.0, "shiver": 0.5, "threat": 0.75,
        "danger": 0.75, "dangerous": 0.75, "pale": 0.5, "overwhelming": 0.5,
        "terrifying": 1.5, "frightening": 1.25,
    },
    "surprise": {
        "surprise": 1.0, "surprised": 1.0, "shock": 1.25, "shocked": 1.25,
        "amazed": 1.0, "amazement": 1.0, "astonished": 1.25, "stunned": 1.25,
        "unexpected": 1.0, "startled": 1.0, "gasp": 1.0, "sudden": 0.5,
        "suddenly": 0.5, "astonishing": 1.0, "incredible": 0.75,
        "impossible": 0.5, "bewildered": 1.0,
    },
}

NEGATIONS = frozenset({"not", "never", "no", "nothing", "hardly", "without"})
INTENSIFIERS = frozenset(
    {"very", "extremely", "so", "utterly", "deeply", "incredibly", "absolutely",
     "terribly", "really", "truly", "completely"}
)

STOPWORDS = frozenset(STOP_WORDS | {"said"})

POSSESSIVE_DETERMINERS = frozenset({"his", "her", "their", "my", "our", "its", "your"})

HONORIFICS = frozenset(
    {"mr", "mrs", "ms", "miss", "dr", "doctor", "professor", "prof", "captain",
     "capt", "lady", "lord", "sir", "madam", "detective", "inspector",
     "sergeant", "sgt", "officer", "agent", "king", "queen", "prince",
     "princess", "aunt", "uncle", "father", "sister", "brother", "saint"}
)

EXIT_VERBS = frozenset(
    {"left", "leaves", "leave", "departed", "departs", "exited", "exits",
     "fled", "flees", "vanished", "disappeared"}
)
ENTER_VERBS = frozenset(
    {"entered", "enters", "arrived", "arrives", "appeared", "appears",
     "returned", "returns", "reappeared", "came", "comes"}
)
MOTION_VERBS = frozenset(
    {"walked", "walks", "ran", "runs", "went", "goes", "drove", "drives",
     "travelled", "traveled", "moved", "moves", "headed", "heads", "rode",
     "flew", "hurried", "crossed", "climbed", "sailed", "journeyed",
     "wandered", "strode", "rushed", "raced", "marched", "crept", "stepped",
     "stormed", "slipped", "burst", "came"}
)
EXIT_PARTICLES = frozenset({"out", "away", "off"})
ENTER_PARTICLES = frozenset({"in", "into", "inside", "back"})
VERB_PARTICLES = EXIT_PARTICLES | ENTER_PARTICLES | frozenset({"up", "down", "over", "outside"})

SPEECH_VERBS = frozenset(
    {"said", "says", "asked", "asks", "replied", "replies", "shouted",
     "whispered", "murmured", "muttered", "answered", "called", "cried",
     "yelled", "demanded", "added", "continued", "insisted", "exclaimed",
     "snapped", "told", "assured", "interrupted", "responded", "began",
     "admitted", "warned", "laughed", "sighed"}
)

LOCATION_TRIGGERS = frozenset(
    {"in", "into", "inside", "within", "outside", "near", "at", "entered",
     "reached", "left", "exited", "through", "across", "toward", "towards",
     "to", "from"}
)
PLACE_NOUNS = frozenset(
    {"kitchen", "room", "bedroom", "hall", "hallway", "corridor", "house",
     "home", "apartment", "flat", "garden", "yard", "street", "road", "office",
     "lab", "laboratory", "forest", "woods", "church", "station", "library",
     "lobby", "basement", "attic", "cellar", "castle", "tower", "village",
     "town", "city", "market", "shop", "store", "cafe", "restaurant", "bar",
     "pub", "inn", "tavern", "hotel", "school", "classroom", "hospital",
     "park", "beach", "shore", "harbor", "harbour", "dock", "ship", "boat",
     "car", "train", "bridge", "river", "lake", "field", "farm", "barn",
     "cave", "mountain", "valley", "palace", "courtyard", "study", "den",
     "parlor", "parlour", "ballroom", "chamber", "facility", "building",
     "warehouse", "alley", "square", "plaza", "museum", "theater", "theatre",
     "cabin", "camp", "prison", "cell", "bathroom", "garage", "porch",
     "balcony", "roof", "stairs", "staircase", "aisles", "desert", "island",
     "temple", "cathedral", "manor", "estate", "mansion", "airport", "lounge"}
)
PLACE_SUFFIXES = frozenset(
    {"street", "road", "avenue", "lane", "hotel", "park", "manor", "castle",
     "tower", "station", "hall", "church", "bridge", "river", "lake", "city",
     "town", "village", "forest", "mountain", "mountains", "valley", "island",
     "house", "palace", "square", "school", "university", "hospital",
     "cathedral", "abbey", "harbor", "harbour", "bay", "county", "kingdom"}
)

DAY_PARTS: dict[str, int] = {
    "dawn": 5 * 60,
    "sunrise": 6 * 60,
    "morning": 9 * 60,
    "noon": 12 * 60,
    "midday": 12 * 60,
    "lunchtime": 12 * 60 + 30,
    "afternoon": 15 * 60,
    "dusk": 18 * 60,
    "sunset": 18 * 60 + 30,
    "evening": 19 * 60,
    "night": 22 * 60,
    "tonight": 22 * 60,
    "midnight": 24 * 60 - 1,
}
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
MONTHS = (
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
)

FORMAL_MARKERS = frozenset(
    {"shall", "whom", "therefore", "indeed", "nevertheless", "moreover",
     "furthermore", "hence", "thus", "whereupon", "henceforth", "notwithstanding"}
)
INFORMAL_MARKERS = frozenset(
    {"gonna", "wanna", "gotta", "yeah", "hey", "cool", "kinda", "sorta",
     "okay", "ok", "guy", "guys", "stuff", "nope", "yep", "dude", "awesome"}
)


def _candidate_forms(word: str) -> Iterable[str]:
    yield word
    if word.endswith("ies") and len(word) > 4:
        yield word[:-3] + "y"
    if word.endswith("es") and len(word) > 3:
        yield word[:-2]
    if word.endswith("s") and len(word) > 3:
        yield word[:-1]
    if word.endswith("ed") and len(word) > 4:
        yield word[:-2]
        yield word[:-1]
        if len(word) > 5 and word[-3] == word[-4]:
            yield word[:-3]
    if word.endswith("ing") and len(word) > 5:
        yield word[:-3]
        yield word[:-3] + "e"
        if word[-4] == word[-5]:
            yield word[:-4]
    if word.endswith("ly") and len(word) > 4:
        yield word[:-2]
        if word.endswith("ily"):
            yield word[:-3] + "y"


_LOOKUP: dict[str, tuple[str, float]] = {
    word: (axis, weight)
    for axis, words in EMOTION_LEXICON.items()
    for word, weight in words.items()
}


def lookup_emotion(word: str) -> tuple[str, float] | None:
    """Return (axis, weight) for a word or one of its inflections."""
    word = word.lower()
    for form in _candidate_forms(word):
        hit = _LOOKUP.get(form)
        if hit is not None:
            return hit
    return None


@dataclass(frozen=True)
class EmotionHit:
    axis: str
    weight: float
    index: int


def emotion_hits(words: Sequence[str]) -> list[EmotionHit]:
    """Scan lowercase words for lexicon hits.

    A hit preceded by a negation within two words is dropped; one preceded
    directly by an intensifier counts half again.
    """
    hits: list[EmotionHit] = []
    for index, word in enumerate(words):
        found = lookup_emotion(word)
        if found is None:
            continue
        window = words[max(0, index - 2) : index]
        if any(w in NEGATIONS or w.endswith("n't") for w in window):
            continue
        axis, weight = found
        if index > 0 and words[index - 1] in INTENSIFIERS:
            weight *= 1.5
        hits.append(EmotionHit(axis, weight, index))
    return hits


def tally(hits: Iterable[EmotionHit]) -> dict[str, float]:
    """Sum hit weights per axis; every axis is present."""
    totals = dict.fromkeys(EMOTION_AXES, 0.0)
    for hit in hits:
        totals[hit.axis] += hit.weight
    return totals


def dominant_tone(words: Sequence[str]) -> str:
    """Label a span by its strongest emotion axis, or ``neutral``."""
    totals = tally(emotion_hits(words))
    best = max(EMOTION_AXES, key=lambda axis: totals[axis])
    return best if totals[best] > 0 else "neutral"


EVENT_VERBS = frozenset(
    {"happened", "occurred", "began", "started", "ended", "finished",
     "exploded", "died", "killed", "attacked", "discovered", "found", "lost",
     "broke", "opened", "closed", "fell", "married", "escaped", "stole",
     "gave", "bought", "sold", "met", "fought", "won", "decided", "revealed",
     "burned", "crashed", "collapsed", "arrived", "left", "returned",
     "entered", "fled", "vanished", "disappeared", "called", "announced",
     "shot", "stabbed", "kissed", "destroyed", "grabbed", "received", "used",
     "unlocked", "fired", "dropped", "threw", "went", "blared", "appeared",
     "interrupted", "gained", "signed", "confessed", "betrayed", "rescued"}
)
TIME_CONNECTIVES = frozenset(
    {"before", "after", "during", "when", "while", "then", "next", "finally",
     "later", "suddenly", "soon", "once", "meanwhile", "shortly"}
)
ACQUIRE_VERBS = frozenset(
    {"found", "took", "grabbed", "picked", "received", "bought", "stole",
     "got", "pocketed", "collected", "inherited", "retrieved", "recovered"}
)
LOSE_VERBS = frozenset(
    {"lost", "dropped", "misplaced", "destroyed", "broke", "smashed",
     "surrendered", "sold"}
)
USE_VERBS = frozenset(
    {"used", "fired", "wielded", "brandished", "showed", "handed", "read",
     "drew", "loaded", "swung", "consulted"}
)
INSTRUMENT_VERBS = frozenset({"unlocked", "opened", "cut", "struck", "pried", "signed"})
# Objects a character always has at hand; never a plot precondition
INCIDENTAL_NOUNS = frozenset(
    {"hand", "hands", "head", "eyes", "eye", "arm", "arms", "face", "voice",
     "mind", "breath", "shoulder", "shoulders", "feet", "foot", "legs", "leg",
     "fingers", "finger", "lips", "mouth", "heart", "way", "time", "chance",
     "moment", "best", "attention", "gaze", "fist", "teeth", "back"}
)

GENRE_KEYWORDS: dict[str, frozenset[str]] = {
    "mystery": frozenset(
        {"detective", "clue", "clues", "murder", "suspect", "investigation",
         "alibi", "evidence", "crime", "mystery", "inspector", "witness"}
    ),
    "romance": frozenset(
        {"love", "kiss", "heart", "romance", "wedding", "passion", "embrace",
         "desire", "lover", "beloved", "date", "marry"}
    ),
    "fantasy": frozenset(
        {"magic", "dragon", "wizard", "spell", "sword", "kingdom", "elf",
         "sorcerer", "enchanted", "quest", "prophecy", "castle"}
    ),
    "science fiction": frozenset(
        {"spaceship", "planet", "robot", "alien", "galaxy", "laser", "starship",
         "android", "orbit", "quantum", "colony", "cyborg"}
    ),
    "horror": frozenset(
        {"blood", "ghost", "scream", "monster", "haunted", "corpse", "terror",
         "demon", "grave", "nightmare", "shadow", "creature"}
    ),
    "thriller": frozenset(
        {"chase", "bomb", "agent", "conspiracy", "escape", "gun", "hostage",
         "threat", "spy", "assassin", "danger", "pursuit"}
    ),
    "historical": frozenset(
        {"century", "king", "queen", "empire", "war", "ancient", "medieval",
         "duke", "carriage", "manor", "lord", "lady"}
    ),
    "adventure": frozenset(
        {"journey", "treasure", "map", "explore", "expedition", "island",
         "jungle", "mountain", "voyage", "ship", "discover", "wild"}
    ),
}


def genre_scores(words: Iterable[str]) -> dict[str, int]:
    """Count genre keyword hits in a stream of lowercase words."""
    scores = dict.fromkeys(GENRE_KEYWORDS, 0)
    for word in words:
        for genre, keywords in GENRE_KEYWORDS.items():
            if word in keywords:
                scores[genre] += 1
    return scores
