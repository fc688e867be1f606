"""Result records produced by the analyzers.

Every record is a pydantic model. Narrative records serialize with camelCase
keys (``model_dump(by_alias=True)``) while the reader-simulation records keep
their snake_case field names, so the JSON shape matches what tool clients
already consume.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EMOTION_AXES: tuple[str, ...] = ("joy", "sadness", "anger", "fear", "surprise")


class CharacterAction(str, Enum):
    """How a character takes part in a paragraph."""

    ENTER = "enter"
    EXIT = "exit"
    MENTION = "mention"


class ContinuityErrorType(str, Enum):
    """Kind of contradiction detected."""

    CHARACTER = "character"
    EVENT = "event"
    TIMELINE = "timeline"


class Severity(str, Enum):
    """Continuity error severity, ordered high > medium > low."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecordModel(BaseModel):
    """Base for records that keep snake_case keys."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dictionary."""
        return self.model_dump(mode="json", by_alias=True)


class CamelModel(RecordModel):
    """Base for records serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, use_enum_values=True, populate_by_name=True
    )


# Characters


class CharacterAppearance(CamelModel):
    paragraph: int = Field(..., ge=1)
    action: CharacterAction
    location: str | None = None


class Character(CamelModel):
    """Ledger entry for one character during a single analysis."""

    name: str
    current_location: str | None = None
    last_mention: int | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    appearances: list[CharacterAppearance] = Field(default_factory=list)


class ContinuityError(CamelModel):
    """A detected contradiction between two narrative facts."""

    type: ContinuityErrorType
    description: str
    paragraph: int
    severity: Severity
    suggestion: str | None = None


class CharacterStatistics(CamelModel):
    total_characters: int = 0
    appearances_per_character: dict[str, int] = Field(default_factory=dict)
    location_frequency: dict[str, int] = Field(default_factory=dict)
    most_frequent_locations: list[str] = Field(default_factory=list)
    character_interactions: dict[str, list[str]] = Field(default_factory=dict)


class CharacterAnalysis(CamelModel):
    characters: list[Character] = Field(default_factory=list)
    continuity_errors: list[ContinuityError] = Field(default_factory=list)
    statistics: CharacterStatistics = Field(default_factory=CharacterStatistics)
    suggestions: list[str] = Field(default_factory=list)


# Events


class Event(CamelModel):
    name: str
    paragraph: int
    characters: list[str] = Field(default_factory=list)
    location: str | None = None
    description: str
    timestamp: str | None = None


class TimelineEntry(CamelModel):
    event: str
    timestamp: str
    relative_position: int
    paragraph: int


class EventSequence(CamelModel):
    """Adjacent events that share characters and location."""

    events: list[str]
    characters: list[str] = Field(default_factory=list)
    location: str | None = None
    start_paragraph: int
    end_paragraph: int


class PlotHole(CamelModel):
    """An event that relies on something the story never set up."""

    description: str
    paragraph: int
    precondition: str
    events: list[str] = Field(default_factory=list)


class EventChain(CamelModel):
    sequences: list[EventSequence] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)
    possible_plot_holes: list[PlotHole] = Field(default_factory=list)


class EventAnalysis(CamelModel):
    events: list[Event] = Field(default_factory=list)
    continuity_errors: list[ContinuityError] = Field(default_factory=list)
    event_chain: EventChain = Field(default_factory=EventChain)
    suggestions: list[str] = Field(default_factory=list)


# Emotions


class EmotionalScore(CamelModel):
    """Five independent non-negative emotion magnitudes."""

    joy: float = Field(default=0.0, ge=0.0)
    sadness: float = Field(default=0.0, ge=0.0)
    anger: float = Field(default=0.0, ge=0.0)
    fear: float = Field(default=0.0, ge=0.0)
    surprise: float = Field(default=0.0, ge=0.0)

    @property
    def total(self) -> float:
        return self.joy + self.sadness + self.anger + self.fear + self.surprise

    def dominant(self) -> tuple[str, float]:
        """Return the strongest axis, earliest axis first on ties."""
        best = max(EMOTION_AXES, key=lambda axis: getattr(self, axis))
        return best, getattr(self, best)


class Scene(CamelModel):
    start_paragraph: int
    end_paragraph: int
    characters: list[str] = Field(default_factory=list)
    location: str | None = None
    emotional_score: EmotionalScore = Field(default_factory=EmotionalScore)


class ArcPoint(CamelModel):
    scene: int
    paragraph: int
    emotions: EmotionalScore
    magnitude: float


class EmotionalArc(CamelModel):
    points: list[ArcPoint] = Field(default_factory=list)
    overall_trend: Literal["rising", "falling", "flat"] = "flat"
    dominant_trend: str | None = None


class EmotionalHighPoint(CamelModel):
    paragraph: int
    emotion: str
    intensity: float
    context: str


class EmotionAnalysis(CamelModel):
    scenes: list[Scene] = Field(default_factory=list)
    emotional_arc: EmotionalArc = Field(default_factory=EmotionalArc)
    pacing_suggestions: list[str] = Field(default_factory=list)
    emotional_high_points: list[EmotionalHighPoint] = Field(default_factory=list)


# Dialogue


class DialogueSegment(CamelModel):
    """A quoted span; speaker is None when attribution is not confident."""

    speaker: str | None = None
    text: str
    paragraph: int
    emotional_tone: str
    suggestions: list[str] = Field(default_factory=list)


class DialogueStatistics(CamelModel):
    total_segments: int = 0
    segments_per_character: dict[str, int] = Field(default_factory=dict)
    average_length: float = 0.0
    emotional_tone_distribution: dict[str, int] = Field(default_factory=dict)
    unattributed_segments: int = 0


class DialogueAnalysis(CamelModel):
    dialogue_segments: list[DialogueSegment] = Field(default_factory=list)
    statistics: DialogueStatistics = Field(default_factory=DialogueStatistics)
    general_suggestions: list[str] = Field(default_factory=list)


# Repetition


class PhraseContext(CamelModel):
    before: str
    term: str
    after: str
    position: int


class RepetitionInstance(CamelModel):
    term: str
    count: int
    contexts: list[PhraseContext] = Field(default_factory=list)
    is_phrase: bool = False


class TermCount(CamelModel):
    term: str
    count: int


class RepetitionStatistics(CamelModel):
    total_repetitions: int = 0
    most_frequent_word: TermCount | None = None
    most_frequent_phrase: TermCount | None = None


class RepetitionAnalysis(CamelModel):
    repeated_words: list[RepetitionInstance] = Field(default_factory=list)
    repeated_phrases: list[RepetitionInstance] = Field(default_factory=list)
    statistics: RepetitionStatistics = Field(default_factory=RepetitionStatistics)


# Thesaurus


class SynonymContext(CamelModel):
    tone: Literal["positive", "negative", "neutral"] = "neutral"
    intensity: float = Field(default=0.0, ge=0.0, le=1.0)
    formality: Literal["formal", "informal", "neutral"] = "neutral"
    text_register: Literal["dialogue", "action", "description"] = Field(
        default="description", alias="register"
    )
    grammatical_role: str = "unknown"


class NarrativeContext(CamelModel):
    genre: str = "general"
    perspective: Literal["first-person", "second-person", "third-person"] = (
        "third-person"
    )
    timeframe: Literal["historical", "contemporary", "future"] = "contemporary"
    style: str = "neutral"
    dominant_emotion: str | None = None


class ThesaurusSuggestion(CamelModel):
    word: str
    synonyms: list[str] = Field(default_factory=list)
    context: SynonymContext
    narrative_context: NarrativeContext
    score: float


# Reader simulation

EducationLevel = Literal[
    "primary", "secondary", "undergraduate", "postgraduate", "professional"
]
ReadingSpeed = Literal["slow", "average", "fast"]
AttentionSpan = Literal["short", "medium", "long"]
LanguageProficiency = Literal["basic", "intermediate", "advanced", "native"]


class ReaderDemographics(RecordModel):
    """Immutable reader profile; invalid values are rejected, never clamped."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    age: int = Field(..., ge=5, le=100)
    education_level: EducationLevel = Field(..., alias="educationLevel")
    reading_speed: ReadingSpeed = Field(..., alias="readingSpeed")
    attention_span: AttentionSpan = Field(..., alias="attentionSpan")
    interests: tuple[str, ...] = ()
    genre_preferences: tuple[str, ...] = ()
    language_proficiency: LanguageProficiency


MarkerType = Literal[
    "interest_peak", "attention_drop", "confusion", "skimming_start", "skimming_end"
]


class EngagementMarker(RecordModel):
    type: MarkerType
    description: str
    intensity: float = Field(..., ge=0.0, le=1.0)


class ReadingBehavior(RecordModel):
    """One simulated sample per paragraph."""

    elapsed_time: float
    paragraph_number: int
    attention_level: float = Field(..., ge=0.0, le=1.0)
    comprehension_level: float = Field(..., ge=0.0, le=1.0)
    is_skimming: bool
    reading_speed_wpm: float
    engagement_markers: list[EngagementMarker] = Field(default_factory=list)


class SectionSpan(RecordModel):
    start_paragraph: int
    end_paragraph: int
    score: float


class EngagementSummary(RecordModel):
    most_engaging_sections: list[SectionSpan] = Field(default_factory=list)
    least_engaging_sections: list[SectionSpan] = Field(default_factory=list)
    skimmed_sections: list[SectionSpan] = Field(default_factory=list)
    overall_engagement_score: float = 0.0
    reading_completion_rate: float = 0.0
    average_comprehension: float = 0.0


class ReaderSuggestion(RecordModel):
    type: Literal["pacing", "complexity", "engagement", "structure"]
    description: str
    paragraph_range: tuple[int, int] | None = None
    priority: Literal["high", "medium", "low"]


class ReaderSimulationResult(RecordModel):
    reader_profile: ReaderDemographics
    reading_timeline: list[ReadingBehavior] = Field(default_factory=list)
    engagement_summary: EngagementSummary = Field(default_factory=EngagementSummary)
    suggestions: list[ReaderSuggestion] = Field(default_factory=list)


# Composite


class ManuscriptSummary(CamelModel):
    dialogue_count: int = 0
    scene_count: int = 0
    character_count: int = 0
    event_count: int = 0
    continuity_errors: int = 0


class ManuscriptAnalysis(CamelModel):
    characters: CharacterAnalysis
    events: EventAnalysis
    emotions: EmotionAnalysis
    dialogue: DialogueAnalysis
    summary: ManuscriptSummary
    suggestions: list[str] = Field(default_factory=list)
