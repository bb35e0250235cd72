"""Core domain dataclasses and enums shared across all persona_engine modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

_WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


# ---------------------------------------------------------------------------
# Closed catalogs
# ---------------------------------------------------------------------------


class Mood(str, Enum):
    """User-selectable moods.  Declaration order is the vector index order."""

    CHILL = "chill"
    COMPETITIVE = "competitive"
    ENERGETIC = "energetic"
    FOCUSED = "focused"
    SOCIAL = "social"
    CREATIVE = "creative"
    STORY = "story"
    EXPLORATORY = "exploratory"


class Archetype(str, Enum):
    """Playstyle archetypes.  Declaration order breaks classification ties."""

    EXPLORER = "explorer"
    ACHIEVER = "achiever"
    SOCIAL = "social"
    STRATEGIST = "strategist"
    CASUAL = "casual"
    COMPETITIVE = "competitive"
    CREATIVE = "creative"


class TimeOfDay(str, Enum):
    """Coarse time-of-day buckets used for mood rhythms and time preferences."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @classmethod
    def for_timestamp(cls, ts: datetime) -> TimeOfDay:
        """Bucket *ts* by hour: 06-12 morning, 12-18 afternoon, 18-22 evening."""
        hour = ts.hour
        if 6 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 18:
            return cls.AFTERNOON
        if 18 <= hour < 22:
            return cls.EVENING
        return cls.NIGHT


class TriggerType(str, Enum):
    """How a mood selection came about."""

    MANUAL = "manual"
    SUGGESTED = "suggested"
    AUTO = "auto"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class ActionType(str, Enum):
    """User feedback actions applied retroactively to the latest mood event."""

    LAUNCH = "launch"
    IGNORE = "ignore"
    RATE = "rate"
    SWITCH_MOOD = "switch_mood"
    SESSION_COMPLETE = "session_complete"


class SocialContext(str, Enum):
    SOLO = "solo"
    CO_OP = "co-op"
    PVP = "pvp"


class SessionLengthBucket(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class DifficultyLevel(str, Enum):
    CASUAL = "casual"
    NORMAL = "normal"
    HARD = "hard"
    EXPERT = "expert"


class SocialPreference(str, Enum):
    SOLO = "solo"
    COOPERATIVE = "cooperative"
    COMPETITIVE = "competitive"


class ImprovementTrend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class InsightType(str, Enum):
    PATTERN = "pattern"
    ANOMALY = "anomaly"
    RECOMMENDATION = "recommendation"


def weekday_name(ts: datetime) -> str:
    """Return the lowercase English weekday name for *ts*."""
    return _WEEKDAY_NAMES[ts.weekday()]


# ---------------------------------------------------------------------------
# Catalog and session facts
# ---------------------------------------------------------------------------


@dataclass
class Game:
    """A single candidate game in the catalogue.

    Attributes:
        game_id: Unique identifier for the game.
        title: Human-readable title.
        genres: Lowercase genre labels (e.g. ``"rpg"``, ``"puzzle"``).
        tags: Lowercase descriptive tags (e.g. ``"cozy"``, ``"open-world"``).
        platforms: Lowercase platform labels (``"pc"``, ``"console"``, ``"mobile"``).
        difficulty: Optional difficulty in [0, 1].
        estimated_playtime_minutes: Optional typical session length.
    """

    game_id: str
    title: str
    genres: list[str]
    tags: list[str]
    platforms: list[str] = field(default_factory=list)
    difficulty: float | None = None
    estimated_playtime_minutes: int | None = None


@dataclass(frozen=True)
class GameSession:
    """A recorded play session.  Immutable once recorded.

    Attributes:
        start_time: When the session started.
        duration_seconds: Session length in seconds.
        genre: Primary genre of the game played.
        observed_mood: Mood the user was in, if known.
        platform: Platform the session ran on.
        difficulty_score: Difficulty in [0, 1].
        is_multiplayer: Whether other players were involved.
        completed: Whether the user finished the content they started.
        rating: Optional 1-5 rating given after the session.
        tags: Descriptive tags of the game played.
    """

    start_time: datetime
    duration_seconds: int
    genre: str
    observed_mood: Mood | None = None
    platform: str = "pc"
    difficulty_score: float = 0.5
    is_multiplayer: bool = False
    completed: bool = False
    rating: int | None = None
    tags: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Playstyle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArchetypeDefinition:
    archetype: Archetype
    name: str
    description: str
    traits: frozenset[str]


@dataclass(frozen=True)
class PlayStylePreferences:
    """Deterministic preference values derived from session history.

    ``story_focus``, ``graphics_focus`` and ``gameplay_focus`` are 0-100.
    """

    session_length: SessionLengthBucket
    difficulty: DifficultyLevel
    social_preference: SocialPreference
    story_focus: float
    graphics_focus: float
    gameplay_focus: float


@dataclass(frozen=True)
class PlayStyleProfile:
    primary_archetype: ArchetypeDefinition
    secondary_archetype: ArchetypeDefinition | None
    traits: frozenset[str]
    preferences: PlayStylePreferences


# ---------------------------------------------------------------------------
# Mood trends and forecasts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserMoodRecord:
    """One observation of how much the user liked a mood (0-100) and when."""

    mood: Mood
    preference: float
    last_experienced: datetime


@dataclass(frozen=True)
class MoodTrend:
    mood: Mood
    direction: TrendDirection
    change_rate: float
    confidence: float
    timeframe: str


@dataclass(frozen=True)
class MoodTrendAnalysis:
    """All per-mood trends plus the dominant one and overall volatility (0-1)."""

    trends: list[MoodTrend]
    dominant_trend: MoodTrend | None
    volatility: float


@dataclass(frozen=True)
class ForecastFactors:
    trend_influence: float
    seasonality_influence: float
    volatility_adjustment: float


@dataclass(frozen=True)
class MoodForecast:
    """Probabilistic prediction of the user's next mood.

    Attributes:
        predicted_mood: Most likely next mood.
        confidence: Confidence in [0.1, 0.95].
        timeframe: Requested horizon (``"next_day"``, ``"next_week"``, ...).
        factors: Numeric breakdown of what drove the prediction.
        reasoning: Human-readable explanation lines.
        alternatives: Runner-up ``(mood, score)`` pairs, best-first.
    """

    predicted_mood: Mood
    confidence: float
    timeframe: str
    factors: ForecastFactors
    reasoning: list[str]
    alternatives: list[tuple[Mood, float]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Mood selection events and learned state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventContext:
    time_of_day: TimeOfDay
    day_of_week: str
    trigger: TriggerType = TriggerType.MANUAL

    @classmethod
    def from_timestamp(
        cls, ts: datetime, trigger: TriggerType = TriggerType.MANUAL
    ) -> EventContext:
        return cls(TimeOfDay.for_timestamp(ts), weekday_name(ts), trigger)


@dataclass(frozen=True)
class EventOutcomes:
    """Feedback attached to a mood selection, amended as user actions arrive."""

    games_recommended: int = 0
    games_launched: int = 0
    ignored_recommendations: int = 0
    average_session_duration: float | None = None
    user_rating: int | None = None


@dataclass(frozen=True)
class MoodSelectionEvent:
    """An append-only record of the user choosing a mood.

    Attributes:
        user_id: Owner of the event.
        primary_mood: The main mood selected.
        timestamp: When the selection happened.
        intensity: Strength of the secondary mood's influence, in [0, 1].
        secondary_mood: Optional blended mood.
        context: Time bucket, weekday and trigger.  Derived from
            *timestamp* when omitted.
        outcomes: Feedback counters for this selection.
    """

    user_id: str
    primary_mood: Mood
    timestamp: datetime
    intensity: float = 1.0
    secondary_mood: Mood | None = None
    context: EventContext | None = None
    outcomes: EventOutcomes = field(default_factory=EventOutcomes)

    def __post_init__(self) -> None:
        if self.context is None:
            object.__setattr__(self, "context", EventContext.from_timestamp(self.timestamp))

    @property
    def combination_key(self) -> str | None:
        """``"primary+secondary"`` for hybrid selections, else ``None``."""
        if self.secondary_mood is None:
            return None
        return f"{self.primary_mood.value}+{self.secondary_mood.value}"


@dataclass(frozen=True)
class UserAction:
    """A piece of user feedback about the most recent recommendations.

    Attributes:
        user_id: Owner of the action.
        action_type: What the user did.
        timestamp: When it happened.
        game_id: Game involved, if any.
        session_duration_minutes: Reported play time for ``launch`` and
            ``session_complete`` actions.
        rating: 1-5 rating for ``launch`` and ``rate`` actions.
        mood: New mood for ``switch_mood`` actions.
    """

    user_id: str
    action_type: ActionType
    timestamp: datetime
    game_id: str | None = None
    session_duration_minutes: float | None = None
    rating: int | None = None
    mood: Mood | None = None


@dataclass(frozen=True)
class DynamicMoodWeights:
    """Learned per-user, per-mood weight tables.

    Genre and tag weights are signed values in [-1, 1].  ``confidence`` is a
    function of ``sample_size`` only and never exceeds 0.9.
    """

    genre_weights: dict[str, float]
    tag_weights: dict[str, float]
    platform_biases: dict[str, float]
    time_preferences: dict[TimeOfDay, float]
    confidence: float
    sample_size: int
    last_updated: datetime


@dataclass(frozen=True)
class MoodPatterns:
    daily_rhythms: dict[TimeOfDay, tuple[Mood, ...]] = field(default_factory=dict)
    weekly_patterns: dict[str, tuple[Mood, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class AdaptationMetrics:
    learning_rate: float = 0.1
    prediction_accuracy: float = 0.5
    user_satisfaction_score: float = 0.7


@dataclass(frozen=True)
class PersonaState:
    """The full per-user aggregate.  Every update returns a new snapshot.

    Attributes:
        user_id: Owner of the state.
        profile: Current playstyle profile.
        mood_history: Mood selection events, oldest first.
        dynamic_mood_weights: Learned weights keyed by mood.
        mood_patterns: Moods seen per time bucket and weekday.
        hybrid_mood_preferences: Launch success ratio per
            ``"primary+secondary"`` pair.
        adaptation_metrics: Learning rate and quality estimates.
        version: Incremented on every snapshot, for optimistic concurrency.
    """

    user_id: str
    profile: PlayStyleProfile
    mood_history: tuple[MoodSelectionEvent, ...] = ()
    dynamic_mood_weights: dict[Mood, DynamicMoodWeights] = field(default_factory=dict)
    mood_patterns: MoodPatterns = field(default_factory=MoodPatterns)
    hybrid_mood_preferences: dict[str, float] = field(default_factory=dict)
    adaptation_metrics: AdaptationMetrics = field(default_factory=AdaptationMetrics)
    version: int = 0


# ---------------------------------------------------------------------------
# Recommendation I/O
# ---------------------------------------------------------------------------


@dataclass
class GameRecommendation:
    """A scored game.  ``score`` and all ``*_match`` values are 0-100."""

    game_id: str
    score: float
    reasons: list[str]
    mood_match: float
    playstyle_match: float
    social_match: float
    estimated_playtime_minutes: int
    difficulty: str
    tags: list[str]


@dataclass(frozen=True)
class MoodFilterContext:
    """Active mood(s) and situational context for the mood filter.

    Attributes:
        primary_mood: Main active mood.
        secondary_mood: Optional blended mood.
        intensity: Weight of the secondary mood, in [0, 1].
        user_genre_affinity: Optional genre -> affinity in [0, 1].
        time_available: Minutes the user has to play.
        social_context: Solo, co-op or pvp.
        platform: Platform the user is on.
    """

    primary_mood: Mood
    secondary_mood: Mood | None = None
    intensity: float = 1.0
    user_genre_affinity: dict[str, float] | None = None
    time_available: int | None = None
    social_context: SocialContext | None = None
    platform: str | None = None


@dataclass
class MoodInfluence:
    """Points each factor added to the base score (negative means penalty).

    ``primary`` is the sum of ``genre``, ``tags`` and ``platform``.
    """

    primary: float = 0.0
    secondary: float = 0.0
    genre: float = 0.0
    tags: float = 0.0
    platform: float = 0.0
    hybrid: float = 0.0
    compatibility: float = 0.0
    affinity: float = 0.0
    context: float = 0.0

    def total(self) -> float:
        return (
            self.primary
            + self.secondary
            + self.hybrid
            + self.compatibility
            + self.affinity
            + self.context
        )


@dataclass
class MoodFilterResult:
    game: Game
    score: float
    reasoning: str
    influence: MoodInfluence


@dataclass(frozen=True)
class MoodSuggestionContext:
    time_of_day: TimeOfDay
    social_context: SocialContext | None = None


@dataclass
class MoodSuggestion:
    mood: Mood
    confidence: float
    reasoning: list[str]
    contextual_factors: list[str]
    success_probability: float


# ---------------------------------------------------------------------------
# Session resonance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionData:
    """Observed facts about one play session used for resonance analysis.

    ``engagement`` and ``satisfaction`` are 0-100.
    """

    duration_minutes: float
    engagement: float
    timestamp: datetime
    satisfaction: float = 50.0
    game_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResonanceFactors:
    mood_alignment: float
    duration_fit: float
    engagement_correlation: float


@dataclass(frozen=True)
class SessionResonance:
    predicted_mood: Mood
    actual_mood: Mood
    resonance_score: float
    confidence_delta: float
    factors: ResonanceFactors
    session: SessionData


@dataclass
class ResonanceInsights:
    strongest_predictions: list[Mood] = field(default_factory=list)
    weakest_predictions: list[Mood] = field(default_factory=list)
    optimal_session_length: dict[Mood, float] = field(default_factory=dict)
    engagement_patterns: dict[Mood, float] = field(default_factory=dict)


@dataclass
class SessionResonanceAnalysis:
    total_sessions: int
    average_resonance: float
    mood_accuracy: dict[Mood, float]
    improvement_trend: ImprovementTrend
    insights: ResonanceInsights


# ---------------------------------------------------------------------------
# Session behavior analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MoodAnalysis:
    """Mood inferred from recent sessions.

    Attributes:
        mood: Strongest mood over the analysis window.
        confidence: Share of the total mood score held by *mood*, in [0, 1].
        intensity: Mean per-session score of *mood*, capped at 1.
        triggers: Session features that pointed at *mood*.
        reasoning: One human-readable sentence.
    """

    mood: Mood
    confidence: float
    intensity: float
    triggers: list[str]
    reasoning: str


@dataclass(frozen=True)
class SessionAnalysis:
    """Aggregate statistics over a session history.

    Genre and mood totals are in minutes played.  ``difficulty_preference``
    and ``social_preference`` are in [0, 1].
    """

    total_sessions: int
    total_minutes: float
    average_session_minutes: float
    preferred_genres: dict[str, float]
    mood_patterns: dict[Mood, float]
    difficulty_preference: float
    social_preference: float
    completion_rate: float
    peak_hours: list[int]
    recommendations: list[str]


@dataclass(frozen=True)
class TimePattern:
    """Play habits in one (hour, weekday) slot; ``likelihood`` is the share of sessions."""

    hour: int
    weekday: str
    genres: list[str]
    average_session_minutes: float
    likelihood: float


@dataclass(frozen=True)
class GenreSequence:
    """A run of consecutive genres and what the user tends to play after it."""

    sequence: tuple[str, ...]
    frequency: float
    next_genres: list[str]


@dataclass(frozen=True)
class MoodTransition:
    """How often one session's mood is followed by another's.

    ``probability`` is the share of consecutive session pairs with this
    transition; ``average_gap_minutes`` is the mean idle time between them.
    """

    from_mood: Mood
    to_mood: Mood
    probability: float
    average_gap_minutes: float
    genres: list[str]


@dataclass(frozen=True)
class BehaviorPatterns:
    time_patterns: list[TimePattern]
    genre_sequences: list[GenreSequence]
    mood_transitions: list[MoodTransition]
    session_count: int


@dataclass(frozen=True)
class BehaviorInsight:
    insight_type: InsightType
    title: str
    description: str
    confidence: float
    actionable: bool
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GenrePrediction:
    """Most likely next genre given the genres just played."""

    genre: str | None
    confidence: float
    reasoning: str
