"""Playstyle classification: maps session history onto a fixed archetype catalog."""

from __future__ import annotations

import logging
import statistics

from persona_engine.models import (
    Archetype,
    ArchetypeDefinition,
    DifficultyLevel,
    GameSession,
    Mood,
    PlayStylePreferences,
    PlayStyleProfile,
    SessionLengthBucket,
    SocialPreference,
)
from persona_engine.profiling import difficulty_level

logger = logging.getLogger(__name__)

# Ordered by declaration; earlier archetypes win score ties
ARCHETYPES: dict[Archetype, ArchetypeDefinition] = {
    Archetype.EXPLORER: ArchetypeDefinition(
        Archetype.EXPLORER,
        "Explorer",
        "Enjoys discovering new content and secrets",
        frozenset({"curious", "thorough", "adventurous", "detail-oriented"}),
    ),
    Archetype.ACHIEVER: ArchetypeDefinition(
        Archetype.ACHIEVER,
        "Achiever",
        "Driven by goals, completion and mastery",
        frozenset({"goal-oriented", "completionist", "competitive", "dedicated"}),
    ),
    Archetype.SOCIAL: ArchetypeDefinition(
        Archetype.SOCIAL,
        "Social",
        "Prefers playing and interacting with others",
        frozenset({"cooperative", "communicative", "team-player", "friendly"}),
    ),
    Archetype.STRATEGIST: ArchetypeDefinition(
        Archetype.STRATEGIST,
        "Strategist",
        "Loves planning, tactics and deep thinking",
        frozenset({"analytical", "tactical", "patient", "forward-thinking"}),
    ),
    Archetype.CASUAL: ArchetypeDefinition(
        Archetype.CASUAL,
        "Casual",
        "Plays for relaxation and entertainment",
        frozenset({"relaxed", "flexible", "entertainment-focused", "stress-free"}),
    ),
    Archetype.COMPETITIVE: ArchetypeDefinition(
        Archetype.COMPETITIVE,
        "Competitive",
        "Thrives on competition and skill-based gameplay",
        frozenset({"competitive", "strategic", "skill-focused", "win-driven"}),
    ),
    Archetype.CREATIVE: ArchetypeDefinition(
        Archetype.CREATIVE,
        "Creative",
        "Enjoys building, customizing and expressing creativity",
        frozenset({"imaginative", "expressive", "builder", "innovative"}),
    ),
}

_MAX_PROFILE_TRAITS = 8
_HIGH_RATING_MULTIPLIER = 1.25

_EXPLORATION_LABELS = frozenset({"adventure", "rpg", "exploration", "discovery", "open-world"})
_STRATEGY_LABELS = frozenset({"strategy", "puzzle", "tactical", "strategic"})
_CREATIVE_LABELS = frozenset({"simulation", "sandbox", "creative", "building", "customization"})
_STORY_LABELS = frozenset({"rpg", "adventure", "story", "story-driven", "narrative"})
_VISUAL_LABELS = frozenset({"atmospheric", "immersive", "open-world", "beautiful"})
_GAMEPLAY_LABELS = frozenset({"action", "strategy", "puzzle", "sports", "racing"})
_COMPETITIVE_LABELS = frozenset({"competitive", "pvp", "sports"})

_MOOD_TRAITS: dict[Mood, tuple[str, ...]] = {
    Mood.CHILL: ("relaxed",),
    Mood.COMPETITIVE: ("win-driven",),
    Mood.ENERGETIC: ("entertainment-focused",),
    Mood.FOCUSED: ("patient",),
    Mood.SOCIAL: ("friendly",),
    Mood.CREATIVE: ("imaginative",),
    Mood.STORY: ("curious",),
    Mood.EXPLORATORY: ("curious", "adventurous"),
}


def default_profile() -> PlayStyleProfile:
    """Fixed profile for users without any sessions."""
    return PlayStyleProfile(
        primary_archetype=ARCHETYPES[Archetype.CASUAL],
        secondary_archetype=None,
        traits=frozenset({"relaxed", "flexible"}),
        preferences=PlayStylePreferences(
            session_length=SessionLengthBucket.MEDIUM,
            difficulty=DifficultyLevel.NORMAL,
            social_preference=SocialPreference.SOLO,
            story_focus=70.0,
            graphics_focus=60.0,
            gameplay_focus=80.0,
        ),
    )


class PlaystyleClassifier:
    """Classifies a user's archetypes and preferences from their sessions.

    Trait evidence from each session is weighted by recency: a session
    *half_life_days* older than the newest session counts half as much.
    Age is measured against the newest session rather than the wall clock,
    so the result depends on the input alone.

    Args:
        half_life_days: Recency half-life for trait evidence.
    """

    def __init__(self, half_life_days: float = 30.0) -> None:
        if half_life_days <= 0:
            raise ValueError("half_life_days must be positive")
        self._half_life_days = half_life_days

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def compute_playstyle(self, sessions: list[GameSession]) -> PlayStyleProfile:
        """Return the :class:`PlayStyleProfile` for *sessions*.

        Args:
            sessions: Session history in any order.

        Returns:
            The classified profile, or :func:`default_profile` when
            *sessions* is empty or exhibits no archetype traits.
        """
        if not sessions:
            return default_profile()

        trait_weights = self._weigh_traits(sessions)
        scores = {
            archetype: sum(trait_weights.get(t, 0.0) for t in definition.traits)
            for archetype, definition in ARCHETYPES.items()
        }
        primary = self._best_archetype(scores, exclude=None)
        if primary is None:
            logger.debug("No archetype traits in %d sessions; using default", len(sessions))
            profile = default_profile()
            return PlayStyleProfile(
                primary_archetype=profile.primary_archetype,
                secondary_archetype=None,
                traits=profile.traits,
                preferences=self._compute_preferences(sessions),
            )
        secondary = self._best_archetype(scores, exclude=primary)

        ranked_traits = sorted(trait_weights.items(), key=lambda kv: (-kv[1], kv[0]))
        traits = frozenset(t for t, _ in ranked_traits[:_MAX_PROFILE_TRAITS])

        return PlayStyleProfile(
            primary_archetype=ARCHETYPES[primary],
            secondary_archetype=ARCHETYPES[secondary] if secondary else None,
            traits=traits,
            preferences=self._compute_preferences(sessions),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _weigh_traits(self, sessions: list[GameSession]) -> dict[str, float]:
        newest = max(s.start_time for s in sessions)
        weights: dict[str, float] = {}
        for session in sessions:
            age_days = (newest - session.start_time).total_seconds() / 86400.0
            weight = 0.5 ** (age_days / self._half_life_days)
            if session.rating is not None and session.rating >= 4:
                weight *= _HIGH_RATING_MULTIPLIER
            for trait in _session_traits(session):
                weights[trait] = weights.get(trait, 0.0) + weight
        return weights

    @staticmethod
    def _best_archetype(
        scores: dict[Archetype, float], exclude: Archetype | None
    ) -> Archetype | None:
        best: Archetype | None = None
        best_score = 0.0
        for archetype, score in scores.items():
            if archetype == exclude:
                continue
            if score > best_score:
                best, best_score = archetype, score
        return best

    @staticmethod
    def _compute_preferences(sessions: list[GameSession]) -> PlayStylePreferences:
        median_minutes = statistics.median(s.duration_seconds / 60.0 for s in sessions)
        if median_minutes < 45:
            session_length = SessionLengthBucket.SHORT
        elif median_minutes < 90:
            session_length = SessionLengthBucket.MEDIUM
        else:
            session_length = SessionLengthBucket.LONG

        difficulty = difficulty_level(statistics.fmean(s.difficulty_score for s in sessions))

        multiplayer = [s for s in sessions if s.is_multiplayer]
        if len(multiplayer) / len(sessions) > 0.6:
            competitive = sum(1 for s in multiplayer if _is_competitive_session(s))
            social = (
                SocialPreference.COMPETITIVE
                if competitive * 2 > len(multiplayer)
                else SocialPreference.COOPERATIVE
            )
        else:
            social = SocialPreference.SOLO

        return PlayStylePreferences(
            session_length=session_length,
            difficulty=difficulty,
            social_preference=social,
            story_focus=_label_share(sessions, _STORY_LABELS),
            graphics_focus=_label_share(sessions, _VISUAL_LABELS),
            gameplay_focus=_label_share(sessions, _GAMEPLAY_LABELS),
        )


def _session_labels(session: GameSession) -> set[str]:
    return {session.genre, *session.tags}


def _session_traits(session: GameSession) -> set[str]:
    """Traits a single session gives evidence for, each counted once."""
    labels = _session_labels(session)
    minutes = session.duration_seconds / 60.0
    traits: set[str] = set()

    if minutes > 120:
        traits.add("dedicated")
    elif minutes < 30:
        traits.update(("flexible", "stress-free"))
    if session.difficulty_score >= 0.8:
        traits.update(("competitive", "skill-focused"))
    elif session.difficulty_score <= 0.3:
        traits.update(("relaxed", "stress-free"))
    if session.completed:
        traits.update(("completionist", "goal-oriented"))
    if session.is_multiplayer:
        traits.update(("cooperative", "team-player", "communicative"))
        if _is_competitive_session(session):
            traits.update(("win-driven", "competitive"))
    if labels & _EXPLORATION_LABELS:
        traits.update(("curious", "adventurous"))
        if session.completed:
            traits.update(("thorough", "detail-oriented"))
    if labels & _STRATEGY_LABELS:
        traits.update(("analytical", "tactical", "strategic"))
        if minutes >= 60:
            traits.update(("patient", "forward-thinking"))
    if labels & _CREATIVE_LABELS:
        traits.update(("imaginative", "builder", "expressive", "innovative"))
    if session.genre == "casual":
        traits.update(("entertainment-focused", "relaxed"))
    if session.observed_mood is not None:
        traits.update(_MOOD_TRAITS[session.observed_mood])
    return traits


def _is_competitive_session(session: GameSession) -> bool:
    return session.observed_mood == Mood.COMPETITIVE or bool(
        _session_labels(session) & _COMPETITIVE_LABELS
    )


def _label_share(sessions: list[GameSession], labels: frozenset[str]) -> float:
    hits = sum(1 for s in sessions if _session_labels(s) & labels)
    return round(100.0 * hits / len(sessions), 1)
