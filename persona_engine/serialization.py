"""PersonaState <-> JSON-compatible dict conversion for caller-side persistence.

Enums are stored by value, timestamps as ISO-8601 strings and archetypes by
id.  ``persona_from_dict(persona_to_dict(state)) == state`` for any state.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from persona_engine.models import (
    AdaptationMetrics,
    Archetype,
    DifficultyLevel,
    DynamicMoodWeights,
    EventContext,
    EventOutcomes,
    Mood,
    MoodPatterns,
    MoodSelectionEvent,
    PersonaState,
    PlayStylePreferences,
    PlayStyleProfile,
    SessionLengthBucket,
    SocialPreference,
    TimeOfDay,
    TriggerType,
)
from persona_engine.playstyle import ARCHETYPES

SCHEMA_VERSION = 1


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def persona_to_dict(state: PersonaState) -> dict[str, Any]:
    """Convert *state* into plain dicts, lists, strings and numbers."""
    return {
        "schema_version": SCHEMA_VERSION,
        "user_id": state.user_id,
        "version": state.version,
        "profile": _profile_to_dict(state.profile),
        "mood_history": [_event_to_dict(e) for e in state.mood_history],
        "dynamic_mood_weights": {
            mood.value: _weights_to_dict(w) for mood, w in state.dynamic_mood_weights.items()
        },
        "mood_patterns": {
            "daily_rhythms": {
                bucket.value: [m.value for m in moods]
                for bucket, moods in state.mood_patterns.daily_rhythms.items()
            },
            "weekly_patterns": {
                day: [m.value for m in moods]
                for day, moods in state.mood_patterns.weekly_patterns.items()
            },
        },
        "hybrid_mood_preferences": dict(state.hybrid_mood_preferences),
        "adaptation_metrics": {
            "learning_rate": state.adaptation_metrics.learning_rate,
            "prediction_accuracy": state.adaptation_metrics.prediction_accuracy,
            "user_satisfaction_score": state.adaptation_metrics.user_satisfaction_score,
        },
    }


def persona_from_dict(data: dict[str, Any]) -> PersonaState:
    """Rebuild a :class:`PersonaState` from :func:`persona_to_dict` output.

    Raises:
        ValueError: If the data was written by an unknown schema version or
            names an unknown mood, archetype or time bucket.
        KeyError: If a required field is missing.
    """
    schema_version = data.get("schema_version", SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        raise ValueError(f"Unsupported persona schema version: {schema_version}")

    patterns = data.get("mood_patterns", {})
    metrics = data.get("adaptation_metrics", {})
    return PersonaState(
        user_id=data["user_id"],
        profile=_profile_from_dict(data["profile"]),
        mood_history=tuple(_event_from_dict(e) for e in data.get("mood_history", [])),
        dynamic_mood_weights={
            Mood(mood): _weights_from_dict(w)
            for mood, w in data.get("dynamic_mood_weights", {}).items()
        },
        mood_patterns=MoodPatterns(
            daily_rhythms={
                TimeOfDay(bucket): tuple(Mood(m) for m in moods)
                for bucket, moods in patterns.get("daily_rhythms", {}).items()
            },
            weekly_patterns={
                day: tuple(Mood(m) for m in moods)
                for day, moods in patterns.get("weekly_patterns", {}).items()
            },
        ),
        hybrid_mood_preferences={
            k: float(v) for k, v in data.get("hybrid_mood_preferences", {}).items()
        },
        adaptation_metrics=AdaptationMetrics(**metrics),
        version=int(data.get("version", 0)),
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _profile_to_dict(profile: PlayStyleProfile) -> dict[str, Any]:
    prefs = profile.preferences
    secondary = profile.secondary_archetype
    return {
        "primary_archetype": profile.primary_archetype.archetype.value,
        "secondary_archetype": secondary.archetype.value if secondary else None,
        "traits": sorted(profile.traits),
        "preferences": {
            "session_length": prefs.session_length.value,
            "difficulty": prefs.difficulty.value,
            "social_preference": prefs.social_preference.value,
            "story_focus": prefs.story_focus,
            "graphics_focus": prefs.graphics_focus,
            "gameplay_focus": prefs.gameplay_focus,
        },
    }


def _profile_from_dict(data: dict[str, Any]) -> PlayStyleProfile:
    prefs = data["preferences"]
    secondary = data.get("secondary_archetype")
    return PlayStyleProfile(
        primary_archetype=ARCHETYPES[Archetype(data["primary_archetype"])],
        secondary_archetype=ARCHETYPES[Archetype(secondary)] if secondary else None,
        traits=frozenset(data.get("traits", [])),
        preferences=PlayStylePreferences(
            session_length=SessionLengthBucket(prefs["session_length"]),
            difficulty=DifficultyLevel(prefs["difficulty"]),
            social_preference=SocialPreference(prefs["social_preference"]),
            story_focus=float(prefs["story_focus"]),
            graphics_focus=float(prefs["graphics_focus"]),
            gameplay_focus=float(prefs["gameplay_focus"]),
        ),
    )


def _event_to_dict(event: MoodSelectionEvent) -> dict[str, Any]:
    outcomes = event.outcomes
    return {
        "user_id": event.user_id,
        "primary_mood": event.primary_mood.value,
        "secondary_mood": event.secondary_mood.value if event.secondary_mood else None,
        "intensity": event.intensity,
        "timestamp": event.timestamp.isoformat(),
        "context": {
            "time_of_day": event.context.time_of_day.value,
            "day_of_week": event.context.day_of_week,
            "trigger": event.context.trigger.value,
        },
        "outcomes": {
            "games_recommended": outcomes.games_recommended,
            "games_launched": outcomes.games_launched,
            "ignored_recommendations": outcomes.ignored_recommendations,
            "average_session_duration": outcomes.average_session_duration,
            "user_rating": outcomes.user_rating,
        },
    }


def _event_from_dict(data: dict[str, Any]) -> MoodSelectionEvent:
    context = data.get("context")
    secondary = data.get("secondary_mood")
    return MoodSelectionEvent(
        user_id=data["user_id"],
        primary_mood=Mood(data["primary_mood"]),
        secondary_mood=Mood(secondary) if secondary else None,
        intensity=float(data.get("intensity", 1.0)),
        timestamp=datetime.fromisoformat(data["timestamp"]),
        context=(
            EventContext(
                time_of_day=TimeOfDay(context["time_of_day"]),
                day_of_week=context["day_of_week"],
                trigger=TriggerType(context.get("trigger", TriggerType.MANUAL.value)),
            )
            if context
            else None
        ),
        outcomes=EventOutcomes(**data.get("outcomes", {})),
    )


def _weights_to_dict(weights: DynamicMoodWeights) -> dict[str, Any]:
    return {
        "genre_weights": dict(weights.genre_weights),
        "tag_weights": dict(weights.tag_weights),
        "platform_biases": dict(weights.platform_biases),
        "time_preferences": {b.value: v for b, v in weights.time_preferences.items()},
        "confidence": weights.confidence,
        "sample_size": weights.sample_size,
        "last_updated": weights.last_updated.isoformat(),
    }


def _weights_from_dict(data: dict[str, Any]) -> DynamicMoodWeights:
    return DynamicMoodWeights(
        genre_weights={k: float(v) for k, v in data["genre_weights"].items()},
        tag_weights={k: float(v) for k, v in data["tag_weights"].items()},
        platform_biases={k: float(v) for k, v in data.get("platform_biases", {}).items()},
        time_preferences={
            TimeOfDay(b): float(v) for b, v in data.get("time_preferences", {}).items()
        },
        confidence=float(data["confidence"]),
        sample_size=int(data["sample_size"]),
        last_updated=datetime.fromisoformat(data["last_updated"]),
    )
