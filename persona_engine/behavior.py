"""Session behavior analysis: mood inference, aggregate stats and habit patterns.

Everything here is a pure function over a list of
:class:`~persona_engine.models.GameSession`.  Sessions may arrive in any
order; functions that care about sequence sort by ``start_time`` first.
Where a session carries no ``observed_mood`` its mood is inferred from its
genre, tags and multiplayer flag using the mood weight tables.
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter
from datetime import datetime, timedelta

from persona_engine.models import (
    BehaviorInsight,
    BehaviorPatterns,
    GameSession,
    GenrePrediction,
    GenreSequence,
    InsightType,
    Mood,
    MoodAnalysis,
    MoodTransition,
    SessionAnalysis,
    TimePattern,
    weekday_name,
)
from persona_engine.moods import MOOD_DEFINITIONS

logger = logging.getLogger(__name__)

_DEFAULT_MOOD = Mood.CHILL
_MULTIPLAYER_SOCIAL_BONUS = 0.5

# How strongly a session in each mood signals that mood
_SESSION_MOOD_WEIGHTS: dict[Mood, float] = {
    Mood.CHILL: 0.3,
    Mood.COMPETITIVE: 0.9,
    Mood.ENERGETIC: 0.9,
    Mood.FOCUSED: 0.8,
    Mood.SOCIAL: 0.6,
    Mood.CREATIVE: 0.4,
    Mood.STORY: 0.5,
    Mood.EXPLORATORY: 0.5,
}

_FULL_WEIGHT_MINUTES = 60.0
_CONFIDENCE_BOOST = 0.2
_SHORT_SESSION_MINUTES = 30.0
_LONG_SESSION_MINUTES = 120.0
_HIGH_INTENSITY = 0.8
_LOW_INTENSITY = 0.3

_PEAK_HOURS = 3
_PEAK_HOUR_SHARE = 0.7
_SEQUENCE_LENGTH = 3
_FREQUENT_SEQUENCE = 0.3
_FREQUENT_TRANSITION = 0.3
_UNUSUAL_SLOT_LIKELIHOOD = 0.05


# ---------------------------------------------------------------------------
# Mood inference
# ---------------------------------------------------------------------------


def infer_session_mood(session: GameSession) -> Mood:
    """Return the session's observed mood, or infer one from its labels.

    Each mood scores the sum of its genre and tag weights over the session's
    labels; multiplayer sessions add a bonus to :attr:`Mood.SOCIAL`.  Ties go
    to the earlier mood in declaration order, and a session matching nothing
    falls back to chill.
    """
    if session.observed_mood is not None:
        return session.observed_mood
    labels = {session.genre, *session.tags}
    best, best_score = _DEFAULT_MOOD, 0.0
    for mood, definition in MOOD_DEFINITIONS.items():
        score = sum(
            definition.genre_weights.get(label, 0.0) + definition.tag_weights.get(label, 0.0)
            for label in labels
        )
        if mood == Mood.SOCIAL and session.is_multiplayer:
            score += _MULTIPLAYER_SOCIAL_BONUS
        if score > best_score:
            best, best_score = mood, score
    return best


def analyze_mood(
    sessions: list[GameSession],
    now: datetime | None = None,
    window_days: int = 7,
) -> MoodAnalysis:
    """Infer the user's current mood from sessions inside a recent window.

    Each recent session contributes
    ``mood_weight * min(1, minutes / 60) * difficulty_score`` to its mood.
    ``confidence`` is the winning share of the total plus a 0.2 boost,
    capped at 1; ``intensity`` is the winning score per recent session.

    Args:
        sessions: Session history in any order.
        now: End of the window.  Defaults to the newest session's start.
        window_days: Window length in days.

    Returns:
        A :class:`MoodAnalysis`.  With no sessions, or none in the window,
        the default mood is returned with a ``no_data`` or ``old_data``
        trigger.
    """
    if not sessions:
        return MoodAnalysis(
            _DEFAULT_MOOD, 0.5, 0.3, ["no_data"],
            "No gaming sessions available, defaulting to chill mood",
        )
    if now is None:
        now = max(s.start_time for s in sessions)
    since = now - timedelta(days=window_days)
    recent = [s for s in sessions if since <= s.start_time <= now]
    if not recent:
        return MoodAnalysis(
            _DEFAULT_MOOD, 0.4, 0.3, ["old_data"],
            "No recent gaming sessions, defaulting to chill mood",
        )

    scores: dict[Mood, float] = {}
    triggers: dict[Mood, list[str]] = {}
    for session in recent:
        mood = infer_session_mood(session)
        scores[mood] = scores.get(mood, 0.0) + _session_mood_score(session, mood)
        mood_triggers = triggers.setdefault(mood, [])
        for trigger in _session_triggers(session):
            if trigger not in mood_triggers:
                mood_triggers.append(trigger)

    best, best_score = _DEFAULT_MOOD, 0.0
    for mood in Mood:
        if scores.get(mood, 0.0) > best_score:
            best, best_score = mood, scores[mood]
    total = sum(scores.values())
    share = best_score / total if total > 0 else 0.5

    average_minutes = statistics.fmean(s.duration_seconds / 60.0 for s in recent)
    reasoning = (
        f"Detected {MOOD_DEFINITIONS[best].name} mood from {len(recent)} recent sessions "
        f"averaging {round(average_minutes)} minutes ({round(share * 100)}% of the mood signal)"
    )
    logger.debug("Inferred %s from %d of %d sessions", best.value, len(recent), len(sessions))
    return MoodAnalysis(
        mood=best,
        confidence=min(1.0, share + _CONFIDENCE_BOOST),
        intensity=min(1.0, best_score / len(recent)),
        triggers=triggers.get(best, []),
        reasoning=reasoning,
    )


# ---------------------------------------------------------------------------
# Aggregate statistics
# ---------------------------------------------------------------------------


def analyze_sessions(sessions: list[GameSession]) -> SessionAnalysis:
    """Summarise *sessions* into play-time totals, preferences and tips."""
    if not sessions:
        return SessionAnalysis(
            total_sessions=0,
            total_minutes=0.0,
            average_session_minutes=0.0,
            preferred_genres={},
            mood_patterns={},
            difficulty_preference=0.5,
            social_preference=0.5,
            completion_rate=0.0,
            peak_hours=[],
            recommendations=["Start gaming to get personalized recommendations"],
        )

    genre_minutes: dict[str, float] = {}
    mood_minutes: dict[Mood, float] = {}
    for session in sessions:
        minutes = session.duration_seconds / 60.0
        genre_minutes[session.genre] = genre_minutes.get(session.genre, 0.0) + minutes
        mood = infer_session_mood(session)
        mood_minutes[mood] = mood_minutes.get(mood, 0.0) + minutes

    total_minutes = sum(genre_minutes.values())
    difficulty = statistics.fmean(s.difficulty_score for s in sessions)
    social = sum(1 for s in sessions if s.is_multiplayer) / len(sessions)
    completion = sum(1 for s in sessions if s.completed) / len(sessions)

    hour_counts = Counter(s.start_time.hour for s in sessions)
    peak_hours = [
        hour for hour, _ in sorted(hour_counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ][:_PEAK_HOURS]

    return SessionAnalysis(
        total_sessions=len(sessions),
        total_minutes=total_minutes,
        average_session_minutes=total_minutes / len(sessions),
        preferred_genres=genre_minutes,
        mood_patterns=mood_minutes,
        difficulty_preference=difficulty,
        social_preference=social,
        completion_rate=completion,
        peak_hours=peak_hours,
        recommendations=_recommendations(genre_minutes, mood_minutes, difficulty, social),
    )


# ---------------------------------------------------------------------------
# Behavior patterns
# ---------------------------------------------------------------------------


def extract_behavior_patterns(sessions: list[GameSession]) -> BehaviorPatterns:
    """Extract time slots, genre sequences and mood transitions.

    Sessions are sorted by start time first.  Genre sequences are every run
    of three consecutive genres; ``frequency`` is the share of runs that
    match exactly.  Mood transitions cover every consecutive session pair.
    """
    ordered = sorted(sessions, key=lambda s: s.start_time)
    patterns = BehaviorPatterns(
        time_patterns=_time_patterns(ordered),
        genre_sequences=_genre_sequences(ordered),
        mood_transitions=_mood_transitions(ordered),
        session_count=len(ordered),
    )
    logger.debug(
        "Extracted %d time slots, %d genre sequences, %d mood transitions from %d sessions",
        len(patterns.time_patterns),
        len(patterns.genre_sequences),
        len(patterns.mood_transitions),
        len(ordered),
    )
    return patterns


def predictive_insights(patterns: BehaviorPatterns) -> list[BehaviorInsight]:
    """Turn extracted patterns into human-readable insights.

    Reports peak hours, frequent genre runs, recurring mood shifts and, as
    an anomaly, time slots holding under 5% of all sessions.
    """
    if patterns.session_count == 0:
        return []
    insights: list[BehaviorInsight] = []

    peak_hours = _peak_hours(patterns.time_patterns)
    if peak_hours:
        insights.append(
            BehaviorInsight(
                InsightType.PATTERN,
                "Peak gaming time detected",
                "You're most active around " + " and ".join(f"{h:02d}:00" for h in peak_hours),
                0.8,
                True,
                ["Schedule longer sessions during these hours"],
            )
        )

    frequent = [s for s in patterns.genre_sequences if s.frequency >= _FREQUENT_SEQUENCE]
    if frequent:
        flows = "; ".join(" -> ".join(s.sequence) for s in frequent[:3])
        insights.append(
            BehaviorInsight(
                InsightType.PATTERN,
                "Gaming flow patterns",
                f"You often play genres in the same order: {flows}",
                0.7,
                True,
                ["Try games that continue these sequences"],
            )
        )

    for transition in patterns.mood_transitions:
        if transition.from_mood == transition.to_mood:
            continue
        if transition.probability < _FREQUENT_TRANSITION:
            continue
        insights.append(
            BehaviorInsight(
                InsightType.RECOMMENDATION,
                "Recurring mood shift",
                f"Your {transition.from_mood.value} sessions often lead into "
                f"{transition.to_mood.value} ones",
                0.6,
                True,
                [f"Keep {', '.join(transition.genres)} games handy after {transition.from_mood.value} play"],
            )
        )

    unusual = sorted(
        {p.hour for p in patterns.time_patterns if p.likelihood < _UNUSUAL_SLOT_LIKELIHOOD}
    )
    if unusual:
        insights.append(
            BehaviorInsight(
                InsightType.ANOMALY,
                "Unusual gaming time detected",
                "Some sessions happen at hours you rarely play: "
                + ", ".join(f"{h:02d}:00" for h in unusual),
                0.6,
                False,
                ["Watch whether this pattern continues"],
            )
        )
    return insights


def predict_next_genre(patterns: BehaviorPatterns, recent_genres: list[str]) -> GenrePrediction:
    """Predict the next genre from the last genres played, oldest first.

    The most frequent known sequence ending the recent genres wins; its most
    common follower is the prediction and its frequency the confidence.
    """
    if patterns.session_count == 0 or not recent_genres:
        return GenrePrediction(None, 0.0, "Insufficient data for prediction")
    tail = tuple(recent_genres[-_SEQUENCE_LENGTH:])
    matches = [s for s in patterns.genre_sequences if s.sequence == tail and s.next_genres]
    if not matches:
        return GenrePrediction(None, 0.0, "No matching patterns found")
    best = max(matches, key=lambda s: s.frequency)
    return GenrePrediction(
        genre=best.next_genres[0],
        confidence=best.frequency,
        reasoning=f"Based on your pattern of playing {' -> '.join(best.sequence)}",
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _session_mood_score(session: GameSession, mood: Mood) -> float:
    duration_weight = min(1.0, session.duration_seconds / 60.0 / _FULL_WEIGHT_MINUTES)
    return _SESSION_MOOD_WEIGHTS[mood] * duration_weight * session.difficulty_score


def _session_triggers(session: GameSession) -> list[str]:
    minutes = session.duration_seconds / 60.0
    triggers: list[str] = []
    if minutes > _LONG_SESSION_MINUTES:
        triggers.append("long_session")
    elif minutes < _SHORT_SESSION_MINUTES:
        triggers.append("short_session")
    if session.difficulty_score > _HIGH_INTENSITY:
        triggers.append("high_intensity")
    elif session.difficulty_score < _LOW_INTENSITY:
        triggers.append("low_intensity")
    triggers.append(f"genre_{session.genre}")
    triggers.append(f"platform_{session.platform}")
    return triggers


def _recommendations(
    genre_minutes: dict[str, float],
    mood_minutes: dict[Mood, float],
    difficulty: float,
    social: float,
) -> list[str]:
    tips: list[str] = []
    top_genre = max(genre_minutes, key=genre_minutes.__getitem__)
    tips.append(f"Explore more {top_genre} games")
    top_mood = max(mood_minutes, key=mood_minutes.__getitem__)
    tips.append(f"Your play leans {top_mood.value}: {MOOD_DEFINITIONS[top_mood].description.lower()}")
    if difficulty > 0.7:
        tips.append("You seem to enjoy challenging games")
    elif difficulty < 0.3:
        tips.append("Try more relaxing games")
    if social > 0.7:
        tips.append("Consider multiplayer games for social engagement")
    elif social < 0.3:
        tips.append("Single-player games might suit your style")
    return tips


def _time_patterns(ordered: list[GameSession]) -> list[TimePattern]:
    slots: dict[tuple[int, str], list[GameSession]] = {}
    for session in ordered:
        key = (session.start_time.hour, weekday_name(session.start_time))
        slots.setdefault(key, []).append(session)
    return [
        TimePattern(
            hour=hour,
            weekday=weekday,
            genres=list(dict.fromkeys(s.genre for s in group)),
            average_session_minutes=statistics.fmean(s.duration_seconds / 60.0 for s in group),
            likelihood=len(group) / len(ordered),
        )
        for (hour, weekday), group in slots.items()
    ]


def _genre_sequences(ordered: list[GameSession]) -> list[GenreSequence]:
    window_count = len(ordered) - _SEQUENCE_LENGTH + 1
    if window_count <= 0:
        return []
    counts: Counter[tuple[str, ...]] = Counter()
    followers: dict[tuple[str, ...], Counter[str]] = {}
    for i in range(window_count):
        sequence = tuple(s.genre for s in ordered[i : i + _SEQUENCE_LENGTH])
        counts[sequence] += 1
        following = followers.setdefault(sequence, Counter())
        if i + _SEQUENCE_LENGTH < len(ordered):
            following[ordered[i + _SEQUENCE_LENGTH].genre] += 1
    return [
        GenreSequence(
            sequence=sequence,
            frequency=count / window_count,
            next_genres=[g for g, _ in followers[sequence].most_common()],
        )
        for sequence, count in counts.items()
    ]


def _mood_transitions(ordered: list[GameSession]) -> list[MoodTransition]:
    if len(ordered) < 2:
        return []
    moods = [infer_session_mood(s) for s in ordered]
    gaps: dict[tuple[Mood, Mood], list[float]] = {}
    genres: dict[tuple[Mood, Mood], list[str]] = {}
    for i in range(1, len(ordered)):
        key = (moods[i - 1], moods[i])
        previous, current = ordered[i - 1], ordered[i]
        previous_end = previous.start_time + timedelta(seconds=previous.duration_seconds)
        gap = max(0.0, (current.start_time - previous_end).total_seconds() / 60.0)
        gaps.setdefault(key, []).append(gap)
        key_genres = genres.setdefault(key, [])
        if current.genre not in key_genres:
            key_genres.append(current.genre)
    pair_count = len(ordered) - 1
    return [
        MoodTransition(
            from_mood=from_mood,
            to_mood=to_mood,
            probability=len(key_gaps) / pair_count,
            average_gap_minutes=statistics.fmean(key_gaps),
            genres=genres[(from_mood, to_mood)],
        )
        for (from_mood, to_mood), key_gaps in gaps.items()
    ]


def _peak_hours(time_patterns: list[TimePattern]) -> list[int]:
    hourly: dict[int, float] = {}
    for pattern in time_patterns:
        hourly[pattern.hour] = hourly.get(pattern.hour, 0.0) + pattern.likelihood
    if not hourly:
        return []
    threshold = max(hourly.values()) * _PEAK_HOUR_SHARE
    return sorted(hour for hour, share in hourly.items() if share >= threshold)
