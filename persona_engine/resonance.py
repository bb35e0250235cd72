"""Session resonance: how well mood forecasts matched what the user actually did."""

from __future__ import annotations

import logging

from persona_engine.models import (
    ImprovementTrend,
    Mood,
    MoodForecast,
    ResonanceFactors,
    ResonanceInsights,
    SessionData,
    SessionResonance,
    SessionResonanceAnalysis,
)
from persona_engine.moods import MOOD_DEFINITIONS, RESONANCE_COMPATIBLE_MOODS

logger = logging.getLogger(__name__)

_MATCH_WEIGHT = 0.7
_CONFIDENCE_WEIGHT = 0.3
_PARTIAL_ALIGNMENT = 0.5
_OUT_OF_RANGE_FIT = 0.2
_TREND_WINDOW = 5
_TREND_THRESHOLD = 0.1
_INSIGHT_COUNT = 3


def calculate_session_resonance(
    predicted_mood: Mood,
    actual_mood: Mood,
    session_data: SessionData,
    forecast_confidence: float,
) -> SessionResonance:
    """Score one session against the mood that was forecast for it.

    ``resonance_score = 0.7 * mood_match + 0.3 * forecast_confidence``, where
    ``mood_match`` is 1 for an exact hit and 0 otherwise.

    Args:
        predicted_mood: Mood the forecast predicted.
        actual_mood: Mood observed during the session.
        session_data: Duration and engagement of the session.
        forecast_confidence: Confidence the forecast carried, 0-1.

    Returns:
        A :class:`SessionResonance` with its factor breakdown.

    Raises:
        ValueError: If *forecast_confidence* is outside [0, 1].
    """
    if not 0.0 <= forecast_confidence <= 1.0:
        raise ValueError(f"forecast_confidence must be in [0, 1], got {forecast_confidence}")

    mood_match = 1.0 if predicted_mood == actual_mood else 0.0
    alignment = mood_alignment(predicted_mood, actual_mood)
    return SessionResonance(
        predicted_mood=predicted_mood,
        actual_mood=actual_mood,
        resonance_score=_MATCH_WEIGHT * mood_match + _CONFIDENCE_WEIGHT * forecast_confidence,
        confidence_delta=abs(forecast_confidence - mood_match),
        factors=ResonanceFactors(
            mood_alignment=alignment,
            duration_fit=duration_fit(predicted_mood, session_data.duration_minutes),
            engagement_correlation=engagement_correlation(alignment, session_data.engagement),
        ),
        session=session_data,
    )


def resonance_from_forecast(
    forecast: MoodForecast, actual_mood: Mood, session_data: SessionData
) -> SessionResonance:
    """Convenience wrapper taking the prediction and confidence from *forecast*."""
    return calculate_session_resonance(
        forecast.predicted_mood, actual_mood, session_data, forecast.confidence
    )


def analyze_session_resonance(resonances: list[SessionResonance]) -> SessionResonanceAnalysis:
    """Aggregate resonance results over time.

    Per-mood figures are grouped by predicted mood.  The improvement trend
    compares the mean of the latest five sessions (by timestamp) with the
    five before them; fewer than five sessions is always stable.

    Args:
        resonances: Resonance results in any order.  Not modified.

    Returns:
        A :class:`SessionResonanceAnalysis`; an all-zero analysis for empty
        input.
    """
    if not resonances:
        return SessionResonanceAnalysis(
            total_sessions=0,
            average_resonance=0.0,
            mood_accuracy={},
            improvement_trend=ImprovementTrend.STABLE,
            insights=ResonanceInsights(),
        )

    groups: dict[Mood, list[SessionResonance]] = {}
    for resonance in resonances:
        groups.setdefault(resonance.predicted_mood, []).append(resonance)

    mood_accuracy = {
        mood: _mean(r.resonance_score for r in group) for mood, group in groups.items()
    }
    ranked = sorted(mood_accuracy, key=lambda m: mood_accuracy[m], reverse=True)

    insights = ResonanceInsights(
        strongest_predictions=ranked[:_INSIGHT_COUNT],
        weakest_predictions=ranked[::-1][:_INSIGHT_COUNT],
        optimal_session_length={
            mood: round(_weighted_duration(group), 1) for mood, group in groups.items()
        },
        engagement_patterns={
            mood: round(_mean(r.session.engagement for r in group), 1)
            for mood, group in groups.items()
        },
    )
    analysis = SessionResonanceAnalysis(
        total_sessions=len(resonances),
        average_resonance=_mean(r.resonance_score for r in resonances),
        mood_accuracy=mood_accuracy,
        improvement_trend=_improvement_trend(resonances),
        insights=insights,
    )
    logger.debug(
        "Resonance over %d sessions: average=%.3f trend=%s",
        analysis.total_sessions,
        analysis.average_resonance,
        analysis.improvement_trend.value,
    )
    return analysis


# ---------------------------------------------------------------------------
# Factors
# ---------------------------------------------------------------------------


def mood_alignment(predicted_mood: Mood, actual_mood: Mood) -> float:
    """1.0 for an exact match, 0.5 for an adjacent mood, else 0.0."""
    if predicted_mood == actual_mood:
        return 1.0
    if actual_mood in RESONANCE_COMPATIBLE_MOODS[predicted_mood]:
        return _PARTIAL_ALIGNMENT
    return 0.0


def duration_fit(mood: Mood, duration_minutes: float) -> float:
    """Triangular fit of *duration_minutes* around the mood's ideal length.

    Within ``[min, max]`` the fit falls linearly from 1.0 at the ideal to 0.0
    at the farther range bound; outside the range it is a flat 0.2.
    """
    low, ideal, high = MOOD_DEFINITIONS[mood].session_range
    if not low <= duration_minutes <= high:
        return _OUT_OF_RANGE_FIT
    max_deviation = max(ideal - low, high - ideal)
    return max(0.0, 1.0 - abs(duration_minutes - ideal) / max_deviation)


def engagement_correlation(alignment: float, engagement: float) -> float:
    """How closely engagement tracks the ``50 + 50 * alignment`` expectation."""
    expected = 50.0 + 50.0 * alignment
    return max(0.0, min(1.0, 1.0 - abs(engagement - expected) / 50.0))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _improvement_trend(resonances: list[SessionResonance]) -> ImprovementTrend:
    if len(resonances) < _TREND_WINDOW:
        return ImprovementTrend.STABLE
    ordered = sorted(resonances, key=lambda r: r.session.timestamp)
    recent = ordered[-_TREND_WINDOW:]
    older = ordered[-2 * _TREND_WINDOW:-_TREND_WINDOW]
    if not older:
        return ImprovementTrend.STABLE
    delta = _mean(r.resonance_score for r in recent) - _mean(r.resonance_score for r in older)
    if delta > _TREND_THRESHOLD:
        return ImprovementTrend.IMPROVING
    if delta < -_TREND_THRESHOLD:
        return ImprovementTrend.DECLINING
    return ImprovementTrend.STABLE


def _weighted_duration(group: list[SessionResonance]) -> float:
    """Resonance-weighted mean duration; plain mean if every score is zero."""
    total_weight = sum(r.resonance_score for r in group)
    if total_weight == 0.0:
        return _mean(r.session.duration_minutes for r in group)
    return sum(r.session.duration_minutes * r.resonance_score for r in group) / total_weight


def _mean(values) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0
