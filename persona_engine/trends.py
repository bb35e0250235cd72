"""Mood trend analysis and next-mood forecasting from preference history."""

from __future__ import annotations

import logging

import numpy as np

from persona_engine.models import (
    ForecastFactors,
    Mood,
    MoodForecast,
    MoodTrend,
    MoodTrendAnalysis,
    TrendDirection,
    UserMoodRecord,
)

logger = logging.getLogger(__name__)

_STABLE_THRESHOLD = 0.1
_FULL_CONFIDENCE_RECORDS = 5
_FULL_HISTORY_RECORDS = 10

_MIN_FORECAST_CONFIDENCE = 0.1
_MAX_FORECAST_CONFIDENCE = 0.95
_DEFAULT_MOOD = Mood.CHILL

# Share of the forecast score taken from plain mood frequency per horizon
SEASONALITY_BY_TIMEFRAME: dict[str, float] = {
    "next_day": 0.05,
    "next_week": 0.1,
    "next_month": 0.2,
    "next_quarter": 0.3,
}


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------


def calculate_mood_trend(
    records: list[UserMoodRecord], timeframe: str = "month"
) -> MoodTrendAnalysis:
    """Compute per-mood trends, the dominant trend and overall volatility.

    For each mood with at least two records (sorted by time),
    ``change_rate = (last - first) / 100``.  Moods with fewer records are
    reported as stable with zero confidence.

    Args:
        records: Mood preference observations in any order.
        timeframe: Label copied onto every trend.

    Returns:
        A :class:`MoodTrendAnalysis`.  Empty input yields no trends and zero
        volatility.
    """
    grouped = _group_by_mood(records)
    trends: list[MoodTrend] = []
    measured_rates: list[float] = []

    for mood, mood_records in grouped.items():
        if len(mood_records) < 2:
            trends.append(MoodTrend(mood, TrendDirection.STABLE, 0.0, 0.0, timeframe))
            continue
        change_rate = (mood_records[-1].preference - mood_records[0].preference) / 100.0
        if abs(change_rate) < _STABLE_THRESHOLD:
            direction = TrendDirection.STABLE
        elif change_rate > 0:
            direction = TrendDirection.INCREASING
        else:
            direction = TrendDirection.DECREASING
        coverage = min(1.0, len(mood_records) / _FULL_CONFIDENCE_RECORDS)
        confidence = coverage * (1.0 - abs(change_rate - 0.5))
        trends.append(
            MoodTrend(mood, direction, change_rate, _clamp(confidence, 0.0, 1.0), timeframe)
        )
        measured_rates.append(change_rate)

    dominant: MoodTrend | None = None
    best_strength = -1.0
    for trend in trends:
        strength = trend.confidence * abs(trend.change_rate)
        if strength > best_strength:
            dominant, best_strength = trend, strength

    volatility = 0.0
    if measured_rates:
        volatility = min(1.0, 2.0 * float(np.std(np.asarray(measured_rates, dtype=np.float64))))

    logger.debug(
        "Mood trend over %d records: %d moods, volatility=%.3f",
        len(records),
        len(trends),
        volatility,
    )
    return MoodTrendAnalysis(trends=trends, dominant_trend=dominant, volatility=volatility)


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


def calculate_mood_forecast(
    analysis: MoodTrendAnalysis,
    records: list[UserMoodRecord],
    timeframe: str = "next_week",
) -> MoodForecast:
    """Predict the user's next mood.

    Each mood is scored as
    ``(1 - s) * (latest_preference / 100 + change_rate * trend_confidence)
    + s * frequency_share`` where ``s`` is the seasonality weight of
    *timeframe*.  Sparse data never raises: with no confident trend the most
    recently observed mood is returned at the confidence floor, and with no
    records at all a fixed default mood is.

    Args:
        analysis: Output of :func:`calculate_mood_trend` for *records*.
        records: The same preference observations.
        timeframe: One of :data:`SEASONALITY_BY_TIMEFRAME`.

    Returns:
        A well-formed :class:`MoodForecast`.

    Raises:
        ValueError: If *timeframe* is not a known horizon.
    """
    if timeframe not in SEASONALITY_BY_TIMEFRAME:
        raise ValueError(
            f"Unknown forecast timeframe {timeframe!r}; "
            f"expected one of {sorted(SEASONALITY_BY_TIMEFRAME)}"
        )
    seasonality = SEASONALITY_BY_TIMEFRAME[timeframe]
    volatility_adjustment = -0.5 * analysis.volatility

    if not records:
        return MoodForecast(
            predicted_mood=_DEFAULT_MOOD,
            confidence=_MIN_FORECAST_CONFIDENCE,
            timeframe=timeframe,
            factors=ForecastFactors(0.0, 0.0, volatility_adjustment),
            reasoning=["No mood history yet; using the default mood"],
        )

    if not any(t.confidence > 0.0 for t in analysis.trends):
        latest = max(records, key=lambda r: r.last_experienced)
        return MoodForecast(
            predicted_mood=latest.mood,
            confidence=_MIN_FORECAST_CONFIDENCE,
            timeframe=timeframe,
            factors=ForecastFactors(0.0, 0.0, volatility_adjustment),
            reasoning=[
                "Not enough history to detect trends",
                f"Falling back to the most recent mood: {latest.mood.value}",
            ],
        )

    grouped = _group_by_mood(records)
    trend_by_mood = {t.mood: t for t in analysis.trends}
    total = len(records)

    scores: list[tuple[Mood, float]] = []
    for mood, mood_records in grouped.items():
        trend = trend_by_mood.get(mood)
        trend_term = trend.change_rate * trend.confidence if trend else 0.0
        share = len(mood_records) / total
        score = (1.0 - seasonality) * (mood_records[-1].preference / 100.0 + trend_term)
        score += seasonality * share
        scores.append((mood, score))

    ranked = sorted(scores, key=lambda item: item[1], reverse=True)
    predicted, _ = ranked[0]
    predicted_trend = trend_by_mood.get(predicted)
    trend_confidence = predicted_trend.confidence if predicted_trend else 0.0
    trend_influence = (
        (1.0 - seasonality) * predicted_trend.change_rate * trend_confidence
        if predicted_trend
        else 0.0
    )
    share = len(grouped[predicted]) / total

    confidence = (
        0.3
        + 0.4 * trend_confidence
        + 0.3 * min(1.0, total / _FULL_HISTORY_RECORDS)
        + volatility_adjustment
    )
    confidence = _clamp(confidence, _MIN_FORECAST_CONFIDENCE, _MAX_FORECAST_CONFIDENCE)

    reasoning = [f"{predicted.value} has the strongest recent preference signal"]
    if analysis.dominant_trend is not None and analysis.dominant_trend.confidence > 0.0:
        dominant = analysis.dominant_trend
        reasoning.append(
            f"Dominant trend: {dominant.mood.value} is {dominant.direction.value} "
            f"({dominant.change_rate:+.0%})"
        )
    if analysis.volatility > 0.5:
        reasoning.append("Mood preferences are volatile; confidence reduced")
    reasoning.append(f"Seeing {predicted.value} in {share:.0%} of recorded moods")

    logger.debug("Forecast %s: %s (confidence=%.3f)", timeframe, predicted.value, confidence)
    return MoodForecast(
        predicted_mood=predicted,
        confidence=confidence,
        timeframe=timeframe,
        factors=ForecastFactors(
            trend_influence=trend_influence,
            seasonality_influence=seasonality * share,
            volatility_adjustment=volatility_adjustment,
        ),
        reasoning=reasoning,
        alternatives=[(mood, round(score, 4)) for mood, score in ranked[1:3]],
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _group_by_mood(records: list[UserMoodRecord]) -> dict[Mood, list[UserMoodRecord]]:
    """Group records by mood in first-seen order, each group sorted by time."""
    grouped: dict[Mood, list[UserMoodRecord]] = {}
    for record in records:
        grouped.setdefault(record.mood, []).append(record)
    for mood_records in grouped.values():
        mood_records.sort(key=lambda r: r.last_experienced)
    return grouped


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
