"""Tests for persona_engine.behavior."""

from __future__ import annotations

from datetime import timedelta

import pytest

from persona_engine.behavior import (
    analyze_mood,
    analyze_sessions,
    extract_behavior_patterns,
    infer_session_mood,
    predict_next_genre,
    predictive_insights,
)
from persona_engine.models import GameSession, InsightType, Mood


def _session(start_time, genre: str, minutes: int = 60, **kwargs) -> GameSession:
    return GameSession(
        start_time=start_time,
        duration_seconds=minutes * 60,
        genre=genre,
        **kwargs,
    )


@pytest.fixture
def recent_sessions(ts) -> list[GameSession]:
    """Two casual afternoons and one action session, all inside a week."""
    return [
        _session(ts - timedelta(days=1), "casual"),
        _session(ts - timedelta(days=2), "casual"),
        _session(ts, "action"),
    ]


@pytest.fixture
def genre_cycle(ts) -> list[GameSession]:
    """strategy -> rpg -> puzzle repeated, one hour apart, supplied out of order."""
    genres = ["strategy", "rpg", "puzzle", "strategy", "rpg", "puzzle", "strategy"]
    sessions = [_session(ts + timedelta(hours=i), g, minutes=30) for i, g in enumerate(genres)]
    return list(reversed(sessions))


class TestInferSessionMood:
    def test_observed_mood_wins(self, ts) -> None:
        assert infer_session_mood(_session(ts, "action", observed_mood=Mood.CHILL)) == Mood.CHILL

    @pytest.mark.parametrize(
        "genre,tags,expected",
        [
            ("action", (), Mood.ENERGETIC),
            ("rpg", (), Mood.STORY),
            ("strategy", (), Mood.FOCUSED),
            ("simulation", ("building",), Mood.CREATIVE),
            ("adventure", ("open-world",), Mood.EXPLORATORY),
        ],
    )
    def test_inferred_from_labels(self, ts, genre, tags, expected) -> None:
        assert infer_session_mood(_session(ts, genre, tags=tags)) == expected

    def test_multiplayer_leans_social(self, ts) -> None:
        solo = _session(ts, "sports")
        group = _session(ts, "sports", is_multiplayer=True)
        assert infer_session_mood(solo) == Mood.COMPETITIVE
        assert infer_session_mood(group) == Mood.SOCIAL

    def test_unknown_labels_default_to_chill(self, ts) -> None:
        assert infer_session_mood(_session(ts, "trivia", tags=("quirky",))) == Mood.CHILL


class TestAnalyzeMood:
    def test_no_sessions(self) -> None:
        analysis = analyze_mood([])
        assert analysis.mood == Mood.CHILL
        assert analysis.confidence == pytest.approx(0.5)
        assert analysis.triggers == ["no_data"]

    def test_strongest_mood(self, recent_sessions) -> None:
        analysis = analyze_mood(recent_sessions)
        # energetic 0.9 * 0.5 = 0.45 against chill 2 * 0.3 * 0.5 = 0.3
        assert analysis.mood == Mood.ENERGETIC
        assert analysis.confidence == pytest.approx(0.8)
        assert analysis.intensity == pytest.approx(0.15)
        assert analysis.triggers == ["genre_action", "platform_pc"]
        assert "Energetic" in analysis.reasoning

    def test_sessions_outside_window_ignored(self, ts, recent_sessions) -> None:
        old = _session(
            ts - timedelta(days=10), "sports", minutes=120, difficulty_score=1.0, is_multiplayer=True
        )
        analysis = analyze_mood(recent_sessions + [old])
        assert analysis.mood == Mood.ENERGETIC
        assert analysis.confidence == pytest.approx(0.8)

    def test_nothing_recent(self, ts, recent_sessions) -> None:
        analysis = analyze_mood(recent_sessions, now=ts + timedelta(days=30))
        assert analysis.mood == Mood.CHILL
        assert analysis.confidence == pytest.approx(0.4)
        assert analysis.triggers == ["old_data"]

    def test_duration_and_intensity_triggers(self, ts) -> None:
        analysis = analyze_mood([_session(ts, "racing", minutes=150, difficulty_score=0.9)])
        assert analysis.triggers[:2] == ["long_session", "high_intensity"]


class TestAnalyzeSessions:
    def test_empty(self) -> None:
        analysis = analyze_sessions([])
        assert analysis.total_sessions == 0
        assert analysis.difficulty_preference == pytest.approx(0.5)
        assert analysis.recommendations == ["Start gaming to get personalized recommendations"]

    def test_aggregates(self, ts) -> None:
        sessions = [
            _session(ts, "strategy", minutes=90, difficulty_score=0.8, completed=True),
            _session(ts + timedelta(days=1, hours=6), "strategy", minutes=30, difficulty_score=0.9),
            _session(ts + timedelta(days=2), "sports", minutes=60, difficulty_score=0.7, is_multiplayer=True),
        ]
        analysis = analyze_sessions(sessions)
        assert analysis.total_sessions == 3
        assert analysis.total_minutes == pytest.approx(180.0)
        assert analysis.average_session_minutes == pytest.approx(60.0)
        assert analysis.preferred_genres == {"strategy": 120.0, "sports": 60.0}
        assert analysis.mood_patterns == {Mood.FOCUSED: 120.0, Mood.SOCIAL: 60.0}
        assert analysis.difficulty_preference == pytest.approx(0.8)
        assert analysis.social_preference == pytest.approx(1 / 3)
        assert analysis.completion_rate == pytest.approx(1 / 3)
        assert analysis.peak_hours == [14, 20]
        assert analysis.recommendations == [
            "Explore more strategy games",
            "Your play leans focused: strategic thinking and deep concentration",
            "You seem to enjoy challenging games",
        ]


class TestExtractBehaviorPatterns:
    def test_genre_sequences(self, genre_cycle) -> None:
        sequences = {s.sequence: s for s in extract_behavior_patterns(genre_cycle).genre_sequences}
        first = sequences[("strategy", "rpg", "puzzle")]
        assert first.frequency == pytest.approx(0.4)
        assert first.next_genres == ["strategy"]
        assert sequences[("rpg", "puzzle", "strategy")].next_genres == ["rpg"]
        assert sequences[("puzzle", "strategy", "rpg")].frequency == pytest.approx(0.2)

    def test_short_history_has_no_sequences(self, ts) -> None:
        patterns = extract_behavior_patterns([_session(ts, "rpg"), _session(ts, "rpg")])
        assert patterns.genre_sequences == []

    def test_time_patterns(self, ts) -> None:
        sessions = [
            _session(ts, "rpg", minutes=60),
            _session(ts + timedelta(days=7), "puzzle", minutes=120),
            _session(ts + timedelta(days=1), "rpg"),
        ]
        slots = {(p.hour, p.weekday): p for p in extract_behavior_patterns(sessions).time_patterns}
        saturday = slots[(14, "saturday")]
        assert saturday.likelihood == pytest.approx(2 / 3)
        assert saturday.average_session_minutes == pytest.approx(90.0)
        assert saturday.genres == ["rpg", "puzzle"]
        assert slots[(14, "sunday")].likelihood == pytest.approx(1 / 3)

    def test_mood_transitions(self, ts) -> None:
        moods = [Mood.CHILL, Mood.FOCUSED, Mood.CHILL, Mood.FOCUSED]
        sessions = [
            _session(ts + timedelta(hours=i), "puzzle", minutes=30, observed_mood=m)
            for i, m in enumerate(moods)
        ]
        transitions = {
            (t.from_mood, t.to_mood): t for t in extract_behavior_patterns(sessions).mood_transitions
        }
        forward = transitions[(Mood.CHILL, Mood.FOCUSED)]
        assert forward.probability == pytest.approx(2 / 3)
        assert forward.average_gap_minutes == pytest.approx(30.0)
        assert forward.genres == ["puzzle"]
        assert transitions[(Mood.FOCUSED, Mood.CHILL)].probability == pytest.approx(1 / 3)

    def test_input_not_reordered(self, genre_cycle) -> None:
        snapshot = list(genre_cycle)
        extract_behavior_patterns(genre_cycle)
        assert genre_cycle == snapshot


class TestPredictNextGenre:
    def test_follows_most_frequent_sequence(self, genre_cycle) -> None:
        patterns = extract_behavior_patterns(genre_cycle)
        prediction = predict_next_genre(patterns, ["rpg", "strategy", "rpg", "puzzle"])
        assert prediction.genre == "strategy"
        assert prediction.confidence == pytest.approx(0.4)
        assert "strategy -> rpg -> puzzle" in prediction.reasoning

    def test_no_matching_sequence(self, genre_cycle) -> None:
        prediction = predict_next_genre(extract_behavior_patterns(genre_cycle), ["racing"])
        assert prediction.genre is None
        assert prediction.confidence == 0.0

    def test_no_history(self) -> None:
        prediction = predict_next_genre(extract_behavior_patterns([]), ["rpg"])
        assert prediction.genre is None
        assert prediction.reasoning == "Insufficient data for prediction"


class TestPredictiveInsights:
    def test_no_sessions(self) -> None:
        assert predictive_insights(extract_behavior_patterns([])) == []

    def test_flow_pattern(self, genre_cycle) -> None:
        insights = predictive_insights(extract_behavior_patterns(genre_cycle))
        titles = [i.title for i in insights]
        assert "Gaming flow patterns" in titles
        assert all(i.insight_type != InsightType.ANOMALY for i in insights)

    def test_peak_hour_and_anomaly(self, ts) -> None:
        sessions = [_session(ts + timedelta(days=i), "strategy") for i in range(20)]
        sessions.append(_session(ts.replace(hour=3) + timedelta(days=30), "strategy"))
        insights = predictive_insights(extract_behavior_patterns(sessions))
        by_type = {i.insight_type: i for i in insights if i.insight_type != InsightType.PATTERN}
        peak = next(i for i in insights if i.title == "Peak gaming time detected")
        assert peak.description.endswith("14:00")
        anomaly = by_type[InsightType.ANOMALY]
        assert "03:00" in anomaly.description
        assert not anomaly.actionable

    def test_recurring_mood_shift(self, ts) -> None:
        moods = [Mood.CHILL, Mood.FOCUSED, Mood.CHILL, Mood.FOCUSED]
        sessions = [
            _session(ts + timedelta(hours=i), "puzzle", observed_mood=m) for i, m in enumerate(moods)
        ]
        insights = predictive_insights(extract_behavior_patterns(sessions))
        shifts = [i.description for i in insights if i.insight_type == InsightType.RECOMMENDATION]
        assert "Your chill sessions often lead into focused ones" in shifts
