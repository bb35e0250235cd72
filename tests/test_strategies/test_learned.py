"""Tests for persona_engine.strategies.learned.LearnedWeightsStrategy."""

from __future__ import annotations

import pytest

from persona_engine.models import DynamicMoodWeights, Game, Mood, MoodFilterContext, PersonaState
from persona_engine.playstyle import default_profile
from persona_engine.strategies.learned import LearnedWeightsStrategy


def _make_weights(confidence: float = 1.0, ts=None) -> DynamicMoodWeights:
    return DynamicMoodWeights(
        genre_weights={"casual": 1.0, "action": -1.0},
        tag_weights={"relaxing": 0.5},
        platform_biases={},
        time_preferences={},
        confidence=confidence,
        sample_size=10,
        last_updated=ts,
    )


def _make_persona(confidence: float = 1.0) -> PersonaState:
    return PersonaState(
        user_id="u1",
        profile=default_profile(),
        dynamic_mood_weights={Mood.CHILL: _make_weights(confidence)},
    )


class TestScore:
    def test_unknown_labels_count_as_zero(self, game_cozy) -> None:
        # genres (1.0 + 0) / 2, tags (0.5 + 0) / 2
        assert LearnedWeightsStrategy.score(game_cozy, _make_weights()) == pytest.approx(77.5)

    def test_confidence_pulls_towards_neutral(self, game_cozy) -> None:
        assert LearnedWeightsStrategy.score(game_cozy, _make_weights(0.5)) == pytest.approx(63.75)

    def test_zero_confidence_is_neutral(self, game_shooter) -> None:
        assert LearnedWeightsStrategy.score(game_shooter, _make_weights(0.0)) == pytest.approx(50.0)

    def test_negative_weights_lower_score(self, game_shooter) -> None:
        assert LearnedWeightsStrategy.score(game_shooter, _make_weights()) == pytest.approx(10.0)

    def test_game_without_labels_is_neutral(self) -> None:
        bare = Game("g_bare", "Bare", [], [])
        assert LearnedWeightsStrategy.score(bare, _make_weights()) == pytest.approx(50.0)


class TestRecommend:
    def test_ranks_and_thresholds(self, learned_strategy, sample_games) -> None:
        ctx = MoodFilterContext(primary_mood=Mood.CHILL)
        recs = learned_strategy.recommend(_make_persona(), sample_games, ctx, n=10)
        ids = [r.game_id for r in recs]
        assert ids[0] == "g_cozy"
        assert "g_shoot" not in ids
        scores = [r.score for r in recs]
        assert scores == sorted(scores, reverse=True)

    def test_truncates_to_n(self, learned_strategy, sample_games) -> None:
        ctx = MoodFilterContext(primary_mood=Mood.CHILL)
        assert len(learned_strategy.recommend(_make_persona(), sample_games, ctx, n=2)) == 2

    def test_reason_names_liked_genre(self, learned_strategy, game_cozy) -> None:
        ctx = MoodFilterContext(primary_mood=Mood.CHILL)
        rec = learned_strategy.recommend(_make_persona(), [game_cozy], ctx, n=1)[0]
        assert "casual" in rec.reasons[0]
        assert "chill" in rec.reasons[0]

    def test_low_confidence_flagged(self, learned_strategy, game_cozy) -> None:
        ctx = MoodFilterContext(primary_mood=Mood.CHILL)
        rec = learned_strategy.recommend(_make_persona(0.1), [game_cozy], ctx, n=1)[0]
        assert any("Still learning" in r for r in rec.reasons)

    def test_no_persona(self, learned_strategy, sample_games) -> None:
        ctx = MoodFilterContext(primary_mood=Mood.CHILL)
        assert learned_strategy.recommend(None, sample_games, ctx, n=5) == []

    def test_no_context(self, learned_strategy, sample_games) -> None:
        assert learned_strategy.recommend(_make_persona(), sample_games, None, n=5) == []

    def test_no_weights_for_mood(self, learned_strategy, sample_games) -> None:
        ctx = MoodFilterContext(primary_mood=Mood.STORY)
        assert learned_strategy.recommend(_make_persona(), sample_games, ctx, n=5) == []
