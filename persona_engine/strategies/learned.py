"""Learned-weight strategy: scores games with a user's per-mood dynamic weights."""

from __future__ import annotations

import logging

from persona_engine.models import (
    DynamicMoodWeights,
    Game,
    GameRecommendation,
    MoodFilterContext,
    PersonaState,
)
from persona_engine.profiling import (
    difficulty_label,
    estimate_playtime,
    playstyle_match,
    social_match,
)
from persona_engine.strategies.base import RecommendationStrategy

logger = logging.getLogger(__name__)

_NEUTRAL_SCORE = 50.0
_GENRE_FACTOR = 0.4
_TAG_FACTOR = 0.3


class LearnedWeightsStrategy(RecommendationStrategy):
    """Scores games with the learned genre/tag weights of the active mood.

    The raw score is ``50 + 0.4 * mean(genre_weight * 100) + 0.3 *
    mean(tag_weight * 100)`` over the game's labels, where labels missing
    from the learned tables count as 0.  It is then pulled towards 50 by
    the weights' confidence, ``50 + (raw - 50) * confidence``, so young
    weight tables barely move the ranking.

    Args:
        min_score: Games scoring below this are excluded.
    """

    def __init__(self, min_score: float = 30.0) -> None:
        self._min_score = min_score

    def recommend(
        self,
        persona: PersonaState | None,
        games: list[Game],
        context: MoodFilterContext | None,
        n: int,
    ) -> list[GameRecommendation]:
        """Return up to *n* games ranked by learned weights.

        Returns an empty list when there is no persona, no context, or no
        learned weights for the context's primary mood.
        """
        if persona is None or context is None:
            return []
        weights = persona.dynamic_mood_weights.get(context.primary_mood)
        if weights is None:
            logger.debug("No learned weights for %s", context.primary_mood.value)
            return []

        recommendations: list[GameRecommendation] = []
        for game in games:
            score = self.score(game, weights)
            if score < self._min_score:
                continue
            recommendations.append(
                GameRecommendation(
                    game_id=game.game_id,
                    score=round(score, 2),
                    reasons=self._reasons(game, weights, context),
                    mood_match=round(score, 2),
                    playstyle_match=playstyle_match(game, persona.profile),
                    social_match=social_match(game, context.social_context, persona.profile),
                    estimated_playtime_minutes=estimate_playtime(game, context.primary_mood),
                    difficulty=difficulty_label(game),
                    tags=list(game.tags),
                )
            )
        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:n]

    @staticmethod
    def score(game: Game, weights: DynamicMoodWeights) -> float:
        """Return the confidence-scaled 0-100 score of *game*."""
        genre_values = [weights.genre_weights.get(g, 0.0) for g in game.genres]
        tag_values = [weights.tag_weights.get(t, 0.0) for t in game.tags]
        raw = _NEUTRAL_SCORE
        if genre_values:
            raw += _GENRE_FACTOR * 100.0 * sum(genre_values) / len(genre_values)
        if tag_values:
            raw += _TAG_FACTOR * 100.0 * sum(tag_values) / len(tag_values)
        scaled = _NEUTRAL_SCORE + (raw - _NEUTRAL_SCORE) * weights.confidence
        return max(0.0, min(100.0, scaled))

    @staticmethod
    def _reasons(
        game: Game, weights: DynamicMoodWeights, context: MoodFilterContext
    ) -> list[str]:
        mood = context.primary_mood.value
        liked = sorted(
            (g for g in game.genres if weights.genre_weights.get(g, 0.0) > 0.0),
            key=lambda g: weights.genre_weights[g],
            reverse=True,
        )
        reasons = []
        if liked:
            reasons.append(f"You tend to launch {liked[0]} games when feeling {mood}")
        else:
            reasons.append(f"Ranked using what you've played while feeling {mood}")
        if weights.confidence < 0.3:
            reasons.append("Still learning your preferences for this mood")
        return reasons
