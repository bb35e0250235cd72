"""Recommendation engine: routes each request to the strategy its context allows."""

from __future__ import annotations

import logging

from persona_engine.models import Game, GameRecommendation, MoodFilterContext, PersonaState
from persona_engine.strategies.base import RecommendationStrategy

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Picks one strategy per request based on the available context.

    ===========================================  ======================
    Situation                                    Strategy
    ===========================================  ======================
    No mood context                              Vector (baseline)
    Mood context, learned weights for the mood   Learned weights
    Mood context, no learned weights yet         Mood filter (static)
    ===========================================  ======================

    Args:
        vector_strategy: Context-free cosine similarity strategy.
        mood_filter_strategy: Static-table mood filter strategy.
        learned_strategy: Learned-weight strategy.
        max_recommendations: Default number of results per request.
    """

    def __init__(
        self,
        vector_strategy: RecommendationStrategy,
        mood_filter_strategy: RecommendationStrategy,
        learned_strategy: RecommendationStrategy,
        max_recommendations: int = 20,
    ) -> None:
        self._vector_strategy = vector_strategy
        self._mood_filter_strategy = mood_filter_strategy
        self._learned_strategy = learned_strategy
        self._max_recommendations = max_recommendations

    def generate(
        self,
        persona: PersonaState | None,
        games: list[Game],
        context: MoodFilterContext | None = None,
        n: int | None = None,
    ) -> list[GameRecommendation]:
        """Return up to *n* recommendations for *persona*.

        Args:
            persona: The user's state, or ``None`` for an unknown user.
            games: Candidate games.
            context: Active mood context, if any.
            n: Number of results.  Defaults to ``max_recommendations``.

        Returns:
            Recommendations ordered by descending score.  Possibly empty.

        Raises:
            ValueError: If *n* is less than 1.
        """
        n = self._max_recommendations if n is None else n
        if n < 1:
            raise ValueError("n must be at least 1")

        strategy = self.select_strategy(persona, context)
        results = strategy.recommend(persona=persona, games=games, context=context, n=n)
        logger.debug(
            "%s returned %d recommendations for user %r",
            type(strategy).__name__,
            len(results),
            persona.user_id if persona is not None else None,
        )
        return results

    def select_strategy(
        self, persona: PersonaState | None, context: MoodFilterContext | None
    ) -> RecommendationStrategy:
        if context is None:
            return self._vector_strategy
        if persona is not None and context.primary_mood in persona.dynamic_mood_weights:
            return self._learned_strategy
        return self._mood_filter_strategy
