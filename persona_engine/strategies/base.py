"""Abstract base class for all recommendation strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod

from persona_engine.models import Game, GameRecommendation, MoodFilterContext, PersonaState


class RecommendationStrategy(ABC):
    """Abstract base class for all recommendation strategies.

    Each strategy encapsulates one scoring approach (vector similarity, mood
    filtering, or learned weights).  The
    :class:`~persona_engine.engine.RecommendationEngine` picks one per call
    depending on what context and learned state is available.
    """

    @abstractmethod
    def recommend(
        self,
        persona: PersonaState | None,
        games: list[Game],
        context: MoodFilterContext | None,
        n: int,
    ) -> list[GameRecommendation]:
        """Return up to *n* scored games for *persona*.

        Args:
            persona: The user's current state, or ``None`` for an unknown
                user.  Strategies never modify it.
            games: Candidate games.
            context: Active mood context, if the user supplied one.
            n: Maximum number of recommendations to return.

        Returns:
            Recommendations ordered by descending score.
        """
