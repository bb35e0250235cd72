"""Mood filter / hybrid pipeline: scores games against one or two active moods."""

from __future__ import annotations

import logging

from persona_engine.models import (
    DynamicMoodWeights,
    Game,
    GameRecommendation,
    Mood,
    MoodFilterContext,
    MoodFilterResult,
    MoodInfluence,
    PersonaState,
)
from persona_engine.moods import MOOD_DEFINITIONS, combination_synergy
from persona_engine.profiling import (
    compatibility_score,
    difficulty_label,
    estimate_playtime,
    infer_game_profile,
    playstyle_match,
    social_match,
)
from persona_engine.strategies.base import RecommendationStrategy

logger = logging.getLogger(__name__)

BASE_SCORE = 50.0

# Relative weights of each factor in the final score
_PRIMARY_WEIGHT = 0.40
_SECONDARY_WEIGHT = 0.25
_HYBRID_WEIGHT = 0.15
_COMPATIBILITY_WEIGHT = 0.10
_AFFINITY_WEIGHT = 0.10
_CONTEXT_WEIGHT = 0.10

# Split of a single-mood score between genre, tag and platform alignment
_GENRE_SHARE = 0.45
_TAG_SHARE = 0.35
_PLATFORM_SHARE = 0.20

# A label counts towards hybrid overlap when a mood weighs it at least this much
_OVERLAP_MIN_WEIGHT = 0.5

_TIME_BONUS = 10.0
_PLATFORM_BONUS = 15.0
_SOCIAL_BONUS = 10.0


class MoodFilterStrategy(RecommendationStrategy):
    """Scores candidate games against the user's active mood(s).

    Each game starts at a base score of 50 and receives points from:

    ========================================  ===================
    Factor                                    Weight
    ========================================  ===================
    Primary mood genre/tag/platform match     0.40
    Secondary mood match                      0.25 x intensity
    Hybrid synergy (catalogued pairs only)    0.15
    Energy / social compatibility             0.10
    User genre affinity                       0.10
    Time / platform / social context          0.10
    ========================================  ===================

    Labels absent from a mood's weight tables are neutral, and the energy /
    social term only applies to games sharing a genre or tag with an active
    mood's tables, so a game sharing nothing with the requested moods stays
    at exactly the base score.
    Learned per-user weights replace the static tables for any mood that
    has them.

    Args:
        min_score: Games scoring below this are excluded.
        max_results: Upper bound on results from :meth:`filter_by_mood`.
    """

    def __init__(self, min_score: float = 30.0, max_results: int = 20) -> None:
        self._min_score = min_score
        self._max_results = max_results

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def recommend(
        self,
        persona: PersonaState | None,
        games: list[Game],
        context: MoodFilterContext | None,
        n: int,
    ) -> list[GameRecommendation]:
        """Return up to *n* mood-filtered recommendations.

        Raises:
            ValueError: If *context* is ``None``.
        """
        if context is None:
            raise ValueError("MoodFilterStrategy requires a mood context")
        learned = persona.dynamic_mood_weights if persona is not None else None
        profile = persona.profile if persona is not None else None
        results = self.filter_by_mood(games, context, learned)[:n]
        return [
            GameRecommendation(
                game_id=r.game.game_id,
                score=r.score,
                reasons=[r.reasoning],
                mood_match=_clamp(BASE_SCORE + r.influence.primary + r.influence.secondary),
                playstyle_match=playstyle_match(r.game, profile),
                social_match=social_match(r.game, context.social_context, profile),
                estimated_playtime_minutes=estimate_playtime(r.game, context.primary_mood),
                difficulty=difficulty_label(r.game),
                tags=list(r.game.tags),
            )
            for r in results
        ]

    def filter_by_mood(
        self,
        games: list[Game],
        context: MoodFilterContext,
        learned: dict[Mood, DynamicMoodWeights] | None = None,
    ) -> list[MoodFilterResult]:
        """Score, threshold, sort and truncate *games* for *context*.

        Args:
            games: Candidate games.
            context: Active moods and situational context.
            learned: Optional learned weights keyed by mood.

        Returns:
            Results with ``score >= min_score``, best-first, at most
            ``max_results`` long.
        """
        results = [self.score_game(game, context, learned) for game in games]
        kept = [r for r in results if r.score >= self._min_score]
        kept.sort(key=lambda r: r.score, reverse=True)
        logger.debug(
            "Mood filter %s%s kept %d of %d games",
            context.primary_mood.value,
            f"+{context.secondary_mood.value}" if context.secondary_mood else "",
            len(kept),
            len(games),
        )
        return kept[: self._max_results]

    def score_game(
        self,
        game: Game,
        context: MoodFilterContext,
        learned: dict[Mood, DynamicMoodWeights] | None = None,
    ) -> MoodFilterResult:
        """Score one game and return the full influence breakdown."""
        learned = learned or {}
        influence = MoodInfluence()

        genre, tags, platform = self._single_mood_components(
            game, context.primary_mood, learned.get(context.primary_mood)
        )
        influence.genre = _PRIMARY_WEIGHT * _GENRE_SHARE * (genre - BASE_SCORE)
        influence.tags = _PRIMARY_WEIGHT * _TAG_SHARE * (tags - BASE_SCORE)
        influence.platform = _PRIMARY_WEIGHT * _PLATFORM_SHARE * (platform - BASE_SCORE)
        influence.primary = influence.genre + influence.tags + influence.platform

        if context.secondary_mood is not None:
            secondary = self.single_mood_score(
                game, context.secondary_mood, learned.get(context.secondary_mood)
            )
            influence.secondary = (
                _SECONDARY_WEIGHT * context.intensity * (secondary - BASE_SCORE)
            )
            synergy = combination_synergy(context.primary_mood, context.secondary_mood)
            if synergy > 0.0:
                overlap = self._overlap_fraction(
                    game, (context.primary_mood, context.secondary_mood), learned
                )
                influence.hybrid = _HYBRID_WEIGHT * synergy * overlap

        if self._shares_table_labels(game, context, learned):
            influence.compatibility = self._compatibility_points(game, context.primary_mood)
        influence.affinity = self._affinity_points(game, context)
        influence.context = self._context_points(game, context)

        score = _clamp(BASE_SCORE + influence.total())
        return MoodFilterResult(
            game=game,
            score=round(score, 2),
            reasoning=self._reasoning(context, influence),
            influence=influence,
        )

    def single_mood_score(
        self, game: Game, mood: Mood, learned: DynamicMoodWeights | None = None
    ) -> float:
        """Return a 0-100 alignment of *game* with a single *mood*."""
        genre, tags, platform = self._single_mood_components(game, mood, learned)
        return (
            BASE_SCORE
            + _GENRE_SHARE * (genre - BASE_SCORE)
            + _TAG_SHARE * (tags - BASE_SCORE)
            + _PLATFORM_SHARE * (platform - BASE_SCORE)
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _tables(
        mood: Mood, learned: DynamicMoodWeights | None
    ) -> tuple[dict[str, float], dict[str, float], dict[str, float]]:
        if learned is not None:
            return learned.genre_weights, learned.tag_weights, learned.platform_biases
        definition = MOOD_DEFINITIONS[mood]
        return definition.genre_weights, definition.tag_weights, definition.platform_bias

    def _single_mood_components(
        self, game: Game, mood: Mood, learned: DynamicMoodWeights | None
    ) -> tuple[float, float, float]:
        genre_table, tag_table, platform_table = self._tables(mood, learned)
        return (
            _table_score(game.genres, genre_table),
            _table_score(game.tags, tag_table),
            _table_score(game.platforms, platform_table),
        )

    def _overlap_fraction(
        self,
        game: Game,
        moods: tuple[Mood, Mood],
        learned: dict[Mood, DynamicMoodWeights],
    ) -> float:
        labels = set(game.genres) | set(game.tags)
        if not labels:
            return 0.0
        preferred: set[str] = set()
        for mood in moods:
            genre_table, tag_table, _ = self._tables(mood, learned.get(mood))
            preferred.update(k for k, w in genre_table.items() if w >= _OVERLAP_MIN_WEIGHT)
            preferred.update(k for k, w in tag_table.items() if w >= _OVERLAP_MIN_WEIGHT)
        return len(labels & preferred) / len(labels)

    def _shares_table_labels(
        self,
        game: Game,
        context: MoodFilterContext,
        learned: dict[Mood, DynamicMoodWeights],
    ) -> bool:
        labels = set(game.genres) | set(game.tags)
        moods = [context.primary_mood]
        if context.secondary_mood is not None:
            moods.append(context.secondary_mood)
        for mood in moods:
            genre_table, tag_table, _ = self._tables(mood, learned.get(mood))
            if labels & (genre_table.keys() | tag_table.keys()):
                return True
        return False

    @staticmethod
    def _compatibility_points(game: Game, mood: Mood) -> float:
        profile = infer_game_profile(game)
        definition = MOOD_DEFINITIONS[mood]
        scores = []
        if "energy" in profile.signals:
            scores.append(compatibility_score(profile.energy, definition.energy_level))
        if "social" in profile.signals:
            scores.append(compatibility_score(profile.social, definition.social_requirement))
        if not scores:
            return 0.0
        return _COMPATIBILITY_WEIGHT * (sum(scores) / len(scores) - BASE_SCORE)

    @staticmethod
    def _affinity_points(game: Game, context: MoodFilterContext) -> float:
        if not context.user_genre_affinity or not game.genres:
            return 0.0
        affinity = sum(context.user_genre_affinity.get(g, 0.0) for g in game.genres)
        return _AFFINITY_WEIGHT * 100.0 * affinity / len(game.genres)

    @staticmethod
    def _context_points(game: Game, context: MoodFilterContext) -> float:
        bonus = 0.0
        if context.time_available is not None:
            playtime = estimate_playtime(game, context.primary_mood)
            fit = context.time_available / playtime
            if fit >= 1.0:
                bonus += _TIME_BONUS
            elif fit < 0.5:
                bonus -= _TIME_BONUS
        if context.platform is not None and game.platforms:
            bonus += _PLATFORM_BONUS if context.platform in game.platforms else -_PLATFORM_BONUS
        if context.social_context is not None:
            match = social_match(game, context.social_context)
            bonus += _SOCIAL_BONUS if match >= 70.0 else -_SOCIAL_BONUS
        return _CONTEXT_WEIGHT * bonus

    @staticmethod
    def _reasoning(context: MoodFilterContext, influence: MoodInfluence) -> str:
        parts: list[str] = []
        primary = context.primary_mood.value
        if influence.primary > 1.0:
            parts.append(f"Strong match for your {primary} mood")
        elif influence.primary < -1.0:
            parts.append(f"Weak match for your {primary} mood")
        else:
            parts.append(f"Neutral fit for your {primary} mood")
        if context.secondary_mood is not None and influence.secondary > 1.0:
            parts.append(f"also suits feeling {context.secondary_mood.value}")
        if influence.hybrid > 0.0:
            parts.append(f"{primary}+{context.secondary_mood.value} synergy")
        if influence.compatibility > 1.0:
            parts.append("energy level fits")
        if influence.affinity > 1.0:
            parts.append("in genres you enjoy")
        if influence.context > 0.0:
            parts.append("fits your current situation")
        elif influence.context < 0.0:
            parts.append("less suited to your current situation")
        return "; ".join(parts)


def _table_score(labels: list[str], table: dict[str, float]) -> float:
    """Mean of ``weight * 100`` over *labels*; unknown labels count as neutral."""
    if not labels:
        return BASE_SCORE
    values = [_clamp(table[label] * 100.0) if label in table else BASE_SCORE for label in labels]
    return sum(values) / len(values)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))
