"""Context-free baseline strategy using cosine similarity over a shared feature space."""

from __future__ import annotations

import logging

import numpy as np

from persona_engine.models import (
    Archetype,
    Game,
    GameRecommendation,
    Mood,
    MoodFilterContext,
    PersonaState,
    PlayStyleProfile,
    SocialPreference,
)
from persona_engine.moods import KNOWN_GENRES, KNOWN_TAGS, MOOD_DEFINITIONS
from persona_engine.playstyle import default_profile
from persona_engine.profiling import (
    ARCHETYPE_AFFINITIES,
    difficulty_label,
    estimate_playtime,
    infer_game_profile,
    playstyle_match,
    social_match,
)
from persona_engine.strategies.base import RecommendationStrategy

logger = logging.getLogger(__name__)

_MOOD_WEIGHT = 0.4
_ARCHETYPE_WEIGHT = 0.3
_PREFERENCE_WEIGHT = 0.3

_GENRE_WEIGHT = 0.5
_TAG_WEIGHT = 0.3
_SCALAR_WEIGHT = 0.2

_NUMERIC_FEATURES = ("difficulty", "social", "story", "action")
_STORY_LABELS = frozenset({"story", "rpg", "adventure", "story-driven", "narrative"})
_ACTION_LABELS = frozenset({"action", "racing", "sports", "fast-paced", "intense"})

_DIFFICULTY_AFFINITY = {"casual": 0.2, "normal": 0.45, "hard": 0.7, "expert": 0.9}
_SOCIAL_AFFINITY = {
    SocialPreference.SOLO: 0.2,
    SocialPreference.COOPERATIVE: 0.7,
    SocialPreference.COMPETITIVE: 0.9,
}


class VectorStrategy(RecommendationStrategy):
    """Scores games by cosine similarity between a user vector and game vectors.

    Both vectors live in one feature layout
    ``[genre_0 .. genre_N, tag_0 .. tag_M, difficulty, social, story, action]``.
    The user's mood and primary archetype are one-hot selections projected
    into that layout through constant embedding matrices (one row per mood /
    archetype), built once here and reused on every call:

    * mood block, weight 0.4: the mood's static genre/tag weights
    * archetype block, weight 0.3: the archetype's affine genres/tags
    * preference block, weight 0.3: difficulty/social/story/action affinities

    A game vector is its normalised genre one-hot (0.5), its known-tag bag
    (0.3) and its scalar difficulty, social, story and action signals (0.2).

    Args:
        genres: Ordered genre vocabulary.  Defaults to every genre the mood
            tables mention.
        tags: Ordered tag vocabulary.  Defaults to every tag the mood tables
            mention.
        min_similarity: Games scoring below this cosine are discarded.
    """

    def __init__(
        self,
        genres: list[str] | None = None,
        tags: list[str] | None = None,
        min_similarity: float = 0.3,
    ) -> None:
        self._genres = list(genres) if genres is not None else list(KNOWN_GENRES)
        self._tags = list(tags) if tags is not None else list(KNOWN_TAGS)
        self._min_similarity = min_similarity
        self._genre_index = {g: i for i, g in enumerate(self._genres)}
        self._tag_index = {t: i + len(self._genres) for i, t in enumerate(self._tags)}
        self._numeric_offset = len(self._genres) + len(self._tags)
        self._n_features = self._numeric_offset + len(_NUMERIC_FEATURES)

        self._moods = list(Mood)
        self._archetypes = list(Archetype)
        self._mood_embedding = self._build_mood_embedding()
        self._archetype_embedding = self._build_archetype_embedding()

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
        """Return up to *n* games most similar to the user vector.

        The mood comes from *context* when given, otherwise from the most
        recent mood selection in *persona*'s history.

        Args:
            persona: Target user, or ``None`` for an unknown user.
            games: Candidate games.
            context: Optional mood context; only its mood is used.
            n: Number of recommendations to return.

        Returns:
            Up to *n* recommendations with similarity >= ``min_similarity``,
            best-first.
        """
        if not games or n <= 0:
            return []

        profile = persona.profile if persona is not None else default_profile()
        mood = self._resolve_mood(persona, context)
        user_vec = self.build_user_vector(mood, profile)

        scored: list[tuple[float, GameRecommendation]] = []
        for game in games:
            game_vec = self.build_game_vector(game)
            similarity = self.cosine_similarity(user_vec, game_vec)
            if similarity < self._min_similarity:
                continue
            recommendation = self._to_recommendation(
                game, game_vec, user_vec, similarity, mood, profile
            )
            scored.append((similarity, recommendation))

        scored.sort(key=lambda item: item[0], reverse=True)
        logger.debug(
            "Vector strategy kept %d of %d games (mood=%s)",
            len(scored),
            len(games),
            mood.value if mood else None,
        )
        return [rec for _, rec in scored[:n]]

    def build_user_vector(self, mood: Mood | None, profile: PlayStyleProfile) -> np.ndarray:
        """Combine mood, archetype and preference blocks into one vector."""
        mood_onehot = np.zeros(len(self._moods), dtype=np.float32)
        if mood is not None:
            mood_onehot[self._moods.index(mood)] = 1.0
        archetype_onehot = np.zeros(len(self._archetypes), dtype=np.float32)
        archetype_onehot[self._archetypes.index(profile.primary_archetype.archetype)] = 1.0

        preferences = np.zeros(self._n_features, dtype=np.float32)
        prefs = profile.preferences
        preferences[self._numeric_offset:] = (
            _DIFFICULTY_AFFINITY[prefs.difficulty.value],
            _SOCIAL_AFFINITY[prefs.social_preference],
            prefs.story_focus / 100.0,
            prefs.gameplay_focus / 100.0,
        )

        return (
            _MOOD_WEIGHT * (mood_onehot @ self._mood_embedding)
            + _ARCHETYPE_WEIGHT * (archetype_onehot @ self._archetype_embedding)
            + _PREFERENCE_WEIGHT * preferences
        )

    def build_game_vector(self, game: Game) -> np.ndarray:
        vec = np.zeros(self._n_features, dtype=np.float32)
        known_genres = [g for g in game.genres if g in self._genre_index]
        for genre in known_genres:
            vec[self._genre_index[genre]] = _GENRE_WEIGHT / len(known_genres)
        for tag in game.tags:
            if tag in self._tag_index:
                vec[self._tag_index[tag]] = _TAG_WEIGHT

        labels = set(game.genres) | set(game.tags)
        profile = infer_game_profile(game)
        vec[self._numeric_offset:] = (
            _SCALAR_WEIGHT * (game.difficulty if game.difficulty is not None else 0.5),
            _SCALAR_WEIGHT * profile.social / 10.0,
            _SCALAR_WEIGHT * (1.0 if labels & _STORY_LABELS else 0.0),
            _SCALAR_WEIGHT * (1.0 if labels & _ACTION_LABELS else 0.0),
        )
        return vec

    @staticmethod
    def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
        """Return cosine similarity; returns 0.0 for zero vectors."""
        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)
        if norm_a == 0.0 or norm_b == 0.0:
            return 0.0
        return float(np.dot(a, b) / (norm_a * norm_b))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_mood_embedding(self) -> np.ndarray:
        matrix = np.zeros((len(self._moods), self._n_features), dtype=np.float32)
        for row, mood in enumerate(self._moods):
            definition = MOOD_DEFINITIONS[mood]
            for genre, weight in definition.genre_weights.items():
                if genre in self._genre_index:
                    matrix[row, self._genre_index[genre]] = weight
            for tag, weight in definition.tag_weights.items():
                if tag in self._tag_index:
                    matrix[row, self._tag_index[tag]] = weight
        return matrix

    def _build_archetype_embedding(self) -> np.ndarray:
        matrix = np.zeros((len(self._archetypes), self._n_features), dtype=np.float32)
        for row, archetype in enumerate(self._archetypes):
            for label in ARCHETYPE_AFFINITIES[archetype]:
                if label in self._genre_index:
                    matrix[row, self._genre_index[label]] = 1.0
                if label in self._tag_index:
                    matrix[row, self._tag_index[label]] = 1.0
        return matrix

    @staticmethod
    def _resolve_mood(
        persona: PersonaState | None, context: MoodFilterContext | None
    ) -> Mood | None:
        if context is not None:
            return context.primary_mood
        if persona is not None and persona.mood_history:
            return persona.mood_history[-1].primary_mood
        return None

    def _to_recommendation(
        self,
        game: Game,
        game_vec: np.ndarray,
        user_vec: np.ndarray,
        similarity: float,
        mood: Mood | None,
        profile: PlayStyleProfile,
    ) -> GameRecommendation:
        mood_match = 50.0
        if mood is not None:
            mood_row = self._mood_embedding[self._moods.index(mood)]
            mood_match = 100.0 * self.cosine_similarity(mood_row, game_vec)
        return GameRecommendation(
            game_id=game.game_id,
            score=round(max(0.0, min(100.0, similarity * 100.0)), 2),
            reasons=[self._strongest_reason(user_vec * game_vec, mood)],
            mood_match=round(max(0.0, min(100.0, mood_match)), 2),
            playstyle_match=playstyle_match(game, profile),
            social_match=social_match(game, None, profile),
            estimated_playtime_minutes=estimate_playtime(game, mood),
            difficulty=difficulty_label(game),
            tags=list(game.tags),
        )

    def _strongest_reason(self, contributions: np.ndarray, mood: Mood | None) -> str:
        index = int(np.argmax(contributions))
        if index < len(self._genres):
            genre = self._genres[index]
            if mood is not None:
                return f"{genre.title()} games suit your {mood.value} mood"
            return f"Matches your interest in {genre} games"
        if index < self._numeric_offset:
            return f"Tagged {self._tags[index - len(self._genres)]}, which fits your profile"
        feature = _NUMERIC_FEATURES[index - self._numeric_offset]
        return {
            "difficulty": "Difficulty is in line with what you usually play",
            "social": "Fits how you like to play with others",
            "story": "Story-rich, matching your focus on narrative",
            "action": "Gameplay-driven, matching your focus on action",
        }[feature]
