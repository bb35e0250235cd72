"""Game profile inference and the match helpers every strategy reports with.

A game carries only genres, tags and platforms, so its energy / social /
cognitive / time-commitment character is inferred from those labels.  Each
dimension starts at a neutral 5 and is nudged by the signals present.
"""

from __future__ import annotations

from dataclasses import dataclass

from persona_engine.models import (
    Archetype,
    DifficultyLevel,
    Game,
    Mood,
    PlayStyleProfile,
    SocialContext,
    SocialPreference,
)
from persona_engine.moods import MOOD_DEFINITIONS

_NEUTRAL = 5
_DEFAULT_PLAYTIME_MINUTES = 60

# (dimension, labels, delta) for genre labels
_GENRE_SIGNALS: tuple[tuple[str, frozenset[str], int], ...] = (
    ("energy", frozenset({"action", "racing", "sports"}), 2),
    ("energy", frozenset({"puzzle", "casual", "simulation"}), -1),
    ("social", frozenset({"multiplayer", "sports"}), 2),
    ("social", frozenset({"puzzle", "rpg"}), -1),
    ("cognitive", frozenset({"strategy", "puzzle", "rpg"}), 2),
    ("cognitive", frozenset({"action", "casual"}), -1),
    ("time_commitment", frozenset({"rpg", "strategy", "simulation"}), 2),
    ("time_commitment", frozenset({"puzzle", "casual"}), -1),
)

_TAG_SIGNALS: tuple[tuple[str, frozenset[str], int], ...] = (
    ("energy", frozenset({"intense", "fast-paced"}), 1),
    ("energy", frozenset({"relaxing", "meditative"}), -1),
    ("social", frozenset({"multiplayer", "cooperative"}), 2),
    ("social", frozenset({"single-player", "solo"}), -1),
    ("cognitive", frozenset({"strategic", "complex"}), 1),
    ("cognitive", frozenset({"simple", "casual"}), -1),
    ("time_commitment", frozenset({"epic", "lengthy"}), 1),
    ("time_commitment", frozenset({"quick", "short"}), -1),
)

# Genres and tags each archetype gravitates towards
ARCHETYPE_AFFINITIES: dict[Archetype, frozenset[str]] = {
    Archetype.EXPLORER: frozenset({"adventure", "rpg", "exploration", "discovery", "open-world"}),
    Archetype.ACHIEVER: frozenset({"action", "rpg", "challenging", "skill-based", "complex"}),
    Archetype.SOCIAL: frozenset({"multiplayer", "sports", "cooperative", "team-based"}),
    Archetype.STRATEGIST: frozenset({"strategy", "puzzle", "strategic", "complex", "challenging"}),
    Archetype.CASUAL: frozenset({"casual", "puzzle", "relaxing", "cozy", "simple"}),
    Archetype.COMPETITIVE: frozenset({"action", "sports", "racing", "competitive", "skill-based", "intense"}),
    Archetype.CREATIVE: frozenset({"simulation", "creative", "building", "customization"}),
}

_DIFFICULTY_TARGETS: dict[DifficultyLevel, float] = {
    DifficultyLevel.CASUAL: 0.2,
    DifficultyLevel.NORMAL: 0.45,
    DifficultyLevel.HARD: 0.7,
    DifficultyLevel.EXPERT: 0.9,
}

_PREFERENCE_TO_CONTEXT: dict[SocialPreference, SocialContext] = {
    SocialPreference.SOLO: SocialContext.SOLO,
    SocialPreference.COOPERATIVE: SocialContext.CO_OP,
    SocialPreference.COMPETITIVE: SocialContext.PVP,
}


@dataclass(frozen=True)
class GameProfile:
    """Inferred 1-10 character of a game.

    Attributes:
        energy: How stimulating the game is.
        social: How much it revolves around other players.
        cognitive: How much concentration it demands.
        time_commitment: How long sessions tend to be.
        signals: Names of the dimensions that any genre or tag moved.
    """

    energy: int
    social: int
    cognitive: int
    time_commitment: int
    signals: frozenset[str]


def infer_game_profile(game: Game) -> GameProfile:
    """Derive a :class:`GameProfile` from *game*'s genres and tags."""
    values = {
        "energy": _NEUTRAL,
        "social": _NEUTRAL,
        "cognitive": _NEUTRAL,
        "time_commitment": _NEUTRAL,
    }
    signals: set[str] = set()
    for labels, table in ((game.genres, _GENRE_SIGNALS), (game.tags, _TAG_SIGNALS)):
        for label in labels:
            for dimension, members, delta in table:
                if label in members:
                    values[dimension] += delta
                    signals.add(dimension)
    clamped = {k: max(1, min(10, v)) for k, v in values.items()}
    return GameProfile(signals=frozenset(signals), **clamped)


def compatibility_score(game_value: float, mood_value: float) -> float:
    """Return ``100 - 10 * |diff|`` floored at 0."""
    return max(0.0, 100.0 - abs(game_value - mood_value) * 10.0)


def difficulty_level(value: float) -> DifficultyLevel:
    """Bucket a 0-1 difficulty score."""
    if value < 0.3:
        return DifficultyLevel.CASUAL
    if value < 0.55:
        return DifficultyLevel.NORMAL
    if value < 0.8:
        return DifficultyLevel.HARD
    return DifficultyLevel.EXPERT


def difficulty_label(game: Game) -> str:
    if game.difficulty is None:
        return DifficultyLevel.NORMAL.value
    return difficulty_level(game.difficulty).value


def estimate_playtime(game: Game, mood: Mood | None = None) -> int:
    """Typical session length for *game*, falling back to the mood's ideal."""
    if game.estimated_playtime_minutes:
        return game.estimated_playtime_minutes
    if mood is not None:
        return MOOD_DEFINITIONS[mood].session_range[1]
    return _DEFAULT_PLAYTIME_MINUTES


def social_match(
    game: Game,
    social_context: SocialContext | None = None,
    profile: PlayStyleProfile | None = None,
) -> float:
    """Score 0-100 for how well *game* suits the social setting.

    An explicit *social_context* wins; otherwise the profile's social
    preference is used.  With neither, a neutral 70 is returned.
    """
    if social_context is None and profile is not None:
        social_context = _PREFERENCE_TO_CONTEXT[profile.preferences.social_preference]
    if social_context is None:
        return 70.0
    social = infer_game_profile(game).social
    if social_context == SocialContext.SOLO:
        return 85.0 if social <= 5 else 45.0
    if social_context == SocialContext.CO_OP:
        return 85.0 if social >= 7 else 45.0
    labels = set(game.genres) | set(game.tags)
    if social >= 7 and labels & {"competitive", "sports", "multiplayer", "skill-based"}:
        return 85.0
    return 45.0


def playstyle_match(game: Game, profile: PlayStyleProfile | None) -> float:
    """Score 0-100 for how well *game* suits the user's archetypes.

    Each label shared with the primary archetype's affinities adds 20 points
    and each shared with the secondary adds 10, on top of a base of 50.  A
    known game difficulty far from the preferred difficulty costs up to 20.
    """
    if profile is None:
        return 50.0
    labels = set(game.genres) | set(game.tags)
    score = 50.0
    score += 20.0 * len(labels & ARCHETYPE_AFFINITIES[profile.primary_archetype.archetype])
    if profile.secondary_archetype is not None:
        score += 10.0 * len(labels & ARCHETYPE_AFFINITIES[profile.secondary_archetype.archetype])
    if game.difficulty is not None:
        target = _DIFFICULTY_TARGETS[profile.preferences.difficulty]
        score -= 20.0 * abs(game.difficulty - target)
    return max(0.0, min(100.0, score))
