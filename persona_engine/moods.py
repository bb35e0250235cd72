"""Static mood catalog: per-mood weight tables, combinations and lookup tables.

Every table here is constant and keyed by :class:`~persona_engine.models.Mood`
so lookups are total over the closed mood set.  Learned per-user weights are
seeded from these tables the first time a mood is selected.
"""

from __future__ import annotations

from dataclasses import dataclass

from persona_engine.models import Mood, SocialContext


@dataclass(frozen=True)
class MoodDefinition:
    """Static description of a mood.

    Attributes:
        mood: The mood this definition belongs to.
        name: Display name.
        description: One-line description.
        energy_level: 1 (low) to 10 (high).
        social_requirement: 1 (solo) to 10 (multiplayer preferred).
        cognitive_load: 1 (relaxed) to 10 (intense focus).
        time_commitment: 1 (quick sessions) to 10 (deep engagement).
        genre_weights: Preference per genre, 0-1.
        tag_weights: Preference per tag, 0-1.
        platform_bias: Preference per platform, 0-1.
        compatible_moods: Moods that blend well with this one.
        conflicting_moods: Moods that do not blend with this one.
        session_range: ``(min, ideal, max)`` session length in minutes.
    """

    mood: Mood
    name: str
    description: str
    energy_level: int
    social_requirement: int
    cognitive_load: int
    time_commitment: int
    genre_weights: dict[str, float]
    tag_weights: dict[str, float]
    platform_bias: dict[str, float]
    compatible_moods: frozenset[Mood]
    conflicting_moods: frozenset[Mood]
    session_range: tuple[int, int, int]


@dataclass(frozen=True)
class MoodCombination:
    """A catalogued primary+secondary pairing.  Order matters."""

    primary: Mood
    secondary: Mood
    intensity: float
    context: str


MOOD_DEFINITIONS: dict[Mood, MoodDefinition] = {
    Mood.CHILL: MoodDefinition(
        mood=Mood.CHILL,
        name="Chill",
        description="Relaxed gaming with minimal mental effort",
        energy_level=2,
        social_requirement=3,
        cognitive_load=2,
        time_commitment=3,
        genre_weights={"casual": 0.9, "puzzle": 0.8, "simulation": 0.7, "strategy": 0.3, "action": 0.2},
        tag_weights={"relaxing": 0.9, "meditative": 0.8, "cozy": 0.8, "intense": 0.1, "competitive": 0.1},
        platform_bias={"pc": 0.7, "mobile": 0.9, "console": 0.6},
        compatible_moods=frozenset({Mood.CREATIVE, Mood.EXPLORATORY}),
        conflicting_moods=frozenset({Mood.COMPETITIVE, Mood.ENERGETIC}),
        session_range=(15, 45, 90),
    ),
    Mood.COMPETITIVE: MoodDefinition(
        mood=Mood.COMPETITIVE,
        name="Competitive",
        description="Challenge-seeking and achievement-focused",
        energy_level=8,
        social_requirement=7,
        cognitive_load=7,
        time_commitment=6,
        genre_weights={"action": 0.8, "sports": 0.8, "multiplayer": 0.9, "casual": 0.2, "simulation": 0.3},
        tag_weights={"competitive": 0.9, "challenging": 0.8, "skill-based": 0.8, "casual": 0.1, "relaxing": 0.1},
        platform_bias={"pc": 0.9, "console": 0.8, "mobile": 0.4},
        compatible_moods=frozenset({Mood.ENERGETIC, Mood.SOCIAL}),
        conflicting_moods=frozenset({Mood.CHILL, Mood.CREATIVE}),
        session_range=(20, 60, 120),
    ),
    Mood.ENERGETIC: MoodDefinition(
        mood=Mood.ENERGETIC,
        name="Energetic",
        description="Exciting, stimulating gameplay experiences",
        energy_level=9,
        social_requirement=6,
        cognitive_load=7,
        time_commitment=6,
        genre_weights={"action": 0.9, "racing": 0.8, "sports": 0.7, "puzzle": 0.2, "simulation": 0.3},
        tag_weights={"intense": 0.9, "fast-paced": 0.8, "exciting": 0.8, "relaxing": 0.1, "meditative": 0.1},
        platform_bias={"pc": 0.8, "console": 0.9, "mobile": 0.5},
        compatible_moods=frozenset({Mood.COMPETITIVE, Mood.SOCIAL}),
        conflicting_moods=frozenset({Mood.CHILL, Mood.FOCUSED}),
        session_range=(15, 45, 90),
    ),
    Mood.FOCUSED: MoodDefinition(
        mood=Mood.FOCUSED,
        name="Focused",
        description="Strategic thinking and deep concentration",
        energy_level=5,
        social_requirement=2,
        cognitive_load=9,
        time_commitment=8,
        genre_weights={"strategy": 0.9, "puzzle": 0.8, "rpg": 0.7, "action": 0.3, "casual": 0.2},
        tag_weights={"strategic": 0.9, "challenging": 0.8, "complex": 0.7, "simple": 0.2, "casual": 0.2},
        platform_bias={"pc": 0.9, "console": 0.6, "mobile": 0.3},
        compatible_moods=frozenset({Mood.STORY, Mood.EXPLORATORY}),
        conflicting_moods=frozenset({Mood.ENERGETIC, Mood.SOCIAL}),
        session_range=(30, 90, 180),
    ),
    Mood.SOCIAL: MoodDefinition(
        mood=Mood.SOCIAL,
        name="Social",
        description="Playing and connecting with others",
        energy_level=6,
        social_requirement=9,
        cognitive_load=5,
        time_commitment=6,
        genre_weights={"multiplayer": 0.9, "sports": 0.7, "casual": 0.6, "strategy": 0.5, "puzzle": 0.3},
        tag_weights={"multiplayer": 0.9, "cooperative": 0.8, "team-based": 0.8, "single-player": 0.2, "solo": 0.2},
        platform_bias={"pc": 0.8, "console": 0.9, "mobile": 0.6},
        compatible_moods=frozenset({Mood.ENERGETIC, Mood.COMPETITIVE}),
        conflicting_moods=frozenset({Mood.FOCUSED, Mood.CHILL}),
        session_range=(30, 75, 150),
    ),
    Mood.CREATIVE: MoodDefinition(
        mood=Mood.CREATIVE,
        name="Creative",
        description="Building and expressing creativity",
        energy_level=5,
        social_requirement=4,
        cognitive_load=6,
        time_commitment=7,
        genre_weights={"simulation": 0.9, "casual": 0.7, "puzzle": 0.6, "action": 0.3, "strategy": 0.5},
        tag_weights={"creative": 0.9, "building": 0.8, "customization": 0.8, "destructive": 0.2, "competitive": 0.3},
        platform_bias={"pc": 0.9, "console": 0.5, "mobile": 0.4},
        compatible_moods=frozenset({Mood.CHILL, Mood.EXPLORATORY}),
        conflicting_moods=frozenset({Mood.COMPETITIVE, Mood.ENERGETIC}),
        session_range=(45, 120, 240),
    ),
    Mood.STORY: MoodDefinition(
        mood=Mood.STORY,
        name="Story",
        description="Story-driven and atmospheric experiences",
        energy_level=4,
        social_requirement=2,
        cognitive_load=6,
        time_commitment=9,
        genre_weights={"rpg": 0.9, "adventure": 0.8, "story": 0.9, "action": 0.4, "puzzle": 0.5},
        tag_weights={"story-driven": 0.9, "atmospheric": 0.8, "immersive": 0.8, "arcade": 0.2, "casual": 0.3},
        platform_bias={"pc": 0.8, "console": 0.9, "mobile": 0.3},
        compatible_moods=frozenset({Mood.FOCUSED, Mood.EXPLORATORY}),
        conflicting_moods=frozenset({Mood.ENERGETIC, Mood.SOCIAL}),
        session_range=(60, 150, 300),
    ),
    Mood.EXPLORATORY: MoodDefinition(
        mood=Mood.EXPLORATORY,
        name="Exploratory",
        description="Discovering new worlds and secrets",
        energy_level=6,
        social_requirement=5,
        cognitive_load=5,
        time_commitment=7,
        genre_weights={"adventure": 0.9, "rpg": 0.8, "simulation": 0.6, "action": 0.5, "puzzle": 0.4},
        tag_weights={"exploration": 0.9, "discovery": 0.8, "open-world": 0.8, "linear": 0.2, "structured": 0.3},
        platform_bias={"pc": 0.8, "console": 0.8, "mobile": 0.5},
        compatible_moods=frozenset({Mood.STORY, Mood.CREATIVE}),
        conflicting_moods=frozenset({Mood.COMPETITIVE}),
        session_range=(45, 120, 240),
    ),
}

MOOD_COMBINATIONS: tuple[MoodCombination, ...] = (
    MoodCombination(Mood.CHILL, Mood.CREATIVE, 0.8, "Relaxed building and creativity"),
    MoodCombination(Mood.ENERGETIC, Mood.COMPETITIVE, 0.9, "Intense competitive gameplay"),
    MoodCombination(Mood.FOCUSED, Mood.STORY, 0.8, "Deep strategic immersion"),
    MoodCombination(Mood.SOCIAL, Mood.ENERGETIC, 0.7, "Energetic social gaming"),
    MoodCombination(Mood.EXPLORATORY, Mood.STORY, 0.8, "Deep world exploration"),
    MoodCombination(Mood.CREATIVE, Mood.CHILL, 0.7, "Casual creative expression"),
    MoodCombination(Mood.COMPETITIVE, Mood.SOCIAL, 0.8, "Team-based competition"),
    MoodCombination(Mood.STORY, Mood.FOCUSED, 0.9, "Story-driven concentration"),
)

_COMBINATION_INDEX: dict[tuple[Mood, Mood], MoodCombination] = {
    (c.primary, c.secondary): c for c in MOOD_COMBINATIONS
}

# Synergy points granted per unit of combination intensity
SYNERGY_SCALE = 25.0

# Moods that fit a social setting, consulted by mood suggestions
SOCIAL_CONTEXT_MOODS: dict[SocialContext, tuple[Mood, ...]] = {
    SocialContext.SOLO: (Mood.FOCUSED, Mood.CHILL, Mood.EXPLORATORY, Mood.CREATIVE),
    SocialContext.CO_OP: (Mood.SOCIAL, Mood.ENERGETIC, Mood.CREATIVE),
    SocialContext.PVP: (Mood.COMPETITIVE, Mood.ENERGETIC, Mood.FOCUSED),
}

# Predicted -> actual pairs that count as a partial hit in resonance analysis
RESONANCE_COMPATIBLE_MOODS: dict[Mood, frozenset[Mood]] = {
    Mood.CHILL: frozenset({Mood.CREATIVE, Mood.STORY, Mood.EXPLORATORY}),
    Mood.COMPETITIVE: frozenset({Mood.ENERGETIC, Mood.FOCUSED, Mood.SOCIAL}),
    Mood.ENERGETIC: frozenset({Mood.COMPETITIVE, Mood.SOCIAL, Mood.FOCUSED}),
    Mood.FOCUSED: frozenset({Mood.COMPETITIVE}),
    Mood.SOCIAL: frozenset({Mood.ENERGETIC, Mood.COMPETITIVE, Mood.CHILL}),
    Mood.CREATIVE: frozenset({Mood.CHILL, Mood.STORY, Mood.EXPLORATORY}),
    Mood.STORY: frozenset({Mood.CHILL, Mood.CREATIVE, Mood.EXPLORATORY}),
    Mood.EXPLORATORY: frozenset({Mood.CREATIVE, Mood.STORY, Mood.CHILL}),
}

KNOWN_GENRES: list[str] = sorted(
    {g for d in MOOD_DEFINITIONS.values() for g in d.genre_weights}
)
KNOWN_TAGS: list[str] = sorted(
    {t for d in MOOD_DEFINITIONS.values() for t in d.tag_weights}
)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_mood(mood: Mood) -> MoodDefinition:
    return MOOD_DEFINITIONS[mood]


def parse_mood(value: str) -> Mood:
    """Return the :class:`Mood` named by *value* (case-insensitive).

    Raises:
        ValueError: If *value* is not a known mood id.
    """
    try:
        return Mood(value.strip().lower())
    except ValueError:
        known = ", ".join(m.value for m in Mood)
        raise ValueError(f"Unknown mood {value!r}; expected one of: {known}") from None


def get_combination(primary: Mood, secondary: Mood) -> MoodCombination | None:
    """Return the catalogued combination for the ordered pair, if any."""
    return _COMBINATION_INDEX.get((primary, secondary))


def combination_synergy(primary: Mood, secondary: Mood | None) -> float:
    """Return synergy points for an ordered mood pair.

    Only catalogued pairs combine; ``(a, b)`` being catalogued says nothing
    about ``(b, a)``.  Unknown pairs and a missing secondary yield ``0.0``.
    """
    if secondary is None:
        return 0.0
    combination = get_combination(primary, secondary)
    if combination is None:
        return 0.0
    return combination.intensity * SYNERGY_SCALE


def is_compatible_combination(primary: Mood, secondary: Mood) -> bool:
    """Whether *secondary* can sensibly be blended into *primary*."""
    if primary == secondary:
        return False
    definition = MOOD_DEFINITIONS[primary]
    if secondary in definition.conflicting_moods:
        return False
    return (primary, secondary) in _COMBINATION_INDEX or secondary in definition.compatible_moods


def recommended_combinations(primary: Mood, limit: int = 3) -> list[MoodCombination]:
    """Catalogued combinations starting from *primary*, strongest first."""
    matches = [c for c in MOOD_COMBINATIONS if c.primary == primary]
    matches.sort(key=lambda c: c.intensity, reverse=True)
    return matches[:limit]
