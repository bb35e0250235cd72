"""Shared pytest fixtures for all persona_engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from persona_engine.engine import RecommendationEngine
from persona_engine.integration import MoodPersonaIntegration
from persona_engine.models import (
    EventOutcomes,
    Game,
    GameSession,
    Mood,
    MoodSelectionEvent,
)
from persona_engine.strategies.learned import LearnedWeightsStrategy
from persona_engine.strategies.mood_filter import MoodFilterStrategy
from persona_engine.strategies.vector import VectorStrategy


# Saturday afternoon
TS = datetime(2024, 6, 1, 14, 0, 0, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Game fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def game_cozy() -> Game:
    return Game(
        "g_cozy", "Garden Days",
        genres=["casual", "simulation"],
        tags=["relaxing", "cozy"],
        platforms=["pc", "mobile"],
        difficulty=0.2,
        estimated_playtime_minutes=30,
    )


@pytest.fixture
def game_shooter() -> Game:
    return Game(
        "g_shoot", "Arena Blast",
        genres=["action"],
        tags=["intense", "fast-paced", "competitive"],
        platforms=["pc", "console"],
        difficulty=0.7,
        estimated_playtime_minutes=20,
    )


@pytest.fixture
def game_tactics() -> Game:
    return Game(
        "g_tact", "Grand Tactics",
        genres=["strategy"],
        tags=["strategic", "complex"],
        platforms=["pc"],
        difficulty=0.8,
        estimated_playtime_minutes=120,
    )


@pytest.fixture
def game_epic() -> Game:
    return Game(
        "g_epic", "Long Road",
        genres=["rpg", "adventure"],
        tags=["story-driven", "atmospheric", "open-world"],
        platforms=["pc", "console"],
        difficulty=0.5,
        estimated_playtime_minutes=150,
    )


@pytest.fixture
def game_party() -> Game:
    return Game(
        "g_party", "Party Cup",
        genres=["sports", "multiplayer"],
        tags=["multiplayer", "cooperative", "team-based"],
        platforms=["console"],
        difficulty=0.3,
        estimated_playtime_minutes=45,
    )


@pytest.fixture
def game_unknown() -> Game:
    """A game sharing no genre, tag or platform with any mood table."""
    return Game("g_unknown", "Mystery Box", ["trivia"], ["quirky"], [])


@pytest.fixture
def sample_games(game_cozy, game_shooter, game_tactics, game_epic, game_party) -> list[Game]:
    return [game_cozy, game_shooter, game_tactics, game_epic, game_party]


# ---------------------------------------------------------------------------
# Session fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def strategist_sessions() -> list[GameSession]:
    """Long, hard, solo strategy sessions."""
    return [
        GameSession(
            start_time=TS - timedelta(days=i),
            duration_seconds=100 * 60,
            genre="strategy",
            observed_mood=Mood.FOCUSED,
            difficulty_score=0.7,
            completed=False,
            tags=("tactical",),
        )
        for i in range(6)
    ]


@pytest.fixture
def social_sessions() -> list[GameSession]:
    """Mostly multiplayer sports sessions with a competitive streak."""
    return [
        GameSession(
            start_time=TS - timedelta(days=i),
            duration_seconds=40 * 60,
            genre="sports",
            observed_mood=Mood.COMPETITIVE,
            difficulty_score=0.5,
            is_multiplayer=True,
            tags=("multiplayer",),
        )
        for i in range(5)
    ]


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def vector_strategy() -> VectorStrategy:
    return VectorStrategy()


@pytest.fixture
def mood_filter_strategy() -> MoodFilterStrategy:
    return MoodFilterStrategy()


@pytest.fixture
def learned_strategy() -> LearnedWeightsStrategy:
    return LearnedWeightsStrategy()


@pytest.fixture
def engine(vector_strategy, mood_filter_strategy, learned_strategy) -> RecommendationEngine:
    return RecommendationEngine(vector_strategy, mood_filter_strategy, learned_strategy)


@pytest.fixture
def integration(engine) -> MoodPersonaIntegration:
    return MoodPersonaIntegration(engine=engine)


def _make_event(
    primary: Mood = Mood.ENERGETIC,
    secondary: Mood | None = None,
    intensity: float = 0.8,
    recommended: int = 10,
    launched: int = 3,
    rating: int | None = None,
    ts: datetime = TS,
    user_id: str = "u1",
) -> MoodSelectionEvent:
    return MoodSelectionEvent(
        user_id=user_id,
        primary_mood=primary,
        secondary_mood=secondary,
        intensity=intensity,
        timestamp=ts,
        outcomes=EventOutcomes(
            games_recommended=recommended,
            games_launched=launched,
            user_rating=rating,
        ),
    )


@pytest.fixture
def ts() -> datetime:
    return TS


@pytest.fixture
def make_event():
    """Factory for mood selection events at the shared afternoon timestamp."""
    return _make_event
