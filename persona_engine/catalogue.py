"""Game catalogue: caches candidate games supplied by a caller-owned provider."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from persona_engine.models import Game

logger = logging.getLogger(__name__)

GameProvider = Callable[[], Iterable[Mapping[str, Any]]]


class GameCatalogue:
    """Holds the current set of candidate games.

    The catalogue performs no I/O of its own: *provider* is a callable owned
    by the caller (a store query, a file loader, a test stub) that returns
    raw game records as mappings.  Labels are normalised to lowercase so
    they line up with the mood weight tables.

    Args:
        provider: Zero-argument callable returning an iterable of game
            records with keys ``game_id``, ``title``, ``genres``, ``tags``
            and optionally ``platforms``, ``difficulty`` and
            ``estimated_playtime_minutes``.
    """

    def __init__(self, provider: GameProvider) -> None:
        self._provider = provider
        self._games: dict[str, Game] = {}

    @classmethod
    def from_games(cls, games: Iterable[Game]) -> GameCatalogue:
        """Build a catalogue over games already in memory."""
        games = list(games)
        catalogue = cls(provider=lambda: [])
        catalogue._games = {g.game_id: g for g in games}
        return catalogue

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Reload all games from the provider and replace the cache.

        On failure, logs an error and preserves the existing cache so
        callers can keep recommending from the last good catalogue.
        """
        try:
            new_games: dict[str, Game] = {}
            for record in self._provider():
                game = _parse_game(record)
                new_games[game.game_id] = game
            self._games = new_games
            logger.info("Game catalogue refreshed: %d games loaded.", len(new_games))
        except Exception:
            logger.exception(
                "Failed to refresh game catalogue; keeping existing %d games.",
                len(self._games),
            )

    def get_all_games(self) -> list[Game]:
        """Return a snapshot list of all cached games.

        Returns:
            List of :class:`~persona_engine.models.Game` objects.  Empty if
            the catalogue has never been loaded.
        """
        return list(self._games.values())

    def get_game(self, game_id: str) -> Game | None:
        """Return a single game by ID, or ``None`` if not found."""
        return self._games.get(game_id)

    def get_all_genres(self) -> list[str]:
        """Return a sorted list of all unique genre labels.

        Returns:
            Sorted list of genre strings.  Stable ordering matters because it
            can define feature vector index positions.
        """
        return sorted({g for game in self._games.values() for g in game.genres})

    def get_all_tags(self) -> list[str]:
        """Return a sorted list of all unique tag labels."""
        return sorted({t for game in self._games.values() for t in game.tags})

    def get_all_platforms(self) -> list[str]:
        return sorted({p for game in self._games.values() for p in game.platforms})


def _parse_game(record: Mapping[str, Any]) -> Game:
    difficulty = record.get("difficulty")
    playtime = record.get("estimated_playtime_minutes")
    return Game(
        game_id=str(record["game_id"]),
        title=str(record.get("title", "")),
        genres=[str(g).lower() for g in record.get("genres", ())],
        tags=[str(t).lower() for t in record.get("tags", ())],
        platforms=[str(p).lower() for p in record.get("platforms", ())],
        difficulty=float(difficulty) if difficulty is not None else None,
        estimated_playtime_minutes=int(playtime) if playtime is not None else None,
    )
