"""Entry point: wires all components and runs one command against JSON files.

The engine itself performs no I/O.  This module plays the caller's role:
it loads the persona snapshot and game catalogue from disk, runs one
operation, prints the result as JSON and writes any new snapshot back.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import config
from persona_engine.behavior import (
    analyze_mood,
    analyze_sessions,
    extract_behavior_patterns,
    predict_next_genre,
    predictive_insights,
)
from persona_engine.catalogue import GameCatalogue
from persona_engine.engine import RecommendationEngine
from persona_engine.integration import MoodPersonaIntegration
from persona_engine.models import (
    ActionType,
    EventOutcomes,
    GameSession,
    MoodFilterContext,
    MoodSelectionEvent,
    MoodSuggestionContext,
    PersonaState,
    SocialContext,
    TimeOfDay,
    UserAction,
    UserMoodRecord,
)
from persona_engine.moods import parse_mood
from persona_engine.playstyle import PlaystyleClassifier
from persona_engine.serialization import persona_from_dict, persona_to_dict
from persona_engine.strategies.learned import LearnedWeightsStrategy
from persona_engine.strategies.mood_filter import MoodFilterStrategy
from persona_engine.strategies.vector import VectorStrategy
from persona_engine.trends import calculate_mood_forecast, calculate_mood_trend

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_integration() -> MoodPersonaIntegration:
    """Construct the integration service with all strategies wired from config.

    Returns:
        A ready :class:`~persona_engine.integration.MoodPersonaIntegration`.
    """
    engine = RecommendationEngine(
        vector_strategy=VectorStrategy(min_similarity=config.VECTOR_MIN_SIMILARITY),
        mood_filter_strategy=MoodFilterStrategy(
            min_score=config.MIN_SCORE_THRESHOLD,
            max_results=config.MAX_RECOMMENDATIONS,
        ),
        learned_strategy=LearnedWeightsStrategy(min_score=config.MIN_SCORE_THRESHOLD),
        max_recommendations=config.MAX_RECOMMENDATIONS,
    )
    classifier = PlaystyleClassifier(half_life_days=config.PLAYSTYLE_RECENCY_HALF_LIFE_DAYS)
    return MoodPersonaIntegration(engine=engine, classifier=classifier)


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def load_state(path: Path) -> PersonaState | None:
    if not path.exists():
        return None
    with path.open(encoding="utf-8") as fh:
        return persona_from_dict(json.load(fh))


def save_state(path: Path, state: PersonaState) -> None:
    with path.open("w", encoding="utf-8") as fh:
        json.dump(persona_to_dict(state), fh, indent=2)
    logger.info("Saved persona %r (version %d) to %s", state.user_id, state.version, path)


def load_catalogue(path: Path) -> GameCatalogue:
    """Load the game catalogue from *path*.

    Raises:
        ValueError: If the file is missing, is not valid JSON, or holds
            records the catalogue cannot parse.
    """
    if not path.exists():
        raise ValueError(f"Game catalogue file not found: {path}")
    with path.open(encoding="utf-8") as fh:
        records: list[dict[str, Any]] = json.load(fh)

    catalogue = GameCatalogue(lambda: records)
    catalogue.refresh()
    if records and not catalogue.get_all_games():
        raise ValueError(f"No valid game records in {path}")
    return catalogue


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return _to_jsonable(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(getattr(k, "value", k)): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return getattr(value, "value", value)


def _print_json(value: Any) -> None:
    print(json.dumps(_to_jsonable(value), indent=2))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_recommend(args: argparse.Namespace, integration: MoodPersonaIntegration) -> int:
    state = load_state(args.state) if args.state else None
    games = load_catalogue(args.games).get_all_games()
    if args.mood is None:
        results = integration.generate_recommendations(state, games, args.limit)
    else:
        context = MoodFilterContext(
            primary_mood=parse_mood(args.mood),
            secondary_mood=parse_mood(args.secondary) if args.secondary else None,
            intensity=args.intensity,
            time_available=args.time_available,
            social_context=SocialContext(args.social_context) if args.social_context else None,
            platform=args.platform,
        )
        results = integration.generate_personalized_recommendations(
            state, context.primary_mood, games, context, args.limit
        )
    _print_json(results)
    return 0


def cmd_record_mood(args: argparse.Namespace, integration: MoodPersonaIntegration) -> int:
    state = load_state(args.state)
    event = MoodSelectionEvent(
        user_id=args.user_id,
        primary_mood=parse_mood(args.mood),
        secondary_mood=parse_mood(args.secondary) if args.secondary else None,
        intensity=args.intensity,
        timestamp=datetime.now(timezone.utc),
        outcomes=EventOutcomes(
            games_recommended=args.recommended,
            games_launched=args.launched,
            user_rating=args.rating,
        ),
    )
    new_state = integration.process_mood_selection(state, event)
    save_state(args.state, new_state)
    _print_json(new_state.dynamic_mood_weights[event.primary_mood])
    return 0


def cmd_record_action(args: argparse.Namespace, integration: MoodPersonaIntegration) -> int:
    state = load_state(args.state)
    if state is None:
        logger.error("No persona found at %s", args.state)
        return 1
    action = UserAction(
        user_id=state.user_id,
        action_type=ActionType(args.action),
        timestamp=datetime.now(timezone.utc),
        game_id=args.game_id,
        session_duration_minutes=args.duration,
        rating=args.rating,
    )
    new_state = integration.learn_from_user_action(state, action)
    save_state(args.state, new_state)
    return 0


def cmd_suggest(args: argparse.Namespace, integration: MoodPersonaIntegration) -> int:
    state = load_state(args.state)
    if state is None:
        logger.error("No persona found at %s", args.state)
        return 1
    context = MoodSuggestionContext(
        time_of_day=(
            TimeOfDay(args.time_of_day)
            if args.time_of_day
            else TimeOfDay.for_timestamp(datetime.now())
        ),
        social_context=SocialContext(args.social_context) if args.social_context else None,
    )
    _print_json(integration.generate_mood_suggestions(state, context))
    return 0


def cmd_forecast(args: argparse.Namespace, integration: MoodPersonaIntegration) -> int:
    with args.records.open(encoding="utf-8") as fh:
        records = [
            UserMoodRecord(
                mood=parse_mood(r["mood"]),
                preference=float(r["preference"]),
                last_experienced=datetime.fromisoformat(r["last_experienced"]),
            )
            for r in json.load(fh)
        ]
    analysis = calculate_mood_trend(records)
    forecast = calculate_mood_forecast(analysis, records, args.timeframe)
    _print_json({"trend": analysis, "forecast": forecast})
    return 0


def cmd_analyze(args: argparse.Namespace, integration: MoodPersonaIntegration) -> int:
    with args.sessions.open(encoding="utf-8") as fh:
        sessions = [_parse_session(r) for r in json.load(fh)]
    now = datetime.fromisoformat(args.now) if args.now else None
    patterns = extract_behavior_patterns(sessions)
    recent_genres = [s.genre for s in sorted(sessions, key=lambda s: s.start_time)]
    _print_json(
        {
            "mood": analyze_mood(sessions, now),
            "sessions": analyze_sessions(sessions),
            "patterns": patterns,
            "insights": predictive_insights(patterns),
            "next_genre": predict_next_genre(patterns, recent_genres),
        }
    )
    return 0


def _parse_session(record: dict[str, Any]) -> GameSession:
    mood = record.get("mood")
    rating = record.get("rating")
    return GameSession(
        start_time=datetime.fromisoformat(record["start_time"]),
        duration_seconds=int(record["duration_seconds"]),
        genre=str(record["genre"]).lower(),
        observed_mood=parse_mood(mood) if mood else None,
        platform=str(record.get("platform", "pc")).lower(),
        difficulty_score=float(record.get("difficulty_score", 0.5)),
        is_multiplayer=bool(record.get("is_multiplayer", False)),
        completed=bool(record.get("completed", False)),
        rating=int(rating) if rating is not None else None,
        tags=tuple(str(t).lower() for t in record.get("tags", ())),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Adaptive mood/persona game recommender")
    sub = parser.add_subparsers(dest="command", required=True)
    social_choices = [c.value for c in SocialContext]

    rec = sub.add_parser("recommend", help="rank games from a catalogue file")
    rec.add_argument("--games", type=Path, required=True)
    rec.add_argument("--state", type=Path)
    rec.add_argument("--mood")
    rec.add_argument("--secondary")
    rec.add_argument("--intensity", type=float, default=1.0)
    rec.add_argument("--time-available", type=int)
    rec.add_argument("--social-context", choices=social_choices)
    rec.add_argument("--platform")
    rec.add_argument("--limit", type=int, default=config.MAX_RECOMMENDATIONS)
    rec.set_defaults(func=cmd_recommend)

    mood = sub.add_parser("record-mood", help="record a mood selection")
    mood.add_argument("--state", type=Path, required=True)
    mood.add_argument("--user-id", required=True)
    mood.add_argument("--mood", required=True)
    mood.add_argument("--secondary")
    mood.add_argument("--intensity", type=float, default=1.0)
    mood.add_argument("--recommended", type=int, default=0)
    mood.add_argument("--launched", type=int, default=0)
    mood.add_argument("--rating", type=int)
    mood.set_defaults(func=cmd_record_mood)

    action = sub.add_parser("record-action", help="apply feedback to the latest mood")
    action.add_argument("--state", type=Path, required=True)
    action.add_argument("--action", required=True, choices=[a.value for a in ActionType])
    action.add_argument("--game-id")
    action.add_argument("--rating", type=int)
    action.add_argument("--duration", type=float)
    action.set_defaults(func=cmd_record_action)

    suggest = sub.add_parser("suggest", help="suggest moods for now")
    suggest.add_argument("--state", type=Path, required=True)
    suggest.add_argument("--time-of-day", choices=[t.value for t in TimeOfDay])
    suggest.add_argument("--social-context", choices=social_choices)
    suggest.set_defaults(func=cmd_suggest)

    forecast = sub.add_parser("forecast", help="forecast the next mood")
    forecast.add_argument("--records", type=Path, required=True)
    forecast.add_argument("--timeframe", default=config.DEFAULT_FORECAST_TIMEFRAME)
    forecast.set_defaults(func=cmd_forecast)

    analyze = sub.add_parser("analyze", help="infer mood and habits from play sessions")
    analyze.add_argument("--sessions", type=Path, required=True)
    analyze.add_argument("--now", help="ISO timestamp ending the recent-mood window")
    analyze.set_defaults(func=cmd_analyze)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the chosen command and return its exit code."""
    args = build_parser().parse_args(argv)
    integration = build_integration()
    try:
        return args.func(args, integration)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
