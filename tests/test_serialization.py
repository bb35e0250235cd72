"""Tests for persona_engine.serialization."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from persona_engine.models import ActionType, Mood, UserAction
from persona_engine.serialization import SCHEMA_VERSION, persona_from_dict, persona_to_dict


@pytest.fixture
def rich_state(integration, make_event, strategist_sessions, ts):
    """A persona with a profile, several events, weights and an amended outcome."""
    state = integration.create_persona("u1", strategist_sessions)
    state = integration.process_mood_selection(state, make_event(primary=Mood.FOCUSED, secondary=Mood.STORY))
    state = integration.process_mood_selection(
        state, make_event(primary=Mood.CHILL, rating=4, ts=ts + timedelta(hours=6))
    )
    action = UserAction(
        user_id="u1",
        action_type=ActionType.LAUNCH,
        timestamp=ts + timedelta(hours=7),
        game_id="g_cozy",
        session_duration_minutes=42.0,
        rating=5,
    )
    return integration.learn_from_user_action(state, action)


class TestRoundTrip:
    def test_fresh_persona(self, integration) -> None:
        state = integration.create_persona("u1")
        assert persona_from_dict(persona_to_dict(state)) == state

    def test_rich_persona(self, rich_state) -> None:
        assert persona_from_dict(persona_to_dict(rich_state)) == rich_state

    def test_through_json_text(self, rich_state) -> None:
        text = json.dumps(persona_to_dict(rich_state))
        assert persona_from_dict(json.loads(text)) == rich_state


class TestFormat:
    def test_enums_stored_by_value(self, rich_state) -> None:
        data = persona_to_dict(rich_state)
        assert data["schema_version"] == SCHEMA_VERSION
        assert data["profile"]["primary_archetype"] == "strategist"
        assert set(data["dynamic_mood_weights"]) == {"focused", "chill"}
        assert data["mood_history"][0]["secondary_mood"] == "story"
        assert "afternoon" in data["dynamic_mood_weights"]["focused"]["time_preferences"]

    def test_timestamps_iso_formatted(self, rich_state, ts) -> None:
        data = persona_to_dict(rich_state)
        assert data["mood_history"][0]["timestamp"] == ts.isoformat()


class TestErrors:
    def test_unknown_schema_version(self, rich_state) -> None:
        data = persona_to_dict(rich_state)
        data["schema_version"] = SCHEMA_VERSION + 1
        with pytest.raises(ValueError, match="schema version"):
            persona_from_dict(data)

    def test_unknown_mood(self, rich_state) -> None:
        data = persona_to_dict(rich_state)
        data["mood_history"][0]["primary_mood"] = "sleepy"
        with pytest.raises(ValueError):
            persona_from_dict(data)

    def test_missing_user_id(self, rich_state) -> None:
        data = persona_to_dict(rich_state)
        del data["user_id"]
        with pytest.raises(KeyError):
            persona_from_dict(data)
