"""Tests for persona_engine.models dataclasses and enums."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from persona_engine.models import (
    EventContext,
    EventOutcomes,
    Mood,
    MoodInfluence,
    MoodSelectionEvent,
    TimeOfDay,
    TriggerType,
    weekday_name,
)


def _at(hour: int) -> datetime:
    return datetime(2024, 6, 3, hour, 30, tzinfo=timezone.utc)


class TestTimeOfDay:
    @pytest.mark.parametrize(
        "hour,expected",
        [
            (6, TimeOfDay.MORNING),
            (11, TimeOfDay.MORNING),
            (12, TimeOfDay.AFTERNOON),
            (17, TimeOfDay.AFTERNOON),
            (18, TimeOfDay.EVENING),
            (21, TimeOfDay.EVENING),
            (22, TimeOfDay.NIGHT),
            (3, TimeOfDay.NIGHT),
        ],
    )
    def test_bucket_boundaries(self, hour, expected) -> None:
        assert TimeOfDay.for_timestamp(_at(hour)) == expected

    def test_weekday_name(self) -> None:
        # 2024-06-03 was a Monday
        assert weekday_name(_at(10)) == "monday"


class TestMoodSelectionEvent:
    def test_context_derived_from_timestamp(self) -> None:
        event = MoodSelectionEvent("u1", Mood.CHILL, _at(19))
        assert event.context == EventContext(TimeOfDay.EVENING, "monday", TriggerType.MANUAL)

    def test_explicit_context_kept(self) -> None:
        ctx = EventContext(TimeOfDay.NIGHT, "friday", TriggerType.SUGGESTED)
        event = MoodSelectionEvent("u1", Mood.CHILL, _at(19), context=ctx)
        assert event.context is ctx

    def test_default_outcomes_are_zero(self) -> None:
        event = MoodSelectionEvent("u1", Mood.CHILL, _at(9))
        assert event.outcomes == EventOutcomes()
        assert event.outcomes.user_rating is None

    def test_combination_key(self) -> None:
        event = MoodSelectionEvent("u1", Mood.ENERGETIC, _at(9), secondary_mood=Mood.COMPETITIVE)
        assert event.combination_key == "energetic+competitive"

    def test_combination_key_none_without_secondary(self) -> None:
        assert MoodSelectionEvent("u1", Mood.CHILL, _at(9)).combination_key is None

    def test_is_immutable(self) -> None:
        event = MoodSelectionEvent("u1", Mood.CHILL, _at(9))
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.primary_mood = Mood.STORY  # type: ignore[misc]


class TestMoodInfluence:
    def test_total_counts_primary_once(self) -> None:
        influence = MoodInfluence(
            primary=3.0, genre=2.0, tags=0.5, platform=0.5,
            secondary=1.0, hybrid=2.0, compatibility=-1.0, affinity=4.0, context=0.5,
        )
        assert influence.total() == pytest.approx(9.5)

    def test_defaults_to_zero(self) -> None:
        assert MoodInfluence().total() == 0.0


class TestEnums:
    def test_mood_values_are_strings(self) -> None:
        assert Mood("chill") is Mood.CHILL
        assert Mood.STORY == "story"

    def test_mood_declaration_order(self) -> None:
        assert [m.value for m in Mood] == [
            "chill", "competitive", "energetic", "focused",
            "social", "creative", "story", "exploratory",
        ]
