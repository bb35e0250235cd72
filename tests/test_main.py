"""Tests for the command-line entry point in main.py."""

from __future__ import annotations

import json

import pytest

import main


@pytest.fixture
def games_file(tmp_path):
    path = tmp_path / "games.json"
    path.write_text(
        json.dumps(
            [
                {
                    "game_id": "g_cozy",
                    "title": "Garden Days",
                    "genres": ["casual", "simulation"],
                    "tags": ["relaxing", "cozy"],
                    "platforms": ["pc", "mobile"],
                    "difficulty": 0.2,
                    "estimated_playtime_minutes": 30,
                },
                {
                    "game_id": "g_shoot",
                    "title": "Arena Blast",
                    "genres": ["action"],
                    "tags": ["intense", "fast-paced", "competitive"],
                    "platforms": ["pc", "console"],
                    "difficulty": 0.7,
                },
            ]
        ),
        encoding="utf-8",
    )
    return path


class TestRecommend:
    def test_mood_recommendations(self, games_file, capsys) -> None:
        code = main.main(["recommend", "--games", str(games_file), "--mood", "chill", "--limit", "1"])
        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert [r["game_id"] for r in output] == ["g_cozy"]

    def test_unknown_mood_exit_code(self, games_file) -> None:
        assert main.main(["recommend", "--games", str(games_file), "--mood", "sleepy"]) == 2

    def test_missing_games_file(self, tmp_path, capsys) -> None:
        code = main.main(["recommend", "--games", str(tmp_path / "missing.json"), "--mood", "chill"])
        assert code == 2
        assert capsys.readouterr().out == ""

    def test_unparseable_games_file(self, tmp_path) -> None:
        path = tmp_path / "games.json"
        path.write_text("{not json", encoding="utf-8")
        assert main.main(["recommend", "--games", str(path)]) == 2

    def test_malformed_game_records(self, tmp_path) -> None:
        path = tmp_path / "games.json"
        path.write_text(json.dumps([{"title": "No id"}]), encoding="utf-8")
        assert main.main(["recommend", "--games", str(path)]) == 2


class TestStatefulCommands:
    def test_record_mood_then_action(self, tmp_path, capsys) -> None:
        state_path = tmp_path / "persona.json"
        code = main.main(
            [
                "record-mood", "--state", str(state_path), "--user-id", "u1",
                "--mood", "energetic", "--secondary", "competitive",
                "--recommended", "10", "--launched", "3",
            ]
        )
        assert code == 0
        weights = json.loads(capsys.readouterr().out)
        assert weights["sample_size"] == 1

        code = main.main(["record-action", "--state", str(state_path), "--action", "rate", "--rating", "5"])
        assert code == 0
        saved = json.loads(state_path.read_text(encoding="utf-8"))
        assert saved["version"] == 2
        assert saved["mood_history"][-1]["outcomes"]["user_rating"] == 5

    def test_record_action_without_persona(self, tmp_path) -> None:
        assert main.main(["record-action", "--state", str(tmp_path / "none.json"), "--action", "ignore"]) == 1

    def test_suggest(self, tmp_path, capsys) -> None:
        state_path = tmp_path / "persona.json"
        main.main(["record-mood", "--state", str(state_path), "--user-id", "u1", "--mood", "chill"])
        capsys.readouterr()
        code = main.main(
            ["suggest", "--state", str(state_path), "--time-of-day", "morning", "--social-context", "solo"]
        )
        assert code == 0
        suggestions = json.loads(capsys.readouterr().out)
        assert len(suggestions) == 3
        assert all(0.0 <= s["confidence"] <= 1.0 for s in suggestions)


class TestForecast:
    def test_forecast_from_records(self, tmp_path, capsys) -> None:
        records = tmp_path / "records.json"
        records.write_text(
            json.dumps(
                [
                    {"mood": "story", "preference": 40 + 10 * i, "last_experienced": f"2024-05-0{i + 1}T12:00:00+00:00"}
                    for i in range(5)
                ]
            ),
            encoding="utf-8",
        )
        code = main.main(["forecast", "--records", str(records), "--timeframe", "next_month"])
        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["forecast"]["predicted_mood"] == "story"
        assert output["forecast"]["timeframe"] == "next_month"


class TestAnalyze:
    def test_analyze_sessions_file(self, tmp_path, capsys) -> None:
        sessions = tmp_path / "sessions.json"
        sessions.write_text(
            json.dumps(
                [
                    {"start_time": "2024-05-30T20:00:00+00:00", "duration_seconds": 3600, "genre": "Casual"},
                    {"start_time": "2024-05-31T20:00:00+00:00", "duration_seconds": 3600, "genre": "casual"},
                    {"start_time": "2024-06-01T20:00:00+00:00", "duration_seconds": 3600, "genre": "action"},
                ]
            ),
            encoding="utf-8",
        )
        code = main.main(["analyze", "--sessions", str(sessions)])
        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["mood"]["mood"] == "energetic"
        assert output["sessions"]["total_sessions"] == 3
        assert output["sessions"]["preferred_genres"] == {"casual": 120.0, "action": 60.0}
        assert output["sessions"]["peak_hours"] == [20]
        assert isinstance(output["insights"], list)

    def test_unknown_observed_mood(self, tmp_path) -> None:
        sessions = tmp_path / "sessions.json"
        sessions.write_text(
            json.dumps(
                [{"start_time": "2024-06-01T20:00:00+00:00", "duration_seconds": 600, "genre": "rpg", "mood": "sleepy"}]
            ),
            encoding="utf-8",
        )
        assert main.main(["analyze", "--sessions", str(sessions)]) == 2
