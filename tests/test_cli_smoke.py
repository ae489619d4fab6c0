"""
Minimal smoke tests for the lift-advisor CLI.

Tests basic functionality:
- App runs without errors
- Profile and logs are created
- Workouts and discomfort can be logged
- Recommendations, readiness and fatigue commands produce output
- Injury and variety commands respect the stored profile
"""

import json
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from lift_advisor.cli.main import app
from lift_advisor.core.metrics import today_str


runner = CliRunner()


@pytest.fixture
def data_dir(monkeypatch):
    """Create a temporary data directory and keep ~/.lift-advisor out of the tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("HOME", tmpdir)
        yield Path(tmpdir) / "athlete"


def _init(data_dir: Path, *extra: str):
    return runner.invoke(app, [
        "init",
        "--data-dir", str(data_dir),
        "--bodyweight-kg", "82",
        "--body-fat", "15",
        "--height-cm", "180",
        "--experience", "intermediate",
        *extra,
    ])


def _log(data_dir: Path, exercise: str, sets: str, date: str, *extra: str):
    return runner.invoke(app, [
        "log-workout", exercise, sets,
        "--date", date,
        "--data-dir", str(data_dir),
        *extra,
    ])


def _json(data_dir: Path, *args: str):
    result = runner.invoke(app, [*args, "--json", "--data-dir", str(data_dir)])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "recommend" in result.output

    def test_init_creates_files(self, data_dir):
        """Test init creates the profile and empty logs."""
        result = _init(data_dir)

        assert result.exit_code == 0
        assert (data_dir / "profile.json").exists()
        assert (data_dir / "history.jsonl").exists()
        assert (data_dir / "discomfort.jsonl").exists()

    def test_init_keeps_injuries(self, data_dir):
        """Test re-running init only changes measurements."""
        _init(data_dir)
        runner.invoke(app, ["injury-add", "--area", "lower_back", "--data-dir", str(data_dir)])

        result = _init(data_dir, "--force")
        assert result.exit_code == 0
        assert _json(data_dir, "injuries") == [{"area": "lower_back", "severity": 2}]

    def test_init_rejects_bad_experience(self, data_dir):
        """Test init validates experience level."""
        result = _init(data_dir, "--experience", "elite")
        assert result.exit_code == 1

    def test_commands_need_a_profile(self, data_dir):
        """Test commands fail cleanly before init."""
        result = runner.invoke(app, ["recommend", "Deadlift", "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert "init" in result.output

    def test_log_workout_adds_to_history(self, data_dir):
        """Test log-workout adds an entry and updates fatigue."""
        _init(data_dir)

        result = _log(data_dir, "Barbell Bench Press", "3*100x5@8", "2026-03-02")
        assert result.exit_code == 0
        assert "Logged" in result.output

        [entry] = _json(data_dir, "history")
        assert entry["exercise"] == "Barbell Bench Press"
        assert len(entry["sets"]) == 3

        state = _json(data_dir, "fatigue")
        assert state["fatigue_at_last_session"] > 0
        assert state["last_session_date"] == "2026-03-02"

    def test_fatigue_counts_each_session_once(self, data_dir):
        """Test a second exercise in the same session does not add fatigue."""
        _init(data_dir)
        _log(data_dir, "Barbell Bench Press", "3*100x5@8", "2026-03-02")
        first = _json(data_dir, "fatigue")["fatigue_at_last_session"]

        _log(data_dir, "Barbell Row", "3*80x8@8", "2026-03-02")
        assert _json(data_dir, "fatigue")["fatigue_at_last_session"] == first

    def test_log_workout_rejects_bad_sets(self, data_dir):
        """Test invalid set strings are reported."""
        _init(data_dir)
        result = _log(data_dir, "Deadlift", "lots", "2026-03-02")
        assert result.exit_code == 1
        assert "Invalid set format" in result.output

    def test_delete_record(self, data_dir):
        """Test delete-record removes an entry."""
        _init(data_dir)
        _log(data_dir, "Deadlift", "140x5@8", "2026-03-01")
        _log(data_dir, "Barbell Row", "80x8@8", "2026-03-03")

        result = runner.invoke(app, ["delete-record", "1", "--force", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "Deleted" in result.output
        assert [e["exercise"] for e in _json(data_dir, "history")] == ["Barbell Row"]

    def test_delete_missing_record(self, data_dir):
        """Test delete-record with an unknown number fails."""
        _init(data_dir)
        result = runner.invoke(app, ["delete-record", "3", "--force", "--data-dir", str(data_dir)])
        assert result.exit_code == 1


class TestRecommendations:
    """Working weights and 1RM estimates."""

    def test_recommend_without_history(self, data_dir):
        """Test a new lifter gets a standards-based recommendation."""
        _init(data_dir)
        rec = _json(data_dir, "recommend", "Barbell Bench Press", "--reps", "8-12")

        assert rec["rep_range"] == [8, 12]
        assert rec["recommended_weight_kg"] > 0
        assert rec["weight_low_kg"] <= rec["recommended_weight_kg"] <= rec["weight_high_kg"]
        assert rec["warmup_sets"]
        assert len(rec["set_targets"]) == 3

    def test_recommend_after_calibration(self, data_dir):
        """Test a calibrated max is used with high confidence."""
        _init(data_dir)
        result = runner.invoke(app, [
            "calibrate", "Barbell Bench Press", "100", "5",
            "--date", today_str(),
            "--data-dir", str(data_dir),
        ])
        assert result.exit_code == 0

        rec = _json(data_dir, "recommend", "Barbell Bench Press")
        assert rec["source"] == "calibration"
        assert rec["confidence"] == "high"
        assert "finding_protocol" not in rec

    def test_recommend_with_readiness(self, data_dir):
        """Test a low readiness score lightens the targets."""
        _init(data_dir)
        rec = _json(data_dir, "recommend", "Barbell Bench Press", "--readiness", "30")
        assert rec["adjusted"]["weight_kg"] < rec["recommended_weight_kg"]
        assert rec["adjusted"]["sets"] < 3

    def test_recommend_text_output(self, data_dir):
        """Test recommend renders a table."""
        _init(data_dir)
        result = runner.invoke(app, ["recommend", "Deadlift", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "kg" in result.output

    def test_recommend_rejects_bad_side(self, data_dir):
        """Test --side must be left or right."""
        _init(data_dir)
        result = runner.invoke(app, ["recommend", "Dumbbell Curl", "--side", "up", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_e1rm_from_one_set(self):
        """Test e1rm works without any stored data."""
        result = runner.invoke(app, ["e1rm", "Deadlift", "--weight", "100", "--reps", "1", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["estimated_1rm"] == 100

    def test_e1rm_from_history(self, data_dir):
        """Test e1rm estimates from logged sets."""
        _init(data_dir)
        _log(data_dir, "Barbell Back Squat", "3*120x5@8", today_str())
        est = _json(data_dir, "e1rm", "Barbell Back Squat")
        assert est["estimated_1rm"] > 120
        assert est["source"] == "direct_history"


class TestReadinessCommands:
    """Readiness, fatigue, deload and forecast."""

    def test_readiness_ideal_day(self, data_dir):
        """Test a full check-in scores 100."""
        result = _json(
            data_dir, "readiness",
            "--sleep", "8", "--sleep-quality", "5", "--stress", "1", "--nutrition", "5",
            "--previous-rpe", "6", "--rest-days", "2",
        )
        assert result["score"] == 100
        assert result["level"] == "excellent"

    def test_readiness_without_data(self, data_dir):
        """Test readiness works before init using neutral defaults."""
        result = _json(data_dir, "readiness")
        assert 0 <= result["score"] <= 100

    def test_readiness_rejects_bad_rating(self, data_dir):
        """Test out-of-range ratings are reported."""
        result = runner.invoke(app, ["readiness", "--stress", "9", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_fatigue_block_settings(self, data_dir):
        """Test fatigue can move through the training block."""
        _init(data_dir)
        state = _json(data_dir, "fatigue", "--week", "4", "--block-weeks", "4")
        assert state["week_in_block"] == 4
        assert state["deload_week"] == 4

        decision = _json(data_dir, "deload")
        assert decision["should_deload"] is True
        assert decision["urgency"] == "medium"

    def test_deload_fresh_athlete(self, data_dir):
        """Test no deload is suggested for a fresh profile."""
        _init(data_dir)
        decision = _json(data_dir, "deload")
        assert decision["should_deload"] is False

    def test_forecast(self, data_dir):
        """Test forecast from zero fatigue."""
        _init(data_dir)
        result = _json(data_dir, "forecast", "--sessions", "3", "--rpe", "8")
        assert result["projected_fatigue"] == 12
        assert result["band"] == "push"

    def test_forecast_rejects_bad_rpe(self, data_dir):
        """Test forecast exits cleanly on an RPE above 10."""
        _init(data_dir)
        result = runner.invoke(app, ["forecast", "--rpe", "12", "--data-dir", str(data_dir)])
        assert result.exit_code == 1
        assert "avg_rpe" in result.output


class TestInjuryCommands:
    """Injuries, risk, alternatives and swaps."""

    def test_injury_add_by_type(self, data_dir):
        """Test an injury type sets area and severity."""
        _init(data_dir)
        result = runner.invoke(app, [
            "injury-add", "--type", "meniscus_tear", "--side", "left", "--data-dir", str(data_dir),
        ])
        assert result.exit_code == 0
        assert _json(data_dir, "injuries") == [{"area": "knee_left", "severity": 2}]

    def test_injury_add_needs_one_source(self, data_dir):
        """Test --area and --type are mutually exclusive."""
        _init(data_dir)
        result = runner.invoke(app, [
            "injury-add", "--area", "knee", "--type", "meniscus_tear", "--data-dir", str(data_dir),
        ])
        assert result.exit_code == 1

    def test_injury_remove(self, data_dir):
        """Test a recovered injury can be cleared."""
        _init(data_dir)
        runner.invoke(app, ["injury-add", "--area", "shoulder", "--data-dir", str(data_dir)])
        result = runner.invoke(app, ["injury-remove", "shoulder", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert _json(data_dir, "injuries") == []

        result = runner.invoke(app, ["injury-remove", "shoulder", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_injury_types_listing(self):
        """Test known injury types are listed."""
        result = runner.invoke(app, ["injuries", "--types", "--json"])
        assert result.exit_code == 0
        ids = [t["id"] for t in json.loads(result.output)]
        assert "herniated_disc" in ids

    def test_risk_for_area(self):
        """Test risk for an explicit area needs no profile."""
        result = runner.invoke(app, ["risk", "Deadlift", "--area", "lower_back", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["risk"] == "avoid"

    def test_risk_unknown_exercise(self):
        """Test unknown exercises are reported."""
        result = runner.invoke(app, ["risk", "Zercher Flamingo Hold", "--area", "knee"])
        assert result.exit_code == 1

    def test_alternatives_and_swap(self, data_dir):
        """Test alternatives and swaps follow recorded injuries."""
        _init(data_dir)
        runner.invoke(app, ["injury-add", "--area", "lower_back", "--data-dir", str(data_dir)])

        alts = _json(data_dir, "alternatives", "deadlift")
        assert alts
        assert all(a["risk"] in ("safe", "caution") for a in alts)

        swaps = _json(data_dir, "swap", "Deadlift", "Lat Pulldown")
        assert [s["slot"] for s in swaps] == ["1"]
        assert swaps[0]["action"] == "swapped"
        assert swaps[0]["replacement"] != "lat_pulldown"

    def test_safe_workout_needs_no_swap(self, data_dir):
        """Test a safe workout is left alone."""
        _init(data_dir)
        result = runner.invoke(app, ["swap", "Lat Pulldown", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "safe" in result.output


class TestVarietyCommands:
    """Exercise picking, variety preferences and catalog."""

    def test_pick_excludes_unsafe(self, data_dir):
        """Test picks skip exercises ruled out by injuries."""
        _init(data_dir)
        runner.invoke(app, ["injury-add", "--area", "lower_back", "--data-dir", str(data_dir)])

        picks = _json(data_dir, "pick", "back", "--sets", "12")
        ids = [p["exercise"] for p in picks]
        assert ids
        assert "deadlift" not in ids
        assert "barbell_row" not in ids

    def test_pick_marks_recent(self, data_dir):
        """Test recently used exercises are reported as such."""
        _init(data_dir)
        _log(data_dir, "Barbell Bench Press", "3*100x5@8", today_str())

        picks = _json(data_dir, "pick", "chest", "--sets", "30", "--max", "20")
        recent = {p["exercise"] for p in picks if p["recently_used"]}
        assert recent <= {"barbell_bench_press"}

    def test_variety_settings(self, data_dir):
        """Test variety level changes are saved."""
        _init(data_dir)
        assert _json(data_dir, "variety")["level"] == "medium"

        prefs = _json(data_dir, "variety", "--level", "high")
        assert prefs["rotation_frequency"] == 3
        assert prefs["min_pool_size"] == 8
        assert _json(data_dir, "variety")["level"] == "high"

    def test_variety_rejects_bad_level(self, data_dir):
        """Test unknown levels are refused."""
        _init(data_dir)
        result = runner.invoke(app, ["variety", "--level", "extreme", "--data-dir", str(data_dir)])
        assert result.exit_code == 1

    def test_catalog(self):
        """Test catalog lists exercises for a muscle."""
        result = runner.invoke(app, ["catalog", "--muscle", "quads", "--json"])
        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert rows
        assert all(r["primary_muscle"] == "quads" for r in rows)


class TestDiscomfortCommands:
    """Discomfort logging and patterns."""

    def _log_discomfort(self, data_dir: Path, *args: str):
        return runner.invoke(app, ["discomfort-log", *args, "--json", "--data-dir", str(data_dir)])

    def test_pain_warns(self, data_dir):
        """Test pain triggers a stop warning."""
        _init(data_dir)
        result = self._log_discomfort(data_dir, "lower_back", "pain", "--exercise", "Deadlift")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["pain_warning"]["actions"] == ["skip_remaining", "continue_carefully", "end_workout"]

    def test_third_report_prompts_injury(self, data_dir):
        """Test repeated discomfort suggests recording an injury."""
        _init(data_dir)
        self._log_discomfort(data_dir, "left_knee", "twinge")
        second = json.loads(self._log_discomfort(data_dir, "left_knee", "discomfort").output)
        assert second["injury_prompt"] is None

        third = json.loads(self._log_discomfort(data_dir, "left_knee", "twinge").output)
        assert third["injury_prompt"]["suggested_injury_type"] == "knee_injury"
        assert third["injury_prompt"]["occurrences"] == 3

        [pattern] = _json(data_dir, "discomfort-patterns")
        assert pattern["body_part"] == "left_knee"
        assert pattern["suggests_injury"] is True

    def test_unknown_body_part(self, data_dir):
        """Test body parts are validated."""
        _init(data_dir)
        result = self._log_discomfort(data_dir, "toe", "pain")
        assert result.exit_code == 1

    def test_no_patterns(self, data_dir):
        """Test an empty log reports nothing."""
        _init(data_dir)
        result = runner.invoke(app, ["discomfort-patterns", "--data-dir", str(data_dir)])
        assert result.exit_code == 0
        assert "No recurring discomfort" in result.output
