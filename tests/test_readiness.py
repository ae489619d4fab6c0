"""
Tests for readiness scoring, the fatigue accumulator, deload triggers and
the weekly fatigue forecast.
"""

import pytest

from lift_advisor.core.engine.config_loader import DeloadPolicy, ForecastPolicy
from lift_advisor.core.models import (
    ExerciseHistoryEntry,
    FatigueState,
    HistorySet,
    ProgressionTargets,
    ReadinessInput,
    SessionSummary,
)
from lift_advisor.core.readiness import (
    adjust_targets_for_readiness,
    calculate_fatigue_after_rest,
    calculate_readiness_score,
    forecast_weekly_fatigue,
    get_readiness_interpretation,
    record_session,
    score_readiness,
    should_trigger_deload,
    summarize_sessions,
    update_mesocycle_fatigue,
)


def _targets(**overrides) -> ProgressionTargets:
    values = dict(weight_kg=100.0, rep_range=(8, 12), target_rir=2, sets=4, rest_seconds=120)
    values.update(overrides)
    return ProgressionTargets(**values)


def _sessions(*rpes: float, completion: float = 100.0) -> list[SessionSummary]:
    return [SessionSummary(session_rpe=r, completion_percent=completion) for r in rpes]


# =============================================================================
# Readiness score
# =============================================================================


class TestReadinessScore:

    def test_neutral_defaults(self):
        # 0.35*81 + 0.25*60 + 0.20*60 + 0.20*70 = 69.35
        assert calculate_readiness_score(ReadinessInput()) == 69

    def test_ideal_day_caps_at_100(self):
        check_in = ReadinessInput(
            sleep_hours=8,
            sleep_quality=5,
            stress_level=1,
            nutrition_rating=5,
            previous_session_rpe=6,
            days_since_last_session=2,
        )
        assert calculate_readiness_score(check_in) == 100

    def test_rough_day_is_poor(self):
        check_in = ReadinessInput(
            sleep_hours=4,
            sleep_quality=1,
            stress_level=5,
            nutrition_rating=1,
            previous_session_rpe=9.5,
            days_since_last_session=0,
        )
        result = score_readiness(check_in)
        assert result.score == 23
        assert result.interpretation.level == "poor"

    def test_more_sleep_in_optimal_band_scores_higher(self):
        seven = calculate_readiness_score(ReadinessInput(sleep_hours=7))
        nine = calculate_readiness_score(ReadinessInput(sleep_hours=9))
        assert nine > seven

    @pytest.mark.parametrize("field", ["sleep_quality", "nutrition_rating"])
    def test_better_ratings_never_lower_the_score(self, field):
        scores = [calculate_readiness_score(ReadinessInput(**{field: v})) for v in range(1, 6)]
        assert scores == sorted(scores)

    def test_more_stress_never_raises_the_score(self):
        scores = [calculate_readiness_score(ReadinessInput(stress_level=v)) for v in range(1, 6)]
        assert scores == sorted(scores, reverse=True)

    def test_same_day_training_scores_lower(self):
        same_day = calculate_readiness_score(ReadinessInput(days_since_last_session=0))
        next_day = calculate_readiness_score(ReadinessInput(days_since_last_session=1))
        assert same_day < next_day

    def test_more_rest_days_raise_the_score(self):
        # recovery adjustment -20, 0, +10, +15 at weight 0.20
        scores = [
            calculate_readiness_score(ReadinessInput(days_since_last_session=d)) for d in range(4)
        ]
        assert scores == [65, 69, 71, 72]

    def test_score_always_in_range(self):
        for hours in (0, 3, 5.5, 6.5, 8, 9.5, 12):
            for quality in (1, 3, 5):
                score = calculate_readiness_score(
                    ReadinessInput(sleep_hours=hours, sleep_quality=quality)
                )
                assert 0 <= score <= 100

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sleep_quality": 0},
            {"stress_level": 6},
            {"sleep_hours": 25},
            {"previous_session_rpe": 11},
            {"days_since_last_session": -1},
        ],
    )
    def test_invalid_check_in_raises(self, kwargs):
        with pytest.raises(ValueError):
            ReadinessInput(**kwargs)


class TestInterpretation:

    @pytest.mark.parametrize(
        "score,level",
        [(90, "excellent"), (85, "excellent"), (70, "good"), (60, "moderate"), (45, "low"), (10, "poor")],
    )
    def test_levels(self, score, level):
        assert get_readiness_interpretation(score).level == level


# =============================================================================
# Target adjustment
# =============================================================================


class TestAdjustTargets:

    def test_high_readiness_unchanged(self):
        base = _targets()
        assert adjust_targets_for_readiness(base, 85) is base

    def test_moderate_adds_rir_and_rest(self):
        adjusted = adjust_targets_for_readiness(_targets(reason="Planned"), 70)
        assert adjusted.weight_kg == 100.0
        assert adjusted.target_rir == 3
        assert adjusted.rest_seconds == 150
        assert "moderate readiness" in adjusted.reason

    def test_low_drops_weight_and_a_set(self):
        adjusted = adjust_targets_for_readiness(_targets(), 50)
        assert adjusted.weight_kg == 90.0
        assert adjusted.target_rir == 4
        assert adjusted.sets == 3
        assert adjusted.rest_seconds == 180

    def test_low_keeps_at_least_two_sets(self):
        assert adjust_targets_for_readiness(_targets(sets=2), 50).sets == 2

    def test_very_low_becomes_technique_session(self):
        adjusted = adjust_targets_for_readiness(_targets(), 30)
        assert adjusted.weight_kg == 80.0
        assert adjusted.sets == 2
        assert adjusted.target_rir == 4
        assert adjusted.rest_seconds == 210
        assert adjusted.progression_type == "technique"

    def test_short_sleep_high_stress_same_day(self):
        # 0.35*27 + 0.25*20 + 0.20*60 + 0.20*50 = 36.45
        score = calculate_readiness_score(
            ReadinessInput(sleep_hours=4, stress_level=5, days_since_last_session=0)
        )
        assert score == 36
        adjusted = adjust_targets_for_readiness(_targets(), score)
        assert adjusted.weight_kg < 100.0
        assert adjusted.sets == 2
        assert adjusted.progression_type == "technique"

    def test_reduction_rounds_to_increment(self):
        # 10% of 47 = 4.7 -> 5.0 on a 2.5 kg step
        assert adjust_targets_for_readiness(_targets(weight_kg=47.0), 50).weight_kg == 42.0

    def test_non_positive_increment_falls_back(self):
        adjusted = adjust_targets_for_readiness(_targets(), 50, min_weight_increment=0)
        assert adjusted.weight_kg == 90.0

    def test_lower_readiness_never_raises_weight(self):
        weights = [adjust_targets_for_readiness(_targets(), s).weight_kg for s in (90, 70, 50, 30)]
        assert weights == sorted(weights, reverse=True)


# =============================================================================
# Fatigue accumulator
# =============================================================================


class TestMesocycleFatigue:

    def test_accumulation_minus_recovery(self):
        # 50 - 2*3 + 8
        assert update_mesocycle_fatigue(50, 8, 2) == 52

    def test_rpe_is_rounded_to_table(self):
        assert update_mesocycle_fatigue(0, 7.4, 0) == 6

    def test_rpe_below_table_uses_fallback(self):
        # 4 * 0.25 = 1.0
        assert update_mesocycle_fatigue(0, 4, 0) == 1

    def test_clamped_to_bounds(self):
        assert update_mesocycle_fatigue(99, 10, 0) == 100
        assert update_mesocycle_fatigue(2, 5, 10) == 0

    def test_negative_rest_days_raise(self):
        with pytest.raises(ValueError):
            update_mesocycle_fatigue(10, 8, -1)

    @pytest.mark.parametrize("rpe", [0, 0.5, 10.5, 15])
    def test_rpe_out_of_range_raises(self, rpe):
        with pytest.raises(ValueError, match="session_rpe"):
            update_mesocycle_fatigue(50, rpe, 0)

    def test_higher_rpe_adds_more_fatigue(self):
        # 30 - 3 + accumulation; RPE 4 is below the table
        after = [update_mesocycle_fatigue(30, rpe, 1) for rpe in range(4, 11)]
        assert after == [28, 29, 31, 33, 35, 37, 41]

    def test_low_rpe_never_outscores_higher_rpe(self):
        after = [update_mesocycle_fatigue(30, rpe, 1) for rpe in range(1, 11)]
        assert after == sorted(after)

    def test_more_rest_days_reduce_fatigue(self):
        after = [update_mesocycle_fatigue(60, 8, days) for days in range(5)]
        assert after == [68, 65, 62, 59, 56]

    def test_pure_rest_floors_at_zero(self):
        assert calculate_fatigue_after_rest(30, 4) == 18
        assert calculate_fatigue_after_rest(10, 5) == 0

    def test_record_session_counts_rest_days(self):
        state = FatigueState(fatigue=20.0, last_session_date="2026-03-01")
        after = record_session(state, 8, "2026-03-04")
        assert after.fatigue == 19.0
        assert after.last_session_date == "2026-03-04"

    def test_first_session_has_no_rest_credit(self):
        after = record_session(FatigueState(), 9, "2026-03-04")
        assert after.fatigue == 10.0

    def test_invalid_state(self):
        with pytest.raises(ValueError):
            FatigueState(fatigue=120)


class TestSummarizeSessions:

    def test_groups_by_date_and_averages_rpe(self):
        history = [
            ExerciseHistoryEntry("Barbell Bench Press", "2026-03-02", [HistorySet(100, 5, rpe=8)]),
            ExerciseHistoryEntry(
                "Barbell Row",
                "2026-03-02",
                [HistorySet(80, 8, rpe=9), HistorySet(80, 4, completed=False)],
            ),
            ExerciseHistoryEntry("Deadlift", "2026-03-04", [HistorySet(140, 5)]),
        ]
        summaries = summarize_sessions(history)
        assert len(summaries) == 2
        assert summaries[0].session_rpe == pytest.approx(8.5)
        assert summaries[0].completion_percent == pytest.approx(200 / 3)
        # No recorded RPE -> neutral default
        assert summaries[1].session_rpe == 7.0
        assert summaries[1].completion_percent == 100.0

    def test_session_id_splits_same_day(self):
        history = [
            ExerciseHistoryEntry("Deadlift", "2026-03-02", [HistorySet(140, 5)], session_id="am"),
            ExerciseHistoryEntry("Leg Press", "2026-03-02", [HistorySet(200, 10)], session_id="pm"),
        ]
        assert len(summarize_sessions(history)) == 2

    def test_empty_sessions_skipped(self):
        assert summarize_sessions([ExerciseHistoryEntry("Deadlift", "2026-03-02")]) == []


# =============================================================================
# Deload triggers
# =============================================================================


class TestDeload:

    def test_scheduled_week(self):
        decision = should_trigger_deload(10, 5, 5, [])
        assert decision.should_deload
        assert decision.urgency == "medium"
        assert "Scheduled" in decision.reason

    def test_high_fatigue(self):
        decision = should_trigger_deload(80, 2, 5, [])
        assert decision.should_deload
        assert decision.urgency == "high"
        assert decision.reason == "High accumulated fatigue (80/100)"

    def test_missed_targets(self):
        sessions = [
            SessionSummary(7, 100),
            SessionSummary(7, 70),
            SessionSummary(7, 60),
        ]
        decision = should_trigger_deload(30, 2, 5, sessions)
        assert decision.should_deload
        assert decision.urgency == "high"
        assert "missing" in decision.reason

    def test_one_missed_session_is_fine(self):
        sessions = [SessionSummary(7, 60), SessionSummary(7, 100)]
        assert not should_trigger_deload(30, 2, 5, sessions).should_deload

    def test_rpe_creep(self):
        decision = should_trigger_deload(30, 2, 5, _sessions(6, 6, 6, 8, 8, 8))
        assert decision.should_deload
        assert decision.urgency == "medium"
        assert "RPE" in decision.reason

    def test_small_rpe_rise_is_not_creep(self):
        assert not should_trigger_deload(30, 2, 5, _sessions(6, 6, 6, 7, 7, 7)).should_deload

    def test_creep_needs_enough_sessions(self):
        assert not should_trigger_deload(30, 2, 5, _sessions(6, 6, 8, 9, 9)).should_deload

    def test_first_trigger_wins(self):
        # Scheduled week beats high fatigue
        decision = should_trigger_deload(90, 5, 5, [])
        assert decision.urgency == "medium"

    def test_nothing_fires(self):
        decision = should_trigger_deload(30, 2, 5, _sessions(7, 7))
        assert not decision.should_deload
        assert decision.reason == ""
        assert decision.urgency == "low"

    def test_custom_policy(self):
        policy = DeloadPolicy(fatigue_threshold=60)
        assert should_trigger_deload(65, 2, 5, [], policy=policy).should_deload
        assert not should_trigger_deload(65, 2, 5, []).should_deload

    def test_policy_validation(self):
        with pytest.raises(ValueError):
            DeloadPolicy(rpe_creep_window=4, rpe_creep_min_sessions=6)


# =============================================================================
# Forecast
# =============================================================================


class TestForecast:

    def test_no_sessions_is_recovery(self):
        forecast = forecast_weekly_fatigue(30, 0)
        assert forecast.projected_fatigue == 9
        assert forecast.band == "recover"

    def test_light_week_can_push(self):
        # 8, then 8-6+8=10, then 10-6+8=12
        forecast = forecast_weekly_fatigue(0, 3, avg_rpe=8)
        assert forecast.projected_fatigue == 12
        assert forecast.band == "push"

    def test_heavy_week_caps_and_deloads(self):
        forecast = forecast_weekly_fatigue(60, 6, avg_rpe=10)
        assert forecast.projected_fatigue == 100
        assert forecast.band == "deload"

    def test_default_rpe_from_policy(self):
        assert forecast_weekly_fatigue(0, 1).projected_fatigue == 8
        policy = ForecastPolicy(default_rpe=10)
        assert forecast_weekly_fatigue(0, 1, policy=policy).projected_fatigue == 14

    def test_bands_must_ascend(self):
        with pytest.raises(ValueError):
            ForecastPolicy(push_below=80, maintain_below=70)

    @pytest.mark.parametrize("rpe", [0.5, 11])
    def test_avg_rpe_out_of_range_raises(self, rpe):
        with pytest.raises(ValueError, match="avg_rpe"):
            forecast_weekly_fatigue(30, 3, avg_rpe=rpe)

    def test_default_rpe_must_be_valid(self):
        with pytest.raises(ValueError):
            ForecastPolicy(default_rpe=12)
