"""
Tests for regional body composition, population strength standards,
failure-safety tiers and small metric helpers.
"""

import pytest

from lift_advisor.core.metrics import (
    days_between,
    intensity_percent,
    is_recent,
    round_to_increment,
    round_to_plate,
    weight_increment_for,
)
from lift_advisor.core.models import BodyComposition, ProgressionTargets, RegionalData, RegionalSegment
from lift_advisor.core.regional import (
    analyze_regional_composition,
    asymmetry_percent,
    asymmetry_severity,
    get_asymmetry_adjustment,
    get_asymmetry_recommendations,
    region_for_exercise,
    regional_adjustment,
)
from lift_advisor.core.safety import (
    apply_rir_floor,
    get_failure_safety_tier,
    get_protect_warning,
    get_rir_floor,
    is_amrap_eligible,
)
from lift_advisor.core.standards import bodyweight_ratio_1rm, ffmi_multiplier, standards_1rm


def _scan(left_arm=4200, right_arm=4200, left_leg=11750, right_leg=11750, trunk=25000) -> RegionalData:
    return RegionalData(
        left_arm=RegionalSegment(left_arm),
        right_arm=RegionalSegment(right_arm),
        left_leg=RegionalSegment(left_leg),
        right_leg=RegionalSegment(right_leg),
        trunk=RegionalSegment(trunk),
    )


# =============================================================================
# Regional composition
# =============================================================================


class TestAsymmetry:

    def test_percent(self):
        # 300 / 3150 * 100
        assert asymmetry_percent(3000, 3300) == 9.5
        assert asymmetry_percent(3300, 3000) == -9.5
        assert asymmetry_percent(0, 0) == 0.0

    @pytest.mark.parametrize(
        "asym,expected",
        [(0.0, "none"), (2.9, "none"), (3.0, "minor"), (-4.9, "minor"), (5.0, "moderate"), (8.0, "significant")],
    )
    def test_severity(self, asym, expected):
        assert asymmetry_severity(asym) == expected


class TestAnalyzeRegional:

    def test_balanced_scan(self):
        analysis = analyze_regional_composition(_scan())
        assert [p.status for p in analysis.parts] == ["balanced", "balanced", "balanced"]
        assert analysis.part("Arms").percent_of_total == 14.8
        assert analysis.lagging_areas == []
        assert analysis.arm_asymmetry == 0.0
        assert get_asymmetry_recommendations(analysis) == []

    def test_lagging_arms(self):
        analysis = analyze_regional_composition(_scan(left_arm=3000, right_arm=3000))
        assert analysis.lagging_areas == ["Arms"]
        assert analysis.part("Arms").recommendation is not None

    def test_empty_scan(self):
        with pytest.raises(ValueError):
            analyze_regional_composition(_scan(0, 0, 0, 0, 0))

    def test_recommendation_names_weaker_side(self):
        analysis = analyze_regional_composition(_scan(left_arm=4000, right_arm=4400))
        [rec] = get_asymmetry_recommendations(analysis)
        assert rec.startswith("Significant arm asymmetry (9.5%)")
        assert "left" in rec


class TestRegionalAdjustment:

    def test_no_analysis(self):
        assert regional_adjustment("Barbell Curl", None) == 0.0

    def test_balanced_region_is_near_zero(self):
        analysis = analyze_regional_composition(_scan())
        assert abs(regional_adjustment("Barbell Curl", analysis)) < 0.01

    def test_clamped(self):
        analysis = analyze_regional_composition(_scan(left_arm=3000, right_arm=3000))
        assert regional_adjustment("Barbell Curl", analysis) == -0.15

    def test_unknown_region(self):
        analysis = analyze_regional_composition(_scan())
        assert regional_adjustment("Farmer Carry", analysis) == 0.0

    @pytest.mark.parametrize(
        "name,region",
        [
            ("Leg Extension", "Legs"),
            ("Lying Leg Curl", "Legs"),
            ("Back Extension", "Trunk"),
            ("Tricep Kickback", "Arms"),
            ("Barbell Curl", "Arms"),
            ("Barbell Row", "Trunk"),
        ],
    )
    def test_region_for_exercise(self, name, region):
        assert region_for_exercise(name) == region


class TestAsymmetryAdjustment:

    def _analysis(self):
        return analyze_regional_composition(_scan(left_arm=4000, right_arm=4400))

    def test_weaker_side_is_lighter(self):
        adj = get_asymmetry_adjustment("Dumbbell Curl", "left", self._analysis(), unilateral=True)
        assert adj.adjustment == pytest.approx(-0.0475, abs=1e-3)
        assert "left arm" in adj.note

    def test_stronger_side_unchanged(self):
        adj = get_asymmetry_adjustment("Dumbbell Curl", "right", self._analysis(), unilateral=True)
        assert adj.adjustment == 0.0

    def test_bilateral_unchanged(self):
        adj = get_asymmetry_adjustment("Barbell Curl", "left", self._analysis(), unilateral=False)
        assert adj.adjustment == 0.0

    def test_invalid_side(self):
        with pytest.raises(ValueError):
            get_asymmetry_adjustment("Dumbbell Curl", "middle", self._analysis(), unilateral=True)


# =============================================================================
# Standards
# =============================================================================


class TestStandards:

    def test_bench_intermediate(self):
        # FFMI 19.8 -> 0.95; 80 * 1.00 * 0.95
        body = BodyComposition(total_mass_kg=80, body_fat_pct=20, height_cm=180)
        assert body.ffmi == 19.8
        assert standards_1rm("Barbell Bench Press", body, "intermediate") == 76.0

    def test_dumbbell_has_no_standard(self):
        body = BodyComposition(total_mass_kg=80, body_fat_pct=20, height_cm=180)
        assert standards_1rm("Dumbbell Bench Press", body, "intermediate") is None

    @pytest.mark.parametrize("ffmi,mult", [(17.9, 0.85), (18.0, 0.95), (21.0, 1.00), (23.5, 1.10), (26.0, 1.20)])
    def test_ffmi_brackets(self, ffmi, mult):
        assert ffmi_multiplier(ffmi) == mult

    def test_bodyweight_ratio_fallbacks(self):
        assert bodyweight_ratio_1rm("Lateral Raise", 80) == 6.4
        assert bodyweight_ratio_1rm("Sissy Thing", 80, "quads") == 72.0
        assert bodyweight_ratio_1rm("Sissy Thing", 80) == 24.0


# =============================================================================
# Failure safety
# =============================================================================


class TestFailureSafety:

    @pytest.mark.parametrize(
        "name,tier",
        [
            ("Leg Press", "push_freely"),
            ("Smith Machine Squat", "push_freely"),
            ("Lateral Raise", "push_freely"),
            ("Barbell Back Squat", "protect"),
            ("Deadlift", "protect"),
            ("Romanian Deadlift", "push_cautiously"),
            ("Walking Lunge", "push_cautiously"),
        ],
    )
    def test_tiers(self, name, tier):
        assert get_failure_safety_tier(name) == tier

    def test_rir_floor(self):
        targets = ProgressionTargets(weight_kg=140, rep_range=(3, 5), target_rir=0, sets=3, rest_seconds=180)
        assert get_rir_floor("Deadlift") == 2
        assert apply_rir_floor(targets, "Deadlift").target_rir == 2
        assert apply_rir_floor(targets, "Leg Press") is targets

    def test_amrap(self):
        assert not is_amrap_eligible("Deadlift", is_mesocycle_end=True)
        assert is_amrap_eligible("Leg Press")
        assert not is_amrap_eligible("Leg Press", has_recent_amrap=True)
        assert not is_amrap_eligible("Walking Lunge")
        assert is_amrap_eligible("Walking Lunge", is_mesocycle_end=True)

    def test_protect_warning(self):
        assert "failure" in get_protect_warning("Deadlift", 0)
        assert get_protect_warning("Deadlift", 1) is not None
        assert get_protect_warning("Deadlift", 2) is None
        assert get_protect_warning("Leg Press", 0) is None


# =============================================================================
# Metric helpers
# =============================================================================


class TestMetricHelpers:

    @pytest.mark.parametrize("weight,expected", [(13.4, 13.0), (19.6, 20.0), (101.2, 100.0), (0, 0.0)])
    def test_round_to_plate(self, weight, expected):
        assert round_to_plate(weight) == expected

    def test_round_to_increment(self):
        assert round_to_increment(47.3, 2.0) == 48.0
        with pytest.raises(ValueError):
            round_to_increment(47.3, 0)

    @pytest.mark.parametrize(
        "name,increment",
        [("Lateral Raise", 1.0), ("Dumbbell Bench Press", 2.0), ("Deadlift", 2.5)],
    )
    def test_increment(self, name, increment):
        assert weight_increment_for(name) == increment

    def test_dates(self):
        assert days_between("2026-03-01", "2026-03-10") == 9
        assert is_recent("2026-02-10", "2026-03-10", 28)
        assert not is_recent("2026-02-09", "2026-03-10", 28)
        assert not is_recent(None, "2026-03-10", 28)

    def test_intensity(self):
        assert intensity_percent(80, 100) == 80
        assert intensity_percent(80, 0) == 0
