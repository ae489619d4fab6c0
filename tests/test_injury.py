"""
Tests for injury risk classification, filtering, alternatives and
automatic workout swaps.
"""

import pytest

from lift_advisor.core.exercises import ExerciseMetadata, all_exercises, get_exercise
from lift_advisor.core.injury import (
    CAUTION_NOTE,
    NO_ALTERNATIVE_REASON,
    auto_swap_for_injuries,
    calculate_match_score,
    filter_for_injury,
    get_injury_description,
    get_injury_label,
    get_injury_risk,
    get_safe_alternatives,
    needs_swap,
    normalize_injury_area,
    worst_risk,
)
from lift_advisor.core.injury_types import (
    get_injury_type,
    injury_context_for_type,
    injury_types_for_area,
)
from lift_advisor.core.models import INJURY_AREAS, InjuryContext


def _ex(exercise_id: str) -> ExerciseMetadata:
    return get_exercise(exercise_id)


def _injury(area: str, severity: int = 2) -> InjuryContext:
    return InjuryContext(area=area, severity=severity)


def _back_pool() -> list[ExerciseMetadata]:
    return [
        _ex("deadlift"),
        _ex("barbell_row"),
        _ex("lat_pulldown"),
        _ex("chest_supported_row"),
        _ex("machine_row"),
    ]


# =============================================================================
# Classification
# =============================================================================


class TestGetInjuryRisk:

    @pytest.mark.parametrize(
        "exercise_id,area,expected",
        [
            ("deadlift", "lower_back", "avoid"),
            ("t_bar_row", "lower_back", "avoid"),
            ("lat_pulldown", "lower_back", "safe"),
            ("leg_press", "lower_back", "safe"),
            ("overhead_press", "shoulder", "avoid"),
            ("lateral_raise", "shoulder", "avoid"),
            ("barbell_bench_press", "shoulder", "caution"),
            ("face_pull", "shoulder", "safe"),
            ("barbell_back_squat", "knee", "avoid"),
            ("walking_lunge", "knee", "avoid"),
            ("bulgarian_split_squat", "knee", "avoid"),
            ("leg_press", "knee", "caution"),
            ("romanian_deadlift", "knee", "safe"),
            ("skull_crusher", "elbow", "avoid"),
            ("overhead_tricep_extension", "elbow", "caution"),
            ("tricep_pushdown", "elbow", "safe"),
            ("dumbbell_curl", "elbow", "caution"),
            ("push_up", "wrist", "avoid"),
            ("cable_fly", "chest", "avoid"),
            ("standing_calf_raise", "ankle", "avoid"),
            ("barbell_shrug", "neck", "avoid"),
        ],
    )
    def test_catalog_classification(self, exercise_id, area, expected):
        assert get_injury_risk(_ex(exercise_id), area) == expected

    @pytest.mark.parametrize("generic", ["shoulder", "knee", "hip", "elbow", "wrist", "ankle"])
    def test_laterality_does_not_change_risk(self, generic):
        for ex in all_exercises():
            risk = get_injury_risk(ex, generic)
            assert get_injury_risk(ex, f"{generic}_left") == risk
            assert get_injury_risk(ex, f"{generic}_right") == risk

    def test_hyphens_read_as_spaces(self):
        custom = ExerciseMetadata(
            exercise_id="deficit_push_up",
            name="Deficit Push-Up",
            primary_muscle="chest",
        )
        assert get_injury_risk(custom, "wrist") == "avoid"

    def test_inference_for_uncatalogued_exercise(self):
        sled = ExerciseMetadata(
            exercise_id="safety_bar_squat",
            name="Safety Bar Squat",
            primary_muscle="quads",
            movement_pattern="squat",
            equipment=("barbell",),
        )
        assert get_injury_risk(sled, "knee") == "avoid"
        assert get_injury_risk(sled, "elbow") == "safe"

    def test_every_exercise_gets_a_valid_risk(self):
        for ex in all_exercises():
            for area in INJURY_AREAS:
                assert get_injury_risk(ex, area) in ("safe", "caution", "avoid")

    def test_worst_risk(self):
        bench = _ex("barbell_bench_press")
        assert worst_risk(bench, []) == "safe"
        assert worst_risk(bench, [_injury("knee"), _injury("shoulder")]) == "caution"
        assert worst_risk(bench, [_injury("shoulder"), _injury("chest")]) == "avoid"


class TestFilterForInjury:

    def test_avoid_is_always_dropped(self):
        kept = filter_for_injury(_back_pool(), [_injury("lower_back", 1)])
        ids = [ex.exercise_id for ex in kept]
        assert "deadlift" not in ids
        assert "barbell_row" not in ids
        assert "lat_pulldown" in ids

    def test_caution_dropped_only_when_severe(self):
        quads = [ex for ex in all_exercises() if ex.primary_muscle == "quads"]
        moderate = [ex.exercise_id for ex in filter_for_injury(quads, [_injury("knee_left", 2)])]
        severe = [ex.exercise_id for ex in filter_for_injury(quads, [_injury("knee_left", 3)])]
        assert "leg_press" in moderate
        assert "leg_press" not in severe

    def test_no_injuries_keeps_everything(self):
        pool = all_exercises()
        assert filter_for_injury(pool, []) == pool

    def test_kept_exercises_are_never_avoid(self):
        injuries = [_injury("shoulder_right", 2), _injury("knee", 3)]
        for ex in filter_for_injury(all_exercises(), injuries):
            for injury in injuries:
                risk = get_injury_risk(ex, injury.area)
                assert risk != "avoid"
                assert not (risk == "caution" and injury.severity == 3)


# =============================================================================
# Alternatives
# =============================================================================


class TestAlternatives:

    def test_match_score(self):
        assert calculate_match_score(_ex("deadlift"), _ex("lat_pulldown")) == 55
        assert calculate_match_score(_ex("barbell_row"), _ex("machine_row")) == 93

    def test_match_score_capped(self):
        row = _ex("barbell_row")
        assert calculate_match_score(row, row) <= 100

    def test_same_muscle_only_and_source_excluded(self):
        alts = get_safe_alternatives(_ex("deadlift"), all_exercises(), [_injury("lower_back")])
        assert alts
        assert all(a.exercise.primary_muscle == "back" for a in alts)
        assert all(a.exercise.exercise_id != "deadlift" for a in alts)

    def test_safe_before_caution_then_by_score(self):
        alts = get_safe_alternatives(
            _ex("barbell_bench_press"), all_exercises(), [_injury("shoulder", 1)]
        )
        order = {"safe": 0, "caution": 1}
        keys = [(order[a.risk], -a.match_score) for a in alts]
        assert keys == sorted(keys)

    def test_caution_candidates_carry_a_note(self):
        alts = get_safe_alternatives(_ex("barbell_back_squat"), all_exercises(), [_injury("knee_left")])
        assert [a.exercise.exercise_id for a in alts] == ["leg_press"]
        assert alts[0].risk == "caution"
        assert alts[0].safety_note == CAUTION_NOTE

    def test_severe_injury_drops_caution(self):
        alts = get_safe_alternatives(
            _ex("barbell_back_squat"), all_exercises(), [_injury("knee_left", 3)]
        )
        assert alts == []

    def test_reason_explains_the_swap(self):
        alts = get_safe_alternatives(_ex("deadlift"), _back_pool(), [_injury("lower_back")])
        assert alts[0].exercise.exercise_id == "lat_pulldown"
        assert alts[0].reason == "targets back; decompresses the spine"


class TestNeedsSwap:

    def test_avoid_needs_swap(self):
        assert needs_swap(_ex("deadlift"), [_injury("lower_back", 1)])

    def test_caution_depends_on_severity(self):
        assert not needs_swap(_ex("leg_press"), [_injury("knee", 1)])
        assert needs_swap(_ex("leg_press"), [_injury("knee", 2)])

    def test_no_injuries(self):
        assert not needs_swap(_ex("deadlift"), [])


class TestAutoSwap:

    def test_lower_back_workout(self):
        workout = [("1", _ex("deadlift")), ("2", _ex("barbell_row"))]
        results = auto_swap_for_injuries(workout, _back_pool(), [_injury("lower_back")])

        assert [r.original_id for r in results] == ["1", "2"]
        assert all(r.action == "swapped" for r in results)
        assert results[0].replacement.exercise_id == "lat_pulldown"
        assert results[1].replacement.exercise_id == "machine_row"

    def test_replacements_are_unique_and_new(self):
        workout = [
            ("a", _ex("deadlift")),
            ("b", _ex("barbell_row")),
            ("c", _ex("t_bar_row")),
            ("d", _ex("lat_pulldown")),
        ]
        results = auto_swap_for_injuries(workout, all_exercises(), [_injury("lower_back")])
        replaced = [r.replacement.exercise_id for r in results if r.replacement is not None]
        assert len(replaced) == len(set(replaced))
        assert not set(replaced) & {ex.exercise_id for _, ex in workout}

    def test_no_alternative_is_removed(self):
        pool = [_ex("deadlift"), _ex("barbell_row")]
        workout = [("1", _ex("deadlift")), ("2", _ex("barbell_row"))]
        results = auto_swap_for_injuries(workout, pool, [_injury("lower_back")])
        assert [r.action for r in results] == ["removed", "removed"]
        assert all(r.replacement is None for r in results)
        assert all(r.reason == NO_ALTERNATIVE_REASON for r in results)

    def test_severe_injury_without_pool_removes(self):
        pool = [_ex("deadlift"), _ex("barbell_row")]
        [result] = auto_swap_for_injuries(
            [("1", _ex("deadlift"))], pool, [_injury("lower_back", severity=3)]
        )
        assert result.original_name == "Deadlift"
        assert result.action == "removed"
        assert result.replacement is None

    def test_workout_exercises_never_crowd_out_a_free_alternative(self):
        rows = [
            ExerciseMetadata(
                exercise_id=f"machine_row_{i}",
                name=f"Machine Row {i}",
                primary_muscle="back",
                movement_pattern="horizontal_pull",
                equipment=("machine",),
            )
            for i in range(11)
        ]
        workout = [("dl", _ex("deadlift"))] + [(r.exercise_id, r) for r in rows[:10]]
        results = auto_swap_for_injuries(workout, [_ex("deadlift")] + rows, [_injury("lower_back")])

        assert len(results) == 1
        assert results[0].action == "swapped"
        assert results[0].replacement.exercise_id == "machine_row_10"

    def test_repaired_workout_needs_nothing(self):
        injuries = [_injury("lower_back"), _injury("knee_right")]
        workout = [
            ("1", _ex("deadlift")),
            ("2", _ex("barbell_back_squat")),
            ("3", _ex("barbell_row")),
            ("4", _ex("lying_leg_curl")),
        ]
        results = auto_swap_for_injuries(workout, all_exercises(), injuries)
        by_slot = {r.original_id: r for r in results}

        repaired = []
        for slot, ex in workout:
            if slot not in by_slot:
                repaired.append((slot, ex))
            elif by_slot[slot].replacement is not None:
                repaired.append((slot, by_slot[slot].replacement))

        assert auto_swap_for_injuries(repaired, all_exercises(), injuries) == []

    def test_safe_workout_has_no_results(self):
        workout = [("1", _ex("lat_pulldown")), ("2", _ex("leg_press"))]
        assert auto_swap_for_injuries(workout, all_exercises(), [_injury("lower_back")]) == []


# =============================================================================
# Injury types and labels
# =============================================================================


class TestInjuryTypes:

    def test_lateral_type_takes_a_side(self):
        ctx = injury_context_for_type("meniscus_tear", "left")
        assert ctx == InjuryContext(area="knee_left", severity=2)

    def test_side_ignored_for_spine(self):
        ctx = injury_context_for_type("herniated_disc", "left")
        assert ctx.area == "lower_back"
        assert ctx.severity == 3

    def test_explicit_severity_wins(self):
        assert injury_context_for_type("ankle_sprain", severity=1).severity == 1

    @pytest.mark.parametrize(
        "type_id,side,severity",
        [("broken_toe", None, None), ("meniscus_tear", "up", None), ("meniscus_tear", None, 4)],
    )
    def test_invalid_input_raises(self, type_id, side, severity):
        with pytest.raises(ValueError):
            injury_context_for_type(type_id, side, severity)

    def test_types_for_lateral_area(self):
        ids = {t.type_id for t in injury_types_for_area("knee_right")}
        assert ids == {"knee_injury", "patellofemoral", "meniscus_tear", "acl_injury"}

    def test_every_type_maps_to_a_known_area(self):
        assert get_injury_type("sciatica").area in INJURY_AREAS


class TestInjuryContext:

    @pytest.mark.parametrize("area,severity", [("toe", 2), ("knee", 0), ("knee", True)])
    def test_invalid(self, area, severity):
        with pytest.raises(ValueError):
            InjuryContext(area=area, severity=severity)


class TestLabels:

    def test_normalize(self):
        assert normalize_injury_area("shoulder_left") == "shoulder"
        assert normalize_injury_area("lower_back") == "lower_back"

    def test_label_and_description(self):
        assert get_injury_label("knee_left") == "Left Knee"
        assert get_injury_description("knee_left") == get_injury_description("knee")
