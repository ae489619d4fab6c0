"""
Tests for discomfort logging, pattern detection and injury prompts.
"""

import pytest

from lift_advisor.core.discomfort import (
    detect_discomfort_patterns,
    get_body_part_display_name,
    get_severity_label,
    injury_area_for_body_part,
    process_discomfort_log,
    severity_from_score,
    suggested_injury_types,
)
from lift_advisor.core.models import DISCOMFORT_BODY_PARTS, INJURY_AREAS, DiscomfortEntry

TODAY = "2026-03-10"


def _entry(
    body_part: str = "lower_back",
    severity: str = "twinge",
    logged_at: str = TODAY,
    exercise: str = "",
) -> DiscomfortEntry:
    return DiscomfortEntry(
        body_part=body_part,
        severity=severity,
        logged_at=logged_at,
        exercise_name=exercise,
    )


class TestDiscomfortEntry:

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"body_part": "toe"},
            {"severity": "agony"},
            {"logged_at": "10/03/2026"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            _entry(**kwargs)


class TestSeverity:

    @pytest.mark.parametrize(
        "score,expected",
        [(1.0, "twinge"), (1.49, "twinge"), (1.5, "discomfort"), (2.0, "discomfort"), (2.5, "pain"), (3.0, "pain")],
    )
    def test_from_score(self, score, expected):
        assert severity_from_score(score) == expected

    def test_labels(self):
        assert get_severity_label("pain") == "Pain (Stop)"
        assert get_body_part_display_name("left_knee") == "Left Knee"
        assert get_body_part_display_name("mystery") == "mystery"


class TestDetectPatterns:

    def test_single_report_is_not_a_pattern(self):
        assert detect_discomfort_patterns([_entry()], today=TODAY) == []

    def test_two_reports_form_a_pattern(self):
        entries = [
            _entry(logged_at="2026-03-03", exercise="Deadlift"),
            _entry(logged_at="2026-03-09", exercise="Barbell Row"),
        ]
        [pattern] = detect_discomfort_patterns(entries, today=TODAY)
        assert pattern.body_part == "lower_back"
        assert pattern.occurrences == 2
        assert pattern.days_span == 7
        assert pattern.exercises == ["Deadlift", "Barbell Row"]
        assert not pattern.suggests_injury
        assert pattern.suggested_injury_type == "lower_back_strain"

    def test_three_reports_suggest_injury(self):
        entries = [_entry(logged_at=d) for d in ("2026-03-02", "2026-03-05", "2026-03-08")]
        [pattern] = detect_discomfort_patterns(entries, today=TODAY)
        assert pattern.suggests_injury

    def test_pain_suggests_injury_early(self):
        entries = [_entry(severity="pain"), _entry(severity="twinge")]
        [pattern] = detect_discomfort_patterns(entries, today=TODAY)
        assert pattern.suggests_injury
        assert pattern.average_severity == "discomfort"

    def test_old_reports_fall_out_of_window(self):
        entries = [_entry(logged_at="2026-02-01"), _entry(logged_at="2026-02-03"), _entry()]
        assert detect_discomfort_patterns(entries, today=TODAY) == []
        assert len(detect_discomfort_patterns(entries, window_days=60, today=TODAY)) == 1

    def test_sorted_by_severity_then_count(self):
        entries = [
            _entry("left_knee", "twinge"),
            _entry("left_knee", "twinge"),
            _entry("left_knee", "twinge"),
            _entry("neck", "pain"),
            _entry("neck", "pain"),
            _entry("left_elbow", "twinge"),
            _entry("left_elbow", "twinge"),
        ]
        patterns = detect_discomfort_patterns(entries, today=TODAY)
        assert [p.body_part for p in patterns] == ["neck", "left_knee", "left_elbow"]

    def test_other_has_no_suggestion(self):
        entries = [_entry("other"), _entry("other"), _entry("other")]
        [pattern] = detect_discomfort_patterns(entries, today=TODAY)
        assert pattern.suggests_injury
        assert pattern.suggested_injury_type is None


class TestProcessDiscomfortLog:

    def test_twinge_alone_does_nothing(self):
        result = process_discomfort_log(_entry(), [])
        assert result.pain_warning is None
        assert result.injury_prompt is None

    def test_pain_always_warns(self):
        result = process_discomfort_log(_entry(severity="pain"), [])
        assert result.pain_warning is not None
        assert result.pain_warning.actions == ["skip_remaining", "continue_carefully", "end_workout"]
        assert result.injury_prompt is None

    def test_third_report_prompts(self):
        history = [
            _entry("right_knee", logged_at="2026-03-01"),
            _entry("right_knee", logged_at="2026-03-05"),
        ]
        result = process_discomfort_log(_entry("right_knee"), history)
        prompt = result.injury_prompt
        assert prompt is not None
        assert prompt.body_part == "right_knee"
        assert prompt.suggested_injury_type == "knee_injury"
        assert prompt.occurrence_count == 3
        assert prompt.days_span == 10
        assert "3 times" in prompt.message

    def test_second_report_does_not_prompt(self):
        history = [_entry("right_knee", logged_at="2026-03-05")]
        assert process_discomfort_log(_entry("right_knee"), history).injury_prompt is None

    def test_other_body_parts_do_not_count(self):
        history = [_entry("neck"), _entry("neck")]
        assert process_discomfort_log(_entry("right_knee"), history).injury_prompt is None

    def test_reports_outside_window_do_not_count(self):
        history = [
            _entry("right_knee", logged_at="2026-01-01"),
            _entry("right_knee", logged_at="2026-01-02"),
        ]
        assert process_discomfort_log(_entry("right_knee"), history).injury_prompt is None

    def test_pain_on_third_report_gives_both(self):
        history = [_entry(logged_at="2026-03-08"), _entry(logged_at="2026-03-09")]
        result = process_discomfort_log(_entry(severity="pain"), history)
        assert result.pain_warning is not None
        assert result.injury_prompt is not None


class TestBodyPartMapping:

    @pytest.mark.parametrize(
        "body_part,area",
        [("left_knee", "knee_left"), ("knees", "knee"), ("lower_back", "lower_back"), ("other", None)],
    )
    def test_injury_area(self, body_part, area):
        assert injury_area_for_body_part(body_part) == area

    def test_every_mapped_area_is_valid(self):
        for body_part in DISCOMFORT_BODY_PARTS:
            area = injury_area_for_body_part(body_part)
            assert area is None or area in INJURY_AREAS

    def test_suggestions_resolve(self):
        types = suggested_injury_types("left_shoulder")
        assert [t.type_id for t in types][0] == "shoulder_impingement"
        assert suggested_injury_types("other") == []
