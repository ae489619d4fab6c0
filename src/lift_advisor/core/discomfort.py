"""
Discomfort tracking.

Discomfort is logged per set (twinge / discomfort / pain on a body part).
Repeated reports on the same body part form a pattern; a pattern that
looks like an injury produces a prompt to record it as one so the injury
classifier can start steering exercise selection.
"""

from collections import defaultdict
from collections.abc import Sequence
from typing import Final

from .config import (
    DISCOMFORT_INJURY_MIN,
    DISCOMFORT_PATTERN_MIN,
    DISCOMFORT_SEVERITY_SCORES,
    DISCOMFORT_WINDOW_DAYS,
)
from .injury_types import InjuryType, get_injury_type
from .metrics import days_between, today_str
from .models import (
    DiscomfortEntry,
    DiscomfortLogResult,
    DiscomfortPattern,
    DiscomfortSeverity,
    InjuryCreationPrompt,
    PainWarning,
)

# Most common condition first
BODY_PART_INJURY_TYPES: Final[dict[str, tuple[str, ...]]] = {
    "lower_back": ("lower_back_strain", "herniated_disc", "sciatica"),
    "upper_back": ("upper_back_strain",),
    "neck": ("neck_strain", "cervical_disc"),
    "left_shoulder": ("shoulder_impingement", "rotator_cuff_strain", "shoulder_instability"),
    "right_shoulder": ("shoulder_impingement", "rotator_cuff_strain", "shoulder_instability"),
    "shoulders": ("shoulder_impingement", "rotator_cuff_strain", "shoulder_instability"),
    "left_elbow": ("elbow_tendinitis",),
    "right_elbow": ("elbow_tendinitis",),
    "elbows": ("elbow_tendinitis",),
    "left_wrist": ("wrist_strain", "carpal_tunnel"),
    "right_wrist": ("wrist_strain", "carpal_tunnel"),
    "wrists": ("wrist_strain", "carpal_tunnel"),
    "left_knee": ("knee_injury", "patellofemoral", "meniscus_tear"),
    "right_knee": ("knee_injury", "patellofemoral", "meniscus_tear"),
    "knees": ("knee_injury", "patellofemoral", "meniscus_tear"),
    "left_hip": ("hip_flexor_strain", "hip_impingement", "hip_bursitis"),
    "right_hip": ("hip_flexor_strain", "hip_impingement", "hip_bursitis"),
    "hips": ("hip_flexor_strain", "hip_impingement", "hip_bursitis"),
    "other": (),
}

BODY_PART_NAMES: Final[dict[str, str]] = {
    "lower_back": "Lower Back",
    "upper_back": "Upper Back",
    "neck": "Neck",
    "left_shoulder": "Left Shoulder",
    "right_shoulder": "Right Shoulder",
    "shoulders": "Shoulders",
    "left_elbow": "Left Elbow",
    "right_elbow": "Right Elbow",
    "elbows": "Elbows",
    "left_wrist": "Left Wrist",
    "right_wrist": "Right Wrist",
    "wrists": "Wrists",
    "left_knee": "Left Knee",
    "right_knee": "Right Knee",
    "knees": "Knees",
    "left_hip": "Left Hip",
    "right_hip": "Right Hip",
    "hips": "Hips",
    "other": "Other",
}

SEVERITY_LABELS: Final[dict[str, str]] = {
    "twinge": "Twinge (Mild)",
    "discomfort": "Discomfort (Moderate)",
    "pain": "Pain (Stop)",
}

PAIN_WARNING_ACTIONS: Final[tuple[str, ...]] = (
    "skip_remaining",
    "continue_carefully",
    "end_workout",
)


def severity_score(severity: DiscomfortSeverity) -> int:
    return DISCOMFORT_SEVERITY_SCORES[severity]


def severity_from_score(score: float) -> DiscomfortSeverity:
    """Nearest severity for an averaged score (1.5 and 2.5 round up)."""
    if score < 1.5:
        return "twinge"
    if score < 2.5:
        return "discomfort"
    return "pain"


def suggested_injury_types(body_part: str) -> list[InjuryType]:
    """Injury types that commonly present as discomfort on *body_part*."""
    found = []
    for type_id in BODY_PART_INJURY_TYPES.get(body_part, ()):
        injury_type = get_injury_type(type_id)
        if injury_type is not None:
            found.append(injury_type)
    return found


def _in_window(entry: DiscomfortEntry, today: str, window_days: int) -> bool:
    return days_between(entry.logged_at, today) <= window_days


def detect_discomfort_patterns(
    entries: Sequence[DiscomfortEntry],
    window_days: int = DISCOMFORT_WINDOW_DAYS,
    today: str | None = None,
) -> list[DiscomfortPattern]:
    """
    Group recent discomfort by body part.

    A body part needs DISCOMFORT_PATTERN_MIN reports inside the window to
    form a pattern.  The pattern suggests an injury at
    DISCOMFORT_INJURY_MIN reports or when any report was "pain".

    Args:
        entries: Discomfort log, any order
        window_days: Trailing window ending at *today*
        today: ISO date; defaults to the current date

    Returns:
        Patterns ordered by average severity, then occurrences (both desc)
    """
    today = today or today_str()

    grouped: dict[str, list[DiscomfortEntry]] = defaultdict(list)
    for entry in entries:
        if _in_window(entry, today, window_days):
            grouped[entry.body_part].append(entry)

    patterns: list[DiscomfortPattern] = []
    for body_part, part_entries in grouped.items():
        if len(part_entries) < DISCOMFORT_PATTERN_MIN:
            continue

        dates = sorted(e.logged_at for e in part_entries)
        days_span = days_between(dates[0], dates[-1]) + 1
        avg_score = sum(severity_score(e.severity) for e in part_entries) / len(part_entries)
        exercises = list(dict.fromkeys(e.exercise_name for e in part_entries if e.exercise_name))
        has_pain = any(e.severity == "pain" for e in part_entries)
        suggestions = BODY_PART_INJURY_TYPES.get(body_part, ())

        patterns.append(DiscomfortPattern(
            body_part=body_part,
            occurrences=len(part_entries),
            days_span=days_span,
            average_severity=severity_from_score(avg_score),
            exercises=exercises,
            suggests_injury=len(part_entries) >= DISCOMFORT_INJURY_MIN or has_pain,
            suggested_injury_type=suggestions[0] if suggestions else None,
        ))

    patterns.sort(key=lambda p: (-severity_score(p.average_severity), -p.occurrences))
    return patterns


def pain_warning() -> PainWarning:
    return PainWarning(
        title="Pain Logged",
        message="Consider stopping this exercise. Continuing through pain can worsen injury.",
        actions=list(PAIN_WARNING_ACTIONS),
    )


def process_discomfort_log(
    entry: DiscomfortEntry,
    recent_history: Sequence[DiscomfortEntry],
    today: str | None = None,
) -> DiscomfortLogResult:
    """
    React to a newly logged discomfort.

    "pain" always returns a PainWarning.  When the new entry is at least the
    third report for its body part inside the window, and the resulting
    pattern suggests an injury, an InjuryCreationPrompt is returned too.

    Args:
        entry: The entry just logged (not yet part of recent_history)
        recent_history: Previously logged entries
        today: ISO date; defaults to entry.logged_at
    """
    today = today or entry.logged_at
    result = DiscomfortLogResult()

    if entry.severity == "pain":
        result.pain_warning = pain_warning()

    prior = [
        e for e in recent_history
        if e.body_part == entry.body_part and _in_window(e, today, DISCOMFORT_WINDOW_DAYS)
    ]
    if len(prior) + 1 < DISCOMFORT_INJURY_MIN:
        return result

    patterns = detect_discomfort_patterns([*prior, entry], DISCOMFORT_WINDOW_DAYS, today)
    pattern = next(
        (p for p in patterns if p.body_part == entry.body_part and p.suggests_injury),
        None,
    )
    if pattern is None or pattern.suggested_injury_type is None:
        return result

    result.injury_prompt = InjuryCreationPrompt(
        body_part=entry.body_part,
        suggested_injury_type=pattern.suggested_injury_type,
        message=(
            f"You've logged {entry.body_part.replace('_', ' ')} discomfort "
            f"{pattern.occurrences} times recently. Consider tracking this as an "
            "injury for better exercise recommendations."
        ),
        occurrence_count=pattern.occurrences,
        days_span=pattern.days_span,
    )
    return result


def get_body_part_display_name(body_part: str) -> str:
    return BODY_PART_NAMES.get(body_part, body_part)


def get_severity_label(severity: str) -> str:
    return SEVERITY_LABELS.get(severity, severity)


def injury_area_for_body_part(body_part: str) -> str | None:
    """
    InjuryContext area for a discomfort body part.

    "left_knee" -> "knee_left", "knees" -> "knee"; None for "other".
    """
    if body_part == "other":
        return None
    for side in ("left", "right"):
        prefix = f"{side}_"
        if body_part.startswith(prefix):
            return f"{body_part[len(prefix):]}_{side}"
    if body_part.endswith("s"):
        return body_part[:-1]
    return body_part
