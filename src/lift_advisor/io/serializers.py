"""
JSON serialization for lift-advisor data models.

Handles conversion between dataclasses and JSON-compatible dicts, and the
compact set notation typed on the command line.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    DISCOMFORT_BODY_PARTS,
    DISCOMFORT_SEVERITIES,
    EXPERIENCE_LEVELS,
    INJURY_AREAS,
    AthleteProfile,
    DiscomfortEntry,
    EstimatedMax,
    ExerciseHistoryEntry,
    FatigueState,
    HistorySet,
    InjuryContext,
    RegionalData,
    RegionalSegment,
    VarietyPreferences,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def _build(factory, *args, **kwargs):
    """Construct a model, reporting its ValueError as a ValidationError."""
    try:
        return factory(*args, **kwargs)
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


# =============================================================================
# HISTORY
# =============================================================================


def history_set_to_dict(s: HistorySet) -> dict[str, Any]:
    d: dict[str, Any] = {"weight_kg": s.weight_kg, "reps": s.reps}
    if s.rpe is not None:
        d["rpe"] = s.rpe
    if not s.completed:
        d["completed"] = False
    return d


def dict_to_history_set(data: dict[str, Any]) -> HistorySet:
    """
    Convert dict to HistorySet.

    Raises:
        ValidationError: If data is invalid
    """
    validate_non_negative(data.get("weight_kg", 0), "weight_kg")
    validate_non_negative(data.get("reps", 0), "reps")
    rpe = data.get("rpe")
    return _build(
        HistorySet,
        weight_kg=float(data["weight_kg"]),
        reps=int(data["reps"]),
        rpe=float(rpe) if rpe is not None else None,
        completed=bool(data.get("completed", True)),
    )


def history_entry_to_dict(entry: ExerciseHistoryEntry) -> dict[str, Any]:
    d: dict[str, Any] = {
        "date": entry.date,
        "exercise": entry.exercise_name,
        "sets": [history_set_to_dict(s) for s in entry.sets],
    }
    if entry.session_id:
        d["session_id"] = entry.session_id
    return d


def dict_to_history_entry(data: dict[str, Any]) -> ExerciseHistoryEntry:
    """
    Convert dict to ExerciseHistoryEntry.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(data.get("date", ""))
    name = data.get("exercise")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("History entry is missing 'exercise'")
    return _build(
        ExerciseHistoryEntry,
        exercise_name=name,
        date=data["date"],
        sets=[dict_to_history_set(s) for s in data.get("sets", [])],
        session_id=data.get("session_id"),
    )


def entry_to_json_line(entry: ExerciseHistoryEntry) -> str:
    """Serialize a history entry to a single JSON line (no trailing newline)."""
    return json.dumps(history_entry_to_dict(entry), separators=(",", ":"))


def json_line_to_entry(line: str) -> ExerciseHistoryEntry:
    """
    Deserialize a JSON line to an ExerciseHistoryEntry.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_history_entry(data)


# =============================================================================
# ESTIMATES, INJURIES, FATIGUE, VARIETY
# =============================================================================


def estimated_max_to_dict(m: EstimatedMax) -> dict[str, Any]:
    return {
        "exercise": m.exercise,
        "estimated_1rm": m.estimated_1rm,
        "confidence": m.confidence,
        "source": m.source,
        "last_updated": m.last_updated,
    }


def dict_to_estimated_max(data: dict[str, Any]) -> EstimatedMax:
    if data.get("last_updated") is not None:
        validate_date(data["last_updated"])
    return _build(
        EstimatedMax,
        exercise=data["exercise"],
        estimated_1rm=float(data["estimated_1rm"]),
        confidence=data.get("confidence", "high"),
        source=data.get("source", "calibration"),
        last_updated=data.get("last_updated"),
    )


def injury_to_dict(injury: InjuryContext) -> dict[str, Any]:
    return {"area": injury.area, "severity": injury.severity}


def dict_to_injury(data: dict[str, Any]) -> InjuryContext:
    validate_choice(data.get("area"), INJURY_AREAS, "injury area")
    return _build(InjuryContext, area=data["area"], severity=int(data.get("severity", 2)))


def fatigue_state_to_dict(state: FatigueState) -> dict[str, Any]:
    return {
        "fatigue": state.fatigue,
        "last_session_date": state.last_session_date,
        "week_in_block": state.week_in_block,
        "total_weeks": state.total_weeks,
        "deload_week": state.deload_week,
    }


def dict_to_fatigue_state(data: dict[str, Any]) -> FatigueState:
    if data.get("last_session_date") is not None:
        validate_date(data["last_session_date"])
    return _build(
        FatigueState,
        fatigue=float(data.get("fatigue", 0.0)),
        last_session_date=data.get("last_session_date"),
        week_in_block=int(data.get("week_in_block", 1)),
        total_weeks=int(data.get("total_weeks", 5)),
        deload_week=int(data.get("deload_week", 5)),
    )


def variety_preferences_to_dict(prefs: VarietyPreferences) -> dict[str, Any]:
    return {
        "level": prefs.level,
        "rotation_frequency": prefs.rotation_frequency,
        "min_pool_size": prefs.min_pool_size,
        "prioritize_top_tier": prefs.prioritize_top_tier,
    }


def dict_to_variety_preferences(data: dict[str, Any]) -> VarietyPreferences:
    return _build(
        VarietyPreferences,
        level=data.get("level", "medium"),
        rotation_frequency=int(data.get("rotation_frequency", 2)),
        min_pool_size=int(data.get("min_pool_size", 5)),
        prioritize_top_tier=bool(data.get("prioritize_top_tier", True)),
    )


# =============================================================================
# REGIONAL DATA
# =============================================================================

_SEGMENTS = ("left_arm", "right_arm", "left_leg", "right_leg", "trunk")


def regional_data_to_dict(data: RegionalData) -> dict[str, Any]:
    d: dict[str, Any] = {
        name: {"lean_g": getattr(data, name).lean_g, "fat_g": getattr(data, name).fat_g}
        for name in _SEGMENTS
    }
    if data.android_fat_g is not None:
        d["android_fat_g"] = data.android_fat_g
    if data.gynoid_fat_g is not None:
        d["gynoid_fat_g"] = data.gynoid_fat_g
    return d


def dict_to_regional_data(data: dict[str, Any]) -> RegionalData:
    """
    Convert dict (segment name -> {lean_g, fat_g}) to RegionalData.

    Raises:
        ValidationError: If a segment is missing or malformed
    """
    segments = {}
    for name in _SEGMENTS:
        raw = data.get(name)
        if not isinstance(raw, dict) or "lean_g" not in raw:
            raise ValidationError(f"Regional data is missing segment '{name}'")
        segments[name] = _build(
            RegionalSegment, lean_g=float(raw["lean_g"]), fat_g=float(raw.get("fat_g", 0.0))
        )
    android = data.get("android_fat_g")
    gynoid = data.get("gynoid_fat_g")
    return RegionalData(
        **segments,
        android_fat_g=float(android) if android is not None else None,
        gynoid_fat_g=float(gynoid) if gynoid is not None else None,
    )


# =============================================================================
# PROFILE
# =============================================================================


def athlete_profile_to_dict(profile: AthleteProfile) -> dict[str, Any]:
    """
    Convert AthleteProfile to JSON-compatible dict.

    Args:
        profile: AthleteProfile to convert

    Returns:
        Dict representation
    """
    d: dict[str, Any] = {
        "name": profile.name,
        "total_mass_kg": profile.total_mass_kg,
        "body_fat_pct": profile.body_fat_pct,
        "height_cm": profile.height_cm,
        "experience": profile.experience,
        "training_age_years": profile.training_age_years,
        "calibrated_maxes": [estimated_max_to_dict(m) for m in profile.calibrated_maxes],
        "injuries": [injury_to_dict(i) for i in profile.injuries],
        "fatigue": fatigue_state_to_dict(profile.fatigue),
    }
    if profile.regional_data is not None:
        d["regional_data"] = regional_data_to_dict(profile.regional_data)
    if profile.variety is not None:
        d["variety"] = variety_preferences_to_dict(profile.variety)
    return d


def dict_to_athlete_profile(data: dict[str, Any]) -> AthleteProfile:
    """
    Convert dict to AthleteProfile.

    Args:
        data: Dict representation

    Returns:
        AthleteProfile instance

    Raises:
        ValidationError: If data is invalid
    """
    validate_positive(data.get("total_mass_kg", 0), "total_mass_kg")
    validate_positive(data.get("height_cm", 0), "height_cm")
    validate_non_negative(data.get("body_fat_pct", -1), "body_fat_pct")
    validate_choice(data.get("experience", "novice"), EXPERIENCE_LEVELS, "experience")

    regional = data.get("regional_data")
    variety = data.get("variety")
    return _build(
        AthleteProfile,
        total_mass_kg=float(data["total_mass_kg"]),
        body_fat_pct=float(data["body_fat_pct"]),
        height_cm=float(data["height_cm"]),
        experience=data.get("experience", "novice"),
        training_age_years=float(data.get("training_age_years", 0.0)),
        name=data.get("name", "default"),
        calibrated_maxes=[dict_to_estimated_max(m) for m in data.get("calibrated_maxes", [])],
        regional_data=dict_to_regional_data(regional) if regional else None,
        injuries=[dict_to_injury(i) for i in data.get("injuries", [])],
        fatigue=dict_to_fatigue_state(data.get("fatigue") or {}),
        variety=dict_to_variety_preferences(variety) if variety else None,
    )


# =============================================================================
# DISCOMFORT
# =============================================================================


def discomfort_entry_to_dict(entry: DiscomfortEntry) -> dict[str, Any]:
    return {
        "logged_at": entry.logged_at,
        "body_part": entry.body_part,
        "severity": entry.severity,
        "exercise_id": entry.exercise_id,
        "exercise_name": entry.exercise_name,
        "set_number": entry.set_number,
        "weight_kg": entry.weight_kg,
    }


def dict_to_discomfort_entry(data: dict[str, Any]) -> DiscomfortEntry:
    validate_date(data.get("logged_at", ""))
    validate_choice(data.get("body_part"), DISCOMFORT_BODY_PARTS, "body part")
    validate_choice(data.get("severity"), DISCOMFORT_SEVERITIES, "discomfort severity")
    return _build(
        DiscomfortEntry,
        body_part=data["body_part"],
        severity=data["severity"],
        logged_at=data["logged_at"],
        exercise_id=data.get("exercise_id", ""),
        exercise_name=data.get("exercise_name", ""),
        set_number=int(data.get("set_number", 1)),
        weight_kg=float(data.get("weight_kg", 0.0)),
    )


# =============================================================================
# SET STRINGS
# =============================================================================

_SET_RE = re.compile(
    r"^(?:(?P<count>\d+)\s*\*\s*)?"
    r"(?P<weight>\d+(?:\.\d+)?)\s*[xX×]\s*(?P<reps>\d+)"
    r"(?:\s*@\s*(?P<rpe>\d+(?:\.\d+)?))?"
    r"(?P<missed>\s*-)?$"
)


def parse_sets_string(sets_str: str) -> list[HistorySet]:
    """
    Parse a compact sets string.

    Comma-separated sets, each ``[N*]WEIGHTxREPS[@RPE][-]``:
        "100x5@8"          one set of 5 at 100 kg, RPE 8
        "3*100x5"          three identical sets
        "100x5@8, 100x3-"  the trailing "-" marks a set that was not completed

    Args:
        sets_str: Sets string to parse

    Returns:
        List of HistorySet in the order given

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    sets: list[HistorySet] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        m = _SET_RE.match(part)
        if m is None:
            raise ValidationError(
                f"Invalid set format: '{part}'.\n"
                "Use: weightxreps[@rpe] (e.g. 100x5@8), N*weightxreps for repeats,\n"
                "     and a trailing '-' for a set that was not completed."
            )
        count = int(m.group("count") or 1)
        if count < 1:
            raise ValidationError(f"Set count must be positive: {part}")
        rpe = float(m.group("rpe")) if m.group("rpe") else None
        for _ in range(count):
            sets.append(_build(
                HistorySet,
                weight_kg=float(m.group("weight")),
                reps=int(m.group("reps")),
                rpe=rpe,
                completed=m.group("missed") is None,
            ))

    if not sets:
        raise ValidationError("No valid sets found in sets string")
    return sets
