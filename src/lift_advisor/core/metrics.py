"""
Pure metric computation functions.

One-rep-max estimation, rep-max inversion, plate rounding and date
arithmetic.  All functions are pure and typed for testability.
"""

from datetime import date, datetime
from typing import Sequence

from .config import (
    BRZYCKI_CONSTANT,
    BRZYCKI_NUMERATOR,
    DEFAULT_INCREMENT_KG,
    DUMBBELL_INCREMENT_KG,
    EPLEY_DIVISOR,
    LIGHT_WEIGHT_STEP_KG,
    LIGHT_WEIGHT_THRESHOLD_KG,
    LINEAR_MODEL_DIVISOR,
    LINEAR_MODEL_REP_THRESHOLD,
    MAX_REPS_FOR_ESTIMATE,
    PLATE_STEP_KG,
    RPE_MAX,
    RPE_MIN,
    SMALL_MUSCLE_INCREMENT_KG,
    SMALL_MUSCLE_KEYWORDS,
    WORKING_WEIGHT_SAFETY_MARGIN,
)
from .models import ExerciseHistoryEntry, HistorySet


def epley_1rm(weight_kg: float, reps: float) -> float:
    """
    Estimate 1RM using the Epley formula.

    1RM = weight * (1 + reps/30)

    Args:
        weight_kg: Load lifted
        reps: Reps performed (may be fractional effective reps)

    Returns:
        Estimated 1RM in kg
    """
    if reps <= 0:
        return 0.0
    return weight_kg * (1 + reps / EPLEY_DIVISOR)


def brzycki_1rm(weight_kg: float, reps: float) -> float:
    """
    Estimate 1RM using the Brzycki formula.

    1RM = weight * 36 / (37 - reps)

    Only meaningful for reps well below 37; callers switch to the linear
    model above LINEAR_MODEL_REP_THRESHOLD.
    """
    if reps <= 0:
        return 0.0
    return weight_kg * BRZYCKI_NUMERATOR / (BRZYCKI_CONSTANT - reps)


def effective_reps(reps: float, rpe: float | None = None) -> float:
    """
    Reps to failure implied by a set.

    reps_eff = reps + (10 - RPE)

    RPE 10 (or no RPE) adds nothing.

    Raises:
        ValueError: If rpe is outside [1, 10]
    """
    if rpe is None:
        return float(reps)
    if not RPE_MIN <= rpe <= RPE_MAX:
        raise ValueError(f"rpe must be in [{RPE_MIN:g}, {RPE_MAX:g}], got {rpe}")
    return reps + (RPE_MAX - rpe)


def estimate_1rm(weight_kg: float, reps: int, rpe: float | None = None) -> float:
    """
    Estimate a one-rep max from a single set.

    Up to 12 effective reps: mean of Epley (accurate at low reps) and
    Brzycki (accurate at mid reps).  Above 12: w * (1 + r/40).

    Args:
        weight_kg: Load lifted
        reps: Reps completed
        rpe: Optional RPE of the set; inflates reps by the reps in reserve

    Returns:
        Estimated 1RM in kg rounded to 0.1 (exactly weight_kg for a true single),
        or 0.0 for a non-positive weight or rep count.
    """
    if weight_kg <= 0 or reps <= 0:
        return 0.0

    r = effective_reps(reps, rpe)
    if r <= 1:
        return float(weight_kg)

    if r > LINEAR_MODEL_REP_THRESHOLD:
        est = weight_kg * (1 + r / LINEAR_MODEL_DIVISOR)
    else:
        est = (epley_1rm(weight_kg, r) + brzycki_1rm(weight_kg, r)) / 2
    return round(est, 1)


def working_weight_from_1rm(estimated_1rm: float, reps: int, rir: int) -> float:
    """
    Invert the rep-max model to the load for *reps* with *rir* in reserve.

    w = e1RM * (37 - (reps + RIR)) / 36 * safety_margin

    Above 12 total reps the linear model is inverted instead so the
    two directions agree.  Result is unrounded.
    """
    if estimated_1rm <= 0:
        return 0.0
    total = max(1, reps + rir)
    if total == 1:
        raw = estimated_1rm
    elif total > LINEAR_MODEL_REP_THRESHOLD:
        raw = estimated_1rm / (1 + total / LINEAR_MODEL_DIVISOR)
    else:
        raw = estimated_1rm * (BRZYCKI_CONSTANT - total) / BRZYCKI_NUMERATOR
    return max(0.0, raw * WORKING_WEIGHT_SAFETY_MARGIN)


def best_set_1rm(sets: Sequence[HistorySet]) -> tuple[float, HistorySet] | None:
    """
    Highest 1RM estimate among completed sets of 1-12 reps.

    Returns:
        (estimate, set) or None when no set qualifies
    """
    best: tuple[float, HistorySet] | None = None
    for s in sets:
        if not s.completed or s.weight_kg <= 0:
            continue
        if not 1 <= s.reps <= MAX_REPS_FOR_ESTIMATE:
            continue
        est = estimate_1rm(s.weight_kg, s.reps, s.rpe)
        if best is None or est > best[0]:
            best = (est, s)
    return best


def session_best_1rm(entry: ExerciseHistoryEntry) -> float | None:
    found = best_set_1rm(entry.sets)
    return found[0] if found else None


# =============================================================================
# ROUNDING
# =============================================================================


def round_to_plate(weight_kg: float) -> float:
    """
    Round to loadable equipment granularity.

    Below 20 kg (dumbbells, cable stacks) round to the nearest 1 kg;
    otherwise to the nearest 2.5 kg.
    """
    if weight_kg <= 0:
        return 0.0
    step = LIGHT_WEIGHT_STEP_KG if weight_kg < LIGHT_WEIGHT_THRESHOLD_KG else PLATE_STEP_KG
    return round(round(weight_kg / step) * step, 2)


def round_to_increment(weight_kg: float, increment_kg: float) -> float:
    """Round to the nearest multiple of *increment_kg* (never negative)."""
    if increment_kg <= 0:
        raise ValueError("increment_kg must be positive")
    return max(0.0, round(round(weight_kg / increment_kg) * increment_kg, 2))


def weight_increment_for(exercise_name: str) -> float:
    """
    Smallest sensible load jump for an exercise.

    1 kg for small-muscle work, 2 kg for dumbbells, 2.5 kg otherwise.
    """
    if any(k.lower() in exercise_name.lower() for k in SMALL_MUSCLE_KEYWORDS):
        return SMALL_MUSCLE_INCREMENT_KG
    if "dumbbell" in exercise_name.lower():
        return DUMBBELL_INCREMENT_KG
    return DEFAULT_INCREMENT_KG


def intensity_percent(weight_kg: float, estimated_1rm: float) -> int:
    """Working weight as a whole percentage of the 1RM estimate."""
    if estimated_1rm <= 0:
        return 0
    return int(round(weight_kg / estimated_1rm * 100))


# =============================================================================
# DATES
# =============================================================================


def today_str() -> str:
    return date.today().strftime("%Y-%m-%d")


def days_between(earlier: str, later: str) -> int:
    """
    Whole days from *earlier* to *later* (negative if reversed).

    Args:
        earlier: ISO date YYYY-MM-DD
        later: ISO date YYYY-MM-DD
    """
    d0 = datetime.strptime(earlier, "%Y-%m-%d")
    d1 = datetime.strptime(later, "%Y-%m-%d")
    return (d1 - d0).days


def is_recent(date_str: str | None, today: str, window_days: int) -> bool:
    """True when *date_str* falls within *window_days* before *today*."""
    if date_str is None:
        return False
    return days_between(date_str, today) <= window_days
