"""
Failure-safety tiers.

Classifies exercises by how safe it is to push them to failure and turns
that into a minimum reps-in-reserve floor.  Independent of injuries; see
injury.py for injury-specific risk.

  push_freely      machines, cables, isolation: failure is harmless
  push_cautiously  free weights that can be dropped or controlled
  protect          heavy barbell compounds with no easy escape
"""

from dataclasses import replace
from typing import Literal

from .config import SAFETY_RIR_FLOOR
from .models import ProgressionTargets

FailureSafetyTier = Literal["push_freely", "push_cautiously", "protect"]

# Machine patterns are checked first so "Smith machine squat" stays safe
SAFE_PATTERNS: tuple[str, ...] = (
    "machine", "cable", "smith", "hack squat",
    "leg press", "leg extension", "leg curl",
    "pec deck", "pulldown", "seated row", "assisted",
)

PROTECT_PATTERNS: tuple[str, ...] = (
    "bench press", "barbell bench", "barbell squat", "back squat", "front squat",
    "deadlift", "barbell row", "bent over row", "pendlay row",
    "overhead press", "military press", "barbell press", "standing press",
    "good morning",
)

CAUTIOUS_PATTERNS: tuple[str, ...] = (
    "dumbbell", "lunge", "split squat", "step up", "step-up",
    "romanian", "rdl", "stiff leg", "hip thrust", "bulgarian",
    "goblet", "kettlebell", "single leg", "single-leg",
)

TIER_LABELS: dict[str, str] = {
    "push_freely": "Safe to fail",
    "push_cautiously": "Moderate risk",
    "protect": "Protect",
}

TIER_DESCRIPTIONS: dict[str, str] = {
    "push_freely": "Machine and isolation work. Safe to push to true failure.",
    "push_cautiously": "Free-weight compounds. Push hard but keep 1 rep in reserve.",
    "protect": "Heavy barbell compounds. Stay at 2+ RIR; failure risks injury.",
}


def get_failure_safety_tier(exercise_name: str) -> FailureSafetyTier:
    lowered = exercise_name.lower()
    if any(p in lowered for p in SAFE_PATTERNS):
        return "push_freely"
    # Hinge variants must not fall into the deadlift protect pattern
    if any(p in lowered for p in ("romanian", "rdl", "stiff leg")):
        return "push_cautiously"
    if any(p in lowered for p in PROTECT_PATTERNS):
        return "protect"
    if any(p in lowered for p in CAUTIOUS_PATTERNS):
        return "push_cautiously"
    return "push_freely"


def get_rir_floor(exercise_name: str) -> int:
    """Lowest RIR that should ever be prescribed for this exercise."""
    return SAFETY_RIR_FLOOR[get_failure_safety_tier(exercise_name)]


def apply_rir_floor(targets: ProgressionTargets, exercise_name: str) -> ProgressionTargets:
    """Raise target_rir to the exercise's floor; other fields unchanged."""
    floor = get_rir_floor(exercise_name)
    if targets.target_rir >= floor:
        return targets
    return replace(targets, target_rir=floor)


def is_amrap_eligible(
    exercise_name: str,
    is_mesocycle_end: bool = False,
    is_return_from_deload: bool = False,
    has_recent_amrap: bool = False,
) -> bool:
    """
    Whether an as-many-reps-as-possible set may be prescribed.

    Protected lifts never qualify; cautious ones only at the end of a block
    or when returning from a deload.
    """
    tier = get_failure_safety_tier(exercise_name)
    if tier == "push_freely":
        return not has_recent_amrap
    if tier == "push_cautiously":
        return is_mesocycle_end or is_return_from_deload
    return False


def get_protect_warning(exercise_name: str, reported_rir: int) -> str | None:
    """Warning for logging a protected lift too close to failure, else None."""
    if get_failure_safety_tier(exercise_name) != "protect":
        return None
    if reported_rir <= 0:
        return (
            f"Going to failure on {exercise_name} significantly increases injury risk. "
            "Stay at 2+ RIR on heavy barbell compounds."
        )
    if reported_rir == 1:
        return (
            f"That was close to failure on {exercise_name}. "
            "Staying at 2+ RIR on heavy compounds reduces injury risk."
        )
    return None
