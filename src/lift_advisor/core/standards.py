"""
Reference strength tables.

Three fallbacks used when an exercise has no direct history:

  EXERCISE_RELATIONSHIPS  variant -> (parent exercise, load ratio)
  STRENGTH_STANDARDS      1RM / bodyweight by experience tier
  BODYWEIGHT_RATIOS       rough untrained 1RM / bodyweight by name keyword

Ratios are per implement: a dumbbell ratio is the load of one dumbbell.
"""

from typing import Final

from .models import BodyComposition, Experience

# (parent exercise name, variant 1RM / parent 1RM)
EXERCISE_RELATIONSHIPS: Final[dict[str, tuple[str, float]]] = {
    # Horizontal push
    "Incline Barbell Press": ("Barbell Bench Press", 0.80),
    "Close-Grip Bench Press": ("Barbell Bench Press", 0.90),
    "Dumbbell Bench Press": ("Barbell Bench Press", 0.40),
    "Incline Dumbbell Press": ("Barbell Bench Press", 0.34),
    "Machine Chest Press": ("Barbell Bench Press", 0.90),
    "Overhead Press": ("Barbell Bench Press", 0.65),
    # Vertical push
    "Dumbbell Shoulder Press": ("Overhead Press", 0.40),
    "Machine Shoulder Press": ("Overhead Press", 0.95),
    # Squat
    "Front Squat": ("Barbell Back Squat", 0.85),
    "Hack Squat": ("Barbell Back Squat", 1.10),
    "Leg Press": ("Barbell Back Squat", 1.80),
    "Goblet Squat": ("Barbell Back Squat", 0.35),
    "Bulgarian Split Squat": ("Barbell Back Squat", 0.30),
    "Walking Lunge": ("Barbell Back Squat", 0.25),
    # Hinge
    "Romanian Deadlift": ("Deadlift", 0.75),
    "Hip Thrust": ("Deadlift", 0.90),
    # Pull
    "Barbell Row": ("Barbell Bench Press", 0.75),
    "T-Bar Row": ("Barbell Row", 0.90),
    "Dumbbell Row": ("Barbell Row", 0.45),
    "Seated Cable Row": ("Barbell Row", 0.90),
    "Lat Pulldown": ("Barbell Row", 0.95),
    # Arms
    "Dumbbell Curl": ("Barbell Curl", 0.45),
    "Hammer Curl": ("Barbell Curl", 0.50),
    "Preacher Curl": ("Barbell Curl", 0.80),
    "Cable Curl": ("Barbell Curl", 0.80),
    "Skull Crusher": ("Close-Grip Bench Press", 0.40),
}

# 1RM as a multiple of bodyweight: (novice, intermediate, advanced)
STRENGTH_STANDARDS: Final[dict[str, tuple[float, float, float]]] = {
    "bench_press": (0.75, 1.00, 1.35),
    "incline_press": (0.60, 0.80, 1.10),
    "overhead_press": (0.50, 0.65, 0.85),
    "back_squat": (1.00, 1.35, 1.75),
    "front_squat": (0.80, 1.10, 1.45),
    "deadlift": (1.25, 1.65, 2.10),
    "romanian_deadlift": (0.90, 1.20, 1.55),
    "barbell_row": (0.60, 0.85, 1.10),
    "barbell_curl": (0.30, 0.45, 0.60),
    "hip_thrust": (1.00, 1.50, 2.00),
    "leg_press": (1.80, 2.50, 3.30),
}

# Fuzzy name matching for STRENGTH_STANDARDS; first match wins, so the
# more specific patterns come first.
STANDARD_MATCH_PATTERNS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("incline_press", ("incline bench", "incline barbell press")),
    ("bench_press", ("barbell bench press", "bench press")),
    ("overhead_press", ("overhead press", "military press", "standing press")),
    ("front_squat", ("front squat",)),
    ("back_squat", ("back squat", "barbell squat")),
    ("romanian_deadlift", ("romanian deadlift", "rdl", "stiff leg deadlift")),
    ("deadlift", ("conventional deadlift", "sumo deadlift", "deadlift")),
    ("barbell_row", ("barbell row", "bent over row", "pendlay row")),
    ("barbell_curl", ("barbell curl", "ez bar curl")),
    ("hip_thrust", ("hip thrust",)),
    ("leg_press", ("leg press",)),
)

_EXPERIENCE_INDEX: Final[dict[str, int]] = {"novice": 0, "intermediate": 1, "advanced": 2}

# (upper FFMI bound, multiplier); a lean, muscular build lifts more per kg
FFMI_BRACKETS: Final[tuple[tuple[float, float], ...]] = (
    (18.0, 0.85),
    (20.0, 0.95),
    (22.0, 1.00),
    (24.0, 1.10),
)
FFMI_TOP_MULTIPLIER: Final[float] = 1.20

# Rough untrained 1RM / bodyweight by name keyword (first match wins)
BODYWEIGHT_RATIOS: Final[tuple[tuple[str, float], ...]] = (
    ("lateral raise", 0.08),
    ("reverse fly", 0.08),
    ("face pull", 0.20),
    ("fly", 0.20),
    ("curl", 0.25),
    ("tricep", 0.25),
    ("skull", 0.25),
    ("extension", 0.30),
    ("lunge", 0.30),
    ("split squat", 0.30),
    ("leg press", 1.50),
    ("squat", 0.90),
    ("deadlift", 1.00),
    ("hip thrust", 0.90),
    ("calf", 0.80),
    ("shrug", 0.80),
    ("pulldown", 0.55),
    ("row", 0.50),
    ("press", 0.50),
)

# Fallback by primary muscle when no keyword matches
MUSCLE_BODYWEIGHT_RATIOS: Final[dict[str, float]] = {
    "chest": 0.60,
    "back": 0.60,
    "shoulders": 0.35,
    "biceps": 0.25,
    "triceps": 0.25,
    "quads": 0.90,
    "hamstrings": 0.50,
    "glutes": 0.90,
    "calves": 0.80,
    "traps": 0.80,
    "abs": 0.20,
}
DEFAULT_BODYWEIGHT_RATIO: Final[float] = 0.30


def related_exercise(exercise_name: str) -> tuple[str, float] | None:
    """(parent name, ratio) for a known variant, else None."""
    key = exercise_name.strip().lower()
    for name, rel in EXERCISE_RELATIONSHIPS.items():
        if name.lower() == key:
            return rel
    return None


def siblings_of(exercise_name: str) -> list[tuple[str, float]]:
    """
    Exercises whose 1RM converts to *exercise_name* through a shared parent.

    Returns (other exercise, factor) pairs where
    target_1rm = other_1rm * factor.  The parent itself and its direct
    variants both count.
    """
    key = exercise_name.strip().lower()
    own = related_exercise(exercise_name)
    out: list[tuple[str, float]] = []
    for name, (parent, ratio) in EXERCISE_RELATIONSHIPS.items():
        if name.lower() == key:
            continue
        if parent.lower() == key:
            # A variant of this exercise: invert its ratio
            out.append((name, 1 / ratio))
        elif own is not None and parent.lower() == own[0].lower():
            out.append((name, own[1] / ratio))
    return out


def match_standard(exercise_name: str) -> str | None:
    """STRENGTH_STANDARDS key for a free-text exercise name, or None."""
    key = exercise_name.strip().lower()
    if "dumbbell" in key:
        # Standards are barbell totals, not per-hand loads
        return None
    for standard, patterns in STANDARD_MATCH_PATTERNS:
        if any(p in key for p in patterns):
            return standard
    return None


def ffmi_multiplier(ffmi: float) -> float:
    for upper, mult in FFMI_BRACKETS:
        if ffmi < upper:
            return mult
    return FFMI_TOP_MULTIPLIER


def standard_ratio(exercise_name: str, experience: Experience) -> float | None:
    """1RM / bodyweight for an experience tier, or None without a standard."""
    standard = match_standard(exercise_name)
    if standard is None:
        return None
    return STRENGTH_STANDARDS[standard][_EXPERIENCE_INDEX[experience]]


def standards_1rm(
    exercise_name: str,
    body: BodyComposition,
    experience: Experience,
) -> float | None:
    """
    Population-standard 1RM for a lifter.

    e1RM = bodyweight * ratio[experience] * ffmi_multiplier

    Returns:
        Estimate in kg (rounded to 0.1), or None if the exercise has no standard
    """
    ratio = standard_ratio(exercise_name, experience)
    if ratio is None:
        return None
    return round(body.total_mass_kg * ratio * ffmi_multiplier(body.ffmi), 1)


def bodyweight_ratio_1rm(
    exercise_name: str,
    bodyweight_kg: float,
    primary_muscle: str | None = None,
) -> float:
    """Crude untrained 1RM from bodyweight; always returns a value."""
    key = exercise_name.strip().lower()
    ratio = None
    for keyword, r in BODYWEIGHT_RATIOS:
        if keyword in key:
            ratio = r
            break
    if ratio is None and primary_muscle is not None:
        ratio = MUSCLE_BODYWEIGHT_RATIOS.get(primary_muscle)
    if ratio is None:
        ratio = DEFAULT_BODYWEIGHT_RATIO
    return round(bodyweight_kg * ratio, 1)
