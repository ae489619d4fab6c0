"""
Injury-aware exercise classification and substitution.

get_injury_risk() rates an exercise as safe / caution / avoid for one
injured body area.  Lookup order is fixed:

  1. EXPLICIT_AVOID  name fragments that are always avoided for the area
  2. EXPLICIT_SAFE   name fragments that are always fine for the area
  3. inference       movement pattern, muscle, mechanic and equipment rules

Laterality is ignored for classification: "knee_left", "knee_right" and
"knee" rate every exercise the same way.

Names are matched lowercased with hyphens read as spaces, so "Push-Up",
"push up" and "T-Bar Row" all hit the same table entries.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Final

from .config import (
    INJURY_SEVERITY_MAX,
    MATCH_SCORE_MECHANIC,
    MATCH_SCORE_MUSCLE,
    MATCH_SCORE_PATTERN,
    MATCH_SCORE_REP_RANGE,
    MATCH_SCORE_REP_RANGE_TOLERANCE,
    MATCH_SCORE_SECONDARY_CAP,
    MATCH_SCORE_SECONDARY_EACH,
    MATCH_SCORE_TIER,
    MAX_ALTERNATIVES,
    SWAP_CAUTION_SEVERITY,
)
from .exercises.base import ExerciseMetadata
from .models import InjuryContext, InjuryRisk, SafeAlternative, SwapResult

_RISK_ORDER: Final[dict[str, int]] = {"safe": 0, "caution": 1, "avoid": 2}

CAUTION_NOTE: Final[str] = "Use caution. Start light and stop if pain occurs."
NO_ALTERNATIVE_REASON: Final[str] = "No safe alternative for this muscle group"

# =============================================================================
# EXPLICIT TABLES
# =============================================================================

EXPLICIT_AVOID: Final[dict[str, tuple[str, ...]]] = {
    "lower_back": (
        "deadlift", "sumo deadlift", "rdl", "romanian deadlift", "stiff leg",
        "single leg rdl", "good morning", "bent over row", "barbell row",
        "pendlay row", "t bar row", "hyperextension", "back extension",
        "barbell squat", "back squat", "front squat",
    ),
    "upper_back": ("shrug", "upright row", "face pull"),
    "shoulder": (
        "overhead press", "ohp", "military press", "shoulder press",
        "arnold press", "behind neck press", "push press", "upright row",
        "dip", "bench dip", "lateral raise", "front raise",
    ),
    "knee": (
        "squat", "front squat", "back squat", "sissy squat", "walking lunge",
        "jumping lunge", "jump squat", "box jump", "leg extension",
    ),
    "hip": (
        "hip thrust", "sumo deadlift", "sumo squat", "hip abduction",
        "hip adduction", "bulgarian split squat", "lunge",
    ),
    "elbow": (
        "skull crusher", "lying tricep extension", "close grip bench", "dip",
        "chin up", "preacher curl", "concentration curl",
    ),
    "wrist": (
        "front squat", "clean", "snatch", "push up", "pushup", "wrist curl",
        "barbell bench press",
    ),
    "ankle": ("calf raise", "jump", "box jump", "squat", "lunge", "running"),
    "neck": (
        "shrug", "behind neck press", "behind neck pulldown", "neck curl",
        "neck extension", "upright row",
    ),
    "chest": (
        "bench press", "dumbbell press", "fly", "flye", "push up", "pushup",
        "dip", "cable crossover",
    ),
}

EXPLICIT_SAFE: Final[dict[str, tuple[str, ...]]] = {
    "lower_back": (
        "lat pulldown", "pulldown", "pull up", "pullup", "chin up",
        "chest supported row", "machine row", "cable row", "seated row",
        "straight arm pulldown", "pullover", "leg press", "hack squat",
        "pendulum squat", "leg extension", "leg curl", "lying leg curl",
        "seated leg curl", "hip thrust", "glute bridge", "glute drive",
        "hip abduction", "hip adduction", "machine", "cable",
    ),
    "upper_back": (
        "lat pulldown", "pulldown", "chest supported row", "machine row",
        "cable row", "pull up", "pullup", "squat", "leg press", "lunge",
        "deadlift",
    ),
    "shoulder": (
        "leg press", "squat", "hack squat", "leg extension", "leg curl",
        "hip thrust", "calf raise", "deadlift", "rdl", "cable curl",
        "machine curl", "tricep pushdown", "rope pushdown", "machine tricep",
        "face pull", "band pull apart", "external rotation", "lat pulldown",
        "pulldown", "row", "pull up", "pullup",
    ),
    "knee": (
        "rdl", "romanian deadlift", "hip thrust", "glute bridge",
        "cable pull through", "lying leg curl", "seated leg curl",
        "bench press", "row", "pulldown", "curl", "tricep", "shoulder press",
        "lateral raise",
    ),
    "hip": (
        "leg extension", "leg curl", "bench press", "row", "pulldown", "curl",
        "tricep", "shoulder press", "lateral raise",
    ),
    "elbow": (
        "squat", "leg press", "leg curl", "leg extension", "hip thrust",
        "calf raise", "deadlift", "lateral raise", "face pull", "reverse fly",
        "shrug",
    ),
    "wrist": (
        "lat pulldown", "cable row", "machine row", "leg press", "squat",
        "leg curl", "leg extension", "hip thrust", "calf raise", "machine",
    ),
    "ankle": (
        "bench press", "row", "pulldown", "curl", "tricep", "shoulder press",
        "lateral raise", "leg extension", "seated leg curl", "leg press",
    ),
    "neck": (
        "bench press", "squat", "deadlift", "row", "pulldown", "curl",
        "tricep", "leg press", "leg curl",
    ),
    "chest": (
        "row", "pulldown", "curl", "tricep pushdown", "squat", "leg press",
        "deadlift", "shoulder press", "lateral raise", "leg curl",
        "leg extension",
    ),
}

INJURY_LABELS: Final[dict[str, str]] = {
    "lower_back": "Lower Back",
    "upper_back": "Upper Back",
    "shoulder": "Shoulder",
    "shoulder_left": "Left Shoulder",
    "shoulder_right": "Right Shoulder",
    "knee": "Knee",
    "knee_left": "Left Knee",
    "knee_right": "Right Knee",
    "hip": "Hip",
    "hip_left": "Left Hip",
    "hip_right": "Right Hip",
    "elbow": "Elbow",
    "elbow_left": "Left Elbow",
    "elbow_right": "Right Elbow",
    "wrist": "Wrist",
    "wrist_left": "Left Wrist",
    "wrist_right": "Right Wrist",
    "ankle": "Ankle",
    "ankle_left": "Left Ankle",
    "ankle_right": "Right Ankle",
    "neck": "Neck",
    "chest": "Chest",
}

INJURY_DESCRIPTIONS: Final[dict[str, str]] = {
    "lower_back": (
        "Avoids spinal loading and bent-over positions. Favors machines, cables, "
        "and supported exercises. Lat pulldowns are safe!"
    ),
    "upper_back": "Avoids shrugs and heavy trap work. Most exercises are fine.",
    "shoulder": (
        "Avoids overhead pressing and deep stretches. "
        "Pulling movements are generally safe."
    ),
    "knee": "Avoids squats, lunges, and jumping. Hip-dominant movements are safe.",
    "hip": "Avoids wide stances and hip-dominant movements. Knee-dominant work is fine.",
    "elbow": (
        "Avoids heavy tricep extensions and skull crushers. "
        "Pushdowns are usually fine."
    ),
    "wrist": "Avoids front rack and heavy pressing. Machines and cables are safe.",
    "ankle": "Avoids calf work and standing lower body. Seated exercises are fine.",
    "neck": "Avoids shrugs and behind-neck movements. Most exercises are fine.",
    "chest": "Avoids pressing and fly movements. Back and lower body work is fine.",
}
DEFAULT_INJURY_DESCRIPTION: Final[str] = "Exercise selection will be adjusted for safety."

def normalize_injury_area(area: str) -> str:
    """Strip a _left / _right suffix: "knee_left" -> "knee"."""
    for suffix in ("_left", "_right"):
        if area.endswith(suffix):
            return area[: -len(suffix)]
    return area


def _normalize_name(name: str) -> str:
    return name.lower().replace("-", " ")


def _has(text: str, *fragments: str) -> bool:
    return any(f in text for f in fragments)


# =============================================================================
# PER-AREA INFERENCE
# =============================================================================


def _infer_lower_back(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if "hinge" in ex.movement_pattern or "hinge" in name:
        return "avoid"
    if _has(name, "bent", "pendlay"):
        return "avoid"
    if ex.primary_equipment == "barbell" and _has(name, "squat", "deadlift"):
        return "avoid"
    if "standing" in name and _has(name, "press", "ohp"):
        return "caution"
    if _has(name, "carry", "walk"):
        return "caution"
    return "safe"


def _infer_upper_back(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if _has(name, "shrug", "upright"):
        return "avoid"
    if "row" in name and ex.mechanic == "compound":
        return "caution"
    return "safe"


def _infer_shoulder(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if _has(name, "overhead", "military") or "vertical_push" in ex.movement_pattern:
        return "avoid"
    if "bench" in name or ("press" in name and ex.primary_muscle == "chest"):
        return "caution"
    if "behind" in name and "neck" in name:
        return "avoid"
    if "dip" in name:
        return "avoid"
    if ex.primary_muscle == "shoulders" and ex.mechanic == "isolation":
        # Rotator cuff work is therapeutic
        if _has(name, "face pull", "external rotation"):
            return "safe"
        return "caution"
    return "safe"


def _infer_knee(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if "squat" in ex.movement_pattern or "squat" in name:
        if _has(name, "machine", "hack", "leg press"):
            return "caution"
        return "avoid"
    # Loaded knee flexion under bodyweight shear: treated like a free squat
    if "lunge" in ex.movement_pattern or _has(name, "lunge", "split squat"):
        return "avoid"
    if _has(name, "jump", "plyo"):
        return "avoid"
    if "extension" in name and ex.primary_muscle == "quads":
        return "caution"
    return "safe"


def _infer_hip(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if "hip" in name and _has(name, "abduction", "adduction"):
        return "avoid"
    if "sumo" in name:
        return "avoid"
    if "hinge" in ex.movement_pattern or _has(name, "thrust", "bridge"):
        return "caution"
    if _has(name, "lunge", "split"):
        return "caution"
    return "safe"


def _infer_elbow(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if _has(name, "skull", "crusher"):
        return "avoid"
    if ex.primary_muscle == "triceps" and ex.mechanic == "isolation":
        if _has(name, "overhead", "extension"):
            return "caution"
        if "pushdown" in name:
            return "safe"
    if ex.primary_muscle == "biceps":
        return "caution"
    if _has(name, "chin", "close grip"):
        return "caution"
    return "safe"


def _infer_wrist(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if _has(name, "front squat", "clean", "snatch"):
        return "avoid"
    if ex.primary_equipment == "barbell" and "press" in name:
        return "caution"
    if _has(name, "push up", "pushup"):
        return "caution"
    if "wrist" in name:
        return "avoid"
    return "safe"


def _infer_ankle(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if "calf" in name or ex.primary_muscle == "calves":
        return "avoid"
    if _has(name, "jump", "plyo"):
        return "avoid"
    if _has(name, "squat", "lunge"):
        return "caution"
    return "safe"


def _infer_neck(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if _has(name, "neck", "shrug"):
        return "avoid"
    if "upright" in name:
        return "caution"
    return "safe"


def _infer_chest(name: str, ex: ExerciseMetadata) -> InjuryRisk:
    if ex.primary_muscle == "chest":
        return "avoid"
    if _has(name, "bench", "fly", "flye", "crossover", "dip", "push up", "pushup"):
        return "avoid"
    return "safe"


_INFERENCE: Final[dict[str, Callable[[str, ExerciseMetadata], InjuryRisk]]] = {
    "lower_back": _infer_lower_back,
    "upper_back": _infer_upper_back,
    "shoulder": _infer_shoulder,
    "knee": _infer_knee,
    "hip": _infer_hip,
    "elbow": _infer_elbow,
    "wrist": _infer_wrist,
    "ankle": _infer_ankle,
    "neck": _infer_neck,
    "chest": _infer_chest,
}


# =============================================================================
# CLASSIFICATION
# =============================================================================


def get_injury_risk(exercise: ExerciseMetadata, area: str) -> InjuryRisk:
    """
    Rate one exercise for one injured area.

    Args:
        exercise: Catalog entry to classify
        area: Injury area, generic or lateral ("shoulder_left")

    Returns:
        "safe", "caution" or "avoid"
    """
    generic = normalize_injury_area(area)
    name = _normalize_name(exercise.name)

    if _has(name, *EXPLICIT_AVOID.get(generic, ())):
        return "avoid"
    if _has(name, *EXPLICIT_SAFE.get(generic, ())):
        return "safe"

    infer = _INFERENCE.get(generic)
    if infer is None:
        return "safe"
    return infer(name, exercise)


def worst_risk(exercise: ExerciseMetadata, injuries: Iterable[InjuryContext]) -> InjuryRisk:
    """Highest risk across all injuries ("safe" when there are none)."""
    worst: InjuryRisk = "safe"
    for injury in injuries:
        risk = get_injury_risk(exercise, injury.area)
        if _RISK_ORDER[risk] > _RISK_ORDER[worst]:
            worst = risk
    return worst


def _max_severity(injuries: Sequence[InjuryContext]) -> int:
    return max((i.severity for i in injuries), default=0)


def filter_for_injury(
    exercises: Iterable[ExerciseMetadata],
    injuries: Sequence[InjuryContext],
) -> list[ExerciseMetadata]:
    """
    Drop exercises that are unsafe under the given injuries.

    "avoid" is always dropped.  "caution" is dropped when that injury is
    severity 3.
    """
    kept = []
    for ex in exercises:
        allowed = True
        for injury in injuries:
            risk = get_injury_risk(ex, injury.area)
            if risk == "avoid" or (risk == "caution" and injury.severity >= INJURY_SEVERITY_MAX):
                allowed = False
                break
        if allowed:
            kept.append(ex)
    return kept


# =============================================================================
# ALTERNATIVES
# =============================================================================


def calculate_match_score(source: ExerciseMetadata, candidate: ExerciseMetadata) -> int:
    """How closely *candidate* reproduces the training effect of *source* (0-100)."""
    score = 0
    if source.primary_muscle == candidate.primary_muscle:
        score += MATCH_SCORE_MUSCLE
    if source.movement_pattern == candidate.movement_pattern:
        score += MATCH_SCORE_PATTERN
    if source.mechanic == candidate.mechanic:
        score += MATCH_SCORE_MECHANIC

    shared = len(set(source.secondary_muscles) & set(candidate.secondary_muscles))
    score += min(MATCH_SCORE_SECONDARY_CAP, shared * MATCH_SCORE_SECONDARY_EACH)

    src_lo, src_hi = source.default_rep_range
    cand_lo, cand_hi = candidate.default_rep_range
    if (abs(src_lo - cand_lo) <= MATCH_SCORE_REP_RANGE_TOLERANCE
            and abs(src_hi - cand_hi) <= MATCH_SCORE_REP_RANGE_TOLERANCE):
        score += MATCH_SCORE_REP_RANGE

    if source.hypertrophy_tier == candidate.hypertrophy_tier:
        score += MATCH_SCORE_TIER

    return min(100, score)


def _swap_reason(
    source: ExerciseMetadata,
    candidate: ExerciseMetadata,
    injuries: Sequence[InjuryContext],
) -> str:
    reasons: list[str] = []
    if source.primary_muscle == candidate.primary_muscle:
        reasons.append(f"targets {source.primary_muscle}")

    name = _normalize_name(candidate.name)
    for injury in injuries:
        area = normalize_injury_area(injury.area)
        if area == "lower_back":
            if _has(name, "machine", "cable"):
                reasons.append("machine/cable provides back support")
            if _has(name, "supported", "seated"):
                reasons.append("supported position protects spine")
            if _has(name, "pulldown", "pull up"):
                reasons.append("decompresses the spine")
        elif area == "shoulder":
            if _has(name, "row", "pulldown", "pull"):
                reasons.append("pulling is shoulder-friendly")
            if "face pull" in name:
                reasons.append("promotes shoulder health")
        elif area == "knee":
            if _has(name, "curl", "hip", "rdl"):
                reasons.append("hip-dominant, spares knees")

    # Two injuries on the same area would repeat a note
    unique = list(dict.fromkeys(reasons))
    return "; ".join(unique) if unique else "similar exercise"


def get_safe_alternatives(
    source: ExerciseMetadata,
    pool: Iterable[ExerciseMetadata],
    injuries: Sequence[InjuryContext],
) -> list[SafeAlternative]:
    """
    Rank substitutes for *source* under the given injuries.

    Candidates share the source's primary muscle.  "avoid" candidates are
    dropped, and "caution" ones too when any injury is severity 3.  Safe
    alternatives come before cautious ones; each group is ordered by match
    score (ties keep pool order).

    Returns:
        At most MAX_ALTERNATIVES SafeAlternative records
    """
    strict = _max_severity(injuries) >= INJURY_SEVERITY_MAX
    ranked: list[SafeAlternative] = []
    for candidate in pool:
        if candidate.exercise_id == source.exercise_id or candidate.name == source.name:
            continue
        if candidate.primary_muscle != source.primary_muscle:
            continue
        risk = worst_risk(candidate, injuries)
        if risk == "avoid" or (risk == "caution" and strict):
            continue
        ranked.append(SafeAlternative(
            exercise=candidate,
            risk=risk,
            match_score=calculate_match_score(source, candidate),
            reason=_swap_reason(source, candidate, injuries),
            safety_note=None if risk == "safe" else CAUTION_NOTE,
        ))

    ranked.sort(key=lambda a: (_RISK_ORDER[a.risk], -a.match_score))
    return ranked[:MAX_ALTERNATIVES]


def needs_swap(exercise: ExerciseMetadata, injuries: Iterable[InjuryContext]) -> bool:
    """True for "avoid", or "caution" under an injury of severity 2 or more."""
    for injury in injuries:
        risk = get_injury_risk(exercise, injury.area)
        if risk == "avoid":
            return True
        if risk == "caution" and injury.severity >= SWAP_CAUTION_SEVERITY:
            return True
    return False


def auto_swap_for_injuries(
    workout: Sequence[tuple[str, ExerciseMetadata]],
    pool: Iterable[ExerciseMetadata],
    injuries: Sequence[InjuryContext],
) -> list[SwapResult]:
    """
    Repair a planned workout for the current injuries.

    Every slot whose exercise needs a swap is replaced by its best "safe"
    alternative, or marked "removed" when there is none.  A replacement is
    never an exercise already in the workout, and no two slots receive the
    same replacement.  Running the function again on the repaired workout
    returns no results.

    Args:
        workout: (slot id, exercise) pairs in session order
        pool: Candidate exercises, usually the whole catalog
        injuries: Current injuries

    Returns:
        One SwapResult per slot that needed attention, in workout order
    """
    candidates = list(pool)
    taken = {ex.exercise_id for _, ex in workout}
    results: list[SwapResult] = []

    for slot_id, exercise in workout:
        if not needs_swap(exercise, injuries):
            continue

        # Exclude taken exercises before the MAX_ALTERNATIVES cut
        available = get_safe_alternatives(
            exercise, [c for c in candidates if c.exercise_id not in taken], injuries
        )
        if available and available[0].risk == "safe":
            best = available[0]
            taken.add(best.exercise.exercise_id)
            results.append(SwapResult(
                original_id=slot_id,
                original_name=exercise.name,
                replacement=best.exercise,
                reason=best.reason,
                action="swapped",
            ))
        else:
            results.append(SwapResult(
                original_id=slot_id,
                original_name=exercise.name,
                replacement=None,
                reason=NO_ALTERNATIVE_REASON,
                action="removed",
            ))
    return results


def get_injury_label(area: str) -> str:
    return INJURY_LABELS.get(area, area.replace("_", " ").title())


def get_injury_description(area: str) -> str:
    """One-line summary of how exercise selection changes for an area."""
    return INJURY_DESCRIPTIONS.get(normalize_injury_area(area), DEFAULT_INJURY_DESCRIPTION)
