"""
Regional (segmental) body-composition analysis.

Turns a segmental scan into lean-mass shares per region, left/right
asymmetry and the small weight adjustments derived from them.

Asymmetry convention: (right - left) / mean(left, right) * 100, so a
positive value means the right side carries more lean mass.
"""

from .config import (
    ASYMMETRY_DIVISOR,
    ASYMMETRY_MINOR,
    ASYMMETRY_MODERATE,
    ASYMMETRY_NOTE_THRESHOLD,
    ASYMMETRY_SIGNIFICANT,
    REGIONAL_CARRYOVER,
    REGIONAL_MAX_ADJUSTMENT,
    REGIONAL_NORMS,
    UNILATERAL_ARM_KEYWORDS,
    UNILATERAL_LEG_KEYWORDS,
)
from .models import (
    AsymmetryAdjustment,
    BodyPartAnalysis,
    RegionalAnalysis,
    RegionalData,
    Side,
)

# Average lean-mass share per region, used as the neutral point
AVERAGE_REGION_SHARE: dict[str, float] = {"Arms": 0.15, "Legs": 0.41, "Trunk": 0.44}

# Checked in order: "Leg Curl" is Legs, "Tricep Kickback" is Arms
REGION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Legs": ("Squat", "Leg", "Lunge", "Calf", "Hamstring", "Glute", "Hip"),
    "Arms": ("Curl", "Tricep", "Pushdown", "Skull", "Kickback"),
    "Trunk": ("Row", "Pull", "Deadlift", "Press", "Bench", "Fly", "Lat", "Chest", "Back"),
}


def asymmetry_percent(left: float, right: float) -> float:
    """(right - left) / mean * 100, rounded to 0.1; 0 when both are empty."""
    mean = (left + right) / 2
    if mean <= 0:
        return 0.0
    return round((right - left) / mean * 100, 1)


def asymmetry_severity(asymmetry: float) -> str:
    """none < 3% <= minor < 5% <= moderate < 8% <= significant."""
    a = abs(asymmetry)
    if a < ASYMMETRY_MINOR:
        return "none"
    if a < ASYMMETRY_MODERATE:
        return "minor"
    if a < ASYMMETRY_SIGNIFICANT:
        return "moderate"
    return "significant"


def _status(name: str, percent: float) -> str:
    low, high, _ = REGIONAL_NORMS[name]
    if percent < low:
        return "lagging"
    if percent > high:
        return "dominant"
    return "balanced"


def _part_recommendation(name: str, status: str) -> str | None:
    if status == "lagging":
        return f"{name} are below typical lean-mass share; add 2-4 weekly sets for this region."
    if status == "dominant":
        return f"{name} are above typical lean-mass share; maintenance volume is enough here."
    return None


def analyze_regional_composition(data: RegionalData) -> RegionalAnalysis:
    """
    Compare each region's lean-mass share with population norms.

    Args:
        data: Segmental scan (grams per segment)

    Returns:
        RegionalAnalysis with per-region status, asymmetries, the
        upper/lower lean ratio and the android/gynoid fat ratio when available
    """
    arms_lean = data.left_arm.lean_g + data.right_arm.lean_g
    legs_lean = data.left_leg.lean_g + data.right_leg.lean_g
    trunk_lean = data.trunk.lean_g
    total_lean = arms_lean + legs_lean + trunk_lean
    if total_lean <= 0:
        raise ValueError("regional data has no lean mass")

    arm_asym = asymmetry_percent(data.left_arm.lean_g, data.right_arm.lean_g)
    leg_asym = asymmetry_percent(data.left_leg.lean_g, data.right_leg.lean_g)

    regions = [
        ("Arms", arms_lean, data.left_arm.fat_g + data.right_arm.fat_g, arm_asym),
        ("Legs", legs_lean, data.left_leg.fat_g + data.right_leg.fat_g, leg_asym),
        ("Trunk", trunk_lean, data.trunk.fat_g, None),
    ]

    parts: list[BodyPartAnalysis] = []
    for name, lean, fat, asym in regions:
        percent = round(lean / total_lean * 100, 1)
        status = _status(name, percent)
        parts.append(
            BodyPartAnalysis(
                name=name,
                lean_mass_kg=round(lean / 1000, 2),
                fat_mass_kg=round(fat / 1000, 2),
                percent_of_total=percent,
                status=status,  # type: ignore[arg-type]
                symmetry_score=None if asym is None else round(max(0.0, 100 - abs(asym)), 1),
                recommendation=_part_recommendation(name, status),
            )
        )

    android_gynoid = None
    if data.android_fat_g is not None and data.gynoid_fat_g:
        android_gynoid = round(data.android_fat_g / data.gynoid_fat_g, 2)

    return RegionalAnalysis(
        parts=parts,
        arm_asymmetry=arm_asym,
        leg_asymmetry=leg_asym,
        upper_lower_ratio=round((arms_lean + trunk_lean) / legs_lean, 2) if legs_lean else 0.0,
        lagging_areas=[p.name for p in parts if p.status == "lagging"],
        dominant_areas=[p.name for p in parts if p.status == "dominant"],
        android_gynoid_ratio=android_gynoid,
    )


def get_asymmetry_recommendations(analysis: RegionalAnalysis) -> list[str]:
    """Plain-language advice for every limb pair with at least minor asymmetry."""
    out: list[str] = []
    for limb, asym in (("arm", analysis.arm_asymmetry), ("leg", analysis.leg_asymmetry)):
        severity = asymmetry_severity(asym)
        if severity == "none":
            continue
        weaker = "left" if asym > 0 else "right"
        pct = f"{abs(asym):.1f}%"
        if severity == "minor":
            out.append(f"Minor {limb} asymmetry ({pct}): start unilateral sets with your {weaker} side.")
        elif severity == "moderate":
            out.append(
                f"Moderate {limb} asymmetry ({pct}): add 1-2 extra unilateral sets "
                f"for your {weaker} {limb}."
            )
        else:
            out.append(
                f"Significant {limb} asymmetry ({pct}): prioritise unilateral {limb} work "
                f"and match reps to your {weaker} side."
            )
    return out


def region_for_exercise(exercise_name: str) -> str | None:
    """Legs, Arms or Trunk by name keyword (checked in that order)."""
    lowered = exercise_name.lower()
    for region, keywords in REGION_KEYWORDS.items():
        if any(k.lower() in lowered for k in keywords):
            return region
    return None


def regional_adjustment(exercise_name: str, analysis: RegionalAnalysis | None) -> float:
    """
    Fractional weight adjustment from the exercise region's lean share.

    adj = carryover * (share / average_share - 1), clamped to +/- max

    Returns 0.0 when there is no analysis or the region is unknown.
    """
    if analysis is None:
        return 0.0
    region = region_for_exercise(exercise_name)
    if region is None:
        return 0.0
    part = analysis.part(region)
    if part is None:
        return 0.0
    ratio = (part.percent_of_total / 100) / AVERAGE_REGION_SHARE[region]
    adj = REGIONAL_CARRYOVER * (ratio - 1)
    return round(max(-REGIONAL_MAX_ADJUSTMENT, min(REGIONAL_MAX_ADJUSTMENT, adj)), 3)


def get_asymmetry_adjustment(
    exercise_name: str,
    side: Side,
    analysis: RegionalAnalysis | None,
    unilateral: bool,
) -> AsymmetryAdjustment:
    """
    Weight bias for one side of a unilateral exercise.

    The weaker side gets -|asymmetry| / 200 (half the lean-mass gap); the
    stronger side is unchanged.  Bilateral exercises, exercises that are
    neither arm nor leg work, and missing regional data all return zero.

    Args:
        exercise_name: Exercise display name
        side: "left" or "right"
        analysis: Regional analysis, if a scan exists
        unilateral: Whether the exercise is performed one side at a time

    Returns:
        AsymmetryAdjustment; note is set once the asymmetry reaches 5%
    """
    if side not in ("left", "right"):
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")
    if analysis is None or not unilateral:
        return AsymmetryAdjustment(adjustment=0.0)

    lowered = exercise_name.lower()
    if any(k.lower() in lowered for k in UNILATERAL_LEG_KEYWORDS):
        asym, limb = analysis.leg_asymmetry, "leg"
    elif any(k.lower() in lowered for k in UNILATERAL_ARM_KEYWORDS):
        asym, limb = analysis.arm_asymmetry, "arm"
    else:
        return AsymmetryAdjustment(adjustment=0.0)

    if asym == 0:
        return AsymmetryAdjustment(adjustment=0.0)
    weaker = "left" if asym > 0 else "right"
    if side != weaker:
        return AsymmetryAdjustment(adjustment=0.0)

    adjustment = -round(abs(asym) / ASYMMETRY_DIVISOR, 3)
    note = ""
    if abs(asym) >= ASYMMETRY_NOTE_THRESHOLD:
        note = (
            f"Your {weaker} {limb} has {abs(asym):.1f}% less lean mass; "
            f"use about {abs(adjustment) * 100:.1f}% less weight on that side."
        )
    return AsymmetryAdjustment(adjustment=adjustment, note=note)
