"""
Strength estimation engine.

Turns a StrengthProfile into a working-weight recommendation for one
exercise and rep target.  Estimate sources, in priority order:

  1. A recent, high-confidence known max (e.g. a calibration test)
  2. Direct history for the same exercise within the recency window
  3. A related exercise via EXERCISE_RELATIONSHIPS
  4. Population strength standards scaled by bodyweight and FFMI
  5. A "find your working weight" protocol from bodyweight ratios

Every result carries a confidence tier; lower tiers get wider weight
ranges and a more conservative starting point.
"""

from dataclasses import replace
from typing import Sequence

from .config import (
    ESTIMATE_UPDATE_THRESHOLD,
    FIND_WEIGHT_ATTEMPTS,
    FIND_WEIGHT_START_FRACTION,
    HEAVY_COMPOUND_KEYWORDS,
    HEAVY_SINGLE_THRESHOLD_KG,
    HIGH_CONFIDENCE_MIN_SESSIONS,
    HIGH_CONFIDENCE_VARIANCE,
    LOW_CONFIDENCE_FACTOR,
    LOW_CONFIDENCE_PROTOCOL_ATTEMPTS,
    LOW_CONFIDENCE_PROTOCOL_START,
    MEDIUM_CONFIDENCE_VARIANCE,
    RECENCY_WINDOW_DAYS,
    REGIONAL_NOTE_THRESHOLD,
    RETENTION_AT_SET_5,
    RPE_MAX,
    RPE_MIN,
    RPE_RISE_PER_SET,
    SANDBAG_DROPOFF_RATIO,
    SANDBAG_INCREMENT_KG,
    SANDBAG_MIN_SETS,
    SMALL_MUSCLE_KEYWORDS,
    WARMUP_HEAVY_SINGLE,
    WARMUP_LIGHT,
    WARMUP_LIGHT_THRESHOLD_KG,
    WARMUP_RAMP,
)
from .exercises import find_exercise_by_name
from .metrics import (
    best_set_1rm,
    estimate_1rm,
    intensity_percent,
    is_recent,
    round_to_plate,
    session_best_1rm,
    today_str,
    weight_increment_for,
    working_weight_from_1rm,
)
from .models import (
    BodyComposition,
    EstimatedMax,
    ExerciseCategory,
    ExerciseHistoryEntry,
    Experience,
    FindingWeightProtocol,
    HistorySet,
    RegionalData,
    SandbagCheck,
    SetTarget,
    Side,
    StrengthProfile,
    WarmupSet,
    WorkingWeightRecommendation,
)
from .regional import (
    analyze_regional_composition,
    get_asymmetry_adjustment,
    regional_adjustment,
)
from .standards import (
    bodyweight_ratio_1rm,
    related_exercise,
    siblings_of,
    standard_ratio,
    standards_1rm,
)

_DOWNGRADE = {"high": "medium", "medium": "low", "low": "low", "extrapolated": "extrapolated"}


def exercise_category(exercise_name: str) -> ExerciseCategory:
    """
    Fatigue category for an exercise.

    Uses the catalog entry when the name is known; otherwise heavy barbell
    keywords mean compound_primary and small-muscle keywords mean isolation.
    """
    meta = find_exercise_by_name(exercise_name)
    if meta is not None:
        return meta.category  # type: ignore[return-value]
    lowered = exercise_name.lower()
    if any(k.lower() in lowered for k in HEAVY_COMPOUND_KEYWORDS):
        return "compound_primary"
    if any(k.lower() in lowered for k in SMALL_MUSCLE_KEYWORDS):
        return "isolation"
    return "compound_accessory"


# =============================================================================
# ESTIMATE SELECTION
# =============================================================================


def _direct_history_estimate(
    exercise_name: str,
    profile: StrengthProfile,
    today: str,
) -> tuple[EstimatedMax, int] | None:
    """
    Estimate from the most recent session with a qualifying set.

    Returns (estimate, recent_session_count).  Two or more recent sessions
    give high confidence, one gives medium, stale history only gives low.
    """
    qualifying: list[tuple[ExerciseHistoryEntry, float]] = []
    for entry in profile.history_for(exercise_name):
        est = session_best_1rm(entry)
        if est:
            qualifying.append((entry, est))
    if not qualifying:
        return None

    latest, e1rm = qualifying[0]
    recent = sum(1 for entry, _ in qualifying if is_recent(entry.date, today, RECENCY_WINDOW_DAYS))
    if recent >= HIGH_CONFIDENCE_MIN_SESSIONS:
        confidence = "high"
    elif recent >= 1:
        confidence = "medium"
    else:
        confidence = "low"

    est = EstimatedMax(
        exercise=exercise_name,
        estimated_1rm=e1rm,
        confidence=confidence,  # type: ignore[arg-type]
        source="direct_history",
        last_updated=latest.date,
    )
    return est, recent


def _own_data_estimate(
    exercise_name: str,
    profile: StrengthProfile,
    today: str,
) -> tuple[EstimatedMax, str] | None:
    """Steps 1-2: known maxes and direct history for this exact exercise."""
    known = profile.known_max_for(exercise_name)
    # History-derived maxes are recomputed from the history itself below
    if (
        known is not None
        and known.source != "direct_history"
        and known.confidence == "high"
        and is_recent(known.last_updated, today, RECENCY_WINDOW_DAYS)
    ):
        label = "calibration test" if known.source == "calibration" else "known max"
        return known, f"Based on your {label} from {known.last_updated}"

    direct = _direct_history_estimate(exercise_name, profile, today)
    if direct is not None and direct[0].confidence != "low":
        est, recent = direct
        plural = "s" if recent != 1 else ""
        return est, (
            f"Based on recent history ({recent} session{plural} in the last "
            f"{RECENCY_WINDOW_DAYS} days)"
        )

    if known is not None and not (known.source == "direct_history" and direct is not None):
        stale = not is_recent(known.last_updated, today, RECENCY_WINDOW_DAYS)
        aged = replace(known, confidence=_DOWNGRADE[known.confidence]) if stale else known
        if direct is None or (aged.last_updated or "") >= (direct[0].last_updated or ""):
            when = f" from {aged.last_updated}" if aged.last_updated else ""
            prefix = "an older " if stale else "your "
            return aged, f"Based on {prefix}known max{when}"

    if direct is not None:
        est = direct[0]
        return est, f"Based on older history (last logged {est.last_updated})"

    return None


def _related_estimate(
    exercise_name: str,
    profile: StrengthProfile,
    today: str,
) -> tuple[EstimatedMax, str] | None:
    """Step 3: parent exercise first (medium), then sibling conversions (low)."""
    rel = related_exercise(exercise_name)
    if rel is not None:
        parent, ratio = rel
        found = _own_data_estimate(parent, profile, today)
        if found is not None:
            parent_est = found[0]
            confidence = "medium" if parent_est.confidence in ("high", "medium") else "low"
            est = EstimatedMax(
                exercise=exercise_name,
                estimated_1rm=round(parent_est.estimated_1rm * ratio, 1),
                confidence=confidence,  # type: ignore[arg-type]
                source="related_exercise",
                last_updated=parent_est.last_updated,
            )
            return est, f"Inferred from your {parent} ({ratio:.0%} of its max)"

    for other, factor in siblings_of(exercise_name):
        found = _own_data_estimate(other, profile, today)
        if found is None:
            continue
        other_est = found[0]
        est = EstimatedMax(
            exercise=exercise_name,
            estimated_1rm=round(other_est.estimated_1rm * factor, 1),
            confidence="low",
            source="related_exercise",
            last_updated=other_est.last_updated,
        )
        return est, f"Converted from your {other}"

    return None


def _estimate(
    exercise_name: str,
    profile: StrengthProfile,
    today: str,
) -> tuple[EstimatedMax, str]:
    found = _own_data_estimate(exercise_name, profile, today)
    if found is not None:
        return found

    found = _related_estimate(exercise_name, profile, today)
    if found is not None:
        return found

    std = standards_1rm(exercise_name, profile.body_composition, profile.experience)
    if std is not None:
        est = EstimatedMax(
            exercise=exercise_name,
            estimated_1rm=std,
            confidence="low",
            source="strength_standards",
        )
        return est, (
            f"Estimated from {profile.experience} strength standards "
            "for your bodyweight and build"
        )

    meta = find_exercise_by_name(exercise_name)
    bw_1rm = bodyweight_ratio_1rm(
        exercise_name,
        profile.body_composition.total_mass_kg,
        meta.primary_muscle if meta is not None else None,
    )
    est = EstimatedMax(
        exercise=exercise_name,
        estimated_1rm=bw_1rm,
        confidence="extrapolated",
        source="bodyweight_ratio",
    )
    return est, "Extrapolated from bodyweight"


def estimate_max(
    exercise_name: str,
    profile: StrengthProfile,
    today: str | None = None,
) -> EstimatedMax:
    """
    Best available 1RM estimate for an exercise.

    Never raises for unknown exercises: the last resort is a bodyweight
    extrapolation with confidence "extrapolated".
    """
    return _estimate(exercise_name, profile, today or today_str())[0]


# =============================================================================
# WARM-UPS AND PER-SET TARGETS
# =============================================================================


def generate_warmup_sets(
    working_weight_kg: float,
    exercise_name: str,
    is_compound: bool,
) -> list[WarmupSet]:
    """
    Build the warm-up ladder for a working weight.

    Light or isolation work gets a single 50% set.  Compounds ramp through
    40/60/80%, and heavy barbell compounds above 80 kg add a 90% single.

    Args:
        working_weight_kg: First working-set load
        exercise_name: Used to spot heavy barbell compounds
        is_compound: False for isolation exercises

    Returns:
        Warm-up sets, lightest first (empty for a zero working weight)
    """
    if working_weight_kg <= 0:
        return []

    if working_weight_kg < WARMUP_LIGHT_THRESHOLD_KG or not is_compound:
        steps = [WARMUP_LIGHT]
    else:
        steps = list(WARMUP_RAMP)
        heavy = any(k.lower() in exercise_name.lower() for k in HEAVY_COMPOUND_KEYWORDS)
        if heavy and working_weight_kg > HEAVY_SINGLE_THRESHOLD_KG:
            steps.append(WARMUP_HEAVY_SINGLE)

    return [
        WarmupSet(
            percent_of_working=round(fraction * 100),
            weight_kg=round_to_plate(working_weight_kg * fraction),
            reps=reps,
            rest_seconds=rest,
            note=note,
        )
        for fraction, reps, rest, note in steps
    ]


def per_set_targets(
    rep_range: tuple[int, int],
    target_rir: int,
    sets: int,
    category: ExerciseCategory,
) -> list[SetTarget]:
    """
    Fatigue-adjusted rep and RPE targets for each working set.

    The top of the rep range shrinks geometrically so that set 5 keeps
    RETENTION_AT_SET_5[category] of the first set's reps (never below the
    bottom of the range).  Expected RPE starts at 10 - RIR and rises per set,
    capped at 10.
    """
    if sets < 1:
        raise ValueError("sets must be at least 1")
    if category not in RETENTION_AT_SET_5:
        raise ValueError(f"Invalid category: {category}")

    low, high = rep_range
    per_set = RETENTION_AT_SET_5[category] ** (1 / 4)
    rise = RPE_RISE_PER_SET[category]
    base_rpe = max(RPE_MIN, RPE_MAX - target_rir)

    targets = []
    for i in range(1, sets + 1):
        top = max(low, int(round(high * per_set ** (i - 1))))
        targets.append(
            SetTarget(
                set_number=i,
                target_reps_min=low,
                target_reps_max=top,
                expected_rpe=round(min(RPE_MAX, base_rpe + rise * (i - 1)), 1),
            )
        )
    return targets


# =============================================================================
# RECOMMENDATION
# =============================================================================


def _finding_protocol(
    starting_weight_kg: float,
    increment_kg: float,
    target_rir: int,
    reps: int,
    max_attempts: int,
) -> FindingWeightProtocol:
    target_rpe = RPE_MAX - target_rir
    start = starting_weight_kg if starting_weight_kg > 0 else increment_kg
    instructions = (
        f"Start with {start:g}kg for {reps} reps. "
        f"If RPE < {target_rpe - 1:g}, add {increment_kg:g}kg and try again. "
        f"Stop when you hit RPE {target_rpe:g}."
    )
    return FindingWeightProtocol(
        starting_weight_kg=start,
        increment_kg=increment_kg,
        target_rpe=target_rpe,
        max_attempts=max_attempts,
        instructions=instructions,
    )


def recommend_working_weight(
    exercise_name: str,
    rep_range: tuple[int, int],
    target_rir: int,
    profile: StrengthProfile,
    sets: int | None = None,
    category: ExerciseCategory | None = None,
    include_warmups: bool = True,
    side: Side | None = None,
    today: str | None = None,
) -> WorkingWeightRecommendation:
    """
    Recommend a working weight for one exercise and rep target.

    Args:
        exercise_name: Exercise display name (catalog or free text)
        rep_range: (min, max) target reps
        target_rir: Reps in reserve to leave on each set
        profile: Lifter profile with history and known maxes
        sets: When given, per-set fatigue targets are attached
        category: Fatigue category; looked up or inferred when omitted
        include_warmups: Attach a warm-up ladder
        side: For unilateral exercises, bias the weight for this side
        today: Reference date (default: today)

    Returns:
        WorkingWeightRecommendation.  When nothing trustworthy is known the
        confidence is "find_working_weight", the weights are 0 and a finding
        protocol is attached instead.

    Raises:
        ValueError: If the rep range or RIR is invalid
    """
    low_reps, high_reps = rep_range
    if low_reps < 1 or high_reps < low_reps:
        raise ValueError(f"Invalid rep_range: {rep_range}")
    if target_rir < 0:
        raise ValueError("target_rir must be non-negative")

    today = today or today_str()
    category = category or exercise_category(exercise_name)
    reps = int(round((low_reps + high_reps) / 2))
    increment = weight_increment_for(exercise_name)
    set_targets = per_set_targets(rep_range, target_rir, sets, category) if sets else []

    est, basis = _estimate(exercise_name, profile, today)

    if est.confidence == "extrapolated":
        start = round_to_plate(est.estimated_1rm * FIND_WEIGHT_START_FRACTION)
        return WorkingWeightRecommendation(
            exercise=exercise_name,
            rep_range=rep_range,
            target_rir=target_rir,
            recommended_weight_kg=0.0,
            weight_low_kg=0.0,
            weight_high_kg=0.0,
            confidence="find_working_weight",
            rationale=(
                f"No history or standards for {exercise_name}. "
                "Find your working weight with the protocol below."
            ),
            source=est.source,
            set_targets=set_targets,
            finding_protocol=_finding_protocol(
                start, increment, target_rir, reps, FIND_WEIGHT_ATTEMPTS
            ),
        )

    e1rm = est.estimated_1rm
    notes: list[str] = []
    if est.source == "strength_standards":
        adj = regional_adjustment(exercise_name, profile.regional_analysis)
        if adj:
            e1rm = round(e1rm * (1 + adj), 1)
            if abs(adj) >= REGIONAL_NOTE_THRESHOLD:
                notes.append(f"Adjusted {adj:+.0%} for regional lean mass.")

    working = working_weight_from_1rm(e1rm, reps, target_rir)

    if side is not None:
        meta = find_exercise_by_name(exercise_name)
        asym = get_asymmetry_adjustment(
            exercise_name,
            side,
            profile.regional_analysis,
            unilateral=meta.unilateral if meta is not None else False,
        )
        if asym.adjustment:
            working *= 1 + asym.adjustment
        if asym.note:
            notes.append(asym.note)

    protocol = None
    if est.confidence == "high":
        recommended = round_to_plate(working)
        weight_low = round_to_plate(working * (1 - HIGH_CONFIDENCE_VARIANCE))
        weight_high = round_to_plate(working * (1 + HIGH_CONFIDENCE_VARIANCE))
    elif est.confidence == "medium":
        recommended = round_to_plate(working)
        weight_low = round_to_plate(working * (1 - MEDIUM_CONFIDENCE_VARIANCE))
        weight_high = round_to_plate(working * (1 + MEDIUM_CONFIDENCE_VARIANCE))
    else:
        recommended = round_to_plate(working * LOW_CONFIDENCE_FACTOR)
        weight_low = round_to_plate(recommended * LOW_CONFIDENCE_FACTOR)
        weight_high = round_to_plate(working)
        protocol = _finding_protocol(
            round_to_plate(working * LOW_CONFIDENCE_PROTOCOL_START),
            increment,
            target_rir,
            reps,
            LOW_CONFIDENCE_PROTOCOL_ATTEMPTS,
        )
        notes.append("Conservative start; ramp up with the protocol if it feels light.")

    rationale = (
        f"{basis}. Est. 1RM: {e1rm:g} kg → {intensity_percent(recommended, e1rm)}% "
        f"for {reps} reps @ {target_rir} RIR."
    )
    if notes:
        rationale = " ".join([rationale, *notes])

    warmups: list[WarmupSet] = []
    if include_warmups:
        warmups = generate_warmup_sets(recommended, exercise_name, category != "isolation")

    return WorkingWeightRecommendation(
        exercise=exercise_name,
        rep_range=rep_range,
        target_rir=target_rir,
        recommended_weight_kg=recommended,
        weight_low_kg=weight_low,
        weight_high_kg=weight_high,
        confidence=est.confidence,  # type: ignore[arg-type]
        rationale=rationale,
        source=est.source,
        estimated_1rm=e1rm,
        warmup_sets=warmups,
        set_targets=set_targets,
        finding_protocol=protocol,
    )


def safe_recommend_working_weight(
    exercise_name: str,
    rep_range: tuple[int, int],
    target_rir: int,
    profile: StrengthProfile,
    **kwargs,
) -> WorkingWeightRecommendation | None:
    """recommend_working_weight(), or None if the request is invalid."""
    try:
        return recommend_working_weight(exercise_name, rep_range, target_rir, profile, **kwargs)
    except ValueError:
        return None


# =============================================================================
# POST-SESSION CHECKS
# =============================================================================


def detect_sandbagging(sets: Sequence[HistorySet], category: ExerciseCategory) -> SandbagCheck:
    """
    Flag sets that lost suspiciously few reps at a constant weight.

    Expected dropoff after n sets is 1 - retention^((n-1)/4).  Sandbagging is
    flagged when at least 3 completed sets share one weight and the actual
    dropoff is below half the expected dropoff.

    Args:
        sets: Sets in the order performed
        category: Fatigue category of the exercise

    Returns:
        SandbagCheck; suggested_increment_kg is set only when flagged
    """
    done = [s for s in sets if s.completed]
    if len(done) < SANDBAG_MIN_SETS:
        return SandbagCheck(is_sandbagging=False, expected_dropoff=0.0, actual_dropoff=0.0)
    if len({s.weight_kg for s in done}) > 1:
        return SandbagCheck(is_sandbagging=False, expected_dropoff=0.0, actual_dropoff=0.0)

    first = done[0].reps
    if first <= 0:
        return SandbagCheck(is_sandbagging=False, expected_dropoff=0.0, actual_dropoff=0.0)

    n = len(done)
    expected = 1 - RETENTION_AT_SET_5[category] ** ((n - 1) / 4)
    actual = max(0.0, (first - done[-1].reps) / first)

    if actual >= SANDBAG_DROPOFF_RATIO * expected:
        return SandbagCheck(
            is_sandbagging=False,
            expected_dropoff=round(expected, 3),
            actual_dropoff=round(actual, 3),
        )

    increment = SANDBAG_INCREMENT_KG[category]
    return SandbagCheck(
        is_sandbagging=True,
        expected_dropoff=round(expected, 3),
        actual_dropoff=round(actual, 3),
        suggested_increment_kg=increment,
        message=(
            f"Reps held steady across {n} sets ({actual:.0%} drop vs {expected:.0%} "
            f"expected). Add {increment:g} kg next session."
        ),
    )


def update_estimated_max(
    current: EstimatedMax | None,
    entry: ExerciseHistoryEntry,
) -> EstimatedMax | None:
    """
    New estimated max from a logged session, if it moved enough to matter.

    Returns:
        A replacement EstimatedMax when there was none before or the session's
        best set changes the estimate by more than 5% in either direction;
        None when the existing estimate should stand.
    """
    found = best_set_1rm(entry.sets)
    if found is None:
        return None
    new_1rm = found[0]

    if current is not None and current.estimated_1rm > 0:
        change = (new_1rm - current.estimated_1rm) / current.estimated_1rm
        if abs(change) <= ESTIMATE_UPDATE_THRESHOLD:
            return None

    return EstimatedMax(
        exercise=current.exercise if current is not None else entry.exercise_name,
        estimated_1rm=new_1rm,
        confidence="medium",
        source="direct_history",
        last_updated=entry.date,
    )


# =============================================================================
# PROFILE CONSTRUCTION
# =============================================================================


def estimated_maxes_from_calibration(
    results: dict[str, tuple[float, int]],
    tested_on: str,
) -> list[EstimatedMax]:
    """
    Convert calibration tests into high-confidence known maxes.

    Args:
        results: {exercise name: (weight_kg, reps)} from the test session
        tested_on: ISO date of the test

    Returns:
        One EstimatedMax per test with a usable result
    """
    maxes = []
    for name, (weight, reps) in results.items():
        e1rm = estimate_1rm(weight, reps)
        if e1rm <= 0:
            continue
        maxes.append(
            EstimatedMax(
                exercise=name,
                estimated_1rm=e1rm,
                confidence="high",
                source="calibration",
                last_updated=tested_on,
            )
        )
    return maxes


def create_strength_profile(
    total_mass_kg: float,
    body_fat_pct: float,
    height_cm: float,
    experience: Experience,
    training_age_years: float = 0.0,
    history: list[ExerciseHistoryEntry] | None = None,
    calibrations: list[EstimatedMax] | None = None,
    regional_data: RegionalData | None = None,
    today: str | None = None,
) -> StrengthProfile:
    """
    Assemble a StrengthProfile from raw measurements.

    Known maxes are derived from history (one per exercise) and then
    overridden by calibration results for the same exercise.
    """
    today = today or today_str()
    profile = StrengthProfile(
        body_composition=BodyComposition(total_mass_kg, body_fat_pct, height_cm),
        experience=experience,
        training_age_years=training_age_years,
        history=list(history or []),
        regional_analysis=analyze_regional_composition(regional_data) if regional_data else None,
    )

    known: dict[str, EstimatedMax] = {}
    for entry in profile.history:
        key = entry.exercise_name.strip().lower()
        if key in known:
            continue
        found = _direct_history_estimate(entry.exercise_name, profile, today)
        if found is not None:
            known[key] = found[0]
    for m in calibrations or []:
        known[m.exercise.strip().lower()] = m

    profile.known_maxes = list(known.values())
    return profile


def quick_weight_estimate(
    exercise_name: str,
    bodyweight_kg: float,
    experience: Experience = "novice",
    reps: int = 10,
    rir: int = 2,
) -> float:
    """
    One-call starting weight without any history.

    Uses the strength standard when one exists, else the bodyweight ratio,
    then applies the low-confidence discount.
    """
    if bodyweight_kg <= 0:
        raise ValueError("bodyweight_kg must be positive")
    ratio = standard_ratio(exercise_name, experience)
    if ratio is not None:
        e1rm = bodyweight_kg * ratio
    else:
        e1rm = bodyweight_ratio_1rm(exercise_name, bodyweight_kg)
    return round_to_plate(working_weight_from_1rm(e1rm, reps, rir) * LOW_CONFIDENCE_FACTOR)
