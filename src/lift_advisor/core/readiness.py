"""
Readiness and fatigue engine.

Scores the pre-session check-in, tracks the 0-100 fatigue accumulator for
a training block, decides when a deload is due and scales a session's
ProgressionTargets to today's readiness.

All functions are pure.  Deload and forecast thresholds come from a policy
object; callers that honour policy.yaml pass load_deload_policy() /
load_forecast_policy() from core.engine.config_loader.
"""

import math
from dataclasses import replace
from typing import Sequence

from .config import (
    DEFAULT_DAYS_SINCE_LAST,
    DEFAULT_INCREMENT_KG,
    DEFAULT_NUTRITION_RATING,
    DEFAULT_PREVIOUS_RPE,
    DEFAULT_SLEEP_HOURS,
    DEFAULT_SLEEP_QUALITY,
    DEFAULT_STRESS_LEVEL,
    FATIGUE_ACCUMULATION,
    FATIGUE_ACCUMULATION_FALLBACK_FACTOR,
    FATIGUE_MAX,
    FATIGUE_MIN,
    FATIGUE_RECOVERY_PER_DAY,
    INTERPRET_EXCELLENT,
    INTERPRET_GOOD,
    INTERPRET_LOW,
    INTERPRET_MODERATE,
    READINESS_FULL,
    READINESS_LOW,
    READINESS_MODERATE,
    READINESS_WEIGHT_NUTRITION,
    READINESS_WEIGHT_RECOVERY,
    READINESS_WEIGHT_SLEEP,
    READINESS_WEIGHT_STRESS,
    RECOVERY_BASE_SCORE,
    RECOVERY_EASY_SESSION_BONUS,
    RECOVERY_EASY_SESSION_RPE,
    RECOVERY_HARD_SESSION_PENALTY,
    RECOVERY_HARD_SESSION_RPE,
    RECOVERY_REST_DAY_ADJUSTMENT,
    RPE_MAX,
    RPE_MIN,
)
from .engine.config_loader import DeloadPolicy, ForecastPolicy
from .metrics import days_between, round_to_increment
from .models import (
    DeloadDecision,
    ExerciseHistoryEntry,
    FatigueForecast,
    FatigueState,
    ProgressionTargets,
    ReadinessInput,
    ReadinessInterpretation,
    ReadinessScore,
    SessionSummary,
)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


# =============================================================================
# READINESS
# =============================================================================


def _sleep_score(hours: float, quality: int) -> float:
    """
    Sleep component (0-100).

    7-9 h is the optimal band and is graded upward within it (90 at 7 h,
    100 at 9 h).  9-10 h scores 85, 6-7 h 70, 5-6 h 50, anything else 30.
    Scaled by quality: 0.6 + 0.1 * quality.
    """
    if 7 <= hours <= 9:
        base = 90 + 5 * (hours - 7)
    elif 9 < hours <= 10:
        base = 85.0
    elif 6 <= hours < 7:
        base = 70.0
    elif 5 <= hours < 6:
        base = 50.0
    else:
        base = 30.0
    return base * (0.6 + quality * 0.1)


def _recovery_score(previous_rpe: float, days_since_last: int) -> float:
    score = RECOVERY_BASE_SCORE
    if previous_rpe >= RECOVERY_HARD_SESSION_RPE:
        score -= RECOVERY_HARD_SESSION_PENALTY
    elif previous_rpe <= RECOVERY_EASY_SESSION_RPE:
        score += RECOVERY_EASY_SESSION_BONUS
    idx = min(days_since_last, len(RECOVERY_REST_DAY_ADJUSTMENT) - 1)
    return score + RECOVERY_REST_DAY_ADJUSTMENT[idx]


def calculate_readiness_score(check_in: ReadinessInput) -> int:
    """
    Weighted readiness score (0-100) from a pre-session check-in.

    score = 0.35 * sleep + 0.25 * stress + 0.20 * nutrition + 0.20 * recovery

    Missing fields fall back to neutral defaults (7 h sleep, ratings of 3,
    previous RPE 7, one rest day).

    Args:
        check_in: ReadinessInput; every field may be None

    Returns:
        Integer score clamped to [0, 100]
    """
    sleep = check_in.sleep_hours if check_in.sleep_hours is not None else DEFAULT_SLEEP_HOURS
    quality = check_in.sleep_quality if check_in.sleep_quality is not None else DEFAULT_SLEEP_QUALITY
    stress = check_in.stress_level if check_in.stress_level is not None else DEFAULT_STRESS_LEVEL
    nutrition = (
        check_in.nutrition_rating
        if check_in.nutrition_rating is not None
        else DEFAULT_NUTRITION_RATING
    )
    prev_rpe = (
        check_in.previous_session_rpe
        if check_in.previous_session_rpe is not None
        else DEFAULT_PREVIOUS_RPE
    )
    days = (
        check_in.days_since_last_session
        if check_in.days_since_last_session is not None
        else DEFAULT_DAYS_SINCE_LAST
    )

    total = (
        _sleep_score(sleep, quality) * READINESS_WEIGHT_SLEEP
        + (6 - stress) * 20 * READINESS_WEIGHT_STRESS
        + nutrition * 20 * READINESS_WEIGHT_NUTRITION
        + _recovery_score(prev_rpe, days) * READINESS_WEIGHT_RECOVERY
    )
    return _round_half_up(_clamp(total, 0, 100))


def get_readiness_interpretation(score: float) -> ReadinessInterpretation:
    """Map a score to excellent / good / moderate / low / poor."""
    if score >= INTERPRET_EXCELLENT:
        return ReadinessInterpretation(
            "excellent",
            "Excellent readiness for training",
            "Great day for progression or high-intensity work",
        )
    if score >= INTERPRET_GOOD:
        return ReadinessInterpretation(
            "good", "Good readiness for training", "Proceed with planned workout"
        )
    if score >= INTERPRET_MODERATE:
        return ReadinessInterpretation(
            "moderate", "Moderate readiness", "Maintain current weights, focus on execution"
        )
    if score >= INTERPRET_LOW:
        return ReadinessInterpretation(
            "low", "Low readiness today", "Consider reducing volume or intensity by 10-20%"
        )
    return ReadinessInterpretation(
        "poor",
        "Poor readiness - recovery compromised",
        "Light technique work or rest day recommended",
    )


def score_readiness(check_in: ReadinessInput) -> ReadinessScore:
    score = calculate_readiness_score(check_in)
    return ReadinessScore(score=score, interpretation=get_readiness_interpretation(score))


def adjust_targets_for_readiness(
    base: ProgressionTargets,
    readiness_score: float,
    min_weight_increment: float = DEFAULT_INCREMENT_KG,
) -> ProgressionTargets:
    """
    Scale a session's targets to today's readiness.

    Tiers:
        >= 80  unchanged
        60-79  RIR +1, rest +30 s
        40-59  weight -10%, RIR +2, one set fewer (min 2), rest +60 s
        < 40   weight -20%, RIR 4, 2 sets, rest +90 s, technique session

    Weight reductions are rounded to *min_weight_increment* (2.5 kg when the
    increment is not positive).

    Returns:
        New ProgressionTargets (base is returned as-is at >= 80)
    """
    increment = min_weight_increment if min_weight_increment > 0 else DEFAULT_INCREMENT_KG
    score = _round_half_up(readiness_score)

    if readiness_score >= READINESS_FULL:
        return base

    if readiness_score >= READINESS_MODERATE:
        reason = f"{base.reason} (adjusted for moderate readiness: {score}%)".strip()
        return replace(
            base,
            target_rir=base.target_rir + 1,
            rest_seconds=base.rest_seconds + 30,
            reason=reason,
        )

    if readiness_score >= READINESS_LOW:
        reduction = round_to_increment(base.weight_kg * 0.1, increment)
        return replace(
            base,
            weight_kg=max(0.0, base.weight_kg - reduction),
            target_rir=base.target_rir + 2,
            sets=max(2, base.sets - 1),
            rest_seconds=base.rest_seconds + 60,
            reason=f"Reduced targets due to low readiness ({score}%)",
        )

    reduction = round_to_increment(base.weight_kg * 0.2, increment)
    return replace(
        base,
        weight_kg=max(0.0, base.weight_kg - reduction),
        target_rir=4,
        sets=2,
        rest_seconds=base.rest_seconds + 90,
        progression_type="technique",
        reason=f"Very low readiness ({score}%) - light technique session recommended",
    )


# =============================================================================
# FATIGUE ACCUMULATOR
# =============================================================================


def _check_rpe(rpe: float, name: str) -> None:
    if not RPE_MIN <= rpe <= RPE_MAX:
        raise ValueError(f"{name} must be in [{RPE_MIN:g}, {RPE_MAX:g}], got {rpe}")


def _session_accumulation(session_rpe: float) -> float:
    # RPE 1-4 is below the table
    return FATIGUE_ACCUMULATION.get(
        _round_half_up(session_rpe), session_rpe * FATIGUE_ACCUMULATION_FALLBACK_FACTOR
    )


def update_mesocycle_fatigue(
    current_fatigue: float,
    session_rpe: float,
    days_since_last_session: int,
) -> int:
    """
    Fatigue after a session.

    new = current - 3 * rest_days + accumulation[round(RPE)]

    Returns:
        Integer fatigue clamped to [0, 100]
    """
    if days_since_last_session < 0:
        raise ValueError("days_since_last_session must be non-negative")
    _check_rpe(session_rpe, "session_rpe")
    recovery = days_since_last_session * FATIGUE_RECOVERY_PER_DAY
    new = current_fatigue - recovery + _session_accumulation(session_rpe)
    return _round_half_up(_clamp(new, FATIGUE_MIN, FATIGUE_MAX))


def calculate_fatigue_after_rest(fatigue: float, rest_days: int) -> float:
    """Pure decay: 3 points per rest day, floored at 0."""
    return max(FATIGUE_MIN, fatigue - rest_days * FATIGUE_RECOVERY_PER_DAY)


def record_session(state: FatigueState, session_rpe: float, session_date: str) -> FatigueState:
    """Apply one session to a FatigueState, counting rest days from the last session."""
    days = 0
    if state.last_session_date is not None:
        days = max(0, days_between(state.last_session_date, session_date))
    return replace(
        state,
        fatigue=float(update_mesocycle_fatigue(state.fatigue, session_rpe, days)),
        last_session_date=session_date,
    )


def summarize_sessions(history: Sequence[ExerciseHistoryEntry]) -> list[SessionSummary]:
    """
    Collapse logged history into per-session summaries for deload checks.

    Entries are grouped by session_id (or date when absent).  Session RPE is
    the mean RPE of completed sets that recorded one, DEFAULT_PREVIOUS_RPE
    when none did; completion is completed sets / logged sets.

    Returns:
        Summaries oldest first; sessions with no sets are skipped
    """
    grouped: dict[str, list[ExerciseHistoryEntry]] = {}
    for entry in sorted(history, key=lambda h: h.date):
        grouped.setdefault(entry.session_id or entry.date, []).append(entry)

    summaries = []
    for entries in grouped.values():
        all_sets = [s for e in entries for s in e.sets]
        if not all_sets:
            continue
        done = [s for s in all_sets if s.completed]
        rpes = [s.rpe for s in done if s.rpe is not None]
        session_rpe = sum(rpes) / len(rpes) if rpes else DEFAULT_PREVIOUS_RPE
        summaries.append(SessionSummary(
            session_rpe=session_rpe,
            completion_percent=100.0 * len(done) / len(all_sets),
        ))
    return summaries


# =============================================================================
# DELOAD
# =============================================================================


def should_trigger_deload(
    fatigue: float,
    week_in_block: int,
    deload_week: int,
    recent_sessions: Sequence[SessionSummary],
    policy: DeloadPolicy | None = None,
) -> DeloadDecision:
    """
    Decide whether the next week should be a deload.

    Checked in order, first hit wins:
        1. Scheduled deload week                      (medium)
        2. Fatigue at or above the threshold          (high)
        3. Consecutive latest sessions under target   (high)
        4. RPE creep across the recent window         (medium)

    Args:
        fatigue: Current accumulator value (0-100)
        week_in_block: 1-based week of the current block
        deload_week: Week number scheduled as the deload
        recent_sessions: Session summaries, oldest first
        policy: Thresholds (defaults from config.py)

    Returns:
        DeloadDecision; reason is "" and urgency "low" when nothing fires
    """
    policy = policy or DeloadPolicy()

    if week_in_block == deload_week:
        return DeloadDecision(True, "Scheduled deload week in mesocycle", "medium")

    if fatigue >= policy.fatigue_threshold:
        return DeloadDecision(True, f"High accumulated fatigue ({fatigue:g}/100)", "high")

    if len(recent_sessions) >= policy.missed_sessions:
        latest = recent_sessions[-policy.missed_sessions:]
        if all(s.completion_percent < policy.completion_threshold for s in latest):
            return DeloadDecision(True, "Consistently missing workout targets", "high")

    if len(recent_sessions) >= policy.rpe_creep_min_sessions:
        window = list(recent_sessions[-policy.rpe_creep_min_sessions:])
        n = policy.rpe_creep_window
        early = sum(s.session_rpe for s in window[:n]) / n
        late = sum(s.session_rpe for s in window[-n:]) / n
        if late - early >= policy.rpe_creep:
            return DeloadDecision(
                True, "RPE increasing significantly - accumulated fatigue detected", "medium"
            )

    return DeloadDecision(False, "", "low")


# =============================================================================
# FORECAST
# =============================================================================


def forecast_weekly_fatigue(
    current_fatigue: float,
    planned_sessions: int,
    avg_rpe: float | None = None,
    policy: ForecastPolicy | None = None,
) -> FatigueForecast:
    """
    Project fatigue at the end of a week of evenly spaced sessions.

    Sessions are spaced floor(7 / n) days apart; the first session gets no
    recovery credit.  With no sessions planned the week is pure recovery.
    """
    policy = policy or ForecastPolicy()
    if avg_rpe is not None:
        _check_rpe(avg_rpe, "avg_rpe")

    if planned_sessions <= 0:
        recovered = calculate_fatigue_after_rest(current_fatigue, 7)
        return FatigueForecast(
            projected_fatigue=_round_half_up(recovered),
            band="recover",
            recommendation="No sessions planned - good time for recovery",
        )

    rpe = avg_rpe if avg_rpe is not None else policy.default_rpe
    accumulation = _session_accumulation(rpe)
    days_per_session = 7 // planned_sessions

    fatigue = current_fatigue
    for i in range(planned_sessions):
        if i > 0:
            fatigue = calculate_fatigue_after_rest(fatigue, days_per_session)
        fatigue = min(FATIGUE_MAX, fatigue + accumulation)

    if fatigue < policy.push_below:
        band, rec = "push", "Good capacity for high-intensity training"
    elif fatigue < policy.maintain_below:
        band, rec = "maintain", "Moderate fatigue - maintain current intensity"
    elif fatigue < policy.reduce_below:
        band, rec = "reduce", "Consider reducing volume or intensity this week"
    else:
        band, rec = "deload", "High fatigue risk - strongly recommend deload"

    return FatigueForecast(
        projected_fatigue=_round_half_up(fatigue),
        band=band,  # type: ignore[arg-type]
        recommendation=rec,
    )
