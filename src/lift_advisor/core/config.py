"""
Configuration constants for the strength recommendation model.

All adjustable parameters are centralized here for easy tuning.  Values
that are policy rather than physiology (deload triggers, forecast bands)
can be overridden from policy.yaml; see core/engine/config_loader.py.
"""

from typing import Final

# =============================================================================
# ONE-REP-MAX ESTIMATION
# =============================================================================

LINEAR_MODEL_REP_THRESHOLD: Final[int] = 12  # Above this, use w * (1 + r/40)
LINEAR_MODEL_DIVISOR: Final[float] = 40.0
EPLEY_DIVISOR: Final[float] = 30.0
BRZYCKI_NUMERATOR: Final[float] = 36.0
BRZYCKI_CONSTANT: Final[float] = 37.0
RPE_MIN: Final[float] = 1.0
RPE_MAX: Final[float] = 10.0

# Working weight = e1RM * (37 - (reps + RIR)) / 36 * margin
WORKING_WEIGHT_SAFETY_MARGIN: Final[float] = 0.95

# =============================================================================
# ESTIMATE CONFIDENCE
# =============================================================================

RECENCY_WINDOW_DAYS: Final[int] = 28  # History/known maxes older than this are stale
HIGH_CONFIDENCE_MIN_SESSIONS: Final[int] = 2  # Recent sessions needed for "high"
MAX_REPS_FOR_ESTIMATE: Final[int] = 12  # Sets above this are ignored for e1RM

HIGH_CONFIDENCE_VARIANCE: Final[float] = 0.05  # +/- range around working weight
MEDIUM_CONFIDENCE_VARIANCE: Final[float] = 0.10

LOW_CONFIDENCE_FACTOR: Final[float] = 0.85  # Conservative scale for low confidence
LOW_CONFIDENCE_PROTOCOL_START: Final[float] = 0.70  # Finding protocol start fraction
LOW_CONFIDENCE_PROTOCOL_ATTEMPTS: Final[int] = 4

FIND_WEIGHT_START_FRACTION: Final[float] = 0.50  # Of the bodyweight-ratio e1RM
FIND_WEIGHT_ATTEMPTS: Final[int] = 5

# A logged workout replaces an estimated max only beyond this relative change
ESTIMATE_UPDATE_THRESHOLD: Final[float] = 0.05

# =============================================================================
# PLATE ROUNDING AND INCREMENTS
# =============================================================================

LIGHT_WEIGHT_THRESHOLD_KG: Final[float] = 20.0  # Below: round to 1 kg
LIGHT_WEIGHT_STEP_KG: Final[float] = 1.0
PLATE_STEP_KG: Final[float] = 2.5

SMALL_MUSCLE_KEYWORDS: Final[tuple[str, ...]] = (
    "Lateral", "Curl", "Tricep", "Calf", "Raise", "Fly", "Extension",
)
SMALL_MUSCLE_INCREMENT_KG: Final[float] = 1.0
DUMBBELL_INCREMENT_KG: Final[float] = 2.0
DEFAULT_INCREMENT_KG: Final[float] = 2.5

# =============================================================================
# WARM-UP LADDER
# =============================================================================

WARMUP_LIGHT_THRESHOLD_KG: Final[float] = 20.0
HEAVY_SINGLE_THRESHOLD_KG: Final[float] = 80.0
HEAVY_COMPOUND_KEYWORDS: Final[tuple[str, ...]] = (
    "Squat", "Deadlift", "Bench Press", "Overhead Press",
)

# (fraction of working weight, reps, rest seconds, note)
WARMUP_LIGHT: Final[tuple[float, int, int, str]] = (
    0.5, 12, 60, "Light warmup - focus on movement pattern",
)
WARMUP_RAMP: Final[list[tuple[float, int, int, str]]] = [
    (0.4, 10, 60, "Very light - groove the movement"),
    (0.6, 6, 90, "Building toward working weight"),
    (0.8, 3, 120, "Prime the nervous system"),
]
WARMUP_HEAVY_SINGLE: Final[tuple[float, int, int, str]] = (
    0.9, 1, 120, "Final warmup single",
)

# =============================================================================
# PER-SET FATIGUE AND SANDBAGGING
# =============================================================================

# Fraction of first-set reps still achievable on set 5
RETENTION_AT_SET_5: Final[dict[str, float]] = {
    "isolation": 0.72,
    "compound_accessory": 0.80,
    "compound_primary": 0.88,
}
RPE_RISE_PER_SET: Final[dict[str, float]] = {
    "isolation": 0.75,
    "compound_accessory": 0.5,
    "compound_primary": 0.5,
}

SANDBAG_MIN_SETS: Final[int] = 3
SANDBAG_DROPOFF_RATIO: Final[float] = 0.5  # Actual < ratio * expected -> flag
SANDBAG_INCREMENT_KG: Final[dict[str, float]] = {
    "isolation": 1.0,
    "compound_accessory": 2.5,
    "compound_primary": 5.0,
}

# =============================================================================
# REGIONAL COMPOSITION AND ASYMMETRY
# =============================================================================

# % of total lean mass per region (min, max, ideal)
REGIONAL_NORMS: Final[dict[str, tuple[float, float, float]]] = {
    "Arms": (13.0, 17.0, 15.0),
    "Legs": (38.0, 45.0, 41.0),
    "Trunk": (42.0, 48.0, 44.0),
}
ASYMMETRY_MINOR: Final[float] = 3.0
ASYMMETRY_MODERATE: Final[float] = 5.0
ASYMMETRY_SIGNIFICANT: Final[float] = 8.0
ASYMMETRY_NOTE_THRESHOLD: Final[float] = 5.0
ASYMMETRY_DIVISOR: Final[float] = 200.0  # Percent asymmetry -> weight fraction

REGIONAL_CARRYOVER: Final[float] = 0.6  # Lean-mass ratio carryover to strength
REGIONAL_NOTE_THRESHOLD: Final[float] = 0.05
REGIONAL_MAX_ADJUSTMENT: Final[float] = 0.15

UNILATERAL_ARM_KEYWORDS: Final[tuple[str, ...]] = ("Curl", "Tricep", "Press", "Raise", "Fly")
UNILATERAL_LEG_KEYWORDS: Final[tuple[str, ...]] = ("Lunge", "Split", "Step", "Leg", "Single")

# =============================================================================
# READINESS
# =============================================================================

READINESS_WEIGHT_SLEEP: Final[float] = 0.35
READINESS_WEIGHT_STRESS: Final[float] = 0.25
READINESS_WEIGHT_NUTRITION: Final[float] = 0.20
READINESS_WEIGHT_RECOVERY: Final[float] = 0.20

DEFAULT_SLEEP_HOURS: Final[float] = 7.0
DEFAULT_SLEEP_QUALITY: Final[int] = 3
DEFAULT_STRESS_LEVEL: Final[int] = 3
DEFAULT_NUTRITION_RATING: Final[int] = 3
DEFAULT_PREVIOUS_RPE: Final[float] = 7.0
DEFAULT_DAYS_SINCE_LAST: Final[int] = 1

RECOVERY_BASE_SCORE: Final[float] = 70.0
RECOVERY_HARD_SESSION_RPE: Final[float] = 9.0
RECOVERY_HARD_SESSION_PENALTY: Final[float] = 15.0
RECOVERY_EASY_SESSION_RPE: Final[float] = 6.0
RECOVERY_EASY_SESSION_BONUS: Final[float] = 10.0
# Bonus by days since last session; 3+ days uses the last entry
RECOVERY_REST_DAY_ADJUSTMENT: Final[list[float]] = [-20.0, 0.0, 10.0, 15.0]

# Readiness tiers for target adjustment
READINESS_FULL: Final[int] = 80
READINESS_MODERATE: Final[int] = 60
READINESS_LOW: Final[int] = 40

# Interpretation boundaries
INTERPRET_EXCELLENT: Final[int] = 85
INTERPRET_GOOD: Final[int] = 70
INTERPRET_MODERATE: Final[int] = 55
INTERPRET_LOW: Final[int] = 40

# =============================================================================
# MESOCYCLE FATIGUE
# =============================================================================

FATIGUE_ACCUMULATION: Final[dict[int, float]] = {
    5: 2.0,
    6: 4.0,
    7: 6.0,
    8: 8.0,
    9: 10.0,
    10: 14.0,
}
FATIGUE_ACCUMULATION_FALLBACK_FACTOR: Final[float] = 0.25  # rpe * factor below RPE 5
FATIGUE_RECOVERY_PER_DAY: Final[float] = 3.0
FATIGUE_MIN: Final[float] = 0.0
FATIGUE_MAX: Final[float] = 100.0

# =============================================================================
# DELOAD AND FORECAST POLICY (defaults; overridable in policy.yaml)
# =============================================================================

DELOAD_FATIGUE_THRESHOLD: Final[float] = 75.0
DELOAD_MISSED_SESSIONS: Final[int] = 2  # Consecutive sessions under completion
DELOAD_COMPLETION_THRESHOLD: Final[float] = 80.0  # Percent
DELOAD_RPE_CREEP: Final[float] = 1.5
DELOAD_RPE_CREEP_WINDOW: Final[int] = 3  # Sessions averaged at each end
DELOAD_RPE_CREEP_MIN_SESSIONS: Final[int] = 6

FORECAST_DEFAULT_RPE: Final[float] = 7.5
FORECAST_PUSH_BELOW: Final[float] = 50.0
FORECAST_MAINTAIN_BELOW: Final[float] = 70.0
FORECAST_REDUCE_BELOW: Final[float] = 85.0

# =============================================================================
# FAILURE SAFETY
# =============================================================================

SAFETY_RIR_FLOOR: Final[dict[str, int]] = {
    "push_freely": 0,
    "push_cautiously": 1,
    "protect": 2,
}

# =============================================================================
# INJURY SWAPS
# =============================================================================

MATCH_SCORE_MUSCLE: Final[int] = 40
MATCH_SCORE_PATTERN: Final[int] = 25
MATCH_SCORE_MECHANIC: Final[int] = 15
MATCH_SCORE_SECONDARY_EACH: Final[int] = 3
MATCH_SCORE_SECONDARY_CAP: Final[int] = 10
MATCH_SCORE_REP_RANGE: Final[int] = 5
MATCH_SCORE_REP_RANGE_TOLERANCE: Final[int] = 2
MATCH_SCORE_TIER: Final[int] = 5
MAX_ALTERNATIVES: Final[int] = 10

INJURY_SEVERITY_MIN: Final[int] = 1
INJURY_SEVERITY_MAX: Final[int] = 3
SWAP_CAUTION_SEVERITY: Final[int] = 2  # Caution at or above this severity forces a swap

# =============================================================================
# VARIETY
# =============================================================================

VARIETY_POOL_SIZES: Final[dict[str, int]] = {"low": 3, "medium": 5, "high": 8}
VARIETY_ROTATION: Final[dict[str, int]] = {"low": 0, "medium": 2, "high": 3}
DEFAULT_VARIETY_LEVEL: Final[str] = "medium"
USAGE_LOOKBACK_DAYS: Final[int] = 14
PREFERENCES_CACHE_TTL_SECONDS: Final[float] = 120.0
USAGE_CACHE_TTL_SECONDS: Final[float] = 30.0
TOP_TIERS: Final[frozenset[str]] = frozenset({"S", "A"})
MAX_EXERCISES_PER_MUSCLE: Final[int] = 3
SETS_PER_ISOLATION: Final[int] = 3
SETS_PER_COMPOUND: Final[int] = 4

# =============================================================================
# DISCOMFORT
# =============================================================================

DISCOMFORT_WINDOW_DAYS: Final[int] = 14
DISCOMFORT_PATTERN_MIN: Final[int] = 2  # Occurrences to report a pattern
DISCOMFORT_INJURY_MIN: Final[int] = 3  # Occurrences that suggest an injury
DISCOMFORT_SEVERITY_SCORES: Final[dict[str, int]] = {
    "twinge": 1,
    "discomfort": 2,
    "pain": 3,
}
