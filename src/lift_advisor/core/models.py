"""
Data models for lift-advisor.

Core dataclasses for body composition, training history, estimates and
the structured results returned by every engine.  Validation is done in
__post_init__; a violation raises ValueError.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from .exercises.base import ExerciseMetadata

Experience = Literal["novice", "intermediate", "advanced"]
Confidence = Literal["high", "medium", "low", "extrapolated"]
RecommendationConfidence = Literal["high", "medium", "low", "find_working_weight"]
EstimateSource = Literal[
    "direct_history",
    "related_exercise",
    "strength_standards",
    "bodyweight_ratio",
    "calibration",
]
ProgressionType = Literal["load", "reps", "sets", "technique"]
ExerciseCategory = Literal["isolation", "compound_accessory", "compound_primary"]
InjuryRisk = Literal["safe", "caution", "avoid"]
Urgency = Literal["low", "medium", "high"]
ReadinessLevel = Literal["excellent", "good", "moderate", "low", "poor"]
DiscomfortSeverity = Literal["twinge", "discomfort", "pain"]
VarietyLevel = Literal["low", "medium", "high"]
SwapAction = Literal["swapped", "removed"]
Side = Literal["left", "right"]

EXPERIENCE_LEVELS = ("novice", "intermediate", "advanced")
EXERCISE_CATEGORIES = ("isolation", "compound_accessory", "compound_primary")
PROGRESSION_TYPES = ("load", "reps", "sets", "technique")
DISCOMFORT_SEVERITIES = ("twinge", "discomfort", "pain")
VARIETY_LEVELS = ("low", "medium", "high")

INJURY_AREAS = (
    "lower_back",
    "upper_back",
    "shoulder", "shoulder_left", "shoulder_right",
    "knee", "knee_left", "knee_right",
    "hip", "hip_left", "hip_right",
    "elbow", "elbow_left", "elbow_right",
    "wrist", "wrist_left", "wrist_right",
    "ankle", "ankle_left", "ankle_right",
    "neck",
    "chest",
)

DISCOMFORT_BODY_PARTS = (
    "lower_back", "upper_back", "neck",
    "left_shoulder", "right_shoulder", "shoulders",
    "left_elbow", "right_elbow", "elbows",
    "left_wrist", "right_wrist", "wrists",
    "left_knee", "right_knee", "knees",
    "left_hip", "right_hip", "hips",
    "other",
)


def _validate_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date: {date_str!r}. Expected YYYY-MM-DD") from e


# =============================================================================
# BODY COMPOSITION AND HISTORY
# =============================================================================


@dataclass(frozen=True)
class BodyComposition:
    """
    Body-composition snapshot.

    Lean mass, fat mass and FFMI are derived on access, so a new snapshot
    is all that is needed when the inputs change.
    """

    total_mass_kg: float
    body_fat_pct: float
    height_cm: float

    def __post_init__(self) -> None:
        if self.total_mass_kg <= 0:
            raise ValueError("total_mass_kg must be positive")
        if not 0 <= self.body_fat_pct < 100:
            raise ValueError("body_fat_pct must be in [0, 100)")
        if self.height_cm <= 0:
            raise ValueError("height_cm must be positive")

    @property
    def lean_mass_kg(self) -> float:
        return self.total_mass_kg * (1 - self.body_fat_pct / 100)

    @property
    def fat_mass_kg(self) -> float:
        return self.total_mass_kg - self.lean_mass_kg

    @property
    def ffmi(self) -> float:
        """Fat-free-mass index, normalised to 1.8 m height, rounded to 0.1."""
        height_m = self.height_cm / 100
        value = self.lean_mass_kg / (height_m * height_m) + 6.1 * (1.8 - height_m)
        return round(value, 1)


@dataclass
class HistorySet:
    """One logged set.  Incomplete sets never feed derived statistics."""

    weight_kg: float
    reps: int
    rpe: float | None = None
    completed: bool = True

    def __post_init__(self) -> None:
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.rpe is not None and not 1 <= self.rpe <= 10:
            raise ValueError(f"rpe must be in [1, 10], got {self.rpe}")


@dataclass
class ExerciseHistoryEntry:
    """All sets of one exercise performed in one session."""

    exercise_name: str
    date: str  # ISO format: YYYY-MM-DD
    sets: list[HistorySet] = field(default_factory=list)
    session_id: str | None = None

    def __post_init__(self) -> None:
        if not self.exercise_name.strip():
            raise ValueError("exercise_name must be non-empty")
        _validate_date(self.date)

    @property
    def completed_sets(self) -> list[HistorySet]:
        return [s for s in self.sets if s.completed]


@dataclass
class EstimatedMax:
    """An estimated one-rep max and where it came from."""

    exercise: str
    estimated_1rm: float
    confidence: Confidence
    source: EstimateSource
    last_updated: str | None = None  # ISO date

    def __post_init__(self) -> None:
        if self.estimated_1rm < 0:
            raise ValueError("estimated_1rm must be non-negative")
        if self.confidence not in ("high", "medium", "low", "extrapolated"):
            raise ValueError(f"Invalid confidence: {self.confidence}")
        if self.last_updated is not None:
            _validate_date(self.last_updated)


# =============================================================================
# REGIONAL COMPOSITION
# =============================================================================


@dataclass(frozen=True)
class RegionalSegment:
    """Lean and fat mass of one scanned segment, in grams."""

    lean_g: float
    fat_g: float = 0.0

    def __post_init__(self) -> None:
        if self.lean_g < 0 or self.fat_g < 0:
            raise ValueError("segment masses must be non-negative")


@dataclass(frozen=True)
class RegionalData:
    """Segmental scan (e.g. DEXA) data."""

    left_arm: RegionalSegment
    right_arm: RegionalSegment
    left_leg: RegionalSegment
    right_leg: RegionalSegment
    trunk: RegionalSegment
    android_fat_g: float | None = None
    gynoid_fat_g: float | None = None


@dataclass
class BodyPartAnalysis:
    """Lean-mass share of one region compared with population norms."""

    name: str  # "Arms" | "Legs" | "Trunk"
    lean_mass_kg: float
    fat_mass_kg: float
    percent_of_total: float
    status: Literal["lagging", "balanced", "dominant"]
    symmetry_score: float | None = None
    recommendation: str | None = None


@dataclass
class RegionalAnalysis:
    """
    Derived regional analysis.

    Asymmetries are percentages; positive means the right side is larger.
    """

    parts: list[BodyPartAnalysis]
    arm_asymmetry: float
    leg_asymmetry: float
    upper_lower_ratio: float
    lagging_areas: list[str] = field(default_factory=list)
    dominant_areas: list[str] = field(default_factory=list)
    android_gynoid_ratio: float | None = None

    def part(self, name: str) -> BodyPartAnalysis | None:
        for p in self.parts:
            if p.name == name:
                return p
        return None


# =============================================================================
# STRENGTH PROFILE AND RECOMMENDATIONS
# =============================================================================


@dataclass
class StrengthProfile:
    """
    Everything the estimation engine knows about one lifter.

    Built fresh for each recommendation request.
    """

    body_composition: BodyComposition
    experience: Experience
    training_age_years: float = 0.0
    history: list[ExerciseHistoryEntry] = field(default_factory=list)
    known_maxes: list[EstimatedMax] = field(default_factory=list)
    regional_analysis: RegionalAnalysis | None = None

    def __post_init__(self) -> None:
        if self.experience not in EXPERIENCE_LEVELS:
            raise ValueError(f"Invalid experience: {self.experience}")
        if self.training_age_years < 0:
            raise ValueError("training_age_years must be non-negative")

    def history_for(self, exercise_name: str) -> list[ExerciseHistoryEntry]:
        """History entries for an exercise (case-insensitive), newest first."""
        key = exercise_name.strip().lower()
        entries = [h for h in self.history if h.exercise_name.strip().lower() == key]
        return sorted(entries, key=lambda h: h.date, reverse=True)

    def known_max_for(self, exercise_name: str) -> EstimatedMax | None:
        key = exercise_name.strip().lower()
        for m in self.known_maxes:
            if m.exercise.strip().lower() == key:
                return m
        return None


@dataclass
class ProgressionTargets:
    """
    Prescription for one exercise in one session.

    Weight is in kg; rep_range is (min, max) inclusive.
    """

    weight_kg: float
    rep_range: tuple[int, int]
    target_rir: int
    sets: int
    rest_seconds: int
    progression_type: ProgressionType = "load"
    reason: str = ""

    def __post_init__(self) -> None:
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        low, high = self.rep_range
        if low < 1 or high < low:
            raise ValueError(f"Invalid rep_range: {self.rep_range}")
        if self.target_rir < 0:
            raise ValueError("target_rir must be non-negative")
        if self.sets < 1:
            raise ValueError("sets must be at least 1")
        if self.rest_seconds < 0:
            raise ValueError("rest_seconds must be non-negative")
        if self.progression_type not in PROGRESSION_TYPES:
            raise ValueError(f"Invalid progression_type: {self.progression_type}")


@dataclass
class WarmupSet:
    """One ramp set before the working sets."""

    percent_of_working: float
    weight_kg: float
    reps: int
    rest_seconds: int
    note: str = ""


@dataclass
class SetTarget:
    """Fatigue-adjusted target for one working set."""

    set_number: int
    target_reps_min: int
    target_reps_max: int
    expected_rpe: float


@dataclass
class FindingWeightProtocol:
    """Ramp-up instructions used when no trustworthy estimate exists."""

    starting_weight_kg: float
    increment_kg: float
    target_rpe: float
    max_attempts: int
    instructions: str


@dataclass
class WorkingWeightRecommendation:
    """Recommended working weight for one exercise and rep target."""

    exercise: str
    rep_range: tuple[int, int]
    target_rir: int
    recommended_weight_kg: float
    weight_low_kg: float
    weight_high_kg: float
    confidence: RecommendationConfidence
    rationale: str
    source: EstimateSource | None = None
    estimated_1rm: float | None = None
    warmup_sets: list[WarmupSet] = field(default_factory=list)
    set_targets: list[SetTarget] = field(default_factory=list)
    finding_protocol: FindingWeightProtocol | None = None

    @property
    def has_recommendation(self) -> bool:
        return self.confidence != "find_working_weight"


@dataclass
class SandbagCheck:
    """Result of comparing actual rep dropoff to the expected dropoff."""

    is_sandbagging: bool
    expected_dropoff: float  # fraction of first-set reps lost by the last set
    actual_dropoff: float
    suggested_increment_kg: float = 0.0
    message: str = ""


@dataclass
class AsymmetryAdjustment:
    """Weight fraction to apply for one side of a unilateral exercise."""

    adjustment: float  # e.g. -0.04 = 4% lighter
    note: str = ""


# =============================================================================
# READINESS AND FATIGUE
# =============================================================================


@dataclass
class ReadinessInput:
    """
    Pre-session check-in.  Every field is optional.

    Ratings are 1-5 (stress: 5 = most stressed).
    """

    sleep_hours: float | None = None
    sleep_quality: int | None = None
    stress_level: int | None = None
    nutrition_rating: int | None = None
    previous_session_rpe: float | None = None
    days_since_last_session: int | None = None

    def __post_init__(self) -> None:
        if self.sleep_hours is not None and not 0 <= self.sleep_hours <= 24:
            raise ValueError("sleep_hours must be in [0, 24]")
        for name in ("sleep_quality", "stress_level", "nutrition_rating"):
            value = getattr(self, name)
            if value is not None and not 1 <= value <= 5:
                raise ValueError(f"{name} must be in [1, 5], got {value}")
        if self.previous_session_rpe is not None and not 1 <= self.previous_session_rpe <= 10:
            raise ValueError("previous_session_rpe must be in [1, 10]")
        if self.days_since_last_session is not None and self.days_since_last_session < 0:
            raise ValueError("days_since_last_session must be non-negative")


@dataclass
class ReadinessInterpretation:
    level: ReadinessLevel
    message: str
    recommendation: str


@dataclass
class ReadinessScore:
    """A 0-100 readiness score with its interpretation."""

    score: int
    interpretation: ReadinessInterpretation


@dataclass
class FatigueState:
    """
    Rolling fatigue accumulator for one training block.

    fatigue is always in [0, 100].
    """

    fatigue: float = 0.0
    last_session_date: str | None = None
    week_in_block: int = 1
    total_weeks: int = 5
    deload_week: int = 5

    def __post_init__(self) -> None:
        if not 0 <= self.fatigue <= 100:
            raise ValueError("fatigue must be in [0, 100]")
        if self.last_session_date is not None:
            _validate_date(self.last_session_date)
        if self.week_in_block < 1 or self.total_weeks < 1:
            raise ValueError("week_in_block and total_weeks must be positive")


@dataclass
class SessionSummary:
    """Per-session inputs for deload checks."""

    session_rpe: float
    completion_percent: float  # 0-100 of prescribed reps achieved

    def __post_init__(self) -> None:
        if not 1 <= self.session_rpe <= 10:
            raise ValueError("session_rpe must be in [1, 10]")
        if self.completion_percent < 0:
            raise ValueError("completion_percent must be non-negative")


@dataclass
class DeloadDecision:
    should_deload: bool
    reason: str
    urgency: Urgency


@dataclass
class FatigueForecast:
    projected_fatigue: int
    band: Literal["recover", "push", "maintain", "reduce", "deload"]
    recommendation: str


# =============================================================================
# INJURIES AND SWAPS
# =============================================================================


@dataclass(frozen=True)
class InjuryContext:
    """A currently reported injury.  Severity: 1 mild, 2 moderate, 3 severe."""

    area: str
    severity: int = 2

    def __post_init__(self) -> None:
        if self.area not in INJURY_AREAS:
            raise ValueError(f"Unknown injury area: {self.area!r}")
        if isinstance(self.severity, bool) or self.severity not in (1, 2, 3):
            raise ValueError(f"Injury severity must be 1, 2 or 3, got {self.severity!r}")


@dataclass
class SafeAlternative:
    """A ranked substitute for an exercise under the current injuries."""

    exercise: ExerciseMetadata
    risk: InjuryRisk
    match_score: int
    reason: str
    safety_note: str | None = None


@dataclass
class SwapResult:
    """Outcome for one workout slot that needed attention."""

    original_id: str
    original_name: str
    replacement: ExerciseMetadata | None
    reason: str
    action: SwapAction


# =============================================================================
# VARIETY
# =============================================================================


@dataclass
class VarietyPreferences:
    """How aggressively to rotate exercises within a muscle group."""

    level: VarietyLevel = "medium"
    rotation_frequency: int = 2
    min_pool_size: int = 5
    prioritize_top_tier: bool = True

    def __post_init__(self) -> None:
        if self.level not in VARIETY_LEVELS:
            raise ValueError(f"Invalid variety level: {self.level}")
        if self.rotation_frequency < 0:
            raise ValueError("rotation_frequency must be non-negative")
        if self.min_pool_size < 0:
            raise ValueError("min_pool_size must be non-negative")


@dataclass
class UsageRecord:
    """One use of an exercise for a muscle group."""

    exercise_id: str
    muscle_group: str
    used_at: str  # ISO date
    session_id: str | None = None

    def __post_init__(self) -> None:
        _validate_date(self.used_at)


# =============================================================================
# DISCOMFORT
# =============================================================================


@dataclass
class DiscomfortEntry:
    """Discomfort reported during a set."""

    body_part: str
    severity: DiscomfortSeverity
    logged_at: str  # ISO date
    exercise_id: str = ""
    exercise_name: str = ""
    set_number: int = 1
    weight_kg: float = 0.0

    def __post_init__(self) -> None:
        if self.body_part not in DISCOMFORT_BODY_PARTS:
            raise ValueError(f"Unknown body part: {self.body_part!r}")
        if self.severity not in DISCOMFORT_SEVERITIES:
            raise ValueError(f"Invalid discomfort severity: {self.severity!r}")
        _validate_date(self.logged_at)


@dataclass
class DiscomfortPattern:
    body_part: str
    occurrences: int
    days_span: int
    average_severity: DiscomfortSeverity
    exercises: list[str]
    suggests_injury: bool
    suggested_injury_type: str | None = None  # InjuryType id


@dataclass
class InjuryCreationPrompt:
    body_part: str
    suggested_injury_type: str
    message: str
    occurrence_count: int
    days_span: int


@dataclass
class PainWarning:
    title: str
    message: str
    actions: list[str]


@dataclass
class DiscomfortLogResult:
    """What the caller should show after a discomfort log."""

    pain_warning: PainWarning | None = None
    injury_prompt: InjuryCreationPrompt | None = None


# =============================================================================
# STORED ATHLETE PROFILE
# =============================================================================


@dataclass
class AthleteProfile:
    """
    Persistent per-athlete settings (profile.json).

    History and discomfort are stored separately as JSONL.
    """

    total_mass_kg: float
    body_fat_pct: float
    height_cm: float
    experience: Experience = "novice"
    training_age_years: float = 0.0
    name: str = "default"
    calibrated_maxes: list[EstimatedMax] = field(default_factory=list)
    regional_data: RegionalData | None = None
    injuries: list[InjuryContext] = field(default_factory=list)
    fatigue: FatigueState = field(default_factory=FatigueState)
    variety: VarietyPreferences | None = None

    def __post_init__(self) -> None:
        # Delegate range checks to BodyComposition
        BodyComposition(self.total_mass_kg, self.body_fat_pct, self.height_cm)
        if self.experience not in EXPERIENCE_LEVELS:
            raise ValueError(f"Invalid experience: {self.experience}")
        if self.training_age_years < 0:
            raise ValueError("training_age_years must be non-negative")
        if not self.name.strip():
            raise ValueError("name must be non-empty")

    @property
    def body_composition(self) -> BodyComposition:
        return BodyComposition(self.total_mass_kg, self.body_fat_pct, self.height_cm)
