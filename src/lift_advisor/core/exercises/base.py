"""
Base type for exercise catalog records.

ExerciseMetadata is read-only reference data: the injury classifier, the
swap engine, the variety selector and the estimation engine all consume it
but never modify it.
"""

from dataclasses import dataclass, field

MECHANICS = ("compound", "isolation")
HYPERTROPHY_TIERS = ("S", "A", "B", "C", "D")


@dataclass(frozen=True)
class ExerciseMetadata:
    """
    One exercise in the catalog.

    category refines mechanic for per-set fatigue modelling:
    compound_primary (heavy barbell lifts), compound_accessory, isolation.
    """

    # Identity
    exercise_id: str              # e.g. "barbell_bench_press"
    name: str                     # e.g. "Barbell Bench Press"

    # Muscles
    primary_muscle: str           # e.g. "chest"
    secondary_muscles: tuple[str, ...] = ()

    # Movement
    mechanic: str = "compound"    # "compound" | "isolation"
    movement_pattern: str = ""    # e.g. "horizontal_push", "hinge", "squat"
    equipment: tuple[str, ...] = ()
    category: str = "compound_accessory"
    unilateral: bool = False

    # Programming defaults
    default_rep_range: tuple[int, int] = (8, 12)
    hypertrophy_tier: str | None = None

    tags: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.mechanic not in MECHANICS:
            raise ValueError(f"Invalid mechanic for {self.exercise_id}: {self.mechanic}")
        if self.category not in ("isolation", "compound_accessory", "compound_primary"):
            raise ValueError(f"Invalid category for {self.exercise_id}: {self.category}")
        if self.hypertrophy_tier is not None and self.hypertrophy_tier not in HYPERTROPHY_TIERS:
            raise ValueError(
                f"Invalid hypertrophy_tier for {self.exercise_id}: {self.hypertrophy_tier}"
            )
        low, high = self.default_rep_range
        if low < 1 or high < low:
            raise ValueError(f"Invalid default_rep_range for {self.exercise_id}")

    @property
    def primary_equipment(self) -> str:
        """First listed equipment item, or "" when none is required."""
        return self.equipment[0] if self.equipment else ""
