"""
Exercise catalog for lift-advisor.

Each exercise is described by an ExerciseMetadata record loaded from the
bundled YAML catalog (plus optional user overrides).
"""

from .base import ExerciseMetadata
from .registry import (
    all_exercises,
    exercises_for_muscle,
    find_exercise_by_name,
    get_catalog,
    get_exercise,
)

__all__ = [
    "ExerciseMetadata",
    "all_exercises",
    "exercises_for_muscle",
    "find_exercise_by_name",
    "get_catalog",
    "get_exercise",
]
