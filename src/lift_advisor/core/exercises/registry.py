"""
Exercise catalog registry.

Use get_exercise() to look up an ExerciseMetadata by its exercise_id and
find_exercise_by_name() for free-text names typed by the user.

The catalog is loaded from the bundled ``src/lift_advisor/catalog/*.yaml``
files on first use.  If nothing can be loaded a RuntimeError is raised;
the application cannot recommend substitutes without a catalog.

User overrides: place matching files in ``~/.lift-advisor/catalog/``.
"""

from functools import lru_cache

from .base import ExerciseMetadata


@lru_cache(maxsize=1)
def get_catalog() -> dict[str, ExerciseMetadata]:
    """Return the full catalog keyed by exercise_id."""
    from .loader import load_catalog_from_yaml

    loaded = load_catalog_from_yaml()
    if not loaded:
        raise RuntimeError(
            "lift-advisor: no exercises could be loaded from YAML. "
            "Check that src/lift_advisor/catalog/*.yaml files are present and valid."
        )
    return loaded


def reload_catalog() -> dict[str, ExerciseMetadata]:
    """Drop the cached catalog and load it again (after editing overrides)."""
    get_catalog.cache_clear()
    return get_catalog()


def all_exercises() -> list[ExerciseMetadata]:
    return list(get_catalog().values())


def get_exercise(exercise_id: str) -> ExerciseMetadata:
    """
    Return the ExerciseMetadata for the given exercise_id.

    Args:
        exercise_id: Catalog id, e.g. "barbell_bench_press"

    Returns:
        ExerciseMetadata for the requested exercise

    Raises:
        ValueError: If exercise_id is not in the catalog
    """
    catalog = get_catalog()
    if exercise_id not in catalog:
        raise ValueError(f"Unknown exercise '{exercise_id}'. See 'lift-advisor catalog'.")
    return catalog[exercise_id]


def find_exercise_by_name(name: str) -> ExerciseMetadata | None:
    """Case-insensitive lookup by display name or id; None when absent."""
    key = name.strip().lower()
    for ex in get_catalog().values():
        if ex.name.lower() == key or ex.exercise_id == key.replace(" ", "_"):
            return ex
    return None


def exercises_for_muscle(muscle: str) -> list[ExerciseMetadata]:
    """All exercises whose primary muscle is *muscle*."""
    key = muscle.strip().lower()
    return [ex for ex in get_catalog().values() if ex.primary_muscle == key]
