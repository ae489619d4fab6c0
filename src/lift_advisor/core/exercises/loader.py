"""
YAML -> ExerciseMetadata loader.

Loads the exercise catalog from the YAML files bundled in
``src/lift_advisor/catalog/``.  Each file (e.g. chest.yaml) holds an
``exercises:`` list whose items match the ExerciseMetadata schema.

User overrides: place YAML files of the same shape in
``~/.lift-advisor/catalog/``.  Entries are matched by exercise_id and
deep-merged over the bundled entry, so only changed keys need to be listed.
Entries with a new exercise_id add exercises.

Usage (internal, called by registry.py):
    from .loader import load_catalog_from_yaml
    catalog = load_catalog_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import yaml

from .base import ExerciseMetadata

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {
        "exercise_id",
        "name",
        "primary_muscle",
        "mechanic",
        "movement_pattern",
        "equipment",
        "default_rep_range",
    }
)


def exercise_from_dict(d: dict) -> ExerciseMetadata:
    """Convert a raw dict (from YAML) to an ExerciseMetadata.

    Raises ValueError if any required field is absent or malformed.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"ExerciseMetadata missing fields: {sorted(missing)}")

    rep_range = list(d["default_rep_range"])
    if len(rep_range) != 2:
        raise ValueError(f"default_rep_range must have two values, got {rep_range}")

    mechanic = str(d["mechanic"])
    default_category = "isolation" if mechanic == "isolation" else "compound_accessory"
    tier = d.get("hypertrophy_tier")

    return ExerciseMetadata(
        exercise_id=str(d["exercise_id"]),
        name=str(d["name"]),
        primary_muscle=str(d["primary_muscle"]).lower(),
        secondary_muscles=tuple(str(m).lower() for m in d.get("secondary_muscles", []) or []),
        mechanic=mechanic,
        movement_pattern=str(d["movement_pattern"]),
        equipment=tuple(str(e).lower() for e in d["equipment"] or []),
        category=str(d.get("category", default_category)),
        unilateral=bool(d.get("unilateral", False)),
        default_rep_range=(int(rep_range[0]), int(rep_range[1])),
        hypertrophy_tier=str(tier) if tier is not None else None,
        tags=tuple(str(t) for t in d.get("tags", []) or []),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} (with a warning) if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-advisor: cannot read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _entries(raw: dict) -> list[dict]:
    items = raw.get("exercises", [])
    return [e for e in items if isinstance(e, dict)] if isinstance(items, list) else []


def _get_bundled_catalog_dir() -> Path | None:
    """Return path to the bundled catalog/ data directory, or None if not found."""
    # loader.py lives at src/lift_advisor/core/exercises/loader.py
    # three levels up -> src/lift_advisor/
    candidate = Path(__file__).parent.parent.parent / "catalog"
    return candidate if candidate.is_dir() else None


def _get_user_catalog_dir() -> Path | None:
    """Return ~/.lift-advisor/catalog/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-advisor" / "catalog"
    return p if p.is_dir() else None


def load_catalog_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, ExerciseMetadata] | None:
    """Return {exercise_id: ExerciseMetadata} loaded from the catalog files.

    Args:
        bundled_dir: Directory of bundled catalog files (default: package data)
        user_dir: Directory of user overrides (default: ~/.lift-advisor/catalog)

    Returns:
        The catalog, or None when no file yields a valid exercise.  Invalid
        entries are skipped with a warning rather than raising.
    """
    bundled_dir = bundled_dir if bundled_dir is not None else _get_bundled_catalog_dir()
    user_dir = user_dir if user_dir is not None else _get_user_catalog_dir()

    if bundled_dir is None and user_dir is None:
        return None

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_files: dict[str, Path] = {}
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            user_files[p.stem] = p

    raw_by_id: dict[str, dict] = {}
    order: list[str] = []

    def _add(entry: dict, source: str) -> None:
        ex_id = entry.get("exercise_id")
        if not ex_id:
            warnings.warn(
                f"lift-advisor: catalog entry without exercise_id in '{source}'",
                stacklevel=3,
            )
            return
        ex_id = str(ex_id)
        if ex_id in raw_by_id:
            raw_by_id[ex_id] = _deep_merge(raw_by_id[ex_id], entry)
        else:
            raw_by_id[ex_id] = dict(entry)
            order.append(ex_id)

    for stem, path in stems.items():
        for entry in _entries(_load_yaml_file(path)):
            _add(entry, stem)

    # User files are applied after all bundled files so they always win
    for stem, path in user_files.items():
        for entry in _entries(_load_yaml_file(path)):
            _add(entry, f"user:{stem}")

    result: dict[str, ExerciseMetadata] = {}
    for ex_id in order:
        try:
            result[ex_id] = exercise_from_dict(raw_by_id[ex_id])
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"lift-advisor: skipping exercise '{ex_id}': {exc}",
                stacklevel=2,
            )

    return result if result else None
