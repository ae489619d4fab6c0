"""Exercise selection commands: pick, variety, catalog."""

import json
import random
from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...core.exercises import all_exercises, exercises_for_muscle
from ...core.injury import filter_for_injury
from ...core.models import VARIETY_LEVELS, VarietyPreferences
from ...core.variety import NullCache, VarietySelector, sets_for_exercise
from ...io.athlete_store import AthleteStore
from ...io.serializers import ValidationError, variety_preferences_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


def _selector(store: AthleteStore, seed: int | None = None) -> VarietySelector:
    """VarietySelector over the store; no caching across a single CLI run."""

    def save(_user_id: str, prefs: VarietyPreferences) -> None:
        store.update_profile(lambda p: replace(p, variety=prefs))

    return VarietySelector(
        load_preferences=lambda _user_id: store.load_profile().variety,
        load_usage=lambda _user_id: store.load_usage(),
        save_preferences=save,
        preferences_cache=NullCache(),
        usage_cache=NullCache(),
        rng=random.Random(seed) if seed is not None else None,
    )


@app.command()
def pick(
    muscle: Annotated[str, typer.Argument(help="Primary muscle, e.g. chest, quads")],
    sets: Annotated[
        int,
        typer.Option("--sets", help="Weekly sets to cover for this muscle"),
    ] = 8,
    max_exercises: Annotated[
        int,
        typer.Option("--max", help="Maximum exercises to pick"),
    ] = 3,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Shuffle within groups using this random seed"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Pick exercises for a muscle group, rotating out recently used ones.

    Exercises unsafe for recorded injuries are excluded first.
    """
    store = get_store(data_dir)
    selector = _selector(store, seed)

    try:
        profile = store.load_profile()
        candidates = filter_for_injury(exercises_for_muscle(muscle), profile.injuries)
        recent = selector.recently_used_ids(profile.name, muscle)
        picks = selector.select(profile.name, candidates, muscle, sets, max_exercises)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    per_exercise = [sets_for_exercise(ex) for ex in picks]

    if json_out:
        print(json.dumps([
            {
                "exercise": ex.exercise_id,
                "name": ex.name,
                "sets": n,
                "tier": ex.hypertrophy_tier,
                "recently_used": ex.exercise_id in recent,
            }
            for ex, n in zip(picks, per_exercise)
        ], indent=2))
        return

    if not picks:
        views.print_warning(f"No safe exercises found for '{muscle}'")
        return
    views.console.print(views.format_picks_table(picks, per_exercise, recent))


@app.command()
def variety(
    level: Annotated[
        Optional[str],
        typer.Option("--level", "-l", help="low, medium or high"),
    ] = None,
    top_tier: Annotated[
        Optional[bool],
        typer.Option("--top-tier/--no-top-tier", help="Prefer S/A tier exercises"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show or change exercise-variety preferences.
    """
    store = get_store(data_dir)
    selector = _selector(store)

    if level is not None and level not in VARIETY_LEVELS:
        views.print_error(f"Level must be one of: {', '.join(VARIETY_LEVELS)}")
        raise typer.Exit(1)

    changes: dict = {}
    if level is not None:
        changes["level"] = level
    if top_tier is not None:
        changes["prioritize_top_tier"] = top_tier

    try:
        name = store.load_profile().name
        if changes:
            prefs = selector.update_preferences(name, **changes)
        else:
            prefs = selector.get_preferences(name)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(variety_preferences_to_dict(prefs), indent=2))
        return

    if changes:
        views.print_success("Saved variety preferences")
    views.console.print(
        f"Variety: [bold]{prefs.level}[/bold] (rotate out last {prefs.rotation_frequency} sessions, "
        f"min pool {prefs.min_pool_size}, top tier first: {'yes' if prefs.prioritize_top_tier else 'no'})"
    )


@app.command()
def catalog(
    muscle: Annotated[
        Optional[str],
        typer.Option("--muscle", "-m", help="Only exercises for this primary muscle"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise catalog.
    """
    exercises = exercises_for_muscle(muscle) if muscle else all_exercises()

    if json_out:
        print(json.dumps([
            {
                "id": ex.exercise_id,
                "name": ex.name,
                "primary_muscle": ex.primary_muscle,
                "mechanic": ex.mechanic,
                "movement_pattern": ex.movement_pattern,
                "tier": ex.hypertrophy_tier,
                "rep_range": list(ex.default_rep_range),
            }
            for ex in exercises
        ], indent=2))
        return

    views.console.print(views.format_catalog_table(exercises))
