"""Injury commands: injury-add, injury-remove, injuries, risk, alternatives, swap."""

import json
from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...core.exercises import ExerciseMetadata, all_exercises, find_exercise_by_name
from ...core.injury import (
    auto_swap_for_injuries,
    get_injury_label,
    get_injury_risk,
    get_safe_alternatives,
    worst_risk,
)
from ...core.injury_types import INJURY_TYPES, injury_context_for_type
from ...core.models import INJURY_AREAS, InjuryContext
from ...io.athlete_store import AthleteStore
from ...io.serializers import ValidationError, injury_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


def _lookup(name: str) -> ExerciseMetadata:
    exercise = find_exercise_by_name(name)
    if exercise is None:
        views.print_error(f"Unknown exercise '{name}'. See 'lift-advisor catalog'.")
        raise typer.Exit(1)
    return exercise


def _load_injuries(store: AthleteStore) -> list[InjuryContext]:
    try:
        return store.load_profile().injuries
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command("injury-add")
def injury_add(
    area: Annotated[
        Optional[str],
        typer.Option("--area", "-a", help="Injury area, e.g. lower_back, knee_left"),
    ] = None,
    injury_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Injury type id, e.g. meniscus_tear (see 'injuries --types')"),
    ] = None,
    side: Annotated[
        Optional[str],
        typer.Option("--side", help="left/right, used with --type"),
    ] = None,
    severity: Annotated[
        Optional[int],
        typer.Option("--severity", help="1 mild, 2 moderate, 3 severe"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Record a current injury.

    Give either --area, or --type (optionally with --side) to derive the
    area and default severity from a known injury type.  An injury on the
    same area replaces the previous one.
    """
    store = get_store(data_dir)

    if (area is None) == (injury_type is None):
        views.print_error("Give exactly one of --area or --type")
        raise typer.Exit(1)

    try:
        if injury_type is not None:
            injury = injury_context_for_type(injury_type, side, severity)  # type: ignore[arg-type]
        else:
            injury = InjuryContext(area=area, severity=severity if severity is not None else 2)  # type: ignore[arg-type]
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    injuries = [i for i in profile.injuries if i.area != injury.area] + [injury]
    store.save_profile(replace(profile, injuries=injuries))
    views.print_success(
        f"Recorded {get_injury_label(injury.area)} injury (severity {injury.severity})"
    )


@app.command("injury-remove")
def injury_remove(
    area: Annotated[str, typer.Argument(help="Injury area to clear, e.g. lower_back")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Clear a recovered injury.
    """
    store = get_store(data_dir)

    try:
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    remaining = [i for i in profile.injuries if i.area != area]
    if len(remaining) == len(profile.injuries):
        views.print_error(f"No injury recorded for '{area}'")
        raise typer.Exit(1)

    store.save_profile(replace(profile, injuries=remaining))
    views.print_success(f"Cleared {get_injury_label(area)} injury")


@app.command()
def injuries(
    types: Annotated[
        bool,
        typer.Option("--types", help="List known injury types instead"),
    ] = False,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    List current injuries.
    """
    if types:
        if json_out:
            print(json.dumps([
                {"id": t.type_id, "name": t.name, "area": t.area, "severity": t.default_severity}
                for t in INJURY_TYPES
            ], indent=2))
            return
        for t in INJURY_TYPES:
            views.console.print(f"[cyan]{t.type_id}[/cyan]  {t.name} ({t.area}): {t.description}")
        return

    current = _load_injuries(get_store(data_dir))

    if json_out:
        print(json.dumps([injury_to_dict(i) for i in current], indent=2))
        return

    if not current:
        views.print_info("No injuries recorded.")
        return
    views.console.print(views.format_injuries_table(current))


@app.command()
def risk(
    exercise: Annotated[str, typer.Argument(help="Exercise name or id")],
    area: Annotated[
        Optional[str],
        typer.Option("--area", "-a", help="Check one area instead of recorded injuries"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Classify an exercise as safe, caution or avoid.
    """
    meta = _lookup(exercise)

    if area is not None:
        if area not in INJURY_AREAS:
            views.print_error(f"Unknown injury area '{area}'")
            raise typer.Exit(1)
        per_area = {area: get_injury_risk(meta, area)}
        overall = per_area[area]
    else:
        current = _load_injuries(get_store(data_dir))
        per_area = {i.area: get_injury_risk(meta, i.area) for i in current}
        overall = worst_risk(meta, current)

    if json_out:
        print(json.dumps({"exercise": meta.exercise_id, "risk": overall, "areas": per_area}, indent=2))
        return

    views.console.print(f"{meta.name}: [bold]{overall}[/bold]")
    for a, r in per_area.items():
        views.console.print(f"  {get_injury_label(a)}: {r}")


@app.command()
def alternatives(
    exercise: Annotated[str, typer.Argument(help="Exercise name or id")],
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Rank safe substitutes for an exercise under the recorded injuries.
    """
    meta = _lookup(exercise)
    current = _load_injuries(get_store(data_dir))

    ranked = get_safe_alternatives(meta, all_exercises(), current)

    if json_out:
        print(json.dumps([
            {
                "exercise": alt.exercise.exercise_id,
                "name": alt.exercise.name,
                "risk": alt.risk,
                "match_score": alt.match_score,
                "reason": alt.reason,
                "safety_note": alt.safety_note,
            }
            for alt in ranked
        ], indent=2))
        return

    if not ranked:
        views.print_warning(f"No safe alternative for {meta.name}")
        return
    views.console.print(views.format_alternatives_table(meta, ranked))


@app.command()
def swap(
    exercises: Annotated[
        list[str],
        typer.Argument(help="The planned workout, one exercise name or id per argument"),
    ],
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Swap or remove the exercises of a planned workout that your injuries rule out.
    """
    workout = [(str(i), _lookup(name)) for i, name in enumerate(exercises, 1)]
    current = _load_injuries(get_store(data_dir))

    results = auto_swap_for_injuries(workout, all_exercises(), current)

    if json_out:
        print(json.dumps([
            {
                "slot": r.original_id,
                "original": r.original_name,
                "action": r.action,
                "replacement": r.replacement.exercise_id if r.replacement is not None else None,
                "reason": r.reason,
            }
            for r in results
        ], indent=2))
        return

    if not results:
        views.print_success("Workout is safe for your current injuries.")
        return
    views.console.print(views.format_swaps_table(results))
