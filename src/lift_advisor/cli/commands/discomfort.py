"""Discomfort commands: discomfort-log, discomfort-patterns."""

import json
from typing import Annotated, Optional

import typer

from ...core.discomfort import (
    detect_discomfort_patterns,
    process_discomfort_log,
    suggested_injury_types,
)
from ...core.exercises import find_exercise_by_name
from ...core.metrics import today_str
from ...core.models import DISCOMFORT_BODY_PARTS, DISCOMFORT_SEVERITIES, DiscomfortEntry
from ...io.serializers import ValidationError, validate_date
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


@app.command("discomfort-log")
def discomfort_log(
    body_part: Annotated[str, typer.Argument(help="Body part, e.g. lower_back, left_knee")],
    severity: Annotated[str, typer.Argument(help="twinge, discomfort or pain")],
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Exercise being performed"),
    ] = None,
    set_number: Annotated[
        int,
        typer.Option("--set", help="Set number"),
    ] = 1,
    weight_kg: Annotated[
        float,
        typer.Option("--weight", "-w", help="Weight in kg"),
    ] = 0.0,
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Date (YYYY-MM-DD, default today)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log discomfort felt during a set.

    Pain triggers a stop warning; a third report on the same body part
    within two weeks suggests recording an injury.
    """
    store = get_store(data_dir)

    if body_part not in DISCOMFORT_BODY_PARTS:
        views.print_error(f"Body part must be one of: {', '.join(DISCOMFORT_BODY_PARTS)}")
        raise typer.Exit(1)
    if severity not in DISCOMFORT_SEVERITIES:
        views.print_error(f"Severity must be one of: {', '.join(DISCOMFORT_SEVERITIES)}")
        raise typer.Exit(1)

    meta = find_exercise_by_name(exercise) if exercise else None

    try:
        logged_at = validate_date(date) if date else today_str()
        entry = DiscomfortEntry(
            body_part=body_part,
            severity=severity,  # type: ignore[arg-type]
            logged_at=logged_at,
            exercise_id=meta.exercise_id if meta is not None else "",
            exercise_name=meta.name if meta is not None else (exercise or ""),
            set_number=set_number,
            weight_kg=weight_kg,
        )
        previous = store.load_discomfort()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    result = process_discomfort_log(entry, previous)
    store.append_discomfort(entry)

    if json_out:
        data: dict = {"logged": True, "pain_warning": None, "injury_prompt": None}
        if result.pain_warning is not None:
            data["pain_warning"] = {
                "title": result.pain_warning.title,
                "message": result.pain_warning.message,
                "actions": result.pain_warning.actions,
            }
        if result.injury_prompt is not None:
            data["injury_prompt"] = {
                "body_part": result.injury_prompt.body_part,
                "suggested_injury_type": result.injury_prompt.suggested_injury_type,
                "message": result.injury_prompt.message,
                "occurrences": result.injury_prompt.occurrence_count,
                "days_span": result.injury_prompt.days_span,
            }
        print(json.dumps(data, indent=2))
        return

    views.print_success(f"Logged {severity} on {body_part.replace('_', ' ')}")
    views.print_discomfort_result(result)


@app.command("discomfort-patterns")
def discomfort_patterns(
    window_days: Annotated[
        int,
        typer.Option("--window", help="Look back this many days"),
    ] = 14,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show recurring discomfort by body part.
    """
    store = get_store(data_dir)

    try:
        entries = store.load_discomfort()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    patterns = detect_discomfort_patterns(entries, window_days)

    if json_out:
        print(json.dumps([
            {
                "body_part": p.body_part,
                "occurrences": p.occurrences,
                "days_span": p.days_span,
                "average_severity": p.average_severity,
                "exercises": p.exercises,
                "suggests_injury": p.suggests_injury,
                "suggested_injury_type": p.suggested_injury_type,
                "possible_injury_types": [t.type_id for t in suggested_injury_types(p.body_part)],
            }
            for p in patterns
        ], indent=2))
        return

    if not patterns:
        views.print_info(f"No recurring discomfort in the last {window_days} days.")
        return
    views.console.print(views.format_patterns_table(patterns))
