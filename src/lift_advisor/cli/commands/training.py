"""Training commands: log-workout, history, delete-record, recommend, e1rm."""

import json
from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...core.exercises import find_exercise_by_name
from ...core.injury import needs_swap
from ...core.metrics import estimate_1rm, today_str, weight_increment_for
from ...core.models import ExerciseHistoryEntry, ProgressionTargets
from ...core.readiness import adjust_targets_for_readiness, record_session, summarize_sessions
from ...core.safety import apply_rir_floor, get_protect_warning
from ...core.strength import (
    detect_sandbagging,
    estimate_max,
    exercise_category,
    recommend_working_weight,
    update_estimated_max,
)
from ...io.serializers import ValidationError, parse_sets_string, validate_date
from .. import views
from ..app import DataDirOption, JsonOption, app, build_strength_profile, get_store

DEFAULT_REST_SECONDS = 120


def _parse_rep_range(text: str) -> tuple[int, int]:
    """Parse "8-12" or "5" into a (min, max) rep range."""
    try:
        if "-" in text:
            low, high = (int(p) for p in text.split("-", 1))
        else:
            low = high = int(text)
    except ValueError as e:
        raise ValidationError(f"Invalid rep range: '{text}'. Use e.g. 8-12") from e
    if low < 1 or high < low:
        raise ValidationError(f"Invalid rep range: '{text}'")
    return low, high


@app.command("log-workout")
def log_workout(
    exercise: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Barbell Bench Press'")],
    sets: Annotated[
        str,
        typer.Argument(help="Sets as weightxreps[@rpe], comma separated, e.g. '100x5@8, 3*100x5'"),
    ],
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Workout date (YYYY-MM-DD, default today)"),
    ] = None,
    session_id: Annotated[
        Optional[str],
        typer.Option("--session", "-s", help="Session id when logging several sessions per day"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log one exercise from a workout.

    The first exercise logged for a session also updates the fatigue
    accumulator.  Sets that look sandbagged or that move the estimated
    1RM by more than 5% are reported.
    """
    store = get_store(data_dir)

    try:
        workout_date = validate_date(date) if date else today_str()
        parsed = parse_sets_string(sets)
        entry = ExerciseHistoryEntry(
            exercise_name=exercise, date=workout_date, sets=parsed, session_id=session_id
        )
        profile = store.load_profile()
        previous = store.load_history()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    strength = build_strength_profile(profile, previous, workout_date)
    key = exercise.strip().lower()
    current = next(
        (m for m in strength.known_maxes if m.exercise.strip().lower() == key), None
    )

    store.append_entry(entry)

    session_key = session_id or workout_date
    is_new_session = all((h.session_id or h.date) != session_key for h in previous)
    if is_new_session:
        summary = summarize_sessions([entry])
        if summary:
            profile = replace(
                profile,
                fatigue=record_session(profile.fatigue, summary[0].session_rpe, workout_date),
            )
            store.save_profile(profile)

    views.print_success(f"Logged {exercise} on {workout_date}: {len(parsed)} sets")

    check = detect_sandbagging(parsed, exercise_category(exercise))
    views.print_sandbag_check(check)

    last_rpe = next((s.rpe for s in reversed(parsed) if s.rpe is not None), None)
    if last_rpe is not None:
        warning = get_protect_warning(exercise, int(round(10 - last_rpe)))
        if warning:
            views.print_warning(warning)

    updated = update_estimated_max(current, entry)
    if updated is not None:
        if current is None:
            views.print_info(f"Estimated 1RM: {updated.estimated_1rm:g} kg")
        else:
            views.print_info(
                f"Estimated 1RM updated: {current.estimated_1rm:g} → {updated.estimated_1rm:g} kg"
            )


@app.command()
def history(
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only show this exercise"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Show only the last N entries"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show logged workouts.
    """
    store = get_store(data_dir)

    try:
        entries = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise is not None:
        key = exercise.strip().lower()
        entries = [e for e in entries if e.exercise_name.strip().lower() == key]
    if limit is not None:
        entries = entries[-limit:]

    if json_out:
        print(json.dumps([
            {
                "date": e.date,
                "exercise": e.exercise_name,
                "session_id": e.session_id,
                "sets": [
                    {"weight_kg": s.weight_kg, "reps": s.reps, "rpe": s.rpe, "completed": s.completed}
                    for s in e.sets
                ],
            }
            for e in entries
        ], indent=2))
        return

    views.print_history(entries)


@app.command("delete-record")
def delete_record(
    record_id: Annotated[int, typer.Argument(help="Entry number from 'history'")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Delete without prompting"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a history entry by its number.
    """
    store = get_store(data_dir)

    try:
        entries = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if record_id < 1 or record_id > len(entries):
        views.print_error(f"No entry #{record_id} (history has {len(entries)} entries)")
        raise typer.Exit(1)

    target = entries[record_id - 1]
    views.console.print(f"Entry to delete: [bold]{target.date}[/bold] {target.exercise_name}")

    if not force and not views.confirm_action("Delete this entry?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_entry_at(record_id - 1)
    views.print_success(f"Deleted entry #{record_id}: {target.date} {target.exercise_name}")


@app.command()
def recommend(
    exercise: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Barbell Bench Press'")],
    reps: Annotated[
        Optional[str],
        typer.Option("--reps", "-r", help="Rep range, e.g. 8-12 (default: catalog range)"),
    ] = None,
    rir: Annotated[
        int,
        typer.Option("--rir", help="Reps in reserve on each set"),
    ] = 2,
    sets: Annotated[
        int,
        typer.Option("--sets", help="Number of working sets"),
    ] = 3,
    readiness_score: Annotated[
        Optional[int],
        typer.Option("--readiness", help="Today's readiness score (0-100) to scale targets"),
    ] = None,
    side: Annotated[
        Optional[str],
        typer.Option("--side", help="left/right for unilateral work"),
    ] = None,
    rest_seconds: Annotated[
        int,
        typer.Option("--rest", help="Planned rest between sets in seconds"),
    ] = DEFAULT_REST_SECONDS,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Recommend a working weight for an exercise.
    """
    store = get_store(data_dir)

    if side not in (None, "left", "right"):
        views.print_error("Side must be 'left' or 'right'")
        raise typer.Exit(1)

    meta = find_exercise_by_name(exercise)

    try:
        rep_range = _parse_rep_range(reps) if reps else (meta.default_rep_range if meta else (8, 12))
        profile = store.load_profile()
        history_entries = store.load_history()
        strength = build_strength_profile(profile, history_entries)
        rec = recommend_working_weight(
            exercise,
            rep_range,
            rir,
            strength,
            sets=sets,
            category=meta.category if meta else None,  # type: ignore[arg-type]
            side=side,  # type: ignore[arg-type]
        )
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    adjusted = None
    if readiness_score is not None:
        base = ProgressionTargets(
            weight_kg=rec.recommended_weight_kg,
            rep_range=rep_range,
            target_rir=rir,
            sets=sets,
            rest_seconds=rest_seconds,
        )
        adjusted = apply_rir_floor(
            adjust_targets_for_readiness(base, readiness_score, weight_increment_for(exercise)),
            exercise,
        )

    if json_out:
        data = {
            "exercise": rec.exercise,
            "rep_range": list(rec.rep_range),
            "target_rir": rec.target_rir,
            "recommended_weight_kg": rec.recommended_weight_kg,
            "weight_low_kg": rec.weight_low_kg,
            "weight_high_kg": rec.weight_high_kg,
            "confidence": rec.confidence,
            "source": rec.source,
            "estimated_1rm": rec.estimated_1rm,
            "rationale": rec.rationale,
            "warmup_sets": [
                {"percent": w.percent_of_working, "weight_kg": w.weight_kg, "reps": w.reps}
                for w in rec.warmup_sets
            ],
            "set_targets": [
                {
                    "set": t.set_number,
                    "reps_min": t.target_reps_min,
                    "reps_max": t.target_reps_max,
                    "expected_rpe": t.expected_rpe,
                }
                for t in rec.set_targets
            ],
        }
        if rec.finding_protocol is not None:
            data["finding_protocol"] = rec.finding_protocol.instructions
        if adjusted is not None:
            data["adjusted"] = {
                "weight_kg": adjusted.weight_kg,
                "sets": adjusted.sets,
                "target_rir": adjusted.target_rir,
                "rest_seconds": adjusted.rest_seconds,
                "progression_type": adjusted.progression_type,
                "reason": adjusted.reason,
            }
        print(json.dumps(data, indent=2))
        return

    views.print_recommendation(rec, adjusted)
    if meta is not None and needs_swap(meta, profile.injuries):
        views.print_warning(
            f"{meta.name} is risky with your current injuries. See 'lift-advisor alternatives'."
        )


@app.command()
def e1rm(
    exercise: Annotated[str, typer.Argument(help="Exercise name")],
    weight_kg: Annotated[
        Optional[float],
        typer.Option("--weight", "-w", help="Weight lifted; estimates from this set instead of history"),
    ] = None,
    reps: Annotated[
        int,
        typer.Option("--reps", "-r", help="Reps performed with --weight"),
    ] = 5,
    rpe: Annotated[
        Optional[float],
        typer.Option("--rpe", help="RPE of the set with --weight"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Estimate a 1RM from one set or from the stored profile.
    """
    if weight_kg is not None:
        value = estimate_1rm(weight_kg, reps, rpe)
        if json_out:
            print(json.dumps({"exercise": exercise, "estimated_1rm": value}, indent=2))
        else:
            views.console.print(f"{exercise}: estimated 1RM [bold]{value:g} kg[/bold]")
        return

    store = get_store(data_dir)
    try:
        strength = build_strength_profile(store.load_profile(), store.load_history())
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    est = estimate_max(exercise, strength)

    if json_out:
        print(json.dumps({
            "exercise": exercise,
            "estimated_1rm": est.estimated_1rm,
            "confidence": est.confidence,
            "source": est.source,
            "last_updated": est.last_updated,
        }, indent=2))
        return

    views.console.print(
        f"{exercise}: estimated 1RM [bold]{est.estimated_1rm:g} kg[/bold]"
        f" ({est.confidence}, {est.source})"
    )
