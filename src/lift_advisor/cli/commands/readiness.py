"""Readiness and fatigue commands: readiness, fatigue, deload, forecast."""

import json
from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_deload_policy, load_forecast_policy
from ...core.metrics import days_between, today_str
from ...core.models import ReadinessInput
from ...core.readiness import (
    calculate_fatigue_after_rest,
    forecast_weekly_fatigue,
    score_readiness,
    should_trigger_deload,
    summarize_sessions,
)
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


@app.command()
def readiness(
    sleep_hours: Annotated[
        Optional[float],
        typer.Option("--sleep", help="Hours slept last night"),
    ] = None,
    sleep_quality: Annotated[
        Optional[int],
        typer.Option("--sleep-quality", help="Sleep quality 1-5"),
    ] = None,
    stress: Annotated[
        Optional[int],
        typer.Option("--stress", help="Stress level 1-5 (5 = most stressed)"),
    ] = None,
    nutrition: Annotated[
        Optional[int],
        typer.Option("--nutrition", help="Nutrition rating 1-5"),
    ] = None,
    previous_rpe: Annotated[
        Optional[float],
        typer.Option("--previous-rpe", help="RPE of the last session (default: from history)"),
    ] = None,
    rest_days: Annotated[
        Optional[int],
        typer.Option("--rest-days", help="Days since the last session (default: from history)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Score today's readiness from a quick check-in.

    Without --previous-rpe / --rest-days the values are taken from the
    logged history when a data directory exists.
    """
    store = get_store(data_dir)

    if previous_rpe is None or rest_days is None:
        try:
            entries = store.load_history() if store.history_path.exists() else []
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        sessions = summarize_sessions(entries)
        if previous_rpe is None and sessions:
            previous_rpe = sessions[-1].session_rpe
        if rest_days is None and entries:
            rest_days = max(0, days_between(entries[-1].date, today_str()))

    try:
        check_in = ReadinessInput(
            sleep_hours=sleep_hours,
            sleep_quality=sleep_quality,
            stress_level=stress,
            nutrition_rating=nutrition,
            previous_session_rpe=previous_rpe,
            days_since_last_session=rest_days,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    result = score_readiness(check_in)

    if json_out:
        print(json.dumps({
            "score": result.score,
            "level": result.interpretation.level,
            "message": result.interpretation.message,
            "recommendation": result.interpretation.recommendation,
        }, indent=2))
        return

    views.print_readiness(result)


@app.command()
def fatigue(
    week: Annotated[
        Optional[int],
        typer.Option("--week", help="Set the current week of the training block"),
    ] = None,
    weeks: Annotated[
        Optional[int],
        typer.Option("--block-weeks", help="Set the block length in weeks (deload on the last)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the fatigue accumulator, optionally moving through the block.
    """
    store = get_store(data_dir)

    try:
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    state = profile.fatigue
    if week is not None or weeks is not None:
        try:
            total = weeks if weeks is not None else state.total_weeks
            state = replace(
                state,
                week_in_block=week if week is not None else state.week_in_block,
                total_weeks=total,
                deload_week=total if weeks is not None else state.deload_week,
            )
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        store.save_profile(replace(profile, fatigue=state))

    current = state.fatigue
    if state.last_session_date is not None:
        rest = max(0, days_between(state.last_session_date, today_str()))
        current = calculate_fatigue_after_rest(state.fatigue, rest)

    if json_out:
        print(json.dumps({
            "fatigue": round(current, 1),
            "fatigue_at_last_session": state.fatigue,
            "last_session_date": state.last_session_date,
            "week_in_block": state.week_in_block,
            "total_weeks": state.total_weeks,
            "deload_week": state.deload_week,
        }, indent=2))
        return

    views.console.print()
    views.console.print(views.format_fatigue_display(replace(state, fatigue=current)))


@app.command()
def deload(
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Check whether the next week should be a deload.
    """
    store = get_store(data_dir)

    try:
        profile = store.load_profile()
        sessions = summarize_sessions(store.load_history())
        policy = load_deload_policy()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    state = profile.fatigue
    decision = should_trigger_deload(
        state.fatigue, state.week_in_block, state.deload_week, sessions, policy
    )

    if json_out:
        print(json.dumps({
            "should_deload": decision.should_deload,
            "reason": decision.reason,
            "urgency": decision.urgency,
        }, indent=2))
        return

    views.print_deload(decision)


@app.command()
def forecast(
    sessions: Annotated[
        int,
        typer.Option("--sessions", "-n", help="Sessions planned this week"),
    ] = 3,
    rpe: Annotated[
        Optional[float],
        typer.Option("--rpe", help="Expected average session RPE"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Project fatigue at the end of the coming week.
    """
    store = get_store(data_dir)

    try:
        profile = store.load_profile()
        policy = load_forecast_policy()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        result = forecast_weekly_fatigue(profile.fatigue.fatigue, sessions, rpe, policy)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "projected_fatigue": result.projected_fatigue,
            "band": result.band,
            "recommendation": result.recommendation,
        }, indent=2))
        return

    views.print_forecast(result)
