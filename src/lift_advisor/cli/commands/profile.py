"""Profile commands: init, calibrate, regional, show-profile."""

import json
from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...core.metrics import today_str
from ...core.models import EXPERIENCE_LEVELS, AthleteProfile, RegionalData, RegionalSegment
from ...core.regional import analyze_regional_composition, get_asymmetry_recommendations
from ...core.strength import estimated_maxes_from_calibration
from ...io.serializers import ValidationError, athlete_profile_to_dict, validate_date
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


@app.command()
def init(
    bodyweight_kg: Annotated[
        float,
        typer.Option("--bodyweight-kg", "-w", help="Current bodyweight in kg"),
    ] = 80.0,
    body_fat_pct: Annotated[
        float,
        typer.Option("--body-fat", "-b", help="Body fat percentage"),
    ] = 18.0,
    height_cm: Annotated[
        float,
        typer.Option("--height-cm", "-h", help="Height in centimeters"),
    ] = 178.0,
    experience: Annotated[
        str,
        typer.Option("--experience", "-x", help="novice, intermediate or advanced"),
    ] = "novice",
    training_age: Annotated[
        float,
        typer.Option("--training-age", help="Years of consistent training"),
    ] = 0.0,
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Athlete name"),
    ] = "default",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing profile without prompting"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Initialize athlete profile and empty logs.

    Re-running init on an existing profile keeps calibrations, injuries,
    fatigue and variety settings; only the body measurements change.
    """
    store = get_store(data_dir)

    if experience not in EXPERIENCE_LEVELS:
        views.print_error(f"Experience must be one of: {', '.join(EXPERIENCE_LEVELS)}")
        raise typer.Exit(1)

    old_profile = None
    if store.exists():
        try:
            old_profile = store.load_profile()
        except ValidationError as e:
            views.print_warning(f"Existing profile is unreadable and will be replaced ({e})")
        if not force and not views.confirm_action("Profile exists. Update measurements?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    try:
        if old_profile is not None:
            profile = replace(
                old_profile,
                total_mass_kg=bodyweight_kg,
                body_fat_pct=body_fat_pct,
                height_cm=height_cm,
                experience=experience,  # type: ignore[arg-type]
                training_age_years=training_age,
                name=name,
            )
        else:
            profile = AthleteProfile(
                total_mass_kg=bodyweight_kg,
                body_fat_pct=body_fat_pct,
                height_cm=height_cm,
                experience=experience,  # type: ignore[arg-type]
                training_age_years=training_age,
                name=name,
            )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.init()
    store.save_profile(profile)

    comp = profile.body_composition
    views.print_success(f"Saved profile to {store.profile_path}")
    views.console.print(
        f"Lean mass {comp.lean_mass_kg:.1f} kg, FFMI {comp.ffmi:.1f}"
    )


@app.command()
def calibrate(
    exercise: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Barbell Bench Press'")],
    weight_kg: Annotated[float, typer.Argument(help="Weight lifted in kg")],
    reps: Annotated[int, typer.Argument(help="Reps performed to (near) failure")],
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Test date (YYYY-MM-DD, default today)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Record a calibration test as a high-confidence known max.
    """
    store = get_store(data_dir)

    try:
        tested_on = validate_date(date) if date else today_str()
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    new_maxes = estimated_maxes_from_calibration({exercise: (weight_kg, reps)}, tested_on)
    if not new_maxes:
        views.print_error("Calibration needs a positive weight and reps")
        raise typer.Exit(1)

    key = exercise.strip().lower()
    kept = [m for m in profile.calibrated_maxes if m.exercise.strip().lower() != key]
    store.save_profile(replace(profile, calibrated_maxes=kept + new_maxes))

    views.print_success(
        f"{exercise}: estimated 1RM {new_maxes[0].estimated_1rm:g} kg (calibration, {tested_on})"
    )


@app.command("show-profile")
def show_profile(
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the stored profile and body-composition analysis.
    """
    store = get_store(data_dir)

    try:
        profile = store.load_profile()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    comp = profile.body_composition
    analysis = (
        analyze_regional_composition(profile.regional_data)
        if profile.regional_data is not None else None
    )

    if json_out:
        data = athlete_profile_to_dict(profile)
        data["lean_mass_kg"] = round(comp.lean_mass_kg, 2)
        data["ffmi"] = round(comp.ffmi, 2)
        if analysis is not None:
            data["asymmetry_recommendations"] = get_asymmetry_recommendations(analysis)
        print(json.dumps(data, indent=2))
        return

    views.console.print()
    views.console.print(f"[bold]{profile.name}[/bold] ({profile.experience})")
    views.console.print(
        f"- Bodyweight: {profile.total_mass_kg:g} kg, body fat {profile.body_fat_pct:g}%, "
        f"height {profile.height_cm:g} cm"
    )
    views.console.print(f"- Lean mass: {comp.lean_mass_kg:.1f} kg, FFMI {comp.ffmi:.1f}")
    for m in profile.calibrated_maxes:
        views.console.print(f"- {m.exercise}: {m.estimated_1rm:g} kg ({m.source}, {m.last_updated})")
    if analysis is not None:
        views.console.print(
            f"- Arm asymmetry {analysis.arm_asymmetry:.1f}%, leg asymmetry {analysis.leg_asymmetry:.1f}%"
        )
        for rec in get_asymmetry_recommendations(analysis):
            views.print_info(rec)
    if profile.injuries:
        views.console.print(views.format_injuries_table(profile.injuries))


@app.command()
def regional(
    left_arm: Annotated[float, typer.Option("--left-arm", help="Left arm lean mass (g)")],
    right_arm: Annotated[float, typer.Option("--right-arm", help="Right arm lean mass (g)")],
    left_leg: Annotated[float, typer.Option("--left-leg", help="Left leg lean mass (g)")],
    right_leg: Annotated[float, typer.Option("--right-leg", help="Right leg lean mass (g)")],
    trunk: Annotated[float, typer.Option("--trunk", help="Trunk lean mass (g)")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Store regional lean mass from a DEXA or segmental BIA scan.
    """
    store = get_store(data_dir)

    try:
        profile = store.load_profile()
        data = RegionalData(
            left_arm=RegionalSegment(left_arm),
            right_arm=RegionalSegment(right_arm),
            left_leg=RegionalSegment(left_leg),
            right_leg=RegionalSegment(right_leg),
            trunk=RegionalSegment(trunk),
        )
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_profile(replace(profile, regional_data=data))
    views.print_success("Saved regional composition")
    for rec in get_asymmetry_recommendations(analyze_regional_composition(data)):
        views.print_info(rec)
