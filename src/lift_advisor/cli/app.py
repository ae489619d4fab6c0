"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.models import AthleteProfile, ExerciseHistoryEntry, StrengthProfile
from ..core.strength import create_strength_profile
from ..io.athlete_store import AthleteStore, get_default_data_dir

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Data directory (default: ~/.lift-advisor)"),
]

# Shared --json option type
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="lift-advisor",
    help="Working weights, readiness, injury-aware swaps and exercise variety for strength training.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> AthleteStore:
    """Get athlete store from path or default location."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return AthleteStore(data_dir)


def build_strength_profile(
    profile: AthleteProfile,
    history: list[ExerciseHistoryEntry],
    today: str | None = None,
) -> StrengthProfile:
    """StrengthProfile for the estimation engine from stored athlete data."""
    return create_strength_profile(
        total_mass_kg=profile.total_mass_kg,
        body_fat_pct=profile.body_fat_pct,
        height_cm=profile.height_cm,
        experience=profile.experience,
        training_age_years=profile.training_age_years,
        history=history,
        calibrations=profile.calibrated_maxes,
        regional_data=profile.regional_data,
        today=today,
    )
