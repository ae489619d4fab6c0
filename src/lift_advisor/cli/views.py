"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of recommendations, readiness,
injury swaps, variety picks and discomfort patterns.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.discomfort import get_body_part_display_name, get_severity_label
from ..core.exercises.base import ExerciseMetadata
from ..core.injury import get_injury_description, get_injury_label
from ..core.metrics import session_best_1rm
from ..core.models import (
    DeloadDecision,
    DiscomfortLogResult,
    DiscomfortPattern,
    ExerciseHistoryEntry,
    FatigueForecast,
    FatigueState,
    InjuryContext,
    ProgressionTargets,
    ReadinessScore,
    SafeAlternative,
    SandbagCheck,
    SwapResult,
    WorkingWeightRecommendation,
)

console = Console()

_SEVERITY_NAMES = {1: "mild", 2: "moderate", 3: "severe"}
_RISK_STYLES = {"safe": "green", "caution": "yellow", "avoid": "red"}
_CONFIDENCE_STYLES = {
    "high": "green",
    "medium": "cyan",
    "low": "yellow",
    "find_working_weight": "magenta",
}


def _format_sets(entry: ExerciseHistoryEntry) -> str:
    parts = []
    for s in entry.sets:
        text = f"{s.weight_kg:g}x{s.reps}"
        if s.rpe is not None:
            text += f"@{s.rpe:g}"
        if not s.completed:
            text += "-"
        parts.append(text)
    return ", ".join(parts)


def format_history_table(entries: list[ExerciseHistoryEntry]) -> Table:
    """
    Create a Rich table displaying exercise history.

    Args:
        entries: History entries, oldest first

    Returns:
        Rich Table object
    """
    table = Table(title="Training History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Exercise", style="magenta")
    table.add_column("Sets")
    table.add_column("e1RM(kg)", justify="right", style="bold")

    for i, entry in enumerate(entries, 1):
        e1rm = session_best_1rm(entry)
        table.add_row(
            str(i),
            entry.date,
            entry.exercise_name,
            _format_sets(entry),
            f"{e1rm:.1f}" if e1rm else "-",
        )

    return table


def print_history(entries: list[ExerciseHistoryEntry]) -> None:
    if not entries:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_history_table(entries))


def print_recommendation(
    rec: WorkingWeightRecommendation,
    adjusted: ProgressionTargets | None = None,
) -> None:
    """
    Print a working-weight recommendation with warm-ups and set targets.

    Args:
        rec: Recommendation to display
        adjusted: Readiness-adjusted targets, if a readiness score was given
    """
    style = _CONFIDENCE_STYLES.get(rec.confidence, "white")
    low, high = rec.rep_range

    console.print()
    console.print(f"[bold]{rec.exercise}[/bold]  {low}-{high} reps @ {rec.target_rir} RIR")

    if rec.confidence == "find_working_weight":
        console.print(f"Confidence: [{style}]{rec.confidence}[/{style}]")
    else:
        console.print(
            f"Working weight: [bold]{rec.recommended_weight_kg:g} kg[/bold]"
            f"  (range {rec.weight_low_kg:g}-{rec.weight_high_kg:g} kg)"
            f"  confidence: [{style}]{rec.confidence}[/{style}]"
        )
    console.print(f"[dim]{rec.rationale}[/dim]")

    if adjusted is not None:
        console.print()
        console.print(
            f"[bold]Today:[/bold] {adjusted.weight_kg:g} kg, {adjusted.sets} sets, "
            f"{adjusted.target_rir} RIR, rest {adjusted.rest_seconds}s "
            f"({adjusted.progression_type})"
        )
        if adjusted.reason:
            console.print(f"[dim]{adjusted.reason}[/dim]")

    if rec.warmup_sets:
        table = Table(title="Warm-up")
        table.add_column("%", justify="right")
        table.add_column("Weight(kg)", justify="right")
        table.add_column("Reps", justify="right")
        table.add_column("Rest(s)", justify="right")
        table.add_column("Note", style="dim")
        for w in rec.warmup_sets:
            table.add_row(
                f"{w.percent_of_working:g}",
                f"{w.weight_kg:g}",
                str(w.reps),
                str(w.rest_seconds),
                w.note,
            )
        console.print(table)

    if rec.set_targets:
        table = Table(title="Working sets")
        table.add_column("Set", justify="right")
        table.add_column("Reps", justify="right")
        table.add_column("Exp. RPE", justify="right")
        for t in rec.set_targets:
            table.add_row(
                str(t.set_number),
                f"{t.target_reps_min}-{t.target_reps_max}",
                f"{t.expected_rpe:g}",
            )
        console.print(table)

    if rec.finding_protocol is not None:
        console.print()
        console.print("[bold]Finding your working weight[/bold]")
        console.print(rec.finding_protocol.instructions)
        console.print(f"[dim]Up to {rec.finding_protocol.max_attempts} attempts.[/dim]")


def print_sandbag_check(check: SandbagCheck) -> None:
    if check.is_sandbagging:
        print_warning(check.message)


def print_readiness(result: ReadinessScore) -> None:
    level_styles = {
        "excellent": "green",
        "good": "green",
        "moderate": "yellow",
        "low": "red",
        "poor": "red",
    }
    interp = result.interpretation
    style = level_styles.get(interp.level, "white")
    console.print()
    console.print(f"Readiness: [bold {style}]{result.score}/100[/bold {style}] ({interp.level})")
    console.print(interp.message)
    console.print(f"[dim]{interp.recommendation}[/dim]")


def format_fatigue_display(state: FatigueState) -> str:
    lines = [
        "Fatigue",
        f"- Accumulated: {state.fatigue:.0f}/100",
        f"- Last session: {state.last_session_date or '-'}",
        f"- Block week: {state.week_in_block}/{state.total_weeks} (deload week {state.deload_week})",
    ]
    return "\n".join(lines)


def print_deload(decision: DeloadDecision) -> None:
    if not decision.should_deload:
        print_success("No deload needed.")
        return
    style = "red" if decision.urgency == "high" else "yellow"
    console.print(f"[{style}]Deload recommended ({decision.urgency}):[/{style}] {decision.reason}")


def print_forecast(forecast: FatigueForecast) -> None:
    console.print(
        f"Projected fatigue at week end: [bold]{forecast.projected_fatigue}/100[/bold]"
        f" ({forecast.band})"
    )
    console.print(f"[dim]{forecast.recommendation}[/dim]")


def format_injuries_table(injuries: list[InjuryContext]) -> Table:
    table = Table(title="Current Injuries")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Area", style="cyan")
    table.add_column("Severity")
    table.add_column("Effect", style="dim")
    for i, injury in enumerate(injuries, 1):
        table.add_row(
            str(i),
            get_injury_label(injury.area),
            _SEVERITY_NAMES[injury.severity],
            get_injury_description(injury.area),
        )
    return table


def format_alternatives_table(source: ExerciseMetadata, alternatives: list[SafeAlternative]) -> Table:
    table = Table(title=f"Alternatives to {source.name}")
    table.add_column("Exercise", style="cyan")
    table.add_column("Risk")
    table.add_column("Match", justify="right")
    table.add_column("Why", style="dim")
    for alt in alternatives:
        style = _RISK_STYLES[alt.risk]
        reason = alt.reason if alt.safety_note is None else f"{alt.reason}. {alt.safety_note}"
        table.add_row(
            alt.exercise.name,
            f"[{style}]{alt.risk}[/{style}]",
            str(alt.match_score),
            reason,
        )
    return table


def format_swaps_table(results: list[SwapResult]) -> Table:
    table = Table(title="Workout Swaps")
    table.add_column("Slot", style="dim")
    table.add_column("Exercise", style="magenta")
    table.add_column("Action")
    table.add_column("Replacement", style="cyan")
    table.add_column("Reason", style="dim")
    for r in results:
        action_style = "green" if r.action == "swapped" else "red"
        table.add_row(
            r.original_id,
            r.original_name,
            f"[{action_style}]{r.action}[/{action_style}]",
            r.replacement.name if r.replacement is not None else "-",
            r.reason,
        )
    return table


def format_catalog_table(exercises: list[ExerciseMetadata], title: str = "Exercise Catalog") -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Muscle", style="magenta")
    table.add_column("Mechanic")
    table.add_column("Pattern")
    table.add_column("Tier", justify="center")
    table.add_column("Reps", justify="right")
    for ex in exercises:
        low, high = ex.default_rep_range
        table.add_row(
            ex.exercise_id,
            ex.name,
            ex.primary_muscle,
            ex.mechanic,
            ex.movement_pattern or "-",
            ex.hypertrophy_tier or "-",
            f"{low}-{high}",
        )
    return table


def format_picks_table(
    picks: list[ExerciseMetadata],
    sets: list[int],
    recent_ids: set[str],
) -> Table:
    table = Table(title="Selected Exercises")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Tier", justify="center")
    table.add_column("Sets", justify="right")
    table.add_column("Recent", justify="center")
    for i, (ex, n) in enumerate(zip(picks, sets), 1):
        table.add_row(
            str(i),
            ex.name,
            ex.hypertrophy_tier or "-",
            str(n),
            "yes" if ex.exercise_id in recent_ids else "",
        )
    return table


def format_patterns_table(patterns: list[DiscomfortPattern]) -> Table:
    table = Table(title="Discomfort Patterns")
    table.add_column("Body part", style="cyan")
    table.add_column("Reports", justify="right")
    table.add_column("Days", justify="right")
    table.add_column("Avg severity")
    table.add_column("Exercises", style="dim")
    table.add_column("Likely injury")
    for p in patterns:
        table.add_row(
            get_body_part_display_name(p.body_part),
            str(p.occurrences),
            str(p.days_span),
            get_severity_label(p.average_severity),
            ", ".join(p.exercises) or "-",
            (p.suggested_injury_type or "-") if p.suggests_injury else "",
        )
    return table


def print_discomfort_result(result: DiscomfortLogResult) -> None:
    if result.pain_warning is not None:
        console.print()
        console.print(f"[bold red]{result.pain_warning.title}[/bold red]")
        console.print(result.pain_warning.message)
        console.print(f"[dim]Options: {', '.join(result.pain_warning.actions)}[/dim]")
    if result.injury_prompt is not None:
        console.print()
        prompt = result.injury_prompt
        command = f"lift-advisor injury-add --type {prompt.suggested_injury_type}"
        side = prompt.body_part.split("_", 1)[0]
        if side in ("left", "right"):
            command += f" --side {side}"
        print_warning(prompt.message)
        print_info(f"Suggested: {command}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(message)}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{escape(message)}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
