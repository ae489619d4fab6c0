"""
CLI entry point using Typer.

Provides commands for strength-training recommendations:
- init / calibrate / regional / show-profile: athlete profile
- log-workout / history / delete-record: training log
- recommend / e1rm: working weights and 1RM estimates
- readiness / fatigue / deload / forecast: recovery tracking
- injury-add / injury-remove / injuries / risk / alternatives / swap
- pick / variety / catalog: exercise selection
- discomfort-log / discomfort-patterns: discomfort tracking
"""

from .app import app
from .commands import discomfort, injury, profile, readiness, training, variety  # noqa: F401

if __name__ == "__main__":
    app()
