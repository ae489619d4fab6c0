"""
YAML -> typed policy loader.

Loads the deload and forecast policy from policy.yaml (bundled with the
package) and optionally merges user overrides from ~/.lift-advisor/policy.yaml.

Usage:
    from lift_advisor.core.engine.config_loader import load_deload_policy
    policy = load_deload_policy()
    if fatigue >= policy.fatigue_threshold: ...

If the bundled YAML cannot be read, every policy falls back to the Python
defaults from config.py (no crash).  If the user override file has parse
errors or bad values, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from .. import config
from ..exercises.loader import _deep_merge, _load_yaml_file


@dataclass(frozen=True)
class DeloadPolicy:
    """Thresholds used by should_trigger_deload()."""

    fatigue_threshold: float = config.DELOAD_FATIGUE_THRESHOLD
    missed_sessions: int = config.DELOAD_MISSED_SESSIONS
    completion_threshold: float = config.DELOAD_COMPLETION_THRESHOLD
    rpe_creep: float = config.DELOAD_RPE_CREEP
    rpe_creep_window: int = config.DELOAD_RPE_CREEP_WINDOW
    rpe_creep_min_sessions: int = config.DELOAD_RPE_CREEP_MIN_SESSIONS

    def __post_init__(self) -> None:
        if not 0 < self.fatigue_threshold <= 100:
            raise ValueError("fatigue_threshold must be in (0, 100]")
        if self.missed_sessions < 1:
            raise ValueError("missed_sessions must be at least 1")
        if self.rpe_creep_window < 1:
            raise ValueError("rpe_creep_window must be at least 1")
        if self.rpe_creep_min_sessions < 2 * self.rpe_creep_window:
            raise ValueError("rpe_creep_min_sessions must cover both ends of the window")


@dataclass(frozen=True)
class ForecastPolicy:
    """Projected-fatigue bands used by forecast_weekly_fatigue()."""

    default_rpe: float = config.FORECAST_DEFAULT_RPE
    push_below: float = config.FORECAST_PUSH_BELOW
    maintain_below: float = config.FORECAST_MAINTAIN_BELOW
    reduce_below: float = config.FORECAST_REDUCE_BELOW

    def __post_init__(self) -> None:
        if not config.RPE_MIN <= self.default_rpe <= config.RPE_MAX:
            raise ValueError("default_rpe must be in [1, 10]")
        if not self.push_below <= self.maintain_below <= self.reduce_below:
            raise ValueError("forecast bands must be ascending")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build(cls: type, section: Any, source: str):
    """Instantiate *cls* from a YAML section, ignoring unknown keys."""
    if not isinstance(section, dict):
        return cls()
    known = {f.name for f in fields(cls)}
    kwargs = {k: v for k, v in section.items() if k in known}
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as exc:
        warnings.warn(f"lift-advisor: ignoring {source} ({exc})", stacklevel=3)
        return cls()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_policy_path() -> Path | None:
    """Return the path to the bundled policy.yaml, or None if not found."""
    # config_loader.py lives at src/lift_advisor/core/engine/config_loader.py
    candidate = Path(__file__).parent.parent.parent / "policy.yaml"
    return candidate if candidate.exists() else None


def get_user_policy_path() -> Path | None:
    """Return ~/.lift-advisor/policy.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-advisor" / "policy.yaml"
    return p if p.exists() else None


def load_policy_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge policy configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_advisor/policy.yaml
    2. User override at ~/.lift-advisor/policy.yaml (or *user_path*)

    Returns:
        Merged dict of policy sections.  Empty dict if no YAML available.
    """
    cfg: dict[str, Any] = {}

    bundled = get_bundled_policy_path()
    if bundled is not None:
        cfg = _deep_merge(cfg, _load_yaml_file(bundled))

    user = user_path if user_path is not None else get_user_policy_path()
    if user is not None and user.exists():
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            cfg = _deep_merge(cfg, user_cfg)

    return cfg


def load_deload_policy(user_path: Path | None = None) -> DeloadPolicy:
    return _build(DeloadPolicy, load_policy_config(user_path).get("deload"), "deload policy")


def load_forecast_policy(user_path: Path | None = None) -> ForecastPolicy:
    return _build(ForecastPolicy, load_policy_config(user_path).get("forecast"), "forecast policy")
