"""
Variety-aware exercise selection.

Exercises used for a muscle group in the user's last N sessions (N from
the variety level: low 0, medium 2, high 3) are pushed to the back of the
candidate list.  They stay selectable only when the untouched pool is
smaller than the minimum pool size for the level.

Preferences and usage are read through loader callables and held in
small per-user TTL caches (preferences 120 s, usage 30 s).  Both caches
are injected, expose invalidate(), and take an injectable clock.  A stale
entry can only affect ordering, never injury filtering, which runs
separately.
"""

import random
import time
from collections.abc import Callable, Hashable, Sequence
from dataclasses import replace
from typing import Any

from .config import (
    DEFAULT_VARIETY_LEVEL,
    MAX_EXERCISES_PER_MUSCLE,
    PREFERENCES_CACHE_TTL_SECONDS,
    SETS_PER_COMPOUND,
    SETS_PER_ISOLATION,
    TOP_TIERS,
    USAGE_CACHE_TTL_SECONDS,
    USAGE_LOOKBACK_DAYS,
    VARIETY_POOL_SIZES,
    VARIETY_ROTATION,
)
from .exercises.base import ExerciseMetadata
from .metrics import days_between, today_str
from .models import UsageRecord, VarietyLevel, VarietyPreferences

# =============================================================================
# CACHES
# =============================================================================


class TTLCache:
    """
    Minimal per-key cache whose entries expire after *ttl_seconds*.

    Last write wins; there is no locking.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return default
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one key, or everything when *key* is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)


class NullCache(TTLCache):
    """A cache that never holds anything (one-shot CLI runs, tests)."""

    def __init__(self) -> None:
        super().__init__(ttl_seconds=0.0)

    def set(self, key: Hashable, value: Any) -> None:
        return None


# =============================================================================
# PREFERENCES
# =============================================================================


def get_pool_size_for_level(level: VarietyLevel) -> int:
    return VARIETY_POOL_SIZES[level]


def get_rotation_frequency_for_level(level: VarietyLevel) -> int:
    return VARIETY_ROTATION[level]


def preferences_for_level(level: VarietyLevel, prioritize_top_tier: bool = True) -> VarietyPreferences:
    """Preferences with the rotation and pool size that belong to *level*."""
    if level not in VARIETY_POOL_SIZES:
        raise ValueError(f"Invalid variety level: {level}")
    return VarietyPreferences(
        level=level,
        rotation_frequency=get_rotation_frequency_for_level(level),
        min_pool_size=get_pool_size_for_level(level),
        prioritize_top_tier=prioritize_top_tier,
    )


def default_preferences() -> VarietyPreferences:
    return preferences_for_level(DEFAULT_VARIETY_LEVEL)


def variety_disabled(prefs: VarietyPreferences) -> bool:
    return prefs.rotation_frequency == 0


# =============================================================================
# PURE SELECTION
# =============================================================================


def get_recently_used_exercise_ids(
    usage: Sequence[UsageRecord],
    muscle_group: str,
    sessions_back: int,
    today: str | None = None,
    lookback_days: int = USAGE_LOOKBACK_DAYS,
) -> set[str]:
    """
    Exercise ids used for *muscle_group* in the most recent sessions.

    Records are grouped by session_id, or by date when a record has no
    session.  Only records inside the lookback window count.

    Args:
        usage: Usage log for one user, any order
        muscle_group: Muscle group, case-insensitive
        sessions_back: How many of the latest sessions to consider
        today: ISO date; defaults to the current date
        lookback_days: Ignore usage older than this

    Returns:
        Set of exercise ids (empty when sessions_back <= 0)
    """
    if sessions_back <= 0:
        return set()
    today = today or today_str()
    muscle = muscle_group.lower()

    sessions: dict[str, list[UsageRecord]] = {}
    for record in usage:
        if record.muscle_group.lower() != muscle:
            continue
        if days_between(record.used_at, today) > lookback_days:
            continue
        sessions.setdefault(record.session_id or record.used_at, []).append(record)

    latest = sorted(
        sessions.values(),
        key=lambda records: max(r.used_at for r in records),
        reverse=True,
    )[:sessions_back]
    return {r.exercise_id for records in latest for r in records}


def apply_variety_order(
    candidates: Sequence[ExerciseMetadata],
    recent_ids: set[str],
    prefs: VarietyPreferences,
    rng: random.Random | None = None,
) -> list[ExerciseMetadata]:
    """
    Order candidates with recently used exercises last.

    Nothing is removed.  With *rng*, each group is shuffled; without it the
    input order is kept, which makes the result deterministic.
    """
    if variety_disabled(prefs):
        return list(candidates)

    fresh = [ex for ex in candidates if ex.exercise_id not in recent_ids]
    recent = [ex for ex in candidates if ex.exercise_id in recent_ids]
    if rng is not None:
        rng.shuffle(fresh)
        rng.shuffle(recent)
    return fresh + recent


def _selectable_pool(
    ordered: list[ExerciseMetadata],
    recent_ids: set[str],
    prefs: VarietyPreferences,
) -> list[ExerciseMetadata]:
    fresh = [ex for ex in ordered if ex.exercise_id not in recent_ids]
    if variety_disabled(prefs) or len(fresh) < prefs.min_pool_size:
        return ordered
    return fresh


def _prioritize_top_tier(ordered: list[ExerciseMetadata]) -> list[ExerciseMetadata]:
    top = [ex for ex in ordered if ex.hypertrophy_tier in TOP_TIERS]
    rest = [ex for ex in ordered if ex.hypertrophy_tier not in TOP_TIERS]
    return top + rest


def sets_for_exercise(exercise: ExerciseMetadata) -> int:
    return SETS_PER_ISOLATION if exercise.mechanic == "isolation" else SETS_PER_COMPOUND


def select_exercises_with_variety(
    candidates: Sequence[ExerciseMetadata],
    recent_ids: set[str],
    prefs: VarietyPreferences,
    sets_needed: int,
    max_exercises: int = MAX_EXERCISES_PER_MUSCLE,
    rng: random.Random | None = None,
) -> list[ExerciseMetadata]:
    """
    Pick exercises for one muscle group.

    Candidates are variety-ordered, narrowed to the untouched pool when it
    is large enough, then (optionally) S/A tier first while keeping the
    variety order inside each tier group.  Exercises are taken until
    *max_exercises* are chosen or the set budget is covered (3 sets per
    isolation, 4 per compound).
    """
    if not candidates or sets_needed <= 0:
        return []

    ordered = apply_variety_order(candidates, recent_ids, prefs, rng)
    pool = _selectable_pool(ordered, recent_ids, prefs)
    if prefs.prioritize_top_tier:
        pool = _prioritize_top_tier(pool)

    selected: list[ExerciseMetadata] = []
    remaining = sets_needed
    for exercise in pool:
        if len(selected) >= max_exercises or remaining <= 0:
            break
        selected.append(exercise)
        remaining -= sets_for_exercise(exercise)
    return selected


# =============================================================================
# CACHED SERVICE
# =============================================================================

PreferencesLoader = Callable[[str], VarietyPreferences | None]
PreferencesSaver = Callable[[str, VarietyPreferences], None]
UsageLoader = Callable[[str], Sequence[UsageRecord]]


class VarietySelector:
    """
    Variety selection over a user's stored preferences and usage.

    Args:
        load_preferences: user_id -> saved preferences or None (defaults apply)
        load_usage: user_id -> usage records
        save_preferences: user_id, preferences -> None; required for updates
        preferences_cache: Defaults to a 120 s TTLCache
        usage_cache: Defaults to a 30 s TTLCache
        rng: Optional seeded random.Random for shuffling within groups
    """

    def __init__(
        self,
        load_preferences: PreferencesLoader,
        load_usage: UsageLoader,
        save_preferences: PreferencesSaver | None = None,
        preferences_cache: TTLCache | None = None,
        usage_cache: TTLCache | None = None,
        rng: random.Random | None = None,
    ):
        self._load_preferences = load_preferences
        self._load_usage = load_usage
        self._save_preferences = save_preferences
        self.preferences_cache = preferences_cache or TTLCache(PREFERENCES_CACHE_TTL_SECONDS)
        self.usage_cache = usage_cache or TTLCache(USAGE_CACHE_TTL_SECONDS)
        self.rng = rng

    def get_preferences(self, user_id: str) -> VarietyPreferences:
        cached = self.preferences_cache.get(user_id)
        if cached is not None:
            return cached
        prefs = self._load_preferences(user_id) or default_preferences()
        self.preferences_cache.set(user_id, prefs)
        return prefs

    def update_preferences(self, user_id: str, **changes: Any) -> VarietyPreferences:
        """
        Save changed preferences and drop the user's cached entries.

        Changing only ``level`` also resets rotation and pool size to the
        level's defaults.

        Raises:
            RuntimeError: No saver was configured
            ValueError: Invalid preference values
        """
        if self._save_preferences is None:
            raise RuntimeError("VarietySelector has no save_preferences callable")
        current = self.get_preferences(user_id)
        if "level" in changes:
            current = preferences_for_level(changes["level"], current.prioritize_top_tier)
        updated = replace(current, **changes)
        self._save_preferences(user_id, updated)
        self.invalidate(user_id)
        return updated

    def usage(self, user_id: str) -> list[UsageRecord]:
        cached = self.usage_cache.get(user_id)
        if cached is not None:
            return cached
        records = list(self._load_usage(user_id))
        self.usage_cache.set(user_id, records)
        return records

    def invalidate(self, user_id: str | None = None) -> None:
        """Drop cached preferences and usage (one user, or all)."""
        self.preferences_cache.invalidate(user_id)
        self.usage_cache.invalidate(user_id)

    def invalidate_usage(self, user_id: str) -> None:
        """Call after recording new usage for *user_id*."""
        self.usage_cache.invalidate(user_id)

    def recently_used_ids(
        self,
        user_id: str,
        muscle_group: str,
        today: str | None = None,
    ) -> set[str]:
        prefs = self.get_preferences(user_id)
        return get_recently_used_exercise_ids(
            self.usage(user_id), muscle_group, prefs.rotation_frequency, today
        )

    def order_candidates(
        self,
        user_id: str,
        candidates: Sequence[ExerciseMetadata],
        muscle_group: str,
        today: str | None = None,
    ) -> list[ExerciseMetadata]:
        prefs = self.get_preferences(user_id)
        recent = self.recently_used_ids(user_id, muscle_group, today)
        return apply_variety_order(candidates, recent, prefs, self.rng)

    def select(
        self,
        user_id: str,
        candidates: Sequence[ExerciseMetadata],
        muscle_group: str,
        sets_needed: int,
        max_exercises: int = MAX_EXERCISES_PER_MUSCLE,
        today: str | None = None,
    ) -> list[ExerciseMetadata]:
        prefs = self.get_preferences(user_id)
        recent = self.recently_used_ids(user_id, muscle_group, today)
        return select_exercises_with_variety(
            candidates, recent, prefs, sets_needed, max_exercises, self.rng
        )
