"""
File-based storage for one athlete.

A data directory holds:
- profile.json       body composition, experience, calibrated maxes,
                     injuries, fatigue state, variety preferences
- history.jsonl      one exercise-history entry per line
- discomfort.jsonl   one discomfort report per line
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from ..core.exercises import find_exercise_by_name
from ..core.models import (
    AthleteProfile,
    DiscomfortEntry,
    ExerciseHistoryEntry,
    UsageRecord,
)
from .serializers import (
    ValidationError,
    athlete_profile_to_dict,
    dict_to_athlete_profile,
    dict_to_discomfort_entry,
    dict_to_history_entry,
    discomfort_entry_to_dict,
    entry_to_json_line,
)

T = TypeVar("T")


class AthleteStore:
    """
    Manages an athlete's data directory.

    history.jsonl is kept sorted by date; entries logged on the same date
    keep their logging order.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding profile.json and the JSONL logs
        """
        self.data_dir = Path(data_dir)
        self.profile_path = self.data_dir / "profile.json"
        self.history_path = self.data_dir / "history.jsonl"
        self.discomfort_path = self.data_dir / "discomfort.jsonl"

    def exists(self) -> bool:
        """Check if a profile has been written."""
        return self.profile_path.exists()

    def init(self) -> None:
        """
        Create the data directory and empty logs if they don't exist.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.history_path, self.discomfort_path):
            if not path.exists():
                path.touch()

    # -- profile ---------------------------------------------------------------

    def load_profile(self) -> AthleteProfile:
        """
        Load the athlete profile.

        Raises:
            FileNotFoundError: If profile.json doesn't exist
            ValidationError: If profile.json is malformed
        """
        if not self.profile_path.exists():
            raise FileNotFoundError(
                f"Profile not found: {self.profile_path}. Run 'init' first."
            )
        try:
            with open(self.profile_path, "r") as f:
                data = json.load(f)
            return dict_to_athlete_profile(data)
        except (json.JSONDecodeError, KeyError) as e:
            raise ValidationError(f"Error reading {self.profile_path}: {e}") from e

    def save_profile(self, profile: AthleteProfile) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.profile_path, "w") as f:
            json.dump(athlete_profile_to_dict(profile), f, indent=2)

    def update_profile(self, change: Callable[[AthleteProfile], AthleteProfile]) -> AthleteProfile:
        """Load, transform and save the profile; returns the saved profile."""
        profile = change(self.load_profile())
        self.save_profile(profile)
        return profile

    # -- history ---------------------------------------------------------------

    def _read_jsonl(self, path: Path, parse: Callable[[dict], T]) -> list[T]:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}. Run 'init' first.")

        records: list[T] = []
        with open(path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(parse(json.loads(line)))
                except (json.JSONDecodeError, ValidationError, KeyError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {path}: {e}"
                    ) from e
        return records

    def load_history(self) -> list[ExerciseHistoryEntry]:
        """
        Load all history entries, sorted by date.

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a line is malformed
        """
        entries = self._read_jsonl(self.history_path, dict_to_history_entry)
        entries.sort(key=lambda e: e.date)
        return entries

    def append_entry(self, entry: ExerciseHistoryEntry) -> None:
        """
        Insert an entry in chronological order (after others on its date).
        """
        entries = self.load_history()
        insert_idx = len(entries)
        for i, existing in enumerate(entries):
            if entry.date < existing.date:
                insert_idx = i
                break
        entries.insert(insert_idx, entry)
        self._write_history(entries)

    def _write_history(self, entries: list[ExerciseHistoryEntry]) -> None:
        with open(self.history_path, "w") as f:
            for entry in entries:
                f.write(entry_to_json_line(entry) + "\n")

    def delete_entry_at(self, index: int) -> None:
        """
        Delete the entry at the given 0-based index in sorted history.

        Raises:
            IndexError: If index is out of range
        """
        entries = self.load_history()
        if index < 0 or index >= len(entries):
            raise IndexError(f"Entry index {index} out of range (0-{len(entries) - 1})")
        del entries[index]
        self._write_history(entries)

    def load_usage(self) -> list[UsageRecord]:
        """
        Exercise usage derived from history.

        Entries whose exercise is not in the catalog are skipped; the muscle
        group is the catalog primary muscle.
        """
        usage = []
        for entry in self.load_history():
            exercise = find_exercise_by_name(entry.exercise_name)
            if exercise is None:
                continue
            usage.append(UsageRecord(
                exercise_id=exercise.exercise_id,
                muscle_group=exercise.primary_muscle,
                used_at=entry.date,
                session_id=entry.session_id,
            ))
        return usage

    # -- discomfort ------------------------------------------------------------

    def load_discomfort(self) -> list[DiscomfortEntry]:
        entries = self._read_jsonl(self.discomfort_path, dict_to_discomfort_entry)
        entries.sort(key=lambda e: e.logged_at)
        return entries

    def append_discomfort(self, entry: DiscomfortEntry) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.discomfort_path, "a") as f:
            f.write(json.dumps(discomfort_entry_to_dict(entry), separators=(",", ":")) + "\n")


def get_default_data_dir() -> Path:
    """Default data directory: ``~/.lift-advisor``."""
    return Path.home() / ".lift-advisor"


def get_default_store() -> AthleteStore:
    return AthleteStore(get_default_data_dir())
