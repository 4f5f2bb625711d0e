"""JSON file-based implementation of the Data Access Layer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ascend.config import settings
from ascend.core.models import (
    Cycle,
    Exercise,
    ExerciseCycleDefaults,
    MaxRecord,
    ScheduledWorkout,
)
from .dal import DataAccessLayer


class JsonDal(DataAccessLayer):
    """Data Access Layer that persists documents to JSON files on disk."""

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    # --- Exercise Catalog ----------------------------------------------------
    def load_exercises(self) -> Dict[str, Exercise]:
        raw = self._read_json(settings.exercises_path)
        return {ex_id: Exercise.model_validate(doc) for ex_id, doc in raw.items()}

    def save_exercise(self, exercise: Exercise) -> None:
        raw = self._read_json(settings.exercises_path)
        raw[exercise.id] = exercise.model_dump(mode="json")
        self._write_json(settings.exercises_path, raw)

    # --- Cycles --------------------------------------------------------------
    def load_cycle(self, cycle_id: str) -> Optional[Cycle]:
        doc = self._read_json(settings.cycles_path).get(cycle_id)
        return Cycle.model_validate(doc) if doc is not None else None

    def list_cycles(self) -> List[Cycle]:
        raw = self._read_json(settings.cycles_path)
        return [Cycle.model_validate(doc) for doc in raw.values()]

    def save_cycle(self, cycle: Cycle) -> None:
        raw = self._read_json(settings.cycles_path)
        raw[cycle.id] = cycle.model_dump(mode="json")
        self._write_json(settings.cycles_path, raw)

    # --- Scheduled Workouts --------------------------------------------------
    def get_workouts(self, cycle_id: str) -> List[ScheduledWorkout]:
        raw = self._read_json(settings.workouts_path)
        workouts = [
            ScheduledWorkout.model_validate(doc)
            for doc in raw.values()
            if doc.get("cycle_id") == cycle_id
        ]
        return sorted(workouts, key=lambda w: w.sort_key)

    def save_workouts(self, workouts: Iterable[ScheduledWorkout]) -> None:
        raw = self._read_json(settings.workouts_path)
        for workout in workouts:
            raw[workout.id] = workout.model_dump(mode="json")
        self._write_json(settings.workouts_path, raw)

    def delete_workouts(self, workout_ids: Iterable[str]) -> None:
        raw = self._read_json(settings.workouts_path)
        for workout_id in workout_ids:
            raw.pop(workout_id, None)
        self._write_json(settings.workouts_path, raw)

    def delete_workouts_for_cycle(self, cycle_id: str) -> None:
        raw = self._read_json(settings.workouts_path)
        kept = {k: v for k, v in raw.items() if v.get("cycle_id") != cycle_id}
        self._write_json(settings.workouts_path, kept)

    # --- Max Records ---------------------------------------------------------
    def get_max_records(self, exercise_id: str) -> List[MaxRecord]:
        raw = self._read_json(settings.max_records_path)
        return [MaxRecord.model_validate(doc) for doc in raw.get(exercise_id, [])]

    def save_max_record(self, record: MaxRecord) -> None:
        raw = self._read_json(settings.max_records_path)
        raw.setdefault(record.exercise_id, [])
        raw[record.exercise_id].append(record.model_dump(mode="json"))
        self._write_json(settings.max_records_path, raw)

    # --- Last-Used Cycle Settings --------------------------------------------
    def load_cycle_defaults(self, exercise_id: str) -> Optional[ExerciseCycleDefaults]:
        doc = self._read_json(settings.cycle_defaults_path).get(exercise_id)
        return ExerciseCycleDefaults.model_validate(doc) if doc is not None else None

    def save_cycle_defaults(self, exercise_id: str, defaults: ExerciseCycleDefaults) -> None:
        raw = self._read_json(settings.cycle_defaults_path)
        raw[exercise_id] = defaults.model_dump(mode="json")
        self._write_json(settings.cycle_defaults_path, raw)
