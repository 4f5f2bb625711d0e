"""Max records: appending tested maxes and looking up the established max per exercise."""

import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional

# Import the DataAccessLayer contract, not a specific implementation
from ascend.data_access.dal import DataAccessLayer
from ascend.core.models import Exercise, MaxRecord


def append_max_record(
    dal: DataAccessLayer,
    exercise_id: str,
    max_reps: int | None = None,
    max_time: int | None = None,
    weight: float | None = None,
    recorded_at: datetime | None = None,
    notes: str = "",
) -> MaxRecord:
    """
    Records a new max for an exercise using the provided DAL.
    """
    if (max_reps is None) == (max_time is None):
        raise ValueError("Exactly one of max_reps or max_time must be given")

    record = MaxRecord(
        id=str(uuid.uuid4()),
        exercise_id=exercise_id,
        max_reps=max_reps,
        max_time=max_time,
        weight=weight,
        recorded_at=recorded_at or datetime.now(),
        notes=notes,
    )
    dal.save_max_record(record)
    return record


def latest_record(records: Iterable[MaxRecord]) -> Optional[MaxRecord]:
    return max(records, key=lambda r: r.recorded_at, default=None)


def established_value(record: Optional[MaxRecord], measurement_type: str) -> Optional[int]:
    if record is None:
        return None
    return record.max_time if measurement_type == "time" else record.max_reps


def get_established_max(dal: DataAccessLayer, exercise: Exercise) -> Optional[int]:
    """
    The most recent max reps (or seconds, for timed exercises), if any.
    """
    record = latest_record(dal.get_max_records(exercise.id))
    return established_value(record, exercise.measurement_type)


def get_established_maxes(
    dal: DataAccessLayer, exercises: Iterable[Exercise]
) -> Dict[str, int]:
    """Snapshot of established maxes keyed by exercise id; exercises without one are omitted."""
    out: Dict[str, int] = {}
    for exercise in exercises:
        value = get_established_max(dal, exercise)
        if value is not None:
            out[exercise.id] = value
    return out


def get_history_for_exercise(
    dal: DataAccessLayer, exercise_id: str, last_n: int | None = None
) -> List[MaxRecord]:
    """
    Max records for an exercise, oldest first.
    """
    records = sorted(dal.get_max_records(exercise_id), key=lambda r: r.recorded_at)
    if last_n:
        return records[-last_n:]
    return records
