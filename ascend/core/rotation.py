"""
Rotation sequencing for groups and RFEM values.

Both rotations are indexed by the absolute workout index across the whole
cycle, never by a per-week counter. A rotation shorter than the week wraps
into the next week, and continuation from workout k resumes exactly where
the first k workouts left the rotation.
"""

from typing import Sequence, TypeVar

T = TypeVar("T")


def _pick(rotation: Sequence[T], workout_index: int, label: str) -> T:
    if not rotation:
        raise ValueError(f"{label} rotation is empty")
    if workout_index < 0:
        raise ValueError(f"workout index must be >= 0, got {workout_index}")
    return rotation[workout_index % len(rotation)]


def resolve_group(group_rotation: Sequence[str], workout_index: int) -> str:
    """Return the group id for the workout at the given absolute 0-based index."""
    return _pick(group_rotation, workout_index, "Group")


def resolve_rfem(rfem_rotation: Sequence[int], workout_index: int) -> int:
    """Return the RFEM value for the workout at the given absolute 0-based index."""
    return _pick(rfem_rotation, workout_index, "RFEM")
