"""
Schedule generation for training cycles.

`generate_schedule` lays out every workout slot of a cycle: which group and
RFEM value apply, which calendar date (for date-scheduled cycles) and which
sets are performed. Targets are left to `ascend.core.progression`, which
resolves them at read time.

The generator is a pure function of its inputs. Record ids are derived from
the cycle id and the absolute slot index, so generating the same slot twice
yields identical records; that is what makes continuation and restart safe.
"""

import uuid
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional

from ascend.config import settings
from ascend.core import rotation
from ascend.core.models import (
    Cycle,
    Exercise,
    ExerciseAssignment,
    Group,
    RfemProgression,
    ScheduledSet,
    ScheduledWorkout,
    SimpleProgression,
    effective_mode,
)
from ascend.core.workout_dates import expand_dates
from ascend.infra import log_utils

_ID_NAMESPACE = uuid.UUID("6f0c51b4-52a7-4f43-9d27-6c1f3f0a3e11")


def _stable_id(*parts: object) -> str:
    return str(uuid.uuid5(_ID_NAMESPACE, "/".join(str(p) for p in parts)))


def next_workout_index(existing_workouts: Iterable[ScheduledWorkout]) -> int:
    """
    Absolute index to continue generation from.

    Sequence numbers are 1-based, so the highest one kept is also the 0-based
    index of the first slot still to generate. Ad-hoc workouts sit outside the
    sequence and are ignored.
    """
    numbers = [
        w.sequence_number
        for w in existing_workouts
        if not w.is_ad_hoc and w.sequence_number is not None
    ]
    return max(numbers, default=0)


def _wants_warmups(cycle: Cycle, exercise: Exercise) -> bool:
    if not cycle.include_warmup_sets or exercise.is_conditioning:
        return False
    if exercise.is_time_based and not cycle.include_timed_warmups:
        return False
    return True


def _progression_snapshot(cycle: Cycle, assignment: ExerciseAssignment):
    if effective_mode(cycle.progression_mode, assignment) == "simple":
        if isinstance(assignment.progression, SimpleProgression):
            return assignment.progression.model_copy(deep=True)
        # Left without a base value; resolves to the 0 sentinel
        return SimpleProgression()
    return RfemProgression()


def _conditioning_fields(cycle: Cycle, exercise: Exercise, assignment: ExerciseAssignment) -> dict:
    conditioning = assignment.conditioning
    if exercise.is_time_based:
        base = (conditioning.base_time if conditioning else None) or exercise.default_conditioning_time
        increment = conditioning.time_increment if conditioning else None
    else:
        base = (conditioning.base_reps if conditioning else None) or exercise.default_conditioning_reps
        increment = conditioning.rep_increment if conditioning else None

    if base is None:
        base = (
            settings.CONDITIONING_DEFAULT_BASE_TIME
            if exercise.is_time_based
            else settings.CONDITIONING_DEFAULT_BASE_REPS
        )
    # Per-exercise increments only apply to mixed cycles
    if cycle.progression_mode != "mixed":
        increment = None
    return {"conditioning_base": base, "conditioning_increment": increment}


def build_sets(
    cycle: Cycle,
    group: Group,
    exercise_map: Dict[str, Exercise],
    workout_index: int,
    occurrences: Dict[str, int],
) -> List[ScheduledSet]:
    """
    Emit the sets for one workout slot: warm-ups then the working set, per assignment.

    Args:
        occurrences: Zero-based ordinal of this slot among each exercise's
            appearances in the cycle, keyed by exercise id.
    """
    sets: List[ScheduledSet] = []
    for assignment in group.assignments:
        exercise = exercise_map.get(assignment.exercise_id)
        if exercise is None:
            log_utils.log_message(
                f"[plan_builder] Exercise {assignment.exercise_id} not found, "
                f"skipped in workout {workout_index + 1} of cycle {cycle.id}",
                "WARN",
            )
            continue

        common = {
            "exercise_id": exercise.id,
            "exercise_type": exercise.type,
            "measurement_type": exercise.measurement_type,
            "is_max_test": cycle.is_max_testing,
            "is_conditioning": exercise.is_conditioning,
            "occurrence_index": occurrences.get(exercise.id, 0),
            "weight_enabled": exercise.weight_enabled,
            "default_weight": exercise.default_weight,
        }
        if exercise.is_conditioning:
            common.update(_conditioning_fields(cycle, exercise, assignment))
        else:
            common["progression"] = _progression_snapshot(cycle, assignment)

        set_number = 1
        if _wants_warmups(cycle, exercise):
            for percentage in settings.WARMUP_PERCENTAGES:
                sets.append(
                    ScheduledSet(
                        id=_stable_id(cycle.id, workout_index, len(sets)),
                        set_number=set_number,
                        is_warmup=True,
                        warmup_percentage=percentage,
                        **common,
                    )
                )
                set_number += 1

        sets.append(
            ScheduledSet(
                id=_stable_id(cycle.id, workout_index, len(sets)),
                set_number=set_number,
                **common,
            )
        )
    return sets


def generate_schedule(
    cycle: Cycle,
    exercise_map: Dict[str, Exercise],
    start_from_workout: int = 0,
) -> List[ScheduledWorkout]:
    """
    Generate the ordered workouts of a cycle.

    Args:
        cycle: The (validated) cycle configuration.
        exercise_map: Exercise catalog snapshot keyed by exercise id.
        start_from_workout: Absolute 0-based slot to start at. Slots before it
            are assumed to exist already (continuation after an edit).

    Returns:
        One pending ScheduledWorkout per slot from `start_from_workout` to the
        end of the cycle. Nothing is persisted.
    """
    days_per_week = cycle.effective_days_per_week
    total = cycle.total_workouts
    if days_per_week < 1 or total < 1:
        return []
    if not cycle.group_rotation:
        log_utils.log_message(
            f"[plan_builder] Cycle {cycle.id} has no group rotation, nothing generated", "WARN"
        )
        return []

    uses_rfem = cycle.progression_mode != "simple" and bool(cycle.rfem_rotation)
    dates: List[date] = []
    if cycle.is_date_scheduled and cycle.start_date is not None:
        dates = expand_dates(cycle.start_date, cycle.number_of_weeks, cycle.selected_days)
    elif cycle.is_date_scheduled:
        log_utils.log_message(
            f"[plan_builder] Cycle {cycle.id} is date-scheduled without a start date", "WARN"
        )

    groups = cycle.group_by_id()
    occurrence_counter: Counter = Counter()
    workouts: List[ScheduledWorkout] = []
    start = max(start_from_workout, 0)

    # Walk from slot 0 so per-exercise occurrence counts are absolute too
    for i in range(total):
        group_id = rotation.resolve_group(cycle.group_rotation, i)
        group: Optional[Group] = groups.get(group_id)
        exercise_ids = list(dict.fromkeys(a.exercise_id for a in group.assignments)) if group else []

        if i >= start:
            if group is None:
                log_utils.log_message(
                    f"[plan_builder] Group {group_id} not found in cycle {cycle.id}", "WARN"
                )
            occurrences = {ex_id: occurrence_counter[ex_id] for ex_id in exercise_ids}
            workouts.append(
                ScheduledWorkout(
                    id=_stable_id(cycle.id, i),
                    cycle_id=cycle.id,
                    sequence_number=i + 1,
                    sort_key=float(i + 1),
                    week_number=i // days_per_week + 1,
                    day_in_week=i % days_per_week + 1,
                    scheduled_date=dates[i] if i < len(dates) else None,
                    group_id=group_id,
                    rfem=rotation.resolve_rfem(cycle.rfem_rotation, i) if uses_rfem else None,
                    scheduled_sets=(
                        build_sets(cycle, group, exercise_map, i, occurrences) if group else []
                    ),
                    status="pending",
                )
            )
        occurrence_counter.update(exercise_ids)

    log_utils.log_message(
        f"[plan_builder] Generated {len(workouts)} workouts for cycle {cycle.id} "
        f"(from slot {start + 1} of {total})"
    )
    return workouts
