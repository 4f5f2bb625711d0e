"""
Builds the short max-testing cycle that follows a training cycle.

Standard exercises are spread over one workout per day so that no day tests
two exercises of the same type. The number of days is the size of the
largest type. Conditioning exercises are not max-tested; instead their
baselines can be carried forward onto the exercise catalog.
"""

import uuid
from datetime import date
from typing import Dict, List, Optional

from ascend.core.models import Cycle, Exercise, ExerciseAssignment, Group


def _tested_exercises(previous_cycle: Cycle, exercise_map: Dict[str, Exercise]) -> List[Exercise]:
    seen: Dict[str, Exercise] = {}
    for group in previous_cycle.groups:
        for assignment in group.assignments:
            exercise = exercise_map.get(assignment.exercise_id)
            if exercise is None or exercise.is_conditioning or exercise.id in seen:
                continue
            seen[exercise.id] = exercise
    return list(seen.values())


def bucket_by_day(exercises: List[Exercise]) -> List[List[Exercise]]:
    """
    Distribute exercises over test days, at most one of each type per day.

    Types with the most exercises are placed first; each exercise goes to the
    emptiest day that does not test its type yet (earliest day on ties).
    """
    by_type: Dict[str, List[Exercise]] = {}
    for exercise in exercises:
        by_type.setdefault(exercise.type, []).append(exercise)

    number_of_days = max((len(group) for group in by_type.values()), default=0)
    days: List[List[Exercise]] = [[] for _ in range(number_of_days)]
    types_used: List[set] = [set() for _ in range(number_of_days)]

    for exercise_type, members in sorted(by_type.items(), key=lambda item: -len(item[1])):
        for exercise in members:
            open_days = [d for d in range(number_of_days) if exercise_type not in types_used[d]]
            best = min(open_days, key=lambda d: len(days[d]))
            days[best].append(exercise)
            types_used[best].add(exercise_type)
    return [day for day in days if day]


def build_max_testing_cycle(
    previous_cycle: Cycle,
    exercise_map: Dict[str, Exercise],
    start_date: date,
    cycle_id: Optional[str] = None,
) -> Cycle:
    """
    Create a one-week cycle that tests the max of every standard exercise
    trained in `previous_cycle`, one workout per test day.

    Every working set of the generated workouts is a max test; warm-ups scale
    the previous max and are skipped for exercises never tested.
    """
    days = bucket_by_day(_tested_exercises(previous_cycle, exercise_map))
    groups = [
        Group(
            id=f"max-test-{n}",
            name="Max Test" if len(days) == 1 else f"Max Test Day {n}",
            assignments=[ExerciseAssignment(exercise_id=ex.id) for ex in day],
        )
        for n, day in enumerate(days, start=1)
    ]

    return Cycle(
        id=cycle_id or str(uuid.uuid4()),
        name=f"{previous_cycle.name} - Max Testing",
        status="active",
        cycle_type="max_testing",
        progression_mode="rfem",
        previous_cycle_id=previous_cycle.id,
        start_date=start_date,
        number_of_weeks=1,
        workout_days_per_week=max(len(groups), 1),
        scheduling_mode="sequence",
        groups=groups,
        group_rotation=[g.id for g in groups],
        rfem_rotation=[0],
        weekly_set_goals={},
        conditioning_weekly_rep_increment=0,
        conditioning_weekly_time_increment=0,
        include_warmup_sets=True,
        include_timed_warmups=previous_cycle.include_timed_warmups,
    )


def updated_conditioning_baselines(
    previous_cycle: Cycle,
    exercise_map: Dict[str, Exercise],
    new_baselines: Dict[str, int],
) -> List[Exercise]:
    """
    Conditioning exercises of `previous_cycle` whose default base changes.

    Args:
        new_baselines: New base reps (or seconds, for timed exercises) keyed
            by exercise id. Non-positive values and unchanged bases are ignored.

    Returns:
        Copies of the exercises with the new default applied, ready to save.
    """
    updated: List[Exercise] = []
    done = set()
    for group in previous_cycle.groups:
        for assignment in group.assignments:
            exercise = exercise_map.get(assignment.exercise_id)
            if exercise is None or not exercise.is_conditioning or exercise.id in done:
                continue
            done.add(exercise.id)
            value = new_baselines.get(exercise.id)
            if value is None or value <= 0:
                continue
            field = (
                "default_conditioning_time"
                if exercise.is_time_based
                else "default_conditioning_reps"
            )
            if getattr(exercise, field) != value:
                updated.append(exercise.model_copy(update={field: value}))
    return updated
