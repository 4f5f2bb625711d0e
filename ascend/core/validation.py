"""
Validation logic for cycle configurations.

Runs against a draft on every edit, so it does no I/O and stays linear in the
number of exercise assignments. Errors block committing the cycle; warnings
are advisory and never block schedule generation.
"""

from typing import Dict, List

from pydantic import BaseModel

from ascend.config import settings
from ascend.core.models import Cycle, Exercise, SimpleProgression, effective_mode


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []
    warnings: List[str] = []


def _check_schedule_shape(cycle: Cycle, errors: List[str], warnings: List[str]) -> None:
    if cycle.number_of_weeks < 1:
        errors.append("Cycle must be at least 1 week")

    if cycle.is_date_scheduled:
        if not cycle.selected_days:
            errors.append("Select at least one training day for a date-based schedule")
        bad_days = sorted({d for d in cycle.selected_days if not 0 <= d <= 6})
        if bad_days:
            errors.append(f"Selected days must be between 0 (Sunday) and 6 (Saturday), got {bad_days}")
        if len(cycle.selected_days) != len(set(cycle.selected_days)):
            errors.append("Selected days contain duplicates")
        if cycle.start_date is None:
            errors.append("A start date is required for a date-based schedule")
        days = cycle.effective_days_per_week
        if days and days != cycle.workout_days_per_week:
            warnings.append(
                f"{days} training days selected but the cycle is set to "
                f"{cycle.workout_days_per_week} workouts per week; the selected days win"
            )
    elif not 1 <= cycle.workout_days_per_week <= settings.MAX_WORKOUT_DAYS_PER_WEEK:
        errors.append(
            f"Workout days per week must be between 1 and {settings.MAX_WORKOUT_DAYS_PER_WEEK}"
        )


def validate_cycle(cycle: Cycle, exercise_map: Dict[str, Exercise]) -> ValidationResult:
    """
    Inspect a complete or in-progress cycle draft.

    Args:
        cycle: The draft cycle.
        exercise_map: Exercise catalog snapshot keyed by exercise id.

    Returns:
        ValidationResult with human-readable errors and warnings. `valid` is
        True iff there are no errors.
    """
    errors: List[str] = []
    warnings: List[str] = []
    cycle_mode = cycle.progression_mode

    if not cycle.name.strip():
        errors.append("Cycle name is required")

    _check_schedule_shape(cycle, errors, warnings)

    # --- Groups & rotation ---
    if not cycle.groups:
        errors.append("At least one group is required")
    elif not any(g.assignments for g in cycle.groups):
        errors.append("At least one group needs an exercise")

    groups = cycle.group_by_id()
    if not cycle.group_rotation:
        errors.append("Group rotation is required")
    for group_id in dict.fromkeys(cycle.group_rotation):
        if group_id not in groups:
            errors.append(f"Group {group_id} in rotation not found")

    rotated = set(cycle.group_rotation)
    for group in cycle.groups:
        if not group.assignments:
            warnings.append(f'Group "{group.name}" has no exercises')
        elif cycle.group_rotation and group.id not in rotated:
            warnings.append(f'Group "{group.name}" is never used by the group rotation')

    # --- Assignments ---
    needs_rfem = cycle_mode == "rfem"
    assigned_types = set()
    for group in cycle.groups:
        for assignment in group.assignments:
            exercise = exercise_map.get(assignment.exercise_id)
            if exercise is None:
                errors.append(
                    f'Exercise {assignment.exercise_id} in group "{group.name}" no longer '
                    "exists (it may have been deleted)"
                )
                continue

            assigned_types.add(exercise.type)
            mode = effective_mode(cycle_mode, assignment)

            if exercise.is_conditioning:
                conditioning = assignment.conditioning
                base = None
                if conditioning is not None:
                    base = conditioning.base_time if exercise.is_time_based else conditioning.base_reps
                if base is None:
                    warnings.append(
                        f'"{exercise.name}" in group "{group.name}" has no conditioning base; '
                        "the default will be used"
                    )
                continue

            if mode == "rfem":
                needs_rfem = True
                continue

            progression = assignment.progression
            unit = "time" if exercise.is_time_based else "reps"
            if not isinstance(progression, SimpleProgression):
                errors.append(f'"{exercise.name}" in group "{group.name}" has no base {unit} set')
                continue
            base = progression.base_for(exercise.measurement_type)
            if base is None:
                errors.append(f'"{exercise.name}" in group "{group.name}" has no base {unit} set')
            elif base <= 0:
                errors.append(
                    f'"{exercise.name}" in group "{group.name}" needs a base {unit} greater than 0'
                )
            if progression.base_reps is not None and progression.base_time is not None:
                errors.append(
                    f'"{exercise.name}" in group "{group.name}" sets both base reps and base time'
                )

    if needs_rfem:
        if not cycle.rfem_rotation:
            errors.append("RFEM rotation is required")
        elif any(value < 0 for value in cycle.rfem_rotation):
            errors.append("RFEM rotation values cannot be negative")

    # --- Weekly set goals (informational) ---
    for exercise_type in sorted(assigned_types):
        if cycle.weekly_set_goals.get(exercise_type, 0) == 0:
            warnings.append(
                f"Weekly set goal for {exercise_type} is 0 but the cycle has {exercise_type} exercises"
            )

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
