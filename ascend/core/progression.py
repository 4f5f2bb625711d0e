"""
Target resolution for scheduled sets.

Targets are not stored with the schedule: RFEM targets depend on the current
established max and simple/conditioning targets on the slot's position in the
cycle, so display and logging code resolve them on demand through here.

Every function is total. Malformed input (a simple set without a base value,
an RFEM slot without an RFEM value) yields the 0 sentinel instead of raising,
because the validator is expected to have rejected such cycles already and a
workout in progress must still render.
"""

from math import floor
from typing import Dict, List, Optional, Union

from pydantic import BaseModel

from ascend.config import settings
from ascend.core.models import Cycle, ScheduledSet, ScheduledWorkout, SimpleProgression

Number = Union[int, float]

# Returned for max-test working sets: the lifter goes all-out, no bounded target.
GO_TO_MAX = 0


class CycleIncrements(BaseModel):
    """Cycle-wide weekly increments for conditioning exercises."""

    rep_increment: Optional[float] = None
    time_increment: Optional[float] = None

    @classmethod
    def from_cycle(cls, cycle: Cycle) -> "CycleIncrements":
        return cls(
            rep_increment=cycle.conditioning_weekly_rep_increment,
            time_increment=cycle.conditioning_weekly_time_increment,
        )

    def for_measurement(self, measurement_type: str) -> float:
        if measurement_type == "time":
            if self.time_increment is None:
                return settings.CONDITIONING_DEFAULT_TIME_INCREMENT
            return self.time_increment
        if self.rep_increment is None:
            return settings.CONDITIONING_DEFAULT_REP_INCREMENT
        return self.rep_increment


class SetTarget(BaseModel):
    set_id: str
    exercise_id: str
    is_warmup: bool
    go_to_max: bool
    target: Number
    weight: Optional[float] = None

    @property
    def skipped(self) -> bool:
        """A warm-up that resolved to nothing to do (untested max, suppressed timed warm-up)."""
        return self.is_warmup and not self.target


# --- Arithmetic helpers ------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves away from zero for positive values."""
    return int(floor(value + 0.5))


def round_to_increment(weight: float, increment: Optional[float] = None) -> float:
    """Round a weight to the nearest multiple of the plate increment."""
    step = settings.WEIGHT_ROUNDING_INCREMENT if increment is None else increment
    if step <= 0:
        return float(round_half_up(weight))
    return round_half_up(weight / step) * step


def _tidy(value: float) -> Number:
    return int(value) if float(value).is_integer() else value


def progression_steps(interval: str, workout: ScheduledWorkout, occurrence_index: int) -> int:
    """
    Number of increments applied for a progression interval.

    `per_workout` counts the exercise's own earlier appearances in the cycle,
    not the workout sequence number, so an exercise trained every other day
    still moves one step per session.
    """
    if interval == "per_workout":
        return max(occurrence_index, 0)
    if interval == "per_week":
        return max(workout.week_number - 1, 0)
    return 0


def default_max(measurement_type: str) -> int:
    if measurement_type == "time":
        return settings.RFEM_DEFAULT_TIME_MAX
    return settings.RFEM_DEFAULT_MAX


def _effective_max(
    scheduled_set: ScheduledSet,
    established_max: Optional[Number],
    fallback_default: Optional[Number],
) -> Number:
    if established_max is not None and established_max > 0:
        return established_max
    if fallback_default is not None:
        return fallback_default
    return default_max(scheduled_set.measurement_type)


# --- Working-set targets -----------------------------------------------------

def rfem_target(
    scheduled_set: ScheduledSet,
    workout: ScheduledWorkout,
    established_max: Optional[Number] = None,
    fallback_default: Optional[Number] = None,
) -> int:
    """
    Established max minus the slot's RFEM value, floored.

    Time-based exercises lose a percentage of the max per RFEM point instead
    of a flat number of seconds.
    """
    if workout.rfem is None:
        return 0
    max_value = _effective_max(scheduled_set, established_max, fallback_default)

    if scheduled_set.is_time_based:
        remaining = max_value * (1 - workout.rfem * settings.RFEM_TIME_PERCENTAGE)
        return max(round_half_up(remaining), settings.RFEM_MIN_TARGET_TIME_SECONDS)
    return max(round_half_up(max_value - workout.rfem), settings.RFEM_MIN_TARGET_REPS)


def simple_target(scheduled_set: ScheduledSet, workout: ScheduledWorkout) -> Number:
    """Base reps/seconds plus increment times the number of elapsed intervals."""
    progression = scheduled_set.progression
    if not isinstance(progression, SimpleProgression):
        return 0
    base = progression.base_for(scheduled_set.measurement_type)
    if base is None or base <= 0:
        return 0
    steps = progression_steps(progression.interval, workout, scheduled_set.occurrence_index)
    return _tidy(base + progression.increment * steps)


def conditioning_target(
    scheduled_set: ScheduledSet,
    workout: ScheduledWorkout,
    increments: Optional[CycleIncrements] = None,
) -> Number:
    """Conditioning base plus a weekly increment."""
    base = scheduled_set.conditioning_base
    if not base:
        base = (
            settings.CONDITIONING_DEFAULT_BASE_TIME
            if scheduled_set.is_time_based
            else settings.CONDITIONING_DEFAULT_BASE_REPS
        )
    increment = scheduled_set.conditioning_increment
    if increment is None:
        increment = (increments or CycleIncrements()).for_measurement(
            scheduled_set.measurement_type
        )
    return _tidy(base + increment * max(workout.week_number - 1, 0))


def working_target(
    scheduled_set: ScheduledSet,
    workout: ScheduledWorkout,
    established_max: Optional[Number] = None,
    increments: Optional[CycleIncrements] = None,
    fallback_default: Optional[Number] = None,
) -> Number:
    """Target of the non-warmup set for this exercise and slot."""
    if scheduled_set.is_conditioning:
        return conditioning_target(scheduled_set, workout, increments)
    if isinstance(scheduled_set.progression, SimpleProgression):
        return simple_target(scheduled_set, workout)
    return rfem_target(scheduled_set, workout, established_max, fallback_default)


def warmup_target(
    scheduled_set: ScheduledSet,
    workout: ScheduledWorkout,
    established_max: Optional[Number] = None,
    increments: Optional[CycleIncrements] = None,
    fallback_default: Optional[Number] = None,
    include_timed_warmups: bool = True,
) -> int:
    """
    Scale the working target by the warm-up tier percentage.

    Max-test warm-ups have no working target to scale, so they scale the
    established max instead, and are skipped (0) for an exercise never tested.
    """
    if scheduled_set.is_time_based and not include_timed_warmups:
        return 0

    if scheduled_set.is_max_test:
        if established_max is None or established_max <= 0:
            return 0
        working = established_max
    else:
        working = working_target(
            scheduled_set, workout, established_max, increments, fallback_default
        )
    if not working:
        return 0

    percentage = scheduled_set.warmup_percentage or settings.WARMUP_PERCENTAGES[0]
    scaled = round_half_up(working * percentage / 100)
    minimum = (
        settings.WARMUP_MIN_TIME_SECONDS
        if scheduled_set.is_time_based
        else settings.WARMUP_MIN_REPS
    )
    return max(scaled, minimum)


def target_for(
    scheduled_set: ScheduledSet,
    workout: ScheduledWorkout,
    established_max: Optional[Number] = None,
    increments: Optional[CycleIncrements] = None,
    fallback_default: Optional[Number] = None,
    include_timed_warmups: bool = True,
) -> Number:
    """
    Resolve the reps or seconds the user should perform for a set.

    Args:
        scheduled_set: The set, carrying its assignment's progression snapshot.
        workout: The workout the set belongs to (week, RFEM value).
        established_max: Latest max reps/seconds for the exercise, if any.
        increments: Cycle-wide conditioning increments.
        fallback_default: Max to assume when nothing has been recorded.
        include_timed_warmups: When False, timed warm-ups resolve to 0.

    Returns:
        The target, or 0 when no bounded target applies (max tests,
        suppressed warm-ups, malformed configuration).
    """
    if scheduled_set.is_max_test and not scheduled_set.is_warmup:
        return GO_TO_MAX
    if scheduled_set.is_warmup:
        return warmup_target(
            scheduled_set,
            workout,
            established_max,
            increments,
            fallback_default,
            include_timed_warmups,
        )
    return working_target(scheduled_set, workout, established_max, increments, fallback_default)


def is_go_to_max(scheduled_set: ScheduledSet) -> bool:
    return scheduled_set.is_max_test and not scheduled_set.is_warmup


# --- Weights -----------------------------------------------------------------

def _working_weight(scheduled_set: ScheduledSet, workout: ScheduledWorkout) -> Optional[float]:
    progression = scheduled_set.progression
    if isinstance(progression, SimpleProgression) and progression.base_weight is not None:
        steps = progression_steps(
            progression.weight_interval, workout, scheduled_set.occurrence_index
        )
        return progression.base_weight + progression.weight_increment * steps
    return scheduled_set.default_weight


def weight_for(scheduled_set: ScheduledSet, workout: ScheduledWorkout) -> Optional[float]:
    """
    Added weight for a weighted exercise, on top of the reps/time target.

    Warm-ups scale the weight by their tier when weight is what progresses,
    otherwise they keep a fixed reduced share of the working weight.
    """
    if not scheduled_set.weight_enabled:
        return None
    working = _working_weight(scheduled_set, workout)
    if working is None:
        return None
    if not scheduled_set.is_warmup:
        return working

    progression = scheduled_set.progression
    if isinstance(progression, SimpleProgression) and progression.weight_progresses:
        percentage = scheduled_set.warmup_percentage or settings.WARMUP_PERCENTAGES[0]
        factor = percentage / 100
    else:
        factor = settings.WARMUP_REDUCED_INTENSITY_FACTOR
    return round_to_increment(working * factor)


def resolve_workout_targets(
    workout: ScheduledWorkout,
    established_maxes: Dict[str, Number],
    increments: Optional[CycleIncrements] = None,
    fallback_default: Optional[Number] = None,
    include_timed_warmups: bool = True,
) -> List[SetTarget]:
    """Resolve every set of a workout against a snapshot of established maxes."""
    targets: List[SetTarget] = []
    for s in workout.scheduled_sets:
        targets.append(
            SetTarget(
                set_id=s.id,
                exercise_id=s.exercise_id,
                is_warmup=s.is_warmup,
                go_to_max=is_go_to_max(s),
                target=target_for(
                    s,
                    workout,
                    established_maxes.get(s.exercise_id),
                    increments,
                    fallback_default,
                    include_timed_warmups,
                ),
                weight=weight_for(s, workout),
            )
        )
    return targets
