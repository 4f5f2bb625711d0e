"""Domain models for training cycles, exercises and scheduled workouts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


CycleStatus = Literal["planning", "active", "completed"]
CycleType = Literal["training", "max_testing"]
ProgressionMode = Literal["rfem", "simple", "mixed"]
ExerciseProgressionMode = Literal["rfem", "simple"]
ProgressionInterval = Literal["constant", "per_workout", "per_week"]
SchedulingMode = Literal["sequence", "date"]
MeasurementType = Literal["reps", "time"]
ExerciseMode = Literal["standard", "conditioning"]
ExerciseType = Literal["push", "pull", "legs", "core", "balance", "mobility", "other"]
WorkoutStatus = Literal["pending", "partial", "completed", "skipped"]
EditMode = Literal["continue", "restart"]

# Display order used by reports
EXERCISE_TYPES: List[str] = ["legs", "push", "pull", "core", "balance", "mobility", "other"]


# --- Exercise catalog ---------------------------------------------------------

class Exercise(BaseModel):
    id: str
    name: str
    type: ExerciseType = "other"
    mode: ExerciseMode = "standard"
    measurement_type: MeasurementType = "reps"
    weight_enabled: bool = False
    default_weight: Optional[float] = None
    default_conditioning_reps: Optional[int] = None
    default_conditioning_time: Optional[int] = None
    notes: str = ""

    @property
    def is_conditioning(self) -> bool:
        return self.mode == "conditioning"

    @property
    def is_time_based(self) -> bool:
        return self.measurement_type == "time"


class MaxRecord(BaseModel):
    """A recorded maximum effort. Exactly one of max_reps / max_time is set."""

    id: str
    exercise_id: str
    max_reps: Optional[int] = None
    max_time: Optional[int] = None
    weight: Optional[float] = None
    recorded_at: datetime
    notes: str = ""


# --- Progression variants -----------------------------------------------------

class RfemProgression(BaseModel):
    mode: Literal["rfem"] = "rfem"


class SimpleProgression(BaseModel):
    """
    Linear progression: base value plus an increment per interval.

    Only one of base_reps / base_time is populated, matching the exercise's
    measurement type. Weight progresses independently of the reps/time value.
    """

    mode: Literal["simple"] = "simple"
    base_reps: Optional[int] = None
    base_time: Optional[int] = None
    interval: ProgressionInterval = "constant"
    increment: float = 0
    base_weight: Optional[float] = None
    weight_interval: ProgressionInterval = "constant"
    weight_increment: float = 0

    def base_for(self, measurement_type: str) -> Optional[int]:
        return self.base_time if measurement_type == "time" else self.base_reps

    @property
    def weight_progresses(self) -> bool:
        return self.weight_interval != "constant" and bool(self.weight_increment)


Progression = Annotated[
    Union[RfemProgression, SimpleProgression], Field(discriminator="mode")
]


class ConditioningSettings(BaseModel):
    """Base value for conditioning exercises plus optional per-exercise weekly increments."""

    base_reps: Optional[int] = None
    base_time: Optional[int] = None
    rep_increment: Optional[float] = None
    time_increment: Optional[float] = None


# --- Cycle configuration ------------------------------------------------------

class ExerciseAssignment(BaseModel):
    exercise_id: str
    progression: Optional[Progression] = None
    conditioning: Optional[ConditioningSettings] = None


class Group(BaseModel):
    id: str
    name: str
    assignments: List[ExerciseAssignment] = []


class Cycle(BaseModel):
    id: str
    name: str
    status: CycleStatus = "planning"
    cycle_type: CycleType = "training"
    progression_mode: ProgressionMode = "rfem"
    previous_cycle_id: Optional[str] = None
    start_date: Optional[date] = None
    number_of_weeks: int = 4
    workout_days_per_week: int = 3
    scheduling_mode: SchedulingMode = "sequence"
    selected_days: List[int] = []
    groups: List[Group] = []
    group_rotation: List[str] = []
    rfem_rotation: List[int] = []
    weekly_set_goals: Dict[ExerciseType, int] = {}
    conditioning_weekly_rep_increment: float = 2
    conditioning_weekly_time_increment: float = 5
    include_warmup_sets: bool = True
    include_timed_warmups: bool = True

    @property
    def is_date_scheduled(self) -> bool:
        return self.scheduling_mode == "date"

    @property
    def is_max_testing(self) -> bool:
        return self.cycle_type == "max_testing"

    @property
    def effective_days_per_week(self) -> int:
        if self.is_date_scheduled:
            return len({d for d in self.selected_days if 0 <= d <= 6})
        return self.workout_days_per_week

    @property
    def total_workouts(self) -> int:
        return self.number_of_weeks * self.effective_days_per_week

    def group_by_id(self) -> Dict[str, Group]:
        return {g.id: g for g in self.groups}


def effective_mode(
    cycle_mode: str, assignment: ExerciseAssignment
) -> ExerciseProgressionMode:
    """
    Resolve the progression arithmetic that applies to one assignment.

    rfem and simple cycles force their own mode; mixed cycles use the
    assignment's variant and default to rfem when none was chosen.
    """
    if cycle_mode == "mixed":
        return assignment.progression.mode if assignment.progression else "rfem"
    return "simple" if cycle_mode == "simple" else "rfem"


# --- Generated schedule -------------------------------------------------------

class ScheduledSet(BaseModel):
    id: str
    exercise_id: str
    exercise_type: ExerciseType = "other"
    measurement_type: MeasurementType = "reps"
    set_number: int = 1
    is_warmup: bool = False
    warmup_percentage: Optional[int] = None
    is_max_test: bool = False
    is_conditioning: bool = False
    progression: Optional[Progression] = None
    conditioning_base: Optional[int] = None
    conditioning_increment: Optional[float] = None
    occurrence_index: int = 0
    weight_enabled: bool = False
    default_weight: Optional[float] = None

    @property
    def is_time_based(self) -> bool:
        return self.measurement_type == "time"


class ScheduledWorkout(BaseModel):
    id: str
    cycle_id: str
    sequence_number: Optional[int] = None
    sort_key: float = 0
    week_number: int = 1
    day_in_week: int = 1
    scheduled_date: Optional[date] = None
    group_id: Optional[str] = None
    rfem: Optional[int] = None
    scheduled_sets: List[ScheduledSet] = []
    status: WorkoutStatus = "pending"
    is_ad_hoc: bool = False
    custom_name: Optional[str] = None
    completed_at: Optional[datetime] = None
    skip_reason: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        return self.status in ("completed", "skipped")


# --- Last-used settings collaborator -----------------------------------------

class ExerciseCycleDefaults(BaseModel):
    """Settings an exercise was last configured with, used to seed new assignments."""

    progression_mode: ExerciseProgressionMode = "rfem"
    simple: Optional[SimpleProgression] = None
    conditioning: Optional[ConditioningSettings] = None
