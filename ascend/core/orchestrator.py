"""
Cycle planning service.

Glues the pure schedule engine to a Data Access Layer: it validates and
stores cycles, generates and persists their workouts, regenerates schedules
after an edit and resolves set targets for display. Callers are expected to
serialise edits to the same cycle; nothing here locks.
"""

from datetime import date
from typing import Dict, List, Optional

from ascend.config import settings
from ascend.core import ad_hoc, max_records
from ascend.core.max_testing import build_max_testing_cycle, updated_conditioning_baselines
from ascend.core.models import (
    ConditioningSettings,
    Cycle,
    EditMode,
    Exercise,
    ExerciseAssignment,
    ExerciseCycleDefaults,
    ScheduledWorkout,
    SimpleProgression,
    effective_mode,
)
from ascend.core.plan_builder import generate_schedule, next_workout_index
from ascend.core.progression import CycleIncrements, SetTarget, resolve_workout_targets
from ascend.core.set_goals import SetGoalStatus, set_goal_report
from ascend.core.validation import ValidationResult, validate_cycle
from ascend.data_access.dal import DataAccessLayer
from ascend.infra import log_utils


class CycleValidationError(Exception):
    """Raised when a cycle with blocking configuration errors is committed."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.errors))


class CycleNotFoundError(LookupError):
    pass


class CyclePlanner:
    def __init__(self, dal: DataAccessLayer):
        """The DAL is injected so the planner works with any storage backend."""
        self.dal = dal

    # --- Helpers ---
    def _load_cycle(self, cycle_id: str) -> Cycle:
        cycle = self.dal.load_cycle(cycle_id)
        if cycle is None:
            raise CycleNotFoundError(f"Cycle {cycle_id} not found")
        return cycle

    def _require_valid(self, cycle: Cycle, exercises: Dict[str, Exercise]) -> ValidationResult:
        result = validate_cycle(cycle, exercises)
        for warning in result.warnings:
            log_utils.log_message(f"[planner] {cycle.name}: {warning}", "WARN")
        if not result.valid:
            log_utils.log_message(
                f"[planner] Rejected cycle {cycle.id}: {'; '.join(result.errors)}", "ERROR"
            )
            raise CycleValidationError(result)
        return result

    # --- Validation & creation ---
    def validate(self, cycle: Cycle) -> ValidationResult:
        return validate_cycle(cycle, self.dal.load_exercises())

    def create_cycle(self, cycle: Cycle) -> List[ScheduledWorkout]:
        """Validate, store and schedule a new cycle. Returns the generated workouts."""
        exercises = self.dal.load_exercises()
        self._require_valid(cycle, exercises)
        if cycle.status == "planning":
            cycle = cycle.model_copy(update={"status": "active"})

        self.dal.save_cycle(cycle)
        workouts = generate_schedule(cycle, exercises)
        self.dal.save_workouts(workouts)
        self.remember_cycle_settings(cycle, exercises)
        log_utils.log_message(
            f"[planner] Created cycle {cycle.id} ({cycle.name}) with {len(workouts)} workouts"
        )
        return workouts

    # --- Editing ---
    def needs_edit_mode_choice(self, cycle_id: str) -> bool:
        """True once any scheduled workout of the cycle has been completed or skipped."""
        return any(
            w.is_settled and not w.is_ad_hoc for w in self.dal.get_workouts(cycle_id)
        )

    def edit_cycle(self, cycle: Cycle, mode: EditMode = "continue") -> List[ScheduledWorkout]:
        """
        Store an edited cycle and regenerate its schedule.

        Args:
            cycle: The edited configuration (same id as the stored cycle).
            mode: "continue" keeps completed/skipped history and resumes the
                rotation after it; "restart" discards every workout and
                generates from the first slot.

        Returns:
            The newly generated workouts.
        """
        if mode not in ("continue", "restart"):
            raise ValueError(f"Unknown edit mode: {mode}")
        self._load_cycle(cycle.id)
        exercises = self.dal.load_exercises()
        self._require_valid(cycle, exercises)
        self.dal.save_cycle(cycle)

        if mode == "continue":
            existing = self.dal.get_workouts(cycle.id)
            stale = [
                w.id
                for w in existing
                if not w.is_ad_hoc and w.status in ("pending", "partial")
            ]
            self.dal.delete_workouts(stale)
            stale_ids = set(stale)
            kept = [w for w in existing if w.id not in stale_ids]
            start = next_workout_index(kept)
            log_utils.log_message(
                f"[planner] Continuing cycle {cycle.id}: dropped {len(stale)} open workouts, "
                f"resuming at slot {start + 1}"
            )
        else:
            self.dal.delete_workouts_for_cycle(cycle.id)
            start = 0
            log_utils.log_message(f"[planner] Restarting cycle {cycle.id} from slot 1")

        workouts = generate_schedule(cycle, exercises, start_from_workout=start)
        self.dal.save_workouts(workouts)
        self.remember_cycle_settings(cycle, exercises)
        return workouts

    # --- Read-time queries ---
    def resolve_targets(
        self, workout: ScheduledWorkout, cycle: Optional[Cycle] = None
    ) -> List[SetTarget]:
        """Resolve every set of a workout against the current established maxes."""
        cycle = cycle or self._load_cycle(workout.cycle_id)
        exercises = self.dal.load_exercises()
        used = {s.exercise_id for s in workout.scheduled_sets}
        maxes = max_records.get_established_maxes(
            self.dal, [exercises[ex_id] for ex_id in sorted(used) if ex_id in exercises]
        )
        return resolve_workout_targets(
            workout,
            maxes,
            CycleIncrements.from_cycle(cycle),
            include_timed_warmups=cycle.include_timed_warmups,
        )

    def set_goal_report(self, cycle_id: str) -> List[SetGoalStatus]:
        cycle = self._load_cycle(cycle_id)
        return set_goal_report(cycle, self.dal.get_workouts(cycle_id))

    # --- Out-of-band workouts ---
    def start_ad_hoc_workout(self, cycle_id: str, name: Optional[str] = None) -> ScheduledWorkout:
        cycle = self._load_cycle(cycle_id)
        workout = ad_hoc.build_ad_hoc_workout(cycle, self.dal.get_workouts(cycle_id), name)
        self.dal.save_workouts([workout])
        log_utils.log_message(
            f"[planner] Started '{workout.custom_name}' in cycle {cycle_id} at {workout.sort_key}"
        )
        return workout

    def plan_max_testing(
        self,
        previous_cycle_id: str,
        start_date: date,
        conditioning_baselines: Optional[Dict[str, int]] = None,
    ) -> List[ScheduledWorkout]:
        """
        Close a training cycle and schedule the max-testing cycle that follows it.

        Args:
            previous_cycle_id: The training cycle being finished.
            start_date: First day of the max-testing cycle.
            conditioning_baselines: Optional new base reps/seconds for the
                cycle's conditioning exercises, saved onto the catalog.

        Returns:
            The generated max-test workouts, one per test day.
        """
        previous = self._load_cycle(previous_cycle_id)
        exercises = self.dal.load_exercises()
        cycle = build_max_testing_cycle(previous, exercises, start_date)
        self._require_valid(cycle, exercises)

        if previous.status != "completed":
            self.dal.save_cycle(previous.model_copy(update={"status": "completed"}))
            log_utils.log_message(f"[planner] Marked cycle {previous.id} completed")
        for exercise in updated_conditioning_baselines(
            previous, exercises, conditioning_baselines or {}
        ):
            self.dal.save_exercise(exercise)
            log_utils.log_message(f"[planner] Updated conditioning baseline of {exercise.id}")

        return self.create_cycle(cycle)

    # --- Last-used settings ---
    def remember_cycle_settings(self, cycle: Cycle, exercises: Dict[str, Exercise]) -> None:
        """Store each exercise's settings so the next cycle can start from them."""
        if cycle.is_max_testing:
            return
        for group in cycle.groups:
            for assignment in group.assignments:
                if assignment.exercise_id not in exercises:
                    continue
                progression = assignment.progression
                self.dal.save_cycle_defaults(
                    assignment.exercise_id,
                    ExerciseCycleDefaults(
                        progression_mode=effective_mode(cycle.progression_mode, assignment),
                        simple=progression if isinstance(progression, SimpleProgression) else None,
                        conditioning=assignment.conditioning,
                    ),
                )

    def seed_assignment(self, exercise: Exercise, cycle_mode: str) -> ExerciseAssignment:
        """
        Build a starting assignment for an exercise added to a new cycle,
        preferring the settings it was last used with.
        """
        defaults = self.dal.load_cycle_defaults(exercise.id)

        conditioning = None
        if exercise.is_conditioning:
            conditioning = (defaults.conditioning if defaults else None) or ConditioningSettings(
                base_reps=None if exercise.is_time_based else (
                    exercise.default_conditioning_reps or settings.CONDITIONING_DEFAULT_BASE_REPS
                ),
                base_time=(
                    exercise.default_conditioning_time or settings.CONDITIONING_DEFAULT_BASE_TIME
                ) if exercise.is_time_based else None,
            )

        wants_simple = cycle_mode == "simple" or (
            cycle_mode == "mixed" and defaults is not None and defaults.progression_mode == "simple"
        )
        progression = None
        if wants_simple and not exercise.is_conditioning:
            progression = (defaults.simple if defaults else None) or SimpleProgression(
                base_reps=None if exercise.is_time_based else settings.RFEM_DEFAULT_MAX,
                base_time=settings.RFEM_DEFAULT_TIME_MAX if exercise.is_time_based else None,
                base_weight=exercise.default_weight if exercise.weight_enabled else None,
            )
        return ExerciseAssignment(
            exercise_id=exercise.id, progression=progression, conditioning=conditioning
        )
