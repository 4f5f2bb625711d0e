from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

import pytest

from ascend.core.models import (
    ConditioningSettings,
    Cycle,
    Exercise,
    ExerciseAssignment,
    ExerciseCycleDefaults,
    Group,
    MaxRecord,
    ScheduledWorkout,
    SimpleProgression,
)
from ascend.core.orchestrator import CycleNotFoundError, CyclePlanner, CycleValidationError
from ascend.core.plan_builder import generate_schedule
from ascend.data_access.dal import DataAccessLayer


class DummyDal(DataAccessLayer):
    def __init__(self, exercises: Dict[str, Exercise]):
        self.exercises = dict(exercises)
        self.cycles: Dict[str, Cycle] = {}
        self.workouts: Dict[str, ScheduledWorkout] = {}
        self.records: List[MaxRecord] = []
        self.defaults: Dict[str, ExerciseCycleDefaults] = {}

    # Exercise catalog
    def load_exercises(self) -> Dict[str, Exercise]:
        return dict(self.exercises)

    def save_exercise(self, exercise: Exercise) -> None:
        self.exercises[exercise.id] = exercise

    # Cycles
    def load_cycle(self, cycle_id: str) -> Optional[Cycle]:
        return self.cycles.get(cycle_id)

    def list_cycles(self) -> List[Cycle]:
        return list(self.cycles.values())

    def save_cycle(self, cycle: Cycle) -> None:
        self.cycles[cycle.id] = cycle

    # Scheduled workouts
    def get_workouts(self, cycle_id: str) -> List[ScheduledWorkout]:
        found = [w for w in self.workouts.values() if w.cycle_id == cycle_id]
        return sorted(found, key=lambda w: w.sort_key)

    def save_workouts(self, workouts: Iterable[ScheduledWorkout]) -> None:
        for w in workouts:
            self.workouts[w.id] = w

    def delete_workouts(self, workout_ids: Iterable[str]) -> None:
        for workout_id in workout_ids:
            self.workouts.pop(workout_id, None)

    def delete_workouts_for_cycle(self, cycle_id: str) -> None:
        self.workouts = {k: w for k, w in self.workouts.items() if w.cycle_id != cycle_id}

    # Max records
    def get_max_records(self, exercise_id: str) -> List[MaxRecord]:
        return [r for r in self.records if r.exercise_id == exercise_id]

    def save_max_record(self, record: MaxRecord) -> None:
        self.records.append(record)

    # Last-used settings
    def load_cycle_defaults(self, exercise_id: str) -> Optional[ExerciseCycleDefaults]:
        return self.defaults.get(exercise_id)

    def save_cycle_defaults(self, exercise_id: str, defaults: ExerciseCycleDefaults) -> None:
        self.defaults[exercise_id] = defaults


EXERCISES = {
    "pushup": Exercise(id="pushup", name="Push-up", type="push"),
    "squat": Exercise(id="squat", name="Squat", type="legs"),
    "plank": Exercise(id="plank", name="Plank", type="core", measurement_type="time"),
    "burpee": Exercise(
        id="burpee", name="Burpee", mode="conditioning", default_conditioning_reps=15
    ),
}


def make_cycle(**overrides) -> Cycle:
    fields = {
        "id": "c-1",
        "name": "Winter block",
        "number_of_weeks": 4,
        "workout_days_per_week": 3,
        "groups": [
            Group(id="A", name="Day A", assignments=[ExerciseAssignment(exercise_id="pushup")]),
            Group(id="B", name="Day B", assignments=[ExerciseAssignment(exercise_id="squat")]),
        ],
        "group_rotation": ["A", "B"],
        "rfem_rotation": [4, 3, 2],
        "weekly_set_goals": {"push": 6, "legs": 6},
    }
    fields.update(overrides)
    return Cycle(**fields)


def settle(dal: DummyDal, cycle_id: str, count: int, status: str = "completed") -> None:
    for w in dal.get_workouts(cycle_id)[:count]:
        dal.workouts[w.id] = w.model_copy(update={"status": status})


def test_create_cycle_activates_and_persists():
    dal = DummyDal(EXERCISES)
    workouts = CyclePlanner(dal).create_cycle(make_cycle())

    assert len(workouts) == 12
    assert dal.cycles["c-1"].status == "active"
    assert len(dal.get_workouts("c-1")) == 12
    assert dal.defaults["pushup"].progression_mode == "rfem"


def test_create_cycle_rejects_invalid_configuration():
    dal = DummyDal(EXERCISES)
    with pytest.raises(CycleValidationError) as excinfo:
        CyclePlanner(dal).create_cycle(make_cycle(rfem_rotation=[]))
    assert "RFEM rotation is required" in excinfo.value.result.errors
    assert dal.cycles == {}
    assert dal.workouts == {}


def test_continue_keeps_history_and_resumes_rotation():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    cycle = make_cycle()
    planner.create_cycle(cycle)
    settle(dal, "c-1", 4)
    assert planner.needs_edit_mode_choice("c-1")

    edited = cycle.model_copy(update={"rfem_rotation": [5]})
    new = planner.edit_cycle(edited, "continue")

    assert [w.sequence_number for w in new] == list(range(5, 13))
    assert all(w.rfem == 5 for w in new)
    stored = dal.get_workouts("c-1")
    assert len(stored) == 12
    assert [w.status for w in stored[:4]] == ["completed"] * 4
    # History keeps the rfem it was performed with
    assert [w.rfem for w in stored[:4]] == [4, 3, 2, 4]
    # Rotation continues from slot 5, not from the top
    assert new[0].group_id == "A"


def test_continue_without_edits_reproduces_schedule():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    cycle = make_cycle()
    original = planner.create_cycle(cycle)
    settle(dal, "c-1", 2, status="skipped")

    planner.edit_cycle(cycle, "continue")
    stored = dal.get_workouts("c-1")
    assert [w.id for w in stored] == [w.id for w in original]
    assert [w.group_id for w in stored] == [w.group_id for w in original]


def test_restart_is_idempotent():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    cycle = make_cycle()
    planner.create_cycle(cycle)
    settle(dal, "c-1", 3)

    planner.edit_cycle(cycle, "restart")
    first = [w.model_dump() for w in dal.get_workouts("c-1")]
    planner.edit_cycle(cycle, "restart")
    second = [w.model_dump() for w in dal.get_workouts("c-1")]

    assert first == second
    assert first == [w.model_dump() for w in generate_schedule(cycle, EXERCISES)]
    assert all(w["status"] == "pending" for w in first)


def test_edit_unknown_cycle():
    planner = CyclePlanner(DummyDal(EXERCISES))
    with pytest.raises(CycleNotFoundError):
        planner.edit_cycle(make_cycle(id="nope"))
    with pytest.raises(ValueError):
        planner.edit_cycle(make_cycle(), "rewind")


def test_ad_hoc_workout_does_not_disturb_continuation():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    cycle = make_cycle()
    planner.create_cycle(cycle)
    settle(dal, "c-1", 2)

    ad_hoc = planner.start_ad_hoc_workout("c-1")
    assert ad_hoc.custom_name == "Ad Hoc Workout 1"
    assert ad_hoc.sort_key == 2.5
    dal.workouts[ad_hoc.id] = ad_hoc.model_copy(update={"status": "completed"})

    new = planner.edit_cycle(cycle, "continue")
    assert new[0].sequence_number == 3
    ids = [w.id for w in dal.get_workouts("c-1")]
    assert ids.index(ad_hoc.id) == 2


def test_resolve_targets_uses_latest_max():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    workouts = planner.create_cycle(make_cycle(include_warmup_sets=True))
    dal.save_max_record(
        MaxRecord(id="m1", exercise_id="pushup", max_reps=20, recorded_at=datetime(2026, 1, 1))
    )

    targets = planner.resolve_targets(workouts[0])
    # Slot 1 is RFEM 4 against a max of 20
    assert [t.target for t in targets] == [3, 6, 16]
    assert [t.is_warmup for t in targets] == [True, True, False]


def test_set_goal_report_through_planner():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    planner.create_cycle(make_cycle())
    report = {r.exercise_type: r for r in planner.set_goal_report("c-1")}
    assert report["push"].weekly_goal == 6
    assert sum(report["push"].sets_per_week.values()) == 6


def test_plan_max_testing_closes_previous_cycle():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    planner.create_cycle(make_cycle())

    workouts = planner.plan_max_testing("c-1", date(2026, 2, 2))
    assert len(workouts) == 1
    max_cycle = dal.cycles[workouts[0].cycle_id]
    assert max_cycle.is_max_testing
    assert max_cycle.status == "active"
    assert dal.cycles["c-1"].status == "completed"


def test_plan_max_testing_one_workout_per_test_day():
    dal = DummyDal(dict(EXERCISES, dip=Exercise(id="dip", name="Dip", type="push")))
    planner = CyclePlanner(dal)
    groups = [
        Group(
            id="A",
            name="Day A",
            assignments=[
                ExerciseAssignment(exercise_id="pushup"),
                ExerciseAssignment(exercise_id="dip"),
                ExerciseAssignment(exercise_id="squat"),
            ],
        )
    ]
    planner.create_cycle(make_cycle(groups=groups, group_rotation=["A"]))

    workouts = planner.plan_max_testing("c-1", date(2026, 2, 2))
    assert [w.sequence_number for w in workouts] == [1, 2]
    assert [[s.exercise_id for s in w.scheduled_sets if not s.is_warmup] for w in workouts] == [
        ["pushup", "squat"],
        ["dip"],
    ]


def test_plan_max_testing_saves_new_conditioning_baselines():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    groups = [
        Group(
            id="A",
            name="Day A",
            assignments=[
                ExerciseAssignment(exercise_id="pushup"),
                ExerciseAssignment(
                    exercise_id="burpee", conditioning=ConditioningSettings(base_reps=15)
                ),
            ],
        )
    ]
    planner.create_cycle(
        make_cycle(groups=groups, group_rotation=["A"], weekly_set_goals={"push": 3, "other": 3})
    )

    planner.plan_max_testing("c-1", date(2026, 2, 2), conditioning_baselines={"burpee": 20})
    assert dal.exercises["burpee"].default_conditioning_reps == 20
    assert dal.exercises["pushup"] == EXERCISES["pushup"]


def test_plan_max_testing_without_standard_exercises_writes_nothing():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    groups = [Group(id="A", name="Day A", assignments=[ExerciseAssignment(exercise_id="burpee")])]
    planner.create_cycle(
        make_cycle(groups=groups, group_rotation=["A"], weekly_set_goals={"other": 3})
    )

    with pytest.raises(CycleValidationError):
        planner.plan_max_testing("c-1", date(2026, 2, 2), conditioning_baselines={"burpee": 20})
    assert dal.cycles["c-1"].status == "active"
    assert list(dal.cycles) == ["c-1"]
    assert dal.exercises["burpee"].default_conditioning_reps == 15


def test_seed_assignment_prefers_last_used_settings():
    dal = DummyDal(EXERCISES)
    planner = CyclePlanner(dal)
    progression = SimpleProgression(base_reps=12, interval="per_week", increment=1)
    groups = [
        Group(
            id="A",
            name="Day A",
            assignments=[
                ExerciseAssignment(exercise_id="pushup", progression=progression),
                ExerciseAssignment(
                    exercise_id="burpee", conditioning=ConditioningSettings(base_reps=20)
                ),
            ],
        )
    ]
    planner.create_cycle(
        make_cycle(
            progression_mode="mixed",
            groups=groups,
            group_rotation=["A"],
            weekly_set_goals={"push": 3, "other": 3},
        )
    )

    seeded = planner.seed_assignment(EXERCISES["pushup"], "mixed")
    assert seeded.progression == progression
    burpee = planner.seed_assignment(EXERCISES["burpee"], "rfem")
    assert burpee.conditioning.base_reps == 20


def test_seed_assignment_defaults_without_history():
    planner = CyclePlanner(DummyDal(EXERCISES))

    assert planner.seed_assignment(EXERCISES["squat"], "rfem").progression is None
    plank = planner.seed_assignment(EXERCISES["plank"], "simple")
    assert plank.progression.base_time == 30
    assert plank.progression.base_reps is None
    burpee = planner.seed_assignment(EXERCISES["burpee"], "rfem")
    assert burpee.conditioning.base_reps == 15
