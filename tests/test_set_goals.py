from ascend.core.models import Cycle, Exercise, ExerciseAssignment, Group
from ascend.core.plan_builder import generate_schedule
from ascend.core.set_goals import set_goal_report

EXERCISES = {
    "pushup": Exercise(id="pushup", name="Push-up", type="push"),
    "row": Exercise(id="row", name="Row", type="pull"),
    "squat": Exercise(id="squat", name="Squat", type="legs"),
}


def make_cycle(**overrides) -> Cycle:
    fields = {
        "id": "c-1",
        "name": "Winter block",
        "number_of_weeks": 2,
        "workout_days_per_week": 3,
        "groups": [
            Group(
                id="A",
                name="Upper",
                assignments=[
                    ExerciseAssignment(exercise_id="pushup"),
                    ExerciseAssignment(exercise_id="row"),
                ],
            ),
            Group(id="B", name="Lower", assignments=[ExerciseAssignment(exercise_id="squat")]),
        ],
        "group_rotation": ["A", "B"],
        "rfem_rotation": [3],
        "weekly_set_goals": {"push": 2, "legs": 2, "core": 3},
    }
    fields.update(overrides)
    return Cycle(**fields)


def test_report_counts_working_sets_per_week():
    cycle = make_cycle()
    report = {r.exercise_type: r for r in set_goal_report(cycle, generate_schedule(cycle, EXERCISES))}

    # A B A | B A B
    assert report["push"].sets_per_week == {1: 2, 2: 1}
    assert report["push"].weeks_below_goal == [2]
    assert report["legs"].sets_per_week == {1: 1, 2: 2}
    assert report["legs"].average_per_week == 1.5


def test_report_includes_goal_without_sets_and_sets_without_goal():
    cycle = make_cycle()
    report = {r.exercise_type: r for r in set_goal_report(cycle, generate_schedule(cycle, EXERCISES))}

    assert report["core"].sets_per_week == {1: 0, 2: 0}
    assert report["pull"].weekly_goal == 0
    assert "balance" not in report


def test_warmups_do_not_count():
    cycle = make_cycle(include_warmup_sets=True)
    report = {r.exercise_type: r for r in set_goal_report(cycle, generate_schedule(cycle, EXERCISES))}
    assert report["push"].sets_per_week == {1: 2, 2: 1}
