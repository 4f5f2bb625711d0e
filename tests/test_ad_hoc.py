from ascend.core.ad_hoc import ad_hoc_sort_key, build_ad_hoc_workout
from ascend.core.models import Cycle, ScheduledWorkout


def make_workout(n: int, status: str = "pending") -> ScheduledWorkout:
    return ScheduledWorkout(
        id=f"w-{n}", cycle_id="c-1", sequence_number=n, sort_key=float(n), status=status
    )


def test_sort_key_between_last_settled_and_next_pending():
    existing = [make_workout(1, "completed"), make_workout(2, "skipped"), make_workout(3)]
    assert ad_hoc_sort_key(existing) == 2.5


def test_sort_key_before_first_workout():
    assert ad_hoc_sort_key([make_workout(1), make_workout(2)]) == 0.5


def test_sort_key_after_everything_settled():
    assert ad_hoc_sort_key([make_workout(1, "completed")]) == 1.5
    assert ad_hoc_sort_key([]) == 0.5


def test_build_ad_hoc_workout():
    cycle = Cycle(id="c-1", name="Winter block", workout_days_per_week=3)
    existing = [make_workout(n, "completed") for n in range(1, 5)] + [make_workout(5)]

    first = build_ad_hoc_workout(cycle, existing, workout_id="adhoc-1")
    assert first.id == "adhoc-1"
    assert first.is_ad_hoc
    assert first.sequence_number is None
    assert first.group_id is None
    assert first.status == "partial"
    assert first.custom_name == "Ad Hoc Workout 1"
    assert first.sort_key == 4.5
    assert first.week_number == 2

    second = build_ad_hoc_workout(cycle, existing + [first], name="  Hotel gym ")
    assert second.custom_name == "Hotel gym"
    assert first.sort_key < second.sort_key < 5.0
