"""
Ad-hoc workouts logged outside the generated schedule.

They never take a sequence number, so the generator's slot indexing is
untouched. Ordering comes from `sort_key` alone: an ad-hoc workout slots in
right after the last settled (or earlier ad-hoc) workout and before the
next scheduled one still due.
"""

import math
import uuid
from typing import Iterable, Optional

from ascend.core.models import Cycle, ScheduledWorkout


def ad_hoc_sort_key(existing: Iterable[ScheduledWorkout]) -> float:
    workouts = list(existing)
    anchors = [w.sort_key for w in workouts if w.is_settled or w.is_ad_hoc]
    after = max(anchors, default=0.0)
    upcoming = [
        w.sort_key
        for w in workouts
        if not w.is_settled and not w.is_ad_hoc and w.sort_key > after
    ]
    if upcoming:
        return (after + min(upcoming)) / 2
    return after + 0.5


def build_ad_hoc_workout(
    cycle: Cycle,
    existing: Iterable[ScheduledWorkout],
    name: Optional[str] = None,
    workout_id: Optional[str] = None,
) -> ScheduledWorkout:
    """Create an empty, in-progress ad-hoc workout for the cycle."""
    workouts = list(existing)
    ad_hoc_count = sum(1 for w in workouts if w.is_ad_hoc)
    passed = sum(1 for w in workouts if w.is_settled and not w.is_ad_hoc)
    days = max(cycle.effective_days_per_week, 1)

    return ScheduledWorkout(
        id=workout_id or str(uuid.uuid4()),
        cycle_id=cycle.id,
        sequence_number=None,
        sort_key=ad_hoc_sort_key(workouts),
        week_number=max(math.ceil(passed / days), 1),
        day_in_week=1,
        group_id=None,
        rfem=None,
        scheduled_sets=[],
        status="partial",
        is_ad_hoc=True,
        custom_name=(name or "").strip() or f"Ad Hoc Workout {ad_hoc_count + 1}",
    )
