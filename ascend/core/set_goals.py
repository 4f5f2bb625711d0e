"""Weekly set goal reporting.

Weekly set goals describe intent; they are not enforced while generating.
This compares them with the working sets a schedule actually contains.
"""

from collections import defaultdict
from typing import Dict, Iterable, List

from pydantic import BaseModel

from ascend.core.models import EXERCISE_TYPES, Cycle, ScheduledWorkout


class SetGoalStatus(BaseModel):
    exercise_type: str
    weekly_goal: int
    sets_per_week: Dict[int, int]

    @property
    def average_per_week(self) -> float:
        if not self.sets_per_week:
            return 0.0
        return sum(self.sets_per_week.values()) / len(self.sets_per_week)

    @property
    def weeks_below_goal(self) -> List[int]:
        return sorted(w for w, n in self.sets_per_week.items() if n < self.weekly_goal)


def set_goal_report(cycle: Cycle, workouts: Iterable[ScheduledWorkout]) -> List[SetGoalStatus]:
    """
    Count scheduled working sets per exercise type and week against the goals.

    Warm-ups and ad-hoc workouts do not count. Types with neither a goal nor
    any scheduled sets are left out.
    """
    counts: Dict[str, Dict[int, int]] = defaultdict(lambda: defaultdict(int))
    weeks = set(range(1, cycle.number_of_weeks + 1))

    for workout in workouts:
        if workout.is_ad_hoc:
            continue
        weeks.add(workout.week_number)
        for s in workout.scheduled_sets:
            if not s.is_warmup:
                counts[s.exercise_type][workout.week_number] += 1

    report: List[SetGoalStatus] = []
    for exercise_type in EXERCISE_TYPES:
        goal = cycle.weekly_set_goals.get(exercise_type, 0)
        if not goal and exercise_type not in counts:
            continue
        per_week = {w: counts[exercise_type].get(w, 0) for w in sorted(weeks)}
        report.append(SetGoalStatus(exercise_type=exercise_type, weekly_goal=goal, sets_per_week=per_week))
    return report
