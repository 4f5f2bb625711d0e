"""Calendar expansion for date-scheduled cycles."""

from datetime import date, timedelta
from typing import Iterable, List


def weekday_index(d: date) -> int:
    """Weekday with Sunday=0 .. Saturday=6 (Python's own numbering starts at Monday)."""
    return (d.weekday() + 1) % 7


def expand_dates(
    start_date: date, number_of_weeks: int, selected_days: Iterable[int]
) -> List[date]:
    """
    Expand a start date and weekday selection into concrete workout dates.

    Args:
        start_date: First day a workout may fall on.
        number_of_weeks: Number of weeks the cycle runs.
        selected_days: Weekday indices, 0=Sunday .. 6=Saturday.

    Returns:
        Exactly ``number_of_weeks * len(set(selected_days))`` dates, in
        chronological order, none earlier than ``start_date``. When the start
        date falls mid-week, the weekdays already behind it are taken from the
        week following the last full one.
    """
    days = {d for d in selected_days if 0 <= d <= 6}
    if not days or number_of_weeks < 1:
        return []

    wanted = number_of_weeks * len(days)
    dates: List[date] = []
    current = start_date
    while len(dates) < wanted:
        if weekday_index(current) in days:
            dates.append(current)
        current += timedelta(days=1)
    return dates
