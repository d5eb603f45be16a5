"""
Week boundary helpers.
Every weekly score is anchored to the Monday that starts its ISO week.
"""
from datetime import date, timedelta
from typing import Tuple

from habit_tracker.shared.constants import DAYS_PER_WEEK


def get_today() -> date:
    """Current local calendar date"""
    return date.today()


def get_week_start(target_date: date) -> date:
    """
    Get the Monday of the ISO week containing target_date.

    Idempotent: get_week_start(get_week_start(d)) == get_week_start(d).

    Args:
        target_date: Any date within the week

    Returns:
        Monday of that week
    """
    return target_date - timedelta(days=target_date.weekday())


def get_week_end(week_start: date) -> date:
    """Sunday closing the week that starts on week_start (inclusive)"""
    return week_start + timedelta(days=DAYS_PER_WEEK - 1)


def get_week_range(target_date: date) -> Tuple[date, date]:
    """
    Get the inclusive (monday, sunday) range of the week containing target_date.

    Args:
        target_date: Any date within the week

    Returns:
        Tuple of (week_start, week_end)
    """
    week_start = get_week_start(target_date)
    return week_start, get_week_end(week_start)


def get_history_start(today: date, weeks: int) -> date:
    """
    Oldest week start included in a history of `weeks` weeks ending with
    the week containing today.

    Example: weeks=4 on a Wednesday returns the Monday three weeks before
    this week's Monday.
    """
    return get_week_start(today) - timedelta(weeks=weeks - 1)
