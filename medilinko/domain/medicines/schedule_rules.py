"""
Rules deciding on which days a medicine dose applies
Shared by the calendar views and the reminder scheduler
"""
from datetime import date
from typing import Iterable, Optional

DAILY = "daily"
WEEKLY = "weekly"


def weekday_number(day: date) -> int:
    """
    Weekday numbering used by stored doses: 0 = Sunday ... 6 = Saturday

    Args:
        day: calendar date

    Returns:
        weekday number
    """
    return (day.weekday() + 1) % 7


def dose_applies_on(frequency: Optional[str], days_of_week: Optional[Iterable[int]], day: date) -> bool:
    """
    Whether a dose is due on a given day

    Daily doses apply every day. Weekly doses apply only on the listed
    weekdays; a weekly dose without weekdays never applies.

    Args:
        frequency: "daily" or "weekly" (None means daily)
        days_of_week: weekday numbers 0-6
        day: calendar date

    Returns:
        True if the dose is due
    """
    freq = getattr(frequency, "value", frequency) or DAILY
    if freq == DAILY:
        return True
    if freq == WEEKLY:
        days = list(days_of_week or [])
        return bool(days) and weekday_number(day) in days
    return False


def course_covers(start_date: Optional[date], end_date: Optional[date], day: date) -> bool:
    """
    Whether a day lies within a medicine's course (both ends inclusive)

    Args:
        start_date: first day or None
        end_date: last day or None
        day: calendar date

    Returns:
        True if covered
    """
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True
