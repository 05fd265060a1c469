"""
Dose time parsing
Turns a stored time-of-day string into the next absolute fire time
"""
import logging
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2}):(\d{2})$")
_TWELVE_HOUR = re.compile(r"^(\d{1,2}):(\d{2})\s*([ap]m)$", re.IGNORECASE)


def parse_time_of_day(text: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Parse "HH:MM" (24-hour) or "H:MM AM/PM" (12-hour) into (hour, minute)

    12 AM maps to hour 0 and 12 PM to hour 12.

    Args:
        text: dose time string

    Returns:
        (hour, minute) in 24-hour form, or None if the string is not a valid time
    """
    if not text:
        return None
    value = text.strip()

    match = _TWELVE_HOUR.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if not 1 <= hour <= 12 or minute > 59:
            return None
        meridiem = match.group(3).upper()
        if meridiem == "PM" and hour != 12:
            hour += 12
        elif meridiem == "AM" and hour == 12:
            hour = 0
        return hour, minute

    match = _TWENTY_FOUR_HOUR.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            return None
        return hour, minute

    return None


def next_occurrence(text: Optional[str], now: datetime) -> Optional[datetime]:
    """
    Next moment the time of day occurs, today or tomorrow

    Args:
        text: dose time string
        now: current local time

    Returns:
        today's occurrence if it is still ahead of now, otherwise tomorrow's;
        None when the string cannot be parsed
    """
    parsed = parse_time_of_day(text)
    if parsed is None:
        logger.error(f"Invalid dose time format: {text!r}")
        return None

    hour, minute = parsed
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def sort_key(text: Optional[str]) -> Tuple[int, int, str]:
    """
    Chronological sort key for dose time strings; unparsable values sort last

    Args:
        text: dose time string

    Returns:
        sortable tuple
    """
    parsed = parse_time_of_day(text)
    if parsed is None:
        return 24, 0, text or ""
    return parsed[0], parsed[1], text or ""
