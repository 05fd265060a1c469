"""
Calendar views over a patient's medicines
"""
import calendar as _calendar
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Set, Tuple

from medilinko.domain.medicines.schedule_rules import course_covers, dose_applies_on
from medilinko.domain.reminders.time_parser import sort_key
from medilinko.infrastructure.database.models.medicine import Medicine


def date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def _entry(medicine: Medicine, time: str) -> Dict[str, Any]:
    return {
        "medicine_id": medicine.id,
        "medicine_name": medicine.medicine_name,
        "dosage": medicine.dosage,
        "time": time,
    }


def build_month_calendar(medicines: Iterable[Medicine], year: int, month: int) -> Dict[str, List[Dict[str, Any]]]:
    """
    Dose occurrences of every day of a month

    Each medicine's course is clamped to the month; weekly doses only appear
    on their listed weekdays.

    Args:
        medicines: active medicines with doses loaded
        year: calendar year
        month: 1-12

    Returns:
        {"YYYY-MM-DD": [entry, ...]} for days with at least one dose
    """
    first_day = date(year, month, 1)
    last_day = date(year, month, _calendar.monthrange(year, month)[1])

    result: Dict[str, List[Dict[str, Any]]] = {}
    for medicine in medicines:
        start = max(medicine.start_date or first_day, first_day)
        end = min(medicine.end_date or last_day, last_day)
        day = start
        while day <= end:
            for dose in medicine.doses:
                if dose_applies_on(dose.frequency, dose.days_of_week, day):
                    result.setdefault(date_key(day), []).append(_entry(medicine, dose.time))
            day += timedelta(days=1)

    for entries in result.values():
        entries.sort(key=lambda e: sort_key(e["time"]))
    return result


def build_day_schedule(
    medicines: Iterable[Medicine],
    day: date,
    taken: Set[Tuple[str, str]]
) -> List[Dict[str, Any]]:
    """
    Dose occurrences of one day

    Args:
        medicines: active medicines with doses loaded
        day: calendar date
        taken: (medicine_id, time) pairs already marked taken that day

    Returns:
        entries sorted chronologically, each with a taken flag
    """
    entries = []
    for medicine in medicines:
        if not course_covers(medicine.start_date, medicine.end_date, day):
            continue
        for dose in medicine.doses:
            if not dose_applies_on(dose.frequency, dose.days_of_week, day):
                continue
            entry = _entry(medicine, dose.time)
            entry["instruction"] = dose.instruction
            entry["notes"] = medicine.notes
            entry["taken"] = (medicine.id, dose.time) in taken
            entries.append(entry)

    entries.sort(key=lambda e: sort_key(e["time"]))
    return entries
