"""
Medicine reminder scheduling
"""
from medilinko.domain.reminders.clock import SchedulerTimerSource, SystemClock
from medilinko.domain.reminders.dispatcher import ReminderDispatcher, plan_medicine_reminder
from medilinko.domain.reminders.ports import PushResult, ReminderDose, ReminderMedicine
from medilinko.domain.reminders.registry import TimerKey, TimerRegistry
from medilinko.domain.reminders.scheduler import ReminderScheduler

__all__ = [
    "SchedulerTimerSource",
    "SystemClock",
    "ReminderDispatcher",
    "plan_medicine_reminder",
    "PushResult",
    "ReminderDose",
    "ReminderMedicine",
    "TimerKey",
    "TimerRegistry",
    "ReminderScheduler",
]
