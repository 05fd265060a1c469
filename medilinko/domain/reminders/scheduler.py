"""
Medicine reminder scheduler
Keeps one pending timer per (medicine, dose time), rebuilt at start-up and
every midnight, and re-derived per medicine whenever a medicine changes.
"""
import logging
from typing import List, Optional

from medilinko.domain.medicines.schedule_rules import course_covers, dose_applies_on
from medilinko.domain.reminders.clock import Clock, SystemClock, TimerHandle, TimerSource
from medilinko.domain.reminders.dispatcher import ReminderDispatcher
from medilinko.domain.reminders.ports import MedicineStore, ReminderDose, ReminderMedicine
from medilinko.domain.reminders.registry import ScheduledTimer, TimerKey, TimerRegistry
from medilinko.domain.reminders.time_parser import next_occurrence

logger = logging.getLogger(__name__)

REBUILD_JOB_ID = "medicine_reminders_rebuild"
REBUILD_HOUR = 0
REBUILD_MINUTE = 0


class ReminderScheduler:
    """Reminder scheduler service"""

    def __init__(
        self,
        store: MedicineStore,
        dispatcher: ReminderDispatcher,
        timer_source: TimerSource,
        clock: Optional[Clock] = None,
        min_delay: float = 1.0
    ):
        """
        Args:
            store: medicine and dose source
            dispatcher: runs when a timer fires
            timer_source: creates the dose timers and the daily rebuild job
            clock: local time source (defaults to the system clock)
            min_delay: occurrences closer than this are skipped
        """
        self.store = store
        self.dispatcher = dispatcher
        self.clock = clock or SystemClock()
        self.timer_source = timer_source
        self.min_delay = min_delay
        self.registry = TimerRegistry(timer_source)
        self._rebuild_handle: Optional[TimerHandle] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Build the full schedule and register the daily midnight rebuild"""
        if self._running:
            return
        self._running = True
        logger.info("Starting medicine reminder scheduler")
        await self.rebuild()
        self._rebuild_handle = self.timer_source.call_daily(
            REBUILD_HOUR, REBUILD_MINUTE, self._midnight_rebuild, job_id=REBUILD_JOB_ID
        )

    def stop(self) -> None:
        """Remove the daily rebuild and drop every pending timer"""
        self._running = False
        if self._rebuild_handle is not None:
            self._rebuild_handle.cancel()
            self._rebuild_handle = None
        cleared = self.registry.cancel_all()
        logger.info(f"Medicine reminder scheduler stopped, cleared {cleared} timers")

    async def rebuild(self) -> int:
        """
        Clear every timer and re-derive the schedule from active medicines

        Errors are logged and swallowed.

        Returns:
            number of timers pending afterwards
        """
        try:
            self.registry.cancel_all()
            today = self.clock.now().date()
            medicines = await self.store.list_schedulable(today)
            logger.info(f"Scheduling reminders for {len(medicines)} medicines")
            for medicine in medicines:
                await self.schedule_medicine(medicine)
            logger.info(f"Reminder schedule rebuilt: {len(self.registry)} timers pending")
        except Exception as e:
            logger.error(f"Error scheduling medicine reminders: {e}", exc_info=True)
        return len(self.registry)

    async def schedule_medicine(self, medicine: ReminderMedicine) -> List[ScheduledTimer]:
        """
        Schedule the next occurrence of every dose of one medicine

        Args:
            medicine: medicine snapshot

        Returns:
            timers created
        """
        today = self.clock.now().date()
        if not medicine.is_active:
            return []
        if medicine.start_date and medicine.start_date > today:
            logger.debug(f"Medicine {medicine.name} starts on {medicine.start_date}, not scheduling yet")
            return []
        if medicine.end_date and medicine.end_date < today:
            logger.debug(f"Medicine {medicine.name} ended on {medicine.end_date}, not scheduling")
            return []

        doses = await self.store.get_doses(medicine.id)
        scheduled = []
        for dose in doses:
            timer = self.schedule_dose(medicine, dose)
            if timer is not None:
                scheduled.append(timer)
        return scheduled

    def schedule_dose(self, medicine: ReminderMedicine, dose: ReminderDose) -> Optional[ScheduledTimer]:
        """
        Schedule the next occurrence of one dose

        Nothing is scheduled when the time cannot be parsed, the occurrence is
        under min_delay away, past the medicine's end date, or on a weekday a
        weekly dose does not list.

        Args:
            medicine: medicine snapshot
            dose: dose snapshot

        Returns:
            the timer, or None if skipped
        """
        if not dose.time:
            return None

        now = self.clock.now()
        fire_at = next_occurrence(dose.time, now)
        if fire_at is None:
            return None

        delay = (fire_at - now).total_seconds()
        if delay < self.min_delay:
            logger.debug(f"Skipping {medicine.name} at {dose.time}: fires in {delay:.1f}s")
            return None

        if not course_covers(medicine.start_date, medicine.end_date, fire_at.date()):
            logger.debug(f"Skipping {medicine.name} at {dose.time}: {fire_at.date()} outside course")
            return None

        if not dose_applies_on(dose.frequency, dose.days_of_week, fire_at.date()):
            logger.debug(f"Skipping {medicine.name} at {dose.time}: not due on {fire_at:%A}")
            return None

        key = TimerKey(medicine.id, dose.time)

        async def _remind():
            await self.dispatcher.dispatch(medicine, dose)

        timer = self.registry.schedule(key, fire_at, delay, _remind)
        logger.info(f"Scheduled reminder for {medicine.name} at {fire_at:%Y-%m-%d %H:%M}")
        return timer

    async def reschedule_medicine(self, medicine_id: str) -> int:
        """
        Cancel one medicine's timers and schedule it again if still active

        Args:
            medicine_id: medicine ID

        Returns:
            number of timers created
        """
        self.registry.cancel_medicine(medicine_id)
        try:
            medicine = await self.store.get_medicine(medicine_id)
            if medicine is None or not medicine.is_active:
                return 0
            return len(await self.schedule_medicine(medicine))
        except Exception as e:
            logger.error(f"Error rescheduling medicine {medicine_id}: {e}", exc_info=True)
            return 0

    def cancel_medicine(self, medicine_id: str) -> int:
        """
        Cancel one medicine's timers

        Args:
            medicine_id: medicine ID

        Returns:
            number of cancelled timers
        """
        return self.registry.cancel_medicine(medicine_id)

    async def reschedule_patient(self, user_id: str) -> int:
        """
        Re-derive the timers of every medicine one patient owns

        Args:
            user_id: patient ID

        Returns:
            number of timers created
        """
        created = 0
        try:
            medicines = await self.store.list_for_patient(user_id)
        except Exception as e:
            logger.error(f"Error loading medicines of user {user_id}: {e}", exc_info=True)
            return 0
        for medicine in medicines:
            self.registry.cancel_medicine(medicine.id)
            try:
                created += len(await self.schedule_medicine(medicine))
            except Exception as e:
                logger.error(f"Error scheduling medicine {medicine.id}: {e}", exc_info=True)
        return created

    async def _midnight_rebuild(self) -> None:
        if not self._running:
            return
        logger.info("Midnight reached, rebuilding reminder schedule")
        await self.rebuild()
