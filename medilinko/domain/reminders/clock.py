"""
Time sources for the reminder scheduler

The scheduler never calls datetime.now() or a job scheduler directly; it goes
through a Clock and a TimerSource so tests can drive time by hand.
"""
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, Protocol

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Awaitable[None]]


class Clock(Protocol):
    """Current local time"""

    def now(self) -> datetime:
        ...


class TimerHandle(Protocol):
    """A pending timer"""

    def cancel(self) -> None:
        ...


class TimerSource(Protocol):
    """Creates timers that run a coroutine function when they expire"""

    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        job_id: Optional[str] = None
    ) -> TimerHandle:
        ...

    def call_daily(
        self,
        hour: int,
        minute: int,
        callback: TimerCallback,
        job_id: Optional[str] = None
    ) -> TimerHandle:
        ...


class SystemClock:
    """Wall clock in local time"""

    def now(self) -> datetime:
        return datetime.now()


class SchedulerJobHandle:
    """Cancels an APScheduler job"""

    def __init__(self, job: Job):
        self.job = job

    def cancel(self) -> None:
        try:
            self.job.remove()
        except JobLookupError:
            # already ran or was removed
            pass


class SchedulerTimerSource:
    """Timers backed by an APScheduler AsyncIOScheduler"""

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self.scheduler = scheduler or AsyncIOScheduler()

    def start(self) -> None:
        """Start the job scheduler; must be called with the event loop running"""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Job scheduler started")

    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        job_id: Optional[str] = None
    ) -> SchedulerJobHandle:
        """
        Run callback() once, delay seconds from now

        Args:
            delay: seconds from now (negative values fire immediately)
            callback: coroutine function
            job_id: job ID; an existing job with the same ID is replaced

        Returns:
            handle whose cancel() removes the job
        """
        run_date = datetime.now() + timedelta(seconds=max(delay, 0.0))
        job = self.scheduler.add_job(
            callback,
            DateTrigger(run_date=run_date),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )
        return SchedulerJobHandle(job)

    def call_daily(
        self,
        hour: int,
        minute: int,
        callback: TimerCallback,
        job_id: Optional[str] = None
    ) -> SchedulerJobHandle:
        """
        Run callback() every day at hour:minute local time

        A run that starts late still happens; missed runs collapse into one.
        """
        job = self.scheduler.add_job(
            callback,
            CronTrigger(hour=hour, minute=minute),
            id=job_id,
            replace_existing=True,
            coalesce=True,
            misfire_grace_time=None,
        )
        return SchedulerJobHandle(job)

    async def shutdown(self) -> None:
        """Stop the job scheduler without waiting for running jobs"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Job scheduler stopped")
