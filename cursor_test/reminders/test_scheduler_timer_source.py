"""
APScheduler-backed timer source tests
Runs a real AsyncIOScheduler on the test event loop.

Pytest command examples:
================

# run the whole file
pytest cursor_test/reminders/test_scheduler_timer_source.py -v
"""
import asyncio
from datetime import datetime
import pytest
import pytest_asyncio
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from medilinko.domain.reminders.clock import SchedulerTimerSource
from medilinko.domain.reminders.registry import TimerKey, TimerRegistry


async def _noop():
    pass


@pytest_asyncio.fixture
async def source():
    timer_source = SchedulerTimerSource()
    timer_source.start()
    yield timer_source
    await timer_source.shutdown()


class TestSchedulerTimerSource:
    """SchedulerTimerSource tests"""

    @pytest.mark.asyncio
    async def test_one_shot_job_uses_date_trigger_and_given_id(self, source):
        source.call_later(3600, _noop, job_id="med-aspirin_09:00")

        job = source.scheduler.get_job("med-aspirin_09:00")

        assert job is not None
        assert isinstance(job.trigger, DateTrigger)

    @pytest.mark.asyncio
    async def test_same_id_replaces_existing_job(self, source):
        source.call_later(3600, _noop, job_id="med-aspirin_09:00")
        source.call_later(7200, _noop, job_id="med-aspirin_09:00")

        assert [job.id for job in source.scheduler.get_jobs()] == ["med-aspirin_09:00"]

    @pytest.mark.asyncio
    async def test_cancel_removes_job_and_is_repeatable(self, source):
        handle = source.call_later(3600, _noop, job_id="med-aspirin_09:00")

        handle.cancel()
        handle.cancel()

        assert source.scheduler.get_job("med-aspirin_09:00") is None

    @pytest.mark.asyncio
    async def test_daily_job_is_a_midnight_cron(self, source):
        source.call_daily(0, 0, _noop, job_id="rebuild")

        job = source.scheduler.get_job("rebuild")
        fields = {field.name: str(field) for field in job.trigger.fields}

        assert isinstance(job.trigger, CronTrigger)
        assert fields["hour"] == "0"
        assert fields["minute"] == "0"

    @pytest.mark.asyncio
    async def test_due_job_runs_coroutine(self, source):
        fired = asyncio.Event()

        async def callback():
            fired.set()

        source.call_later(0, callback)

        await asyncio.wait_for(fired.wait(), timeout=5)

    @pytest.mark.asyncio
    async def test_registry_jobs_are_keyed_by_timer_key(self, source):
        registry = TimerRegistry(source)
        key = TimerKey("med-aspirin", "09:00")

        registry.schedule(key, fire_at=datetime(2025, 1, 10, 9, 0), delay=3600, callback=_noop)
        assert source.scheduler.get_job("med-aspirin_09:00") is not None

        registry.cancel(key)
        assert source.scheduler.get_job("med-aspirin_09:00") is None

    @pytest.mark.asyncio
    async def test_shutdown_stops_scheduler(self):
        timer_source = SchedulerTimerSource()
        timer_source.start()

        await timer_source.shutdown()

        assert timer_source.scheduler.running is False
