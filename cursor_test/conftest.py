"""
Test configuration and shared fixtures
"""
import sys
import os
from pathlib import Path

# project root on the Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# tests run against in-memory SQLite, never a real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REMINDER_SCHEDULER_ENABLED", "false")

import uuid
import pytest
import pytest_asyncio
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from medilinko.domain.reminders.dispatcher import ReminderDispatcher
from medilinko.domain.reminders.ports import PushResult, ReminderDose, ReminderMedicine
from medilinko.domain.reminders.scheduler import ReminderScheduler
from medilinko.infrastructure.database.base import Base
from medilinko.infrastructure.database.models import User, UserRole

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ==================== time ====================

class FakeClock:
    """Clock whose time only moves when a test moves it"""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current


class FakeTimer:
    def __init__(self, due_at: datetime, callback, job_id: Optional[str] = None):
        self.due_at = due_at
        self.callback = callback
        self.job_id = job_id
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeDailyJob:
    """Recurring job that re-arms itself for the next wall-clock hour:minute"""

    def __init__(self, source: "FakeTimerSource", hour: int, minute: int, callback, job_id: Optional[str]):
        self.source = source
        self.hour = hour
        self.minute = minute
        self.callback = callback
        self.job_id = job_id
        self.cancelled = False
        self.current: Optional[FakeTimer] = None
        self.runs = 0
        self._arm()

    def _arm(self) -> None:
        now = self.source.clock.now()
        due = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if due <= now:
            due += timedelta(days=1)
        self.current = FakeTimer(due, self._run, self.job_id)
        self.source.timers.append(self.current)

    async def _run(self) -> None:
        self._arm()
        self.runs += 1
        await self.callback()

    def cancel(self) -> None:
        self.cancelled = True
        if self.current is not None:
            self.current.cancel()


class FakeTimerSource:
    """
    Timer source driven by FakeClock

    advance() moves the clock forward and runs every timer that comes due,
    in due order, including timers created while advancing. A new timer
    replaces a pending timer with the same job ID. Setting lag makes every
    callback start that long after it is due, like a busy event loop.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.timers: List[FakeTimer] = []
        self.lag = timedelta(0)

    def _replace(self, job_id: Optional[str]) -> None:
        if job_id is None:
            return
        for timer in self.pending:
            if timer.job_id == job_id:
                timer.cancel()

    def call_later(self, delay: float, callback, job_id: Optional[str] = None) -> FakeTimer:
        self._replace(job_id)
        timer = FakeTimer(self.clock.now() + timedelta(seconds=max(delay, 0)), callback, job_id)
        self.timers.append(timer)
        return timer

    def call_daily(self, hour: int, minute: int, callback, job_id: Optional[str] = None) -> FakeDailyJob:
        self._replace(job_id)
        return FakeDailyJob(self, hour, minute, callback, job_id)

    @property
    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    async def advance_to(self, target: datetime) -> None:
        while True:
            due = [t for t in self.pending if t.due_at <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due_at)
            self.timers.remove(timer)
            self.clock.current = max(self.clock.current, timer.due_at + self.lag)
            await timer.callback()
        self.clock.current = max(self.clock.current, target)

    async def advance(self, seconds: float) -> None:
        await self.advance_to(self.clock.now() + timedelta(seconds=seconds))


# ==================== reminder collaborators ====================

class InMemoryMedicineStore:
    """MedicineStore over plain dicts"""

    def __init__(self):
        self.medicines: Dict[str, ReminderMedicine] = {}
        self.doses: Dict[str, List[ReminderDose]] = {}
        self.list_calls = 0
        self.fail_listing = False

    def add(self, medicine: ReminderMedicine, *doses: ReminderDose) -> ReminderMedicine:
        self.medicines[medicine.id] = medicine
        self.doses[medicine.id] = list(doses)
        return medicine

    async def list_schedulable(self, today: date) -> List[ReminderMedicine]:
        self.list_calls += 1
        if self.fail_listing:
            raise RuntimeError("database unavailable")
        return [
            m for m in self.medicines.values()
            if m.is_active and (m.end_date is None or m.end_date >= today)
        ]

    async def get_medicine(self, medicine_id: str) -> Optional[ReminderMedicine]:
        return self.medicines.get(medicine_id)

    async def list_for_patient(self, user_id: str) -> List[ReminderMedicine]:
        return [m for m in self.medicines.values() if m.user_id == user_id and m.is_active]

    async def get_doses(self, medicine_id: str) -> List[ReminderDose]:
        return list(self.doses.get(medicine_id, []))


class InMemoryDirectory:
    def __init__(self, tokens: Optional[Dict[str, List[str]]] = None):
        self.tokens = tokens or {}
        self.removed: List[tuple] = []

    async def get_push_tokens(self, user_id: str) -> List[str]:
        return list(self.tokens.get(user_id, []))

    async def remove_push_token(self, user_id: str, token: str) -> None:
        self.removed.append((user_id, token))
        self.tokens[user_id] = [t for t in self.tokens.get(user_id, []) if t != token]


class RecordingPushGateway:
    """Records sends; per-token results can be scripted"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.results: Dict[str, PushResult] = {}
        self.raise_for: Dict[str, Exception] = {}

    async def send(self, token, title, body, data, channel_id=None) -> PushResult:
        self.sent.append({
            "token": token,
            "title": title,
            "body": body,
            "data": data,
            "channel_id": channel_id,
        })
        if token in self.raise_for:
            raise self.raise_for[token]
        return self.results.get(token, PushResult(success=True, message_id=f"msg-{len(self.sent)}"))


class RecordingFeed:
    def __init__(self):
        self.records: List[Dict[str, Any]] = []
        self.fail = False

    async def create(self, user_id, title, message, notification_type, data):
        if self.fail:
            raise RuntimeError("feed unavailable")
        self.records.append({
            "user_id": user_id,
            "title": title,
            "message": message,
            "type": notification_type,
            "data": data,
        })
        return f"notification-{len(self.records)}"


@pytest.fixture
def fake_clock():
    """Friday 2025-01-10 08:00"""
    return FakeClock(datetime(2025, 1, 10, 8, 0, 0))


@pytest.fixture
def timer_source(fake_clock):
    return FakeTimerSource(fake_clock)


@pytest.fixture
def medicine_store():
    return InMemoryMedicineStore()


@pytest.fixture
def directory():
    return InMemoryDirectory({"patient-1": ["token-1"]})


@pytest.fixture
def push_gateway():
    return RecordingPushGateway()


@pytest.fixture
def feed():
    return RecordingFeed()


@pytest.fixture
def dispatcher(directory, push_gateway, feed):
    return ReminderDispatcher(directory=directory, push_gateway=push_gateway, feed=feed)


@pytest.fixture
def scheduler(medicine_store, dispatcher, timer_source, fake_clock):
    return ReminderScheduler(
        store=medicine_store,
        dispatcher=dispatcher,
        timer_source=timer_source,
        clock=fake_clock,
        min_delay=1.0,
    )


@pytest.fixture
def aspirin():
    """Aspirin 100mg for January 2025"""
    return ReminderMedicine(
        id="med-aspirin",
        user_id="patient-1",
        name="Aspirin",
        dosage="100mg",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
    )


# ==================== database ====================

@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """
    In-memory SQLite engine with every table created

    StaticPool keeps a single connection so all sessions see the same database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_db_engine):
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def test_db_session(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_user_data():
    """
    Test user data

    A UUID suffix keeps the email unique.
    """
    unique_suffix = str(uuid.uuid4())[:8]
    return {
        "full_name": f"Test Patient {unique_suffix}",
        "email": f"patient_{unique_suffix}@example.com",
        "phone": "9876543210",
        "role": UserRole.USER,
    }


@pytest_asyncio.fixture
async def test_user(test_db_session, test_user_data):
    """A committed patient without push tokens"""
    user = User(**test_user_data)
    test_db_session.add(user)
    await test_db_session.commit()
    await test_db_session.refresh(user)
    return user
