"""
API test fixtures
The lifespan does not run under ASGITransport, so app.state is set here.
"""
import uuid
import pytest
import pytest_asyncio
from typing import List
from httpx import ASGITransport, AsyncClient

from medilinko.app.api.deps import USER_ID_HEADER
from medilinko.infrastructure.database.connection import get_async_session
from medilinko.infrastructure.database.models import User, UserRole
from medilinko.main import app


class SpyScheduler:
    """Stands in for ReminderScheduler and records what the routes ask of it"""

    def __init__(self):
        self.running = True
        self.rescheduled: List[str] = []
        self.cancelled: List[str] = []
        self.patients: List[str] = []

    async def reschedule_medicine(self, medicine_id: str) -> int:
        self.rescheduled.append(medicine_id)
        return 1

    def cancel_medicine(self, medicine_id: str) -> int:
        self.cancelled.append(medicine_id)
        return 1

    async def reschedule_patient(self, user_id: str) -> int:
        self.patients.append(user_id)
        return 0


@pytest.fixture
def spy_scheduler():
    return SpyScheduler()


@pytest.fixture
def test_app(test_session_factory, push_gateway, spy_scheduler):
    """The application wired to the in-memory database and fake collaborators"""

    async def override_session():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.state.push_gateway = push_gateway
    app.state.reminder_scheduler = spy_scheduler
    yield app
    app.dependency_overrides.clear()
    app.state.push_gateway = None
    app.state.reminder_scheduler = None


@pytest_asyncio.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as http_client:
        yield http_client


async def _create_user(session_factory, name: str, role: UserRole = UserRole.USER) -> User:
    async with session_factory() as session:
        user = User(
            full_name=name,
            email=f"{name.lower().replace(' ', '_')}_{uuid.uuid4().hex[:8]}@example.com",
            role=role,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest_asyncio.fixture
async def patient(test_session_factory):
    return await _create_user(test_session_factory, "Asha Patient")


@pytest_asyncio.fixture
async def other_patient(test_session_factory):
    return await _create_user(test_session_factory, "Ravi Patient")


@pytest.fixture
def auth(patient):
    return {USER_ID_HEADER: patient.id}


@pytest.fixture
def other_auth(other_patient):
    return {USER_ID_HEADER: other_patient.id}
