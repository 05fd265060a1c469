"""
Database-backed reminder collaborators tests (in-memory SQLite)

Pytest command examples:
================

# run the whole file
pytest cursor_test/reminders/test_sql_adapters.py -v
"""
import pytest
from datetime import date

from medilinko.domain.reminders.adapters import (
    SqlMedicineStore,
    SqlNotificationFeed,
    SqlPatientDirectory,
)
from medilinko.infrastructure.database.models import NotificationType
from medilinko.infrastructure.database.repository.medicine_repository import MedicineRepository
from medilinko.infrastructure.database.repository.notification_repository import NotificationRepository
from medilinko.infrastructure.database.repository.user_repository import UserRepository


@pytest.fixture
def session_factory(test_session_factory):
    return lambda: test_session_factory


async def _seed_medicine(session, user_id, **overrides):
    data = dict(
        user_id=user_id,
        medicine_name="Aspirin",
        dosage="100mg",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        doses=[{"time": "09:00"}, {"time": "21:00", "frequency": "weekly", "days_of_week": [1, 3]}],
    )
    data.update(overrides)
    medicine = await MedicineRepository(session).create_with_doses(**data)
    await session.commit()
    return medicine


class TestSqlMedicineStore:
    """SqlMedicineStore tests"""

    @pytest.mark.asyncio
    async def test_list_schedulable_returns_snapshots(self, test_db_session, test_user, session_factory):
        # Arrange
        medicine = await _seed_medicine(test_db_session, test_user.id)
        await _seed_medicine(test_db_session, test_user.id, end_date=date(2025, 1, 5))
        store = SqlMedicineStore(session_factory)

        # Act
        result = await store.list_schedulable(date(2025, 1, 10))

        # Assert
        assert len(result) == 1
        snapshot = result[0]
        assert snapshot.id == medicine.id
        assert snapshot.user_id == test_user.id
        assert snapshot.name == "Aspirin"
        assert snapshot.dosage == "100mg"
        assert snapshot.is_active is True

    @pytest.mark.asyncio
    async def test_get_doses_maps_frequency(self, test_db_session, test_user, session_factory):
        medicine = await _seed_medicine(test_db_session, test_user.id)
        store = SqlMedicineStore(session_factory)

        doses = sorted(await store.get_doses(medicine.id), key=lambda d: d.time)

        assert [(d.time, d.frequency, d.days_of_week) for d in doses] == [
            ("09:00", "daily", ()),
            ("21:00", "weekly", (1, 3)),
        ]

    @pytest.mark.asyncio
    async def test_get_medicine_and_patient_listing(self, test_db_session, test_user, session_factory):
        medicine = await _seed_medicine(test_db_session, test_user.id)
        store = SqlMedicineStore(session_factory)

        assert (await store.get_medicine(medicine.id)).name == "Aspirin"
        assert await store.get_medicine("missing") is None
        assert [m.id for m in await store.list_for_patient(test_user.id)] == [medicine.id]


class TestSqlPatientDirectory:
    """SqlPatientDirectory tests"""

    @pytest.mark.asyncio
    async def test_tokens_and_removal(self, test_db_session, test_user, session_factory):
        # Arrange
        repo = UserRepository(test_db_session)
        await repo.save_push_token(test_user.id, "token-a", "pixel")
        await repo.save_push_token(test_user.id, "token-b", "ipad")
        await test_db_session.commit()
        directory = SqlPatientDirectory(session_factory)

        # Act
        before = await directory.get_push_tokens(test_user.id)
        await directory.remove_push_token(test_user.id, "token-b")
        after = await directory.get_push_tokens(test_user.id)

        # Assert
        assert before == ["token-b", "token-a"]
        assert after == ["token-a"]

    @pytest.mark.asyncio
    async def test_unknown_patient_has_no_tokens(self, session_factory):
        assert await SqlPatientDirectory(session_factory).get_push_tokens("missing") == []


class TestSqlNotificationFeed:
    """SqlNotificationFeed tests"""

    @pytest.mark.asyncio
    async def test_create_stores_medicine_reminder(self, test_user, test_session_factory, session_factory):
        feed = SqlNotificationFeed(session_factory)

        notification_id = await feed.create(
            user_id=test_user.id,
            title="💊 Medicine Reminder",
            message="Time to take Aspirin - 100mg",
            notification_type="medicine_reminder",
            data={"medicineId": "med-1", "time": "09:00"},
        )

        async with test_session_factory() as session:
            stored = await NotificationRepository(session).get_by_id(notification_id)
        assert stored.type == NotificationType.MEDICINE_REMINDER
        assert stored.read is False
        assert stored.data["medicineId"] == "med-1"

    @pytest.mark.asyncio
    async def test_unknown_type_is_rejected(self, test_user, session_factory):
        feed = SqlNotificationFeed(session_factory)

        with pytest.raises(ValueError):
            await feed.create(test_user.id, "t", "m", "carrier_pigeon", {})
