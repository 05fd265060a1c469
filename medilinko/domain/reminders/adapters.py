"""
Database-backed collaborators of the reminder scheduler
Each call opens its own session from the shared session factory and returns
plain snapshots, so nothing ORM-bound outlives the session.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from medilinko.domain.reminders.ports import ReminderDose, ReminderMedicine
from medilinko.infrastructure.database.connection import get_session_factory
from medilinko.infrastructure.database.models.medicine import Medicine, MedicineDose
from medilinko.infrastructure.database.models.notification import NotificationType
from medilinko.infrastructure.database.repository.medicine_repository import MedicineRepository
from medilinko.infrastructure.database.repository.notification_repository import NotificationRepository
from medilinko.infrastructure.database.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], async_sessionmaker[AsyncSession]]


def to_reminder_medicine(medicine: Medicine) -> ReminderMedicine:
    return ReminderMedicine(
        id=medicine.id,
        user_id=medicine.user_id,
        name=medicine.medicine_name,
        dosage=medicine.dosage,
        start_date=medicine.start_date,
        end_date=medicine.end_date,
        is_active=bool(medicine.is_active),
    )


def to_reminder_dose(dose: MedicineDose) -> ReminderDose:
    frequency = getattr(dose.frequency, "value", dose.frequency) or "daily"
    return ReminderDose(
        time=dose.time,
        frequency=frequency,
        days_of_week=tuple(dose.days_of_week or ()),
    )


class SqlMedicineStore:
    """MedicineStore over MedicineRepository"""

    def __init__(self, session_factory: SessionFactory = get_session_factory):
        self._session_factory = session_factory

    async def list_schedulable(self, today: date) -> List[ReminderMedicine]:
        async with self._session_factory()() as session:
            repo = MedicineRepository(session)
            return [to_reminder_medicine(m) for m in await repo.get_schedulable(today)]

    async def get_medicine(self, medicine_id: str) -> Optional[ReminderMedicine]:
        async with self._session_factory()() as session:
            medicine = await MedicineRepository(session).get_by_id(medicine_id)
            return to_reminder_medicine(medicine) if medicine else None

    async def list_for_patient(self, user_id: str) -> List[ReminderMedicine]:
        async with self._session_factory()() as session:
            repo = MedicineRepository(session)
            return [to_reminder_medicine(m) for m in await repo.get_active_by_user_id(user_id)]

    async def get_doses(self, medicine_id: str) -> List[ReminderDose]:
        async with self._session_factory()() as session:
            repo = MedicineRepository(session)
            return [to_reminder_dose(d) for d in await repo.get_doses(medicine_id)]


class SqlPatientDirectory:
    """PatientDirectory over UserRepository"""

    def __init__(self, session_factory: SessionFactory = get_session_factory):
        self._session_factory = session_factory

    async def get_push_tokens(self, user_id: str) -> List[str]:
        async with self._session_factory()() as session:
            return await UserRepository(session).get_push_tokens(user_id)

    async def remove_push_token(self, user_id: str, token: str) -> None:
        async with self._session_factory()() as session:
            try:
                await UserRepository(session).remove_push_token(user_id, token)
                await session.commit()
            except Exception:
                await session.rollback()
                raise


class SqlNotificationFeed:
    """NotificationFeed over NotificationRepository"""

    def __init__(self, session_factory: SessionFactory = get_session_factory):
        self._session_factory = session_factory

    async def create(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: str,
        data: Dict[str, Any],
    ) -> str:
        """
        Persist a notification

        Returns:
            ID of the new notification
        """
        async with self._session_factory()() as session:
            try:
                notification = await NotificationRepository(session).create_for_user(
                    user_id=user_id,
                    title=title,
                    message=message,
                    notification_type=NotificationType(notification_type),
                    data=data,
                )
                await session.commit()
                logger.debug(f"Stored {notification_type} notification {notification.id} for user {user_id}")
                return notification.id
            except Exception:
                await session.rollback()
                raise
