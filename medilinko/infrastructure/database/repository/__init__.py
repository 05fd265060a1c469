"""
Database repositories
"""
from medilinko.infrastructure.database.repository.base import BaseRepository
from medilinko.infrastructure.database.repository.user_repository import UserRepository
from medilinko.infrastructure.database.repository.medicine_repository import MedicineRepository
from medilinko.infrastructure.database.repository.notification_repository import NotificationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "MedicineRepository",
    "NotificationRepository",
]
