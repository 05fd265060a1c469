"""
Database models
"""
from medilinko.infrastructure.database.models.user import User, UserDeviceToken, UserRole
from medilinko.infrastructure.database.models.medicine import (
    Medicine,
    MedicineDose,
    MedicineTakenRecord,
    DoseFrequency,
)
from medilinko.infrastructure.database.models.notification import Notification, NotificationType

__all__ = [
    "User",
    "UserDeviceToken",
    "UserRole",
    "Medicine",
    "MedicineDose",
    "MedicineTakenRecord",
    "DoseFrequency",
    "Notification",
    "NotificationType",
]
