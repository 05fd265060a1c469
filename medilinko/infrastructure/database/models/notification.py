"""
In-app notification feed model
"""
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, Text, JSON, ForeignKey, Index, Enum as SQLEnum

from medilinko.infrastructure.database.base import Base, TABLE_PREFIX, generate_ulid


class NotificationType(str, enum.Enum):
    """Notification type"""
    APPOINTMENT = "appointment"
    ORDER = "order"
    GENERAL = "general"
    REMINDER = "reminder"
    ALERT = "alert"
    MEDICINE_REMINDER = "medicine_reminder"
    LOW_STOCK_ALERT = "low_stock_alert"
    EXPIRY_ALERT = "expiry_alert"


class Notification(Base):
    """Notification model"""

    __tablename__ = f"{TABLE_PREFIX}notifications"
    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "read", "created_at"),
    )

    id = Column(
        String(50),
        primary_key=True,
        index=True,
        default=generate_ulid,
        comment="Notification ID (ULID)"
    )
    user_id = Column(
        String(50),
        ForeignKey(f"{TABLE_PREFIX}users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Recipient"
    )
    title = Column(String(200), nullable=False, comment="Title")
    message = Column(Text, nullable=False, comment="Body")
    type = Column(
        SQLEnum(NotificationType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=NotificationType.GENERAL,
        comment="Notification type"
    )
    read = Column(Boolean, nullable=False, default=False, comment="Read flag")
    data = Column(JSON, nullable=True, comment="Structured payload")
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Created at")
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.now, comment="Updated at")

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type}, read={self.read})>"
