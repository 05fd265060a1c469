"""
User model (patients, doctors, pharmacists)
"""
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from medilinko.infrastructure.database.base import Base, TABLE_PREFIX, generate_ulid


class UserRole(str, enum.Enum):
    """User role"""
    USER = "user"  # patient
    DOCTOR = "doctor"
    PHARMACIST = "pharmacist"


class User(Base):
    """User model"""

    __tablename__ = f"{TABLE_PREFIX}users"

    id = Column(
        String(50),
        primary_key=True,
        index=True,
        default=generate_ulid,
        comment="User ID (ULID)"
    )
    full_name = Column(String(200), nullable=False, comment="Full name")
    email = Column(
        String(200),
        nullable=False,
        unique=True,
        index=True,
        comment="Email address (unique, lower-case)"
    )
    phone = Column(String(20), nullable=True, comment="10-digit phone number")
    role = Column(
        SQLEnum(UserRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
        comment="Role"
    )
    fcm_token = Column(
        String(500),
        nullable=True,
        comment="Primary push notification token"
    )
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Created at")
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.now, comment="Updated at")

    device_tokens = relationship(
        "UserDeviceToken",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def push_tokens(self) -> list:
        """
        All distinct push tokens of the user, primary token first

        Returns:
            list of token strings
        """
        tokens = []
        if self.fcm_token:
            tokens.append(self.fcm_token)
        for device_token in self.device_tokens or []:
            if device_token.token and device_token.token not in tokens:
                tokens.append(device_token.token)
        return tokens

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class UserDeviceToken(Base):
    """Push token registered by one of the user's devices"""

    __tablename__ = f"{TABLE_PREFIX}user_device_tokens"
    __table_args__ = (
        UniqueConstraint("user_id", "token", name="uq_user_device_token"),
    )

    id = Column(String(50), primary_key=True, default=generate_ulid, comment="Record ID (ULID)")
    user_id = Column(
        String(50),
        ForeignKey(f"{TABLE_PREFIX}users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User ID"
    )
    token = Column(String(500), nullable=False, comment="Push token")
    device = Column(String(100), nullable=False, default="unknown", comment="Device label")
    updated_at = Column(DateTime, nullable=False, default=datetime.now, comment="Last registration time")

    user = relationship("User", back_populates="device_tokens")

    def __repr__(self):
        return f"<UserDeviceToken(user_id={self.user_id}, device={self.device})>"
