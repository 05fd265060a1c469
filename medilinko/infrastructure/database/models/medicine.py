"""
Patient medicine tracker models
"""
import enum
from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    Boolean,
    Text,
    JSON,
    ForeignKey,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from medilinko.infrastructure.database.base import Base, TABLE_PREFIX, generate_ulid


class DoseFrequency(str, enum.Enum):
    """How often a dose repeats"""
    DAILY = "daily"
    WEEKLY = "weekly"  # only on the listed days_of_week


class Medicine(Base):
    """A medicine a patient is taking"""

    __tablename__ = f"{TABLE_PREFIX}medicines"

    id = Column(
        String(50),
        primary_key=True,
        index=True,
        default=generate_ulid,
        comment="Medicine ID (ULID)"
    )
    user_id = Column(
        String(50),
        ForeignKey(f"{TABLE_PREFIX}users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning patient"
    )
    medicine_name = Column(String(200), nullable=False, comment="Medicine name")
    dosage = Column(String(100), nullable=False, comment="Dosage label, e.g. 100mg")
    start_date = Column(Date, nullable=True, comment="First day of the course")
    end_date = Column(Date, nullable=True, comment="Last day of the course")
    notes = Column(Text, nullable=True, comment="Notes")
    is_active = Column(Boolean, nullable=False, default=True, index=True, comment="Soft delete flag")
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Created at")
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.now, comment="Updated at")

    doses = relationship(
        "MedicineDose",
        back_populates="medicine",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MedicineDose.time",
    )
    taken_history = relationship(
        "MedicineTakenRecord",
        back_populates="medicine",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MedicineTakenRecord.taken_at",
    )

    def __repr__(self):
        return (
            f"<Medicine(id={self.id}, user_id={self.user_id}, "
            f"medicine_name={self.medicine_name}, dosage={self.dosage})>"
        )


class MedicineDose(Base):
    """One time-of-day entry of a medicine's schedule"""

    __tablename__ = f"{TABLE_PREFIX}medicine_doses"

    id = Column(String(50), primary_key=True, default=generate_ulid, comment="Dose ID (ULID)")
    medicine_id = Column(
        String(50),
        ForeignKey(f"{TABLE_PREFIX}medicines.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Medicine ID"
    )
    time = Column(String(20), nullable=False, comment="Time of day, '09:00' or '9:00 AM'")
    instruction = Column(String(200), nullable=True, comment="e.g. After food")
    frequency = Column(
        SQLEnum(DoseFrequency, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DoseFrequency.DAILY,
        comment="daily | weekly"
    )
    days_of_week = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Weekday numbers 0 (Sunday) - 6 (Saturday) for weekly doses"
    )
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Created at")

    medicine = relationship("Medicine", back_populates="doses")

    def __repr__(self):
        return f"<MedicineDose(medicine_id={self.medicine_id}, time={self.time}, frequency={self.frequency})>"


class MedicineTakenRecord(Base):
    """Log entry marking one dose occurrence as taken"""

    __tablename__ = f"{TABLE_PREFIX}medicine_taken_records"

    id = Column(String(50), primary_key=True, default=generate_ulid, comment="Record ID (ULID)")
    medicine_id = Column(
        String(50),
        ForeignKey(f"{TABLE_PREFIX}medicines.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Medicine ID"
    )
    date = Column(String(10), nullable=False, comment="Occurrence date YYYY-MM-DD")
    time = Column(String(20), nullable=False, comment="Occurrence time of day")
    taken_at = Column(DateTime, nullable=False, default=datetime.now, comment="When it was marked")

    medicine = relationship("Medicine", back_populates="taken_history")

    def __repr__(self):
        return f"<MedicineTakenRecord(medicine_id={self.medicine_id}, date={self.date}, time={self.time})>"
