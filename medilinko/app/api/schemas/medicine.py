"""
Medicine tracker schemas
"""
from typing import Dict, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator

from medilinko.domain.reminders.time_parser import parse_time_of_day
from medilinko.infrastructure.database.models.medicine import DoseFrequency


class DoseInput(BaseModel):
    """One dose of a medicine"""
    time: str = Field(description="Time of day, '09:00' or '9:00 AM'")
    instruction: Optional[str] = Field(None, description="e.g. After food")
    frequency: str = Field("daily", pattern="^(daily|weekly)$", description="daily | weekly")
    days_of_week: List[int] = Field(default_factory=list, description="0 (Sunday) - 6 (Saturday), weekly only")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if parse_time_of_day(v) is None:
            raise ValueError(f"invalid time of day: {v!r}")
        return v.strip()

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("days_of_week values must be between 0 and 6")
        return v


class MedicineCreate(BaseModel):
    """Add medicine request"""
    medicine_name: str = Field(min_length=1, max_length=200, description="Medicine name")
    dosage: str = Field(min_length=1, max_length=100, description="Dosage label")
    start_date: Optional[date] = Field(None, description="First day of the course")
    end_date: Optional[date] = Field(None, description="Last day of the course")
    notes: Optional[str] = Field(None, description="Notes")
    doses: List[DoseInput] = Field(default_factory=list, description="Dose times")


class MedicineUpdate(BaseModel):
    """Update medicine request; doses, when given, replace the whole set"""
    medicine_name: Optional[str] = Field(None, min_length=1, max_length=200)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    doses: Optional[List[DoseInput]] = None


class TakenRequest(BaseModel):
    """Mark / unmark one dose occurrence"""
    date: str = Field(description="YYYY-MM-DD")
    time: str = Field(min_length=1, max_length=20)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        datetime.strptime(v, "%Y-%m-%d")
        return v


class DoseResponse(BaseModel):
    id: str
    time: str
    instruction: Optional[str]
    frequency: DoseFrequency
    days_of_week: List[int]

    class Config:
        from_attributes = True


class TakenRecordResponse(BaseModel):
    date: str
    time: str
    taken_at: datetime

    class Config:
        from_attributes = True


class MedicineResponse(BaseModel):
    """Medicine with its doses"""
    id: str
    user_id: str
    medicine_name: str
    dosage: str
    start_date: Optional[date]
    end_date: Optional[date]
    notes: Optional[str]
    is_active: bool
    doses: List[DoseResponse]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class MedicineDetailResponse(MedicineResponse):
    """Medicine with doses and taken-history"""
    taken_history: List[TakenRecordResponse]


class ScheduleEntry(BaseModel):
    """One dose occurrence in a calendar view"""
    medicine_id: str
    medicine_name: str
    dosage: str
    time: str
    instruction: Optional[str] = None
    notes: Optional[str] = None
    taken: Optional[bool] = None


class CalendarResponse(BaseModel):
    month: int
    year: int
    data: Dict[str, List[ScheduleEntry]]


class DayScheduleResponse(BaseModel):
    date: str
    data: List[ScheduleEntry]


class TakenResponse(BaseModel):
    success: bool
    message: str
    date: str
    time: str
