"""
Reminder scheduler admin schemas
"""
from typing import List
from datetime import datetime
from pydantic import BaseModel


class PendingReminder(BaseModel):
    key: str
    medicine_id: str
    dose_time: str
    fire_at: datetime


class SchedulerStatusResponse(BaseModel):
    enabled: bool
    running: bool
    pending_count: int
    pending: List[PendingReminder]


class RebuildResponse(BaseModel):
    success: bool
    pending_count: int
