"""
Data passed around the reminder scheduler and the collaborators it depends on
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Tuple


@dataclass(frozen=True)
class ReminderDose:
    """Snapshot of one dose"""
    time: str
    frequency: str = "daily"
    days_of_week: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ReminderMedicine:
    """Snapshot of a medicine, detached from any database session"""
    id: str
    user_id: str
    name: str
    dosage: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True


@dataclass
class PushResult:
    """Outcome of one push send"""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    invalid_token: bool = False  # the push service rejected the token as invalid/unregistered


class MedicineStore(Protocol):
    """Read access to medicines and doses"""

    async def list_schedulable(self, today: date) -> List[ReminderMedicine]:
        """Active medicines whose end date is unset or not before today"""
        ...

    async def get_medicine(self, medicine_id: str) -> Optional[ReminderMedicine]:
        ...

    async def list_for_patient(self, user_id: str) -> List[ReminderMedicine]:
        ...

    async def get_doses(self, medicine_id: str) -> List[ReminderDose]:
        ...


class PatientDirectory(Protocol):
    """Push destinations of patients"""

    async def get_push_tokens(self, user_id: str) -> List[str]:
        ...

    async def remove_push_token(self, user_id: str, token: str) -> None:
        ...


class PushGateway(Protocol):
    """Push notification service"""

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Dict[str, str],
        channel_id: Optional[str] = None,
    ) -> PushResult:
        ...


class NotificationFeed(Protocol):
    """In-app notification feed"""

    async def create(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: str,
        data: Dict[str, Any],
    ) -> Any:
        ...
