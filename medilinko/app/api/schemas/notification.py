"""
Notification feed schemas
"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from medilinko.infrastructure.database.models.notification import NotificationType


class NotificationResponse(BaseModel):
    """Notification response"""
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    read: bool
    data: Optional[Dict[str, Any]]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    data: List[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    count: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    count: Optional[int] = None


class SendNotificationRequest(BaseModel):
    """Send a push notification to a user (and save it to their feed)"""
    user_id: str = Field(description="Recipient")
    title: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)


class SendNotificationResponse(BaseModel):
    success: bool
    message_id: Optional[str] = None
    notification_id: Optional[str] = None
    message: Optional[str] = None
