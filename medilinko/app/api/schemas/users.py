"""
User and push token schemas
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from medilinko.infrastructure.database.models.user import UserRole


class UserCreate(BaseModel):
    """Create user request"""
    full_name: str = Field(min_length=1, max_length=200, description="Full name")
    email: EmailStr = Field(description="Email address")
    phone: Optional[str] = Field(None, pattern=r"^\d{10}$", description="10-digit phone number")
    role: UserRole = Field(UserRole.USER, description="user | doctor | pharmacist")


class DeviceTokenResponse(BaseModel):
    device: str
    updated_at: datetime

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """User response (push tokens themselves are never returned)"""
    id: str
    full_name: str
    email: str
    phone: Optional[str]
    role: UserRole
    has_push_token: bool = False
    devices: List[DeviceTokenResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True

    @classmethod
    def from_user(cls, user):
        """Build the response from a User row"""
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            has_push_token=bool(user.push_tokens()),
            devices=[DeviceTokenResponse.model_validate(t) for t in user.device_tokens],
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class SaveTokenRequest(BaseModel):
    """Register a push token"""
    token: str = Field(min_length=1, max_length=500, description="FCM registration token")
    device: Optional[str] = Field(None, max_length=100, description="Device label")


class RemoveTokenRequest(BaseModel):
    """Forget a push token"""
    token: str = Field(min_length=1, max_length=500)


class TokenResponse(BaseModel):
    success: bool
    message: str
