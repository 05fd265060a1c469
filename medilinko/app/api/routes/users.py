"""
Patient directory and push token routes
"""
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from medilinko.app.api.deps import get_current_user, get_reminder_scheduler
from medilinko.app.api.schemas.users import (
    UserCreate,
    UserResponse,
    SaveTokenRequest,
    RemoveTokenRequest,
    TokenResponse,
)
from medilinko.domain.reminders.scheduler import ReminderScheduler
from medilinko.infrastructure.database.connection import get_async_session
from medilinko.infrastructure.database.models.user import User
from medilinko.infrastructure.database.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_async_session)
):
    """
    Create a user

    Args:
        data: create request
        session: database session (dependency injection)

    Returns:
        the created user
    """
    try:
        repo = UserRepository(session)
        email = data.email.strip().lower()
        if await repo.get_by_email(email):
            raise HTTPException(status_code=400, detail=f"Email already registered: {email}")

        user = await repo.create(
            full_name=data.full_name.strip(),
            email=email,
            phone=data.phone,
            role=data.role,
        )
        await session.commit()
        await session.refresh(user)
        logger.info(f"Created user {user.id} ({user.role.value})")
        return UserResponse.from_user(user)
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to create user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Create failed: {str(e)}")


@router.get("/users/{id}", response_model=UserResponse)
async def get_user(
    id: str,
    session: AsyncSession = Depends(get_async_session)
):
    """
    Get a user by ID

    Args:
        id: user ID
        session: database session (dependency injection)

    Returns:
        the user
    """
    try:
        repo = UserRepository(session)
        user = await repo.get_by_id(id)
        if not user:
            raise HTTPException(status_code=404, detail=f"User not found: {id}")
        return UserResponse.from_user(user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.post("/fcm/save-token", response_model=TokenResponse)
async def save_token(
    data: SaveTokenRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
    scheduler: Optional[ReminderScheduler] = Depends(get_reminder_scheduler)
):
    """
    Register the caller's push token for a device

    Args:
        data: {token, device}
        user: caller (X-User-Id)
        session: database session (dependency injection)
        scheduler: reminder scheduler

    Returns:
        result message
    """
    try:
        repo = UserRepository(session)
        await repo.save_push_token(user.id, data.token.strip(), data.device)
        await session.commit()
        logger.info(f"Saved push token for user {user.id} (device: {data.device or 'unknown'})")
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to save push token: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Save failed: {str(e)}")

    # reminders of a patient who just logged in on a device
    if scheduler is not None and scheduler.running:
        await scheduler.reschedule_patient(user.id)
    return TokenResponse(success=True, message="Push token saved")


@router.delete("/fcm/remove-token", response_model=TokenResponse)
async def remove_token(
    data: RemoveTokenRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Forget one of the caller's push tokens (logout)

    Args:
        data: {token}
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        result message
    """
    try:
        repo = UserRepository(session)
        removed = await repo.remove_push_token(user.id, data.token.strip())
        await session.commit()
        message = "Push token removed" if removed else "Push token not registered"
        return TokenResponse(success=removed, message=message)
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to remove push token: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Remove failed: {str(e)}")
