"""
Notification feed routes
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from medilinko.app.config import settings
from medilinko.app.api.deps import get_current_user, get_push_gateway
from medilinko.app.api.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    UnreadCountResponse,
    MessageResponse,
    SendNotificationRequest,
    SendNotificationResponse,
)
from medilinko.domain.notifications.service import send_notification_to_user
from medilinko.infrastructure.database.connection import get_async_session
from medilinko.infrastructure.database.models.user import User
from medilinko.infrastructure.database.repository.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notifications")


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    read: Optional[bool] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Notification feed of the caller, newest first

    Old notifications are pruned first: anything older than the retention
    window goes, and only the newest NOTIFICATION_MAX_KEPT survive.

    Args:
        read: filter on the read flag (optional)
        limit: page size (defaults to NOTIFICATION_DEFAULT_LIMIT)
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        notifications and unread count
    """
    try:
        repo = NotificationRepository(session)
        cutoff = datetime.now() - timedelta(hours=settings.NOTIFICATION_RETENTION_HOURS)
        pruned = await repo.prune_for_user(user.id, cutoff, settings.NOTIFICATION_MAX_KEPT)
        if pruned:
            logger.info(f"Pruned {pruned} old notifications of user {user.id}")

        notifications = await repo.get_for_user(
            user.id,
            read=read,
            limit=limit or settings.NOTIFICATION_DEFAULT_LIMIT,
        )
        unread = await repo.count_unread(user.id)
        await session.commit()
        return NotificationListResponse(
            data=[NotificationResponse.model_validate(n) for n in notifications],
            unread_count=unread,
        )
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to list notifications: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """Number of unread notifications of the caller"""
    try:
        repo = NotificationRepository(session)
        return UnreadCountResponse(count=await repo.count_unread(user.id))
    except Exception as e:
        logger.error(f"Failed to count notifications: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Query failed: {str(e)}")


@router.patch("/mark-all-read", response_model=MessageResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """Mark every notification of the caller as read"""
    try:
        repo = NotificationRepository(session)
        count = await repo.mark_all_read(user.id)
        await session.commit()
        return MessageResponse(message="All notifications marked as read", count=count)
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to mark notifications read: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")


@router.patch("/{id}/read", response_model=NotificationResponse)
async def mark_read(
    id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Mark one notification as read

    Args:
        id: notification ID
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        the notification
    """
    try:
        repo = NotificationRepository(session)
        notification = await repo.get_owned(user.id, id)
        if not notification:
            raise HTTPException(status_code=404, detail=f"Notification not found: {id}")
        notification.read = True
        await session.commit()
        await session.refresh(notification)
        return notification
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to mark notification read: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")


@router.delete("", response_model=MessageResponse)
async def delete_all(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """Delete every notification of the caller"""
    try:
        repo = NotificationRepository(session)
        count = await repo.delete_all_for_user(user.id)
        await session.commit()
        return MessageResponse(message="All notifications deleted", count=count)
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to delete notifications: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")


@router.delete("/{id}", response_model=MessageResponse)
async def delete_notification(
    id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
):
    """
    Delete one notification

    Args:
        id: notification ID
        user: caller (X-User-Id)
        session: database session (dependency injection)

    Returns:
        result message
    """
    try:
        repo = NotificationRepository(session)
        notification = await repo.get_owned(user.id, id)
        if not notification:
            raise HTTPException(status_code=404, detail=f"Notification not found: {id}")
        await repo.delete(id)
        await session.commit()
        return MessageResponse(message="Notification deleted")
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to delete notification: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")


@router.post("/send", response_model=SendNotificationResponse)
async def send_notification(
    data: SendNotificationRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
    push_gateway=Depends(get_push_gateway)
):
    """
    Push a notification to a user and save it to their feed

    Args:
        data: recipient, title, body, data payload
        user: caller (X-User-Id)
        session: database session (dependency injection)
        push_gateway: push service

    Returns:
        send result
    """
    try:
        result = await send_notification_to_user(
            session, push_gateway, data.user_id, data.title, data.body, data.data
        )
        if not result["success"] and "notification_id" not in result:
            raise HTTPException(status_code=404, detail=result.get("message", "User not found"))
        logger.info(f"User {user.id} sent a notification to {data.user_id}")
        return SendNotificationResponse(**result)
    except HTTPException:
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to send notification: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Send failed: {str(e)}")
