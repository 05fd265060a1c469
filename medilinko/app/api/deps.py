"""
Shared route dependencies
"""
import logging
from typing import Optional
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from medilinko.domain.reminders.scheduler import ReminderScheduler
from medilinko.infrastructure.database.connection import get_async_session
from medilinko.infrastructure.database.models.user import User
from medilinko.infrastructure.database.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_async_session)
) -> User:
    """
    Resolve the calling user from the X-User-Id request header

    Raises:
        HTTPException: 401 when the header is missing, 404 when the user does not exist
    """
    user_id = request.headers.get(USER_ID_HEADER)
    if not user_id:
        logger.warning(f"Request without {USER_ID_HEADER} header: {request.url.path}")
        raise HTTPException(status_code=401, detail=f"Missing {USER_ID_HEADER} header")

    user = await UserRepository(session).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail=f"User not found: {user_id}")
    return user


def get_reminder_scheduler(request: Request) -> Optional[ReminderScheduler]:
    """The scheduler created in the app lifespan, or None when it is disabled"""
    return getattr(request.app.state, "reminder_scheduler", None)


def get_push_gateway(request: Request):
    """The push gateway created in the app lifespan"""
    gateway = getattr(request.app.state, "push_gateway", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="Push gateway not initialised")
    return gateway
