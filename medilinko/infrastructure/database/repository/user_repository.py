"""
User repository
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from medilinko.infrastructure.database.repository.base import BaseRepository
from medilinko.infrastructure.database.models.user import User, UserDeviceToken


class UserRepository(BaseRepository[User]):
    """User repository"""

    def __init__(self, session: AsyncSession):
        """
        Initialise the user repository

        Args:
            session: database session
        """
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Fetch a user by email

        Args:
            email: email address (compared lower-case)

        Returns:
            user or None
        """
        result = await self.session.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_push_tokens(self, user_id: str) -> List[str]:
        """
        All push tokens registered for a user

        Args:
            user_id: user ID

        Returns:
            distinct tokens, primary token first; empty if the user does not exist
        """
        user = await self.get_by_id(user_id)
        if not user:
            return []
        return user.push_tokens()

    async def save_push_token(self, user_id: str, token: str, device: Optional[str] = None) -> Optional[User]:
        """
        Make a token the user's primary token and register it for the device

        Args:
            user_id: user ID
            token: push token
            device: device label

        Returns:
            the user, or None if the user does not exist
        """
        user = await self.get_by_id(user_id)
        if not user:
            return None

        user.fcm_token = token
        existing = next((t for t in user.device_tokens if t.token == token), None)
        if existing:
            existing.device = device or existing.device
            existing.updated_at = datetime.now()
        else:
            user.device_tokens.append(
                UserDeviceToken(token=token, device=device or "unknown", updated_at=datetime.now())
            )
        await self.session.flush()
        return user

    async def remove_push_token(self, user_id: str, token: str) -> bool:
        """
        Forget a push token (logout or reported invalid by the push service)

        Clears the primary token as well when it matches.

        Args:
            user_id: user ID
            token: push token

        Returns:
            whether anything was removed
        """
        user = await self.get_by_id(user_id)
        if not user:
            return False

        removed = False
        if user.fcm_token == token:
            user.fcm_token = None
            removed = True
        for device_token in list(user.device_tokens):
            if device_token.token == token:
                user.device_tokens.remove(device_token)
                removed = True
        await self.session.flush()
        return removed
