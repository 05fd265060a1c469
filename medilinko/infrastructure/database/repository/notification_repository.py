"""
Notification feed repository
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc, delete, update, func

from medilinko.infrastructure.database.repository.base import BaseRepository
from medilinko.infrastructure.database.models.notification import Notification, NotificationType


class NotificationRepository(BaseRepository[Notification]):
    """Notification repository"""

    def __init__(self, session: AsyncSession):
        """
        Initialise the notification repository

        Args:
            session: database session
        """
        super().__init__(session, Notification)

    async def create_for_user(
        self,
        user_id: str,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.GENERAL,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """
        Insert an unread notification

        Args:
            user_id: recipient
            title: title
            message: body
            notification_type: notification type
            data: structured payload

        Returns:
            the created notification
        """
        return await self.create(
            user_id=user_id,
            title=title,
            message=message,
            type=notification_type,
            data=data or {},
            read=False,
        )

    async def get_for_user(
        self,
        user_id: str,
        read: Optional[bool] = None,
        limit: int = 7
    ) -> List[Notification]:
        """
        Notifications of a user

        Args:
            user_id: recipient
            read: filter on the read flag (optional)
            limit: max number of notifications

        Returns:
            notifications, newest first
        """
        conditions = [Notification.user_id == user_id]
        if read is not None:
            conditions.append(Notification.read.is_(read))
        result = await self.session.execute(
            select(Notification)
            .where(and_(*conditions))
            .order_by(desc(Notification.created_at), desc(Notification.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_owned(self, user_id: str, id: str) -> Optional[Notification]:
        """
        Fetch a notification only if it belongs to the user

        Args:
            user_id: recipient
            id: notification ID

        Returns:
            notification or None
        """
        result = await self.session.execute(
            select(Notification).where(
                and_(Notification.id == id, Notification.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def count_unread(self, user_id: str) -> int:
        """
        Number of unread notifications

        Args:
            user_id: recipient

        Returns:
            count
        """
        result = await self.session.execute(
            select(func.count(Notification.id)).where(
                and_(Notification.user_id == user_id, Notification.read.is_(False))
            )
        )
        return int(result.scalar_one())

    async def mark_all_read(self, user_id: str) -> int:
        """
        Mark every unread notification of a user as read

        Args:
            user_id: recipient

        Returns:
            number of updated rows
        """
        result = await self.session.execute(
            update(Notification)
            .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
            .values(read=True, updated_at=datetime.now())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def delete_all_for_user(self, user_id: str) -> int:
        """
        Delete every notification of a user

        Args:
            user_id: recipient

        Returns:
            number of deleted rows
        """
        result = await self.session.execute(
            delete(Notification)
            .where(Notification.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def prune_for_user(self, user_id: str, older_than: datetime, keep: int) -> int:
        """
        Drop notifications older than a cutoff, then keep only the newest N

        Args:
            user_id: recipient
            older_than: notifications created before this are deleted
            keep: how many of the newest notifications survive

        Returns:
            number of deleted rows
        """
        deleted = await self.session.execute(
            delete(Notification)
            .where(and_(Notification.user_id == user_id, Notification.created_at < older_than))
            .execution_options(synchronize_session="fetch")
        )
        removed = deleted.rowcount or 0

        keep_result = await self.session.execute(
            select(Notification.id)
            .where(Notification.user_id == user_id)
            .order_by(desc(Notification.created_at), desc(Notification.id))
            .limit(keep)
        )
        keep_ids = list(keep_result.scalars().all())
        overflow = await self.session.execute(
            delete(Notification)
            .where(and_(Notification.user_id == user_id, Notification.id.not_in(keep_ids)))
            .execution_options(synchronize_session="fetch")
        )
        return removed + (overflow.rowcount or 0)
