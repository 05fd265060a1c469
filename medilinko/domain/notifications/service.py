"""
Notification service
Push a notification to every device of a user and keep a copy in the feed
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from medilinko.domain.reminders.ports import PushGateway
from medilinko.infrastructure.database.models.notification import NotificationType
from medilinko.infrastructure.database.repository.notification_repository import NotificationRepository
from medilinko.infrastructure.database.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_ID = "high_importance_channel"
APPOINTMENT_CHANNEL_ID = "appointment_alerts"


def derive_notification_type(data: Optional[Dict[str, Any]]) -> NotificationType:
    """
    Work out the feed type from a push payload

    Args:
        data: push data payload

    Returns:
        appointment / order / reminder by marker key, else an explicit valid
        "type", else general
    """
    data = data or {}
    if data.get("appointmentId"):
        return NotificationType.APPOINTMENT
    if data.get("orderId"):
        return NotificationType.ORDER
    if data.get("reminderType"):
        return NotificationType.REMINDER
    explicit = data.get("type")
    if explicit in NotificationType._value2member_map_:
        return NotificationType(explicit)
    return NotificationType.GENERAL


def channel_for(data: Optional[Dict[str, Any]]) -> str:
    if (data or {}).get("type") == "new_appointment":
        return APPOINTMENT_CHANNEL_ID
    return DEFAULT_CHANNEL_ID


async def send_notification_to_user(
    session: AsyncSession,
    push_gateway: PushGateway,
    user_id: str,
    title: str,
    body: str,
    data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Send a push notification to a user and record it in their feed

    The feed record is written whatever the push outcome. Tokens the push
    service rejects as invalid are removed from the user.

    Args:
        session: database session (committed here)
        push_gateway: push service
        user_id: recipient
        title: title
        body: body
        data: data payload

    Returns:
        {"success": bool, "message_id"?: str, "notification_id"?: str, "message"?: str}
    """
    data = data or {}
    user_repo = UserRepository(session)
    notification_repo = NotificationRepository(session)

    user = await user_repo.get_by_id(user_id)
    if not user:
        logger.warning(f"User not found: {user_id}")
        return {"success": False, "message": "User not found"}

    tokens = user.push_tokens()
    message_id = None
    if not tokens:
        logger.info(f"No push token for user {user_id}, saving notification only")

    push_data = {k: "" if v is None else str(v) for k, v in data.items()}
    for token in tokens:
        try:
            result = await push_gateway.send(token, title, body, push_data, channel_id=channel_for(data))
        except Exception as e:
            logger.error(f"Error sending push notification to user {user_id}: {e}", exc_info=True)
            continue
        if result.success:
            message_id = message_id or result.message_id
        else:
            logger.warning(f"Push rejected for user {user_id}: {result.error}")
            if result.invalid_token:
                await user_repo.remove_push_token(user_id, token)
                logger.info(f"Cleared invalid push token for user {user_id}")

    notification_type = derive_notification_type(data)
    try:
        notification = await notification_repo.create_for_user(
            user_id=user_id,
            title=title,
            message=body,
            notification_type=notification_type,
            data=data,
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Notification saved for user {user_id} (type: {notification_type.value})")

    response: Dict[str, Any] = {"success": message_id is not None, "notification_id": notification.id}
    if message_id:
        response["message_id"] = message_id
    elif not tokens:
        response["message"] = "User has no push token (notification saved)"
    return response
