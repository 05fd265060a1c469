"""
Firebase Cloud Messaging gateway
Sends push notifications through the firebase-admin SDK
"""
import asyncio
import logging
from typing import Dict, Optional

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from medilinko.app.config import settings
from medilinko.domain.reminders.ports import PushResult

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "medilinko"

# Global Firebase app (lazily initialised)
_firebase_app: Optional[firebase_admin.App] = None


def _get_firebase_app(credentials_path: str) -> firebase_admin.App:
    global _firebase_app
    if _firebase_app is None:
        cred = credentials.Certificate(credentials_path)
        _firebase_app = firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)
        logger.info("Firebase Admin initialised")
    return _firebase_app


def build_message(
    token: str,
    title: str,
    body: str,
    data: Dict[str, str],
    channel_id: Optional[str] = None
) -> messaging.Message:
    """
    Build an FCM message

    Args:
        token: device registration token
        title: notification title
        body: notification body
        data: data payload (values are sent as strings)
        channel_id: Android notification channel

    Returns:
        messaging.Message
    """
    return messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data={k: "" if v is None else str(v) for k, v in (data or {}).items()},
        android=messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                channel_id=channel_id,
                sound="default",
            ),
        ),
        apns=messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(sound="default", badge=1),
            ),
        ),
    )


class FcmPushGateway:
    """Push gateway backed by Firebase Cloud Messaging"""

    def __init__(self, credentials_path: str):
        """
        Args:
            credentials_path: path of the service-account JSON file
        """
        self.credentials_path = credentials_path

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Dict[str, str],
        channel_id: Optional[str] = None,
    ) -> PushResult:
        """
        Send one push notification

        The SDK call blocks, so it runs in a worker thread.

        Returns:
            PushResult; invalid_token is set when FCM rejects the token itself
        """
        message = build_message(token, title, body, data, channel_id)
        try:
            app = _get_firebase_app(self.credentials_path)
            message_id = await asyncio.to_thread(messaging.send, message, app=app)
            logger.debug(f"FCM message sent: {message_id}")
            return PushResult(success=True, message_id=message_id)
        except (messaging.UnregisteredError, messaging.SenderIdMismatchError) as e:
            return PushResult(success=False, error=str(e), invalid_token=True)
        except exceptions.InvalidArgumentError as e:
            invalid = "registration token" in str(e).lower()
            return PushResult(success=False, error=str(e), invalid_token=invalid)
        except exceptions.FirebaseError as e:
            logger.error(f"FCM send failed: {e}")
            return PushResult(success=False, error=str(e))


class DisabledPushGateway:
    """Used when no Firebase credentials are configured"""

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Dict[str, str],
        channel_id: Optional[str] = None,
    ) -> PushResult:
        logger.warning(f"Push disabled, dropping notification: {title}")
        return PushResult(success=False, error="push notifications are not configured")


def create_push_gateway(credentials_path: Optional[str] = None):
    """
    Pick the push gateway for the current configuration

    Args:
        credentials_path: service-account JSON path (defaults to FIREBASE_CREDENTIALS_PATH)

    Returns:
        FcmPushGateway, or DisabledPushGateway when no credentials are set
    """
    path = credentials_path or settings.FIREBASE_CREDENTIALS_PATH
    if not path:
        logger.warning("FIREBASE_CREDENTIALS_PATH not set, push notifications disabled")
        return DisabledPushGateway()
    return FcmPushGateway(path)
