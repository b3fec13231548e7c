"""
Push Notification Service
Creates the in-app notification and fans out to the user's devices through FCM
"""

import logging
from typing import Optional

from firebase_admin import messaging
from sqlalchemy.orm import Session

from ..firebase import get_firebase_app, has_service_account
from ..models import DeviceToken, Notification

logger = logging.getLogger(__name__)


def sanitize_notification_data(data: Optional[dict]) -> dict:
    """FCM data payloads only accept string values; None entries are dropped"""
    if not data:
        return {}
    sanitized = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, bool):
            sanitized[str(key)] = "true" if value else "false"
        else:
            sanitized[str(key)] = str(value)
    return sanitized


class PushService:
    """Device token registry and user notifications"""

    @staticmethod
    def register_token(
        db: Session, user_id: int, token: str, platform: Optional[str] = None
    ) -> DeviceToken:
        device = db.query(DeviceToken).filter(DeviceToken.token == token).first()
        if device:
            # Token moved to another account or platform changed
            device.user_id = user_id
            device.platform = platform
        else:
            device = DeviceToken(user_id=user_id, token=token, platform=platform)
            db.add(device)
        db.commit()
        db.refresh(device)
        logger.info(f"📱 Device token registered for user {user_id} ({platform or 'unknown'})")
        return device

    @staticmethod
    def remove_token(db: Session, user_id: int, token: str) -> bool:
        deleted = (
            db.query(DeviceToken)
            .filter(DeviceToken.user_id == user_id, DeviceToken.token == token)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted > 0

    @staticmethod
    def create_in_app_notification(
        db: Session, user_id: int, title: str, body: str, data: Optional[dict] = None
    ) -> Optional[Notification]:
        try:
            notification = Notification(
                user_id=user_id,
                type=(data or {}).get("type", "system"),
                title=title,
                body=body,
                data=data or None,
                is_read=False,
            )
            db.add(notification)
            db.commit()
            logger.info(f"🔔 In-app notification created for user {user_id}: {title}")
            return notification
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Error creating in-app notification for user {user_id}: {e}")
            return None

    @staticmethod
    def get_user_notifications(
        db: Session, user_id: int, limit: int = 20, offset: int = 0, unread_only: bool = False
    ) -> list[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(
            offset
        ).limit(limit).all()

    @staticmethod
    def notify_user(
        db: Session, user_id: int, title: str, body: str, data: Optional[dict] = None
    ) -> dict:
        """
        Notify a user in-app and by push.

        Push delivery is skipped when Firebase has no service account or the
        user has no registered devices. Failures are logged, never raised.
        """
        result = {"in_app": False, "push_sent": 0, "push_failed": 0}
        payload = sanitize_notification_data(data)

        result["in_app"] = PushService.create_in_app_notification(
            db, user_id, title, body, payload
        ) is not None

        if not has_service_account():
            logger.info("Firebase not configured, skipping push notification")
            return result

        app = get_firebase_app()
        if app is None:
            return result

        try:
            tokens = [
                token
                for (token,) in db.query(DeviceToken.token)
                .filter(DeviceToken.user_id == user_id)
                .all()
                if token
            ]
            if not tokens:
                logger.info(f"No device tokens for user {user_id}")
                return result

            message = messaging.MulticastMessage(
                tokens=tokens,
                notification=messaging.Notification(title=title, body=body),
                data=payload,
            )
            response = messaging.send_each_for_multicast(message, app=app)
            result["push_sent"] = response.success_count
            result["push_failed"] = response.failure_count

            for index, send_response in enumerate(response.responses):
                if not send_response.success:
                    logger.warning(
                        f"⚠️ Push to token {tokens[index][:20]}... failed: {send_response.exception}"
                    )

            logger.info(
                f"📲 Push sent to user {user_id}: success {response.success_count} / failure {response.failure_count}"
            )
        except Exception as e:
            logger.error(f"❌ Error sending push to user {user_id}: {e}")

        return result
