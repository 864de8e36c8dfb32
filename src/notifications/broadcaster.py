from __future__ import annotations

from loguru import logger
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.device import Device
from src.notifications.fcm import FcmSender
from src.notifications.messages import NotificationMessage


class Broadcaster:
    """Fans a notification out to every registered device."""

    def __init__(self, session: Session):
        self.session = session
        self.settings = get_settings()

    def get_tokens(self) -> list:
        devices = (
            self.session.query(Device)
            .filter(Device.fcm_token.isnot(None), Device.fcm_token != "")
            .all()
        )
        return [device.fcm_token for device in devices]

    def send_to_all(self, notification: NotificationMessage) -> int:
        """Send ``notification`` to all devices.

        Returns:
            Number of messages delivered successfully.
        """
        if not self.settings.notification_enabled:
            logger.info("Notifications are disabled, skipping broadcast")
            return 0

        tokens = self.get_tokens()
        if not tokens:
            logger.debug(f"No registered devices for '{notification.title}'")
            return 0

        if not FcmSender.is_configured():
            logger.warning("FCM is not configured, skipping broadcast")
            return 0

        sender = FcmSender()
        success_count = sender.send_each(tokens, notification)
        logger.info(f"Sent {success_count} notifications successfully.")
        return success_count
