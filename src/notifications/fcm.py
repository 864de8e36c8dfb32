from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import List

import firebase_admin
from firebase_admin import auth, credentials, messaging
from firebase_admin.exceptions import FirebaseError
from loguru import logger

from src.config import get_settings
from src.notifications.messages import NotificationMessage

# FCM accepts at most 500 messages per send_each call
SEND_EACH_BATCH_SIZE = 500

_firebase_init_lock = threading.Lock()


def _load_service_account(raw: str) -> dict:
    """Accept either an inline JSON document or a path to one."""
    raw = raw.strip()
    if raw.startswith("{"):
        return json.loads(raw)
    return json.loads(Path(raw).read_text(encoding="utf-8"))


def get_firebase_app() -> firebase_admin.App:
    # Scheduler threads and API requests may both get here first
    with _firebase_init_lock:
        if not firebase_admin._apps:
            settings = get_settings()
            cred = credentials.Certificate(
                _load_service_account(settings.firebase_service_account)
            )
            firebase_admin.initialize_app(cred)
            logger.info("Firebase app initialized")
        return firebase_admin.get_app()


class FcmSender:
    """Send push notifications through Firebase Cloud Messaging."""

    def __init__(self):
        self.app = get_firebase_app()

    @classmethod
    def is_configured(cls) -> bool:
        """Check if Firebase service account credentials are set."""
        settings = get_settings()
        return bool(settings.firebase_service_account)

    def create_device_token(self, device_id: str) -> str:
        """Mint a Firebase custom token for a newly registered device."""
        token = auth.create_custom_token(device_id, app=self.app)
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token

    def send_each(self, tokens: List[str], notification: NotificationMessage) -> int:
        """Send ``notification`` to every token.

        Returns:
            Number of messages FCM accepted.
        """
        success_count = 0
        for i in range(0, len(tokens), SEND_EACH_BATCH_SIZE):
            batch = tokens[i : i + SEND_EACH_BATCH_SIZE]
            messages = [
                messaging.Message(
                    token=token,
                    notification=messaging.Notification(
                        title=notification.title, body=notification.body
                    ),
                )
                for token in batch
            ]
            try:
                response = messaging.send_each(messages, app=self.app)
            except FirebaseError as e:
                logger.error(
                    f"FCM: failed to send batch {i // SEND_EACH_BATCH_SIZE + 1}: {e}"
                )
                continue

            success_count += response.success_count
            if response.failure_count:
                logger.warning(
                    f"FCM: {response.failure_count} of {len(batch)} messages failed"
                )
        return success_count
