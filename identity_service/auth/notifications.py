# identity_service/auth/notifications.py
"""
Outbound notification senders.

The authentication services treat delivery as fire-and-forget: a sender may
raise `NotificationError`, and the caller logs it without failing the
operation.
"""

import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel

from identity_service.core.config import Settings
from identity_service.core.logging import redact_email

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    channel: str  # email | sms
    recipient: str
    subject: str
    message: str


class NotificationError(Exception):
    """Delivery to the notification service failed."""


class NotificationSender(Protocol):
    def send(self, notification: Notification) -> None: ...


class HttpNotificationSender:
    """POSTs notifications as JSON to the notifications service."""

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def send(self, notification: Notification) -> None:
        url = f"{self.base_url}/notifications/send"
        try:
            if self._client is not None:
                response = self._client.post(url, json=notification.model_dump(), timeout=self.timeout)
            else:
                response = httpx.post(url, json=notification.model_dump(), timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(f"Notification delivery failed: {e}") from e

        logger.info(f"Sent {notification.channel} notification to {redact_email(notification.recipient)}")


class LoggingNotificationSender:
    """Dev mode: log the notification instead of delivering it."""

    def send(self, notification: Notification) -> None:
        logger.info(
            f"[dev] {notification.channel} notification to {redact_email(notification.recipient)}: "
            f"{notification.subject}"
        )


def build_notification_sender(config: Settings) -> NotificationSender:
    if config.NOTIFICATIONS_SERVICE_URL:
        return HttpNotificationSender(
            config.NOTIFICATIONS_SERVICE_URL,
            timeout=config.NOTIFICATIONS_TIMEOUT_SECONDS,
        )
    return LoggingNotificationSender()
