from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(
        self, user_id: str, kind: str, title: str, message: str, data: dict[str, Any]
    ) -> None: ...


class LoggingNotificationSender:
    """Writes notifications to the log instead of delivering them."""

    def send(
        self, user_id: str, kind: str, title: str, message: str, data: dict[str, Any]
    ) -> None:
        logger.info("Notify %s [%s] %s: %s %s", user_id, kind, title, message, data)
