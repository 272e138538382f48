"""Fallback NotificationPort that writes notifications to the log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.notifications import Notification

logger = logging.getLogger(__name__)


class LogNotifier:
    async def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.kind == "warning" else logging.INFO
        logger.log(level, "%s: %s", notification.title, notification.body)
