"""Telegram notification adapter — implements NotificationPort.

Wraps a telegram.Bot instance and sends every notification to each
configured chat.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import Bot
from telegram.error import TelegramError

if TYPE_CHECKING:
    from src.core.notifications import Notification

logger = logging.getLogger(__name__)


def format_notification(notification: Notification) -> str:
    icon = {"reminder": "🔔", "alarm": "⏰", "timer": "⏳", "warning": "⚠️"}.get(notification.kind, "")
    return f"{icon} *{notification.title}*\n{notification.body}".strip()


class TelegramNotifier:
    """Telegram implementation of NotificationPort."""

    def __init__(self, bot: Bot, chat_ids: list[int]) -> None:
        self._bot = bot
        self._chat_ids = list(chat_ids)

    async def notify(self, notification: Notification) -> None:
        text = format_notification(notification)
        for chat_id in self._chat_ids:
            try:
                await self._bot.send_message(chat_id=chat_id, text=text, parse_mode="Markdown")
            except TelegramError as exc:
                logger.error("Failed to notify chat %d: %s", chat_id, exc)
