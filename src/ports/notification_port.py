"""Notification port — abstract interface for delivering notifications.

Core modules emit Notification values and hand them to this protocol, never
to a specific delivery channel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.core.notifications import Notification


class NotificationPort(Protocol):
    """Abstract notification interface used by the runtime."""

    async def notify(self, notification: Notification) -> None: ...
