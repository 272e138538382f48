"""Notification values and the reminder due-check.

The core only *describes* what should be notified; delivery (Telegram,
log, terminal bell) is the job of a NotificationPort adapter.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from src.core.materializer import reminders_for_date
from src.data.models import AppState

NotificationKind = Literal["reminder", "alarm", "timer", "warning"]


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    body: str
    require_interaction: bool = False
    # instance key of the reminder that produced this, if any
    source_key: str | None = None


def minute_of(now: datetime) -> str:
    return f"{now.hour:02d}:{now.minute:02d}"


def due_reminders(state: AppState, now: datetime) -> list[Notification]:
    """Reminders shown today at the current minute and not yet completed."""
    current = minute_of(now)
    return [
        Notification(kind="reminder", title="Calendar Reminder", body=r.text, source_key=r.id)
        for r in reminders_for_date(state, now.date())
        if r.time == current and not r.completed
    ]
