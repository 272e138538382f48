"""
Daybook — Planner runtime.

Owns the current AppState snapshot and drives the periodic checks:

- reminder + alarm check every REMINDER_POLL_SECONDS;
- countdown timer tick every TIMER_TICK_SECONDS.

Every change is a total replacement of the snapshot through dispatch(), so
a reader always sees a complete state. Notifications produced by the checks
are forwarded to a NotificationPort; the shared alert loop follows whether
anything is ringing.

This module is delivery-agnostic: it depends on the NotificationPort and
AlertPort protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from src.config import settings
from src.core.alarms import check_alarms
from src.core.alert_loop import AlertLoop
from src.core.assistant import ServiceResponse
from src.core.holidays import Holiday, HolidayCalendar
from src.core.keys import date_key
from src.core.notifications import Notification, due_reminders
from src.core.timers import tick_timers
from src.data.models import AppState

if TYPE_CHECKING:
    from src.core.assistant import AssistantService
    from src.ports.alert_port import AlertPort
    from src.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


class PlannerRuntime:
    """Holds the snapshot and runs the polling loops."""

    def __init__(
        self,
        notifier: NotificationPort,
        beeper: AlertPort | None = None,
        state: AppState | None = None,
        holidays: HolidayCalendar | None = None,
        on_change: Callable[[AppState], None] | None = None,
    ) -> None:
        self._state = state or AppState()
        self._notifier = notifier
        self._alert = AlertLoop(beeper) if beeper is not None else None
        self._holidays = holidays or HolidayCalendar()
        self._on_change = on_change
        self._tasks: list[asyncio.Task] = []
        self._holiday_tasks: dict[int, asyncio.Task] = {}
        self._fallback_holidays: dict[int, dict[str, list[Holiday]]] = {}
        # (reminder, minute) pairs already notified, so a second poll in
        # the same minute stays quiet
        self._notified: set[tuple[str, str]] = set()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    def replace_state(self, new_state: AppState) -> None:
        if new_state is self._state:
            return
        self._state = new_state
        if self._alert is not None:
            self._alert.sync(new_state.is_ringing)
        if self._on_change is not None:
            self._on_change(new_state)

    def dispatch(self, reducer: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run `reducer(state, *args)` and install the state it returns.

        Reducers return either a new AppState or (AppState, extra); the extra
        value (e.g. the created entity) is returned to the caller.
        """
        result = reducer(self._state, *args, **kwargs)
        if isinstance(result, tuple):
            new_state, extra = result
        else:
            new_state, extra = result, None
        self.replace_state(new_state)
        return extra

    # ------------------------------------------------------------------
    # Periodic checks
    # ------------------------------------------------------------------

    async def check_due(self, now: datetime | None = None) -> list[Notification]:
        """Reminder and alarm check for the current minute."""
        now = now or datetime.now()
        minute = f"{date_key(now.date())} {now:%H:%M}"
        self._notified = {n for n in self._notified if n[1] == minute}

        notes: list[Notification] = []
        for note in due_reminders(self._state, now):
            marker = (note.source_key or f"{note.title}|{note.body}", minute)
            if marker in self._notified:
                continue
            self._notified.add(marker)
            notes.append(note)

        new_state, alarm_notes = check_alarms(self._state, now)
        self.replace_state(new_state)
        notes.extend(alarm_notes)

        await self._deliver(notes)
        return notes

    async def tick(self) -> list[Notification]:
        new_state, notes = tick_timers(self._state)
        self.replace_state(new_state)
        await self._deliver(notes)
        return notes

    async def _deliver(self, notes: list[Notification]) -> None:
        for note in notes:
            try:
                await self._notifier.notify(note)
            except Exception as exc:
                logger.error("Failed to deliver %s notification: %s", note.kind, exc)

    async def _poll(self, interval: float, check: Callable[[], Awaitable[Any]], name: str) -> None:
        while True:
            try:
                await check()
            except Exception as exc:
                logger.error("%s check failed: %s", name, exc)
            await asyncio.sleep(interval)

    def start(self) -> None:
        """Start the polling loops. Calling it again while running is a no-op."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._poll(settings.REMINDER_POLL_SECONDS, self.check_due, "Reminder/alarm")),
            asyncio.create_task(self._poll(settings.TIMER_TICK_SECONDS, self.tick, "Timer")),
        ]
        logger.info(
            "Runtime started (reminders every %ss, timers every %ss)",
            settings.REMINDER_POLL_SECONDS, settings.TIMER_TICK_SECONDS,
        )

    async def stop(self) -> None:
        tasks = self._tasks + list(self._holiday_tasks.values())
        self._tasks = []
        self._holiday_tasks = {}
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if self._alert is not None:
            self._alert.stop()
        logger.info("Runtime stopped")

    # ------------------------------------------------------------------
    # Assistant
    # ------------------------------------------------------------------

    async def run_command(
        self, service: AssistantService, text: str, now: datetime | None = None,
    ) -> ServiceResponse:
        """Interpret `text`, then apply the calls to the state current at that
        moment, so ticks that landed while the assistant was thinking are kept."""
        now = now or datetime.now()
        outcome = await service.interpret(text, now)
        if isinstance(outcome, ServiceResponse):
            return outcome
        new_state, response = service.apply_calls(self._state, outcome.calls, now)
        self.replace_state(new_state)
        return response

    # ------------------------------------------------------------------
    # Holidays
    # ------------------------------------------------------------------

    def holidays(self, year: int) -> dict[str, list[Holiday]]:
        """Holidays already loaded for `year` (empty until a refresh lands)."""
        return self._holidays.cached(year) or self._fallback_holidays.get(year, {})

    def refresh_holidays(self, year: int) -> asyncio.Task:
        """Fetch holidays for `year` in the background.

        A refresh already in flight for the same year is reused.
        """
        task = self._holiday_tasks.get(year)
        if task is not None and not task.done():
            return task
        task = asyncio.create_task(self._load_holidays(year))
        self._holiday_tasks[year] = task
        return task

    async def _load_holidays(self, year: int) -> dict[str, list[Holiday]]:
        result = await self._holidays.for_year(year)
        if result.warning:
            self._fallback_holidays[year] = result.holidays
            await self._deliver([Notification(kind="warning", title="Holidays", body=result.warning)])
        return result.holidays
