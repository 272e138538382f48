"""
Daybook — UI-Agnostic Assistant Service.

Parses free text via the LLM and applies the resulting calls to the planner
state. All calls of one command are applied to a working copy that is only
returned when every call succeeded, so a failing command never leaves a
partial change behind.

Each UI renders the returned response objects in its own way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal

from src.core import alarms, calendar_actions, timers
from src.core.keys import parse_date_key
from src.core.llm import AssistantError
from src.core.parser import (
    AddAlarmCall,
    AddReminderCall,
    AddTimerCall,
    CommandCalls,
    CommandText,
    ControlStopwatchCall,
    parse_command,
)
from src.data.models import AppState, InvalidEntryError

logger = logging.getLogger(__name__)

AppView = Literal["calendar", "alarms", "timers", "stopwatch"]


# ---------------------------------------------------------------------------
# Response types
# ---------------------------------------------------------------------------


class ResponseKind(Enum):
    SUCCESS = "success"
    TEXT = "text"
    ERROR = "error"


@dataclass
class ActionResult:
    action_type: str   # "addReminder" | "addAlarm" | "addTimer" | "controlStopwatch"
    summary: str


@dataclass
class ServiceResponse:
    kind: ResponseKind
    message: str


@dataclass
class SuccessResponse(ServiceResponse):
    results: list[ActionResult] = field(default_factory=list)
    view: AppView = "calendar"
    focus_date: str | None = None       # date the calendar should jump to


@dataclass
class TextResponse(ServiceResponse):
    pass


@dataclass
class ErrorResponse(ServiceResponse):
    pass


# ---------------------------------------------------------------------------
# AssistantService
# ---------------------------------------------------------------------------


class AssistantService:
    """Applies assistant calls to an AppState. Holds no state of its own."""

    async def interpret(self, text: str, now: datetime) -> CommandCalls | ServiceResponse:
        """Ask the assistant what `text` means.

        Returns the validated calls, or a final text/error response when
        there is nothing to apply.
        """
        if not text.strip():
            return ErrorResponse(kind=ResponseKind.ERROR, message="Please type a command.")

        try:
            result = await parse_command(text.strip(), today=now.date())
        except AssistantError as exc:
            logger.error("Assistant error: %s", exc)
            return ErrorResponse(kind=ResponseKind.ERROR, message=str(exc))

        if isinstance(result, CommandText):
            return TextResponse(kind=ResponseKind.TEXT, message=f"AI Assistant: {result.text}")
        return result

    async def process_command(
        self, state: AppState, text: str, now: datetime | None = None,
    ) -> tuple[AppState, ServiceResponse]:
        """Interpret `text` and apply it.

        Returns the (possibly unchanged) state and a response describing the
        outcome. Never raises for assistant or validation failures.
        """
        now = now or datetime.now()
        outcome = await self.interpret(text, now)
        if isinstance(outcome, ServiceResponse):
            return state, outcome
        return self.apply_calls(state, outcome.calls, now)

    def apply_calls(
        self, state: AppState, calls: list, now: datetime,
    ) -> tuple[AppState, ServiceResponse]:
        """Apply all calls or none of them."""
        working = state
        results: list[ActionResult] = []
        view: AppView = "calendar"
        focus_date: str | None = None

        try:
            for call in calls:
                working, action, call_view, call_focus = self._apply_call(working, call, now)
                results.append(action)
                view = call_view
                focus_date = call_focus or focus_date
        except InvalidEntryError as exc:
            logger.warning("Assistant command rejected: %s", exc)
            return state, ErrorResponse(kind=ResponseKind.ERROR, message=str(exc))

        message = "\n".join(f"✅ {r.summary}" for r in results)
        return working, SuccessResponse(
            kind=ResponseKind.SUCCESS,
            message=message,
            results=results,
            view=view,
            focus_date=focus_date,
        )

    def _apply_call(
        self, state: AppState, call: object, now: datetime,
    ) -> tuple[AppState, ActionResult, AppView, str | None]:
        if isinstance(call, AddReminderCall):
            target = _parse_call_date(call.date)
            state, reminder = calendar_actions.add_reminder(
                state, target, call.description, call.time,
            )
            summary = f"Reminder added: *{reminder.text}* on {call.date} at {reminder.time}"
            return state, ActionResult("addReminder", summary), "calendar", call.date

        if isinstance(call, AddAlarmCall):
            state, alarm = alarms.add_alarm(
                state, call.time, call.label, call.repeat, call.days, now,
            )
            when = "repeating" if call.repeat else f"on {alarm.target_date}"
            summary = f"Alarm set: *{alarm.label}* at {alarm.time} ({when})"
            return state, ActionResult("addAlarm", summary), "alarms", None

        if isinstance(call, AddTimerCall):
            state, timer = timers.add_timer(
                state, call.hours, call.minutes, call.seconds, call.label,
            )
            summary = f"Timer started: *{timer.label}* ({timers.format_timer(timer.initial_duration)})"
            return state, ActionResult("addTimer", summary), "timers", None

        if isinstance(call, ControlStopwatchCall):
            state = timers.control_stopwatch(state, call.action, int(now.timestamp() * 1000))
            return state, ActionResult("controlStopwatch", f"Stopwatch: {call.action}"), "stopwatch", None

        raise InvalidEntryError(f"Unsupported assistant action: {type(call).__name__}")


def _parse_call_date(value: str) -> date:
    try:
        return parse_date_key(value)
    except ValueError as exc:
        raise InvalidEntryError(f"Invalid date {value!r}. Use YYYY-MM-DD.") from exc
