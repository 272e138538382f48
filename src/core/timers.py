"""Countdown timers and the stopwatch.

Timers are advanced by a once-per-second tick; the tick is the only place a
timer finishes. The stopwatch stores wall-clock timestamps rather than
ticking, so its reading stays exact however often it is rendered.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Literal

from src.core.notifications import Notification
from src.data.models import (
    AppState,
    InvalidEntryError,
    Stopwatch,
    Timer,
    new_id,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMER_LABEL = "Timer"

StopwatchAction = Literal["start", "stop", "lap", "reset"]
STOPWATCH_ACTIONS: tuple[str, ...] = ("start", "stop", "lap", "reset")


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------


def add_timer(
    state: AppState, hours: int, minutes: int, seconds: int, label: str | None = None,
) -> tuple[AppState, Timer]:
    """Create a timer and start it immediately."""
    if min(hours, minutes, seconds) < 0:
        raise InvalidEntryError("Timer values cannot be negative.")
    duration = int(hours) * 3600 + int(minutes) * 60 + int(seconds)
    if duration <= 0:
        raise InvalidEntryError("Please set a duration greater than zero.")
    timer = Timer(
        id=new_id(),
        label=(label or "").strip() or DEFAULT_TIMER_LABEL,
        initial_duration=duration,
        time_left=duration,
        status="running",
    )
    logger.info("Timer started: %s (%s)", timer.label, format_timer(duration))
    return replace(state, timers=state.timers + (timer,)), timer


def _set_status(state: AppState, timer_id: str, **changes) -> AppState:
    return replace(state, timers=tuple(
        replace(t, **changes) if t.id == timer_id else t for t in state.timers
    ))


def start_timer(state: AppState, timer_id: str) -> AppState:
    return _set_status(state, timer_id, status="running")


def pause_timer(state: AppState, timer_id: str) -> AppState:
    return _set_status(state, timer_id, status="paused")


def reset_timer(state: AppState, timer_id: str) -> AppState:
    timer = next((t for t in state.timers if t.id == timer_id), None)
    if timer is None:
        return state
    return _set_status(state, timer_id, status="stopped", time_left=timer.initial_duration)


def delete_timer(state: AppState, timer_id: str) -> AppState:
    return replace(
        state,
        timers=tuple(t for t in state.timers if t.id != timer_id),
        ringing_timer_ids=state.ringing_timer_ids - {timer_id},
    )


# Dismissing a finished timer removes it.
dismiss_timer = delete_timer


def tick_timers(state: AppState) -> tuple[AppState, list[Notification]]:
    """Advance running timers by one second."""
    if not any(t.status == "running" for t in state.timers):
        return state, []

    ringing = set(state.ringing_timer_ids)
    notes: list[Notification] = []
    timers: list[Timer] = []
    for timer in state.timers:
        if timer.status != "running":
            timers.append(timer)
        elif timer.time_left > 0:
            timers.append(replace(timer, time_left=timer.time_left - 1))
        else:
            timers.append(replace(timer, status="stopped", time_left=0))
            ringing.add(timer.id)
            notes.append(Notification(
                kind="timer", title="Timer Finished!", body=timer.label,
                require_interaction=True,
            ))
            logger.info("Timer finished: %s", timer.label)

    return replace(state, timers=tuple(timers), ringing_timer_ids=frozenset(ringing)), notes


# ---------------------------------------------------------------------------
# Stopwatch
# ---------------------------------------------------------------------------


def control_stopwatch(state: AppState, action: str, now_ms: int) -> AppState:
    """Apply a stopwatch action. Start while running and stop while stopped
    leave the stopwatch as it is."""
    sw = state.stopwatch
    if action == "start":
        if sw.running:
            return state
        new = replace(sw, running=True, started_at_ms=now_ms)
    elif action == "stop":
        if not sw.running:
            return state
        new = replace(sw, running=False, elapsed_ms=sw.current_ms(now_ms), started_at_ms=None)
    elif action == "lap":
        if not sw.running:
            return state
        new = replace(sw, laps=(sw.current_ms(now_ms),) + sw.laps)
    elif action == "reset":
        new = Stopwatch()
    else:
        raise InvalidEntryError(
            f"Unknown stopwatch action {action!r}. Use one of: {', '.join(STOPWATCH_ACTIONS)}."
        )
    return replace(state, stopwatch=new)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------


def format_timer(seconds: int) -> str:
    """HH:MM:SS."""
    h, rest = divmod(max(seconds, 0), 3600)
    m, s = divmod(rest, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_stopwatch(milliseconds: int) -> str:
    """HH:MM:SS.cc (hundredths)."""
    total_seconds, ms = divmod(max(milliseconds, 0), 1000)
    return f"{format_timer(total_seconds)}.{ms // 10:02d}"


def format_time_12h(time24: str) -> str:
    """'13:05' -> '1:05 PM'."""
    if not time24:
        return ""
    hours, minutes = time24.split(":")
    h = int(hours)
    suffix = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{minutes} {suffix}"
