"""Alarm reducers and the periodic alarm check.

Repeating alarms ring on their weekdays; one-time alarms ring once on their
target date and then disable themselves.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from src.core.keys import date_key, weekday_index
from src.core.notifications import Notification, minute_of
from src.data.models import (
    Alarm,
    AppState,
    InvalidEntryError,
    new_id,
    validate_time,
)

logger = logging.getLogger(__name__)

DEFAULT_ALARM_LABEL = "New Alarm"


def one_time_target(time: str, now: datetime) -> str:
    """Today's date key, or tomorrow's when `time` has already passed."""
    hour, minute = map(int, time.split(":"))
    alarm_today = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    target = now.date() if alarm_today > now else now.date() + timedelta(days=1)
    return date_key(target)


def _validate_days(repeat: bool, days: list[int] | None) -> frozenset[int]:
    if not repeat:
        return frozenset()
    chosen = frozenset(days or ())
    if not chosen:
        raise InvalidEntryError("Please select at least one day for repeating alarms.")
    if any(not 0 <= d <= 6 for d in chosen):
        raise InvalidEntryError("Alarm days must be between 0 (Sunday) and 6 (Saturday).")
    return chosen


def add_alarm(
    state: AppState,
    time: str,
    label: str | None,
    repeat: bool,
    days: list[int] | None,
    now: datetime,
) -> tuple[AppState, Alarm]:
    validate_time(time)
    alarm = Alarm(
        id=new_id(),
        time=time,
        label=(label or "").strip() or DEFAULT_ALARM_LABEL,
        days=_validate_days(repeat, days),
        enabled=True,
        is_one_time=not repeat,
        target_date=None if repeat else one_time_target(time, now),
    )
    logger.info("Alarm added: %s at %s (%s)", alarm.label, alarm.time,
                "repeating" if repeat else f"once on {alarm.target_date}")
    return replace(state, alarms=state.alarms + (alarm,)), alarm


def update_alarm(
    state: AppState,
    alarm_id: str,
    time: str,
    label: str | None,
    repeat: bool,
    days: list[int] | None,
    now: datetime,
) -> AppState:
    """Edit an alarm. Switching repeat on/off recomputes the target date."""
    current = next((a for a in state.alarms if a.id == alarm_id), None)
    if current is None:
        return state
    validate_time(time)

    target = current.target_date
    if not current.is_one_time and not repeat:
        target = one_time_target(time, now)
    elif current.is_one_time and repeat:
        target = None

    updated = replace(
        current,
        time=time,
        label=(label or "").strip() or DEFAULT_ALARM_LABEL,
        days=_validate_days(repeat, days),
        is_one_time=not repeat,
        target_date=target,
    )
    return replace(state, alarms=tuple(updated if a.id == alarm_id else a for a in state.alarms))


def toggle_alarm(state: AppState, alarm_id: str) -> AppState:
    return replace(state, alarms=tuple(
        replace(a, enabled=not a.enabled) if a.id == alarm_id else a for a in state.alarms
    ))


def delete_alarm(state: AppState, alarm_id: str) -> AppState:
    return replace(
        state,
        alarms=tuple(a for a in state.alarms if a.id != alarm_id),
        ringing_alarm_ids=state.ringing_alarm_ids - {alarm_id},
    )


def dismiss_alarm(state: AppState, alarm_id: str) -> AppState:
    return replace(state, ringing_alarm_ids=state.ringing_alarm_ids - {alarm_id})


def check_alarms(state: AppState, now: datetime) -> tuple[AppState, list[Notification]]:
    """Fire alarms due at the current minute.

    Already-ringing alarms are skipped, so polling twice within the same
    minute does not fire twice.
    """
    current = minute_of(now)
    weekday = weekday_index(now.date())
    today = date_key(now.date())

    ringing = set(state.ringing_alarm_ids)
    to_disable: set[str] = set()
    notes: list[Notification] = []

    for alarm in state.alarms:
        if not alarm.enabled or alarm.id in ringing or alarm.time != current:
            continue
        repeating = weekday in alarm.days
        once = alarm.is_one_time and alarm.target_date == today
        if not (repeating or once):
            continue
        ringing.add(alarm.id)
        notes.append(Notification(
            kind="alarm", title="Alarm", body=alarm.label, require_interaction=True,
        ))
        if once:
            to_disable.add(alarm.id)
        logger.info("Alarm ringing: %s at %s", alarm.label, alarm.time)

    if not notes:
        return state, []

    alarms = tuple(replace(a, enabled=False) if a.id in to_disable else a for a in state.alarms)
    return replace(state, alarms=alarms, ringing_alarm_ids=frozenset(ringing)), notes
