"""Calendar reducers — reminders, day checklists, notes, period stores.

Each function takes the current AppState and returns a new one. Records are
created lazily on first write; an unknown id is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Literal

from src.core.keys import date_key, period_key
from src.data.models import (
    AppState,
    ChecklistItem,
    ChecklistRecurrenceRule,
    DayRecord,
    NoRecurrence,
    Note,
    PeriodRecord,
    RecurrenceRule,
    RecurringChecklistItem,
    Reminder,
    InvalidEntryError,
    new_id,
    validate_text,
    validate_time,
)

logger = logging.getLogger(__name__)

Period = Literal["week", "month", "year"]

_PERIOD_FIELDS: dict[str, str] = {"week": "weeks", "month": "months", "year": "years"}


def _with_day(state: AppState, key: str, record: DayRecord) -> AppState:
    return replace(state, days={**state.days, key: record})


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------


def add_reminder(
    state: AppState,
    d: date,
    text: str,
    time: str,
    recurrence: RecurrenceRule | None = None,
) -> tuple[AppState, Reminder]:
    """Store a new reminder at `d`, which is also its recurrence anchor."""
    reminder = Reminder(
        id=new_id(),
        text=validate_text(text, "Reminder text"),
        time=validate_time(time),
        recurrence=recurrence or NoRecurrence(),
    )
    key = date_key(d)
    record = state.day(key)
    logger.info("Reminder added on %s at %s: %s", key, reminder.time, reminder.text)
    return _with_day(state, key, replace(record, reminders=record.reminders + (reminder,))), reminder


def delete_reminder(state: AppState, d: date, reminder_id: str) -> AppState:
    """Delete an original reminder. Occurrence keys never match a stored id."""
    key = date_key(d)
    record = state.days.get(key)
    if record is None or not any(r.id == reminder_id for r in record.reminders):
        logger.debug("Delete ignored: reminder %s not on %s", reminder_id, key)
        return state
    reminders = tuple(r for r in record.reminders if r.id != reminder_id)
    logger.info("Reminder %s deleted from %s", reminder_id, key)
    return _with_day(state, key, replace(record, reminders=reminders))


# ---------------------------------------------------------------------------
# Day checklist and note
# ---------------------------------------------------------------------------


def add_day_item(state: AppState, d: date, text: str) -> AppState:
    key = date_key(d)
    record = state.day(key)
    item = ChecklistItem(id=new_id(), text=validate_text(text, "Checklist item"))
    return _with_day(state, key, replace(record, checklist=record.checklist + (item,)))


def delete_day_item(state: AppState, d: date, item_id: str) -> AppState:
    """Delete a day-specific item. Recurring items are not deletable here."""
    key = date_key(d)
    record = state.days.get(key)
    if record is None or not any(i.id == item_id for i in record.checklist):
        return state
    return _with_day(
        state, key, replace(record, checklist=tuple(i for i in record.checklist if i.id != item_id)),
    )


def set_day_note(state: AppState, d: date, content: str) -> AppState:
    key = date_key(d)
    record = state.day(key)
    note_id = record.note.id if record.note else f"note-{key}"
    return _with_day(state, key, replace(record, note=Note(id=note_id, content=content)))


# ---------------------------------------------------------------------------
# Week / month / year stores
# ---------------------------------------------------------------------------


def period_record(state: AppState, period: Period, d: date) -> PeriodRecord:
    store: dict[str, PeriodRecord] = getattr(state, _PERIOD_FIELDS[period])
    return store.get(period_key(period, d)) or PeriodRecord()


def _with_period(state: AppState, period: Period, d: date, record: PeriodRecord) -> AppState:
    attr = _PERIOD_FIELDS[period]
    store: dict[str, PeriodRecord] = getattr(state, attr)
    return replace(state, **{attr: {**store, period_key(period, d): record}})


def add_period_item(state: AppState, period: Period, d: date, text: str) -> AppState:
    record = period_record(state, period, d)
    item = ChecklistItem(id=new_id(), text=validate_text(text, "Checklist item"))
    return _with_period(state, period, d, replace(record, checklist=record.checklist + (item,)))


def toggle_period_item(state: AppState, period: Period, d: date, item_id: str) -> AppState:
    record = period_record(state, period, d)
    if not any(i.id == item_id for i in record.checklist):
        logger.debug("Toggle ignored: %s item %s not found", period, item_id)
        return state
    checklist = tuple(
        replace(i, completed=not i.completed) if i.id == item_id else i
        for i in record.checklist
    )
    return _with_period(state, period, d, replace(record, checklist=checklist))


def delete_period_item(state: AppState, period: Period, d: date, item_id: str) -> AppState:
    record = period_record(state, period, d)
    if not any(i.id == item_id for i in record.checklist):
        return state
    checklist = tuple(i for i in record.checklist if i.id != item_id)
    return _with_period(state, period, d, replace(record, checklist=checklist))


def set_period_note(state: AppState, period: Period, d: date, content: str) -> AppState:
    record = period_record(state, period, d)
    key = period_key(period, d)
    note_id = record.note.id if record.note else f"note-{key}"
    return _with_period(state, period, d, replace(record, note=Note(id=note_id, content=content)))


# ---------------------------------------------------------------------------
# Recurring checklist items
# ---------------------------------------------------------------------------


def add_recurring_item(
    state: AppState, text: str, recurrence: ChecklistRecurrenceRule,
) -> tuple[AppState, RecurringChecklistItem]:
    if isinstance(recurrence, NoRecurrence):
        raise InvalidEntryError("Recurring checklist items need a repeat rule.")
    item = RecurringChecklistItem(
        id=new_id(), text=validate_text(text, "Checklist item"), recurrence=recurrence,
    )
    logger.info("Recurring checklist item added: %s", item.text)
    return replace(state, recurring_items=state.recurring_items + (item,)), item


def delete_recurring_item(state: AppState, item_id: str) -> AppState:
    """Remove the item definition. Past completion marks stay on their days."""
    if not any(i.id == item_id for i in state.recurring_items):
        return state
    return replace(
        state, recurring_items=tuple(i for i in state.recurring_items if i.id != item_id),
    )
