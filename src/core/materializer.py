"""Materializer — projects stored sources onto a calendar date.

Nothing here is persisted. Every query builds fresh view objects:

- reminders: the date's own reminders (originals) followed by recurring
  reminders from every other anchor date whose rule matches, sorted by time;
- checklist: recurring checklist items whose rule fits the date, then the
  date's own items;
- alarms: enabled alarms scheduled for that weekday or that exact date.

Instance identity is explicit (OriginalRef | RecurringRef). The string form
`{source_id}::recurring::{occurrence_date_key}` is only a display key and
can be decomposed with parse_instance_key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Union

from src.core.keys import date_key, parse_date_key, weekday_index
from src.core.recurrence import matches, matches_structurally
from src.data.models import Alarm, AppState, Note, RecurrenceRule

if TYPE_CHECKING:
    from src.core.holidays import Holiday

logger = logging.getLogger(__name__)

RECURRING_SEPARATOR = "::recurring::"


# ---------------------------------------------------------------------------
# Instance identity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OriginalRef:
    """The stored entity itself, owned by the DayRecord at `date_key`."""

    id: str
    date_key: str

    @property
    def key(self) -> str:
        return self.id


@dataclass(frozen=True)
class RecurringRef:
    """A computed occurrence of a source stored at `origin_date_key`."""

    source_id: str
    origin_date_key: str
    occurrence_date_key: str

    @property
    def key(self) -> str:
        return f"{self.source_id}{RECURRING_SEPARATOR}{self.occurrence_date_key}"


InstanceRef = Union[OriginalRef, RecurringRef]


def parse_instance_key(key: str) -> tuple[str, str | None]:
    """Split a display key into (source_id, occurrence_date_key).

    Original ids come back as (id, None). Raises ValueError if the
    occurrence part is not a valid date key.
    """
    if RECURRING_SEPARATOR not in key:
        return key, None
    source_id, occurrence = key.rsplit(RECURRING_SEPARATOR, 1)
    parse_date_key(occurrence)
    return source_id, occurrence


# ---------------------------------------------------------------------------
# View objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MaterializedReminder:
    ref: InstanceRef
    text: str
    time: str
    recurrence: RecurrenceRule
    completed: bool
    original_date_key: str

    @property
    def is_recurring(self) -> bool:
        return isinstance(self.ref, RecurringRef)

    @property
    def id(self) -> str:
        return self.ref.key


@dataclass(frozen=True)
class MaterializedChecklistItem:
    id: str
    text: str
    completed: bool
    is_recurring: bool


@dataclass
class DaySummary:
    """Everything visible on one date."""

    date_key: str
    reminders: list[MaterializedReminder] = field(default_factory=list)
    checklist: list[MaterializedChecklistItem] = field(default_factory=list)
    alarms: list[Alarm] = field(default_factory=list)
    holidays: list[Holiday] = field(default_factory=list)
    note: Note | None = None

    @property
    def has_data(self) -> bool:
        return bool(self.reminders or self.checklist or self.note)


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------


def reminders_for_date(state: AppState, d: date) -> list[MaterializedReminder]:
    """Return the effective reminders on `d`, ordered by time of day.

    Originals come first in insertion order, then recurring instances in
    anchor order; the sort on HH:MM is stable, so ties keep that order.
    """
    key = date_key(d)
    results: list[MaterializedReminder] = []

    for reminder in state.day(key).reminders:
        completed = (
            key in reminder.completed_dates if reminder.is_recurring else reminder.completed
        )
        results.append(MaterializedReminder(
            ref=OriginalRef(id=reminder.id, date_key=key),
            text=reminder.text,
            time=reminder.time,
            recurrence=reminder.recurrence,
            completed=completed,
            original_date_key=key,
        ))

    for anchor_key, record in state.days.items():
        if anchor_key == key:
            continue
        recurring = [r for r in record.reminders if r.is_recurring]
        if not recurring:
            continue
        try:
            anchor = parse_date_key(anchor_key)
        except ValueError:
            logger.warning("Skipping day record with malformed key %r", anchor_key)
            continue
        for reminder in recurring:
            if not matches(reminder.recurrence, anchor, d):
                continue
            results.append(MaterializedReminder(
                ref=RecurringRef(
                    source_id=reminder.id,
                    origin_date_key=anchor_key,
                    occurrence_date_key=key,
                ),
                text=reminder.text,
                time=reminder.time,
                recurrence=reminder.recurrence,
                completed=key in reminder.completed_dates,
                original_date_key=anchor_key,
            ))

    results.sort(key=lambda r: r.time)
    return results


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------


def checklist_for_date(state: AppState, d: date) -> list[MaterializedChecklistItem]:
    """Recurring items that fit `d`, then the day's own items."""
    record = state.day(date_key(d))
    done = record.completed_recurring_item_ids

    items = [
        MaterializedChecklistItem(
            id=item.id, text=item.text, completed=item.id in done, is_recurring=True,
        )
        for item in state.recurring_items
        if matches_structurally(item.recurrence, d)
    ]
    items.extend(
        MaterializedChecklistItem(
            id=item.id, text=item.text, completed=item.completed, is_recurring=False,
        )
        for item in record.checklist
    )
    return items


# ---------------------------------------------------------------------------
# Alarms
# ---------------------------------------------------------------------------


def alarms_for_date(state: AppState, d: date) -> list[Alarm]:
    """Enabled alarms that ring on `d`, ordered by time."""
    weekday = weekday_index(d)
    key = date_key(d)
    found = [
        a for a in state.alarms
        if a.enabled and (weekday in a.days or a.target_date == key)
    ]
    found.sort(key=lambda a: a.time)
    return found


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------


def day_summary(
    state: AppState, d: date, holidays: dict[str, list[Holiday]] | None = None,
) -> DaySummary:
    key = date_key(d)
    return DaySummary(
        date_key=key,
        reminders=reminders_for_date(state, d),
        checklist=checklist_for_date(state, d),
        alarms=alarms_for_date(state, d),
        holidays=list((holidays or {}).get(key, [])),
        note=state.day(key).note,
    )
