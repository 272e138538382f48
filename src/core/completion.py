"""Completion tracker — per-kind policies for recording "done".

- One-off reminder / day checklist item: flip the `completed` flag on the
  stored entity in its owning DayRecord.
- Recurring reminder (original or occurrence): toggle the query day key in
  the source's `completed_dates`, stored at the anchor DayRecord.
- Recurring checklist item: toggle the item id in the query day's
  `completed_recurring_item_ids`; the item itself is never touched.

A reference that resolves to no stored source (e.g. deleted while the UI
still showed it) is a silent no-op: the state comes back unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from src.core.materializer import (
    InstanceRef,
    MaterializedChecklistItem,
    OriginalRef,
    RecurringRef,
    parse_instance_key,
)
from src.data.models import AppState, Reminder

logger = logging.getLogger(__name__)


def _toggled(values: frozenset[str], key: str) -> frozenset[str]:
    return values - {key} if key in values else values | {key}


def is_reminder_completed(reminder: Reminder, query_day_key: str) -> bool:
    if reminder.is_recurring:
        return query_day_key in reminder.completed_dates
    return reminder.completed


def toggle_reminder(state: AppState, ref: InstanceRef) -> AppState:
    """Toggle completion of a reminder instance for the day it is shown on."""
    if isinstance(ref, RecurringRef):
        owner_key, source_id, query_key = ref.origin_date_key, ref.source_id, ref.occurrence_date_key
    elif isinstance(ref, OriginalRef):
        owner_key, source_id, query_key = ref.date_key, ref.id, ref.date_key
    else:
        raise TypeError(f"Unsupported instance reference: {ref!r}")

    record = state.days.get(owner_key)
    if record is None:
        logger.warning("Toggle ignored: no day record %s for reminder %s", owner_key, source_id)
        return state

    found = False
    reminders: list[Reminder] = []
    for reminder in record.reminders:
        if reminder.id != source_id:
            reminders.append(reminder)
            continue
        found = True
        if reminder.is_recurring:
            reminders.append(replace(
                reminder, completed_dates=_toggled(reminder.completed_dates, query_key),
            ))
        elif isinstance(ref, RecurringRef):
            # rule changed to "none" after the view was built
            logger.warning("Toggle ignored: reminder %s is no longer recurring", source_id)
            return state
        else:
            reminders.append(replace(reminder, completed=not reminder.completed))

    if not found:
        logger.warning("Toggle ignored: reminder %s not found on %s", source_id, owner_key)
        return state

    logger.debug("Reminder %s toggled for %s", source_id, query_key)
    days = {**state.days, owner_key: replace(record, reminders=tuple(reminders))}
    return replace(state, days=days)


def toggle_reminder_by_key(
    state: AppState, key: str, origin_date_key: str, query_day_key: str,
) -> AppState:
    """Toggle using the string display key instead of an InstanceRef."""
    try:
        source_id, occurrence = parse_instance_key(key)
    except ValueError:
        logger.warning("Toggle ignored: malformed instance key %r", key)
        return state
    if occurrence is None:
        return toggle_reminder(state, OriginalRef(id=source_id, date_key=query_day_key))
    return toggle_reminder(state, RecurringRef(
        source_id=source_id,
        origin_date_key=origin_date_key,
        occurrence_date_key=occurrence,
    ))


def toggle_checklist_item(
    state: AppState, item: MaterializedChecklistItem, query_day_key: str,
) -> AppState:
    """Toggle a checklist item as shown on `query_day_key`."""
    record = state.day(query_day_key)

    if item.is_recurring:
        if not any(r.id == item.id for r in state.recurring_items):
            logger.warning("Toggle ignored: recurring item %s no longer exists", item.id)
            return state
        updated = replace(
            record,
            completed_recurring_item_ids=_toggled(record.completed_recurring_item_ids, item.id),
        )
    else:
        if not any(i.id == item.id for i in record.checklist):
            logger.warning("Toggle ignored: checklist item %s not found on %s", item.id, query_day_key)
            return state
        updated = replace(record, checklist=tuple(
            replace(i, completed=not i.completed) if i.id == item.id else i
            for i in record.checklist
        ))

    return replace(state, days={**state.days, query_day_key: updated})
