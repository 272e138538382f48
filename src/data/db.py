"""
Daybook — Snapshot Database.

The whole AppState is saved as one JSON document per save, so loading gives
back exactly the snapshot that was written. Only the latest row is read;
older rows are pruned on save.

Ringing alarm/timer sets are runtime-only and are never written.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from src.data.models import (
    Alarm,
    AppState,
    ChecklistItem,
    Daily,
    DayRecord,
    Monthly,
    NoRecurrence,
    Note,
    PeriodRecord,
    RecurrenceRule,
    RecurringChecklistItem,
    Reminder,
    Stopwatch,
    Timer,
    Weekly,
    Yearly,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def rule_to_dict(rule: RecurrenceRule) -> dict[str, Any]:
    if isinstance(rule, Weekly):
        return {"type": "weekly", "daysOfWeek": sorted(rule.days_of_week)}
    if isinstance(rule, Monthly):
        return {"type": "monthly", "dayOfMonth": rule.day_of_month}
    if isinstance(rule, Yearly):
        return {"type": "yearly", "monthOfYear": rule.month_of_year, "dayOfMonth": rule.day_of_month}
    return {"type": rule.type}


def rule_from_dict(data: dict[str, Any] | None) -> RecurrenceRule:
    rule_type = (data or {}).get("type", "none")
    if rule_type == "daily":
        return Daily()
    if rule_type == "weekly":
        return Weekly(days_of_week=frozenset(data.get("daysOfWeek", ())))
    if rule_type == "monthly":
        return Monthly(day_of_month=data["dayOfMonth"])
    if rule_type == "yearly":
        return Yearly(month_of_year=data["monthOfYear"], day_of_month=data["dayOfMonth"])
    return NoRecurrence()


def _items_to_list(items: tuple[ChecklistItem, ...]) -> list[dict[str, Any]]:
    return [{"id": i.id, "text": i.text, "completed": i.completed} for i in items]


def _items_from_list(data: list[dict[str, Any]]) -> tuple[ChecklistItem, ...]:
    return tuple(
        ChecklistItem(id=i["id"], text=i["text"], completed=bool(i.get("completed", False)))
        for i in data
    )


def _note_to_dict(note: Note | None) -> dict[str, str] | None:
    return {"id": note.id, "content": note.content} if note else None


def _note_from_dict(data: dict[str, str] | None) -> Note | None:
    return Note(id=data["id"], content=data["content"]) if data else None


def _period_to_dict(record: PeriodRecord) -> dict[str, Any]:
    return {"checklist": _items_to_list(record.checklist), "note": _note_to_dict(record.note)}


def _period_from_dict(data: dict[str, Any]) -> PeriodRecord:
    return PeriodRecord(
        checklist=_items_from_list(data.get("checklist", [])),
        note=_note_from_dict(data.get("note")),
    )


def _day_to_dict(record: DayRecord) -> dict[str, Any]:
    return {
        "checklist": _items_to_list(record.checklist),
        "note": _note_to_dict(record.note),
        "reminders": [
            {
                "id": r.id,
                "text": r.text,
                "time": r.time,
                "recurrence": rule_to_dict(r.recurrence),
                "completed": r.completed,
                "completedDates": sorted(r.completed_dates),
            }
            for r in record.reminders
        ],
        "completedRecurringItemIds": sorted(record.completed_recurring_item_ids),
    }


def _day_from_dict(data: dict[str, Any]) -> DayRecord:
    return DayRecord(
        checklist=_items_from_list(data.get("checklist", [])),
        note=_note_from_dict(data.get("note")),
        reminders=tuple(
            Reminder(
                id=r["id"],
                text=r["text"],
                time=r["time"],
                recurrence=rule_from_dict(r.get("recurrence")),
                completed=bool(r.get("completed", False)),
                completed_dates=frozenset(r.get("completedDates", ())),
            )
            for r in data.get("reminders", [])
        ),
        completed_recurring_item_ids=frozenset(data.get("completedRecurringItemIds", ())),
    )


def snapshot_to_dict(state: AppState) -> dict[str, Any]:
    """JSON-ready form of `state`. Empty day records are dropped."""
    sw = state.stopwatch
    return {
        "version": SNAPSHOT_VERSION,
        "days": {k: _day_to_dict(v) for k, v in state.days.items() if not v.is_empty},
        "weeks": {k: _period_to_dict(v) for k, v in state.weeks.items()},
        "months": {k: _period_to_dict(v) for k, v in state.months.items()},
        "years": {k: _period_to_dict(v) for k, v in state.years.items()},
        "recurringItems": [
            {"id": i.id, "text": i.text, "recurrence": rule_to_dict(i.recurrence)}
            for i in state.recurring_items
        ],
        "alarms": [
            {
                "id": a.id,
                "time": a.time,
                "label": a.label,
                "days": sorted(a.days),
                "enabled": a.enabled,
                "isOneTime": a.is_one_time,
                "targetDate": a.target_date,
            }
            for a in state.alarms
        ],
        "timers": [
            {
                "id": t.id,
                "label": t.label,
                "initialDuration": t.initial_duration,
                "timeLeft": t.time_left,
                "status": t.status,
            }
            for t in state.timers
        ],
        "stopwatch": {
            "running": sw.running,
            "elapsedMs": sw.elapsed_ms,
            "startedAtMs": sw.started_at_ms,
            "laps": list(sw.laps),
        },
    }


def snapshot_from_dict(data: dict[str, Any]) -> AppState:
    sw = data.get("stopwatch") or {}
    return AppState(
        days={k: _day_from_dict(v) for k, v in data.get("days", {}).items()},
        weeks={k: _period_from_dict(v) for k, v in data.get("weeks", {}).items()},
        months={k: _period_from_dict(v) for k, v in data.get("months", {}).items()},
        years={k: _period_from_dict(v) for k, v in data.get("years", {}).items()},
        recurring_items=tuple(
            RecurringChecklistItem(id=i["id"], text=i["text"], recurrence=rule_from_dict(i["recurrence"]))
            for i in data.get("recurringItems", [])
        ),
        alarms=tuple(
            Alarm(
                id=a["id"],
                time=a["time"],
                label=a["label"],
                days=frozenset(a.get("days", ())),
                enabled=bool(a.get("enabled", True)),
                is_one_time=bool(a.get("isOneTime", False)),
                target_date=a.get("targetDate"),
            )
            for a in data.get("alarms", [])
        ),
        timers=tuple(
            Timer(
                id=t["id"],
                label=t["label"],
                initial_duration=t["initialDuration"],
                time_left=t["timeLeft"],
                status=t.get("status", "stopped"),
            )
            for t in data.get("timers", [])
        ),
        stopwatch=Stopwatch(
            running=bool(sw.get("running", False)),
            elapsed_ms=sw.get("elapsedMs", 0),
            started_at_ms=sw.get("startedAtMs"),
            laps=tuple(sw.get("laps", ())),
        ),
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SnapshotDB:
    """SQLite-backed load/save pair for the planner snapshot."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    id         INTEGER PRIMARY KEY AUTOINCREMENT,
                    saved_at   TEXT    NOT NULL,
                    payload    TEXT    NOT NULL
                )
            """)
        logger.debug("Snapshots table initialized at %s", self._db_path)

    def load(self) -> AppState:
        """Return the latest snapshot, or an empty state if none was saved."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT payload FROM snapshots ORDER BY id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            logger.info("No saved snapshot, starting empty")
            return AppState()
        state = snapshot_from_dict(json.loads(row["payload"]))
        logger.info("Loaded snapshot: %d day records, %d alarms, %d timers",
                    len(state.days), len(state.alarms), len(state.timers))
        return state

    def save(self, state: AppState) -> None:
        payload = json.dumps(snapshot_to_dict(state), ensure_ascii=False)
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO snapshots (saved_at, payload) VALUES (?, ?)",
                (datetime.now().isoformat(timespec="seconds"), payload),
            )
            conn.execute("DELETE FROM snapshots WHERE id < ?", (cursor.lastrowid,))
        logger.debug("Snapshot saved (%d bytes)", len(payload))
