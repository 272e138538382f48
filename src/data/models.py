"""
Daybook — Data Models.

Every entity is an immutable dataclass. State changes never mutate in place:
reducers build a new snapshot with `dataclasses.replace` and hand it back, so
a reader always sees a complete prior or next AppState.

Sources are stored once, at their origin date. Recurring occurrences on later
dates are computed on read (see src.core.materializer) and never stored.
"""

from __future__ import annotations

import itertools
import re
import time
from dataclasses import dataclass, field
from typing import Literal, Union

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class InvalidEntryError(ValueError):
    """Raised when user input cannot become a valid entity.

    The message is safe to show to the user as-is.
    """


# ---------------------------------------------------------------------------
# Recurrence rules: closed set of variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NoRecurrence:
    type: Literal["none"] = "none"


@dataclass(frozen=True)
class Daily:
    type: Literal["daily"] = "daily"


@dataclass(frozen=True)
class Weekly:
    days_of_week: frozenset[int] = frozenset()   # 0 = Sunday .. 6 = Saturday
    type: Literal["weekly"] = "weekly"

    def __post_init__(self) -> None:
        if not self.days_of_week:
            raise InvalidEntryError("Please select at least one day for weekly recurrence.")
        if any(not 0 <= d <= 6 for d in self.days_of_week):
            raise InvalidEntryError("Days of the week must be between 0 (Sunday) and 6 (Saturday).")
        # accept any iterable, store a frozenset
        object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))


@dataclass(frozen=True)
class Monthly:
    day_of_month: int = 1                        # 1..31, never clamped
    type: Literal["monthly"] = "monthly"

    def __post_init__(self) -> None:
        if not 1 <= self.day_of_month <= 31:
            raise InvalidEntryError("Day of month must be between 1 and 31.")


@dataclass(frozen=True)
class Yearly:
    month_of_year: int = 0                       # 0 = January .. 11 = December
    day_of_month: int = 1
    type: Literal["yearly"] = "yearly"

    def __post_init__(self) -> None:
        if not 0 <= self.month_of_year <= 11:
            raise InvalidEntryError("Month must be between 0 (January) and 11 (December).")
        if not 1 <= self.day_of_month <= 31:
            raise InvalidEntryError("Day of month must be between 1 and 31.")


RecurrenceRule = Union[NoRecurrence, Daily, Weekly, Monthly, Yearly]
ChecklistRecurrenceRule = Union[Daily, Weekly, Monthly, Yearly]

RULE_TYPES = ("none", "daily", "weekly", "monthly", "yearly")


def rule_from_fields(
    rule_type: str,
    days_of_week: list[int] | None = None,
    day_of_month: int | None = None,
    month_of_year: int | None = None,
) -> RecurrenceRule:
    """Build a rule from loose form fields.

    Only the fields relevant to `rule_type` are read, so values left over from
    an earlier selection in a form never leak into the stored rule.
    """
    if rule_type == "none":
        return NoRecurrence()
    if rule_type == "daily":
        return Daily()
    if rule_type == "weekly":
        return Weekly(days_of_week=frozenset(days_of_week or ()))
    if rule_type == "monthly":
        return Monthly(day_of_month=day_of_month if day_of_month is not None else 1)
    if rule_type == "yearly":
        return Yearly(
            month_of_year=month_of_year if month_of_year is not None else 0,
            day_of_month=day_of_month if day_of_month is not None else 1,
        )
    raise InvalidEntryError(
        f"Unknown recurrence type {rule_type!r}. Use one of: {', '.join(RULE_TYPES)}."
    )


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

_id_counter = itertools.count()


def new_id() -> str:
    """Return a fresh opaque id, never reused within the process."""
    return f"{time.time_ns():x}-{next(_id_counter)}"


def validate_time(value: str) -> str:
    """Return `value` if it is a zero-padded 24h HH:MM string."""
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise InvalidEntryError(f"Invalid time {value!r}. Use HH:MM in 24-hour format (e.g. 07:30).")
    return value


def validate_text(value: str, what: str = "Text") -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidEntryError(f"{what} cannot be empty.")
    return cleaned


# ---------------------------------------------------------------------------
# Calendar entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    text: str
    completed: bool = False


@dataclass(frozen=True)
class Note:
    id: str
    content: str


@dataclass(frozen=True)
class Reminder:
    """A reminder owned by the DayRecord of its origin date.

    For NoRecurrence the single `completed` flag is authoritative; for any
    other rule completion is tracked per occurrence in `completed_dates`.
    """

    id: str
    text: str
    time: str                                   # HH:MM, zero-padded 24h
    recurrence: RecurrenceRule = field(default_factory=NoRecurrence)
    completed: bool = False
    completed_dates: frozenset[str] = frozenset()

    @property
    def is_recurring(self) -> bool:
        return not isinstance(self.recurrence, NoRecurrence)


@dataclass(frozen=True)
class RecurringChecklistItem:
    """A checklist item that appears on every date its rule matches.

    Completion lives on the DayRecord of each date, never on the item.
    """

    id: str
    text: str
    recurrence: ChecklistRecurrenceRule


@dataclass(frozen=True)
class DayRecord:
    checklist: tuple[ChecklistItem, ...] = ()
    note: Note | None = None
    reminders: tuple[Reminder, ...] = ()
    completed_recurring_item_ids: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return (
            not self.checklist
            and self.note is None
            and not self.reminders
            and not self.completed_recurring_item_ids
        )


@dataclass(frozen=True)
class PeriodRecord:
    """Checklist and note for one week, month or year."""

    checklist: tuple[ChecklistItem, ...] = ()
    note: Note | None = None


# ---------------------------------------------------------------------------
# Alarms, timers, stopwatch
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Alarm:
    id: str
    time: str                                   # HH:MM
    label: str
    days: frozenset[int] = frozenset()          # weekdays for repeating alarms
    enabled: bool = True
    is_one_time: bool = True
    target_date: str | None = None              # YYYY-MM-DD for one-time alarms


TimerStatus = Literal["running", "paused", "stopped"]


@dataclass(frozen=True)
class Timer:
    id: str
    label: str
    initial_duration: int                       # seconds
    time_left: int                              # seconds
    status: TimerStatus = "running"


@dataclass(frozen=True)
class Stopwatch:
    running: bool = False
    elapsed_ms: int = 0                         # accumulated before the current run
    started_at_ms: int | None = None            # wall clock of the current run
    laps: tuple[int, ...] = ()                  # newest first

    def current_ms(self, now_ms: int) -> int:
        if self.running and self.started_at_ms is not None:
            return self.elapsed_ms + (now_ms - self.started_at_ms)
        return self.elapsed_ms


# ---------------------------------------------------------------------------
# Application state aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AppState:
    """The whole planner state. Replaced wholesale on every change."""

    days: dict[str, DayRecord] = field(default_factory=dict)
    weeks: dict[str, PeriodRecord] = field(default_factory=dict)
    months: dict[str, PeriodRecord] = field(default_factory=dict)
    years: dict[str, PeriodRecord] = field(default_factory=dict)
    recurring_items: tuple[RecurringChecklistItem, ...] = ()
    alarms: tuple[Alarm, ...] = ()
    timers: tuple[Timer, ...] = ()
    stopwatch: Stopwatch = field(default_factory=Stopwatch)
    ringing_alarm_ids: frozenset[str] = frozenset()
    ringing_timer_ids: frozenset[str] = frozenset()

    def day(self, key: str) -> DayRecord:
        """Return the DayRecord for `key`, or an empty one."""
        return self.days.get(key) or DayRecord()

    @property
    def is_ringing(self) -> bool:
        return bool(self.ringing_alarm_ids or self.ringing_timer_ids)
