"""Occurrence matcher — pure business logic.

Decides whether a candidate date is an occurrence of a recurrence rule.
Recurrence never projects into the past, and the anchor day itself is
represented by the original entity, so it never matches as a recurrence.

No I/O: this module only compares dates.
"""

from __future__ import annotations

from datetime import date

from src.core.keys import weekday_index
from src.data.models import (
    Daily,
    Monthly,
    NoRecurrence,
    RecurrenceRule,
    Weekly,
    Yearly,
)


def _rule_fits(rule: RecurrenceRule, candidate: date) -> bool:
    """Calendar condition of a rule, ignoring any anchor."""
    if isinstance(rule, Daily):
        return True
    if isinstance(rule, Weekly):
        return weekday_index(candidate) in rule.days_of_week
    if isinstance(rule, Monthly):
        # months shorter than day_of_month simply have no occurrence
        return candidate.day == rule.day_of_month
    if isinstance(rule, Yearly):
        return (
            candidate.month - 1 == rule.month_of_year
            and candidate.day == rule.day_of_month
        )
    if isinstance(rule, NoRecurrence):
        return False
    raise TypeError(f"Unsupported recurrence rule: {rule!r}")


def matches(rule: RecurrenceRule, anchor: date, candidate: date) -> bool:
    """Return True if `candidate` is a recurring occurrence of `rule`.

    - NoRecurrence matches only the anchor date itself.
    - Every other rule requires candidate > anchor (strictly), then applies
      its calendar condition.
    """
    if isinstance(rule, NoRecurrence):
        return candidate == anchor
    if candidate <= anchor:
        return False
    return _rule_fits(rule, candidate)


def matches_structurally(rule: RecurrenceRule, candidate: date) -> bool:
    """Anchor-free match used for recurring checklist items.

    These items carry no origin date, so they appear on every date whose
    calendar condition holds, past dates included.
    """
    return _rule_fits(rule, candidate)


def describe(rule: RecurrenceRule) -> str:
    """Short human label, e.g. "Weekly (Mon, Wed)"."""
    if isinstance(rule, NoRecurrence):
        return "Does not repeat"
    if isinstance(rule, Daily):
        return "Daily"
    if isinstance(rule, Weekly):
        names = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        return "Weekly (" + ", ".join(names[d] for d in sorted(rule.days_of_week)) + ")"
    if isinstance(rule, Monthly):
        return f"Monthly on day {rule.day_of_month}"
    if isinstance(rule, Yearly):
        months = [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ]
        return f"Yearly on {months[rule.month_of_year]} {rule.day_of_month}"
    raise TypeError(f"Unsupported recurrence rule: {rule!r}")
