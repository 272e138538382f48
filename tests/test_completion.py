"""Tests for src.core.completion — per-kind completion policies."""

from datetime import date

from src.core.calendar_actions import add_day_item, add_recurring_item, add_reminder
from src.core.completion import (
    is_reminder_completed,
    toggle_checklist_item,
    toggle_reminder,
    toggle_reminder_by_key,
)
from src.core.materializer import (
    OriginalRef,
    RecurringRef,
    checklist_for_date,
    reminders_for_date,
)
from src.data.models import Daily, Weekly

NEXT_WEEK = date(2024, 1, 17)


class TestOneOffReminder:
    def test_toggle_flips_flag(self, empty_state, wednesday):
        state, reminder = add_reminder(empty_state, wednesday, "Dentist", "16:00")
        ref = reminders_for_date(state, wednesday)[0].ref

        state = toggle_reminder(state, ref)
        stored = state.days["2024-01-10"].reminders[0]
        assert stored.completed
        assert stored.completed_dates == frozenset()

    def test_toggle_twice_restores(self, empty_state, wednesday):
        state, _ = add_reminder(empty_state, wednesday, "Dentist", "16:00")
        ref = reminders_for_date(state, wednesday)[0].ref
        assert toggle_reminder(toggle_reminder(state, ref), ref) == state


class TestRecurringReminder:
    def test_occurrence_completion_is_per_date(self, empty_state, wednesday):
        state, reminder = add_reminder(empty_state, wednesday, "Gym", "09:00", Weekly(days_of_week={3}))
        ref = reminders_for_date(state, NEXT_WEEK)[0].ref
        assert isinstance(ref, RecurringRef)

        state = toggle_reminder(state, ref)
        stored = state.days["2024-01-10"].reminders[0]
        assert stored.completed_dates == frozenset({"2024-01-17"})
        assert not stored.completed
        assert "2024-01-17" not in state.days

        assert reminders_for_date(state, NEXT_WEEK)[0].completed
        assert not reminders_for_date(state, date(2024, 1, 24))[0].completed

    def test_anchor_day_uses_completed_dates(self, empty_state, wednesday):
        state, _ = add_reminder(empty_state, wednesday, "Gym", "09:00", Daily())
        ref = reminders_for_date(state, wednesday)[0].ref
        assert isinstance(ref, OriginalRef)

        state = toggle_reminder(state, ref)
        stored = state.days["2024-01-10"].reminders[0]
        assert stored.completed_dates == frozenset({"2024-01-10"})
        assert is_reminder_completed(stored, "2024-01-10")
        assert not is_reminder_completed(stored, "2024-01-11")

    def test_toggle_twice_restores(self, empty_state, wednesday):
        state, _ = add_reminder(empty_state, wednesday, "Gym", "09:00", Daily())
        ref = reminders_for_date(state, NEXT_WEEK)[0].ref
        assert toggle_reminder(toggle_reminder(state, ref), ref) == state


class TestUnresolvedToggles:
    def test_unknown_origin_is_noop(self, empty_state):
        ref = RecurringRef(source_id="gone", origin_date_key="2024-01-10", occurrence_date_key="2024-01-17")
        assert toggle_reminder(empty_state, ref) is empty_state

    def test_unknown_id_is_noop(self, empty_state, wednesday):
        state, _ = add_reminder(empty_state, wednesday, "Gym", "09:00")
        ref = OriginalRef(id="missing", date_key="2024-01-10")
        assert toggle_reminder(state, ref) is state

    def test_malformed_key_is_noop(self, empty_state):
        assert toggle_reminder_by_key(empty_state, "x::recurring::nope", "2024-01-10", "2024-01-17") is empty_state


class TestToggleByKey:
    def test_recurring_key(self, empty_state, wednesday):
        state, reminder = add_reminder(empty_state, wednesday, "Gym", "09:00", Daily())
        state = toggle_reminder_by_key(
            state, f"{reminder.id}::recurring::2024-01-17", "2024-01-10", "2024-01-17",
        )
        assert state.days["2024-01-10"].reminders[0].completed_dates == frozenset({"2024-01-17"})

    def test_original_key(self, empty_state, wednesday):
        state, reminder = add_reminder(empty_state, wednesday, "Dentist", "16:00")
        state = toggle_reminder_by_key(state, reminder.id, "2024-01-10", "2024-01-10")
        assert state.days["2024-01-10"].reminders[0].completed


class TestChecklistToggle:
    def test_recurring_item_completion_lives_on_day(self, empty_state, wednesday):
        state, item = add_recurring_item(empty_state, "Stretch", Daily())
        shown = checklist_for_date(state, wednesday)[0]

        state = toggle_checklist_item(state, shown, "2024-01-10")
        assert state.days["2024-01-10"].completed_recurring_item_ids == frozenset({item.id})
        assert state.recurring_items == (item,)
        assert not checklist_for_date(state, date(2024, 1, 11))[0].completed

    def test_day_item_flag(self, empty_state, wednesday):
        state = add_day_item(empty_state, wednesday, "Buy milk")
        shown = checklist_for_date(state, wednesday)[0]
        state = toggle_checklist_item(state, shown, "2024-01-10")
        assert state.days["2024-01-10"].checklist[0].completed

    def test_toggle_twice_restores_day_item(self, empty_state, wednesday):
        state = add_day_item(empty_state, wednesday, "Buy milk")
        shown = checklist_for_date(state, wednesday)[0]
        again = toggle_checklist_item(toggle_checklist_item(state, shown, "2024-01-10"), shown, "2024-01-10")
        assert again == state

    def test_deleted_recurring_item_is_noop(self, empty_state, wednesday):
        state, _ = add_recurring_item(empty_state, "Stretch", Daily())
        shown = checklist_for_date(state, wednesday)[0]
        assert toggle_checklist_item(empty_state, shown, "2024-01-10") is empty_state
