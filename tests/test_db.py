"""Tests for src.data.db — SnapshotDB persistence."""

from datetime import date, datetime

from src.core.alarms import add_alarm, check_alarms
from src.core.calendar_actions import (
    add_period_item,
    add_recurring_item,
    add_reminder,
    set_day_note,
)
from src.core.timers import add_timer, control_stopwatch
from src.data.db import (
    SnapshotDB,
    rule_from_dict,
    rule_to_dict,
    snapshot_from_dict,
    snapshot_to_dict,
)
from src.data.models import AppState, DayRecord, Monthly, NoRecurrence, Weekly, Yearly


def _populated_state(empty_state, wednesday):
    state, _ = add_reminder(empty_state, wednesday, "Gym", "09:00", Weekly(days_of_week={3}))
    state, _ = add_reminder(state, wednesday, "Dentist", "16:00")
    state = set_day_note(state, wednesday, "Busy day")
    state = add_period_item(state, "week", wednesday, "Plan trip")
    state, _ = add_recurring_item(state, "Rent", Monthly(day_of_month=1))
    state, _ = add_alarm(state, "07:00", "Run", True, [1, 3], datetime(2024, 1, 10, 6))
    state, _ = add_timer(state, 0, 5, 0, "Tea")
    state = control_stopwatch(state, "start", 1_000)
    return state


class TestRules:
    def test_wire_format(self):
        assert rule_to_dict(Weekly(days_of_week={3, 1})) == {"type": "weekly", "daysOfWeek": [1, 3]}
        assert rule_to_dict(Yearly(month_of_year=11, day_of_month=25)) == {
            "type": "yearly", "monthOfYear": 11, "dayOfMonth": 25,
        }
        assert rule_to_dict(NoRecurrence()) == {"type": "none"}

    def test_missing_rule_is_none(self):
        assert rule_from_dict(None) == NoRecurrence()


class TestSnapshotDict:
    def test_restores_equal_state(self, empty_state, wednesday):
        state = _populated_state(empty_state, wednesday)
        assert snapshot_from_dict(snapshot_to_dict(state)) == state

    def test_ringing_sets_not_persisted(self, empty_state):
        state, _ = add_alarm(empty_state, "07:00", "Run", True, [3], datetime(2024, 1, 10, 6))
        state, _ = check_alarms(state, datetime(2024, 1, 10, 7, 0))
        assert state.is_ringing
        assert not snapshot_from_dict(snapshot_to_dict(state)).is_ringing

    def test_empty_day_records_dropped(self):
        state = AppState(days={"2024-01-10": DayRecord()})
        assert snapshot_to_dict(state)["days"] == {}


class TestSnapshotDB:
    def test_load_empty(self, snapshot_db):
        assert snapshot_db.load() == AppState()

    def test_save_and_load(self, snapshot_db, empty_state, wednesday):
        state = _populated_state(empty_state, wednesday)
        snapshot_db.save(state)
        assert snapshot_db.load() == state

    def test_latest_save_wins(self, snapshot_db, empty_state, wednesday):
        first, _ = add_reminder(empty_state, wednesday, "First", "09:00")
        second, _ = add_reminder(empty_state, date(2024, 2, 1), "Second", "10:00")
        snapshot_db.save(first)
        snapshot_db.save(second)
        assert snapshot_db.load() == second

    def test_survives_reopen(self, tmp_db_path, empty_state, wednesday):
        state = _populated_state(empty_state, wednesday)
        SnapshotDB(db_path=tmp_db_path).save(state)
        assert SnapshotDB(db_path=tmp_db_path).load() == state

    def test_old_rows_pruned(self, snapshot_db, empty_state):
        for _ in range(3):
            snapshot_db.save(empty_state)
        with snapshot_db._connect() as conn:
            count = conn.execute("SELECT COUNT(*) FROM snapshots").fetchone()[0]
        assert count == 1
