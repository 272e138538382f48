"""Tests for src.core.recurrence — the occurrence matcher."""

from datetime import date, timedelta

import pytest

from src.core.recurrence import describe, matches, matches_structurally
from src.data.models import Daily, Monthly, NoRecurrence, Weekly, Yearly

ANCHOR = date(2024, 1, 10)  # Wednesday


def _year_from(start: date) -> list[date]:
    return [start + timedelta(days=i) for i in range(366)]


class TestNoRecurrence:
    def test_matches_only_anchor(self):
        rule = NoRecurrence()
        assert matches(rule, ANCHOR, ANCHOR)
        assert not matches(rule, ANCHOR, ANCHOR + timedelta(days=1))
        assert not matches(rule, ANCHOR, ANCHOR - timedelta(days=1))


class TestAnchorIsExcluded:
    @pytest.mark.parametrize("rule", [
        Daily(),
        Weekly(days_of_week={3}),
        Monthly(day_of_month=10),
        Yearly(month_of_year=0, day_of_month=10),
    ])
    def test_never_matches_anchor_or_past(self, rule):
        assert not matches(rule, ANCHOR, ANCHOR)
        for back in range(1, 400):
            assert not matches(rule, ANCHOR, ANCHOR - timedelta(days=back))


class TestDaily:
    def test_every_later_day(self):
        for d in _year_from(ANCHOR + timedelta(days=1)):
            assert matches(Daily(), ANCHOR, d)


class TestWeekly:
    def test_matches_reference_over_a_year(self):
        rule = Weekly(days_of_week={1, 3, 5})
        for d in _year_from(date(2023, 12, 1)):
            expected = d > ANCHOR and d.weekday() in (0, 2, 4)  # Mon, Wed, Fri
            assert matches(rule, ANCHOR, d) == expected, d

    def test_next_wednesday(self):
        rule = Weekly(days_of_week={3})
        assert matches(rule, ANCHOR, date(2024, 1, 17))
        assert not matches(rule, ANCHOR, date(2024, 1, 16))


class TestMonthly:
    def test_day_31_skips_short_months(self):
        rule = Monthly(day_of_month=31)
        anchor = date(2024, 1, 31)
        hits = [d for d in _year_from(anchor + timedelta(days=1)) if matches(rule, anchor, d)]
        assert date(2024, 2, 29) not in hits
        assert date(2024, 3, 31) in hits
        assert all(d.day == 31 for d in hits)
        assert len(hits) == 7  # Mar, May, Jul, Aug, Oct, Dec, Jan

    def test_next_month_same_day(self):
        assert matches(Monthly(day_of_month=10), ANCHOR, date(2024, 2, 10))


class TestYearly:
    def test_leap_day_only_in_leap_years(self):
        rule = Yearly(month_of_year=1, day_of_month=29)
        anchor = date(2024, 2, 29)
        assert not matches(rule, anchor, date(2025, 2, 28))
        assert matches(rule, anchor, date(2028, 2, 29))

    def test_month_is_zero_based(self):
        rule = Yearly(month_of_year=0, day_of_month=10)
        assert matches(rule, ANCHOR, date(2025, 1, 10))
        assert not matches(rule, ANCHOR, date(2025, 2, 10))


class TestStructural:
    def test_includes_past_dates(self):
        rule = Weekly(days_of_week={3})
        assert matches_structurally(rule, date(2020, 1, 1))   # a Wednesday
        assert not matches_structurally(rule, date(2020, 1, 2))

    def test_none_never_matches(self):
        assert not matches_structurally(NoRecurrence(), ANCHOR)


class TestDescribe:
    def test_labels(self):
        assert describe(NoRecurrence()) == "Does not repeat"
        assert describe(Weekly(days_of_week={3, 1})) == "Weekly (Mon, Wed)"
        assert describe(Monthly(day_of_month=15)) == "Monthly on day 15"
        assert describe(Yearly(month_of_year=11, day_of_month=25)) == "Yearly on Dec 25"
