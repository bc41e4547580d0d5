from datetime import date, datetime

import pytest

from utils.validation import InvalidInputError
from utils.weeks import (
    PeriodKind,
    count_sundays,
    iso_week_number,
    iso_year_and_week,
    local_week_number,
    local_week_start,
    local_year_and_week,
    parse_period_kind,
    period_day_count,
    resolve_period,
    sunday_of_week,
    weeks_in_local_year,
)


def test_local_week_start_is_previous_sunday():
    assert local_week_start(date(2025, 3, 12)) == date(2025, 3, 9)
    assert local_week_start(date(2025, 3, 9)) == date(2025, 3, 9)
    assert local_week_start(date(2025, 3, 15)) == date(2025, 3, 9)


def test_local_week_start_accepts_datetimes():
    assert local_week_start(datetime(2025, 3, 12, 23, 59)) == date(2025, 3, 9)


def test_local_and_iso_weeks_diverge_at_year_end():
    monday = date(2025, 12, 29)
    assert iso_week_number(monday) == 1
    assert iso_year_and_week(monday) == (2026, 1)
    assert local_week_number(monday) == 53
    assert local_year_and_week(monday) == (2025, 53)


def test_early_january_belongs_to_previous_local_year():
    # Thursday 1 January 2026 sits in the week opened on Sunday 28 December 2025.
    assert local_year_and_week(date(2026, 1, 1)) == (2025, 53)
    assert local_year_and_week(date(2026, 1, 4)) == (2026, 2)


def test_sunday_of_week_first_week_starts_in_december():
    assert sunday_of_week(2025, 1) == date(2024, 12, 29)
    assert sunday_of_week(2025, 11) == date(2025, 3, 9)


def test_year_starting_on_sunday_has_week_one():
    assert sunday_of_week(2023, 1) == date(2023, 1, 1)
    assert local_week_number(date(2023, 1, 1)) == 1
    assert weeks_in_local_year(2023) == range(1, 54)


def test_weeks_in_local_year_skips_week_one_owned_by_december():
    assert weeks_in_local_year(2025) == range(2, 54)
    assert local_week_number(sunday_of_week(2025, 2)) == 2


def test_period_day_count():
    assert period_day_count(PeriodKind.WEEK, date(2025, 2, 3)) == 7
    assert period_day_count(PeriodKind.MONTH, date(2024, 2, 10)) == 29
    assert period_day_count(PeriodKind.MONTH, date(2025, 2, 10)) == 28
    assert period_day_count(PeriodKind.YEAR, date(2024, 6, 1)) == 366
    assert period_day_count(PeriodKind.YEAR, date(2025, 6, 1)) == 365


def test_resolve_period_bounds():
    assert resolve_period(PeriodKind.WEEK, date(2025, 3, 12)) == (date(2025, 3, 9), date(2025, 3, 16))
    assert resolve_period(PeriodKind.MONTH, date(2025, 12, 5)) == (date(2025, 12, 1), date(2026, 1, 1))
    assert resolve_period(PeriodKind.YEAR, date(2025, 7, 2)) == (date(2025, 1, 1), date(2026, 1, 1))


def test_count_sundays():
    assert count_sundays(date(2025, 3, 1), date(2025, 4, 1)) == 5
    assert count_sundays(date(2025, 3, 9), date(2025, 3, 16)) == 1
    assert count_sundays(date(2025, 3, 10), date(2025, 3, 16)) == 0
    assert count_sundays(date(2025, 3, 9), date(2025, 3, 9)) == 0


def test_parse_period_kind_rejects_unknown():
    assert parse_period_kind("Month") is PeriodKind.MONTH
    with pytest.raises(InvalidInputError):
        parse_period_kind("fortnight")
