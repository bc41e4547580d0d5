"""Week and period arithmetic.

Two week conventions coexist in the data:

* the *local week* runs Sunday to Saturday. Week 1 of a year is the week whose
  Sunday is on or before January 1st, and a date belongs to the year of its
  week's Sunday, so January 1-3 can land in week 53 of the previous year;
* the ISO week runs Monday to Sunday and is anchored on Thursday.

Both are exposed side by side and never mixed.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Tuple, Union

from utils.validation import InvalidInputError

DateLike = Union[date, datetime]


class PeriodKind(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def parse_period_kind(value: str) -> PeriodKind:
    try:
        return PeriodKind((value or "").strip().lower())
    except ValueError:
        raise InvalidInputError(f"Unknown period kind {value!r}") from None


def _civil_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _sunday_on_or_before(day: date) -> date:
    # isoweekday: Monday=1 .. Sunday=7
    return day - timedelta(days=day.isoweekday() % 7)


def local_week_start(value: DateLike) -> date:
    """Sunday on or before ``value``."""
    return _sunday_on_or_before(_civil_date(value))


def local_year_and_week(value: DateLike) -> Tuple[int, int]:
    sunday = local_week_start(value)
    year = sunday.year
    week1_sunday = _sunday_on_or_before(date(year, 1, 1))
    return year, (sunday - week1_sunday).days // 7 + 1


def local_week_number(value: DateLike) -> int:
    return local_year_and_week(value)[1]


def sunday_of_week(year: int, week: int) -> date:
    week1_sunday = _sunday_on_or_before(date(year, 1, 1))
    return week1_sunday + timedelta(weeks=week - 1)


def weeks_in_local_year(year: int) -> range:
    """Week numbers whose Sunday falls inside ``year``.

    Week 1 only exists when January 1st is itself a Sunday; otherwise that
    week's Sunday is in December and it is counted in the previous year.
    """
    first = 1 if date(year, 1, 1).isoweekday() == 7 else 2
    last = local_week_number(_sunday_on_or_before(date(year, 12, 31)))
    return range(first, last + 1)


def iso_year_and_week(value: DateLike) -> Tuple[int, int]:
    iso = _civil_date(value).isocalendar()
    return iso[0], iso[1]


def iso_week_number(value: DateLike) -> int:
    return iso_year_and_week(value)[1]


def period_day_count(kind: PeriodKind, reference: DateLike) -> int:
    kind = PeriodKind(kind)
    day = _civil_date(reference)
    if kind is PeriodKind.WEEK:
        return 7
    if kind is PeriodKind.MONTH:
        return calendar.monthrange(day.year, day.month)[1]
    return 366 if calendar.isleap(day.year) else 365


def resolve_period(kind: PeriodKind, anchor: DateLike) -> Tuple[date, date]:
    """Half-open ``[start, end)`` bounds of the period containing ``anchor``."""
    kind = PeriodKind(kind)
    day = _civil_date(anchor)
    if kind is PeriodKind.WEEK:
        start = local_week_start(day)
        return start, start + timedelta(days=7)
    if kind is PeriodKind.MONTH:
        start = day.replace(day=1)
        return start, start + timedelta(days=period_day_count(kind, day))
    return date(day.year, 1, 1), date(day.year + 1, 1, 1)


def count_sundays(start: date, end: date) -> int:
    """Number of local week starts in ``[start, end)``."""
    if end <= start:
        return 0
    first = start + timedelta(days=(7 - start.isoweekday() % 7) % 7)
    if first >= end:
        return 0
    return (end - first - timedelta(days=1)).days // 7 + 1
