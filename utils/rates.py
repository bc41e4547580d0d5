"""Completion rates over a week, month or year.

Daily programs are rated per day, weekly objectives per week. Both use sparse
rows: a completion row exists only for a checked day or week, so a rate is the
count of rows in range over the number of elapsed days or weeks.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence, Tuple, Union

from models import (
    AttendanceRecord,
    DailyCompletion,
    ObjectiveCompletion,
    RateFigure,
    RateReport,
    WeeklyObjective,
)
from utils.coverage import rounded_percentage
from utils.weeks import PeriodKind, count_sundays, local_week_start, resolve_period, sunday_of_week


def effective_bounds(
    start: date,
    end: date,
    now: Union[date, datetime],
) -> Tuple[date, date]:
    """Clamp ``[start, end)`` so it stops after today; today counts as elapsed."""
    today = now.date() if isinstance(now, datetime) else now
    effective_end = min(end, today + timedelta(days=1))
    if effective_end < start:
        effective_end = start
    return start, effective_end


def program_rate(
    completions: Iterable[DailyCompletion],
    owner_id: int,
    program: str,
    start: date,
    end: date,
) -> RateFigure:
    days = {
        c.date
        for c in completions
        if c.owner_id == owner_id and c.program == program and c.completed and start <= c.date < end
    }
    total = max(0, (end - start).days)
    return RateFigure(completed=len(days), total=total, percentage=rounded_percentage(len(days), total))


def objective_rate(
    completions: Iterable[ObjectiveCompletion],
    owner_id: int,
    objective_id: int,
    start: date,
    end: date,
) -> RateFigure:
    weeks = {
        c.week_start
        for c in completions
        if c.owner_id == owner_id and c.objective_id == objective_id and c.completed
        and start <= c.week_start < end
    }
    total = count_sundays(start, end)
    return RateFigure(completed=len(weeks), total=total, percentage=rounded_percentage(len(weeks), total))


def compute_rate(
    owner_id: int,
    kind: PeriodKind,
    anchor: date,
    now: Union[date, datetime],
    daily_completions: Iterable[DailyCompletion],
    objective_completions: Iterable[ObjectiveCompletion],
    programs: Sequence[str],
    objectives: Optional[Iterable[WeeklyObjective]] = None,
) -> RateReport:
    kind = PeriodKind(kind)
    start, end = resolve_period(kind, anchor)
    return _build_report(
        owner_id, kind, start, end, now, daily_completions, objective_completions, programs, objectives
    )


def rate_for_week(
    owner_id: int,
    year: int,
    week: int,
    now: Union[date, datetime],
    daily_completions: Iterable[DailyCompletion],
    objective_completions: Iterable[ObjectiveCompletion],
    programs: Sequence[str],
    objectives: Optional[Iterable[WeeklyObjective]] = None,
) -> RateReport:
    """Rate of the local week numbered ``week`` in ``year``."""
    start = sunday_of_week(year, week)
    return _build_report(
        owner_id, PeriodKind.WEEK, start, start + timedelta(days=7), now,
        daily_completions, objective_completions, programs, objectives,
    )


def presence_streak(records: Iterable[AttendanceRecord], today: Union[date, datetime]) -> int:
    """Consecutive weeks with at least one present day, counted back from this week.

    The current week only breaks the streak once it is over.
    """
    present = {record.week_start for record in records if record.present_days() > 0}
    week = local_week_start(today)
    if week not in present:
        week -= timedelta(days=7)
    streak = 0
    while week in present:
        streak += 1
        week -= timedelta(days=7)
    return streak


def _build_report(
    owner_id: int,
    kind: PeriodKind,
    start: date,
    end: date,
    now: Union[date, datetime],
    daily_completions: Iterable[DailyCompletion],
    objective_completions: Iterable[ObjectiveCompletion],
    programs: Sequence[str],
    objectives: Optional[Iterable[WeeklyObjective]],
) -> RateReport:
    _, effective_end = effective_bounds(start, end, now)
    daily = list(daily_completions)
    weekly = list(objective_completions)

    per_program = {
        program: program_rate(daily, owner_id, program, start, effective_end)
        for program in programs
    }

    if objectives is None:
        objective_ids = sorted({c.objective_id for c in weekly if c.owner_id == owner_id})
        names = {}
    else:
        active = [o for o in objectives if o.owner_id == owner_id and o.is_active]
        objective_ids = [o.id for o in active]
        names = {o.id: o.name for o in active}
    per_objective = {
        objective_id: objective_rate(weekly, owner_id, objective_id, start, effective_end)
        for objective_id in objective_ids
    }

    return RateReport(
        owner_id=owner_id,
        period=kind.value,
        start_date=start,
        end_date=end,
        effective_end_date=effective_end,
        total_days=max(0, (effective_end - start).days),
        total_weeks=count_sundays(start, effective_end),
        per_program=per_program,
        per_objective=per_objective,
        objective_names=names,
    )
