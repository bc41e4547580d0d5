from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from config import load_config
from db.database import get_db
from models import (
    AttendanceRecord,
    DailyCompletionSet,
    DataKind,
    ObjectiveCompletionSet,
    RateReport,
    User,
)
from utils.attendance import (
    get_objective,
    load_attendance_records,
    load_daily_completions,
    load_objective_completions,
    load_objectives,
    set_daily_completion,
    set_objective_completion,
    upsert_attendance_record,
)
from utils.auth import get_viewer, require_access, require_owner
from utils.progress import load_program_codes
from utils.rates import compute_rate, presence_streak, rate_for_week
from utils.validation import InvalidInputError
from utils.weeks import parse_period_kind, resolve_period, sunday_of_week, weeks_in_local_year

router = APIRouter()


def _today() -> date:
    return datetime.now(timezone.utc).date()


@router.put("/{owner_id}/daily", status_code=status.HTTP_204_NO_CONTENT)
async def set_daily(
    owner_id: int,
    payload: DailyCompletionSet,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Check or uncheck one program for one day."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.ATTENDANCE, edit=True)
    set_daily_completion(
        conn, owner.id, payload.program, payload.date, payload.completed, load_program_codes(conn, daily_only=True)
    )
    conn.commit()


@router.put("/{owner_id}/objectives/{objective_id}", status_code=status.HTTP_204_NO_CONTENT)
async def set_objective(
    owner_id: int,
    objective_id: int,
    payload: ObjectiveCompletionSet,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.ATTENDANCE, edit=True)
    objective = get_objective(conn, objective_id)
    if objective is None or objective.owner_id != owner.id:
        raise HTTPException(status_code=404, detail="Objective not found")
    set_objective_completion(conn, objective, payload.week_start, payload.completed)
    conn.commit()


@router.put("/{owner_id}/weeks", status_code=status.HTTP_204_NO_CONTENT)
async def set_week(
    owner_id: int,
    record: AttendanceRecord,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Store the weekly presence grid; ``week_start`` must be the Sunday of the week."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.ATTENDANCE, edit=True)
    upsert_attendance_record(conn, record.model_copy(update={"owner_id": owner.id}))
    conn.commit()


@router.get("/{owner_id}/weeks")
async def list_weeks(
    owner_id: int,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.ATTENDANCE)
    records = load_attendance_records(conn, owner.id)
    return {
        "weeks": [dict(record.model_dump(), present_days=record.present_days()) for record in records],
        "streak": presence_streak(records, _today()),
    }


@router.get("/{owner_id}/rates", response_model=RateReport)
async def rates(
    owner_id: int,
    period: str = Query("week"),
    anchor: Optional[date] = Query(default=None),
    programs: Optional[List[str]] = Query(default=None),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Share of elapsed days (programs) and weeks (objectives) completed in the period."""
    config = load_config()
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.ATTENDANCE)
    kind = parse_period_kind(period)
    today = _today()
    start, end = resolve_period(kind, anchor or today)
    codes = [code.upper() for code in programs] if programs else config["attendance"]["daily_programs"]
    return compute_rate(
        owner.id,
        kind,
        anchor or today,
        today,
        load_daily_completions(conn, owner.id, start, end),
        load_objective_completions(conn, owner.id, start, end),
        codes,
        load_objectives(conn, owner.id),
    )


@router.get("/{owner_id}/rates/{year}/{week}", response_model=RateReport)
async def week_rates(
    owner_id: int,
    year: int,
    week: int,
    programs: Optional[List[str]] = Query(default=None),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Rates of a local (Sunday-start) week given by its number.

    Week 1 is the week holding January 1st, so it may open in December.
    """
    config = load_config()
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.ATTENDANCE)
    if not 1 <= week <= weeks_in_local_year(year)[-1]:
        raise InvalidInputError(f"{year} has no local week {week}")
    start = sunday_of_week(year, week)
    end = start + timedelta(days=7)
    codes = [code.upper() for code in programs] if programs else config["attendance"]["daily_programs"]
    return rate_for_week(
        owner.id,
        year,
        week,
        _today(),
        load_daily_completions(conn, owner.id, start, end),
        load_objective_completions(conn, owner.id, start, end),
        codes,
        load_objectives(conn, owner.id),
    )
