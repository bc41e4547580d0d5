from __future__ import annotations

from datetime import date
from typing import List, Optional

from models import AttendanceRecord, DailyCompletion, ObjectiveCompletion, WeeklyObjective
from models.attendance import WEEKDAY_FIELDS
from utils.validation import validate_program, validate_week_start


def set_daily_completion(conn, owner_id: int, program: str, day: date, completed: bool, known_programs) -> None:
    """Check or uncheck a program for a day. Unchecking deletes the row."""
    code = validate_program(program, known_programs)
    cursor = conn.cursor()
    if completed:
        cursor.execute(
            """
            INSERT INTO daily_completions (user_id, program, date, completed)
            VALUES (?, ?, ?, 1)
            ON CONFLICT(user_id, program, date) DO UPDATE SET completed = 1
            """,
            (owner_id, code, day.isoformat()),
        )
    else:
        cursor.execute(
            "DELETE FROM daily_completions WHERE user_id = ? AND program = ? AND date = ?",
            (owner_id, code, day.isoformat()),
        )


def load_daily_completions(conn, owner_id: int, start: date, end: date) -> List[DailyCompletion]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT user_id, program, date, completed
        FROM daily_completions
        WHERE user_id = ? AND completed = 1 AND date >= ? AND date < ?
        ORDER BY date
        """,
        (owner_id, start.isoformat(), end.isoformat()),
    )
    return [
        DailyCompletion(owner_id=row["user_id"], program=row["program"], date=row["date"], completed=True)
        for row in cursor.fetchall()
    ]


def get_objective(conn, objective_id: int) -> Optional[WeeklyObjective]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, user_id, name, program, is_active FROM weekly_objectives WHERE id = ?",
        (objective_id,),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return WeeklyObjective(
        id=row["id"],
        owner_id=row["user_id"],
        name=row["name"],
        program=row["program"],
        is_active=bool(row["is_active"]),
    )


def load_objectives(conn, owner_id: int) -> List[WeeklyObjective]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, user_id, name, program, is_active FROM weekly_objectives WHERE user_id = ? ORDER BY id",
        (owner_id,),
    )
    return [
        WeeklyObjective(
            id=row["id"],
            owner_id=row["user_id"],
            name=row["name"],
            program=row["program"],
            is_active=bool(row["is_active"]),
        )
        for row in cursor.fetchall()
    ]


def set_objective_completion(conn, objective: WeeklyObjective, week_start: date, completed: bool) -> None:
    validate_week_start(week_start)
    cursor = conn.cursor()
    if completed:
        cursor.execute(
            """
            INSERT INTO objective_completions (objective_id, user_id, week_start, completed)
            VALUES (?, ?, ?, 1)
            ON CONFLICT(objective_id, week_start) DO UPDATE SET completed = 1
            """,
            (objective.id, objective.owner_id, week_start.isoformat()),
        )
    else:
        cursor.execute(
            "DELETE FROM objective_completions WHERE objective_id = ? AND week_start = ?",
            (objective.id, week_start.isoformat()),
        )


def load_objective_completions(conn, owner_id: int, start: date, end: date) -> List[ObjectiveCompletion]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT objective_id, user_id, week_start
        FROM objective_completions
        WHERE user_id = ? AND completed = 1 AND week_start >= ? AND week_start < ?
        ORDER BY week_start
        """,
        (owner_id, start.isoformat(), end.isoformat()),
    )
    return [
        ObjectiveCompletion(
            owner_id=row["user_id"],
            objective_id=row["objective_id"],
            week_start=row["week_start"],
        )
        for row in cursor.fetchall()
    ]


def upsert_attendance_record(conn, record: AttendanceRecord) -> None:
    cursor = conn.cursor()
    columns = ", ".join(WEEKDAY_FIELDS)
    placeholders = ", ".join("?" for _ in WEEKDAY_FIELDS)
    updates = ", ".join(f"{name} = excluded.{name}" for name in WEEKDAY_FIELDS)
    cursor.execute(
        f"""
        INSERT INTO attendance (user_id, week_start, {columns})
        VALUES (?, ?, {placeholders})
        ON CONFLICT(user_id, week_start) DO UPDATE SET {updates}
        """,
        (record.owner_id, record.week_start.isoformat(), *[int(getattr(record, n)) for n in WEEKDAY_FIELDS]),
    )


def load_attendance_records(conn, owner_id: int) -> List[AttendanceRecord]:
    cursor = conn.cursor()
    cursor.execute(
        f"SELECT user_id, week_start, {', '.join(WEEKDAY_FIELDS)} FROM attendance WHERE user_id = ? ORDER BY week_start",
        (owner_id,),
    )
    return [
        AttendanceRecord(
            owner_id=row["user_id"],
            week_start=row["week_start"],
            **{name: bool(row[name]) for name in WEEKDAY_FIELDS},
        )
        for row in cursor.fetchall()
    ]
