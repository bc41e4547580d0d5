from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from models import LogEntry, LogEntryCreate, MasteryRecord, MasteryUpdate, Surah
from utils.mastery import WritePolicy, apply_transition, mirror_entry, resolve_update
from utils.validation import InvalidInputError, validate_program, validate_verse_range

logger = logging.getLogger(__name__)


def load_surahs(conn) -> List[Surah]:
    cursor = conn.cursor()
    cursor.execute("SELECT number, total_verses FROM surahs ORDER BY number")
    return [Surah(number=row["number"], total_verses=row["total_verses"]) for row in cursor.fetchall()]


def get_surah(conn, surah_number: int) -> Surah:
    cursor = conn.cursor()
    cursor.execute("SELECT number, total_verses FROM surahs WHERE number = ?", (surah_number,))
    row = cursor.fetchone()
    if not row:
        raise InvalidInputError(f"Unknown surah {surah_number}")
    return Surah(number=row["number"], total_verses=row["total_verses"])


def load_program_codes(conn, daily_only: bool = False) -> List[str]:
    cursor = conn.cursor()
    query = "SELECT code FROM programs"
    if daily_only:
        query += " WHERE is_daily = 1"
    cursor.execute(query + " ORDER BY code")
    return [row["code"] for row in cursor.fetchall()]


def _log_entry_from_row(row) -> LogEntry:
    return LogEntry(
        id=row["id"],
        owner_id=row["user_id"],
        program=row["program"],
        surah_number=row["surah_number"],
        verse_start=row["verse_start"],
        verse_end=row["verse_end"],
        date=row["date"],
        repetitions=row["repetitions"],
        comment=row["comment"],
        is_mirror=bool(row["is_mirror"]),
    )


def load_log_entries(conn, owner_id: int, programs: Optional[Sequence[str]] = None) -> List[LogEntry]:
    cursor = conn.cursor()
    query = """
        SELECT id, user_id, program, surah_number, verse_start, verse_end,
               date, repetitions, comment, is_mirror
        FROM progress
        WHERE user_id = ?
    """
    params: list = [owner_id]
    if programs:
        placeholders = ",".join("?" for _ in programs)
        query += f" AND program IN ({placeholders})"
        params.extend(programs)
    cursor.execute(query + " ORDER BY date, id", params)
    return [_log_entry_from_row(row) for row in cursor.fetchall()]


def insert_log_entry(conn, owner_id: int, entry: LogEntryCreate) -> LogEntry:
    """Validate ``entry`` against the reference tables and store it."""
    program = validate_program(entry.program, load_program_codes(conn))
    surah = get_surah(conn, entry.surah_number)
    validate_verse_range(surah.total_verses, entry.verse_start, entry.verse_end)
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO progress (user_id, program, surah_number, verse_start, verse_end, date, repetitions, comment)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            owner_id,
            program,
            surah.number,
            entry.verse_start,
            entry.verse_end,
            entry.date.isoformat(),
            entry.repetitions,
            entry.comment,
        ),
    )
    return LogEntry(owner_id=owner_id, id=cursor.lastrowid, **entry.model_dump(exclude={"program"}), program=program)


def _mastery_from_row(row) -> MasteryRecord:
    return MasteryRecord(
        owner_id=row["user_id"],
        surah_number=row["surah_number"],
        status=row["status"],
        validated_week=row["validated_week"],
        verse_start=row["verse_start"],
        verse_end=row["verse_end"],
        validated_at=row["validated_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


_MASTERY_COLUMNS = """
    user_id, surah_number, status, validated_week, verse_start, verse_end,
    validated_at, created_at, updated_at
"""


def get_mastery_record(conn, owner_id: int, surah_number: int) -> Optional[MasteryRecord]:
    cursor = conn.cursor()
    cursor.execute(
        f"SELECT {_MASTERY_COLUMNS} FROM surah_mastery WHERE user_id = ? AND surah_number = ?",
        (owner_id, surah_number),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return _mastery_from_row(row)


def load_mastery_records(conn, owner_id: int) -> List[MasteryRecord]:
    cursor = conn.cursor()
    cursor.execute(
        f"SELECT {_MASTERY_COLUMNS} FROM surah_mastery WHERE user_id = ? ORDER BY surah_number",
        (owner_id,),
    )
    return [_mastery_from_row(row) for row in cursor.fetchall()]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def upsert_mastery_record(conn, record: MasteryRecord) -> None:
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO surah_mastery (
            user_id,
            surah_number,
            status,
            validated_week,
            verse_start,
            verse_end,
            validated_at,
            created_at,
            updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(user_id, surah_number) DO UPDATE SET
            status = excluded.status,
            validated_week = excluded.validated_week,
            verse_start = excluded.verse_start,
            verse_end = excluded.verse_end,
            validated_at = excluded.validated_at,
            updated_at = excluded.updated_at
        """,
        (
            record.owner_id,
            record.surah_number,
            record.status.value,
            record.validated_week,
            record.verse_start,
            record.verse_end,
            _iso(record.validated_at),
            _iso(record.created_at),
            _iso(record.updated_at),
        ),
    )


def upsert_mirror_entry(conn, entry: LogEntry) -> None:
    """Store the single synthetic entry of (owner, surah, program), replacing an older one."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO progress (user_id, program, surah_number, verse_start, verse_end, date, comment, is_mirror)
        VALUES (?, ?, ?, ?, ?, ?, ?, 1)
        ON CONFLICT(user_id, surah_number, program) WHERE is_mirror = 1 DO UPDATE SET
            verse_start = excluded.verse_start,
            verse_end = excluded.verse_end,
            date = excluded.date,
            comment = excluded.comment
        """,
        (
            entry.owner_id,
            entry.program,
            entry.surah_number,
            entry.verse_start,
            entry.verse_end,
            entry.date.isoformat(),
            entry.comment,
        ),
    )


def write_mastery_status(
    conn,
    owner_id: int,
    update: MasteryUpdate,
    surah: Surah,
    now: datetime,
    policy: WritePolicy = WritePolicy.LAST_WRITE_WINS,
    mirror_program: str = "MEMORIZATION",
) -> Tuple[MasteryRecord, bool]:
    """Apply ``update`` and upsert the record and its mirror entry; the caller owns the transaction."""
    existing = get_mastery_record(conn, owner_id, surah.number)
    record = apply_transition(existing, update, surah, now, owner_id, policy)
    if existing is not None and record is existing:
        logger.info(
            "Kept %s for user %s surah %s; incoming %s would downgrade it",
            existing.status.value, owner_id, surah.number, update.status,
        )
        return existing, False
    upsert_mastery_record(conn, record)
    entry = mirror_entry(record, surah, mirror_program)
    if entry is not None:
        upsert_mirror_entry(conn, entry)
    return record, True


def record_mastery_status(
    conn,
    owner_id: int,
    update: MasteryUpdate,
    now: datetime,
    policy: WritePolicy = WritePolicy.LAST_WRITE_WINS,
    mirror_program: str = "MEMORIZATION",
) -> Tuple[MasteryRecord, bool]:
    """Apply ``update`` and persist the record with its mirror entry in one transaction.

    Returns the stored record and whether anything was written.
    """
    surah = get_surah(conn, update.surah_number)
    resolve_update(update, surah)
    with conn:
        return write_mastery_status(conn, owner_id, update, surah, now, policy, mirror_program)


def import_status_codes(
    conn,
    owner_id: int,
    codes: Iterable[Tuple[int, object]],
    now: datetime,
    mirror_program: str = "MEMORIZATION",
) -> List[Tuple[MasteryRecord, bool]]:
    """Legacy spreadsheet import: raw ``(surah, code)`` pairs, never downgrading V/X.

    Every row is checked before the first write, and the rows are stored in a
    single transaction, so a rejected import leaves nothing behind.
    """
    prepared = []
    for surah_number, code in codes:
        try:
            update = MasteryUpdate(surah_number=surah_number, status=code)
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid import row for surah {surah_number}: {code!r}") from exc
        surah = get_surah(conn, update.surah_number)
        resolve_update(update, surah)
        prepared.append((update, surah))

    with conn:
        return [
            write_mastery_status(conn, owner_id, update, surah, now, WritePolicy.NO_DOWNGRADE, mirror_program)
            for update, surah in prepared
        ]
