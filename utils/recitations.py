from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, time, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import MasteryRecord, MasteryStatus, MasteryUpdate, Recitation, RecitationCreate, Surah
from utils.mastery import SETTLED_STATUSES, WritePolicy, parse_status_code
from utils.progress import get_surah, load_program_codes, write_mastery_status
from utils.validation import validate_program, validate_verse_range
from utils.weeks import local_week_number

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50

# Statuses that stamp the session week on the mastery record.
_WEEK_STAMPED_STATUSES = SETTLED_STATUSES | {MasteryStatus.SUBMITTED}


def _prepare(conn, item: RecitationCreate, known_programs: Sequence[str]) -> Tuple[str, Surah, MasteryStatus, MasteryUpdate, int]:
    program = validate_program(item.program, known_programs)
    surah = get_surah(conn, item.surah_number)
    validate_verse_range(surah.total_verses, item.verse_start, item.verse_end)
    status, code_week = parse_status_code(item.status)
    session_week = item.session_week or local_week_number(item.session_date)

    validated_week = None
    if status in _WEEK_STAMPED_STATUSES:
        validated_week = code_week or session_week
    validated_at = None
    if status in SETTLED_STATUSES:
        validated_at = datetime.combine(item.session_date, time.min, tzinfo=timezone.utc)
    update = MasteryUpdate(
        surah_number=surah.number,
        status=status,
        validated_week=validated_week,
        verse_start=item.verse_start,
        verse_end=item.verse_end,
        validated_at=validated_at,
    )
    return program, surah, status, update, session_week


def _insert_recitation(conn, recitation: Recitation) -> int:
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO surah_recitations (
            user_id, surah_number, program, verse_start, verse_end, status,
            session_date, session_week, comment, recorded_by, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            recitation.owner_id,
            recitation.surah_number,
            recitation.program,
            recitation.verse_start,
            recitation.verse_end,
            recitation.status.value,
            recitation.session_date.isoformat(),
            recitation.session_week,
            recitation.comment,
            recitation.recorded_by,
            recitation.created_at.isoformat(),
        ),
    )
    return cursor.lastrowid


def record_recitations(
    conn,
    owner_id: int,
    items: Iterable[RecitationCreate],
    recorded_by: Optional[int],
    now: datetime,
    mirror_program: str = "MEMORIZATION",
) -> List[Tuple[Recitation, MasteryRecord, bool]]:
    """Store session recitations and carry each status onto the surah's mastery record.

    The whole batch is checked first, then every recitation and its mastery
    write go into one transaction. The latest recitation wins on the mastery
    record, like any other status write.
    """
    known_programs = load_program_codes(conn)
    prepared = [(item, *_prepare(conn, item, known_programs)) for item in items]

    results = []
    with conn:
        for item, program, surah, status, update, session_week in prepared:
            recitation = Recitation(
                owner_id=owner_id,
                surah_number=surah.number,
                program=program,
                verse_start=item.verse_start,
                verse_end=item.verse_end,
                status=status,
                session_date=item.session_date,
                session_week=session_week,
                comment=item.comment,
                recorded_by=recorded_by,
                created_at=now,
            )
            recitation = recitation.model_copy(update={"id": _insert_recitation(conn, recitation)})
            record, written = write_mastery_status(
                conn, owner_id, update, surah, now, WritePolicy.LAST_WRITE_WINS, mirror_program
            )
            results.append((recitation, record, written))
    logger.info("Recorded %d recitation(s) for user %s", len(results), owner_id)
    return results


def _recitation_from_row(row) -> Recitation:
    return Recitation(
        id=row["id"],
        owner_id=row["user_id"],
        surah_number=row["surah_number"],
        program=row["program"],
        verse_start=row["verse_start"],
        verse_end=row["verse_end"],
        status=row["status"],
        session_date=row["session_date"],
        session_week=row["session_week"],
        comment=row["comment"],
        recorded_by=row["recorded_by"],
        created_at=row["created_at"],
    )


def load_recitations(
    conn,
    owner_id: int,
    surah_number: Optional[int] = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> List[Recitation]:
    """Most recent recitations first, optionally for a single surah."""
    cursor = conn.cursor()
    query = """
        SELECT id, user_id, surah_number, program, verse_start, verse_end, status,
               session_date, session_week, comment, recorded_by, created_at
        FROM surah_recitations
        WHERE user_id = ?
    """
    params: list = [owner_id]
    if surah_number is not None:
        query += " AND surah_number = ?"
        params.append(surah_number)
    query += " ORDER BY session_date DESC, id DESC LIMIT ?"
    params.append(limit)
    cursor.execute(query, params)
    return [_recitation_from_row(row) for row in cursor.fetchall()]


def group_by_surah(recitations: Iterable[Recitation]) -> Dict[int, List[Recitation]]:
    grouped: Dict[int, List[Recitation]] = defaultdict(list)
    for recitation in recitations:
        grouped[recitation.surah_number].append(recitation)
    return dict(sorted(grouped.items()))
