from __future__ import annotations

import re
from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from models import LogEntry, MasteryRecord, MasteryStatus, MasteryUpdate, Surah
from utils.validation import InvalidInputError, validate_verse_range

# Ascending "how settled"; the partial codes share one rank.
STATUS_PRECEDENCE: Dict[MasteryStatus, int] = {
    MasteryStatus.TO_MEMORIZE: 0,
    MasteryStatus.HALF: 1,
    MasteryStatus.HALF_PLUS: 1,
    MasteryStatus.NINETY: 1,
    MasteryStatus.SUBMITTED: 2,
    MasteryStatus.VALIDATED: 3,
    MasteryStatus.KNOWN: 4,
}

# Display order only; partials sorted by completion fraction.
STATUS_DISPLAY_ORDER: Tuple[MasteryStatus, ...] = (
    MasteryStatus.TO_MEMORIZE,
    MasteryStatus.HALF,
    MasteryStatus.HALF_PLUS,
    MasteryStatus.NINETY,
    MasteryStatus.SUBMITTED,
    MasteryStatus.VALIDATED,
    MasteryStatus.KNOWN,
)

PARTIAL_STATUSES = frozenset({MasteryStatus.HALF, MasteryStatus.HALF_PLUS, MasteryStatus.NINETY})
SETTLED_STATUSES = frozenset({MasteryStatus.VALIDATED, MasteryStatus.KNOWN})
MIRRORED_STATUSES = frozenset({MasteryStatus.VALIDATED, MasteryStatus.KNOWN}) | PARTIAL_STATUSES

# Share of the surah a partial status stands for, in percent.
PARTIAL_SHARE = {
    MasteryStatus.HALF: 50,
    MasteryStatus.HALF_PLUS: 50,
    MasteryStatus.NINETY: 90,
}

_STATUS_ALIASES = {
    "0.5": MasteryStatus.HALF,
    "0.51": MasteryStatus.HALF_PLUS,
    "0.9": MasteryStatus.NINETY,
    "VALIDATED": MasteryStatus.VALIDATED,
    "KNOWN": MasteryStatus.KNOWN,
}
_WEEK_SUFFIX_RE = re.compile(r"^([VS])(\d+)$")

MIRROR_COMMENT = "Mirrored from mastery status ({status})"


class WritePolicy(str, Enum):
    LAST_WRITE_WINS = "last_write_wins"
    # Legacy spreadsheet import: never replace V/X with AM or a partial.
    NO_DOWNGRADE = "no_downgrade"


def parse_status_code(raw: Union[MasteryStatus, str, float, int, None]) -> Tuple[MasteryStatus, Optional[int]]:
    """Parse a status code into ``(status, week)``.

    Accepts the closed set as-is plus the legacy spreadsheet spellings:
    ``V12``/``S3`` carry the validation week, decimals ``0.5``/``0.51``/``0.9``
    stand for the partial codes, and ``VALIDATED``/``KNOWN`` are long forms.
    """
    if isinstance(raw, MasteryStatus):
        return raw, None
    if raw is None or isinstance(raw, bool):
        raise InvalidInputError(f"Unrecognized mastery status {raw!r}")
    if isinstance(raw, (int, float)):
        normalized = format(raw, "g")
    else:
        normalized = str(raw).strip().upper()
    if not normalized:
        raise InvalidInputError("Mastery status is empty")
    if normalized in _STATUS_ALIASES:
        return _STATUS_ALIASES[normalized], None
    match = _WEEK_SUFFIX_RE.match(normalized)
    if match:
        week = int(match.group(2))
        if not 1 <= week <= 53:
            raise InvalidInputError(f"Week {week} in status {raw!r} is outside 1..53")
        return MasteryStatus(match.group(1)), week
    try:
        return MasteryStatus(normalized), None
    except ValueError:
        raise InvalidInputError(f"Unrecognized mastery status {raw!r}") from None


def derive_verse_range(
    status: MasteryStatus,
    total_verses: int,
    verse_start: Optional[int] = None,
    verse_end: Optional[int] = None,
) -> Tuple[int, int]:
    if verse_start is not None and verse_end is not None:
        return validate_verse_range(total_verses, verse_start, verse_end)
    share = PARTIAL_SHARE.get(status)
    if share is None:
        return 1, total_verses
    return 1, -(-total_verses * share // 100)


def is_downgrade(existing: Optional[MasteryStatus], incoming: MasteryStatus) -> bool:
    """True when a settled V/X would fall back to AM or a partial code."""
    if existing not in SETTLED_STATUSES:
        return False
    return STATUS_PRECEDENCE[incoming] < STATUS_PRECEDENCE[MasteryStatus.SUBMITTED]


def resolve_update(update: MasteryUpdate, surah: Surah) -> Tuple[MasteryStatus, Optional[int], int, int]:
    """Parse and range-check ``update`` against ``surah`` without touching any record.

    Returns ``(status, week from the code, verse_start, verse_end)``.
    """
    status, code_week = parse_status_code(update.status)
    if surah.number != update.surah_number:
        raise InvalidInputError(
            f"Update targets surah {update.surah_number}, reference is surah {surah.number}"
        )
    verse_start, verse_end = derive_verse_range(
        status, surah.total_verses, update.verse_start, update.verse_end
    )
    return status, code_week, verse_start, verse_end


def apply_transition(
    existing: Optional[MasteryRecord],
    update: MasteryUpdate,
    surah: Surah,
    now: datetime,
    owner_id: int,
    policy: WritePolicy = WritePolicy.LAST_WRITE_WINS,
) -> MasteryRecord:
    """Return the record stored after writing ``update`` over ``existing``."""
    status, code_week, verse_start, verse_end = resolve_update(update, surah)
    if policy is WritePolicy.NO_DOWNGRADE and existing and is_downgrade(existing.status, status):
        return existing

    validated_week = update.validated_week if update.validated_week is not None else code_week
    validated_at = update.validated_at
    if validated_at is None and status in SETTLED_STATUSES:
        validated_at = now
    return MasteryRecord(
        owner_id=owner_id,
        surah_number=surah.number,
        status=status,
        validated_week=validated_week,
        verse_start=verse_start,
        verse_end=verse_end,
        validated_at=validated_at,
        created_at=existing.created_at if existing else now,
        updated_at=now,
    )


def mirror_entry(
    record: MasteryRecord,
    surah: Surah,
    program: str = "MEMORIZATION",
) -> Optional[LogEntry]:
    """Synthetic log entry standing for a mastery record, or None for unmirrored codes."""
    if record.status not in MIRRORED_STATUSES:
        return None
    if record.status in PARTIAL_STATUSES or record.verse_start is None:
        verse_start, verse_end = derive_verse_range(record.status, surah.total_verses)
    else:
        verse_start, verse_end = record.verse_start, record.verse_end
    stamp = record.validated_at or record.created_at
    return LogEntry(
        owner_id=record.owner_id,
        program=program,
        surah_number=record.surah_number,
        verse_start=verse_start,
        verse_end=verse_end,
        date=stamp.date(),
        comment=MIRROR_COMMENT.format(status=record.status.value),
        is_mirror=True,
    )


def with_mirror_entries(
    entries: Iterable[LogEntry],
    records: Iterable[MasteryRecord],
    surahs: Iterable[Surah],
    program: str = "MEMORIZATION",
) -> List[LogEntry]:
    """Entries plus one synthetic entry per mirrored record lacking one."""
    merged = list(entries)
    mirrored = {(e.owner_id, e.surah_number, e.program) for e in merged if e.is_mirror}
    by_number = {surah.number: surah for surah in surahs}
    for record in records:
        key = (record.owner_id, record.surah_number, program)
        surah = by_number.get(record.surah_number)
        if key in mirrored or surah is None:
            continue
        entry = mirror_entry(record, surah, program)
        if entry is not None:
            merged.append(entry)
            mirrored.add(key)
    return merged


def summarize_mastery(records: Iterable[MasteryRecord]) -> Dict[str, int]:
    counts = Counter(record.status for record in records)
    summary = {status.value: counts.get(status, 0) for status in STATUS_DISPLAY_ORDER}
    summary["total"] = sum(counts.values())
    return summary
