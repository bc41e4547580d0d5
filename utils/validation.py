from __future__ import annotations

from datetime import date
from typing import Optional, Tuple


class InvalidInputError(ValueError):
    """Rejected caller input: bad verse range, unknown code, unknown reference data."""


def validate_verse_range(total_verses: int, verse_start: int, verse_end: int) -> Tuple[int, int]:
    if verse_start < 1:
        raise InvalidInputError(f"verse_start must be >= 1, got {verse_start}")
    if verse_end < verse_start:
        raise InvalidInputError(
            f"verse_end ({verse_end}) must not precede verse_start ({verse_start})"
        )
    if verse_end > total_verses:
        raise InvalidInputError(
            f"verse_end ({verse_end}) exceeds the surah's {total_verses} verses"
        )
    return verse_start, verse_end


def validate_program(program: str, known_programs) -> str:
    code = (program or "").strip().upper()
    if code not in known_programs:
        raise InvalidInputError(f"Unknown program {program!r}")
    return code


def validate_week_start(value: Optional[date]) -> Optional[date]:
    """Week starts are stored as the Sunday opening the local week."""
    if value is not None and value.isoweekday() != 7:
        raise InvalidInputError(f"week_start {value.isoformat()} is not a Sunday")
    return value
