from datetime import datetime

import pytest

from models import MasteryRecord, MasteryStatus, MasteryUpdate, Surah
from utils.coverage import compute_surah_coverage
from utils.mastery import (
    WritePolicy,
    apply_transition,
    derive_verse_range,
    is_downgrade,
    mirror_entry,
    parse_status_code,
    summarize_mastery,
    with_mirror_entries,
)
from utils.validation import InvalidInputError

FATIHA = Surah(number=1, total_verses=7, name="Al-Fatiha")
KAHF = Surah(number=18, total_verses=110, name="Al-Kahf")


def _record(status, surah=FATIHA, owner_id=1, when=datetime(2025, 3, 10, 8, 0), **kwargs):
    start, end = derive_verse_range(status, surah.total_verses)
    return MasteryRecord(
        owner_id=owner_id,
        surah_number=surah.number,
        status=status,
        verse_start=start,
        verse_end=end,
        created_at=when,
        updated_at=when,
        **kwargs,
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("AM", (MasteryStatus.TO_MEMORIZE, None)),
        ("v12", (MasteryStatus.VALIDATED, 12)),
        ("S3", (MasteryStatus.SUBMITTED, 3)),
        ("V53", (MasteryStatus.VALIDATED, 53)),
        (0.5, (MasteryStatus.HALF, None)),
        ("0.51", (MasteryStatus.HALF_PLUS, None)),
        (0.9, (MasteryStatus.NINETY, None)),
        ("90%", (MasteryStatus.NINETY, None)),
        (" validated ", (MasteryStatus.VALIDATED, None)),
        ("Known", (MasteryStatus.KNOWN, None)),
        (MasteryStatus.KNOWN, (MasteryStatus.KNOWN, None)),
    ],
)
def test_parse_status_code(raw, expected):
    assert parse_status_code(raw) == expected


@pytest.mark.parametrize("raw", ["", "Z", "PARTIAL", None, 1, True, "V-2", "V99", "V54", "S0"])
def test_parse_status_code_rejects_unknown(raw):
    with pytest.raises(InvalidInputError):
        parse_status_code(raw)


def test_derive_verse_range_partials_round_up():
    assert derive_verse_range(MasteryStatus.HALF, 7) == (1, 4)
    assert derive_verse_range(MasteryStatus.HALF_PLUS, 286) == (1, 143)
    assert derive_verse_range(MasteryStatus.NINETY, 7) == (1, 7)
    assert derive_verse_range(MasteryStatus.NINETY, 110) == (1, 99)
    assert derive_verse_range(MasteryStatus.VALIDATED, 110) == (1, 110)
    assert derive_verse_range(MasteryStatus.TO_MEMORIZE, 110) == (1, 110)


def test_derive_verse_range_explicit_range():
    assert derive_verse_range(MasteryStatus.VALIDATED, 110, 10, 20) == (10, 20)
    with pytest.raises(InvalidInputError):
        derive_verse_range(MasteryStatus.VALIDATED, 7, 1, 8)


def test_is_downgrade():
    assert is_downgrade(MasteryStatus.VALIDATED, MasteryStatus.TO_MEMORIZE)
    assert is_downgrade(MasteryStatus.KNOWN, MasteryStatus.HALF)
    assert not is_downgrade(MasteryStatus.VALIDATED, MasteryStatus.SUBMITTED)
    assert not is_downgrade(MasteryStatus.SUBMITTED, MasteryStatus.TO_MEMORIZE)
    assert not is_downgrade(None, MasteryStatus.TO_MEMORIZE)


def test_apply_transition_sets_validation_time_and_keeps_creation():
    first = datetime(2025, 3, 1, 9, 0)
    later = datetime(2025, 3, 20, 18, 30)
    pending = apply_transition(None, MasteryUpdate(surah_number=1, status="AM"), FATIHA, first, 1)
    assert pending.status is MasteryStatus.TO_MEMORIZE
    assert pending.validated_at is None

    validated = apply_transition(pending, MasteryUpdate(surah_number=1, status="V"), FATIHA, later, 1)
    assert validated.status is MasteryStatus.VALIDATED
    assert validated.validated_at == later
    assert validated.created_at == first
    assert (validated.verse_start, validated.verse_end) == (1, 7)


def test_apply_transition_week_from_code():
    record = apply_transition(None, MasteryUpdate(surah_number=1, status="V12"), FATIHA, datetime(2025, 3, 1), 1)
    assert record.validated_week == 12


def test_apply_transition_rejects_mismatched_surah():
    with pytest.raises(InvalidInputError):
        apply_transition(None, MasteryUpdate(surah_number=2, status="V"), FATIHA, datetime(2025, 3, 1), 1)


def test_last_write_wins_allows_downgrade():
    validated = _record(MasteryStatus.VALIDATED, validated_at=datetime(2025, 3, 10))
    update = MasteryUpdate(surah_number=1, status="AM")
    result = apply_transition(validated, update, FATIHA, datetime(2025, 4, 1), 1)
    assert result.status is MasteryStatus.TO_MEMORIZE


def test_no_downgrade_keeps_validated_record():
    validated = _record(MasteryStatus.VALIDATED, validated_at=datetime(2025, 3, 10))
    for code in ("AM", "50%", 0.9):
        update = MasteryUpdate(surah_number=1, status=code)
        result = apply_transition(validated, update, FATIHA, datetime(2025, 4, 1), 1, WritePolicy.NO_DOWNGRADE)
        assert result is validated

    submitted = apply_transition(
        validated, MasteryUpdate(surah_number=1, status="S"), FATIHA, datetime(2025, 4, 1), 1,
        WritePolicy.NO_DOWNGRADE,
    )
    assert submitted.status is MasteryStatus.SUBMITTED


def test_mirror_entry():
    validated = _record(MasteryStatus.VALIDATED, validated_at=datetime(2025, 3, 12, 20, 0))
    entry = mirror_entry(validated, FATIHA)
    assert entry.is_mirror
    assert entry.program == "MEMORIZATION"
    assert (entry.verse_start, entry.verse_end) == (1, 7)
    assert entry.date.isoformat() == "2025-03-12"

    half = mirror_entry(_record(MasteryStatus.HALF), FATIHA, "CONSOLIDATION")
    assert (half.verse_start, half.verse_end) == (1, 4)
    assert half.program == "CONSOLIDATION"
    assert half.date.isoformat() == "2025-03-10"

    assert mirror_entry(_record(MasteryStatus.TO_MEMORIZE), FATIHA) is None
    assert mirror_entry(_record(MasteryStatus.SUBMITTED), FATIHA) is None


def test_validated_surah_counts_as_complete_without_log_entries():
    now = datetime(2025, 3, 1)
    record = apply_transition(None, MasteryUpdate(surah_number=1, status="AM"), FATIHA, now, 1)
    record = apply_transition(record, MasteryUpdate(surah_number=1, status="V"), FATIHA, now, 1)

    entries = with_mirror_entries([], [record], [FATIHA, KAHF])
    [fatiha, kahf] = compute_surah_coverage(1, ["MEMORIZATION"], [FATIHA, KAHF], entries)
    assert fatiha.is_complete
    assert fatiha.percentage == 100
    assert kahf.covered_verse_count == 0


def test_with_mirror_entries_adds_one_mirror_per_surah():
    record = _record(MasteryStatus.VALIDATED, validated_at=datetime(2025, 3, 12))
    once = with_mirror_entries([], [record], [FATIHA])
    twice = with_mirror_entries(once, [record], [FATIHA])
    assert len(once) == 1
    assert len(twice) == 1


def test_summarize_mastery():
    records = [
        _record(MasteryStatus.VALIDATED),
        _record(MasteryStatus.VALIDATED, surah=KAHF),
        _record(MasteryStatus.HALF, owner_id=2),
    ]
    summary = summarize_mastery(records)
    assert summary["V"] == 2
    assert summary["50%"] == 1
    assert summary["AM"] == 0
    assert summary["total"] == 3
