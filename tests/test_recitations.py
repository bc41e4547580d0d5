from datetime import date, datetime, timezone

import pytest

import config
from db import database
from models import MasteryStatus, Recitation, RecitationCreate
from utils.recitations import group_by_surah, load_recitations, record_recitations
from utils.validation import InvalidInputError

NOW = datetime(2025, 3, 12, 18, 30, tzinfo=timezone.utc)


@pytest.fixture
def conn(tmp_path, monkeypatch):
    config_dir = tmp_path / ".hifztrack"
    config_dir.mkdir()
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "hifztrack.db")
    database.init_db()
    with database.get_conn() as conn:
        conn.execute("INSERT INTO users (id, name) VALUES (1, 'Amina')")
        conn.commit()
        yield conn


def _recitation(surah_number, session_date, status=MasteryStatus.VALIDATED):
    return Recitation(
        owner_id=1,
        surah_number=surah_number,
        program="MEMORIZATION",
        verse_start=1,
        verse_end=3,
        status=status,
        session_date=session_date,
        session_week=1,
        created_at=NOW,
    )


def test_group_by_surah_keeps_order_within_a_surah():
    newest = _recitation(2, date(2025, 3, 16))
    older = _recitation(2, date(2025, 3, 9), MasteryStatus.HALF)
    fatiha = _recitation(1, date(2025, 3, 9))
    grouped = group_by_surah([newest, fatiha, older])
    assert list(grouped) == [1, 2]
    assert grouped[2] == [newest, older]


def test_session_week_defaults_to_local_week(conn):
    item = RecitationCreate(surah_number=1, verse_start=1, verse_end=7, status="S", session_date=date(2025, 1, 2))
    [(recitation, record, written)] = record_recitations(conn, 1, [item], None, NOW)
    # January 2nd 2025 belongs to the week of Sunday 2024-12-29, the last local week of 2024
    assert recitation.session_week == 53
    assert record.status is MasteryStatus.SUBMITTED
    assert record.validated_week == 53
    assert record.validated_at is None
    assert written is True


def test_week_from_code_beats_session_week(conn):
    item = RecitationCreate(
        surah_number=18, verse_start=1, verse_end=110, status="V7", session_date=date(2025, 3, 9), session_week=11
    )
    [(recitation, record, _)] = record_recitations(conn, 1, [item], 1, NOW)
    assert recitation.status is MasteryStatus.VALIDATED
    assert recitation.session_week == 11
    assert record.validated_week == 7
    assert record.validated_at == datetime(2025, 3, 9, tzinfo=timezone.utc)


def test_rejected_batch_leaves_no_rows(conn):
    items = [
        RecitationCreate(surah_number=1, verse_start=1, verse_end=7, status="V", session_date=date(2025, 3, 9)),
        RecitationCreate(surah_number=2, verse_start=1, verse_end=10, status="Q", session_date=date(2025, 3, 9)),
    ]
    with pytest.raises(InvalidInputError):
        record_recitations(conn, 1, items, None, NOW)
    assert load_recitations(conn, 1) == []
    assert conn.execute("SELECT COUNT(*) FROM surah_mastery").fetchone()[0] == 0


def test_load_recitations_filters_and_limits(conn):
    items = [
        RecitationCreate(surah_number=1, verse_start=1, verse_end=7, status="AM", session_date=date(2025, 3, day))
        for day in (2, 9, 16)
    ]
    items.append(
        RecitationCreate(surah_number=2, verse_start=1, verse_end=50, status="50%", session_date=date(2025, 3, 9))
    )
    record_recitations(conn, 1, items, None, NOW)

    latest_two = load_recitations(conn, 1, surah_number=1, limit=2)
    assert [r.session_date for r in latest_two] == [date(2025, 3, 16), date(2025, 3, 9)]
    assert len(load_recitations(conn, 1)) == 4
