import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION
from .surahs import PROGRAMS, surah_rows

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".hifztrack"
DB_PATH = CONFIG_DIR / "hifztrack.db"

WEEK_START_TABLES = ("attendance", "objective_completions")


def init_db():
    """Initialize the database by creating tables and indexes if they don't exist."""
    CONFIG_DIR.mkdir(exist_ok=True)
    with get_conn() as conn:
        conn.executescript(SCHEMA_SQL)
        ensure_progress_mirror_column(conn)
        conn.executescript(INDEXES_SQL)
        ensure_reference_data(conn)
        ensure_sunday_week_starts(conn)
        ensure_schema_version(conn)
        conn.commit()


def ensure_progress_mirror_column(conn: sqlite3.Connection) -> None:
    """Ensure progress table has is_mirror column for existing installs."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(progress)")
    columns = {row[1] for row in cursor.fetchall()}
    if "is_mirror" not in columns:
        cursor.execute("ALTER TABLE progress ADD COLUMN is_mirror INTEGER NOT NULL DEFAULT 0")


def ensure_reference_data(conn: sqlite3.Connection) -> None:
    """Seed the surah table and program codes."""
    cursor = conn.cursor()
    cursor.executemany(
        "INSERT OR IGNORE INTO surahs (number, total_verses) VALUES (?, ?)",
        surah_rows(),
    )
    cursor.executemany(
        "INSERT OR IGNORE INTO programs (code, name, is_daily) VALUES (?, ?, ?)",
        [(code, name, int(is_daily)) for code, name, is_daily in PROGRAMS],
    )


def ensure_sunday_week_starts(conn: sqlite3.Connection) -> None:
    """Move week_start values that are not Sundays back to the Sunday opening their week.

    Older imports anchored weeks on Monday. A shifted row that collides with an
    existing Sunday row is dropped in favour of the Sunday row.
    """
    cursor = conn.cursor()
    for table in WEEK_START_TABLES:
        cursor.execute(
            f"""
            UPDATE OR IGNORE {table}
            SET week_start = date(week_start, '-6 days', 'weekday 0')
            WHERE strftime('%w', week_start) != '0'
            """
        )
        moved = cursor.rowcount
        cursor.execute(f"DELETE FROM {table} WHERE strftime('%w', week_start) != '0'")
        dropped = cursor.rowcount
        if moved > 0 or dropped > 0:
            logger.info(
                "Normalized %s week starts to Sunday: %d moved, %d duplicates dropped",
                table, moved, dropped,
            )


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0


def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")


def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        logger.info("Schema version %d -> %d", current, SCHEMA_VERSION)
        set_schema_version(conn, SCHEMA_VERSION)


@contextmanager
def get_conn():
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def get_db():
    """FastAPI dependency that yields a DB connection and closes it afterwards."""
    with get_conn() as conn:
        yield conn
