# SQL schema for HifzTrack database

SCHEMA_VERSION = 4

SCHEMA_SQL = """
-- Users with per-kind privacy flags
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'USER' CHECK(role IN ('ADMIN', 'MANAGER', 'USER')),
    private_attendance INTEGER NOT NULL DEFAULT 0,
    private_progress INTEGER NOT NULL DEFAULT 0,
    private_stats INTEGER NOT NULL DEFAULT 0,
    private_evaluations INTEGER NOT NULL DEFAULT 0
);

-- Study groups
CREATE TABLE IF NOT EXISTS groups (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS group_members (
    group_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    role TEXT NOT NULL DEFAULT 'MEMBER' CHECK(role IN ('MEMBER', 'REFERENT', 'ADMIN')),
    PRIMARY KEY (group_id, user_id),
    FOREIGN KEY (group_id) REFERENCES groups (id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
);

-- Static reference data
CREATE TABLE IF NOT EXISTS surahs (
    number INTEGER PRIMARY KEY CHECK(number BETWEEN 1 AND 114),
    total_verses INTEGER NOT NULL CHECK(total_verses > 0)
);

CREATE TABLE IF NOT EXISTS programs (
    code TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    is_daily INTEGER NOT NULL DEFAULT 1
);

-- Verse-range study log
CREATE TABLE IF NOT EXISTS progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    program TEXT NOT NULL,
    surah_number INTEGER NOT NULL,
    verse_start INTEGER NOT NULL CHECK(verse_start >= 1),
    verse_end INTEGER NOT NULL,
    date TEXT NOT NULL,
    repetitions INTEGER,
    comment TEXT,
    is_mirror INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    CHECK(verse_end >= verse_start),
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
    FOREIGN KEY (program) REFERENCES programs (code),
    FOREIGN KEY (surah_number) REFERENCES surahs (number)
);

-- One mastery status per (user, surah)
CREATE TABLE IF NOT EXISTS surah_mastery (
    user_id INTEGER NOT NULL,
    surah_number INTEGER NOT NULL,
    status TEXT NOT NULL CHECK(status IN ('AM', '50%', '51%', '90%', 'S', 'V', 'X')),
    validated_week INTEGER,
    verse_start INTEGER,
    verse_end INTEGER,
    validated_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (user_id, surah_number),
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
    FOREIGN KEY (surah_number) REFERENCES surahs (number)
);

-- Passages recited in group sessions; each one also drives surah_mastery
CREATE TABLE IF NOT EXISTS surah_recitations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    surah_number INTEGER NOT NULL,
    program TEXT NOT NULL DEFAULT 'MEMORIZATION',
    verse_start INTEGER NOT NULL CHECK(verse_start >= 1),
    verse_end INTEGER NOT NULL,
    status TEXT NOT NULL CHECK(status IN ('AM', '50%', '51%', '90%', 'S', 'V', 'X')),
    session_date TEXT NOT NULL,
    session_week INTEGER NOT NULL,
    comment TEXT,
    recorded_by INTEGER,
    created_at TEXT NOT NULL,
    CHECK(verse_end >= verse_start),
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
    FOREIGN KEY (surah_number) REFERENCES surahs (number),
    FOREIGN KEY (program) REFERENCES programs (code),
    FOREIGN KEY (recorded_by) REFERENCES users (id)
);

-- Weekly attendance grid, week_start is the Sunday of the local week
CREATE TABLE IF NOT EXISTS attendance (
    user_id INTEGER NOT NULL,
    week_start TEXT NOT NULL,
    sunday INTEGER NOT NULL DEFAULT 0,
    monday INTEGER NOT NULL DEFAULT 0,
    tuesday INTEGER NOT NULL DEFAULT 0,
    wednesday INTEGER NOT NULL DEFAULT 0,
    thursday INTEGER NOT NULL DEFAULT 0,
    friday INTEGER NOT NULL DEFAULT 0,
    saturday INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (user_id, week_start),
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
);

-- Sparse: a row exists only while the day is checked
CREATE TABLE IF NOT EXISTS daily_completions (
    user_id INTEGER NOT NULL,
    program TEXT NOT NULL,
    date TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 1,
    PRIMARY KEY (user_id, program, date),
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
    FOREIGN KEY (program) REFERENCES programs (code)
);

CREATE TABLE IF NOT EXISTS weekly_objectives (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    program TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
);

-- Sparse, weekly
CREATE TABLE IF NOT EXISTS objective_completions (
    objective_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    week_start TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 1,
    PRIMARY KEY (objective_id, week_start),
    FOREIGN KEY (objective_id) REFERENCES weekly_objectives (id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
);

-- Full revision/reading passes
CREATE TABLE IF NOT EXISTS completion_cycles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    kind TEXT NOT NULL CHECK(kind IN ('REVISION', 'READING')),
    completed_at TEXT NOT NULL,
    days_to_complete INTEGER,
    FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
);
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_progress_user_program ON progress (user_id, program);
CREATE INDEX IF NOT EXISTS idx_progress_user_surah ON progress (user_id, surah_number);
CREATE INDEX IF NOT EXISTS idx_progress_date ON progress (date);
CREATE UNIQUE INDEX IF NOT EXISTS idx_progress_single_mirror
    ON progress (user_id, surah_number, program) WHERE is_mirror = 1;
CREATE INDEX IF NOT EXISTS idx_mastery_user ON surah_mastery (user_id);
CREATE INDEX IF NOT EXISTS idx_recitations_user_surah ON surah_recitations (user_id, surah_number, session_date);
CREATE INDEX IF NOT EXISTS idx_daily_completions_user_date ON daily_completions (user_id, date);
CREATE INDEX IF NOT EXISTS idx_objective_completions_user ON objective_completions (user_id, week_start);
CREATE INDEX IF NOT EXISTS idx_group_members_user ON group_members (user_id);
CREATE INDEX IF NOT EXISTS idx_cycles_user_kind ON completion_cycles (user_id, kind, completed_at);
"""
