from pathlib import Path

from .database import get_db

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    auth_id TEXT NOT NULL UNIQUE,
    skills_json TEXT DEFAULT '[]',
    experience INTEGER DEFAULT 0 CHECK (experience >= 0),
    created_at TEXT DEFAULT (datetime('now')),
    updated_at TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS interviews (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    job_title TEXT NOT NULL,
    company_name TEXT NOT NULL,
    job_description TEXT NOT NULL,
    interview_type TEXT DEFAULT 'General',
    duration INTEGER DEFAULT 30,
    questions_json TEXT NOT NULL DEFAULT '[]',
    created_at TEXT DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_interviews_user_id ON interviews(user_id);

CREATE TABLE IF NOT EXISTS settings (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    llm_provider TEXT DEFAULT 'gemini',
    llm_api_key TEXT,
    updated_at TEXT DEFAULT (datetime('now'))
);
"""


def init_db(db_path: str | Path | None = None) -> None:
    conn = get_db(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        _ensure_users_columns(conn)
        conn.execute(
            """
            INSERT INTO settings (id)
            VALUES (1)
            ON CONFLICT(id) DO NOTHING
            """
        )
        conn.commit()
    finally:
        conn.close()


def _ensure_users_columns(conn) -> None:
    """Add onboarding columns that were added after the initial schema deployment."""
    existing = {
        str(row[1])
        for row in conn.execute("PRAGMA table_info(users)").fetchall()
        if len(row) > 1
    }
    required_defs = [
        ("industry", "TEXT"),
        ("bio", "TEXT"),
    ]
    for column, definition in required_defs:
        if column in existing:
            continue
        conn.execute(f"ALTER TABLE users ADD COLUMN {column} {definition}")
