"""
Database schema initialization for Arsana.

Contains the SQL schema and validation logic, kept apart from database.py.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from arsana.observability.logging import get_logger

logger = get_logger(__name__)


def init_database(db_path: Path) -> None:
    """
    Initialize database with schema (idempotent)

    Safe to run multiple times - uses CREATE TABLE IF NOT EXISTS.

    Args:
        db_path: Path to the database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)

    conn.executescript("""
        CREATE TABLE IF NOT EXISTS incoming_letters (
            id TEXT PRIMARY KEY,
            letter_number TEXT NOT NULL UNIQUE,
            subject TEXT NOT NULL,
            sender TEXT NOT NULL,
            recipient TEXT NOT NULL DEFAULT '',
            processor TEXT NOT NULL DEFAULT '',
            letter_date TEXT,
            note TEXT,
            is_invitation INTEGER NOT NULL DEFAULT 0,
            event_date TEXT,
            event_time TEXT,
            event_location TEXT,
            event_notes TEXT,
            event_handled_at TEXT,
            user_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS outgoing_letters (
            id TEXT PRIMARY KEY,
            letter_number TEXT NOT NULL UNIQUE,
            subject TEXT NOT NULL,
            sender TEXT NOT NULL,
            recipient TEXT NOT NULL DEFAULT '',
            processor TEXT NOT NULL DEFAULT '',
            letter_date TEXT,
            note TEXT,
            description TEXT,
            is_invitation INTEGER NOT NULL DEFAULT 0,
            event_date TEXT,
            event_time TEXT,
            event_location TEXT,
            event_notes TEXT,
            event_handled_at TEXT,
            user_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS notifications (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            message TEXT NOT NULL,
            type TEXT NOT NULL DEFAULT 'INFO',
            is_read INTEGER NOT NULL DEFAULT 0,
            user_id TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Calendar queries filter on (is_invitation, event_date)
        CREATE INDEX IF NOT EXISTS idx_incoming_letters_invitation_date
        ON incoming_letters(is_invitation, event_date);

        CREATE INDEX IF NOT EXISTS idx_outgoing_letters_invitation_date
        ON outgoing_letters(is_invitation, event_date);

        -- Weekly summary counts by creation time
        CREATE INDEX IF NOT EXISTS idx_incoming_letters_created_at
        ON incoming_letters(created_at);

        CREATE INDEX IF NOT EXISTS idx_outgoing_letters_created_at
        ON outgoing_letters(created_at);

        CREATE INDEX IF NOT EXISTS idx_notifications_user_created
        ON notifications(user_id, created_at);
    """)

    conn.commit()
    conn.close()

    logger.info("Database initialized: %s", db_path)


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Validate database has expected schema

    Args:
        conn: Active database connection

    Returns:
        True if valid

    Raises:
        ValueError: If tables are missing
    """
    letter_columns = [
        "id",
        "letter_number",
        "subject",
        "is_invitation",
        "event_date",
        "event_location",
        "event_handled_at",
        "created_at",
    ]
    required_tables = {
        "incoming_letters": letter_columns,
        "outgoing_letters": [*letter_columns, "description"],
        "notifications": ["id", "title", "message", "type", "is_read", "user_id", "created_at"],
    }

    cursor = conn.cursor()

    cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
    existing_tables = {row[0] for row in cursor.fetchall()}

    missing_tables = set(required_tables.keys()) - existing_tables
    if missing_tables:
        raise ValueError(f"Database missing tables: {missing_tables}")

    for table, required_cols in required_tables.items():
        # Schema identifiers cannot use parameterized queries; names come from the dict above
        cursor.execute(f"PRAGMA table_info({table})")
        existing_cols = {row[1] for row in cursor.fetchall()}

        missing_cols = set(required_cols) - existing_cols
        if missing_cols:
            raise ValueError(f"Table '{table}' missing columns: {missing_cols}")

    return True
