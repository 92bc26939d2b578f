"""SQLite store handle and schema management.

The store is opened explicitly through ``open_store`` and the resulting
connection is passed to every repository function. Nothing here keeps a
module-level connection.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("data/pathways.db")

DEFAULT_TIMEOUT_SECONDS = 5.0


class StoreError(Exception):
    """Raised when the store cannot be opened or a query fails."""

    pass


def _topic_contains(topic: str | None, needle: str | None) -> int:
    """Case-insensitive, unanchored literal containment used by quiz lookups."""
    if topic is None or needle is None:
        return 0
    return int(needle.casefold() in topic.casefold())


@contextmanager
def open_store(
    db_path: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    read_only: bool = False,
) -> Generator[sqlite3.Connection, None, None]:
    """Open the store as a context manager.

    The connection is always closed on exit. Any ``sqlite3.Error`` raised
    while it is open is re-raised as ``StoreError``.

    Args:
        db_path: Path to database file. Defaults to data/pathways.db
        timeout: Seconds to wait on a locked database
        read_only: Open in read-only mode; a missing file is an error

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with open_store(Path("data/pathways.db"), read_only=True) as conn:
            users = load_all_users(conn)
    """
    db_path = db_path or DEFAULT_DB_PATH

    try:
        if read_only:
            uri = f"{db_path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, timeout=timeout, uri=True)
        else:
            conn = sqlite3.connect(db_path, timeout=timeout)
    except sqlite3.Error as e:
        logger.error("store.open_failed", path=str(db_path), error=str(e))
        raise StoreError(f"Cannot open store at {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row
    conn.create_function("topic_contains", 2, _topic_contains, deterministic=True)
    logger.debug("store.opened", path=str(db_path))

    try:
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logger.error("store.query_failed", path=str(db_path), error=str(e))
        raise StoreError(f"Store query failed: {e}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
        logger.debug("store.closed", path=str(db_path))


def init_store(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to data/pathways.db

    Returns:
        Path of the initialized database
    """
    db_path = db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with open_store(db_path) as conn:
        create_schema(conn)

    logger.info("store.initialized", path=str(db_path))
    return db_path


def create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency. ``position`` columns keep the
    owner's list order; ``"order"`` is the checkpoint's own ordering index.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT,
            learning_parameters TEXT DEFAULT '{}',
            survey_parameters TEXT DEFAULT '{}'
        );

        CREATE TABLE IF NOT EXISTS roadmaps (
            roadmap_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            position INTEGER NOT NULL DEFAULT 0,
            main_topic TEXT NOT NULL,
            description TEXT,
            difficulty TEXT,
            estimated_duration TEXT,
            total_progress NUMERIC,
            status TEXT DEFAULT 'active' CHECK(status IN ('active', 'completed', 'paused')),
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        CREATE TABLE IF NOT EXISTS checkpoints (
            checkpoint_id TEXT PRIMARY KEY,
            roadmap_id TEXT NOT NULL REFERENCES roadmaps(roadmap_id) ON DELETE CASCADE,
            position INTEGER NOT NULL DEFAULT 0,
            title TEXT NOT NULL,
            description TEXT,
            "order" INTEGER,
            status TEXT DEFAULT 'pending' CHECK(status IN ('pending', 'in_progress', 'completed')),
            completed_at TEXT,
            resources TEXT DEFAULT '[]'
        );

        CREATE TABLE IF NOT EXISTS quizzes (
            quiz_id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            topic TEXT,
            difficulty TEXT,
            domain TEXT,
            tags TEXT DEFAULT '[]',
            questions TEXT DEFAULT '[]',
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        CREATE TABLE IF NOT EXISTS quiz_attempts (
            attempt_id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
            quiz_id TEXT NOT NULL REFERENCES quizzes(quiz_id) ON DELETE CASCADE,
            score NUMERIC NOT NULL DEFAULT 0,
            total_questions INTEGER,
            correct_answers INTEGER,
            completed_at TEXT,
            time_taken INTEGER
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_roadmaps_user ON roadmaps(user_id, position);
        CREATE INDEX IF NOT EXISTS idx_checkpoints_roadmap ON checkpoints(roadmap_id, position);
        CREATE INDEX IF NOT EXISTS idx_attempts_user_quiz ON quiz_attempts(user_id, quiz_id);
        CREATE INDEX IF NOT EXISTS idx_quizzes_domain ON quizzes(domain);
        """
    )
