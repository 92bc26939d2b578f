"""Count and aggregation queries used by the statistics report."""

from __future__ import annotations

import sqlite3

# Tables that can be counted, keyed by the name used in reports
COUNTABLE_TABLES = {
    "users": "users",
    "roadmaps": "roadmaps",
    "quizzes": "quizzes",
    "checkpoints": "checkpoints",
    "quizAttempts": "quiz_attempts",
}


def count_entities(conn: sqlite3.Connection, entity: str) -> int:
    """Count rows of one entity type.

    Args:
        conn: Open store connection
        entity: Report name of the entity (see COUNTABLE_TABLES)

    Raises:
        KeyError: If the entity is not countable
    """
    table = COUNTABLE_TABLES[entity]
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def count_checkpoints_with_status(conn: sqlite3.Connection, status: str) -> int:
    return conn.execute(
        "SELECT COUNT(*) FROM checkpoints WHERE status = ?", (status,)
    ).fetchone()[0]


def list_roadmap_progress(conn: sqlite3.Connection) -> list[float | None]:
    """Total progress of every roadmap, NULL kept as None."""
    rows = conn.execute("SELECT total_progress FROM roadmaps ORDER BY rowid").fetchall()
    return [row["total_progress"] for row in rows]


def list_attempt_scores(conn: sqlite3.Connection) -> list[float]:
    rows = conn.execute("SELECT score FROM quiz_attempts ORDER BY rowid").fetchall()
    return [row["score"] for row in rows]


def count_quizzes_by_domain(conn: sqlite3.Connection) -> list[tuple[str | None, int]]:
    """Group quizzes by domain.

    Returns:
        (domain, count) pairs by descending count, ties by domain name,
        quizzes without a domain grouped under None and sorted last on ties
    """
    rows = conn.execute(
        """
        SELECT domain, COUNT(*) AS count
        FROM quizzes
        GROUP BY domain
        ORDER BY count DESC, domain IS NULL, domain
        """
    ).fetchall()
    return [(row["domain"], row["count"]) for row in rows]
