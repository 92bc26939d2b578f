"""Read-only repository functions for learner records.

Loads users with their roadmap and checkpoint subtrees, quizzes by topic
and quiz attempts by user. Every function takes an open store connection
and re-queries on each call.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class UserNotFoundError(Exception):
    """Raised when no user matches the requested id."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class CheckpointRecord:
    """Checkpoint record from database."""

    checkpoint_id: str
    roadmap_id: str
    title: str
    description: str | None
    order: int | None
    status: str
    completed_at: str | None
    resources: list[Any] = field(default_factory=list)


@dataclass
class RoadmapRecord:
    """Roadmap record with its checkpoints in store order."""

    roadmap_id: str
    user_id: str
    main_topic: str
    description: str | None
    difficulty: str | None
    estimated_duration: str | None
    total_progress: float | None
    status: str
    created_at: str
    checkpoints: list[CheckpointRecord] = field(default_factory=list)


@dataclass
class UserRecord:
    """User record with its roadmaps in store order."""

    user_id: str
    name: str
    email: str | None
    learning_parameters: dict[str, Any] = field(default_factory=dict)
    survey_parameters: dict[str, Any] = field(default_factory=dict)
    roadmaps: list[RoadmapRecord] = field(default_factory=list)


@dataclass
class QuizRecord:
    """Quiz record from database."""

    quiz_id: str
    title: str
    topic: str | None
    difficulty: str | None
    domain: str | None
    tags: list[str]
    questions: list[Any]
    created_at: str


@dataclass
class QuizAttemptRecord:
    """Quiz attempt record from database."""

    attempt_id: str
    user_id: str
    quiz_id: str
    score: float
    total_questions: int | None
    correct_answers: int | None
    completed_at: str | None
    time_taken: int | None


# =============================================================================
# USERS
# =============================================================================


def load_all_users(conn: sqlite3.Connection) -> list[UserRecord]:
    """Get every user with its full roadmap and checkpoint subtree.

    Args:
        conn: Open store connection

    Returns:
        List of UserRecord instances in store order
    """
    rows = conn.execute("SELECT * FROM users ORDER BY rowid").fetchall()
    users = [_row_to_user(conn, row) for row in rows]

    logger.debug("records.users_loaded", count=len(users))
    return users


def load_user(conn: sqlite3.Connection, user_id: str) -> UserRecord:
    """Get one user with its full roadmap and checkpoint subtree.

    Args:
        conn: Open store connection
        user_id: User identifier

    Returns:
        UserRecord for the requested user

    Raises:
        UserNotFoundError: If no user has this id
    """
    row = conn.execute(
        "SELECT * FROM users WHERE user_id = ?", (user_id,)
    ).fetchone()

    if row is None:
        raise UserNotFoundError(user_id)

    return _row_to_user(conn, row)


def _load_roadmaps(conn: sqlite3.Connection, user_id: str) -> list[RoadmapRecord]:
    rows = conn.execute(
        "SELECT * FROM roadmaps WHERE user_id = ? ORDER BY position, rowid",
        (user_id,),
    ).fetchall()
    return [_row_to_roadmap(conn, row) for row in rows]


def _load_checkpoints(conn: sqlite3.Connection, roadmap_id: str) -> list[CheckpointRecord]:
    rows = conn.execute(
        "SELECT * FROM checkpoints WHERE roadmap_id = ? ORDER BY position, rowid",
        (roadmap_id,),
    ).fetchall()
    return [_row_to_checkpoint(row) for row in rows]


# =============================================================================
# QUIZZES AND ATTEMPTS
# =============================================================================


def find_quizzes_by_topic(conn: sqlite3.Connection, topic: str | None) -> list[QuizRecord]:
    """Get quizzes whose topic contains the given text.

    Matching is a case-insensitive, unanchored literal substring test:
    "Algorithms" matches "Intro to algorithms" but not "Algo".

    Args:
        conn: Open store connection
        topic: Text to look for inside quiz topics

    Returns:
        Matching QuizRecord instances in store order (possibly empty)
    """
    if topic is None:
        return []

    rows = conn.execute(
        "SELECT * FROM quizzes WHERE topic_contains(topic, ?) ORDER BY rowid",
        (topic,),
    ).fetchall()

    logger.debug("records.quizzes_matched", topic=topic, count=len(rows))
    return [_row_to_quiz(row) for row in rows]


def find_attempts(
    conn: sqlite3.Connection,
    user_id: str,
    quiz_ids: list[str],
) -> list[QuizAttemptRecord]:
    """Get a user's attempts restricted to a set of quizzes.

    Args:
        conn: Open store connection
        user_id: User who made the attempts
        quiz_ids: Quiz identifiers to restrict to

    Returns:
        Matching QuizAttemptRecord instances in store order (possibly empty)
    """
    if not quiz_ids:
        return []

    rows = conn.execute(
        """
        SELECT * FROM quiz_attempts
        WHERE user_id = ?
          AND quiz_id IN (SELECT value FROM json_each(?))
        ORDER BY rowid
        """,
        (user_id, json.dumps(list(quiz_ids))),
    ).fetchall()

    return [_row_to_attempt(row) for row in rows]


# =============================================================================
# ROW CONVERSION
# =============================================================================


def _load_json(value: str | None, default: Any) -> Any:
    """Decode a JSON text column, keeping the default for NULL."""
    if value is None:
        return default
    return json.loads(value)


def _row_to_user(conn: sqlite3.Connection, row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        user_id=row["user_id"],
        name=row["name"],
        email=row["email"],
        learning_parameters=_load_json(row["learning_parameters"], {}),
        survey_parameters=_load_json(row["survey_parameters"], {}),
        roadmaps=_load_roadmaps(conn, row["user_id"]),
    )


def _row_to_roadmap(conn: sqlite3.Connection, row: sqlite3.Row) -> RoadmapRecord:
    return RoadmapRecord(
        roadmap_id=row["roadmap_id"],
        user_id=row["user_id"],
        main_topic=row["main_topic"],
        description=row["description"],
        difficulty=row["difficulty"],
        estimated_duration=row["estimated_duration"],
        total_progress=row["total_progress"],
        status=row["status"],
        created_at=row["created_at"],
        checkpoints=_load_checkpoints(conn, row["roadmap_id"]),
    )


def _row_to_checkpoint(row: sqlite3.Row) -> CheckpointRecord:
    return CheckpointRecord(
        checkpoint_id=row["checkpoint_id"],
        roadmap_id=row["roadmap_id"],
        title=row["title"],
        description=row["description"],
        order=row["order"],
        status=row["status"],
        completed_at=row["completed_at"],
        resources=_load_json(row["resources"], []),
    )


def _row_to_quiz(row: sqlite3.Row) -> QuizRecord:
    return QuizRecord(
        quiz_id=row["quiz_id"],
        title=row["title"],
        topic=row["topic"],
        difficulty=row["difficulty"],
        domain=row["domain"],
        tags=_load_json(row["tags"], []),
        questions=_load_json(row["questions"], []),
        created_at=row["created_at"],
    )


def _row_to_attempt(row: sqlite3.Row) -> QuizAttemptRecord:
    return QuizAttemptRecord(
        attempt_id=row["attempt_id"],
        user_id=row["user_id"],
        quiz_id=row["quiz_id"],
        score=row["score"],
        total_questions=row["total_questions"],
        correct_answers=row["correct_answers"],
        completed_at=row["completed_at"],
        time_taken=row["time_taken"],
    )
