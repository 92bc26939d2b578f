"""Pathway assembler module.

Responsibilities:
- Compose user, roadmap and checkpoint records with topic-joined quizzes
  and attempts into one nested export document per user
- Provide the "all users" and "single user" export documents

Output structure (JSON keys, in order):
- pathway export: exportDate, totalUsers, users[]
- user export: [exportDate], userId, name, email, learningParameters,
  surveyParameters, roadmaps[]
- roadmap export: roadmapId, mainTopic, description, difficulty,
  estimatedDuration, totalProgress, status, createdAt, checkpoints[],
  quizzes[], quizAttempts[]
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from pathways.core.topic_joiner import join_roadmap
from pathways.db.records_repository import (
    CheckpointRecord,
    QuizAttemptRecord,
    QuizRecord,
    RoadmapRecord,
    UserRecord,
    load_all_users,
    load_user,
)

logger = structlog.get_logger(__name__)

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class CheckpointExport:
    """Checkpoint projected to its exported fields."""

    checkpoint_id: str
    title: str
    description: str | None
    order: int | None
    status: str
    completed_at: str | None
    resources: list[Any] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: CheckpointRecord) -> CheckpointExport:
        return cls(
            checkpoint_id=record.checkpoint_id,
            title=record.title,
            description=record.description,
            order=record.order,
            status=record.status,
            completed_at=record.completed_at,
            resources=record.resources,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "checkpointId": self.checkpoint_id,
            "title": self.title,
            "description": self.description,
            "order": self.order,
            "status": self.status,
            "completedAt": self.completed_at,
            "resources": self.resources,
        }


@dataclass
class QuizExport:
    """Quiz projected to its exported fields."""

    quiz_id: str
    title: str
    topic: str | None
    difficulty: str | None
    domain: str | None
    tags: list[str]
    questions: list[Any]
    created_at: str

    @classmethod
    def from_record(cls, record: QuizRecord) -> QuizExport:
        return cls(
            quiz_id=record.quiz_id,
            title=record.title,
            topic=record.topic,
            difficulty=record.difficulty,
            domain=record.domain,
            tags=record.tags,
            questions=record.questions,
            created_at=record.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "quizId": self.quiz_id,
            "title": self.title,
            "topic": self.topic,
            "difficulty": self.difficulty,
            "domain": self.domain,
            "tags": self.tags,
            "questions": self.questions,
            "createdAt": self.created_at,
        }


@dataclass
class AttemptExport:
    """Quiz attempt projected to its exported fields."""

    attempt_id: str
    quiz_id: str
    score: float
    total_questions: int | None
    correct_answers: int | None
    completed_at: str | None
    time_taken: int | None

    @classmethod
    def from_record(cls, record: QuizAttemptRecord) -> AttemptExport:
        return cls(
            attempt_id=record.attempt_id,
            quiz_id=record.quiz_id,
            score=record.score,
            total_questions=record.total_questions,
            correct_answers=record.correct_answers,
            completed_at=record.completed_at,
            time_taken=record.time_taken,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "attemptId": self.attempt_id,
            "quizId": self.quiz_id,
            "score": self.score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "completedAt": self.completed_at,
            "timeTaken": self.time_taken,
        }


@dataclass
class RoadmapExport:
    """One roadmap with its checkpoints and topic-matched quizzes."""

    roadmap_id: str
    main_topic: str
    description: str | None
    difficulty: str | None
    estimated_duration: str | None
    total_progress: float | None
    status: str
    created_at: str
    checkpoints: list[CheckpointExport] = field(default_factory=list)
    quizzes: list[QuizExport] = field(default_factory=list)
    quiz_attempts: list[AttemptExport] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "roadmapId": self.roadmap_id,
            "mainTopic": self.main_topic,
            "description": self.description,
            "difficulty": self.difficulty,
            "estimatedDuration": self.estimated_duration,
            "totalProgress": self.total_progress,
            "status": self.status,
            "createdAt": self.created_at,
            "checkpoints": [c.to_dict() for c in self.checkpoints],
            "quizzes": [q.to_dict() for q in self.quizzes],
            "quizAttempts": [a.to_dict() for a in self.quiz_attempts],
        }


@dataclass
class UserExport:
    """Export document for one user.

    ``export_date`` is only set when the document stands alone (single
    user export); inside a PathwayExport the collection carries the date.
    """

    user_id: str
    name: str
    email: str | None
    learning_parameters: dict[str, Any] = field(default_factory=dict)
    survey_parameters: dict[str, Any] = field(default_factory=dict)
    roadmaps: list[RoadmapExport] = field(default_factory=list)
    export_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {}
        if self.export_date is not None:
            result["exportDate"] = self.export_date
        result.update(
            {
                "userId": self.user_id,
                "name": self.name,
                "email": self.email,
                "learningParameters": self.learning_parameters,
                "surveyParameters": self.survey_parameters,
                "roadmaps": [r.to_dict() for r in self.roadmaps],
            }
        )
        return result


@dataclass
class PathwayExport:
    """Export document for every user in the store."""

    export_date: str
    users: list[UserExport] = field(default_factory=list)

    @property
    def total_users(self) -> int:
        return len(self.users)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "exportDate": self.export_date,
            "totalUsers": self.total_users,
            "users": [u.to_dict() for u in self.users],
        }


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def _now_iso(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def sort_checkpoints(checkpoints: list[CheckpointRecord]) -> list[CheckpointRecord]:
    """Order checkpoints by their order index.

    The sort is stable: equal indexes keep store order, and checkpoints
    without an index follow the indexed ones in store order.
    """
    return sorted(
        checkpoints,
        key=lambda c: (c.order is None, c.order if c.order is not None else 0),
    )


def assemble_roadmap(
    conn: sqlite3.Connection,
    roadmap: RoadmapRecord,
    user_id: str,
) -> RoadmapExport:
    """Build the export entry for one roadmap."""
    match = join_roadmap(conn, roadmap, user_id)

    return RoadmapExport(
        roadmap_id=roadmap.roadmap_id,
        main_topic=roadmap.main_topic,
        description=roadmap.description,
        difficulty=roadmap.difficulty,
        estimated_duration=roadmap.estimated_duration,
        total_progress=roadmap.total_progress,
        status=roadmap.status,
        created_at=roadmap.created_at,
        checkpoints=[
            CheckpointExport.from_record(c) for c in sort_checkpoints(roadmap.checkpoints)
        ],
        quizzes=[QuizExport.from_record(q) for q in match.quizzes],
        quiz_attempts=[AttemptExport.from_record(a) for a in match.attempts],
    )


def assemble_user_export(
    conn: sqlite3.Connection,
    user: UserRecord,
    export_date: str | None = None,
) -> UserExport:
    """Build the export document for one loaded user.

    Roadmaps are processed one at a time in store order.
    """
    return UserExport(
        user_id=user.user_id,
        name=user.name,
        email=user.email,
        learning_parameters=user.learning_parameters,
        survey_parameters=user.survey_parameters,
        roadmaps=[assemble_roadmap(conn, r, user.user_id) for r in user.roadmaps],
        export_date=export_date,
    )


# =============================================================================
# MAIN FUNCTIONS
# =============================================================================


def assemble_all(conn: sqlite3.Connection, now: datetime | None = None) -> PathwayExport:
    """Assemble the export document for every user.

    Args:
        conn: Open store connection
        now: Export timestamp. Defaults to current UTC time

    Returns:
        PathwayExport stamped with the export date
    """
    export = PathwayExport(export_date=_now_iso(now))

    for user in load_all_users(conn):
        export.users.append(assemble_user_export(conn, user))

    logger.info("pathways.assembled", total_users=export.total_users)
    return export


def assemble_one(
    conn: sqlite3.Connection,
    user_id: str,
    now: datetime | None = None,
) -> UserExport:
    """Assemble the export document for a single user.

    Args:
        conn: Open store connection
        user_id: User identifier
        now: Export timestamp. Defaults to current UTC time

    Returns:
        UserExport stamped with the export date

    Raises:
        UserNotFoundError: If no user has this id
    """
    user = load_user(conn, user_id)
    export = assemble_user_export(conn, user, export_date=_now_iso(now))

    logger.info("pathways.user_assembled", user_id=user_id, roadmaps=len(export.roadmaps))
    return export
