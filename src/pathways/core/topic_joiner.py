"""Topic joiner module.

Quizzes are not linked to roadmaps in the store. A quiz belongs to a
roadmap when the roadmap's main topic appears inside the quiz topic
(case-insensitive, unanchored). The owning user's attempts are then
restricted to that quiz set.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field

import structlog

from pathways.db.records_repository import (
    QuizAttemptRecord,
    QuizRecord,
    RoadmapRecord,
    find_attempts,
    find_quizzes_by_topic,
)

logger = structlog.get_logger(__name__)


@dataclass
class TopicMatch:
    """Quizzes matched to one roadmap and the user's attempts at them."""

    roadmap_id: str
    quizzes: list[QuizRecord] = field(default_factory=list)
    attempts: list[QuizAttemptRecord] = field(default_factory=list)

    @property
    def quiz_ids(self) -> list[str]:
        return [q.quiz_id for q in self.quizzes]


def join_roadmap(
    conn: sqlite3.Connection,
    roadmap: RoadmapRecord,
    user_id: str | None = None,
) -> TopicMatch:
    """Resolve quizzes and attempts related to a roadmap.

    Args:
        conn: Open store connection
        roadmap: Roadmap whose main topic drives the match
        user_id: User whose attempts are fetched. Defaults to the roadmap owner

    Returns:
        TopicMatch; both lists are empty when no quiz topic matches
    """
    owner_id = user_id or roadmap.user_id

    quizzes = find_quizzes_by_topic(conn, roadmap.main_topic)
    match = TopicMatch(roadmap_id=roadmap.roadmap_id, quizzes=quizzes)
    match.attempts = find_attempts(conn, owner_id, match.quiz_ids)

    logger.debug(
        "topic_join.resolved",
        roadmap_id=roadmap.roadmap_id,
        topic=roadmap.main_topic,
        quizzes=len(match.quizzes),
        attempts=len(match.attempts),
    )
    return match
