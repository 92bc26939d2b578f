"""Statistics calculator module.

Computes corpus-wide totals, performance metrics and the quiz domain
distribution, independently of any per-user export.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog

from pathways.db.stats_repository import (
    COUNTABLE_TABLES,
    count_checkpoints_with_status,
    count_entities,
    count_quizzes_by_domain,
    list_attempt_scores,
    list_roadmap_progress,
)

logger = structlog.get_logger(__name__)

COMPLETED_STATUS = "completed"

TWO_PLACES = Decimal("0.01")


@dataclass
class Totals:
    """Raw entity counts."""

    users: int = 0
    roadmaps: int = 0
    quizzes: int = 0
    checkpoints: int = 0
    quiz_attempts: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "users": self.users,
            "roadmaps": self.roadmaps,
            "quizzes": self.quizzes,
            "checkpoints": self.checkpoints,
            "quizAttempts": self.quiz_attempts,
        }


@dataclass
class PerformanceMetrics:
    """Derived metrics, already rounded to two decimals."""

    checkpoint_completion_rate: float = 0.0
    average_roadmap_progress: float = 0.0
    average_quiz_score: float = 0.0

    def to_dict(self) -> dict[str, str]:
        return {
            "checkpointCompletionRate": f"{self.checkpoint_completion_rate:.2f}%",
            "averageRoadmapProgress": f"{self.average_roadmap_progress:.2f}",
            "averageQuizScore": f"{self.average_quiz_score:.2f}",
        }


@dataclass
class DomainCount:
    """Number of quizzes in one domain."""

    domain: str | None
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"domain": self.domain, "count": self.count}


@dataclass
class PathwayStats:
    """Statistics document."""

    generated_at: str
    totals: Totals = field(default_factory=Totals)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    domain_distribution: list[DomainCount] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generatedAt": self.generated_at,
            "totals": self.totals.to_dict(),
            "performance": self.performance.to_dict(),
            "domainDistribution": [d.to_dict() for d in self.domain_distribution],
        }


def round_half_up(value: float) -> float:
    """Round to two decimals, ties away from zero (7.625 -> 7.63).

    Works on the exact binary value of the float, not its repr.
    """
    return float(Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def completion_rate(completed: int, total: int) -> float:
    """Percentage of completed items, 0 when there are none."""
    if total <= 0:
        return 0.0
    return round_half_up(completed / total * 100)


def safe_average(values: list[float | None]) -> float:
    """Arithmetic mean with None counted as 0, 0 for an empty list."""
    if not values:
        return 0.0
    return round_half_up(sum(v or 0 for v in values) / len(values))


def compute_stats(conn: sqlite3.Connection, now: datetime | None = None) -> PathwayStats:
    """Compute the statistics document.

    Args:
        conn: Open store connection
        now: Generation timestamp. Defaults to current UTC time

    Returns:
        PathwayStats with totals, performance metrics and domain distribution
    """
    counts = {entity: count_entities(conn, entity) for entity in COUNTABLE_TABLES}
    totals = Totals(
        users=counts["users"],
        roadmaps=counts["roadmaps"],
        quizzes=counts["quizzes"],
        checkpoints=counts["checkpoints"],
        quiz_attempts=counts["quizAttempts"],
    )

    completed = count_checkpoints_with_status(conn, COMPLETED_STATUS)
    performance = PerformanceMetrics(
        checkpoint_completion_rate=completion_rate(completed, totals.checkpoints),
        average_roadmap_progress=safe_average(list_roadmap_progress(conn)),
        average_quiz_score=safe_average(list_attempt_scores(conn)),
    )

    stats = PathwayStats(
        generated_at=(now or datetime.now(timezone.utc)).isoformat(),
        totals=totals,
        performance=performance,
        domain_distribution=[
            DomainCount(domain=domain, count=count)
            for domain, count in count_quizzes_by_domain(conn)
        ],
    )

    logger.info(
        "stats.computed",
        **totals.to_dict(),
        **performance.to_dict(),
    )
    return stats
