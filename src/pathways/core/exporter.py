"""Export orchestrator.

Top-level operations, each producing its own artifacts:
- export_all: every user's pathway as JSON
- export_user: one user's pathway as JSON
- export_stats: corpus statistics as JSON
- export_with_format: export_all or export_user, plus CSV on request

Artifact names carry the UTC date of the invocation:
- pathway_data_{date}.json / .csv
- user_pathway_{name}_{user_id}_{date}.json
- user_pathway_{user_id}_{date}.csv
- pathway_stats_{date}.json
"""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import structlog

from pathways.config.app_config import SUPPORTED_FORMATS
from pathways.core.export_sink import write_artifact
from pathways.core.pathway_assembler import (
    PathwayExport,
    UserExport,
    assemble_all,
    assemble_one,
)
from pathways.core.serializer import flatten_export, to_csv, to_json
from pathways.core.stats_calculator import PathwayStats, compute_stats

logger = structlog.get_logger(__name__)


@dataclass
class ExportResult:
    """Result of an export operation."""

    document: PathwayExport | UserExport
    paths: list[Path] = field(default_factory=list)


@dataclass
class StatsResult:
    """Result of a statistics operation."""

    stats: PathwayStats
    path: Path


# =============================================================================
# FILE NAMES
# =============================================================================


def _date_stamp(now: datetime) -> str:
    return now.date().isoformat()


def sanitize_name(name: str) -> str:
    """Collapse whitespace runs to a single underscore."""
    return re.sub(r"\s+", "_", name)


def pathway_file_name(now: datetime, extension: str = "json") -> str:
    return f"pathway_data_{_date_stamp(now)}.{extension}"


def user_file_name(user_name: str, user_id: str, now: datetime) -> str:
    return f"user_pathway_{sanitize_name(user_name)}_{user_id}_{_date_stamp(now)}.json"


def user_csv_file_name(user_id: str, now: datetime) -> str:
    return f"user_pathway_{user_id}_{_date_stamp(now)}.csv"


def stats_file_name(now: datetime) -> str:
    return f"pathway_stats_{_date_stamp(now)}.json"


# =============================================================================
# OPERATIONS
# =============================================================================


def export_all(
    conn: sqlite3.Connection,
    output_dir: Path,
    now: datetime | None = None,
) -> ExportResult:
    """Export every user's pathway to a JSON artifact.

    Args:
        conn: Open store connection
        output_dir: Directory receiving the artifact
        now: Invocation timestamp. Defaults to current UTC time

    Returns:
        ExportResult with the document and the written path
    """
    now = now or datetime.now(timezone.utc)
    logger.info("export.started", scope="all")

    try:
        document = assemble_all(conn, now)
        path = write_artifact(output_dir, pathway_file_name(now), to_json(document))
    except Exception as e:
        logger.error("export.failed", scope="all", error=str(e))
        raise

    logger.info("export.completed", scope="all", path=str(path), total_users=document.total_users)
    return ExportResult(document=document, paths=[path])


def export_user(
    conn: sqlite3.Connection,
    user_id: str,
    output_dir: Path,
    now: datetime | None = None,
) -> ExportResult:
    """Export one user's pathway to a JSON artifact.

    Raises:
        UserNotFoundError: If no user has this id
    """
    now = now or datetime.now(timezone.utc)
    logger.info("export.started", scope="user", user_id=user_id)

    try:
        document = assemble_one(conn, user_id, now)
        path = write_artifact(
            output_dir,
            user_file_name(document.name, user_id, now),
            to_json(document),
        )
    except Exception as e:
        logger.error("export.failed", scope="user", user_id=user_id, error=str(e))
        raise

    logger.info("export.completed", scope="user", user_id=user_id, path=str(path))
    return ExportResult(document=document, paths=[path])


def export_stats(
    conn: sqlite3.Connection,
    output_dir: Path,
    now: datetime | None = None,
) -> StatsResult:
    """Compute corpus statistics and write them to a JSON artifact."""
    now = now or datetime.now(timezone.utc)

    try:
        stats = compute_stats(conn, now)
        path = write_artifact(output_dir, stats_file_name(now), to_json(stats))
    except Exception as e:
        logger.error("stats.failed", error=str(e))
        raise

    logger.info("stats.saved", path=str(path))
    return StatsResult(stats=stats, path=path)


def export_with_format(
    conn: sqlite3.Connection,
    output_dir: Path,
    fmt: str = "json",
    user_id: str | None = None,
    now: datetime | None = None,
) -> ExportResult:
    """Export all users or one user, adding a CSV artifact for fmt="csv".

    The JSON artifact is always written.

    Raises:
        ValueError: If fmt is not a supported format
        UserNotFoundError: If user_id is given and does not resolve
    """
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Unsupported format: {fmt} (expected one of {', '.join(SUPPORTED_FORMATS)})"
        )

    now = now or datetime.now(timezone.utc)

    if user_id is not None:
        result = export_user(conn, user_id, output_dir, now)
    else:
        result = export_all(conn, output_dir, now)

    if fmt == "csv":
        rows = flatten_export(result.document)
        if user_id is not None:
            csv_name = user_csv_file_name(user_id, now)
        else:
            csv_name = pathway_file_name(now, "csv")
        try:
            csv_path = write_artifact(output_dir, csv_name, to_csv(rows))
        except Exception as e:
            logger.error("export.csv_failed", error=str(e))
            raise
        result.paths.append(csv_path)
        logger.info("export.csv_saved", path=str(csv_path), rows=len(rows))

    return result
