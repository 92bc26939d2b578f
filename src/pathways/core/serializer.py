"""Serializer module.

Renders export and statistics documents as indented JSON, and export
documents as a flattened CSV table with one row per
(user, roadmap, checkpoint).

CSV cell rules:
- strings are wrapped in double quotes, embedded quotes doubled
- None renders as an empty cell
- booleans render as true/false
- other values render unquoted with str()
"""

from __future__ import annotations

import json
from dataclasses import astuple, dataclass
from typing import Any, Protocol

from pathways.core.pathway_assembler import PathwayExport, UserExport

QUOTE = '"'

CSV_COLUMNS = (
    "userId",
    "userName",
    "userEmail",
    "roadmapId",
    "roadmapTopic",
    "roadmapProgress",
    "checkpointId",
    "checkpointTitle",
    "checkpointStatus",
    "checkpointOrder",
    "completedAt",
)


class Serializable(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


@dataclass
class TabularRow:
    """One flattened (user, roadmap, checkpoint) row.

    Field order matches CSV_COLUMNS.
    """

    user_id: str
    user_name: str
    user_email: str | None
    roadmap_id: str
    roadmap_topic: str
    roadmap_progress: float | None
    checkpoint_id: str
    checkpoint_title: str
    checkpoint_status: str
    checkpoint_order: int | None
    completed_at: str | None

    def values(self) -> tuple[Any, ...]:
        return astuple(self)


# =============================================================================
# JSON
# =============================================================================


def to_json(document: Serializable) -> str:
    """Render a document as two-space indented JSON."""
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False) + "\n"


# =============================================================================
# CSV
# =============================================================================


def flatten_export(document: PathwayExport | UserExport) -> list[TabularRow]:
    """Flatten an export document into rows.

    Roadmaps without checkpoints contribute no rows.
    """
    users = document.users if isinstance(document, PathwayExport) else [document]

    return [
        TabularRow(
            user_id=user.user_id,
            user_name=user.name,
            user_email=user.email,
            roadmap_id=roadmap.roadmap_id,
            roadmap_topic=roadmap.main_topic,
            roadmap_progress=roadmap.total_progress,
            checkpoint_id=checkpoint.checkpoint_id,
            checkpoint_title=checkpoint.title,
            checkpoint_status=checkpoint.status,
            checkpoint_order=checkpoint.order,
            completed_at=checkpoint.completed_at,
        )
        for user in users
        for roadmap in user.roadmaps
        for checkpoint in roadmap.checkpoints
    ]


def format_cell(value: Any) -> str:
    """Render a single CSV cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_csv(rows: list[TabularRow]) -> str:
    """Render rows as CSV text.

    Returns:
        Header line plus one line per row, or "" when there are no rows
    """
    if not rows:
        return ""

    lines = [",".join(CSV_COLUMNS)]
    lines.extend(",".join(format_cell(v) for v in row.values()) for row in rows)
    return "\n".join(lines)
