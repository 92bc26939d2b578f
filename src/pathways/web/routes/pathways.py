"""Pathway and statistics endpoints.

Read-only views of the export documents. Nothing is written to disk.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status

from pathways.core.pathway_assembler import assemble_all, assemble_one
from pathways.core.stats_calculator import compute_stats
from pathways.db.database import StoreError, open_store
from pathways.db.records_repository import UserNotFoundError
from pathways.web.schemas import (
    PathwayListResponse,
    StatsResponse,
    UserPathwayResponse,
)

router = APIRouter(prefix="/api", tags=["pathways"])


def get_store_settings(request: Request) -> tuple[Path, float]:
    """Store path and timeout configured on the app."""
    return request.app.state.db_path, request.app.state.store_timeout


def _store_unavailable(e: StoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Store error: {e}",
    )


@router.get("/pathways", response_model=PathwayListResponse)
def list_pathways(
    settings: tuple[Path, float] = Depends(get_store_settings),
) -> dict:
    """Export every user's pathway."""
    db_path, timeout = settings
    try:
        with open_store(db_path, timeout=timeout, read_only=True) as conn:
            return assemble_all(conn).to_dict()
    except StoreError as e:
        raise _store_unavailable(e)


@router.get("/pathways/{user_id}", response_model=UserPathwayResponse)
def get_pathway(
    user_id: str,
    settings: tuple[Path, float] = Depends(get_store_settings),
) -> dict:
    """Export one user's pathway."""
    db_path, timeout = settings
    try:
        with open_store(db_path, timeout=timeout, read_only=True) as conn:
            return assemble_one(conn, user_id).to_dict()
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )
    except StoreError as e:
        raise _store_unavailable(e)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    settings: tuple[Path, float] = Depends(get_store_settings),
) -> dict:
    """Compute corpus statistics."""
    db_path, timeout = settings
    try:
        with open_store(db_path, timeout=timeout, read_only=True) as conn:
            return compute_stats(conn).to_dict()
    except StoreError as e:
        raise _store_unavailable(e)
