"""Health check endpoint.

Reports the API version and whether the configured store can be opened.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from pathways import __version__
from pathways.db.database import StoreError, open_store
from pathways.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """Check API and store status."""
    store = "ok"
    try:
        with open_store(
            request.app.state.db_path,
            timeout=request.app.state.store_timeout,
            read_only=True,
        ) as conn:
            conn.execute("SELECT 1 FROM users LIMIT 1").fetchall()
    except StoreError:
        store = "unavailable"

    return HealthResponse(
        status="ok" if store == "ok" else "degraded",
        store=store,
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
