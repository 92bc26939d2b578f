"""FastAPI application factory.

Read-only Web API over the pathway export pipeline.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from pathways import __version__
from pathways.config.app_config import load_app_config
from pathways.web.routes import health_router, pathways_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    logger.info("api_startup", db_path=str(app.state.db_path))
    yield


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Store to serve. Defaults to the configured store

    Returns:
        Configured FastAPI app instance
    """
    config = load_app_config()

    app = FastAPI(
        title="Pathway Export API",
        description="Read-only access to learner pathways and statistics",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db_path = db_path or config.store.db_path
    app.state.store_timeout = config.store.timeout_seconds

    app.include_router(health_router)
    app.include_router(pathways_router)

    return app


# Default app instance for uvicorn
app = create_app()
