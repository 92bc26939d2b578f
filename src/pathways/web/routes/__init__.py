"""Route handlers for Web API."""

from pathways.web.routes.health import router as health_router
from pathways.web.routes.pathways import router as pathways_router

__all__ = [
    "health_router",
    "pathways_router",
]
