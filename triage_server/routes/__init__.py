"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .decisions import router as decisions_router
from .queue import router as queue_router
from .root import router as root_router
from .stats import router as stats_router
from .trash import router as trash_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(queue_router, prefix="/api/queue", tags=["queue"])
    app.include_router(decisions_router, prefix="/api/decisions", tags=["decisions"])
    app.include_router(trash_router, prefix="/api/trash", tags=["trash"])
    app.include_router(stats_router, prefix="/api", tags=["stats"])
