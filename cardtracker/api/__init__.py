from cardtracker.api.browse import router as browse_router
from cardtracker.api.catalog import router as catalog_router
from cardtracker.api.health import router as health_router
from cardtracker.api.locks import router as locks_router
from cardtracker.api.pending import router as pending_router
from cardtracker.api.session import router as session_router

__all__ = [
    "browse_router",
    "catalog_router",
    "health_router",
    "locks_router",
    "pending_router",
    "session_router",
]
