from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardtracker.api import (
    browse_router,
    catalog_router,
    health_router,
    locks_router,
    pending_router,
    session_router,
)
from cardtracker.api.error_handlers import register_error_handlers
from cardtracker.config import settings
from cardtracker.db.database import async_session_factory, init_db
from cardtracker.db.store import SqlAlchemyStore
from cardtracker.logging_setup import configure_logging
from cardtracker.services.tracker import CardTracker


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_logging(settings.log_level)
    await init_db()

    tracker = CardTracker(SqlAlchemyStore(async_session_factory))
    await tracker.restore()
    app.state.tracker = tracker
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardtracker"),
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(browse_router)
app.include_router(catalog_router)
app.include_router(health_router)
app.include_router(locks_router)
app.include_router(pending_router)
app.include_router(session_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
