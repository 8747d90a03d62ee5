"""
Database engine and session management.

One engine serves the app and the jobs. Ledger and catalog writes go
through SqlAlchemyStore, which opens its own committed session per call;
request-scoped sessions from get_session are only used for probes.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardtracker.config import settings
from cardtracker.models.db import Base


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for a database URL.

    For a file-backed SQLite URL the containing directory is created, so a
    fresh install can point CARDTRACKER_DATABASE_URL at e.g. data/cards.sqlite.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Read-only session dependency; nothing is committed."""
    async with async_session_factory() as session:
        yield session


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Create the catalog_documents and pending_entries tables if missing.

    Called by the app lifespan and by each job before touching the store.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
