"""
Health check endpoints.

/health is a bare liveness probe. /ready checks the database and reports
what the tracker has restored: whether a catalog is loaded, how many
changes are waiting for export, and the session status.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.api.deps import get_tracker
from cardtracker.db.database import get_session
from cardtracker.services.tracker import CardTracker

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str


class ReadyResponse(BaseModel):
    status: str
    database: str
    catalog_loaded: bool
    pending: int
    session: str


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=ReadyResponse,
    responses={503: {"model": ReadyResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ReadyResponse:
    """
    Readiness probe.

    Returns 503 if the database is unreachable. A missing catalog does not
    make the service unready; the client is expected to upload one.
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        database = "disconnected"

    return ReadyResponse(
        status="ready" if database == "connected" else "not ready",
        database=database,
        catalog_loaded=tracker.catalog is not None,
        pending=len(tracker.ledger),
        session=tracker.session.status.value,
    )
