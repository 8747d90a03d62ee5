"""
Field lock endpoints.

Locks pin a capture field's value across browse captures until unlocked.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cardtracker.api.deps import get_tracker
from cardtracker.api.schemas import LocksResponse
from cardtracker.core.locks import LockField
from cardtracker.models.failure import ApiResponse, create_success
from cardtracker.services.tracker import CardTracker

router = APIRouter(prefix="/locks", tags=["locks"])


class ToggleLockRequest(BaseModel):
    """Value to lock the field to. Defaults to the open sheet's value."""

    value: str | None = Field(default=None, examples=["Box A"])


@router.get("", response_model=ApiResponse[LocksResponse])
async def get_locks(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(LocksResponse.from_domain(tracker.locks))


@router.post("/{lock_field}/toggle", response_model=ApiResponse[LocksResponse])
async def toggle_lock(
    lock_field: LockField,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
    request: ToggleLockRequest | None = None,
) -> ApiResponse[Any]:
    """Lock an unlocked field, or unlock a locked one."""
    value = request.value if request is not None else None
    return create_success(LocksResponse.from_domain(tracker.toggle_lock(lock_field, value)))


@router.delete("", response_model=ApiResponse[LocksResponse])
async def unlock_all(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(LocksResponse.from_domain(tracker.unlock_all()))
