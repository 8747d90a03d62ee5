"""
Browse capture endpoints.

Open a capture sheet for any card in the catalog, confirm it into the
pending ledger, or dismiss it. Browse sheets are pre-filled from field locks
and write confirmed values back through to them.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cardtracker.api.deps import get_tracker
from cardtracker.api.schemas import (
    CaptureAttributesModel,
    CaptureSheetResponse,
    LocksResponse,
    PendingEntryResponse,
)
from cardtracker.models.failure import ApiResponse, create_success
from cardtracker.services.tracker import CardTracker

router = APIRouter(prefix="/browse", tags=["browse"])


class OpenSheetRequest(BaseModel):
    """Card to open a browse capture sheet for."""

    product: str = Field(..., examples=["2024 Topps"])
    set: str = Field(..., examples=["Base"])
    card_number: str = Field(..., examples=["1"])


class BrowseConfirmResponse(BaseModel):
    """The ledger row written, and the field locks after write-through."""

    entry: PendingEntryResponse
    locks: LocksResponse


class SheetClosedResponse(BaseModel):
    closed: bool


@router.post("/sheet", response_model=ApiResponse[CaptureSheetResponse])
async def open_sheet(
    request: OpenSheetRequest,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Open a capture sheet, replacing any sheet already open."""
    sheet = tracker.open_browse_sheet(request.product, request.set, request.card_number)
    return create_success(CaptureSheetResponse.from_domain(sheet))


@router.post("/sheet/confirm", response_model=ApiResponse[BrowseConfirmResponse])
async def confirm_sheet(
    request: CaptureAttributesModel,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """
    Confirm the open browse sheet.

    On failure the sheet stays open so the user can correct and retry.
    """
    entry = await tracker.confirm_sheet(request.to_domain(), from_session=False)
    return create_success(
        BrowseConfirmResponse(
            entry=PendingEntryResponse.from_domain(entry),
            locks=LocksResponse.from_domain(tracker.locks),
        )
    )


@router.delete("/sheet", response_model=ApiResponse[SheetClosedResponse])
async def close_sheet(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    closed = tracker.sheet is not None and not tracker.sheet.from_session
    if closed:
        tracker.close_sheet()
    return create_success(SheetClosedResponse(closed=closed))
