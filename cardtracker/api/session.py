"""
Session capture endpoints.

Configure a session (product, sets, parallels, location), then capture
with one-tap adds, long-press capture sheets, and undo.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cardtracker.api.deps import get_tracker
from cardtracker.api.schemas import (
    CaptureAttributesModel,
    CaptureSheetResponse,
    ParallelResponse,
    PendingEntryResponse,
    SessionEntryResponse,
    SessionResponse,
)
from cardtracker.models.failure import ApiResponse, create_success
from cardtracker.services.tracker import CardTracker

router = APIRouter(prefix="/session", tags=["session"])


class SessionSetupRequest(BaseModel):
    """Setup selections. Omitted fields clear the selection."""

    product: str | None = Field(default=None, examples=["2024 Topps"])
    sets: list[str] = Field(default_factory=list, examples=[["Base"]])
    parallels: list[str] = Field(default_factory=list, examples=[["Base", "Gold"]])
    location: str | None = Field(default=None, examples=["Box A"])


class NameRequest(BaseModel):
    name: str


class CardNumberRequest(BaseModel):
    card_number: str = Field(..., examples=["1"])


class SessionCaptureResponse(BaseModel):
    """The ledger row a capture wrote, and the session after it."""

    entry: PendingEntryResponse
    session: SessionResponse


class UndoResponse(BaseModel):
    """The capture that was undone, if any."""

    undone: SessionEntryResponse | None = None
    session: SessionResponse


class EndSessionResponse(BaseModel):
    entries: int = Field(..., description="Captures made during the session; they stay pending")
    session: SessionResponse


@router.get("", response_model=ApiResponse[SessionResponse])
async def get_session_state(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(SessionResponse.from_domain(tracker.session))


@router.post("/configure", response_model=ApiResponse[SessionResponse])
async def configure_session(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
    request: SessionSetupRequest | None = None,
) -> ApiResponse[Any]:
    """
    Open session setup and record the selections made so far.

    Can be called repeatedly while configuring.
    """
    tracker.configure_session()
    if request is not None:
        tracker.update_session_setup(
            product=request.product,
            sets=request.sets,
            parallels=request.parallels,
            location=request.location,
        )
    return create_success(SessionResponse.from_domain(tracker.session))


@router.get("/setup/parallels", response_model=ApiResponse[list[ParallelResponse]])
async def list_setup_parallels(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Parallels offered for the sets chosen so far, base first."""
    return create_success([ParallelResponse.from_domain(p) for p in tracker.setup_parallels()])


@router.post("/start", response_model=ApiResponse[SessionResponse])
async def start_session(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(SessionResponse.from_domain(tracker.start_session()))


@router.post("/active-set", response_model=ApiResponse[SessionResponse])
async def switch_active_set(
    request: NameRequest,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(SessionResponse.from_domain(tracker.switch_active_set(request.name)))


@router.post("/active-parallel", response_model=ApiResponse[SessionResponse])
async def switch_active_parallel(
    request: NameRequest,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(
        SessionResponse.from_domain(tracker.switch_active_parallel(request.name))
    )


@router.post("/tap", response_model=ApiResponse[SessionCaptureResponse])
async def tap_add(
    request: CardNumberRequest,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Record one copy of a card in the active set and parallel."""
    entry = await tracker.tap_add(request.card_number)
    return create_success(
        SessionCaptureResponse(
            entry=PendingEntryResponse.from_domain(entry),
            session=SessionResponse.from_domain(tracker.session),
        )
    )


@router.post("/long-press", response_model=ApiResponse[CaptureSheetResponse])
async def long_press(
    request: CardNumberRequest,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Open a full capture sheet for a card in the active set."""
    return create_success(CaptureSheetResponse.from_domain(tracker.long_press(request.card_number)))


@router.post("/sheet/confirm", response_model=ApiResponse[SessionCaptureResponse])
async def confirm_sheet(
    request: CaptureAttributesModel,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    entry = await tracker.confirm_sheet(request.to_domain(), from_session=True)
    return create_success(
        SessionCaptureResponse(
            entry=PendingEntryResponse.from_domain(entry),
            session=SessionResponse.from_domain(tracker.session),
        )
    )


@router.post("/undo", response_model=ApiResponse[UndoResponse])
async def undo(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Remove this session's most recent capture. A no-op when there is none."""
    removed = await tracker.undo()
    return create_success(
        UndoResponse(
            undone=SessionEntryResponse.from_domain(removed) if removed else None,
            session=SessionResponse.from_domain(tracker.session),
        )
    )


@router.post("/end", response_model=ApiResponse[EndSessionResponse])
async def end_session(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    count = await tracker.end_session()
    return create_success(
        EndSessionResponse(entries=count, session=SessionResponse.from_domain(tracker.session))
    )
