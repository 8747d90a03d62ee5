"""
Pending ledger endpoints.

List, delete, clear and export the changes waiting to be merged into the
desktop collection. Exporting never removes anything.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cardtracker.api.deps import get_tracker
from cardtracker.api.schemas import PendingEntryResponse
from cardtracker.core.ledger import export_filename
from cardtracker.models.failure import ApiResponse, create_success
from cardtracker.models.pending import ExportDocument
from cardtracker.services.tracker import CardTracker

router = APIRouter(prefix="/pending", tags=["pending"])


class PendingListResponse(BaseModel):
    count: int
    entries: list[PendingEntryResponse] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    """Response model for delete operations."""

    entry_id: int
    deleted: bool = Field(..., description="False when the id was not pending")


class ClearResponse(BaseModel):
    cleared: int


class ExportResponse(BaseModel):
    """Export document and the file name to save it under."""

    filename: str
    document: ExportDocument


@router.get("", response_model=ApiResponse[PendingListResponse])
async def list_pending(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """All pending entries, oldest first."""
    entries = tracker.pending()
    return create_success(
        PendingListResponse(
            count=len(entries),
            entries=[PendingEntryResponse.from_domain(e) for e in entries],
        )
    )


@router.delete("/{entry_id}", response_model=ApiResponse[DeleteResponse])
async def delete_pending(
    entry_id: int,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    existed = entry_id in tracker.ledger
    await tracker.delete_pending(entry_id)
    return create_success(DeleteResponse(entry_id=entry_id, deleted=existed))


@router.delete("", response_model=ApiResponse[ClearResponse])
async def clear_pending(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(ClearResponse(cleared=await tracker.clear_pending()))


@router.post("/export", response_model=ApiResponse[ExportResponse])
async def export_pending(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Build the export document for every pending entry."""
    document = tracker.export()
    return create_success(
        ExportResponse(
            filename=export_filename(len(document.changes), document.exported_at),
            document=document,
        )
    )
