"""
Pending Ledger models.

A PendingEntry is one staged "card found" event waiting to be exported
back to the desktop app. Entries are created only by a successful ledger
append and are never updated in place.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from cardtracker.config import EXPORT_FORMAT_VERSION


@dataclass(frozen=True, slots=True)
class EntryTags:
    """Optional tag values attached to a capture. Empty values are omitted on export."""

    location: str | None = None
    price_bucket: str | None = None
    status: str | None = None

    def to_dict(self) -> dict[str, str]:
        tags: dict[str, str] = {}
        if self.location:
            tags["location"] = self.location
        if self.price_bucket:
            tags["price_bucket"] = self.price_bucket
        if self.status:
            tags["status"] = self.status
        return tags

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "EntryTags":
        raw = raw or {}
        return cls(
            location=raw.get("location") or None,
            price_bucket=raw.get("price_bucket") or None,
            status=raw.get("status") or None,
        )


@dataclass(frozen=True, slots=True)
class PendingDraft:
    """
    A fully-resolved capture that has not been written yet.

    Has no id: ids are issued by the durable store on append.
    """

    product: str
    set: str
    card_number: str
    parallel: str
    player: str
    team: str
    quantity: int = 1
    serial_number: str | None = None
    grade: str | None = None
    notes: str | None = None
    tags: EntryTags = field(default_factory=EntryTags)
    added_at: datetime | None = None
    action: Literal["add"] = "add"


@dataclass(frozen=True, slots=True)
class PendingEntry:
    """A ledger row. `id` is storage-issued, unique, monotonic and never reused."""

    id: int
    product: str
    set: str
    card_number: str
    parallel: str
    player: str
    team: str
    quantity: int
    serial_number: str | None
    grade: str | None
    notes: str | None
    tags: EntryTags
    added_at: datetime
    action: Literal["add"] = "add"

    @classmethod
    def from_draft(cls, entry_id: int, draft: PendingDraft, added_at: datetime) -> "PendingEntry":
        return cls(
            id=entry_id,
            product=draft.product,
            set=draft.set,
            card_number=draft.card_number,
            parallel=draft.parallel,
            player=draft.player,
            team=draft.team,
            quantity=draft.quantity,
            serial_number=draft.serial_number,
            grade=draft.grade,
            notes=draft.notes,
            tags=draft.tags,
            added_at=added_at,
            action=draft.action,
        )


class ExportChange(BaseModel):
    """One change line in an export document."""

    action: str
    product: str
    set: str
    card_number: str
    parallel: str
    quantity: int
    serial_number: str | None = None
    grade: str | None = None
    notes: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)


class ExportDocument(BaseModel):
    """
    The document handed back to the desktop app.

    One change per ledger row at export time, in ledger order.
    """

    format_version: int = EXPORT_FORMAT_VERSION
    export_id: str
    exported_at: datetime
    changes: list[ExportChange]
