"""
Pending Ledger.

An ordered cache of pending entries kept in lockstep with a DurableStore.

INVARIANTS:
- The store is the source of truth for row existence
- The cache changes only after the store call resolves; a failed call
  raises and leaves the cache exactly as it was
- list_all() is insertion order as issued by the store, never re-sorted
- Exporting is a pure projection and never mutates the ledger
"""

import logging
import uuid
from dataclasses import replace
from datetime import UTC, datetime

from cardtracker.config import EXPORT_FORMAT_VERSION
from cardtracker.db.store import DurableStore
from cardtracker.models.failure import EmptyExportError
from cardtracker.models.pending import (
    ExportChange,
    ExportDocument,
    PendingDraft,
    PendingEntry,
)

logger = logging.getLogger(__name__)


class PendingLedger:
    """
    Pending entries backed by durable storage.

    Usage:
        ledger = PendingLedger(store)
        await ledger.load()
        entry = await ledger.append(draft)
        await ledger.delete_by_id(entry.id)
    """

    def __init__(self, store: DurableStore) -> None:
        self._store = store
        self._entries: list[PendingEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return any(entry.id == entry_id for entry in self._entries)

    async def load(self) -> None:
        """Replace the cache with the store's current rows."""
        self._entries = await self._store.get_all_pending()
        logger.info("pending_loaded", extra={"count": len(self._entries)})

    async def append(self, draft: PendingDraft) -> PendingEntry:
        """
        Write a new entry and return it with its storage-issued id.

        Raises:
            StorageError: If the store rejects the write (cache unchanged)
        """
        added_at = draft.added_at or datetime.now(UTC)
        draft = replace(draft, added_at=added_at)
        entry_id = await self._store.add_pending(draft)

        entry = PendingEntry.from_draft(entry_id, draft, added_at)
        self._entries.append(entry)

        logger.info(
            "pending_appended",
            extra={
                "entry_id": entry_id,
                "card": f"{draft.product}|{draft.set}|{draft.card_number}",
                "parallel": draft.parallel,
                "quantity": draft.quantity,
            },
        )
        return entry

    async def delete_by_id(self, entry_id: int) -> None:
        """
        Delete an entry. Deleting an id that is not present is a no-op.

        Raises:
            StorageError: If the store rejects the delete (cache unchanged)
        """
        await self._store.delete_pending(entry_id)
        self._entries = [entry for entry in self._entries if entry.id != entry_id]
        logger.info("pending_deleted", extra={"entry_id": entry_id})

    async def clear(self) -> None:
        """
        Wipe every entry in one store operation.

        Raises:
            StorageError: If the store rejects the wipe (cache unchanged)
        """
        await self._store.clear_all_pending()
        cleared = len(self._entries)
        self._entries = []
        logger.info("pending_cleared", extra={"count": cleared})

    def list_all(self) -> list[PendingEntry]:
        """All current entries in insertion order."""
        return list(self._entries)

    def get(self, entry_id: int) -> PendingEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None


# =============================================================================
# EXPORT
# =============================================================================


def build_export(
    entries: list[PendingEntry],
    export_id: str | None = None,
    exported_at: datetime | None = None,
) -> ExportDocument:
    """
    Project ledger entries into an export document.

    One change per entry, same order, no deduplication. The ledger is not
    touched, so a failed or abandoned export can simply be retried.

    Raises:
        EmptyExportError: If there are no entries
    """
    if not entries:
        raise EmptyExportError()

    return ExportDocument(
        format_version=EXPORT_FORMAT_VERSION,
        export_id=export_id or str(uuid.uuid4()),
        exported_at=exported_at or datetime.now(UTC),
        changes=[
            ExportChange(
                action=entry.action,
                product=entry.product,
                set=entry.set,
                card_number=entry.card_number,
                parallel=entry.parallel,
                quantity=entry.quantity,
                serial_number=entry.serial_number,
                grade=entry.grade,
                notes=entry.notes,
                tags=entry.tags.to_dict(),
            )
            for entry in entries
        ],
    )


def export_filename(count: int, now: datetime | None = None) -> str:
    """File name for an export: cards_<date>_<HHMM>_<count>ch.json"""
    now = now or datetime.now()
    return f"cards_{now:%Y-%m-%d}_{now:%H%M}_{count}ch.json"
