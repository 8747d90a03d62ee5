"""
Database CRUD operations.

Provides async functions for storing the catalog document and for
appending, listing and deleting pending ledger rows.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.models.db import CatalogDocumentDB, PendingEntryDB
from cardtracker.models.pending import EntryTags, PendingDraft, PendingEntry

CATALOG_KEY = "data"

# --- Catalog Operations ---


async def put_catalog(session: AsyncSession, document: dict[str, Any]) -> CatalogDocumentDB:
    """
    Store the catalog document, replacing any previous one.
    """
    existing = await session.get(CatalogDocumentDB, CATALOG_KEY)
    if existing:
        existing.payload = document
        await session.flush()
        return existing

    row = CatalogDocumentDB(key=CATALOG_KEY, payload=document)
    session.add(row)
    await session.flush()
    return row


async def get_catalog(session: AsyncSession) -> dict[str, Any] | None:
    """
    Get the stored catalog document.

    Returns None if no catalog has been stored yet.
    """
    row = await session.get(CatalogDocumentDB, CATALOG_KEY)
    return dict(row.payload) if row else None


# --- Pending Ledger Operations ---


async def add_pending(session: AsyncSession, draft: PendingDraft, added_at: datetime) -> int:
    """
    Insert a pending entry.

    Returns the storage-issued id.
    """
    row = PendingEntryDB(
        action=draft.action,
        product=draft.product,
        set_name=draft.set,
        card_number=draft.card_number,
        parallel=draft.parallel,
        player=draft.player,
        team=draft.team,
        quantity=draft.quantity,
        serial_number=draft.serial_number,
        grade=draft.grade,
        notes=draft.notes,
        tags=draft.tags.to_dict(),
        added_at=added_at,
    )
    session.add(row)
    await session.flush()
    return row.id


async def get_all_pending(session: AsyncSession) -> list[PendingEntryDB]:
    """Get all pending entries in insertion (id) order."""
    result = await session.execute(select(PendingEntryDB).order_by(PendingEntryDB.id))
    return list(result.scalars().all())


async def delete_pending(session: AsyncSession, entry_id: int) -> bool:
    """
    Delete a pending entry by id.

    Returns True if a row was deleted, False if it did not exist.
    """
    result = await session.execute(delete(PendingEntryDB).where(PendingEntryDB.id == entry_id))
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


async def clear_all_pending(session: AsyncSession) -> int:
    """
    Delete every pending entry in one statement.

    Returns the number of deleted records.
    """
    result = await session.execute(delete(PendingEntryDB))
    return int(result.rowcount)  # type: ignore[attr-defined]


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on the way back out
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def pending_to_model(row: PendingEntryDB) -> PendingEntry:
    """Convert a database row to a domain model."""
    return PendingEntry(
        id=row.id,
        action="add",
        product=row.product,
        set=row.set_name,
        card_number=row.card_number,
        parallel=row.parallel,
        player=row.player,
        team=row.team,
        quantity=row.quantity,
        serial_number=row.serial_number,
        grade=row.grade,
        notes=row.notes,
        tags=EntryTags.from_dict(row.tags),
        added_at=_as_utc(row.added_at),
    )
