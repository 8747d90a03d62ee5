"""
Durable store boundary.

The ledger and controller only ever talk to a DurableStore. Every method
is a suspension point; callers must not assume synchronous completion.

SqlAlchemyStore runs each call in its own committed session, so a call
that returns has been durably applied and a call that raises has not.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardtracker.db import operations
from cardtracker.models.failure import StorageError
from cardtracker.models.pending import PendingDraft, PendingEntry

logger = logging.getLogger(__name__)


class DurableStore(Protocol):
    """Asynchronous keyed store for the catalog document and pending ledger."""

    async def put_catalog(self, document: dict[str, Any]) -> None: ...

    async def get_catalog(self) -> dict[str, Any] | None: ...

    async def add_pending(self, draft: PendingDraft) -> int: ...

    async def get_all_pending(self) -> list[PendingEntry]: ...

    async def delete_pending(self, entry_id: int) -> None: ...

    async def clear_all_pending(self) -> None: ...


class SqlAlchemyStore:
    """
    DurableStore backed by an async SQLAlchemy session factory.

    SQLAlchemy errors are logged and re-raised as StorageError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except SQLAlchemyError:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            logger.exception("storage_failed", extra={"operation": operation})
            raise StorageError(operation, detail=type(e).__name__) from e

    async def put_catalog(self, document: dict[str, Any]) -> None:
        async with self._transaction("put_catalog") as session:
            await operations.put_catalog(session, document)

    async def get_catalog(self) -> dict[str, Any] | None:
        async with self._transaction("get_catalog") as session:
            return await operations.get_catalog(session)

    async def add_pending(self, draft: PendingDraft) -> int:
        added_at = draft.added_at or datetime.now(UTC)
        async with self._transaction("add_pending") as session:
            return await operations.add_pending(session, draft, added_at)

    async def get_all_pending(self) -> list[PendingEntry]:
        async with self._transaction("get_all_pending") as session:
            rows = await operations.get_all_pending(session)
            return [operations.pending_to_model(row) for row in rows]

    async def delete_pending(self, entry_id: int) -> None:
        async with self._transaction("delete_pending") as session:
            await operations.delete_pending(session, entry_id)

    async def clear_all_pending(self) -> None:
        async with self._transaction("clear_all_pending") as session:
            await operations.clear_all_pending(session)
