"""
Card tracker controller.

CardTracker is the single application-state object: loaded catalog, owned
aggregate, pending ledger, field locks, session, and the open capture
sheet. The HTTP layer holds one instance and calls into it; nothing here
is a module global.

Storage effects returned by the pure core are performed here, one at a
time, under a write lock. That serializes every ledger mutation, so an
undo issued right after a tap waits for the tap's append to resolve
before it deletes anything.
"""

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from cardtracker.core import session as session_engine
from cardtracker.core.capture import (
    BrowseContext,
    CaptureAttributes,
    CaptureSheet,
    SessionContext,
    confirm_capture,
    open_capture,
)
from cardtracker.core.effects import AppendPending, ClearPending, DeletePending, Effect
from cardtracker.core.ledger import PendingLedger, build_export
from cardtracker.core.locks import FieldLocks, LockField
from cardtracker.core.session import SessionMirror, SessionState, SessionStatus
from cardtracker.db.store import DurableStore
from cardtracker.models.catalog import CardSet, Catalog, Parallel, Product, load_catalog
from cardtracker.models.failure import InvalidStateError, NotFoundError, ValidationError
from cardtracker.models.owned import OwnedEntry, build_owned_aggregate
from cardtracker.models.pending import ExportDocument, PendingEntry
from cardtracker.services.catalog_browse import CatalogSummary, summarize_catalog

logger = logging.getLogger(__name__)


class CardTracker:
    """
    Application state and the operations that move it.

    Usage:
        tracker = CardTracker(store)
        await tracker.restore()
        await tracker.load_catalog(document)
        tracker.configure_session()
        tracker.update_session_setup(product="2024 Topps", sets=["Base"], ...)
        tracker.start_session()
        await tracker.tap_add("1")
        await tracker.undo()
    """

    def __init__(self, store: DurableStore) -> None:
        self._store = store
        self._write_lock = asyncio.Lock()

        self.catalog: Catalog | None = None
        self.owned: dict[str, OwnedEntry] = {}
        self.ledger = PendingLedger(store)
        self.locks = FieldLocks()
        self.session = SessionState()
        self.sheet: CaptureSheet | None = None

    # --- Startup / catalog ---

    async def restore(self) -> None:
        """Reload the stored catalog and the pending ledger."""
        document = await self._store.get_catalog()
        if document is not None:
            try:
                self._install_catalog(load_catalog(document))
            except ValidationError as e:
                logger.warning("stored_catalog_invalid", extra={"detail": e.detail})
        await self.ledger.load()

    async def load_catalog(self, document: Mapping[str, Any]) -> CatalogSummary:
        """
        Validate, store and activate a catalog document.

        Validation happens before anything is written, so a bad document
        leaves the current catalog in place.

        Raises:
            InvalidCatalogError: If products or tags is missing
            ValidationError: If the document is otherwise malformed
            StorageError: If the document could not be stored
        """
        catalog = load_catalog(document)
        async with self._write_lock:
            await self._store.put_catalog(dict(document))
            self._install_catalog(catalog)

        summary = self.catalog_summary()
        logger.info(
            "catalog_loaded",
            extra={"products": summary.products, "cards": summary.cards, "owned": summary.owned},
        )
        return summary

    def _install_catalog(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.owned = build_owned_aggregate(catalog)
        self.sheet = None
        if self.session.status is SessionStatus.CONFIGURING:
            self.session = SessionState(status=SessionStatus.CONFIGURING)

    def require_catalog(self) -> Catalog:
        if self.catalog is None:
            raise InvalidStateError("Load a catalog first.")
        return self.catalog

    def catalog_summary(self) -> CatalogSummary:
        return summarize_catalog(self.require_catalog(), self.owned)

    def find_product(self, name: str) -> Product:
        product = self.require_catalog().find_product(name)
        if product is None:
            raise NotFoundError("Product", name)
        return product

    def find_set(self, product_name: str, set_name: str) -> tuple[Product, CardSet]:
        product = self.find_product(product_name)
        card_set = product.find_set(set_name)
        if card_set is None:
            raise NotFoundError("Set", set_name)
        return product, card_set

    # --- Effects ---

    async def _append(self, effect: Effect) -> PendingEntry:
        if not isinstance(effect, AppendPending):
            raise TypeError(f"Expected an append effect, got {effect!r}")
        return await self.ledger.append(effect.draft)

    async def _perform(self, effect: Effect) -> None:
        if isinstance(effect, DeletePending):
            await self.ledger.delete_by_id(effect.entry_id)
        elif isinstance(effect, ClearPending):
            await self.ledger.clear()
        else:
            raise TypeError(f"Unknown effect: {effect!r}")

    # --- Capture sheet ---

    def open_browse_sheet(self, product_name: str, set_name: str, card_number: str) -> CaptureSheet:
        """
        Open a browse-mode capture sheet for a card, pre-filled from locks.

        Raises:
            NotFoundError: If the product, set or card does not exist
            NoParallelsError: If the set defines no parallels
        """
        product, card_set = self.find_set(product_name, set_name)
        card = card_set.find_card(card_number)
        if card is None:
            raise NotFoundError("Card", f"{set_name} #{card_number}")

        self.sheet = open_capture(card, BrowseContext(product=product, card_set=card_set), self.locks)
        return self.sheet

    def require_sheet(self) -> CaptureSheet:
        if self.sheet is None:
            raise InvalidStateError("No capture sheet is open.")
        return self.sheet

    def close_sheet(self) -> None:
        self.sheet = None

    async def confirm_sheet(
        self,
        attributes: CaptureAttributes,
        from_session: bool | None = None,
    ) -> PendingEntry:
        """
        Confirm the open capture sheet.

        On success the sheet closes. A session sheet mirrors the new row into
        the session; a browse sheet writes the confirmed values through to
        every locked field. On failure nothing changes and the sheet stays open.

        When from_session is given, the open sheet must have been opened from
        that context.

        Raises:
            InvalidStateError: If no sheet is open, or it is from the other context
            MissingParallelError: If no parallel is selected
            StorageError: If the append fails
        """
        async with self._write_lock:
            sheet = self.require_sheet()
            if from_session is not None and sheet.from_session != from_session:
                raise InvalidStateError("The open capture sheet belongs to another mode.")
            draft = confirm_capture(sheet, attributes)
            entry = await self._append(AppendPending(draft=draft))

            if isinstance(sheet.context, SessionContext):
                self.session = session_engine.record_entry(
                    self.session,
                    SessionMirror(
                        card_number=entry.card_number,
                        set=entry.set,
                        parallel=entry.parallel,
                        id=entry.id,
                    ),
                )
            else:
                self.locks = self.locks.write_through(attributes.lockable_values())

            if self.sheet is sheet:
                self.sheet = None
            return entry

    # --- Field locks ---

    def toggle_lock(self, lock_field: LockField, current_value: str | None = None) -> FieldLocks:
        """
        Lock a field to its current value, or unlock it.

        When current_value is omitted, the open browse sheet's initial value
        for the field is used.

        Raises:
            InvalidStateError: If a session capture sheet is open
        """
        if self.sheet is not None and self.sheet.from_session:
            raise InvalidStateError("Field locks apply to browse captures only.")

        if current_value is None and self.sheet is not None:
            current_value = self.sheet.initial.lockable_values()[lock_field]
        self.locks = self.locks.toggle(lock_field, current_value)
        logger.debug(
            "field_lock_toggled",
            extra={"field": lock_field.value, "locked": self.locks.is_locked(lock_field)},
        )
        return self.locks

    def unlock_all(self) -> FieldLocks:
        self.locks = self.locks.unlock_all()
        return self.locks

    # --- Session ---

    def configure_session(self) -> SessionState:
        self.require_catalog()
        self.session = session_engine.configure(self.session)
        return self.session

    def update_session_setup(
        self,
        product: str | None = None,
        sets: list[str] | tuple[str, ...] = (),
        parallels: list[str] | tuple[str, ...] = (),
        location: str | None = None,
    ) -> SessionState:
        self.session = session_engine.update_setup(
            self.session,
            self.require_catalog(),
            product=product,
            sets=sets,
            parallels=parallels,
            location=location,
        )
        return self.session

    def setup_parallels(self) -> list[Parallel]:
        """Parallels offered for the sets currently chosen in setup."""
        setup = self.session.setup
        if not setup.product:
            return []
        return session_engine.setup_parallels(self.find_product(setup.product), setup.sets)

    def start_session(self) -> SessionState:
        self.session = session_engine.start_session(self.session, self.require_catalog())
        logger.info(
            "session_started",
            extra={
                "product": self.session.product.name if self.session.product else None,
                "sets": list(self.session.selected_sets),
                "parallels": list(self.session.selected_parallels),
                "location": self.session.location,
            },
        )
        return self.session

    def switch_active_set(self, set_name: str) -> SessionState:
        self.session = session_engine.switch_active_set(self.session, set_name)
        return self.session

    def switch_active_parallel(self, name: str) -> SessionState:
        self.session = session_engine.switch_active_parallel(self.session, name)
        return self.session

    async def tap_add(self, card_number: str) -> PendingEntry:
        """
        One-tap capture in the active set and parallel.

        Raises:
            InvalidStateError: If no session is running
            NotFoundError: If the card is not in the active set
            MissingParallelError: If the active set has none of the selected parallels
            StorageError: If the append fails (session unchanged)
        """
        async with self._write_lock:
            transition = session_engine.tap_add(self.session, card_number)
            (effect,) = transition.effects
            entry = await self._append(effect)

            self.session = session_engine.record_entry(
                self.session,
                SessionMirror(
                    card_number=entry.card_number,
                    set=entry.set,
                    parallel=entry.parallel,
                    id=entry.id,
                ),
            )
            return entry

    def long_press(self, card_number: str) -> CaptureSheet:
        """Open a full capture sheet for a card in the active set."""
        card, context = session_engine.long_press_context(self.session, card_number)
        self.sheet = open_capture(card, context)
        return self.sheet

    async def undo(self) -> SessionMirror | None:
        """
        Remove this session's most recent capture from the ledger.

        Returns the removed mirror, or None when there was nothing to undo.

        Raises:
            StorageError: If the delete fails (session unchanged)
        """
        async with self._write_lock:
            transition = session_engine.undo(self.session)
            if not transition.effects:
                return None

            last = self.session.entries[-1]
            for effect in transition.effects:
                await self._perform(effect)
            self.session = session_engine.drop_entry(self.session, last.id)
            logger.info("session_undo", extra={"entry_id": last.id})
            return last

    async def end_session(self) -> int:
        """
        End the session, returning how many captures it made.

        Waits for any in-flight write first. Ledger rows are kept.
        """
        async with self._write_lock:
            count = self.session.entry_count
            if self.sheet is not None and self.sheet.from_session:
                self.sheet = None
            self.session = session_engine.end_session(self.session)
        logger.info("session_ended", extra={"entries": count})
        return count

    def badge_counts(self) -> dict[str, int]:
        return session_engine.badge_counts(self.session)

    # --- Pending ledger ---

    def pending(self) -> list[PendingEntry]:
        return self.ledger.list_all()

    async def delete_pending(self, entry_id: int) -> None:
        async with self._write_lock:
            await self._perform(DeletePending(entry_id=entry_id))

    async def clear_pending(self) -> int:
        async with self._write_lock:
            count = len(self.ledger)
            await self._perform(ClearPending())
            return count

    def export(self, export_id: str | None = None, now: datetime | None = None) -> ExportDocument:
        """
        Build the export document for the current ledger. The ledger is kept.

        Raises:
            EmptyExportError: If the ledger is empty
        """
        document = build_export(self.ledger.list_all(), export_id=export_id, exported_at=now)
        logger.info(
            "pending_exported",
            extra={"export_id": document.export_id, "changes": len(document.changes)},
        )
        return document
