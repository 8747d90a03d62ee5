"""
Session Engine.

A session scopes rapid capture to one product, a subset of its sets, a
subset of their parallels and one location. Tapping a card records one
copy in the active (set, parallel); long-pressing opens a full capture
sheet; undo removes this session's last capture.

States:
    UNINITIALIZED -> CONFIGURING -> ACTIVE -> UNINITIALIZED

Every function here is pure. Functions that need storage return a
Transition carrying the effect to perform; the caller applies the matching
follow-up (record_entry / drop_entry) only after the effect resolves.

INVARIANTS:
- active_parallel is always in (selected_parallels ∩ active set parallels),
  or None when that intersection is empty
- entries mirror exactly the ledger rows this session created and that
  have not been undone, in creation order
- Ending a session never touches the ledger
- Session state is never persisted
"""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum

from cardtracker.core.capture import SessionContext
from cardtracker.core.effects import AppendPending, DeletePending, Transition
from cardtracker.models.catalog import Card, CardSet, Catalog, Parallel, Product
from cardtracker.models.failure import (
    InvalidStateError,
    MissingParallelError,
    MissingSelectionError,
    NotFoundError,
)
from cardtracker.models.pending import EntryTags, PendingDraft


class SessionStatus(str, Enum):
    """Session lifecycle state."""

    UNINITIALIZED = "uninitialized"
    CONFIGURING = "configuring"
    ACTIVE = "active"


@dataclass(frozen=True, slots=True)
class SessionMirror:
    """A ledger row created by this session."""

    card_number: str
    set: str
    parallel: str
    id: int


@dataclass(frozen=True, slots=True)
class SessionSetup:
    """Selections made while configuring. Names only."""

    product: str | None = None
    sets: tuple[str, ...] = ()
    parallels: tuple[str, ...] = ()
    location: str | None = None


@dataclass(frozen=True, slots=True)
class SessionState:
    """
    In-memory session state.

    The product is held as an immutable snapshot so a catalog reload during
    a session cannot change what the session is capturing against. Sets
    and parallels are addressed by name.
    """

    status: SessionStatus = SessionStatus.UNINITIALIZED
    setup: SessionSetup = SessionSetup()
    product: Product | None = None
    selected_sets: tuple[str, ...] = ()
    selected_parallels: tuple[str, ...] = ()
    active_set_name: str | None = None
    active_parallel: str | None = None
    location: str | None = None
    entries: tuple[SessionMirror, ...] = ()

    @property
    def active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def active_set(self) -> CardSet | None:
        if self.product is None or self.active_set_name is None:
            return None
        return self.product.find_set(self.active_set_name)

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def can_undo(self) -> bool:
        return bool(self.entries)


# =============================================================================
# CONFIGURING
# =============================================================================


def setup_parallels(product: Product, set_names: tuple[str, ...] | list[str]) -> list[Parallel]:
    """
    Parallels offered at setup for the chosen sets.

    Union across the sets, first occurrence of each name wins. Base
    parallels first, then by name.
    """
    seen: dict[str, Parallel] = {}
    for card_set in product.sets:
        if card_set.name not in set_names:
            continue
        for parallel in card_set.parallels:
            seen.setdefault(parallel.name, parallel)
    return sorted(seen.values(), key=lambda p: (not p.is_base, p.name))


def configure(state: SessionState) -> SessionState:
    """Enter (or stay in) setup."""
    if state.active:
        raise InvalidStateError("A session is already running. End it before starting another.")
    if state.status is SessionStatus.CONFIGURING:
        return state
    return SessionState(status=SessionStatus.CONFIGURING)


def update_setup(
    state: SessionState,
    catalog: Catalog,
    product: str | None = None,
    sets: list[str] | tuple[str, ...] = (),
    parallels: list[str] | tuple[str, ...] = (),
    location: str | None = None,
) -> SessionState:
    """
    Record setup selections.

    Sets are kept in product order and parallels in setup_parallels order.
    Parallels that no chosen set offers are dropped.

    Raises:
        InvalidStateError: If not configuring
        NotFoundError: If the product, a set or the location is unknown
    """
    if state.status is not SessionStatus.CONFIGURING:
        raise InvalidStateError("Session setup is not open.")

    if not product:
        return replace(state, setup=SessionSetup(location=location or None))

    chosen = catalog.find_product(product)
    if chosen is None:
        raise NotFoundError("Product", product)

    for set_name in sets:
        if chosen.find_set(set_name) is None:
            raise NotFoundError("Set", set_name)
    ordered_sets = tuple(s.name for s in chosen.sets if s.name in sets)

    offered = setup_parallels(chosen, ordered_sets)
    ordered_parallels = tuple(p.name for p in offered if p.name in parallels)

    if location and not catalog.has_tag("location", location):
        raise NotFoundError("Location", location)

    return replace(
        state,
        setup=SessionSetup(
            product=chosen.name,
            sets=ordered_sets,
            parallels=ordered_parallels,
            location=location or None,
        ),
    )


def start_session(state: SessionState, catalog: Catalog) -> SessionState:
    """
    Start capturing with the current setup.

    Active set is the first selected set; active parallel is the first
    selected parallel, moved to the first available one if that set lacks it.

    Raises:
        InvalidStateError: If not configuring
        MissingSelectionError: If product, sets, parallels or location is missing
    """
    if state.status is not SessionStatus.CONFIGURING:
        raise InvalidStateError("Open session setup before starting a session.")

    setup = state.setup
    if not setup.product:
        raise MissingSelectionError("Select a product.", field="product")
    if not setup.sets:
        raise MissingSelectionError("Select at least one set.", field="sets")
    if not setup.parallels:
        raise MissingSelectionError("Select at least one parallel.", field="parallels")
    if not setup.location:
        raise MissingSelectionError("Select a location.", field="location")

    product = catalog.find_product(setup.product)
    if product is None:
        raise NotFoundError("Product", setup.product)

    started = SessionState(
        status=SessionStatus.ACTIVE,
        product=product,
        selected_sets=setup.sets,
        selected_parallels=setup.parallels,
        active_set_name=setup.sets[0],
        active_parallel=setup.parallels[0],
        location=setup.location,
        entries=(),
    )
    return _reconcile_parallel(started)


# =============================================================================
# ACTIVE
# =============================================================================


def _require_active(state: SessionState) -> CardSet:
    active_set = state.active_set
    if not state.active or active_set is None:
        raise InvalidStateError("No session is running.")
    return active_set


def _require_product(state: SessionState) -> Product:
    if state.product is None:
        raise InvalidStateError("No session is running.")
    return state.product


def visible_parallels(state: SessionState) -> tuple[Parallel, ...]:
    """Selected parallels that exist in the active set, in the set's order."""
    active_set = state.active_set
    if active_set is None:
        return ()
    return tuple(p for p in active_set.parallels if p.name in state.selected_parallels)


def _reconcile_parallel(state: SessionState) -> SessionState:
    names = [p.name for p in visible_parallels(state)]
    if state.active_parallel in names:
        return state
    return replace(state, active_parallel=names[0] if names else None)


def switch_active_set(state: SessionState, set_name: str) -> SessionState:
    """
    Make another selected set active.

    Raises:
        InvalidStateError: If no session is running
        NotFoundError: If set_name was not selected at setup
    """
    _require_active(state)
    if set_name not in state.selected_sets:
        raise NotFoundError("Set", set_name)
    return _reconcile_parallel(replace(state, active_set_name=set_name))


def switch_active_parallel(state: SessionState, name: str) -> SessionState:
    """
    Make another visible parallel active.

    Raises:
        InvalidStateError: If no session is running, or name is not visible
            in the active set
    """
    active_set = _require_active(state)
    if name not in {p.name for p in visible_parallels(state)}:
        raise InvalidStateError(
            f"Parallel '{name}' is not available in set '{active_set.name}'.",
        )
    return replace(state, active_parallel=name)


def _require_card(active_set: CardSet, card_number: str) -> Card:
    card = active_set.find_card(card_number)
    if card is None:
        raise NotFoundError("Card", f"{active_set.name} #{card_number}")
    return card


def tap_add(
    state: SessionState,
    card_number: str,
    now: datetime | None = None,
) -> Transition[SessionState]:
    """
    Plan a one-tap capture of a card in the active set and parallel.

    Quantity 1, no serial/grade/notes, tagged with the session location.
    State is unchanged until the append resolves and record_entry is applied.

    Raises:
        InvalidStateError: If no session is running
        NotFoundError: If the card is not in the active set
        MissingParallelError: If the active set offers none of the selected parallels
    """
    active_set = _require_active(state)
    card = _require_card(active_set, card_number)
    product = _require_product(state)
    if state.active_parallel is None:
        raise MissingParallelError()

    draft = PendingDraft(
        product=product.name,
        set=active_set.name,
        card_number=card.number,
        parallel=state.active_parallel,
        player=card.player,
        team=card.team,
        quantity=1,
        serial_number=None,
        grade=None,
        notes=None,
        tags=EntryTags(location=state.location),
        added_at=now or datetime.now(UTC),
    )
    return Transition(state=state, effects=(AppendPending(draft=draft),))


def long_press_context(state: SessionState, card_number: str) -> tuple[Card, SessionContext]:
    """
    Card and capture context for a long-press full capture sheet.

    Raises:
        InvalidStateError: If no session is running
        NotFoundError: If the card is not in the active set
    """
    active_set = _require_active(state)
    card = _require_card(active_set, card_number)
    return card, SessionContext(
        product=_require_product(state),
        card_set=active_set,
        location=state.location or "",
        active_parallel=state.active_parallel,
    )


def record_entry(state: SessionState, mirror: SessionMirror) -> SessionState:
    """
    Mirror a ledger row this session created.

    A row that lands after the session has ended stays in the ledger but is
    not mirrored.
    """
    if not state.active:
        return state
    return replace(state, entries=(*state.entries, mirror))


def undo(state: SessionState) -> Transition[SessionState]:
    """
    Plan removal of this session's most recent capture.

    No effect when nothing has been captured. Apply drop_entry once the
    delete resolves.
    """
    if not state.active or not state.entries:
        return Transition(state=state)
    return Transition(state=state, effects=(DeletePending(entry_id=state.entries[-1].id),))


def drop_entry(state: SessionState, entry_id: int) -> SessionState:
    """Remove the last mirrored entry if it is entry_id."""
    if not state.entries or state.entries[-1].id != entry_id:
        return state
    return replace(state, entries=state.entries[:-1])


def end_session(state: SessionState) -> SessionState:
    """
    Discard the session. Ledger rows it created stay in the ledger.

    Callers wanting confirmation should check entry_count first.
    """
    return SessionState()


# =============================================================================
# BADGES
# =============================================================================


def badge_key(set_name: str, card_number: str) -> str:
    return f"{set_name}|{card_number}"


def badge_counts(state: SessionState) -> dict[str, int]:
    """
    Captures per card in this session, keyed by "set|card_number".

    Counts every parallel of the card together.
    """
    counts: dict[str, int] = {}
    for entry in state.entries:
        key = badge_key(entry.set, entry.card_number)
        counts[key] = counts.get(key, 0) + 1
    return counts


def badge_count(state: SessionState, set_name: str, card_number: str) -> int:
    return badge_counts(state).get(badge_key(set_name, card_number), 0)
