"""
API schemas shared across routers.

Response models are built from the frozen domain objects with from_domain();
request bodies convert to domain values with to_domain().
"""

from datetime import datetime

from pydantic import BaseModel, Field

from cardtracker.config import LONG_PRESS_MS
from cardtracker.core import session as session_engine
from cardtracker.core.capture import CaptureAttributes, CaptureSheet
from cardtracker.core.locks import FieldLocks
from cardtracker.core.session import SessionMirror, SessionState
from cardtracker.models.catalog import Card, Parallel
from cardtracker.models.pending import PendingEntry
from cardtracker.services.catalog_browse import CardRow


class CardResponse(BaseModel):
    """One checklist card."""

    number: str
    player: str = ""
    team: str = ""
    card_name: str | None = None
    rookie: bool = False
    sp: bool = False
    display_name: str = ""

    @classmethod
    def from_domain(cls, card: Card) -> "CardResponse":
        return cls(
            number=card.number,
            player=card.player,
            team=card.team,
            card_name=card.card_name,
            rookie=card.rookie,
            sp=card.sp,
            display_name=card.display_name,
        )


class ParallelResponse(BaseModel):
    """One parallel of a set."""

    name: str
    label: str
    is_base: bool = False
    serial_numbered: int | None = None
    color_hex: str | None = None

    @classmethod
    def from_domain(cls, parallel: Parallel) -> "ParallelResponse":
        return cls(
            name=parallel.name,
            label=parallel.label,
            is_base=parallel.is_base,
            serial_numbered=parallel.serial_numbered,
            color_hex=parallel.color_hex,
        )


class CardRowResponse(BaseModel):
    """A browse row: card plus what the desktop collection already owns."""

    card: CardResponse
    owned: bool = False
    owned_qty: int = 0
    median_price: float | None = None
    grade: str | None = None

    @classmethod
    def from_domain(cls, row: CardRow) -> "CardRowResponse":
        return cls(
            card=CardResponse.from_domain(row.card),
            owned=row.owned,
            owned_qty=row.owned_qty,
            median_price=row.median_price,
            grade=row.grade,
        )


class CaptureAttributesModel(BaseModel):
    """Capture sheet values, as pre-filled or as confirmed by the user."""

    parallel: str | None = Field(default=None, examples=["Gold"])
    quantity: int = Field(default=1, description="Floored at 1; capped at 99 in browse")
    serial_number: str = ""
    grade: str = ""
    notes: str = ""
    location: str = ""
    price_bucket: str = ""
    status: str = ""

    @classmethod
    def from_domain(cls, attributes: CaptureAttributes) -> "CaptureAttributesModel":
        return cls(
            parallel=attributes.parallel,
            quantity=attributes.quantity,
            serial_number=attributes.serial_number,
            grade=attributes.grade,
            notes=attributes.notes,
            location=attributes.location,
            price_bucket=attributes.price_bucket,
            status=attributes.status,
        )

    def to_domain(self) -> CaptureAttributes:
        return CaptureAttributes(
            parallel=self.parallel,
            quantity=self.quantity,
            serial_number=self.serial_number,
            grade=self.grade,
            notes=self.notes,
            location=self.location,
            price_bucket=self.price_bucket,
            status=self.status,
        )


class CaptureSheetResponse(BaseModel):
    """An open capture sheet."""

    title: str
    subtitle: str
    product: str
    set: str
    card: CardResponse
    parallels: list[ParallelResponse]
    initial: CaptureAttributesModel
    from_session: bool
    shows_locks: bool
    max_quantity: int | None = None

    @classmethod
    def from_domain(cls, sheet: CaptureSheet) -> "CaptureSheetResponse":
        return cls(
            title=sheet.title,
            subtitle=sheet.subtitle,
            product=sheet.context.product.name,
            set=sheet.context.card_set.name,
            card=CardResponse.from_domain(sheet.card),
            parallels=[ParallelResponse.from_domain(p) for p in sheet.parallels],
            initial=CaptureAttributesModel.from_domain(sheet.initial),
            from_session=sheet.from_session,
            shows_locks=sheet.shows_locks,
            max_quantity=sheet.max_quantity,
        )


class LocksResponse(BaseModel):
    """Locked value per lockable field; None when unlocked."""

    locks: dict[str, str | None]
    any_locked: bool = False

    @classmethod
    def from_domain(cls, locks: FieldLocks) -> "LocksResponse":
        return cls(locks=locks.as_dict(), any_locked=locks.any_locked)


class PendingEntryResponse(BaseModel):
    """One pending ledger row."""

    id: int
    action: str = "add"
    product: str
    set: str
    card_number: str
    parallel: str
    player: str = ""
    team: str = ""
    quantity: int
    serial_number: str | None = None
    grade: str | None = None
    notes: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    added_at: datetime

    @classmethod
    def from_domain(cls, entry: PendingEntry) -> "PendingEntryResponse":
        return cls(
            id=entry.id,
            action=entry.action,
            product=entry.product,
            set=entry.set,
            card_number=entry.card_number,
            parallel=entry.parallel,
            player=entry.player,
            team=entry.team,
            quantity=entry.quantity,
            serial_number=entry.serial_number,
            grade=entry.grade,
            notes=entry.notes,
            tags=entry.tags.to_dict(),
            added_at=entry.added_at,
        )


class SessionEntryResponse(BaseModel):
    """A ledger row created by the running session."""

    id: int
    set: str
    card_number: str
    parallel: str

    @classmethod
    def from_domain(cls, mirror: SessionMirror) -> "SessionEntryResponse":
        return cls(
            id=mirror.id,
            set=mirror.set,
            card_number=mirror.card_number,
            parallel=mirror.parallel,
        )


class SessionSetupResponse(BaseModel):
    """Selections made so far while configuring."""

    product: str | None = None
    sets: list[str] = Field(default_factory=list)
    parallels: list[str] = Field(default_factory=list)
    location: str | None = None


class SessionResponse(BaseModel):
    """Session state as seen by the client."""

    status: str
    setup: SessionSetupResponse
    product: str | None = None
    product_label: str | None = None
    selected_sets: list[str] = Field(default_factory=list)
    selected_parallels: list[str] = Field(default_factory=list)
    active_set: str | None = None
    active_parallel: str | None = None
    visible_parallels: list[ParallelResponse] = Field(default_factory=list)
    location: str | None = None
    entry_count: int = 0
    can_undo: bool = False
    entries: list[SessionEntryResponse] = Field(default_factory=list)
    badges: dict[str, int] = Field(
        default_factory=dict,
        description='Captures this session per "set|card_number"',
    )
    long_press_ms: int = Field(
        default=LONG_PRESS_MS,
        description="How long a client holds a card before treating it as a long-press",
    )

    @classmethod
    def from_domain(cls, state: SessionState) -> "SessionResponse":
        return cls(
            status=state.status.value,
            setup=SessionSetupResponse(
                product=state.setup.product,
                sets=list(state.setup.sets),
                parallels=list(state.setup.parallels),
                location=state.setup.location,
            ),
            product=state.product.name if state.product else None,
            product_label=state.product.label if state.product else None,
            selected_sets=list(state.selected_sets),
            selected_parallels=list(state.selected_parallels),
            active_set=state.active_set_name,
            active_parallel=state.active_parallel,
            visible_parallels=[
                ParallelResponse.from_domain(p) for p in session_engine.visible_parallels(state)
            ],
            location=state.location,
            entry_count=state.entry_count,
            can_undo=state.can_undo,
            entries=[SessionEntryResponse.from_domain(m) for m in state.entries],
            badges=session_engine.badge_counts(state),
        )
