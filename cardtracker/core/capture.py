"""
Capture Sheet Resolver.

Opening a capture sheet for a card computes its initial attribute values;
confirming it validates the user's final values and produces a
PendingDraft for the ledger.

Precedence for the initial parallel:
- Browse: locked parallel if the set has it, else the set's base
  parallel, else its first parallel
- Session: the session's active parallel if the set has it, else base,
  else first
A set with no parallels cannot be captured at all (NoParallelsError).

A browse lock naming a parallel the open set does not have is ignored for
that capture only. The lock itself is untouched and still applies to sets
that do have it.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from cardtracker.config import MAX_BROWSE_QUANTITY, MIN_QUANTITY
from cardtracker.core.locks import FieldLocks, LockField
from cardtracker.models.catalog import Card, CardSet, Parallel, Product
from cardtracker.models.failure import MissingParallelError, NoParallelsError, NotFoundError
from cardtracker.models.pending import EntryTags, PendingDraft


@dataclass(frozen=True, slots=True)
class BrowseContext:
    """Capture opened from the browse cascade."""

    product: Product
    card_set: CardSet


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Capture opened by long-pressing a card during an active session."""

    product: Product
    card_set: CardSet
    location: str
    active_parallel: str | None = None


CaptureContext = BrowseContext | SessionContext


@dataclass(frozen=True, slots=True)
class CaptureAttributes:
    """Values on a capture sheet, as opened or as confirmed."""

    parallel: str | None = None
    quantity: int = 1
    serial_number: str = ""
    grade: str = ""
    notes: str = ""
    location: str = ""
    price_bucket: str = ""
    status: str = ""

    def lockable_values(self) -> dict[LockField, str]:
        return {
            LockField.PARALLEL: self.parallel or "",
            LockField.GRADE: self.grade,
            LockField.LOCATION: self.location,
            LockField.PRICE_BUCKET: self.price_bucket,
            LockField.STATUS: self.status,
        }


@dataclass(frozen=True, slots=True)
class CaptureSheet:
    """
    An open capture prompt.

    Attributes:
        card: The card being captured
        context: Browse or session context the sheet was opened from
        parallels: Parallel choices (every parallel in the set)
        initial: Pre-filled attribute values
    """

    card: Card
    context: CaptureContext
    parallels: tuple[Parallel, ...]
    initial: CaptureAttributes

    @property
    def from_session(self) -> bool:
        return isinstance(self.context, SessionContext)

    @property
    def shows_locks(self) -> bool:
        return isinstance(self.context, BrowseContext)

    @property
    def max_quantity(self) -> int | None:
        return MAX_BROWSE_QUANTITY if isinstance(self.context, BrowseContext) else None

    @property
    def title(self) -> str:
        return f"#{self.card.number} {self.card.player or self.card.card_name or ''}".strip()

    @property
    def subtitle(self) -> str:
        return f"{self.context.product.name} / {self.context.card_set.name}"


def default_parallel(card_set: CardSet, preferred: str | None = None) -> Parallel | None:
    """
    Pick the parallel a capture should start on.

    Returns None only when the set defines no parallels.
    """
    if not card_set.parallels:
        return None
    if preferred:
        match = card_set.find_parallel(preferred)
        if match is not None:
            return match
    return card_set.base_parallel() or card_set.parallels[0]


def open_capture(
    card: Card,
    context: CaptureContext,
    locks: FieldLocks | None = None,
) -> CaptureSheet:
    """
    Compute the initial attributes for a capture sheet.

    Locks are consulted in browse context only. Session context never reads
    them and pre-selects the session's location instead.
    """
    card_set = context.card_set
    locks = locks or FieldLocks()
    if isinstance(context, SessionContext):
        preferred = context.active_parallel
    else:
        preferred = locks.locked_value(LockField.PARALLEL)

    parallel = default_parallel(card_set, preferred)
    if parallel is None:
        raise NoParallelsError(product=context.product.name, set_name=card_set.name)

    if isinstance(context, SessionContext):
        initial = CaptureAttributes(parallel=parallel.name, location=context.location)
    else:
        initial = CaptureAttributes(
            parallel=parallel.name,
            grade=locks.resolve_initial(LockField.GRADE, ""),
            location=locks.resolve_initial(LockField.LOCATION, ""),
            price_bucket=locks.resolve_initial(LockField.PRICE_BUCKET, ""),
            status=locks.resolve_initial(LockField.STATUS, ""),
        )

    return CaptureSheet(
        card=card,
        context=context,
        parallels=card_set.parallels,
        initial=initial,
    )


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def confirm_capture(
    sheet: CaptureSheet,
    attributes: CaptureAttributes,
    now: datetime | None = None,
) -> PendingDraft:
    """
    Validate the confirmed attributes and build the draft ledger row.

    Quantity is floored at 1 and, in browse context, capped at 99.

    Raises:
        MissingParallelError: If no parallel is selected
        NotFoundError: If the parallel is not one of the set's parallels
    """
    if not attributes.parallel:
        raise MissingParallelError()

    card_set = sheet.context.card_set
    if not card_set.has_parallel(attributes.parallel):
        raise NotFoundError("Parallel", attributes.parallel)

    quantity = max(MIN_QUANTITY, attributes.quantity or MIN_QUANTITY)
    if sheet.max_quantity is not None:
        quantity = min(sheet.max_quantity, quantity)

    return PendingDraft(
        product=sheet.context.product.name,
        set=card_set.name,
        card_number=sheet.card.number,
        parallel=attributes.parallel,
        player=sheet.card.player,
        team=sheet.card.team,
        quantity=quantity,
        serial_number=_clean(attributes.serial_number),
        grade=_clean(attributes.grade),
        notes=_clean(attributes.notes),
        tags=EntryTags(
            location=_clean(attributes.location),
            price_bucket=_clean(attributes.price_bucket),
            status=_clean(attributes.status),
        ),
        added_at=now or datetime.now(UTC),
    )
