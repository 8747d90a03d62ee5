"""
Catalog Models.

Read-only reference data exported from the desktop collection app:
products -> sets -> cards/parallels, the tag vocabularies, and optional
prior ownership records.

INVARIANTS:
- All models are frozen (immutable after construction)
- Card numbers are unique within a set
- Parallel names are unique within a set
- A card is identified by (product name, set name, card number), never by
  object identity, because the catalog may be reloaded at any time
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cardtracker.models.failure import InvalidCatalogError, ValidationError

REQUIRED_KEYS = ("products", "tags")

# Tag categories a capture can carry
TAG_CATEGORIES = ("location", "price_bucket", "status")


@dataclass(frozen=True, slots=True)
class Card:
    """
    One checklist entry within a set.

    Attributes:
        number: Card number as printed (kept as text: "1", "RC-12", "BP45")
        player: Player name, empty for non-player cards
        team: Team name, may be empty
        card_name: Title for non-player cards (checklists, logos)
        rookie: Rookie card flag
        sp: Short print flag
    """

    number: str
    player: str = ""
    team: str = ""
    card_name: str | None = None
    rookie: bool = False
    sp: bool = False

    @property
    def display_name(self) -> str:
        return self.player or self.card_name or "(no player)"


@dataclass(frozen=True, slots=True)
class Parallel:
    """A named print variant of a set. Exactly one is normally marked base."""

    name: str
    is_base: bool = False
    serial_numbered: int | None = None
    color_hex: str | None = None

    @property
    def label(self) -> str:
        if self.serial_numbered:
            return f"{self.name} /{self.serial_numbered}"
        return self.name


@dataclass(frozen=True, slots=True)
class CardSet:
    """A set within a product: its checklist and the parallels it was printed in."""

    name: str
    type: str = ""
    cards: tuple[Card, ...] = ()
    parallels: tuple[Parallel, ...] = ()

    def find_card(self, number: str) -> Card | None:
        for card in self.cards:
            if card.number == number:
                return card
        return None

    def find_parallel(self, name: str) -> Parallel | None:
        for parallel in self.parallels:
            if parallel.name == name:
                return parallel
        return None

    def has_parallel(self, name: str) -> bool:
        return self.find_parallel(name) is not None

    def base_parallel(self) -> Parallel | None:
        """The parallel marked is_base, or None if the set marks none."""
        for parallel in self.parallels:
            if parallel.is_base:
                return parallel
        return None


@dataclass(frozen=True, slots=True)
class Product:
    """A released product (e.g. "2024 Topps Chrome") and its sets."""

    sport: str
    year: str
    name: str
    sets: tuple[CardSet, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.year} {self.name}"

    def find_set(self, name: str) -> CardSet | None:
        for card_set in self.sets:
            if card_set.name == name:
                return card_set
        return None


@dataclass(frozen=True, slots=True)
class Tag:
    """One value in a tag vocabulary (a location, a price bucket, a status)."""

    name: str
    color_hex: str | None = None


@dataclass(frozen=True, slots=True)
class OwnershipRecord:
    """A prior ownership row from the desktop collection."""

    product: str
    set: str
    card_number: str
    quantity: int
    median_price: float | None = None
    grade: str | None = None


@dataclass(frozen=True, slots=True)
class Catalog:
    """
    Normalized, immutable view of one loaded catalog document.

    Attributes:
        products: Products in document order
        tags: Tag vocabularies by category name
        collection: Prior ownership records (may be empty)
        exported_at: Timestamp string stamped by the desktop export
    """

    products: tuple[Product, ...]
    tags: dict[str, tuple[Tag, ...]] = field(default_factory=dict)
    collection: tuple[OwnershipRecord, ...] = ()
    exported_at: str | None = None

    def tags_for(self, category: str) -> tuple[Tag, ...]:
        return self.tags.get(category, ())

    def has_tag(self, category: str, name: str) -> bool:
        return any(tag.name == name for tag in self.tags_for(category))

    def find_product(self, name: str) -> Product | None:
        for product in self.products:
            if product.name == name:
                return product
        return None

    def sports_list(self) -> list[str]:
        """Distinct sport names, sorted ascending."""
        return sorted({product.sport for product in self.products})

    def products_for(self, sport: str | None = None) -> list[Product]:
        """
        Products for a sport (all when sport is empty or None).

        Ordered by year descending, then name ascending, so the order is
        the same across reloads of the same document.
        """
        products = [p for p in self.products if not sport or p.sport == sport]
        by_name = sorted(products, key=lambda p: p.name)
        return sorted(by_name, key=lambda p: p.year, reverse=True)

    def card_count(self) -> int:
        return sum(len(s.cards) for p in self.products for s in p.sets)

    def tag_count(self) -> int:
        return sum(len(values) for values in self.tags.values())


# =============================================================================
# LOADING
# =============================================================================


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _require_list(raw: Mapping[str, Any], key: str, where: str) -> list[Any]:
    value = raw.get(key) or []
    if not isinstance(value, list):
        raise ValidationError(
            message="Invalid catalog file.",
            detail=f"{where}.{key} must be a list",
        )
    return value


def _require_objects(raw: Mapping[str, Any], key: str, where: str) -> list[Mapping[str, Any]]:
    items = _require_list(raw, key, where)
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise ValidationError(
                message="Invalid catalog file.",
                detail=f"{where}.{key}[{index}] must be an object",
            )
    return items


def _number(value: Any, convert: Callable[[Any], Any], where: str) -> Any:
    try:
        return convert(value)
    except (TypeError, ValueError):
        raise ValidationError(
            message="Invalid catalog file.",
            detail=f"{where} must be a number, got {value!r}",
        ) from None


def _parse_card(raw: Mapping[str, Any]) -> Card:
    return Card(
        number=_text(raw.get("number")),
        player=_text(raw.get("player")),
        team=_text(raw.get("team")),
        card_name=raw.get("card_name") or None,
        rookie=bool(raw.get("rookie")),
        sp=bool(raw.get("sp")),
    )


def _parse_parallel(raw: Mapping[str, Any], where: str) -> Parallel:
    name = _text(raw.get("name"))
    serial = raw.get("serial_numbered")
    return Parallel(
        name=name,
        is_base=bool(raw.get("is_base")),
        serial_numbered=(
            _number(serial, int, f"{where}/{name}.serial_numbered") if serial else None
        ),
        color_hex=raw.get("color_hex") or None,
    )


def _parse_set(raw: Mapping[str, Any], product_name: str) -> CardSet:
    name = _text(raw.get("name"))
    where = f"{product_name}/{name}"
    cards = tuple(_parse_card(c) for c in _require_objects(raw, "cards", where))
    parallels = tuple(_parse_parallel(p, where) for p in _require_objects(raw, "parallels", where))

    numbers = [c.number for c in cards]
    if len(numbers) != len(set(numbers)):
        raise ValidationError(
            message="Invalid catalog file.",
            detail=f"Duplicate card numbers in set {where}",
        )
    names = [p.name for p in parallels]
    if len(names) != len(set(names)):
        raise ValidationError(
            message="Invalid catalog file.",
            detail=f"Duplicate parallel names in set {where}",
        )

    return CardSet(name=name, type=_text(raw.get("type")), cards=cards, parallels=parallels)


def _parse_tag(raw: Any) -> Tag:
    # Bare strings are accepted as name-only tags
    if isinstance(raw, Mapping):
        return Tag(name=_text(raw.get("name")), color_hex=raw.get("color_hex") or None)
    return Tag(name=_text(raw))


def _parse_product(raw: Mapping[str, Any]) -> Product:
    name = _text(raw.get("name"))
    sets = tuple(_parse_set(s, name) for s in _require_objects(raw, "sets", name))
    return Product(
        sport=_text(raw.get("sport")),
        year=_text(raw.get("year")),
        name=name,
        sets=sets,
    )


def _parse_ownership(raw: Mapping[str, Any], where: str) -> OwnershipRecord:
    price = raw.get("median_price")
    return OwnershipRecord(
        product=_text(raw.get("product")),
        set=_text(raw.get("set")),
        card_number=_text(raw.get("card_number")),
        quantity=_number(raw.get("quantity") or 0, int, f"{where}.quantity"),
        median_price=_number(price, float, f"{where}.median_price") if price else None,
        grade=raw.get("grade") or None,
    )


def load_catalog(raw: Mapping[str, Any]) -> Catalog:
    """
    Build a Catalog from a raw catalog document.

    Args:
        raw: Parsed JSON document from the desktop export

    Returns:
        Immutable Catalog.

    Raises:
        InvalidCatalogError: If `products` or `tags` is absent
        ValidationError: If the document shape is otherwise malformed
    """
    if not isinstance(raw, Mapping):
        raise InvalidCatalogError(list(REQUIRED_KEYS))

    missing = [key for key in REQUIRED_KEYS if key not in raw or raw[key] is None]
    if missing:
        raise InvalidCatalogError(missing)

    raw_tags = raw["tags"]
    if not isinstance(raw_tags, Mapping):
        raise ValidationError(message="Invalid catalog file.", detail="tags must be an object")

    tags = {
        category: tuple(
            _parse_tag(t)
            for t in _require_list(raw_tags, category, "tags")
        )
        for category in raw_tags
    }

    products = tuple(_parse_product(p) for p in _require_objects(raw, "products", "catalog"))
    collection = tuple(
        _parse_ownership(r, f"catalog.collection[{index}]")
        for index, r in enumerate(_require_objects(raw, "collection", "catalog"))
    )

    exported_at = raw.get("exported_at")
    return Catalog(
        products=products,
        tags=tags,
        collection=collection,
        exported_at=_text(exported_at) if exported_at else None,
    )
