"""
Catalog browse helpers.

Card search, browse rows annotated with prior ownership, and the catalog
summary shown after a load.
"""

from dataclasses import dataclass

from cardtracker.models.catalog import Card, CardSet, Catalog, Product
from cardtracker.models.owned import OwnedEntry, owned_key, priced_count


@dataclass(frozen=True, slots=True)
class CatalogSummary:
    """Counts shown after a catalog load."""

    products: int
    cards: int
    tags: int
    owned: int
    priced: int
    exported_at: str | None = None

    def describe(self) -> str:
        text = f"Loaded: {self.products} products, {self.cards} cards, {self.tags} tags"
        if self.owned:
            text += f", {self.owned} owned"
        if self.priced:
            text += f", {self.priced} priced"
        if self.exported_at:
            text += f"\nExported: {self.exported_at}"
        return text


@dataclass(frozen=True, slots=True)
class CardRow:
    """A card as listed in browse mode."""

    card: Card
    owned_qty: int = 0
    median_price: float | None = None
    grade: str | None = None

    @property
    def owned(self) -> bool:
        return self.owned_qty > 0


def summarize_catalog(catalog: Catalog, owned: dict[str, OwnedEntry]) -> CatalogSummary:
    return CatalogSummary(
        products=len(catalog.products),
        cards=catalog.card_count(),
        tags=catalog.tag_count(),
        owned=len(owned),
        priced=priced_count(owned),
        exported_at=catalog.exported_at,
    )


def search_cards(cards: tuple[Card, ...] | list[Card], query: str | None) -> list[Card]:
    """
    Case-insensitive substring match on player, number, team and card name.

    An empty query returns every card in checklist order.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(cards)
    return [
        card
        for card in cards
        if needle in card.player.lower()
        or needle in card.number.lower()
        or needle in card.team.lower()
        or (card.card_name is not None and needle in card.card_name.lower())
    ]


def browse_rows(
    product: Product,
    card_set: CardSet,
    owned: dict[str, OwnedEntry],
    query: str | None = None,
) -> list[CardRow]:
    """Cards in a set matching query, each with its ownership summary."""
    rows = []
    for card in search_cards(card_set.cards, query):
        entry = owned.get(owned_key(product.name, card_set.name, card.number))
        if entry is None:
            rows.append(CardRow(card=card))
            continue
        rows.append(
            CardRow(
                card=card,
                owned_qty=entry.qty,
                median_price=entry.median_price,
                grade=entry.grade,
            )
        )
    return rows
