"""
Owned Aggregate - prior ownership summarized per card.

Key: "product|set|card_number". Quantities are summed across every
ownership record with that key (all parallels, all grades).

INVARIANT: The aggregate is rebuilt from the catalog as a whole and never
patched incrementally. Recomputing is the only update path.
"""

from dataclasses import dataclass

from cardtracker.models.catalog import Catalog


@dataclass(frozen=True, slots=True)
class OwnedEntry:
    """
    Ownership summary for one card.

    Attributes:
        qty: Sum of quantities across all matching records
        median_price: First non-null median price seen
        grade: First non-null grade seen
    """

    qty: int
    median_price: float | None = None
    grade: str | None = None


def owned_key(product: str, set_name: str, card_number: str) -> str:
    """Build the aggregate key for a card."""
    return f"{product}|{set_name}|{card_number}"


def build_owned_aggregate(catalog: Catalog) -> dict[str, OwnedEntry]:
    """
    Summarize the catalog's collection records per card.

    Pure: the same catalog always yields an equal map.
    """
    aggregate: dict[str, OwnedEntry] = {}

    for record in catalog.collection:
        key = owned_key(record.product, record.set, record.card_number)
        existing = aggregate.get(key)
        if existing is None:
            aggregate[key] = OwnedEntry(
                qty=record.quantity,
                median_price=record.median_price,
                grade=record.grade,
            )
            continue

        aggregate[key] = OwnedEntry(
            qty=existing.qty + record.quantity,
            median_price=(
                existing.median_price if existing.median_price is not None else record.median_price
            ),
            grade=existing.grade if existing.grade is not None else record.grade,
        )

    return aggregate


def priced_count(aggregate: dict[str, OwnedEntry]) -> int:
    """Number of keys carrying a median price."""
    return sum(1 for entry in aggregate.values() if entry.median_price is not None)
