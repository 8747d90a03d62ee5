"""Tests for the owned aggregate."""

from cardtracker.models.catalog import Catalog, load_catalog
from cardtracker.models.owned import (
    OwnedEntry,
    build_owned_aggregate,
    owned_key,
    priced_count,
)


class TestOwnedAggregate:
    def test_quantities_summed_per_card(self, catalog: Catalog) -> None:
        """Records for the same card are summed across parallels and grades."""
        aggregate = build_owned_aggregate(catalog)

        assert aggregate[owned_key("2024 Topps", "Base", "1")].qty == 3

    def test_first_non_null_price_and_grade_win(self, catalog: Catalog) -> None:
        """The first non-null price and grade are kept."""
        entry = build_owned_aggregate(catalog)[owned_key("2024 Topps", "Base", "1")]

        assert entry.median_price == 3.5
        assert entry.grade == "PSA 9"

    def test_unowned_cards_absent(self, catalog: Catalog) -> None:
        """Cards with no records have no key."""
        aggregate = build_owned_aggregate(catalog)

        assert owned_key("2024 Topps", "Base", "2") not in aggregate

    def test_total_quantity_preserved(self, catalog_document) -> None:
        """The aggregate's quantities add up to the collection's quantities."""
        document = {
            **catalog_document,
            "collection": [
                *catalog_document["collection"],
                {"product": "2024 Topps", "set": "Inserts", "card_number": "I-1", "quantity": 4},
                {"product": "2023 Bowman", "set": "Base", "card_number": "1", "quantity": 1},
                {"product": "2023 Bowman", "set": "Base", "card_number": "1"},
            ],
        }
        catalog = load_catalog(document)

        aggregate = build_owned_aggregate(catalog)

        assert len(aggregate) == 3
        assert sum(e.qty for e in aggregate.values()) == sum(
            r.quantity for r in catalog.collection
        )

    def test_idempotent(self, catalog: Catalog) -> None:
        """Building twice from the same catalog yields equal maps."""
        assert build_owned_aggregate(catalog) == build_owned_aggregate(catalog)

    def test_empty_collection(self) -> None:
        """No collection means an empty aggregate."""
        catalog = load_catalog({"products": [], "tags": {}})

        assert build_owned_aggregate(catalog) == {}

    def test_key_format(self) -> None:
        """Keys join product, set and number with pipes."""
        assert owned_key("2024 Topps", "Base", "1") == "2024 Topps|Base|1"


class TestOwnedTotals:
    def test_priced_count(self) -> None:
        """Only keys with a median price count as priced."""
        aggregate = {
            "a": OwnedEntry(qty=2, median_price=1.0),
            "b": OwnedEntry(qty=5),
        }

        assert priced_count(aggregate) == 1
