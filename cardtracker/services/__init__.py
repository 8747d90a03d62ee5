from cardtracker.services.catalog_browse import (
    CardRow,
    CatalogSummary,
    browse_rows,
    search_cards,
    summarize_catalog,
)
from cardtracker.services.tracker import CardTracker

__all__ = [
    "CardRow",
    "CardTracker",
    "CatalogSummary",
    "browse_rows",
    "search_cards",
    "summarize_catalog",
]
