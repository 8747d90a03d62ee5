"""
Catalog API endpoints.

Load a catalog document and walk the sport / product / set / card cascade.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field

from cardtracker.api.deps import get_tracker
from cardtracker.api.schemas import CardRowResponse, ParallelResponse
from cardtracker.models.failure import ApiResponse, create_success
from cardtracker.services.catalog_browse import CatalogSummary, browse_rows
from cardtracker.services.tracker import CardTracker

router = APIRouter(prefix="/catalog", tags=["catalog"])


class CatalogSummaryResponse(BaseModel):
    """Counts for the loaded catalog."""

    products: int
    cards: int
    tags: int
    owned: int = 0
    priced: int = 0
    exported_at: str | None = None
    message: str = Field(default="", description="Human-readable load summary")

    @classmethod
    def from_domain(cls, summary: CatalogSummary) -> "CatalogSummaryResponse":
        return cls(
            products=summary.products,
            cards=summary.cards,
            tags=summary.tags,
            owned=summary.owned,
            priced=summary.priced,
            exported_at=summary.exported_at,
            message=summary.describe(),
        )


class ProductResponse(BaseModel):
    """A product in the cascade."""

    sport: str
    year: str
    name: str
    label: str
    sets: list[str] = Field(default_factory=list)


class SetResponse(BaseModel):
    """A set within a product."""

    name: str
    type: str = ""
    card_count: int = 0
    parallels: list[ParallelResponse] = Field(default_factory=list)


@router.post("", response_model=ApiResponse[CatalogSummaryResponse])
async def load_catalog(
    document: Annotated[dict[str, Any], Body(description="Catalog document from the desktop export")],
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """
    Load a catalog document.

    The document replaces the stored catalog. Pending entries are untouched.
    """
    summary = await tracker.load_catalog(document)
    return create_success(CatalogSummaryResponse.from_domain(summary))


@router.get("", response_model=ApiResponse[CatalogSummaryResponse])
async def get_catalog_summary(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    """Summary of the loaded catalog."""
    return create_success(CatalogSummaryResponse.from_domain(tracker.catalog_summary()))


@router.get("/sports", response_model=ApiResponse[list[str]])
async def list_sports(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    return create_success(tracker.require_catalog().sports_list())


@router.get("/products", response_model=ApiResponse[list[ProductResponse]])
async def list_products(
    tracker: Annotated[CardTracker, Depends(get_tracker)],
    sport: Annotated[str | None, Query(description="Filter by sport; all when omitted")] = None,
) -> ApiResponse[Any]:
    """Products for a sport, newest year first."""
    products = tracker.require_catalog().products_for(sport)
    return create_success(
        [
            ProductResponse(
                sport=p.sport,
                year=p.year,
                name=p.name,
                label=p.label,
                sets=[s.name for s in p.sets],
            )
            for p in products
        ]
    )


@router.get("/products/{product}/sets", response_model=ApiResponse[list[SetResponse]])
async def list_sets(
    product: str,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
) -> ApiResponse[Any]:
    chosen = tracker.find_product(product)
    return create_success(
        [
            SetResponse(
                name=s.name,
                type=s.type,
                card_count=len(s.cards),
                parallels=[ParallelResponse.from_domain(p) for p in s.parallels],
            )
            for s in chosen.sets
        ]
    )


@router.get(
    "/products/{product}/sets/{set_name}/cards",
    response_model=ApiResponse[list[CardRowResponse]],
)
async def list_cards(
    product: str,
    set_name: str,
    tracker: Annotated[CardTracker, Depends(get_tracker)],
    q: Annotated[str | None, Query(description="Match player, number, team or card name")] = None,
) -> ApiResponse[Any]:
    """Cards in a set, with what the desktop collection already owns."""
    chosen, card_set = tracker.find_set(product, set_name)
    rows = browse_rows(chosen, card_set, tracker.owned, q)
    return create_success([CardRowResponse.from_domain(row) for row in rows])
