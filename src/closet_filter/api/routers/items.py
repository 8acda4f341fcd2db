"""Items API router."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from closet_filter.api.dependencies import get_page_limit, get_repository, get_search_service
from closet_filter.filters.normalize import normalize_state
from closet_filter.models.filter_state import FilterState, PaginationParameters
from closet_filter.models.schemas import (
    CountResponse,
    ItemCreate,
    ItemListResponse,
    ItemResponse,
    PaginationInfo,
    ValueCountResponse,
)
from closet_filter.services.search import ItemSearchService
from closet_filter.store.repository import ItemRepository

router = APIRouter()


def parse_filter_state(
    sizes: Optional[str] = Query(None, description="Comma-separated sizes"),
    colors: Optional[str] = Query(None, description="Comma-separated colors"),
    categories: Optional[str] = Query(None, description="Comma-separated categories"),
    search_text: Optional[str] = Query(None, description="Substring of color, category or note"),
) -> FilterState:
    """Parse filter query parameters into a FilterState, dropping invalid values."""
    return normalize_state(
        sizes=sizes.split(",") if sizes else (),
        colors=colors.split(",") if colors else (),
        categories=categories.split(",") if categories else (),
        search_text=search_text or "",
    )


@router.get("", response_model=ItemListResponse)
def list_items(
    state: FilterState = Depends(parse_filter_state),
    offset: int = Query(0, ge=0, description="Number of matches to skip"),
    limit: int = Depends(get_page_limit),
    service: ItemSearchService = Depends(get_search_service),
):
    """List items matching the filters, newest first."""
    params = PaginationParameters.from_state(state, offset, limit)
    items = service.search_page(params)
    total = service.get_filtered_item_count(state)
    return ItemListResponse(
        items=[ItemResponse.from_item(item) for item in items],
        pagination=PaginationInfo(offset=offset, limit=limit, total=total),
    )


@router.get("/count", response_model=CountResponse)
def count_items(
    state: FilterState = Depends(parse_filter_state),
    service: ItemSearchService = Depends(get_search_service),
):
    """Number of items matching the filters."""
    return CountResponse(count=service.get_filtered_item_count(state))


@router.get("/counts/{filter_type}", response_model=list[ValueCountResponse])
def count_items_by(
    filter_type: str,
    service: ItemSearchService = Depends(get_search_service),
):
    """Item counts grouped by size, color or category."""
    return [
        ValueCountResponse(value=vc.value, count=vc.count)
        for vc in service.get_item_count_by(filter_type)
    ]


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(
    payload: ItemCreate,
    repository: ItemRepository = Depends(get_repository),
):
    """Add an item to the catalog."""
    item = repository.insert(payload.to_item())
    return ItemResponse.from_item(item)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(
    item_id: int,
    repository: ItemRepository = Depends(get_repository),
):
    """Get a single item by id."""
    item = repository.get_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemResponse.from_item(item)


@router.delete("/{item_id}")
def delete_item(
    item_id: int,
    repository: ItemRepository = Depends(get_repository),
):
    """Remove an item from the catalog."""
    if not repository.delete_by_id(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"deleted": item_id}
