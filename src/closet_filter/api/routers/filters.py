"""Filter state API router.

The server keeps one FilterManager; these endpoints change it and read
results for whatever state is current.
"""

from fastapi import APIRouter, Depends, Query

from closet_filter.api.dependencies import (
    get_filter_manager,
    get_page_limit,
    get_search_service,
)
from closet_filter.filters.manager import FilterManager
from closet_filter.models.filter_state import FilterChip
from closet_filter.models.schemas import (
    FilterChipResponse,
    FilterOptionsResponse,
    FilterStateResponse,
    FilterStateSnapshot,
    FilterUpdateRequest,
    ItemListResponse,
    ItemResponse,
    PaginationInfo,
    SearchTextRequest,
)
from closet_filter.services.search import ItemSearchService

router = APIRouter()


@router.get("/options", response_model=FilterOptionsResponse)
def get_filter_options(service: ItemSearchService = Depends(get_search_service)):
    """Distinct sizes, colors and categories present in the catalog."""
    return FilterOptionsResponse.from_options(service.get_available_filter_options())


@router.get("/chips", response_model=list[FilterChipResponse])
def get_filter_chips(
    manager: FilterManager = Depends(get_filter_manager),
    service: ItemSearchService = Depends(get_search_service),
):
    """Every selectable value, marked selected when it is in the current state."""
    state = manager.get_current_state()
    chips = service.get_available_filter_options().chips(state)
    if state.search_text:
        chips.append(FilterChip.for_search(state.search_text))
    return [FilterChipResponse.from_chip(chip) for chip in chips]


@router.get("/state", response_model=FilterStateResponse)
def get_filter_state(manager: FilterManager = Depends(get_filter_manager)):
    """The current filter state."""
    return FilterStateResponse.from_state(manager.get_current_state())


@router.put("/state/{filter_type}", response_model=FilterStateResponse)
def update_filter(
    filter_type: str,
    payload: FilterUpdateRequest,
    manager: FilterManager = Depends(get_filter_manager),
):
    """Replace the selected values of one filter type."""
    return FilterStateResponse.from_state(manager.update_filter(filter_type, payload.values))


@router.delete("/state/{filter_type}/{value}", response_model=FilterStateResponse)
def remove_filter_value(
    filter_type: str,
    value: str,
    manager: FilterManager = Depends(get_filter_manager),
):
    """Deselect one value."""
    return FilterStateResponse.from_state(manager.remove_filter(filter_type, value))


@router.delete("/state/{filter_type}", response_model=FilterStateResponse)
def clear_filter(
    filter_type: str,
    manager: FilterManager = Depends(get_filter_manager),
):
    """Clear one filter type."""
    return FilterStateResponse.from_state(manager.clear_filter(filter_type))


@router.delete("/state", response_model=FilterStateResponse)
def clear_all_filters(manager: FilterManager = Depends(get_filter_manager)):
    """Clear every filter and the search text."""
    return FilterStateResponse.from_state(manager.clear_all_filters())


@router.put("/search", response_model=FilterStateResponse)
def update_search_text(
    payload: SearchTextRequest,
    manager: FilterManager = Depends(get_filter_manager),
):
    """Set the free-text search."""
    return FilterStateResponse.from_state(manager.update_search_text(payload.text))


@router.post("/state/restore", response_model=FilterStateResponse)
def restore_filter_state(
    snapshot: FilterStateSnapshot,
    manager: FilterManager = Depends(get_filter_manager),
):
    """Replace the state with a saved snapshot."""
    manager.restore_state(snapshot.to_state())
    return FilterStateResponse.from_state(manager.get_current_state())


@router.get("/results", response_model=ItemListResponse)
async def get_filter_results(
    offset: int = Query(0, ge=0, description="Number of matches to skip"),
    limit: int = Depends(get_page_limit),
    manager: FilterManager = Depends(get_filter_manager),
    service: ItemSearchService = Depends(get_search_service),
):
    """Items matching the current filter state, newest first."""
    state = manager.get_current_state()
    items = await service.search_with_pagination(state, offset, limit).first()
    total = service.get_filtered_item_count(state)
    return ItemListResponse(
        items=[ItemResponse.from_item(item) for item in items],
        pagination=PaginationInfo(offset=offset, limit=limit, total=total),
    )
