"""Filter and search engine for a clothing item catalog."""

from closet_filter.errors import ClosetFilterError, StorageFailure, ValidationError
from closet_filter.filters.manager import FilterManager
from closet_filter.models.filter_state import (
    EMPTY_FILTER_STATE,
    FilterOptions,
    FilterState,
    FilterType,
    PaginationParameters,
)
from closet_filter.models.item import Item
from closet_filter.services.search import ItemSearchService
from closet_filter.services.session import FilterSession, SearchResult
from closet_filter.store.repository import ItemRepository

__version__ = "1.0.0"

__all__ = [
    "ClosetFilterError",
    "StorageFailure",
    "ValidationError",
    "FilterManager",
    "EMPTY_FILTER_STATE",
    "FilterOptions",
    "FilterState",
    "FilterType",
    "PaginationParameters",
    "Item",
    "ItemSearchService",
    "FilterSession",
    "SearchResult",
    "ItemRepository",
]
