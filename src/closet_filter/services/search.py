"""Search service: filtered search, filter-option discovery, counts and pagination."""

from datetime import datetime
from typing import List, Optional

from closet_filter.config import config
from closet_filter.config.logging_config import get_logger
from closet_filter.errors import ValidationError
from closet_filter.models.filter_state import (
    FilterOptions,
    FilterState,
    FilterType,
    PaginationParameters,
    ValueCount,
)
from closet_filter.models.item import Item
from closet_filter.query.builder import (
    build_date_range_query,
    build_recent_query,
    build_size_range_query,
)
from closet_filter.query.predicates import AXIS_COLUMNS
from closet_filter.store.cache import TTLCache, make_cache_key
from closet_filter.store.live import LiveQuery
from closet_filter.store.repository import ItemRepository

logger = get_logger("search")


class ItemSearchService:
    """Runs filter states against the item store."""

    def __init__(self, repository: ItemRepository, cache: Optional[TTLCache] = None):
        """
        Args:
            repository: Item store to query.
            cache: Result cache. Defaults to one sized from config, or none
                when caching is disabled.
        """
        self.repository = repository
        if cache is None and config.cache.enabled:
            cache = TTLCache(maxsize=config.cache.maxsize, ttl=config.cache.ttl)
        self.cache = cache

    # -------------------------------------------------------------------------
    # Live (push-based) queries
    # -------------------------------------------------------------------------

    def search(self, state: FilterState) -> LiveQuery:
        """Ordered matches for ``state``, re-emitted after every store change."""
        return LiveQuery(
            self.repository,
            lambda: self.search_items(state),
            description=state.to_display_string() or "all items",
        )

    def search_with_pagination(
        self,
        filters: FilterState,
        offset: int,
        limit: int,
    ) -> LiveQuery:
        """One window of the ordered matches, re-emitted after every store change."""
        params = PaginationParameters.from_state(filters, offset, limit)
        return LiveQuery(
            self.repository,
            lambda: self.search_page(params),
            description=f"{filters.to_display_string() or 'all items'} [{offset}:{offset + limit}]",
        )

    def get_recent_items(self, limit: int = 10) -> LiveQuery:
        """The ``limit`` newest items, re-emitted after every store change."""
        # Building the query up front rejects bad arguments before anything subscribes
        build_recent_query(limit)
        return LiveQuery(
            self.repository,
            lambda: self.repository.find_recent(limit),
            description=f"recent [{limit}]",
        )

    def get_items_by_date_range(self, start: datetime, end: datetime) -> LiveQuery:
        """Items created in [start, end], newest first, re-emitted on change."""
        build_date_range_query(start, end)
        return LiveQuery(
            self.repository,
            lambda: self.repository.find_by_date_range(start, end),
            description=f"created {start.isoformat()}..{end.isoformat()}",
        )

    def get_items_by_size_range(self, min_size: int, max_size: int) -> LiveQuery:
        """Items with a size in [min_size, max_size], smallest first, re-emitted on change."""
        build_size_range_query(min_size, max_size)
        return LiveQuery(
            self.repository,
            lambda: self.repository.find_by_size_range(min_size, max_size),
            description=f"size {min_size}..{max_size}",
        )

    # -------------------------------------------------------------------------
    # One-shot queries
    # -------------------------------------------------------------------------

    def search_items(self, state: FilterState) -> List[Item]:
        """All matches for ``state``, newest first."""
        key = make_cache_key("search", self.repository.version, state)
        cached = self._cache_get(key)
        if cached is not None:
            return list(cached)

        items = self.repository.find(state)
        logger.debug("Search %r matched %d items", state.to_display_string(), len(items))
        self._cache_set(key, tuple(items))
        return items

    def search_page(self, params: PaginationParameters) -> List[Item]:
        """Exactly ``min(limit, remaining)`` items starting at ``offset``."""
        return self.repository.find_page(params)

    def get_filtered_item_count(self, filters: FilterState) -> int:
        """Total number of matches, independent of any offset/limit window."""
        key = make_cache_key("count", self.repository.version, filters)
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        total = self.repository.count(filters)
        self._cache_set(key, total)
        return total

    def get_available_filter_options(self) -> FilterOptions:
        """Distinct sizes, colors and categories in the store, always recomputed."""
        return FilterOptions(
            available_sizes=tuple(self.repository.distinct_values("size")),
            available_colors=tuple(self.repository.distinct_values("color")),
            available_categories=tuple(self.repository.distinct_values("category")),
        )

    def get_item_count(self) -> int:
        return self.repository.total_count()

    def get_item_count_by(self, filter_type: FilterType) -> List[ValueCount]:
        """Grouped counts for SIZE, COLOR or CATEGORY."""
        filter_type = FilterType.parse(filter_type)
        if filter_type not in AXIS_COLUMNS:
            raise ValidationError(
                f"Grouped counts are not available for {filter_type.value}", field="type"
            )
        return self.repository.count_by(AXIS_COLUMNS[filter_type])

    def get_item_count_by_size(self) -> List[ValueCount]:
        return self.get_item_count_by(FilterType.SIZE)

    def get_item_count_by_color(self) -> List[ValueCount]:
        return self.get_item_count_by(FilterType.COLOR)

    def get_item_count_by_category(self) -> List[ValueCount]:
        return self.get_item_count_by(FilterType.CATEGORY)

    # -------------------------------------------------------------------------
    # Cache helpers
    # -------------------------------------------------------------------------

    def _cache_get(self, key):
        if self.cache is None:
            return None
        return self.cache.get(key)

    def _cache_set(self, key, value) -> None:
        if self.cache is not None:
            self.cache.set(key, value)
