"""Domain models for closet-filter."""

from .filter_state import (
    EMPTY_FILTER_STATE,
    MAX_SEARCH_TEXT_LENGTH,
    MAX_VALUE_LENGTH,
    FilterChip,
    FilterOptions,
    FilterState,
    FilterType,
    PaginationParameters,
    ValueCount,
)
from .item import SEARCHABLE_FIELDS, Item

__all__ = [
    "EMPTY_FILTER_STATE",
    "MAX_SEARCH_TEXT_LENGTH",
    "MAX_VALUE_LENGTH",
    "FilterChip",
    "FilterOptions",
    "FilterState",
    "FilterType",
    "PaginationParameters",
    "ValueCount",
    "SEARCHABLE_FIELDS",
    "Item",
]
