"""Query composition: axis predicates and SQL building."""

from .predicates import (
    AXIS_COLUMNS,
    ContainsAnyPredicate,
    InPredicate,
    Predicate,
    active_predicates,
    axis_predicate,
    build_predicates,
    build_where_clause,
    matches,
    sort_key,
)
from .builder import (
    DEFAULT_ORDER,
    DISCOVERABLE_COLUMNS,
    ItemQueryBuilder,
    build_count_query,
    build_date_range_query,
    build_distinct_query,
    build_group_count_query,
    build_paginated_query,
    build_recent_query,
    build_search_query,
    build_size_range_query,
)

__all__ = [
    "AXIS_COLUMNS",
    "ContainsAnyPredicate",
    "InPredicate",
    "Predicate",
    "active_predicates",
    "axis_predicate",
    "build_predicates",
    "build_where_clause",
    "matches",
    "sort_key",
    "DEFAULT_ORDER",
    "DISCOVERABLE_COLUMNS",
    "ItemQueryBuilder",
    "build_count_query",
    "build_date_range_query",
    "build_distinct_query",
    "build_group_count_query",
    "build_paginated_query",
    "build_recent_query",
    "build_search_query",
    "build_size_range_query",
]
