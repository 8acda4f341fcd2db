"""
Schema-aware query builder for the item store.

All SQL issued against the items table is built here so that:
- Column names are validated against the items schema
- Filter predicates are always parameterised
- Result ordering is the same for full, paginated and live queries
"""

from datetime import datetime
from typing import Any, List, Optional, Tuple

from closet_filter.database.schema import ITEM_COLUMNS, ITEMS_TABLE
from closet_filter.errors import ValidationError
from closet_filter.models.filter_state import FilterState, PaginationParameters
from closet_filter.query.predicates import Predicate, active_predicates

# created_at DESC gives newest first; id ASC keeps equal timestamps deterministic
DEFAULT_ORDER = (("created_at", True), ("id", False))

# Columns that distinct-value discovery and grouped counts may target
DISCOVERABLE_COLUMNS = ("size", "color", "category")


class ItemQueryBuilder:
    """
    SQL query builder that validates columns against the items schema.

    Usage:
        query, params = (
            ItemQueryBuilder()
            .select()
            .where_state(state)
            .order_default()
            .limit(20)
            .offset(40)
            .build()
        )
    """

    def __init__(self, table: str = ITEMS_TABLE, columns: Tuple[str, ...] = ITEM_COLUMNS):
        self.table = table
        self.known_columns = columns
        self._reset()

    def _reset(self):
        """Reset builder state for new query."""
        self._select: List[str] = []
        self._distinct = False
        self._conditions: List[str] = []
        self._params: List[Any] = []
        self._group_by: List[str] = []
        self._order_by: List[str] = []
        self._limit_val: Optional[int] = None
        self._offset_val: Optional[int] = None

    def _check_column(self, column: str) -> str:
        if column not in self.known_columns:
            raise ValidationError(f"Unknown column for {self.table}: {column}", field="column")
        return column

    def select(self, columns: Optional[List[str]] = None) -> "ItemQueryBuilder":
        """Start a SELECT of the given columns (all item columns by default)."""
        self._reset()
        selected = self.known_columns if columns is None else columns
        self._select = [self._check_column(c) for c in selected]
        return self

    def select_distinct(self, column: str) -> "ItemQueryBuilder":
        """Start a SELECT DISTINCT of one column."""
        self._reset()
        self._select = [self._check_column(column)]
        self._distinct = True
        return self

    def add_count(self, alias: str = "count") -> "ItemQueryBuilder":
        """Add COUNT(*) to the select list."""
        self._select.append(f"COUNT(*) AS {alias}")
        return self

    # -------------------------------------------------------------------------
    # WHERE Conditions
    # -------------------------------------------------------------------------

    def where(self, sql: str, params: Optional[List[Any]] = None) -> "ItemQueryBuilder":
        """Add raw WHERE condition."""
        self._conditions.append(sql)
        if params:
            self._params.extend(params)
        return self

    def where_between(self, column: str, low: Any, high: Any) -> "ItemQueryBuilder":
        """Inclusive range condition on one column."""
        return self.where(f"{self._check_column(column)} BETWEEN ? AND ?", [low, high])

    def where_predicate(self, predicate: Optional[Predicate]) -> "ItemQueryBuilder":
        """Add one axis predicate; None imposes no constraint."""
        if predicate is None:
            return self
        sql, params = predicate.to_sql()
        return self.where(sql, params)

    def where_state(self, state: FilterState) -> "ItemQueryBuilder":
        """AND every active axis of ``state`` into the WHERE clause."""
        for predicate in active_predicates(state):
            self.where_predicate(predicate)
        return self

    # -------------------------------------------------------------------------
    # Grouping, ordering, windowing
    # -------------------------------------------------------------------------

    def group_by(self, column: str) -> "ItemQueryBuilder":
        self._group_by.append(self._check_column(column))
        return self

    def order_by(self, column: str, desc: bool = False) -> "ItemQueryBuilder":
        self._order_by.append(f"{self._check_column(column)} {'DESC' if desc else 'ASC'}")
        return self

    def order_default(self) -> "ItemQueryBuilder":
        for column, desc in DEFAULT_ORDER:
            self.order_by(column, desc=desc)
        return self

    def limit(self, n: int) -> "ItemQueryBuilder":
        self._limit_val = int(n)
        return self

    def offset(self, n: int) -> "ItemQueryBuilder":
        self._offset_val = int(n)
        return self

    def build(self) -> Tuple[str, List[Any]]:
        """Build the final SQL string and parameter list."""
        if not self._select:
            raise ValidationError("select() must be called before build()")

        keyword = "SELECT DISTINCT" if self._distinct else "SELECT"
        parts = [f"{keyword} {', '.join(self._select)}", f"FROM {self.table}"]

        if self._conditions:
            parts.append(f"WHERE {' AND '.join(self._conditions)}")
        if self._group_by:
            parts.append(f"GROUP BY {', '.join(self._group_by)}")
        if self._order_by:
            parts.append(f"ORDER BY {', '.join(self._order_by)}")
        # Integers are validated above, so inlining them is safe
        if self._limit_val is not None:
            parts.append(f"LIMIT {self._limit_val}")
        if self._offset_val is not None:
            parts.append(f"OFFSET {self._offset_val}")

        return "\n".join(parts), list(self._params)


# =============================================================================
# Convenience builders
# =============================================================================


def build_search_query(state: FilterState) -> Tuple[str, List[Any]]:
    """Full ordered result for a filter state."""
    return ItemQueryBuilder().select().where_state(state).order_default().build()


def build_paginated_query(params: PaginationParameters) -> Tuple[str, List[Any]]:
    """One offset/limit window of the ordered result."""
    return (
        ItemQueryBuilder()
        .select()
        .where_state(params.filter_state)
        .order_default()
        .limit(params.limit)
        .offset(params.offset)
        .build()
    )


def build_count_query(state: FilterState) -> Tuple[str, List[Any]]:
    """Total number of items matching a filter state."""
    return ItemQueryBuilder().select([]).add_count().where_state(state).build()


def build_distinct_query(column: str) -> Tuple[str, List[Any]]:
    """Distinct values of a discoverable column, sorted ascending."""
    if column not in DISCOVERABLE_COLUMNS:
        raise ValidationError(f"Column is not discoverable: {column}", field="column")
    return ItemQueryBuilder().select_distinct(column).order_by(column).build()


def build_group_count_query(column: str) -> Tuple[str, List[Any]]:
    """Item count per value of a discoverable column, sorted by value."""
    if column not in DISCOVERABLE_COLUMNS:
        raise ValidationError(f"Column is not discoverable: {column}", field="column")
    return (
        ItemQueryBuilder()
        .select([column])
        .add_count()
        .group_by(column)
        .order_by(column)
        .build()
    )


def build_recent_query(limit: int) -> Tuple[str, List[Any]]:
    """The ``limit`` most recently created items."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValidationError(f"limit must be a positive integer: {limit!r}", field="limit")
    return ItemQueryBuilder().select().order_default().limit(limit).build()


def build_date_range_query(start: datetime, end: datetime) -> Tuple[str, List[Any]]:
    """Items created within [start, end], newest first."""
    if start > end:
        raise ValidationError("start must not be after end", field="start")
    return ItemQueryBuilder().select().where_between("created_at", start, end).order_default().build()


def build_size_range_query(min_size: int, max_size: int) -> Tuple[str, List[Any]]:
    """Items with min_size <= size <= max_size, smallest size first."""
    if min_size > max_size:
        raise ValidationError("min_size must not exceed max_size", field="min_size")
    builder = ItemQueryBuilder().select().where_between("size", min_size, max_size).order_by("size")
    return builder.order_default().build()
