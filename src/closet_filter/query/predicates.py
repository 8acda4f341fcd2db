"""Per-axis predicates and the combinator rules between them.

Each filter axis contributes an optional predicate: ``None`` means the axis has
no active constraint and is vacuously satisfied. Values inside one axis combine
with OR (``color IN (...)``); the axes combine with AND. Free-text search is an
OR across the searchable fields, ANDed with the other axes.

Every predicate renders to a parameterised SQL fragment and can also be
evaluated in memory against an Item with the same semantics.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from closet_filter.models.filter_state import FilterState, FilterType
from closet_filter.models.item import SEARCHABLE_FIELDS, Item

# Column each multi-valued axis filters on
AXIS_COLUMNS = {
    FilterType.SIZE: "size",
    FilterType.COLOR: "color",
    FilterType.CATEGORY: "category",
}


@dataclass(frozen=True)
class InPredicate:
    """column IN (v1, v2, ...): OR within one axis."""

    column: str
    values: Tuple[Any, ...]

    def to_sql(self, table_alias: Optional[str] = None) -> Tuple[str, List[Any]]:
        col = f"{table_alias}.{self.column}" if table_alias else self.column
        placeholders = ", ".join(["?" for _ in self.values])
        return f"{col} IN ({placeholders})", list(self.values)

    def matches(self, item: Item) -> bool:
        return getattr(item, self.column) in self.values


@dataclass(frozen=True)
class ContainsAnyPredicate:
    """Case-sensitive substring match on any of several columns."""

    columns: Tuple[str, ...]
    text: str

    def to_sql(self, table_alias: Optional[str] = None) -> Tuple[str, List[Any]]:
        prefix = f"{table_alias}." if table_alias else ""
        # contains() is a literal substring test; LIKE would treat % and _ as wildcards
        clauses = [f"contains({prefix}{col}, ?)" for col in self.columns]
        return f"({' OR '.join(clauses)})", [self.text] * len(self.columns)

    def matches(self, item: Item) -> bool:
        return any(self.text in (getattr(item, col) or "") for col in self.columns)


Predicate = Union[InPredicate, ContainsAnyPredicate]


def axis_predicate(state: FilterState, filter_type: FilterType) -> Optional[Predicate]:
    """Predicate contributed by one axis, or None when the axis is unconstrained."""
    if filter_type is FilterType.SEARCH:
        text = state.search_text
        if not text.strip():
            return None
        return ContainsAnyPredicate(columns=SEARCHABLE_FIELDS, text=text)

    values = state.values_for(filter_type)
    if not values:
        return None
    # Sorted so the generated SQL is stable for equal states
    return InPredicate(column=AXIS_COLUMNS[filter_type], values=tuple(sorted(values)))


def build_predicates(state: FilterState) -> Dict[FilterType, Optional[Predicate]]:
    """Map every axis to its optional predicate."""
    return {filter_type: axis_predicate(state, filter_type) for filter_type in FilterType}


def active_predicates(state: FilterState) -> List[Predicate]:
    return [p for p in build_predicates(state).values() if p is not None]


def build_where_clause(
    state: FilterState,
    table_alias: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    """AND all active axis predicates into a WHERE clause.

    Returns:
        Tuple of (WHERE clause string, list of parameters). An unconstrained
        state yields ``"1=1"``.
    """
    conditions = []
    params: List[Any] = []
    for predicate in active_predicates(state):
        sql, predicate_params = predicate.to_sql(table_alias)
        conditions.append(sql)
        params.extend(predicate_params)

    where_clause = " AND ".join(conditions) if conditions else "1=1"
    return where_clause, params


def matches(item: Item, state: FilterState) -> bool:
    """In-memory evaluation of the same combinator rules used for SQL."""
    return all(predicate.matches(item) for predicate in active_predicates(state))


def sort_key(item: Item) -> tuple:
    """Default result ordering: newest first, ties by ascending id."""
    return (-item.created_at.timestamp(), item.id if item.id is not None else 0)
