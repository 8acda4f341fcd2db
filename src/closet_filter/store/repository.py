"""Persisted item store backed by DuckDB.

The repository owns CRUD on items and executes the queries composed in
``closet_filter.query``. Every successful mutation bumps ``version`` and then
notifies subscribers, which is what drives live (push-based) queries.
"""

import threading
from datetime import datetime
from itertools import count
from typing import Any, Callable, Dict, Iterable, List, Optional

import duckdb

from closet_filter.config.logging_config import get_logger
from closet_filter.database.connection import DatabaseConnection, get_memory_connection
from closet_filter.database.schema import ITEM_COLUMNS, ITEMS_TABLE, initialize_database
from closet_filter.errors import StorageFailure, ValidationError
from closet_filter.models.filter_state import FilterState, PaginationParameters, ValueCount
from closet_filter.models.item import Item
from closet_filter.query.builder import (
    build_count_query,
    build_date_range_query,
    build_distinct_query,
    build_group_count_query,
    build_paginated_query,
    build_recent_query,
    build_search_query,
    build_size_range_query,
)

logger = get_logger("repository")

ChangeListener = Callable[[int], None]

_INSERT_SQL = f"""
    INSERT INTO {ITEMS_TABLE} (image_path, size, color, category, note, created_at)
    VALUES (?, ?, ?, ?, ?, ?)
    RETURNING id
"""

_UPDATE_SQL = f"""
    UPDATE {ITEMS_TABLE}
    SET image_path = ?, size = ?, color = ?, category = ?, note = ?, created_at = ?
    WHERE id = ?
    RETURNING id
"""


def _insert_params(item: Item) -> list:
    return [item.image_path, item.size, item.color, item.category, item.note, item.created_at]


class ItemRepository:
    """CRUD and filtered queries over the items table."""

    def __init__(self, db: DatabaseConnection):
        """
        Initialize the repository and make sure the schema exists.

        Args:
            db: Database connection manager. The repository does not own it
                unless created through ``in_memory()`` or ``open()``.
        """
        self.db = db
        self._lock = threading.RLock()
        self._version = 0
        self._listeners: Dict[int, ChangeListener] = {}
        self._listener_ids = count(1)
        self._owns_db = False
        if self.db.read_only:
            logger.info("Item store opened read-only; mutations will fail")
        else:
            with self._lock:
                initialize_database(self.db.connection)

    @classmethod
    def in_memory(cls) -> "ItemRepository":
        """Repository over a private in-memory database."""
        repo = cls(get_memory_connection())
        repo._owns_db = True
        return repo

    @classmethod
    def open(cls, db_path=None) -> "ItemRepository":
        """Repository over its own connection to ``db_path`` (default: config path)."""
        repo = cls(DatabaseConnection(db_path))
        repo._owns_db = True
        return repo

    def close(self) -> None:
        if self._owns_db:
            self.db.close()

    # -------------------------------------------------------------------------
    # Execution helpers
    # -------------------------------------------------------------------------

    def _fetch(self, query: str, params: Optional[list] = None, one: bool = False):
        with self._lock:
            try:
                result = self.db.execute(query, params)
                return result.fetchone() if one else result.fetchall()
            except duckdb.Error as e:
                logger.error("Query failed: %s", e)
                raise StorageFailure(f"Item store query failed: {e}", query=query) from e

    def _mutate(self, statements: List[tuple]) -> List[list]:
        """Run (query, params) statements in one transaction and notify on success."""
        results = []
        with self._lock:
            try:
                with self.db.transaction():
                    for query, params in statements:
                        results.append(self.db.execute(query, params).fetchall())
            except duckdb.Error as e:
                logger.error("Mutation failed: %s", e)
                raise StorageFailure(f"Item store mutation failed: {e}") from e
            changed = any(rows for rows in results)
            if changed:
                self._version += 1
                version = self._version
        if changed:
            self._notify(version)
        return results

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Monotonically increasing counter bumped by every effective mutation."""
        return self._version

    def subscribe(self, listener: ChangeListener) -> int:
        with self._lock:
            token = next(self._listener_ids)
            self._listeners[token] = listener
        return token

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)

    def _notify(self, version: int) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        logger.debug("Store changed (version %d), notifying %d listeners", version, len(listeners))
        for listener in listeners:
            # Mutation is committed; remaining listeners still run
            try:
                listener(version)
            except Exception:
                logger.exception("Change listener %r failed at version %d", listener, version)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def insert(self, item: Item) -> Item:
        """Insert one item and return it with its generated id."""
        rows = self._mutate([(_INSERT_SQL, _insert_params(item))])[0]
        return item.with_id(rows[0][0])

    def insert_many(self, items: Iterable[Item]) -> List[Item]:
        """Insert several items in one transaction (one change notification)."""
        items = list(items)
        if not items:
            return []
        results = self._mutate([(_INSERT_SQL, _insert_params(item)) for item in items])
        return [item.with_id(rows[0][0]) for item, rows in zip(items, results)]

    def update(self, item: Item) -> bool:
        """Overwrite a stored item. Returns False if no item has that id."""
        if item.id is None:
            raise ValidationError("Cannot update an item without an id", field="id")
        rows = self._mutate([(_UPDATE_SQL, _insert_params(item) + [item.id])])[0]
        return bool(rows)

    def update_many(self, items: Iterable[Item]) -> int:
        """Overwrite several items in one transaction. Returns how many existed."""
        items = list(items)
        for item in items:
            if item.id is None:
                raise ValidationError("Cannot update an item without an id", field="id")
        if not items:
            return 0
        results = self._mutate([(_UPDATE_SQL, _insert_params(item) + [item.id]) for item in items])
        return sum(1 for rows in results if rows)

    def delete(self, item: Item) -> bool:
        if item.id is None:
            raise ValidationError("Cannot delete an item without an id", field="id")
        return self.delete_by_id(item.id)

    def delete_by_id(self, item_id: int) -> bool:
        rows = self._mutate([(f"DELETE FROM {ITEMS_TABLE} WHERE id = ? RETURNING id", [item_id])])[0]
        return bool(rows)

    def delete_all(self) -> int:
        rows = self._mutate([(f"DELETE FROM {ITEMS_TABLE} RETURNING id", [])])[0]
        return len(rows)

    def get_by_id(self, item_id: int) -> Optional[Item]:
        row = self._fetch(
            f"SELECT {', '.join(ITEM_COLUMNS)} FROM {ITEMS_TABLE} WHERE id = ?",
            [item_id],
            one=True,
        )
        return Item.from_row(row) if row else None

    # -------------------------------------------------------------------------
    # Filtered queries
    # -------------------------------------------------------------------------

    def find(self, state: FilterState) -> List[Item]:
        """All items matching ``state``, newest first."""
        query, params = build_search_query(state)
        return [Item.from_row(row) for row in self._fetch(query, params)]

    def find_page(self, params: PaginationParameters) -> List[Item]:
        """One offset/limit window of the ordered matches."""
        query, query_params = build_paginated_query(params)
        return [Item.from_row(row) for row in self._fetch(query, query_params)]

    def count(self, state: FilterState) -> int:
        query, params = build_count_query(state)
        return self._fetch(query, params, one=True)[0]

    def total_count(self) -> int:
        return self._fetch(f"SELECT COUNT(*) FROM {ITEMS_TABLE}", one=True)[0]

    def distinct_values(self, column: str) -> List[Any]:
        """Sorted distinct values of size, color or category."""
        query, params = build_distinct_query(column)
        return [row[0] for row in self._fetch(query, params)]

    def count_by(self, column: str) -> List[ValueCount]:
        """Item count per distinct value of size, color or category."""
        query, params = build_group_count_query(column)
        return [ValueCount(value=row[0], count=row[1]) for row in self._fetch(query, params)]

    def find_recent(self, limit: int = 10) -> List[Item]:
        """The ``limit`` newest items."""
        query, params = build_recent_query(limit)
        return [Item.from_row(row) for row in self._fetch(query, params)]

    def find_by_date_range(self, start: datetime, end: datetime) -> List[Item]:
        """Items created between ``start`` and ``end`` inclusive, newest first."""
        query, params = build_date_range_query(start, end)
        return [Item.from_row(row) for row in self._fetch(query, params)]

    def find_by_size_range(self, min_size: int, max_size: int) -> List[Item]:
        """Items whose size lies in [min_size, max_size], smallest first."""
        query, params = build_size_range_query(min_size, max_size)
        return [Item.from_row(row) for row in self._fetch(query, params)]
