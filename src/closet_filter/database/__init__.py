"""Database module for DuckDB operations."""

from .connection import (
    DatabaseConnection,
    MEMORY_PATH,
    get_memory_connection,
)
from .schema import (
    CREATE_INDEXES,
    ITEMS_TABLE,
    ITEM_COLUMNS,
    initialize_database,
    create_all_tables,
    drop_all_tables,
)

__all__ = [
    # Connection
    "DatabaseConnection",
    "MEMORY_PATH",
    "get_memory_connection",
    # Schema
    "CREATE_INDEXES",
    "ITEMS_TABLE",
    "ITEM_COLUMNS",
    "initialize_database",
    "create_all_tables",
    "drop_all_tables",
]
