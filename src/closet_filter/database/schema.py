"""DuckDB schema for the item store."""

import duckdb

from closet_filter.config.logging_config import get_logger

logger = get_logger("schema")

ITEMS_TABLE = "items"

# Column order used by SELECT * style queries and Item.from_row
ITEM_COLUMNS = ("id", "image_path", "size", "color", "category", "note", "created_at")

CREATE_ITEMS_SEQUENCE = "CREATE SEQUENCE IF NOT EXISTS items_id_seq START 1"

CREATE_ITEMS = """
CREATE TABLE IF NOT EXISTS items (
    id          BIGINT PRIMARY KEY DEFAULT nextval('items_id_seq'),
    image_path  VARCHAR NOT NULL DEFAULT '',
    size        INTEGER NOT NULL CHECK (size > 0),
    color       VARCHAR NOT NULL,
    category    VARCHAR NOT NULL,
    note        VARCHAR NOT NULL DEFAULT '',
    created_at  TIMESTAMP NOT NULL
)
"""

# Indexes for the default ordering and the three filter axes
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_items_created_at ON items(created_at)",
    "CREATE INDEX IF NOT EXISTS idx_items_size ON items(size)",
    "CREATE INDEX IF NOT EXISTS idx_items_color ON items(color)",
    "CREATE INDEX IF NOT EXISTS idx_items_category ON items(category)",
]


def create_all_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Create the items sequence, table and indexes if missing."""
    conn.execute(CREATE_ITEMS_SEQUENCE)
    conn.execute(CREATE_ITEMS)
    for statement in CREATE_INDEXES:
        conn.execute(statement)


def initialize_database(conn: duckdb.DuckDBPyConnection) -> None:
    """Create the schema, logging and re-raising any failure."""
    try:
        create_all_tables(conn)
    except duckdb.Error as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
    logger.info("Database schema initialized")


def drop_all_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Drop the items table (with its indexes) and its id sequence."""
    conn.execute(f"DROP TABLE IF EXISTS {ITEMS_TABLE}")
    conn.execute("DROP SEQUENCE IF EXISTS items_id_seq")
