"""DuckDB connection handling for the item store."""

import duckdb
from pathlib import Path
from typing import Iterator, Optional, Union
from contextlib import contextmanager

from closet_filter.config import config
from closet_filter.config.logging_config import get_logger

logger = get_logger("database")

MEMORY_PATH = ":memory:"


class DatabaseConnection:
    """One lazily opened DuckDB connection to the catalog database."""

    def __init__(
        self,
        db_path: Optional[Union[Path, str]] = None,
        read_only: Optional[bool] = None,
    ):
        """
        Args:
            db_path: Path to the database file, or ":memory:". Defaults to
                ``CLOSET_DB_PATH``.
            read_only: Open the file read-only. Defaults to
                ``CLOSET_DB_READ_ONLY``; always False for in-memory databases.
        """
        self.db_path = db_path if db_path is not None else config.database.path
        if read_only is None:
            read_only = config.database.read_only
        self.read_only = bool(read_only) and not self.is_memory
        self._connection: Optional[duckdb.DuckDBPyConnection] = None

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == MEMORY_PATH

    def connect(self) -> duckdb.DuckDBPyConnection:
        if self._connection is not None:
            return self._connection

        if not self.is_memory and not self.read_only:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = duckdb.connect(str(self.db_path), read_only=self.read_only)
        self._connection.execute(f"SET memory_limit = '{config.database.memory_limit}'")
        if config.database.threads > 0:
            self._connection.execute(f"SET threads = {config.database.threads}")

        mode = "read-only" if self.read_only else "read-write"
        logger.info(f"Connected to item store: {self.db_path} ({mode})")
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.info("Item store connection closed")

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """The open connection, connecting on first use."""
        if self._connection is None:
            return self.connect()
        return self._connection

    def execute(self, query: str, parameters: Optional[list] = None):
        conn = self.connection
        if parameters:
            return conn.execute(query, parameters)
        return conn.execute(query)

    @contextmanager
    def transaction(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """Run the block in one transaction, rolled back if it raises.

        Example:
            with db.transaction():
                db.execute("DELETE FROM items WHERE id = ?", [item_id])
        """
        conn = self.connection
        conn.execute("BEGIN TRANSACTION")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def get_memory_connection() -> DatabaseConnection:
    """Connected private in-memory database, used by tests and throwaway sessions."""
    db = DatabaseConnection(MEMORY_PATH)
    db.connect()
    return db
