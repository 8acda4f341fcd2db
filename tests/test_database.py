"""Tests for database module."""

from dataclasses import replace
from unittest.mock import patch

import duckdb
import pytest

from closet_filter.database import (
    CREATE_INDEXES,
    ITEM_COLUMNS,
    ITEMS_TABLE,
    DatabaseConnection,
    create_all_tables,
    drop_all_tables,
    get_memory_connection,
    initialize_database,
)
from closet_filter.errors import StorageFailure
from closet_filter.models.filter_state import FilterState
from closet_filter.models.item import Item
from closet_filter.store.repository import ItemRepository


def _index_names(db):
    rows = db.execute(
        "SELECT index_name FROM duckdb_indexes() WHERE table_name = ? ORDER BY index_name",
        [ITEMS_TABLE],
    ).fetchall()
    return [row[0] for row in rows]


class TestDatabaseConnection:
    """Tests for database connection functions."""

    def test_get_memory_connection(self):
        """Test in-memory connection."""
        db = get_memory_connection()
        assert db.is_memory

        result = db.execute("SELECT 1").fetchone()
        assert result[0] == 1

        db.close()

    def test_file_connection_creates_parent(self, tmp_path):
        """Test file-based connection."""
        db_path = tmp_path / "nested" / "test.duckdb"

        with DatabaseConnection(db_path, read_only=False) as db:
            db.execute("CREATE TABLE test (id INTEGER)")
            db.execute("INSERT INTO test VALUES (1)")

        assert db_path.exists()

    def test_context_manager(self, tmp_path):
        with DatabaseConnection(tmp_path / "ctx.duckdb") as db:
            assert db.execute("SELECT ?", [2]).fetchone()[0] == 2
        assert db._connection is None

    def test_connect_is_reused(self):
        db = DatabaseConnection(":memory:")
        assert db.connect() is db.connect()
        db.close()

    def test_read_only_defaults_to_config(self, tmp_path):
        with patch("closet_filter.database.connection.config.database.read_only", True):
            assert DatabaseConnection(tmp_path / "ro.duckdb").read_only
            assert not DatabaseConnection(tmp_path / "ro.duckdb", read_only=False).read_only

    def test_memory_is_never_read_only(self):
        assert not DatabaseConnection(":memory:", read_only=True).read_only


class TestTransaction:
    """Tests for DatabaseConnection.transaction."""

    def test_commits_on_success(self):
        db = get_memory_connection()
        db.execute("CREATE TABLE t (id INTEGER)")
        with db.transaction():
            db.execute("INSERT INTO t VALUES (1)")
            db.execute("INSERT INTO t VALUES (2)")
        assert db.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 2
        db.close()

    def test_rolls_back_on_error(self):
        db = get_memory_connection()
        db.execute("CREATE TABLE t (id INTEGER)")
        with pytest.raises(ValueError):
            with db.transaction():
                db.execute("INSERT INTO t VALUES (1)")
                raise ValueError("abort")
        assert db.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0
        db.close()


class TestReadOnlyStore:
    """A repository over a read-only file reads but never writes."""

    def test_reads_work_and_writes_fail(self, tmp_path):
        db_path = tmp_path / "closet.duckdb"
        writer = ItemRepository(DatabaseConnection(db_path, read_only=False))
        writer.insert(Item(size=100, color="red", category="shirt"))
        writer.db.close()

        reader = ItemRepository(DatabaseConnection(db_path, read_only=True))
        try:
            assert reader.count(FilterState()) == 1
            with pytest.raises(StorageFailure):
                reader.insert(Item(size=110, color="blue", category="shirt"))
            assert reader.version == 0
        finally:
            reader.db.close()


class TestSchema:
    """Tests for database schema functions."""

    def test_create_all_tables(self):
        """Test table creation."""
        db = get_memory_connection()
        create_all_tables(db.connection)

        columns = db.execute(
            "SELECT column_name FROM information_schema.columns WHERE table_name = ? ORDER BY ordinal_position",
            [ITEMS_TABLE],
        ).fetchall()
        assert tuple(c[0] for c in columns) == ITEM_COLUMNS

        db.close()

    def test_creates_filter_indexes(self):
        db = get_memory_connection()
        create_all_tables(db.connection)
        assert _index_names(db) == [
            "idx_items_category",
            "idx_items_color",
            "idx_items_created_at",
            "idx_items_size",
        ]
        db.close()

    def test_initialize_is_idempotent(self):
        db = get_memory_connection()
        initialize_database(db.connection)
        initialize_database(db.connection)
        assert db.execute(f"SELECT COUNT(*) FROM {ITEMS_TABLE}").fetchone()[0] == 0
        assert len(_index_names(db)) == len(CREATE_INDEXES)
        db.close()

    def test_indexed_columns_can_be_updated(self):
        repo = ItemRepository.in_memory()
        item = repo.insert(Item(size=100, color="red", category="shirt"))
        assert repo.update(replace(item, size=110, color="blue", category="coat"))
        assert repo.count(FilterState(color_filters=frozenset({"blue"}))) == 1
        repo.close()

    def test_size_must_be_positive(self):
        db = get_memory_connection()
        initialize_database(db.connection)
        with pytest.raises(duckdb.ConstraintException):
            db.execute(
                "INSERT INTO items (size, color, category, created_at) VALUES (0, 'red', 'shirt', TIMESTAMP '2024-01-01 00:00:00')"
            )
        db.close()

    def test_drop_all_tables(self):
        db = get_memory_connection()
        initialize_database(db.connection)
        drop_all_tables(db.connection)

        tables = db.execute(
            "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
        ).fetchall()
        assert tables == []
        assert _index_names(db) == []
        db.close()
