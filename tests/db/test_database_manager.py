"""Tests for DatabaseManager and migrations."""

import sqlite3

import pytest

from cli.migrate import apply_pending, get_available_migrations
from db.manager import DatabaseManager


@pytest.fixture
def db_manager(test_config):
    """DatabaseManager backed by a file in the test directory, schema applied."""
    manager = DatabaseManager(test_config)
    apply_pending(manager)
    return manager


class TestMigrations:
    """Tests for applying schema migrations."""

    def test_apply_pending_creates_schema(self, test_config):
        """Test that migrations create the categories table."""
        manager = DatabaseManager(test_config)

        applied = apply_pending(manager)

        assert applied == get_available_migrations(manager)
        assert "001_create_categories.sql" in applied
        assert manager.fetch_all("categories") == []

    def test_apply_pending_is_idempotent(self, db_manager):
        """Test that already applied migrations are skipped."""
        assert apply_pending(db_manager) == []


class TestDatabaseManager:
    """Tests for connections, transactions and reads."""

    def test_connect_enables_foreign_keys(self, db_manager):
        """Test that every connection enforces foreign keys."""
        with db_manager.connect() as conn:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

            with pytest.raises(sqlite3.IntegrityError):
                conn.execute(
                    "INSERT INTO categories (category_name, parent_id) VALUES (?, ?)",
                    ("Orphan", 404),
                )

    def test_transaction_commits(self, db_manager):
        """Test that a transaction commits when the block succeeds."""
        with db_manager.transaction() as conn:
            db_manager.execute(
                conn, "INSERT INTO categories (category_name) VALUES (?)", ("A",)
            )

        rows = db_manager.fetch_all("categories")
        assert [row[1] for row in rows] == ["A"]

    def test_transaction_rolls_back(self, db_manager):
        """Test that a failing block leaves nothing behind."""
        with pytest.raises(sqlite3.IntegrityError):
            with db_manager.transaction() as conn:
                db_manager.execute(
                    conn, "INSERT INTO categories (category_name) VALUES (?)", ("A",)
                )
                db_manager.execute(
                    conn, "INSERT INTO categories (category_name) VALUES (?)", ("A",)
                )

        assert db_manager.fetch_all("categories") == []

    def test_delete_parent_sets_child_parent_null(self, db_manager):
        """Test the schema's ON DELETE SET NULL for rows deleted directly."""
        with db_manager.transaction() as conn:
            parent = db_manager.execute(
                conn, "INSERT INTO categories (category_name) VALUES (?)", ("P",)
            ).lastrowid
            db_manager.execute(
                conn,
                "INSERT INTO categories (category_name, parent_id) VALUES (?, ?)",
                ("C", parent),
            )

        with db_manager.transaction() as conn:
            db_manager.execute(
                conn, "DELETE FROM categories WHERE category_id = ?", (parent,)
            )

        rows = db_manager.fetch_all("categories")
        assert [(row[1], row[3]) for row in rows] == [("C", None)]

    def test_fetch_all_unknown_table(self, db_manager):
        """Test that only known tables can be read."""
        with pytest.raises(ValueError):
            db_manager.fetch_all("users; DROP TABLE categories")

    def test_slow_query_warning(self, test_config, caplog):
        """Test that statements over the threshold are logged as warnings."""
        test_config.slow_query_ms = -1
        manager = DatabaseManager(test_config)

        with caplog.at_level("WARNING", logger="storefront"):
            with manager.connect() as conn:
                manager.execute(conn, "SELECT 1")

        assert "Slow query detected" in caplog.text
