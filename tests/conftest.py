"""Shared pytest fixtures for all tests."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path

import pytest

from config import Config, get_migrations_dir
from db.manager import DatabaseManager
from logger import get_logger
from services.base import Services
from tests.helpers import run_migrations


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    conn.execute("PRAGMA foreign_keys = ON")
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "storefront",
        db_data_dir=tmp_path / "storefront" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "storefront" / "logs",
        slow_query_ms=1000,
        enable_reset=False,
    )


class TestDatabaseManager(DatabaseManager):
    """Database manager bound to a single in-memory connection.

    Transactions, timing and fetch_all are inherited; only connection
    handling differs so every service shares the test connection.
    """

    __test__ = False

    def __init__(self, config, conn):
        super().__init__(config)
        self.conn = conn

    @contextmanager
    def connect(self):
        # Don't close the connection - the test_db fixture owns it
        yield self.conn

    def get_db_path(self):
        """Return a fake path for the test database."""
        return Path(":memory:")


@pytest.fixture
def db_manager_with_schema(test_config, test_db):
    """Create a DatabaseManager with schema already set up.

    Args:
        test_config: Test configuration fixture.
        test_db: In-memory database connection fixture.

    Returns:
        TestDatabaseManager: Database manager with schema ready.
    """
    run_migrations(test_db, get_migrations_dir())
    return TestDatabaseManager(test_config, test_db)


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with test database.

    Args:
        test_config: Test configuration fixture.
        db_manager_with_schema: Database manager with schema set up.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema)


@pytest.fixture
def insert_category(test_db):
    """Insert a category row directly, bypassing the store.

    Returns:
        Callable taking (name, parent_id=None, description=None) and
        returning the new category_id.
    """

    def insert(name, parent_id=None, description=None):
        cursor = test_db.execute(
            "INSERT INTO categories (category_name, category_description, parent_id) "
            "VALUES (?, ?, ?)",
            (name, description, parent_id),
        )
        test_db.commit()
        return cursor.lastrowid

    return insert


@pytest.fixture(autouse=True)
def reset_logger():
    """Undo setup_logging() calls made by CLI tests."""
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
