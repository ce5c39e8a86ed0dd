"""Database manager for SQLite connections, transactions and path management."""

import sqlite3
import time
from contextlib import contextmanager
from config import Config, get_migrations_dir
from logger import get_logger

logger = get_logger()

# Tables that fetch_all may read; table names cannot be bound as parameters
_READABLE_TABLES = {
    "categories": (
        "SELECT category_id, category_name, category_description, parent_id, "
        "created_at, updated_at FROM categories ORDER BY category_id"
    ),
}


class DatabaseManager:
    """Manages database connections and paths.

    The manager is created once at startup and handed to the services that
    need storage. Every unit of work opens its own connection through
    connect() and closes it when done.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        """Initialize the database manager.

        Args:
            config: Config object containing database configuration.
        """
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Foreign key enforcement is switched on for every connection.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self):
        """Run a batch of statements atomically.

        BEGIN IMMEDIATE takes the write lock up front, so reads made inside
        the block see the state the writes will apply to. The batch is
        committed when the block exits normally and rolled back when it
        raises; the exception is re-raised.

        Yields:
            sqlite3.Connection: Connection with an open transaction.
        """
        with self.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except Exception:
                conn.rollback()
                logger.warning("Transaction rolled back")
                raise
            conn.commit()

    def execute(self, conn, sql: str, params: tuple = ()):
        """Execute a statement, logging its duration.

        Statements slower than config.slow_query_ms are logged as warnings.

        Args:
            conn: Connection to execute on.
            sql: SQL statement.
            params: Bound parameters.

        Returns:
            sqlite3.Cursor: Cursor for the executed statement.
        """
        start = time.perf_counter()
        try:
            cursor = conn.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Database error: {e} ({sql.strip()})")
            raise
        duration_ms = (time.perf_counter() - start) * 1000

        logger.debug(f"Query executed in {duration_ms:.2f} ms")
        if duration_ms > self.config.slow_query_ms:
            logger.warning(
                f"Slow query detected: {sql.strip()}, duration: {duration_ms:.2f} ms"
            )
        return cursor

    def fetch_all(self, table_name: str, conn=None) -> list:
        """Read every row of a table.

        Args:
            table_name: Name of the table to read.
            conn: Optional open connection (e.g. inside transaction()).

        Returns:
            List of row tuples.

        Raises:
            ValueError: If the table is not readable through this method.
        """
        if table_name not in _READABLE_TABLES:
            raise ValueError(f"Unknown table: {table_name}")

        sql = _READABLE_TABLES[table_name]
        if conn is not None:
            return self.execute(conn, sql).fetchall()

        with self.connect() as conn:
            return self.execute(conn, sql).fetchall()

    def get_db_path(self):
        """Get the current database path.

        Returns:
            Path: Path to the database file.
        """
        return self.config.db_path

    def get_migrations_dir(self):
        """Get the migrations directory path.

        Returns:
            Path: Path to the migrations directory.
        """
        return get_migrations_dir()
