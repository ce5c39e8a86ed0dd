#!/usr/bin/env python3
"""Schema migrations: plain .sql files in db/migrations applied in name order.

Applied files are recorded in the schema_migrations table.
"""

from typing import List, Set

from logger import get_logger

logger = get_logger()


def _ensure_migrations_table(conn) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def _applied(conn) -> Set[str]:
    return {row[0] for row in conn.execute("SELECT migration_file FROM schema_migrations")}


def get_available_migrations(db_manager) -> List[str]:
    migrations_dir = db_manager.get_migrations_dir()
    if not migrations_dir.exists():
        return []
    return sorted(path.name for path in migrations_dir.glob("*.sql"))


def apply_pending(db_manager) -> List[str]:
    """Apply every migration not yet recorded in schema_migrations.

    Each file runs as a script (executescript commits anything pending
    first) and is recorded once it succeeds. A failing file stops the run.

    Returns:
        Names of the migrations applied, in order.
    """
    applied_now = []
    with db_manager.connect() as conn:
        _ensure_migrations_table(conn)
        done = _applied(conn)

        for migration in get_available_migrations(db_manager):
            if migration in done:
                continue

            sql = (db_manager.get_migrations_dir() / migration).read_text()
            try:
                conn.executescript(sql)
                conn.execute(
                    "INSERT INTO schema_migrations (migration_file) VALUES (?)",
                    (migration,),
                )
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Error applying migration {migration}: {e}")
                raise

            logger.info(f"Applied migration: {migration}")
            applied_now.append(migration)

    return applied_now


def cmd_status(args, db_manager):
    """Show migration status."""
    if not db_manager.get_db_path().exists():
        logger.info(
            "Database does not exist. Run 'python -m cli migrate apply' to create it."
        )
        return

    available = get_available_migrations(db_manager)
    if not available:
        logger.info("No migrations found.")
        return

    with db_manager.connect() as conn:
        _ensure_migrations_table(conn)
        done = _applied(conn)

    logger.info("Migration Status:")
    for migration in available:
        logger.info(f"  {migration}: {'APPLIED' if migration in done else 'PENDING'}")
    pending = [m for m in available if m not in done]
    logger.info(f"{len(available)} migration(s), {len(pending)} pending")


def cmd_apply(args, db_manager):
    """Apply pending migrations."""
    applied = apply_pending(db_manager)
    if applied:
        logger.info(f"Successfully applied {len(applied)} migration(s).")
    else:
        logger.info("No pending migrations.")


def setup_parser(subparsers):
    """Setup migrate subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "migrate",
        help="Database migrations",
        description="Manage database schema migrations",
    )
    migrate_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available migration commands",
        dest="subcommand",
        required=True,
    )

    status_parser = migrate_subparsers.add_parser("status", help="Show migration status")
    status_parser.set_defaults(func=cmd_status)

    apply_parser = migrate_subparsers.add_parser("apply", help="Apply pending migrations")
    apply_parser.set_defaults(func=cmd_apply)
