"""Database connection management.

Simple SQLite connection handling with schema initialization.
"""

import logging
import os
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

# Default database path, overridable from the environment
DEFAULT_DB_PATH = Path(os.environ.get("PLAYMATCH_DB_PATH", "./playmatch.db"))

# Schema file location
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Seconds to wait on a locked database before failing
BUSY_TIMEOUT = 10.0


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """Get a database connection.

    Args:
        db_path: Path to database file. Uses DEFAULT_DB_PATH if not specified.

    Returns:
        SQLite connection with row factory set to sqlite3.Row
    """
    path = Path(db_path) if db_path else DEFAULT_DB_PATH
    conn = sqlite3.connect(path, timeout=BUSY_TIMEOUT)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db(db_path: Path | str | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database connections.

    Commits on success, rolls back on any exception.

    Usage:
        with get_db() as conn:
            cursor = conn.execute("SELECT * FROM match_proposals")
            proposals = cursor.fetchall()
    """
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def db_factory(db_path: Path | str | None = None):
    """Bind get_db to a specific database path.

    Services take a zero-argument factory so tests and the app can point
    them at different files.
    """

    def factory():
        return get_db(db_path)

    return factory


def init_db(db_path: Path | str | None = None) -> None:
    """Initialize database with schema.

    Creates tables if they don't exist. Safe to call multiple times.

    Args:
        db_path: Path to database file. Uses DEFAULT_DB_PATH if not specified.
    """
    schema_sql = SCHEMA_PATH.read_text()

    with get_db(db_path) as conn:
        conn.executescript(schema_sql)
        _run_migrations(conn)

    logger.debug("[DB] Initialized schema at %s", db_path or DEFAULT_DB_PATH)


def _run_migrations(conn: sqlite3.Connection) -> None:
    """Run database migrations for existing databases.

    Adds columns that may not exist in older database versions.
    Safe to call multiple times - checks for column existence first.
    """
    # Migration: score snapshot on proposals
    _add_column_if_not_exists(conn, "match_proposals", "score", "INTEGER")

    # Migration: bearer token for remote event store
    _add_column_if_not_exists(conn, "settings", "event_store_token", "TEXT")

    # Migration: accept claim that blocks concurrent declines
    _add_column_if_not_exists(conn, "match_proposals", "accept_claim", "TEXT")


def _add_column_if_not_exists(
    conn: sqlite3.Connection, table: str, column: str, column_def: str
) -> None:
    """Add a column to a table if it doesn't exist.

    Args:
        conn: Database connection
        table: Table name
        column: Column name to add
        column_def: Column definition (type and default)
    """
    cursor = conn.execute(f"PRAGMA table_info({table})")
    columns = {row["name"] for row in cursor.fetchall()}
    if column not in columns:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_def}")
        logger.info("[DB] Added column %s.%s", table, column)


def reset_db(db_path: Path | str | None = None) -> None:
    """Reset database - deletes the file and reinitializes.

    WARNING: This deletes all data!

    Args:
        db_path: Path to database file. Uses DEFAULT_DB_PATH if not specified.
    """
    path = Path(db_path) if db_path else DEFAULT_DB_PATH

    if path.exists():
        path.unlink()

    init_db(path)
