"""Database connection management for the local SQLite vault.

One connection per database path per process, opened in autocommit mode so
adapters control their own transactions (``BEGIN IMMEDIATE`` where a
read-modify-write must be atomic).
"""

from __future__ import annotations

import atexit
import logging
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from skillpulse_cli.adapters.sqlite.schema import ALL_INDEXES, ALL_TABLES, SCHEMA_VERSION

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class DatabaseConnection:
    """Connection cache for local SQLite vaults.

    Provides:
    - One connection per database path (connection reuse)
    - WAL mode for better concurrency
    - Automatic directory creation and schema setup
    - Owner-only file permissions
    - Graceful cleanup on exit
    """

    _connections: dict[str, sqlite3.Connection] = {}
    _cleanup_registered = False

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create the connection for ``db_path``.

        Args:
            db_path: Path to database file. If None, uses default location.

        Returns:
            sqlite3.Connection configured for SkillPulse usage
        """
        if db_path is None:
            db_path = Path(user_data_dir("skillpulse_cli")) / "vault.db"

        key = str(db_path)
        connection = cls._connections.get(key)
        if connection is not None:
            return connection

        connection = open_connection(db_path)
        cls._connections[key] = connection

        if not cls._cleanup_registered:
            atexit.register(cls.close_all)
            cls._cleanup_registered = True

        return connection

    @classmethod
    def close_all(cls) -> None:
        """Close every cached connection."""
        for key, connection in list(cls._connections.items()):
            try:
                connection.close()
            except sqlite3.Error as e:
                logger.warning("failed to close %s: %s", key, e)
        cls._connections.clear()


def open_connection(db_path: str | Path) -> sqlite3.Connection:
    """Open and initialise a new vault connection (no caching)."""
    is_memory = str(db_path) == MEMORY_DATABASE
    is_new_database = False

    if not is_memory:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not db_path.exists()

    connection = sqlite3.connect(
        str(db_path),
        check_same_thread=False,
        timeout=30.0,  # Wait up to 30s for locks
        isolation_level=None,
    )
    connection.row_factory = sqlite3.Row
    if not is_memory:
        connection.execute("PRAGMA journal_mode = WAL")

    if is_new_database:
        os.chmod(db_path, 0o600)

    try:
        apply_schema(connection)
    except sqlite3.Error:
        connection.close()
        raise
    return connection


def apply_schema(connection: sqlite3.Connection) -> None:
    """Create missing tables and indexes and stamp ``SCHEMA_VERSION``.

    Raises:
        sqlite3.DatabaseError: If the vault was written by a newer schema
    """
    (current,) = connection.execute("PRAGMA user_version").fetchone()
    if current > SCHEMA_VERSION:
        raise sqlite3.DatabaseError(
            f"vault schema version {current} is newer than supported version {SCHEMA_VERSION}"
        )
    for statement in ALL_TABLES + ALL_INDEXES:
        connection.execute(statement)
    if current < SCHEMA_VERSION:
        connection.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        logger.debug("vault schema upgraded from %d to %d", current, SCHEMA_VERSION)


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get database connection."""
    return DatabaseConnection.get_connection(db_path)
