"""SQLite implementation of DocumentStore."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from skillpulse_cli.adapters.sqlite.connection import get_connection
from skillpulse_cli.models import (
    Document,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentQuery,
    DocumentStoreError,
)
from skillpulse_cli.repositories import DocumentStore
from skillpulse_cli.utils.dates import now_iso

_SQL_OPERATORS = {"==": "=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}


def _field(name: str) -> str:
    # Field names are validated against FIELD_NAME_PATTERN by the query models.
    return f"json_extract(data, '$.{name}')"


class SqliteDocumentStore(DocumentStore):
    """Document store backed by the local SQLite vault."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        """Initialize SQLite document store.

        Args:
            db_path: Optional database file path. If None, uses default location.
            connection: Pre-opened connection, used as-is when given.
        """
        self.db_path = db_path
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.connection
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def _load(self, conn: sqlite3.Connection, collection: str, key: str) -> dict | None:
        row = conn.execute(
            "SELECT data FROM documents WHERE collection = ? AND key = ?",
            (collection, key),
        ).fetchone()
        return json.loads(row["data"]) if row else None

    async def get(self, collection: str, key: str) -> Document | None:
        try:
            data = self._load(self.connection, collection, key)
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        return Document(key=key, data=data) if data is not None else None

    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        try:
            self.connection.execute(
                """
                INSERT INTO documents (collection, key, data, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (collection, key)
                DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                """,
                (collection, key, json.dumps(data), now_iso()),
            )
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e

    async def create(self, collection: str, key: str, data: dict[str, Any]) -> None:
        try:
            self.connection.execute(
                "INSERT INTO documents (collection, key, data, updated_at) VALUES (?, ?, ?, ?)",
                (collection, key, json.dumps(data), now_iso()),
            )
        except sqlite3.IntegrityError as e:
            raise DocumentExistsError(collection, key) from e
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e

    async def update(
        self, collection: str, key: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        try:
            with self._transaction() as conn:
                current = self._load(conn, collection, key)
                if current is None:
                    raise DocumentNotFoundError(collection, key)
                current.update(data)
                conn.execute(
                    "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND key = ?",
                    (json.dumps(current), now_iso(), collection, key),
                )
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        return current

    async def delete(self, collection: str, key: str) -> None:
        try:
            cursor = self.connection.execute(
                "DELETE FROM documents WHERE collection = ? AND key = ?",
                (collection, key),
            )
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        if cursor.rowcount == 0:
            raise DocumentNotFoundError(collection, key)

    async def query(self, collection: str, query: DocumentQuery) -> list[Document]:
        sql = "SELECT key, data FROM documents WHERE collection = ?"
        params: list[Any] = [collection]

        for field_filter in query.filters:
            sql += f" AND {_field(field_filter.field)} {_SQL_OPERATORS[field_filter.op]} ?"
            params.append(field_filter.value)

        if query.order_by:
            order_field = _field(query.order_by)
            sql += f" AND {order_field} IS NOT NULL"
            if query.start_after is not None:
                sql += f" AND {order_field} {'<' if query.descending else '>'} ?"
                params.append(query.start_after)
            sql += f" ORDER BY {order_field} {'DESC' if query.descending else 'ASC'}"

        if query.limit is not None:
            sql += " LIMIT ?"
            params.append(query.limit)

        try:
            rows = self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        return [Document(key=row["key"], data=json.loads(row["data"])) for row in rows]

    async def increment(
        self, collection: str, key: str, field: str, amount: int = 1
    ) -> int:
        try:
            with self._transaction() as conn:
                current = self._load(conn, collection, key) or {}
                value = int(current.get(field, 0)) + amount
                current[field] = value
                conn.execute(
                    """
                    INSERT INTO documents (collection, key, data, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT (collection, key)
                    DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                    """,
                    (collection, key, json.dumps(current), now_iso()),
                )
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        return value
