"""Tests for the SQLite vault: connection setup and local accounts."""

from __future__ import annotations

import sqlite3
import stat

import pytest

from skillpulse_cli.adapters.sqlite.connection import DatabaseConnection, open_connection
from skillpulse_cli.adapters.sqlite.document_store import SqliteDocumentStore
from skillpulse_cli.adapters.sqlite.identity import LocalIdentityProvider
from skillpulse_cli.adapters.sqlite.schema import SCHEMA_VERSION
from skillpulse_cli.models import AuthError, AuthErrorKind, DocumentStoreError


@pytest.fixture()
def conn():
    connection = open_connection(":memory:")
    yield connection
    connection.close()


@pytest.fixture()
def provider(conn) -> LocalIdentityProvider:
    return LocalIdentityProvider(connection=conn)


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


class TestConnection:
    def test_new_file_is_owner_only(self, tmp_path):
        db_path = tmp_path / "nested" / "vault.db"

        connection = open_connection(db_path)
        connection.close()

        assert db_path.exists()
        assert stat.S_IMODE(db_path.stat().st_mode) == 0o600

    def test_schema_is_applied(self, conn):
        tables = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {"documents", "accounts"} <= tables
        assert conn.execute("PRAGMA user_version").fetchone()[0] == SCHEMA_VERSION

    def test_newer_vault_is_refused(self, tmp_path):
        db_path = tmp_path / "vault.db"
        connection = open_connection(db_path)
        connection.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
        connection.close()

        with pytest.raises(sqlite3.DatabaseError, match="newer"):
            open_connection(db_path)

    def test_connections_are_cached_per_path(self, tmp_path):
        db_path = tmp_path / "vault.db"
        try:
            first = DatabaseConnection.get_connection(db_path)
            second = DatabaseConnection.get_connection(str(db_path))
            assert first is second
        finally:
            DatabaseConnection.close_all()

    @pytest.mark.asyncio
    async def test_sqlite_errors_become_store_errors(self, conn):
        store = SqliteDocumentStore(connection=conn)
        conn.execute("DROP TABLE documents")

        with pytest.raises(DocumentStoreError):
            await store.get("tasks", "k")

    @pytest.mark.asyncio
    async def test_failed_update_rolls_back(self, conn, mocker):
        store = SqliteDocumentStore(connection=conn)
        await store.set("tasks", "k", {"a": 1})
        mocker.patch(
            "skillpulse_cli.adapters.sqlite.document_store.json.dumps",
            side_effect=TypeError("not serializable"),
        )

        with pytest.raises(TypeError):
            await store.update("tasks", "k", {"a": 2})

        assert not conn.in_transaction
        mocker.stopall()
        assert (await store.get("tasks", "k")).data == {"a": 1}


# ---------------------------------------------------------------------------
# LocalIdentityProvider
# ---------------------------------------------------------------------------


class TestLocalIdentityProvider:
    @pytest.mark.asyncio
    async def test_sign_up_then_sign_in(self, provider):
        created = await provider.sign_up("u@x.com", "secret1")
        await provider.sign_out()

        identity = await provider.sign_in("u@x.com", "secret1")

        assert identity.uid == created.uid
        assert identity.email == "u@x.com"
        assert identity.token is None
        assert provider.current_identity == identity

    @pytest.mark.asyncio
    async def test_password_is_not_stored_in_clear(self, provider, conn):
        await provider.sign_up("u@x.com", "secret1")

        row = conn.execute("SELECT password_hash FROM accounts").fetchone()

        assert "secret1" not in row["password_hash"]

    @pytest.mark.asyncio
    async def test_duplicate_email_is_case_insensitive(self, provider):
        await provider.sign_up("u@x.com", "secret1")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_up("U@X.com", "secret2")

        assert exc_info.value.kind is AuthErrorKind.EMAIL_ALREADY_IN_USE

    @pytest.mark.asyncio
    async def test_unknown_email(self, provider):
        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in("nobody@x.com", "secret1")
        assert exc_info.value.kind is AuthErrorKind.USER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_wrong_password(self, provider):
        await provider.sign_up("u@x.com", "secret1")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in("u@x.com", "wrong!")

        assert exc_info.value.kind is AuthErrorKind.WRONG_PASSWORD

    @pytest.mark.asyncio
    async def test_disabled_account(self, provider, conn):
        await provider.sign_up("u@x.com", "secret1")
        conn.execute("UPDATE accounts SET disabled = 1")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in("u@x.com", "secret1")

        assert exc_info.value.kind is AuthErrorKind.ACCOUNT_DISABLED

    @pytest.mark.asyncio
    async def test_password_reset_requires_account(self, provider):
        await provider.sign_up("u@x.com", "secret1")

        await provider.send_password_reset("u@x.com")
        with pytest.raises(AuthError) as exc_info:
            await provider.send_password_reset("other@x.com")

        assert exc_info.value.kind is AuthErrorKind.USER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_restore_checks_account(self, provider, conn):
        identity = await provider.sign_up("u@x.com", "secret1")
        fresh = LocalIdentityProvider(connection=conn)

        assert fresh.restore(identity.to_credentials()) == identity
        assert fresh.current_identity == identity
        assert fresh.restore({"uid": "other", "email": "u@x.com"}) is None
        assert fresh.restore({}) is None

    @pytest.mark.asyncio
    async def test_storage_failure_is_unknown(self, provider, conn):
        conn.execute("DROP TABLE accounts")

        with pytest.raises(AuthError) as exc_info:
            await provider.sign_in("u@x.com", "secret1")

        assert exc_info.value.kind is AuthErrorKind.UNKNOWN
