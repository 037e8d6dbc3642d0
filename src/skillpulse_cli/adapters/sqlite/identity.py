"""Local account management for the SQLite vault.

Passwords are stored as salted PBKDF2-SHA256 hashes. There is no mail
delivery in a local vault, so a password reset request is only validated
and logged.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import sqlite3
import uuid
from pathlib import Path

from skillpulse_cli.adapters.sqlite.connection import get_connection
from skillpulse_cli.models import AuthError, AuthErrorKind, Identity
from skillpulse_cli.repositories import IdentityProvider
from skillpulse_cli.utils.dates import now_iso

logger = logging.getLogger(__name__)

_HASH_ITERATIONS = 200_000


def hash_password(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), _HASH_ITERATIONS
    )
    return digest.hex()


class LocalIdentityProvider(IdentityProvider):
    """Identity provider for local contexts."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        super().__init__()
        self.db_path = db_path
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def _find_account(self, email: str) -> sqlite3.Row | None:
        try:
            return self.connection.execute(
                "SELECT uid, email, password_hash, salt, disabled FROM accounts WHERE email = ?",
                (email,),
            ).fetchone()
        except sqlite3.Error as e:
            raise AuthError(AuthErrorKind.UNKNOWN, str(e)) from e

    async def sign_up(self, email: str, password: str) -> Identity:
        uid = uuid.uuid4().hex
        salt = secrets.token_hex(16)
        try:
            self.connection.execute(
                """
                INSERT INTO accounts (uid, email, password_hash, salt, disabled, created_at)
                VALUES (?, ?, ?, ?, 0, ?)
                """,
                (uid, email, hash_password(password, salt), salt, now_iso()),
            )
        except sqlite3.IntegrityError as e:
            raise AuthError(AuthErrorKind.EMAIL_ALREADY_IN_USE) from e
        except sqlite3.Error as e:
            raise AuthError(AuthErrorKind.UNKNOWN, str(e)) from e

        logger.info("local account created: %s", email)
        identity = Identity(uid=uid, email=email)
        self._set_identity(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        row = self._find_account(email)
        if row is None:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND)
        if row["disabled"]:
            raise AuthError(AuthErrorKind.ACCOUNT_DISABLED)
        if not hmac.compare_digest(hash_password(password, row["salt"]), row["password_hash"]):
            raise AuthError(AuthErrorKind.WRONG_PASSWORD)

        identity = Identity(uid=row["uid"], email=row["email"])
        self._set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        self._set_identity(None)

    async def send_password_reset(self, email: str) -> None:
        if self._find_account(email) is None:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND)
        logger.info("password reset requested for local account %s", email)

    def restore(self, credentials: dict) -> Identity | None:
        email = credentials.get("email")
        if not email:
            return None
        row = self._find_account(email)
        if row is None or row["disabled"] or row["uid"] != credentials.get("uid"):
            return None
        identity = Identity(uid=row["uid"], email=row["email"])
        self._set_identity(identity)
        return identity
