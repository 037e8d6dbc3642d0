"""Service for handling authentication-related operations.

Input is validated here before any provider call, so a malformed email
never costs a network round-trip. Successful sessions are persisted per
context so later CLI invocations can restore them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from skillpulse_cli.models import AuthError, AuthErrorKind, Identity
from skillpulse_cli.repositories import IdentityProvider
from skillpulse_cli.repositories.identity import IdentityListener

if TYPE_CHECKING:
    from skillpulse_cli.services.config_service import ConfigService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6

T = TypeVar("T")


def validate_email(email: str | None) -> str:
    cleaned = (email or "").strip()
    if not cleaned:
        raise AuthError(AuthErrorKind.EMPTY_FIELDS)
    if not EMAIL_PATTERN.match(cleaned):
        raise AuthError(AuthErrorKind.INVALID_EMAIL)
    return cleaned


def validate_credentials(
    email: str | None, password: str | None, *, new_account: bool = False
) -> str:
    """Check email and password before they reach the provider.

    Returns the trimmed email.

    Raises:
        AuthError: ``empty_fields``, ``invalid_email`` or, for new accounts,
            ``password_too_short``
    """
    if not (email or "").strip() or not password:
        raise AuthError(AuthErrorKind.EMPTY_FIELDS)
    cleaned = validate_email(email)
    if new_account and len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(AuthErrorKind.PASSWORD_TOO_SHORT)
    return cleaned


class AuthService:
    """Sign-up, sign-in, sign-out and password reset against one provider.

    Args:
        provider: Identity provider of the active context
        config_service: Where session credentials are persisted; None keeps
            sessions in memory only
        context_name: Context the credentials belong to (default: current)
    """

    def __init__(
        self,
        provider: IdentityProvider,
        config_service: ConfigService | None = None,
        context_name: str | None = None,
    ):
        self.provider = provider
        self.config_service = config_service
        self.context_name = context_name
        self._unsubscribe = provider.subscribe(self._persist_identity)

    def _persist_identity(self, identity: Identity | None) -> None:
        # Sign-out clears credentials explicitly; the initial anonymous
        # notification must not wipe a session that is about to be restored.
        if identity is None or self.config_service is None:
            return
        self.config_service.save_credentials(
            identity.to_credentials(), context_name=self.context_name
        )

    async def _call(
        self, name: str, operation: Callable[..., Awaitable[T]], *args
    ) -> T:
        try:
            return await operation(*args)
        except AuthError as e:
            logger.info("%s failed: %s", name, e.kind.value)
            raise
        except Exception as e:
            logger.exception("%s failed unexpectedly", name)
            raise AuthError(AuthErrorKind.UNKNOWN, str(e)) from e

    @property
    def current_identity(self) -> Identity | None:
        return self.provider.current_identity

    def is_authenticated(self) -> bool:
        """Check if the user is authenticated."""
        return self.provider.current_identity is not None

    async def sign_up(self, email: str, password: str) -> Identity:
        cleaned = validate_credentials(email, password, new_account=True)
        identity = await self._call("sign_up", self.provider.sign_up, cleaned, password)
        logger.info("signed up: %s", identity.email)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        cleaned = validate_credentials(email, password)
        identity = await self._call("sign_in", self.provider.sign_in, cleaned, password)
        logger.info("signed in: %s", identity.email)
        return identity

    async def sign_out(self) -> None:
        await self._call("sign_out", self.provider.sign_out)
        if self.config_service is not None:
            self.config_service.clear_credentials(self.context_name)
        logger.info("signed out")

    async def send_password_reset(self, email: str) -> None:
        cleaned = validate_email(email)
        await self._call("send_password_reset", self.provider.send_password_reset, cleaned)

    def restore_session(self) -> Identity | None:
        """Replay stored credentials into the provider.

        Credentials the provider rejects are removed so the next invocation
        starts signed out.
        """
        if self.config_service is None:
            return None
        credentials = self.config_service.load_credentials(self.context_name)
        if not credentials:
            return None

        try:
            identity = self.provider.restore(credentials)
        except AuthError as e:
            logger.warning("could not restore session: %s", e.message)
            return None

        if identity is None:
            logger.info("stored session is no longer valid; clearing it")
            self.config_service.clear_credentials(self.context_name)
        return identity

    def subscribe_to_identity_changes(
        self, listener: IdentityListener
    ) -> Callable[[], None]:
        """Register for identity changes; see ``IdentityProvider.subscribe``."""
        return self.provider.subscribe(listener)

    def close(self) -> None:
        self._unsubscribe()
