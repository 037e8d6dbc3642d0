"""Identity provider port.

Sign-in state is not returned to callers as a value; it is published to
subscribers, the way the managed identity services deliver it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from skillpulse_cli.models import Identity

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity | None], None]


class IdentityProvider(ABC):
    """Abstract base class for identity providers.

    Concrete providers implement the four account operations and call
    ``_set_identity`` whenever the signed-in identity changes.
    """

    def __init__(self):
        self._identity: Identity | None = None
        self._listeners: list[IdentityListener] = []

    @property
    def current_identity(self) -> Identity | None:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener for identity changes.

        The listener is called immediately with the current identity, then on
        every change. Returns a function that removes the listener.
        """
        self._listeners.append(listener)
        listener(self._identity)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_identity(self, identity: Identity | None) -> None:
        self._identity = identity
        logger.debug(
            "identity changed: %s", identity.email if identity else "anonymous"
        )
        for listener in list(self._listeners):
            listener(identity)

    def restore(self, credentials: dict) -> Identity | None:
        """Re-establish a session from stored credentials.

        Returns the restored identity, or None when the credentials are
        unusable.
        """
        if not credentials.get("uid") or not credentials.get("email"):
            return None
        identity = Identity(
            uid=credentials["uid"],
            email=credentials["email"],
            token=credentials.get("token"),
            refresh_token=credentials.get("refresh_token"),
        )
        self._set_identity(identity)
        return identity

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Identity:
        """Create an account and sign in.

        Raises:
            AuthError: On failure
        """

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password.

        Raises:
            AuthError: On failure
        """

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign out the current identity."""

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        """Start a password reset for the given email.

        Raises:
            AuthError: On failure
        """

    async def refresh(self) -> Identity | None:
        """Renew the current identity's token. Providers without tokens return it unchanged."""
        return self._identity

    async def close(self) -> None:
        """Release provider resources."""
