"""Session gate: the single answer to "who is signed in right now"."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from skillpulse_cli.models import AuthError, AuthErrorKind, Identity
from skillpulse_cli.services.auth_service import AuthService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session."""

    is_authenticated: bool = False
    email: str | None = None
    id: str | None = None

    @classmethod
    def from_identity(cls, identity: Identity | None) -> SessionState:
        if identity is None:
            return cls()
        return cls(is_authenticated=True, email=identity.email, id=identity.uid)


SessionListener = Callable[[SessionState], None]


class SessionGate:
    """Tracks identity changes as whole-state replacements.

    Readers always see a consistent ``SessionState``: authenticated with both
    email and id, or anonymous with neither.
    """

    def __init__(self, auth_service: AuthService):
        self._state = SessionState()
        self._listeners: list[SessionListener] = []
        self._unsubscribe = auth_service.subscribe_to_identity_changes(
            self._on_identity_changed
        )

    def _on_identity_changed(self, identity: Identity | None) -> None:
        state = SessionState.from_identity(identity)
        if state == self._state:
            return
        self._state = state
        logger.debug("session state: authenticated=%s", state.is_authenticated)
        for listener in list(self._listeners):
            listener(state)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def email(self) -> str | None:
        return self._state.email

    @property
    def id(self) -> str | None:
        return self._state.id

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` now and on every state change."""
        self._listeners.append(listener)
        listener(self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def require_owner(self) -> str:
        """Email of the signed-in user, used as the task owner id.

        Raises:
            AuthError: ``user_not_found`` when nobody is signed in
        """
        state = self._state
        if not state.is_authenticated or not state.email:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND, "not signed in")
        return state.email

    def close(self) -> None:
        self._unsubscribe()
        self._listeners.clear()
