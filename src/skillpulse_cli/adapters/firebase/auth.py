"""Firebase Authentication over the Identity Toolkit REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from skillpulse_cli.models import AuthError, AuthErrorKind, Identity
from skillpulse_cli.repositories import IdentityProvider
from skillpulse_cli.services.api.client import APIClient

logger = logging.getLogger(__name__)

FIREBASE_ERROR_KINDS = {
    "EMAIL_EXISTS": AuthErrorKind.EMAIL_ALREADY_IN_USE,
    "EMAIL_NOT_FOUND": AuthErrorKind.USER_NOT_FOUND,
    "INVALID_PASSWORD": AuthErrorKind.WRONG_PASSWORD,
    "INVALID_LOGIN_CREDENTIALS": AuthErrorKind.WRONG_PASSWORD,
    "USER_DISABLED": AuthErrorKind.ACCOUNT_DISABLED,
    "TOO_MANY_ATTEMPTS_TRY_LATER": AuthErrorKind.TOO_MANY_REQUESTS,
    "INVALID_EMAIL": AuthErrorKind.INVALID_EMAIL,
    "WEAK_PASSWORD": AuthErrorKind.PASSWORD_TOO_SHORT,
    "MISSING_EMAIL": AuthErrorKind.EMPTY_FIELDS,
    "MISSING_PASSWORD": AuthErrorKind.EMPTY_FIELDS,
}


def auth_error_from_response(error: httpx.HTTPStatusError) -> AuthError:
    """Map an Identity Toolkit error response onto the AuthError taxonomy.

    Error messages look like ``"WEAK_PASSWORD : Password should be at least
    6 characters"``; only the code before the colon is significant.
    """
    try:
        message = error.response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return AuthError(AuthErrorKind.UNKNOWN, f"HTTP {error.response.status_code}")

    code = message.split(":", 1)[0].strip()
    kind = FIREBASE_ERROR_KINDS.get(code)
    if kind is None:
        return AuthError(AuthErrorKind.UNKNOWN, message)
    return AuthError(kind, message)


class FirebaseIdentityProvider(IdentityProvider):
    """Identity provider for remote contexts."""

    def __init__(self, auth_client: APIClient, token_client: APIClient):
        """
        Args:
            auth_client: Client for the Identity Toolkit endpoint, carrying the API key
            token_client: Client for the Secure Token endpoint, carrying the API key
        """
        super().__init__()
        self.auth_client = auth_client
        self.token_client = token_client

    async def _call(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.auth_client.post(path, json=payload, skip_auth=True)
        except httpx.HTTPStatusError as e:
            raise auth_error_from_response(e) from e
        except httpx.RequestError as e:
            raise AuthError(AuthErrorKind.NETWORK_ERROR, str(e)) from e
        return response.json()

    def _identity_from(self, data: dict[str, Any], email: str) -> Identity:
        return Identity(
            uid=data["localId"],
            email=data.get("email") or email,
            token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
        )

    async def sign_up(self, email: str, password: str) -> Identity:
        data = await self._call(
            "/accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        identity = self._identity_from(data, email)
        self._set_identity(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        data = await self._call(
            "/accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        identity = self._identity_from(data, email)
        self._set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        # ID tokens are stateless; signing out only forgets them
        self._set_identity(None)

    async def send_password_reset(self, email: str) -> None:
        await self._call(
            "/accounts:sendOobCode", {"requestType": "PASSWORD_RESET", "email": email}
        )
        logger.info("password reset email requested for %s", email)

    async def refresh(self) -> Identity | None:
        """Exchange the refresh token for a new ID token.

        Returns the renewed identity, or None when there is nothing to refresh
        or the exchange is rejected.
        """
        current = self._identity
        if current is None or not current.refresh_token:
            return None
        try:
            response = await self.token_client.post(
                "/token",
                json={
                    "grant_type": "refresh_token",
                    "refresh_token": current.refresh_token,
                },
                skip_auth=True,
            )
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.warning("token refresh rejected for %s: %s", current.email, e)
            return None

        data = response.json()
        identity = current.model_copy(
            update={
                "token": data.get("id_token", current.token),
                "refresh_token": data.get("refresh_token", current.refresh_token),
            }
        )
        self._set_identity(identity)
        return identity

    async def close(self) -> None:
        await self.auth_client.close()
        await self.token_client.close()
