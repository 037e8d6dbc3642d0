"""Tests for AuthService validation, persistence and session restore."""

from __future__ import annotations

import pytest

from skillpulse_cli.adapters.memory import MemoryIdentityProvider
from skillpulse_cli.models import AuthError, AuthErrorKind
from skillpulse_cli.services.auth_service import AuthService, validate_credentials


@pytest.fixture()
def provider() -> MemoryIdentityProvider:
    provider = MemoryIdentityProvider()
    provider.add_account("u@x.com", "secret1")
    return provider


@pytest.fixture()
def auth(provider, tmp_config) -> AuthService:
    return AuthService(provider, config_service=tmp_config, context_name="local")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "email,password,new_account,kind",
    [
        ("", "secret1", False, AuthErrorKind.EMPTY_FIELDS),
        ("   ", "secret1", False, AuthErrorKind.EMPTY_FIELDS),
        ("u@x.com", "", False, AuthErrorKind.EMPTY_FIELDS),
        (None, None, True, AuthErrorKind.EMPTY_FIELDS),
        ("not-an-email", "secret1", False, AuthErrorKind.INVALID_EMAIL),
        ("u@x", "secret1", False, AuthErrorKind.INVALID_EMAIL),
        ("u@x.com", "12345", True, AuthErrorKind.PASSWORD_TOO_SHORT),
    ],
)
def test_validation_failures(email, password, new_account, kind):
    with pytest.raises(AuthError) as exc_info:
        validate_credentials(email, password, new_account=new_account)
    assert exc_info.value.kind is kind


def test_short_password_allowed_for_sign_in():
    assert validate_credentials(" u@x.com ", "12345") == "u@x.com"


@pytest.mark.asyncio
async def test_invalid_input_never_reaches_provider(auth, provider, mocker):
    sign_in = mocker.spy(provider, "sign_in")

    with pytest.raises(AuthError):
        await auth.sign_in("bad", "secret1")

    sign_in.assert_not_called()


# ---------------------------------------------------------------------------
# Sign-in lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_sign_in_persists_credentials(auth, tmp_config):
    identity = await auth.sign_in("u@x.com", "secret1")

    assert auth.is_authenticated()
    assert tmp_config.load_credentials("local") == identity.to_credentials()


@pytest.mark.asyncio
async def test_sign_up_creates_account(auth, provider):
    identity = await auth.sign_up("new@x.com", "secret1")

    assert identity.email == "new@x.com"
    assert "new@x.com" in provider.accounts


@pytest.mark.asyncio
async def test_provider_errors_propagate_unchanged(auth):
    with pytest.raises(AuthError) as exc_info:
        await auth.sign_in("u@x.com", "wrong-password")
    assert exc_info.value.kind is AuthErrorKind.WRONG_PASSWORD


@pytest.mark.asyncio
async def test_unexpected_errors_become_unknown(auth, provider, mocker):
    mocker.patch.object(provider, "sign_in", side_effect=RuntimeError("boom"))

    with pytest.raises(AuthError) as exc_info:
        await auth.sign_in("u@x.com", "secret1")

    assert exc_info.value.kind is AuthErrorKind.UNKNOWN
    assert "boom" in exc_info.value.message


@pytest.mark.asyncio
async def test_sign_out_clears_credentials(auth, tmp_config):
    await auth.sign_in("u@x.com", "secret1")

    await auth.sign_out()

    assert not auth.is_authenticated()
    assert tmp_config.load_credentials("local") is None


@pytest.mark.asyncio
async def test_password_reset_validates_email(auth, provider):
    with pytest.raises(AuthError) as exc_info:
        await auth.send_password_reset("")
    assert exc_info.value.kind is AuthErrorKind.EMPTY_FIELDS

    await auth.send_password_reset("u@x.com")
    assert provider.password_resets == ["u@x.com"]


# ---------------------------------------------------------------------------
# Session restore
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_restore_session_across_instances(auth, tmp_config):
    identity = await auth.sign_in("u@x.com", "secret1")

    fresh_provider = MemoryIdentityProvider()
    fresh = AuthService(fresh_provider, config_service=tmp_config, context_name="local")

    assert fresh.restore_session() == identity
    assert fresh.is_authenticated()


def test_restore_without_credentials(auth):
    assert auth.restore_session() is None
    assert not auth.is_authenticated()


def test_rejected_credentials_are_cleared(auth, tmp_config):
    tmp_config.save_credentials({"email": "u@x.com"}, context_name="local")

    assert auth.restore_session() is None
    assert tmp_config.load_credentials("local") is None


def test_without_config_service_nothing_is_persisted(provider):
    auth = AuthService(provider)
    assert auth.restore_session() is None


@pytest.mark.asyncio
async def test_subscription_and_close(auth):
    seen = []
    unsubscribe = auth.subscribe_to_identity_changes(seen.append)

    identity = await auth.sign_in("u@x.com", "secret1")
    unsubscribe()
    auth.close()
    await auth.sign_out()

    assert seen == [None, identity]
