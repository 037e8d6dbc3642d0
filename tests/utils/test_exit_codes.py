"""Tests for error to exit code mapping."""

import pytest

from skillpulse_cli.models import (
    AuthError,
    AuthErrorKind,
    NotFoundError,
    StoreError,
    StoreErrorKind,
    ValidationError,
)
from skillpulse_cli.utils.exit_codes import (
    ERROR_AUTH_FAILURE,
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NETWORK,
    ERROR_NOT_FOUND,
    exit_code_for,
)


@pytest.mark.parametrize(
    "error,code",
    [
        (AuthError(AuthErrorKind.EMPTY_FIELDS), ERROR_INVALID_ARGS),
        (AuthError(AuthErrorKind.INVALID_EMAIL), ERROR_INVALID_ARGS),
        (AuthError(AuthErrorKind.PASSWORD_TOO_SHORT), ERROR_INVALID_ARGS),
        (AuthError(AuthErrorKind.WRONG_PASSWORD), ERROR_AUTH_FAILURE),
        (AuthError(AuthErrorKind.USER_NOT_FOUND), ERROR_AUTH_FAILURE),
        (AuthError(AuthErrorKind.NETWORK_ERROR), ERROR_NETWORK),
        (ValidationError("blank"), ERROR_INVALID_ARGS),
        (NotFoundError("20260209001"), ERROR_NOT_FOUND),
        (StoreError(StoreErrorKind.LOAD_FAILED), ERROR_NETWORK),
        (StoreError(StoreErrorKind.DELETE_FAILED), ERROR_NETWORK),
        (StoreError(StoreErrorKind.UNKNOWN), ERROR_GENERAL),
        (RuntimeError("boom"), ERROR_GENERAL),
    ],
)
def test_exit_code_for(error, code):
    assert exit_code_for(error) == code
