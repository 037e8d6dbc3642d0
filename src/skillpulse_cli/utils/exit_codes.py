"""
Exit codes for SkillPulse CLI.

Semantic exit codes so scripts can tell a bad argument from a network
failure or a missing task.
"""

from skillpulse_cli.models.exceptions import (
    AuthError,
    AuthErrorKind,
    StoreError,
    StoreErrorKind,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (not logged in, invalid credentials, etc.)
ERROR_AUTH_FAILURE = 3

# Network or storage backend error
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5


_AUTH_INPUT_KINDS = {
    AuthErrorKind.EMPTY_FIELDS,
    AuthErrorKind.INVALID_EMAIL,
    AuthErrorKind.PASSWORD_TOO_SHORT,
}

_STORE_IO_KINDS = {
    StoreErrorKind.LOAD_FAILED,
    StoreErrorKind.ADD_FAILED,
    StoreErrorKind.UPDATE_FAILED,
    StoreErrorKind.DELETE_FAILED,
}


def exit_code_for(error: Exception) -> int:
    """Map an application error to its exit code."""
    if isinstance(error, AuthError):
        if error.kind in _AUTH_INPUT_KINDS:
            return ERROR_INVALID_ARGS
        if error.kind is AuthErrorKind.NETWORK_ERROR:
            return ERROR_NETWORK
        return ERROR_AUTH_FAILURE
    if isinstance(error, StoreError):
        if error.kind is StoreErrorKind.INVALID_DATA:
            return ERROR_INVALID_ARGS
        if error.kind is StoreErrorKind.TASK_NOT_FOUND:
            return ERROR_NOT_FOUND
        if error.kind in _STORE_IO_KINDS:
            return ERROR_NETWORK
    return ERROR_GENERAL
