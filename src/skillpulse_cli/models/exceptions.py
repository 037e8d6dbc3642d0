"""Error taxonomies for SkillPulse.

Two closed families reach the caller unchanged: ``AuthError`` for identity
operations and ``StoreError`` for task persistence. Document store adapters
raise the lower-level ``DocumentStoreError`` family, which the task
repository translates.
"""

from __future__ import annotations

from enum import Enum


class AuthErrorKind(str, Enum):
    """Kinds of authentication failure."""

    EMPTY_FIELDS = "empty_fields"
    INVALID_EMAIL = "invalid_email"
    PASSWORD_TOO_SHORT = "password_too_short"
    EMAIL_ALREADY_IN_USE = "email_already_in_use"
    WRONG_PASSWORD = "wrong_password"
    USER_NOT_FOUND = "user_not_found"
    ACCOUNT_DISABLED = "account_disabled"
    NETWORK_ERROR = "network_error"
    TOO_MANY_REQUESTS = "too_many_requests"
    UNKNOWN = "unknown"


_AUTH_MESSAGES = {
    AuthErrorKind.EMPTY_FIELDS: "Please fill in all fields",
    AuthErrorKind.INVALID_EMAIL: "Please enter a valid email address",
    AuthErrorKind.PASSWORD_TOO_SHORT: "Password must be at least 6 characters",
    AuthErrorKind.EMAIL_ALREADY_IN_USE: "This email is already registered",
    AuthErrorKind.WRONG_PASSWORD: "Incorrect password",
    AuthErrorKind.USER_NOT_FOUND: "No account found with this email",
    AuthErrorKind.ACCOUNT_DISABLED: "This account has been disabled",
    AuthErrorKind.NETWORK_ERROR: "Network error. Please check your connection",
    AuthErrorKind.TOO_MANY_REQUESTS: "Too many attempts. Please try again later",
    AuthErrorKind.UNKNOWN: "Authentication failed",
}


class AuthError(Exception):
    """Raised when an identity operation fails."""

    def __init__(self, kind: AuthErrorKind, detail: str | None = None):
        self.kind = kind
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human-readable message derived from the kind."""
        base = _AUTH_MESSAGES[self.kind]
        if self.kind is AuthErrorKind.UNKNOWN and self.detail:
            return f"{base}: {self.detail}"
        return base

    def __repr__(self) -> str:
        return f"AuthError({self.kind.value!r}, {self.detail!r})"


class StoreErrorKind(str, Enum):
    """Kinds of task persistence failure."""

    LOAD_FAILED = "load_failed"
    ADD_FAILED = "add_failed"
    UPDATE_FAILED = "update_failed"
    DELETE_FAILED = "delete_failed"
    TASK_NOT_FOUND = "task_not_found"
    INVALID_DATA = "invalid_data"
    UNKNOWN = "unknown"


_STORE_MESSAGES = {
    StoreErrorKind.LOAD_FAILED: "Failed to load tasks",
    StoreErrorKind.ADD_FAILED: "Failed to add task",
    StoreErrorKind.UPDATE_FAILED: "Failed to update task",
    StoreErrorKind.DELETE_FAILED: "Failed to delete task",
    StoreErrorKind.TASK_NOT_FOUND: "Task not found",
    StoreErrorKind.INVALID_DATA: "Invalid data",
    StoreErrorKind.UNKNOWN: "Unknown error",
}


class StoreError(Exception):
    """Raised when a task persistence operation fails."""

    def __init__(self, kind: StoreErrorKind, detail: str | None = None):
        self.kind = kind
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        base = _STORE_MESSAGES[self.kind]
        return f"{base}: {self.detail}" if self.detail else base

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {self.detail!r})"


class ValidationError(StoreError):
    """Raised when task data is rejected before persistence."""

    def __init__(self, detail: str):
        super().__init__(StoreErrorKind.INVALID_DATA, detail)


class NotFoundError(StoreError):
    """Raised when an update/delete target cannot be located by id."""

    def __init__(self, task_id: str | None = None):
        self.task_id = task_id
        super().__init__(StoreErrorKind.TASK_NOT_FOUND)


class DocumentStoreError(Exception):
    """Base exception for document store adapters."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when a document does not exist."""

    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"Document {collection}/{key} not found")


class DocumentExistsError(DocumentStoreError):
    """Raised when a create-only write targets an existing document."""

    def __init__(self, collection: str, key: str):
        self.collection = collection
        self.key = key
        super().__init__(f"Document {collection}/{key} already exists")
