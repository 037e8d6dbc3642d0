"""SkillPulse domain models.

Pydantic models for tasks, identities and document queries, plus the
error taxonomies shared across layers.
"""

from .config_models import AppConfig, Context as ConfigContext
from .core import Document, DocumentQuery, FieldFilter, Identity, Task, TaskPage
from .exceptions import (
    AuthError,
    AuthErrorKind,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentStoreError,
    NotFoundError,
    StoreError,
    StoreErrorKind,
    ValidationError,
)

__all__ = [
    # Task models
    "Task",
    "TaskPage",
    # Identity
    "Identity",
    # Document store models
    "Document",
    "DocumentQuery",
    "FieldFilter",
    # Errors
    "AuthError",
    "AuthErrorKind",
    "StoreError",
    "StoreErrorKind",
    "ValidationError",
    "NotFoundError",
    "DocumentStoreError",
    "DocumentNotFoundError",
    "DocumentExistsError",
    # Config models
    "AppConfig",
    "ConfigContext",
]
