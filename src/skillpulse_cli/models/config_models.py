"""Configuration models.

A context selects the storage backend: a local SQLite vault or a remote
Firebase project.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class APIConfig(BaseModel):
    """HTTP configuration for remote contexts."""

    timeout: int = Field(default=30)
    retry: int = Field(default=3)


class FirebaseConfig(BaseModel):
    """Firebase endpoints and web API key."""

    api_key: str = Field(default="")
    auth_endpoint: str = Field(default="https://identitytoolkit.googleapis.com/v1")
    token_endpoint: str = Field(default="https://securetoken.googleapis.com/v1")
    firestore_endpoint: str = Field(default="https://firestore.googleapis.com/v1")
    database: str = Field(default="(default)")


class TasksConfig(BaseModel):
    """Task storage configuration."""

    collection: str = Field(default="tasks")
    counters_collection: str = Field(default="task_counters")
    page_size: int = Field(default=50, ge=1)
    id_strategy: Literal["counter", "scan"] = Field(default="counter")
    max_id_attempts: int = Field(default=5, ge=1)


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="table")
    color: bool = Field(default=True)


class Context(BaseModel):
    """Context configuration for a storage backend.

    ``source`` is the SQLite database path for local contexts and the
    Firebase project id for remote ones.
    """

    name: str = Field(..., description="Unique context name")
    type: Literal["local", "remote"] = Field(..., description="Context type")
    source: str = Field(..., description="Database path or Firebase project id")
    description: str = Field(default="", description="Human-readable description")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("source cannot be empty")
        return v.strip()


class AppConfig(BaseModel):
    """Main SkillPulse configuration."""

    current_context_name: str = Field(
        default="local", description="Active context name"
    )
    contexts: list[Context] = Field(
        default_factory=list, description="Available contexts"
    )

    api: APIConfig = Field(default_factory=APIConfig)
    firebase: FirebaseConfig = Field(default_factory=FirebaseConfig)
    tasks: TasksConfig = Field(default_factory=TasksConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def get_context(self, name: str) -> Context:
        """Get context by name."""
        for ctx in self.contexts:
            if ctx.name == name:
                return ctx
        raise ValueError(f"Context '{name}' not found")

    def get_current_context(self) -> Context:
        """Get the currently active context."""
        return self.get_context(self.current_context_name)
