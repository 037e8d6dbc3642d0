"""Core domain and storage models.

Task documents use the field names of the shared ``tasks`` collection
(``userId``, ``timestamp``, ``startTime``, ``endTime``); the Python side
uses snake_case attribute names with those as aliases.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skillpulse_cli.utils.dates import parse_task_time

FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Task(BaseModel):
    """A time-boxed task.

    Attributes:
        id: ``yyyyMMddnnn`` identifier, also the document key
        owner_id: Owner's stable identifier (their email address)
        description: Task text, never blank once persisted
        created_at: Creation timestamp (ISO 8601)
        start_time: Empty or an ISO 8601 datetime (legacy data: ``HH:mm``)
        end_time: Empty or an ISO 8601 datetime (legacy data: ``HH:mm``)
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(frozen=True)
    owner_id: str = Field(default="", alias="userId")
    description: str = ""
    created_at: str = Field(default="", alias="timestamp")
    start_time: str = Field(default="", alias="startTime")
    end_time: str = Field(default="", alias="endTime")

    @field_validator(
        "owner_id", "description", "created_at", "start_time", "end_time", mode="before"
    )
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        # Documents written by other clients may hold null for an unset field
        return "" if value is None else value

    @classmethod
    def from_document(cls, key: str, data: dict[str, Any]) -> Task:
        """Build a task from a stored document; the key wins over the ``id`` field."""
        return cls.model_validate({**data, "id": key})

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document layout."""
        return self.model_dump(by_alias=True)

    @property
    def has_time_range(self) -> bool:
        return bool(self.start_time) and bool(self.end_time)

    @property
    def is_valid(self) -> bool:
        return bool(self.description.strip())

    def start_datetime(self, *, on: date | None = None) -> datetime | None:
        """Parsed start time, reading legacy ``HH:mm`` values as times on ``on``."""
        return parse_task_time(self.start_time, on=on)

    def end_datetime(self, *, on: date | None = None) -> datetime | None:
        """Parsed end time, reading legacy ``HH:mm`` values as times on ``on``."""
        return parse_task_time(self.end_time, on=on)

    @property
    def time_range_text(self) -> str:
        if not self.has_time_range:
            return ""
        start = self.start_datetime()
        end = self.end_datetime()
        if start is None or end is None:
            return f"{self.start_time} - {self.end_time}"
        return f"{start:%H:%M} - {end:%H:%M}"

    @property
    def date_text(self) -> str:
        start = self.start_datetime()
        return start.strftime("%b %d, %Y") if start else ""


class TaskPage(BaseModel):
    """One page of tasks, newest first.

    Attributes:
        tasks: Tasks in descending id order
        next_cursor: Id to pass to the next load, or None when exhausted
        has_more: Whether another page exists
    """

    tasks: list[Task] = Field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


class Identity(BaseModel):
    """An authenticated identity.

    Attributes:
        uid: Provider-assigned user id
        email: Sign-in email, used as the task owner id
        token: Bearer token for remote services (None for local identities)
        refresh_token: Token used to renew ``token``
    """

    uid: str
    email: str
    token: str | None = None
    refresh_token: str | None = None

    def to_credentials(self) -> dict[str, str]:
        data = {"uid": self.uid, "email": self.email}
        if self.token:
            data["token"] = self.token
        if self.refresh_token:
            data["refresh_token"] = self.refresh_token
        return data


class FieldFilter(BaseModel):
    """A single field comparison in a document query."""

    field: str
    op: Literal["==", "<", "<=", ">", ">="] = "=="
    value: Any

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        if not FIELD_NAME_PATTERN.match(v):
            raise ValueError(f"invalid field name: {v!r}")
        return v


class DocumentQuery(BaseModel):
    """Query over one collection.

    Attributes:
        filters: Field comparisons, all of which must hold
        order_by: Field to order by
        descending: Order direction
        limit: Maximum number of documents
        start_after: Return documents strictly after this ``order_by`` value
    """

    filters: list[FieldFilter] = Field(default_factory=list)
    order_by: str | None = None
    descending: bool = False
    limit: int | None = Field(default=None, ge=1)
    start_after: Any = None

    @field_validator("order_by")
    @classmethod
    def validate_order_by(cls, v: str | None) -> str | None:
        if v is not None and not FIELD_NAME_PATTERN.match(v):
            raise ValueError(f"invalid field name: {v!r}")
        return v


class Document(BaseModel):
    """A stored document: key plus field data."""

    key: str
    data: dict[str, Any] = Field(default_factory=dict)
