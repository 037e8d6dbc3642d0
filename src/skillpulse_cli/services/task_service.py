"""Task service - Business logic for task operations.

This service layer sits between commands and the task repository. It is
the one place where time ranges are checked: the repository only guards
the description.
"""

from __future__ import annotations

from datetime import datetime

from skillpulse_cli.models import Task, TaskPage, ValidationError
from skillpulse_cli.repositories import TaskRepository
from skillpulse_cli.utils.dates import parse_iso_datetime, to_aware

TimeValue = datetime | str | None


def normalize_time(value: TimeValue) -> datetime | None:
    """Turn a user-supplied time into an aware datetime (None when empty).

    Raises:
        ValidationError: If a string value is not ISO-8601
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_aware(value)
    text = value.strip()
    if not text:
        return None
    parsed = parse_iso_datetime(text)
    if parsed is None:
        raise ValidationError(f"Invalid time: {value!r}")
    return to_aware(parsed)


def validate_time_range(
    start_time: TimeValue, end_time: TimeValue
) -> tuple[str, str]:
    """Normalize both ends of a time range to stored strings.

    Raises:
        ValidationError: If a value is malformed, or both are given and the
            end is not strictly after the start
    """
    start = normalize_time(start_time)
    end = normalize_time(end_time)
    if start is not None and end is not None and end <= start:
        raise ValidationError("End time must be after start time")
    return (
        start.isoformat() if start else "",
        end.isoformat() if end else "",
    )


class TaskService:
    """Service for task business logic."""

    def __init__(self, task_repository: TaskRepository):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository for data access
        """
        self.repository = task_repository

    async def create_task(
        self,
        description: str,
        owner_id: str,
        *,
        start_time: TimeValue = None,
        end_time: TimeValue = None,
    ) -> Task:
        """Create a new task.

        Raises:
            ValidationError: Blank description or invalid time range
            StoreError: On storage failure
        """
        start, end = validate_time_range(start_time, end_time)
        return await self.repository.create_task(description, start, end, owner_id)

    async def update_task(
        self,
        task_id: str,
        description: str,
        *,
        start_time: TimeValue = None,
        end_time: TimeValue = None,
        owner_id: str | None = None,
    ) -> Task:
        """Replace a task's description and time range."""
        start, end = validate_time_range(start_time, end_time)
        return await self.repository.update_task(
            task_id, description, start, end, owner_id=owner_id
        )

    async def delete_task(self, task_id: str, owner_id: str | None = None) -> None:
        await self.repository.delete_task(task_id, owner_id=owner_id)

    async def get_task(self, task_id: str, owner_id: str | None = None) -> Task:
        return await self.repository.get_task(task_id, owner_id=owner_id)

    async def load_tasks(self, owner_id: str, cursor: str | None = None) -> TaskPage:
        return await self.repository.load_tasks(owner_id, cursor)
