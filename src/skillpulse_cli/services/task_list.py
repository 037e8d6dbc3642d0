"""Task list controller: the state behind one task list view.

Holds the loaded window (``all_tasks``), the displayed view (``tasks``), the
active date filter and the paging cursor. The displayed view is always the
loaded window, or the loaded window filtered by ``filter_date``.

Loads run without the lock and commit under it. Each load remembers the
generation it started in; ``reload`` and ``close`` start a new generation,
so results of superseded loads are dropped instead of committed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import date

from skillpulse_cli.models import Task, TaskPage
from skillpulse_cli.repositories import filter_by_date, suggest_descriptions
from skillpulse_cli.services.task_service import TaskService, TimeValue

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 5


class TaskListController:
    """Paged, filterable list of one owner's tasks."""

    def __init__(self, task_service: TaskService, owner_id: str):
        self.task_service = task_service
        self.owner_id = owner_id

        self.all_tasks: list[Task] = []
        self.tasks: list[Task] = []
        self.filter_date: date | None = None
        self.last_task_id: str | None = None
        self.has_more = False
        self.is_loading = False

        self._lock = asyncio.Lock()
        self._generation = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _visible(self, tasks: Iterable[Task]) -> list[Task]:
        if self.filter_date is None:
            return list(tasks)
        return filter_by_date(tasks, self.filter_date)

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _load(self, generation: int, cursor: str | None) -> TaskPage:
        self.is_loading = True
        try:
            return await self.task_service.load_tasks(self.owner_id, cursor)
        finally:
            if generation == self._generation:
                self.is_loading = False

    async def reload(self) -> bool:
        """Replace the window with the first page.

        Returns False when the result was discarded because a newer reload
        started or the controller was closed meanwhile.
        """
        self._generation += 1
        generation = self._generation
        page = await self._load(generation, None)

        async with self._lock:
            if not self._is_current(generation):
                logger.debug("discarding stale reload (generation %d)", generation)
                return False
            self.all_tasks = list(page.tasks)
            self.tasks = self._visible(self.all_tasks)
            self.last_task_id = page.next_cursor
            self.has_more = page.has_more
        return True

    async def load_more(self) -> bool:
        """Append the next page, filtering only the appended tasks.

        A failed load leaves the current window untouched and re-raises.
        Returns False when there was nothing to load or the result was
        discarded.
        """
        if not self.has_more or self.last_task_id is None:
            return False
        generation = self._generation
        cursor = self.last_task_id
        page = await self._load(generation, cursor)

        async with self._lock:
            # A concurrent load_more may already have consumed this cursor
            if not self._is_current(generation) or cursor != self.last_task_id:
                logger.debug("discarding stale page after %s", cursor)
                return False
            known = {task.id for task in self.all_tasks}
            appended = [task for task in page.tasks if task.id not in known]
            self.all_tasks.extend(appended)
            self.tasks.extend(self._visible(appended))
            self.last_task_id = page.next_cursor
            self.has_more = page.has_more
        return True

    async def apply_filter(self, day: date) -> None:
        async with self._lock:
            self.filter_date = day
            self.tasks = filter_by_date(self.all_tasks, day)

    async def clear_filter(self) -> None:
        async with self._lock:
            self.filter_date = None
            self.tasks = list(self.all_tasks)

    def suggestions(self, text: str, limit: int | None = SUGGESTION_LIMIT) -> list[str]:
        """Descriptions from the loaded window that complete ``text``."""
        return suggest_descriptions(self.all_tasks, text, limit)

    async def add_task(
        self,
        description: str,
        *,
        start_time: TimeValue = None,
        end_time: TimeValue = None,
    ) -> Task:
        """Create a task and reload from the first page."""
        task = await self.task_service.create_task(
            description, self.owner_id, start_time=start_time, end_time=end_time
        )
        await self.reload()
        return task

    async def edit_task(
        self,
        task_id: str,
        description: str,
        *,
        start_time: TimeValue = None,
        end_time: TimeValue = None,
    ) -> Task:
        """Update a task and replace it in place."""
        task = await self.task_service.update_task(
            task_id,
            description,
            start_time=start_time,
            end_time=end_time,
            owner_id=self.owner_id,
        )
        async with self._lock:
            self.all_tasks = [task if t.id == task_id else t for t in self.all_tasks]
            self.tasks = self._visible(self.all_tasks)
        return task

    async def remove_task(self, task_id: str) -> None:
        """Delete a task and drop it from both lists."""
        await self.task_service.delete_task(task_id, owner_id=self.owner_id)
        async with self._lock:
            self.all_tasks = [t for t in self.all_tasks if t.id != task_id]
            self.tasks = [t for t in self.tasks if t.id != task_id]

    def close(self) -> None:
        """Stop accepting load results."""
        self._closed = True
        self._generation += 1
