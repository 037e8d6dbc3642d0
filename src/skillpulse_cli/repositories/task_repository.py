"""Task repository over a generic document store.

Tasks live in one shared collection keyed by task id; every query and
mutation is scoped by the owner's id (their email address).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date

from pydantic import ValidationError as PydanticValidationError

from skillpulse_cli.models import (
    Document,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentQuery,
    DocumentStoreError,
    FieldFilter,
    NotFoundError,
    StoreError,
    StoreErrorKind,
    Task,
    TaskPage,
    ValidationError,
)
from skillpulse_cli.repositories.repository import DocumentStore
from skillpulse_cli.repositories.task_ids import CounterTaskIdAllocator, TaskIdAllocator
from skillpulse_cli.utils.dates import date_key, now_iso, today

logger = logging.getLogger(__name__)

PAGE_SIZE = 50


def filter_by_date(all_tasks: Iterable[Task], day: date) -> list[Task]:
    """Keep the tasks whose start time falls on ``day``.

    Substring match of ``yyyy-MM-dd`` against the stored ISO-8601 start
    time. Only the tasks passed in are considered, so over a paginated list
    this filters the loaded window, not the whole collection.
    """
    key = date_key(day)
    return [task for task in all_tasks if key in task.start_time]


def suggest_descriptions(
    tasks: Iterable[Task], text: str, limit: int | None = None
) -> list[str]:
    """Earlier descriptions that start with ``text``, for completing a new one.

    Case-insensitive prefix match on the trimmed text; a description equal
    to the text is not suggested, and each description is offered once in
    the order the tasks came in (newest first for a loaded window).
    """
    typed = text.strip().lower()
    if not typed:
        return []

    seen: set[str] = set()
    suggestions: list[str] = []
    for task in tasks:
        folded = task.description.lower()
        if folded in seen or folded == typed or not folded.startswith(typed):
            continue
        seen.add(folded)
        suggestions.append(task.description)
        if limit is not None and len(suggestions) >= limit:
            break
    return suggestions


def _require_description(description: str | None) -> str:
    cleaned = (description or "").strip()
    if not cleaned:
        raise ValidationError("Description cannot be empty")
    return cleaned


class TaskRepository:
    """Create, update, delete and page through tasks.

    Args:
        store: Document store holding the task collection
        allocator: Id allocation strategy (default: atomic per-date counter)
        collection: Task collection name
        page_size: Tasks per page for ``load_tasks``
        max_id_attempts: Allocations tried before giving up on a create
        clock: Returns the local date used for new ids
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        allocator: TaskIdAllocator | None = None,
        collection: str = "tasks",
        page_size: int = PAGE_SIZE,
        max_id_attempts: int = 5,
        clock: Callable[[], date] = today,
    ):
        self.store = store
        self.allocator = allocator or CounterTaskIdAllocator(store, tasks_collection=collection)
        self.collection = collection
        self.page_size = page_size
        self.max_id_attempts = max_id_attempts
        self._clock = clock

    async def allocate_task_id(self, current_date: date | None = None) -> str:
        """Next task id for ``current_date`` (default: today)."""
        return await self.allocator.allocate(current_date or self._clock())

    async def create_task(
        self,
        description: str,
        start_time: str,
        end_time: str,
        owner_id: str,
    ) -> Task:
        """Validate, allocate an id and write a new task.

        Raises:
            ValidationError: If the description is blank (nothing is written)
            StoreError: ``add_failed`` on backend failure
        """
        cleaned = _require_description(description)
        day = self._clock()

        for attempt in range(1, self.max_id_attempts + 1):
            try:
                if attempt > 1:
                    await self.allocator.resync(day)
                task_id = await self.allocate_task_id(day)
                task = Task(
                    id=task_id,
                    owner_id=owner_id,
                    description=cleaned,
                    created_at=now_iso(),
                    start_time=start_time or "",
                    end_time=end_time or "",
                )
                await self.store.create(self.collection, task_id, task.to_document())
            except DocumentExistsError as e:
                logger.warning(
                    "task id %s already taken (attempt %d/%d)",
                    e.key,
                    attempt,
                    self.max_id_attempts,
                )
                continue
            except DocumentStoreError as e:
                logger.error("failed to add task: %s", e)
                raise StoreError(StoreErrorKind.ADD_FAILED, str(e)) from e

            logger.info("task added: %s", task.id)
            return task

        raise StoreError(
            StoreErrorKind.ADD_FAILED,
            f"no free task id after {self.max_id_attempts} attempts",
        )

    async def _get_owned(
        self, task_id: str, owner_id: str | None, failure: StoreErrorKind
    ) -> Document:
        try:
            document = await self.store.get(self.collection, task_id)
        except DocumentStoreError as e:
            raise StoreError(failure, str(e)) from e

        if document is None:
            raise NotFoundError(task_id)
        if owner_id is not None and document.data.get("userId") != owner_id:
            raise NotFoundError(task_id)
        return document

    async def get_task(self, task_id: str, owner_id: str | None = None) -> Task:
        """Get a task by id.

        Raises:
            NotFoundError: If no task has this id (for this owner, when given)
            StoreError: ``load_failed`` on backend failure
        """
        document = await self._get_owned(task_id, owner_id, StoreErrorKind.LOAD_FAILED)
        return Task.from_document(document.key, document.data)

    async def update_task(
        self,
        task_id: str,
        description: str,
        start_time: str,
        end_time: str,
        owner_id: str | None = None,
    ) -> Task:
        """Patch description and time range of an existing task.

        Owner and creation timestamp are never written.

        Raises:
            ValidationError: If the description is blank
            NotFoundError: If the task does not exist
            StoreError: ``update_failed`` on backend failure
        """
        cleaned = _require_description(description)
        await self._get_owned(task_id, owner_id, StoreErrorKind.UPDATE_FAILED)

        updates = {
            "description": cleaned,
            "startTime": start_time or "",
            "endTime": end_time or "",
        }
        try:
            merged = await self.store.update(self.collection, task_id, updates)
        except DocumentNotFoundError as e:
            raise NotFoundError(task_id) from e
        except DocumentStoreError as e:
            logger.error("failed to update task %s: %s", task_id, e)
            raise StoreError(StoreErrorKind.UPDATE_FAILED, str(e)) from e

        logger.info("task updated: %s", task_id)
        return Task.from_document(task_id, merged)

    async def delete_task(self, task_id: str, owner_id: str | None = None) -> None:
        """Delete a task.

        Raises:
            NotFoundError: If the task does not exist
            StoreError: ``delete_failed`` on backend failure
        """
        await self._get_owned(task_id, owner_id, StoreErrorKind.DELETE_FAILED)

        try:
            await self.store.delete(self.collection, task_id)
        except DocumentNotFoundError as e:
            raise NotFoundError(task_id) from e
        except DocumentStoreError as e:
            logger.error("failed to delete task %s: %s", task_id, e)
            raise StoreError(StoreErrorKind.DELETE_FAILED, str(e)) from e

        logger.info("task deleted: %s", task_id)

    async def load_tasks(self, owner_id: str, cursor: str | None = None) -> TaskPage:
        """Load one page of the owner's tasks, newest first.

        One extra document is requested to learn whether another page
        exists, so ``next_cursor`` is only set when there is more to load.

        Raises:
            StoreError: ``load_failed`` on backend failure
        """
        query = DocumentQuery(
            filters=[FieldFilter(field="userId", op="==", value=owner_id)],
            order_by="id",
            descending=True,
            limit=self.page_size + 1,
            start_after=cursor,
        )
        try:
            documents = await self.store.query(self.collection, query)
        except DocumentStoreError as e:
            logger.error("failed to load tasks for %s: %s", owner_id, e)
            raise StoreError(StoreErrorKind.LOAD_FAILED, str(e)) from e

        has_more = len(documents) > self.page_size
        page = documents[: self.page_size]

        tasks: list[Task] = []
        for document in page:
            try:
                tasks.append(Task.from_document(document.key, document.data))
            except PydanticValidationError:
                logger.warning("skipping undecodable task document %s", document.key)

        next_cursor = page[-1].key if has_more else None
        logger.debug(
            "loaded %d tasks for %s (has_more=%s)", len(tasks), owner_id, has_more
        )
        return TaskPage(tasks=tasks, next_cursor=next_cursor, has_more=has_more)
