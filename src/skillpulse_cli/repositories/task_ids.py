"""Task identifier allocation.

Task ids are ``yyyyMMdd`` (local calendar date) followed by a per-date
sequence number zero-padded to three digits, e.g. ``20260209001``. Ids sort
by string, so a date holds at most ``MAX_SEQUENCE`` tasks.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date

from skillpulse_cli.models import DocumentQuery, DocumentStoreError, FieldFilter
from skillpulse_cli.repositories.repository import DocumentStore
from skillpulse_cli.utils.dates import date_prefix

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 3
MAX_SEQUENCE = 10**SEQUENCE_WIDTH - 1

# Sorts after every character an id can contain; closes the prefix range.
PREFIX_RANGE_END = "\uf8ff"


def format_task_id(day: date, sequence: int) -> str:
    """Build the id for ``sequence`` on ``day``.

    Raises:
        ValueError: If ``sequence`` does not fit in three digits
    """
    if not 1 <= sequence <= MAX_SEQUENCE:
        raise ValueError(f"task sequence {sequence} out of range 1..{MAX_SEQUENCE}")
    return f"{date_prefix(day)}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(task_id: str, prefix: str) -> int | None:
    """Extract the numeric suffix of ``task_id`` when it carries ``prefix``."""
    if not isinstance(task_id, str) or not task_id.startswith(prefix):
        return None
    suffix = task_id[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


async def highest_sequence(store: DocumentStore, collection: str, day: date) -> int:
    """Largest id suffix already stored for ``day`` (0 when there is none)."""
    prefix = date_prefix(day)
    documents = await store.query(
        collection,
        DocumentQuery(
            filters=[
                FieldFilter(field="id", op=">=", value=prefix),
                FieldFilter(field="id", op="<", value=prefix + PREFIX_RANGE_END),
            ],
            order_by="id",
            descending=True,
        ),
    )

    max_number = 0
    for document in documents:
        number = parse_sequence(document.data.get("id") or document.key, prefix)
        if number is not None and number > max_number:
            max_number = number

    logger.debug("scanned %d ids for %s, highest suffix %d", len(documents), prefix, max_number)
    return max_number


def _task_id(day: date, sequence: int) -> str:
    if sequence > MAX_SEQUENCE:
        raise DocumentStoreError(
            f"all {MAX_SEQUENCE} task ids for {date_prefix(day)} are taken"
        )
    return format_task_id(day, sequence)


class TaskIdAllocator(ABC):
    """Strategy for choosing the next task id of a date."""

    @abstractmethod
    async def allocate(self, day: date) -> str:
        """Return the next id for ``day``.

        Raises:
            DocumentStoreError: On backend failure, or when the date has no
                ids left
        """

    async def resync(self, day: date) -> None:
        """Called after an allocated id turned out to be taken."""


class ScanTaskIdAllocator(TaskIdAllocator):
    """Highest existing suffix for the date, plus one.

    Two allocations running at the same time can compute the same id; the
    repository's create-only write turns that into a retry instead of an
    overwrite.
    """

    def __init__(self, store: DocumentStore, collection: str = "tasks"):
        self.store = store
        self.collection = collection

    async def allocate(self, day: date) -> str:
        return _task_id(day, await highest_sequence(self.store, self.collection, day) + 1)


class CounterTaskIdAllocator(TaskIdAllocator):
    """Atomic per-date counter document, one per ``yyyyMMdd``.

    A date's counter is seeded from the ids already in the task collection
    the first time it is used, so tasks written without a counter (older
    clients, the scan strategy) are never handed out again.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str = "task_counters",
        field: str = "seq",
        tasks_collection: str = "tasks",
    ):
        self.store = store
        self.collection = collection
        self.field = field
        self.tasks_collection = tasks_collection

    async def allocate(self, day: date) -> str:
        prefix = date_prefix(day)
        sequence = await self.store.increment(self.collection, prefix, self.field)
        if sequence == 1:
            existing = await highest_sequence(self.store, self.tasks_collection, day)
            if existing:
                sequence = await self.store.increment(
                    self.collection, prefix, self.field, amount=existing
                )
                logger.info("seeded counter %s past existing suffix %d", prefix, existing)
        return _task_id(day, sequence)

    async def resync(self, day: date) -> None:
        """Advance the counter past ids written behind its back."""
        prefix = date_prefix(day)
        existing = await highest_sequence(self.store, self.tasks_collection, day)
        current = await self.store.increment(self.collection, prefix, self.field, amount=0)
        if existing > current:
            await self.store.increment(
                self.collection, prefix, self.field, amount=existing - current
            )
            logger.info("advanced counter %s from %d to %d", prefix, current, existing)
