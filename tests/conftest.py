"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from skillpulse_cli.adapters.memory import MemoryDocumentStore, MemoryIdentityProvider
from skillpulse_cli.models.storage_strategy import StorageStrategy, StorageStrategyContext
from skillpulse_cli.repositories import (
    CounterTaskIdAllocator,
    DocumentStore,
    IdentityProvider,
    TaskRepository,
)
from skillpulse_cli.services.task_service import TaskService

FIXED_DAY = date(2026, 2, 9)


class MemoryStorageStrategy(StorageStrategy):
    """Storage strategy over the in-process adapters."""

    def __init__(self):
        self.store = MemoryDocumentStore()
        self.provider = MemoryIdentityProvider()

    def get_document_store(self) -> DocumentStore:
        return self.store

    def get_identity_provider(self) -> IdentityProvider:
        return self.provider

    @property
    def storage_type(self) -> str:
        return "memory"


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from skillpulse_cli.services.config_service import get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("skillpulse_cli.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("skillpulse_cli.services.config_service.user_data_dir", return_value=tmpdir):
            from skillpulse_cli.services.config_service import ConfigService

            svc = ConfigService()
            yield svc
    get_config_service.cache_clear()


# ---------------------------------------------------------------------------
# In-memory backends
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture()
def repository(store) -> TaskRepository:
    """Task repository over a memory store with the clock pinned to FIXED_DAY."""
    return TaskRepository(
        store, allocator=CounterTaskIdAllocator(store), clock=lambda: FIXED_DAY
    )


@pytest.fixture()
def task_service(repository) -> TaskService:
    return TaskService(repository)


@pytest.fixture()
def memory_strategy() -> MemoryStorageStrategy:
    return MemoryStorageStrategy()


@pytest.fixture()
def memory_storage(memory_strategy) -> StorageStrategyContext:
    return StorageStrategyContext(memory_strategy)


# ---------------------------------------------------------------------------
# Auth bypass
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def bypass_auth():
    """Skip authentication checks in all tests by default."""
    with patch("skillpulse_cli.commands.decorators._require_auth"):
        yield
