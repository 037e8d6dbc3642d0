"""
Strategy Pattern: Storage Strategy Container

A storage strategy bundles the document store and the identity provider for
one backend (local SQLite vault or remote Firebase project). The active
context decides the strategy once at startup; services receive the pieces
they need and never know which backend they are talking to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from skillpulse_cli.models.config_models import AppConfig, TasksConfig
from skillpulse_cli.repositories import (
    CounterTaskIdAllocator,
    DocumentStore,
    IdentityProvider,
    ScanTaskIdAllocator,
    TaskIdAllocator,
    TaskRepository,
)


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy owns the adapters for a given storage backend and releases
    them on ``close``.
    """

    @abstractmethod
    def get_document_store(self) -> DocumentStore:
        """Get document store implementation for this strategy."""

    @abstractmethod
    def get_identity_provider(self) -> IdentityProvider:
        """Get identity provider implementation for this strategy."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""

    async def close(self) -> None:
        await self.get_document_store().close()
        await self.get_identity_provider().close()


class LocalStorageStrategy(StorageStrategy):
    """
    Local SQLite storage strategy.

    Tasks and accounts live in the same vault file.
    """

    def __init__(self, db_path: str):
        """
        Initialize local strategy.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from skillpulse_cli.adapters.sqlite import (
            LocalIdentityProvider,
            SqliteDocumentStore,
        )

        self._document_store = SqliteDocumentStore(db_path=db_path)
        self._identity_provider = LocalIdentityProvider(db_path=db_path)

    def get_document_store(self) -> DocumentStore:
        return self._document_store

    def get_identity_provider(self) -> IdentityProvider:
        return self._identity_provider

    @property
    def storage_type(self) -> str:
        return "local"


class RemoteStorageStrategy(StorageStrategy):
    """
    Remote Firebase storage strategy.

    Firestore requests carry the signed-in identity's ID token; a 401 makes
    the client refresh it through the identity provider once.
    """

    def __init__(self, project_id: str, config: AppConfig | None = None, transport=None):
        """
        Initialize remote strategy.

        Args:
            project_id: Firebase project id
            config: Application config (API timeouts, Firebase endpoints)
            transport: Optional httpx transport shared by all clients
        """
        from skillpulse_cli.adapters.firebase import (
            FirebaseIdentityProvider,
            FirestoreDocumentStore,
        )
        from skillpulse_cli.services.api.client import APIClient

        config = config or AppConfig()
        self.project_id = project_id
        firebase = config.firebase
        client_options = {
            "timeout": config.api.timeout,
            "retry": config.api.retry,
            "transport": transport,
        }
        key_params = {"key": firebase.api_key} if firebase.api_key else None

        self._identity_provider = FirebaseIdentityProvider(
            auth_client=APIClient(
                firebase.auth_endpoint, default_params=key_params, **client_options
            ),
            token_client=APIClient(
                firebase.token_endpoint, default_params=key_params, **client_options
            ),
        )
        provider = self._identity_provider
        self._document_store = FirestoreDocumentStore(
            project_id,
            APIClient(
                firebase.firestore_endpoint,
                token_provider=lambda: (
                    provider.current_identity.token if provider.current_identity else None
                ),
                refresh_handler=provider.refresh,
                **client_options,
            ),
            database=firebase.database,
        )

    def get_document_store(self) -> DocumentStore:
        return self._document_store

    def get_identity_provider(self) -> IdentityProvider:
        return self._identity_provider

    @property
    def storage_type(self) -> str:
        return "remote"


def build_id_allocator(store: DocumentStore, tasks: TasksConfig) -> TaskIdAllocator:
    """Pick the task id allocator named by the tasks config."""
    if tasks.id_strategy == "scan":
        return ScanTaskIdAllocator(store, collection=tasks.collection)
    return CounterTaskIdAllocator(
        store, collection=tasks.counters_collection, tasks_collection=tasks.collection
    )


class StorageStrategyContext:
    """
    Strategy context that provides access to the active backend.

    Usage:
        # At startup
        strategy = LocalStorageStrategy(db_path="/path/to/db")
        context = StorageStrategyContext(strategy)

        # In services
        repo = context.task_repository
        await repo.load_tasks(owner_id)  # Works regardless of strategy
    """

    def __init__(self, strategy: StorageStrategy, tasks: TasksConfig | None = None):
        """
        Initialize strategy context.

        Args:
            strategy: Storage strategy (Local or Remote)
            tasks: Task storage settings used to build the repository
        """
        self._strategy = strategy
        self._tasks = tasks or TasksConfig()
        self._task_repository: TaskRepository | None = None

    @property
    def document_store(self) -> DocumentStore:
        return self._strategy.get_document_store()

    @property
    def identity_provider(self) -> IdentityProvider:
        return self._strategy.get_identity_provider()

    @property
    def task_repository(self) -> TaskRepository:
        """Task repository over the current strategy's document store."""
        if self._task_repository is None:
            store = self.document_store
            self._task_repository = TaskRepository(
                store,
                allocator=build_id_allocator(store, self._tasks),
                collection=self._tasks.collection,
                page_size=self._tasks.page_size,
                max_id_attempts=self._tasks.max_id_attempts,
            )
        return self._task_repository

    @property
    def storage_type(self) -> str:
        """Get storage type (for logging/debugging only)."""
        return self._strategy.storage_type

    @property
    def strategy(self) -> StorageStrategy:
        """Get underlying strategy (for advanced use cases)."""
        return self._strategy

    async def close(self) -> None:
        await self._strategy.close()
