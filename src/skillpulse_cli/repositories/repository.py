"""Document store abstraction for SkillPulse.

This module defines the abstract base class (interface) for document
persistence, following the hexagonal architecture (Ports & Adapters) pattern.

The task repository is written against this port only, so the same task
logic runs over Firestore, the local SQLite vault or an in-memory store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from skillpulse_cli.models import Document, DocumentQuery


class DocumentStore(ABC):
    """Abstract base class for keyed document collections.

    Documents are flat mappings of field name to JSON-compatible value,
    addressed by ``(collection, key)``.
    """

    @abstractmethod
    async def get(self, collection: str, key: str) -> Document | None:
        """Get a document by key.

        Args:
            collection: Collection name
            key: Document key

        Returns:
            The document, or None if it does not exist

        Raises:
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError("DocumentStore.get() must be implemented by adapter")

    @abstractmethod
    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document.

        Raises:
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError("DocumentStore.set() must be implemented by adapter")

    @abstractmethod
    async def create(self, collection: str, key: str, data: dict[str, Any]) -> None:
        """Create a document that must not exist yet.

        Raises:
            DocumentExistsError: If the key is already taken
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError(
            "DocumentStore.create() must be implemented by adapter"
        )

    @abstractmethod
    async def update(
        self, collection: str, key: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Patch fields of an existing document.

        Args:
            collection: Collection name
            key: Document key
            data: Fields to overwrite; other fields are left untouched

        Returns:
            The merged document data

        Raises:
            DocumentNotFoundError: If the document does not exist
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError(
            "DocumentStore.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, collection: str, key: str) -> None:
        """Delete an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError(
            "DocumentStore.delete() must be implemented by adapter"
        )

    @abstractmethod
    async def query(self, collection: str, query: DocumentQuery) -> list[Document]:
        """Run a filtered, ordered, limited query.

        Raises:
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError(
            "DocumentStore.query() must be implemented by adapter"
        )

    @abstractmethod
    async def increment(
        self, collection: str, key: str, field: str, amount: int = 1
    ) -> int:
        """Atomically add ``amount`` to an integer field, creating it at 0.

        Returns:
            The field value after the increment

        Raises:
            DocumentStoreError: On backend failure
        """
        raise NotImplementedError(
            "DocumentStore.increment() must be implemented by adapter"
        )

    async def close(self) -> None:
        """Release backend resources."""
