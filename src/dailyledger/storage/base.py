"""
Abstract Record Store for dailyledger.

Provides the pluggable persistence layer the ledger projects from: document
CRUD plus a live subscription that pushes the full ordered collection on
every change.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from dailyledger.core.types import OrderBy

# Receives the full ordered snapshot of a collection
SnapshotListener = Callable[[list[dict[str, Any]]], None]


def sort_documents(
    documents: list[dict[str, Any]],
    order_by: OrderBy | None,
) -> list[dict[str, Any]]:
    """Order documents by a field, placing documents without it last."""
    if order_by is None:
        return documents
    present = [d for d in documents if d.get(order_by.field) is not None]
    missing = [d for d in documents if d.get(order_by.field) is None]
    present.sort(key=lambda d: d[order_by.field], reverse=order_by.descending)
    return present + missing


class Subscription:
    """
    Handle for a live collection subscription.

    Call `unsubscribe()` to stop receiving snapshots. Unsubscribing twice is
    a no-op.
    """

    def __init__(self, collection: str, cancel: Callable[[], Awaitable[None]]) -> None:
        self.collection = collection
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        await self._cancel()


class StorageBackend(ABC):
    """
    Abstract base class for record stores.

    Implementations can use any persistence layer (memory, JSON file,
    Redis, ...). Documents are plain JSON-serializable dicts; query results
    carry their key under "_key".
    """

    # Shared stores are reached by more than one device; destructive
    # whole-collection operations are refused against them.
    shared: bool = False

    @abstractmethod
    async def create(
        self,
        collection: str,
        data: dict[str, Any],
    ) -> str:
        """
        Create a document with a store-assigned key.

        Args:
            collection: Collection name
            data: Document fields (must be JSON-serializable)

        Returns:
            The new document's key
        """
        ...

    @abstractmethod
    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> None:
        """
        Save (create or replace) a document under a known key.

        Args:
            collection: Collection name
            key: Unique key for the record
            data: Data to store (must be JSON-serializable)
        """
        ...

    @abstractmethod
    async def get(
        self,
        collection: str,
        key: str,
    ) -> dict[str, Any] | None:
        """
        Get a document.

        Returns:
            Data dict or None if not found
        """
        ...

    @abstractmethod
    async def delete(
        self,
        collection: str,
        key: str,
    ) -> bool:
        """
        Delete a document.

        Returns:
            True if deleted, False if not found
        """
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        """
        Read the whole collection.

        Returns:
            Every document, each with its key under "_key", in `order_by` order
        """
        ...

    @abstractmethod
    async def update(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> bool:
        """
        Update an existing document.

        Args:
            data: Fields to update (merged with existing)

        Returns:
            True if updated, False if not found
        """
        ...

    @abstractmethod
    async def clear(self, collection: str) -> int:
        """
        Clear all records from a collection.

        Returns:
            Number of records deleted
        """
        ...

    @abstractmethod
    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        order_by: OrderBy | None = None,
    ) -> Subscription:
        """
        Subscribe to a collection.

        The listener receives the full ordered snapshot once immediately and
        again after every change, until the subscription is cancelled.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the backend."""
        return None


# Storage backend registry for dependency injection
_STORAGE_BACKENDS: dict[str, type[StorageBackend]] = {}


def register_storage_backend(name: str, backend_class: type[StorageBackend]) -> None:
    """Register a storage backend by name."""
    _STORAGE_BACKENDS[name] = backend_class


def get_storage_backend(name: str) -> type[StorageBackend] | None:
    """Get a registered storage backend by name."""
    return _STORAGE_BACKENDS.get(name)


def list_storage_backends() -> list[str]:
    """List all registered storage backend names."""
    return list(_STORAGE_BACKENDS.keys())
