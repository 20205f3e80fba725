"""
In-Memory Record Store.

Default backend that keeps all documents in memory. Subscribers are
notified synchronously after every mutation, which makes it the natural
backend for tests and single-process use.
"""

from __future__ import annotations

import uuid
from copy import deepcopy
from typing import Any

from dailyledger.core.types import OrderBy
from dailyledger.storage.base import (
    SnapshotListener,
    StorageBackend,
    Subscription,
    register_storage_backend,
    sort_documents,
)


class InMemoryStorage(StorageBackend):
    """
    In-memory record store.

    Stores all data in Python dicts. Data is lost when process ends.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._listeners: dict[str, list[tuple[SnapshotListener, OrderBy | None]]] = {}

    def _ensure_collection(self, collection: str) -> dict[str, dict[str, Any]]:
        """Ensure collection exists and return it."""
        if collection not in self._data:
            self._data[collection] = {}
        return self._data[collection]

    def _snapshot(self, collection: str, order_by: OrderBy | None) -> list[dict[str, Any]]:
        coll = self._ensure_collection(collection)
        documents = []
        for key, data in coll.items():
            document = deepcopy(data)
            document["_key"] = key
            documents.append(document)
        return sort_documents(documents, order_by)

    def _changed(self, collection: str) -> None:
        """Push the new snapshot to every subscriber of the collection."""
        for listener, order_by in list(self._listeners.get(collection, [])):
            listener(self._snapshot(collection, order_by))

    async def create(
        self,
        collection: str,
        data: dict[str, Any],
    ) -> str:
        """Create a document under a fresh uuid key."""
        key = uuid.uuid4().hex
        coll = self._ensure_collection(collection)
        coll[key] = deepcopy(data)
        self._changed(collection)
        return key

    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> None:
        """Save data to memory."""
        coll = self._ensure_collection(collection)
        coll[key] = deepcopy(data)
        self._changed(collection)

    async def get(
        self,
        collection: str,
        key: str,
    ) -> dict[str, Any] | None:
        """Get data from memory."""
        coll = self._ensure_collection(collection)
        data = coll.get(key)
        return deepcopy(data) if data else None

    async def delete(
        self,
        collection: str,
        key: str,
    ) -> bool:
        """Delete data from memory."""
        coll = self._ensure_collection(collection)
        if key in coll:
            del coll[key]
            self._changed(collection)
            return True
        return False

    async def query(
        self,
        collection: str,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        """Read the whole collection."""
        return self._snapshot(collection, order_by)

    async def update(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> bool:
        """Update existing data."""
        coll = self._ensure_collection(collection)
        if key not in coll:
            return False

        coll[key].update(deepcopy(data))
        self._changed(collection)
        return True

    async def clear(self, collection: str) -> int:
        """Clear all records from a collection."""
        coll = self._ensure_collection(collection)
        count = len(coll)
        coll.clear()
        self._changed(collection)
        return count

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        order_by: OrderBy | None = None,
    ) -> Subscription:
        """Register a listener and push the current snapshot to it."""
        entry = (listener, order_by)
        self._listeners.setdefault(collection, []).append(entry)

        async def cancel() -> None:
            listeners = self._listeners.get(collection, [])
            if entry in listeners:
                listeners.remove(entry)

        listener(self._snapshot(collection, order_by))
        return Subscription(collection, cancel)


# Register as default backend
register_storage_backend("memory", InMemoryStorage)
