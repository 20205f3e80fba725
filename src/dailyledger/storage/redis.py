"""
Redis Record Store.

Shared backend for several devices working on the same ledger. Documents
are JSON strings under `{prefix}:{collection}:{key}` with a per-collection
index set; every mutation is announced on a pub/sub channel so subscribers
can re-read the collection and push a fresh snapshot.
Requires redis-py package.
"""

from __future__ import annotations

import asyncio
import json
import os
import uuid
from typing import Any

from dailyledger.core.logging import get_logger
from dailyledger.core.types import OrderBy
from dailyledger.storage.base import (
    SnapshotListener,
    StorageBackend,
    Subscription,
    register_storage_backend,
    sort_documents,
)

logger = get_logger("storage.redis")


class RedisStorage(StorageBackend):
    """
    Redis record store.

    Uses Redis for persistent storage and pub/sub for live snapshots.
    Requires: pip install redis
    """

    shared = True

    def __init__(
        self,
        redis_url: str | None = None,
        prefix: str = "dailyledger",
    ) -> None:
        """
        Initialize Redis storage.

        Args:
            redis_url: Redis connection URL (or from DAILYLEDGER_REDIS_URL env)
            prefix: Key prefix for all storage keys
        """
        self._redis_url = redis_url or os.environ.get(
            "DAILYLEDGER_REDIS_URL",
            "redis://localhost:6379/0",
        )
        self._prefix = prefix
        self._client = None
        self._tasks: set[asyncio.Task] = set()

    def _get_client(self):
        """Lazy-load Redis client."""
        if self._client is None:
            import redis.asyncio as redis

            self._client = redis.from_url(self._redis_url, decode_responses=True)
        return self._client

    def _make_key(self, collection: str, key: str) -> str:
        """Create Redis key from collection and key."""
        return f"{self._prefix}:{collection}:{key}"

    def _index_key(self, collection: str) -> str:
        return f"{self._prefix}:{collection}:_index"

    def _channel(self, collection: str) -> str:
        return f"{self._prefix}:{collection}:_changes"

    async def _announce(self, collection: str) -> None:
        client = self._get_client()
        await client.publish(self._channel(collection), "changed")

    async def create(
        self,
        collection: str,
        data: dict[str, Any],
    ) -> str:
        """Create a document under a fresh uuid key."""
        key = uuid.uuid4().hex
        await self.save(collection, key, data)
        return key

    async def save(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> None:
        """Save data to Redis."""
        client = self._get_client()
        await client.set(self._make_key(collection, key), json.dumps(data))
        await client.sadd(self._index_key(collection), key)
        await self._announce(collection)

    async def get(
        self,
        collection: str,
        key: str,
    ) -> dict[str, Any] | None:
        """Get data from Redis."""
        client = self._get_client()
        data = await client.get(self._make_key(collection, key))

        if data is None:
            return None
        return json.loads(data)

    async def delete(
        self,
        collection: str,
        key: str,
    ) -> bool:
        """Delete data from Redis."""
        client = self._get_client()
        result = await client.delete(self._make_key(collection, key))
        await client.srem(self._index_key(collection), key)

        if result > 0:
            await self._announce(collection)
        return result > 0

    async def query(
        self,
        collection: str,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        """Read every indexed document of the collection."""
        client = self._get_client()
        keys = await client.smembers(self._index_key(collection))

        results = []
        for key in keys:
            data = await self.get(collection, key)
            if data is None:
                continue

            data["_key"] = key
            results.append(data)

        return sort_documents(results, order_by)

    async def update(
        self,
        collection: str,
        key: str,
        data: dict[str, Any],
    ) -> bool:
        """Update existing data."""
        existing = await self.get(collection, key)
        if existing is None:
            return False

        existing.update(data)
        await self.save(collection, key, existing)
        return True

    async def clear(self, collection: str) -> int:
        """Clear all records from a collection."""
        client = self._get_client()
        keys = await client.smembers(self._index_key(collection))

        for key in keys:
            await client.delete(self._make_key(collection, key))
        await client.delete(self._index_key(collection))
        await self._announce(collection)

        return len(keys)

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        order_by: OrderBy | None = None,
    ) -> Subscription:
        """
        Listen for change announcements and push full snapshots.

        The initial snapshot is delivered before this coroutine returns.
        """
        client = self._get_client()
        pubsub = client.pubsub()
        await pubsub.subscribe(self._channel(collection))

        async def push() -> None:
            listener(await self.query(collection, order_by=order_by))

        async def pump() -> None:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    await push()
                except Exception as e:
                    # A failed refresh keeps the last snapshot; the next change retries
                    logger.error(f"Failed to refresh '{collection}' snapshot: {e}")

        await push()
        task = asyncio.create_task(pump())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        async def cancel() -> None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            await pubsub.unsubscribe(self._channel(collection))
            await pubsub.aclose()

        return Subscription(collection, cancel)

    async def close(self) -> None:
        """Close Redis connection."""
        for task in list(self._tasks):
            task.cancel()
        if self._client:
            await self._client.aclose()
            self._client = None


# Register backend
register_storage_backend("redis", RedisStorage)
