"""
Record stores for dailyledger.

Provides pluggable persistence for payments and agent names.

Configuration via environment:
    DAILYLEDGER_STORAGE_BACKEND=memory  # or 'file', 'redis'
    DAILYLEDGER_REDIS_URL=redis://localhost:6379/0
    DAILYLEDGER_STORAGE_PATH=dailyledger.json

Example:
    >>> from dailyledger.storage import get_storage, InMemoryStorage, RedisStorage
    >>>
    >>> # Get storage from environment
    >>> storage = get_storage()
    >>>
    >>> # Or create specific backend
    >>> storage = InMemoryStorage()
    >>> storage = RedisStorage(redis_url="redis://localhost:6379")
"""

from __future__ import annotations

import os
from typing import Any

from dailyledger.core.exceptions import ConfigurationError
from dailyledger.storage.base import (
    SnapshotListener,
    StorageBackend,
    Subscription,
    get_storage_backend,
    list_storage_backends,
    register_storage_backend,
)
from dailyledger.storage.file import JsonFileStorage
from dailyledger.storage.memory import InMemoryStorage
from dailyledger.storage.redis import RedisStorage


def get_storage(backend_name: str | None = None, **options: Any) -> StorageBackend:
    """
    Get storage backend from environment or by name.

    Args:
        backend_name: Backend name, or None to read from DAILYLEDGER_STORAGE_BACKEND env
        **options: Constructor arguments for the backend

    Returns:
        StorageBackend instance

    Raises:
        ConfigurationError: If backend name is unknown
    """
    if backend_name is None:
        backend_name = os.environ.get("DAILYLEDGER_STORAGE_BACKEND", "memory")

    backend_class = get_storage_backend(backend_name)

    if backend_class is None:
        available = list_storage_backends()
        raise ConfigurationError(
            f"Unknown storage backend: '{backend_name}'. Available: {', '.join(available)}"
        )

    return backend_class(**options)


__all__ = [
    "StorageBackend",
    "Subscription",
    "SnapshotListener",
    "InMemoryStorage",
    "JsonFileStorage",
    "RedisStorage",
    "get_storage",
    "get_storage_backend",
    "list_storage_backends",
    "register_storage_backend",
]
