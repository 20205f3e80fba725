"""
JSON File Record Store.

Single-device fallback that keeps every collection in one JSON file. The
file is read once when the store is created and rewritten after every
mutation. Each collection is serialized as a list of documents under a
fixed storage key.
"""

from __future__ import annotations

import json
import os
import tempfile
import uuid
from copy import deepcopy
from pathlib import Path
from typing import Any

from dailyledger.core.exceptions import ConfigurationError
from dailyledger.core.logging import get_logger
from dailyledger.storage.base import register_storage_backend
from dailyledger.storage.memory import InMemoryStorage

logger = get_logger("storage.file")


class JsonFileStorage(InMemoryStorage):
    """
    In-memory store persisted to a JSON file.

    A mutation only becomes visible once the file has been written; if the
    write fails, memory is rolled back to the last persisted state and the
    error propagates.

    Example:
        >>> storage = JsonFileStorage(
        ...     "ledger.json",
        ...     storage_keys={"payments": "dailyPayments", "agents": "agentsList_v2"},
        ... )
    """

    def __init__(
        self,
        path: str | os.PathLike[str] = "dailyledger.json",
        storage_keys: dict[str, str] | None = None,
        seed: dict[str, list[dict[str, Any]]] | None = None,
    ) -> None:
        """
        Initialize and load the file.

        Args:
            path: JSON file location
            storage_keys: Collection name -> key used inside the file
            seed: Documents written to each collection when the file does not exist yet

        Raises:
            ConfigurationError: If the file exists but is not a ledger JSON document
        """
        super().__init__()
        self._path = Path(path)
        self._storage_keys = dict(storage_keys or {})
        self._persisted: dict[str, dict[str, dict[str, Any]]] = {}

        if self._path.exists():
            self._load()
            self._persisted = deepcopy(self._data)
        elif seed:
            for collection, documents in seed.items():
                coll = self._ensure_collection(collection)
                for document in documents:
                    coll[uuid.uuid4().hex] = dict(document)
            self._commit()

    @property
    def path(self) -> Path:
        return self._path

    def _storage_key(self, collection: str) -> str:
        return self._storage_keys.get(collection, collection)

    def _collection_for(self, storage_key: str) -> str:
        for collection, key in self._storage_keys.items():
            if key == storage_key:
                return collection
        return storage_key

    def _load(self) -> None:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read ledger file {self._path}: {e}", details={"path": str(self._path)}
            ) from e
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"Ledger file {self._path} does not hold a JSON object",
                details={"path": str(self._path)},
            )

        for storage_key, documents in raw.items():
            if not isinstance(documents, list):
                logger.warning(f"Ignoring '{storage_key}' in {self._path}: not a list")
                continue
            coll = self._ensure_collection(self._collection_for(storage_key))
            for document in documents:
                # Agent lists may be stored as bare names
                if isinstance(document, str):
                    document = {"name": document}
                if not isinstance(document, dict):
                    logger.warning(f"Ignoring malformed entry in '{storage_key}': {document!r}")
                    continue
                document = dict(document)
                key = str(document.pop("id", None) or uuid.uuid4().hex)
                coll[key] = document
        logger.debug(f"Loaded {sum(len(c) for c in self._data.values())} documents from {self._path}")

    def _persist(self) -> None:
        payload = {
            self._storage_key(collection): [{"id": key, **data} for key, data in coll.items()]
            for collection, coll in self._data.items()
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def _commit(self) -> None:
        try:
            self._persist()
        except Exception:
            self._data = deepcopy(self._persisted)
            logger.error(f"Failed to write {self._path}; change rolled back")
            raise
        self._persisted = deepcopy(self._data)

    def _changed(self, collection: str) -> None:
        self._commit()
        super()._changed(collection)


register_storage_backend("file", JsonFileStorage)
