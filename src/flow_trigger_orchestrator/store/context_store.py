"""Per-collection key/value storage handed to piece trigger hooks.

Polling triggers keep cursors here (e.g. "last seen message id") so a run
triggered by the scheduler only emits new items.
"""

from __future__ import annotations

import asyncio
import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from flow_trigger_orchestrator.errors import StoreOperationFailure
from flow_trigger_orchestrator.models import CollectionId


class StoreEntryRepository(Protocol):
    def get(self, scope: str, key: str) -> Any | None: ...

    def put(self, scope: str, key: str, value: Any) -> None: ...

    def delete(self, scope: str, key: str) -> None: ...


class InMemoryStoreEntryRepository:
    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], Any] = {}
        self._lock = threading.Lock()

    def get(self, scope: str, key: str) -> Any | None:
        with self._lock:
            return self._entries.get((scope, key))

    def put(self, scope: str, key: str, value: Any) -> None:
        with self._lock:
            self._entries[(scope, key)] = value

    def delete(self, scope: str, key: str) -> None:
        with self._lock:
            self._entries.pop((scope, key), None)


@dataclass
class FileStoreEntryRepository:
    """Persist store entries as ``{scope: {key: value}}`` in a JSON file."""

    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _load_unlocked(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreOperationFailure(
                f"Failed to read context store {self.path}: {e}", path=str(self.path)
            ) from e
        if not isinstance(raw, dict) or not all(isinstance(v, dict) for v in raw.values()):
            raise StoreOperationFailure(
                f"Context store is not a JSON object of scopes: {self.path}",
                path=str(self.path),
            )
        return raw

    def _save_unlocked(self, entries: dict[str, dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(entries, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
            )
        except OSError as e:
            raise StoreOperationFailure(
                f"Failed to write context store {self.path}: {e}", path=str(self.path)
            ) from e

    def get(self, scope: str, key: str) -> Any | None:
        with self._lock:
            return self._load_unlocked().get(scope, {}).get(key)

    def put(self, scope: str, key: str, value: Any) -> None:
        with self._lock:
            entries = self._load_unlocked()
            entries.setdefault(scope, {})[key] = value
            self._save_unlocked(entries)

    def delete(self, scope: str, key: str) -> None:
        with self._lock:
            entries = self._load_unlocked()
            scoped = entries.get(scope)
            if scoped is None or key not in scoped:
                return
            del scoped[key]
            if not scoped:
                del entries[scope]
            self._save_unlocked(entries)


class ContextStore:
    """Key/value handle scoped to one collection.

    Repository calls are synchronous and may touch disk, so they run in a
    worker thread.
    """

    def __init__(self, *, scope: str, repository: StoreEntryRepository) -> None:
        self._scope = scope
        self._repository = repository

    @property
    def scope(self) -> str:
        return self._scope

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._repository.get, self._scope, key)

    async def put(self, key: str, value: Any) -> Any:
        await asyncio.to_thread(self._repository.put, self._scope, key, value)
        return value

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._repository.delete, self._scope, key)


class ContextStoreFactory:
    def __init__(self, repository: StoreEntryRepository) -> None:
        self._repository = repository

    def create_context_store(self, collection_id: CollectionId) -> ContextStore:
        return ContextStore(scope=collection_id, repository=self._repository)
