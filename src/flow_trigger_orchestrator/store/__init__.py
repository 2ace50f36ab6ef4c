"""Scoped key/value storage for trigger instances."""

from flow_trigger_orchestrator.store.context_store import (
    ContextStore,
    ContextStoreFactory,
    FileStoreEntryRepository,
    InMemoryStoreEntryRepository,
    StoreEntryRepository,
)

__all__ = [
    "ContextStore",
    "ContextStoreFactory",
    "FileStoreEntryRepository",
    "InMemoryStoreEntryRepository",
    "StoreEntryRepository",
]
