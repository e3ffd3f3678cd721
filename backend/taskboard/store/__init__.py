"""Entity stores: the persistence seam behind the services."""

from taskboard.store.base import EntityStore, StorageError
from taskboard.store.memory import InMemoryStore

__all__ = ["EntityStore", "InMemoryStore", "StorageError"]
