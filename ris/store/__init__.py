# Path: ris/store/__init__.py
# Purpose: Package initializer for index store interfaces and implementations.
# Layer: ris/store.
# Details: Exposes the base store contract, the SQLite-backed store, and the in-memory store.

from .base import IndexStore, QueryHandle
from .memory_store import MemoryIndexStore
from .sqlite_store import SqliteIndexStore

__all__ = ["IndexStore", "QueryHandle", "MemoryIndexStore", "SqliteIndexStore"]
