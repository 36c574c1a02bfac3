# Path: ris/store/memory_store.py
# Purpose: Provide an in-memory index store.
# Layer: ris/store.
# Details: Used for dependency injection in tests and for throwaway indexes; nothing is persisted.

from __future__ import annotations

import threading
from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from ris.errors import DuplicateIdentifier, ExtractorMismatch
from ris.models.domain import ImageDocument

from .base import IndexStore, QueryHandle


class MemoryQueryHandle(QueryHandle):
    """Holds an immutable copy of the documents present when it was opened."""

    def __init__(self, documents: Tuple[ImageDocument, ...], signature: Optional[str]) -> None:
        self.documents = documents
        self.signature = signature
        self.size = len(documents)

    def close(self) -> None:
        self.documents = ()


class MemoryIndexStore(IndexStore):
    """Dictionary-backed store keyed by identifier."""

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self._documents: Dict[str, ImageDocument] = {}
        self._signature: Optional[str] = None
        self._lock = threading.Lock()

    def append(self, doc: ImageDocument) -> None:
        # Stored descriptors are private read-only copies.
        descriptor = np.array(doc.descriptor, dtype=np.float32, copy=True)
        descriptor.flags.writeable = False
        with self._lock:
            if doc.identifier in self._documents:
                raise DuplicateIdentifier(f"Already indexed: {doc.identifier}")
            self._documents[doc.identifier] = ImageDocument(identifier=doc.identifier, descriptor=descriptor)

    def bind_signature(self, signature: str) -> None:
        with self._lock:
            if self._signature is None:
                self._signature = signature
            elif self._signature != signature:
                raise ExtractorMismatch(
                    f"Index was built with {self._signature!r}, not {signature!r}."
                )

    def open_for_query(self) -> MemoryQueryHandle:
        with self._lock:
            snapshot = tuple(self._documents[key] for key in sorted(self._documents))
            return MemoryQueryHandle(snapshot, self._signature)

    def scan(self, handle: QueryHandle) -> Iterator[ImageDocument]:
        if not isinstance(handle, MemoryQueryHandle):
            raise TypeError("MemoryIndexStore.scan requires a handle from open_for_query().")
        return iter(handle.documents)

    def count(self) -> int:
        with self._lock:
            return len(self._documents)
