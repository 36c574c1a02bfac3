# Path: ris/store/base.py
# Purpose: Define the IndexStore interface for persisting and scanning image descriptors.
# Layer: ris/store.
# Details: Appends reject duplicate identifiers; readers work on snapshots fixed when a query handle opens.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ris.models.domain import ImageDocument


class QueryHandle(ABC):
    """Scoped read access to the documents committed before the handle was opened."""

    signature: Optional[str] = None
    size: int = 0

    @abstractmethod
    def close(self) -> None:
        """Release the snapshot."""

    def __enter__(self) -> "QueryHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class IndexStore(ABC):
    """Abstract base class for pluggable index backends.

    Duplicate policy: :meth:`append` rejects an identifier that is already
    stored by raising :class:`ris.errors.DuplicateIdentifier`; the stored
    document is left untouched. Implementations must make ``append`` safe to
    call from several threads at once.
    """

    name: str

    @abstractmethod
    def append(self, doc: ImageDocument) -> None:
        """Commit a document, raising DuplicateIdentifier if its identifier is present."""

    @abstractmethod
    def bind_signature(self, signature: str) -> None:
        """Record the extractor signature, raising ExtractorMismatch if another one is recorded."""

    @abstractmethod
    def open_for_query(self) -> QueryHandle:
        """Open a snapshot handle, raising StorageUnavailable if the index cannot be read."""

    @abstractmethod
    def scan(self, handle: QueryHandle) -> Iterator[ImageDocument]:
        """Lazily yield every document of the handle's snapshot, ordered by identifier."""

    def count(self) -> int:
        """Return the number of committed documents."""

        with self.open_for_query() as handle:
            return handle.size

    def close(self) -> None:
        """Release any resources held by the store."""

    def __enter__(self) -> "IndexStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
