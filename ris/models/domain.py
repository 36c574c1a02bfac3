# Path: ris/models/domain.py
# Purpose: Define domain models shared across extraction, storage, indexing, and search.
# Layer: ris/models.
# Details: Lightweight dataclasses passed between the pipeline, the store, and the CLI/API layers.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np


@dataclass(frozen=True)
class ImageDocument:
    """An indexed image: its absolute path and the descriptor computed from its pixels."""

    identifier: str
    descriptor: np.ndarray

    @property
    def dim(self) -> int:
        return int(self.descriptor.shape[0])


@dataclass(frozen=True)
class SearchHit:
    """One ranked search result. Lower scores are more similar."""

    identifier: str
    score: float
    rank: int

    def to_dict(self) -> dict:
        return {"identifier": self.identifier, "score": self.score, "rank": self.rank}


@dataclass
class QueryReport:
    """Results for a single probe image within a path or directory search."""

    probe: str
    hits: List[SearchHit] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "probe": self.probe,
            "hits": [hit.to_dict() for hit in self.hits],
            "error": self.error,
        }


@dataclass
class IndexSummary:
    """Counts reported by one indexing run."""

    count: int = 0
    duplicates: int = 0
    failed: int = 0
    cancelled: bool = False

    @property
    def skipped(self) -> int:
        """Files that were accepted by the filter but not added to the index."""

        return self.duplicates + self.failed
