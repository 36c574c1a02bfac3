# Path: ris/engine.py
# Purpose: Wire extractor, store, indexing pipeline, and searcher from application settings.
# Layer: ris.
# Details: The store is constructed once and shared by the pipeline and the searcher.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import AppSettings
from ris.descriptors import DescriptorExtractor, build_extractor
from ris.imaging import ImageLoader
from ris.indexing import ImageScanner, IndexingPipeline
from ris.search import SimilaritySearcher
from ris.store import IndexStore, SqliteIndexStore


@dataclass
class SearchEngine:
    """The components one CLI invocation or API process works with."""

    settings: AppSettings
    extractor: DescriptorExtractor
    store: IndexStore
    pipeline: IndexingPipeline
    searcher: SimilaritySearcher

    @classmethod
    def from_settings(cls, settings: AppSettings, store: Optional[IndexStore] = None) -> "SearchEngine":
        """Build every component; ``store`` defaults to the SQLite index under ``settings.index_dir``."""

        extractor = build_extractor(settings.descriptor)
        store = store if store is not None else SqliteIndexStore(settings.index_dir)
        loader = ImageLoader(max_dimension=settings.descriptor.max_image_dimension)

        pipeline = IndexingPipeline(
            extractor=extractor,
            store=store,
            loader=loader,
            scanner=ImageScanner(settings.image_extensions, recursive=settings.recursive),
            workers=settings.workers,
            progress=settings.progress,
        )
        searcher = SimilaritySearcher(
            extractor=extractor,
            store=store,
            metric=settings.search.metric,
            loader=loader,
            scanner=ImageScanner(settings.image_extensions, recursive=False),
            batch_size=settings.scan_batch_size,
            workers=settings.search_workers,
        )
        return cls(settings=settings, extractor=extractor, store=store, pipeline=pipeline, searcher=searcher)

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "SearchEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
