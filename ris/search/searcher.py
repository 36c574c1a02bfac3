# Path: ris/search/searcher.py
# Purpose: Rank indexed images by descriptor distance to a probe image.
# Layer: ris/search.
# Details: Linear scan over a query snapshot with a bounded top-k selection; supports single files and directories.

from __future__ import annotations

import heapq
import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from ris.descriptors.base import DescriptorExtractor
from ris.errors import DecodeError, ExtractorMismatch, InvalidArgument, NotFound
from ris.imaging import ImageLoader
from ris.indexing.scanner import ImageScanner
from ris.models.domain import ImageDocument, QueryReport, SearchHit
from ris.store.base import IndexStore, QueryHandle

from .metrics import get_metric

logger = logging.getLogger(__name__)


class SimilaritySearcher:
    """Answer top-k similarity queries against an index store.

    Hits are ordered by ascending distance, ties broken by identifier, so
    repeated queries against an unchanged index return identical results.
    """

    def __init__(
        self,
        extractor: DescriptorExtractor,
        store: IndexStore,
        metric: str = "tanimoto",
        loader: Optional[ImageLoader] = None,
        scanner: Optional[ImageScanner] = None,
        batch_size: int = 512,
        workers: int = 1,
    ) -> None:
        if batch_size < 1:
            raise InvalidArgument("batch_size must be at least 1.")
        if workers < 1:
            raise InvalidArgument("workers must be at least 1.")
        self.extractor = extractor
        self.store = store
        self.metric_name = metric
        self.metric = get_metric(metric)
        self.loader = loader or ImageLoader()
        self.scanner = scanner or ImageScanner()
        self.batch_size = batch_size
        self.workers = workers

    def search(self, probe: np.ndarray, k: int) -> List[SearchHit]:
        """Return the ``k`` indexed documents closest to the probe descriptor."""

        self._check_k(k)
        probe = np.asarray(probe, dtype=np.float32).ravel()
        with self.store.open_for_query() as handle:
            self._check_signature(handle)
            return self._search_handle(handle, probe, k)

    def search_image(self, image_path: Path | str, k: int) -> List[SearchHit]:
        """Decode an image file, extract its descriptor, and search with it."""

        self._check_k(k)
        pixels = self.loader.load(image_path)
        return self.search(self.extractor.extract(pixels), k)

    def search_path(self, path: Path | str, k: int) -> List[QueryReport]:
        """Search with one image file, or with every recognized image directly inside a directory.

        Paths that match no recognized image yield an empty list. A probe that
        fails to decode gets a report carrying the error; the others still run.
        """

        self._check_k(k)
        target = Path(path)
        if not target.exists():
            raise NotFound(f"No such file or directory: {target}")

        if target.is_dir():
            probes = self.scanner.scan(target)
        elif self.scanner.accepts(target):
            probes = [target]
        else:
            logger.warning("Skipping %s: not a recognized image file", target)
            probes = []

        if not probes:
            logger.info("No image files to search in %s", target)
            return []

        # Every probe of the batch reads the same snapshot.
        with self.store.open_for_query() as handle:
            self._check_signature(handle)
            if self.workers > 1 and len(probes) > 1:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    return list(executor.map(lambda probe: self._report(handle, probe, k), probes))
            return [self._report(handle, probe, k) for probe in probes]

    def _search_handle(self, handle: QueryHandle, probe: np.ndarray, k: int) -> List[SearchHit]:
        best = heapq.nsmallest(k, self._scored(handle, probe))
        return [SearchHit(identifier=identifier, score=score, rank=rank) for rank, (score, identifier) in enumerate(best, start=1)]

    def _report(self, handle: QueryHandle, probe_path: Path, k: int) -> QueryReport:
        logger.debug("Searching for %s", probe_path)
        try:
            pixels = self.loader.load(probe_path)
            probe = np.asarray(self.extractor.extract(pixels), dtype=np.float32).ravel()
            hits = self._search_handle(handle, probe, k)
        except DecodeError as exc:
            logger.warning("Cannot search with %s: %s", probe_path, exc)
            return QueryReport(probe=str(probe_path), error=str(exc))
        return QueryReport(probe=str(probe_path), hits=hits)

    def _scored(self, handle: QueryHandle, probe: np.ndarray) -> Iterator[Tuple[float, str]]:
        """Yield ``(distance, identifier)`` pairs for every document in the snapshot."""

        for batch in _chunks(self.store.scan(handle), self.batch_size):
            for doc in batch:
                if doc.dim != probe.shape[0]:
                    raise ExtractorMismatch(
                        f"Probe has {probe.shape[0]} dimensions but {doc.identifier} has {doc.dim}."
                    )
            matrix = np.vstack([doc.descriptor for doc in batch])
            distances = self.metric(matrix, probe)
            yield from zip(distances.tolist(), (doc.identifier for doc in batch))

    def _check_signature(self, handle: QueryHandle) -> None:
        if handle.signature is not None and handle.signature != self.extractor.signature:
            raise ExtractorMismatch(
                f"Index was built with {handle.signature!r} but the searcher uses {self.extractor.signature!r}."
            )

    @staticmethod
    def _check_k(k: int) -> None:
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
            raise InvalidArgument(f"k must be a positive integer, got {k!r}.")


def _chunks(documents: Iterable[ImageDocument], size: int) -> Iterator[List[ImageDocument]]:
    iterator = iter(documents)
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield chunk
