# Path: ris/indexing/pipeline.py
# Purpose: Index every recognized image of a directory into the configured store.
# Layer: ris/indexing.
# Details: Decodes and extracts on a bounded thread pool; per-file failures are counted, never fatal.

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from enum import Enum
from pathlib import Path
from typing import Optional, Set

from tqdm import tqdm

from ris.descriptors.base import DescriptorExtractor
from ris.errors import DecodeError, DuplicateIdentifier, InvalidArgument, NotADirectory
from ris.imaging import ImageLoader
from ris.models.domain import ImageDocument, IndexSummary
from ris.store.base import IndexStore

from .scanner import ImageScanner

logger = logging.getLogger(__name__)


class FileOutcome(str, Enum):
    INDEXED = "indexed"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class IndexingPipeline:
    """Walk a directory and append one ImageDocument per decodable image.

    At most ``2 * workers`` files are in flight at a time. Setting the
    ``cancel`` event stops new submissions; files already submitted finish
    and are counted.
    """

    def __init__(
        self,
        extractor: DescriptorExtractor,
        store: IndexStore,
        loader: Optional[ImageLoader] = None,
        scanner: Optional[ImageScanner] = None,
        workers: int = 6,
        progress: bool = True,
    ) -> None:
        if workers < 1:
            raise InvalidArgument("workers must be at least 1.")
        self.extractor = extractor
        self.store = store
        self.loader = loader or ImageLoader()
        self.scanner = scanner or ImageScanner(recursive=True)
        self.workers = workers
        self.progress = progress

    def index_directory(self, path: Path | str, cancel: Optional[threading.Event] = None) -> IndexSummary:
        """
        Index the recognized image files under ``path``.

        External calls:
        - ris/indexing/scanner.py::ImageScanner.scan - lists candidate files.
        - ris/store/base.py::IndexStore.bind_signature - rejects indexes built by another extractor.
        - ris/store/base.py::IndexStore.append - commits each document.
        """

        root = Path(path)
        if not root.is_dir():
            raise NotADirectory(f"Not a directory: {root}")

        files = self.scanner.scan(root)
        self.store.bind_signature(self.extractor.signature)
        logger.info("Indexing %d image files in %s with %d workers", len(files), root, self.workers)

        summary = IndexSummary()
        submitted = 0
        pending: Set[Future] = set()
        remaining = iter(files)

        with ThreadPoolExecutor(max_workers=self.workers) as executor, tqdm(
            total=len(files), desc="Indexing images", unit="img", disable=not self.progress
        ) as bar:
            while True:
                while len(pending) < 2 * self.workers and not (cancel is not None and cancel.is_set()):
                    image_path = next(remaining, None)
                    if image_path is None:
                        break
                    pending.add(executor.submit(self._index_file, image_path))
                    submitted += 1
                if not pending:
                    break

                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    self._record(summary, future.result())
                    bar.update(1)

        summary.cancelled = submitted < len(files)
        if summary.cancelled:
            logger.warning("Indexing of %s cancelled after %d of %d files", root, submitted, len(files))
        logger.info(
            "Indexed %d images from %s (%d skipped: %d duplicates, %d unreadable)",
            summary.count,
            root,
            summary.skipped,
            summary.duplicates,
            summary.failed,
        )
        return summary

    def _index_file(self, image_path: Path) -> FileOutcome:
        identifier = str(image_path.resolve())
        try:
            pixels = self.loader.load(image_path)
            descriptor = self.extractor.extract(pixels)
        except DecodeError as exc:
            logger.warning("Skipping %s: %s", identifier, exc)
            return FileOutcome.FAILED

        try:
            self.store.append(ImageDocument(identifier=identifier, descriptor=descriptor))
        except DuplicateIdentifier:
            logger.info("Skipping %s: already indexed", identifier)
            return FileOutcome.DUPLICATE
        return FileOutcome.INDEXED

    @staticmethod
    def _record(summary: IndexSummary, outcome: FileOutcome) -> None:
        if outcome is FileOutcome.INDEXED:
            summary.count += 1
        elif outcome is FileOutcome.DUPLICATE:
            summary.duplicates += 1
        else:
            summary.failed += 1
