# Path: ris/indexing/scanner.py
# Purpose: Filter and list image files for indexing and batch search.
# Layer: ris/indexing.
# Details: Case-insensitive suffix matching against a configurable extension list.

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

SUPPORTED_EXTENSIONS = ("jpg", "jpeg", "png")


class ImageScanner:
    """Scan filesystem paths for recognized image files."""

    def __init__(self, extensions: Sequence[str] = SUPPORTED_EXTENSIONS, recursive: bool = False) -> None:
        self.suffixes = tuple("." + ext.lower().lstrip(".") for ext in extensions)
        self.recursive = recursive

    def accepts(self, path: Path) -> bool:
        """Return True when the file name ends with a recognized extension."""

        return path.name.lower().endswith(self.suffixes)

    def scan(self, root: Path) -> List[Path]:
        """Return the recognized image files under ``root``, sorted by path."""

        return sorted(self._iter_image_files(root))

    def _iter_image_files(self, root: Path) -> Iterable[Path]:
        """Yield image files in the root directory (and below it when recursive)."""

        candidates = root.rglob("*") if self.recursive else root.iterdir()
        for path in candidates:
            if path.is_file() and self.accepts(path):
                yield path


__all__ = ["ImageScanner", "SUPPORTED_EXTENSIONS"]
