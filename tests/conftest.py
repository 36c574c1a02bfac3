# Path: tests/conftest.py
# Purpose: Shared fixtures generating images on disk and wiring core components.
# Layer: tests.
# Details: Images are two-color PNGs with distinct color pairs so their descriptors never coincide.

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import pytest
from PIL import Image, ImageDraw

from ris.descriptors import ColorEdgeDescriptor
from ris.indexing import ImageScanner, IndexingPipeline
from ris.search import SimilaritySearcher
from ris.store import MemoryIndexStore

PALETTE: List[Tuple[int, int, int]] = [
    (255, 0, 0),
    (255, 140, 0),
    (255, 255, 0),
    (0, 200, 0),
    (0, 200, 200),
    (0, 0, 255),
    (255, 0, 255),
    (255, 255, 255),
    (0, 0, 0),
    (128, 128, 128),
]


def make_image(path: Path, left, right, size: int = 64) -> Path:
    """Write an image whose left half is ``left`` and right half is ``right``."""

    img = Image.new("RGB", (size, size), left)
    ImageDraw.Draw(img).rectangle([size // 2, 0, size - 1, size - 1], fill=right)
    img.save(path)
    return path


def color_pair(i: int):
    return PALETTE[i % len(PALETTE)], PALETTE[(i * 3 + 1) % len(PALETTE)]


@pytest.fixture
def gallery(tmp_path) -> Path:
    """Directory holding five visually distinct PNG images."""

    directory = tmp_path / "gallery"
    directory.mkdir()
    for i in range(5):
        make_image(directory / f"img_{i}.png", *color_pair(i))
    return directory


@pytest.fixture
def extractor():
    return ColorEdgeDescriptor()


@pytest.fixture
def memory_store():
    return MemoryIndexStore()


@pytest.fixture
def pipeline(extractor, memory_store):
    return IndexingPipeline(extractor, memory_store, workers=2, progress=False)


@pytest.fixture
def searcher(extractor, memory_store):
    return SimilaritySearcher(extractor, memory_store, scanner=ImageScanner(recursive=False))
