# Path: ris/indexing/__init__.py
# Purpose: Package initializer for indexing utilities.
# Layer: ris/indexing.
# Details: Exposes directory scanning and the parallel indexing pipeline.

from .scanner import ImageScanner, SUPPORTED_EXTENSIONS
from .pipeline import IndexingPipeline

__all__ = ["ImageScanner", "IndexingPipeline", "SUPPORTED_EXTENSIONS"]
