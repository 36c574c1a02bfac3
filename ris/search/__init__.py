# Path: ris/search/__init__.py
# Purpose: Package initializer for distance metrics and the similarity searcher.
# Layer: ris/search.
# Details: Exposes the searcher entrypoint and the metric registry.

from .metrics import METRICS, get_metric
from .searcher import SimilaritySearcher

__all__ = ["SimilaritySearcher", "METRICS", "get_metric"]
