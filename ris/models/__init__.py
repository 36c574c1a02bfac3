# Path: ris/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: ris/models.
# Details: Exposes dataclasses used across extraction, storage, indexing, and search layers.

from .domain import ImageDocument, IndexSummary, QueryReport, SearchHit

__all__ = ["ImageDocument", "IndexSummary", "QueryReport", "SearchHit"]
