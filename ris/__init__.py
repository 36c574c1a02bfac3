# Path: ris/__init__.py
# Purpose: Package initializer for the reverse image search engine.
# Layer: ris.
# Details: Aggregates subpackages for descriptors, index stores, indexing, search, and models.

__version__ = "0.1.0"
