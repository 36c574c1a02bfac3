# Path: ris/errors.py
# Purpose: Define the error taxonomy shared by indexing, storage, and search.
# Layer: ris.
# Details: Library exceptions are wrapped into these types where the library is touched.

from __future__ import annotations


class RisError(Exception):
    """Base class for every error raised by the reverse image search engine."""


class NotADirectory(RisError):
    """Raised when an indexing target is missing or is not a directory."""


class NotFound(RisError):
    """Raised when a search path does not exist."""


class DecodeError(RisError):
    """Raised when an image cannot be read or its pixel grid is empty or malformed."""


class DuplicateIdentifier(RisError):
    """Raised when appending a document whose identifier is already indexed."""


class StorageUnavailable(RisError):
    """Raised when the index cannot be opened for reading or writing."""


class InvalidArgument(RisError):
    """Raised for out-of-range parameters, unknown metrics, or invalid settings."""


class ExtractorMismatch(RisError):
    """Raised when descriptors from different extractor configurations would be compared."""


__all__ = [
    "RisError",
    "NotADirectory",
    "NotFound",
    "DecodeError",
    "DuplicateIdentifier",
    "StorageUnavailable",
    "InvalidArgument",
    "ExtractorMismatch",
]
