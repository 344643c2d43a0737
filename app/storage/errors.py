"""
Storage-layer exceptions.

Backend failures (constraint violations, connectivity) are not wrapped:
adapters roll back and re-raise the backend's own exception.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for storage port failures raised by this package."""


class UnsupportedOperationError(StorageError, NotImplementedError):
    """Raised when an adapter cannot perform the requested operation for a record type."""


class InvalidFilterError(StorageError, ValueError):
    """Raised when a filter or column mask names an unknown column."""
