"""
Storage layer exports.
"""

from app.storage.base import StoragePort
from app.storage.criteria import RowFilter
from app.storage.errors import InvalidFilterError, StorageError, UnsupportedOperationError
from app.storage.memory_storage import InMemoryStorage
from app.storage.sqlalchemy_storage import SQLAlchemyStorage

__all__ = [
    "InMemoryStorage",
    "InvalidFilterError",
    "RowFilter",
    "SQLAlchemyStorage",
    "StorageError",
    "StoragePort",
    "UnsupportedOperationError",
]
