"""
Storage backend selection from settings.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from app.config import ImportSettings, StorageBackend, get_import_settings
from app.storage.base import StoragePort
from app.storage.memory_storage import InMemoryStorage
from app.storage.sqlalchemy_storage import SQLAlchemyStorage


def build_storage(
    settings: ImportSettings | None = None,
    *,
    session_factory: sessionmaker[Session] | None = None,
) -> StoragePort:
    """
    Return the storage adapter configured for this process.
    """

    resolved = settings or get_import_settings()
    if resolved.storage_backend == StorageBackend.MEMORY:
        return InMemoryStorage()
    if resolved.storage_backend == StorageBackend.SQLALCHEMY:
        return SQLAlchemyStorage(session_factory=session_factory, batch_size=resolved.batch_size)
    raise RuntimeError(
        f"Unknown storage backend '{resolved.storage_backend}'. "
        f"Allowed values: {sorted(StorageBackend.ALL)}."
    )
