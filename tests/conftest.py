from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from app.storage.base import StoragePort
from app.storage.memory_storage import InMemoryStorage
from app.storage.sqlalchemy_storage import SQLAlchemyStorage
from db.base import Base
from db.session import create_session_factory


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    """Fresh in-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def sql_storage(sqlite_engine: Engine) -> SQLAlchemyStorage:
    return SQLAlchemyStorage(session_factory=create_session_factory(sqlite_engine), batch_size=2)


@pytest.fixture()
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture(params=["memory", "sqlalchemy"])
def storage(request: pytest.FixtureRequest) -> StoragePort:
    """Run the test once per storage backend."""
    if request.param == "memory":
        return request.getfixturevalue("memory_storage")
    return request.getfixturevalue("sql_storage")
