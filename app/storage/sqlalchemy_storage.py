"""
SQLAlchemy-backed storage implementation using set-based bulk statements.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any, TypeVar

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.storage.base import StoragePort, single_model
from app.storage.columns import apply_scalar_defaults, identity_key, insert_payload, require_columns
from app.storage.criteria import RowFilter, compile_filter

T = TypeVar("T")

_DEFAULT_BATCH_SIZE = 1000


class SQLAlchemyStorage(StoragePort):
    """
    Forward bulk operations to the database as single set-based statements.

    Each call runs in its own session and transaction. Identities come back
    from `INSERT ... RETURNING` in parameter order. No parent/child fixup
    happens here: dependent rows are inserted by a separate call.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | None = None,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            self._session_factory = get_session_factory()
        else:
            self._session_factory = session_factory
        self._batch_size = max(1, batch_size)

    def all(self, model: type[T], where: RowFilter | None = None) -> list[T]:
        stmt = select(model)
        conditions = compile_filter(model, where)
        if conditions:
            stmt = stmt.where(*conditions)

        with self._session_factory() as session:
            rows = list(session.scalars(stmt).all())
            session.expunge_all()
        return rows

    def count(self, model: type[Any], where: RowFilter | None = None) -> int:
        stmt = select(func.count()).select_from(model)
        conditions = compile_filter(model, where)
        if conditions:
            stmt = stmt.where(*conditions)

        with self._session_factory() as session:
            return int(session.scalar(stmt) or 0)

    def bulk_insert(self, items: Sequence[Any]) -> None:
        model = single_model(items)
        if model is None:
            return

        key = identity_key(model)
        for item in items:
            apply_scalar_defaults(item)

        identities: list[Any] = []
        with self._session_factory() as session:
            try:
                for start in range(0, len(items), self._batch_size):
                    chunk = items[start : start + self._batch_size]
                    stmt = insert(model).returning(
                        getattr(model, key),
                        sort_by_parameter_order=True,
                    )
                    identities.extend(
                        session.scalars(stmt, [insert_payload(item) for item in chunk]).all()
                    )
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise

        # Identities are written back only once the whole batch is committed.
        for item, identity in zip(items, identities, strict=True):
            setattr(item, key, identity)

    def bulk_delete(self, model: type[Any], where: RowFilter) -> int:
        stmt = delete(model).execution_options(synchronize_session=False)
        conditions = compile_filter(model, where)
        if conditions:
            stmt = stmt.where(*conditions)
        return self._execute_counting(stmt)

    def bulk_update(
        self,
        model: type[T],
        where: RowFilter,
        new_values: T,
        columns: Collection[str],
    ) -> int:
        require_columns(model, columns)
        if not columns:
            return 0

        values = {column: getattr(new_values, column) for column in columns}
        stmt = update(model).values(values).execution_options(synchronize_session=False)
        conditions = compile_filter(model, where)
        if conditions:
            stmt = stmt.where(*conditions)
        return self._execute_counting(stmt)

    def _execute_counting(self, stmt: Any) -> int:
        with self._session_factory() as session:
            try:
                result = session.execute(stmt)
                affected = int(result.rowcount or 0)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise
        return affected
