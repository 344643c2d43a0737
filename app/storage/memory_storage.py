"""
In-memory storage implementation for tests and lightweight local runs.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Collection, Sequence
from typing import Any, TypeVar

from app.storage.base import StoragePort, single_model
from app.storage.columns import apply_scalar_defaults, identity_key
from app.storage.criteria import RowFilter, matches, validate_filter
from app.storage.errors import UnsupportedOperationError
from db.models.transaction import Transaction

T = TypeVar("T")

# Masked updates are only needed for the transaction review flags, so that is
# all this backend supports. Anything else must fail loudly.
MASKED_UPDATE_SUPPORT: dict[type, frozenset[str]] = {
    Transaction: frozenset({"imported", "hidden", "selected"}),
}


class InMemoryStorage(StoragePort):
    """
    Emulates the storage port with brute-force scans over held lists.

    Identities are assigned here, sequentially per record type starting at 1.
    The stored objects are the ones passed to `bulk_insert`; `all` returns a
    new list holding those same objects.
    """

    def __init__(self) -> None:
        self._rows: dict[type, list[Any]] = defaultdict(list)
        self._next_identity: dict[type, int] = defaultdict(lambda: 1)
        self._lock = threading.Lock()

    def all(self, model: type[T], where: RowFilter | None = None) -> list[T]:
        validate_filter(model, where)
        with self._lock:
            return [item for item in self._rows[model] if matches(item, where)]

    def count(self, model: type[Any], where: RowFilter | None = None) -> int:
        return len(self.all(model, where))

    def bulk_insert(self, items: Sequence[Any]) -> None:
        model = single_model(items)
        if model is None:
            return

        key = identity_key(model)
        with self._lock:
            rows = self._rows[model]
            for item in items:
                apply_scalar_defaults(item)
                setattr(item, key, self._next_identity[model])
                self._next_identity[model] += 1
                rows.append(item)

    def bulk_delete(self, model: type[Any], where: RowFilter) -> int:
        validate_filter(model, where)
        with self._lock:
            rows = self._rows[model]
            kept = [item for item in rows if not matches(item, where)]
            deleted = len(rows) - len(kept)
            rows[:] = kept
        return deleted

    def bulk_update(
        self,
        model: type[T],
        where: RowFilter,
        new_values: T,
        columns: Collection[str],
    ) -> int:
        supported = MASKED_UPDATE_SUPPORT.get(model)
        if supported is None:
            raise UnsupportedOperationError(
                f"Bulk update on in-memory storage is not implemented for {model.__name__}."
            )
        unsupported = sorted(set(columns) - supported)
        if unsupported:
            raise UnsupportedOperationError(
                f"Bulk update on in-memory storage does not support column(s) "
                f"{', '.join(unsupported)} for {model.__name__}."
            )
        validate_filter(model, where)
        if not columns:
            return 0

        with self._lock:
            matched = [item for item in self._rows[model] if matches(item, where)]
            for item in matched:
                for column in columns:
                    setattr(item, column, getattr(new_values, column))
        return len(matched)
