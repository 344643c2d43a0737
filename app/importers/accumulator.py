"""
app/importers/accumulator.py

Deduplicating queue of records waiting to be imported.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from app.domain.importable import Importable, ImportKey, InvalidComparisonError

T = TypeVar("T", bound=Importable)


class ImportAccumulator(Generic[T]):
    """
    Holds at most one record per import-equality class.

    The first record queued for a class wins; later import-equal records are
    dropped without error. Insertion order is preserved.
    """

    def __init__(self, model: type[T] | None = None) -> None:
        self._model = model
        self._items: dict[ImportKey[T], T] = {}

    def queue(self, items: Iterable[T]) -> int:
        """
        Merge `items` into the queue and return how many were newly accepted.
        """

        accepted = 0
        for item in items:
            self._check_type(item)
            key = ImportKey(item)
            if key in self._items:
                continue
            self._items[key] = item
            accepted += 1
        return accepted

    def discard_matching(self, existing: Iterable[T]) -> int:
        """
        Drop every queued record import-equal to one of `existing`.

        Builds one hashed key per existing record, so the cost is linear in the
        size of `existing` rather than quadratic.
        """

        if not self._items:
            return 0

        before = len(self._items)
        for item in existing:
            self._items.pop(ImportKey(item), None)
        return before - len(self._items)

    def drain(self) -> list[T]:
        """
        Return every queued record and empty the queue.
        """

        items = list(self._items.values())
        self._items.clear()
        return items

    def clear(self) -> None:
        self._items.clear()

    def count(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def _check_type(self, item: object) -> None:
        if self._model is None:
            return
        if item is None or type(item) is not self._model:
            raise InvalidComparisonError(
                f"Expected {self._model.__name__}, got {type(item).__name__}."
            )
