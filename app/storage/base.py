"""
Storage port: the bulk-capable persistence contract the import pipeline depends on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Sequence
from typing import Any, TypeVar

from app.storage.criteria import RowFilter

T = TypeVar("T")


class StoragePort(ABC):
    """
    Storage abstraction over every persisted record type.

    Implementations must be safe to use from different threads for distinct
    record types. Concurrent bulk operations against the same record type are
    the caller's responsibility to serialize.
    """

    @abstractmethod
    def all(self, model: type[T], where: RowFilter | None = None) -> list[T]:
        """
        Return persisted rows of `model`, optionally filtered.
        """

    @abstractmethod
    def count(self, model: type[Any], where: RowFilter | None = None) -> int:
        """
        Return how many persisted rows of `model` match `where`.
        """

    @abstractmethod
    def bulk_insert(self, items: Sequence[Any]) -> None:
        """
        Insert items of one record type and populate each item's identity.

        Dependent rows are never inserted implicitly; composite records need a
        second call once their foreign keys have been assigned.
        """

    @abstractmethod
    def bulk_delete(self, model: type[Any], where: RowFilter) -> int:
        """
        Delete every matching row and return the number deleted.
        """

    @abstractmethod
    def bulk_update(
        self,
        model: type[T],
        where: RowFilter,
        new_values: T,
        columns: Collection[str],
    ) -> int:
        """
        Copy only `columns` from `new_values` onto every matching row.

        Columns not named are left untouched. Returns the number of rows matched.
        """

    def clear(self, model: type[Any]) -> int:
        """
        Delete every row of `model`.
        """

        return self.bulk_delete(model, {})


def single_model(items: Sequence[Any]) -> type[Any] | None:
    """
    Return the record type shared by `items`, or None when empty.
    """

    if not items:
        return None
    model = type(items[0])
    for item in items:
        if type(item) is not model:
            raise TypeError(
                f"bulk_insert expects one record type per call, got {model.__name__} "
                f"and {type(item).__name__}."
            )
    return model
