"""
app/domain/importable.py

Capability contract for records that flow through an import run.

Every importable record type defines what "the same logical record" means
for it, independently of its storage identity:

- ``is_import_equal(other)`` is reflexive and symmetric, and raises
  ``InvalidComparisonError`` when ``other`` is absent or of another type.
- ``import_hash()`` is consistent with it: records that are import-equal
  always produce the same hash.
- ``in_default_order(items)`` orders records for presentation only.

Composite records (a parent owning dependent rows) additionally expose their
dependents, and each dependent can receive its parent's identity once the
parent has been inserted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

T = TypeVar("T", bound="Importable")


class InvalidComparisonError(TypeError):
    """
    Raised when import equality is evaluated against an absent or mistyped operand.
    """


class Importable:
    """
    Mixin declaring the import capability set.

    Plain mixin rather than an ABC so it composes with the SQLAlchemy
    declarative metaclass.
    """

    def is_import_equal(self, other: object) -> bool:
        raise NotImplementedError

    def import_hash(self) -> int:
        raise NotImplementedError

    @classmethod
    def in_default_order(cls, items: Iterable[Any]) -> list[Any]:
        raise NotImplementedError

    def ensure_import_comparable(self, other: object) -> None:
        if other is None:
            raise InvalidComparisonError(
                f"Cannot import-compare {type(self).__name__} with None."
            )
        if type(other) is not type(self):
            raise InvalidComparisonError(
                f"Expected {type(self).__name__}, got {type(other).__name__}."
            )


class Dependent:
    """
    Mixin for rows owned by a composite parent.

    The back-reference is non-owning; it only exists so the parent's identity
    can be copied into the foreign key once it is known.
    """

    def parent_record(self) -> Any | None:
        raise NotImplementedError

    def assign_parent_identity(self, identity: Any) -> None:
        raise NotImplementedError


class CompositeImportable(Importable):
    """
    Importable parent whose dependent rows are inserted in a second pass.
    """

    def dependent_rows(self) -> Sequence[Dependent]:
        raise NotImplementedError


def import_equal(left: Importable | None, right: object) -> bool:
    """
    Compare two records under import equality.
    """

    if left is None:
        raise InvalidComparisonError("Cannot import-compare None.")
    return left.is_import_equal(right)


class ImportKey(Generic[T]):
    """
    Hashable wrapper placing one record under import equality.

    Lets plain ``dict`` and ``set`` deduplicate records by their business
    fields instead of by object identity.
    """

    __slots__ = ("item", "_hash")

    def __init__(self, item: T) -> None:
        if item is None:
            raise InvalidComparisonError("Cannot build an import key for None.")
        self.item = item
        self._hash = item.import_hash()

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImportKey):
            return NotImplemented
        return self.item.is_import_equal(other.item)

    def __repr__(self) -> str:
        return f"<ImportKey {self.item!r}>"
