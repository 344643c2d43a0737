"""
Column introspection shared by storage adapters.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from sqlalchemy import inspect

from app.storage.errors import InvalidFilterError


def column_keys(model: type) -> tuple[str, ...]:
    """
    Return mapped column attribute names in declaration order.
    """

    return tuple(attr.key for attr in inspect(model).column_attrs)


def identity_key(model: type) -> str:
    mapper = inspect(model)
    primary_key = mapper.primary_key
    if len(primary_key) != 1:
        raise InvalidFilterError(f"{model.__name__} must have exactly one primary key column.")
    return mapper.get_property_by_column(primary_key[0]).key


def require_columns(model: type, columns: Collection[str]) -> None:
    known = set(column_keys(model))
    unknown = sorted(set(columns) - known)
    if unknown:
        raise InvalidFilterError(
            f"Unknown column(s) for {model.__name__}: {', '.join(unknown)}."
        )


def apply_scalar_defaults(item: Any) -> None:
    """
    Fill unset attributes with their column's scalar default.

    Bulk inserts bypass the ORM unit of work, so Python-side defaults would
    otherwise never reach the row or the in-memory object.
    """

    for attr in inspect(type(item)).column_attrs:
        column = attr.columns[0]
        default = column.default
        if default is None or not default.is_scalar:
            continue
        if getattr(item, attr.key) is None:
            setattr(item, attr.key, default.arg)


def insert_payload(item: Any) -> dict[str, Any]:
    """
    Column values for one INSERT, identity excluded.
    """

    model = type(item)
    skip = identity_key(model)
    return {key: getattr(item, key) for key in column_keys(model) if key != skip}
