"""
Backend-agnostic row filters.

A filter is a mapping of column name to expected value:

- a scalar matches by equality
- ``None`` matches a null column
- a list, tuple, set or frozenset matches any of its members

The SQL adapter compiles a filter into WHERE conditions; the in-memory adapter
evaluates the same filter against object attributes, so both backends select
exactly the same rows.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement

from app.storage.columns import require_columns

RowFilter = Mapping[str, Any]

_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


def validate_filter(model: type, where: RowFilter | None) -> None:
    if where:
        require_columns(model, where.keys())


def compile_filter(model: type, where: RowFilter | None) -> list[ColumnElement[bool]]:
    """
    Translate a filter into SQLAlchemy WHERE conditions.
    """

    validate_filter(model, where)
    conditions: list[ColumnElement[bool]] = []
    for key, expected in (where or {}).items():
        attribute = getattr(model, key)
        if expected is None:
            conditions.append(attribute.is_(None))
        elif isinstance(expected, _MEMBERSHIP_TYPES):
            conditions.append(attribute.in_(list(expected)))
        else:
            conditions.append(attribute == expected)
    return conditions


def matches(item: Any, where: RowFilter | None) -> bool:
    """
    Evaluate a filter against one in-memory object.
    """

    for key, expected in (where or {}).items():
        actual = getattr(item, key)
        if expected is None:
            if actual is not None:
                return False
        elif isinstance(expected, _MEMBERSHIP_TYPES):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True
