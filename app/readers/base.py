"""
app/readers/base.py

Shared row → record conversion for tabular record sources.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, TypeVar

from sqlalchemy import inspect

from app.storage.columns import identity_key

T = TypeVar("T")

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
)

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


class RecordParseError(ValueError):
    """
    Raised when one source row cannot be converted into a record.
    """

    def __init__(self, *, row_number: int, column: str | None, message: str) -> None:
        location = f"row {row_number}" if column is None else f"row {row_number}, column {column!r}"
        super().__init__(f"{location}: {message}")
        self.row_number = row_number
        self.column = column


class RecordSource(Protocol):
    """
    Producer of typed records from one tabular document.
    """

    def read(self, model: type[T]) -> Iterator[T]:
        ...


def normalize_header(header: str) -> str:
    return re.sub(r"[\s_\-]+", "", header).lower()


class RecordBuilder:
    """
    Builds model instances from header-keyed rows.

    Headers match attribute names case-, space- and underscore-insensitively.
    The identity column and unknown headers are ignored; identities are only
    ever assigned by storage.
    """

    def __init__(self, model: type[Any]) -> None:
        self._model = model
        skip = identity_key(model)
        self._columns: dict[str, tuple[str, type, bool]] = {}
        for attr in inspect(model).column_attrs:
            if attr.key == skip:
                continue
            column = attr.columns[0]
            required = not column.nullable and column.default is None
            self._columns[normalize_header(attr.key)] = (attr.key, column.type.python_type, required)

    def build(self, row: Mapping[str, Any], *, row_number: int) -> Any:
        values: dict[str, Any] = {}
        for header, raw in row.items():
            if header is None:
                continue
            target = self._columns.get(normalize_header(str(header)))
            if target is None:
                continue
            key, python_type, _ = target
            try:
                values[key] = coerce_value(raw, python_type)
            except (ValueError, InvalidOperation) as exc:
                raise RecordParseError(row_number=row_number, column=str(header), message=str(exc)) from exc

        for key, _, required in self._columns.values():
            if required and values.get(key) is None:
                raise RecordParseError(row_number=row_number, column=key, message="value is required")

        return self._model(**values)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_empty_row(row: Mapping[str, Any]) -> bool:
    return all(is_blank(value) for value in row.values())


def coerce_value(value: Any, python_type: type) -> Any:
    """
    Convert one raw cell into the column's Python type.
    """

    if is_blank(value):
        return None
    if python_type is datetime:
        return _parse_timestamp(value)
    if python_type is Decimal:
        return _parse_decimal(value)
    if python_type is bool:
        return _parse_bool(value)
    if python_type is int:
        return _parse_int(value)
    if python_type is str:
        return str(value).strip()
    return value


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognized timestamp {text!r}")


def _parse_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    text = str(value).strip().replace(",", "").replace("$", "")
    # Accounting notation: (25.00) is -25.00.
    if text.startswith("(") and text.endswith(")"):
        text = "-" + text[1:-1].strip()
    return Decimal(text)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"unrecognized boolean {value!r}")


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"unrecognized integer {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"unrecognized integer {value!r}")
        return int(value)
    return int(str(value).strip())
