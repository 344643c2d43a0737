"""
app/readers/csv_reader.py

CSV record source.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator
from typing import TextIO, TypeVar

from app.readers.base import RecordBuilder, is_empty_row

T = TypeVar("T")


class CSVRecordSource:
    """
    Reads one CSV document whose first row is the header.
    """

    def __init__(self, content: str | bytes | TextIO) -> None:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        self._content = content

    def read(self, model: type[T]) -> Iterator[T]:
        stream = io.StringIO(self._content) if isinstance(self._content, str) else self._content
        builder = RecordBuilder(model)
        reader = csv.DictReader(stream)
        # Header is row 1.
        for row_number, row in enumerate(reader, start=2):
            if is_empty_row(row):
                continue
            yield builder.build(row, row_number=row_number)
