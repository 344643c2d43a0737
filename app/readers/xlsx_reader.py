"""
app/readers/xlsx_reader.py

Spreadsheet (xlsx) record source.
"""

from __future__ import annotations

import io
from collections.abc import Iterator
from typing import BinaryIO, TypeVar

from openpyxl import load_workbook

from app.readers.base import RecordBuilder, is_empty_row

T = TypeVar("T")


class XlsxRecordSource:
    """
    Reads records from one workbook.

    Looks for a sheet named after the record type (e.g. ``BudgetTx``); when
    there is none, the first sheet is used. The first row is the header.
    """

    def __init__(self, content: bytes | BinaryIO) -> None:
        self._content = content

    def read(self, model: type[T]) -> Iterator[T]:
        stream = io.BytesIO(self._content) if isinstance(self._content, bytes) else self._content
        workbook = load_workbook(stream, read_only=True, data_only=True)
        try:
            if model.__name__ in workbook.sheetnames:
                sheet = workbook[model.__name__]
            else:
                sheet = workbook.worksheets[0]

            rows = sheet.iter_rows(values_only=True)
            header = next(rows, None)
            if header is None:
                return

            builder = RecordBuilder(model)
            for row_number, values in enumerate(rows, start=2):
                row = dict(zip(header, values))
                if is_empty_row(row):
                    continue
                yield builder.build(row, row_number=row_number)
        finally:
            workbook.close()
