"""
Record source exports.
"""

from app.readers.base import RecordBuilder, RecordParseError, RecordSource
from app.readers.csv_reader import CSVRecordSource
from app.readers.xlsx_reader import XlsxRecordSource

__all__ = [
    "CSVRecordSource",
    "RecordBuilder",
    "RecordParseError",
    "RecordSource",
    "XlsxRecordSource",
]
