"""
app/services package marker.
"""

from app.services.import_service import (
    ImportService,
    UnknownRecordTypeError,
    UnsupportedFileTypeError,
)

__all__ = [
    "ImportService",
    "UnknownRecordTypeError",
    "UnsupportedFileTypeError",
]
