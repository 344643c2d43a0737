"""
app/domain/import_summary.py

Result objects returned by the import service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ImportSummary:
    """
    End-of-run import summary.
    """

    record_type: str
    files: tuple[str, ...]
    rows_read: int
    rows_inserted: int
    items: list[Any] = field(default_factory=list)

    @property
    def rows_skipped(self) -> int:
        return self.rows_read - self.rows_inserted
