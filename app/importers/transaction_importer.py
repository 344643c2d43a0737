"""
app/importers/transaction_importer.py

Importer for bank transactions.
"""

from __future__ import annotations

from collections.abc import Sequence

from app.importers.pipeline import ImportPipeline
from app.storage.base import StoragePort
from db.models.transaction import Transaction


class TransactionImporter(ImportPipeline[Transaction]):
    """
    Stages imported transactions for review.

    New rows land imported, hidden and selected, so they stay out of normal
    views until the import is finalized or cancelled through
    `TransactionRepository`.
    """

    def __init__(self, storage: StoragePort) -> None:
        super().__init__(Transaction, storage)

    def prepare(self, items: Sequence[Transaction]) -> None:
        for item in items:
            item.imported = True
            item.hidden = True
            item.selected = True
