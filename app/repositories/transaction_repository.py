"""
app/repositories/transaction_repository.py

Review operations over staged transaction imports.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from app.logging_utils import log_event
from app.storage.base import StoragePort
from db.models.transaction import Split, Transaction

logger = logging.getLogger(__name__)

_REVIEW_FLAGS = ("imported", "hidden", "selected")


@dataclass(frozen=True)
class ImportReviewResult:
    accepted: int
    rejected: int


class TransactionRepository:
    """
    Accept, reject or adjust transactions staged by `TransactionImporter`.

    Every mutation goes through masked bulk updates limited to the review
    flags, so it works on both storage backends.
    """

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage

    def pending_import(self) -> list[Transaction]:
        return Transaction.in_default_order(self._storage.all(Transaction, {"imported": True}))

    def finalize_import(self) -> ImportReviewResult:
        """
        Keep selected staged rows, delete deselected ones, clear the review flags.
        """

        rejected_ids = [
            item.id
            for item in self._storage.all(Transaction, {"imported": True, "selected": False})
        ]
        rejected = self._delete_with_splits(rejected_ids)
        accepted = self._storage.bulk_update(
            Transaction,
            {"imported": True},
            Transaction(imported=False, hidden=False, selected=False),
            _REVIEW_FLAGS,
        )
        log_event(logger, logging.INFO, "import_finalized", accepted=accepted, rejected=rejected)
        return ImportReviewResult(accepted=accepted, rejected=rejected)

    def cancel_import(self) -> int:
        """
        Delete every staged transaction and its splits.
        """

        staged_ids = [item.id for item in self._storage.all(Transaction, {"imported": True})]
        deleted = self._delete_with_splits(staged_ids)
        log_event(logger, logging.INFO, "import_cancelled", deleted=deleted)
        return deleted

    def set_hidden(self, ids: Iterable[int], hidden: bool) -> int:
        return self._update_flag(ids, "hidden", hidden)

    def set_selected(self, ids: Iterable[int], selected: bool) -> int:
        return self._update_flag(ids, "selected", selected)

    def _update_flag(self, ids: Iterable[int], column: str, value: bool) -> int:
        targets = list(ids)
        if not targets:
            return 0
        return self._storage.bulk_update(
            Transaction,
            {"id": targets},
            Transaction(**{column: value}),
            (column,),
        )

    def _delete_with_splits(self, ids: list[int]) -> int:
        if not ids:
            return 0
        self._storage.bulk_delete(Split, {"transaction_id": ids})
        return self._storage.bulk_delete(Transaction, {"id": ids})
