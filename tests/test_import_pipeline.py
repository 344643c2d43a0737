"""
tests/test_import_pipeline.py

Behaviour of ImportPipeline against both storage backends.

Coverage
--------
- Dedup against persisted rows and within the queue
- Idempotent queuing across calls
- Order independence of queued batches
- Queue reset after success and after storage failure
- Two-phase insert of transactions and their splits
- Review flags applied by TransactionImporter
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from itertools import permutations

import pytest

from app.importers.pipeline import (
    ImportPipeline,
    ParentLinkError,
    PipelineState,
    link_dependents,
    verify_dependent_parents,
)
from app.importers.transaction_importer import TransactionImporter
from app.storage.memory_storage import InMemoryStorage
from db.models import BudgetTx, Payee, Split, Transaction
from tests.factories import budget, budget_key, payee, transaction


class FailingInsertStorage(InMemoryStorage):
    """In-memory storage whose next bulk insert of `fail_model` raises."""

    def __init__(self, fail_model: type) -> None:
        super().__init__()
        self.fail_model = fail_model
        self.armed = True

    def bulk_insert(self, items):
        if self.armed and items and type(items[0]) is self.fail_model:
            self.armed = False
            raise RuntimeError("storage unavailable")
        super().bulk_insert(items)


# ---------------------------------------------------------------------------
# Dedup
# ---------------------------------------------------------------------------


def test_skips_items_already_in_store(storage) -> None:
    storage.bulk_insert([budget("Rent", day=3, amount="900.00")])
    pipeline = ImportPipeline(BudgetTx, storage)

    pipeline.queue([budget("Food", month=2), budget("Rent", day=20), budget("Auto")])
    imported = pipeline.process()

    assert [budget_key(item) for item in imported] == [(2024, 2, "Food"), (2024, 1, "Auto")]
    stored = storage.all(BudgetTx)
    assert sorted(budget_key(item) for item in stored) == [
        (2024, 1, "Auto"),
        (2024, 1, "Rent"),
        (2024, 2, "Food"),
    ]
    rent = next(item for item in stored if item.category == "Rent")
    assert rent.amount == Decimal("900.00")


def test_import_equal_items_from_separate_calls_yield_one(storage) -> None:
    pipeline = ImportPipeline(Payee, storage)

    pipeline.queue([payee("Safeway", "Food")])
    pipeline.queue([payee(" Safeway", "Groceries")])
    imported = pipeline.process()

    assert len(imported) == 1
    assert imported[0].category == "Food"
    assert storage.count(Payee) == 1


def test_duplicates_within_one_call_yield_one(storage) -> None:
    pipeline = ImportPipeline(BudgetTx, storage)

    pipeline.queue([budget("Food", day=1), budget("Food", day=2), budget("Food", day=3)])

    assert len(pipeline.process()) == 1


BATCHES = (
    (budget("Food"), budget("Rent")),
    (budget("Rent", day=9), budget("Auto")),
    (budget("Travel", month=6),),
)


@pytest.mark.parametrize("order", list(permutations(range(len(BATCHES)))))
def test_processed_set_is_independent_of_queue_order(order) -> None:
    storage = InMemoryStorage()
    storage.bulk_insert([budget("Auto", day=30)])
    pipeline = ImportPipeline(BudgetTx, storage)

    for index in order:
        pipeline.queue(
            BudgetTx(category=item.category, timestamp=item.timestamp, amount=item.amount)
            for item in BATCHES[index]
        )
    imported = pipeline.process()

    assert sorted(budget_key(item) for item in imported) == [
        (2024, 1, "Food"),
        (2024, 1, "Rent"),
        (2024, 6, "Travel"),
    ]


def test_assigns_identities_to_inserted_items(storage) -> None:
    pipeline = ImportPipeline(BudgetTx, storage)
    pipeline.queue([budget("Food"), budget("Rent")])

    imported = pipeline.process()

    assert all(item.id is not None and item.id > 0 for item in imported)
    assert len({item.id for item in imported}) == 2


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def test_state_transitions(storage) -> None:
    pipeline = ImportPipeline(BudgetTx, storage)
    assert pipeline.state is PipelineState.IDLE

    pipeline.queue([budget("Food")])
    assert pipeline.state is PipelineState.QUEUING

    pipeline.process()
    assert pipeline.state is PipelineState.IDLE


def test_process_without_queue_returns_empty(storage) -> None:
    assert ImportPipeline(BudgetTx, storage).process() == []


def test_second_run_starts_from_empty_queue(storage) -> None:
    pipeline = ImportPipeline(BudgetTx, storage)
    pipeline.queue([budget("Food")])
    pipeline.process()

    pipeline.queue([budget("Rent")])
    imported = pipeline.process()

    assert [item.category for item in imported] == ["Rent"]
    assert pipeline.count() == 0


def test_queue_is_cleared_when_storage_fails() -> None:
    storage = FailingInsertStorage(BudgetTx)
    pipeline = ImportPipeline(BudgetTx, storage)
    pipeline.queue([budget("Food"), budget("Rent")])

    with pytest.raises(RuntimeError, match="storage unavailable"):
        pipeline.process()

    assert pipeline.count() == 0
    assert pipeline.state is PipelineState.IDLE

    pipeline.queue([budget("Auto")])
    imported = pipeline.process()
    assert [item.category for item in imported] == ["Auto"]


def test_storage_error_propagates_unmodified() -> None:
    class Boom(Exception):
        pass

    class ExplodingStorage(InMemoryStorage):
        def all(self, model, where=None):
            raise Boom("read failed")

    pipeline = ImportPipeline(BudgetTx, ExplodingStorage())
    pipeline.queue([budget("Food")])

    with pytest.raises(Boom):
        pipeline.process()
    assert pipeline.count() == 0


# ---------------------------------------------------------------------------
# Composite records
# ---------------------------------------------------------------------------


def test_splits_receive_parent_identity(storage) -> None:
    parent = transaction("Costco", amount="-120.00", splits=(("-80.00", "Food"), ("-40.00", "Home")))
    pipeline = TransactionImporter(storage)

    pipeline.queue([parent])
    pipeline.process()

    assert parent.id is not None and parent.id > 0
    assert [split.transaction_id for split in parent.splits] == [parent.id, parent.id]

    stored_splits = storage.all(Split)
    assert len(stored_splits) == 2
    assert {split.transaction_id for split in stored_splits} == {parent.id}
    assert all(split.id is not None for split in parent.splits)


def test_splits_linked_per_parent_in_same_batch(storage) -> None:
    first = transaction("A", splits=(("-10.00", "Food"),))
    second = transaction("B", splits=(("-5.00", "Auto"), ("-20.00", "Home")))
    plain = transaction("C")

    pipeline = TransactionImporter(storage)
    pipeline.queue([first, second, plain])
    pipeline.process()

    assert len({first.id, second.id, plain.id}) == 3
    for parent in (first, second):
        assert all(split.transaction_id == parent.id for split in parent.splits)
    assert storage.count(Split) == 3


def test_splits_of_skipped_duplicate_are_not_inserted(storage) -> None:
    storage.bulk_insert([transaction("Costco", amount="-120.00")])
    duplicate = transaction("Costco", amount="-120.00", splits=(("-120.00", "Food"),))

    pipeline = TransactionImporter(storage)
    pipeline.queue([duplicate])

    assert pipeline.process() == []
    assert storage.count(Split) == 0


def test_transaction_importer_stages_rows_for_review(storage) -> None:
    pipeline = TransactionImporter(storage)
    pipeline.queue([transaction("Shell")])

    imported = pipeline.process()

    assert imported[0].imported is True
    assert imported[0].hidden is True
    assert imported[0].selected is True
    assert storage.count(Transaction, {"imported": True, "hidden": True}) == 1


def test_parent_insert_committed_when_split_insert_fails() -> None:
    storage = FailingInsertStorage(Split)
    parent = transaction("Costco", splits=(("-25.00", "Food"),))
    pipeline = TransactionImporter(storage)
    pipeline.queue([parent])

    with pytest.raises(RuntimeError):
        pipeline.process()

    assert storage.count(Transaction) == 1
    assert storage.count(Split) == 0
    assert pipeline.count() == 0


def _parent_with_stray_split() -> Transaction:
    """Transaction listing a split whose back-reference names another transaction."""
    outsider = Transaction(payee="Other", amount=Decimal("1"), timestamp=datetime(2024, 1, 1))
    parent = Transaction(payee="Mine", amount=Decimal("1"), timestamp=datetime(2024, 1, 1))
    stray = Split(amount=Decimal("1"))
    stray.transaction = outsider
    # Corrupted back-reference: the split is listed by `parent` but owned by `outsider`.
    parent.dependent_rows = lambda: [stray]  # type: ignore[method-assign]
    return parent


def test_stray_split_is_rejected_before_any_parent_is_stored(storage) -> None:
    pipeline = TransactionImporter(storage)
    pipeline.queue([_parent_with_stray_split(), transaction("Shell")])

    with pytest.raises(ParentLinkError):
        pipeline.process()

    assert storage.count(Transaction) == 0
    assert storage.count(Split) == 0
    assert pipeline.count() == 0


class TestLinkDependents:
    def test_rejects_dependent_whose_parent_is_outside_batch(self) -> None:
        with pytest.raises(ParentLinkError):
            verify_dependent_parents([_parent_with_stray_split()])

    def test_accepts_dependents_of_batch_parents(self) -> None:
        verify_dependent_parents([transaction("A", splits=(("-1.00", "Food"),)), transaction("B")])

    def test_rejects_parent_without_identity(self) -> None:
        parent = transaction("Shell", splits=(("-1.00", "Food"),))

        with pytest.raises(ParentLinkError):
            link_dependents([parent])

    def test_returns_linked_dependents_in_parent_order(self) -> None:
        first = transaction("A", splits=(("-1.00", "Food"),))
        second = transaction("B", splits=(("-2.00", "Auto"),))
        first.id, second.id = 10, 11

        linked = link_dependents([first, second])

        assert [row.transaction_id for row in linked] == [10, 11]
