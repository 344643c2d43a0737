"""
tests/test_sqlalchemy_storage.py

SQLAlchemyStorage against an in-memory SQLite database.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.storage.errors import InvalidFilterError
from app.storage.sqlalchemy_storage import SQLAlchemyStorage
from db.models import BudgetTx, Payee, Split, Transaction
from tests.factories import budget, payee, transaction


def test_bulk_insert_assigns_identities_in_order(sql_storage: SQLAlchemyStorage) -> None:
    items = [budget("Food"), budget("Rent"), budget("Auto"), budget("Travel"), budget("Gifts")]

    sql_storage.bulk_insert(items)

    identities = [item.id for item in items]
    assert None not in identities
    assert len(set(identities)) == 5
    stored = {item.id: item.category for item in sql_storage.all(BudgetTx)}
    assert [stored[item.id] for item in items] == ["Food", "Rent", "Auto", "Travel", "Gifts"]


def test_bulk_insert_applies_column_defaults(sql_storage: SQLAlchemyStorage) -> None:
    item = budget("Food")

    sql_storage.bulk_insert([item])

    assert item.frequency == 1
    assert sql_storage.all(BudgetTx)[0].frequency == 1


def test_bulk_insert_does_not_insert_dependents(sql_storage: SQLAlchemyStorage) -> None:
    parent = transaction("Costco", splits=(("-25.00", "Food"),))

    sql_storage.bulk_insert([parent])

    assert parent.id is not None
    assert sql_storage.count(Split) == 0
    assert parent.splits[0].transaction_id is None


def test_failed_insert_rolls_back_and_leaves_identities_unset(
    sql_storage: SQLAlchemyStorage,
) -> None:
    good = payee("Safeway")
    bad = Payee(name=None, category="Food")

    with pytest.raises(IntegrityError):
        sql_storage.bulk_insert([good, bad])

    assert good.id is None
    assert sql_storage.count(Payee) == 0


def test_bulk_delete_without_loading_rows(sql_storage: SQLAlchemyStorage) -> None:
    sql_storage.bulk_insert([payee("A", "Food"), payee("B", "Auto"), payee("C", "Food")])

    deleted = sql_storage.bulk_delete(Payee, {"category": "Food"})

    assert deleted == 2
    assert [item.name for item in sql_storage.all(Payee)] == ["B"]


def test_bulk_update_supports_any_model_and_column(sql_storage: SQLAlchemyStorage) -> None:
    sql_storage.bulk_insert([budget("Food", memo="old"), budget("Rent", memo="old")])

    updated = sql_storage.bulk_update(
        BudgetTx,
        {"category": "Food"},
        BudgetTx(memo="new", category="Ignored", amount=Decimal("1.00")),
        ["memo"],
    )

    assert updated == 1
    rows = {item.category: item for item in sql_storage.all(BudgetTx)}
    assert rows["Food"].memo == "new"
    assert rows["Food"].amount == Decimal("100.00")
    assert rows["Rent"].memo == "old"


def test_bulk_update_of_review_flags_leaves_other_columns(sql_storage: SQLAlchemyStorage) -> None:
    sql_storage.bulk_insert([transaction("Shell", category="Auto"), transaction("Safeway", category="Food")])

    updated = sql_storage.bulk_update(
        Transaction,
        {"hidden": False},
        Transaction(hidden=True, category="X"),
        {"hidden"},
    )

    assert updated == 2
    rows = sql_storage.all(Transaction)
    assert all(item.hidden for item in rows)
    assert sorted(item.category for item in rows) == ["Auto", "Food"]


def test_bulk_update_with_empty_column_mask_changes_nothing(sql_storage: SQLAlchemyStorage) -> None:
    sql_storage.bulk_insert([transaction("Shell", category="Auto")])

    updated = sql_storage.bulk_update(Transaction, {}, Transaction(hidden=True, category="X"), ())

    assert updated == 0
    stored = sql_storage.all(Transaction)[0]
    assert stored.hidden is False
    assert stored.category == "Auto"


def test_bulk_update_rejects_unknown_column(sql_storage: SQLAlchemyStorage) -> None:
    with pytest.raises(InvalidFilterError):
        sql_storage.bulk_update(Payee, {}, Payee(name="x"), ["nickname"])


def test_filters_support_membership_and_null(sql_storage: SQLAlchemyStorage) -> None:
    sql_storage.bulk_insert([payee("A", "Food"), payee("B", None), payee("C", "Auto")])

    assert sql_storage.count(Payee, {"category": None}) == 1
    assert sql_storage.count(Payee, {"name": ("A", "C")}) == 2
    assert sql_storage.count(Payee) == 3


def test_clear_deletes_every_row(sql_storage: SQLAlchemyStorage) -> None:
    sql_storage.bulk_insert([payee("A"), payee("B")])

    assert sql_storage.clear(Payee) == 2
    assert sql_storage.count(Payee) == 0


def test_all_loads_transaction_splits(sql_storage: SQLAlchemyStorage, sqlite_engine) -> None:
    parent = transaction("Costco", when=datetime(2024, 5, 1))
    sql_storage.bulk_insert([parent])
    split = Split(transaction_id=parent.id, amount=Decimal("-10.00"), category="Food")
    sql_storage.bulk_insert([split])

    loaded = sql_storage.all(Transaction)

    assert [row.category for row in loaded[0].splits] == ["Food"]
    with Session(sqlite_engine) as session:
        stored = session.scalars(select(Split)).one()
        assert stored.transaction_id == parent.id
