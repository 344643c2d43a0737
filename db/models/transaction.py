"""
db/models/transaction.py

Bank transaction and its splits.

A transaction is the one composite record in the system: it may own any
number of splits, each carrying a foreign key to the transaction that only
becomes known after the transaction row itself has been inserted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domain.importable import CompositeImportable, Dependent
from db.base import Base


def _normalized_payee(payee: str | None) -> str:
    return (payee or "").strip()


class Transaction(CompositeImportable, Base):
    """
    One bank transaction.

    imported/hidden/selected are review flags: freshly imported rows are
    staged with all three set until the import is accepted or cancelled.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    payee: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    memo: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    bank_reference: Mapped[str | None] = mapped_column(String(64), nullable=True)
    imported: Mapped[bool] = mapped_column(nullable=False, default=False)
    hidden: Mapped[bool] = mapped_column(nullable=False, default=False)
    selected: Mapped[bool] = mapped_column(nullable=False, default=False)

    # ── Relationships ──────────────────────────────────────────────────────────

    splits: Mapped[list["Split"]] = relationship(
        "Split",
        back_populates="transaction",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_transactions_timestamp_hidden_category", "timestamp", "hidden", "category"),
        Index("ix_transactions_imported", "imported"),
    )

    def dependent_rows(self) -> Sequence[Split]:
        return list(self.splits)

    def is_import_equal(self, other: object) -> bool:
        self.ensure_import_comparable(other)
        return (
            _normalized_payee(self.payee) == _normalized_payee(other.payee)
            and self.amount == other.amount
            and self.timestamp.date() == other.timestamp.date()
        )

    def import_hash(self) -> int:
        return hash((_normalized_payee(self.payee), self.amount, self.timestamp.date()))

    @classmethod
    def in_default_order(cls, items: Iterable[Transaction]) -> list[Transaction]:
        by_payee = sorted(items, key=lambda item: item.payee or "")
        return sorted(by_payee, key=lambda item: item.timestamp, reverse=True)

    def __repr__(self) -> str:
        return (
            f"<Transaction id={self.id} timestamp={self.timestamp} "
            f"payee={self.payee!r} amount={self.amount}>"
        )


class Split(Dependent, Base):
    """
    Portion of a transaction assigned to its own category.
    """

    __tablename__ = "splits"

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=True,
        comment="Unset until the owning transaction has been inserted",
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    memo: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    transaction: Mapped[Transaction | None] = relationship(
        "Transaction",
        back_populates="splits",
    )

    __table_args__ = (Index("ix_splits_transaction_id", "transaction_id"),)

    def parent_record(self) -> Transaction | None:
        return self.transaction

    def assign_parent_identity(self, identity: int) -> None:
        self.transaction_id = identity

    def __repr__(self) -> str:
        return (
            f"<Split id={self.id} transaction_id={self.transaction_id} "
            f"category={self.category!r} amount={self.amount}>"
        )
