"""
db/models/budget_tx.py

Budget line item: one expected outlay (or income) for a category in a timeframe.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.importable import Importable
from db.base import Base


class BudgetFrequency:
    YEARLY = 1
    QUARTERLY = 4
    MONTHLY = 12
    WEEKLY = 52


class BudgetTx(Importable, Base):
    """
    Budget line item.

    Import duplicates are detected per month: a second line for the same
    category in the same year and month is the same logical record, whatever
    its day, amount or memo.
    """

    __tablename__ = "budget_txs"

    id: Mapped[int] = mapped_column(primary_key=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    frequency: Mapped[int] = mapped_column(
        nullable=False,
        default=BudgetFrequency.YEARLY,
        comment="How many times the amount is tracked through the year",
    )
    memo: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    selected: Mapped[bool | None] = mapped_column(nullable=True)

    __table_args__ = (Index("ix_budget_txs_timestamp_category", "timestamp", "category"),)

    def is_import_equal(self, other: object) -> bool:
        self.ensure_import_comparable(other)
        return (
            self.timestamp.year == other.timestamp.year
            and self.timestamp.month == other.timestamp.month
            and self.category == other.category
        )

    def import_hash(self) -> int:
        return hash((self.timestamp.year, self.timestamp.month, self.category))

    @classmethod
    def in_default_order(cls, items: Iterable[BudgetTx]) -> list[BudgetTx]:
        # Newest first; category breaks ties within a day.
        by_category = sorted(items, key=lambda item: item.category or "")
        return sorted(by_category, key=lambda item: item.timestamp.date(), reverse=True)

    def __repr__(self) -> str:
        return (
            f"<BudgetTx id={self.id} timestamp={self.timestamp} "
            f"category={self.category!r} amount={self.amount}>"
        )
