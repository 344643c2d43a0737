"""
db/models/payee.py

Payee matching rule: transactions from this payee default to a category.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.importable import Importable
from db.base import Base


def _normalized_name(name: str | None) -> str:
    return (name or "").strip()


class Payee(Importable, Base):
    __tablename__ = "payees"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    selected: Mapped[bool | None] = mapped_column(nullable=True)

    __table_args__ = (Index("ix_payees_name", "name"),)

    def is_import_equal(self, other: object) -> bool:
        self.ensure_import_comparable(other)
        return _normalized_name(self.name) == _normalized_name(other.name)

    def import_hash(self) -> int:
        return hash(_normalized_name(self.name))

    @classmethod
    def in_default_order(cls, items: Iterable[Payee]) -> list[Payee]:
        return sorted(items, key=lambda item: (item.category or "", item.name or ""))

    def __repr__(self) -> str:
        return f"<Payee id={self.id} name={self.name!r} category={self.category!r}>"
