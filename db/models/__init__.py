"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.budget_tx import BudgetFrequency, BudgetTx
from db.models.payee import Payee
from db.models.transaction import Split, Transaction

__all__ = [
    "BudgetFrequency",
    "BudgetTx",
    "Payee",
    "Split",
    "Transaction",
]
