"""
app/repositories package marker.
"""

from app.repositories.transaction_repository import ImportReviewResult, TransactionRepository

__all__ = [
    "ImportReviewResult",
    "TransactionRepository",
]
