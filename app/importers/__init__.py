"""
Importer exports.
"""

from app.importers.accumulator import ImportAccumulator
from app.importers.pipeline import (
    ImportPipeline,
    ParentLinkError,
    PipelineState,
    link_dependents,
    verify_dependent_parents,
)
from app.importers.transaction_importer import TransactionImporter

__all__ = [
    "ImportAccumulator",
    "ImportPipeline",
    "ParentLinkError",
    "PipelineState",
    "TransactionImporter",
    "link_dependents",
    "verify_dependent_parents",
]
