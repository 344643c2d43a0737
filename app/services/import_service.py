"""
app/services/import_service.py

Service layer running file imports for each importable record type.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from app.domain.import_summary import ImportSummary
from app.importers.pipeline import ImportPipeline
from app.importers.transaction_importer import TransactionImporter
from app.logging_utils import log_event
from app.readers.base import RecordSource
from app.readers.csv_reader import CSVRecordSource
from app.readers.xlsx_reader import XlsxRecordSource
from app.storage.base import StoragePort
from app.storage.factory import build_storage
from db.models.budget_tx import BudgetTx
from db.models.payee import Payee

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[StoragePort], ImportPipeline]

IMPORTERS: dict[str, PipelineFactory] = {
    "budget_tx": lambda storage: ImportPipeline(BudgetTx, storage),
    "payee": lambda storage: ImportPipeline(Payee, storage),
    "transaction": TransactionImporter,
}


class UnknownRecordTypeError(ValueError):
    """
    Raised when no importer is registered for a record type name.
    """


class UnsupportedFileTypeError(ValueError):
    """
    Raised when a file suffix has no matching record source.
    """


def open_record_source(path: Path) -> RecordSource:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return CSVRecordSource(path.read_bytes())
    if suffix in {".xlsx", ".xlsm"}:
        return XlsxRecordSource(path.read_bytes())
    raise UnsupportedFileTypeError(f"Unsupported import file type: {path.name}")


class ImportService:
    """
    Queue every given file into one pipeline, then process once.
    """

    def __init__(self, storage: StoragePort | None = None) -> None:
        self._storage = storage or build_storage()

    @property
    def storage(self) -> StoragePort:
        return self._storage

    def pipeline_for(self, record_type: str) -> ImportPipeline:
        factory = IMPORTERS.get(record_type)
        if factory is None:
            raise UnknownRecordTypeError(
                f"Unknown record type '{record_type}'. Allowed values: {sorted(IMPORTERS)}."
            )
        return factory(self._storage)

    def import_sources(
        self,
        record_type: str,
        sources: Sequence[RecordSource],
        *,
        labels: Sequence[str] = (),
    ) -> ImportSummary:
        pipeline = self.pipeline_for(record_type)
        rows_read = 0
        for source in sources:
            records = list(source.read(pipeline.model))
            rows_read += len(records)
            pipeline.queue(records)

        items = pipeline.process()
        summary = ImportSummary(
            record_type=record_type,
            files=tuple(labels),
            rows_read=rows_read,
            rows_inserted=len(items),
            items=items,
        )
        log_event(
            logger,
            logging.INFO,
            "import_completed",
            record_type=record_type,
            files=list(summary.files),
            rows_read=summary.rows_read,
            rows_inserted=summary.rows_inserted,
            rows_skipped=summary.rows_skipped,
        )
        return summary

    def import_files(self, record_type: str, paths: Sequence[str | Path]) -> ImportSummary:
        resolved = [Path(path) for path in paths]
        sources = [open_record_source(path) for path in resolved]
        return self.import_sources(
            record_type,
            sources,
            labels=[path.name for path in resolved],
        )
