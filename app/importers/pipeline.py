"""
app/importers/pipeline.py

Queue → deduplicate → bulk-commit pipeline for one importable record type.

Lifecycle of one pipeline instance:

    IDLE ──queue()──▶ QUEUING ──queue()──▶ QUEUING
                         │
                      process()
                         ▼
                     PROCESSING ──(success or error)──▶ IDLE

`process()` snapshots the persisted rows of the record type, drops queued
records that are import-equal to any of them, inserts the survivors and
returns them in the type's default order. Composite records are inserted in
two phases: parents first, then their dependents once each dependent has
received its parent's newly assigned identity.

The queue is always emptied by `process()`, including when storage fails.
Nothing here is transactional across the two insert phases: if the dependent
insert fails, parents already inserted stay committed.

A pipeline instance holds mutable state and is not safe to share between
threads without external serialization.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from app.domain.importable import CompositeImportable, Dependent, Importable
from app.importers.accumulator import ImportAccumulator
from app.logging_utils import log_event
from app.storage.base import StoragePort
from app.storage.columns import identity_key

if TYPE_CHECKING:
    from app.readers.base import RecordSource

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Importable)


class PipelineState(str, Enum):
    IDLE = "idle"
    QUEUING = "queuing"
    PROCESSING = "processing"


class ParentLinkError(RuntimeError):
    """
    Raised when a dependent row's parent is not part of the batch being inserted.
    """


class ImportPipeline(Generic[T]):
    """
    Generic importer for record types that follow the simple import logic.
    """

    def __init__(self, model: type[T], storage: StoragePort) -> None:
        self._model = model
        self._storage = storage
        self._accumulator: ImportAccumulator[T] = ImportAccumulator(model)
        self._state = PipelineState.IDLE

    @property
    def model(self) -> type[T]:
        return self._model

    @property
    def state(self) -> PipelineState:
        return self._state

    def count(self) -> int:
        return self._accumulator.count()

    def queue(self, items: Iterable[T]) -> int:
        """
        Declare that `items` should be imported on the next `process()`.

        Call as many times as needed; import-equal records collapse to the
        first one queued.
        """

        if self._state is PipelineState.PROCESSING:
            raise RuntimeError("Cannot queue records while an import is being processed.")

        accepted = self._accumulator.queue(items)
        self._state = PipelineState.QUEUING
        log_event(
            logger,
            logging.DEBUG,
            "import_queued",
            record_type=self._model.__name__,
            accepted=accepted,
            queued=self._accumulator.count(),
        )
        return accepted

    def queue_from(self, source: RecordSource) -> int:
        return self.queue(source.read(self._model))

    def process(self) -> list[T]:
        """
        Import previously queued records into storage.

        Returns the inserted records in default order. Any storage error is
        propagated as-is; some or all of the batch may then be uncommitted.
        """

        self._state = PipelineState.PROCESSING
        items: list[T] = []
        skipped = 0
        try:
            if self._accumulator.count():
                skipped = self._accumulator.discard_matching(self._storage.all(self._model))
                items = self._accumulator.drain()
                self.prepare(items)
                self._insert(items)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "import_failed",
                record_type=self._model.__name__,
                error=str(exc),
                error_type=type(exc).__name__,
                items=len(items),
            )
            raise
        finally:
            self._accumulator.clear()
            self._state = PipelineState.IDLE

        log_event(
            logger,
            logging.INFO,
            "import_processed",
            record_type=self._model.__name__,
            inserted=len(items),
            skipped_existing=skipped,
        )
        return self._model.in_default_order(items)

    def prepare(self, items: Sequence[T]) -> None:
        """
        Hook for subclasses to adjust surviving records before insert.
        """

    def _insert(self, items: Sequence[T]) -> None:
        if not items:
            return

        composite = issubclass(self._model, CompositeImportable)
        if composite:
            verify_dependent_parents(items)

        self._storage.bulk_insert(items)
        if composite:
            dependents = link_dependents(items)
            if dependents:
                self._storage.bulk_insert(dependents)


def verify_dependent_parents(parents: Sequence[Any]) -> None:
    """
    Check that every dependent points back at a parent from `parents`.

    Called before the parents are inserted.
    """

    in_batch = {id(parent) for parent in parents}
    for parent in parents:
        for row in parent.dependent_rows():
            owner = row.parent_record()
            if owner is None or id(owner) not in in_batch:
                raise ParentLinkError(
                    f"{type(row).__name__} belongs to a {type(parent).__name__} "
                    "that is not part of this insert batch."
                )


def link_dependents(parents: Sequence[Any]) -> list[Dependent]:
    """
    Copy each inserted parent's identity into its dependents' foreign keys.
    """

    dependents: list[Dependent] = []
    for parent in parents:
        for row in parent.dependent_rows():
            owner = row.parent_record()
            identity = getattr(owner, identity_key(type(owner)))
            if identity is None:
                raise ParentLinkError(
                    f"{type(owner).__name__} has no identity after insert."
                )
            row.assign_parent_identity(identity)
            dependents.append(row)
    return dependents
