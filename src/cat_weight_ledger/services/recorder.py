"""
Weight recording service.

Runs the read-plan-write cycle of an upsert against a ledger store.
Validation happens before any I/O; store errors propagate to the caller.
"""

import logging
import threading
import zlib
from typing import Any, Protocol

from cat_weight_ledger.domain.weight import Measurement, UpdateCell, WriteInstruction
from cat_weight_ledger.services.upsert import LedgerUpsertService

logger = logging.getLogger(__name__)

LOCK_POOL_SIZE = 64


class LedgerStore(Protocol):
    """Snapshot read plus the two write operations of the ledger."""

    def read_rows(self) -> list[list[Any]]: ...

    def update_cell(self, row_index: int, column_index: int, value: Any) -> None: ...

    def append_row(self, row: list[Any]) -> None: ...


class WeightRecorder:
    """
    Records measurements into a ledger store.

    Upserts for the same date are serialized within the process, so two
    concurrent writers for one date can neither append duplicate rows nor lose
    an update. Writers in other processes are not coordinated.

    Dates share a fixed pool of locks, so memory stays bounded however many
    dates are recorded; two different dates may occasionally wait on each other.
    """

    def __init__(self, store: LedgerStore, upsert_service: LedgerUpsertService) -> None:
        """
        Initialize recorder.

        Args:
            store: Ledger store (Sheets client or in-memory store).
            upsert_service: Upsert planner.
        """
        self.store = store
        self.upsert_service = upsert_service
        self._locks = tuple(threading.Lock() for _ in range(LOCK_POOL_SIZE))

    def _lock_for(self, date_key: str) -> threading.Lock:
        return self._locks[zlib.crc32(date_key.encode("utf-8")) % len(self._locks)]

    def execute(self, instruction: WriteInstruction) -> None:
        """Issue a write instruction against the store."""
        if isinstance(instruction, UpdateCell):
            self.store.update_cell(
                instruction.row_index, instruction.column_index, instruction.value
            )
        else:
            self.store.append_row(list(instruction.row))

    def record(self, date_key: Any, subject: Any, weight: Any) -> WriteInstruction:
        """
        Validate and upsert one measurement.

        Args:
            date_key: Date in DD/MM/YYYY format.
            subject: Cat name.
            weight: Weight in kilograms.

        Returns:
            The instruction that was executed.

        Raises:
            ValidationError: If the measurement is invalid. Nothing is read or written.
            StoreIOError: If reading or writing the store fails.
        """
        measurement = Measurement.create(date_key, subject, weight)
        return self.record_measurement(measurement)

    def record_measurement(self, measurement: Measurement) -> WriteInstruction:
        """Upsert an already validated measurement."""
        with self._lock_for(measurement.date_key):
            rows = self.store.read_rows()
            instruction = self.upsert_service.plan_upsert(rows, measurement)
            self.execute(instruction)

        logger.info(
            f"Recorded {measurement.subject.value} = {measurement.weight} on "
            f"{measurement.date_key} ({type(instruction).__name__})"
        )
        return instruction
