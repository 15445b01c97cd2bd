"""Unit tests for the weight recorder."""

import threading
import time
from typing import Any
from unittest.mock import MagicMock

import pytest

from cat_weight_ledger.domain.weight import AppendRow, UpdateCell
from cat_weight_ledger.infrastructure.memory_store.store import InMemoryLedgerStore
from cat_weight_ledger.services.recorder import LOCK_POOL_SIZE, WeightRecorder
from cat_weight_ledger.services.upsert import LedgerUpsertService
from cat_weight_ledger.utils.exceptions import InvalidSubject, StoreIOError

HEADER = ["Fecha", "Gaudí", "Maite", "Benito", "Cleopatra"]


class SlowStore(InMemoryLedgerStore):
    """Store whose reads take long enough for concurrent upserts to overlap."""

    def read_rows(self) -> list[list[Any]]:
        rows = super().read_rows()
        time.sleep(0.02)
        return rows


def test_record_appends_then_updates(upsert_service: LedgerUpsertService) -> None:
    """Test a new date followed by a second cat on that date."""
    store = InMemoryLedgerStore([HEADER])
    recorder = WeightRecorder(store, upsert_service)

    first = recorder.record("01/01/2025", "Maite", 4.2)
    second = recorder.record("01/01/2025", "Benito", 6.1)

    if not isinstance(first, AppendRow):
        raise AssertionError(f"Expected AppendRow, got {first}")
    if not isinstance(second, UpdateCell):
        raise AssertionError(f"Expected UpdateCell, got {second}")
    if store.rows != [HEADER, ["01/01/2025", "", 4.2, 6.1, ""]]:
        raise AssertionError(f"Unexpected ledger {store.rows}")


def test_non_padded_date_does_not_duplicate_row(upsert_service: LedgerUpsertService) -> None:
    """Test that "5/1/2025" lands on the existing "05/01/2025" row."""
    store = InMemoryLedgerStore([HEADER, ["05/01/2025", 3.0, "", "", ""]])
    recorder = WeightRecorder(store, upsert_service)

    instruction = recorder.record("5/1/2025", "Maite", 4.0)

    if not isinstance(instruction, UpdateCell):
        raise AssertionError(f"Expected UpdateCell, got {instruction}")
    if store.rows != [HEADER, ["05/01/2025", 3.0, 4.0, "", ""]]:
        raise AssertionError(f"Unexpected ledger {store.rows}")


def test_validation_happens_before_reading(upsert_service: LedgerUpsertService) -> None:
    """Test that an invalid cat never touches the store."""
    store = MagicMock()
    recorder = WeightRecorder(store, upsert_service)

    with pytest.raises(InvalidSubject):
        recorder.record("01/01/2025", "Garfield", 4.0)

    if store.read_rows.called or store.update_cell.called or store.append_row.called:
        raise AssertionError("Store must not be used for an invalid measurement")


def test_store_errors_propagate(upsert_service: LedgerUpsertService) -> None:
    """Test that read failures reach the caller unchanged."""
    store = MagicMock()
    store.read_rows.side_effect = StoreIOError("Failed to read spreadsheet: quota")
    recorder = WeightRecorder(store, upsert_service)

    with pytest.raises(StoreIOError):
        recorder.record("01/01/2025", "Maite", 4.0)

    if store.append_row.called:
        raise AssertionError("Nothing must be written after a failed read")


def test_concurrent_upserts_for_one_date_create_one_row(
    upsert_service: LedgerUpsertService,
) -> None:
    """Test per-date serialization inside one process."""
    store = SlowStore([HEADER])
    recorder = WeightRecorder(store, upsert_service)
    cats = ["Gaudí", "Maite", "Benito", "Cleopatra"]

    threads = [
        threading.Thread(target=recorder.record, args=("03/03/2025", cat, 3.0 + index))
        for index, cat in enumerate(cats)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    matching = [row for row in store.rows if row[0] == "03/03/2025"]
    if len(matching) != 1:
        raise AssertionError(f"Expected one row for the date, got {matching}")
    if matching[0] != ["03/03/2025", 3.0, 4.0, 5.0, 6.0]:
        raise AssertionError(f"Lost an update: {matching[0]}")


def test_lock_pool_stays_bounded(upsert_service: LedgerUpsertService) -> None:
    """Test that recording many dates does not grow the lock registry."""
    store = InMemoryLedgerStore([HEADER])
    recorder = WeightRecorder(store, upsert_service)

    for day in range(1, 29):
        for month in range(1, 13):
            recorder.record(f"{day:02d}/{month:02d}/2025", "Benito", 6.0)

    if len(recorder._locks) != LOCK_POOL_SIZE:
        raise AssertionError(f"Expected {LOCK_POOL_SIZE} locks, got {len(recorder._locks)}")
    if len(store.rows) != 1 + 28 * 12:
        raise AssertionError(f"Expected one row per date, got {len(store.rows)}")


def test_same_date_always_maps_to_same_lock(upsert_service: LedgerUpsertService) -> None:
    """Test that the lock chosen for a date is stable."""
    recorder = WeightRecorder(InMemoryLedgerStore([HEADER]), upsert_service)

    if recorder._lock_for("03/03/2025") is not recorder._lock_for("03/03/2025"):
        raise AssertionError("A date must always use the same lock")
