"""In-memory ledger store with the same surface as the Sheets client."""

import logging
import threading
from typing import Any

from cat_weight_ledger.domain.series import RawCell

logger = logging.getLogger(__name__)


class InMemoryLedgerStore:
    """
    Ledger kept in a list of rows.

    Used for dry runs and tests. Reads return copies so callers never alias
    the stored rows.
    """

    def __init__(self, rows: list[list[Any]] | None = None, empty_value: str = "") -> None:
        self.rows: list[list[Any]] = [list(row) for row in rows or []]
        self.empty_value = empty_value
        self._lock = threading.Lock()

    def read_rows(self) -> list[list[Any]]:
        with self._lock:
            return [list(row) for row in self.rows]

    def read_raw_table(self) -> list[list[RawCell]]:
        with self._lock:
            return [
                [RawCell(value=cell, formatted=None if cell is None else str(cell)) for cell in row]
                for row in self.rows
            ]

    def update_cell(self, row_index: int, column_index: int, value: Any) -> None:
        with self._lock:
            row = self.rows[row_index]
            if len(row) <= column_index:
                row.extend([self.empty_value] * (column_index + 1 - len(row)))
            row[column_index] = value
        logger.debug(f"Updated row {row_index} column {column_index} = {value}")

    def append_row(self, row: list[Any]) -> None:
        with self._lock:
            self.rows.append(list(row))
        logger.debug(f"Appended row {row}")
