"""
Ledger upsert engine.

Decides, from a snapshot of the ledger, whether a measurement updates one cell
of an existing date row or appends a new row. Performs no I/O: executing the
returned instruction is the caller's job.
"""

import logging
from collections.abc import Sequence
from datetime import date
from typing import Any

from cat_weight_ledger.domain.weight import (
    DATE_COLUMN,
    ROW_WIDTH,
    AppendRow,
    Measurement,
    UpdateCell,
    WriteInstruction,
)
from cat_weight_ledger.utils.date_parsing import ParsedDate, parse_date_key_strict
from cat_weight_ledger.utils.parameters import LedgerConfig

logger = logging.getLogger(__name__)


class LedgerUpsertService:
    """
    Plans single-cell updates or row appends keyed by date.

    Keeps at most one row per date: a date already present in the snapshot is
    always updated in place, never appended again.
    """

    def __init__(self, config: LedgerConfig) -> None:
        """
        Initialize upsert service.

        Args:
            config: Ledger configuration (empty value sentinel).
        """
        self.config = config

    @staticmethod
    def find_date_row(rows: Sequence[Sequence[Any]], target: date) -> int | None:
        """
        Locate the first row whose date cell denotes ``target``.

        A cell matches when it reads as the same calendar day under the strict
        DD/MM/YYYY rules, so "5/1/2025" and "05/01/2025" are the same row.
        Later rows with the same date are a store anomaly and are ignored.

        Returns:
            Zero-based row index or None.
        """
        for index, row in enumerate(rows):
            if not row or not isinstance(row[DATE_COLUMN], str):
                continue
            result = parse_date_key_strict(row[DATE_COLUMN])
            if isinstance(result, ParsedDate) and result.value == target:
                return index
        return None

    def plan_upsert(
        self, existing_rows: Sequence[Sequence[Any]], measurement: Measurement
    ) -> WriteInstruction:
        """
        Produce the write instruction for a measurement.

        Args:
            existing_rows: Full ledger snapshot in store order (header included).
            measurement: Validated measurement.

        Returns:
            UpdateCell for a known date, AppendRow otherwise.
        """
        column_index = measurement.subject.column
        row_index = self.find_date_row(existing_rows, measurement.parsed_date)

        if row_index is not None:
            logger.debug(
                f"Date {measurement.date_key} found at row {row_index}, "
                f"updating column {column_index}"
            )
            return UpdateCell(
                row_index=row_index, column_index=column_index, value=measurement.weight
            )

        row: list[str | float] = [self.config.empty_value] * ROW_WIDTH
        row[DATE_COLUMN] = measurement.date_key
        row[column_index] = measurement.weight
        logger.debug(f"Date {measurement.date_key} not found, appending {row}")
        return AppendRow(row=row)

    def apply_instruction(
        self, rows: Sequence[Sequence[Any]], instruction: WriteInstruction
    ) -> list[list[Any]]:
        """
        Return a copy of the snapshot with the instruction executed.

        Short rows are padded with the empty sentinel up to the written column.
        The input snapshot is not modified.
        """
        updated = [list(row) for row in rows]

        if isinstance(instruction, UpdateCell):
            if instruction.row_index >= len(updated):
                raise IndexError(f"Row {instruction.row_index} is outside the ledger")
            target = updated[instruction.row_index]
            if len(target) <= instruction.column_index:
                target.extend(
                    [self.config.empty_value] * (instruction.column_index + 1 - len(target))
                )
            target[instruction.column_index] = instruction.value
        else:
            updated.append(list(instruction.row))

        return updated
