"""
Series reconstruction service.

Turns a loosely typed ledger export (header row, mixed cell types, malformed
dates) into a sorted per-cat time series and computes dashboard statistics
over it.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from cat_weight_ledger.domain.series import (
    MalformedRowSkipped,
    Observation,
    RawCell,
    SeriesPoint,
    SeriesWindow,
    SubjectSummary,
    TimeSeries,
    WeightChange,
)
from cat_weight_ledger.domain.weight import DATE_COLUMN, Subject
from cat_weight_ledger.utils.date_parsing import (
    ParsedDate,
    format_date_key,
    parse_ledger_date,
    today_in_timezone,
)
from cat_weight_ledger.utils.parameters import LedgerConfig

logger = logging.getLogger(__name__)


def _cell_parts(cell: Any) -> tuple[Any, str | None]:
    """Split a cell into (raw value, formatted text)."""
    if isinstance(cell, RawCell):
        return cell.value, cell.formatted
    if isinstance(cell, Mapping):
        formatted = cell.get("f")
        return cell.get("v"), formatted if isinstance(formatted, str) else None
    return cell, None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


class SeriesService:
    """
    Service for reconstructing and analysing the weight series.

    Malformed rows are skipped and reported, never raised.
    """

    def __init__(self, config: LedgerConfig) -> None:
        """
        Initialize series service.

        Args:
            config: Ledger configuration (header sentinel, timezone).
        """
        self.config = config

    def _date_field(self, row: Sequence[Any]) -> Any:
        """Date cell content, formatted text preferred over the raw value."""
        if not row:
            return None
        value, formatted = _cell_parts(row[DATE_COLUMN])
        if formatted is not None and formatted.strip():
            return formatted.strip()
        if isinstance(value, str):
            return value.strip()
        return value

    def _safe_float_conversion(self, value: Any) -> float | None:
        """
        Safely convert a weight cell to float.

        Args:
            value: Cell value (number, numeric text with dot or comma decimal).

        Returns:
            Finite float value or None if the cell is empty or not numeric.
        """
        if _is_blank(value) or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            try:
                number = float(value.strip().replace(",", "."))
            except ValueError:
                return None
        else:
            return None

        return number if math.isfinite(number) else None

    def _subject_value(self, row: Sequence[Any], subject: Subject) -> float | None:
        if len(row) <= subject.column:
            return None
        value, formatted = _cell_parts(row[subject.column])
        if _is_blank(value):
            value = formatted
        return self._safe_float_conversion(value)

    def reconstruct(self, raw_table: Sequence[Sequence[Any]]) -> TimeSeries:
        """
        Build a time series from a raw ledger table.

        Args:
            raw_table: Rows of cells; column 0 is the date, columns 1-4 the cats.
                Cells may be plain values, RawCell objects or gviz ``{"v", "f"}``
                mappings.

        Returns:
            Series sorted ascending by date (stable for equal dates), with the
            header, empty and unparsable rows excluded.
        """
        points: list[SeriesPoint] = []
        skipped: list[MalformedRowSkipped] = []

        for row_index, row in enumerate(raw_table):
            date_field = self._date_field(row)

            if _is_blank(date_field) or date_field == self.config.header_sentinel:
                continue

            result = parse_ledger_date(date_field)
            if not isinstance(result, ParsedDate):
                logger.warning(f"Skipping row {row_index}: {result.reason}")
                skipped.append(
                    MalformedRowSkipped(
                        row_index=row_index, raw_date=str(date_field), reason=result.reason
                    )
                )
                continue

            points.append(
                SeriesPoint(
                    date_key=(
                        date_field
                        if isinstance(date_field, str)
                        else format_date_key(result.value)
                    ),
                    parsed_date=result.value,
                    values={subject: self._subject_value(row, subject) for subject in Subject},
                )
            )

        points.sort(key=lambda point: point.parsed_date)

        logger.info(
            f"Reconstructed {len(points)} points from {len(raw_table)} rows "
            f"({len(skipped)} malformed rows skipped)"
        )
        return TimeSeries(points, skipped)

    def filter_range(
        self, series: TimeSeries, window: SeriesWindow | str, today: date | None = None
    ) -> TimeSeries:
        """
        Keep the points inside a relative window ending today.

        Args:
            series: Reconstructed series.
            window: One of 1m, 3m, 6m, 1y, all.
            today: Reference date, defaults to today in the ledger timezone.

        Returns:
            Series restricted to ``start <= parsed_date <= today``; the same
            series for ``all``.
        """
        window = SeriesWindow(window)
        span = window.span
        if span is None:
            return series

        end = today or today_in_timezone(self.config.timezone)
        start = end - span

        return series.with_points(
            [point for point in series if start <= point.parsed_date <= end]
        )

    @staticmethod
    def observations(series: TimeSeries, subject: Subject) -> list[Observation]:
        """All non-null observations of a cat, in series order."""
        found: list[Observation] = []
        for point in series:
            value = point.value_for(subject)
            if value is not None:
                found.append(
                    Observation(date_key=point.date_key, parsed_date=point.parsed_date, value=value)
                )
        return found

    def latest(self, series: TimeSeries, subject: Subject) -> Observation | None:
        """Last observation of a cat in the series, None if it has none."""
        found = self.observations(series, subject)
        return found[-1] if found else None

    def delta(self, series: TimeSeries, subject: Subject) -> WeightChange | None:
        """
        Change between the two most recent observations of a cat.

        Returns:
            WeightChange, or None with fewer than two observations. The
            percentage is None when the previous weight is exactly zero.
        """
        found = self.observations(series, subject)
        if len(found) < 2:
            return None

        previous = found[-2].value
        latest = found[-1].value
        change = latest - previous
        percent = None if previous == 0 else round(change / previous * 100, 1)

        return WeightChange(change=round(change, 2), percent_change=percent)

    def summarize(self, series: TimeSeries) -> list[SubjectSummary]:
        """Per-cat latest weight and last change, in ledger column order."""
        return [
            SubjectSummary(
                subject=subject,
                observations=len(self.observations(series, subject)),
                latest=self.latest(series, subject),
                change=self.delta(series, subject),
            )
            for subject in Subject
        ]
