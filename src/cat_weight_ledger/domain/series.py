"""
Time series domain models.

Reconstructed observations of the ledger, the diagnostics produced while
reconstructing them and the derived per-cat statistics.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterator

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field

from cat_weight_ledger.domain.weight import Subject


@dataclass(frozen=True)
class RawCell:
    """A store cell exposing both its raw value and its formatted text."""

    value: Any = None
    formatted: str | None = None


class SeriesWindow(str, Enum):
    """Relative time range used to filter a series."""

    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    ALL = "all"

    @property
    def span(self) -> relativedelta | None:
        """Length of the window, None for the unbounded window."""
        return _WINDOW_SPANS[self]


_WINDOW_SPANS: dict[SeriesWindow, relativedelta | None] = {
    SeriesWindow.ONE_MONTH: relativedelta(months=1),
    SeriesWindow.THREE_MONTHS: relativedelta(months=3),
    SeriesWindow.SIX_MONTHS: relativedelta(months=6),
    SeriesWindow.ONE_YEAR: relativedelta(years=1),
    SeriesWindow.ALL: None,
}


class SeriesPoint(BaseModel):
    """One reconstructed ledger row."""

    date_key: str
    parsed_date: date
    values: dict[Subject, float | None]

    model_config = ConfigDict(frozen=True)

    def value_for(self, subject: Subject) -> float | None:
        return self.values.get(subject)


class MalformedRowSkipped(BaseModel):
    """Diagnostic for a row dropped during reconstruction."""

    row_index: int = Field(description="Position of the row in the raw table")
    raw_date: str = Field(description="Date text as found in the row")
    reason: str

    model_config = ConfigDict(frozen=True)


class TimeSeries:
    """
    Chronologically ordered series points plus the rows skipped to build it.

    Points are non-decreasing by parsed date.
    """

    def __init__(
        self,
        points: list[SeriesPoint],
        skipped: list[MalformedRowSkipped] | None = None,
    ) -> None:
        self.points = points
        self.skipped = skipped or []

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SeriesPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> SeriesPoint:
        return self.points[index]

    def with_points(self, points: list[SeriesPoint]) -> "TimeSeries":
        """Return a series with other points but the same diagnostics."""
        return TimeSeries(points, self.skipped)

    def to_records(self) -> list[dict[str, Any]]:
        """Flatten points into one dictionary per date, keyed by cat name."""
        records: list[dict[str, Any]] = []
        for point in self.points:
            record: dict[str, Any] = {"date": point.date_key, "parsed_date": point.parsed_date}
            for subject in Subject:
                record[subject.value] = point.value_for(subject)
            records.append(record)
        return records


class Observation(BaseModel):
    """A non-null weight of one cat at one point of the series."""

    date_key: str
    parsed_date: date
    value: float


class WeightChange(BaseModel):
    """Difference between the two most recent observations of a cat."""

    change: float = Field(description="latest - previous, rounded to 2 decimals")
    percent_change: float | None = Field(
        description="change / previous * 100 rounded to 1 decimal, None when previous is 0"
    )


class SubjectSummary(BaseModel):
    """Dashboard card data for one cat."""

    subject: Subject
    observations: int
    latest: Observation | None = None
    change: WeightChange | None = None

    model_config = ConfigDict(use_enum_values=True)
