"""
Weight ledger domain models.

Defines the closed set of tracked cats, their fixed ledger columns, the
measurement input of an upsert and the write instructions the upsert engine
produces.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from cat_weight_ledger.utils.date_parsing import (
    DATE_KEY_FORMAT,
    ParsedDate,
    format_date_key,
    parse_date_key_strict,
)
from cat_weight_ledger.utils.exceptions import InvalidMeasurement, InvalidSubject

DATE_COLUMN = 0


class Subject(str, Enum):
    """The cats whose weight is tracked. Values are the ledger display names."""

    GAUDI = "Gaudí"
    MAITE = "Maite"
    BENITO = "Benito"
    CLEOPATRA = "Cleopatra"

    @property
    def column(self) -> int:
        """Fixed ledger column holding this subject's weights."""
        return SUBJECT_COLUMNS[self]

    @classmethod
    def from_name(cls, name: Any) -> "Subject":
        """
        Resolve a display name (or member name, case-insensitive) to a Subject.

        Raises:
            InvalidSubject: If the name does not denote a known cat.
        """
        if isinstance(name, Subject):
            return name
        if not isinstance(name, str) or not name.strip():
            raise InvalidSubject(f"Invalid cat name: {name!r}")

        candidate = name.strip()
        for subject in cls:
            if candidate == subject.value or candidate.upper() == subject.name:
                return subject

        raise InvalidSubject(f"Invalid cat name: {candidate}")


SUBJECT_COLUMNS: dict[Subject, int] = {
    Subject.GAUDI: 1,
    Subject.MAITE: 2,
    Subject.BENITO: 3,
    Subject.CLEOPATRA: 4,
}

ROW_WIDTH = max(SUBJECT_COLUMNS.values()) + 1


class Measurement(BaseModel):
    """
    A single weight reading for one cat on one date.

    The unit of the upsert operation. Zero or negative weights are not
    rejected here; only missing, non-numeric and non-finite values are.
    """

    date_key: str = Field(description="Canonical DD/MM/YYYY date key")
    subject: Subject = Field(description="Cat the weight belongs to")
    weight: float = Field(allow_inf_nan=False, description="Weight in kilograms")

    model_config = ConfigDict(frozen=True)

    @field_validator("date_key")
    @classmethod
    def _check_date_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("date is required")
        result = parse_date_key_strict(value)
        if not isinstance(result, ParsedDate):
            raise ValueError(result.reason)
        return format_date_key(result.value)

    @field_validator("weight", mode="before")
    @classmethod
    def _check_weight(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            raise ValueError("weight must be a number")
        if isinstance(value, str) and not value.strip():
            raise ValueError("weight is required")
        return value

    @classmethod
    def create(cls, date_key: Any, subject: Any, weight: Any) -> "Measurement":
        """
        Build a validated measurement from loosely typed input.

        Args:
            date_key: Date in DD/MM/YYYY format.
            subject: Cat display name or Subject.
            weight: Finite number.

        Returns:
            Validated measurement.

        Raises:
            InvalidSubject: If the subject is unknown.
            InvalidMeasurement: If the date or weight is missing or malformed.
        """
        resolved = Subject.from_name(subject)

        if date_key is None:
            raise InvalidMeasurement("Missing required field: date")

        try:
            return cls(date_key=date_key, subject=resolved, weight=weight)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise InvalidMeasurement(f"Invalid measurement: {problems}") from e

    @property
    def column(self) -> int:
        return self.subject.column

    @property
    def parsed_date(self) -> date:
        return datetime.strptime(self.date_key, DATE_KEY_FORMAT).date()


class UpdateCell(BaseModel):
    """Overwrite exactly one cell of an existing ledger row."""

    row_index: int = Field(ge=0, description="Zero-based row position in the snapshot")
    column_index: int = Field(ge=1, description="Subject column")
    value: float

    model_config = ConfigDict(frozen=True)


class AppendRow(BaseModel):
    """Add a full new row at the end of the ledger."""

    row: list[str | float]

    model_config = ConfigDict(frozen=True)


WriteInstruction = UpdateCell | AppendRow
