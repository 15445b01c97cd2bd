"""Custom exceptions for the cat weight ledger."""

from typing import Any


class CatWeightLedgerError(Exception):
    """Base exception for all cat weight ledger errors."""

    kind = "ledger_error"

    def to_dict(self) -> dict[str, Any]:
        """Structured representation for user-facing feedback."""
        return {"kind": self.kind, "message": str(self)}


class ConfigurationError(CatWeightLedgerError):
    """Raised when there is a configuration error."""

    kind = "configuration_error"


class AuthenticationError(CatWeightLedgerError):
    """Raised when authentication fails."""

    kind = "authentication_error"


class ValidationError(CatWeightLedgerError):
    """Raised when a measurement fails validation. Never partially applied."""

    kind = "validation_error"


class InvalidSubject(ValidationError):
    """Raised when a subject name is not one of the known cats."""

    kind = "invalid_subject"


class InvalidMeasurement(ValidationError):
    """Raised when the date or weight of a measurement is missing or malformed."""

    kind = "invalid_measurement"


class StoreIOError(CatWeightLedgerError):
    """Raised when reading from or writing to the backing store fails."""

    kind = "store_io_error"


class ParsingError(CatWeightLedgerError):
    """Raised when a ledger export file cannot be parsed."""

    kind = "parsing_error"
