"""Unit tests for ledger date parsing."""

from datetime import date, datetime

import pytest

from cat_weight_ledger.utils.date_parsing import (
    ParsedDate,
    Unparsable,
    format_date_key,
    parse_date_key_strict,
    parse_date_lenient,
    parse_ledger_date,
)


def test_strict_parses_canonical_date_key() -> None:
    """Test that DD/MM/YYYY is read day first."""
    result = parse_date_key_strict("05/01/2025")

    if not isinstance(result, ParsedDate):
        raise AssertionError(f"Expected ParsedDate, got {result}")
    if result.value != date(2025, 1, 5):
        raise AssertionError(f"Expected 2025-01-05, got {result.value}")
    if result.stage != "strict":
        raise AssertionError(f"Expected strict stage, got {result.stage}")


def test_strict_rejects_out_of_range_parts() -> None:
    """Test day, month and year range validation."""
    for text in ["32/01/2025", "10/13/2025", "10/10/1999", "00/01/2025"]:
        result = parse_date_key_strict(text)
        if not isinstance(result, Unparsable):
            raise AssertionError(f"Expected Unparsable for {text}, got {result}")


def test_strict_rejects_impossible_calendar_date() -> None:
    """Test that 31 February passes range checks but is still rejected."""
    result = parse_date_key_strict("31/02/2025")

    if not isinstance(result, Unparsable):
        raise AssertionError(f"Expected Unparsable, got {result}")


def test_ledger_date_drops_impossible_date_in_both_stages() -> None:
    """Test that the lenient fallback does not rescue 31 February."""
    result = parse_ledger_date("31/02/2025")

    if not isinstance(result, Unparsable):
        raise AssertionError(f"Expected Unparsable, got {result}")


def test_lenient_accepts_iso_and_gviz_dates() -> None:
    """Test fallback formats."""
    iso = parse_ledger_date("2025-03-04")
    if not isinstance(iso, ParsedDate) or iso.value != date(2025, 3, 4):
        raise AssertionError(f"Expected 2025-03-04, got {iso}")
    if iso.stage != "lenient":
        raise AssertionError(f"Expected lenient stage, got {iso.stage}")

    gviz = parse_date_lenient("Date(2025,0,5)")
    if not isinstance(gviz, ParsedDate) or gviz.value != date(2025, 1, 5):
        raise AssertionError(f"Expected 2025-01-05 from gviz literal, got {gviz}")


def test_lenient_accepts_date_objects_and_rejects_numbers() -> None:
    """Test non-string date cells."""
    result = parse_ledger_date(datetime(2025, 6, 1, 12, 30))
    if not isinstance(result, ParsedDate) or result.value != date(2025, 6, 1):
        raise AssertionError(f"Expected 2025-06-01, got {result}")

    numeric = parse_ledger_date(45667)
    if not isinstance(numeric, Unparsable):
        raise AssertionError(f"Expected Unparsable for a number, got {numeric}")


def test_garbage_is_unparsable_not_raised() -> None:
    """Test that unreadable text produces a reason instead of an exception."""
    result = parse_ledger_date("no es una fecha")

    if not isinstance(result, Unparsable):
        raise AssertionError(f"Expected Unparsable, got {result}")
    if not result.reason:
        raise AssertionError("Expected a reason for the failure")


@pytest.mark.parametrize("text", ["3", "2025", "Jan", "March 2025", "5 Jan"])
def test_lenient_rejects_partial_dates(text: str) -> None:
    """Test that missing day, month or year is never filled in from today."""
    result = parse_ledger_date(text)

    if not isinstance(result, Unparsable):
        raise AssertionError(f"Expected Unparsable for {text!r}, got {result}")


def test_lenient_accepts_complete_written_date() -> None:
    """Test that a date with all three parts still parses day first."""
    for text in ("5 Jan 2025", "5-1-2025"):
        result = parse_date_lenient(text)
        if not isinstance(result, ParsedDate) or result.value != date(2025, 1, 5):
            raise AssertionError(f"Expected 2025-01-05 from {text!r}, got {result}")


def test_format_date_key_zero_pads() -> None:
    """Test canonical formatting."""
    if format_date_key(date(2025, 1, 5)) != "05/01/2025":
        raise AssertionError(f"Unexpected key {format_date_key(date(2025, 1, 5))}")
