"""
Ledger date parsing and timezone utilities.

Date keys are written as zero-padded ``DD/MM/YYYY`` strings. Reading them back
uses a strict-then-lenient two-stage parser that returns a tagged result
instead of raising, so callers can decide to skip malformed rows.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import pytz
from dateutil import parser

DATE_KEY_FORMAT = "%d/%m/%Y"
MIN_YEAR = 2000

_DATE_KEY_PATTERN = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")
# Google visualization API literal, month is zero-based
_GVIZ_DATE_PATTERN = re.compile(r"^\s*Date\((\d{4}),\s*(\d{1,2}),\s*(\d{1,2})[\d,\s]*\)\s*$")
_PARTIAL_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


@dataclass(frozen=True)
class ParsedDate:
    """Successful parse result."""

    value: date
    stage: str


@dataclass(frozen=True)
class Unparsable:
    """Failed parse result with a human readable reason."""

    reason: str


ParseResult = ParsedDate | Unparsable


def parse_date_key_strict(text: str) -> ParseResult:
    """
    Parse ``DD/MM/YYYY`` with range validation.

    Args:
        text: Candidate date key.

    Returns:
        ParsedDate for a real calendar date with day 1-31, month 1-12 and
        year >= 2000, Unparsable otherwise.
    """
    match = _DATE_KEY_PATTERN.match(text)
    if not match:
        return Unparsable(f"not in DD/MM/YYYY format: {text!r}")

    day, month, year = (int(part) for part in match.groups())

    if not 1 <= day <= 31:
        return Unparsable(f"day out of range: {day}")
    if not 1 <= month <= 12:
        return Unparsable(f"month out of range: {month}")
    if year < MIN_YEAR:
        return Unparsable(f"year before {MIN_YEAR}: {year}")

    try:
        return ParsedDate(date(year, month, day), "strict")
    except ValueError as e:
        return Unparsable(f"invalid calendar date {text!r}: {e}")


def parse_date_lenient(raw: Any) -> ParseResult:
    """
    Fallback parser for values that are not canonical date keys.

    Accepts date/datetime objects, the gviz ``Date(y,m,d)`` literal, ISO dates
    and any other complete date dateutil understands (day-first). Numbers and
    partial dates such as "2025" or "Jan" are rejected.
    """
    if isinstance(raw, datetime):
        return ParsedDate(raw.date(), "lenient")
    if isinstance(raw, date):
        return ParsedDate(raw, "lenient")
    if not isinstance(raw, str):
        return Unparsable(f"unsupported date value type: {type(raw).__name__}")

    gviz_match = _GVIZ_DATE_PATTERN.match(raw)
    if gviz_match:
        year, month, day = (int(part) for part in gviz_match.groups())
        try:
            return ParsedDate(date(year, month + 1, day), "lenient")
        except ValueError as e:
            return Unparsable(f"invalid calendar date {raw!r}: {e}")

    # dayfirst would swap month and day of ISO dates
    try:
        return ParsedDate(datetime.fromisoformat(raw.strip()).date(), "lenient")
    except ValueError:
        pass

    # fields missing from the text are filled from the default, so a date that
    # changes with the default was incomplete
    try:
        first, second = (
            parser.parse(raw, dayfirst=True, default=default).date()
            for default in _PARTIAL_DATE_DEFAULTS
        )
    except (ValueError, OverflowError) as e:
        return Unparsable(f"unrecognized date {raw!r}: {e}")

    if first != second:
        return Unparsable(f"incomplete date {raw!r}: day, month and year are required")
    return ParsedDate(first, "lenient")


def parse_ledger_date(raw: Any) -> ParseResult:
    """
    Parse a ledger date cell, strict stage first then lenient fallback.

    Args:
        raw: Date cell content (string, date or datetime).

    Returns:
        Tagged parse result. Never raises.
    """
    if isinstance(raw, str):
        strict = parse_date_key_strict(raw)
        if isinstance(strict, ParsedDate):
            return strict
        lenient = parse_date_lenient(raw)
        if isinstance(lenient, ParsedDate):
            return lenient
        return Unparsable(f"{strict.reason}; {lenient.reason}")

    return parse_date_lenient(raw)


def format_date_key(value: date) -> str:
    """Format a date as the canonical zero-padded ``DD/MM/YYYY`` key."""
    return value.strftime(DATE_KEY_FORMAT)


def today_in_timezone(timezone_str: str = "Europe/Madrid") -> date:
    """
    Get the current calendar date in a timezone.

    Args:
        timezone_str: Timezone string (e.g., "Europe/Madrid").

    Returns:
        Today's date with time-of-day discarded.
    """
    tz = pytz.timezone(timezone_str)
    return datetime.now(tz).date()
