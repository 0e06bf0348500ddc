"""
Amount and date normalization for spreadsheet-sourced values.

Spreadsheet exports mix numbers, formatted currency strings and several date
layouts in the same column. Every function here is total: malformed input
degrades to 0.0 (amounts) or None (dates) and never raises. Degradations are
logged at DEBUG, or at WARNING when strict parsing is enabled, so they can be
surfaced in tests and troubleshooting without changing any return value.

Key Functions:
- parse_amount: Currency-like value -> float, 0.0 on failure
- parse_amount_detailed: Same, plus a was_defaulted flag
- parse_date: M/D/YYYY, ISO, then generic parse -> date or None
- same_day: Calendar-day equality
- today_in: "Today" in the reporting timezone

Usage:
    from scalewise.services.parsing import parse_amount, parse_date

    parse_amount("-$1,234.56")   # -1234.56
    parse_date("3/7/2024")       # date(2024, 3, 7)
"""

import logging
import math
import numbers
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, NamedTuple, Optional, Union
from zoneinfo import ZoneInfo

import pandas as pd

from scalewise.core.config import get_settings

logger = logging.getLogger(__name__)

TimezoneLike = Union[str, ZoneInfo, None]

# M/D/YYYY with optional one-digit month/day and an ignored trailing time part
_SLASH_DATE_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+.*)?$')

# YYYY-MM-DD with an ignored trailing time part
_ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T\s].*)?$')

_AMOUNT_STRIP_CHARS = ('$', ',')

# Leading number of a cleaned amount string; anything after it is ignored
_LEADING_NUMBER_RE = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


class ParsedAmount(NamedTuple):
    """Result of an amount parse; was_defaulted is True when value fell back to 0.0 or text was dropped."""
    value: float
    was_defaulted: bool


# =============================================================================
# Amount Parser
# =============================================================================


def _log_degradation(message: str, strict: Optional[bool]) -> None:
    if strict is None:
        strict = get_settings().strict_parsing
    if strict:
        logger.warning(message)
    else:
        logger.debug(message)


def parse_amount_detailed(value: Any, strict: Optional[bool] = None) -> ParsedAmount:
    """
    Parse a monetary value and report whether it was defaulted.

    Numbers pass through unchanged. Strings have every '$' and ',' removed and
    their leading number is read, so the sign is preserved ("-$1,234.56" ->
    -1234.56) and trailing text is dropped ("150 USD" -> 150, "1_000" -> 1).
    Empty, unparseable and non-finite values (including the NaN pandas uses for
    blank cells) become 0.0. Booleans are not amounts.

    Args:
        value: Any raw cell value.
        strict: Log degradations as warnings. Defaults to Settings.strict_parsing.

    Returns:
        ParsedAmount: (value, was_defaulted)

    Example:
        >>> parse_amount_detailed("$1,250.00")
        ParsedAmount(value=1250.0, was_defaulted=False)
        >>> parse_amount_detailed("N/A")
        ParsedAmount(value=0.0, was_defaulted=True)
    """
    if value is None:
        return ParsedAmount(0.0, True)

    if isinstance(value, bool):
        _log_degradation(f"Boolean {value!r} is not an amount; using 0", strict)
        return ParsedAmount(0.0, True)

    if isinstance(value, (numbers.Real, Decimal)):
        number = float(value)
        if not math.isfinite(number):
            _log_degradation(f"Non-finite amount {value!r}; using 0", strict)
            return ParsedAmount(0.0, True)
        return ParsedAmount(number, False)

    if isinstance(value, str):
        cleaned = value
        for char in _AMOUNT_STRIP_CHARS:
            cleaned = cleaned.replace(char, '')
        cleaned = cleaned.strip()
        if not cleaned:
            return ParsedAmount(0.0, True)
        match = _LEADING_NUMBER_RE.match(cleaned)
        if match is None:
            _log_degradation(f"Unparseable amount {value!r}; using 0", strict)
            return ParsedAmount(0.0, True)
        number = float(match.group(0))
        if not math.isfinite(number):
            _log_degradation(f"Non-finite amount {value!r}; using 0", strict)
            return ParsedAmount(0.0, True)
        if match.end() < len(cleaned):
            _log_degradation(f"Ignored trailing text in amount {value!r}; using {number}", strict)
            return ParsedAmount(number, True)
        return ParsedAmount(number, False)

    _log_degradation(f"Unsupported amount type {type(value).__name__}; using 0", strict)
    return ParsedAmount(0.0, True)


def parse_amount(value: Any, strict: Optional[bool] = None) -> float:
    """
    Parse a monetary value into a float, returning 0.0 on any failure.

    Example:
        >>> parse_amount("-$1,234.56")
        -1234.56
        >>> parse_amount(None)
        0.0
    """
    return parse_amount_detailed(value, strict=strict).value


# =============================================================================
# Date Normalizer
# =============================================================================


def resolve_timezone(tz: TimezoneLike) -> Optional[ZoneInfo]:
    """Turn an IANA name into a ZoneInfo; None stays None."""
    if tz is None or isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz)


def _datetime_to_date(value: datetime, tz: Optional[ZoneInfo]) -> date:
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.date()


def _build_date(year: str, month: str, day: str) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date(
    raw: Any,
    tz: TimezoneLike = None,
    strict: Optional[bool] = None,
) -> Optional[date]:
    """
    Parse a heterogeneous date value into a calendar date.

    String formats are attempted in order:
    1. Slash-delimited M/D/YYYY (one or two digit month and day)
    2. ISO YYYY-MM-DD
    3. Anything pandas.to_datetime understands ("Jan 5, 2024", RFC 2822, ...)

    A value that matches (1) or (2) but is not a real calendar day (2/30/2024)
    returns None. A timezone-aware result is converted to `tz` before it is
    truncated to a day; naive values are taken as already being in the
    reporting timezone.

    Args:
        raw: String, date, datetime or pandas Timestamp.
        tz: Reporting timezone name or ZoneInfo.
        strict: Log failures as warnings. Defaults to Settings.strict_parsing.

    Returns:
        Optional[date]: The calendar day, or None when nothing parses.

    Example:
        >>> parse_date("01/05/2024")
        datetime.date(2024, 1, 5)
        >>> parse_date("2024-01-05T23:30:00")
        datetime.date(2024, 1, 5)
        >>> parse_date("not a date") is None
        True
    """
    if raw is None:
        return None

    zone = resolve_timezone(tz)

    if isinstance(raw, datetime):
        if pd.isna(raw):
            return None
        return _datetime_to_date(raw, zone)
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        _log_degradation(f"Unsupported date type {type(raw).__name__}", strict)
        return None

    text = raw.strip()
    if not text:
        return None

    match = _SLASH_DATE_RE.match(text)
    if match:
        month, day, year = match.groups()
        parsed = _build_date(year, month, day)
        if parsed is None:
            _log_degradation(f"Invalid calendar date {raw!r}", strict)
        return parsed

    match = _ISO_DATE_RE.match(text)
    if match:
        year, month, day = match.groups()
        parsed = _build_date(year, month, day)
        if parsed is None:
            _log_degradation(f"Invalid calendar date {raw!r}", strict)
        return parsed

    try:
        timestamp = pd.to_datetime(text, errors='coerce')
    except (ValueError, TypeError, OverflowError):
        timestamp = pd.NaT

    if pd.isna(timestamp):
        _log_degradation(f"Unparseable date {raw!r}", strict)
        return None

    return _datetime_to_date(timestamp.to_pydatetime(), zone)


def same_day(a: Any, b: Any, tz: TimezoneLike = None) -> bool:
    """
    Return True when both values fall on the same calendar day.

    Only year/month/day are compared. Either side failing to parse gives False.
    """
    first = parse_date(a, tz=tz)
    second = parse_date(b, tz=tz)
    if first is None or second is None:
        return False
    return first == second


def today_in(tz: TimezoneLike = None) -> date:
    """
    Return today's date in the reporting timezone.

    Args:
        tz: Timezone name or ZoneInfo. Defaults to Settings.reporting_timezone.
    """
    zone = resolve_timezone(tz or get_settings().reporting_timezone)
    return datetime.now(zone).date()


__all__ = [
    'ParsedAmount',
    'parse_amount',
    'parse_amount_detailed',
    'parse_date',
    'same_day',
    'today_in',
    'resolve_timezone',
]
