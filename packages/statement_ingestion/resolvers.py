"""Field resolvers: dates, amounts and description cleanup.

All functions here are pure and tolerate any cell value a spreadsheet,
CSV or PDF line can throw at them. Unparseable input resolves to
``None`` (dates) or zero (amounts); callers treat both as "skip".
"""

import math
import numbers
import re
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional

import pandas as pd

ZERO = Decimal("0")
CENTS = Decimal("0.01")
PLACEHOLDER_DESCRIPTION = "Transaction"

# 1900 date system with the two-day correction (fake 1900-02-29 and 1-based serials)
EXCEL_EPOCH = datetime(1899, 12, 30)

# Dates are pinned to midday so timezone conversion never shifts the calendar day
MIDDAY = 12

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Tried after the part-based rules fail
DATE_FORMATS = [
    "%d %B %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d%m%Y",
    "%Y%m%d",
]

_DATE_SEPARATORS = re.compile(r"[-/.,'\s]+")
_NUMBER_IN_TEXT = re.compile(r"\d+(?:\.\d+)?")

_JARGON_TOKENS = re.compile(
    r"\b(?:cr|dr|credit|debit|withdrawal|deposit|ref|chq|cheque|txn|no)\b",
    re.IGNORECASE,
)
_DECIMAL_FRAGMENT = re.compile(r"\d+\.\d+")
_EDGE_PUNCTUATION = re.compile(r"^[^A-Za-z0-9]+|[^A-Za-z0-9]+$")


def is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _at_midday(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, MIDDAY)


def _to_int(token: str) -> Optional[int]:
    return int(token) if token.isdigit() else None


def _to_month(token: str) -> Optional[int]:
    if token.isdigit():
        return int(token)
    return MONTHS.get(token[:3].lower())


def _to_year(token: str) -> Optional[int]:
    if not token.isdigit():
        return None
    if len(token) == 2:
        return 2000 + int(token)
    if len(token) == 4:
        return int(token)
    return None


def _from_parts(parts: List[str]) -> Optional[datetime]:
    if len(parts[0]) == 4 and parts[0].isdigit():
        if len(parts) < 3:
            return None
        year, month, day = int(parts[0]), _to_month(parts[1]), _to_int(parts[2])
    else:
        day, month = _to_int(parts[0]), _to_month(parts[1])
        year = _to_year(parts[2]) if len(parts) >= 3 else date.today().year

    if year is None or month is None or day is None:
        return None
    try:
        return datetime(year, month, day, MIDDAY)
    except ValueError:
        return None


def parse_date(value) -> Optional[datetime]:
    """Resolve a cell or text token to a calendar date at midday.

    Accepts datetime/date objects, spreadsheet serial day counts and
    strings in year-first (``YYYY-MM-DD``) or day-first (``DD/MM/YYYY``,
    ``DD-Mon-YY``) order. Two-digit years land in the 2000s; a string
    with only day and month uses the current year.
    """
    if is_missing(value) or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _at_midday(value)
    if isinstance(value, date):
        return _at_midday(value)

    if isinstance(value, (numbers.Real, Decimal)):
        serial = int(value)
        if serial <= 0:
            return None
        try:
            return _at_midday(EXCEL_EPOCH + timedelta(days=serial))
        except OverflowError:
            return None

    text = str(value).strip()
    if not text:
        return None

    parts = [p for p in _DATE_SEPARATORS.split(text) if p]
    if len(parts) >= 2:
        parsed = _from_parts(parts)
        if parsed:
            return parsed

    for fmt in DATE_FORMATS:
        try:
            return _at_midday(datetime.strptime(text, fmt))
        except ValueError:
            continue

    return None


def parse_amount(value) -> Decimal:
    """Parse an amount cell into a non-negative magnitude.

    Currency symbols, codes, thousands separators (including lakh
    grouping) and trailing Dr/Cr markers are ignored. Returns zero when
    nothing numeric is present.
    """
    if is_missing(value) or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, numbers.Real):
        if math.isinf(value):
            return ZERO
        number = Decimal(str(value))
    else:
        match = _NUMBER_IN_TEXT.search(str(value).replace(",", ""))
        if not match:
            return ZERO
        try:
            number = Decimal(match.group())
        except InvalidOperation:
            return ZERO

    return abs(number).quantize(CENTS, rounding=ROUND_HALF_UP)


def clean_description(text) -> str:
    """Strip direction jargon and stray numbers from a description."""
    if is_missing(text):
        return PLACEHOLDER_DESCRIPTION

    cleaned = _JARGON_TOKENS.sub("", str(text))
    cleaned = _DECIMAL_FRAGMENT.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = _EDGE_PUNCTUATION.sub("", cleaned).strip()

    return cleaned or PLACEHOLDER_DESCRIPTION
