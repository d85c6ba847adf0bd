"""Heuristic transaction extraction from plain statement text.

Used for PDFs and for spreadsheets without a recognisable header. Each
line is anchored on a date; the remaining numbers are disambiguated into
serial number, reference number, transaction amount and running
balance. Lines that do not fit are dropped silently.

Typical layouts this is tuned for:

    12 29/10/2024 UPI/SWIGGY/123 450.00 Dr 12,000.00 Cr
    01-Nov-2024 NEFT SALARY ACME 50,000.00 62,000.00
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

import structlog

from .classifiers import resolve_category, resolve_payment_method
from .config import IngestionSettings, get_settings
from .models import Transaction, TransactionType
from .resolvers import ZERO, clean_description, parse_date

logger = structlog.get_logger()

DATE_TOKEN = re.compile(
    r"\b(\d{1,2}[-/.](?:\d{1,2}|[A-Za-z]{3})[-/.]\d{2,4}|\d{4}[-/.]\d{1,2}[-/.]\d{1,2})\b"
)

# Optional thousands separators (western or lakh grouping), 1-2 decimals.
# Digits glued to letters, clock times or reference ids such as
# UPI/SWIGGY/123 and IMPS-4411-X are not amounts; "-450.00" still is.
AMOUNT_TOKEN = re.compile(
    r"(?<![\d,:/])(?<!\d\.)(?<![A-Za-z_])(?<![A-Za-z0-9_]-)"
    r"(?:\d{1,3}(?:,\d{2,3})+|\d+)(?:\.\d{1,2})?"
    r"(?![\d/]|[.,:]\d|-\w)"
)

_TABLE_HEADER = re.compile(r"balance|withdrawal|deposit|debit|description")
_PROXIMITY_MARKER = re.compile(r"\b(dr|debit|cr|credit)\b")
_DEBIT_WORDS = re.compile(r"\b(?:withdrawals?|debit(?:ed)?)\b")
_CREDIT_WORDS = re.compile(r"\b(?:credit(?:ed)?|deposits?)\b")


@dataclass(frozen=True)
class AmountCandidate:
    text: str
    value: Decimal
    start: int
    end: int

    @property
    def is_integer(self) -> bool:
        return "." not in self.text


@dataclass(frozen=True)
class CandidateRule:
    """Drops the leading candidate when its predicate holds and others remain."""

    name: str
    drops_leading: Callable[[AmountCandidate, IngestionSettings], bool]


CANDIDATE_RULES = (
    # "12 29/10/2024 ..." - a small bare integer first is a serial/line number
    CandidateRule(
        "serial_number",
        lambda c, s: c.is_integer and c.value <= s.SERIAL_NUMBER_MAX,
    ),
    # "... 000123456 450.00 12,000.00" - a large bare integer first is a cheque/ref number
    CandidateRule(
        "reference_number",
        lambda c, s: c.is_integer and c.value > s.REFERENCE_NUMBER_MIN,
    ),
)


def find_body_start(lines: Sequence[str], scan_limit: int = 100) -> int:
    """Index of the first line after a table header, or 0 if none is found."""
    for index, line in enumerate(lines[:scan_limit]):
        lower = line.lower()
        if "date" in lower and _TABLE_HEADER.search(lower):
            return index + 1
    return 0


def find_amount_candidates(
    line: str, settings: Optional[IngestionSettings] = None
) -> List[AmountCandidate]:
    """Currency-shaped numbers on a line, minus zeros and year-like integers."""
    settings = settings or get_settings()
    candidates = []
    for match in AMOUNT_TOKEN.finditer(line):
        text = match.group()
        value = Decimal(text.replace(",", ""))
        candidate = AmountCandidate(text, value, match.start(), match.end())
        if value == ZERO:
            continue
        if candidate.is_integer and settings.YEAR_MIN <= value <= settings.YEAR_MAX:
            continue
        candidates.append(candidate)
    return candidates


def choose_amount(
    candidates: Sequence[AmountCandidate], settings: Optional[IngestionSettings] = None
) -> Optional[AmountCandidate]:
    """Pick the transaction amount; anything after it is running balance."""
    settings = settings or get_settings()
    remaining = list(candidates)
    for rule in CANDIDATE_RULES:
        if len(remaining) > 1 and rule.drops_leading(remaining[0], settings):
            remaining = remaining[1:]
    return remaining[0] if remaining else None


def infer_direction(line: str, amount_end: int, window: int = 15) -> TransactionType:
    """Dr/Cr right after the amount wins; otherwise whole-line keywords."""
    lower = line.lower()
    marker = _PROXIMITY_MARKER.search(lower[amount_end : amount_end + window])
    if marker:
        if marker.group(1).startswith("c"):
            return TransactionType.INCOME
        return TransactionType.EXPENSE

    if _DEBIT_WORDS.search(lower):
        return TransactionType.EXPENSE
    if _CREDIT_WORDS.search(lower):
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def _blank(line: str, start: int, end: int) -> str:
    # Same-length blanking keeps every later offset valid
    return line[:start] + " " * (end - start) + line[end:]


def parse_line(line: str, settings: Optional[IngestionSettings] = None) -> Optional[Transaction]:
    """A transaction from one text line, or ``None`` if the line does not fit."""
    settings = settings or get_settings()

    date_match = DATE_TOKEN.search(line)
    if not date_match:
        return None
    when = parse_date(date_match.group())
    if when is None:
        return None

    body = _blank(line, date_match.start(), date_match.end())
    candidates = find_amount_candidates(body, settings)
    chosen = choose_amount(candidates, settings)
    if chosen is None or chosen.value <= ZERO:
        return None

    direction = infer_direction(line, chosen.end, settings.MARKER_WINDOW)

    for candidate in candidates:
        body = _blank(body, candidate.start, candidate.end)
    raw_description = re.sub(r"\s+", " ", body).strip()

    return Transaction(
        date=when,
        amount=chosen.value,
        description=clean_description(raw_description),
        type=direction,
        category=resolve_category(raw_description),
        payment_method=resolve_payment_method(raw_description),
    )


def extract_from_text(text: str, settings: Optional[IngestionSettings] = None) -> List[Transaction]:
    """Extract transactions from reconstructed or row-joined text."""
    settings = settings or get_settings()
    lines = text.split("\n")
    start = find_body_start(lines, settings.HEADER_SCAN_ROWS)
    if start:
        logger.debug("text_header_detected", line=start - 1)

    transactions: List[Transaction] = []
    for line in lines[start:]:
        line = line.strip()
        if not line:
            continue
        txn = parse_line(line, settings)
        if txn is not None:
            transactions.append(txn)

    logger.info("free_text_extracted", lines=len(lines) - start, extracted=len(transactions))
    return transactions
