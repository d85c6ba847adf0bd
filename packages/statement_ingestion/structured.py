"""Turn schema-mapped spreadsheet rows into transactions.

Amount and direction are resolved by an ordered strategy table; the
first strategy whose precondition holds for the mapped columns decides
every row of the sheet. A row that cannot produce a valid date and a
positive amount is dropped without aborting the batch.
"""

import numbers
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence, Tuple

import structlog

from .classifiers import resolve_category, resolve_payment_method
from .models import Transaction, TransactionType
from .resolvers import (
    MIDDAY,
    MONTHS,
    PLACEHOLDER_DESCRIPTION,
    ZERO,
    clean_description,
    is_missing,
    parse_amount,
    parse_date,
)
from .schema import ColumnMap

logger = structlog.get_logger()

CREDIT_MARKERS = re.compile(r"cr|income|deposit|refund")

_MONTH_LABEL = re.compile(r"([a-zA-Z]{3})[a-zA-Z]*[' \-]*(\d{2,4})")

Resolution = Optional[Tuple[Decimal, TransactionType]]


def _cell(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _text(value: Any) -> str:
    return "" if is_missing(value) else str(value).strip()


def _split_columns(row: Sequence[Any], columns: ColumnMap) -> Resolution:
    debit = parse_amount(_cell(row, columns.debit))
    if debit > ZERO:
        return debit, TransactionType.EXPENSE
    credit = parse_amount(_cell(row, columns.credit))
    if credit > ZERO:
        return credit, TransactionType.INCOME
    return None


def _amount_with_direction(row: Sequence[Any], columns: ColumnMap) -> Resolution:
    amount = parse_amount(_cell(row, columns.amount))
    marker = _text(_cell(row, columns.direction)).lower()
    if CREDIT_MARKERS.search(marker):
        return amount, TransactionType.INCOME
    return amount, TransactionType.EXPENSE


def _amount_with_marker(row: Sequence[Any], columns: ColumnMap) -> Resolution:
    raw = _cell(row, columns.amount)
    amount = parse_amount(raw)
    if CREDIT_MARKERS.search(_text(raw).lower()):
        return amount, TransactionType.INCOME
    return amount, TransactionType.EXPENSE


@dataclass(frozen=True)
class AmountStrategy:
    """One entry of the amount/direction decision table."""

    name: str
    applies: Callable[[ColumnMap], bool]
    resolve: Callable[[Sequence[Any], ColumnMap], Resolution]


AMOUNT_STRATEGIES = (
    # Separate debit/credit columns (HDFC, SBI, ICICI). Nonzero debit wins.
    AmountStrategy(
        "split_columns",
        lambda c: c.debit is not None or c.credit is not None,
        _split_columns,
    ),
    # Single amount plus a Dr/Cr or Income/Expense column (Kotak, app exports).
    AmountStrategy(
        "amount_with_direction",
        lambda c: c.amount is not None and c.direction is not None,
        _amount_with_direction,
    ),
    # Single amount whose cell may carry its own "Cr" suffix; expense otherwise.
    AmountStrategy(
        "amount_with_marker",
        lambda c: c.amount is not None,
        _amount_with_marker,
    ),
)


def select_strategy(columns: ColumnMap) -> Optional[AmountStrategy]:
    for strategy in AMOUNT_STRATEGIES:
        if strategy.applies(columns):
            return strategy
    return None


def can_extract(columns: ColumnMap) -> bool:
    """A date column plus at least one amount source (amount, debit or credit)."""
    return columns.date is not None and select_strategy(columns) is not None


def is_month_sheet(columns: ColumnMap) -> bool:
    """Personal expense sheets: a Month column plus day-of-month dates."""
    return columns.month is not None and columns.date is not None and columns.amount is not None


def _month_of(month_value: Any) -> Optional[Tuple[int, Optional[int]]]:
    """(year, month) from a "Mar'24" label or a date-typed Month cell."""
    if is_missing(month_value):
        return None
    if isinstance(month_value, date):
        return month_value.year, month_value.month
    match = _MONTH_LABEL.search(_text(month_value))
    if not match:
        return None
    year = int(match.group(2))
    if year < 100:
        year += 2000
    return year, MONTHS.get(match.group(1).lower())


def _month_sheet_date(month_value: Any, day_value: Any) -> Optional[datetime]:
    resolved = _month_of(month_value)
    if resolved is None:
        return None
    year, month = resolved

    if is_missing(day_value):
        return None
    if isinstance(day_value, datetime):
        return parse_date(day_value)
    day_text = _text(day_value)
    if isinstance(day_value, numbers.Real):
        day_text = str(int(day_value))
    if not day_text.isdigit():
        return parse_date(day_value)

    if month is None:
        return None
    try:
        return datetime(year, month, int(day_text), MIDDAY)
    except ValueError:
        return None


def _build(
    row: Sequence[Any],
    columns: ColumnMap,
    when: datetime,
    amount: Decimal,
    direction: TransactionType,
    fallback_description: str,
) -> Transaction:
    raw_description = _text(_cell(row, columns.description)) if columns.description is not None else ""
    raw_description = raw_description or fallback_description
    return Transaction(
        date=when,
        amount=amount,
        description=clean_description(raw_description),
        type=direction,
        category=resolve_category(raw_description, _cell(row, columns.category)),
        payment_method=resolve_payment_method(raw_description, _cell(row, columns.payment)),
    )


def _month_sheet_row(row: Sequence[Any], columns: ColumnMap) -> Optional[Transaction]:
    when = _month_sheet_date(_cell(row, columns.month), _cell(row, columns.date))
    if when is None:
        return None
    amount = parse_amount(_cell(row, columns.amount))
    if amount <= ZERO:
        return None
    return _build(row, columns, when, amount, TransactionType.EXPENSE, "Expense")


def _statement_row(
    row: Sequence[Any], columns: ColumnMap, strategy: AmountStrategy
) -> Optional[Transaction]:
    when = parse_date(_cell(row, columns.date))
    if when is None:
        return None
    resolved = strategy.resolve(row, columns)
    if resolved is None:
        return None
    amount, direction = resolved
    if amount <= ZERO:
        return None
    return _build(row, columns, when, amount, direction, PLACEHOLDER_DESCRIPTION)


def extract_from_rows(rows: Sequence[Sequence[Any]], columns: ColumnMap) -> List[Transaction]:
    """Extract transactions from the data rows below a detected header."""
    if columns.date is None:
        logger.info("structured_no_date_column")
        return []

    if is_month_sheet(columns):
        strategy_name = "month_sheet"
        handler = _month_sheet_row
    else:
        strategy = select_strategy(columns)
        if strategy is None:
            logger.info("structured_no_amount_column")
            return []
        strategy_name = strategy.name

        def handler(row, cols):
            return _statement_row(row, cols, strategy)

    transactions: List[Transaction] = []
    skipped = 0
    for index, row in enumerate(rows):
        try:
            txn = handler(row, columns)
        except Exception as e:
            logger.debug("row_parse_failed", row=index, error=str(e))
            txn = None
        if txn is None:
            skipped += 1
            continue
        transactions.append(txn)

    logger.info(
        "structured_rows_extracted",
        strategy=strategy_name,
        extracted=len(transactions),
        skipped=skipped,
    )
    return transactions
