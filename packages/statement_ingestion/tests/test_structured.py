from datetime import datetime
from decimal import Decimal

import pytest

from packages.statement_ingestion.models import (
    Category,
    PaymentMethod,
    RawLabel,
    TransactionType,
)
from packages.statement_ingestion.schema import ColumnMap, map_columns
from packages.statement_ingestion.structured import (
    can_extract,
    extract_from_rows,
    is_month_sheet,
    select_strategy,
)

SPLIT_HEADER = ["Date", "Narration", "Chq./Ref.No.", "Value Dt", "Withdrawal Amt.", "Deposit Amt.", "Closing Balance"]


@pytest.fixture
def split_columns():
    return map_columns(SPLIT_HEADER)


class TestStrategySelection:
    @pytest.mark.parametrize(
        "columns, expected",
        [
            (ColumnMap(date=0, debit=3, credit=4), "split_columns"),
            (ColumnMap(date=0, credit=4), "split_columns"),
            (ColumnMap(date=0, amount=2, direction=3), "amount_with_direction"),
            (ColumnMap(date=0, amount=2), "amount_with_marker"),
        ],
    )
    def test_first_applicable_strategy_wins(self, columns, expected):
        assert select_strategy(columns).name == expected

    def test_no_amount_columns(self):
        assert select_strategy(ColumnMap(date=0, description=1)) is None

    @pytest.mark.parametrize(
        "columns, expected",
        [
            (ColumnMap(date=0, amount=2), True),
            (ColumnMap(date=0, debit=3), True),
            (ColumnMap(date=0, description=1), False),
            (ColumnMap(description=1, amount=2), False),
        ],
    )
    def test_can_extract_needs_date_and_amount_source(self, columns, expected):
        assert can_extract(columns) is expected

    def test_month_sheet_needs_month_date_and_amount(self):
        assert is_month_sheet(ColumnMap(month=0, date=1, amount=3))
        assert not is_month_sheet(ColumnMap(date=1, amount=3))


class TestSplitColumns:
    def test_debit_row_is_expense(self, split_columns):
        rows = [["01/04/2024", "UPI/SWIGGY/4411", "", "01/04/24", "2500.00", "", "10000.00"]]
        [txn] = extract_from_rows(rows, split_columns)
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == Decimal("2500.00")
        assert txn.date == datetime(2024, 4, 1, 12)
        assert txn.category == Category.FOOD
        assert txn.payment_method == PaymentMethod.UPI

    def test_credit_row_is_income(self, split_columns):
        rows = [["02/04/2024", "NEFT SALARY ACME", "", "", "0", "50000", "60000.00"]]
        [txn] = extract_from_rows(rows, split_columns)
        assert txn.type == TransactionType.INCOME
        assert txn.amount == Decimal("50000.00")
        assert txn.category == Category.SALARY
        assert txn.payment_method == PaymentMethod.NEFT

    def test_nonzero_debit_wins_over_credit(self, split_columns):
        rows = [["03/04/2024", "Adjustment", "", "", "100", "50", "0"]]
        [txn] = extract_from_rows(rows, split_columns)
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == Decimal("100.00")

    def test_zero_rows_are_skipped(self, split_columns):
        rows = [["04/04/2024", "Balance carried", "", "", "0.00", "0.00", "60000"]]
        assert extract_from_rows(rows, split_columns) == []

    def test_rows_without_valid_date_are_skipped(self, split_columns):
        rows = [
            ["", "Opening Balance", "", "", "", "", "10000"],
            ["TOTAL", "", "", "", "2500", "50000", ""],
            ["05/04/2024", "Coffee Day", "", "", "120", "", "9880"],
        ]
        transactions = extract_from_rows(rows, split_columns)
        assert len(transactions) == 1
        assert transactions[0].description == "Coffee Day"

    def test_short_rows_do_not_abort_the_batch(self, split_columns):
        rows = [["06/04/2024"], ["07/04/2024", "UBER TRIP", "", "", "310.50"]]
        [txn] = extract_from_rows(rows, split_columns)
        assert txn.amount == Decimal("310.50")
        assert txn.category == Category.TRANSPORT


class TestSingleAmount:
    def test_direction_column(self):
        columns = ColumnMap(date=0, description=1, amount=2, direction=3)
        rows = [
            ["10/04/2024", "Salary Credit", "50000", "Income"],
            ["11/04/2024", "Groceries", "820", "Expense"],
            ["12/04/2024", "Refund", "99", "CR"],
        ]
        transactions = extract_from_rows(rows, columns)
        assert [t.type for t in transactions] == [
            TransactionType.INCOME,
            TransactionType.EXPENSE,
            TransactionType.INCOME,
        ]
        assert transactions[0].description == "Salary"

    def test_marker_embedded_in_amount_cell(self):
        columns = ColumnMap(date=0, description=1, amount=2)
        rows = [
            ["05/04/2024", "Refund AMAZON", "1,200.00 Cr"],
            ["06/04/2024", "Flipkart", "799.00"],
            ["07/04/2024", "Book store", "-450.00"],
        ]
        transactions = extract_from_rows(rows, columns)
        assert [(t.type, t.amount) for t in transactions] == [
            (TransactionType.INCOME, Decimal("1200.00")),
            (TransactionType.EXPENSE, Decimal("799.00")),
            (TransactionType.EXPENSE, Decimal("450.00")),
        ]

    def test_missing_description_uses_placeholder(self):
        columns = ColumnMap(date=0, amount=1)
        [txn] = extract_from_rows([["05/04/2024", "10"]], columns)
        assert txn.description == "Transaction"

    def test_category_and_payment_hint_columns(self):
        columns = ColumnMap(date=0, description=1, amount=2, category=3, payment=4)
        rows = [["2024-03-10", "Weekly shop", "2000", "Groceries", "Wallet"]]
        [txn] = extract_from_rows(rows, columns)
        assert txn.category == Category.SHOPPING
        assert txn.payment_method == RawLabel("Wallet")


def test_no_date_column_yields_nothing():
    columns = ColumnMap(description=0, amount=1)
    assert extract_from_rows([["Coffee", "10"]], columns) == []


def test_no_amount_column_yields_nothing():
    columns = ColumnMap(date=0, description=1)
    assert extract_from_rows([["05/04/2024", "Coffee"]], columns) == []


class TestMonthSheet:
    COLUMNS = ColumnMap(month=0, date=1, description=2, amount=3, category=4, payment=5)

    def test_day_of_month_combines_with_month_label(self):
        rows = [["Mar'24", 5, "Groceries DMart", 1500, "Groceries", "UPI"]]
        [txn] = extract_from_rows(rows, self.COLUMNS)
        assert txn.date == datetime(2024, 3, 5, 12)
        assert txn.amount == Decimal("1500.00")
        assert txn.type == TransactionType.EXPENSE
        assert txn.category == Category.SHOPPING
        assert txn.payment_method == PaymentMethod.UPI

    def test_full_month_names_and_text_days(self):
        rows = [["March 2024", "31", "Dinner", "900", "Food", "Card"]]
        [txn] = extract_from_rows(rows, self.COLUMNS)
        assert txn.date == datetime(2024, 3, 31, 12)
        assert txn.category == Category.FOOD
        assert txn.payment_method == PaymentMethod.CARD

    def test_date_typed_month_cell(self):
        rows = [[datetime(2024, 3, 1), 5, "Groceries DMart", 1500, "Groceries", "UPI"]]
        [txn] = extract_from_rows(rows, self.COLUMNS)
        assert txn.date == datetime(2024, 3, 5, 12)
        assert txn.amount == Decimal("1500.00")

    def test_invalid_day_is_skipped(self):
        rows = [["Feb'24", 30, "Impossible", 100, "", ""]]
        assert extract_from_rows(rows, self.COLUMNS) == []

    def test_full_date_in_day_column(self):
        rows = [["Apr'24", datetime(2024, 4, 9, 8, 30), "Movie", 350, "", ""]]
        [txn] = extract_from_rows(rows, self.COLUMNS)
        assert txn.date == datetime(2024, 4, 9, 12)
        assert txn.category == Category.ENTERTAINMENT

    def test_missing_description_defaults_to_expense(self):
        rows = [["Mar'24", 2, None, 40, None, None]]
        [txn] = extract_from_rows(rows, self.COLUMNS)
        assert txn.description == "Expense"
