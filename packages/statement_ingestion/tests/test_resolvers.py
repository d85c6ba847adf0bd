from datetime import date, datetime
from decimal import Decimal

import pytest

from packages.statement_ingestion.resolvers import (
    clean_description,
    parse_amount,
    parse_date,
)


class TestParseDate:
    def test_day_first_slash_date(self):
        parsed = parse_date("29/10/2024")
        assert (parsed.year, parsed.month, parsed.day) == (2024, 10, 29)

    def test_result_is_pinned_to_midday(self):
        assert parse_date("29/10/2024") == datetime(2024, 10, 29, 12)

    def test_year_first_iso_date(self):
        assert parse_date("2024-03-01") == datetime(2024, 3, 1, 12)

    def test_month_name_and_two_digit_year(self):
        assert parse_date("01-Mar-24") == datetime(2024, 3, 1, 12)

    def test_two_digit_year_lands_in_2000s(self):
        assert parse_date("15.08.24").year == 2024

    def test_spreadsheet_serial(self):
        parsed = parse_date(45000)
        assert parsed == datetime(2023, 3, 15, 12)

    def test_day_and_month_only_uses_current_year(self):
        parsed = parse_date("15/08")
        assert (parsed.month, parsed.day) == (8, 15)
        assert parsed.year == date.today().year

    def test_datetime_cell_keeps_calendar_day(self):
        assert parse_date(datetime(2024, 1, 2, 23, 59)) == datetime(2024, 1, 2, 12)

    def test_date_cell(self):
        assert parse_date(date(2024, 1, 2)) == datetime(2024, 1, 2, 12)

    def test_long_form_falls_back_to_strptime(self):
        assert parse_date("March 5, 2024") == datetime(2024, 3, 5, 12)

    @pytest.mark.parametrize(
        "value",
        [None, "", "not a date", "31/02/2024", 0, -5, True, float("nan")],
    )
    def test_unparseable_values_resolve_to_none(self, value):
        assert parse_date(value) is None


class TestParseAmount:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1,234.50", Decimal("1234.50")),
            ("500", Decimal("500.00")),
            ("0.99", Decimal("0.99")),
            ("₹ 1,23,456.78", Decimal("123456.78")),
            ("INR 299.00", Decimal("299.00")),
            ("450.00 Dr", Decimal("450.00")),
            ("-250.00", Decimal("250.00")),
            (2500.0, Decimal("2500.00")),
            (1500, Decimal("1500.00")),
        ],
    )
    def test_parses_magnitude(self, raw, expected):
        assert parse_amount(raw) == expected

    def test_rounds_to_cents(self):
        assert parse_amount("10.125") == Decimal("10.13")

    @pytest.mark.parametrize("raw", [None, "", "abc", float("nan"), float("inf")])
    def test_non_numeric_is_zero(self, raw):
        assert parse_amount(raw) == Decimal("0")


class TestCleanDescription:
    def test_strips_direction_markers(self):
        assert clean_description("UPI/SWIGGY/123 Dr") == "UPI/SWIGGY/123"

    def test_strips_jargon_words(self):
        assert clean_description("Salary Credit") == "Salary"

    def test_strips_decimal_fragments(self):
        assert clean_description("NEFT CR 50000.00 ACME") == "NEFT ACME"

    def test_trims_edge_punctuation(self):
        assert clean_description("-- Coffee --") == "Coffee"

    def test_jargon_inside_words_is_kept(self):
        assert clean_description("Crossword Books") == "Crossword Books"

    @pytest.mark.parametrize("raw", [None, "", "   ", "Cr 12.50", "Ref No"])
    def test_empty_result_uses_placeholder(self, raw):
        assert clean_description(raw) == "Transaction"
