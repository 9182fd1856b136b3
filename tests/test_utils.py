"""Tests for date, decimal and sanitize utilities."""

from datetime import date
from decimal import Decimal

import pytest

from bank_reconciler.utils.date_utils import date_to_iso, day_distance, parse_statement_date
from bank_reconciler.utils.decimal_utils import (
    format_currency,
    parse_amount,
    parse_signed_amount,
    round_cents,
    safe_decimal,
)
from bank_reconciler.utils.sanitize import sanitize_cell


class TestParseStatementDate:
    """Tests for parse_statement_date."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-01-15", date(2024, 1, 15)),
            ("2024-01-15T10:30:00", date(2024, 1, 15)),
            ("2024-01-15T10:30:00Z", date(2024, 1, 15)),
            ("01/15/2024", date(2024, 1, 15)),
            ("15/01/2024", date(2024, 1, 15)),
            ("2024-1-5", date(2024, 1, 5)),
            ("posted 2024-01-05 ref 12", date(2024, 1, 5)),
            ("15.01.2024", date(2024, 1, 15)),
            ("15-Jan-2024", date(2024, 1, 15)),
            ("Jan 15, 2024", date(2024, 1, 15)),
            ("January 15 2024", date(2024, 1, 15)),
            ("20240115", date(2024, 1, 15)),
        ],
    )
    def test_supported_formats(self, raw: str, expected: date) -> None:
        """Test every supported date layout."""
        assert parse_statement_date(raw) == expected

    def test_ambiguous_slash_date_is_month_first(self) -> None:
        """Test that 03/04/2024 reads as March 4."""
        assert parse_statement_date("03/04/2024") == date(2024, 3, 4)

    def test_first_component_above_twelve_is_day_first(self) -> None:
        """Test that 13/04/2024 reads as April 13."""
        assert parse_statement_date("13/04/2024") == date(2024, 4, 13)

    @pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "99/99/2024"])
    def test_unparseable_returns_none(self, raw: str | None) -> None:
        """Test that unparseable input yields None instead of raising."""
        assert parse_statement_date(raw) is None


class TestDateHelpers:
    """Tests for day_distance and date_to_iso."""

    def test_day_distance_is_absolute(self) -> None:
        assert day_distance(date(2024, 1, 1), date(2024, 1, 11)) == 10
        assert day_distance(date(2024, 1, 11), date(2024, 1, 1)) == 10

    def test_day_distance_missing_date(self) -> None:
        assert day_distance(None, date(2024, 1, 1)) is None

    def test_date_to_iso(self) -> None:
        assert date_to_iso(date(2024, 2, 1)) == "2024-02-01"
        assert date_to_iso(None) == ""


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "raw, expected_amount, expected_withdrawal",
        [
            ("1200", Decimal("1200"), False),
            ("-500.00", Decimal("500.00"), True),
            ("500.00-", Decimal("500.00"), True),
            ("(45.00)", Decimal("45.00"), True),
            ("($1,234.56)", Decimal("1234.56"), True),
            ("45.00 DR", Decimal("45.00"), True),
            ("$1,234.56", Decimal("1234.56"), False),
            ("+20.00", Decimal("20.00"), False),
        ],
    )
    def test_sign_conventions(
        self, raw: str, expected_amount: Decimal, expected_withdrawal: bool
    ) -> None:
        """Test minus, parentheses and DR withdrawal markers."""
        amount, is_withdrawal = parse_amount(raw)
        assert amount == expected_amount
        assert is_withdrawal is expected_withdrawal

    @pytest.mark.parametrize("raw", [None, "", "abc", "--", "1.2.3"])
    def test_unparseable_amount_is_zero_deposit(self, raw: str | None) -> None:
        """Test that unparseable amounts become zero rather than raising."""
        assert parse_amount(raw) == (Decimal("0"), False)

    def test_negative_zero_is_deposit(self) -> None:
        assert parse_amount("-0.00") == (Decimal("0"), False)

    def test_parse_signed_amount(self) -> None:
        assert parse_signed_amount("-20.50") == Decimal("-20.50")
        assert parse_signed_amount("1,000") == Decimal("1000")


class TestDecimalHelpers:
    """Tests for safe_decimal, round_cents and format_currency."""

    def test_safe_decimal(self) -> None:
        assert safe_decimal("12.50") == Decimal("12.50")
        assert safe_decimal(3) == Decimal("3")
        assert safe_decimal(None) == Decimal("0")
        assert safe_decimal("junk", default=Decimal("-1")) == Decimal("-1")
        assert safe_decimal(True) == Decimal("0")

    def test_round_cents_half_up(self) -> None:
        assert round_cents(Decimal("10.005")) == Decimal("10.01")
        assert round_cents(Decimal("10.004")) == Decimal("10.00")

    def test_format_currency(self) -> None:
        assert format_currency(Decimal("1234.5")) == "1234.50"
        assert format_currency(None) == ""


class TestSanitizeCell:
    """Tests for sanitize_cell."""

    @pytest.mark.parametrize("raw", ["=SUM(A1)", "+1", "-2", "@cmd", "|pipe"])
    def test_formula_prefixes_are_escaped(self, raw: str) -> None:
        assert sanitize_cell(raw) == "'" + raw

    def test_plain_text_unchanged(self) -> None:
        assert sanitize_cell("Coffee, Inc") == "Coffee, Inc"

    def test_none_is_empty(self) -> None:
        assert sanitize_cell(None) == ""
