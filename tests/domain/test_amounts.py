"""Tests for spendflow.domain.amounts pure functions."""

from decimal import Decimal

import pytest

from spendflow.domain.amounts import (
    MAX_TRANSACTION_AMOUNT,
    format_money,
    from_minor_units,
    parse_amount,
    round_money,
    to_minor_units,
    validate_amount,
)
from spendflow.domain.models import Money
from spendflow.domain.results import ErrorKind, Rejection


class TestParseAmount:
    """Tests for parse_amount."""

    def test_parses_formatted_currency_string(self) -> None:
        """Should strip the symbol and thousands separator."""
        assert parse_amount("£1,234.56") == Decimal("1234.56")

    def test_parses_negative_formatted_string(self) -> None:
        """Should keep a leading minus sign."""
        assert parse_amount("-£12.50") == Decimal("-12.50")

    def test_parses_plain_numbers(self) -> None:
        """Should accept ints and floats without float artifacts."""
        assert parse_amount(50) == Decimal("50")
        assert parse_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, "", "abc", "£", "-"])
    def test_unparseable_is_zero(self, value: str | None) -> None:
        """Should return 0 for empty or non-numeric input."""
        assert parse_amount(value) == 0

    def test_non_finite_float_is_zero(self) -> None:
        """Should return 0 for NaN and infinity."""
        assert parse_amount(float("nan")) == 0
        assert parse_amount(float("inf")) == 0

    def test_takes_leading_number_only(self) -> None:
        """Should stop at the first character that can't continue the number."""
        assert parse_amount("1.2.3") == Decimal("1.2")
        assert parse_amount("12-5") == Decimal("12")

    def test_idempotent(self) -> None:
        """Parsing an already-parsed amount should not change it."""
        once = parse_amount("£1,234.56")
        assert parse_amount(once) == once
        assert parse_amount(once) is once


class TestMinorUnits:
    """Tests for to_minor_units and from_minor_units."""

    def test_converts_to_pence(self) -> None:
        """Should convert major units to integer pence."""
        assert to_minor_units(Money(Decimal("12.34"))) == 1234

    def test_rounds_half_up(self) -> None:
        """Should round half a penny up."""
        assert to_minor_units(Money(Decimal("0.005"))) == 1

    def test_converts_back_from_pence(self) -> None:
        """Should convert pence to major units."""
        assert from_minor_units(1234) == Decimal("12.34")

    def test_none_is_zero(self) -> None:
        """Should treat a missing column as 0."""
        assert from_minor_units(None) == 0


class TestRoundMoney:
    """Tests for round_money."""

    def test_rounds_half_up_to_pence(self) -> None:
        """Half a penny should round up and anything less down."""
        assert round_money(Money(Decimal("0.005"))) == Decimal("0.01")
        assert round_money(Money(Decimal("0.004"))) == Decimal("0.00")
        assert round_money(Money(Decimal("12.345"))) == Decimal("12.35")

    def test_handles_very_large_amounts(self) -> None:
        """Amounts beyond the default decimal precision should still round."""
        huge = Money(Decimal("9" * 40 + ".995"))

        assert round_money(huge) == Decimal("1" + "0" * 40)


class TestFormatMoney:
    """Tests for format_money."""

    def test_formats_with_thousands_separator(self) -> None:
        """Should format with symbol, separator and two decimals."""
        assert format_money(Money(Decimal("1234.5"))) == "£1,234.50"

    def test_formats_negative_with_leading_minus(self) -> None:
        """Should put the sign before the symbol."""
        assert format_money(Money(Decimal("-12.5"))) == "-£12.50"

    def test_include_sign_for_positive(self) -> None:
        """Should prefix positive amounts with + when asked."""
        assert format_money(Money(Decimal("5")), include_sign=True) == "+£5.00"

    def test_zero_has_no_sign(self) -> None:
        """Should never sign zero."""
        assert format_money(Money(Decimal("0")), include_sign=True) == "£0.00"

    def test_custom_symbol(self) -> None:
        """Should use the given currency symbol."""
        assert format_money(Money(Decimal("10")), "$") == "$10.00"


class TestValidateAmount:
    """Tests for validate_amount."""

    def test_accepts_positive_amount(self) -> None:
        """Should approve and carry the parsed amount."""
        result = validate_amount("£25.00")

        assert result.valid
        assert result.amount == Decimal("25")

    @pytest.mark.parametrize("value", ["0", "-5", "", None, "abc"])
    def test_rejects_non_positive(self, value: str | None) -> None:
        """Should reject anything that parses to zero or less."""
        result = validate_amount(value)

        assert not result.valid
        assert result.error is ErrorKind.INVALID_AMOUNT
        assert result.title == "Invalid Amount"

    def test_rejects_above_ceiling(self) -> None:
        """Should reject amounts above the global maximum."""
        result = validate_amount("1000000.01")

        assert not result.valid
        assert result.error is ErrorKind.AMOUNT_TOO_LARGE
        assert result.parsed == Decimal("1000000.01")

    def test_accepts_exactly_the_ceiling(self) -> None:
        """The maximum itself is allowed."""
        result = validate_amount(MAX_TRANSACTION_AMOUNT)

        assert result.valid

    def test_rounds_accepted_amount_to_pence(self) -> None:
        """The approved amount should be what gets stored, rounded half up."""
        result = validate_amount("0.005")

        assert result.valid
        assert result.amount == Decimal("0.01")

    def test_rejects_amount_that_rounds_to_zero(self) -> None:
        """Less than half a penny is not a valid amount."""
        result = validate_amount("0.004")

        assert isinstance(result, Rejection)
        assert result.error is ErrorKind.INVALID_AMOUNT
        assert result.parsed == Decimal("0.00")

    def test_ceiling_applies_before_rounding(self) -> None:
        """An entered amount a fraction over the ceiling is still too large."""
        result = validate_amount("1000000.001")

        assert isinstance(result, Rejection)
        assert result.error is ErrorKind.AMOUNT_TOO_LARGE

    def test_rejects_very_long_numbers(self) -> None:
        """A number with more digits than the decimal precision should be too large, not crash."""
        result = validate_amount("9" * 40)

        assert isinstance(result, Rejection)
        assert result.error is ErrorKind.AMOUNT_TOO_LARGE

    def test_message_uses_currency_symbol(self) -> None:
        """The ceiling should be shown in the session currency."""
        result = validate_amount("2000000", "$")

        assert isinstance(result, Rejection)
        assert "$1,000,000.00" in result.message
        assert "£" not in result.message
