"""Tests for spendflow.domain.funds pure functions."""

from decimal import Decimal

import pytest

from spendflow.domain.cards import Card, CardType
from spendflow.domain.funds import (
    available_credit,
    available_funds,
    validate_credit_limit,
    validate_credit_transaction,
    validate_debit_funds,
    validate_debit_transaction,
)
from spendflow.domain.models import CardId, Money
from spendflow.domain.results import ErrorKind


def debit(balance: str, overdraft: str | None = None) -> Card:
    return Card(
        id=CardId("d1"),
        type=CardType.DEBIT,
        balance=Money(Decimal(balance)),
        overdraft_enabled=overdraft is not None,
        overdraft_limit=Money(Decimal(overdraft or "0")),
    )


def credit(balance: str, limit: str) -> Card:
    return Card(id=CardId("c1"), type=CardType.CREDIT, balance=Money(Decimal(balance)), limit=Money(Decimal(limit)))


def m(value: str) -> Money:
    return Money(Decimal(value))


class TestAvailableFunds:
    """Tests for available_funds and available_credit."""

    def test_balance_only_without_overdraft(self) -> None:
        """Should ignore the overdraft limit when the overdraft is disabled."""
        card = Card(
            id=CardId("d1"),
            type=CardType.DEBIT,
            balance=m("50"),
            overdraft_enabled=False,
            overdraft_limit=m("100"),
        )

        assert available_funds(card) == (m("50"), m("0"))

    def test_includes_enabled_overdraft(self) -> None:
        """Should add the overdraft limit when enabled."""
        assert available_funds(debit("50", "20")) == (m("70"), m("20"))

    def test_available_credit(self) -> None:
        """Should be limit minus amount owed."""
        assert available_credit(credit("200", "500")) == m("300")


class TestValidateDebitFunds:
    """Tests for validate_debit_funds."""

    def test_rejects_with_shortfall(self) -> None:
        """Balance 50, no overdraft, charge 60: short by 10."""
        result = validate_debit_funds(debit("50"), m("60"))

        assert not result.valid
        assert result.error is ErrorKind.INSUFFICIENT_FUNDS
        assert result.available == m("50")
        assert result.requested == m("60")
        assert result.shortfall == m("10")
        assert "£50.00" in result.message

    def test_message_mentions_overdraft(self) -> None:
        """Should name the overdraft contribution when there is one."""
        result = validate_debit_funds(debit("50", "20"), m("100"))

        assert not result.valid
        assert "including £20.00 overdraft" in result.message
        assert result.overdraft == m("20")

    def test_accepts_exactly_available(self) -> None:
        """Spending exactly the available amount is allowed."""
        result = validate_debit_funds(debit("50", "20"), m("70"))

        assert result.valid

    def test_uses_currency_symbol(self) -> None:
        """Should format the message with the given symbol."""
        result = validate_debit_funds(debit("50"), m("60"), "$")

        assert "$50.00" in result.message


class TestValidateDebitTransaction:
    """Tests for validate_debit_transaction."""

    def test_within_balance(self) -> None:
        """Should reduce the balance without touching the overdraft."""
        result = validate_debit_transaction(debit("50"), m("20"))

        assert result.valid
        assert result.new_balance == m("30")
        assert result.overdraft_used == 0
        assert result.warning is None

    def test_uses_overdraft(self) -> None:
        """Balance 50, overdraft 20, charge 60: balance 0 and 10 of overdraft."""
        result = validate_debit_transaction(debit("50", "20"), m("60"))

        assert result.valid
        assert result.new_balance == 0
        assert result.overdraft_used == m("10")
        assert result.used_overdraft
        assert result.warning is not None
        assert result.message == "Transaction approved using £10.00 overdraft"

    def test_already_overdrawn_names_charge_and_total(self) -> None:
        """Balance -10, overdraft 50, charge 5: this charge draws 5, 15 is in use afterwards."""
        result = validate_debit_transaction(debit("-10", "50"), m("5"))

        assert result.valid
        assert result.overdraft_used == m("15")
        assert result.message == "Transaction approved using £5.00 overdraft (£15.00 in use)"
        assert "£5.00 of your overdraft" in result.warning
        assert "£15.00 of overdraft in total" in result.warning

    @pytest.mark.parametrize(
        "balance, overdraft, amount",
        [
            ("50", None, "60"),
            ("50", "20", "70.01"),
            ("0", "20", "20.01"),
            ("-10", "20", "10.01"),
        ],
    )
    def test_agrees_with_check_variant_on_rejection(self, balance: str, overdraft: str | None, amount: str) -> None:
        """Check and apply variants should reject the same charges."""
        card = debit(balance, overdraft)

        assert not validate_debit_funds(card, m(amount)).valid
        assert not validate_debit_transaction(card, m(amount)).valid

    @pytest.mark.parametrize(
        "balance, overdraft, amount",
        [
            ("50", None, "50"),
            ("50", "20", "70"),
            ("0", "20", "20"),
            ("-10", "20", "10"),
        ],
    )
    def test_agrees_with_check_variant_on_approval(self, balance: str, overdraft: str | None, amount: str) -> None:
        """Check and apply variants should accept the same charges."""
        card = debit(balance, overdraft)

        assert validate_debit_funds(card, m(amount)).valid
        assert validate_debit_transaction(card, m(amount)).valid

    def test_disabled_overdraft_is_not_spendable(self) -> None:
        """A configured but disabled overdraft should not be used by either variant."""
        card = Card(
            id=CardId("d1"),
            type=CardType.DEBIT,
            balance=m("50"),
            overdraft_enabled=False,
            overdraft_limit=m("100"),
        )

        assert not validate_debit_funds(card, m("60")).valid
        assert not validate_debit_transaction(card, m("60")).valid


class TestValidateCreditLimit:
    """Tests for validate_credit_limit and validate_credit_transaction."""

    def test_rejects_over_limit(self) -> None:
        """Limit 500, owed 200, charge 350: short by 50."""
        result = validate_credit_limit(credit("200", "500"), m("350"))

        assert not result.valid
        assert result.error is ErrorKind.CREDIT_LIMIT_EXCEEDED
        assert result.available == m("300")
        assert result.shortfall == m("50")
        assert result.current_balance == m("200")
        assert result.credit_limit == m("500")

    def test_accepts_within_limit(self) -> None:
        """Should approve charges that fit the unused credit."""
        assert validate_credit_limit(credit("200", "500"), m("300")).valid

    def test_transaction_increases_amount_owed(self) -> None:
        """Should add the charge to the balance and report remaining credit."""
        result = validate_credit_transaction(credit("200", "500"), m("100"))

        assert result.valid
        assert result.new_balance == m("300")
        assert result.remaining_credit == m("200")

    def test_transaction_rejects_like_check(self) -> None:
        """Apply variant should reject what the check variant rejects."""
        result = validate_credit_transaction(credit("200", "500"), m("350"))

        assert not result.valid
        assert result.shortfall == m("50")
