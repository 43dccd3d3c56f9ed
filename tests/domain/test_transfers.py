"""Tests for spendflow.domain.transfers pure functions."""

from decimal import Decimal

import pytest

from spendflow.domain.cards import Card, CardType
from spendflow.domain.models import CardId, Money
from spendflow.domain.results import ErrorKind, TransferApproval
from spendflow.domain.transfers import TransferRequest, plan_transfer, validate_transfer

CURRENT = Card(id=CardId("a"), type=CardType.DEBIT, balance=Money(Decimal("100")))
SAVINGS = Card(id=CardId("b"), type=CardType.DEBIT, balance=Money(Decimal("10")))
OVERDRAFT = Card(
    id=CardId("o"),
    type=CardType.DEBIT,
    balance=Money(Decimal("50")),
    overdraft_enabled=True,
    overdraft_limit=Money(Decimal("20")),
)
CREDIT = Card(id=CardId("c"), type=CardType.CREDIT, balance=Money(Decimal("490")), limit=Money(Decimal("500")))
CARDS = [CURRENT, SAVINGS, OVERDRAFT, CREDIT]


def transfer(amount: object, from_id: str | None, to_id: str | None) -> TransferRequest:
    return TransferRequest(amount=amount, from_card_id=from_id, to_card_id=to_id, cards=CARDS)


class TestValidateTransfer:
    """Tests for validate_transfer."""

    @pytest.mark.parametrize("amount", ["10", "0", "-5", "99999999", None])
    def test_same_account_rejected_regardless_of_amount(self, amount: object) -> None:
        """A -> A is always SAME_ACCOUNT_TRANSFER."""
        result = validate_transfer(transfer(amount, "a", "a"))

        assert not result.valid
        assert result.error is ErrorKind.SAME_ACCOUNT_TRANSFER

    def test_same_account_rejected_for_unknown_card(self) -> None:
        """Should report the same-account error even for an id that doesn't exist."""
        result = validate_transfer(transfer("10", "zzz", "zzz"))

        assert result.error is ErrorKind.SAME_ACCOUNT_TRANSFER

    def test_missing_source_message(self) -> None:
        """Should specialize the message for the source account."""
        result = validate_transfer(transfer("10", None, "b"))

        assert result.error is ErrorKind.NO_CARD_SELECTED
        assert result.message == "Please select a source account for the transfer."

    def test_missing_destination_message(self) -> None:
        """Should specialize the message for the destination account."""
        result = validate_transfer(transfer("10", "a", "nope"))

        assert result.error is ErrorKind.CARD_NOT_FOUND
        assert result.message == "Please select a destination account for the transfer."

    def test_debit_source_funds_checked(self) -> None:
        """Should reject a transfer larger than the debit source can cover."""
        result = validate_transfer(transfer("150", "a", "b"))

        assert result.error is ErrorKind.INSUFFICIENT_FUNDS
        assert result.message.startswith("Insufficient funds in source account. ")
        assert result.shortfall == Decimal("50")

    def test_credit_source_not_checked(self) -> None:
        """Transfers out of a credit card are not checked against available credit."""
        result = validate_transfer(transfer("400", "c", "a"))

        assert result.valid

    def test_approval_carries_both_cards(self) -> None:
        """Should carry source, destination and amount."""
        result = validate_transfer(transfer("£25", "a", "b"))

        assert isinstance(result, TransferApproval)
        assert result.from_card is CURRENT
        assert result.to_card is SAVINGS
        assert result.amount == Decimal("25")


class TestPlanTransfer:
    """Tests for plan_transfer."""

    def test_moves_money_between_debit_cards(self) -> None:
        """Should debit the source and credit the destination."""
        plan = plan_transfer(transfer("30", "a", "b"))

        assert plan.valid
        assert plan.source.new_balance == Decimal("70")
        assert plan.destination.new_balance == Decimal("40")
        assert plan.amount == Decimal("30")

    def test_source_may_use_overdraft(self) -> None:
        """Should draw from the source overdraft when needed."""
        plan = plan_transfer(transfer("60", "o", "a"))

        assert plan.source.overdraft_used == Decimal("10")
        assert plan.source.warning is not None

    def test_credit_source_increases_owed(self) -> None:
        """Moving money off a credit card should increase what is owed."""
        plan = plan_transfer(transfer("100", "c", "a"))

        assert plan.source.new_balance == Decimal("590")
        assert plan.destination.new_balance == Decimal("200")

    def test_credit_destination_reduces_owed(self) -> None:
        """Paying a credit card should reduce what is owed."""
        plan = plan_transfer(transfer("90", "a", "c"))

        assert plan.destination.new_balance == Decimal("400")

    def test_rejection_passes_through(self) -> None:
        """Should return the transfer rejection unchanged."""
        result = plan_transfer(transfer("10", "a", "a"))

        assert not result.valid
        assert result.error is ErrorKind.SAME_ACCOUNT_TRANSFER
