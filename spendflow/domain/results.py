"""Validation result types shared by every validator.

Validators never raise for business-rule violations. They return either an
approval-style result (valid=True) or a Rejection (valid=False) carrying a
machine-checkable ErrorKind and a title/message pair ready for display.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from spendflow.domain.models import ZERO, Money

if TYPE_CHECKING:
    from spendflow.domain.cards import Card
    from spendflow.domain.refunds import RefundState


class ErrorKind(StrEnum):
    """Reason a proposed operation was rejected."""

    INVALID_AMOUNT = "INVALID_AMOUNT"
    AMOUNT_TOO_LARGE = "AMOUNT_TOO_LARGE"
    NO_CARD_SELECTED = "NO_CARD_SELECTED"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    CREDIT_LIMIT_EXCEEDED = "CREDIT_LIMIT_EXCEEDED"
    SAME_ACCOUNT_TRANSFER = "SAME_ACCOUNT_TRANSFER"
    NOT_REFUNDABLE = "NOT_REFUNDABLE"
    ALREADY_REFUNDED = "ALREADY_REFUNDED"
    REFUND_EXCEEDS_REMAINING = "REFUND_EXCEEDS_REMAINING"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    CARD_LIMIT_REACHED = "CARD_LIMIT_REACHED"
    DEBIT_CARD_REQUIRED = "DEBIT_CARD_REQUIRED"
    MISSING_INFORMATION = "MISSING_INFORMATION"
    SAVINGS_NOT_FOUND = "SAVINGS_NOT_FOUND"
    SAVINGS_LIMIT_REACHED = "SAVINGS_LIMIT_REACHED"
    DUPLICATE_SAVINGS_ACCOUNT = "DUPLICATE_SAVINGS_ACCOUNT"
    INSUFFICIENT_SAVINGS = "INSUFFICIENT_SAVINGS"


@dataclass(frozen=True)
class Approval:
    """Immutable successful validation, optionally carrying the card it admitted."""

    card: "Card | None" = None
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class AmountApproval:
    """Immutable accepted amount, already rounded to whole pence."""

    amount: Money
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class CardApproval:
    """Immutable resolved card selection."""

    card: "Card"
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ChargeApproval:
    """Immutable approval of an amount against a single card."""

    card: "Card"
    amount: Money
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class TransferApproval:
    """Immutable approval of a transfer between two cards."""

    from_card: "Card"
    to_card: "Card"
    amount: Money
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Rejection:
    """Immutable failed validation.

    Context fields are only populated where they make sense for the kind,
    e.g. shortfall for INSUFFICIENT_FUNDS or credit_limit for
    CREDIT_LIMIT_EXCEEDED.
    """

    error: ErrorKind
    title: str
    message: str
    available: Money | None = None
    requested: Money | None = None
    shortfall: Money | None = None
    current_balance: Money | None = None
    credit_limit: Money | None = None
    overdraft: Money | None = None
    parsed: Money | None = None
    valid: bool = field(default=False, init=False)


@dataclass(frozen=True)
class BalanceChange:
    """Immutable proposed balance mutation for a single card.

    new_balance follows the card's own convention: funds held for debit
    cards, amount owed for credit cards. The caller performs the write.
    """

    card: "Card"
    amount: Money
    new_balance: Money
    message: str = "Transaction approved"
    overdraft_used: Money = ZERO
    remaining_credit: Money | None = None
    warning: str | None = None
    valid: bool = field(default=True, init=False)

    @property
    def used_overdraft(self) -> bool:
        return self.overdraft_used > 0


@dataclass(frozen=True)
class TransferPlan:
    """Immutable pair of balance changes for an approved transfer."""

    source: BalanceChange
    destination: BalanceChange
    amount: Money
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class RefundApproval:
    """Immutable approved refund with the refund state it leads to."""

    amount: Money
    state: "RefundState"
    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class RefundPlan:
    """Immutable approved refund plus the card it credits."""

    change: BalanceChange
    state: "RefundState"
    valid: bool = field(default=True, init=False)


def with_message(rejection: Rejection, message: str) -> Rejection:
    """Return a copy of rejection with a different message."""
    return Rejection(
        error=rejection.error,
        title=rejection.title,
        message=message,
        available=rejection.available,
        requested=rejection.requested,
        shortfall=rejection.shortfall,
        current_balance=rejection.current_balance,
        credit_limit=rejection.credit_limit,
        overdraft=rejection.overdraft,
        parsed=rejection.parsed,
    )


def suggestion_for(rejection: Rejection) -> str:
    """Suggest what the user can do about a rejection.

    Args:
        rejection: Failed validation result.

    Returns:
        Short follow-up hint for display under the message.
    """
    if rejection.error is ErrorKind.INSUFFICIENT_FUNDS:
        if rejection.overdraft:
            return "Consider increasing your overdraft limit or adding funds to your account."
        return "Consider enabling overdraft protection or adding funds to your account."

    if rejection.error is ErrorKind.CREDIT_LIMIT_EXCEEDED:
        return "Consider requesting a credit limit increase or making a payment to reduce your balance."

    if rejection.error in (ErrorKind.INVALID_AMOUNT, ErrorKind.AMOUNT_TOO_LARGE):
        return "Check the amount and try again."

    if rejection.error in (ErrorKind.NO_CARD_SELECTED, ErrorKind.CARD_NOT_FOUND, ErrorKind.SAME_ACCOUNT_TRANSFER):
        return "Run 'spendflow cards' to see your card IDs."

    if rejection.error in (ErrorKind.REFUND_EXCEEDS_REMAINING, ErrorKind.ALREADY_REFUNDED):
        return "Run 'spendflow refundable' to see what can still be refunded."

    if rejection.error in (ErrorKind.INSUFFICIENT_SAVINGS, ErrorKind.SAVINGS_NOT_FOUND):
        return "Run 'spendflow savings' to see your savings accounts."

    if rejection.error is ErrorKind.DEBIT_CARD_REQUIRED:
        return "Savings can only be moved to and from debit cards."

    return "Please try again."
