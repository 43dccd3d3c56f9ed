"""Pure functions for validating and planning card transactions.

This module contains the functional core for expenses, income and refunds:
- No I/O operations (no database, no console, no files)
- No side effects
- Validators short-circuit on the first failure

All monetary amounts are Money (Decimal, major units).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from spendflow.domain.amounts import validate_amount
from spendflow.domain.balances import deposit_change
from spendflow.domain.cards import Card
from spendflow.domain.funds import (
    validate_credit_limit,
    validate_credit_transaction,
    validate_debit_funds,
    validate_debit_transaction,
)
from spendflow.domain.models import CardId, CurrencySymbol, Money, SavingsId, TransactionId
from spendflow.domain.results import BalanceChange, ChargeApproval, Rejection
from spendflow.domain.selection import validate_card_selection


class TransactionType(StrEnum):
    """Kind of ledger transaction."""

    EXPENSE = "expense"
    INCOME = "income"
    REFUND = "refund"
    TRANSFER = "transfer"


# Types that add funds and skip the balance check
FUNDING_TYPES = frozenset({TransactionType.INCOME, TransactionType.REFUND})


@dataclass(frozen=True)
class Transaction:
    """Immutable ledger transaction.

    amount is always a positive magnitude; type says which way it moved.
    Transfers use from_card_id/to_card_id instead of card_id; a transfer to or
    from a savings account leaves the savings side empty and sets
    savings_account_id. Refunds reference the expense they refund through
    original_transaction_id.
    """

    id: TransactionId
    type: TransactionType
    amount: Money
    date: str
    card_id: CardId | None = None
    category: str = ""
    description: str = ""
    from_card_id: CardId | None = None
    to_card_id: CardId | None = None
    original_transaction_id: TransactionId | None = None
    savings_account_id: SavingsId | None = None

    @property
    def signed_amount(self) -> Money:
        """Amount as displayed: negative for expenses, positive otherwise."""
        if self.type is TransactionType.EXPENSE:
            return Money(-self.amount)
        return self.amount


@dataclass(frozen=True)
class TransactionRequest:
    """Ephemeral input for validating an expense, income or refund."""

    amount: str | int | float | Decimal | None
    card_id: CardId | str | None
    cards: list[Card] = field(default_factory=list)
    currency: CurrencySymbol | str = "£"
    transaction_type: TransactionType = TransactionType.EXPENSE


def validate_transaction(request: TransactionRequest) -> ChargeApproval | Rejection:
    """Validate a proposed transaction against the user's cards.

    Pipeline: amount bounds, card selection, then (expenses only) a funds
    check for debit cards or a credit limit check for credit cards.

    Args:
        request: Transaction request.

    Returns:
        ChargeApproval carrying the resolved card and amount, or the first Rejection.
    """
    amount_result = validate_amount(request.amount, request.currency)
    if isinstance(amount_result, Rejection):
        return amount_result

    card_result = validate_card_selection(request.card_id, request.cards)
    if isinstance(card_result, Rejection):
        return card_result

    card = card_result.card
    amount = amount_result.amount

    if request.transaction_type in FUNDING_TYPES:
        return ChargeApproval(card=card, amount=amount)

    if card.is_debit:
        return validate_debit_funds(card, amount, request.currency)
    return validate_credit_limit(card, amount, request.currency)


def plan_transaction(request: TransactionRequest) -> BalanceChange | Rejection:
    """Validate a transaction and compute the balance change to commit.

    Args:
        request: Transaction request.

    Returns:
        BalanceChange for the selected card, or the first Rejection.
    """
    result = validate_transaction(request)
    if isinstance(result, Rejection):
        return result

    if request.transaction_type in FUNDING_TYPES:
        return deposit_change(result.card, result.amount)

    if result.card.is_debit:
        return validate_debit_transaction(result.card, result.amount, request.currency)
    return validate_credit_transaction(result.card, result.amount, request.currency)
