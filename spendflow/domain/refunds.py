"""Pure functions for refund bookkeeping.

Refund state is never stored as a running total. It is recomputed from the
refund records linked to the original expense, so two refunds committed one
after the other can never be double counted, and the status can only move
forward (none -> partially_refunded -> fully_refunded) as records are added.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from spendflow.domain.amounts import format_money, validate_amount
from spendflow.domain.cards import Card
from spendflow.domain.models import ZERO, CardId, CurrencySymbol, Money, TransactionId
from spendflow.domain.results import ErrorKind, RefundApproval, RefundPlan, Rejection, with_message
from spendflow.domain.transactions import (
    Transaction,
    TransactionRequest,
    TransactionType,
    plan_transaction,
)


class RefundStatus(StrEnum):
    """How much of an expense has been refunded."""

    NONE = "none"
    PARTIAL = "partially_refunded"
    FULL = "fully_refunded"


@dataclass(frozen=True)
class RefundState:
    """Immutable refund position of one expense."""

    status: RefundStatus
    original_amount: Money
    refunded: Money

    @property
    def remaining(self) -> Money:
        """Maximum amount that can still be refunded."""
        return Money(max(self.original_amount - self.refunded, ZERO))


@dataclass(frozen=True)
class RefundRequest:
    """Ephemeral input for refunding part or all of an expense."""

    amount: str | int | float | Decimal | None
    original_transaction_id: TransactionId | int | None
    transactions: list[Transaction]
    cards: list[Card]
    card_id: CardId | str | None = None
    currency: CurrencySymbol | str = "£"


def refund_status(original_amount: Money, refunded: Money) -> RefundStatus:
    """Derive refund status from the original and refunded amounts."""
    if refunded >= original_amount:
        return RefundStatus.FULL
    if refunded > 0:
        return RefundStatus.PARTIAL
    return RefundStatus.NONE


def refund_state(original: Transaction, refunds: Iterable[Transaction]) -> RefundState:
    """Compute the refund state of an expense from its linked refunds.

    Args:
        original: The expense being refunded.
        refunds: Transactions that may refund it; unrelated ones are ignored.

    Returns:
        RefundState with status, original amount and total refunded.
    """
    refunded = Money(
        sum(
            (
                r.amount
                for r in refunds
                if r.type is TransactionType.REFUND and r.original_transaction_id == original.id
            ),
            ZERO,
        )
    )
    original_amount = Money(abs(original.amount))
    return RefundState(
        status=refund_status(original_amount, refunded),
        original_amount=original_amount,
        refunded=refunded,
    )


def validate_refund(
    original: Transaction,
    refunds: Iterable[Transaction],
    amount: str | int | float | Decimal | None,
    symbol: CurrencySymbol | str = "£",
) -> RefundApproval | Rejection:
    """Check a refund against the remaining refundable amount of an expense.

    Args:
        original: The expense being refunded.
        refunds: Existing refund records (may include unrelated transactions).
        amount: Requested refund amount.
        symbol: Currency symbol for messages.

    Returns:
        RefundApproval with the state after the refund, or a Rejection.
    """
    if original.type is not TransactionType.EXPENSE:
        return Rejection(
            error=ErrorKind.NOT_REFUNDABLE,
            title="Not Refundable",
            message="Only expenses can be refunded.",
        )

    state = refund_state(original, refunds)
    if state.status is RefundStatus.FULL:
        return Rejection(
            error=ErrorKind.ALREADY_REFUNDED,
            title="Already Refunded",
            message="This transaction has already been fully refunded.",
        )

    amount_result = validate_amount(amount, symbol)
    if isinstance(amount_result, Rejection):
        if amount_result.error is ErrorKind.INVALID_AMOUNT:
            return with_message(amount_result, "Please enter a valid refund amount.")
        return amount_result

    requested = amount_result.amount
    if requested > state.remaining:
        return Rejection(
            error=ErrorKind.REFUND_EXCEEDS_REMAINING,
            title="Refund Too Large",
            message=(
                f"Refund amount cannot exceed {format_money(state.remaining, symbol)} "
                "(remaining refundable amount)."
            ),
            available=state.remaining,
            requested=requested,
            shortfall=Money(requested - state.remaining),
        )

    refunded = Money(state.refunded + requested)
    return RefundApproval(
        amount=requested,
        state=RefundState(
            status=refund_status(state.original_amount, refunded),
            original_amount=state.original_amount,
            refunded=refunded,
        ),
    )


def plan_refund(request: RefundRequest) -> RefundPlan | Rejection:
    """Validate a refund end to end and compute the card credit.

    The refund must fit under the original expense's remaining refundable
    amount and pass the refund transaction pipeline for the receiving card,
    which defaults to the card the expense was paid with.

    Args:
        request: Refund request.

    Returns:
        RefundPlan, or the first Rejection.
    """
    original = next((t for t in request.transactions if t.id == request.original_transaction_id), None)
    if original is None:
        return Rejection(
            error=ErrorKind.TRANSACTION_NOT_FOUND,
            title="Transaction Not Found",
            message="Please select the original transaction to refund.",
        )

    approval = validate_refund(original, request.transactions, request.amount, request.currency)
    if not isinstance(approval, RefundApproval):
        return approval

    change = plan_transaction(
        TransactionRequest(
            amount=approval.amount,
            card_id=request.card_id or original.card_id,
            cards=request.cards,
            currency=request.currency,
            transaction_type=TransactionType.REFUND,
        )
    )
    if isinstance(change, Rejection):
        return change

    return RefundPlan(change=change, state=approval.state)


def refundable_transactions(transactions: Iterable[Transaction]) -> list[tuple[Transaction, RefundState]]:
    """List expenses that can still be refunded, with their refund state.

    Fully refunded expenses are excluded.

    Args:
        transactions: All of the user's transactions (refunds included).

    Returns:
        List of (expense, state) pairs in input order.
    """
    transactions = list(transactions)
    refundable: list[tuple[Transaction, RefundState]] = []

    for txn in transactions:
        if txn.type is not TransactionType.EXPENSE:
            continue
        state = refund_state(txn, transactions)
        if state.status is not RefundStatus.FULL:
            refundable.append((txn, state))

    return refundable
