"""Pure functions for validating and planning transfers between cards."""

from dataclasses import dataclass, field
from decimal import Decimal

from spendflow.domain.amounts import validate_amount
from spendflow.domain.balances import deposit_change, withdrawal_change
from spendflow.domain.cards import Card
from spendflow.domain.funds import validate_debit_funds, validate_debit_transaction
from spendflow.domain.models import CardId, CurrencySymbol
from spendflow.domain.results import ErrorKind, Rejection, TransferApproval, TransferPlan, with_message
from spendflow.domain.selection import validate_card_selection


@dataclass(frozen=True)
class TransferRequest:
    """Ephemeral input for validating a transfer."""

    amount: str | int | float | Decimal | None
    from_card_id: CardId | str | None
    to_card_id: CardId | str | None
    cards: list[Card] = field(default_factory=list)
    currency: CurrencySymbol | str = "£"


def validate_transfer(request: TransferRequest) -> TransferApproval | Rejection:
    """Validate a transfer from one card to another.

    A transfer naming the same card on both sides is rejected before any
    other check. Only debit sources are checked for funds; credit sources
    are accepted without an available-credit check.

    Args:
        request: Transfer request.

    Returns:
        TransferApproval carrying from_card, to_card and amount, or the first Rejection.
    """
    if request.from_card_id and request.from_card_id == request.to_card_id:
        return Rejection(
            error=ErrorKind.SAME_ACCOUNT_TRANSFER,
            title="Invalid Transfer",
            message="Cannot transfer to the same account. Please select different accounts.",
        )

    amount_result = validate_amount(request.amount, request.currency)
    if isinstance(amount_result, Rejection):
        return amount_result

    from_result = validate_card_selection(request.from_card_id, request.cards)
    if isinstance(from_result, Rejection):
        return with_message(from_result, "Please select a source account for the transfer.")

    to_result = validate_card_selection(request.to_card_id, request.cards)
    if isinstance(to_result, Rejection):
        return with_message(to_result, "Please select a destination account for the transfer.")

    from_card = from_result.card
    amount = amount_result.amount

    if from_card.is_debit:
        funds_result = validate_debit_funds(from_card, amount, request.currency)
        if isinstance(funds_result, Rejection):
            return with_message(funds_result, f"Insufficient funds in source account. {funds_result.message}")

    return TransferApproval(from_card=from_card, to_card=to_result.card, amount=amount)


def plan_transfer(request: TransferRequest) -> TransferPlan | Rejection:
    """Validate a transfer and compute the balance change on both cards.

    Args:
        request: Transfer request.

    Returns:
        TransferPlan with source and destination changes, or a Rejection.
    """
    result = validate_transfer(request)
    if isinstance(result, Rejection):
        return result

    from_card, to_card, amount = result.from_card, result.to_card, result.amount

    if from_card.is_debit:
        source = validate_debit_transaction(from_card, amount, request.currency)
        if isinstance(source, Rejection):
            return with_message(source, f"Insufficient funds in source account. {source.message}")
    else:
        source = withdrawal_change(from_card, amount)

    return TransferPlan(source=source, destination=deposit_change(to_card, amount), amount=amount)
