"""Pure functions deciding whether a card can cover a charge.

This module contains the functional core for spending checks:
- No I/O operations
- No side effects
- Each rule is written once and exposed two ways

The check variants (validate_debit_funds, validate_credit_limit) only admit
or deny and are used before a form is submitted. The apply variants
(validate_debit_transaction, validate_credit_transaction) also compute the
resulting balance and are used at commit time. Both go through the same
rejection function, so they always agree on the admit/deny boundary.
"""

from spendflow.domain.amounts import format_money
from spendflow.domain.cards import Card
from spendflow.domain.models import ZERO, CurrencySymbol, Money
from spendflow.domain.results import BalanceChange, ChargeApproval, ErrorKind, Rejection


def available_funds(card: Card) -> tuple[Money, Money]:
    """Calculate spendable funds on a debit card.

    Args:
        card: Debit card.

    Returns:
        Tuple of (available, overdraft) where overdraft is the contribution
        of the overdraft facility (0 when disabled).
    """
    overdraft = card.overdraft_limit if card.overdraft_enabled else ZERO
    return Money(card.balance + overdraft), overdraft


def available_credit(card: Card) -> Money:
    """Calculate unused credit on a credit card (limit minus amount owed)."""
    return Money(card.limit - card.balance)


def _insufficient_funds(card: Card, amount: Money, symbol: CurrencySymbol | str) -> Rejection | None:
    available, overdraft = available_funds(card)
    if amount <= available:
        return None

    message = f"Your available balance is {format_money(available, symbol)}"
    if overdraft > 0:
        message += f" (including {format_money(overdraft, symbol)} overdraft)"
    message += ". Please enter a smaller amount."

    return Rejection(
        error=ErrorKind.INSUFFICIENT_FUNDS,
        title="Insufficient Funds",
        message=message,
        available=available,
        requested=amount,
        shortfall=Money(amount - available),
        overdraft=overdraft,
    )


def _credit_limit_exceeded(card: Card, amount: Money, symbol: CurrencySymbol | str) -> Rejection | None:
    credit = available_credit(card)
    if amount <= credit:
        return None

    return Rejection(
        error=ErrorKind.CREDIT_LIMIT_EXCEEDED,
        title="Credit Limit Exceeded",
        message=(
            f"Your available credit is {format_money(credit, symbol)} "
            f"({format_money(card.limit, symbol)} limit - {format_money(card.balance, symbol)} balance). "
            "Please enter a smaller amount."
        ),
        available=credit,
        requested=amount,
        shortfall=Money(amount - credit),
        current_balance=card.balance,
        credit_limit=card.limit,
    )


def validate_debit_funds(card: Card, amount: Money, symbol: CurrencySymbol | str = "£") -> ChargeApproval | Rejection:
    """Check that a debit card can cover amount, counting any overdraft.

    Args:
        card: Debit card.
        amount: Amount to charge.
        symbol: Currency symbol for the message.

    Returns:
        ChargeApproval, or an INSUFFICIENT_FUNDS Rejection.
    """
    rejection = _insufficient_funds(card, amount, symbol)
    if rejection is not None:
        return rejection
    return ChargeApproval(card=card, amount=amount)


def validate_debit_transaction(
    card: Card, amount: Money, symbol: CurrencySymbol | str = "£"
) -> BalanceChange | Rejection:
    """Check a debit charge and compute the resulting balance.

    When the charge exceeds the balance, the remainder is drawn from the
    overdraft: new_balance is 0 and overdraft_used is amount - balance, the
    overdraft in use once the charge is applied. On a card that is already
    overdrawn the messages name this charge's share and the total separately.

    Args:
        card: Debit card.
        amount: Amount to charge.
        symbol: Currency symbol for messages.

    Returns:
        BalanceChange, or an INSUFFICIENT_FUNDS Rejection.
    """
    rejection = _insufficient_funds(card, amount, symbol)
    if rejection is not None:
        return rejection

    if amount <= card.balance:
        return BalanceChange(
            card=card,
            amount=amount,
            new_balance=Money(max(card.balance - amount, ZERO)),
        )

    overdraft_used = Money(amount - card.balance)
    drawn = Money(amount - max(card.balance, ZERO))
    message = f"Transaction approved using {format_money(drawn, symbol)} overdraft"
    warning = f"This transaction will use {format_money(drawn, symbol)} of your overdraft facility."
    if card.balance < 0:
        message += f" ({format_money(overdraft_used, symbol)} in use)"
        warning += f" You will be using {format_money(overdraft_used, symbol)} of overdraft in total."

    return BalanceChange(
        card=card,
        amount=amount,
        new_balance=ZERO,
        message=message,
        overdraft_used=overdraft_used,
        warning=warning,
    )


def validate_credit_limit(card: Card, amount: Money, symbol: CurrencySymbol | str = "£") -> ChargeApproval | Rejection:
    """Check that a credit card has enough unused credit for amount.

    Args:
        card: Credit card.
        amount: Amount to charge.
        symbol: Currency symbol for the message.

    Returns:
        ChargeApproval, or a CREDIT_LIMIT_EXCEEDED Rejection.
    """
    rejection = _credit_limit_exceeded(card, amount, symbol)
    if rejection is not None:
        return rejection
    return ChargeApproval(card=card, amount=amount)


def validate_credit_transaction(
    card: Card, amount: Money, symbol: CurrencySymbol | str = "£"
) -> BalanceChange | Rejection:
    """Check a credit charge and compute the new amount owed.

    Args:
        card: Credit card.
        amount: Amount to charge.
        symbol: Currency symbol for messages.

    Returns:
        BalanceChange with remaining_credit, or a CREDIT_LIMIT_EXCEEDED Rejection.
    """
    rejection = _credit_limit_exceeded(card, amount, symbol)
    if rejection is not None:
        return rejection

    return BalanceChange(
        card=card,
        amount=amount,
        new_balance=Money(card.balance + amount),
        remaining_credit=Money(available_credit(card) - amount),
    )
