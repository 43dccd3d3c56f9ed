"""Savings accounts and the rules for moving money in and out of them.

Money only moves between a savings account and a debit card:
- Paying in is checked against the card's spendable funds, overdraft included
- Taking money out is checked against the savings balance
- A savings balance never goes negative

Closing an account pays whatever is left back to a debit card.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from spendflow.domain.amounts import MAX_ACCOUNT_AMOUNT, format_money, parse_amount, round_money, validate_amount
from spendflow.domain.balances import deposit_change
from spendflow.domain.cards import Card
from spendflow.domain.funds import validate_debit_transaction
from spendflow.domain.models import ZERO, CardId, CurrencySymbol, Money, SavingsId
from spendflow.domain.results import Approval, BalanceChange, ErrorKind, Rejection, with_message
from spendflow.domain.selection import validate_card_selection

MAX_SAVINGS_ACCOUNTS = 1


class InvalidSavingsRecord(ValueError):
    """Raised when a stored savings record cannot be turned into a SavingsAccount."""


@dataclass(frozen=True)
class SavingsAccount:
    """Immutable savings account snapshot.

    linked_card_id is the debit card money moves to and from when no other
    card is named.
    """

    id: SavingsId
    name: str
    balance: Money
    goal: Money = ZERO
    linked_card_id: CardId | None = None

    @property
    def progress(self) -> float:
        """Percentage of the goal reached, capped at 100 (0 without a goal)."""
        if self.goal <= 0:
            return 0.0
        return min(float(self.balance / self.goal * 100), 100.0)


@dataclass(frozen=True)
class SavingsRequest:
    """Ephemeral input for paying into or taking money out of savings."""

    amount: str | int | float | Decimal | None
    account_id: SavingsId | str | None
    accounts: list[SavingsAccount]
    cards: list[Card]
    card_id: CardId | str | None = None
    currency: CurrencySymbol | str = "£"


@dataclass(frozen=True)
class SavingsPlan:
    """Immutable approved savings move.

    account is the savings account as it should be stored afterwards and
    change is the matching balance change on the debit card. change is None
    only when an empty account is closed.
    """

    account: SavingsAccount
    amount: Money
    change: BalanceChange | None = None
    valid: bool = field(default=True, init=False)


def savings_from_record(record: dict[str, Any]) -> SavingsAccount:
    """Build a SavingsAccount from a stored or legacy record.

    Legacy records keep the goal under "targetAmount" and the card under
    "linkedCardId".

    Raises:
        InvalidSavingsRecord: If the id is missing.
    """
    account_id = record.get("id")
    if not account_id:
        raise InvalidSavingsRecord("Savings record has no id")

    goal = record.get("goal", record.get("targetAmount"))
    linked = record.get("linked_card_id", record.get("linkedCardId"))

    return SavingsAccount(
        id=SavingsId(str(account_id)),
        name=str(record.get("name") or ""),
        balance=round_money(parse_amount(record.get("balance"))),
        goal=round_money(parse_amount(goal)),
        linked_card_id=CardId(str(linked)) if linked else None,
    )


def find_savings_account(account_id: SavingsId | str | None, accounts: list[SavingsAccount]) -> SavingsAccount | None:
    """Find a savings account by id, or None."""
    return next((a for a in accounts if a.id == account_id), None)


def _debit_card(card_id: CardId | str | None, cards: list[Card]) -> Card | Rejection:
    result = validate_card_selection(card_id, cards)
    if isinstance(result, Rejection):
        return result
    if not result.card.is_debit:
        return Rejection(
            error=ErrorKind.DEBIT_CARD_REQUIRED,
            title="Debit Card Required",
            message=f"{result.card.display_name} is a credit card. Please select a debit card.",
        )
    return result.card


def _out_of_range(label: str, amount: Money, symbol: CurrencySymbol | str) -> Rejection | None:
    if amount > MAX_ACCOUNT_AMOUNT:
        return Rejection(
            error=ErrorKind.AMOUNT_TOO_LARGE,
            title="Amount Too Large",
            message=f"The {label} cannot exceed {format_money(MAX_ACCOUNT_AMOUNT, symbol)}.",
            parsed=amount,
        )
    if amount < 0:
        return Rejection(
            error=ErrorKind.INVALID_AMOUNT,
            title="Invalid Amount",
            message=f"The {label} cannot be negative.",
            parsed=amount,
        )
    return None


def validate_new_savings_account(
    account: SavingsAccount,
    existing: list[SavingsAccount],
    cards: list[Card],
    max_accounts: int = MAX_SAVINGS_ACCOUNTS,
    symbol: CurrencySymbol | str = "£",
) -> Approval | Rejection:
    """Check whether a savings account may be opened.

    Checks, in order: the account limit, a name, a unique name (ignoring
    case), a positive goal within range, a non-negative opening balance
    within range and, when one is linked, a debit card.

    Args:
        account: Account to open.
        existing: Savings accounts the user already holds.
        cards: The user's cards.
        max_accounts: Maximum number of savings accounts.
        symbol: Currency symbol for messages.

    Returns:
        Approval, or the first Rejection.
    """
    if len(existing) >= max_accounts:
        plural = "account" if max_accounts == 1 else "accounts"
        return Rejection(
            error=ErrorKind.SAVINGS_LIMIT_REACHED,
            title="Savings Account Limit Reached",
            message=f"You can only have {max_accounts} savings {plural}.",
        )

    if not account.name.strip():
        return Rejection(
            error=ErrorKind.MISSING_INFORMATION,
            title="Missing Information",
            message="Please give the savings account a name.",
        )

    if any(a.name.lower() == account.name.lower() for a in existing):
        return Rejection(
            error=ErrorKind.DUPLICATE_SAVINGS_ACCOUNT,
            title="Duplicate",
            message="A savings account with this name already exists.",
        )

    if account.goal <= 0:
        return Rejection(
            error=ErrorKind.INVALID_AMOUNT,
            title="Invalid Amount",
            message="Please enter a savings goal greater than zero.",
            parsed=account.goal,
        )

    for label, amount in (("savings goal", account.goal), ("opening balance", account.balance)):
        rejection = _out_of_range(label, amount, symbol)
        if rejection is not None:
            return rejection

    if account.linked_card_id is not None:
        card = _debit_card(account.linked_card_id, cards)
        if isinstance(card, Rejection):
            return card

    return Approval()


def _resolve(request: SavingsRequest) -> tuple[SavingsAccount, Card, Money] | Rejection:
    amount_result = validate_amount(request.amount, request.currency)
    if isinstance(amount_result, Rejection):
        return amount_result

    account = find_savings_account(request.account_id, request.accounts)
    if account is None:
        return Rejection(
            error=ErrorKind.SAVINGS_NOT_FOUND,
            title="Savings Account Not Found",
            message="Please select one of your savings accounts.",
        )

    card = _debit_card(request.card_id or account.linked_card_id, request.cards)
    if isinstance(card, Rejection):
        return card

    return account, card, amount_result.amount


def plan_savings_deposit(request: SavingsRequest) -> SavingsPlan | Rejection:
    """Validate moving money from a debit card into savings.

    Args:
        request: Savings request; the card defaults to the account's linked card.

    Returns:
        SavingsPlan, or the first Rejection.
    """
    resolved = _resolve(request)
    if isinstance(resolved, Rejection):
        return resolved
    account, card, amount = resolved

    change = validate_debit_transaction(card, amount, request.currency)
    if isinstance(change, Rejection):
        return with_message(change, f"Insufficient funds on {card.display_name}. {change.message}")

    return SavingsPlan(
        account=replace(account, balance=Money(account.balance + amount)),
        amount=amount,
        change=change,
    )


def plan_savings_withdrawal(request: SavingsRequest) -> SavingsPlan | Rejection:
    """Validate moving money from savings back to a debit card.

    Args:
        request: Savings request; the card defaults to the account's linked card.

    Returns:
        SavingsPlan, or the first Rejection.
    """
    resolved = _resolve(request)
    if isinstance(resolved, Rejection):
        return resolved
    account, card, amount = resolved

    if amount > account.balance:
        return Rejection(
            error=ErrorKind.INSUFFICIENT_SAVINGS,
            title="Insufficient Funds",
            message=(
                f"Your {account.name} balance is {format_money(account.balance, request.currency)}. "
                f"You cannot transfer {format_money(amount, request.currency)}."
            ),
            available=account.balance,
            requested=amount,
            shortfall=Money(amount - account.balance),
        )

    return SavingsPlan(
        account=replace(account, balance=Money(account.balance - amount)),
        amount=amount,
        change=deposit_change(card, amount),
    )


def plan_savings_closure(
    account_id: SavingsId | str | None,
    accounts: list[SavingsAccount],
    cards: list[Card],
    card_id: CardId | str | None = None,
) -> SavingsPlan | Rejection:
    """Validate closing a savings account and paying out what is left.

    An empty account closes without touching any card. Otherwise the whole
    balance goes to card_id, or the linked card when none is given. The
    transaction ceiling does not apply to the final payout.

    Args:
        account_id: Account to close.
        accounts: The user's savings accounts.
        cards: The user's cards.
        card_id: Debit card to receive the balance.

    Returns:
        SavingsPlan with the emptied account, or the first Rejection.
    """
    account = find_savings_account(account_id, accounts)
    if account is None:
        return Rejection(
            error=ErrorKind.SAVINGS_NOT_FOUND,
            title="Savings Account Not Found",
            message="Please select one of your savings accounts.",
        )

    emptied = replace(account, balance=ZERO)
    if account.balance <= 0:
        return SavingsPlan(account=emptied, amount=ZERO)

    card = _debit_card(card_id or account.linked_card_id, cards)
    if isinstance(card, Rejection):
        return card

    return SavingsPlan(account=emptied, amount=account.balance, change=deposit_change(card, account.balance))
