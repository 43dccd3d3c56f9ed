"""Pure functions for balance mutations and account summaries.

All monetary amounts are Money (Decimal, major units).
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace

from spendflow.domain.cards import Card
from spendflow.domain.funds import available_credit
from spendflow.domain.models import ZERO, Money
from spendflow.domain.results import BalanceChange

HIGH_UTILIZATION = 70.0
MEDIUM_UTILIZATION = 30.0


@dataclass(frozen=True)
class CreditUtilization:
    """Immutable credit usage across one or more credit cards."""

    percentage: float
    used: Money
    limit: Money


@dataclass(frozen=True)
class BalanceSummary:
    """Immutable net position across all accounts."""

    total: Money
    debit: Money
    savings: Money
    credit_owed: Money


def deposit_change(card: Card, amount: Money) -> BalanceChange:
    """Compute the effect of money arriving on a card.

    Debit cards gain funds. Credit cards owe less (and can go into credit).
    """
    if card.is_credit:
        new_balance = Money(card.balance - amount)
        return BalanceChange(
            card=card,
            amount=amount,
            new_balance=new_balance,
            remaining_credit=Money(card.limit - new_balance),
        )
    return BalanceChange(card=card, amount=amount, new_balance=Money(card.balance + amount))


def withdrawal_change(card: Card, amount: Money) -> BalanceChange:
    """Compute the effect of moving money off a credit card.

    No limit check is applied; transfers out of credit cards are not
    validated for available credit.
    """
    return BalanceChange(
        card=card,
        amount=amount,
        new_balance=Money(card.balance + amount),
        remaining_credit=Money(available_credit(card) - amount),
    )


def apply_balance_change(change: BalanceChange) -> Card:
    """Produce the card as it should be stored after change.

    A debit card that dipped into its overdraft is stored with a negative
    balance equal to the overdraft in use, so the next funds check sees
    the reduced headroom.

    Args:
        change: Approved balance change.

    Returns:
        New Card snapshot with the updated balance.
    """
    if change.card.is_debit and change.used_overdraft:
        return replace(change.card, balance=Money(change.new_balance - change.overdraft_used))
    return replace(change.card, balance=change.new_balance)


def overdraft_in_use(card: Card) -> Money:
    """Amount of overdraft currently drawn on a debit card."""
    if card.is_debit and card.balance < 0:
        return Money(-card.balance)
    return ZERO


def card_utilization(card: Card) -> float:
    """Percentage of a credit card's limit currently owed (0 with no limit)."""
    if card.limit <= 0:
        return 0.0
    return float(card.balance / card.limit * 100)


def credit_utilization(cards: Iterable[Card]) -> CreditUtilization:
    """Calculate combined utilization over all credit cards.

    Args:
        cards: Any cards; debit cards are ignored.

    Returns:
        CreditUtilization (all zero when there are no credit cards).
    """
    credit_cards = [c for c in cards if c.is_credit]
    used = Money(sum((c.balance for c in credit_cards), ZERO))
    limit = Money(sum((c.limit for c in credit_cards), ZERO))

    percentage = float(used / limit * 100) if limit > 0 else 0.0
    return CreditUtilization(percentage=percentage, used=used, limit=limit)


def utilization_band(percentage: float) -> str:
    """Classify utilization as "high" (>70%), "medium" (>30%) or "low"."""
    if percentage > HIGH_UTILIZATION:
        return "high"
    if percentage > MEDIUM_UTILIZATION:
        return "medium"
    return "low"


def balance_summary(cards: Iterable[Card], savings: Iterable[Money] = ()) -> BalanceSummary:
    """Calculate net position: debit funds plus savings minus credit owed.

    Args:
        cards: The user's cards.
        savings: Savings account balances.

    Returns:
        BalanceSummary with the total and its components.
    """
    cards = list(cards)
    debit = Money(sum((c.balance for c in cards if c.is_debit), ZERO))
    credit_owed = Money(sum((c.balance for c in cards if c.is_credit), ZERO))
    saved = Money(sum(savings, ZERO))

    return BalanceSummary(
        total=Money(debit + saved - credit_owed),
        debit=debit,
        savings=saved,
        credit_owed=credit_owed,
    )
