"""Card model and card-level rules.

Cards are immutable snapshots. Validators read them and propose new values;
only the ledger writes a replacement card back to the store.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from spendflow.domain.amounts import parse_amount, round_money
from spendflow.domain.models import ZERO, CardId, Money
from spendflow.domain.results import Approval, ErrorKind, Rejection


class CardType(StrEnum):
    """Kind of account a card represents."""

    DEBIT = "debit"
    CREDIT = "credit"


class InvalidCardRecord(ValueError):
    """Raised when a stored card record cannot be turned into a Card."""


@dataclass(frozen=True)
class Card:
    """Immutable debit or credit card snapshot.

    For debit cards balance is funds held (negative while overdrawn).
    For credit cards balance is the amount owed against limit.
    """

    id: CardId
    type: CardType
    balance: Money
    limit: Money = ZERO
    overdraft_enabled: bool = False
    overdraft_limit: Money = ZERO
    bank: str = ""
    last_four: str = ""

    @property
    def is_debit(self) -> bool:
        return self.type is CardType.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.type is CardType.CREDIT

    @property
    def display_name(self) -> str:
        """Human-readable name such as "Monzo ****1234"."""
        if self.last_four:
            return f"{self.bank or 'Card'} ****{self.last_four}"
        return self.bank or str(self.id)


@dataclass(frozen=True)
class CardLimits:
    """Maximum number of cards a user may hold."""

    debit: int = 2
    credit: int = 2
    total: int = 4


def card_from_record(record: dict[str, Any]) -> Card:
    """Build a Card from a stored or legacy record.

    Money fields may be numbers or formatted strings ("£1,234.56") and are
    rounded to whole pence. Both snake_case and the legacy camelCase keys are
    accepted.

    Args:
        record: Card record dictionary.

    Returns:
        Parsed Card.

    Raises:
        InvalidCardRecord: If the id is missing or the type is unknown.
    """
    card_id = record.get("id")
    if not card_id:
        raise InvalidCardRecord("Card record has no id")

    raw_type = str(record.get("type", "")).lower()
    try:
        card_type = CardType(raw_type)
    except ValueError:
        raise InvalidCardRecord(f"Card {card_id} has unknown type '{raw_type}'") from None

    overdraft_enabled = record.get("overdraft_enabled", record.get("overdraftEnabled", False))
    overdraft_limit = record.get("overdraft_limit", record.get("overdraftLimit"))
    credit_limit = record.get("limit", record.get("credit_limit"))

    return Card(
        id=CardId(str(card_id)),
        type=card_type,
        balance=round_money(parse_amount(record.get("balance"))),
        limit=round_money(parse_amount(credit_limit)),
        overdraft_enabled=bool(overdraft_enabled),
        overdraft_limit=round_money(parse_amount(overdraft_limit)),
        bank=str(record.get("bank") or ""),
        last_four=str(record.get("last_four", record.get("lastFour")) or ""),
    )


def validate_card_limit(
    existing: list[Card], new_type: CardType, limits: CardLimits | None = None
) -> Approval | Rejection:
    """Check whether another card of new_type may be added.

    Args:
        existing: Cards the user already holds.
        new_type: Type of the card being added.
        limits: Card count limits. Defaults to CardLimits().

    Returns:
        Approval, or a CARD_LIMIT_REACHED Rejection.
    """
    if limits is None:
        limits = CardLimits()

    debit_count = sum(1 for c in existing if c.is_debit)
    credit_count = sum(1 for c in existing if c.is_credit)

    # Total limit is checked first
    if len(existing) >= limits.total:
        return Rejection(
            error=ErrorKind.CARD_LIMIT_REACHED,
            title="Card Limit Reached",
            message=(
                f"You can only have {limits.total} cards total "
                f"({limits.debit} debit + {limits.credit} credit)."
            ),
        )

    if new_type is CardType.DEBIT and debit_count >= limits.debit:
        return Rejection(
            error=ErrorKind.CARD_LIMIT_REACHED,
            title="Debit Card Limit Reached",
            message=f"You can only have {limits.debit} debit cards.",
        )

    if new_type is CardType.CREDIT and credit_count >= limits.credit:
        return Rejection(
            error=ErrorKind.CARD_LIMIT_REACHED,
            title="Credit Card Limit Reached",
            message=f"You can only have {limits.credit} credit cards.",
        )

    return Approval()
