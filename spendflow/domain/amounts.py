"""Pure functions for parsing, bounding and formatting monetary amounts.

Amounts arrive as strings typed into forms or stored by older clients
("-£12.50", "£1,234.56") as well as plain numbers. Everything is normalized
to Money (Decimal) here; formatting back to text only happens for display.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext

from spendflow.domain.models import ZERO, CurrencySymbol, Money
from spendflow.domain.results import AmountApproval, ErrorKind, Rejection

MAX_TRANSACTION_AMOUNT = Money(Decimal("1000000"))

# Largest opening balance, limit or goal an account may be given
MAX_ACCOUNT_AMOUNT = Money(Decimal("1000000000"))

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_PENNY = Decimal("0.01")


def parse_amount(value: str | int | float | Decimal | None) -> Money:
    """Normalize a monetary value to Money.

    Strings have every character other than digits, "." and "-" removed and
    the longest leading number is taken, so "£1,234.56" parses to 1234.56 and
    "-£12.50" to -12.50. Anything unparseable is 0.

    Args:
        value: Raw amount (string, number or None).

    Returns:
        Parsed amount. Already-parsed Decimals are returned unchanged.
    """
    if isinstance(value, Decimal):
        return Money(value) if value.is_finite() else ZERO

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return ZERO
        return Money(Decimal(str(value)))

    if not value:
        return ZERO

    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return ZERO

    return Money(Decimal(match.group(0)))


def round_money(amount: Money) -> Money:
    """Round amount to whole pence, half up, whatever its magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        return Money(amount.quantize(_PENNY, rounding=ROUND_HALF_UP))


def to_minor_units(amount: Money) -> int:
    """Convert amount to integer minor units (pence), rounding half up."""
    return int((amount / _PENNY).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int | None) -> Money:
    """Convert integer minor units (pence) back to Money."""
    if minor is None:
        return ZERO
    return Money(Decimal(minor) * _PENNY)


def format_money(amount: Money, symbol: CurrencySymbol | str = "£", include_sign: bool = False) -> str:
    """Format money amount for display.

    Args:
        amount: Amount in major units.
        symbol: Currency symbol to prefix.
        include_sign: Whether to prefix positive amounts with "+".

    Returns:
        Formatted string (e.g., "£1,234.56", "-£12.50" or "+£5.00").
    """
    magnitude = round_money(Money(abs(amount)))
    formatted = f"{symbol}{magnitude:,.2f}"

    if amount < 0:
        return f"-{formatted}"
    if include_sign and amount > 0:
        return f"+{formatted}"
    return formatted


def validate_amount(
    value: str | int | float | Decimal | None, symbol: CurrencySymbol | str = "£"
) -> AmountApproval | Rejection:
    """Reject non-positive amounts and amounts above the transaction ceiling.

    The accepted amount is rounded to whole pence, so anything that rounds
    to zero is rejected and the approved value is exactly what gets stored.
    The ceiling applies to the amount as entered.

    Args:
        value: Raw amount as entered.
        symbol: Currency symbol for the message.

    Returns:
        AmountApproval carrying the rounded amount, or a Rejection.
    """
    parsed = parse_amount(value)

    if parsed > MAX_TRANSACTION_AMOUNT:
        return Rejection(
            error=ErrorKind.AMOUNT_TOO_LARGE,
            title="Amount Too Large",
            message=(
                f"Maximum transaction amount is {format_money(MAX_TRANSACTION_AMOUNT, symbol)}. "
                "Please enter a smaller amount."
            ),
            parsed=parsed,
        )

    amount = round_money(parsed) if parsed > 0 else parsed
    if amount <= 0:
        return Rejection(
            error=ErrorKind.INVALID_AMOUNT,
            title="Invalid Amount",
            message="Please enter a valid amount greater than zero.",
            parsed=amount,
        )

    return AmountApproval(amount=amount)
