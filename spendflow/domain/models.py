"""Domain type definitions for spendflow.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in major currency units (e.g. pounds), fixed-point
- CardId: Opaque card identifier
- TransactionId: Ledger transaction identifier
- SavingsId: Opaque savings account identifier
- CurrencySymbol: Symbol interpolated into user-facing messages (e.g. "£")
"""

from decimal import Decimal
from typing import NewType

# Money amounts are Decimals so balances never pick up floating point drift
Money = NewType("Money", Decimal)

CardId = NewType("CardId", str)

TransactionId = NewType("TransactionId", int)

SavingsId = NewType("SavingsId", str)

CurrencySymbol = NewType("CurrencySymbol", str)

ZERO = Money(Decimal("0"))
