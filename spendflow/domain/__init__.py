"""Domain models and rules for spendflow.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Transaction validation separated from persistence and presentation
"""

from spendflow.domain.models import CardId, CurrencySymbol, Money, SavingsId, TransactionId
from spendflow.domain.results import (
    AmountApproval,
    Approval,
    BalanceChange,
    CardApproval,
    ChargeApproval,
    ErrorKind,
    RefundApproval,
    RefundPlan,
    Rejection,
    TransferApproval,
    TransferPlan,
)

__all__ = [
    "Money",
    "CardId",
    "TransactionId",
    "SavingsId",
    "CurrencySymbol",
    "AmountApproval",
    "Approval",
    "BalanceChange",
    "CardApproval",
    "ChargeApproval",
    "ErrorKind",
    "RefundApproval",
    "RefundPlan",
    "Rejection",
    "TransferApproval",
    "TransferPlan",
]
