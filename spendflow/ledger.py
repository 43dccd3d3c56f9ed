"""Ledger operations: validate against fresh data, then write.

Each record_* function holds the database write lock while it re-reads the
cards and savings accounts, runs the matching plan_* validator and stores
the outcome, so two concurrent writers can never both spend the same
balance. Rejections are returned without writing anything.
"""

import logging
import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import uuid4

from spendflow.domain.balances import apply_balance_change
from spendflow.domain.cards import Card, CardLimits, validate_card_limit
from spendflow.domain.currency import CurrencyContext
from spendflow.domain.models import CardId, Money, SavingsId, TransactionId
from spendflow.domain.refunds import RefundRequest, RefundState, plan_refund
from spendflow.domain.results import Approval, BalanceChange, ChargeApproval, Rejection, TransferApproval
from spendflow.domain.savings import (
    MAX_SAVINGS_ACCOUNTS,
    SavingsAccount,
    SavingsPlan,
    SavingsRequest,
    plan_savings_closure,
    plan_savings_deposit,
    plan_savings_withdrawal,
    validate_new_savings_account,
)
from spendflow.domain.transactions import (
    TransactionRequest,
    TransactionType,
    plan_transaction,
    validate_transaction,
)
from spendflow.domain.transfers import TransferRequest, plan_transfer, validate_transfer
from spendflow.store import feeds
from spendflow.store.queries import (
    delete_savings_account,
    fetch_cards,
    fetch_savings_accounts,
    fetch_transactions,
    get_cards,
    get_savings_accounts,
    get_transactions,
    insert_card,
    insert_savings_account,
    insert_transaction,
    save_card_balance,
    save_savings_balance,
    write_transaction,
)

logger = logging.getLogger(__name__)

RawAmount = str | int | float | Decimal | None


@dataclass(frozen=True)
class LedgerResult:
    """Immutable outcome of a committed ledger write.

    transaction_id is None only when an empty savings account was closed
    without moving any money.
    """

    transaction_id: TransactionId | None
    cards: list[Card]
    amount: Money
    warning: str | None = None
    refund_state: RefundState | None = None
    savings: SavingsAccount | None = None


def _rejected(operation: str, rejection: Rejection) -> Rejection:
    logger.info("%s rejected (%s): %s", operation, rejection.error, rejection.message)
    return rejection


def _commit(
    conn: sqlite3.Connection, record: dict[str, Any], changes: list[BalanceChange]
) -> tuple[TransactionId, list[Card]]:
    """Insert record and write each change's new balance."""
    txn_id = insert_transaction(conn, record)
    updated = []
    for change in changes:
        card = apply_balance_change(change)
        save_card_balance(conn, card.id, card.balance)
        updated.append(card)
    logger.debug("Committed %s #%s touching %d card(s)", record["type"], txn_id, len(updated))
    return txn_id, updated


def _publish(db_path: Path | None) -> None:
    feeds.publish(feeds.CARDS, get_cards(db_path))
    feeds.publish(feeds.TRANSACTIONS, get_transactions(db_path))
    feeds.publish(feeds.SAVINGS, get_savings_accounts(db_path))


def new_card_id() -> CardId:
    """Generate an opaque card id."""
    return CardId(uuid4().hex[:8])


def new_savings_id() -> SavingsId:
    """Generate an opaque savings account id."""
    return SavingsId(uuid4().hex[:8])


def add_new_card(card: Card, limits: CardLimits | None = None, db_path: Path | None = None) -> Approval | Rejection:
    """Store a card if the user is still under their card limits.

    Args:
        card: Card to add.
        limits: Card count limits. Defaults to CardLimits().
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Approval carrying the stored card, or a CARD_LIMIT_REACHED Rejection.
    """
    with write_transaction(db_path) as conn:
        result = validate_card_limit(fetch_cards(conn), card.type, limits)
        if isinstance(result, Rejection):
            return _rejected("Add card", result)
        insert_card(conn, card)

    _publish(db_path)
    return Approval(card=card)


def check_transaction(
    amount: RawAmount,
    card_id: str | None,
    context: CurrencyContext,
    transaction_type: TransactionType = TransactionType.EXPENSE,
    db_path: Path | None = None,
) -> ChargeApproval | Rejection:
    """Run the pre-submit checks for a transaction without writing."""
    cards = get_cards(db_path)
    return validate_transaction(
        TransactionRequest(
            amount=amount,
            card_id=card_id,
            cards=cards,
            currency=context.symbol,
            transaction_type=transaction_type,
        )
    )


def check_transfer(
    amount: RawAmount,
    from_card_id: str | None,
    to_card_id: str | None,
    context: CurrencyContext,
    db_path: Path | None = None,
) -> TransferApproval | Rejection:
    """Run the pre-submit checks for a transfer without writing."""
    cards = get_cards(db_path)
    return validate_transfer(
        TransferRequest(
            amount=amount,
            from_card_id=from_card_id,
            to_card_id=to_card_id,
            cards=cards,
            currency=context.symbol,
        )
    )


def _record_card_transaction(
    transaction_type: TransactionType,
    amount: RawAmount,
    card_id: str | None,
    context: CurrencyContext,
    date: str,
    category: str,
    description: str,
    db_path: Path | None,
) -> LedgerResult | Rejection:
    with write_transaction(db_path) as conn:
        change = plan_transaction(
            TransactionRequest(
                amount=amount,
                card_id=card_id,
                cards=fetch_cards(conn),
                currency=context.symbol,
                transaction_type=transaction_type,
            )
        )
        if isinstance(change, Rejection):
            return _rejected(transaction_type.capitalize(), change)

        record = {
            "type": transaction_type,
            "date": date,
            "amount": change.amount,
            "category": category,
            "description": description,
            "card_id": change.card.id,
        }
        txn_id, cards = _commit(conn, record, [change])

    _publish(db_path)
    return LedgerResult(transaction_id=txn_id, cards=cards, amount=change.amount, warning=change.warning)


def record_expense(
    amount: RawAmount,
    card_id: str | None,
    context: CurrencyContext,
    date: str,
    category: str = "",
    description: str = "",
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Charge an expense to a card.

    Args:
        amount: Amount as entered.
        card_id: Card to charge.
        context: Session currency context.
        date: Transaction date (YYYY-MM-DD).
        category: Spending category.
        description: Free-text description.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        LedgerResult (warning set when the overdraft was used), or a Rejection.
    """
    return _record_card_transaction(
        TransactionType.EXPENSE, amount, card_id, context, date, category, description or "Expense", db_path
    )


def record_income(
    amount: RawAmount,
    card_id: str | None,
    context: CurrencyContext,
    date: str,
    source: str = "",
    description: str = "",
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Pay income into a card. Income is never balance-checked."""
    return _record_card_transaction(
        TransactionType.INCOME, amount, card_id, context, date, source, description or "Income", db_path
    )


def record_refund(
    amount: RawAmount,
    original_transaction_id: int,
    context: CurrencyContext,
    date: str,
    card_id: str | None = None,
    reason: str = "",
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Refund part or all of an earlier expense.

    Args:
        amount: Amount as entered.
        original_transaction_id: Expense being refunded.
        context: Session currency context.
        date: Refund date (YYYY-MM-DD).
        card_id: Card to credit. Defaults to the card the expense used.
        reason: Free-text reason.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        LedgerResult with the expense's refund state afterwards, or a Rejection.
    """
    with write_transaction(db_path) as conn:
        transactions = fetch_transactions(conn)
        plan = plan_refund(
            RefundRequest(
                amount=amount,
                original_transaction_id=original_transaction_id,
                transactions=transactions,
                cards=fetch_cards(conn),
                card_id=card_id,
                currency=context.symbol,
            )
        )
        if isinstance(plan, Rejection):
            return _rejected("Refund", plan)

        original = next(t for t in transactions if t.id == original_transaction_id)
        record = {
            "type": TransactionType.REFUND,
            "date": date,
            "amount": plan.change.amount,
            "category": "Refund",
            "description": reason or f"Refund for: {original.description or original.category}",
            "card_id": plan.change.card.id,
            "original_transaction_id": original.id,
        }
        txn_id, cards = _commit(conn, record, [plan.change])

    _publish(db_path)
    return LedgerResult(transaction_id=txn_id, cards=cards, amount=plan.change.amount, refund_state=plan.state)


def record_transfer(
    amount: RawAmount,
    from_card_id: str | None,
    to_card_id: str | None,
    context: CurrencyContext,
    date: str,
    note: str = "",
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Move money between two of the user's cards.

    Args:
        amount: Amount as entered.
        from_card_id: Source card.
        to_card_id: Destination card.
        context: Session currency context.
        date: Transfer date (YYYY-MM-DD).
        note: Free-text note.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        LedgerResult with both updated cards, or a Rejection.
    """
    with write_transaction(db_path) as conn:
        plan = plan_transfer(
            TransferRequest(
                amount=amount,
                from_card_id=from_card_id,
                to_card_id=to_card_id,
                cards=fetch_cards(conn),
                currency=context.symbol,
            )
        )
        if isinstance(plan, Rejection):
            return _rejected("Transfer", plan)

        record = {
            "type": TransactionType.TRANSFER,
            "date": date,
            "amount": plan.amount,
            "category": "Transfer",
            "description": note or f"Transfer to {plan.destination.card.display_name}",
            "from_card_id": plan.source.card.id,
            "to_card_id": plan.destination.card.id,
        }
        txn_id, cards = _commit(conn, record, [plan.source, plan.destination])

    _publish(db_path)
    return LedgerResult(transaction_id=txn_id, cards=cards, amount=plan.amount, warning=plan.source.warning)


def open_savings_account(
    account: SavingsAccount,
    context: CurrencyContext,
    max_accounts: int = MAX_SAVINGS_ACCOUNTS,
    db_path: Path | None = None,
) -> Approval | Rejection:
    """Store a new savings account if the user may open one.

    The opening balance is recorded as it stands; no card is charged for it.

    Args:
        account: Account to open.
        context: Session currency context.
        max_accounts: Maximum number of savings accounts.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Approval, or the first Rejection.
    """
    with write_transaction(db_path) as conn:
        result = validate_new_savings_account(
            account, fetch_savings_accounts(conn), fetch_cards(conn), max_accounts, context.symbol
        )
        if isinstance(result, Rejection):
            return _rejected("Open savings", result)
        insert_savings_account(conn, account)

    _publish(db_path)
    return result


def _commit_savings(
    conn: sqlite3.Connection, plan: SavingsPlan, record: dict[str, Any]
) -> tuple[TransactionId, list[Card]]:
    """Store the savings side of plan, then the card side with its record."""
    save_savings_balance(conn, plan.account.id, plan.account.balance)
    changes = [plan.change] if plan.change is not None else []
    return _commit(conn, record, changes)


def record_savings_deposit(
    amount: RawAmount,
    account_id: str | None,
    context: CurrencyContext,
    date: str,
    card_id: str | None = None,
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Move money from a debit card into a savings account.

    Args:
        amount: Amount as entered.
        account_id: Savings account to pay into.
        context: Session currency context.
        date: Transfer date (YYYY-MM-DD).
        card_id: Debit card to take the money from. Defaults to the linked card.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        LedgerResult with the updated card and savings account, or a Rejection.
    """
    with write_transaction(db_path) as conn:
        plan = plan_savings_deposit(
            SavingsRequest(
                amount=amount,
                account_id=account_id,
                accounts=fetch_savings_accounts(conn),
                cards=fetch_cards(conn),
                card_id=card_id,
                currency=context.symbol,
            )
        )
        if isinstance(plan, Rejection):
            return _rejected("Savings deposit", plan)

        change = plan.change
        record = {
            "type": TransactionType.TRANSFER,
            "date": date,
            "amount": plan.amount,
            "category": "Savings",
            "description": f"Transfer to {plan.account.name}",
            "from_card_id": change.card.id if change else None,
            "savings_account_id": plan.account.id,
        }
        txn_id, cards = _commit_savings(conn, plan, record)

    _publish(db_path)
    return LedgerResult(
        transaction_id=txn_id,
        cards=cards,
        amount=plan.amount,
        warning=change.warning if change else None,
        savings=plan.account,
    )


def record_savings_withdrawal(
    amount: RawAmount,
    account_id: str | None,
    context: CurrencyContext,
    date: str,
    card_id: str | None = None,
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Move money from a savings account back to a debit card.

    Args:
        amount: Amount as entered.
        account_id: Savings account to take the money from.
        context: Session currency context.
        date: Transfer date (YYYY-MM-DD).
        card_id: Debit card to pay into. Defaults to the linked card.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        LedgerResult with the updated card and savings account, or a Rejection.
    """
    with write_transaction(db_path) as conn:
        plan = plan_savings_withdrawal(
            SavingsRequest(
                amount=amount,
                account_id=account_id,
                accounts=fetch_savings_accounts(conn),
                cards=fetch_cards(conn),
                card_id=card_id,
                currency=context.symbol,
            )
        )
        if isinstance(plan, Rejection):
            return _rejected("Savings withdrawal", plan)

        record = {
            "type": TransactionType.TRANSFER,
            "date": date,
            "amount": plan.amount,
            "category": "Savings",
            "description": f"Transfer from {plan.account.name}",
            "to_card_id": plan.change.card.id if plan.change else None,
            "savings_account_id": plan.account.id,
        }
        txn_id, cards = _commit_savings(conn, plan, record)

    _publish(db_path)
    return LedgerResult(transaction_id=txn_id, cards=cards, amount=plan.amount, savings=plan.account)


def close_savings_account(
    account_id: str | None,
    context: CurrencyContext,
    date: str,
    card_id: str | None = None,
    db_path: Path | None = None,
) -> LedgerResult | Rejection:
    """Close a savings account, paying any remaining balance to a debit card.

    Args:
        account_id: Savings account to close.
        context: Session currency context.
        date: Date of the final transfer (YYYY-MM-DD).
        card_id: Debit card to receive the balance. Defaults to the linked card.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        LedgerResult (transaction_id None when the account was empty), or a Rejection.
    """
    with write_transaction(db_path) as conn:
        accounts = fetch_savings_accounts(conn)
        plan = plan_savings_closure(account_id, accounts, fetch_cards(conn), card_id)
        if isinstance(plan, Rejection):
            return _rejected("Close savings", plan)

        txn_id: TransactionId | None = None
        cards: list[Card] = []
        if plan.change is not None:
            record = {
                "type": TransactionType.TRANSFER,
                "date": date,
                "amount": plan.amount,
                "category": "Savings",
                "description": f"Final transfer from {plan.account.name} (Account Closure)",
                "to_card_id": plan.change.card.id,
                "savings_account_id": plan.account.id,
            }
            txn_id, cards = _commit(conn, record, [plan.change])
        delete_savings_account(conn, plan.account.id)
        logger.debug("Closed savings account %s", plan.account.id)

    _publish(db_path)
    return LedgerResult(transaction_id=txn_id, cards=cards, amount=plan.amount, savings=plan.account)
