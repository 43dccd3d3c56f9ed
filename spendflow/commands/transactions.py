"""Transaction commands: expense, income, refund, refundable and check."""

import sqlite3

from rich.table import Table

from spendflow.commands.output import (
    console,
    fail,
    normalize_date_or_exit,
    print_card_balances,
    render_rejection,
    require_database,
)
from spendflow.domain.currency import CurrencyContext, format_amount
from spendflow.domain.models import TransactionId
from spendflow.domain.refunds import RefundStatus, refund_state, refundable_transactions
from spendflow.domain.results import Rejection
from spendflow.domain.transactions import TransactionType
from spendflow.ledger import (
    LedgerResult,
    check_transaction,
    check_transfer,
    record_expense,
    record_income,
    record_refund,
)
from spendflow.store.queries import get_refunds_for, get_transaction, get_transactions


def _report(result: LedgerResult | Rejection, label: str, context: CurrencyContext) -> None:
    if isinstance(result, Rejection):
        render_rejection(result)

    console.print(
        f"[green]✓[/green] {label} of {format_amount(result.amount, context)} recorded "
        f"[dim](ID: {result.transaction_id})[/dim]"
    )
    print_card_balances(result.cards, context)
    if result.warning:
        console.print(f"[yellow]⚠ {result.warning}[/yellow]")


def expense_command(
    context: CurrencyContext,
    amount: str,
    card_id: str | None,
    category: str = "",
    description: str = "",
    date: str | None = None,
) -> None:
    """Record an expense against a card.

    Args:
        context: Session currency context.
        amount: Amount as typed ("12.50", "£1,234.56").
        card_id: Card to charge.
        category: Spending category.
        description: Free-text description.
        date: Transaction date. Defaults to today.
    """
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        result = record_expense(amount, card_id, context, normalized_date, category, description)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    _report(result, "Expense", context)


def income_command(
    context: CurrencyContext,
    amount: str,
    card_id: str | None,
    source: str = "",
    description: str = "",
    date: str | None = None,
) -> None:
    """Record income paid into a card."""
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        result = record_income(amount, card_id, context, normalized_date, source, description)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    _report(result, "Income", context)


def refund_command(
    context: CurrencyContext,
    transaction_id: int,
    amount: str | None = None,
    card_id: str | None = None,
    reason: str = "",
    date: str | None = None,
) -> None:
    """Refund part or all of an expense.

    Args:
        context: Session currency context.
        transaction_id: Expense to refund (from 'spendflow refundable').
        amount: Amount to refund. Defaults to everything still refundable.
        card_id: Card to credit. Defaults to the card the expense used.
        reason: Free-text reason.
        date: Refund date. Defaults to today.
    """
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        if amount is None:
            original = get_transaction(TransactionId(transaction_id))
            if original is None:
                fail(f"Transaction {transaction_id} not found")
            amount = str(refund_state(original, get_refunds_for(original.id)).remaining)

        result = record_refund(amount, transaction_id, context, normalized_date, card_id, reason)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    _report(result, "Refund", context)
    if isinstance(result, LedgerResult) and result.refund_state is not None:
        state = result.refund_state
        if state.status is RefundStatus.FULL:
            console.print(f"[dim]Transaction {transaction_id} is now fully refunded[/dim]")
        else:
            console.print(
                f"[dim]Transaction {transaction_id}: {format_amount(state.remaining, context)} "
                "still refundable[/dim]"
            )


def refundable_command(context: CurrencyContext) -> None:
    """List expenses that can still be refunded."""
    require_database()

    try:
        transactions = get_transactions()
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    refundable = refundable_transactions(transactions)
    if not refundable:
        console.print("[yellow]No refundable transactions[/yellow]")
        return

    table = Table(title=f"Refundable transactions ({len(refundable)})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right")
    table.add_column("Refunded", justify="right")
    table.add_column("Remaining", justify="right", style="green")

    for txn, state in refundable:
        refunded = format_amount(state.refunded, context) if state.refunded else "[dim]-[/dim]"
        table.add_row(
            str(txn.id),
            txn.date,
            txn.description,
            txn.category or "[dim]-[/dim]",
            format_amount(txn.amount, context),
            refunded,
            format_amount(state.remaining, context),
        )

    console.print(table)


def check_command(
    context: CurrencyContext,
    amount: str,
    card_id: str | None,
    to_card_id: str | None = None,
    transaction_type: TransactionType = TransactionType.EXPENSE,
) -> None:
    """Check whether a transaction or transfer would be accepted, without recording it."""
    require_database()

    try:
        if to_card_id is not None:
            result = check_transfer(amount, card_id, to_card_id, context)
        else:
            result = check_transaction(amount, card_id, context, transaction_type)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if isinstance(result, Rejection):
        render_rejection(result)

    console.print(f"[green]✓ OK:[/green] {format_amount(result.amount, context)} would be accepted")
