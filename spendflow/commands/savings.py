"""Savings commands: open, list, pay in, take out and close savings accounts."""

import sqlite3
import tomllib

from rich.table import Table

from spendflow.commands.output import (
    console,
    fail,
    normalize_date_or_exit,
    print_card_balances,
    render_rejection,
    require_database,
)
from spendflow.config import get_savings_limit, load_config_or_default
from spendflow.domain.currency import CurrencyContext, format_amount
from spendflow.domain.results import Rejection
from spendflow.domain.savings import SavingsAccount, savings_from_record
from spendflow.ledger import (
    LedgerResult,
    close_savings_account,
    new_savings_id,
    open_savings_account,
    record_savings_deposit,
    record_savings_withdrawal,
)
from spendflow.store.queries import get_cards, get_savings_accounts


def _print_savings(account: SavingsAccount, context: CurrencyContext) -> None:
    console.print(
        f"  {account.name}: [green]{format_amount(account.balance, context)}[/green] "
        f"[dim]({account.progress:.0f}% of {format_amount(account.goal, context)})[/dim]"
    )


def open_savings_command(
    context: CurrencyContext,
    name: str,
    goal: str,
    balance: str = "0",
    card_id: str | None = None,
) -> None:
    """Open a savings account.

    Args:
        context: Session currency context.
        name: Account name; must be unique.
        goal: Savings target.
        balance: Opening balance. No card is charged for it.
        card_id: Debit card to link for transfers.
    """
    require_database()

    account = savings_from_record(
        {"id": new_savings_id(), "name": name, "balance": balance, "goal": goal, "linked_card_id": card_id}
    )

    try:
        max_accounts = get_savings_limit(load_config_or_default())
        result = open_savings_account(account, context, max_accounts)
    except (tomllib.TOMLDecodeError, ValueError) as e:
        fail(f"Config error: {e}")
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if isinstance(result, Rejection):
        render_rejection(result)

    console.print(f"[green]✓[/green] Opened savings account: {account.name}")
    console.print(f"  ID: [cyan]{account.id}[/cyan]")
    _print_savings(account, context)


def savings_command(context: CurrencyContext) -> None:
    """List savings accounts with their progress towards each goal."""
    require_database()

    try:
        accounts = get_savings_accounts()
        names = {card.id: card.display_name for card in get_cards()}
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if not accounts:
        console.print("[yellow]No savings accounts yet. Open one with 'spendflow open-savings'.[/yellow]")
        return

    table = Table(title="Savings accounts")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Balance", justify="right", style="green")
    table.add_column("Goal", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Card", style="dim")

    for account in accounts:
        linked = names.get(account.linked_card_id, account.linked_card_id) if account.linked_card_id else None
        table.add_row(
            account.id,
            account.name,
            format_amount(account.balance, context),
            format_amount(account.goal, context),
            f"{account.progress:.0f}%",
            linked or "[dim]-[/dim]",
        )

    console.print(table)


def _report_move(result: LedgerResult | Rejection, verb: str, context: CurrencyContext) -> None:
    if isinstance(result, Rejection):
        render_rejection(result)

    console.print(
        f"[green]✓[/green] {verb} {format_amount(result.amount, context)} "
        f"[dim](ID: {result.transaction_id})[/dim]"
    )
    print_card_balances(result.cards, context)
    if result.savings is not None:
        _print_savings(result.savings, context)
    if result.warning:
        console.print(f"[yellow]⚠ {result.warning}[/yellow]")


def save_command(
    context: CurrencyContext,
    amount: str,
    account_id: str | None,
    card_id: str | None = None,
    date: str | None = None,
) -> None:
    """Move money from a debit card into savings."""
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        result = record_savings_deposit(amount, account_id, context, normalized_date, card_id)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    _report_move(result, "Saved", context)


def withdraw_command(
    context: CurrencyContext,
    amount: str,
    account_id: str | None,
    card_id: str | None = None,
    date: str | None = None,
) -> None:
    """Move money from savings back to a debit card."""
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        result = record_savings_withdrawal(amount, account_id, context, normalized_date, card_id)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    _report_move(result, "Withdrew", context)


def close_savings_command(
    context: CurrencyContext,
    account_id: str,
    card_id: str | None = None,
    date: str | None = None,
) -> None:
    """Close a savings account, paying what is left to a debit card."""
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        result = close_savings_account(account_id, context, normalized_date, card_id)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if isinstance(result, Rejection):
        render_rejection(result)

    name = result.savings.name if result.savings else account_id
    console.print(f"[green]✓[/green] Closed savings account: {name}")
    if result.transaction_id is not None:
        console.print(f"  {format_amount(result.amount, context)} paid out [dim](ID: {result.transaction_id})[/dim]")
        print_card_balances(result.cards, context)
