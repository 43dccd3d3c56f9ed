"""CLI entry point for spendflow."""

import tomllib

import typer

from spendflow.commands.admin import init_command, list_command
from spendflow.commands.cards import add_card_command, cards_command, summary_command
from spendflow.commands.output import fail
from spendflow.commands.savings import (
    close_savings_command,
    open_savings_command,
    save_command,
    savings_command,
    withdraw_command,
)
from spendflow.commands.transactions import (
    check_command,
    expense_command,
    income_command,
    refund_command,
    refundable_command,
)
from spendflow.commands.transfers import transfer_command
from spendflow.config import get_currency_context, load_config_or_default
from spendflow.domain.cards import CardType
from spendflow.domain.transactions import TransactionType
from spendflow.log import init_logging

app = typer.Typer(
    name="spendflow",
    help="SpendFlow - track spending across your debit and credit cards",
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """SpendFlow - track spending across your debit and credit cards."""
    init_logging(verbose)
    try:
        ctx.obj = get_currency_context(load_config_or_default())
    except tomllib.TOMLDecodeError as e:
        fail(f"Config error: {e}")


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
    currency: str = typer.Option("GBP", "--currency", "-c", help="Currency code (e.g. GBP, USD, EUR)"),
) -> None:
    """Initialize spendflow database and configuration."""
    init_command(force, currency)


@app.command(name="add-card")
def add_card(
    ctx: typer.Context,
    card_type: CardType = typer.Option(..., "--type", "-t", help="Card type"),
    bank: str = typer.Option("", "--bank", help="Bank name"),
    last_four: str = typer.Option("", "--last-four", help="Last four digits of the card number"),
    balance: str = typer.Option("0", "--balance", help="Opening balance (amount owed for credit cards)"),
    limit: str = typer.Option(None, "--limit", help="Credit limit (credit cards only)"),
    overdraft: str = typer.Option(None, "--overdraft", help="Overdraft limit (debit cards only)"),
) -> None:
    """Add a debit or credit card."""
    add_card_command(ctx.obj, card_type, bank, last_four, balance, limit, overdraft)


@app.command()
def cards(ctx: typer.Context) -> None:
    """List your cards with balances and available funds."""
    cards_command(ctx.obj)


@app.command()
def summary(ctx: typer.Context) -> None:
    """Show your net position and credit utilization."""
    summary_command(ctx.obj)


@app.command()
def check(
    ctx: typer.Context,
    amount: str,
    card: str = typer.Option(None, "--card", help="Card ID (source card for transfers)"),
    to: str = typer.Option(None, "--to", help="Destination card ID; checks a transfer"),
    transaction_type: TransactionType = typer.Option(TransactionType.EXPENSE, "--type", "-t", help="Transaction type"),
) -> None:
    """Check whether a transaction would be accepted, without recording it."""
    check_command(ctx.obj, amount, card, to, transaction_type)


@app.command()
def expense(
    ctx: typer.Context,
    amount: str,
    card: str = typer.Option(None, "--card", help="Card ID to charge"),
    category: str = typer.Option("", "--category", help="Spending category"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Record an expense."""
    expense_command(ctx.obj, amount, card, category, description, date)


@app.command()
def income(
    ctx: typer.Context,
    amount: str,
    card: str = typer.Option(None, "--card", help="Card ID to pay into"),
    source: str = typer.Option("", "--source", help="Income source (e.g. Salary)"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Record income."""
    income_command(ctx.obj, amount, card, source, description, date)


@app.command()
def refund(
    ctx: typer.Context,
    transaction_id: int,
    amount: str = typer.Argument(None, help="Amount to refund (default: everything still refundable)"),
    card: str = typer.Option(None, "--card", help="Card ID to credit (default: the card the expense used)"),
    reason: str = typer.Option("", "--reason", help="Reason for the refund"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Refund part or all of an expense."""
    refund_command(ctx.obj, transaction_id, amount, card, reason, date)


@app.command()
def refundable(ctx: typer.Context) -> None:
    """List expenses that can still be refunded."""
    refundable_command(ctx.obj)


@app.command()
def transfer(
    ctx: typer.Context,
    amount: str,
    from_card: str = typer.Option(None, "--from", help="Source card ID"),
    to_card: str = typer.Option(None, "--to", help="Destination card ID"),
    note: str = typer.Option("", "--note", help="Note"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Move money between two of your cards."""
    transfer_command(ctx.obj, amount, from_card, to_card, note, date)


@app.command(name="open-savings")
def open_savings(
    ctx: typer.Context,
    name: str,
    goal: str = typer.Option(..., "--goal", help="Savings target"),
    balance: str = typer.Option("0", "--balance", help="Opening balance"),
    card: str = typer.Option(None, "--card", help="Debit card ID to link for transfers"),
) -> None:
    """Open a savings account."""
    open_savings_command(ctx.obj, name, goal, balance, card)


@app.command()
def savings(ctx: typer.Context) -> None:
    """List your savings accounts and progress towards each goal."""
    savings_command(ctx.obj)


@app.command()
def save(
    ctx: typer.Context,
    amount: str,
    account: str = typer.Option(None, "--to", help="Savings account ID"),
    card: str = typer.Option(None, "--card", help="Debit card ID (default: the linked card)"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Move money from a debit card into savings."""
    save_command(ctx.obj, amount, account, card, date)


@app.command()
def withdraw(
    ctx: typer.Context,
    amount: str,
    account: str = typer.Option(None, "--from", help="Savings account ID"),
    card: str = typer.Option(None, "--card", help="Debit card ID (default: the linked card)"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Move money from savings back to a debit card."""
    withdraw_command(ctx.obj, amount, account, card, date)


@app.command(name="close-savings")
def close_savings(
    ctx: typer.Context,
    account: str,
    card: str = typer.Option(None, "--card", help="Debit card ID to receive the balance (default: the linked card)"),
    date: str = typer.Option(None, "--date", help="Date (default: today)"),
) -> None:
    """Close a savings account, paying any balance to a debit card."""
    close_savings_command(ctx.obj, account, card, date)


@app.command(name="list")
def list_transactions(
    ctx: typer.Context,
    limit: int = typer.Option(50, help="Maximum transactions to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all your transactions"),
) -> None:
    """List your transactions."""
    list_command(ctx.obj, limit, all)


if __name__ == "__main__":
    app()
