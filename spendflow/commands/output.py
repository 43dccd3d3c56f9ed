"""Console helpers shared by the commands."""

import sys
from typing import NoReturn

from rich.console import Console

from spendflow.dates import normalize_date
from spendflow.domain.cards import Card
from spendflow.domain.currency import CurrencyContext, format_amount
from spendflow.domain.results import Rejection, suggestion_for
from spendflow.store.schema import database_exists, get_db_path

console = Console()


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]{message}[/red]", style="bold")
    sys.exit(1)


def require_database() -> None:
    """Exit unless 'spendflow init' has been run."""
    if not database_exists():
        console.print("[red]Database not found. Run 'spendflow init' first.[/red]", style="bold")
        console.print(f"[dim]Expected location: {get_db_path()}[/dim]")
        sys.exit(1)


def render_rejection(rejection: Rejection) -> NoReturn:
    """Show a rejection with a follow-up hint, then exit with status 1."""
    console.print(f"[red]✗ {rejection.title}[/red]", style="bold")
    console.print(f"  {rejection.message}")
    console.print(f"[dim]{suggestion_for(rejection)}[/dim]")
    sys.exit(1)


def balance_display(card: Card, context: CurrencyContext) -> str:
    """Format a card balance, red when a debit card is overdrawn or credit is owed."""
    amount = format_amount(card.balance, context)
    if card.is_debit and card.balance < 0:
        return f"[red]{amount}[/red]"
    if card.is_credit and card.balance > 0:
        return f"[red]{amount} owed[/red]"
    return f"[green]{amount}[/green]"


def print_card_balances(cards: list[Card], context: CurrencyContext) -> None:
    """Print the new balance of each card touched by a ledger write."""
    for card in cards:
        console.print(f"  {card.display_name}: {balance_display(card, context)}")


def normalize_date_or_exit(value: str | None) -> str:
    """Normalize a date option, exiting with a hint if it cannot be parsed."""
    try:
        return normalize_date(value)
    except ValueError as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)
