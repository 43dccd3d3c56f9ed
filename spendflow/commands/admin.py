"""Admin commands for init and listing transactions."""

import sqlite3
import sys
from pathlib import Path

from rich.table import Table

from spendflow.commands.output import console, fail, require_database
from spendflow.config import create_default_config, get_config_path
from spendflow.domain.currency import CURRENCIES, CurrencyContext, format_amount
from spendflow.domain.transactions import TransactionType
from spendflow.store.queries import get_cards, get_savings_accounts, get_transactions
from spendflow.store.schema import get_db_path, init_database


def run_full_init(db_path: Path, config_path: Path, currency: str) -> None:
    """Initialize new database and config."""
    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path, currency)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print(f"[dim]Currency: {currency}[/dim]")


def init_command(force: bool = False, currency: str = "GBP") -> None:
    """Initialize spendflow database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    currency = currency.upper()
    if currency not in CURRENCIES:
        console.print(f"[red]Unsupported currency: {currency}[/red]", style="bold")
        console.print(f"[dim]Supported: {', '.join(sorted(CURRENCIES))}[/dim]")
        sys.exit(1)

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        # Guard: refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'spendflow init --force' to overwrite[/yellow]")
            sys.exit(1)

        if force and db_exists:
            db_path.unlink()

        run_full_init(db_path, config_path, currency)

    except sqlite3.Error as e:
        fail(f"Database error: {e}")
    except OSError as e:
        fail(f"Filesystem error: {e}")


def list_command(context: CurrencyContext, limit: int = 50, all: bool = False) -> None:
    """List transactions, newest first."""
    require_database()

    try:
        actual_limit = None if all else limit
        transactions = get_transactions(limit=actual_limit)
        names: dict[str, str] = {card.id: card.display_name for card in get_cards()}
        names.update({account.id: account.name for account in get_savings_accounts()})
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if not transactions:
        console.print("[yellow]No transactions found[/yellow]")
        return

    title = f"Transactions (showing all {len(transactions)})" if all else f"Transactions (showing {len(transactions)})"
    table = Table(title=title)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Type")
    table.add_column("Description", style="white")
    table.add_column("Amount", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Card", style="dim")

    for txn in transactions:
        amount = format_amount(txn.signed_amount, context, include_sign=True)
        if txn.type is TransactionType.TRANSFER:
            amount_display = f"[blue]{format_amount(txn.amount, context)}[/blue]"
            source = txn.from_card_id or txn.savings_account_id
            destination = txn.to_card_id or txn.savings_account_id
            card = f"{names.get(source, source)} → {names.get(destination, destination)}"
        else:
            amount_display = f"[red]{amount}[/red]" if txn.signed_amount < 0 else f"[green]{amount}[/green]"
            card = names.get(txn.card_id, txn.card_id) or "[dim]-[/dim]"

        if txn.original_transaction_id is not None:
            description = f"{txn.description} [dim](#{txn.original_transaction_id})[/dim]"
        else:
            description = txn.description

        table.add_row(
            str(txn.id),
            txn.date,
            txn.type.value,
            description,
            amount_display,
            txn.category or "[dim]-[/dim]",
            card,
        )

    console.print(table)
