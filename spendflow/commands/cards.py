"""Card commands: add a card, list cards, and show the overall position."""

import sqlite3
import tomllib

from rich.table import Table

from spendflow.commands.output import balance_display, console, fail, render_rejection, require_database
from spendflow.config import get_card_limits, load_config_or_default
from spendflow.domain.amounts import MAX_ACCOUNT_AMOUNT, parse_amount
from spendflow.domain.balances import (
    balance_summary,
    card_utilization,
    credit_utilization,
    overdraft_in_use,
    utilization_band,
)
from spendflow.domain.cards import CardType, InvalidCardRecord, card_from_record
from spendflow.domain.currency import CurrencyContext, format_amount
from spendflow.domain.funds import available_credit, available_funds
from spendflow.domain.results import Rejection
from spendflow.ledger import add_new_card, new_card_id
from spendflow.store.queries import get_cards, get_savings_accounts

_BAND_STYLES = {"high": "red", "medium": "yellow", "low": "green"}


def add_card_command(
    context: CurrencyContext,
    card_type: CardType | str,
    bank: str = "",
    last_four: str = "",
    balance: str = "0",
    limit: str | None = None,
    overdraft: str | None = None,
) -> None:
    """Add a debit or credit card.

    Args:
        context: Session currency context.
        card_type: 'debit' or 'credit'.
        bank: Bank name shown in listings.
        last_four: Last four digits of the card number.
        balance: Opening balance (funds held, or amount owed for credit cards).
        limit: Credit limit (credit cards only).
        overdraft: Overdraft limit; enables the overdraft (debit cards only).
    """
    require_database()

    if last_four and (len(last_four) != 4 or not last_four.isdigit()):
        fail("--last-four must be exactly 4 digits")

    for flag, raw in (("--balance", balance), ("--limit", limit), ("--overdraft", overdraft)):
        if raw is not None and abs(parse_amount(raw)) > MAX_ACCOUNT_AMOUNT:
            fail(f"{flag} cannot exceed {format_amount(MAX_ACCOUNT_AMOUNT, context)}")

    try:
        card = card_from_record(
            {
                "id": new_card_id(),
                "type": card_type,
                "bank": bank,
                "last_four": last_four,
                "balance": balance,
                "limit": limit,
                "overdraft_enabled": overdraft is not None and parse_amount(overdraft) > 0,
                "overdraft_limit": overdraft,
            }
        )
    except InvalidCardRecord as e:
        fail(f"Invalid card: {e}")

    if card.is_credit and card.limit <= 0:
        fail("Credit cards need a positive --limit")
    if card.is_credit and overdraft is not None:
        fail("Overdrafts only apply to debit cards")
    if card.is_debit and limit is not None:
        fail("Credit limits only apply to credit cards")

    try:
        limits = get_card_limits(load_config_or_default())
        result = add_new_card(card, limits)
    except (tomllib.TOMLDecodeError, ValueError) as e:
        fail(f"Config error: {e}")
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if isinstance(result, Rejection):
        render_rejection(result)

    console.print(f"[green]✓[/green] Added {card.type.value} card: {card.display_name}")
    console.print(f"  ID: [cyan]{card.id}[/cyan]")
    console.print(f"  Balance: {balance_display(card, context)}")
    if card.is_credit:
        console.print(f"  Credit limit: {format_amount(card.limit, context)}")
    elif card.overdraft_enabled:
        console.print(f"  Overdraft: {format_amount(card.overdraft_limit, context)}")


def cards_command(context: CurrencyContext) -> None:
    """List cards with their balances and headroom."""
    require_database()

    try:
        cards = get_cards()
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if not cards:
        console.print("[yellow]No cards yet. Add one with 'spendflow add-card'.[/yellow]")
        return

    table = Table(title="Cards")
    table.add_column("ID", style="cyan")
    table.add_column("Card", style="white")
    table.add_column("Type", style="magenta")
    table.add_column("Balance", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Available", justify="right")
    table.add_column("Used", justify="right")

    for card in cards:
        if card.is_credit:
            pct = card_utilization(card)
            style = _BAND_STYLES[utilization_band(pct)]
            limit_display = format_amount(card.limit, context)
            available = available_credit(card)
            used = f"[{style}]{pct:.0f}%[/{style}]"
        else:
            available, overdraft = available_funds(card)
            limit_display = f"{format_amount(overdraft, context)} od" if card.overdraft_enabled else "[dim]-[/dim]"
            in_use = overdraft_in_use(card)
            used = f"[red]{format_amount(in_use, context)} od[/red]" if in_use else "[dim]-[/dim]"

        table.add_row(
            card.id,
            card.display_name,
            card.type.value,
            balance_display(card, context),
            limit_display,
            format_amount(available, context),
            used,
        )

    console.print(table)


def summary_command(context: CurrencyContext) -> None:
    """Show net position across cards and savings, and credit utilization."""
    require_database()

    try:
        cards = get_cards()
        accounts = get_savings_accounts()
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    summary = balance_summary(cards, [account.balance for account in accounts])
    utilization = credit_utilization(cards)

    table = Table(title="Summary", show_header=False)
    table.add_column("Item", style="cyan")
    table.add_column("Amount", justify="right")

    table.add_row("Debit cards", format_amount(summary.debit, context))
    table.add_row("Savings", format_amount(summary.savings, context))
    table.add_row("Credit owed", format_amount(summary.credit_owed, context))
    total_style = "green" if summary.total >= 0 else "red"
    total = format_amount(summary.total, context)
    table.add_row("[bold]Net position[/bold]", f"[bold {total_style}]{total}[/bold {total_style}]")

    console.print(table)

    if utilization.limit > 0:
        style = _BAND_STYLES[utilization_band(utilization.percentage)]
        console.print(
            f"Credit utilization: [{style}]{utilization.percentage:.1f}%[/{style}] "
            f"({format_amount(utilization.used, context)} of {format_amount(utilization.limit, context)})"
        )

    overdrawn = [c for c in cards if overdraft_in_use(c)]
    for card in overdrawn:
        console.print(
            f"[yellow]⚠ {card.display_name} is using "
            f"{format_amount(overdraft_in_use(card), context)} of overdraft[/yellow]"
        )

    if not cards:
        console.print("[dim]No cards yet. Add one with 'spendflow add-card'.[/dim]")
