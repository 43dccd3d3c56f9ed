"""Transfer command for moving money between cards."""

import sqlite3

from spendflow.commands.output import (
    console,
    fail,
    normalize_date_or_exit,
    print_card_balances,
    render_rejection,
    require_database,
)
from spendflow.domain.currency import CurrencyContext, format_amount
from spendflow.domain.results import Rejection
from spendflow.ledger import record_transfer


def transfer_command(
    context: CurrencyContext,
    amount: str,
    from_card_id: str | None,
    to_card_id: str | None,
    note: str = "",
    date: str | None = None,
) -> None:
    """Move money from one card to another.

    Args:
        context: Session currency context.
        amount: Amount as typed.
        from_card_id: Source card.
        to_card_id: Destination card.
        note: Free-text note.
        date: Transfer date. Defaults to today.
    """
    require_database()
    normalized_date = normalize_date_or_exit(date)

    try:
        result = record_transfer(amount, from_card_id, to_card_id, context, normalized_date, note)
    except sqlite3.Error as e:
        fail(f"Database error: {e}")

    if isinstance(result, Rejection):
        render_rejection(result)

    source, destination = result.cards
    console.print(
        f"[green]✓[/green] Transferred {format_amount(result.amount, context)} "
        f"from {source.display_name} to {destination.display_name} "
        f"[dim](ID: {result.transaction_id})[/dim]"
    )
    print_card_balances(result.cards, context)
    if result.warning:
        console.print(f"[yellow]⚠ {result.warning}[/yellow]")
