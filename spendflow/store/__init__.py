"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

from spendflow.store.feeds import subscribe_to_cards, subscribe_to_savings_accounts, subscribe_to_transactions
from spendflow.store.queries import (
    add_card,
    add_transaction,
    get_cards,
    get_refunds_for,
    get_savings_accounts,
    get_transaction,
    get_transactions,
    update_card,
    update_transaction,
    write_transaction,
)
from spendflow.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "add_card",
    "add_transaction",
    "get_cards",
    "get_refunds_for",
    "get_savings_accounts",
    "get_transaction",
    "get_transactions",
    "update_card",
    "update_transaction",
    "write_transaction",
    # Feeds
    "subscribe_to_cards",
    "subscribe_to_savings_accounts",
    "subscribe_to_transactions",
]
