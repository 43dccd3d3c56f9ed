"""Database query functions.

Public functions take a db_path and open their own connection. The
fetch_*/insert_*/save_* helpers take an open connection so the ledger can run
a read-validate-write sequence inside a single write_transaction().
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from spendflow.domain.amounts import from_minor_units, to_minor_units
from spendflow.domain.cards import Card, card_from_record
from spendflow.domain.models import CardId, Money, SavingsId, TransactionId
from spendflow.domain.savings import SavingsAccount, savings_from_record
from spendflow.domain.transactions import Transaction, TransactionType
from spendflow.store.schema import get_db_path

_CARD_COLUMNS = {"bank", "last_four", "balance", "credit_limit", "overdraft_enabled", "overdraft_limit"}
_TRANSACTION_COLUMNS = {
    "type",
    "date",
    "amount",
    "category",
    "description",
    "card_id",
    "from_card_id",
    "to_card_id",
    "original_transaction_id",
    "savings_account_id",
}
_MONEY_COLUMNS = {"balance", "credit_limit", "overdraft_limit", "amount"}

# Seconds to wait for another writer before giving up
WRITE_TIMEOUT = 10.0


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def write_transaction(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Open a connection holding the database write lock.

    BEGIN IMMEDIATE blocks other writers until the block exits, so balances
    read inside the block cannot change before they are written back.
    Commits on normal exit and rolls back on any exception.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Yields:
        Connection inside an open write transaction.
    """
    if db_path is None:
        db_path = get_db_path()

    conn = sqlite3.connect(db_path, isolation_level=None, timeout=WRITE_TIMEOUT)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.execute("COMMIT")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    finally:
        conn.close()


def _assignments(fields: dict[str, Any], allowed: set[str]) -> tuple[str, list[Any]]:
    """Build a SET clause for a partial update, converting money to pence."""
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

    columns = sorted(fields)
    params: list[Any] = []
    for column in columns:
        value = fields[column]
        if column in _MONEY_COLUMNS:
            value = to_minor_units(value)
        elif column == "overdraft_enabled":
            value = int(bool(value))
        elif isinstance(value, TransactionType):
            value = value.value
        params.append(value)

    return ", ".join(f"{column} = ?" for column in columns), params


def _row_to_card(row: sqlite3.Row) -> Card:
    record = dict(row)
    record["balance"] = from_minor_units(record["balance"])
    record["limit"] = from_minor_units(record.pop("credit_limit"))
    record["overdraft_limit"] = from_minor_units(record["overdraft_limit"])
    return card_from_record(record)


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    original_id = row["original_transaction_id"]
    return Transaction(
        id=TransactionId(row["id"]),
        type=TransactionType(row["type"]),
        amount=from_minor_units(row["amount"]),
        date=row["date"],
        card_id=CardId(row["card_id"]) if row["card_id"] else None,
        category=row["category"],
        description=row["description"],
        from_card_id=CardId(row["from_card_id"]) if row["from_card_id"] else None,
        to_card_id=CardId(row["to_card_id"]) if row["to_card_id"] else None,
        original_transaction_id=TransactionId(original_id) if original_id is not None else None,
        savings_account_id=SavingsId(row["savings_account_id"]) if row["savings_account_id"] else None,
    )


def _row_to_savings(row: sqlite3.Row) -> SavingsAccount:
    record = dict(row)
    record["balance"] = from_minor_units(record["balance"])
    record["goal"] = from_minor_units(record["goal"])
    return savings_from_record(record)


def fetch_cards(conn: sqlite3.Connection) -> list[Card]:
    """Read all cards using an open connection, oldest first."""
    cursor = conn.execute(
        "SELECT id, type, bank, last_four, balance, credit_limit, overdraft_enabled, overdraft_limit "
        "FROM cards ORDER BY created_at, id"
    )
    return [_row_to_card(row) for row in cursor.fetchall()]


def fetch_transactions(conn: sqlite3.Connection, limit: int | None = None) -> list[Transaction]:
    """Read transactions using an open connection, newest first."""
    query = "SELECT * FROM transactions ORDER BY date DESC, id DESC"
    params: list[Any] = []

    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)

    cursor = conn.execute(query, params)
    return [_row_to_transaction(row) for row in cursor.fetchall()]


def insert_card(conn: sqlite3.Connection, card: Card) -> None:
    """Insert a card using an open connection."""
    conn.execute(
        "INSERT INTO cards (id, type, bank, last_four, balance, credit_limit, overdraft_enabled, overdraft_limit) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (
            card.id,
            card.type.value,
            card.bank,
            card.last_four,
            to_minor_units(card.balance),
            to_minor_units(card.limit),
            int(card.overdraft_enabled),
            to_minor_units(card.overdraft_limit),
        ),
    )


def save_card_balance(conn: sqlite3.Connection, card_id: CardId, balance: Money) -> None:
    """Write a card's balance using an open connection."""
    conn.execute("UPDATE cards SET balance = ? WHERE id = ?", (to_minor_units(balance), card_id))


def fetch_savings_accounts(conn: sqlite3.Connection) -> list[SavingsAccount]:
    """Read all savings accounts using an open connection, oldest first."""
    cursor = conn.execute(
        "SELECT id, name, balance, goal, linked_card_id FROM savings_accounts ORDER BY created_at, id"
    )
    return [_row_to_savings(row) for row in cursor.fetchall()]


def insert_savings_account(conn: sqlite3.Connection, account: SavingsAccount) -> None:
    """Insert a savings account using an open connection."""
    conn.execute(
        "INSERT INTO savings_accounts (id, name, balance, goal, linked_card_id) VALUES (?, ?, ?, ?, ?)",
        (
            account.id,
            account.name,
            to_minor_units(account.balance),
            to_minor_units(account.goal),
            account.linked_card_id,
        ),
    )


def save_savings_balance(conn: sqlite3.Connection, account_id: SavingsId, balance: Money) -> None:
    """Write a savings account's balance using an open connection."""
    conn.execute("UPDATE savings_accounts SET balance = ? WHERE id = ?", (to_minor_units(balance), account_id))


def delete_savings_account(conn: sqlite3.Connection, account_id: SavingsId) -> None:
    """Remove a savings account using an open connection.

    Transactions keep their savings_account_id so the history survives.
    """
    conn.execute("DELETE FROM savings_accounts WHERE id = ?", (account_id,))


def insert_transaction(conn: sqlite3.Connection, record: dict[str, Any]) -> TransactionId:
    """Insert a transaction record using an open connection.

    Args:
        conn: Open connection.
        record: Column values; amount is Money and must be non-negative.

    Returns:
        ID of the new transaction.
    """
    unknown = set(record) - _TRANSACTION_COLUMNS
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")

    columns = sorted(record)
    params: list[Any] = []
    for column in columns:
        value = record[column]
        if column == "amount":
            value = to_minor_units(value)
        elif isinstance(value, TransactionType):
            value = value.value
        params.append(value)

    cursor = conn.execute(
        f"INSERT INTO transactions ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
        params,
    )
    return TransactionId(cursor.lastrowid or 0)


def add_card(card: Card, db_path: Path | None = None) -> None:
    """Store a new card.

    Args:
        card: Card to store.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails (e.g. duplicate id).
    """
    with _connect(db_path) as conn:
        try:
            insert_card(conn, card)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def get_cards(db_path: Path | None = None) -> list[Card]:
    """Get all cards.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of cards, oldest first.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return fetch_cards(conn)


def update_card(card_id: CardId, fields: dict[str, Any], db_path: Path | None = None) -> None:
    """Update some fields of a card.

    Args:
        card_id: Card to update.
        fields: Column -> value. Money columns take Money; "limit" is
            accepted as an alias for credit_limit.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        ValueError: If fields names an unknown column.
        sqlite3.Error: If database operation fails.
    """
    fields = dict(fields)
    if "limit" in fields:
        fields["credit_limit"] = fields.pop("limit")

    clause, params = _assignments(fields, _CARD_COLUMNS)
    with _connect(db_path) as conn:
        try:
            conn.execute(f"UPDATE cards SET {clause} WHERE id = ?", [*params, card_id])
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def add_transaction(record: dict[str, Any], db_path: Path | None = None) -> TransactionId:
    """Store a transaction record without touching card balances.

    Args:
        record: Column values (type, date, amount, ...).
        db_path: Path to the database file. If None, uses default location.

    Returns:
        ID of the new transaction.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            txn_id = insert_transaction(conn, record)
            conn.commit()
            return txn_id
        except sqlite3.Error:
            conn.rollback()
            raise


def update_transaction(txn_id: TransactionId, fields: dict[str, Any], db_path: Path | None = None) -> None:
    """Update some fields of a transaction.

    Args:
        txn_id: Transaction to update.
        fields: Column -> value.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        ValueError: If fields names an unknown column.
        sqlite3.Error: If database operation fails.
    """
    clause, params = _assignments(fields, _TRANSACTION_COLUMNS)
    with _connect(db_path) as conn:
        try:
            conn.execute(f"UPDATE transactions SET {clause} WHERE id = ?", [*params, txn_id])
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def get_transactions(db_path: Path | None = None, limit: int | None = None) -> list[Transaction]:
    """Get transactions, newest first.

    Args:
        db_path: Path to the database file. If None, uses default location.
        limit: Maximum number of transactions to return. If None, returns all.

    Returns:
        List of transactions.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return fetch_transactions(conn, limit)


def get_transaction(txn_id: TransactionId, db_path: Path | None = None) -> Transaction | None:
    """Get one transaction by id, or None if it doesn't exist."""
    with _connect(db_path) as conn:
        row = conn.execute("SELECT * FROM transactions WHERE id = ?", (txn_id,)).fetchone()
        return _row_to_transaction(row) if row else None


def get_refunds_for(txn_id: TransactionId, db_path: Path | None = None) -> list[Transaction]:
    """Get refund records linked to an expense, oldest first."""
    with _connect(db_path) as conn:
        cursor = conn.execute(
            "SELECT * FROM transactions WHERE type = 'refund' AND original_transaction_id = ? ORDER BY id",
            (txn_id,),
        )
        return [_row_to_transaction(row) for row in cursor.fetchall()]


def get_savings_accounts(db_path: Path | None = None) -> list[SavingsAccount]:
    """Get all savings accounts.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of savings accounts, oldest first.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return fetch_savings_accounts(conn)
