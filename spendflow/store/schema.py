"""Database schema initialization."""

import os
import sqlite3
from pathlib import Path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "spendflow" / "spendflow.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Money columns hold integer minor units (pence).

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS cards (
                id TEXT PRIMARY KEY,
                type TEXT NOT NULL CHECK (type IN ('debit', 'credit')),
                bank TEXT NOT NULL DEFAULT '',
                last_four TEXT NOT NULL DEFAULT '',
                balance INTEGER NOT NULL DEFAULT 0,
                credit_limit INTEGER NOT NULL DEFAULT 0,
                overdraft_enabled INTEGER NOT NULL DEFAULT 0,
                overdraft_limit INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                type TEXT NOT NULL CHECK (type IN ('expense', 'income', 'refund', 'transfer')),
                date TEXT NOT NULL,
                amount INTEGER NOT NULL CHECK (amount >= 0),
                category TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                card_id TEXT REFERENCES cards(id),
                from_card_id TEXT REFERENCES cards(id),
                to_card_id TEXT REFERENCES cards(id),
                original_transaction_id INTEGER REFERENCES transactions(id),
                savings_account_id TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS savings_accounts (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE COLLATE NOCASE,
                balance INTEGER NOT NULL DEFAULT 0 CHECK (balance >= 0),
                goal INTEGER NOT NULL DEFAULT 0,
                linked_card_id TEXT REFERENCES cards(id),
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        # Databases created before savings accounts existed lack this column
        columns = {row[1] for row in cursor.execute("PRAGMA table_info(transactions)")}
        if "savings_account_id" not in columns:
            cursor.execute("ALTER TABLE transactions ADD COLUMN savings_account_id TEXT")

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_date ON transactions(date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_card ON transactions(card_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_original ON transactions(original_transaction_id)")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
