"""Date utilities for spendflow.

Transaction dates are stored as YYYY-MM-DD strings.
"""

from datetime import date

import pandas as pd


def normalize_date(value: str | None) -> str:
    """Normalize a user-supplied date to YYYY-MM-DD.

    Day-first formats are assumed (UK style), so "05/03/2025" is 5 March.

    Args:
        value: Date as typed (YYYY-MM-DD, DD/MM/YYYY, "today", ...). None or
            empty means today.

    Returns:
        Date in YYYY-MM-DD format.

    Raises:
        ValueError: If value cannot be parsed as a date.
    """
    if not value:
        return date.today().isoformat()

    parsed = pd.to_datetime(value, dayfirst=True)
    if pd.isna(parsed):
        raise ValueError(f"Not a date: {value!r}")
    return parsed.strftime("%Y-%m-%d")
