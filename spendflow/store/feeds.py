"""In-process change feeds for cards, transactions and savings accounts.

Subscribers receive the full replacement list every time the ledger commits
a change, never a diff.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from spendflow.domain.cards import Card
from spendflow.domain.savings import SavingsAccount
from spendflow.domain.transactions import Transaction

logger = logging.getLogger(__name__)

CARDS = "cards"
TRANSACTIONS = "transactions"
SAVINGS = "savings_accounts"

Callback = Callable[[list[Any]], None]

_subscribers: dict[str, list[Callback]] = defaultdict(list)


def subscribe(topic: str, callback: Callback) -> Callable[[], None]:
    """Register callback for topic.

    Args:
        topic: Feed name (CARDS, TRANSACTIONS or SAVINGS).
        callback: Called with the full list after each change.

    Returns:
        Function that removes the subscription. Calling it twice is harmless.
    """
    _subscribers[topic].append(callback)

    def unsubscribe() -> None:
        if callback in _subscribers[topic]:
            _subscribers[topic].remove(callback)

    return unsubscribe


def publish(topic: str, items: list[Any]) -> None:
    """Send items to every subscriber of topic."""
    for callback in list(_subscribers[topic]):
        logger.debug("Publishing %d %s to %r", len(items), topic, callback)
        callback(items)


def subscribe_to_cards(callback: Callable[[list[Card]], None]) -> Callable[[], None]:
    """Subscribe to the user's card list."""
    return subscribe(CARDS, callback)


def subscribe_to_transactions(callback: Callable[[list[Transaction]], None]) -> Callable[[], None]:
    """Subscribe to the user's transaction list."""
    return subscribe(TRANSACTIONS, callback)


def subscribe_to_savings_accounts(callback: Callable[[list[SavingsAccount]], None]) -> Callable[[], None]:
    """Subscribe to the user's savings accounts."""
    return subscribe(SAVINGS, callback)
