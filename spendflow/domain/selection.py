"""Card reference validation."""

from spendflow.domain.cards import Card
from spendflow.domain.models import CardId
from spendflow.domain.results import CardApproval, ErrorKind, Rejection


def find_card(card_id: CardId | str | None, cards: list[Card]) -> Card | None:
    """Find a card by id, or None if it is not in cards."""
    return next((c for c in cards if c.id == card_id), None)


def validate_card_selection(card_id: CardId | str | None, cards: list[Card]) -> CardApproval | Rejection:
    """Ensure card_id refers to one of the user's cards.

    Args:
        card_id: Selected card id (may be empty).
        cards: The user's current cards.

    Returns:
        CardApproval carrying the matched card, or a Rejection.
    """
    if not card_id:
        return Rejection(
            error=ErrorKind.NO_CARD_SELECTED,
            title="No Card Selected",
            message="Please select a card for this transaction.",
        )

    card = find_card(card_id, cards)
    if card is None:
        return Rejection(
            error=ErrorKind.CARD_NOT_FOUND,
            title="Card Not Found",
            message="Selected card not found. Please select a different card.",
        )

    return CardApproval(card=card)
