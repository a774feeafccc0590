"""Dealer drawing policy."""

from typing import Iterable

from blackjack.cards import Card
from blackjack.hand import hand_value

# Dealer stands on every 17, soft or hard.
DEALER_STAND_VALUE = 17


def dealer_should_draw(cards: Iterable[Card]) -> bool:
    """Determine if the dealer takes another card."""
    return hand_value(cards) < DEALER_STAND_VALUE
