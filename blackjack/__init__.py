"""Blackjack round engine - 100% UI-agnostic."""

from blackjack.cards import Card, Deck, Rank, Suit, new_shoe, shuffle
from blackjack.hand import Hand, hand_value, is_blackjack
from blackjack.dealer import dealer_should_draw
from blackjack.payout import PendingOutcome, RoundResult, Settlement
from blackjack.errors import BlackjackError, EmptyDeckError, InvariantViolation

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "new_shoe",
    "shuffle",
    "Hand",
    "hand_value",
    "is_blackjack",
    "dealer_should_draw",
    "PendingOutcome",
    "RoundResult",
    "Settlement",
    "BlackjackError",
    "EmptyDeckError",
    "InvariantViolation",
]
