"""Pytest fixtures for round engine tests."""

import pytest
from random import Random

from blackjack.cards import Card, Deck, Rank, Suit, new_shoe
from blackjack.hand import Hand
from blackjack.game import RoundMachine
from config import PresentationConfig
from presentation import PresentationCoordinator, TaskScheduler


def _cards(*specs: str) -> list[Card]:
    return [Card.from_string(s) for s in specs]


def _stacked_deck(*draws: str) -> Deck:
    """A full 52-card deck that deals ``draws`` first, in order.

    Deal order is player, player, dealer, dealer, then one card per action.
    """
    top = _cards(*draws)
    rest = [card for card in new_shoe() if card not in top]
    return Deck(rest + list(reversed(top)))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def cards():
    """Factory: cards('AS', 'KD') -> [Card, Card]."""
    return _cards


@pytest.fixture
def make_machine():
    """Factory for a round machine whose every deal uses the given draw order."""

    def factory(*draws: str, coins: int = 100) -> RoundMachine:
        return RoundMachine(coins=coins, deck_factory=lambda: _stacked_deck(*draws))

    return factory


@pytest.fixture
def machine(rng):
    """A round machine with 100 coins and a seeded shuffle."""
    return RoundMachine(coins=100, rng=rng)


@pytest.fixture
def presentation_config():
    """Short, distinct delays with reveal gating on."""
    return PresentationConfig(
        step_delay=0.1,
        dealer_draw_delay=0.2,
        settle_delay=0.3,
        gated=True,
    )


@pytest.fixture
def scheduler():
    """A frame-driven scheduler."""
    return TaskScheduler()


@pytest.fixture
def make_coordinator(make_machine, scheduler, presentation_config):
    """Factory for a coordinator over a stacked machine; settled snapshots are collected."""

    def factory(*draws: str, coins: int = 100, config: PresentationConfig | None = None):
        machine = make_machine(*draws, coins=coins)
        settled = []
        coordinator = PresentationCoordinator(
            machine,
            scheduler,
            config or presentation_config,
            on_settled=settled.append,
        )
        return coordinator, settled

    return factory


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    hand = Hand()
    hand.add_card(Card(Rank.ACE, Suit.SPADES))
    hand.add_card(Card(Rank.KING, Suit.HEARTS))
    return hand


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    hand = Hand()
    hand.add_card(Card(Rank.ACE, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    return hand


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    hand = Hand()
    hand.add_card(Card(Rank.TEN, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    return hand


@pytest.fixture
def bust_hand():
    """A busted hand."""
    hand = Hand()
    hand.add_card(Card(Rank.TEN, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    hand.add_card(Card(Rank.KING, Suit.CLUBS))
    return hand
