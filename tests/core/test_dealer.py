"""Tests for the dealer drawing policy."""

import pytest

from blackjack.dealer import DEALER_STAND_VALUE, dealer_should_draw


class TestDealerPolicy:
    """Dealer draws to 17 and stands on every 17."""

    @pytest.mark.parametrize(
        "hand",
        [
            ("10S", "6H"),  # hard 16
            ("AS", "5H"),  # soft 16
            ("2S", "3H"),
            ("AS", "AH", "4C"),  # soft 16 with two aces
        ],
    )
    def test_draws_below_17(self, cards, hand):
        """Test that the dealer draws on 16 or less."""
        assert dealer_should_draw(cards(*hand))

    @pytest.mark.parametrize(
        "hand",
        [
            ("10S", "7H"),  # hard 17
            ("AS", "6H"),  # soft 17
            ("10S", "9H"),
            ("10S", "6H", "KC"),  # bust
        ],
    )
    def test_stands_on_17_or_more(self, cards, hand):
        """Test that the dealer never hits 17, soft or hard."""
        assert not dealer_should_draw(cards(*hand))

    def test_stand_value(self):
        """Test the single hard-coded threshold."""
        assert DEALER_STAND_VALUE == 17
