"""Round results and payout calculation."""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from blackjack.cards import Card
from blackjack.hand import BLACKJACK, hand_value, is_blackjack


class RoundResult(Enum):
    """Final classification of a settled round."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"

    def __str__(self) -> str:
        return self.value


class PendingOutcome(Enum):
    """A blackjack settlement decided at deal time but not yet applied."""

    NONE = "none"
    PLAYER_BLACKJACK = "player_blackjack"
    DEALER_BLACKJACK = "dealer_blackjack"
    PUSH_BLACKJACK = "push_blackjack"

    def __bool__(self) -> bool:
        return self is not PendingOutcome.NONE


@dataclass(frozen=True)
class Settlement:
    """What a finished round pays back to the player."""

    result: RoundResult
    credit: int  # Coins returned to the balance, stake included
    message: str

    def net(self, bet: int) -> int:
        """Profit (or loss) relative to the stake already debited."""
        return self.credit - bet


def blackjack_winnings(bet: int, payout_ratio: float = 1.5) -> int:
    """Stake plus 3:2 profit, rounded down."""
    return bet + math.floor(Decimal(bet) * Decimal(str(payout_ratio)))


def stage_outcome(player: Sequence[Card], dealer: Sequence[Card]) -> PendingOutcome:
    """
    Classify the initial deal.

    Args:
        player: Player's two starting cards
        dealer: Dealer's two starting cards

    Returns:
        The outcome to hold until presentation catches up, or NONE
    """
    player_bj = is_blackjack(player)
    dealer_bj = is_blackjack(dealer)

    if player_bj and dealer_bj:
        return PendingOutcome.PUSH_BLACKJACK
    if player_bj:
        return PendingOutcome.PLAYER_BLACKJACK
    if dealer_bj:
        return PendingOutcome.DEALER_BLACKJACK
    return PendingOutcome.NONE


def blackjack_settlement(
    outcome: PendingOutcome,
    bet: int,
    payout_ratio: float = 1.5,
) -> Settlement:
    """Settle a staged deal-time blackjack."""
    if outcome is PendingOutcome.PUSH_BLACKJACK:
        return Settlement(RoundResult.PUSH, bet, "Both have Blackjack! Push.")
    if outcome is PendingOutcome.PLAYER_BLACKJACK:
        winnings = blackjack_winnings(bet, payout_ratio)
        return Settlement(
            RoundResult.BLACKJACK,
            winnings,
            f"Blackjack! You win {winnings} coins!",
        )
    if outcome is PendingOutcome.DEALER_BLACKJACK:
        return Settlement(RoundResult.LOSE, 0, "Dealer has Blackjack! You lose.")
    raise ValueError(f"No blackjack outcome to settle: {outcome}")


def bust_settlement() -> Settlement:
    """Player went over 21; the stake is lost."""
    return Settlement(RoundResult.LOSE, 0, "Bust! You lose.")


def compare_settlement(
    player: Sequence[Card],
    dealer: Sequence[Card],
    bet: int,
) -> Settlement:
    """
    Compare finished hands after the dealer stands.

    Wins pay even money (a 21 made by hitting is not a blackjack), a tie
    returns the stake.
    """
    player_value = hand_value(player)
    dealer_value = hand_value(dealer)

    if dealer_value > BLACKJACK:
        winnings = bet * 2
        return Settlement(RoundResult.WIN, winnings, f"Dealer busts! You win {winnings} coins!")
    if player_value > dealer_value:
        winnings = bet * 2
        return Settlement(RoundResult.WIN, winnings, f"You win {winnings} coins!")
    if player_value < dealer_value:
        return Settlement(RoundResult.LOSE, 0, "Dealer wins. You lose.")
    return Settlement(RoundResult.PUSH, bet, "Push! Bet returned.")
