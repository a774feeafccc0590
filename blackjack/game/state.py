"""Round phase enumeration."""

from enum import Enum


class Phase(Enum):
    """
    Round state machine phases.

    Flow: IDLE → BETTING → PLAYING → DEALER_TURN → FINISHED → BETTING ...
    """

    # Nothing on the table
    IDLE = "idle"

    # Waiting for a wager
    BETTING = "betting"

    # Cards dealt, player acting (a staged blackjack also waits here)
    PLAYING = "playing"

    # Dealer drawing, one card per step
    DEALER_TURN = "dealer_turn"

    # Round settled, ready for next
    FINISHED = "finished"

    def __str__(self) -> str:
        return self.value.replace("_", " ").title()

