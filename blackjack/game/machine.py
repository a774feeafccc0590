"""Round engine: a single-player, single-deck blackjack state machine."""

from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random
from typing import Callable

from transitions import Machine

from blackjack.cards import Card, Deck
from blackjack.dealer import dealer_should_draw
from blackjack.hand import BLACKJACK, Hand
from blackjack.payout import (
    PendingOutcome,
    RoundResult,
    Settlement,
    blackjack_settlement,
    bust_settlement,
    compare_settlement,
    stage_outcome,
)
from blackjack.game.events import EventEmitter, EventType, GameEvent
from blackjack.game.state import Phase
from logging_utils import get_logger

log = get_logger(__name__)

INVALID_BET_MESSAGE = "Invalid bet amount"
DOUBLE_DOWN_FUNDS_MESSAGE = "Not enough coins to double down"


class ActionOutcome(Enum):
    """What a round action did, for the caller to act on."""

    IGNORED = auto()  # Not legal in the current phase; nothing changed
    REJECTED = auto()  # Input failed validation; message set, nothing else changed
    OK = auto()
    BUST = auto()  # Player went over 21; caller should finish_bust
    AUTO_STAND = auto()  # Player hit to exactly 21; caller should start the dealer turn
    STAGED = auto()  # Deal produced a blackjack; caller should finish_blackjack
    DEALER_STANDS = auto()  # Dealer is done drawing; caller should finish_round
    SETTLED = auto()


@dataclass
class RoundState:
    """Everything a single round owns."""

    deck: Deck = field(default_factory=lambda: Deck([]))
    player_hand: Hand = field(default_factory=Hand)
    dealer_hand: Hand = field(default_factory=Hand)
    bet: int = 0
    doubled: bool = False
    pending: PendingOutcome = PendingOutcome.NONE
    result: RoundResult | None = None
    message: str = ""


@dataclass(frozen=True)
class RoundSnapshot:
    """Read-only view of a round for the presentation layer."""

    phase: Phase
    round_id: int
    player_hand: tuple[Card, ...]
    dealer_hand: tuple[Card, ...]
    player_value: int
    dealer_value: int
    bet: int
    coins: int
    result: RoundResult | None
    message: str
    pending_outcome: PendingOutcome
    can_double_down: bool
    cards_remaining: int

    @property
    def has_pending_outcome(self) -> bool:
        """Check if a deal-time blackjack is waiting to be applied."""
        return self.pending_outcome is not PendingOutcome.NONE


class RoundMachine:
    """
    Blackjack round engine using a state machine.

    Owns the balance across rounds and the state of the current round.
    Every action is a synchronous transition; outcomes that should wait
    for presentation (blackjacks, busts, dealer draws, settlement) are
    reported to the caller instead of being applied automatically.
    """

    # State machine states
    STATES = [p.value for p in Phase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "open_betting", "source": ["idle", "finished"], "dest": "betting"},
        {"trigger": "accept_bet", "source": "betting", "dest": "playing"},
        {"trigger": "end_player_turn", "source": "playing", "dest": "dealer_turn"},
        {"trigger": "settle", "source": ["playing", "dealer_turn"], "dest": "finished"},
        {"trigger": "clear_table", "source": "*", "dest": "idle"},
    ]

    def __init__(
        self,
        coins: int = 0,
        rng: Random | None = None,
        deck_factory: Callable[[], Deck] | None = None,
        payout_ratio: float = 1.5,
    ) -> None:
        """
        Initialize a new round engine.

        Args:
            coins: Starting balance
            rng: Random number generator used to shuffle each round's deck
            deck_factory: Builds the deck for each deal (overrides ``rng``)
            payout_ratio: Blackjack profit multiplier (3:2 = 1.5)
        """
        _check_coins(coins)
        self._rng = rng or Random()
        self._deck_factory = deck_factory or (lambda: Deck.shuffled(self._rng))
        self._payout_ratio = payout_ratio
        self._coins = coins
        self._round = RoundState()
        self._round_id = 0
        self.events = EventEmitter()

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_log_transition",
        )

    def _log_transition(self) -> None:
        log.debug("Round %d entered %s", self._round_id, self.phase.value)

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to round events."""
        self.events.subscribe(handler, event_type)

    # Actions

    def update_coins(self, coins: int) -> None:
        """Seed the balance from an externally loaded profile."""
        _check_coins(coins)
        self._coins = coins
        self.events.emit_new(EventType.COINS_UPDATED, coins=coins)

    def start_betting(self) -> ActionOutcome:
        """Clear the table and wait for a wager."""
        if self.phase not in (Phase.IDLE, Phase.FINISHED):
            return self._ignore("start_betting")

        self._round = RoundState()
        self.open_betting()
        self.events.emit_new(EventType.BETTING_STARTED, coins=self._coins)
        return ActionOutcome.OK

    def deal(self, amount: int) -> ActionOutcome:
        """
        Place a bet and deal two cards each to player and dealer.

        Args:
            amount: Bet amount, 0 < amount <= coins

        Returns:
            STAGED if either side was dealt a blackjack, OK otherwise
        """
        if self.phase is not Phase.BETTING:
            return self._ignore("deal")

        if not _is_int(amount) or amount <= 0 or amount > self._coins:
            return self._reject(
                INVALID_BET_MESSAGE,
                EventType.INVALID_ACTION,
                amount=amount,
                coins=self._coins,
            )

        self._round_id += 1
        self._round = RoundState(deck=self._deck_factory(), bet=amount)
        self._coins -= amount
        self.accept_bet()
        self.events.emit_new(
            EventType.BET_PLACED,
            amount=amount,
            coins=self._coins,
            round_id=self._round_id,
        )
        log.info("Round %d dealt with bet %d", self._round_id, amount)

        player = self._round.player_hand
        dealer = self._round.dealer_hand
        self._deal_card(player, "player")
        self._deal_card(player, "player")
        self._deal_card(dealer, "dealer")
        self._deal_card(dealer, "dealer")

        pending = stage_outcome(player.cards, dealer.cards)
        if pending is PendingOutcome.NONE:
            return ActionOutcome.OK

        self._round.pending = pending
        self.events.emit_new(EventType.OUTCOME_STAGED, outcome=pending.value)
        return ActionOutcome.STAGED

    def hit(self) -> ActionOutcome:
        """Player takes another card."""
        if not self._player_may_act() or self._round.doubled:
            return self._ignore("hit")
        if self._round.player_hand.value >= BLACKJACK:
            return self._ignore("hit")

        hand = self._round.player_hand
        self._deal_card(hand, "player")
        self.events.emit_new(EventType.PLAYER_HIT, hand_value=hand.value)
        return self._player_total_outcome()

    def stand(self) -> ActionOutcome:
        """Player keeps the current hand; the dealer plays next."""
        if not self._player_may_act():
            return self._ignore("stand")

        self.end_player_turn()
        self.events.emit_new(
            EventType.PLAYER_STAND,
            hand_value=self._round.player_hand.value,
        )
        return ActionOutcome.OK

    def double_down(self) -> ActionOutcome:
        """
        Double the bet and take exactly one more card.

        The player's turn ends afterwards whatever the new total is; the
        caller moves on to ``finish_bust`` or the dealer turn.
        """
        if not self._player_may_act() or self._round.doubled:
            return self._ignore("double_down")
        if len(self._round.player_hand) != 2:
            return self._ignore("double_down")

        if self._round.bet > self._coins:
            return self._reject(
                DOUBLE_DOWN_FUNDS_MESSAGE,
                EventType.INSUFFICIENT_FUNDS,
                required=self._round.bet,
                available=self._coins,
            )

        self._coins -= self._round.bet
        self._round.bet *= 2
        self._round.doubled = True

        hand = self._round.player_hand
        self._deal_card(hand, "player")
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_value=hand.value,
            new_bet=self._round.bet,
            coins=self._coins,
        )

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_value=hand.value)
            return ActionOutcome.BUST
        return ActionOutcome.OK

    def dealer_draw_one(self) -> ActionOutcome:
        """Dealer draws a single card if the policy says so."""
        if self.phase is not Phase.DEALER_TURN:
            return self._ignore("dealer_draw_one")

        hand = self._round.dealer_hand
        if not dealer_should_draw(hand):
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=hand.value)
            return ActionOutcome.DEALER_STANDS

        self._deal_card(hand, "dealer")
        self.events.emit_new(EventType.DEALER_HITS, hand_value=hand.value)
        return ActionOutcome.OK

    def finish_blackjack(self) -> ActionOutcome:
        """Apply the outcome staged at deal time."""
        if self.phase is not Phase.PLAYING or self._round.pending is PendingOutcome.NONE:
            return self._ignore("finish_blackjack")

        settlement = blackjack_settlement(
            self._round.pending,
            self._round.bet,
            self._payout_ratio,
        )
        return self._settle(settlement)

    def finish_bust(self) -> ActionOutcome:
        """Settle a busted player hand as a loss."""
        if self.phase is not Phase.PLAYING or not self._round.player_hand.is_busted:
            return self._ignore("finish_bust")

        return self._settle(bust_settlement())

    def finish_round(self) -> ActionOutcome:
        """Compare hands once the dealer has finished drawing."""
        if self.phase is not Phase.DEALER_TURN:
            return self._ignore("finish_round")
        if dealer_should_draw(self._round.dealer_hand):
            return self._ignore("finish_round")

        settlement = compare_settlement(
            self._round.player_hand.cards,
            self._round.dealer_hand.cards,
            self._round.bet,
        )
        return self._settle(settlement)

    def reset(self) -> None:
        """Abandon the round and go back to idle. The balance is kept."""
        self._round = RoundState()
        self.clear_table()
        self.events.emit_new(EventType.ROUND_RESET, coins=self._coins)

    # Internals

    def _player_may_act(self) -> bool:
        return (
            self.phase is Phase.PLAYING
            and self._round.pending is PendingOutcome.NONE
            and not self._round.player_hand.is_busted
        )

    def _player_total_outcome(self) -> ActionOutcome:
        value = self._round.player_hand.value
        if value > BLACKJACK:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_value=value)
            return ActionOutcome.BUST
        if value == BLACKJACK:
            self.events.emit_new(EventType.PLAYER_TWENTY_ONE, hand_value=value)
            return ActionOutcome.AUTO_STAND
        return ActionOutcome.OK

    def _deal_card(self, hand: Hand, side: str) -> Card:
        """Deal a card to a hand."""
        card = self._round.deck.draw()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            hand=side,
            hand_value=hand.value,
            cards_remaining=len(self._round.deck),
            round_id=self._round_id,
        )
        return card

    def _settle(self, settlement: Settlement) -> ActionOutcome:
        self._coins += settlement.credit
        self._round.result = settlement.result
        self._round.message = settlement.message
        self._round.pending = PendingOutcome.NONE
        self.settle()

        self.events.emit_new(
            EventType.ROUND_SETTLED,
            result=settlement.result.value,
            credit=settlement.credit,
            net=settlement.net(self._round.bet),
            coins=self._coins,
            message=settlement.message,
            round_id=self._round_id,
        )
        log.info(
            "Round %d settled: %s, credit %d, balance %d",
            self._round_id,
            settlement.result.value,
            settlement.credit,
            self._coins,
        )
        return ActionOutcome.SETTLED

    def _ignore(self, action: str) -> ActionOutcome:
        log.debug("Ignoring %s during %s", action, self.phase.value)
        return ActionOutcome.IGNORED

    def _reject(self, message: str, event_type: EventType, **data) -> ActionOutcome:
        self._round.message = message
        self.events.emit_new(event_type, message=message, **data)
        log.warning("Rejected action: %s", message)
        return ActionOutcome.REJECTED

    # Queries

    @property
    def phase(self) -> Phase:
        """Get current phase as enum."""
        return Phase(self._machine_state)  # type: ignore[attr-defined]

    @property
    def round_id(self) -> int:
        """Identifier of the most recently dealt round."""
        return self._round_id

    @property
    def coins(self) -> int:
        return self._coins

    @property
    def bet(self) -> int:
        return self._round.bet

    @property
    def result(self) -> RoundResult | None:
        return self._round.result

    @property
    def message(self) -> str:
        return self._round.message

    @property
    def player_hand(self) -> tuple[Card, ...]:
        return tuple(self._round.player_hand.cards)

    @property
    def dealer_hand(self) -> tuple[Card, ...]:
        return tuple(self._round.dealer_hand.cards)

    @property
    def player_value(self) -> int:
        return self._round.player_hand.value

    @property
    def dealer_value(self) -> int:
        return self._round.dealer_hand.value

    @property
    def pending_outcome(self) -> PendingOutcome:
        return self._round.pending

    @property
    def has_pending_outcome(self) -> bool:
        """Check if a deal-time blackjack is waiting to be applied."""
        return self._round.pending is not PendingOutcome.NONE

    @property
    def cards_remaining(self) -> int:
        """Cards left in this round's deck."""
        return len(self._round.deck)

    @property
    def can_double_down(self) -> bool:
        """Check if doubling down is allowed."""
        return (
            self.phase is Phase.PLAYING
            and len(self._round.player_hand) == 2
            and self._round.bet <= self._coins
            and not self.has_pending_outcome
        )

    def snapshot(self) -> RoundSnapshot:
        """Get a snapshot of the current round."""
        return RoundSnapshot(
            phase=self.phase,
            round_id=self._round_id,
            player_hand=self.player_hand,
            dealer_hand=self.dealer_hand,
            player_value=self.player_value,
            dealer_value=self.dealer_value,
            bet=self.bet,
            coins=self._coins,
            result=self.result,
            message=self.message,
            pending_outcome=self.pending_outcome,
            can_double_down=self.can_double_down,
            cards_remaining=self.cards_remaining,
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_coins(coins: int) -> None:
    if not _is_int(coins) or coins < 0:
        raise ValueError(f"Coins must be a non-negative integer, got {coins!r}")
