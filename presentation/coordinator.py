"""Coordinator that paces rule outcomes to the presentation layer."""

from typing import Callable, Optional

from blackjack.game.events import EventType, GameEvent
from blackjack.game.machine import ActionOutcome, RoundMachine, RoundSnapshot
from config import PresentationConfig, config as app_config
from logging_utils import get_logger
from presentation.scheduler import ScheduledTask, Scheduler

log = get_logger(__name__)

Step = Callable[[], None]


class PresentationCoordinator:
    """Drives a RoundMachine in step with card animations.

    Player intents go straight to the machine. Whatever the machine asks
    for next (applying a staged blackjack, settling a bust, the dealer's
    draws, the final comparison) becomes a single pending step. The step
    runs through the scheduler, and only once the presentation has
    reported, via ``reveal_complete()``, that the last dealt card is on
    screen. At most one step is waiting or in flight at any time.

    If the presentation never reports back the round stays where it is;
    ``reset()`` recovers it.
    """

    def __init__(
        self,
        machine: RoundMachine,
        scheduler: Scheduler,
        config: PresentationConfig | None = None,
        on_settled: Optional[Callable[[RoundSnapshot], None]] = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            machine: Round engine to drive
            scheduler: Runs delayed steps
            config: Step delays and gating (defaults to app config)
            on_settled: Called once per round with the settled snapshot
        """
        self.machine = machine
        self.scheduler = scheduler
        self.config = config or app_config.presentation
        self._on_settled = on_settled

        self._dealing = False
        self._next_step: Optional[Step] = None
        self._next_delay = 0.0
        self._in_flight: Optional[ScheduledTask] = None
        self._settled_round: Optional[int] = None

        machine.subscribe(self._on_card_dealt, EventType.CARD_DEALT)

    # Presentation signals

    def _on_card_dealt(self, event: GameEvent) -> None:
        if self.config.gated:
            self._dealing = True

    def reveal_complete(self) -> None:
        """The presentation finished animating every card dealt so far."""
        if not self._dealing:
            log.debug("Reveal reported with no cards in flight")
            return
        self._dealing = False
        self._advance()

    # Player intents

    def start_betting(self) -> ActionOutcome:
        """Open betting for the next round once no rule step is outstanding."""
        if self.busy:
            return ActionOutcome.IGNORED
        self.cancel()
        outcome = self.machine.start_betting()
        if outcome is ActionOutcome.OK:
            self._settled_round = None
        return outcome

    def deal(self, amount: int) -> ActionOutcome:
        if self.busy:
            return ActionOutcome.IGNORED
        outcome = self.machine.deal(amount)
        if outcome is ActionOutcome.STAGED:
            self._stage(self._finish_blackjack, self.config.step_delay)
        return outcome

    def hit(self) -> ActionOutcome:
        if self.busy:
            return ActionOutcome.IGNORED
        outcome = self.machine.hit()
        if outcome is ActionOutcome.BUST:
            self._stage(self._finish_bust, self.config.step_delay)
        elif outcome is ActionOutcome.AUTO_STAND:
            self._stage(self._begin_dealer_turn, self.config.step_delay)
        return outcome

    def stand(self) -> ActionOutcome:
        if self.busy:
            return ActionOutcome.IGNORED
        outcome = self.machine.stand()
        if outcome is ActionOutcome.OK:
            self._stage(self._dealer_step, self.config.dealer_draw_delay)
        return outcome

    def double_down(self) -> ActionOutcome:
        """Double down; the player's turn ends whatever the new total is."""
        if self.busy:
            return ActionOutcome.IGNORED
        outcome = self.machine.double_down()
        if outcome is ActionOutcome.BUST:
            self._stage(self._finish_bust, self.config.step_delay)
        elif outcome is ActionOutcome.OK:
            self._stage(self._begin_dealer_turn, self.config.step_delay)
        return outcome

    def reset(self) -> None:
        """Cancel outstanding steps, then clear the table."""
        self.cancel()
        self.machine.reset()
        self._settled_round = None

    def cancel(self) -> None:
        """Drop the pending step and cancel any scheduled one."""
        if self._in_flight is not None:
            self._in_flight.cancel()
            log.debug("Cancelled scheduled step for round %d", self.machine.round_id)
        self._in_flight = None
        self._next_step = None
        self._dealing = False

    # State

    @property
    def dealing_in_progress(self) -> bool:
        return self._dealing

    @property
    def busy(self) -> bool:
        """Check if a rule step is waiting or scheduled."""
        return self._next_step is not None or self._in_flight is not None

    @property
    def settled(self) -> bool:
        """Check if the dealt round has been settled; cleared once the table moves on."""
        return self._settled_round == self.machine.round_id

    # Sequencing

    def _stage(self, step: Step, delay: float) -> None:
        self._next_step = step
        self._next_delay = delay
        self._advance()

    def _advance(self) -> None:
        if self._next_step is None or self._in_flight is not None or self._dealing:
            return

        step, delay = self._next_step, self._next_delay
        self._next_step = None
        round_id = self.machine.round_id
        self._in_flight = self.scheduler.schedule(delay, lambda: self._run(step, round_id))
        log.debug("Scheduled %s in %.2fs for round %d", step.__name__, delay, round_id)

    def _run(self, step: Step, round_id: int) -> None:
        self._in_flight = None
        if round_id != self.machine.round_id:
            log.debug("Dropping %s for stale round %d", step.__name__, round_id)
            return
        step()

    # Steps

    def _begin_dealer_turn(self) -> None:
        if self.machine.stand() is ActionOutcome.OK:
            self._stage(self._dealer_step, self.config.dealer_draw_delay)

    def _dealer_step(self) -> None:
        outcome = self.machine.dealer_draw_one()
        if outcome is ActionOutcome.DEALER_STANDS:
            self._stage(self._finish_round, self.config.settle_delay)
        elif outcome is ActionOutcome.OK:
            self._stage(self._dealer_step, self.config.dealer_draw_delay)

    def _finish_blackjack(self) -> None:
        self._settle_with(self.machine.finish_blackjack)

    def _finish_bust(self) -> None:
        self._settle_with(self.machine.finish_bust)

    def _finish_round(self) -> None:
        self._settle_with(self.machine.finish_round)

    def _settle_with(self, finish: Callable[[], ActionOutcome]) -> None:
        round_id = self.machine.round_id
        if self._settled_round == round_id:
            log.debug("Round %d already settled", round_id)
            return
        if finish() is not ActionOutcome.SETTLED:
            return

        self._settled_round = round_id
        if self._on_settled:
            self._on_settled(self.machine.snapshot())
