"""Round state machine and event system."""

from blackjack.game.events import EventEmitter, EventType, GameEvent
from blackjack.game.state import Phase
from blackjack.game.machine import ActionOutcome, RoundMachine, RoundSnapshot

__all__ = [
    "EventEmitter",
    "EventType",
    "GameEvent",
    "Phase",
    "ActionOutcome",
    "RoundMachine",
    "RoundSnapshot",
]
