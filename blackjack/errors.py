"""Exception hierarchy for the round engine."""


class BlackjackError(Exception):
    """Base class for engine errors."""


class InvariantViolation(BlackjackError):
    """A condition that correct play can never produce."""


class EmptyDeckError(InvariantViolation, IndexError):
    """Drawing from an exhausted deck."""
