"""Exceptions raised by the blackjack engine."""

from typing import Any


class BlackjackError(Exception):
    """Base class for engine errors."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidCard(BlackjackError, ValueError):
    """A card was constructed from an out-of-range rank or suit."""

    status_code = 422


class InvalidRank(InvalidCard):
    def __init__(self, rank: Any) -> None:
        super().__init__(f"InvalidRank: {rank!r} is not in 1..13")
        self.rank = rank


class InvalidSuit(InvalidCard):
    def __init__(self, suit: Any) -> None:
        super().__init__(f"InvalidSuit: {suit!r} is not in 1..4")
        self.suit = suit


class InvalidStateTransition(BlackjackError):
    """An action is not legal in the current hand or game state."""

    status_code = 409

    def __init__(self, state: Any, event: str, reason: str = "") -> None:
        state_name = getattr(state, "name", state)
        message = f"InvalidStateTransition: cannot {event} from {state_name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.state = state
        self.event = event


class BettingError(BlackjackError):
    """A bet was rejected; no chips moved."""


class BetExceedsMaximum(BettingError):
    def __init__(self, bet: int, maximum: int) -> None:
        super().__init__(f"Bet of {bet} exceeds table maximum of {maximum}")
        self.bet = bet
        self.maximum = maximum


class BetBelowMinimum(BettingError):
    def __init__(self, bet: int, minimum: int) -> None:
        super().__init__(f"Bet of {bet} is below table minimum of {minimum}")
        self.bet = bet
        self.minimum = minimum


class InsufficientHoldings(BettingError):
    status_code = 402

    def __init__(self, amount: Any, holdings: Any) -> None:
        super().__init__(f"Bet of {amount} exceeds player holdings of {holdings}")
        self.amount = amount
        self.holdings = holdings


class NotEmpty(BlackjackError, RuntimeError):
    """The shoe was asked to fill while it still held cards."""

    status_code = 500


class InvalidConfiguration(BlackjackError, ValueError):
    """Table configuration is out of range."""

    status_code = 422
