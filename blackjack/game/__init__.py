"""Game engine and state management."""

from blackjack.game.events import EventEmitter, GameEvent, EventType
from blackjack.game.state import GameState
from blackjack.game.engine import BlackjackGame, Outcome

__all__ = [
    "EventEmitter",
    "GameEvent",
    "EventType",
    "GameState",
    "BlackjackGame",
    "Outcome",
]
