"""What happened at the table, in the order it happened.

The engine announces each deal, decision and settlement here so a
renderer can replay a round without reading engine internals.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    GAME_STARTED = auto()
    GAME_ENDED = auto()
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()

    # Staging and escrow of the wager, buy-ins
    BET_PLACED = auto()
    BUY_IN_REQUIRED = auto()
    CHIPS_BOUGHT = auto()

    CARD_DEALT = auto()

    # Emitted once per accepted player decision
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    PLAYER_SURRENDER = auto()

    # Dealer plays only after every player hand is done
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()
    DEALER_BLACKJACK = auto()

    # Per hand; a split round settles each hand separately
    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()
    PLAYER_WINS = auto()
    PLAYER_LOSES = auto()
    PUSH = auto()


@dataclass(frozen=True)
class GameEvent:
    """One table event. ``data`` carries hand indexes, cards as text and chip amounts."""

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Keeps the table's event log and fans each entry out to listeners.

    A listener registered with ``event_type=None`` hears everything.
    Listeners run inside the engine call that caused the event, so an
    exception from one aborts that call.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._event_history: list[GameEvent] = []

    def subscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Log the event, then notify its own listeners before the catch-all ones."""
        self._event_history.append(event)
        for handler in [*self._handlers.get(event.event_type, []), *self._handlers.get(None, [])]:
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """The log so far; callers get a copy."""
        return self._event_history.copy()

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        return [e for e in self._event_history if e.event_type is event_type]

    def clear_history(self) -> None:
        self._event_history.clear()
