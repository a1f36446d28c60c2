"""Game state enumeration."""

from enum import Enum, auto


class GameState(Enum):
    """
    Game state machine states.

    Flow: PREGAME → DEALING → {BUYING | PLAYER → DEALER → SCORING | SCORING} → POSTGAME
    """

    # Table open, nothing dealt yet
    PREGAME = auto()

    # Cards being dealt
    DEALING = auto()

    # Holdings below the table minimum; waiting for more chips
    BUYING = auto()

    # Player actions
    PLAYER = auto()

    # Dealer plays
    DEALER = auto()

    # Settling bets
    SCORING = auto()

    # Round finished, ready for the next deal
    POSTGAME = auto()

    # Player left the table
    EXITED = auto()

    def __str__(self) -> str:
        return self.name.title()


GAME_TRANSITIONS = [
    {"trigger": "begin_deal", "source": [GameState.PREGAME, GameState.POSTGAME], "dest": GameState.DEALING},
    {"trigger": "require_buy_in", "source": GameState.DEALING, "dest": GameState.BUYING},
    {"trigger": "rebuy", "source": GameState.BUYING, "dest": GameState.POSTGAME},
    {"trigger": "begin_player_turn", "source": GameState.DEALING, "dest": GameState.PLAYER},
    {"trigger": "dealer_blackjack", "source": GameState.DEALING, "dest": GameState.SCORING},
    {"trigger": "begin_dealer_turn", "source": GameState.PLAYER, "dest": GameState.DEALER},
    {"trigger": "dealer_busts", "source": GameState.DEALER, "dest": GameState.SCORING},
    {"trigger": "begin_scoring", "source": [GameState.DEALING, GameState.DEALER], "dest": GameState.SCORING},
    {"trigger": "finish_round", "source": GameState.SCORING, "dest": GameState.POSTGAME},
    {"trigger": "exit", "source": "*", "dest": GameState.EXITED},
]

# Valid state transitions, derived from the trigger table
VALID_TRANSITIONS: dict[GameState, list[GameState]] = {state: [] for state in GameState}
for _transition in GAME_TRANSITIONS:
    _sources = _transition["source"]
    if _sources == "*":
        _sources = list(GameState)
    elif isinstance(_sources, GameState):
        _sources = [_sources]
    for _source in _sources:
        if _transition["dest"] not in VALID_TRANSITIONS[_source]:
            VALID_TRANSITIONS[_source].append(_transition["dest"])


def is_valid_transition(from_state: GameState, to_state: GameState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])
