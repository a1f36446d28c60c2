"""Table configuration and fixed house rules."""

from dataclasses import dataclass
from decimal import Decimal

from blackjack.errors import InvalidConfiguration

# Payout odds, expressed as winnings per unit bet.
BLACKJACK_PAYOUT = Decimal("1.5")
WIN_PAYOUT = Decimal("1")

# Dealer draws below this total and stands on anything at or above it.
DEALER_STANDS_ON = 17

BLACKJACK = 21


@dataclass(frozen=True)
class TableRules:
    """
    Configuration accepted when a game is created.

    This is the whole configuration surface: deck count, starting chips and
    the per-hand betting limits.
    """

    decks: int = 1
    chips: int = 500
    min_bet: int = 5
    max_bet: int = 100

    def __post_init__(self) -> None:
        """Validate the table limits."""
        if self.decks < 1:
            raise InvalidConfiguration("decks must be at least 1")
        if self.chips <= 0:
            raise InvalidConfiguration("chips must be positive")
        if self.min_bet <= 0:
            raise InvalidConfiguration("min_bet must be positive")
        if self.max_bet < self.min_bet:
            raise InvalidConfiguration("max_bet must be at least min_bet")
