"""The player's chip account."""

import logging
from decimal import Decimal

logger = logging.getLogger(__name__)


class Player:
    """
    A player's chips.

    Holdings change only through ``adjust_holdings`` so every chip movement
    between the player and a hand's escrow goes through one place. The
    ``wager`` is the stake the game escrows into the next hand it deals.
    """

    def __init__(self, holdings: int | Decimal, wager: int = 0) -> None:
        if holdings <= 0:
            raise ValueError("holdings must be positive")
        self._holdings = Decimal(holdings)
        self._wager = wager

    @property
    def holdings(self) -> Decimal:
        return self._holdings

    @property
    def wager(self) -> int:
        return self._wager

    def adjust_holdings(self, delta: int | Decimal) -> Decimal:
        """
        Apply a credit (positive) or debit (negative) to holdings.

        No floor check happens here: callers escrowing chips validate the
        balance first.
        """
        self._holdings += Decimal(delta)
        logger.debug("Holdings adjusted by %s to %s", delta, self._holdings)
        return self._holdings

    def stake(self, amount: int) -> None:
        """Stage the wager for the next deal. No chips move until the deal."""
        self._wager = amount

    def __repr__(self) -> str:
        return f"Player(holdings={self._holdings}, wager={self._wager})"
