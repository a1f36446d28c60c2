"""Blackjack rules engine - 100% UI-agnostic."""

from blackjack.cards import Card, Deck, Shoe, Rank, Suit
from blackjack.errors import (
    BlackjackError,
    BetBelowMinimum,
    BetExceedsMaximum,
    BettingError,
    InsufficientHoldings,
    InvalidConfiguration,
    InvalidRank,
    InvalidStateTransition,
    InvalidSuit,
    NotEmpty,
)
from blackjack.hand import Hand, HandEvent, HandState
from blackjack.player import Player
from blackjack.rules import TableRules

__all__ = [
    "Card",
    "Deck",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "HandEvent",
    "HandState",
    "Player",
    "TableRules",
    "BlackjackError",
    "BetBelowMinimum",
    "BetExceedsMaximum",
    "BettingError",
    "InsufficientHoldings",
    "InvalidConfiguration",
    "InvalidRank",
    "InvalidStateTransition",
    "InvalidSuit",
    "NotEmpty",
]
