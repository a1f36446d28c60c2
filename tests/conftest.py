"""Pytest fixtures for blackjack tests."""

from random import Random

import pytest

from blackjack.cards import Card, Deck, Shoe, Rank, Suit
from blackjack.game import BlackjackGame
from blackjack.hand import Hand
from blackjack.player import Player
from blackjack.rules import TableRules
from tests.helpers import StackedShoe, build_hand, parse_cards


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck():
    """A fresh deck in new-deck order."""
    return Deck()


@pytest.fixture
def shoe(rng):
    """A seeded single-deck shoe."""
    return Shoe(num_decks=1, rng=rng)


@pytest.fixture
def stacked_shoe():
    """Factory for a shoe that deals the given cards first, unshuffled."""

    def _stack(faces: str = "", num_decks: int = 1) -> StackedShoe:
        return StackedShoe(parse_cards(faces), num_decks=num_decks)

    return _stack


@pytest.fixture
def player():
    """A player holding 100 chips."""
    return Player(100)


@pytest.fixture
def hand_of():
    """Factory building a hand from a card string."""
    return build_hand


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand(player=Player(100), max_bet=100)


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return build_hand("AS KH", player=Player(100))


@pytest.fixture
def pair_8s_hand(player):
    """A pair of 8s with a 10-chip bet, drawing from an unshuffled shoe."""
    hand = Hand(StackedShoe(), player=player, max_bet=100)
    hand.increase_bet(10)
    hand.hit(Card(Rank.EIGHT, Suit.SPADES))
    hand.hit(Card(Rank.EIGHT, Suit.HEARTS))
    return hand


@pytest.fixture
def rules():
    """Default table rules."""
    return TableRules()


@pytest.fixture
def game(rng):
    """A new game instance with a seeded shoe."""
    return BlackjackGame(rng=rng)


@pytest.fixture
def stacked_game():
    """
    Factory for a game whose shoe deals the given cards first.

    Deal order is player, dealer, player, dealer (hole), then any hits.
    """

    def _make(faces: str, **rules) -> BlackjackGame:
        return BlackjackGame(rules=TableRules(**rules), shoe=StackedShoe(parse_cards(faces)))

    return _make
