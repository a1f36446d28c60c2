"""Deterministic shoes and hand builders shared by the test suite."""

from blackjack.cards import Card, Shoe
from blackjack.hand import Hand
from blackjack.player import Player


class StackedShoe(Shoe):
    """
    A shoe that never shuffles and deals the given cards first.

    After the stacked cards it deals the decks loaded on fill, in
    new-deck order.
    """

    def __init__(self, cards: list[Card] | None = None, num_decks: int = 1) -> None:
        super().__init__(num_decks=num_decks)
        self._cards[:0] = cards or []

    def _permute(self, cards: list[Card]) -> None:
        pass


def parse_cards(faces: str) -> list[Card]:
    """Parse 'AH KS 10D' into cards."""
    return [Card.from_string(s) for s in faces.split()]


def build_hand(faces: str, player: Player | None = None, **kwargs) -> Hand:
    """Build a hand by hitting each card in turn."""
    hand = Hand(player=player, **kwargs)
    for card in parse_cards(faces):
        hand.hit(card)
    return hand
