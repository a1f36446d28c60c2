"""Card, Deck, and Shoe classes."""

import logging
from dataclasses import FrozenInstanceError, dataclass, field
from enum import IntEnum
from random import Random
from typing import Any, Iterator

from blackjack.errors import InvalidConfiguration, InvalidRank, InvalidSuit, NotEmpty

logger = logging.getLogger(__name__)

HOLE_CARD = "⌀"
CARDS_PER_DECK = 52


class Suit(IntEnum):
    """Card suits, numbered in casino deck order."""

    HEARTS = 1
    CLUBS = 2
    DIAMONDS = 3
    SPADES = 4

    @property
    def symbol(self) -> str:
        return {
            Suit.HEARTS: "♡",
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♢",
            Suit.SPADES: "♠",
        }[self]

    def __str__(self) -> str:
        return self.symbol


class Rank(IntEnum):
    """Card ranks. Ace is low (1) in deck order and scores 11 or 1."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def label(self) -> str:
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }.get(self, str(self.value))

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self > Rank.TEN:
            return 10
        return self.value

    def __str__(self) -> str:
        return self.label


_FIXED_FIELDS = frozenset({"rank", "suit"})


@dataclass(slots=True, unsafe_hash=True)
class Card:
    """
    A playing card.

    Rank and suit are fixed at construction. Only the hole-card flag may
    change, which lets the dealer conceal and later reveal a card.
    """

    rank: Rank
    suit: Suit
    is_hole_card: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        try:
            rank = Rank(self.rank)
        except ValueError:
            raise InvalidRank(self.rank) from None
        try:
            suit = Suit(self.suit)
        except ValueError:
            raise InvalidSuit(self.suit) from None
        object.__setattr__(self, "rank", rank)
        object.__setattr__(self, "suit", suit)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _FIXED_FIELDS and hasattr(self, name):
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        object.__setattr__(self, name, value)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        hole = ", hole" if self.is_hole_card else ""
        return f"Card({self.rank.name}, {self.suit.name}{hole})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def label(self) -> str:
        return self.rank.label

    @property
    def symbol(self) -> str:
        return self.suit.symbol

    @property
    def suit_name(self) -> str:
        return self.suit.name.title()

    @property
    def is_ace(self) -> bool:
        return self.rank == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        return self.value == 10

    def render(self) -> str:
        """Return the card face, or the hole glyph while concealed."""
        if self.is_hole_card:
            return HOLE_CARD
        return f"{self.label}{self.symbol}"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like 'AH', '10♠', 'kc'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {rank.label: rank for rank in Rank}
        rank_map["T"] = Rank.TEN
        rank_map["1"] = Rank.ACE

        suit_map = {
            "H": Suit.HEARTS,
            "♡": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "♧": Suit.CLUBS,
            "D": Suit.DIAMONDS,
            "♢": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
            "♤": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise InvalidRank(rank_str)
        if suit_str not in suit_map:
            raise InvalidSuit(suit_str)

        return cls(rank_map[rank_str], suit_map[suit_str])


class PrintableMixin:
    """Text rendering for anything exposing a ``cards`` sequence."""

    @property
    def cards(self) -> tuple[Card, ...]:
        raise NotImplementedError

    def render(self) -> str:
        return " ".join(card.render() for card in self.cards)

    def __str__(self) -> str:
        return self.render()


class ShuffleMixin:
    """
    In-place Fisher-Yates shuffling over a ``_cards`` list.

    The ``shuffled`` flag makes repeated calls no-ops until new, unshuffled
    cards are appended and the flag is cleared.
    """

    shuffled: bool = False
    _cards: list[Card]
    _rng: Random

    def shuffle(self) -> "ShuffleMixin":
        """Shuffle the cards unless they are already shuffled."""
        if self.shuffled:
            return self
        self._permute(self._cards)
        self.shuffled = True
        return self

    def _permute(self, cards: list[Card]) -> None:
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]


class Deck(PrintableMixin, ShuffleMixin):
    """
    A standard 52-card deck in new-deck casino order.

    Hearts and Clubs run Ace to King, Diamonds and Spades run King to Ace.
    The order never depends on random state.
    """

    def __init__(self, rng: Random | None = None) -> None:
        self._rng = rng or Random()
        self._cards: list[Card] = [
            Card(rank if suit < Suit.DIAMONDS else Rank(14 - rank), suit)
            for suit in Suit
            for rank in Rank
        ]

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)


class Shoe(PrintableMixin, ShuffleMixin):
    """A dealing shoe holding one or more decks."""

    def __init__(self, num_decks: int = 1, rng: Random | None = None) -> None:
        """
        Initialize a shoe and fill it with fresh decks.

        Args:
            num_decks: Number of decks loaded on each fill
            rng: Random number generator for shuffling
        """
        if num_decks < 1:
            raise InvalidConfiguration("Shoe must have at least 1 deck")

        self._num_decks = num_decks
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self._refills = 0
        self.fill()

    def fill(self) -> "Shoe":
        """Load fresh decks into an empty shoe."""
        if self._cards:
            raise NotEmpty(f"Cannot fill shoe holding {len(self._cards)} cards")
        for _ in range(self._num_decks):
            self._cards.extend(Deck(rng=self._rng))
        self.shuffled = False
        return self

    def deal(self, as_hole_card: bool = False) -> Card:
        """
        Deal the top card, shuffling first if needed.

        An empty shoe is refilled and reshuffled before dealing, so this
        never fails for a shoe with at least one deck.
        """
        self.shuffle()
        if not self._cards:
            self.fill()
            self._refills += 1
            logger.info("Shoe empty, refilled with %d deck(s)", self._num_decks)
            return self.deal(as_hole_card)

        card = self._cards.pop(0)
        if as_hole_card:
            card.is_hole_card = True
        return card

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        return self._num_decks

    @property
    def refills(self) -> int:
        """Return how many times the shoe refilled itself after running dry."""
        return self._refills

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
