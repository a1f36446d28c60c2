"""A blackjack hand: cards, escrowed bet, and its lifecycle state machine."""

import logging
from decimal import Decimal
from enum import Enum, auto
from typing import Iterator

from transitions import EventData, Machine

from blackjack.cards import HOLE_CARD, Card, PrintableMixin, Shoe
from blackjack.errors import (
    BetExceedsMaximum,
    BettingError,
    InsufficientHoldings,
    InvalidStateTransition,
)
from blackjack.player import Player
from blackjack.rules import BLACKJACK

logger = logging.getLogger(__name__)


class HandState(Enum):
    """
    Hand lifecycle states.

    Flow: EMPTY → SINGLE → PAIR → {HIT → HIT* → STANDING | BUSTED}, with
    BLACKJACK, STANDING, DOUBLED, SURRENDERED and split (back to SINGLE)
    reachable from PAIR.
    """

    EMPTY = auto()
    SINGLE = auto()
    PAIR = auto()
    HIT = auto()
    STANDING = auto()
    BLACKJACK = auto()
    DOUBLED = auto()
    SURRENDERED = auto()
    BUSTED = auto()

    def __str__(self) -> str:
        return self.name.title()


PLAYABLE_STATES = frozenset({HandState.PAIR, HandState.HIT})
SCOREABLE_STATES = frozenset({HandState.STANDING, HandState.DOUBLED, HandState.BLACKJACK})

HAND_TRANSITIONS = [
    {"trigger": "draw", "source": HandState.EMPTY, "dest": HandState.SINGLE},
    {"trigger": "draw", "source": HandState.SINGLE, "dest": HandState.PAIR},
    {"trigger": "draw", "source": [HandState.PAIR, HandState.HIT], "dest": HandState.HIT},
    {"trigger": "make_blackjack", "source": HandState.PAIR, "dest": HandState.BLACKJACK},
    {"trigger": "stand_pat", "source": [HandState.PAIR, HandState.HIT], "dest": HandState.STANDING},
    {"trigger": "double_down", "source": HandState.PAIR, "dest": HandState.DOUBLED},
    {"trigger": "split_pair", "source": HandState.PAIR, "dest": HandState.SINGLE},
    {"trigger": "give_up", "source": HandState.PAIR, "dest": HandState.SURRENDERED},
    {"trigger": "go_bust", "source": [HandState.HIT, HandState.DOUBLED], "dest": HandState.BUSTED},
]


class HandEvent(Enum):
    """What a hand action resulted in, reported back to the game."""

    HIT = auto()
    STAND = auto()
    BLACKJACK = auto()
    BUST = auto()
    DOUBLE = auto()
    SURRENDER = auto()


class Hand(PrintableMixin):
    """
    A player or dealer hand.

    A hand with no player is the dealer's: it never bets and cannot double,
    split or surrender. Every action checks the state machine before it
    touches cards, bet or holdings, so a rejected action changes nothing.
    """

    def __init__(
        self,
        shoe: Shoe | None = None,
        player: Player | None = None,
        max_bet: int | None = None,
        is_split: bool = False,
    ) -> None:
        """
        Initialize an empty hand.

        Args:
            shoe: Shoe to draw from when an action needs a card
            player: Owning player, or None for the dealer
            max_bet: Table maximum for this hand's escrow
            is_split: True for a hand created by splitting a pair
        """
        self._shoe = shoe
        self._player = player
        self._max_bet = max_bet
        self._cards: list[Card] = []
        self._bet = 0
        self._is_split = is_split
        self._settled = False

        # Passed as a list: an empty hand has len() 0 and would read as no model.
        self.machine = Machine(
            model=[self],
            states=HandState,
            transitions=HAND_TRANSITIONS,
            initial=HandState.EMPTY,
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_log_transition",
            send_event=True,
        )

    def _log_transition(self, event: EventData) -> None:
        logger.debug(
            "%s hand event: %s from %s to %s",
            "Dealer" if self.is_dealer else "Player",
            event.event.name,
            event.transition.source,
            event.transition.dest,
        )

    @property
    def state(self) -> HandState:
        return self._machine_state  # type: ignore[attr-defined]

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    @property
    def bet(self) -> int:
        return self._bet

    @property
    def player(self) -> Player | None:
        return self._player

    @property
    def is_dealer(self) -> bool:
        return self._player is None

    @property
    def is_split(self) -> bool:
        return self._is_split

    @property
    def settled(self) -> bool:
        """Whether the escrowed bet has already been paid, returned or lost."""
        return self._settled

    @property
    def score(self) -> int:
        """
        Calculate the best total.

        Aces are folded in last, each counting 11 unless that (with 1 for
        every ace still to come) would pass 21. The result is the highest
        total not over 21 when one exists.
        """
        total = sum(card.value for card in self._cards if not card.is_ace)
        aces = sum(1 for card in self._cards if card.is_ace)
        for remaining in range(aces - 1, -1, -1):
            total += 11 if total + 11 + remaining <= BLACKJACK else 1
        return total

    @property
    def is_soft(self) -> bool:
        """Check if an ace is currently counted as 11."""
        if not any(card.is_ace for card in self._cards):
            return False
        hard_total = sum(1 if card.is_ace else card.value for card in self._cards)
        return hard_total + 10 <= BLACKJACK

    @property
    def is_blackjack(self) -> bool:
        """A natural: exactly two cards totalling 21."""
        if self.state is HandState.BLACKJACK:
            return True
        return len(self._cards) == 2 and self.score == BLACKJACK

    @property
    def is_busted(self) -> bool:
        return self.state is HandState.BUSTED

    @property
    def is_playable(self) -> bool:
        return self.state in PLAYABLE_STATES

    @property
    def is_scoreable(self) -> bool:
        return self.state in SCOREABLE_STATES

    @property
    def has_hole_cards(self) -> bool:
        return any(card.is_hole_card for card in self._cards)

    @property
    def can_split(self) -> bool:
        """A player's unsplit pair of equal ranks."""
        return (
            not self.is_dealer
            and not self._is_split
            and self.state is HandState.PAIR
            and self._cards[0].rank == self._cards[1].rank
        )

    @property
    def can_double(self) -> bool:
        return not self.is_dealer and self.state is HandState.PAIR

    @property
    def can_surrender(self) -> bool:
        return not self.is_dealer and self.state is HandState.PAIR

    def _require(self, trigger: str, action: str) -> None:
        if trigger not in self.machine.get_triggers(self.state):
            raise InvalidStateTransition(self.state, action)

    def _require_player(self, action: str) -> Player:
        if self._player is None:
            raise InvalidStateTransition(self.state, action, "dealer hand")
        return self._player

    def _draw(self) -> Card:
        if self._shoe is None:
            raise ValueError("Hand has no shoe to draw from")
        return self._shoe.deal()

    def _check_bet(self, player: Player, amount: int) -> None:
        new_bet = self._bet + amount
        if self._max_bet is not None and new_bet > self._max_bet:
            raise BetExceedsMaximum(new_bet, self._max_bet)
        if player.holdings < amount:
            raise InsufficientHoldings(amount, player.holdings)

    def _escrow(self, player: Player, amount: int) -> None:
        player.adjust_holdings(-amount)
        self._bet += amount

    def hit(self, card: Card | None = None) -> HandEvent:
        """
        Add a card, drawing from the shoe when none is given.

        Reaching two cards with 21 moves the hand to BLACKJACK; passing 21
        after the opening pair busts it.
        """
        self._require("draw", "hit")
        if card is None:
            card = self._draw()
        self._cards.append(card)
        self.draw()  # type: ignore[attr-defined]

        if self.state is HandState.PAIR and self.is_blackjack:
            self.make_blackjack()  # type: ignore[attr-defined]
            self.reveal()
            return HandEvent.BLACKJACK
        if self.score > BLACKJACK:
            return self._bust()
        return HandEvent.HIT

    def stand(self) -> HandEvent:
        self._require("stand_pat", "stand")
        self.stand_pat()  # type: ignore[attr-defined]
        return HandEvent.STAND

    def double(self) -> HandEvent:
        """Double the bet and take exactly one more card."""
        player = self._require_player("double")
        self._require("double_down", "double")
        self._check_bet(player, self._bet)

        self.double_down()  # type: ignore[attr-defined]
        self._escrow(player, self._bet)
        self._cards.append(self._draw())
        if self.score > BLACKJACK:
            return self._bust()
        return HandEvent.DOUBLE

    def split(self) -> "Hand":
        """
        Split a pair into two hands and deal one card to each.

        The new hand takes the second card and a bet equal to this one.
        Neither hand may be split again.

        Returns:
            The new sibling hand
        """
        player = self._require_player("split")
        self._require("split_pair", "split")
        if not self.can_split:
            raise InvalidStateTransition(self.state, "split", "cards are not a splittable pair")
        if self._bet <= 0:
            raise BettingError("Cannot split a hand with no bet")

        sibling = Hand(self._shoe, player=player, max_bet=self._max_bet, is_split=True)
        sibling._check_bet(player, self._bet)

        moved = self._cards.pop()
        self.split_pair()  # type: ignore[attr-defined]
        self._is_split = True
        sibling._escrow(player, self._bet)
        sibling.hit(moved)

        self.hit()
        sibling.hit()
        return sibling

    def surrender(self) -> HandEvent:
        """Give up the hand, recovering half the bet."""
        player = self._require_player("surrender")
        self._require("give_up", "surrender")
        self.give_up()  # type: ignore[attr-defined]
        refund = Decimal(self._bet) / 2
        player.adjust_holdings(refund)
        self._settled = True
        logger.info("Hand %s surrendered, returning %s", self.render(), refund)
        return HandEvent.SURRENDER

    def _bust(self) -> HandEvent:
        self.go_bust()  # type: ignore[attr-defined]
        self._settled = True
        return HandEvent.BUST

    def increase_bet(self, amount: int) -> None:
        """
        Move chips from the player into this hand's escrow.

        Raises:
            BetExceedsMaximum: The new bet would pass the table maximum
            InsufficientHoldings: The player holds fewer chips than amount
        """
        player = self._player
        if player is None:
            raise BettingError("Dealer hand does not take bets")
        if self._settled:
            raise InvalidStateTransition(self.state, "bet", "hand already settled")
        if amount <= 0:
            raise BettingError(f"Bet increase must be positive, got {amount}")
        self._check_bet(player, amount)
        self._escrow(player, amount)

    def _settle(self, credit: Decimal, action: str) -> Decimal:
        if self._settled:
            raise InvalidStateTransition(self.state, action, "hand already settled")
        if self._player is not None:
            self._player.adjust_holdings(credit)
        self._settled = True
        return credit

    def pay(self, odds: Decimal | float) -> Decimal:
        """Return the bet plus winnings at the given odds."""
        bet = Decimal(self._bet)
        winnings = bet + bet * Decimal(str(odds))
        logger.info("Hand %s paying %s to 1 odds, or %s", self.render(), odds, winnings)
        return self._settle(winnings, "pay")

    def push(self) -> Decimal:
        """Return the bet unchanged."""
        logger.info("Hand %s pushed, returning bet of %s", self.render(), self._bet)
        return self._settle(Decimal(self._bet), "push")

    def forfeit(self) -> Decimal:
        """Lose the bet; the escrow is never returned."""
        logger.info("Hand %s loses bet of %s", self.render(), self._bet)
        return self._settle(Decimal(0), "forfeit")

    def reveal(self) -> "Hand":
        """Turn every hole card face up."""
        for card in self._cards:
            card.is_hole_card = False
        return self

    def render(self) -> str:
        """Cards followed by the score, or the hole glyph while concealed."""
        total = HOLE_CARD if self.has_hole_cards else str(self.score)
        return f"{super().render()} => {total}"

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __repr__(self) -> str:
        owner = "dealer" if self.is_dealer else "player"
        return f"Hand({owner}, {self._cards!r}, state={self.state.name}, bet={self._bet})"
