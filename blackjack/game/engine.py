"""Blackjack game engine with state machine."""

import logging
from dataclasses import replace
from decimal import Decimal
from enum import Enum
from random import Random
from typing import Callable

from transitions import EventData, Machine

from blackjack.cards import Card, Shoe
from blackjack.errors import (
    BetBelowMinimum,
    BetExceedsMaximum,
    BettingError,
    InsufficientHoldings,
    InvalidStateTransition,
)
from blackjack.game.events import EventEmitter, EventType, GameEvent
from blackjack.game.state import GAME_TRANSITIONS, GameState
from blackjack.hand import Hand, HandEvent
from blackjack.player import Player
from blackjack.rules import BLACKJACK_PAYOUT, DEALER_STANDS_ON, WIN_PAYOUT, TableRules

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """How a player hand finished."""

    BLACKJACK = "blackjack"
    WIN = "win"
    PUSH = "push"
    LOSE = "lose"
    BUST = "bust"
    SURRENDER = "surrender"


_ACTION_EVENTS = {
    HandEvent.HIT: EventType.PLAYER_HIT,
    HandEvent.STAND: EventType.PLAYER_STAND,
    HandEvent.SURRENDER: EventType.PLAYER_SURRENDER,
}


class BlackjackGame:
    """
    Blackjack game engine using a state machine.

    One player plays against the dealer from a shoe that lives as long as
    the game. Hands report what each action did and the game decides what
    happens next, all within the calling method. Presentation layers read
    the public properties and subscribe to events.
    """

    def __init__(
        self,
        rules: TableRules | None = None,
        rng: Random | None = None,
        shoe: Shoe | None = None,
        **overrides: int,
    ) -> None:
        """
        Initialize a new blackjack game.

        Args:
            rules: Table configuration (defaults if not provided)
            rng: Random number generator for reproducible shuffles
            shoe: Pre-built shoe, replacing the one built from rules.decks
            **overrides: decks, chips, min_bet or max_bet, applied over rules
        """
        self.rules = replace(rules or TableRules(), **overrides)
        self._shoe = shoe if shoe is not None else Shoe(num_decks=self.rules.decks, rng=rng)
        self._player = Player(self.rules.chips, wager=self.rules.min_bet)
        self._dealer_hand: Hand | None = None
        self._hands: list[Hand] = []
        self._outcomes: list[Outcome] = []
        self._opened = False
        self.events = EventEmitter()

        self.machine = Machine(
            model=self,
            states=GameState,
            transitions=GAME_TRANSITIONS,
            initial=GameState.PREGAME,
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_log_transition",
            send_event=True,
        )

    def _log_transition(self, event: EventData) -> None:
        logger.debug(
            "Game event: %s from %s to %s",
            event.event.name,
            event.transition.source,
            event.transition.dest,
        )

    @property
    def state(self) -> GameState:
        return self._machine_state  # type: ignore[attr-defined]

    @property
    def shoe(self) -> Shoe:
        return self._shoe

    @property
    def player(self) -> Player:
        return self._player

    @property
    def dealer_hand(self) -> Hand | None:
        return self._dealer_hand

    @property
    def hands(self) -> list[Hand]:
        """Return the player's hands for the current (or last) round."""
        return list(self._hands)

    @property
    def outcomes(self) -> list[Outcome]:
        """Return the result of each player hand once the round is scored."""
        return list(self._outcomes)

    @property
    def min_bet(self) -> int:
        return self.rules.min_bet

    @property
    def max_bet(self) -> int:
        return self.rules.max_bet

    @property
    def current_hand(self) -> Hand | None:
        """Get the first hand still accepting actions."""
        for hand in self._hands:
            if hand.is_playable:
                return hand
        return None

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def _require(self, trigger: str, action: str) -> None:
        if trigger not in self.machine.get_triggers(self.state):
            raise InvalidStateTransition(self.state, action)

    def start(self) -> "BlackjackGame":
        """
        Open the table, once.

        Dealing does not require an opened table; this only announces it.
        """
        if self._opened or self.state is not GameState.PREGAME:
            raise InvalidStateTransition(self.state, "start", "table already opened")
        self._opened = True
        logger.info(
            "Game on: %d deck(s), %s chips, bets %d-%d",
            self.rules.decks,
            self._player.holdings,
            self.min_bet,
            self.max_bet,
        )
        self.events.emit_new(
            EventType.GAME_STARTED,
            holdings=float(self._player.holdings),
            min_bet=self.min_bet,
            max_bet=self.max_bet,
        )
        return self

    def place_bet(self, amount: int) -> None:
        """
        Stage the wager for the next deal.

        Raises:
            InvalidStateTransition: A round is in progress
            BetBelowMinimum / BetExceedsMaximum: Outside the table limits
            InsufficientHoldings: The player cannot cover the wager
        """
        if self.state not in (GameState.PREGAME, GameState.POSTGAME):
            raise InvalidStateTransition(self.state, "bet")
        if amount < self.min_bet:
            raise BetBelowMinimum(amount, self.min_bet)
        if amount > self.max_bet:
            raise BetExceedsMaximum(amount, self.max_bet)
        if amount > self._player.holdings:
            raise InsufficientHoldings(amount, self._player.holdings)

        self._player.stake(amount)
        self.events.emit_new(EventType.BET_PLACED, amount=amount)

    def deal(self) -> None:
        """
        Start a round.

        Deals one card to each player hand, one to the dealer, a second to
        each player hand, then the dealer's hole card. Blackjacks are only
        resolved once all four cards are out. A player short of the table
        minimum is sent to BUYING without any cards being drawn.
        """
        self._require("begin_deal", "deal")
        holdings = self._player.holdings
        wager = self._player.wager
        if holdings >= self.min_bet and wager > holdings:
            raise InsufficientHoldings(wager, holdings)

        self.begin_deal()  # type: ignore[attr-defined]
        if holdings < self.min_bet:
            logger.info("Holdings of %s below minimum bet of %d", holdings, self.min_bet)
            self.require_buy_in()  # type: ignore[attr-defined]
            self.events.emit_new(
                EventType.BUY_IN_REQUIRED,
                holdings=float(holdings),
                min_bet=self.min_bet,
            )
            return

        hand = Hand(self._shoe, player=self._player, max_bet=self.max_bet)
        hand.increase_bet(wager)
        self._hands = [hand]
        self._outcomes = []
        self._dealer_hand = Hand(self._shoe)
        self.events.emit_new(EventType.ROUND_STARTED, bet=wager)
        logger.info("Dealing round with bet of %d", wager)

        for hand in self._hands:
            self._deal_card_to_hand(hand)
        self._deal_card_to_hand(self._dealer_hand)
        for hand in self._hands:
            self._deal_card_to_hand(hand)
        self._deal_card_to_hand(self._dealer_hand, hole=True)

        for index, hand in enumerate(self._hands):
            if hand.is_blackjack:
                logger.info("Player blackjack: %s", hand.render())
                self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=index)

        if self._dealer_hand.is_blackjack:
            logger.info("Dealer blackjack: %s", self._dealer_hand.render())
            self.events.emit_new(EventType.DEALER_BLACKJACK)
            self.dealer_blackjack()  # type: ignore[attr-defined]
            self._resolve_round()
            return

        self._check_hands()

    def _deal_card_to_hand(self, hand: Hand, hole: bool = False) -> Card:
        """Deal a card from the shoe to a hand."""
        card = self._shoe.deal(as_hole_card=hole)
        face = card.render()
        hand.hit(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=face,
            hand="dealer" if hand.is_dealer else "player",
            score=None if hand.has_hole_cards else hand.score,
        )
        return card

    def _hand_in_play(self, hand: Hand | None, action: str) -> tuple[int, Hand]:
        if self.state is not GameState.PLAYER:
            raise InvalidStateTransition(self.state, action)
        if hand is None:
            hand = self.current_hand
        for index, candidate in enumerate(self._hands):
            if candidate is hand:
                return index, candidate
        raise InvalidStateTransition(self.state, action, "hand is not a player hand at this table")

    def hit(self, hand: Hand | None = None) -> HandEvent:
        """Player takes another card on a hand (the current hand by default)."""
        index, hand = self._hand_in_play(hand, "hit")
        return self._after_action(index, hand, hand.hit())

    def stand(self, hand: Hand | None = None) -> HandEvent:
        """Player stands on a hand."""
        index, hand = self._hand_in_play(hand, "stand")
        return self._after_action(index, hand, hand.stand())

    def double(self, hand: Hand | None = None) -> HandEvent:
        """Player doubles the bet and takes one final card."""
        index, hand = self._hand_in_play(hand, "double")
        result = hand.double()
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_index=index,
            score=hand.score,
            bet=hand.bet,
        )
        return self._after_action(index, hand, result)

    def surrender(self, hand: Hand | None = None) -> HandEvent:
        """Player gives up a hand for half the bet back."""
        index, hand = self._hand_in_play(hand, "surrender")
        return self._after_action(index, hand, hand.surrender())

    def split(self, hand: Hand | None = None) -> Hand:
        """
        Player splits a pair into two hands.

        Returns:
            The new hand, placed right after the one that was split
        """
        index, hand = self._hand_in_play(hand, "split")
        sibling = hand.split()
        self._hands.insert(index + 1, sibling)
        logger.info("Hand split: %s | %s", hand.render(), sibling.render())
        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand_index=index,
            scores=[hand.score, sibling.score],
        )
        for offset, split_hand in enumerate((hand, sibling)):
            if split_hand.is_blackjack:
                self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=index + offset)
        self._check_hands()
        return sibling

    def _after_action(self, index: int, hand: Hand, result: HandEvent) -> HandEvent:
        """Publish what an action did, then move the round along."""
        event_type = _ACTION_EVENTS.get(result)
        if event_type is not None:
            self.events.emit_new(event_type, hand_index=index, score=hand.score)
        if result is HandEvent.BUST:
            logger.info("Hand busted: %s", hand.render())
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index, score=hand.score)
        elif result is HandEvent.BLACKJACK:
            self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=index)
        self._check_hands()
        return result

    def _check_hands(self) -> None:
        """Advance once no player hand accepts further actions."""
        if any(hand.is_playable for hand in self._hands):
            if self.state is GameState.DEALING:
                self.begin_player_turn()  # type: ignore[attr-defined]
            return

        if self.state is GameState.PLAYER:
            self.begin_dealer_turn()  # type: ignore[attr-defined]
            self._play_dealer()
        elif self.state is GameState.DEALING:
            self.begin_scoring()  # type: ignore[attr-defined]
            self._resolve_round()

    def _play_dealer(self) -> None:
        """Reveal the hole card and draw to 17."""
        dealer = self._dealer_hand
        assert dealer is not None
        dealer.reveal()
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=dealer.cards[-1].render(),
            score=dealer.score,
        )

        while dealer.score < DEALER_STANDS_ON:
            card = self._shoe.deal()
            dealer.hit(card)
            self.events.emit_new(EventType.DEALER_HITS, card=card.render(), score=dealer.score)

        if dealer.is_busted:
            logger.info("Dealer busted: %s", dealer.render())
            self.events.emit_new(EventType.DEALER_BUSTS, score=dealer.score)
            self.dealer_busts()  # type: ignore[attr-defined]
        else:
            dealer.stand()
            logger.info("Dealer stands: %s", dealer.render())
            self.events.emit_new(EventType.DEALER_STANDS, score=dealer.score)
            self.begin_scoring()  # type: ignore[attr-defined]

        self._resolve_round()

    def _resolve_round(self) -> None:
        """
        Settle every player hand against the dealer.

        A player blackjack is compared only with a dealer blackjack: it
        pushes against one and pays 3:2 otherwise, whatever the dealer
        drew. Other scoreable hands lose to a dealer blackjack, win even
        money against a dealer bust, and otherwise compare totals.
        """
        dealer = self._dealer_hand
        assert dealer is not None
        dealer.reveal()
        house = dealer.score
        dealer_busted = dealer.is_busted
        dealer_blackjack = dealer.is_blackjack
        logger.info("Scoring hands. Dealer has: %s", dealer.render())

        outcomes = []
        for index, hand in enumerate(self._hands):
            outcome = self._settle_hand(hand, house, dealer_busted, dealer_blackjack)
            outcomes.append(outcome)
            event_type = {
                Outcome.BLACKJACK: EventType.PLAYER_WINS,
                Outcome.WIN: EventType.PLAYER_WINS,
                Outcome.PUSH: EventType.PUSH,
            }.get(outcome, EventType.PLAYER_LOSES)
            self.events.emit_new(event_type, hand_index=index, outcome=outcome.value)
        self._outcomes = outcomes

        self._player.stake(self.min_bet)
        self.events.emit_new(
            EventType.ROUND_ENDED,
            outcomes=[o.value for o in outcomes],
            holdings=float(self._player.holdings),
        )
        self.finish_round()  # type: ignore[attr-defined]
        logger.info("Round over, player holds %s", self._player.holdings)

    def _settle_hand(
        self,
        hand: Hand,
        house: int,
        dealer_busted: bool,
        dealer_blackjack: bool,
    ) -> Outcome:
        if hand.is_busted:
            return Outcome.BUST
        if hand.settled:
            return Outcome.SURRENDER
        if not hand.is_scoreable:
            hand.forfeit()
            return Outcome.LOSE

        if hand.is_blackjack:
            if dealer_blackjack:
                hand.push()
                return Outcome.PUSH
            hand.pay(BLACKJACK_PAYOUT)
            return Outcome.BLACKJACK

        if dealer_blackjack:
            hand.forfeit()
            return Outcome.LOSE

        score = hand.score
        if score == house:
            hand.push()
            return Outcome.PUSH
        if dealer_busted or score > house:
            hand.pay(WIN_PAYOUT)
            return Outcome.WIN
        hand.forfeit()
        return Outcome.LOSE

    def buy_in(self, amount: int) -> None:
        """Add chips after running short of the table minimum."""
        self._require("rebuy", "buy in")
        if amount <= 0:
            raise BettingError(f"Buy-in must be positive, got {amount}")
        self._player.adjust_holdings(amount)
        self._player.stake(self.min_bet)
        logger.info("Player bought %d chips, now holds %s", amount, self._player.holdings)
        self.events.emit_new(
            EventType.CHIPS_BOUGHT,
            amount=amount,
            holdings=float(self._player.holdings),
        )
        self.rebuy()  # type: ignore[attr-defined]

    def quit(self) -> Decimal:
        """
        Leave the table from any state.

        Any bet still escrowed in an unsettled hand goes back to the player
        first.

        Returns:
            The amount returned to holdings
        """
        returned = Decimal(0)
        for hand in self._hands:
            if not hand.settled and hand.bet:
                returned += hand.push()
        self.exit()  # type: ignore[attr-defined]
        logger.info("Game over. Player leaves with %s", self._player.holdings)
        self.events.emit_new(
            EventType.GAME_ENDED,
            reason="quit",
            returned=float(returned),
            holdings=float(self._player.holdings),
        )
        return returned
