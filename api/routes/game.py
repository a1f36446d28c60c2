"""Game API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException

from api.schemas import (
    ActionRequest,
    BetRequest,
    BuyInRequest,
    CardResponse,
    GameStateResponse,
    HandResponse,
    NewGameRequest,
    NewGameResponse,
    QuitResponse,
)
from api.session import create_session, delete_session, load_game
from blackjack.cards import Card
from blackjack.game import BlackjackGame
from blackjack.hand import Hand
from blackjack.rules import TableRules
from config import config

logger = logging.getLogger(__name__)

router = APIRouter()

SessionHeader = Annotated[str, Header(alias="X-Session-ID")]


def _card_to_response(card: Card) -> CardResponse:
    if card.is_hole_card:
        return CardResponse(hole=True, text=card.render())
    return CardResponse(
        label=card.label,
        suit=card.suit_name,
        symbol=card.symbol,
        value=card.value,
        text=card.render(),
    )


def _hand_to_response(hand: Hand) -> HandResponse:
    """Convert a Hand to HandResponse, hiding the score behind a hole card."""
    return HandResponse(
        cards=[_card_to_response(c) for c in hand.cards],
        score=None if hand.has_hole_cards else hand.score,
        state=hand.state.name,
        bet=hand.bet,
        is_blackjack=hand.is_blackjack and not hand.has_hole_cards,
        is_playable=hand.is_playable,
        is_scoreable=hand.is_scoreable,
        can_split=hand.can_split,
        can_double=hand.can_double,
        can_surrender=hand.can_surrender,
        text=hand.render(),
    )


def _game_state_response(game: BlackjackGame) -> GameStateResponse:
    """Convert game state to response."""
    hands = game.hands
    current = game.current_hand
    current_index = next((i for i, h in enumerate(hands) if h is current), None)
    dealer = game.dealer_hand

    return GameStateResponse(
        state=game.state.name,
        holdings=float(game.player.holdings),
        wager=game.player.wager,
        min_bet=game.min_bet,
        max_bet=game.max_bet,
        dealer_hand=_hand_to_response(dealer) if dealer is not None else None,
        player_hands=[_hand_to_response(h) for h in hands],
        current_hand_index=current_index,
        outcomes=[o.value for o in game.outcomes],
        cards_remaining=game.shoe.cards_remaining,
    )


async def _get_game(session_id: str) -> BlackjackGame:
    game = await load_game(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Unknown or expired session")
    return game


def _rules_for(request: NewGameRequest | None) -> TableRules:
    defaults = config.game
    if request is None:
        return defaults.to_rules()
    return TableRules(
        decks=request.decks or defaults.decks,
        chips=request.chips or defaults.chips,
        min_bet=request.min_bet or defaults.min_bet,
        max_bet=request.max_bet or defaults.max_bet,
    )


@router.post("/new")
async def new_game(request: NewGameRequest | None = None) -> NewGameResponse:
    """Open a new table and return its session token."""
    game = BlackjackGame(rules=_rules_for(request))
    game.start()
    session_id = await create_session(game)
    return NewGameResponse(session_id=session_id)


@router.get("/state")
async def get_state(session_id: SessionHeader) -> GameStateResponse:
    """Get current game state."""
    game = await _get_game(session_id)
    return _game_state_response(game)


@router.post("/bet")
async def place_bet(request: BetRequest, session_id: SessionHeader) -> GameStateResponse:
    """Stage the wager for the next deal."""
    game = await _get_game(session_id)
    game.place_bet(request.amount)
    return _game_state_response(game)


@router.post("/deal")
async def deal(session_id: SessionHeader) -> GameStateResponse:
    """Deal a new round with the staged wager."""
    game = await _get_game(session_id)
    game.deal()
    return _game_state_response(game)


@router.post("/action")
async def player_action(request: ActionRequest, session_id: SessionHeader) -> GameStateResponse:
    """Execute a player action."""
    game = await _get_game(session_id)

    hand = None
    if request.hand_index is not None:
        hands = game.hands
        if request.hand_index >= len(hands):
            raise HTTPException(status_code=400, detail=f"No hand at index {request.hand_index}")
        hand = hands[request.hand_index]

    actions = {
        "hit": game.hit,
        "stand": game.stand,
        "double": game.double,
        "split": game.split,
        "surrender": game.surrender,
    }
    actions[request.action](hand)
    return _game_state_response(game)


@router.post("/buy-in")
async def buy_in(request: BuyInRequest, session_id: SessionHeader) -> GameStateResponse:
    """Add chips after running short of the table minimum."""
    game = await _get_game(session_id)
    game.buy_in(request.amount)
    return _game_state_response(game)


@router.post("/quit")
async def quit_game(session_id: SessionHeader) -> QuitResponse:
    """Leave the table, returning any escrowed bet, and end the session."""
    game = await _get_game(session_id)
    returned = game.quit()
    await delete_session(session_id)
    return QuitResponse(returned=float(returned), holdings=float(game.player.holdings))
