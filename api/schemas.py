"""Pydantic schemas for API requests and responses."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class NewGameRequest(BaseModel):
    """Table configuration for a new game. Omitted fields use server defaults."""

    decks: int | None = Field(default=None, ge=1, le=8)
    chips: int | None = Field(default=None, gt=0)
    min_bet: int | None = Field(default=None, gt=0)
    max_bet: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_limits(self) -> "NewGameRequest":
        if self.min_bet is not None and self.max_bet is not None and self.max_bet < self.min_bet:
            raise ValueError("max_bet must be at least min_bet")
        return self


class NewGameResponse(BaseModel):
    session_id: str


class BetRequest(BaseModel):
    """Request to stage the wager for the next deal."""

    amount: int = Field(..., ge=1, description="Bet amount")


class BuyInRequest(BaseModel):
    amount: int = Field(..., ge=1, description="Chips to add")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand", "double", "split", "surrender"]
    hand_index: int | None = Field(default=None, ge=0, description="Defaults to the current hand")


class CardResponse(BaseModel):
    """
    Card representation.

    A concealed hole card carries only ``hole=True`` so the face never
    reaches the client before it is revealed.
    """

    hole: bool = False
    label: str | None = None
    suit: str | None = None
    symbol: str | None = None
    value: int | None = None
    text: str


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    score: int | None
    state: str
    bet: int
    is_blackjack: bool
    is_playable: bool
    is_scoreable: bool
    can_split: bool
    can_double: bool
    can_surrender: bool
    text: str


class GameStateResponse(BaseModel):
    """Current game state."""

    state: str
    holdings: float
    wager: int
    min_bet: int
    max_bet: int
    dealer_hand: HandResponse | None
    player_hands: list[HandResponse]
    current_hand_index: int | None
    outcomes: list[str]
    cards_remaining: int


class QuitResponse(BaseModel):
    returned: float
    holdings: float
