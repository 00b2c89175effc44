"""Requests and Response models"""

import re
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import FinishRule, Phase, PlayerColor, Status

PAWN_ID_PATTERN = re.compile(rf"^({'|'.join(PlayerColor)})-[0-3]$")


class PlayerRequest(BaseModel):
    """Who is asking. The service maps the player id onto a seat."""

    game_id: UUID
    player_id: str

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("player_id cannot be empty.")
        return value


# --- REQUEST MODELS ---
class CreateMatchRequest(BaseModel):
    player_id: str
    player_name: str
    avatar_ref: str = ""
    vs_computer: bool = False
    finish_rule: Optional[FinishRule] = None

    @field_validator(*["player_id", "player_name"])
    @classmethod
    def validate_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("Player id and name cannot be empty.")
        return value


class JoinMatchRequest(PlayerRequest):
    player_name: str
    avatar_ref: str = ""


class StartMatchRequest(PlayerRequest):
    fill_with_bots: bool = False


class RollRequest(PlayerRequest):
    pass


class SelectMoveRequest(PlayerRequest):
    pawn_id: str

    @field_validator("pawn_id")
    @classmethod
    def validate_pawn_id(cls, value: str) -> str:
        if not PAWN_ID_PATTERN.match(value):
            raise InvalidRequestError(
                f"Cannot interpret pawn_id: {value!r}. Expected '<color>-<slot>', ex. 'red-0'."
            )
        return value


class ExpireTurnRequest(BaseModel):
    """Sent by the turn timer. `turn_token` is the token of the match when the timer was armed."""

    game_id: UUID
    turn_token: int


class BotTurnRequest(BaseModel):
    game_id: UUID


class RemoteEventRequest(PlayerRequest):
    """A raw event as relayed by the socket transport (see src/ludo/events.py), with the player that sent it."""

    payload: dict[str, Any]


class GetMatchRequest(BaseModel):
    game_id: UUID


class DeleteMatchRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class PawnResponse(BaseModel):
    id: str
    color: PlayerColor
    slot_index: int
    location: int
    coordinate: tuple[int, int]


class PlayerResponse(BaseModel):
    id: str
    name: str
    color: PlayerColor
    avatar_ref: str
    is_bot: bool
    rank: Optional[int]
    pawns: list[PawnResponse]


class MoveResponse(BaseModel):
    pawn_id: str
    player_index: int
    from_location: int
    to_location: int
    hops: list[int]
    path: list[tuple[int, int]]
    captured: list[str]
    rank_assigned: Optional[int]


class MatchResponse(BaseModel):
    game_id: UUID
    status: Status
    phase: Phase
    players: list[PlayerResponse]
    turn_index: int
    dice_value: Optional[int]
    legal_moves: list[str]
    is_over: bool
    finish_rule: FinishRule
    turn_token: int
    # Events appended by the request that produced this response: what the transport should broadcast
    events: list[dict[str, Any]]
    last_move: Optional[MoveResponse] = None
