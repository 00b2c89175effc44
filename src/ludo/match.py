"""
The Match is the entrypoint into the domain layer for the service layer.
It holds the complete state of one game session: the four seats, their pawns, whose turn it is and the last roll.

Lobby handling (seating players, starting) lives here. The turn rules live in src/ludo/engine.py,
which takes a Match and returns a new one.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from loguru import logger

from src.core.exceptions import GameStateError
from src.core.models import MatchModel
from src.core.shared_types import FinishRule, Phase, PlayerColor, Status
from src.ludo.pawn import Pawn, Player

SEAT_COUNT = 4
SEAT_ORDER: tuple[PlayerColor, ...] = tuple(PlayerColor)


@dataclass
class Match:
    players: list[Player]
    status: Status = Status.WAITING_FOR_PLAYERS
    phase: Phase = Phase.AWAITING_ROLL
    turn_index: int = 0
    dice_value: Optional[int] = None
    legal_moves: list[str] = field(default_factory=list)
    finish_rule: FinishRule = FinishRule.OVERSHOOT
    history: list[dict[str, Any]] = field(default_factory=list)

    # --- CREATION ---
    @classmethod
    def new_match(
        cls,
        host_id: str,
        host_name: str,
        avatar_ref: str = "",
        finish_rule: FinishRule = FinishRule.OVERSHOOT,
    ) -> Self:
        """The host always takes the first seat (red)."""
        host = Player(id=host_id, name=host_name, color=SEAT_ORDER[0], avatar_ref=avatar_ref)
        return cls(players=[host], finish_rule=finish_rule)

    @classmethod
    def from_model(cls, model: MatchModel) -> Self:
        """Define how to construct a Match from the information the Service layer actually has"""
        try:
            status = Status(model.status)
            phase = Phase(model.phase)
            finish_rule = FinishRule(model.finish_rule)
        except ValueError as e:
            raise GameStateError(f"Cannot restore match: {e}") from e

        return cls(
            players=[Player.from_record(record) for record in model.players],
            status=status,
            phase=phase,
            turn_index=model.turn_index,
            dice_value=model.dice_value,
            legal_moves=list(model.legal_moves),
            finish_rule=finish_rule,
            history=list(model.history),
        )

    def to_model(self) -> MatchModel:
        """Encode back into a format the Service layer uses"""
        return MatchModel(
            status=self.status.value,
            phase=self.phase.value,
            players=[player.to_record() for player in self.players],
            turn_index=self.turn_index,
            dice_value=self.dice_value,
            legal_moves=list(self.legal_moves),
            finish_rule=self.finish_rule.value,
            history=list(self.history),
        )

    # --- LOBBY ---
    def register_player(self, player_id: str, name: str, avatar_ref: str = "") -> Player:
        """
        Seat a player on the next free color.
        ----

        Joining twice (ex. after a reconnect) just returns the seat the player already has.
        """
        seated = self.seat_of(player_id)
        if seated is not None:
            return self.players[seated]

        if self.status != Status.WAITING_FOR_PLAYERS:
            raise GameStateError(
                f"Cannot join this match. Match is not accepting new players. status: {self.status}"
            )
        if len(self.players) >= SEAT_COUNT:
            raise GameStateError("Cannot join this match. All seats are taken.")

        player = Player(
            id=player_id, name=name, color=SEAT_ORDER[len(self.players)], avatar_ref=avatar_ref
        )
        self.players.append(player)
        return player

    def start(self, requested_by: str, fill_with_bots: bool = False) -> None:
        """
        Only the host starts the match. Without bots, all four seats must be taken by people.
        """
        if self.status != Status.WAITING_FOR_PLAYERS:
            raise GameStateError(f"Match already started. status: {self.status}")
        if requested_by != self.host.id:
            raise GameStateError("Only the host can start the match.")

        if fill_with_bots:
            for color in SEAT_ORDER[len(self.players) :]:
                self.players.append(Player.bot(color))
        elif len(self.players) != SEAT_COUNT:
            raise GameStateError(
                f"Exactly {SEAT_COUNT} players required to start, {len(self.players)} seated."
            )

        self.status = Status.IN_PROGRESS
        self.phase = Phase.AWAITING_ROLL
        self.turn_index = 0
        self.dice_value = None
        self.legal_moves = []
        logger.info(
            "Match started: {}", ", ".join(f"{p.name} ({p.color})" for p in self.players)
        )

    # --- QUERIES ---
    @property
    def host(self) -> Player:
        return self.players[0]

    @property
    def active_player(self) -> Player:
        return self.players[self.turn_index]

    @property
    def is_over(self) -> bool:
        return self.phase == Phase.MATCH_OVER

    @property
    def turn_token(self) -> int:
        """Changes with every accepted transition. A timer armed at one token must not act on another."""
        return len(self.history)

    def seat_of(self, player_id: str) -> Optional[int]:
        return next(
            (index for index, player in enumerate(self.players) if player.id == player_id),
            None,
        )

    def ranked_count(self) -> int:
        return sum(1 for player in self.players if player.rank is not None)

    def pawns(self) -> list[Pawn]:
        """All pawns on the board, in seat order."""
        return [pawn for player in self.players for pawn in player.pawns]

    def find_pawn(self, pawn_id: str) -> Optional[tuple[int, Pawn]]:
        """Seat index + pawn, if a pawn with this id exists."""
        for index, player in enumerate(self.players):
            pawn = player.pawn(pawn_id)
            if pawn is not None:
                return index, pawn
        return None

    def standings(self) -> list[Player]:
        """Players ordered by rank. Unranked players at the end, in seat order."""
        return sorted(
            self.players,
            key=lambda player: player.rank if player.rank is not None else SEAT_COUNT + 1,
        )
