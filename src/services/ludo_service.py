"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import random
import threading
from contextlib import AbstractContextManager
from dataclasses import asdict
from typing import Callable, Optional
from uuid import UUID

from loguru import logger

from src.api.models import (
    BotTurnRequest,
    CreateMatchRequest,
    DeleteMatchRequest,
    ExpireTurnRequest,
    GetMatchRequest,
    JoinMatchRequest,
    MatchResponse,
    MoveResponse,
    PawnResponse,
    PlayerResponse,
    RemoteEventRequest,
    RollRequest,
    SelectMoveRequest,
    StartMatchRequest,
)
from src.core.config import settings
from src.core.exceptions import (
    GameStateError,
    NotYourTurnError,
    RepositoryError,
    TransportDesyncError,
)
from src.core.models import MatchModel
from src.core.shared_types import FinishRule, Phase
from src.db.repository import MatchRepository
from src.ludo import bot, engine
from src.ludo.engine import MoveOutcome
from src.ludo.events import DiceRolled, PawnMoved, parse_event
from src.ludo.match import Match

# Opens a repository for one unit of work and closes it afterwards (ex. src/db/database.py:match_repository)
RepositoryFactory = Callable[[], AbstractContextManager[MatchRepository]]

# A unit of work on a match: returns the new state and (if a pawn moved) what happened during the move
MatchStep = Callable[[Match], tuple[Match, Optional[MoveOutcome]]]


class LudoService:
    """
    Orchestration of layers for a ludo match.
    ----

    The service is the authority: clients only send intents (roll, move this pawn) and get the resulting state back.

    All operations on the same match are serialized by a lock per match id, so one service instance is meant to be
    shared by every thread of the process. Each operation opens its own repository (and with it its own DB session),
    nothing is shared between threads but the locks.
    """

    def __init__(
        self,
        repositories: RepositoryFactory,
        rng: Optional[random.Random] = None,
        finish_rule: Optional[FinishRule] = None,
    ) -> None:
        self.repositories = repositories
        self.rng = rng or random.Random()
        self.finish_rule = finish_rule or settings.finish_rule
        self._locks: dict[UUID, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # -- API routes logic ---
    def create_new_match(self, request: CreateMatchRequest) -> MatchResponse:
        """Host opens a new match. Against the computer, the match starts right away with three bots."""
        match = Match.new_match(
            host_id=request.player_id,
            host_name=request.player_name,
            avatar_ref=request.avatar_ref,
            finish_rule=request.finish_rule or self.finish_rule,
        )
        if request.vs_computer:
            match.start(requested_by=request.player_id, fill_with_bots=True)

        with self.repositories() as repo:
            stored_match, game_id = repo.create_match(match.to_model())
        logger.info("Match {} created by {}", game_id, request.player_name)
        return self._create_match_response(game_id, Match.from_model(stored_match))

    def join_match(self, request: JoinMatchRequest) -> MatchResponse:
        """Another player takes the next free seat."""
        with self._lock(request.game_id), self.repositories() as repo:
            match = self._load(repo, request.game_id)
            player = match.register_player(
                request.player_id, request.player_name, request.avatar_ref
            )
            self._store(repo, request.game_id, match)
        logger.info("{} joined match {} as {}", player.name, request.game_id, player.color)
        return self._create_match_response(request.game_id, match)

    def start_match(self, request: StartMatchRequest) -> MatchResponse:
        """Host starts the match (optionally filling vacant seats with bots)."""
        with self._lock(request.game_id), self.repositories() as repo:
            match = self._load(repo, request.game_id)
            match.start(requested_by=request.player_id, fill_with_bots=request.fill_with_bots)
            self._store(repo, request.game_id, match)
        return self._create_match_response(request.game_id, match)

    def get_match_state(self, request: GetMatchRequest) -> MatchResponse:
        """
        Retrieve current match state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        with self.repositories() as repo:
            match = self._load(repo, request.game_id)
        return self._create_match_response(request.game_id, match)

    def roll(self, request: RollRequest) -> MatchResponse:
        """Roll the dice for the requesting player."""

        def _roll(match: Match) -> tuple[Match, Optional[MoveOutcome]]:
            seat = self._human_seat(match, request.player_id)
            return engine.roll(match, seat, rng=self.rng), None

        return self._play(request.game_id, _roll)

    def select_move(self, request: SelectMoveRequest) -> MatchResponse:
        """Move the requested pawn with the dice value the player rolled."""

        def _select(match: Match) -> tuple[Match, Optional[MoveOutcome]]:
            seat = self._human_seat(match, request.player_id)
            return engine.select_move(match, seat, request.pawn_id)

        return self._play(request.game_id, _select)

    def expire_turn(self, request: ExpireTurnRequest) -> MatchResponse:
        """The turn timer ran out. Has no effect if the match moved on since the timer was armed."""
        return self._play(
            request.game_id,
            lambda match: engine.expire_turn(match, request.turn_token, rng=self.rng),
        )

    def play_bot_turn(self, request: BotTurnRequest) -> MatchResponse:
        """Let the bot on the active seat take its next action."""
        return self._play(request.game_id, lambda match: bot.take_step(match, rng=self.rng))

    def apply_remote_event(self, request: RemoteEventRequest) -> MatchResponse:
        """
        Apply an event a player made on their client and the transport relayed.
        ----

        The sender is identified by `player_id` and may only relay its own seat's moves and turn handovers.
        Dice are always rolled here: relayed `dice_rolled` events are refused, so no client picks its own numbers.
        The event is then validated against the stored state (raises TransportDesyncError otherwise).
        NOTE no automatic turn handover here: relayed matches send their own next_turn events.
        """
        with self._lock(request.game_id), self.repositories() as repo:
            match = self._load(repo, request.game_id)
            seat = self._human_seat(match, request.player_id)

            event = parse_event(request.payload)
            if isinstance(event, DiceRolled):
                raise TransportDesyncError("Dice are rolled by the server, send a roll request instead.")
            if isinstance(event, PawnMoved) and event.player_index != seat:
                raise TransportDesyncError(
                    f"Player {request.player_id!r} plays seat {seat}, not seat {event.player_index}."
                )
            if match.turn_index != seat:
                raise NotYourTurnError(f"It is not your turn. Seat {match.turn_index} is playing.")

            token_before = match.turn_token
            match = engine.apply_event(match, request.payload)
            self._store(repo, request.game_id, match)
        return self._create_match_response(
            request.game_id, match, events=match.history[token_before:]
        )

    def delete_match(self, request: DeleteMatchRequest) -> None:
        """Handle a request to delete a Match record."""
        with self._lock(request.game_id), self.repositories() as repo:
            repo.delete_match(request.game_id)
        with self._locks_guard:
            self._locks.pop(request.game_id, None)

    # -- Internal helpers --
    def _play(self, game_id: UUID, step: MatchStep) -> MatchResponse:
        """
        Run one step of a turn under the match lock, then persist.
        ----

        A finished turn is handed over immediately, so callers only ever see a match waiting for a roll,
        waiting for a move, or over.
        """
        with self._lock(game_id), self.repositories() as repo:
            match = self._load(repo, game_id)
            token_before = match.turn_token
            match, outcome = step(match)
            if match.phase == Phase.TURN_ENDED:
                match = engine.advance(match)
            if match.turn_token != token_before:
                self._store(repo, game_id, match)
        return self._create_match_response(
            game_id, match, events=match.history[token_before:], outcome=outcome
        )

    def _human_seat(self, match: Match, player_id: str) -> int:
        """Seat of the requesting player. Bots are driven by the scheduler only."""
        seat = match.seat_of(player_id)
        if seat is None:
            raise NotYourTurnError(f"Player {player_id!r} is not part of this match.")
        if match.players[seat].is_bot:
            raise GameStateError(f"Seat {seat} is played by a bot.")
        return seat

    def _lock(self, game_id: UUID) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(game_id, threading.Lock())

    def _load(self, repo: MatchRepository, game_id: UUID) -> Match:
        return Match.from_model(self._fetch_match(repo, game_id))

    def _store(self, repo: MatchRepository, game_id: UUID, match: Match) -> None:
        if repo.update_match(game_id, match.to_model()) is None:
            raise RepositoryError(f"Match with {game_id=} could not be updated.")

    def _fetch_match(self, repo: MatchRepository, game_id: UUID) -> MatchModel:
        """Attempt to find the match in the repository and raise error if it fails."""
        match_model = repo.get_match(game_id)
        if match_model is None:
            raise RepositoryError(f"Match with {game_id=} not found.")
        return match_model

    def _create_match_response(
        self,
        game_id: UUID,
        match: Match,
        events: Optional[list[dict]] = None,
        outcome: Optional[MoveOutcome] = None,
    ) -> MatchResponse:
        """Convert a Match to a MatchResponse (for match with given ID.)"""
        return MatchResponse(
            game_id=game_id,
            status=match.status,
            phase=match.phase,
            players=[
                PlayerResponse(
                    id=player.id,
                    name=player.name,
                    color=player.color,
                    avatar_ref=player.avatar_ref,
                    is_bot=player.is_bot,
                    rank=player.rank,
                    pawns=[
                        PawnResponse(
                            id=pawn.id,
                            color=pawn.color,
                            slot_index=pawn.slot_index,
                            location=pawn.location,
                            coordinate=pawn.coordinate(),
                        )
                        for pawn in player.pawns
                    ],
                )
                for player in match.players
            ],
            turn_index=match.turn_index,
            dice_value=match.dice_value,
            legal_moves=match.legal_moves,
            is_over=match.is_over,
            finish_rule=match.finish_rule,
            turn_token=match.turn_token,
            events=events or [],
            last_move=MoveResponse(**asdict(outcome)) if outcome else None,
        )
