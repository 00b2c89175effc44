"""
Timer that keeps matches moving: plays the bot seats and expires the turns of idle players.

Runs next to the transport, one task per match:

    asyncio.create_task(TurnScheduler(service).run(game_id))

The service is synchronous (match locks, DB sessions), so every call to it runs in a worker thread and the event loop
keeps serving the other matches meanwhile.
"""

import asyncio
from typing import Awaitable, Callable
from uuid import UUID

from loguru import logger

from src.api.models import (
    BotTurnRequest,
    ExpireTurnRequest,
    GetMatchRequest,
    MatchResponse,
)
from src.core.config import Settings, settings
from src.core.exceptions import GameStateError
from src.core.shared_types import Status
from src.services.ludo_service import LudoService

POLL_SECONDS = 0.25

Sleep = Callable[[float], Awaitable[None]]


def presentation_delay(response: MatchResponse, pacing: Settings = settings) -> float:
    """
    How long clients need to replay the events of a response (dice settling, pawn hopping, the pause
    after a roll that allowed no move). The next action waits for that.
    """
    delay = 0.0
    previous = None
    for event in response.events:
        kind = event["event"]
        if kind == "dice_rolled":
            delay += pacing.DICE_SETTLE_SECONDS
        elif kind == "next_turn" and previous == "dice_rolled":
            delay += pacing.NO_MOVE_DELAY_SECONDS
        previous = kind
    if response.last_move is not None:
        delay += len(response.last_move.hops) * pacing.HOP_SECONDS
    return delay


class TurnScheduler:
    """Drives a single match until it is over."""

    def __init__(
        self,
        service: LudoService,
        pacing: Settings = settings,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.service = service
        self.pacing = pacing
        self.sleep = sleep

    async def run(self, game_id: UUID) -> MatchResponse:
        """Returns the final state of the match."""
        state = await asyncio.to_thread(
            self.service.get_match_state, GetMatchRequest(game_id=game_id)
        )
        if state.status != Status.IN_PROGRESS:
            raise GameStateError(f"Cannot schedule match {game_id}. status: {state.status}")

        while not state.is_over:
            if state.players[state.turn_index].is_bot:
                await self.sleep(self.pacing.BOT_THINK_SECONDS)
                state = await asyncio.to_thread(
                    self.service.play_bot_turn, BotTurnRequest(game_id=game_id)
                )
            else:
                state = await self._wait_for_human(game_id, state.turn_token)
            await self.sleep(presentation_delay(state, self.pacing))

        logger.info("Scheduler for match {} done", game_id)
        return state

    async def _wait_for_human(self, game_id: UUID, turn_token: int) -> MatchResponse:
        """Poll until the player acts, or take over once the turn timed out."""
        waited = 0.0
        while waited < self.pacing.TURN_TIMEOUT_SECONDS:
            interval = min(POLL_SECONDS, self.pacing.TURN_TIMEOUT_SECONDS - waited)
            await self.sleep(interval)
            waited += interval
            state = await asyncio.to_thread(
                self.service.get_match_state, GetMatchRequest(game_id=game_id)
            )
            if state.turn_token != turn_token:
                return state
        # the token makes this a no-op if the player acted in the meantime
        return await asyncio.to_thread(
            self.service.expire_turn,
            ExpireTurnRequest(game_id=game_id, turn_token=turn_token),
        )
