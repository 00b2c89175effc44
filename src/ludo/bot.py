"""
Bot policy for seats without a human.

The bot sees exactly what a human sees (the public Match state) and acts through the same transitions.
"""

import random
from typing import Optional

from src.core.exceptions import GameStateError
from src.core.shared_types import Phase
from src.ludo.engine import MoveOutcome, advance, roll, select_move
from src.ludo.match import Match


def choose_move(match: Match, rng: Optional[random.Random] = None) -> str:
    """
    Pick a pawn to move.
    ----

    Getting pawns out of base comes first. Otherwise any legal pawn will do.
    """
    if not match.legal_moves:
        raise GameStateError("No legal move to choose from.")

    player = match.active_player
    for pawn_id in match.legal_moves:
        pawn = player.pawn(pawn_id)
        if pawn is not None and pawn.is_in_base:
            return pawn_id
    return (rng or random).choice(match.legal_moves)


def take_step(
    match: Match, rng: Optional[random.Random] = None
) -> tuple[Match, Optional[MoveOutcome]]:
    """Perform the single next action of the active bot: roll, move, or hand over a finished turn."""
    if not match.active_player.is_bot:
        raise GameStateError(f"{match.active_player.name} is not a bot.")

    if match.phase == Phase.AWAITING_ROLL:
        return roll(match, match.turn_index, rng=rng), None
    if match.phase == Phase.AWAITING_MOVE:
        return select_move(match, match.turn_index, choose_move(match, rng))
    if match.phase == Phase.TURN_ENDED:
        return advance(match), None
    raise GameStateError("The match is over.")
