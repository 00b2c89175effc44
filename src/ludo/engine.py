"""
Turn engine: the rules of ludo as transitions of a Match.
----

Every transition takes a Match and returns a new one. The input is never modified, so a rejected
operation (an exception) leaves the caller's match exactly as it was.

```
AWAITING_ROLL --roll--> AWAITING_MOVE --select_move--> TURN_ENDED --advance--> AWAITING_ROLL
                   +--(no legal move)--> TURN_ENDED          +--(3rd player finished)--> MATCH_OVER
```

Each accepted transition appends its transport event (src/ludo/events.py) to the match history.
"""

import random
from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from loguru import logger

from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
    TransportDesyncError,
)
from src.core.shared_types import FinishRule, Phase, Status
from src.ludo.board import (
    Coordinate,
    coordinate_of,
    destination,
    hop_path,
    is_legal_move,
    is_on_ring,
    is_safe_cell,
    relative_to_global,
)
from src.ludo.events import DiceRolled, PawnMoved, TurnPassed, parse_event
from src.ludo.match import SEAT_COUNT, Match
from src.ludo.pawn import Player

DICE_FACES = 6
BONUS_ROLL = 6


@dataclass
class MoveOutcome:
    """Everything that happened during one move. `path` lets the presentation layer replay it hop by hop."""

    pawn_id: str
    player_index: int
    from_location: int
    to_location: int
    hops: list[int]
    path: list[Coordinate]
    captured: list[str] = field(default_factory=list)
    rank_assigned: Optional[int] = None


# --- TRANSITIONS ---
def roll(
    match: Match,
    player_index: int,
    rng: Optional[random.Random] = None,
    value: Optional[int] = None,
) -> Match:
    """
    Roll the dice for the active player.
    ----

    `value` forces the outcome. Only used when applying a roll that was already made elsewhere
    (a relayed event, or a test). Otherwise the dice come from `rng`.

    When none of the pawns can move with the result, the turn ends right away.
    """
    _assert_in_progress(match)
    _assert_phase(match, Phase.AWAITING_ROLL)
    _assert_your_turn(match, player_index)

    player = match.active_player
    if player.rank is not None:
        raise GameStateError(f"{player.name} already finished (rank {player.rank}).")

    if value is None:
        value = (rng or random).randint(1, DICE_FACES)
    elif not 1 <= value <= DICE_FACES:
        raise IllegalMoveError(f"Dice value must be between 1 and {DICE_FACES}, got {value}")

    new = _copy(match)
    new.dice_value = value
    new.legal_moves = legal_pawn_ids(new.active_player, value, new.finish_rule)
    new.phase = Phase.AWAITING_MOVE if new.legal_moves else Phase.TURN_ENDED
    new.history.append(DiceRolled(value=value, player_index=player_index).to_wire())

    logger.debug(
        "{} rolled {}, legal moves: {}", player.name, value, new.legal_moves or "none"
    )
    return new


def select_move(match: Match, player_index: int, pawn_id: str) -> tuple[Match, MoveOutcome]:
    """
    Move one of the active player's pawns by the rolled value.
    ----

    1. move the pawn (a pawn leaving base lands on its entry cell)
    2. capture: opposing pawns on the same unsafe ring cell go back to base
    3. the mover gets the next rank if all four pawns are home
    4. once three players are ranked, the last one gets rank 4 and the match is over
    """
    _assert_in_progress(match)
    _assert_phase(match, Phase.AWAITING_MOVE)
    _assert_your_turn(match, player_index)
    if pawn_id not in match.legal_moves:
        raise IllegalMoveError(
            f"Pawn {pawn_id!r} cannot move. Legal moves: {', '.join(match.legal_moves)}"
        )

    # for the type checker: legal moves only ever contain pawns of the active player
    assert match.dice_value is not None

    new = _copy(match)
    mover = new.active_player
    pawn = mover.pawn(pawn_id)
    assert pawn is not None

    from_location = pawn.location
    hops = hop_path(from_location, new.dice_value)
    pawn.location = destination(from_location, new.dice_value)

    outcome = MoveOutcome(
        pawn_id=pawn_id,
        player_index=player_index,
        from_location=from_location,
        to_location=pawn.location,
        hops=hops,
        path=[coordinate_of(pawn.color, hop, pawn.slot_index) for hop in hops],
    )
    outcome.captured = _capture(new, player_index, pawn.location)
    outcome.rank_assigned = _rank_if_finished(new, mover)

    new.legal_moves = []
    new.history.append(
        PawnMoved(pawn_id=pawn_id, final_location=pawn.location, player_index=player_index).to_wire()
    )
    if _is_match_over(new):
        _finish_match(new)
    else:
        new.phase = Phase.TURN_ENDED

    logger.debug(
        "{} moved {} {} -> {}{}",
        mover.name,
        pawn_id,
        from_location,
        pawn.location,
        f", captured {', '.join(outcome.captured)}" if outcome.captured else "",
    )
    return new, outcome


def advance(match: Match) -> Match:
    """
    Hand the turn to the next player.
    ----

    A six grants the same player another roll, unless that player just finished.
    Otherwise the turn goes to the next seat without a rank.
    """
    _assert_in_progress(match)
    _assert_phase(match, Phase.TURN_ENDED)

    new = _copy(match)
    new.turn_index = next_turn_index(new)
    new.dice_value = None
    new.legal_moves = []
    new.phase = Phase.AWAITING_ROLL
    new.history.append(TurnPassed(next_index=new.turn_index).to_wire())
    return new


def expire_turn(
    match: Match, turn_token: int, rng: Optional[random.Random] = None
) -> tuple[Match, Optional[MoveOutcome]]:
    """
    The active player ran out of time: play the rest of the turn for them.
    ----

    roll (if not done yet) -> first legal move (if any) -> advance (unless the match ended).

    The timer that calls this was armed at `turn_token`. If anything happened since (the player did act
    after all, or the timer fires twice) the match is returned untouched.
    """
    if match.status != Status.IN_PROGRESS or match.turn_token != turn_token:
        return match, None

    logger.warning("Turn of {} expired, playing it automatically", match.active_player.name)
    outcome: Optional[MoveOutcome] = None
    if match.phase == Phase.AWAITING_ROLL:
        match = roll(match, match.turn_index, rng=rng)
    if match.phase == Phase.AWAITING_MOVE:
        match, outcome = select_move(match, match.turn_index, match.legal_moves[0])
    if match.phase == Phase.TURN_ENDED:
        match = advance(match)
    return match, outcome


def apply_event(match: Match, payload: dict[str, Any]) -> Match:
    """
    Apply a transition that was made on another client and relayed to us.
    ----

    The relay does not check anything, so the event goes through the same rules as a local action and
    its claimed result must match the result we compute ourselves. Anything else is a desync.
    """
    event = parse_event(payload)
    try:
        if isinstance(event, DiceRolled):
            return roll(match, event.player_index, value=event.value)

        if isinstance(event, PawnMoved):
            new, outcome = select_move(match, event.player_index, event.pawn_id)
            if outcome.to_location != event.final_location:
                raise TransportDesyncError(
                    f"{event.pawn_id} should end on {outcome.to_location}, not {event.final_location}"
                )
            return new

        new = advance(match)
        if new.turn_index != event.next_index:
            raise TransportDesyncError(
                f"Next turn belongs to seat {new.turn_index}, not {event.next_index}"
            )
        return new
    except (GameStateError, IllegalMoveError, NotYourTurnError) as e:
        logger.warning("Rejected relayed event {}: {}", payload, e)
        raise TransportDesyncError(str(e)) from e


def replay(match: Match, events: Iterable[dict[str, Any]]) -> Match:
    """Apply a sequence of relayed events, in order."""
    for payload in events:
        match = apply_event(match, payload)
    return match


def _copy(match: Match) -> Match:
    """
    Fresh match to apply a transition to.

    NOTE history entries are never modified once written, so the list is copied but the events are shared.
    """
    return replace(
        match,
        players=deepcopy(match.players),
        legal_moves=list(match.legal_moves),
        history=list(match.history),
    )


# --- RULE HELPERS ---
def legal_pawn_ids(player: Player, dice_value: int, rule: FinishRule) -> list[str]:
    return [pawn.id for pawn in player.pawns if is_legal_move(pawn.location, dice_value, rule)]


def next_turn_index(match: Match) -> int:
    """Whose turn it is after the turn of the active player ended."""
    if match.dice_value == BONUS_ROLL and match.active_player.rank is None:
        return match.turn_index

    for step in range(1, SEAT_COUNT + 1):
        candidate = (match.turn_index + step) % SEAT_COUNT
        if match.players[candidate].rank is None:
            return candidate
    # everyone is ranked: nothing to hand over
    return match.turn_index


def _capture(match: Match, mover_index: int, location: int) -> list[str]:
    """
    Send opposing pawns on the mover's cell back to base. Returns the ids of the captured pawns.

    NOTE nothing can be captured on a safe cell, on a home stretch, or by a pawn of the same color.
    """
    if not is_on_ring(location):
        return []
    mover = match.players[mover_index]
    cell = relative_to_global(mover.color, location)
    if is_safe_cell(cell):
        return []

    captured: list[str] = []
    for index, opponent in enumerate(match.players):
        if index == mover_index or opponent.rank is not None:
            continue
        for pawn in opponent.pawns:
            if is_on_ring(pawn.location) and relative_to_global(opponent.color, pawn.location) == cell:
                pawn.send_to_base()
                captured.append(pawn.id)
    return captured


def _rank_if_finished(match: Match, player: Player) -> Optional[int]:
    """First come, first served: the n-th player to bring all pawns home gets rank n."""
    if player.rank is not None or not player.has_finished:
        return None
    player.rank = match.ranked_count() + 1
    logger.info("{} finished with rank {}", player.name, player.rank)
    return player.rank


def _is_match_over(match: Match) -> bool:
    return match.ranked_count() == SEAT_COUNT - 1


def _finish_match(match: Match) -> None:
    """The last player standing does not need to finish: rank 4."""
    for player in match.players:
        if player.rank is None:
            player.rank = SEAT_COUNT
    match.phase = Phase.MATCH_OVER
    match.status = Status.FINISHED
    logger.info(
        "Match over: {}", ", ".join(f"{p.rank}. {p.name}" for p in match.standings())
    )


# --- VALIDATION HELPERS ---
def _assert_in_progress(match: Match) -> None:
    if match.status == Status.FINISHED:
        raise GameStateError("The match is over.")
    if match.status != Status.IN_PROGRESS:
        raise GameStateError(f"Match is not in progress. status: {match.status}")


def _assert_phase(match: Match, expected: Phase) -> None:
    if match.phase != expected:
        raise GameStateError(f"Expected phase {expected!r}, match is in phase {match.phase!r}")


def _assert_your_turn(match: Match, player_index: int) -> None:
    """Only the active seat may act."""
    if player_index != match.turn_index:
        raise NotYourTurnError(
            f"It is not your turn. Waiting for {match.active_player.name} (seat {match.turn_index})."
        )
