"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    """Lifecycle of a match, as seen from the lobby."""

    WAITING_FOR_PLAYERS = "waiting for players"
    IN_PROGRESS = "in progress"
    FINISHED = "finished"


class Phase(StrEnum):
    """
    Turn engine states.

    NOTE rolling / resolving a move are instantaneous in the engine. Only the states in which
    the match waits for someone are represented here.
    """

    AWAITING_ROLL = "awaiting roll"
    AWAITING_MOVE = "awaiting move"
    TURN_ENDED = "turn ended"
    MATCH_OVER = "match over"


class PlayerColor(StrEnum):
    """Seat order is the order of this enum: red always plays first."""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"


class FinishRule(StrEnum):
    """How a pawn is allowed to enter the center.

    * OVERSHOOT: any roll that reaches or passes the final cell brings the pawn home.
    * EXACT: the roll must not pass the final cell (classic ludo).
    """

    OVERSHOOT = "overshoot"
    EXACT = "exact"
