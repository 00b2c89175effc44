"""
Board topology: where a pawn is, given its abstract location.

Everything in here is pure (no state, no side effects). The engine only needs the ring / safety helpers;
the coordinates are for whoever draws the board.

Locations, relative to the pawn's own color:
* -1: in base
* 0..50: on the shared ring (0 is the color's entry cell)
* 51..56: on the color's private home stretch
* 99: arrived in the center
"""

from src.core.shared_types import FinishRule, PlayerColor

# (x, y) on a 15x15 grid
Coordinate = tuple[int, int]

RING_SIZE = 52
BASE = -1
LAST_RING_LOCATION = 50
HOME_STRETCH_START = 51
HOME_STRETCH_END = 56
# Reaching this (or passing it, depending on the FinishRule) means the pawn is home
FINISH_STEP = 57
HOME = 99
PAWNS_PER_PLAYER = 4

# Entry cell of every color on the shared ring
START_OFFSETS: dict[PlayerColor, int] = {
    PlayerColor.RED: 0,
    PlayerColor.GREEN: 13,
    PlayerColor.YELLOW: 26,
    PlayerColor.BLUE: 39,
}

# Ring-global indices: the four entry cells + one star cell per arm.
# Safety belongs to the cell, so it holds for every color standing on it.
SAFE_CELLS: frozenset[int] = frozenset({0, 8, 13, 21, 26, 34, 39, 47})

# Ring traced clockwise, starting at red's entry cell
RING_COORDINATES: tuple[Coordinate, ...] = (
    # red arm, moving right
    (1, 6), (2, 6), (3, 6), (4, 6), (5, 6),
    # up green's arm
    (6, 5), (6, 4), (6, 3), (6, 2), (6, 1), (6, 0),
    (7, 0), (8, 0),
    # down green's arm
    (8, 1), (8, 2), (8, 3), (8, 4), (8, 5),
    # right along yellow's arm
    (9, 6), (10, 6), (11, 6), (12, 6), (13, 6), (14, 6),
    (14, 7), (14, 8),
    # back along yellow's arm
    (13, 8), (12, 8), (11, 8), (10, 8), (9, 8),
    # down blue's arm
    (8, 9), (8, 10), (8, 11), (8, 12), (8, 13), (8, 14),
    (7, 14), (6, 14),
    # up blue's arm
    (6, 13), (6, 12), (6, 11), (6, 10), (6, 9),
    # left along red's arm
    (5, 8), (4, 8), (3, 8), (2, 8), (1, 8), (0, 8),
    (0, 7), (0, 6),
)

HOME_STRETCH_COORDINATES: dict[PlayerColor, tuple[Coordinate, ...]] = {
    PlayerColor.RED: ((1, 7), (2, 7), (3, 7), (4, 7), (5, 7), (6, 7)),
    PlayerColor.GREEN: ((7, 1), (7, 2), (7, 3), (7, 4), (7, 5), (7, 6)),
    PlayerColor.YELLOW: ((13, 7), (12, 7), (11, 7), (10, 7), (9, 7), (8, 7)),
    PlayerColor.BLUE: ((7, 13), (7, 12), (7, 11), (7, 10), (7, 9), (7, 8)),
}

# One slot per pawn in the base quadrant of its color
BASE_COORDINATES: dict[PlayerColor, tuple[Coordinate, ...]] = {
    PlayerColor.RED: ((1, 1), (1, 4), (4, 1), (4, 4)),
    PlayerColor.GREEN: ((10, 1), (10, 4), (13, 1), (13, 4)),
    PlayerColor.YELLOW: ((10, 10), (10, 13), (13, 10), (13, 13)),
    PlayerColor.BLUE: ((1, 10), (1, 13), (4, 10), (4, 13)),
}

# Arrived pawns are drawn at the edge of the center triangle facing their own arm
CENTER_COORDINATES: dict[PlayerColor, Coordinate] = {
    PlayerColor.RED: (6, 7),
    PlayerColor.GREEN: (7, 6),
    PlayerColor.YELLOW: (8, 7),
    PlayerColor.BLUE: (7, 8),
}


def relative_to_global(color: PlayerColor, relative_index: int) -> int:
    """Index on the shared ring of the cell `relative_index` steps after the color's entry cell."""
    return (START_OFFSETS[color] + relative_index) % RING_SIZE


def is_safe_cell(global_ring_index: int) -> bool:
    return global_ring_index in SAFE_CELLS


def is_on_ring(location: int) -> bool:
    """In base, on the home stretch or arrived pawns are not on the shared ring (and can never be captured)."""
    return 0 <= location <= LAST_RING_LOCATION


def coordinate_of(color: PlayerColor, location: int, slot_index: int) -> Coordinate:
    """
    Where to draw a pawn.
    ----

    The slot index only matters while the pawn sits in base: every pawn has its own fixed base slot.
    """
    if location == BASE:
        return BASE_COORDINATES[color][slot_index % PAWNS_PER_PLAYER]
    if location == HOME:
        return CENTER_COORDINATES[color]
    if HOME_STRETCH_START <= location <= HOME_STRETCH_END:
        return HOME_STRETCH_COORDINATES[color][location - HOME_STRETCH_START]
    if is_on_ring(location):
        return RING_COORDINATES[relative_to_global(color, location)]
    raise ValueError(f"Not a valid pawn location: {location}")


def is_legal_move(
    location: int, dice_value: int, rule: FinishRule = FinishRule.OVERSHOOT
) -> bool:
    """
    Can a pawn at `location` move with this roll?
    ----

    * in base: only a six releases it.
    * arrived: never.
    * otherwise: depends on the finish rule. With OVERSHOOT every roll is fine (passing the final cell
      simply brings the pawn home), with EXACT the roll may not pass the final cell.
    """
    if location == BASE:
        return dice_value == 6
    if location == HOME:
        return False
    if rule == FinishRule.EXACT:
        return location + dice_value <= FINISH_STEP
    return True


def destination(location: int, dice_value: int) -> int:
    """Location after a (legal) move. Any sum at or beyond the final step resolves to HOME."""
    if location == BASE:
        return 0
    new_location = location + dice_value
    if new_location >= FINISH_STEP:
        return HOME
    return new_location


def hop_path(location: int, dice_value: int) -> list[int]:
    """
    Every cell a pawn visits during a (legal) move, in order. Used to replay the move one hop at a time.

    Leaving base is a single hop onto the entry cell. Reaching the final step ends the path in the center.
    """
    if location == BASE:
        return [0]
    hops: list[int] = []
    for step in range(1, dice_value + 1):
        hop = location + step
        if hop >= FINISH_STEP:
            hops.append(HOME)
            break
        hops.append(hop)
    return hops
