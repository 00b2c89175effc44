"""
The transitions of a match, in the shape the transport relays them.

Wire format (camelCase keys, as the browser clients send them):
* {"event": "dice_rolled", "value": 6, "playerIndex": 0}
* {"event": "move_pawn", "pawnId": "red-0", "finalLocation": 0, "playerIndex": 0}
* {"event": "next_turn", "nextIndex": 0}

Every accepted transition of the engine appends exactly one of these to the match history.
"""

from dataclasses import dataclass
from typing import Any, Self

from src.core.exceptions import TransportDesyncError


@dataclass(frozen=True)
class DiceRolled:
    value: int
    player_index: int

    def to_wire(self) -> dict[str, Any]:
        return {"event": "dice_rolled", "value": self.value, "playerIndex": self.player_index}

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> Self:
        return cls(
            value=_integer(payload, "value"),
            player_index=_integer(payload, "playerIndex"),
        )


@dataclass(frozen=True)
class PawnMoved:
    pawn_id: str
    final_location: int
    player_index: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "event": "move_pawn",
            "pawnId": self.pawn_id,
            "finalLocation": self.final_location,
            "playerIndex": self.player_index,
        }

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> Self:
        pawn_id = payload.get("pawnId")
        if not isinstance(pawn_id, str):
            raise TransportDesyncError(f"Malformed move_pawn event: {payload!r}")
        return cls(
            pawn_id=pawn_id,
            final_location=_integer(payload, "finalLocation"),
            player_index=_integer(payload, "playerIndex"),
        )


@dataclass(frozen=True)
class TurnPassed:
    next_index: int

    def to_wire(self) -> dict[str, Any]:
        return {"event": "next_turn", "nextIndex": self.next_index}

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> Self:
        return cls(next_index=_integer(payload, "nextIndex"))


MatchEvent = DiceRolled | PawnMoved | TurnPassed

EVENT_TYPES: dict[str, type[DiceRolled] | type[PawnMoved] | type[TurnPassed]] = {
    "dice_rolled": DiceRolled,
    "move_pawn": PawnMoved,
    "next_turn": TurnPassed,
}


def parse_event(payload: dict[str, Any]) -> MatchEvent:
    """Decode a relayed payload. Anything we do not recognize is untrusted input."""
    if not isinstance(payload, dict):
        raise TransportDesyncError(f"Event must be a JSON object, got {payload!r}")
    event_type = EVENT_TYPES.get(payload.get("event"))  # type: ignore[arg-type]
    if event_type is None:
        raise TransportDesyncError(f"Unknown event: {payload.get('event')!r}")
    return event_type.from_wire(payload)


def _integer(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    # bool is a subclass of int, but `true` is never a valid index or dice value
    if not isinstance(value, int) or isinstance(value, bool):
        raise TransportDesyncError(f"Field {key!r} must be an integer in {payload!r}")
    return value
