"""Pawns and the players that own them"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.core.shared_types import PlayerColor
from src.ludo.board import BASE, HOME, PAWNS_PER_PLAYER, Coordinate, coordinate_of


def pawn_id(color: PlayerColor, slot_index: int) -> str:
    """Pawn ids read as '<color>-<slot>', ex. 'green-2'"""
    return f"{color.value}-{slot_index}"


@dataclass
class Pawn:
    id: str
    color: PlayerColor
    slot_index: int
    location: int = BASE

    @classmethod
    def in_base(cls, color: PlayerColor, slot_index: int) -> Self:
        return cls(pawn_id(color, slot_index), color, slot_index)

    @property
    def is_in_base(self) -> bool:
        return self.location == BASE

    @property
    def is_home(self) -> bool:
        return self.location == HOME

    def coordinate(self) -> Coordinate:
        return coordinate_of(self.color, self.location, self.slot_index)

    def send_to_base(self) -> None:
        """Captured. NOTE the pawn keeps its slot, so it returns to the same base position."""
        self.location = BASE


@dataclass
class Player:
    id: str
    name: str
    color: PlayerColor
    is_bot: bool = False
    avatar_ref: str = ""
    pawns: list[Pawn] = field(default_factory=list)
    rank: Optional[int] = None

    def __post_init__(self) -> None:
        # A fresh player always starts with a full base
        if not self.pawns:
            self.pawns = [Pawn.in_base(self.color, slot) for slot in range(PAWNS_PER_PLAYER)]

    @classmethod
    def bot(cls, color: PlayerColor) -> Self:
        """Fills a vacant seat."""
        return cls(
            id=f"bot-{color.value}",
            name=f"Bot {color.value.capitalize()}",
            color=color,
            is_bot=True,
        )

    @property
    def has_finished(self) -> bool:
        return all(pawn.is_home for pawn in self.pawns)

    def pawn(self, pawn_id: str) -> Optional[Pawn]:
        return next((pawn for pawn in self.pawns if pawn.id == pawn_id), None)

    # --- serialization (see src/core/models.py) ---
    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color.value,
            "is_bot": self.is_bot,
            "avatar_ref": self.avatar_ref,
            "rank": self.rank,
            "pawns": [
                {"id": pawn.id, "slot_index": pawn.slot_index, "location": pawn.location}
                for pawn in self.pawns
            ],
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Self:
        color = PlayerColor(record["color"])
        pawns = [
            Pawn(
                id=pawn["id"],
                color=color,
                slot_index=pawn["slot_index"],
                location=pawn["location"],
            )
            for pawn in record["pawns"]
        ]
        return cls(
            id=record["id"],
            name=record["name"],
            color=color,
            is_bot=record.get("is_bot", False),
            avatar_ref=record.get("avatar_ref", ""),
            pawns=pawns,
            rank=record.get("rank"),
        )
