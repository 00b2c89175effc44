"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Type aliases to make MatchModel easier to read
PlayerRecord = dict[str, Any]
WireEvent = dict[str, Any]


@dataclass
class MatchModel:
    """Transport-safe representation of a ludo match used between API, Service, DB, and Match layers."""

    status: str
    phase: str
    players: list[PlayerRecord]
    turn_index: int
    dice_value: Optional[int]
    legal_moves: list[str]
    finish_rule: str
    history: list[WireEvent] = field(default_factory=list)
