"""
Where matches are kept between requests (SQLAlchemy implementation in src/db/sql_repository.py).

A record always holds a complete MatchModel. There are no partial updates: the service loads a match, runs a
transition on it and writes the whole result back under the match lock. The history inside the record is the
only thing that grows.
"""

from typing import Protocol
from uuid import UUID

from src.core.models import MatchModel


class MatchRepository(Protocol):
    def get_match(self, match_id: UUID) -> MatchModel | None:
        """The stored match, or None for an unknown id."""
        ...

    def create_match(self, match: MatchModel) -> tuple[MatchModel, UUID]:
        """Store a new match under a fresh id. Returns the match as stored, and the id."""
        ...

    def update_match(self, match_id: UUID, match: MatchModel) -> MatchModel | None:
        """
        Replace the stored match with `match` as a whole (every field, players and history included).
        Returns the match as stored, None if there is no record to replace.
        """
        ...

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove the record. Returns what was stored, None for an unknown id."""
        ...
