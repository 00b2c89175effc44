"""Implementation of (Match)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import MatchModel
from src.db.schema import DBMatch


class SQLMatchRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_match(self, match_id: UUID) -> MatchModel | None:
        """Get match by ID, if record exists."""
        match_db = self._fetch_match(match_id)
        if match_db:
            return self._to_model(match_db)
        return None

    def create_match(self, match: MatchModel) -> tuple[MatchModel, UUID]:
        """Store new match and return the stored data + newly created match ID."""

        new_id = uuid4()
        match_db = DBMatch(
            id=new_id,
            status=match.status,
            phase=match.phase,
            players=match.players,
            turn_index=match.turn_index,
            dice_value=match.dice_value,
            legal_moves=match.legal_moves,
            finish_rule=match.finish_rule,
            history=match.history,
        )
        self.db.add(match_db)
        self.db.commit()
        self.db.refresh(match_db)
        return self._to_model(match_db), new_id

    def update_match(self, match_id: UUID, match: MatchModel) -> MatchModel | None:
        """Overwrite the state of an existing record."""
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        # NOTE assign new containers: SQLAlchemy does not track in-place changes of JSON columns
        match_db.status = match.status
        match_db.phase = match.phase
        match_db.players = list(match.players)
        match_db.turn_index = match.turn_index
        match_db.dice_value = match.dice_value
        match_db.legal_moves = list(match.legal_moves)
        match_db.finish_rule = match.finish_rule
        match_db.history = list(match.history)
        self.db.commit()
        self.db.refresh(match_db)
        return self._to_model(match_db)

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove a match's record."""
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        match_model = self._to_model(match_db)
        self.db.delete(match_db)
        self.db.commit()
        return match_model

    def _fetch_match(self, match_id: UUID) -> DBMatch | None:
        query = select(DBMatch).where(DBMatch.id == match_id)
        return self.db.scalar(query)

    def _to_model(self, match_db: DBMatch) -> MatchModel:
        """Convert SQLAlchemy model to data transfer model."""
        return MatchModel(
            status=match_db.status,
            phase=match_db.phase,
            players=match_db.players,
            turn_index=match_db.turn_index,
            dice_value=match_db.dice_value,
            legal_moves=match_db.legal_moves,
            finish_rule=match_db.finish_rule,
            history=match_db.history,
        )
