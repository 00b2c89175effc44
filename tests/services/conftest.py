"""Fixtures shared by the service layer tests."""

from contextlib import nullcontext
from typing import Generator
from uuid import UUID, uuid4

import pytest

from src.core.models import MatchModel
from src.services.ludo_service import RepositoryFactory


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """Mock the MatchRepository using a dictionary of match models."""

    def __init__(self) -> None:
        self._matches: dict[UUID, MatchModel] = {}

    def create_match(self, match: MatchModel) -> tuple[MatchModel, UUID]:
        """Store new match and return the stored data + newly created match ID."""
        match_id = uuid4()
        self._matches[match_id] = match
        return match, match_id

    def get_match(self, match_id: UUID) -> MatchModel | None:
        """Get match by ID, if record exists."""
        return self._matches.get(match_id)

    def update_match(self, match_id: UUID, match: MatchModel) -> MatchModel | None:
        """Overwrite the state of an existing record."""
        if match_id not in self._matches:
            return None
        self._matches[match_id] = match
        return match

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove a match's record."""
        return self._matches.pop(match_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._matches.clear()


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def repositories(mock_repository: MockRepository) -> RepositoryFactory:
    """What the service opens per operation. All of them hand out the same mock repository."""
    return lambda: nullcontext(mock_repository)
