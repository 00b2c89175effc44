"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

import os
from functools import partial
from itertools import cycle
from typing import Callable, Generator, Sequence

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

# Keep src/db/database.py from creating a database file in the working directory
os.environ.setdefault("LUDO_DATABASE_URL", "sqlite:///:memory:")

from src.db.database import match_repository  # noqa: E402
from src.db.schema import Base  # noqa: E402
from src.ludo.match import Match  # noqa: E402

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


class FixedDice:
    """Stands in for random.Random: rolls the given values in order (and starts over when they run out)."""

    def __init__(self, *values: int) -> None:
        self._values = cycle(values)

    def randint(self, a: int, b: int) -> int:
        return next(self._values)

    def choice(self, options: Sequence[str]) -> str:
        return options[0]


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def sql_repositories() -> Generator[Callable, None, None]:
    """Repository factory on the test database: every call opens (and closes) a session of its own."""
    Base.metadata.create_all(bind=engine)
    try:
        yield partial(match_repository, TestingSessionLocal)
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fixed_dice() -> Callable[..., FixedDice]:
    """Call with the values the dice should show, ex. fixed_dice(6, 3)"""
    return FixedDice


@pytest.fixture
def started_match() -> Match:
    """Human host on red, three bots. Red to roll, every pawn in base."""
    match = Match.new_match(host_id="p1", host_name="You")
    match.start(requested_by="p1", fill_with_bots=True)
    return match


@pytest.fixture
def place() -> Callable[[Match, str, int], None]:
    """Put a pawn on a given location (no rules applied), ex. place(match, 'green-0', 44)"""

    def _place(match: Match, pawn_id: str, location: int) -> None:
        found = match.find_pawn(pawn_id)
        assert found is not None, f"no pawn {pawn_id}"
        _, pawn = found
        pawn.location = location

    return _place
