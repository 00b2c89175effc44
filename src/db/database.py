"""Generate database session"""

from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import settings
from src.db.schema import Base
from src.db.sql_repository import SQLMatchRepository

engine = create_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
SessionLocal = sessionmaker(bind=engine)

# Ensure all tables are created
Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def match_repository(sessions: sessionmaker = SessionLocal) -> Iterator[SQLMatchRepository]:
    """
    Repository on a session of its own, closed on exit.
    ----
    Sessions are not thread-safe: the service opens one of these per operation, ex.

        LudoService(repositories=match_repository)
    """
    db = sessions()
    try:
        yield SQLMatchRepository(db)
    finally:
        db.close()
