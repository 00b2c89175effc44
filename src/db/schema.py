"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBMatch(Base):
    __tablename__ = "matches"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    status: Mapped[str]
    phase: Mapped[str]
    players: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    turn_index: Mapped[int] = mapped_column(default=0)
    dice_value: Mapped[Optional[int]]
    legal_moves: Mapped[list[str]] = mapped_column(JSON, default=list)
    finish_rule: Mapped[str]
    history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
