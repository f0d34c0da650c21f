"""Award catalogue model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base, ID_TYPE


class Award(Base):
    """A prize that strategies can hand out.

    Strategies reference awards through :class:`StrategyAward` rows; the
    award itself only carries how the prize is delivered.
    """

    __tablename__ = "awards"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    award_id: Mapped[int] = mapped_column(Integer, nullable=False)
    """Business identifier used by strategies and draw results."""

    award_key: Mapped[str] = mapped_column(String(64), nullable=False)
    """Key of the delivery handler, e.g. ``"user_credit_random"``."""

    award_config: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Handler-specific configuration, e.g. ``"1,100"`` for a credit range."""

    award_desc: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Human readable description."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (UniqueConstraint("award_id", name="awards_award_id_key"),)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Award(award_id={self.award_id}, award_key={self.award_key})>"

    @classmethod
    def get_by_award_id(cls, session: Session, award_id: int) -> Optional["Award"]:
        """Return the award with business id ``award_id`` if it exists."""

        return session.scalar(select(cls).where(cls.award_id == award_id))
