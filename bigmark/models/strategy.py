"""Database models describing lottery strategies and their awards."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Index,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base, ID_TYPE
from ..strategy.entities import RULE_WEIGHT, AwardCandidate, WeightRule


class Strategy(Base):
    """A lottery configuration, optionally bound to an activity."""

    __tablename__ = "strategies"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    strategy_id: Mapped[int] = mapped_column(Integer, nullable=False)
    """Opaque business identifier used in cache keys."""

    activity_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    """Activity that triggers assembly of this strategy, if any."""

    strategy_desc: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Free form description shown to admins."""

    rule_models: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Comma separated rule models enabled for the strategy."""

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

    awards: Mapped[list["StrategyAward"]] = relationship(
        back_populates="strategy",
        cascade="all, delete-orphan",
        order_by="StrategyAward.sort",
    )
    """Awards configured for the strategy."""

    rules: Mapped[list["StrategyRule"]] = relationship(
        back_populates="strategy",
        cascade="all, delete-orphan",
    )
    """Rules configured for the strategy."""

    __table_args__ = (
        UniqueConstraint("strategy_id", name="strategies_strategy_id_key"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Strategy(strategy_id={sid}, activity_id={aid})>".format(
            sid=self.strategy_id, aid=self.activity_id
        )

    @classmethod
    def get_by_strategy_id(
        cls, session: Session, strategy_id: int
    ) -> Optional["Strategy"]:
        """Return the strategy matching ``strategy_id`` if it exists."""

        return session.scalar(select(cls).where(cls.strategy_id == strategy_id))

    @classmethod
    def get_by_activity_id(
        cls, session: Session, activity_id: int
    ) -> Optional["Strategy"]:
        """Return the strategy bound to ``activity_id`` if it exists."""

        return session.scalar(
            select(cls).where(cls.activity_id == activity_id).order_by(cls.id.desc())
        )


class StrategyAward(Base):
    """Probability configuration of one award within a strategy."""

    __tablename__ = "strategy_awards"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    strategy_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("strategies.strategy_id", ondelete="CASCADE"),
        nullable=False,
    )
    """Business id of the owning :class:`Strategy`."""

    award_id: Mapped[int] = mapped_column(Integer, nullable=False)
    """Business id of the award."""

    award_title: Mapped[str] = mapped_column(String(128), nullable=False)
    award_subtitle: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    award_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Total stock of the award."""

    award_count_surplus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Remaining stock of the award."""

    award_rate: Mapped[Decimal] = mapped_column(Numeric(8, 4), nullable=False)
    """Probability in percent with four decimal places."""

    rule_models: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Rule models attached to this award, copied from the rule table."""

    sort: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Display order."""

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

    strategy: Mapped["Strategy"] = relationship(back_populates="awards")

    __table_args__ = (
        UniqueConstraint(
            "strategy_id", "award_id", name="strategy_awards_strategy_id_award_id_key"
        ),
    )

    def to_candidate(self) -> AwardCandidate:
        """Convert the row into the value object consumed by the assembler."""

        return AwardCandidate(
            award_id=self.award_id,
            award_rate=self.award_rate,
            weight_tags=self.rule_models or "",
            award_title=self.award_title,
            award_subtitle=self.award_subtitle,
            award_count=self.award_count,
            award_count_surplus=self.award_count_surplus,
            sort=self.sort,
        )


class StrategyRule(Base):
    """A rule attached to a strategy, or to one award of a strategy."""

    __tablename__ = "strategy_rules"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    strategy_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("strategies.strategy_id", ondelete="CASCADE"),
        nullable=False,
    )

    award_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Award the rule applies to; ``None`` for strategy level rules."""

    rule_type: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """``1`` for strategy rules, ``2`` for award rules."""

    rule_model: Mapped[str] = mapped_column(String(32), nullable=False)
    """Rule model name, e.g. ``"rule_weight"``."""

    rule_value: Mapped[str] = mapped_column(String(1024), nullable=False)
    """Raw rule payload; for ``rule_weight`` a list of weight groups."""

    rule_desc: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

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

    strategy: Mapped["Strategy"] = relationship(back_populates="rules")

    __table_args__ = (
        Index("ix_strategy_rules_strategy_id_rule_model", "strategy_id", "rule_model"),
    )

    def to_weight_rule(self) -> WeightRule:
        """Convert the row into a :class:`WeightRule` value object."""

        return WeightRule(
            strategy_id=self.strategy_id,
            rule_value=self.rule_value,
            rule_model=self.rule_model or RULE_WEIGHT,
            award_id=self.award_id,
            rule_type=self.rule_type,
            rule_desc=self.rule_desc,
        )

    @classmethod
    def get_for_strategy(
        cls, session: Session, strategy_id: int, rule_model: str
    ) -> Optional["StrategyRule"]:
        """Return the most recent rule of ``rule_model`` for the strategy."""

        return session.scalar(
            select(cls)
            .where(
                cls.strategy_id == strategy_id,
                cls.rule_model == rule_model,
            )
            .order_by(cls.id.desc())
        )
