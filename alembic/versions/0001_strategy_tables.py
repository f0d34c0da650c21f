"""create strategy, award and rule tables

Revision ID: 0001_strategy_tables
Revises:
Create Date: 2026-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_strategy_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "awards",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("award_id", sa.Integer(), nullable=False),
        sa.Column("award_key", sa.String(length=64), nullable=False),
        sa.Column("award_config", sa.String(length=255), nullable=True),
        sa.Column("award_desc", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="awards_pkey"),
        sa.UniqueConstraint("award_id", name="awards_award_id_key"),
    )
    op.create_table(
        "strategies",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("strategy_id", sa.Integer(), nullable=False),
        sa.Column("activity_id", sa.Integer(), nullable=True),
        sa.Column("strategy_desc", sa.Text(), nullable=True),
        sa.Column("rule_models", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="strategies_pkey"),
        sa.UniqueConstraint("strategy_id", name="strategies_strategy_id_key"),
    )
    op.create_index(
        "ix_strategies_activity_id", "strategies", ["activity_id"], unique=False
    )
    op.create_table(
        "strategy_awards",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("strategy_id", sa.Integer(), nullable=False),
        sa.Column("award_id", sa.Integer(), nullable=False),
        sa.Column("award_title", sa.String(length=128), nullable=False),
        sa.Column("award_subtitle", sa.String(length=128), nullable=True),
        sa.Column("award_count", sa.Integer(), nullable=False),
        sa.Column("award_count_surplus", sa.Integer(), nullable=False),
        sa.Column("award_rate", sa.Numeric(precision=8, scale=4), nullable=False),
        sa.Column("rule_models", sa.String(length=255), nullable=True),
        sa.Column("sort", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["strategy_id"],
            ["strategies.strategy_id"],
            name="strategy_awards_strategy_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="strategy_awards_pkey"),
        sa.UniqueConstraint(
            "strategy_id", "award_id", name="strategy_awards_strategy_id_award_id_key"
        ),
    )
    op.create_table(
        "strategy_rules",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("strategy_id", sa.Integer(), nullable=False),
        sa.Column("award_id", sa.Integer(), nullable=True),
        sa.Column("rule_type", sa.Integer(), nullable=False),
        sa.Column("rule_model", sa.String(length=32), nullable=False),
        sa.Column("rule_value", sa.String(length=1024), nullable=False),
        sa.Column("rule_desc", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["strategy_id"],
            ["strategies.strategy_id"],
            name="strategy_rules_strategy_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="strategy_rules_pkey"),
    )
    op.create_index(
        "ix_strategy_rules_strategy_id_rule_model",
        "strategy_rules",
        ["strategy_id", "rule_model"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_strategy_rules_strategy_id_rule_model", table_name="strategy_rules")
    op.drop_table("strategy_rules")
    op.drop_table("strategy_awards")
    op.drop_index("ix_strategies_activity_id", table_name="strategies")
    op.drop_table("strategies")
    op.drop_table("awards")
