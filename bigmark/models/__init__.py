from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .strategy import Strategy, StrategyAward, StrategyRule  # noqa: F401
from .award import Award  # noqa: F401

__all__ = [
    "Base",
    "Award",
    "Strategy",
    "StrategyAward",
    "StrategyRule",
]
