"""Exceptions raised by strategy assembly and dispatch."""

from __future__ import annotations

from typing import Optional


class StrategyError(Exception):
    """Base class for strategy assembly and dispatch failures."""


class EmptyConfigurationError(StrategyError, ValueError):
    """No award candidates are configured for a strategy."""

    def __init__(self, strategy_id: Optional[int] = None) -> None:
        message = "No awards configured"
        if strategy_id is not None:
            message += f" for strategy {strategy_id}"
        super().__init__(message)
        self.strategy_id = strategy_id


class MalformedWeightRuleError(StrategyError, ValueError):
    """A weight rule segment cannot be read as ``<weightKey>:<id,id,...>``."""

    def __init__(self, segment: str, reason: str) -> None:
        super().__init__(f"Malformed weight rule segment {segment!r}: {reason}")
        self.segment = segment
        self.reason = reason


class RateUnderflowError(StrategyError, ValueError):
    """A positive rate rounds to zero when rescaled to four decimal places."""

    def __init__(self, award_id: int, award_rate) -> None:
        super().__init__(
            f"Rate {award_rate} of award {award_id} rounds to zero when rescaled"
        )
        self.award_id = award_id
        self.award_rate = award_rate


class CacheUnavailableError(StrategyError, RuntimeError):
    """The cache store could not complete a read or write."""


__all__ = [
    "CacheUnavailableError",
    "EmptyConfigurationError",
    "MalformedWeightRuleError",
    "RateUnderflowError",
    "StrategyError",
]
