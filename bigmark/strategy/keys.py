"""Cache key layout for assembled tables and cached configuration.

The formats are shared with existing deployments and must not change::

    strategy#<strategyId>#raterange
    strategy#<strategyId>#assemble#<slot>
    strategy#<strategyId>#raterange#weight#<weightKey>
    strategy#<strategyId>#assemble#weight#<weightKey>#<slot>
    strategy#<strategyId>#awardlist
    strategy#<strategyId>#rule#<ruleModel>
"""

from __future__ import annotations

from typing import Callable, Optional

AWARD_LIST_TTL = 3600
"""Expiry of the cached award list, in seconds."""


def rate_range_key(strategy_id: int, weight_key: Optional[str] = None) -> str:
    """Key holding the slot count of a baseline or weight-tier table."""
    if weight_key is None:
        return f"strategy#{strategy_id}#raterange"
    return f"strategy#{strategy_id}#raterange#weight#{weight_key}"


def assemble_key(
    strategy_id: int, slot: int, weight_key: Optional[str] = None
) -> str:
    """Key holding the award id stored in ``slot``."""
    if weight_key is None:
        return f"strategy#{strategy_id}#assemble#{slot}"
    return f"strategy#{strategy_id}#assemble#weight#{weight_key}#{slot}"


def slot_key_builder(
    strategy_id: int, weight_key: Optional[str] = None
) -> Callable[[int], str]:
    """Return ``slot -> key`` for one table, as consumed by ``CacheStore.set_map``."""
    return lambda slot: assemble_key(strategy_id, slot, weight_key)


def award_list_key(strategy_id: int) -> str:
    return f"strategy#{strategy_id}#awardlist"


def rule_key(strategy_id: int, rule_model: str) -> str:
    return f"strategy#{strategy_id}#rule#{rule_model}"


__all__ = [
    "AWARD_LIST_TTL",
    "assemble_key",
    "award_list_key",
    "rate_range_key",
    "rule_key",
    "slot_key_builder",
]
