"""Random draws against assembled probability tables."""

from __future__ import annotations

import logging
import random
import secrets
from typing import TYPE_CHECKING, Optional

from .keys import assemble_key, rate_range_key

if TYPE_CHECKING:
    from ..cache.base import CacheStore

logger = logging.getLogger(__name__)


class StrategyDispatch:
    """Draws award ids from tables written by :class:`StrategyArmory`.

    The draw path only reads the cache and keeps no mutable state, so one
    instance can serve any number of threads.
    """

    def __init__(
        self,
        cache: "CacheStore",
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._cache = cache
        self._rng = rng or secrets.SystemRandom()

    def draw(self, strategy_id: int, weight_key: Optional[str] = None) -> Optional[int]:
        """Draw one award id for ``strategy_id``.

        Parameters
        ----------
        strategy_id : int
            Strategy to draw from.
        weight_key : Optional[str], default: None
            Weight tier to draw from. When the tier was never assembled the
            draw falls back to the baseline table.

        Returns
        -------
        Optional[int]
            The drawn award id, or ``None`` when the strategy has not been
            assembled or the drawn slot is missing.

        Raises
        ------
        CacheUnavailableError
            If the cache store fails.
        """
        if weight_key is not None:
            rate_range = self._cache.get_int(rate_range_key(strategy_id, weight_key))
            if rate_range:
                return self._draw_slot(strategy_id, rate_range, weight_key)
            logger.info(
                f"Weight tier {weight_key} of strategy {strategy_id} not assembled, "
                f"drawing from baseline"
            )

        rate_range = self._cache.get_int(rate_range_key(strategy_id))
        if not rate_range:
            logger.warning(f"Strategy {strategy_id} is not assembled")
            return None
        return self._draw_slot(strategy_id, rate_range)

    def _draw_slot(
        self, strategy_id: int, rate_range: int, weight_key: Optional[str] = None
    ) -> Optional[int]:
        slot = self._rng.randrange(rate_range) + 1
        award_id = self._cache.get_map_entry(assemble_key(strategy_id, slot, weight_key))
        if award_id is None:
            logger.warning(
                f"Slot {slot} of strategy {strategy_id} "
                f"(weight {weight_key}) is missing"
            )
        else:
            logger.debug(
                f"Strategy {strategy_id} weight {weight_key} slot {slot} -> award {award_id}"
            )
        return award_id


__all__ = ["StrategyDispatch"]
