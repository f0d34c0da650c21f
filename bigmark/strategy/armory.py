"""Assembly of baseline and weight-tier probability tables."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Optional, Sequence

from .entities import AwardCandidate, ProbabilityTable, WeightRule
from .errors import EmptyConfigurationError, RateUnderflowError
from .keys import rate_range_key, slot_key_builder
from .rates import assemble_table, rescale_rates
from .source import AwardSource

if TYPE_CHECKING:
    from ..cache.base import CacheStore

logger = logging.getLogger(__name__)


class StrategyArmory:
    """Builds lookup tables from award probabilities and stores them in the cache.

    Assembly runs once per configuration change, typically when a strategy
    is approved. Draws never recompute probabilities; they only read what
    this class wrote.

    Concurrent assemblies of the same strategy are not serialized here. The
    last writer of the rate-range key wins and slot values of interleaved
    runs can mix, so callers must funnel assembly through a single path.
    """

    def __init__(
        self,
        source: AwardSource,
        cache: "CacheStore",
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Create an armory bound to a configuration source and a cache store.

        Parameters
        ----------
        source : AwardSource
            Provides award candidates and the optional weight rule.
        cache : CacheStore
            Receives the assembled tables.
        rng : Optional[random.Random], default: None
            Shuffle source. ``secrets.SystemRandom`` is used when omitted.
        """

        self._source = source
        self._cache = cache
        self._rng = rng

    def assemble(self, strategy_id: int) -> bool:
        """Assemble the baseline table and every weight-tier table of a strategy.

        Returns
        -------
        bool
            ``True`` when the baseline table was written and, if a weight
            rule exists, its weighted assembly completed. Weight groups that
            are malformed, match no configured award, or hold a rate that
            rounds to zero once rescaled are skipped and do not fail the
            assembly. ``False`` when the strategy has no awards; no
            cache key is written in that case.

        Raises
        ------
        CacheUnavailableError
            If the cache store fails while reading or writing.
        """
        candidates = self._source.list_awards(strategy_id)
        if not candidates:
            logger.warning(f"No awards configured for strategy {strategy_id}")
            return False

        logger.info(f"Assembling strategy {strategy_id} with {len(candidates)} awards")
        self.assemble_baseline(strategy_id, candidates)

        rule = self._source.get_weight_rule(strategy_id)
        if rule is None:
            logger.info(f"Strategy {strategy_id} assembled without weight rule")
            return True

        tables = self.assemble_weighted(strategy_id, candidates, rule)
        logger.info(
            f"Strategy {strategy_id} assembled with weight tiers {sorted(tables)}"
        )
        return True

    def assemble_baseline(
        self,
        strategy_id: int,
        candidates: Optional[Sequence[AwardCandidate]] = None,
    ) -> ProbabilityTable:
        """Assemble and store the unweighted table of ``strategy_id``.

        Parameters
        ----------
        strategy_id : int
            Strategy to assemble.
        candidates : Optional[Sequence[AwardCandidate]], default: None
            Awards to use. Fetched from the source when omitted.

        Raises
        ------
        EmptyConfigurationError
            If the strategy has no awards. Nothing is written.
        """
        if candidates is None:
            candidates = self._source.list_awards(strategy_id)
        if not candidates:
            raise EmptyConfigurationError(strategy_id)

        table = assemble_table(candidates, self._rng, strategy_id=strategy_id)
        self._store(strategy_id, table)
        logger.info(
            f"Baseline table of strategy {strategy_id} stored: "
            f"rate range {table.rate_range}, {table.slot_count} slots"
        )
        return table

    def assemble_weighted(
        self,
        strategy_id: int,
        candidates: Sequence[AwardCandidate],
        rule: Optional[WeightRule] = None,
    ) -> dict[str, ProbabilityTable]:
        """Assemble one table per weight group of the strategy's weight rule.

        Each group keeps only its eligible awards, rescales their rates to a
        total of 100 and is stored under the weight-tier keys.

        Parameters
        ----------
        strategy_id : int
            Strategy to assemble.
        candidates : Sequence[AwardCandidate]
            Full award list of the strategy.
        rule : Optional[WeightRule], default: None
            Weight rule to apply. Fetched from the source when omitted; when
            the strategy has none, nothing is assembled.

        Returns
        -------
        dict[str, ProbabilityTable]
            Tables actually written, keyed by weight key.
        """
        if rule is None:
            rule = self._source.get_weight_rule(strategy_id)
        if rule is None:
            logger.info(f"Strategy {strategy_id} has no weight rule")
            return {}

        logger.info(f"Weight rule of strategy {strategy_id}: {rule.rule_value}")
        tables: dict[str, ProbabilityTable] = {}
        for group in rule.weight_groups():
            eligible = set(group.award_ids)
            subset = [c for c in candidates if c.award_id in eligible]
            if not subset:
                logger.warning(
                    f"Weight group {group.weight_key} of strategy {strategy_id} "
                    f"matches no configured award, skipping"
                )
                continue

            try:
                rescaled = rescale_rates(subset)
            except RateUnderflowError as exc:
                logger.warning(
                    f"Weight group {group.weight_key} of strategy {strategy_id} "
                    f"cannot be rescaled, skipping: {exc}"
                )
                continue

            table = assemble_table(rescaled, self._rng, strategy_id=strategy_id)
            self._store(strategy_id, table, group.weight_key)
            logger.info(
                f"Weight table {group.weight_key} of strategy {strategy_id} stored: "
                f"rate range {table.rate_range}, {table.slot_count} slots"
            )
            tables[group.weight_key] = table
        return tables

    def _store(
        self,
        strategy_id: int,
        table: ProbabilityTable,
        weight_key: Optional[str] = None,
    ) -> None:
        # Slots go first and the rate range last: a reader sees either the old
        # range or the new one with every new slot already present. A reader
        # holding the old range can still hit a new slot value, and a smaller
        # new table leaves old slots beyond its range unreachable but in place.
        self._cache.set_map(slot_key_builder(strategy_id, weight_key), table.slots)
        self._cache.set_int(rate_range_key(strategy_id, weight_key), table.slot_count)


__all__ = ["StrategyArmory"]
