from __future__ import annotations

import random
import unittest
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from bigmark.cache import InMemoryCache
from bigmark.strategy import (
    AwardCandidate,
    CacheUnavailableError,
    StaticAwardSource,
    StrategyArmory,
    StrategyDispatch,
    WeightRule,
)
from bigmark.strategy.keys import assemble_key, rate_range_key

STRATEGY_ID = 100001
AWARDS = [
    AwardCandidate(101, Decimal("80")),
    AwardCandidate(102, Decimal("10")),
    AwardCandidate(103, Decimal("5")),
    AwardCandidate(104, Decimal("2")),
    AwardCandidate(105, Decimal("1.5")),
    AwardCandidate(106, Decimal("0.8")),
    AwardCandidate(107, Decimal("0.4")),
    AwardCandidate(108, Decimal("0.2")),
    AwardCandidate(109, Decimal("0.1")),
]
RULE = "4000:102,103 6000:102,103,104,105,106,107,108,109"
TRIALS = 1000


class DownCache(InMemoryCache):
    def get_int(self, key: str):
        raise CacheUnavailableError("cache is down")


class DispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = InMemoryCache()
        source = StaticAwardSource(
            {STRATEGY_ID: AWARDS}, {STRATEGY_ID: WeightRule(STRATEGY_ID, RULE)}
        )
        self.assertTrue(StrategyArmory(source, self.cache).assemble(STRATEGY_ID))
        self.dispatch = StrategyDispatch(self.cache, rng=random.Random(2024))

    def _draws(self, weight_key=None) -> Counter:
        return Counter(self.dispatch.draw(STRATEGY_ID, weight_key) for _ in range(TRIALS))

    def test_unassembled_strategy_draws_nothing(self) -> None:
        with self.assertLogs("bigmark.strategy.dispatch", level="WARNING"):
            self.assertIsNone(self.dispatch.draw(999999))

    def test_unassembled_strategy_with_weight_draws_nothing(self) -> None:
        with self.assertLogs("bigmark.strategy.dispatch", level="WARNING"):
            self.assertIsNone(self.dispatch.draw(999999, "4000"))

    def test_zero_rate_range_treated_as_unassembled(self) -> None:
        self.cache.set_int(rate_range_key(555), 0)
        with self.assertLogs("bigmark.strategy.dispatch", level="WARNING"):
            self.assertIsNone(self.dispatch.draw(555))

    def test_missing_slot_draws_nothing(self) -> None:
        self.cache.set_int(rate_range_key(556), 5)
        with self.assertLogs("bigmark.strategy.dispatch", level="WARNING"):
            self.assertIsNone(self.dispatch.draw(556))

    def test_baseline_draws_follow_configured_rates(self) -> None:
        counts = self._draws()
        self.assertLessEqual(set(counts), {a.award_id for a in AWARDS})
        self.assertGreater(counts[101] / TRIALS, 0.7)
        self.assertLess(counts[101] / TRIALS, 0.9)

    def test_weight_tier_4000_limited_to_its_awards(self) -> None:
        counts = self._draws("4000")
        self.assertLessEqual(set(counts), {102, 103})
        # 10% and 5% rescale to two thirds and one third.
        self.assertGreater(counts[102], counts[103])

    def test_weight_tier_6000_limited_to_its_awards(self) -> None:
        counts = self._draws("6000")
        self.assertLessEqual(set(counts), {102, 103, 104, 105, 106, 107, 108, 109})
        self.assertNotIn(101, counts)
        self.assertEqual(self.cache.get_int(rate_range_key(STRATEGY_ID, "6000")), 200)

    def test_unknown_weight_key_falls_back_to_baseline(self) -> None:
        with self.assertLogs("bigmark.strategy.dispatch", level="INFO") as logs:
            counts = self._draws("123456")
        self.assertTrue(any("drawing from baseline" in line for line in logs.output))
        self.assertLessEqual(set(counts), {a.award_id for a in AWARDS})
        self.assertIsNone(counts.get(None))
        self.assertGreater(counts[101] / TRIALS, 0.7)
        self.assertLess(counts[101] / TRIALS, 0.9)

    def test_drawn_slot_is_within_rate_range(self) -> None:
        cache = InMemoryCache()
        cache.set_int(rate_range_key(7), 3)
        for slot, award_id in {1: 11, 2: 12, 3: 13}.items():
            cache.set_int(assemble_key(7, slot), award_id)
        dispatch = StrategyDispatch(cache, rng=random.Random(0))
        draws = {dispatch.draw(7) for _ in range(300)}
        self.assertEqual(draws, {11, 12, 13})

    def test_cache_failure_propagates(self) -> None:
        with self.assertRaises(CacheUnavailableError):
            StrategyDispatch(DownCache()).draw(STRATEGY_ID)

    def test_concurrent_draws_return_valid_awards(self) -> None:
        dispatch = StrategyDispatch(self.cache)
        valid = {a.award_id for a in AWARDS}

        def worker(weight_key):
            return [dispatch.draw(STRATEGY_ID, weight_key) for _ in range(250)]

        keys = [None, "4000", "6000", "unknown"] * 4
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, keys))

        self.assertEqual(len(results), 16)
        for weight_key, draws in zip(keys, results):
            self.assertEqual(len(draws), 250)
            self.assertLessEqual(set(draws), valid)
            if weight_key == "4000":
                self.assertLessEqual(set(draws), {102, 103})


if __name__ == "__main__":
    unittest.main()
