from __future__ import annotations

import random
import unittest
from collections import Counter
from decimal import Decimal

from bigmark.strategy import AwardCandidate, EmptyConfigurationError, RateUnderflowError
from bigmark.strategy.rates import (
    assemble_table,
    build_search_table,
    calculate_rate_range,
    index_table,
    min_award_rate,
    rescale_rates,
    shuffle_table,
    slots_for,
    total_award_rate,
)


def _candidates(*pairs) -> list[AwardCandidate]:
    return [AwardCandidate(award_id, Decimal(rate)) for award_id, rate in pairs]


REFERENCE = _candidates((101, "1"), (102, "4"), (103, "15"), (104, "80"))


class RateHelperTests(unittest.TestCase):
    def test_min_and_total(self) -> None:
        self.assertEqual(min_award_rate(REFERENCE), Decimal("1"))
        self.assertEqual(total_award_rate(REFERENCE), Decimal("100"))

    def test_reference_rate_range_is_one_hundred(self) -> None:
        self.assertEqual(calculate_rate_range(Decimal("1"), Decimal("100")), 100)
        self.assertEqual(assemble_table(REFERENCE, random.Random(1)).rate_range, 100)

    def test_rate_range_rounds_up(self) -> None:
        self.assertEqual(calculate_rate_range(Decimal("0.3"), Decimal("1")), 4)
        self.assertEqual(calculate_rate_range(Decimal("21.0526"), Decimal("100")), 5)

    def test_rate_range_rejects_non_positive_unit(self) -> None:
        with self.assertRaises(ValueError):
            calculate_rate_range(Decimal("0"), Decimal("1"))

    def test_slots_round_up(self) -> None:
        self.assertEqual(slots_for(Decimal("1"), 7, Decimal("6.5")), 2)
        self.assertEqual(slots_for(Decimal("80"), 100, Decimal("100")), 80)

    def test_build_search_table_repeats_award_ids(self) -> None:
        table = build_search_table(REFERENCE, 100, Decimal("100"))
        self.assertEqual(len(table), 100)
        self.assertEqual(
            Counter(table), {101: 1, 102: 4, 103: 15, 104: 80}
        )

    def test_index_table_is_one_based(self) -> None:
        self.assertEqual(index_table([7, 8, 9]), {1: 7, 2: 8, 3: 9})

    def test_shuffle_keeps_contents(self) -> None:
        table = [1] * 5 + [2] * 95
        shuffle_table(table)
        self.assertEqual(Counter(table), {1: 5, 2: 95})

    def test_shuffle_uses_given_source(self) -> None:
        first = list(range(50))
        second = list(range(50))
        shuffle_table(first, random.Random(42))
        shuffle_table(second, random.Random(42))
        self.assertEqual(first, second)
        self.assertNotEqual(first, list(range(50)))


class RescaleRatesTests(unittest.TestCase):
    def test_subset_rescaled_to_one_hundred(self) -> None:
        subset = _candidates((102, "4"), (103, "15"))
        rescaled = rescale_rates(subset)
        self.assertEqual(
            [c.award_rate for c in rescaled], [Decimal("21.0526"), Decimal("78.9474")]
        )
        self.assertEqual(total_award_rate(rescaled), Decimal("100.0000"))

    def test_rounding_is_half_up_to_four_places(self) -> None:
        subset = _candidates((1, "12.34565"), (2, "87.65435"))
        rescaled = rescale_rates(subset)
        self.assertEqual(rescaled[0].award_rate, Decimal("12.3457"))
        self.assertEqual(rescaled[1].award_rate, Decimal("87.6544"))

    def test_input_is_not_mutated(self) -> None:
        subset = _candidates((102, "4"), (103, "15"))
        rescale_rates(subset)
        self.assertEqual(subset[0].award_rate, Decimal("4"))

    def test_other_fields_survive(self) -> None:
        subset = [AwardCandidate(5, Decimal("2"), "rule_lock", award_title="mug")]
        rescaled = rescale_rates(subset)[0]
        self.assertEqual(rescaled.award_rate, Decimal("100.0000"))
        self.assertEqual(rescaled.weight_tags, "rule_lock")
        self.assertEqual(rescaled.award_title, "mug")

    def test_rate_rounding_to_zero_raises(self) -> None:
        subset = _candidates((101, "0.0001"), (102, "300"))
        with self.assertRaises(RateUnderflowError) as ctx:
            rescale_rates(subset)
        self.assertEqual(ctx.exception.award_id, 101)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_smallest_rate_that_survives_rounding(self) -> None:
        # 0.00005% of the subset rounds half-up to the last representable step.
        subset = _candidates((101, "1"), (102, "1999999"))
        self.assertEqual(rescale_rates(subset)[0].award_rate, Decimal("0.0001"))


class AssembleTableTests(unittest.TestCase):
    EXAMPLES = [
        REFERENCE,
        _candidates((1, "1"), (2, "2"), (3, "3.5")),
        _candidates((1, "0.6"), (2, "0.4"), (3, "99")),
        _candidates((1, "33.3333"), (2, "33.3333"), (3, "33.3334")),
        _candidates((9, "5")),
    ]

    def test_empty_list_raises(self) -> None:
        with self.assertRaises(EmptyConfigurationError):
            assemble_table([], strategy_id=1)

    def test_never_under_allocates(self) -> None:
        for candidates in self.EXAMPLES:
            table = assemble_table(candidates, random.Random(3))
            self.assertGreaterEqual(table.slot_count, table.rate_range)
            self.assertEqual(sorted(table.slots), list(range(1, table.slot_count + 1)))
            counts = table.award_counts()
            for candidate in candidates:
                self.assertGreaterEqual(counts[candidate.award_id], 1)

    def test_slot_share_within_one_rounding_unit(self) -> None:
        for candidates in (REFERENCE, self.EXAMPLES[1]):
            table = assemble_table(candidates, random.Random(5))
            total = total_award_rate(candidates)
            counts = table.award_counts()
            for candidate in candidates:
                share = counts[candidate.award_id] / table.slot_count
                expected = float(candidate.award_rate / total)
                self.assertLessEqual(abs(share - expected), 1 / table.rate_range)

    def test_reference_counts_are_exact(self) -> None:
        table = assemble_table(REFERENCE, random.Random(9))
        self.assertEqual(table.slot_count, 100)
        self.assertEqual(table.award_counts(), {101: 1, 102: 4, 103: 15, 104: 80})

    def test_uneven_rates_overshoot_rate_range(self) -> None:
        table = assemble_table(self.EXAMPLES[1], random.Random(1))
        self.assertEqual(table.rate_range, 7)
        self.assertEqual(table.slot_count, 9)
        self.assertEqual(table.award_counts(), {1: 2, 2: 3, 3: 4})


if __name__ == "__main__":
    unittest.main()
