"""Probability math used to turn award rates into a lookup table.

The table gives each award a number of slots proportional to its rate,
using the smallest rate as the unit so every award owns at least one slot.
Drawing a uniform slot then yields each award with (approximately) its
configured probability in O(1).
"""

from __future__ import annotations

import logging
import random
import secrets
from dataclasses import replace
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Sequence

from .entities import AwardCandidate, ProbabilityTable
from .errors import EmptyConfigurationError, RateUnderflowError

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
RATE_QUANTUM = Decimal("0.0001")
"""Rescaled rates keep four decimal places."""

_PRECISION = 50


def min_award_rate(candidates: Sequence[AwardCandidate]) -> Decimal:
    """Return the smallest rate of ``candidates``."""
    return min(candidate.award_rate for candidate in candidates)


def total_award_rate(candidates: Sequence[AwardCandidate]) -> Decimal:
    """Return the sum of the rates of ``candidates``."""
    return sum((candidate.award_rate for candidate in candidates), Decimal(0))


def _ceil_div(numerator: Decimal, denominator: Decimal) -> int:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return int((numerator / denominator).to_integral_value(rounding=ROUND_CEILING))


def calculate_rate_range(min_rate: Decimal, total_rate: Decimal) -> int:
    """Return ``ceil(total_rate / min_rate)``, the nominal slot count."""
    if min_rate <= 0:
        raise ValueError("min_rate must be positive")
    return _ceil_div(total_rate, min_rate)


def slots_for(rate: Decimal, rate_range: int, total_rate: Decimal) -> int:
    """Return ``ceil(rate * rate_range / total_rate)``."""
    return _ceil_div(rate * rate_range, total_rate)


def rescale_rates(candidates: Sequence[AwardCandidate]) -> list[AwardCandidate]:
    """Rescale the rates of a subset so they add up to (about) 100.

    Each rate becomes ``rate * 100 / sum(rates)`` rounded half-up to four
    decimal places. New candidates are returned; the input is untouched.

    Raises
    ------
    RateUnderflowError
        If a rate is so small against the subset total that it rounds to
        ``0.0000``.
    """
    total = total_award_rate(candidates)
    rescaled: list[AwardCandidate] = []
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        for candidate in candidates:
            rate = (candidate.award_rate * HUNDRED / total).quantize(
                RATE_QUANTUM, rounding=ROUND_HALF_UP
            )
            if not rate:
                raise RateUnderflowError(candidate.award_id, candidate.award_rate)
            rescaled.append(replace(candidate, award_rate=rate))
    return rescaled


def build_search_table(
    candidates: Sequence[AwardCandidate], rate_range: int, total_rate: Decimal
) -> list[int]:
    """Expand ``candidates`` into a list holding one award id per slot."""
    table: list[int] = []
    for candidate in candidates:
        count = slots_for(candidate.award_rate, rate_range, total_rate)
        table.extend([candidate.award_id] * count)
        logger.debug(
            f"Award {candidate.award_id} rate {candidate.award_rate}% occupies {count} slots"
        )
    return table


def shuffle_table(table: list[int], rng: Optional[random.Random] = None) -> None:
    """Shuffle ``table`` in place, by default with a CSPRNG."""
    (rng or secrets.SystemRandom()).shuffle(table)


def index_table(table: Sequence[int]) -> dict[int, int]:
    """Map the 1-based position of every entry to its award id."""
    return {position + 1: award_id for position, award_id in enumerate(table)}


def assemble_table(
    candidates: Sequence[AwardCandidate],
    rng: Optional[random.Random] = None,
    *,
    strategy_id: Optional[int] = None,
) -> ProbabilityTable:
    """Build a shuffled lookup table for ``candidates``.

    Parameters
    ----------
    candidates : Sequence[AwardCandidate]
        Awards and their rates. Rates need not add up to 100.
    rng : Optional[random.Random], default: None
        Source used for the shuffle; ``secrets.SystemRandom`` when omitted.
        Tests pass a seeded :class:`random.Random`.
    strategy_id : Optional[int], default: None
        Only used in the error raised for an empty list.

    Returns
    -------
    ProbabilityTable
        ``rate_range`` is ``ceil(total / min)``. Ceiling rounding per award
        can make ``slot_count`` exceed it slightly; that upward bias is
        accepted.

    Raises
    ------
    EmptyConfigurationError
        If ``candidates`` is empty.
    """
    if not candidates:
        raise EmptyConfigurationError(strategy_id)

    min_rate = min_award_rate(candidates)
    total_rate = total_award_rate(candidates)
    rate_range = calculate_rate_range(min_rate, total_rate)
    logger.debug(f"min rate {min_rate}, total rate {total_rate}, rate range {rate_range}")

    table = build_search_table(candidates, rate_range, total_rate)
    shuffle_table(table, rng)
    return ProbabilityTable(rate_range=rate_range, slots=index_table(table))


__all__ = [
    "assemble_table",
    "build_search_table",
    "calculate_rate_range",
    "index_table",
    "min_award_rate",
    "rescale_rates",
    "shuffle_table",
    "slots_for",
    "total_award_rate",
]
