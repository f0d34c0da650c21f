"""Value objects shared by the assembler, the dispatcher and the award source."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .errors import MalformedWeightRuleError

logger = logging.getLogger(__name__)

RULE_WEIGHT = "rule_weight"


def _to_decimal(value: Any) -> Decimal:
    """Coerce ``value`` to :class:`Decimal` without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("award_rate must be a number, not a bool")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"award_rate {value!r} is not a number") from exc


@dataclass(frozen=True)
class AwardCandidate:
    """An award together with its configured probability for one strategy.

    Attributes
    ----------
    award_id : int
        Business identifier of the award.
    award_rate : Decimal
        Probability in percent, e.g. ``Decimal("0.6")`` means 0.6%.
        Must be strictly positive.
    weight_tags : str
        Free-form rule models attached to the award. Not interpreted by the
        table assembler.
    """

    award_id: int
    award_rate: Decimal
    weight_tags: str = ""
    award_title: Optional[str] = None
    award_subtitle: Optional[str] = None
    award_count: Optional[int] = None
    award_count_surplus: Optional[int] = None
    sort: Optional[int] = None

    def __post_init__(self) -> None:
        rate = _to_decimal(self.award_rate)
        if not rate.is_finite() or rate <= 0:
            raise ValueError(
                f"award_rate must be positive, got {self.award_rate!r} "
                f"for award {self.award_id}"
            )
        object.__setattr__(self, "award_rate", rate)
        object.__setattr__(self, "weight_tags", self.weight_tags or "")

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation (rate as a string)."""
        return {
            "award_id": self.award_id,
            "award_rate": str(self.award_rate),
            "weight_tags": self.weight_tags,
            "award_title": self.award_title,
            "award_subtitle": self.award_subtitle,
            "award_count": self.award_count,
            "award_count_surplus": self.award_count_surplus,
            "sort": self.sort,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AwardCandidate":
        return cls(
            award_id=int(data["award_id"]),
            award_rate=Decimal(data["award_rate"]),
            weight_tags=data.get("weight_tags") or "",
            award_title=data.get("award_title"),
            award_subtitle=data.get("award_subtitle"),
            award_count=data.get("award_count"),
            award_count_surplus=data.get("award_count_surplus"),
            sort=data.get("sort"),
        )


@dataclass(frozen=True)
class WeightGroup:
    """One weight tier: a weight key and the awards eligible within it."""

    weight_key: str
    award_ids: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.award_ids:
            raise ValueError(f"Weight group {self.weight_key!r} has no award ids")


def _parse_segment(segment: str) -> WeightGroup:
    if segment.count(":") != 1:
        raise MalformedWeightRuleError(segment, "expected exactly one ':'")
    key, _, id_list = segment.partition(":")
    key = key.strip()
    if not key:
        raise MalformedWeightRuleError(segment, "empty weight key")
    raw_ids = [part.strip() for part in id_list.split(",") if part.strip()]
    if not raw_ids:
        raise MalformedWeightRuleError(segment, "no award ids")
    try:
        award_ids = tuple(int(part) for part in raw_ids)
    except ValueError as exc:
        raise MalformedWeightRuleError(segment, "award ids must be integers") from exc
    return WeightGroup(weight_key=key, award_ids=award_ids)


@dataclass(frozen=True)
class WeightRule:
    """Weight rule of a strategy.

    ``rule_value`` holds space separated groups such as
    ``"4000:102,103 6000:102,103,104"``: draws made for weight key
    ``"4000"`` only ever yield award 102 or 103.
    """

    strategy_id: int
    rule_value: str
    rule_model: str = RULE_WEIGHT
    award_id: Optional[int] = None
    rule_type: Optional[int] = None
    rule_desc: Optional[str] = None

    def weight_groups(self) -> list[WeightGroup]:
        """Parse ``rule_value`` into weight groups.

        Malformed segments are logged and skipped; the remaining groups are
        still returned. When a weight key repeats, the later segment wins.
        """
        groups: dict[str, WeightGroup] = {}
        for segment in (self.rule_value or "").split():
            try:
                group = _parse_segment(segment)
            except MalformedWeightRuleError as exc:
                logger.warning(f"Skipping weight group of strategy {self.strategy_id}: {exc}")
                continue
            groups[group.weight_key] = group
        return list(groups.values())

    def award_ids(self, weight_key: str) -> Optional[tuple[int, ...]]:
        """Return the award ids eligible for ``weight_key``, or ``None``."""
        for group in self.weight_groups():
            if group.weight_key == weight_key:
                return group.award_ids
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy_id": self.strategy_id,
            "rule_value": self.rule_value,
            "rule_model": self.rule_model,
            "award_id": self.award_id,
            "rule_type": self.rule_type,
            "rule_desc": self.rule_desc,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeightRule":
        return cls(
            strategy_id=int(data["strategy_id"]),
            rule_value=data["rule_value"],
            rule_model=data.get("rule_model") or RULE_WEIGHT,
            award_id=data.get("award_id"),
            rule_type=data.get("rule_type"),
            rule_desc=data.get("rule_desc"),
        )


@dataclass(frozen=True)
class ProbabilityTable:
    """An assembled lookup table.

    Attributes
    ----------
    rate_range : int
        ``ceil(total_rate / min_rate)``, the nominal slot count.
    slots : dict[int, int]
        Mapping of slot ``1..slot_count`` to award id. Ceiling rounding can
        make the table slightly larger than ``rate_range``.
    """

    rate_range: int
    slots: dict[int, int] = field(default_factory=dict)

    @property
    def slot_count(self) -> int:
        """Number of slots actually written; persisted as the rate range."""
        return len(self.slots)

    def award_counts(self) -> dict[int, int]:
        """Return how many slots each award occupies."""
        return dict(Counter(self.slots.values()))


__all__ = [
    "AwardCandidate",
    "ProbabilityTable",
    "RULE_WEIGHT",
    "WeightGroup",
    "WeightRule",
]
