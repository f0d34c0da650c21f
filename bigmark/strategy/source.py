"""Award configuration sources consumed by the table assembler."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

from sqlalchemy import select

from .entities import RULE_WEIGHT, AwardCandidate, WeightRule
from .keys import AWARD_LIST_TTL, award_list_key, rule_key

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from ..cache.base import CacheStore

logger = logging.getLogger(__name__)


class AwardSource:
    """Read-only access to the award configuration of strategies."""

    def list_awards(self, strategy_id: int) -> list[AwardCandidate]:
        """Return the awards configured for ``strategy_id`` (possibly empty)."""
        raise NotImplementedError

    def get_weight_rule(self, strategy_id: int) -> Optional[WeightRule]:
        """Return the ``rule_weight`` rule of ``strategy_id`` if configured."""
        raise NotImplementedError


class StaticAwardSource(AwardSource):
    """Source serving configuration held in memory."""

    def __init__(
        self,
        awards: Optional[Mapping[int, Iterable[AwardCandidate]]] = None,
        rules: Optional[Mapping[int, WeightRule]] = None,
    ) -> None:
        self._awards = {sid: list(items) for sid, items in (awards or {}).items()}
        self._rules = dict(rules or {})

    def list_awards(self, strategy_id: int) -> list[AwardCandidate]:
        return list(self._awards.get(strategy_id, []))

    def get_weight_rule(self, strategy_id: int) -> Optional[WeightRule]:
        return self._rules.get(strategy_id)


class SessionAwardSource(AwardSource):
    """Source reading the ``strategy_awards`` and ``strategy_rules`` tables.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session used for the lookups.
    """

    def __init__(self, session: "Session") -> None:
        self._session = session

    def list_awards(self, strategy_id: int) -> list[AwardCandidate]:
        from ..models import StrategyAward

        rows = self._session.scalars(
            select(StrategyAward)
            .where(StrategyAward.strategy_id == strategy_id)
            .order_by(StrategyAward.sort, StrategyAward.award_id)
        ).all()
        return [row.to_candidate() for row in rows]

    def get_weight_rule(self, strategy_id: int) -> Optional[WeightRule]:
        from ..models import StrategyRule

        row = StrategyRule.get_for_strategy(self._session, strategy_id, RULE_WEIGHT)
        return None if row is None else row.to_weight_rule()


class CachingAwardSource(AwardSource):
    """Read-through cache in front of another :class:`AwardSource`.

    The award list is stored as JSON under ``strategy#<id>#awardlist`` and
    expires after ``ttl`` seconds. The weight rule is stored under
    ``strategy#<id>#rule#rule_weight`` without expiry. Empty award lists and
    missing rules are not cached.
    """

    def __init__(
        self,
        inner: AwardSource,
        cache: "CacheStore",
        *,
        ttl: int = AWARD_LIST_TTL,
    ) -> None:
        self._inner = inner
        self._cache = cache
        self._ttl = ttl

    def _load_json(self, key: str):
        payload = self._cache.get_value(key)
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except ValueError:
            logger.warning(f"Ignoring corrupt cache payload under {key}")
            return None

    def list_awards(self, strategy_id: int) -> list[AwardCandidate]:
        key = award_list_key(strategy_id)
        cached = self._load_json(key)
        if cached is not None:
            try:
                awards = [AwardCandidate.from_dict(item) for item in cached]
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(f"Ignoring unreadable award list under {key}: {exc}")
            else:
                logger.info(f"Award list of strategy {strategy_id} served from cache")
                return awards

        awards = self._inner.list_awards(strategy_id)
        if awards:
            self._cache.set_value(
                key, json.dumps([award.to_dict() for award in awards]), ttl=self._ttl
            )
            logger.info(f"Cached {len(awards)} awards of strategy {strategy_id}")
        return awards

    def get_weight_rule(self, strategy_id: int) -> Optional[WeightRule]:
        key = rule_key(strategy_id, RULE_WEIGHT)
        cached = self._load_json(key)
        if cached is not None:
            try:
                return WeightRule.from_dict(cached)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(f"Ignoring unreadable weight rule under {key}: {exc}")

        rule = self._inner.get_weight_rule(strategy_id)
        if rule is not None:
            self._cache.set_value(key, json.dumps(rule.to_dict()))
        return rule

    def invalidate(self, strategy_id: int) -> None:
        """Drop the cached configuration of ``strategy_id``."""
        self._cache.delete(award_list_key(strategy_id))
        self._cache.delete(rule_key(strategy_id, RULE_WEIGHT))


__all__ = [
    "AwardSource",
    "CachingAwardSource",
    "SessionAwardSource",
    "StaticAwardSource",
]
