from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Union

from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import Strategy, StrategyAward, StrategyRule
from .strategy.armory import StrategyArmory
from .strategy.dispatch import StrategyDispatch
from .strategy.entities import RULE_WEIGHT, AwardCandidate
from .strategy.source import AwardSource, CachingAwardSource, SessionAwardSource

if TYPE_CHECKING:
    from .cache.base import CacheStore

logger = logging.getLogger(__name__)


def configure_strategy(
    session: Session,
    strategy_id: int,
    awards: Iterable[Union[AwardCandidate, tuple[int, Union[Decimal, str, float]]]],
    *,
    rule_value: Optional[str] = None,
    activity_id: Optional[int] = None,
    strategy_desc: Optional[str] = None,
) -> Strategy:
    """Create or replace the award configuration of a strategy.

    Existing award rows and the ``rule_weight`` rule of the strategy are
    replaced wholesale; other rules are kept.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    strategy_id : int
        Business id of the strategy.
    awards : Iterable[AwardCandidate | tuple[int, rate]]
        Awards and their rates in percent. Plain ``(award_id, rate)`` tuples
        are accepted for convenience.
    rule_value : Optional[str]
        Weight rule such as ``"4000:102,103 6000:102,103,104"``. When omitted
        the strategy ends up without a weight rule.
    activity_id : Optional[int]
        Activity the strategy is bound to.
    strategy_desc : Optional[str]
        Free form description.

    Returns
    -------
    Strategy
        The persisted strategy row.
    """
    candidates = [
        item if isinstance(item, AwardCandidate) else AwardCandidate(*item)
        for item in awards
    ]

    strategy = Strategy.get_by_strategy_id(session, strategy_id)
    if strategy is None:
        strategy = Strategy(strategy_id=strategy_id)
        session.add(strategy)
    if activity_id is not None:
        strategy.activity_id = activity_id
    if strategy_desc is not None:
        strategy.strategy_desc = strategy_desc
    strategy.rule_models = RULE_WEIGHT if rule_value else None
    session.flush()

    session.execute(delete(StrategyAward).where(StrategyAward.strategy_id == strategy_id))
    session.execute(
        delete(StrategyRule).where(
            StrategyRule.strategy_id == strategy_id,
            StrategyRule.rule_model == RULE_WEIGHT,
        )
    )

    for index, candidate in enumerate(candidates):
        session.add(
            StrategyAward(
                strategy_id=strategy_id,
                award_id=candidate.award_id,
                award_title=candidate.award_title or f"award {candidate.award_id}",
                award_subtitle=candidate.award_subtitle,
                award_count=candidate.award_count or 0,
                award_count_surplus=candidate.award_count_surplus or 0,
                award_rate=candidate.award_rate,
                rule_models=candidate.weight_tags or None,
                sort=candidate.sort if candidate.sort is not None else index + 1,
            )
        )
    if rule_value:
        session.add(
            StrategyRule(
                strategy_id=strategy_id,
                rule_type=1,
                rule_model=RULE_WEIGHT,
                rule_value=rule_value,
                rule_desc="weight tiers",
            )
        )
    session.flush()
    session.expire(strategy, ["awards", "rules"])
    return strategy


def _award_source(
    session: Session, cache: "CacheStore", use_cache: bool
) -> AwardSource:
    source: AwardSource = SessionAwardSource(session)
    if use_cache:
        source = CachingAwardSource(source, cache)
    return source


def assemble_lottery_strategy(
    session: Session,
    strategy_id: int,
    cache: "CacheStore",
    *,
    use_cache: bool = True,
) -> bool:
    """Assemble the probability tables of ``strategy_id`` into ``cache``.

    Parameters
    ----------
    session : Session
        Session used to read the award configuration.
    strategy_id : int
        Strategy to assemble.
    cache : CacheStore
        Store receiving the tables. With ``use_cache`` it also caches the
        award list and weight rule read from the database.
    use_cache : bool, default: True
        Set to ``False`` to bypass the configuration cache, e.g. right after
        the configuration changed.

    Returns
    -------
    bool
        ``False`` when the strategy has no awards configured.
    """
    armory = StrategyArmory(_award_source(session, cache, use_cache), cache)
    return armory.assemble(strategy_id)


def assemble_lottery_strategy_by_activity_id(
    session: Session,
    activity_id: int,
    cache: "CacheStore",
    *,
    use_cache: bool = True,
) -> bool:
    """Assemble the strategy bound to ``activity_id``.

    Returns ``False`` when no strategy is bound to the activity.
    """
    strategy = Strategy.get_by_activity_id(session, activity_id)
    if strategy is None:
        logger.warning(f"No strategy bound to activity {activity_id}")
        return False
    logger.info(f"Activity {activity_id} uses strategy {strategy.strategy_id}")
    return assemble_lottery_strategy(
        session, strategy.strategy_id, cache, use_cache=use_cache
    )


def draw_award(
    cache: "CacheStore",
    strategy_id: int,
    weight_key: Optional[str] = None,
) -> Optional[int]:
    """Draw one award id from the assembled tables of ``strategy_id``.

    Returns ``None`` when the strategy has not been assembled. An unknown
    ``weight_key`` falls back to the baseline table.
    """
    return StrategyDispatch(cache).draw(strategy_id, weight_key)
