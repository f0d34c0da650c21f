"""Probability table assembly and award dispatch for lottery strategies."""

from .armory import StrategyArmory
from .dispatch import StrategyDispatch
from .entities import (
    RULE_WEIGHT,
    AwardCandidate,
    ProbabilityTable,
    WeightGroup,
    WeightRule,
)
from .errors import (
    CacheUnavailableError,
    EmptyConfigurationError,
    MalformedWeightRuleError,
    RateUnderflowError,
    StrategyError,
)
from .rates import assemble_table, rescale_rates
from .source import (
    AwardSource,
    CachingAwardSource,
    SessionAwardSource,
    StaticAwardSource,
)

__all__ = [
    "AwardCandidate",
    "AwardSource",
    "CacheUnavailableError",
    "CachingAwardSource",
    "EmptyConfigurationError",
    "MalformedWeightRuleError",
    "ProbabilityTable",
    "RULE_WEIGHT",
    "RateUnderflowError",
    "SessionAwardSource",
    "StaticAwardSource",
    "StrategyArmory",
    "StrategyDispatch",
    "StrategyError",
    "WeightGroup",
    "WeightRule",
    "assemble_table",
    "rescale_rates",
]
