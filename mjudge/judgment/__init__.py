"""Majority Judgment analysis, tie-breaking and ranking.

Provides the truncation analyzer, the pluggable tie-break strategies,
the competition ranker, and the registry that resolves configured keys.
"""

from mjudge.judgment.analyzer import (
    analyze,
    majority_grade,
    opponents_percentage,
    proportions,
    supporters_percentage,
    truncation_chain,
)
from mjudge.judgment.ranker import RankingEngine, rank
from mjudge.judgment.registry import (
    STRATEGIES,
    available_strategies,
    build_engine,
    get_scale,
    get_strategy,
    load_engine_config,
    load_scales,
)
from mjudge.judgment.strategies import (
    BallotRemovalStrategy,
    CentralStrategy,
    LexicographicStrategy,
    MajorityGaugeStrategy,
    MedianRemovalStrategy,
    ProportionScoreStrategy,
    TieBreakStrategy,
    TypicalStrategy,
    UsualStrategy,
)

__all__ = [
    "STRATEGIES",
    "BallotRemovalStrategy",
    "CentralStrategy",
    "LexicographicStrategy",
    "MajorityGaugeStrategy",
    "MedianRemovalStrategy",
    "ProportionScoreStrategy",
    "RankingEngine",
    "TieBreakStrategy",
    "TypicalStrategy",
    "UsualStrategy",
    "analyze",
    "available_strategies",
    "build_engine",
    "get_scale",
    "get_strategy",
    "load_engine_config",
    "load_scales",
    "majority_grade",
    "opponents_percentage",
    "proportions",
    "rank",
    "supporters_percentage",
    "truncation_chain",
]
