"""Majority Judgment engine schema definitions.

All Pydantic v2 models exchanged by the analyzer, strategies and ranker.
"""

from mjudge.schemas.analysis import (
    JudgmentScores,
    MJAnalysis,
    MJIteration,
    Proportions,
)
from mjudge.schemas.comparison import (
    Comparison,
    ComparisonStep,
    StepResult,
    Winner,
)
from mjudge.schemas.engine import (
    DEFAULT_TOLERANCE,
    EngineConfig,
    GroupResolution,
    TieBreakKey,
)
from mjudge.schemas.grades import Aggregate, GradeScale
from mjudge.schemas.ranking import RankedOption

__all__ = [
    "DEFAULT_TOLERANCE",
    "Aggregate",
    "Comparison",
    "ComparisonStep",
    "EngineConfig",
    "GradeScale",
    "GroupResolution",
    "JudgmentScores",
    "MJAnalysis",
    "MJIteration",
    "Proportions",
    "RankedOption",
    "StepResult",
    "TieBreakKey",
    "Winner",
]
